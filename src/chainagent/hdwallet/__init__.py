"""HD wallet module for deterministic signing accounts."""

from chainagent.hdwallet.base import Identity
from chainagent.hdwallet.keyring import Keyring

__all__ = [
    "Identity",
    "Keyring",
]

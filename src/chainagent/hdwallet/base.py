"""Signing identity derived from an HD wallet.

An identity pairs a derived address with the local account able to sign for
it. Identities are created once at startup and never mutated.
"""

from dataclasses import dataclass, field
from typing import Any

from eth_account.datastructures import SignedTransaction
from eth_account.signers.local import LocalAccount

# BIP44 path template for EVM accounts: m/44'/60'/0'/0/index
ETH_DERIVATION_PATH = "m/44'/60'/0'/0/{index}"


@dataclass(frozen=True)
class Identity:
    """A derived address plus its signing capability."""

    address: str
    index: int
    derivation_path: str
    account: LocalAccount = field(repr=False, compare=False)

    def sign(self, tx: dict[str, Any]) -> SignedTransaction:
        """Sign a transaction dict with this identity's key."""
        return self.account.sign_transaction(tx)

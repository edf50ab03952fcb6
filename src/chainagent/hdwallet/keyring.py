"""Keyring of EVM accounts derived from a BIP-39 mnemonic.

Derivation path: m/44'/60'/0'/0/index for index in [0, count).
The identity at index 0 is the default signer, used whenever a request
names a sender the keyring does not hold.
"""

import logging
from typing import Iterator, Optional

from bip_utils import (
    Bip39MnemonicValidator,
    Bip39SeedGenerator,
    Bip44,
    Bip44Changes,
    Bip44Coins,
)
from eth_account import Account

from chainagent.errors import DerivationError, NoSignerError
from chainagent.hdwallet.base import ETH_DERIVATION_PATH, Identity

logger = logging.getLogger(__name__)


class Keyring:
    """Set of identities derived from a single mnemonic.

    Usage:
        keyring = Keyring.derive(mnemonic, 10)
        signer = keyring.resolve("0xf39F...")
    """

    def __init__(self, identities: list[Identity], mnemonic: str = ""):
        self._mnemonic = mnemonic
        # Keyed by lowercase hex so lookups ignore checksum casing
        self._identities: dict[str, Identity] = {}
        for identity in sorted(identities, key=lambda i: i.index):
            self._identities[identity.address.lower()] = identity

    @classmethod
    def derive(cls, mnemonic: str, count: int) -> "Keyring":
        """Derive `count` identities from `mnemonic`.

        Raises:
            DerivationError: If the mnemonic is invalid or derivation fails
        """
        if count < 0:
            raise DerivationError(f"Account count must be non-negative, got {count}")

        phrase = " ".join(mnemonic.split())
        if not Bip39MnemonicValidator().IsValid(phrase):
            raise DerivationError("Invalid BIP-39 mnemonic")

        try:
            seed = Bip39SeedGenerator(phrase).Generate()
            chain = (
                Bip44.FromSeed(seed, Bip44Coins.ETHEREUM)
                .Purpose()
                .Coin()
                .Account(0)
                .Change(Bip44Changes.CHAIN_EXT)
            )

            identities = []
            for index in range(count):
                private_key = chain.AddressIndex(index).PrivateKey().Raw().ToBytes()
                account = Account.from_key(private_key)
                identities.append(
                    Identity(
                        address=account.address,
                        index=index,
                        derivation_path=ETH_DERIVATION_PATH.format(index=index),
                        account=account,
                    )
                )
        except Exception as e:
            raise DerivationError(f"Failed to derive accounts from mnemonic: {e}") from e

        logger.info(f"Derived {count} accounts from mnemonic")
        return cls(identities, mnemonic=phrase)

    @classmethod
    def empty(cls) -> "Keyring":
        """Keyring holding no identities."""
        return cls([])

    def lookup(self, address: Optional[str]) -> Optional[Identity]:
        """Get identity by address (case-insensitive)."""
        if not address:
            return None
        return self._identities.get(address.strip().lower())

    def default_identity(self) -> Optional[Identity]:
        """Get the lowest-index identity, or None if the keyring is empty."""
        return next(iter(self._identities.values()), None)

    def resolve(self, address: Optional[str]) -> Identity:
        """Get the signer for `address`, falling back to the default identity.

        Raises:
            NoSignerError: If neither is available
        """
        identity = self.lookup(address)
        if identity is not None:
            return identity

        identity = self.default_identity()
        if identity is None:
            raise NoSignerError(address)

        logger.info(f"No account for {address}, signing with default {identity.address}")
        return identity

    def addresses(self) -> list[str]:
        """All derived addresses in derivation order."""
        return [identity.address for identity in self._identities.values()]

    def __len__(self) -> int:
        return len(self._identities)

    def __contains__(self, address: str) -> bool:
        return self.lookup(address) is not None

    def __iter__(self) -> Iterator[Identity]:
        return iter(self._identities.values())

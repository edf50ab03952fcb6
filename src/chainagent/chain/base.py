"""Node interface consumed by the transfer and swap executors.

Flow of a submitted transaction:
1. Read balance / gas price / nonce
2. Estimate gas for the unsigned transaction
3. Submit the signed raw transaction, receiving its hash
4. Wait for the receipt (None if it never arrives)

Nonce sequencing for an account is the node's responsibility (pending count).
Implementations must be safe to call concurrently.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Receipt:
    """Confirmation record of an included transaction."""

    tx_hash: str
    gas_used: int
    status: int = 1  # 1 = success, 0 = reverted
    block_number: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class ChainClient(ABC):
    """Abstract handle on a remote EVM node."""

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        pass

    @abstractmethod
    async def get_code(self, address: str) -> bytes:
        """Deployed bytecode at address (empty for externally owned accounts)."""
        pass

    @abstractmethod
    async def get_gas_price(self) -> int:
        """Current gas price in wei."""
        pass

    @abstractmethod
    async def get_transaction_count(self, address: str) -> int:
        """Next nonce for address, counting pending transactions."""
        pass

    @abstractmethod
    async def get_chain_id(self) -> int:
        """EVM chain id used for replay protection."""
        pass

    @abstractmethod
    async def call(self, to: str, data: bytes) -> bytes:
        """Execute a read-only contract call."""
        pass

    @abstractmethod
    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        """Estimate gas units for a transaction.

        Raises:
            SubmissionError: If the node predicts a revert
        """
        pass

    @abstractmethod
    async def submit(self, raw_tx: bytes) -> str:
        """Broadcast a signed raw transaction.

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            SubmissionError: If the node rejects the transaction
        """
        pass

    @abstractmethod
    async def await_receipt(self, tx_hash: str) -> Optional[Receipt]:
        """Wait for the receipt of a submitted transaction.

        Returns:
            Receipt, or None if the transaction was dropped or not mined in time
        """
        pass

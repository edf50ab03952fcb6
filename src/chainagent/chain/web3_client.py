"""ChainClient backed by web3.py's async HTTP provider."""

import logging
from typing import Any, Awaitable, Optional, TypeVar

from web3 import AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, Web3Exception

from chainagent.chain.base import ChainClient, Receipt
from chainagent.errors import ChainError, SubmissionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors the provider raises for RPC failures and unreachable nodes
NODE_ERRORS = (Web3Exception, ValueError, OSError)


class Web3ChainClient(ChainClient):
    """Remote EVM node reached over JSON-RPC."""

    def __init__(
        self,
        rpc_url: str,
        receipt_timeout: int = 300,
        poll_interval: float = 1.0,
        web3: Optional[AsyncWeb3] = None,
    ):
        """Initialize client.

        Args:
            rpc_url: Node HTTP endpoint
            receipt_timeout: Max seconds to wait for a receipt
            poll_interval: Seconds between receipt polls
            web3: Pre-built AsyncWeb3 instance (tests)
        """
        self.rpc_url = rpc_url
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self._web3 = web3
        self._chain_id: Optional[int] = None

    @property
    def web3(self) -> AsyncWeb3:
        """Lazy load web3 instance."""
        if self._web3 is None:
            self._web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self.rpc_url))
        return self._web3

    async def _query(self, what: str, pending: Awaitable[T]) -> T:
        try:
            return await pending
        except NODE_ERRORS as e:
            logger.error(f"Node query failed ({what}): {e}")
            raise ChainError(f"failed to get {what}: {e}") from e

    async def get_balance(self, address: str) -> int:
        return await self._query(
            "balance", self.web3.eth.get_balance(Web3.to_checksum_address(address))
        )

    async def get_code(self, address: str) -> bytes:
        code = await self._query(
            "contract code", self.web3.eth.get_code(Web3.to_checksum_address(address))
        )
        return bytes(code)

    async def get_gas_price(self) -> int:
        return await self._query("gas price", self.web3.eth.gas_price)

    async def get_transaction_count(self, address: str) -> int:
        return await self._query(
            "nonce",
            self.web3.eth.get_transaction_count(Web3.to_checksum_address(address), "pending"),
        )

    async def get_chain_id(self) -> int:
        # Chain id never changes for a given endpoint
        if self._chain_id is None:
            self._chain_id = await self._query("chain id", self.web3.eth.chain_id)
        return self._chain_id

    async def call(self, to: str, data: bytes) -> bytes:
        result = await self._query(
            "call result",
            self.web3.eth.call({"to": Web3.to_checksum_address(to), "data": Web3.to_hex(data)}),
        )
        return bytes(result)

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        try:
            return await self.web3.eth.estimate_gas(tx)
        except NODE_ERRORS as e:
            logger.error(f"Gas estimation failed: {e}")
            raise SubmissionError(f"gas estimation failed: {e}") from e

    async def submit(self, raw_tx: bytes) -> str:
        try:
            tx_hash = await self.web3.eth.send_raw_transaction(raw_tx)
        except NODE_ERRORS as e:
            logger.error(f"Broadcast error: {e}")
            raise SubmissionError(f"node rejected transaction: {e}") from e
        return Web3.to_hex(tx_hash)

    async def await_receipt(self, tx_hash: str) -> Optional[Receipt]:
        try:
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.receipt_timeout,
                poll_latency=self.poll_interval,
            )
        except TimeExhausted:
            logger.warning(f"Transaction {tx_hash} not mined after {self.receipt_timeout}s")
            return None
        except NODE_ERRORS as e:
            raise ChainError(f"failed to get receipt for {tx_hash}: {e}") from e

        return Receipt(
            tx_hash=Web3.to_hex(receipt["transactionHash"]),
            gas_used=receipt["gasUsed"],
            status=receipt.get("status", 1),
            block_number=receipt.get("blockNumber"),
        )

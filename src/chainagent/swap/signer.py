"""Sign, submit and confirm EVM transactions for keyring identities.

Fills in the fields the caller left out (sender, nonce, chain id, gas
price, gas limit), signs with the identity's local key, broadcasts through
the ChainClient and waits for one confirmation.
"""

import logging
from dataclasses import dataclass
from typing import Any

from eth_account.datastructures import SignedTransaction

from chainagent.chain.base import ChainClient, Receipt
from chainagent.errors import ReceiptMissingError, TransactionRevertedError
from chainagent.hdwallet.base import Identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionOutcome:
    """Result of a confirmed transaction."""

    tx_hash: str
    gas_used: int

    def summary(self) -> str:
        return f"Transaction successful! Hash: {self.tx_hash}, Gas used: {self.gas_used}"


class TransactionSigner:
    """Signs and sends transactions through a ChainClient."""

    def __init__(self, chain: ChainClient):
        self.chain = chain

    async def prepare(self, identity: Identity, tx_params: dict[str, Any]) -> dict[str, Any]:
        """Complete a transaction dict for signing.

        Args:
            identity: Signing identity
            tx_params: Partial transaction (to, value, data, ...)

        Returns:
            New dict with from, nonce, chainId, gasPrice and gas set
        """
        tx = dict(tx_params)
        tx.setdefault("from", identity.address)
        tx.setdefault("value", 0)

        if "nonce" not in tx:
            tx["nonce"] = await self.chain.get_transaction_count(identity.address)

        if "chainId" not in tx:
            tx["chainId"] = await self.chain.get_chain_id()

        if "gasPrice" not in tx and "maxFeePerGas" not in tx:
            tx["gasPrice"] = await self.chain.get_gas_price()

        # Estimation surfaces contract reverts before anything is broadcast
        if "gas" not in tx:
            tx["gas"] = await self.chain.estimate_gas(tx)

        return tx

    def sign(self, identity: Identity, tx: dict[str, Any]) -> SignedTransaction:
        # eth_account rejects the 'from' key when signing
        unsigned = {k: v for k, v in tx.items() if k != "from"}
        return identity.sign(unsigned)

    async def confirm(self, tx_hash: str) -> Receipt:
        """Wait for a receipt and verify the transaction succeeded.

        Raises:
            ReceiptMissingError: If no receipt arrives
            TransactionRevertedError: If the transaction was mined but reverted
        """
        receipt = await self.chain.await_receipt(tx_hash)
        if receipt is None:
            raise ReceiptMissingError(tx_hash)

        if not receipt.succeeded:
            raise TransactionRevertedError(receipt.tx_hash, receipt.gas_used)

        logger.info(
            f"Transaction {receipt.tx_hash} confirmed in block {receipt.block_number} "
            f"(gas used: {receipt.gas_used})"
        )
        return receipt

    async def sign_and_send(self, identity: Identity, tx_params: dict[str, Any]) -> str:
        """Prepare, sign and broadcast; returns the transaction hash."""
        tx = await self.prepare(identity, tx_params)
        signed = self.sign(identity, tx)
        tx_hash = await self.chain.submit(signed.raw_transaction)
        logger.info(f"Submitted transaction {tx_hash} from {identity.address}")
        return tx_hash

    async def execute(self, identity: Identity, tx_params: dict[str, Any]) -> TransactionOutcome:
        """Sign, send and confirm a transaction."""
        tx_hash = await self.sign_and_send(identity, tx_params)
        receipt = await self.confirm(tx_hash)
        return TransactionOutcome(tx_hash=receipt.tx_hash, gas_used=receipt.gas_used)

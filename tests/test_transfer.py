"""Tests for native currency transfers."""

import pytest
from eth_account import Account

from chainagent.errors import (
    InsufficientFundsError,
    NoSignerError,
    ReceiptMissingError,
    SubmissionError,
    TransactionRevertedError,
)
from chainagent.hdwallet.keyring import Keyring
from chainagent.swap.transfer import TransferExecutor

from conftest import ANVIL_ADDRESS_0, ANVIL_ADDRESS_1, ETHER, RECEIVER


class TestTransfer:
    """Tests for TransferExecutor.transfer."""

    @pytest.mark.asyncio
    async def test_transfer_success(self, chain, anvil_keyring):
        """A funded sender's transfer is signed, sent and confirmed."""
        chain.set_balance(ANVIL_ADDRESS_1, ETHER)
        executor = TransferExecutor(chain, anvil_keyring)

        outcome = await executor.transfer(ANVIL_ADDRESS_1, RECEIVER, ETHER // 10)

        assert len(chain.submitted) == 1
        assert Account.recover_transaction(chain.submitted[0]) == ANVIL_ADDRESS_1
        assert outcome.tx_hash == f"0x{1:064x}"
        assert outcome.gas_used == 21_000
        assert outcome.summary() == (
            f"Transaction successful! Hash: {outcome.tx_hash}, Gas used: 21000"
        )

    @pytest.mark.asyncio
    async def test_unknown_sender_uses_default(self, chain, anvil_keyring):
        """Senders the keyring does not hold fall back to the default identity."""
        chain.set_balance(ANVIL_ADDRESS_0, ETHER)
        executor = TransferExecutor(chain, anvil_keyring)

        await executor.transfer(RECEIVER, RECEIVER, 1)

        assert Account.recover_transaction(chain.submitted[0]) == ANVIL_ADDRESS_0

    @pytest.mark.asyncio
    async def test_no_signer(self, chain):
        """Empty keyring fails before any chain call is made."""
        executor = TransferExecutor(chain, Keyring.empty())

        with pytest.raises(NoSignerError):
            await executor.transfer(RECEIVER, RECEIVER, 1)

        assert chain.submitted == []
        assert chain.gas_price_calls == 0

    @pytest.mark.asyncio
    async def test_insufficient_funds(self, chain, anvil_keyring):
        """Amount plus 21000 gas must be covered; nothing is sent otherwise."""
        chain.gas_price = 1
        chain.set_balance(ANVIL_ADDRESS_0, 100_000)
        executor = TransferExecutor(chain, anvil_keyring)

        with pytest.raises(InsufficientFundsError) as exc_info:
            await executor.transfer(ANVIL_ADDRESS_0, RECEIVER, 100_000)

        assert exc_info.value.shortfall == 21_000
        assert chain.submitted == []

    @pytest.mark.asyncio
    async def test_exact_balance_passes(self, chain, anvil_keyring):
        """balance == amount + gas cost is enough."""
        chain.gas_price = 1
        chain.set_balance(ANVIL_ADDRESS_0, 100_000 + 21_000)
        executor = TransferExecutor(chain, anvil_keyring)

        await executor.transfer(ANVIL_ADDRESS_0, RECEIVER, 100_000)

        assert len(chain.submitted) == 1

    @pytest.mark.asyncio
    async def test_missing_receipt(self, chain, anvil_keyring):
        """A dropped transaction is reported, not silently ignored."""
        chain.set_balance(ANVIL_ADDRESS_0, ETHER)
        chain.drop_receipts = True
        executor = TransferExecutor(chain, anvil_keyring)

        with pytest.raises(ReceiptMissingError) as exc_info:
            await executor.transfer(ANVIL_ADDRESS_0, RECEIVER, 1)

        assert exc_info.value.tx_hash == f"0x{1:064x}"
        assert "no receipt" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_reverted(self, chain, anvil_keyring):
        """Status 0 receipts raise a revert error."""
        chain.set_balance(ANVIL_ADDRESS_0, ETHER)
        chain.receipt_status = 0
        executor = TransferExecutor(chain, anvil_keyring)

        with pytest.raises(TransactionRevertedError):
            await executor.transfer(ANVIL_ADDRESS_0, RECEIVER, 1)

    @pytest.mark.asyncio
    async def test_node_rejects(self, rejecting_chain, anvil_keyring):
        """Broadcast rejections propagate as SubmissionError."""
        rejecting_chain.set_balance(ANVIL_ADDRESS_0, ETHER)
        executor = TransferExecutor(rejecting_chain, anvil_keyring)

        with pytest.raises(SubmissionError, match="nonce too low"):
            await executor.transfer(ANVIL_ADDRESS_0, RECEIVER, 1)

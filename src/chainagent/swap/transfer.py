"""Native currency transfers signed by keyring identities."""

import logging
from typing import Optional

from chainagent.chain.base import ChainClient
from chainagent.hdwallet.keyring import Keyring
from chainagent.swap.guard import TRANSFER_GAS, BalanceGuard
from chainagent.swap.signer import TransactionOutcome, TransactionSigner

logger = logging.getLogger(__name__)


class TransferExecutor:
    """Builds, signs, submits and confirms value transfers."""

    def __init__(
        self,
        chain: ChainClient,
        keyring: Keyring,
        guard: Optional[BalanceGuard] = None,
        signer: Optional[TransactionSigner] = None,
    ):
        self.chain = chain
        self.keyring = keyring
        self.guard = guard or BalanceGuard(chain)
        self.signer = signer or TransactionSigner(chain)

    async def transfer(self, sender: Optional[str], receiver: str, amount: int) -> TransactionOutcome:
        """Send `amount` wei from `sender` to `receiver`.

        Unknown or missing senders fall back to the default identity.

        Raises:
            NoSignerError: If no identity is available (nothing is submitted)
            InsufficientFundsError: If the sender cannot pay amount + gas
            SubmissionError: If the node rejects the transaction
            ReceiptMissingError: If the transaction is dropped
        """
        identity = self.keyring.resolve(sender)
        logger.info(f"Transferring {amount} wei from {identity.address} to {receiver}")

        balance = await self.chain.get_balance(identity.address)
        await self.guard.check(balance, amount, gas_units=TRANSFER_GAS)

        outcome = await self.signer.execute(
            identity,
            {
                "to": receiver,
                "value": amount,
                "gas": TRANSFER_GAS,
            },
        )

        logger.info(f"Transfer confirmed: {outcome.tx_hash}")
        return outcome

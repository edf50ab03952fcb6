"""Uniswap V2 router swaps between native currency and ERC20 tokens.

- Currency -> token: swapExactETHForTokens, amount sent as value
- Token -> currency: swapExactTokensForETH; the router must already hold an
  allowance for the caller's tokens. Without it the node reports the
  router's revert (e.g. TRANSFER_FROM_FAILED) and the swap fails.

Per-request states:
    PLANNED -> BALANCE_CHECKED -> SIGNED -> SUBMITTED -> CONFIRMED | FAILED

No state is retried; any failure aborts the request.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from chainagent.chain.abi import (
    encode_swap_exact_eth_for_tokens,
    encode_swap_exact_tokens_for_eth,
)
from chainagent.chain.base import ChainClient
from chainagent.chain.erc20 import erc20_balance
from chainagent.errors import PlanExpiredError
from chainagent.hdwallet.base import Identity
from chainagent.hdwallet.keyring import Keyring
from chainagent.swap.guard import BalanceGuard
from chainagent.swap.planner import SwapDirection, SwapPlan
from chainagent.swap.signer import TransactionOutcome, TransactionSigner

logger = logging.getLogger(__name__)


class SwapState(str, Enum):
    """Progress of a single swap request."""
    PLANNED = "planned"
    BALANCE_CHECKED = "balance_checked"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class SwapExecutor:
    """Executes router swaps signed by keyring identities."""

    def __init__(
        self,
        chain: ChainClient,
        keyring: Keyring,
        guard: Optional[BalanceGuard] = None,
        signer: Optional[TransactionSigner] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.chain = chain
        self.keyring = keyring
        self.guard = guard or BalanceGuard(chain)
        self.signer = signer or TransactionSigner(chain)
        self._clock = clock

    async def swap_currency_for_token(
        self,
        plan: SwapPlan,
        router: str,
        account: Optional[str],
        amount_in: int,
        recipient: Optional[str] = None,
    ) -> TransactionOutcome:
        """Swap `amount_in` wei of native currency for as many tokens as possible.

        Args:
            plan: Minimum output, deadline and (wrapped native, token) path
            router: Router contract address
            account: Signing account (default identity if unknown)
            amount_in: Currency to spend, in wei
            recipient: Token receiver (defaults to the signer)

        Returns:
            TransactionOutcome with hash and gas used
        """
        return await self._execute(
            SwapDirection.CURRENCY_TO_TOKEN, plan, router, account, amount_in, recipient
        )

    async def swap_token_for_currency(
        self,
        plan: SwapPlan,
        router: str,
        account: Optional[str],
        amount_in: int,
        recipient: Optional[str] = None,
    ) -> TransactionOutcome:
        """Swap `amount_in` token base units for as much native currency as possible.

        Args:
            plan: Minimum output, deadline and (token, wrapped native) path
            router: Router contract address (must be approved to spend the token)
            account: Signing account (default identity if unknown)
            amount_in: Tokens to sell, in base units
            recipient: Currency receiver (defaults to the signer)

        Returns:
            TransactionOutcome with hash and gas used
        """
        return await self._execute(
            SwapDirection.TOKEN_TO_CURRENCY, plan, router, account, amount_in, recipient
        )

    async def _check_funds(
        self, direction: SwapDirection, identity: Identity, plan: SwapPlan, amount_in: int
    ) -> None:
        native_balance = await self.chain.get_balance(identity.address)

        if direction == SwapDirection.CURRENCY_TO_TOKEN:
            await self.guard.check(native_balance, amount_in)
            return

        # Selling tokens: currency only pays gas, the token covers the amount
        await self.guard.check(native_balance, 0)
        token_balance = await erc20_balance(self.chain, plan.path[0], identity.address)
        self.guard.check_token(token_balance, amount_in)

    def _build_tx(
        self, direction: SwapDirection, plan: SwapPlan, router: str, recipient: str, amount_in: int
    ) -> dict:
        path = list(plan.path)

        if direction == SwapDirection.CURRENCY_TO_TOKEN:
            data = encode_swap_exact_eth_for_tokens(
                plan.minimum_output, path, recipient, plan.deadline
            )
            return {"to": router, "value": amount_in, "data": data}

        data = encode_swap_exact_tokens_for_eth(
            amount_in, plan.minimum_output, path, recipient, plan.deadline
        )
        return {"to": router, "value": 0, "data": data}

    async def _execute(
        self,
        direction: SwapDirection,
        plan: SwapPlan,
        router: str,
        account: Optional[str],
        amount_in: int,
        recipient: Optional[str],
    ) -> TransactionOutcome:
        state = SwapState.PLANNED
        logger.info(
            f"Swap {direction.value}: {amount_in} in, min {plan.minimum_output} out, "
            f"path {' -> '.join(plan.path)}"
        )

        try:
            now = int(self._clock())
            if plan.deadline <= now:
                raise PlanExpiredError(plan.deadline, now)

            identity = self.keyring.resolve(account)
            await self._check_funds(direction, identity, plan, amount_in)
            state = SwapState.BALANCE_CHECKED

            tx = self._build_tx(direction, plan, router, recipient or identity.address, amount_in)
            prepared = await self.signer.prepare(identity, tx)
            signed = self.signer.sign(identity, prepared)
            state = SwapState.SIGNED

            tx_hash = await self.chain.submit(signed.raw_transaction)
            state = SwapState.SUBMITTED
            logger.info(f"Swap submitted: {tx_hash}")

            receipt = await self.signer.confirm(tx_hash)
            state = SwapState.CONFIRMED

        except Exception as e:
            logger.error(f"Swap {direction.value} failed after {state.value}: {e}")
            state = SwapState.FAILED
            raise

        logger.info(f"Swap {direction.value} {state.value}: {receipt.tx_hash}")
        return TransactionOutcome(tx_hash=receipt.tx_hash, gas_used=receipt.gas_used)

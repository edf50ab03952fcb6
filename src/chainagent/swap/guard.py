"""Pre-flight balance check: amount plus estimated gas.

The check reserves nothing. Another in-flight spend from the same account
can still make the later submission fail; that failure surfaces normally.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from eth_utils import from_wei

from chainagent.chain.base import ChainClient
from chainagent.errors import InsufficientFundsError

logger = logging.getLogger(__name__)

# Gas units of a plain value transfer
TRANSFER_GAS = 21_000

# Rough gas units of a router swap
SWAP_GAS_ESTIMATE = 200_000


@dataclass(frozen=True)
class BalanceCheck:
    """Outcome of a balance check."""

    balance: int
    amount: int
    gas_cost: int

    @property
    def required(self) -> int:
        return self.amount + self.gas_cost

    @property
    def shortfall(self) -> int:
        return max(0, self.required - self.balance)

    @property
    def ok(self) -> bool:
        return self.balance >= self.required


class BalanceGuard:
    """Validates an account can cover a trade amount plus gas."""

    def __init__(self, chain: ChainClient, gas_estimate: int = SWAP_GAS_ESTIMATE):
        self.chain = chain
        self.gas_estimate = gas_estimate

    def evaluate(
        self, balance: int, amount: int, gas_price: int, gas_units: Optional[int] = None
    ) -> BalanceCheck:
        """Compare balance against amount + gas_units * gas_price."""
        units = self.gas_estimate if gas_units is None else gas_units
        return BalanceCheck(balance=balance, amount=amount, gas_cost=units * gas_price)

    async def check(self, balance: int, amount: int, gas_units: Optional[int] = None) -> BalanceCheck:
        """Check native balance covers amount plus gas at the current price.

        Raises:
            InsufficientFundsError: If balance < amount + gas cost
        """
        # Gas price is volatile: fetched on every check
        gas_price = await self.chain.get_gas_price()
        result = self.evaluate(balance, amount, gas_price, gas_units)

        if not result.ok:
            logger.warning(
                f"Insufficient balance: need {result.required} wei, have {balance} wei"
            )
            raise InsufficientFundsError(
                shortfall=result.shortfall,
                required=result.required,
                balance=balance,
                message=(
                    f"Insufficient balance. Need {from_wei(amount, 'ether')} ETH for amount + "
                    f"{from_wei(result.gas_cost, 'ether')} ETH for gas. "
                    f"Balance: {from_wei(balance, 'ether')} ETH "
                    f"(short {from_wei(result.shortfall, 'ether')} ETH)"
                ),
            )

        return result

    def check_token(self, balance: int, amount: int) -> BalanceCheck:
        """Check an ERC20 balance covers amount (gas is paid in native currency).

        Raises:
            InsufficientFundsError: If balance < amount
        """
        result = BalanceCheck(balance=balance, amount=amount, gas_cost=0)
        if not result.ok:
            raise InsufficientFundsError(
                shortfall=result.shortfall,
                required=result.required,
                balance=balance,
                message=(
                    f"Insufficient token balance. Need {amount}, have {balance} "
                    f"(short {result.shortfall})"
                ),
            )
        return result

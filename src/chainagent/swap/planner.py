"""Slippage and deadline planning for router swaps.

minimum_output = expected_output * (100 - slippage_percent) // 100

Integer division truncates toward zero, so rounding always favours the
pool side. An expected output of zero (no quote) gives a minimum of zero:
the swap then has no slippage protection and callers must say so.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SwapDirection(str, Enum):
    """Which side of the swap is the native currency."""
    CURRENCY_TO_TOKEN = "currency_to_token"
    TOKEN_TO_CURRENCY = "token_to_currency"


@dataclass
class SwapRequest:
    """A requested trade, built per call."""

    router_address: str
    input_amount: int
    expected_output: int  # 0 when no quote is available
    token_address: str
    account_address: Optional[str]  # None signs and receives with the default account
    direction: SwapDirection


@dataclass(frozen=True)
class SwapPlan:
    """Trade bounds derived for a single submission."""

    minimum_output: int
    deadline: int
    path: tuple[str, str]
    expected_output: int
    slippage_percent: int

    @property
    def is_protected(self) -> bool:
        """False when the swap will accept any output amount."""
        return self.minimum_output > 0


def minimum_output(expected_output: int, slippage_percent: int) -> int:
    """Shave the slippage margin off an expected output."""
    if expected_output < 0:
        raise ValueError(f"Expected output must be non-negative, got {expected_output}")
    if not 0 <= slippage_percent <= 100:
        raise ValueError(f"Slippage must be within [0, 100], got {slippage_percent}")
    return expected_output * (100 - slippage_percent) // 100


def asset_path(direction: SwapDirection, token: str, wrapped_native: str) -> tuple[str, str]:
    """Two-hop path with the wrapped native token standing in for currency."""
    if direction == SwapDirection.CURRENCY_TO_TOKEN:
        return (wrapped_native, token)
    return (token, wrapped_native)


class SwapPlanner:
    """Computes minimum output and deadline for each swap."""

    def __init__(
        self,
        slippage_percent: int = 10,
        window_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize planner.

        Args:
            slippage_percent: Margin removed from the expected output (0-100)
            window_seconds: Seconds from now until the swap expires on-chain
            clock: Wall clock returning unix seconds
        """
        if not 0 <= slippage_percent <= 100:
            raise ValueError(f"Slippage must be within [0, 100], got {slippage_percent}")
        if window_seconds <= 0:
            raise ValueError(f"Deadline window must be positive, got {window_seconds}")

        self.slippage_percent = slippage_percent
        self.window_seconds = window_seconds
        self._clock = clock

    def deadline(self) -> int:
        return int(self._clock()) + self.window_seconds

    def plan(self, expected_output: int, path: tuple[str, str]) -> SwapPlan:
        """Build a fresh plan; never cached since quotes go stale."""
        min_out = minimum_output(expected_output, self.slippage_percent)
        plan = SwapPlan(
            minimum_output=min_out,
            deadline=self.deadline(),
            path=path,
            expected_output=expected_output,
            slippage_percent=self.slippage_percent,
        )

        logger.info(
            f"Planned swap: expected {expected_output}, min {min_out} "
            f"({self.slippage_percent}% slippage), deadline {plan.deadline}"
        )
        if not plan.is_protected:
            logger.warning("Expected output is zero: swap has no slippage protection")

        return plan

    def plan_request(self, request: SwapRequest, wrapped_native: str) -> SwapPlan:
        """Plan a SwapRequest, deriving its asset path."""
        path = asset_path(request.direction, request.token_address, wrapped_native)
        return self.plan(request.expected_output, path)

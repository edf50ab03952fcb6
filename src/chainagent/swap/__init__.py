"""Transfer and swap execution.

Provides:
- SwapPlanner: slippage and deadline planning
- BalanceGuard: amount + gas affordability checks
- TransactionSigner: sign, submit and confirm
- TransferExecutor / SwapExecutor: the operations built on them
"""

from chainagent.swap.executor import SwapExecutor, SwapState
from chainagent.swap.guard import SWAP_GAS_ESTIMATE, TRANSFER_GAS, BalanceCheck, BalanceGuard
from chainagent.swap.planner import (
    SwapDirection,
    SwapPlan,
    SwapPlanner,
    SwapRequest,
    asset_path,
    minimum_output,
)
from chainagent.swap.signer import TransactionOutcome, TransactionSigner
from chainagent.swap.transfer import TransferExecutor

__all__ = [
    # Planning
    "SwapDirection",
    "SwapPlan",
    "SwapPlanner",
    "SwapRequest",
    "asset_path",
    "minimum_output",
    # Guard
    "BalanceCheck",
    "BalanceGuard",
    "SWAP_GAS_ESTIMATE",
    "TRANSFER_GAS",
    # Execution
    "SwapExecutor",
    "SwapState",
    "TransactionOutcome",
    "TransactionSigner",
    "TransferExecutor",
]

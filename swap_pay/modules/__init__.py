"""
Business logic modules for swap_pay

- allowance: ensure the 0x allowance target may spend the sell token
- balance: bounded post-swap balance confirmation and log diagnostics
- orchestrator: the swap-and-pay state machine
"""

from .allowance import ensure_allowance
from .balance import confirm_balance, log_transfer_diagnostics
from .orchestrator import (
    StatusCallback,
    SwapAndPayOrchestrator,
    SwapPayContext,
    swap_and_pay,
)

__all__ = [
    "ensure_allowance",
    "confirm_balance",
    "log_transfer_diagnostics",
    "StatusCallback",
    "SwapAndPayOrchestrator",
    "SwapPayContext",
    "swap_and_pay",
]

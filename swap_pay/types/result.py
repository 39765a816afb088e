"""
Result and parameter types for the swap-and-pay flow
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .quote import Quote


@dataclass(frozen=True)
class AutoApprove:
    """
    Approval request attached to a swap

    Attributes:
        sell_token: Token being sold (needs allowance)
        sell_amount: Amount being sold in base units
    """
    sell_token: str
    sell_amount: int


@dataclass(frozen=True)
class SwapAndPayParams:
    """
    Input to one orchestration

    Attributes:
        quote: Executable quote from the quote service
        receiver: Account the swap output is forwarded to
        buy_token_address: Token received from the swap and forwarded
        auto_approve: Approve the sell token first when allowance is short
    """
    quote: Quote
    receiver: str
    buy_token_address: str
    auto_approve: Optional[AutoApprove] = None


@dataclass(frozen=True)
class SwapAndPayResult:
    """Both hashes are always present; there is no partial-success result"""
    swap_hash: str
    transfer_hash: str


@dataclass(frozen=True)
class AllowanceDecision:
    """
    Outcome of ensure_allowance

    approved=False always carries the approval tx hash the caller must
    wait on before trusting the allowance.
    """
    approved: bool
    tx_hash: Optional[str] = None

    @classmethod
    def sufficient(cls) -> "AllowanceDecision":
        return cls(approved=True)

    @classmethod
    def submitted(cls, tx_hash: str) -> "AllowanceDecision":
        return cls(approved=False, tx_hash=tx_hash)


class SwapPayState(Enum):
    """Orchestration states"""
    INIT = "init"
    NETWORK_CHECK = "network_check"
    APPROVING = "approving"
    AWAITING_APPROVE_CONFIRM = "awaiting_approve_confirm"
    SWAPPING = "swapping"
    AWAITING_SWAP_CONFIRM = "awaiting_swap_confirm"
    CONFIRMING_BALANCE = "confirming_balance"
    TRANSFERRING = "transferring"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SwapPayState.DONE, SwapPayState.FAILED)


@dataclass
class SwapPayProgress:
    """
    Side-channel progress record

    Updated on every state transition and handed to the status callback.
    Hashes already recorded here stay valid on-chain even if a later step
    fails.
    """
    state: SwapPayState = SwapPayState.INIT
    status: str = ""
    approve_hash: Optional[str] = None
    swap_hash: Optional[str] = None
    swap_block: Optional[int] = None
    transfer_hash: Optional[str] = None
    observed_balance: Optional[int] = None
    amount_sent: Optional[int] = None
    error: Optional[str] = None
    history: List[SwapPayState] = field(default_factory=list)

    @property
    def submitted_hashes(self) -> List[str]:
        """Hashes of every transaction submitted so far"""
        return [h for h in (self.approve_hash, self.swap_hash, self.transfer_hash) if h]

    def __str__(self) -> str:
        return f"SwapPayProgress({self.state.value}, {self.status!r})"

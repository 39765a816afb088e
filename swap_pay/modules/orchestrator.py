"""
Swap-and-pay Orchestrator

Runs one swap-and-pay operation as a strict sequence of steps:

    INIT -> NETWORK_CHECK -> [APPROVING -> AWAITING_APPROVE_CONFIRM]
         -> SWAPPING -> AWAITING_SWAP_CONFIRM -> CONFIRMING_BALANCE
         -> TRANSFERRING -> DONE

Any step may end in FAILED; the exception propagates unchanged. Nothing is
retried or rolled back: transactions already submitted stay on-chain, and
their hashes are reported through SwapPayProgress (the result only exists
on full success).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..errors import (
    ChainConnectionError,
    InvalidQuoteError,
    NoOutputReceivedError,
    TransactionError,
    UnauthenticatedError,
)
from ..infra.chain import ChainReader
from ..infra.erc20 import send_transfer
from ..infra.evm_signer import SigningCapability
from ..infra.network import NetworkSwitcher, align_network
from ..infra.retry import CorrelationContext
from ..types import (
    MONAD_TESTNET_CHAIN_ID,
    SwapAndPayParams,
    SwapAndPayResult,
    SwapPayProgress,
    SwapPayState,
    is_hex_address,
)
from .allowance import ensure_allowance
from .balance import DEFAULT_ATTEMPTS, DEFAULT_DELAY, confirm_balance, log_transfer_diagnostics

logger = logging.getLogger(__name__)

StatusCallback = Callable[[SwapPayProgress], None]


@dataclass
class SwapPayContext:
    """
    Everything one orchestration needs besides its parameters

    Attributes:
        reader: Chain read access (None means no chain client connected)
        signer: Signing capability (None means no wallet connected)
        required_chain_id: Chain the quote was issued for
        switchers: Network switchers tried in order on chain mismatch
        confirm_attempts: Balance polls after the swap
        confirm_delay: Seconds between balance polls
        use_exact_approval: Approve the exact sell amount instead of MAX_UINT256
    """
    reader: Optional[ChainReader]
    signer: Optional[SigningCapability]
    required_chain_id: int = MONAD_TESTNET_CHAIN_ID
    switchers: List[NetworkSwitcher] = field(default_factory=list)
    confirm_attempts: int = DEFAULT_ATTEMPTS
    confirm_delay: float = DEFAULT_DELAY
    use_exact_approval: bool = False


class SwapAndPayOrchestrator:
    """
    Sequences approve, swap, balance confirmation and transfer

    Usage:
        orchestrator = SwapAndPayOrchestrator(context)
        result = await orchestrator.run(params, on_status=print)

    After run() returns or raises, ``orchestrator.progress`` holds the
    final state and every hash submitted along the way.
    """

    def __init__(self, context: SwapPayContext):
        self._context = context
        self.progress = SwapPayProgress()
        self._on_status: Optional[StatusCallback] = None

    def _transition(self, state: SwapPayState, status: str) -> None:
        self.progress.state = state
        self.progress.status = status
        self.progress.history.append(state)
        logger.info(f"[{state.value}] {status}")
        if self._on_status is not None:
            self._on_status(self.progress)

    def _fail(self, error: Exception) -> None:
        message = getattr(error, "message", None) or str(error)
        self.progress.error = message
        # The original error propagates; a failing callback here is only logged
        try:
            self._transition(SwapPayState.FAILED, message)
        except Exception as e:
            logger.warning(f"Status callback failed while reporting failure: {e}")

    def _require_capabilities(self) -> tuple:
        reader = self._context.reader
        signer = self._context.signer
        if reader is None:
            raise ChainConnectionError.no_reader()
        if signer is None:
            raise ChainConnectionError.no_signer()
        account = signer.address
        if not account:
            raise UnauthenticatedError()
        return reader, signer, account

    async def run(
        self,
        params: SwapAndPayParams,
        on_status: Optional[StatusCallback] = None,
    ) -> SwapAndPayResult:
        """
        Execute swap-and-pay

        Args:
            params: Quote, receiver, buy token and optional auto-approve
            on_status: Called with the progress record on every transition

        Returns:
            SwapAndPayResult with swap and transfer hashes

        Raises:
            ChainConnectionError: No chain reader or signer
            UnauthenticatedError: Signer has no account
            InvalidQuoteError: quote.to is not a 20-byte address
            TransactionError: Approval or swap reverted
            NoOutputReceivedError: Buy token never arrived, or nothing to send
        """
        self.progress = SwapPayProgress()
        self._on_status = on_status

        with CorrelationContext("swap_pay") as cid:
            logger.info(f"[{cid}] swap-and-pay to {params.receiver}: {params.quote}")
            try:
                return await self._run(params)
            except Exception as e:
                logger.error(f"[{cid}] swap-and-pay failed in {self.progress.state.value}: {e}")
                self._fail(e)
                raise

    async def _run(self, params: SwapAndPayParams) -> SwapAndPayResult:
        self._transition(SwapPayState.INIT, "Preparing swap")
        reader, signer, account = self._require_capabilities()
        quote = params.quote

        self._transition(SwapPayState.NETWORK_CHECK, "Checking network")
        await align_network(reader.web3, self._context.required_chain_id, self._context.switchers)

        approve = params.auto_approve
        if approve is not None and quote.allowance_target:
            self._transition(SwapPayState.APPROVING, "Checking allowance")
            decision = await ensure_allowance(
                reader,
                signer,
                approve.sell_token,
                account,
                quote.allowance_target,
                approve.sell_amount,
                use_exact=self._context.use_exact_approval,
            )
            if not decision.approved:
                self.progress.approve_hash = decision.tx_hash
                self._transition(
                    SwapPayState.AWAITING_APPROVE_CONFIRM,
                    f"Waiting for approval {decision.tx_hash}",
                )
                receipt = await reader.wait_for_receipt(decision.tx_hash)
                if receipt.get("status") == 0:
                    raise TransactionError.reverted(decision.tx_hash, "Approval")

        if not is_hex_address(quote.to):
            raise InvalidQuoteError.bad_address("to", quote.to)

        self._transition(SwapPayState.SWAPPING, "Sending swap")
        swap_hash = await signer.send_transaction(quote.to, quote.data, quote.value or 0)
        self.progress.swap_hash = swap_hash

        self._transition(SwapPayState.AWAITING_SWAP_CONFIRM, f"Waiting for swap {swap_hash}")
        receipt = await reader.wait_for_receipt(swap_hash)
        if receipt.get("status") == 0:
            raise TransactionError.reverted(swap_hash, "Swap")
        self.progress.swap_block = receipt.get("blockNumber")

        self._transition(SwapPayState.CONFIRMING_BALANCE, "Confirming received balance")
        token = params.buy_token_address
        balance = await confirm_balance(
            reader,
            token,
            account,
            attempts=self._context.confirm_attempts,
            delay=self._context.confirm_delay,
        )
        self.progress.observed_balance = balance
        if balance == 0:
            await log_transfer_diagnostics(reader, token, account, self.progress.swap_block)
            raise NoOutputReceivedError.balance_never_arrived(
                token, account, self._context.confirm_attempts, swap_hash
            )

        # Never forward more than quoted, nor more than actually arrived
        amount = min(balance, quote.buy_amount_raw)
        if amount == 0:
            raise NoOutputReceivedError.nothing_to_send(token, account, swap_hash)
        self.progress.amount_sent = amount

        self._transition(SwapPayState.TRANSFERRING, f"Sending {amount} to {params.receiver}")
        transfer_hash = await send_transfer(signer, token, params.receiver, amount)
        self.progress.transfer_hash = transfer_hash

        self._transition(SwapPayState.DONE, f"Done: transfer {transfer_hash}")
        return SwapAndPayResult(swap_hash=swap_hash, transfer_hash=transfer_hash)


async def swap_and_pay(
    context: SwapPayContext,
    params: SwapAndPayParams,
    on_status: Optional[StatusCallback] = None,
) -> SwapAndPayResult:
    """Run one orchestration with a fresh SwapAndPayOrchestrator"""
    return await SwapAndPayOrchestrator(context).run(params, on_status=on_status)

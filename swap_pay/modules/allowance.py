"""
Allowance Module

Makes sure a spender (the 0x allowance target) may pull the sell token
before the swap is submitted.
"""

import logging

from ..infra.chain import ChainReader
from ..infra.erc20 import MAX_UINT256, send_approve
from ..infra.evm_signer import SigningCapability
from ..types import AllowanceDecision

logger = logging.getLogger(__name__)


async def ensure_allowance(
    reader: ChainReader,
    signer: SigningCapability,
    token: str,
    owner: str,
    spender: str,
    required_amount: int,
    use_exact: bool = False,
) -> AllowanceDecision:
    """
    Approve spender on token if the current allowance is short

    The allowance is read fresh on every call. When it already covers
    required_amount nothing is submitted. Otherwise an approval is sent for
    required_amount (use_exact=True) or MAX_UINT256 (default, one-time
    infinite approval). The approval is not awaited here.

    Args:
        reader: Chain reader used for the allowance lookup
        signer: Signing capability that submits the approval
        token: ERC-20 being spent
        owner: Account holding the tokens
        spender: Contract that will pull the tokens
        required_amount: Amount the spender must be able to pull (base units)
        use_exact: Approve exactly required_amount instead of MAX_UINT256

    Returns:
        AllowanceDecision(approved=True) if no approval was needed, else
        AllowanceDecision(approved=False, tx_hash=<approval hash>)
    """
    current = await reader.allowance(token, owner, spender)
    if current >= required_amount:
        logger.debug(f"Allowance {current} >= {required_amount} for spender {spender}")
        return AllowanceDecision.sufficient()

    amount = required_amount if use_exact else MAX_UINT256
    logger.info(
        f"Allowance {current} < {required_amount}; approving "
        f"{'exact amount' if use_exact else 'max uint256'} for {spender}"
    )
    tx_hash = await send_approve(signer, token, spender, amount)
    return AllowanceDecision.submitted(tx_hash)

"""
Balance Confirmation Module

The swap receipt can land before the RPC node serves the updated balance,
so the buy-token balance is polled a bounded number of times.
"""

import logging
from typing import Optional

from ..infra.chain import ChainReader
from ..infra.retry import log_with_correlation, poll_until

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 6
DEFAULT_DELAY = 0.25


async def confirm_balance(
    reader: ChainReader,
    token: str,
    account: str,
    attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
) -> int:
    """
    Poll the token balance of account until it is nonzero

    Returns:
        The first nonzero balance read, or 0 after all attempts
    """
    return await poll_until(
        lambda: reader.balance_of(token, account),
        lambda balance: balance > 0,
        max_attempts=attempts,
        delay=delay,
        operation_name="confirm_balance",
    )


async def log_transfer_diagnostics(
    reader: ChainReader,
    token: str,
    account: str,
    block_number: Optional[int],
) -> int:
    """
    Log Transfer events of token addressed to account in the swap block

    Best-effort: query failures are logged and swallowed.

    Returns:
        Number of matching events found (0 if the query failed)
    """
    if block_number is None:
        logger.warning("No swap block number; skipping Transfer log diagnostics")
        return 0

    try:
        logs = await reader.transfer_logs(token, account, block_number, block_number)
    except Exception as e:
        log_with_correlation(
            logging.WARNING,
            f"Transfer log query failed: {e}",
            "transfer_diagnostics",
        )
        return 0

    log_with_correlation(
        logging.WARNING,
        f"Found {len(logs)} Transfer event(s) of {token} to {account} in block {block_number}",
        "transfer_diagnostics",
    )
    for log in logs:
        logger.warning(f"  Transfer log: tx={log.get('transactionHash')} data={log.get('data')}")
    return len(logs)

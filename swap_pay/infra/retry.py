"""
Retry Logic Helper Module

Provides a bounded polling combinator for chain reads that lag behind
transaction confirmation (indexing delays), plus structured logging with
correlation IDs for tracing one orchestration across modules.
"""

import asyncio
import contextvars
import logging
import uuid
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Context variable for correlation ID (task-local under asyncio)
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for transaction tracing."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """Set the correlation ID in context. Returns token for reset."""
    return _correlation_id.set(correlation_id)


class CorrelationContext:
    """
    Context manager for correlation ID scoping.

    Usage:
        with CorrelationContext("swap_pay") as cid:
            logger.info(f"[{cid}] Starting operation")
            balance = await poll_until(...)
    """

    def __init__(self, prefix: Optional[str] = None):
        """
        Initialize correlation context.

        Args:
            prefix: Optional prefix for the correlation ID (e.g., "swap_pay")
        """
        self.correlation_id = generate_correlation_id()
        if prefix:
            self.correlation_id = f"{prefix}_{self.correlation_id}"
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_correlation_id(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _correlation_id.reset(self._token)


def log_with_correlation(
    level: int,
    message: str,
    operation_name: str,
    attempt: Optional[int] = None,
    max_attempts: Optional[int] = None,
    **extra
):
    """
    Log message with correlation ID and structured context.

    Args:
        level: Logging level (logging.INFO, logging.WARNING, etc.)
        message: Log message
        operation_name: Name of the operation being executed
        attempt: Current attempt number (1-indexed)
        max_attempts: Maximum number of attempts
        **extra: Additional context fields
    """
    cid = get_correlation_id()

    parts = []
    if cid:
        parts.append(f"[{cid}]")
    parts.append(f"[{operation_name}]")
    if attempt is not None and max_attempts is not None:
        parts.append(f"[{attempt}/{max_attempts}]")
    parts.append(message)

    extra_context = {
        "correlation_id": cid,
        "operation": operation_name,
        "attempt": attempt,
        "max_attempts": max_attempts,
        **extra
    }

    logger.log(level, " ".join(parts), extra=extra_context)


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    predicate: Callable[[T], bool],
    max_attempts: int,
    delay: float,
    operation_name: str = "poll",
) -> T:
    """
    Call ``fetch`` until ``predicate`` accepts its result or attempts run out.

    Sleeps ``delay`` seconds between attempts (not before the first or
    after the last). Exceptions raised by ``fetch`` propagate immediately.

    Args:
        fetch: Async callable producing the value to test
        predicate: Returns True when the value is acceptable
        max_attempts: Number of calls to make at most (>= 1)
        delay: Seconds to wait between attempts
        operation_name: Name for logging purposes

    Returns:
        The first accepted value, or the last value read if none was accepted

    Example:
        balance = await poll_until(
            lambda: reader.balance_of(token, account),
            lambda value: value > 0,
            max_attempts=6,
            delay=0.25,
        )
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    value = None
    for attempt in range(1, max_attempts + 1):
        value = await fetch()

        if predicate(value):
            if attempt > 1:
                log_with_correlation(
                    logging.INFO,
                    f"Condition met after {attempt} attempts",
                    operation_name,
                    attempt,
                    max_attempts,
                )
            return value

        log_with_correlation(
            logging.DEBUG,
            f"Condition not met (value={value!r})",
            operation_name,
            attempt,
            max_attempts,
        )
        if attempt < max_attempts:
            await asyncio.sleep(delay)

    log_with_correlation(
        logging.WARNING,
        f"Gave up after {max_attempts} attempts",
        operation_name,
        max_attempts,
        max_attempts,
    )
    return value

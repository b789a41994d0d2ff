# woo_ebay_sync/services/retry.py
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

INITIAL_DELAY_SECONDS = 0.8
MAX_DELAY_SECONDS = 8.0


def is_retriable_error(exc: BaseException) -> bool:
    """Server-side failures and rate limiting are worth another attempt"""
    status = getattr(exc, "status_code", None)
    if status is None:
        return False
    return status >= 500 or status == 429


def _describe(exc: BaseException) -> str:
    status: Optional[int] = getattr(exc, "status_code", None)
    return f"{status or ''} {exc}".strip()


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    tries: int = 5,
    label: str = "request",
) -> T:
    """
    Run an async operation with bounded exponential backoff.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        tries: Total attempts, including the first
        label: Name used in log lines

    Returns:
        Whatever the operation returns

    Raises:
        The operation's own exception, unchanged, when it is terminal or
        the final retriable attempt fails
    """
    attempt = 0
    wait = INITIAL_DELAY_SECONDS

    while True:
        try:
            return await operation()
        except Exception as exc:
            attempt += 1
            if not is_retriable_error(exc) or attempt >= tries:
                logger.error(f"{label} failed (attempt {attempt}/{tries}): {_describe(exc)}")
                raise
            logger.warning(
                f"{label} retrying after {wait:.1f}s (attempt {attempt}/{tries}): {_describe(exc)}"
            )
            await asyncio.sleep(wait)
            wait = min(wait * 2, MAX_DELAY_SECONDS)

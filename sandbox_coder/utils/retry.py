"""Retry utilities: exponential backoff for durable steps, fixed delay for tools."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class RetryExhaustedError(Exception):
    """Raised when every attempt of a fixed-delay retry has failed."""

    def __init__(self, attempts: int, last_error: str):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"FAILED after {attempts} attempts: {last_error}")


async def retry_with_backoff(
    func: Callable,
    max_retries: int = 2,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    *args,
    **kwargs,
) -> Any:
    """
    Await ``func(*args, **kwargs)``, retrying failures with doubling delays.

    The n-th retry waits ``base_delay * 2**(n-1)`` seconds, capped at
    ``max_delay``. After ``max_retries`` retries the last exception is re-raised.
    """
    attempts = max_retries + 1
    for attempt in range(attempts):
        try:
            return await func(*args, **kwargs)
        except Exception:
            if attempt == attempts - 1:
                raise
        await asyncio.sleep(min(base_delay * 2**attempt, max_delay))


async def retry_with_fixed_delay(
    operation: Callable[[int], Awaitable[Any]],
    max_attempts: int = 3,
    delay: float = 0.5,
    describe_error: Callable[[Exception], str] = str,
    label: str = "operation",
) -> Any:
    """
    Run ``operation`` up to ``max_attempts`` times with a constant delay between tries.

    The operation receives the 1-based attempt number. Any exception it raises
    counts as a failed attempt; the first value it returns ends the loop.

    Args:
        operation: Async callable taking the attempt number
        max_attempts: Maximum number of attempts (default: 3)
        delay: Seconds to wait between attempts, not scaled by attempt (default: 0.5)
        describe_error: Turns a failure into the message kept as the last error
        label: Name used in retry log lines

    Returns:
        Result of the first successful attempt

    Raises:
        RetryExhaustedError: If every attempt failed
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error = ""
    for attempt in range(1, max_attempts + 1):
        if attempt > 1:
            logger.warning(
                "Retrying %s (attempt %d/%d): %s", label, attempt, max_attempts, last_error
            )
        try:
            return await operation(attempt)
        except Exception as e:
            last_error = describe_error(e)
            if attempt < max_attempts:
                await asyncio.sleep(delay)

    raise RetryExhaustedError(max_attempts, last_error)

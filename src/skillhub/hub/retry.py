"""Retry policy for registry calls made from user-facing entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from skillhub.errors import RETRYABLE_ERRORS
from skillhub.logging import get_logger

logger = get_logger("hub.retry")

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_DELAY = 0.5  # seconds, constant between attempts


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
) -> T:
    """
    Await ``operation()`` up to ``attempts`` times.

    Only :data:`~skillhub.errors.RETRYABLE_ERRORS` trigger another attempt;
    anything else propagates immediately. After the last attempt the most
    recent error is raised.

    Args:
        operation: Zero-argument factory returning a fresh awaitable per attempt
        attempts: Total number of attempts (at least 1)
        delay: Fixed sleep between attempts, in seconds

    Example:
        results = await retry_async(lambda: client.search("weather"))
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except RETRYABLE_ERRORS as e:
            if attempt == attempts:
                raise
            logger.info("Attempt %d/%d failed: %s; retrying in %.1fs", attempt, attempts, e, delay)
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")

"""Deadline and retry helpers wrapped around a single provider call."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from app.core.logging import get_logger
from app.modules.flashcards.errors import (
    ClassifiedFailure,
    FailureKind,
    classify_error,
    error_message,
)

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0

Sleep = Callable[[float], Awaitable[None]]
OnRetry = Callable[[int, float, ClassifiedFailure], None]

logger = get_logger(__name__)


async def with_timeout(call: Awaitable[T], timeout_ms: int = DEFAULT_TIMEOUT_MS) -> T:
    """Await ``call`` but give up after ``timeout_ms``.

    On expiry the in-flight call is cancelled and a retryable TIMEOUT failure
    is raised. Any other result or error passes through untouched.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout_ms / 1000.0)
    except asyncio.TimeoutError:
        raise ClassifiedFailure(
            f"Request timed out after {timeout_ms}ms", FailureKind.TIMEOUT, True
        ) from None


def backoff_delay(attempt: int, base_delay: float = DEFAULT_BASE_DELAY) -> float:
    """Exponential backoff: 1s, 2s, 4s ... for attempt 0, 1, 2 ..."""
    return (2**attempt) * base_delay


async def retry_with_backoff(
    attempt_fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    base_delay: float = DEFAULT_BASE_DELAY,
    sleep: Sleep = asyncio.sleep,
    on_retry: Optional[OnRetry] = None,
) -> T:
    """Run ``attempt_fn`` sequentially up to ``max_attempts`` times.

    Each attempt is guarded by ``with_timeout``. Non-retryable failures are
    raised immediately; retryable ones are followed by a backoff sleep unless
    the budget is spent, in which case an UNKNOWN, non-retryable failure
    carrying the last underlying message is raised.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: object = None
    last_failure: Optional[ClassifiedFailure] = None

    for attempt in range(max_attempts):
        try:
            return await with_timeout(attempt_fn(), timeout_ms)
        except Exception as e:  # noqa: BLE001
            last_error = e
            last_failure = classify_error(e)

            if not last_failure.retryable:
                logger.warning(
                    "Attempt %d/%d failed with non-retryable %s: %s",
                    attempt + 1,
                    max_attempts,
                    last_failure.kind.value,
                    last_failure.message,
                )
                raise last_failure from (None if last_failure is e else e)

            if attempt < max_attempts - 1:
                delay = backoff_delay(attempt, base_delay)
                logger.info(
                    "Retry attempt %d after %dms (%s: %s)",
                    attempt + 1,
                    int(delay * 1000),
                    last_failure.kind.value,
                    last_failure.message,
                )
                if on_retry is not None:
                    on_retry(attempt + 1, delay, last_failure)
                await sleep(delay)

    raise ClassifiedFailure(
        f"Failed after {max_attempts} attempts: {error_message(last_error)}",
        FailureKind.UNKNOWN,
        False,
        attempts=max_attempts,
        last_failure=last_failure,
    )

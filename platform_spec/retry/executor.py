"""Generic retry driver with backoff and cancellation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from platform_spec.errors import RetryCancelledError, RetryExhaustedError
from platform_spec.retry.classifier import ErrorClassifier
from platform_spec.retry.policy import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _wait_or_cancel(delay: float, cancel: asyncio.Event | None) -> bool:
    """Sleep for ``delay`` seconds unless cancellation is signalled first.

    Returns:
        True if cancelled, False if the full delay elapsed
    """
    if cancel is None:
        await asyncio.sleep(delay)
        return False
    if cancel.is_set():
        return True
    try:
        await asyncio.wait_for(cancel.wait(), timeout=delay)
    except TimeoutError:
        return False
    return True


async def retry(
    policy: RetryPolicy | None,
    classifier: ErrorClassifier,
    operation: Callable[[], Awaitable[T]],
    cancel: asyncio.Event | None = None,
) -> T:
    """Run ``operation`` until it succeeds or retrying stops making sense.

    Args:
        policy: Retry policy, or None to run exactly once
        classifier: Predicate returning True for retryable errors
        operation: Zero-argument coroutine function to run
        cancel: Event that aborts the wait between attempts when set

    Returns:
        Whatever ``operation`` returns on its first success

    Raises:
        RetryExhaustedError: Every attempt failed with a retryable error
        RetryCancelledError: ``cancel`` was set while waiting to retry
        Exception: The operation's own error, unchanged, when the
            classifier marks it non-retryable (or when policy is None)
    """
    if policy is None:
        return await operation()

    last_error: Exception | None = None
    total = policy.max_retries + 1

    for attempt in range(total):
        try:
            return await operation()
        except Exception as e:
            if not classifier(e):
                logger.debug("Attempt %d/%d failed with non-retryable error: %s", attempt + 1, total, e)
                raise
            last_error = e

        if attempt == policy.max_retries:
            break

        delay = policy.calculate_delay(attempt)
        logger.info(
            "Attempt %d/%d failed: %s, retrying in %.2fs",
            attempt + 1,
            total,
            last_error,
            delay,
        )
        if await _wait_or_cancel(delay, cancel):
            logger.warning("Retry cancelled after %d attempt(s)", attempt + 1)
            raise RetryCancelledError(attempt + 1, last_error) from last_error

    if last_error is None:
        raise RuntimeError("retry loop finished without running the operation")
    logger.error("Giving up after %d attempt(s): %s", total, last_error)
    raise RetryExhaustedError(policy.max_retries, last_error) from last_error

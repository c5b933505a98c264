"""Retry transient model failures with exponential backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from closet.config import RETRY_BACKOFF_FACTOR, RETRY_INITIAL_DELAY_MS, RETRY_MAX_ATTEMPTS
from closet.errors import ExhaustedRetriesError, RetryableProviderError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_KEYWORDS = (
    "503",
    "service unavailable",
    "model is overloaded",
    "model_is_overloaded",
    "resource has been exhausted",
    "rate limit",
    "try again",
)


def is_retryable_error(exc: BaseException) -> bool:
    """Classify an error as transient by its type, then by its message."""
    if isinstance(exc, ValidationError):
        return False
    if isinstance(exc, RetryableProviderError):
        return True
    message = str(exc).lower()
    return any(keyword in message for keyword in RETRYABLE_KEYWORDS)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = RETRY_MAX_ATTEMPTS
    initial_delay_ms: int = RETRY_INITIAL_DELAY_MS
    backoff_factor: int = RETRY_BACKOFF_FACTOR
    is_retryable: Callable[[BaseException], bool] = is_retryable_error


DEFAULT_POLICY = RetryPolicy()


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    label: str = "model call",
) -> T:
    """
    Await ``operation`` until it succeeds, retrying only transient failures.

    Non-retryable errors propagate unchanged on the spot. A transient error on
    the last attempt is wrapped in ``ExhaustedRetriesError``.
    """
    policy = policy or DEFAULT_POLICY
    delay_ms = policy.initial_delay_ms

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if not policy.is_retryable(exc):
                logger.error("%s failed with a non-retryable error: %s", label, exc)
                raise
            if attempt == policy.max_attempts:
                logger.error("%s failed after %d attempts: %s", label, attempt, exc)
                raise ExhaustedRetriesError(label, attempt, exc) from exc
            logger.warning(
                "%s attempt %d/%d failed (%s); retrying in %d ms",
                label, attempt, policy.max_attempts, exc, delay_ms,
            )
            await asyncio.sleep(delay_ms / 1000)
            delay_ms *= policy.backoff_factor

    raise ExhaustedRetriesError(label, 0, RuntimeError("no attempts were made"))

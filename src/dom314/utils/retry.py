"""Retry utilities for transient local failures.

SQLite reports "database is locked" when another process holds the write
lock for longer than the busy timeout. Those errors are retried with
exponential backoff before they surface as StorageError.
"""

import logging
import sqlite3
from collections.abc import Callable
from functools import wraps

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        max_wait_seconds: float = 2,
        min_wait_seconds: float = 0.1,
        jitter: bool = True,
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts (including initial)
            max_wait_seconds: Maximum wait time between retries
            min_wait_seconds: Minimum wait time between retries
            jitter: Whether to add jitter to wait times
        """
        self.max_attempts = max_attempts
        self.max_wait_seconds = max_wait_seconds
        self.min_wait_seconds = min_wait_seconds
        self.jitter = jitter


DEFAULT_RETRY_CONFIG = RetryConfig(
    max_attempts=4,
    max_wait_seconds=2,
    min_wait_seconds=0.1,
    jitter=True,
)

# Fast configuration for testing (minimal delays)
TEST_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=0.01,
    min_wait_seconds=0.001,
    jitter=False,
)


def is_database_locked(error: BaseException) -> bool:
    """Whether an exception is SQLite's transient lock contention error."""
    return isinstance(error, sqlite3.OperationalError) and (
        "locked" in str(error).lower() or "busy" in str(error).lower()
    )


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging.

    Args:
        retry_state: Tenacity retry state
    """
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        logger.warning(
            f"Retry attempt {retry_state.attempt_number} failed: "
            f"{type(exception).__name__}: {exception}"
        )


def with_retry(
    config: RetryConfig | None = None,
    retry_if: Callable[[BaseException], bool] = is_database_locked,
) -> Callable:
    """Decorator for adding retry logic with exponential backoff.

    The configuration is resolved at call time so tests can swap
    DEFAULT_RETRY_CONFIG for TEST_RETRY_CONFIG.

    Usage:
        @with_retry()
        def write_row():
            ...

    Args:
        config: Retry configuration (uses DEFAULT_RETRY_CONFIG if None)
        retry_if: Predicate selecting which exceptions are retried

    Returns:
        Decorated function with retry logic
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            active = config or DEFAULT_RETRY_CONFIG
            retry_decorator = retry(
                stop=stop_after_attempt(active.max_attempts),
                wait=wait_exponential_jitter(
                    initial=active.min_wait_seconds,
                    max=active.max_wait_seconds,
                    jitter=active.max_wait_seconds if active.jitter else 0,
                ),
                retry=retry_if_exception(retry_if),
                before_sleep=log_retry_attempt,
                reraise=True,
            )
            return retry_decorator(func)(*args, **kwargs)

        return wrapper

    return decorator

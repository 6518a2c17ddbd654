#!/usr/bin/env python3

"""
Test retry policy.

Decides whether a failed test is worth another attempt and how long to wait
first. Assertion failures are real test failures and are never retried;
nor are fatal harness errors or failures that name bad test data,
configuration or setup. Lost sessions, timeouts, transport problems and
driver flakiness (stale or not-yet-interactable elements) are retried.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from selenium.common.exceptions import WebDriverException

from config.config_schema import RunConfig
from core.exceptions import ErrorKind, FatalError, RetryableError, classify_exception, describe_exception

logger = logging.getLogger(__name__)

NON_RETRYABLE_MESSAGES: tuple[str, ...] = (
    "invalid test data",
    "configuration error",
    "setup failed",
)

RETRYABLE_MESSAGES: tuple[str, ...] = (
    "timeout",
    "timed out",
    "connection",
    "network",
)


class RetryStrategy(Enum):
    """Retry strategy options."""

    LINEAR_BACKOFF = "linear_backoff"
    EXPONENTIAL_BACKOFF = "exponential_backoff"
    FIXED_DELAY = "fixed_delay"


def is_retryable_failure(exc: BaseException) -> bool:
    """Return True when a test that raised ``exc`` may be run again."""
    if isinstance(exc, (AssertionError, FatalError)):
        return False
    message = str(exc).lower()
    if any(fragment in message for fragment in NON_RETRYABLE_MESSAGES):
        return False
    if isinstance(exc, (RetryableError, WebDriverException, ConnectionError, TimeoutError)):
        return True
    if classify_exception(exc) is not ErrorKind.OTHER:
        return True
    return any(fragment in message for fragment in RETRYABLE_MESSAGES)


@dataclass(frozen=True)
class RetryPolicy:
    """How many extra attempts a failing test gets, and the wait before each."""

    max_retries: int = 0
    delay_seconds: float = 1.0
    strategy: RetryStrategy = RetryStrategy.LINEAR_BACKOFF
    max_delay_seconds: float = 30.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be non-negative")

    @classmethod
    def from_config(cls, run: Optional[RunConfig] = None) -> "RetryPolicy":
        if run is None:
            from config import get_config_manager

            run = get_config_manager().get_config().run
        return cls(max_retries=run.max_test_retries, delay_seconds=run.retry_delay)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry_number: int) -> float:
        """Wait before retry ``retry_number`` (1-based): 1x, 2x, 3x the base delay for linear backoff."""
        if self.strategy is RetryStrategy.FIXED_DELAY:
            delay = self.delay_seconds
        elif self.strategy is RetryStrategy.EXPONENTIAL_BACKOFF:
            delay = self.delay_seconds * (2 ** (retry_number - 1))
        else:
            delay = self.delay_seconds * retry_number
        return min(delay, self.max_delay_seconds)

    def should_retry(self, exc: BaseException, attempt: int) -> bool:
        """``attempt`` is the 1-based number of the attempt that just failed."""
        return attempt <= self.max_retries and is_retryable_failure(exc)

    def wait_before_retry(self, retry_number: int, test_name: str, exc: BaseException) -> None:
        delay = self.delay_for(retry_number)
        logger.warning(
            f"Retrying '{test_name}' ({retry_number}/{self.max_retries}) in {delay:.1f}s after {describe_exception(exc)}"
        )
        if delay > 0:
            time.sleep(delay)


NO_RETRY = RetryPolicy()


__all__ = ["NO_RETRY", "RetryPolicy", "RetryStrategy", "is_retryable_failure"]

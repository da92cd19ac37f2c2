"""Retry policy for external review calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from commitguard.config import ReviewConfig
from commitguard.exceptions import ReviewError
from commitguard.logging import get_logger

__all__ = ["RetryPolicy", "is_retryable"]

logger = get_logger(__name__)


def is_retryable(error: BaseException) -> bool:
    """True for review failures worth another attempt (timeouts, tool errors)."""
    return isinstance(error, ReviewError) and error.retryable


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Exponential backoff: the n-th retry waits ``base_delay * 2**(n-1)``.

    Attributes:
        max_retries: Extra attempts after the first one.
        base_delay: Delay before the first retry, in seconds.
    """

    max_retries: int
    base_delay: float

    @classmethod
    def from_config(cls, config: ReviewConfig) -> RetryPolicy:
        return cls(
            max_retries=config.max_retries,
            base_delay=config.retry_delay_seconds,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_before(self, retry_number: int) -> float:
        """Seconds slept before retry ``retry_number`` (1-based)."""
        return self.base_delay * 2 ** (retry_number - 1)

    def retrying(
        self,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        log: Any = None,
    ) -> AsyncRetrying:
        """Build the tenacity controller for one review call.

        Args:
            sleep: Coroutine used between attempts; tests pass a recorder.
            log: Logger receiving a ``review_retry_scheduled`` event per retry.

        Returns:
            AsyncRetrying that re-raises the last error once exhausted.
        """
        sink = log if log is not None else logger

        def _before_sleep(retry_state: RetryCallState) -> None:
            outcome = retry_state.outcome
            error = outcome.exception() if outcome is not None else None
            sink.warning(
                "review_retry_scheduled",
                attempt=retry_state.attempt_number,
                max_attempts=self.max_attempts,
                delay_s=retry_state.upcoming_sleep,
                kind=error.kind.value if isinstance(error, ReviewError) else None,
                error=str(error) if error is not None else None,
            )

        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay, exp_base=2, min=0),
            retry=retry_if_exception(is_retryable),
            before_sleep=_before_sleep,
            sleep=sleep,
            reraise=True,
        )

"""
Retry policy for dispatched requests.

Three outcomes per attempt:

- Success   -> terminate, return the payload
- Fatal     -> terminate, raise the error
- Retryable -> retry after a delay while ``attempt_index < max_retries``,
               otherwise terminate with RetriesExhaustedError

The delay prefers the server's Retry-After hint; without one it is
``base_delay * 2 ** attempt_index`` (or plain ``base_delay`` when
exponential backoff is off), capped at ``max_delay``. No jitter is added, so
successive delays for one call never decrease.

Retried requests are not made idempotent here. A retried "send message" can
be delivered twice if the server accepted the first attempt but its
response was lost.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..config.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_RETRY_DELAY,
    DEFAULT_RETRY_DELAY_MS,
)
from ..errors import RateLimitExceededError, RetriesExhaustedError, WhatsAppError
from .error_classifier import ClassifiedOutcome, Fatal, Retryable, Success


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_RETRY_DELAY_MS / 1000.0
    retry_on_throttle: bool = True
    exponential_backoff: bool = True
    max_delay: float = DEFAULT_MAX_RETRY_DELAY

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if self.max_delay < 0:
            raise ValueError("max_delay must be non-negative")

    @classmethod
    def from_client_config(cls, config: Any) -> "RetryConfig":
        """Build from a ClientConfig (max_retries, retry_delay_ms, retry_after_too_many_requests)."""
        return cls(
            max_retries=config.max_retries,
            base_delay=config.retry_delay_ms / 1000.0,
            retry_on_throttle=config.retry_after_too_many_requests,
        )


@dataclass(frozen=True)
class RetryDecision:
    """What the dispatcher should do after an attempt."""
    retry: bool
    delay: float = 0.0
    payload: Any = None
    error: Optional[WhatsAppError] = None


class RetryPolicy:
    """Decides retry-or-terminate for classified outcomes."""

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def decide(self, outcome: ClassifiedOutcome, attempt_index: int) -> RetryDecision:
        """
        Decide what follows an attempt.

        Args:
            outcome: Classified result of the attempt
            attempt_index: Zero-based index of the attempt just made

        Returns:
            RetryDecision; ``error`` is set on every terminal failure
        """
        attempts = attempt_index + 1

        if isinstance(outcome, Success):
            return RetryDecision(retry=False, payload=outcome.payload)

        if isinstance(outcome, Fatal):
            error = outcome.error
            error.attempts = attempts
            return RetryDecision(retry=False, error=error)

        if not isinstance(outcome, Retryable):
            raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")

        if outcome.is_throttle and not self.config.retry_on_throttle:
            return RetryDecision(
                retry=False,
                error=RateLimitExceededError(
                    outcome.reason or "Rate limit exceeded",
                    retry_after=outcome.retry_after,
                    status_code=outcome.status_code,
                    attempts=attempts,
                    category=outcome.category.value,
                ),
            )

        if attempt_index >= self.config.max_retries:
            return RetryDecision(retry=False, error=self._exhausted(outcome, attempts))

        return RetryDecision(
            retry=True,
            delay=self.compute_delay(attempt_index, outcome.retry_after),
        )

    def compute_delay(self, attempt_index: int, retry_after: Optional[float] = None) -> float:
        """Delay before the attempt following ``attempt_index``."""
        # Server hints are authoritative and not capped
        if retry_after is not None:
            return max(0.0, retry_after)

        if self.config.exponential_backoff:
            delay = self.config.base_delay * (2 ** attempt_index)
        else:
            delay = self.config.base_delay

        return min(delay, self.config.max_delay)

    async def backoff(self, delay: float) -> None:
        """Suspend the calling task for ``delay`` seconds."""
        if delay > 0:
            await self._sleep(delay)

    def _exhausted(self, outcome: Retryable, attempts: int) -> RetriesExhaustedError:
        last_error = outcome.error
        if last_error is not None:
            last_error.attempts = attempts

        status = f"HTTP {outcome.status_code}" if outcome.status_code is not None else outcome.category.value
        return RetriesExhaustedError(
            f"Gave up after {attempts} attempts; last failure: {status} ({outcome.reason})",
            last_error=last_error,
            status_code=outcome.status_code,
            attempts=attempts,
            category=outcome.category.value,
        )

"""
Per-call dispatch bookkeeping and engine-wide counters.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .error_classifier import ClassifiedOutcome, ErrorCategory, Fatal, Retryable, Success


@dataclass(frozen=True)
class DispatchAttempt:
    """One HTTP round trip of a logical send."""
    index: int
    elapsed: float
    outcome: ClassifiedOutcome

    @property
    def status_code(self) -> Optional[int]:
        return self.outcome.status_code

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, Success)


@dataclass
class DispatchState:
    """Tracks the attempts of a single logical send."""
    request_id: str
    start_time: float
    attempts: List[DispatchAttempt] = field(default_factory=list)
    total_wait: float = 0.0

    def record(self, outcome: ClassifiedOutcome, now: float) -> DispatchAttempt:
        """Record an attempt's outcome and return the attempt record."""
        attempt = DispatchAttempt(
            index=len(self.attempts),
            elapsed=now - self.start_time,
            outcome=outcome,
        )
        self.attempts.append(attempt)
        return attempt

    def add_wait(self, seconds: float) -> None:
        self.total_wait += seconds

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    def get_last_attempt(self) -> Optional[DispatchAttempt]:
        return self.attempts[-1] if self.attempts else None


class DispatchMetrics:
    """Counters across every send made through one dispatcher."""

    def __init__(self):
        self.requests: int = 0
        self.successes: int = 0
        self.failures: int = 0
        self.attempts: int = 0
        self.retries: int = 0
        self.throttled: int = 0
        self.error_counts: Dict[ErrorCategory, int] = {}
        self.total_retry_delay: float = 0.0
        self.total_admission_wait: float = 0.0

    def record_attempt(self, outcome: ClassifiedOutcome):
        """Record one HTTP round trip."""
        self.attempts += 1
        if isinstance(outcome, (Retryable, Fatal)):
            self.error_counts[outcome.category] = self.error_counts.get(outcome.category, 0) + 1
            if outcome.category is ErrorCategory.RATE_LIMIT:
                self.throttled += 1

    def record_retry(self, delay: float):
        self.retries += 1
        self.total_retry_delay += delay

    def record_admission_wait(self, seconds: float):
        self.total_admission_wait += seconds

    def record_result(self, success: bool):
        self.requests += 1
        if success:
            self.successes += 1
        else:
            self.failures += 1

    def to_dict(self) -> Dict[str, object]:
        return {
            "requests": self.requests,
            "successes": self.successes,
            "failures": self.failures,
            "attempts": self.attempts,
            "retries": self.retries,
            "throttled": self.throttled,
            "error_counts": {category.value: count for category, count in self.error_counts.items()},
            "total_retry_delay": self.total_retry_delay,
            "total_admission_wait": self.total_admission_wait,
        }

"""Reliability layer: admission control, error classification and retries.

This layer handles:
- Sliding-window rate limiting against the requests-per-minute budget
- Classification of Graph API responses into success/retryable/fatal
- Remediation hints for known error codes
- Retry decisions with server-hinted or exponential backoff
- Per-call attempt records and engine-wide counters
"""

from .rate_limiter import RateLimiter
from .error_classifier import (
    ClassifiedOutcome,
    ErrorCategory,
    ErrorClassifier,
    Fatal,
    Retryable,
    Success,
)
from .retry import RetryConfig, RetryDecision, RetryPolicy
from .state import DispatchAttempt, DispatchMetrics, DispatchState

__all__ = [
    "RateLimiter",
    "ClassifiedOutcome",
    "ErrorCategory",
    "ErrorClassifier",
    "Fatal",
    "Retryable",
    "Success",
    "RetryConfig",
    "RetryDecision",
    "RetryPolicy",
    "DispatchAttempt",
    "DispatchMetrics",
    "DispatchState",
]

"""
Rate-limited dispatch engine.

Runs one logical request through the cycle

    acquire admission -> transport call -> classify -> retry policy

looping on retry decisions. Every attempt, retries included, passes through
the rate limiter because the server's limit applies per HTTP call. The
dispatcher owns attempt counting and elapsed-time bookkeeping; admission
math lives in RateLimiter and backoff math in RetryPolicy.
"""

import time
from typing import Callable, Dict, Optional

import httpx

from ..errors import DispatchTimeoutError, WhatsAppError
from ..models.request import ApiRequest, ApiResponse
from ..observability.logging import DispatchLogger
from ..reliability.error_classifier import ClassifiedOutcome, ErrorClassifier, Retryable
from ..reliability.rate_limiter import RateLimiter
from ..reliability.retry import RetryPolicy
from ..reliability.state import DispatchMetrics, DispatchState
from ..transport.base import Transport

logger = DispatchLogger("dispatcher")


class Dispatcher:
    """
    Sends ApiRequests through a shared rate limiter with retries.

    Many tasks may call ``send`` concurrently on one instance; the only
    shared mutable state is the RateLimiter's window (and the metrics
    counters, which are updated without awaiting).
    """

    def __init__(
        self,
        transport: Transport,
        rate_limiter: RateLimiter,
        retry_policy: Optional[RetryPolicy] = None,
        classifier: Optional[ErrorClassifier] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            transport: Performs single HTTP round trips
            rate_limiter: Admission control, possibly shared with other dispatchers
            retry_policy: Retry decisions and backoff (defaults to RetryPolicy())
            classifier: Response classifier (defaults to ErrorClassifier())
            timeout: Ceiling in seconds on one logical send, waits included
            clock: Monotonic time source; use the rate limiter's clock
        """
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")

        self.transport = transport
        self.rate_limiter = rate_limiter
        self.retry_policy = retry_policy or RetryPolicy()
        self.classifier = classifier or ErrorClassifier()
        self.timeout = timeout
        self._clock = clock
        self.metrics = DispatchMetrics()

    async def send(self, request: ApiRequest, request_id: Optional[str] = None) -> ApiResponse:
        """
        Dispatch a request until it succeeds or fails terminally.

        Args:
            request: Request descriptor
            request_id: Optional correlation ID for logs

        Returns:
            ApiResponse with the decoded payload and attempt count

        Raises:
            ApiError: Server rejected the request
            RateLimitExceededError: Throttled while throttle retries are disabled
            RetriesExhaustedError: Retry budget ran out on transient failures
            TransportError: Non-retryable network failure or unreadable error body
            SerializationError: Success response with an undecodable body
            DispatchTimeoutError: Total time ceiling reached
        """
        with logger.track_request(request.method, request.path, request_id) as info:
            state = DispatchState(request_id=info["request_id"], start_time=self._clock())
            deadline = state.start_time + self.timeout if self.timeout is not None else None

            try:
                return await self._run(request, state, deadline, info)
            except WhatsAppError as e:
                if isinstance(e, DispatchTimeoutError):
                    e.attempts = state.attempt_count
                self.metrics.record_result(success=False)
                raise

    async def _run(
        self,
        request: ApiRequest,
        state: DispatchState,
        deadline: Optional[float],
        info: Dict
    ) -> ApiResponse:
        while True:
            attempt_index = state.attempt_count

            waited = await self.rate_limiter.acquire(deadline=deadline)
            if waited:
                state.add_wait(waited)
                self.metrics.record_admission_wait(waited)

            outcome = await self._attempt(request)
            state.record(outcome, self._clock())
            info["attempts"] = state.attempt_count
            self.metrics.record_attempt(outcome)

            if isinstance(outcome, Retryable) and outcome.is_throttle and outcome.retry_after:
                self.rate_limiter.note_server_throttle(outcome.retry_after)

            decision = self.retry_policy.decide(outcome, attempt_index)

            if not decision.retry:
                if decision.error is not None:
                    raise decision.error
                self.metrics.record_result(success=True)
                return ApiResponse(
                    status_code=outcome.status_code,
                    data=decision.payload,
                    headers=dict(getattr(outcome, "headers", None) or {}),
                    attempts=state.attempt_count,
                    elapsed=self._clock() - state.start_time,
                )

            if deadline is not None and self._clock() + decision.delay > deadline:
                raise DispatchTimeoutError(
                    f"Retry in {decision.delay:.2f}s would pass the dispatch deadline",
                    status_code=outcome.status_code,
                )

            logger.warning(
                "Retrying request",
                request_id=state.request_id,
                method=request.method,
                path=request.path,
                attempt=state.attempt_count,
                status=outcome.status_code,
                category=outcome.category.value,
                delay=f"{decision.delay:.2f}",
            )
            self.metrics.record_retry(decision.delay)
            await self.retry_policy.backoff(decision.delay)
            state.add_wait(decision.delay)

    async def _attempt(self, request: ApiRequest) -> ClassifiedOutcome:
        """Perform one round trip and classify it."""
        try:
            raw = await self.transport.send(request)
        except httpx.HTTPError as e:
            return self.classifier.classify_exception(e)
        return self.classifier.classify(raw.status_code, raw.content, raw.headers)

    def get_metrics(self) -> DispatchMetrics:
        """Get dispatch metrics."""
        return self.metrics

    def reset_metrics(self):
        """Reset metrics."""
        self.metrics = DispatchMetrics()

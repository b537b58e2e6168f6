"""Unit tests for the rate-limited dispatcher."""

import asyncio

import httpx
import pytest

from whatsapp_cloud_sdk.errors import (
    ApiError,
    AuthenticationError,
    DispatchTimeoutError,
    RateLimitExceededError,
    RetriesExhaustedError,
    SerializationError,
    TransportError,
)
from whatsapp_cloud_sdk.dispatch.dispatcher import Dispatcher
from whatsapp_cloud_sdk.reliability.error_classifier import ErrorCategory, Retryable, Success
from whatsapp_cloud_sdk.reliability.rate_limiter import RateLimiter
from tests.helpers.mock_transport import ScriptedTransport, graph_error, message_sent, raw


class TestDispatchSuccess:
    """Test the happy path."""

    @pytest.mark.asyncio
    async def test_single_attempt_success(self, make_dispatcher, send_text_request):
        """A 200 response is returned after one attempt."""
        transport = ScriptedTransport([raw(200, message_sent("wamid.1"))])
        dispatcher = make_dispatcher(transport)

        response = await dispatcher.send(send_text_request)

        assert response.status_code == 200
        assert response.data["messages"][0]["id"] == "wamid.1"
        assert response.attempts == 1
        assert transport.requests == [send_text_request]

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self, make_dispatcher, send_text_request, fake_clock):
        """A transient 503 is retried transparently."""
        transport = ScriptedTransport([raw(503), raw(200, message_sent())])
        dispatcher = make_dispatcher(transport, max_retries=3)

        response = await dispatcher.send(send_text_request)

        assert response.attempts == 2
        assert fake_clock.sleeps == [1.0]
        assert response.elapsed == 1.0

    @pytest.mark.asyncio
    async def test_connect_error_is_retried(self, make_dispatcher, send_text_request):
        transport = ScriptedTransport([httpx.ConnectError("connection refused"), raw(200, message_sent())])
        dispatcher = make_dispatcher(transport)

        response = await dispatcher.send(send_text_request)

        assert response.attempts == 2


class TestDispatchRetryBudget:
    """Test retry limits and terminal errors."""

    @pytest.mark.asyncio
    async def test_persistent_server_error_exhausts_retries(self, make_dispatcher, send_text_request, fake_clock):
        """max_retries=2 with every attempt failing makes exactly 3 attempts."""
        transport = ScriptedTransport([raw(500)])
        dispatcher = make_dispatcher(transport, max_retries=2)

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await dispatcher.send(send_text_request)

        error = exc_info.value
        assert not isinstance(error, ApiError)
        assert transport.calls == 3
        assert error.attempts == 3
        assert error.status_code == 500
        assert error.category == ErrorCategory.SERVER_ERROR.value
        assert fake_clock.sleeps == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_error_keeps_last_api_error(self, make_dispatcher, send_text_request):
        """The last parsed envelope stays reachable on the exhausted error."""
        body = graph_error("OAuthException", 80004, "Application request limit reached")
        transport = ScriptedTransport([raw(429, body)])
        dispatcher = make_dispatcher(transport, max_retries=1)

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await dispatcher.send(send_text_request)

        error = exc_info.value
        assert isinstance(error.last_error, ApiError)
        assert error.code == 80004
        assert error.solution is not None
        assert error.to_dict()["attempts"] == 2

    @pytest.mark.asyncio
    async def test_attempts_never_exceed_budget(self, make_dispatcher, send_text_request):
        for max_retries in range(4):
            transport = ScriptedTransport([raw(502)])
            dispatcher = make_dispatcher(transport, max_retries=max_retries)

            with pytest.raises(RetriesExhaustedError):
                await dispatcher.send(send_text_request)

            assert transport.calls == max_retries + 1

    @pytest.mark.asyncio
    async def test_backoff_is_non_decreasing(self, make_dispatcher, send_text_request, fake_clock):
        transport = ScriptedTransport([raw(503)])
        dispatcher = make_dispatcher(transport, max_retries=5, max_delay=6.0)

        with pytest.raises(RetriesExhaustedError):
            await dispatcher.send(send_text_request)

        assert fake_clock.sleeps == [1.0, 2.0, 4.0, 6.0, 6.0]
        assert fake_clock.sleeps == sorted(fake_clock.sleeps)

    @pytest.mark.asyncio
    async def test_fatal_error_is_not_retried(self, make_dispatcher, send_text_request):
        """A 4xx rejection propagates on first occurrence with its hint."""
        transport = ScriptedTransport([raw(401, graph_error("OAuthException", 190))])
        dispatcher = make_dispatcher(transport, max_retries=3)

        with pytest.raises(AuthenticationError) as exc_info:
            await dispatcher.send(send_text_request)

        assert transport.calls == 1
        assert exc_info.value.attempts == 1
        assert exc_info.value.solution

    @pytest.mark.asyncio
    async def test_undecodable_success_body(self, make_dispatcher, send_text_request):
        transport = ScriptedTransport([raw(200, b"not json")])
        dispatcher = make_dispatcher(transport)

        with pytest.raises(SerializationError):
            await dispatcher.send(send_text_request)

    @pytest.mark.asyncio
    async def test_non_retryable_transport_error(self, make_dispatcher, send_text_request):
        transport = ScriptedTransport([httpx.UnsupportedProtocol("unsupported protocol")])
        dispatcher = make_dispatcher(transport)

        with pytest.raises(TransportError):
            await dispatcher.send(send_text_request)

        assert transport.calls == 1


class TestDispatchThrottling:
    """Test 429 handling and admission control."""

    @pytest.mark.asyncio
    async def test_throttle_terminal_when_disabled(self, make_dispatcher, send_text_request):
        """retry_on_throttle=False ends the call on the first 429."""
        transport = ScriptedTransport([raw(429, headers={"Retry-After": "5"}), raw(200, message_sent())])
        dispatcher = make_dispatcher(transport, retry_on_throttle=False, max_retries=3)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await dispatcher.send(send_text_request)

        assert transport.calls == 1
        assert exc_info.value.retry_after == 5.0
        assert "5 seconds" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_retry_after_sets_next_attempt_delay(self, make_dispatcher, send_text_request, fake_clock):
        """Retry-After: 5 delays the next attempt by 5 seconds, overriding backoff."""
        transport = ScriptedTransport(
            [raw(429, headers={"Retry-After": "5"}), raw(200, message_sent())],
            clock=fake_clock,
        )
        dispatcher = make_dispatcher(transport, base_delay=1.0)

        response = await dispatcher.send(send_text_request)

        assert response.attempts == 2
        assert transport.call_times == [0.0, 5.0]
        assert fake_clock.sleeps == [5.0]

    @pytest.mark.asyncio
    async def test_server_throttle_is_shared_with_other_sends(self, make_dispatcher, send_text_request, fake_clock):
        """A Retry-After cooldown holds back later sends through the same limiter."""
        transport = ScriptedTransport([raw(429, headers={"Retry-After": "10"})], clock=fake_clock)
        dispatcher = make_dispatcher(transport, retry_on_throttle=False)

        with pytest.raises(RateLimitExceededError):
            await dispatcher.send(send_text_request)

        assert dispatcher.rate_limiter.get_wait_time() == 10.0

    @pytest.mark.asyncio
    async def test_fourth_send_waits_for_window(self, make_dispatcher, send_text_request, fake_clock):
        """Capacity 3/min: three sends go at t=0, the fourth at t=60."""
        transport = ScriptedTransport([raw(200, message_sent())], clock=fake_clock)
        dispatcher = make_dispatcher(transport, capacity=3)

        await asyncio.gather(*(dispatcher.send(send_text_request) for _ in range(4)))

        assert transport.call_times == [0.0, 0.0, 0.0, 60.0]

    @pytest.mark.asyncio
    async def test_retries_pass_through_the_limiter(self, make_dispatcher, send_text_request, fake_clock):
        """Every attempt, retries included, consumes an admission."""
        transport = ScriptedTransport([raw(500), raw(500), raw(200, message_sent())], clock=fake_clock)
        dispatcher = make_dispatcher(transport, capacity=2, base_delay=0.0, max_retries=2)

        response = await dispatcher.send(send_text_request)

        assert response.attempts == 3
        assert transport.call_times == [0.0, 0.0, 60.0]


class TestDispatchTimeout:
    """Test the total wall-clock ceiling."""

    @pytest.mark.asyncio
    async def test_backoff_past_deadline_times_out(self, make_dispatcher, send_text_request, fake_clock):
        transport = ScriptedTransport([raw(500)])
        dispatcher = make_dispatcher(transport, timeout=3.0, base_delay=2.0, max_retries=5)

        with pytest.raises(DispatchTimeoutError) as exc_info:
            await dispatcher.send(send_text_request)

        assert transport.calls == 2
        assert exc_info.value.attempts == 2
        assert fake_clock.sleeps == [2.0]

    @pytest.mark.asyncio
    async def test_admission_past_deadline_times_out(self, make_dispatcher, send_text_request, fake_clock):
        transport = ScriptedTransport([raw(200, message_sent())])
        dispatcher = make_dispatcher(transport, capacity=1, timeout=30.0)
        await dispatcher.send(send_text_request)

        with pytest.raises(DispatchTimeoutError) as exc_info:
            await dispatcher.send(send_text_request)

        assert exc_info.value.attempts == 0
        assert transport.calls == 1

    @pytest.mark.asyncio
    async def test_timeout_holds_while_queued_behind_another_send(self, fake_clock, send_text_request):
        """A bounded send sharing a limiter fails at once when the queue ahead outlasts its ceiling."""
        gate = asyncio.Event()

        async def blocking_sleep(seconds):
            await gate.wait()

        limiter = RateLimiter(1, clock=fake_clock, sleep=blocking_sleep)
        transport = ScriptedTransport([raw(200, message_sent())])
        patient = Dispatcher(transport, limiter, clock=fake_clock)
        bounded = Dispatcher(transport, limiter, timeout=5.0, clock=fake_clock)
        await patient.send(send_text_request)

        queued = asyncio.create_task(patient.send(send_text_request))
        await asyncio.sleep(0)

        with pytest.raises(DispatchTimeoutError) as exc_info:
            await asyncio.wait_for(bounded.send(send_text_request), timeout=1.0)

        assert exc_info.value.attempts == 0
        assert not queued.done()
        assert transport.calls == 1

        queued.cancel()
        with pytest.raises(asyncio.CancelledError):
            await queued

    def test_rejects_non_positive_timeout(self, make_dispatcher):
        with pytest.raises(ValueError):
            make_dispatcher(ScriptedTransport([raw(200)]), timeout=0)


class TestDispatchMetrics:
    """Test engine-wide counters."""

    @pytest.mark.asyncio
    async def test_metrics_after_exhaustion(self, make_dispatcher, send_text_request):
        transport = ScriptedTransport([raw(500)])
        dispatcher = make_dispatcher(transport, max_retries=2)

        with pytest.raises(RetriesExhaustedError):
            await dispatcher.send(send_text_request)

        metrics = dispatcher.get_metrics().to_dict()
        assert metrics["requests"] == 1
        assert metrics["failures"] == 1
        assert metrics["attempts"] == 3
        assert metrics["retries"] == 2
        assert metrics["error_counts"] == {"server_error": 3}

    @pytest.mark.asyncio
    async def test_metrics_count_throttles_and_successes(self, make_dispatcher, send_text_request):
        transport = ScriptedTransport([raw(429), raw(200, message_sent())])
        dispatcher = make_dispatcher(transport, base_delay=0.0)

        await dispatcher.send(send_text_request)

        metrics = dispatcher.get_metrics()
        assert metrics.successes == 1
        assert metrics.throttled == 1

        dispatcher.reset_metrics()
        assert dispatcher.get_metrics().attempts == 0


class TestDispatchStateRecords:
    """Test per-attempt records."""

    def test_attempt_records(self):
        from whatsapp_cloud_sdk.reliability.state import DispatchState

        state = DispatchState(request_id="abc", start_time=10.0)
        first = state.record(Retryable(status_code=500, category=ErrorCategory.SERVER_ERROR), 10.5)
        second = state.record(Success(status_code=200, payload={}), 12.0)

        assert (first.index, first.elapsed, first.succeeded) == (0, 0.5, False)
        assert (second.index, second.elapsed, second.succeeded) == (1, 2.0, True)
        assert state.get_last_attempt() is second
        assert second.status_code == 200

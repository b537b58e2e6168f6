"""Shared pytest fixtures for WhatsApp Cloud SDK tests."""

import pytest

from whatsapp_cloud_sdk.config.settings import ClientConfig
from whatsapp_cloud_sdk.dispatch.dispatcher import Dispatcher
from whatsapp_cloud_sdk.models.request import ApiRequest
from whatsapp_cloud_sdk.reliability.rate_limiter import RateLimiter
from whatsapp_cloud_sdk.reliability.retry import RetryConfig, RetryPolicy
from tests.helpers.fake_time import FakeClock


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: client tests over httpx.MockTransport")


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    env_vars = {
        "WHATSAPP_ACCESS_TOKEN": "test-access-token",
        "WHATSAPP_PHONE_NUMBER_ID": "106540352242922",
        "WHATSAPP_BUSINESS_ACCOUNT_ID": "102290129340398",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def fake_clock():
    """Simulated monotonic clock starting at t=0."""
    return FakeClock()


@pytest.fixture
def make_limiter(fake_clock):
    """Factory for rate limiters on the fake clock."""
    def _make(capacity: int = 3) -> RateLimiter:
        return RateLimiter(capacity, clock=fake_clock, sleep=fake_clock.sleep)
    return _make


@pytest.fixture
def make_dispatcher(fake_clock, make_limiter):
    """Factory for dispatchers whose every wait runs on the fake clock."""
    def _make(transport, capacity: int = 250, timeout=None, **retry_options) -> Dispatcher:
        retry_options.setdefault("base_delay", 1.0)
        return Dispatcher(
            transport=transport,
            rate_limiter=make_limiter(capacity),
            retry_policy=RetryPolicy(RetryConfig(**retry_options), sleep=fake_clock.sleep),
            timeout=timeout,
            clock=fake_clock,
        )
    return _make


@pytest.fixture
def send_text_request():
    """A send-message request descriptor."""
    return ApiRequest(
        method="POST",
        path="/106540352242922/messages",
        json_body={
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": "16505551234",
            "type": "text",
            "text": {"body": "hello", "preview_url": False},
        },
    )


@pytest.fixture
def client_config():
    """Client configuration with instant retries."""
    return ClientConfig(
        access_token="test-access-token",
        phone_number_id="106540352242922",
        business_account_id="102290129340398",
        max_requests_per_minute=10,
        max_retries=2,
        retry_delay_ms=0,
    )

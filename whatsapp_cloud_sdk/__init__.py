"""
WhatsApp Cloud SDK - async client for the WhatsApp Cloud API.

This package dispatches typed Graph API requests while:
- Respecting the requests-per-minute ceiling with a shared sliding window
- Retrying throttled and transient failures with backoff
- Turning error envelopes into structured errors with remediation hints

Features:
- Messages (text, media, location, template, reaction, read receipts)
- Media upload, lookup and deletion
- Message template listing
"""

__version__ = "0.1.0"

from .api.client import WhatsAppClient, create_client
from .config.settings import ClientConfig
from .dispatch.dispatcher import Dispatcher
from .errors import (
    ApiError,
    AuthenticationError,
    DispatchTimeoutError,
    RateLimitExceededError,
    RetriesExhaustedError,
    SerializationError,
    TransportError,
    ValidationError,
    WhatsAppError,
)
from .models.request import ApiRequest, ApiResponse
from .reliability import (
    ErrorCategory,
    ErrorClassifier,
    RateLimiter,
    RetryConfig,
    RetryPolicy,
)

__all__ = [
    # Main client
    "WhatsAppClient",
    "create_client",
    "ClientConfig",

    # Dispatch engine
    "Dispatcher",
    "RateLimiter",
    "ErrorClassifier",
    "ErrorCategory",
    "RetryConfig",
    "RetryPolicy",
    "ApiRequest",
    "ApiResponse",

    # Errors
    "WhatsAppError",
    "ApiError",
    "AuthenticationError",
    "TransportError",
    "RateLimitExceededError",
    "RetriesExhaustedError",
    "ValidationError",
    "SerializationError",
    "DispatchTimeoutError",
]

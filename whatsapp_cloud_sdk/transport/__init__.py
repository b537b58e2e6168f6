"""HTTP transports used by the dispatcher."""

from .base import RawResponse, Transport
from .http import HttpxTransport

__all__ = ["RawResponse", "Transport", "HttpxTransport"]

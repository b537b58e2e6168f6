"""Configuration module for the WhatsApp Cloud SDK."""

from .settings import ClientConfig

# Import all constants
from .constants import *

__all__ = [
    "ClientConfig",
    "GRAPH_API_HOST",
    "DEFAULT_API_VERSION",
    "RATE_WINDOW_SECONDS",
    "TRANSIENT_STATUS_CODES",
]

"""
Public API Layer

This layer contains the public-facing API of the WhatsApp Cloud SDK.
All user-facing classes and functions should be exposed through this layer.
"""

from .client import WhatsAppClient, create_client

__all__ = ["WhatsAppClient", "create_client"]

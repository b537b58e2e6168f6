"""Logging helpers for the WhatsApp Cloud SDK."""

from .logging import DispatchLogger

__all__ = ["DispatchLogger"]

"""Rate-limited dispatch engine."""

from .dispatcher import Dispatcher

__all__ = ["Dispatcher"]

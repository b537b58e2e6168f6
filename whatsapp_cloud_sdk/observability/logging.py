"""
Structured logging utility for the dispatch engine.

Provides a consistent logging interface with standard fields such as
request_id, method, path and attempt. The SDK never installs handlers;
applications configure the ``whatsapp_cloud_sdk`` logger as they see fit.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Optional


class DispatchLogger:
    """Structured logger rendering ``[key=value ...] message`` lines."""

    def __init__(self, component: str):
        """
        Initialize logger for a component.

        Args:
            component: Component name (e.g., "dispatcher", "rate_limiter")
        """
        self.component = component
        self.logger = logging.getLogger(f"whatsapp_cloud_sdk.{component}")

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with structured fields."""
        fields = [f"component={self.component}"]

        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")

        return f"[{' '.join(fields)}] {message}"

    def debug(self, message: str, request_id: Optional[str] = None, **kwargs):
        """Log debug message with structured fields."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format_message(message, request_id=request_id, **kwargs))

    def info(self, message: str, request_id: Optional[str] = None, **kwargs):
        """Log info message with structured fields."""
        self.logger.info(self._format_message(message, request_id=request_id, **kwargs))

    def warning(self, message: str, request_id: Optional[str] = None, **kwargs):
        """Log warning message with structured fields."""
        self.logger.warning(self._format_message(message, request_id=request_id, **kwargs))

    def error(self, message: str, request_id: Optional[str] = None,
              error: Optional[BaseException] = None, **kwargs):
        """Log error message with structured fields."""
        if error is not None:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)[:200]  # Truncate long error messages

        self.logger.error(self._format_message(message, request_id=request_id, **kwargs))

    @contextmanager
    def track_request(self, method: str, path: str, request_id: Optional[str] = None):
        """
        Context manager to track a logical request and log key events.

        Args:
            method: HTTP method
            path: Request path
            request_id: Optional request ID (generated if not provided)

        Yields:
            Dict with request metadata including request_id
        """
        if request_id is None:
            request_id = str(uuid.uuid4())[:8]

        start_time = time.time()

        self.debug("Dispatching request", request_id=request_id, method=method, path=path)

        metadata: Dict[str, Any] = {
            'request_id': request_id,
            'method': method,
            'path': path,
            'start_time': start_time,
            'attempts': 0,
        }

        try:
            yield metadata

            duration = time.time() - start_time
            self.info(
                "Completed request",
                request_id=request_id,
                method=method,
                path=path,
                attempts=metadata['attempts'],
                duration_ms=int(duration * 1000)
            )

        except Exception as e:
            duration = time.time() - start_time
            self.error(
                "Failed request",
                request_id=request_id,
                method=method,
                path=path,
                attempts=metadata['attempts'],
                duration_ms=int(duration * 1000),
                error=e
            )
            raise

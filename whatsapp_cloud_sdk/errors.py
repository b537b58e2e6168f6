"""
Error types for the WhatsApp Cloud SDK.

Every terminal failure surfaced by the dispatch engine is a subclass of
WhatsAppError and carries enough context (attempts made, last HTTP status,
error type/code, remediation hint) for the caller to decide whether to
retry manually, fix its input, or escalate.
"""

from typing import Any, Dict, Optional


class WhatsAppError(Exception):
    """
    Base exception for all SDK errors.

    Attributes:
        message: Error message
        status_code: Last HTTP status code if a response was received
        attempts: Number of HTTP round trips made for the logical request
        category: Error category value (see ErrorCategory) when classified
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        attempts: int = 0,
        category: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.attempts = attempts
        self.category = category

    def to_dict(self) -> Dict[str, Any]:
        """Flatten the error for structured logging."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "status_code": self.status_code,
            "attempts": self.attempts,
            "category": self.category,
        }


class ApiError(WhatsAppError):
    """
    The Graph API rejected the request.

    Built from the documented error envelope::

        {"error": {"message": ..., "type": ..., "code": ...,
                   "error_subcode": ..., "fbtrace_id": ...}}

    ``solution`` holds a remediation hint when the (type, code) pair is known.
    """

    def __init__(
        self,
        message: str,
        error_type: str,
        code: int,
        subcode: Optional[int] = None,
        fbtrace_id: str = "",
        solution: Optional[str] = None,
        status_code: Optional[int] = None,
        attempts: int = 0,
        category: Optional[str] = None
    ):
        super().__init__(message, status_code=status_code, attempts=attempts, category=category)
        self.error_type = error_type
        self.code = code
        self.subcode = subcode
        self.fbtrace_id = fbtrace_id
        self.solution = solution

    def __str__(self) -> str:
        text = f"WhatsApp API error: {self.message} (type: {self.error_type}, code: {self.code})"
        if self.solution:
            text += f". Solution: {self.solution}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "error_type": self.error_type,
            "code": self.code,
            "subcode": self.subcode,
            "fbtrace_id": self.fbtrace_id,
            "solution": self.solution,
        })
        return data


class AuthenticationError(ApiError):
    """Access token missing, invalid or expired."""


class TransportError(WhatsAppError):
    """Network or connection failure below the HTTP layer, or an unreadable error body."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.original_error = original_error


class RateLimitExceededError(WhatsAppError):
    """Throttled by the server while throttle retries are disabled."""

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

    def __str__(self) -> str:
        if self.retry_after is not None:
            return f"Rate limit exceeded. Try again in {self.retry_after:g} seconds"
        return "Rate limit exceeded"


class RetriesExhaustedError(WhatsAppError):
    """
    The retry budget ran out while the request kept failing transiently.

    Distinct from ApiError so callers can tell "never got through" apart
    from "server permanently rejected". ``last_error`` holds the ApiError or
    TransportError of the final attempt when one could be built.
    """

    def __init__(
        self,
        message: str,
        last_error: Optional[WhatsAppError] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.last_error = last_error

    @property
    def error_type(self) -> Optional[str]:
        return getattr(self.last_error, "error_type", None)

    @property
    def code(self) -> Optional[int]:
        return getattr(self.last_error, "code", None)

    @property
    def solution(self) -> Optional[str]:
        return getattr(self.last_error, "solution", None)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "error_type": self.error_type,
            "code": self.code,
            "solution": self.solution,
        })
        return data


class ValidationError(WhatsAppError):
    """Caller supplied malformed input; raised before any dispatch, never retried."""


class SerializationError(WhatsAppError):
    """A response body did not match the expected shape."""


class DispatchTimeoutError(WhatsAppError):
    """The total wall-clock ceiling for a logical send was reached."""

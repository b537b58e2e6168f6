"""
Error classification for Graph API responses.

Turns a raw HTTP status plus JSON error envelope (or a transport exception)
into a ClassifiedOutcome: Success, Retryable or Fatal. Fatal API errors are
enriched with a remediation hint from a static table. Classification is a
pure function of its inputs and the table.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

import httpx

from ..config.constants import THROTTLE_STATUS_CODE, TRANSIENT_STATUS_CODES
from ..errors import (
    ApiError,
    AuthenticationError,
    SerializationError,
    TransportError,
    WhatsAppError,
)


class ErrorCategory(Enum):
    """Standard error categories."""
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    SERIALIZATION = "serialization"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedOutcome:
    """Base of the three outcome variants."""
    status_code: Optional[int]


@dataclass(frozen=True)
class Success(ClassifiedOutcome):
    payload: Any = None
    headers: Optional[Mapping[str, str]] = None


@dataclass(frozen=True)
class Retryable(ClassifiedOutcome):
    """
    A transient failure worth another attempt.

    ``retry_after`` is the server-suggested delay in seconds, when given.
    ``error`` is the parsed ApiError/TransportError, kept so an exhausted
    retry budget can still report what the server said last.
    """
    category: ErrorCategory = ErrorCategory.UNKNOWN
    reason: str = ""
    retry_after: Optional[float] = None
    error: Optional[WhatsAppError] = None

    @property
    def is_throttle(self) -> bool:
        return self.category is ErrorCategory.RATE_LIMIT


@dataclass(frozen=True)
class Fatal(ClassifiedOutcome):
    error: WhatsAppError
    category: ErrorCategory = ErrorCategory.UNKNOWN


class ErrorClassifier:
    """Classifies Graph API responses and transport failures."""

    # Remediation hints keyed by "{error_type}-{code}", falling back to "{code}".
    # Extend this table to add hints; classification logic does not change.
    ERROR_SOLUTIONS: Dict[str, str] = {
        # Authentication and permissions
        "OAuthException-190": (
            "Check that your access token is valid and has not expired. "
            "You may need to generate a new one."
        ),
        "OAuthException-10": (
            "Ensure your app has the required permissions. "
            "Check your app settings in the Meta Developer Portal."
        ),
        "OAuthException-200": (
            "The token lacks the permission for this call. Grant "
            "whatsapp_business_messaging / whatsapp_business_management to the app."
        ),
        # Throttling
        "OAuthException-80004": (
            "Your application is making too many requests. "
            "Implement rate limiting or exponential backoff."
        ),
        "4-30": (
            "You have exceeded the rate at which you can send messages to this user. "
            "Wait and try again later."
        ),
        "130429": (
            "Cloud API message throughput has been reached. "
            "Slow down and retry after a short delay."
        ),
        "131056": (
            "Too many messages sent from this phone number to the same recipient "
            "in a short period. Wait before messaging this user again."
        ),
        # Parameters
        "GraphMethodException-100": (
            "One or more parameters in your request are invalid. "
            "Check the error details for specific fields to fix."
        ),
        "OAuthException-100": (
            "One or more parameters in your request are invalid. "
            "Check the error details for specific fields to fix."
        ),
        # Messages
        "131000": (
            "The message failed to send. Check that the recipient is a valid "
            "WhatsApp user and try again."
        ),
        "131005": (
            "Your message contains content that is blocked by WhatsApp. "
            "Modify your message and try again."
        ),
        "131014": (
            "The template you are trying to use has not been approved. "
            "Check the status of your template in the Meta Business Manager."
        ),
        "131047": (
            "More than 24 hours have passed since the recipient last replied. "
            "Send an approved template message instead."
        ),
        "132001": (
            "The recipient phone number is not a verified WhatsApp user. "
            "Ensure the number is correct and the user has WhatsApp installed."
        ),
        # Media
        "131009": (
            "The media upload failed. Ensure the file is a supported format and size "
            "(images < 5MB, videos < 16MB, documents < 100MB)."
        ),
        "131051": (
            "The media file you are trying to send could not be found. "
            "Check the media ID or URL."
        ),
        # Phone numbers
        "132000": (
            "The phone number you are trying to use is not enabled for WhatsApp "
            "Business API. Verify the number in Meta Business Manager."
        ),
        "133010": (
            "The phone number is not registered on the Cloud API. "
            "Register it before sending messages."
        ),
    }

    def __init__(self, transient_status_codes: Optional[FrozenSet[int]] = None):
        self.transient_status_codes = frozenset(
            TRANSIENT_STATUS_CODES if transient_status_codes is None else transient_status_codes
        )

    @classmethod
    def get_solution(cls, error_type: str, code: Union[int, str]) -> Optional[str]:
        """Look up the remediation hint for an (error_type, code) pair."""
        solution = cls.ERROR_SOLUTIONS.get(f"{error_type}-{code}")
        if solution is None:
            solution = cls.ERROR_SOLUTIONS.get(f"{code}")
        return solution

    def classify(
        self,
        status_code: int,
        body: Union[bytes, str, Mapping[str, Any], None] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> ClassifiedOutcome:
        """
        Classify one HTTP response.

        Args:
            status_code: HTTP status
            body: Raw body bytes/text, an already decoded JSON object, or None
            headers: Response headers (used for Retry-After)

        Returns:
            Success, Retryable or Fatal
        """
        decoded, decodable = self._decode_body(body)

        if 200 <= status_code < 300:
            if not decodable:
                return Fatal(
                    status_code=status_code,
                    error=SerializationError(
                        "Response body is not valid JSON",
                        status_code=status_code,
                        category=ErrorCategory.SERIALIZATION.value,
                    ),
                    category=ErrorCategory.SERIALIZATION,
                )
            return Success(
                status_code=status_code,
                payload={} if decoded is None else decoded,
                headers=headers,
            )

        category = self.categorize_status(status_code)
        error = self.parse_error(status_code, decoded) if decodable else None

        if status_code == THROTTLE_STATUS_CODE or status_code in self.transient_status_codes:
            reason = error.message if error is not None else f"HTTP {status_code}"
            return Retryable(
                status_code=status_code,
                category=category,
                reason=reason,
                retry_after=self.parse_retry_after(headers),
                error=error,
            )

        if error is None:
            return Fatal(
                status_code=status_code,
                error=TransportError(
                    f"HTTP {status_code} with unreadable error body",
                    status_code=status_code,
                    category=category.value,
                ),
                category=category,
            )

        return Fatal(status_code=status_code, error=error, category=category)

    def classify_exception(self, error: Exception) -> ClassifiedOutcome:
        """
        Classify a failure raised before any HTTP response arrived.

        Timeouts and connection failures are retryable; other transport
        errors are fatal.
        """
        if isinstance(error, httpx.TimeoutException):
            category = ErrorCategory.TIMEOUT
        elif isinstance(error, (httpx.ConnectError, httpx.RemoteProtocolError)):
            category = ErrorCategory.NETWORK
        else:
            return Fatal(
                status_code=None,
                error=TransportError(
                    f"HTTP error: {error}",
                    original_error=error,
                    category=ErrorCategory.NETWORK.value,
                ),
                category=ErrorCategory.NETWORK,
            )

        return Retryable(
            status_code=None,
            category=category,
            reason=f"{type(error).__name__}: {error}",
            error=TransportError(
                f"HTTP error: {error}",
                original_error=error,
                category=category.value,
            ),
        )

    @classmethod
    def parse_error(cls, status_code: int, body: Any) -> Optional[ApiError]:
        """
        Build an ApiError from a decoded error envelope.

        Returns None when the body does not hold a usable envelope.
        """
        if not isinstance(body, Mapping):
            return None
        envelope = body.get("error")
        if not isinstance(envelope, Mapping) or "code" not in envelope:
            return None

        try:
            code = int(envelope["code"])
        except (TypeError, ValueError):
            return None

        subcode = envelope.get("error_subcode")
        try:
            subcode = int(subcode) if subcode is not None else None
        except (TypeError, ValueError):
            subcode = None

        error_type = str(envelope.get("type", ""))
        message = str(envelope.get("message", ""))
        details = envelope.get("error_data", {})
        if isinstance(details, Mapping) and details.get("details"):
            message = f"{message}: {details['details']}" if message else str(details["details"])

        if status_code == 401 or (error_type == "OAuthException" and code == 190):
            error_class = AuthenticationError
            category = ErrorCategory.AUTHENTICATION
        else:
            error_class = ApiError
            category = cls.categorize_status(status_code)

        return error_class(
            message=message,
            error_type=error_type,
            code=code,
            subcode=subcode,
            fbtrace_id=str(envelope.get("fbtrace_id", "")),
            solution=cls.get_solution(error_type, code),
            status_code=status_code,
            category=category.value,
        )

    @staticmethod
    def parse_retry_after(headers: Optional[Mapping[str, str]]) -> Optional[float]:
        """Extract a Retry-After delay in seconds, if present and numeric."""
        if not headers:
            return None
        value = None
        for key, header_value in headers.items():
            if key.lower() == "retry-after":
                value = header_value
                break
        if value is None:
            return None
        try:
            delay = float(value)
        except (TypeError, ValueError):
            return None
        return delay if delay >= 0 else None

    @staticmethod
    def categorize_status(status_code: int) -> ErrorCategory:
        """Categorize error based on HTTP status code."""
        if status_code == 401:
            return ErrorCategory.AUTHENTICATION
        elif status_code == 403:
            return ErrorCategory.PERMISSION_DENIED
        elif status_code == 404:
            return ErrorCategory.NOT_FOUND
        elif status_code == 429:
            return ErrorCategory.RATE_LIMIT
        elif status_code >= 500:
            return ErrorCategory.SERVER_ERROR
        elif status_code >= 400:
            return ErrorCategory.VALIDATION
        else:
            return ErrorCategory.UNKNOWN

    @staticmethod
    def _decode_body(body: Union[bytes, str, Mapping[str, Any], None]):
        """Return (decoded, decodable). Empty bodies decode to None."""
        if body is None:
            return None, True
        if isinstance(body, (bytes, bytearray)):
            if not body.strip():
                return None, True
            try:
                body = body.decode("utf-8")
            except UnicodeDecodeError:
                return None, False
        if isinstance(body, str):
            if not body.strip():
                return None, True
            try:
                return json.loads(body), True
            except ValueError:
                return None, False
        return body, True

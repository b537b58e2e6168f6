from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any, Tuple

from ..errors import ValidationError


ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})


class ApiRequest(BaseModel):
    """
    Request descriptor handed to the dispatcher.

    Built by the payload layer; the dispatcher transports it unmodified and
    never interprets the body. ``path`` is relative to the versioned base URL.
    """
    method: str = Field(..., description="HTTP method")
    path: str = Field(..., description="Path under the versioned Graph API prefix")
    params: Optional[Dict[str, Any]] = Field(None, description="Query string parameters")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")
    json_body: Optional[Any] = Field(None, description="JSON payload")
    data: Optional[Dict[str, Any]] = Field(None, description="Form fields (multipart uploads)")
    files: Optional[Dict[str, Tuple[str, bytes, str]]] = Field(
        None,
        description="Multipart files as {field: (filename, content, mime_type)}"
    )

    @field_validator("method")
    def validate_method(cls, v):
        method = v.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"unsupported HTTP method: {v}")
        return method

    @field_validator("path")
    def validate_path(cls, v):
        if not v.startswith("/"):
            raise ValueError(f"path must start with '/': {v!r}")
        return v

    @classmethod
    def build(cls, method: str, path: str, **kwargs) -> "ApiRequest":
        """Construct a request, raising the SDK ValidationError on malformed input."""
        try:
            return cls(method=method, path=path, **kwargs)
        except ValueError as e:
            # pydantic.ValidationError is a ValueError subclass
            raise ValidationError(f"Invalid request: {e}") from e

    def describe(self) -> str:
        return f"{self.method} {self.path}"


class ApiResponse(BaseModel):
    """Successful result of a dispatched request."""
    status_code: int
    data: Any = Field(default_factory=dict, description="Decoded JSON body")
    headers: Dict[str, str] = Field(default_factory=dict)
    attempts: int = Field(default=1, ge=1, description="HTTP round trips made")
    elapsed: float = Field(default=0.0, ge=0.0, description="Seconds spent, waits included")

"""Client configuration."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from ..errors import ValidationError
from .constants import (
    DEFAULT_API_VERSION,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_REQUESTS_PER_MINUTE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_MS,
    ENV_ACCESS_TOKEN,
    ENV_API_VERSION,
    ENV_BUSINESS_ACCOUNT_ID,
    ENV_MAX_REQUESTS_PER_MINUTE,
    ENV_MAX_RETRIES,
    ENV_PHONE_NUMBER_ID,
    ENV_RETRY_DELAY_MS,
    ENV_RETRY_ON_THROTTLE,
    GRAPH_API_HOST,
)


class ClientConfig(BaseModel):
    """
    Configuration for a WhatsAppClient.

    Supplied once at construction and immutable afterwards. Rotating the
    access token goes through WhatsAppClient.update_access_token(), which
    keeps the transport and the rate-window accounting.
    """
    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., min_length=1, description="Graph API bearer token")
    phone_number_id: str = Field(..., min_length=1, description="Sender phone number ID")
    business_account_id: Optional[str] = Field(None, description="WhatsApp Business Account ID")
    version: str = Field(default=DEFAULT_API_VERSION, description="Graph API version")

    # Dispatch engine
    max_requests_per_minute: int = Field(default=DEFAULT_MAX_REQUESTS_PER_MINUTE, gt=0)
    retry_after_too_many_requests: bool = Field(
        default=True,
        description="Retry requests the server throttled with HTTP 429"
    )
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_delay_ms: int = Field(default=DEFAULT_RETRY_DELAY_MS, ge=0, description="Base backoff delay")

    # Timeouts (seconds)
    timeout_seconds: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0, description="Per-request HTTP timeout")
    dispatch_timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Ceiling on total wall-clock time of one logical send, waits included"
    )

    @property
    def base_url(self) -> str:
        return f"{GRAPH_API_HOST}/{self.version}"

    @property
    def retry_delay(self) -> float:
        """Base backoff delay in seconds."""
        return self.retry_delay_ms / 1000.0

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides) -> "ClientConfig":
        """
        Build a config from environment variables (and a .env file if present).

        Keyword overrides win over the environment.

        Raises:
            ValidationError: If the access token or phone number ID is missing
        """
        load_dotenv(dotenv_path)

        values = {
            "access_token": os.getenv(ENV_ACCESS_TOKEN),
            "phone_number_id": os.getenv(ENV_PHONE_NUMBER_ID),
            "business_account_id": os.getenv(ENV_BUSINESS_ACCOUNT_ID),
            "version": os.getenv(ENV_API_VERSION),
            "max_requests_per_minute": os.getenv(ENV_MAX_REQUESTS_PER_MINUTE),
            "max_retries": os.getenv(ENV_MAX_RETRIES),
            "retry_delay_ms": os.getenv(ENV_RETRY_DELAY_MS),
        }
        throttle_flag = os.getenv(ENV_RETRY_ON_THROTTLE)
        if throttle_flag is not None:
            values["retry_after_too_many_requests"] = throttle_flag.strip().lower() in ("1", "true", "yes", "on")

        values = {key: value for key, value in values.items() if value is not None}
        values.update(overrides)

        for required, env_var in (("access_token", ENV_ACCESS_TOKEN), ("phone_number_id", ENV_PHONE_NUMBER_ID)):
            if not values.get(required):
                raise ValidationError(f"Missing required field: {required} (set {env_var})")

        return cls(**values)

"""
Graph API constants.

Defaults mirror the documented WhatsApp Cloud API limits. Update
DEFAULT_API_VERSION when Meta deprecates the current Graph version.
"""

GRAPH_API_HOST = "https://graph.facebook.com"
DEFAULT_API_VERSION = "v22.0"

# Admission window used by the local rate limiter (seconds)
RATE_WINDOW_SECONDS = 60.0

DEFAULT_MAX_REQUESTS_PER_MINUTE = 250
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_MAX_RETRY_DELAY = 60.0
DEFAULT_HTTP_TIMEOUT = 30.0

# Statuses retried besides 429
TRANSIENT_STATUS_CODES = frozenset({500, 502, 503, 504})
THROTTLE_STATUS_CODE = 429

# Environment variables read by ClientConfig.from_env()
ENV_ACCESS_TOKEN = "WHATSAPP_ACCESS_TOKEN"
ENV_PHONE_NUMBER_ID = "WHATSAPP_PHONE_NUMBER_ID"
ENV_BUSINESS_ACCOUNT_ID = "WHATSAPP_BUSINESS_ACCOUNT_ID"
ENV_API_VERSION = "WHATSAPP_API_VERSION"
ENV_MAX_REQUESTS_PER_MINUTE = "WHATSAPP_MAX_REQUESTS_PER_MINUTE"
ENV_MAX_RETRIES = "WHATSAPP_MAX_RETRIES"
ENV_RETRY_DELAY_MS = "WHATSAPP_RETRY_DELAY_MS"
ENV_RETRY_ON_THROTTLE = "WHATSAPP_RETRY_ON_THROTTLE"

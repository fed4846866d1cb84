# route_failover/constants.py
"""
Default constants for route-failover.
All tunable values are centralised here so they can be overridden via
RouterConfig without touching internal logic.
"""

# ---------------------------------------------------------------------------
# Upstream provider
# ---------------------------------------------------------------------------
DEFAULT_UPSTREAM_URL: str = "https://openrouter.ai/api/v1/chat/completions"
"""OpenAI-compatible chat completions endpoint."""

DEFAULT_TIMEOUT_SECONDS: float = 60.0
"""Per-attempt timeout. A timed-out attempt counts as an upstream rejection."""

DEFAULT_TITLE: str = "route-failover"
"""Sent as X-Title for provider-side attribution."""

MAX_ERROR_DETAIL_CHARS: int = 2_000
"""Upstream error bodies longer than this are truncated in last_error."""

# ---------------------------------------------------------------------------
# Public error texts (inbound HTTP contract)
# ---------------------------------------------------------------------------
ERROR_MESSAGE_REQUIRED: str = "Message is required"
ERROR_NO_KEYS: str = "No API keys configured"
ERROR_NO_MODELS: str = "No models configured"
ERROR_ALL_FAILED: str = "All API keys and models failed"
ERROR_STORE_UNAVAILABLE: str = "Registry unavailable"

# ---------------------------------------------------------------------------
# Cross-origin headers, attached to every response
# ---------------------------------------------------------------------------
CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000
DEFAULT_LOG_LEVEL: str = "INFO"

# ---------------------------------------------------------------------------
# Redis key names
# ---------------------------------------------------------------------------
REDIS_PREFIX: str = "route_failover"
REDIS_CREDENTIALS_KEY: str = REDIS_PREFIX + ":credentials"
REDIS_MODELS_KEY: str = REDIS_PREFIX + ":models"

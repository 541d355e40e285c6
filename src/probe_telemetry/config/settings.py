from __future__ import annotations

"""Connection settings for the telemetry API client."""

from dataclasses import dataclass
from functools import lru_cache

from ..http_utils import ensure_http_url
from . import runtime

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
DEFAULT_CONNECTION_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class TelemetrySettings:
    base_url: str
    request_timeout_seconds: float
    connection_timeout_seconds: float


@lru_cache(maxsize=1)
def get_telemetry_settings() -> TelemetrySettings:
    """Resolve settings from the environment (and .env defaults), validating the base URL."""
    base_url = runtime.env_str("TELEMETRY_BASE_URL", or_value=DEFAULT_BASE_URL)
    request_timeout = runtime.env_seconds(
        "TELEMETRY_REQUEST_TIMEOUT_SECONDS", or_value=DEFAULT_REQUEST_TIMEOUT_SECONDS
    )
    connection_timeout = runtime.env_seconds(
        "TELEMETRY_CONNECTION_TIMEOUT_SECONDS", or_value=DEFAULT_CONNECTION_TIMEOUT_SECONDS
    )

    return TelemetrySettings(
        base_url=ensure_http_url(str(base_url)).rstrip("/"),
        request_timeout_seconds=float(request_timeout),
        connection_timeout_seconds=float(connection_timeout),
    )

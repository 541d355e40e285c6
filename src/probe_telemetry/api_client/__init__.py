"""HTTP client for the telemetry server API."""

from .client import TelemetryApiClient
from .protocols import ITelemetryApi
from .request_operations import TelemetryRequestOperations
from .session_manager import TelemetrySessionManager

__all__ = [
    "ITelemetryApi",
    "TelemetryApiClient",
    "TelemetryRequestOperations",
    "TelemetrySessionManager",
]

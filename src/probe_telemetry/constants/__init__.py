"""Constants package for shared constant values."""

from .network import HTTP_CLIENT_ERROR_MIN, HTTP_NOT_FOUND, HTTP_REDIRECT_MIN, HTTP_SUCCESS_MIN
from .refresh import (
    CHART_WINDOW_SIZE,
    DASHBOARD_MAX_CLIENTS,
    DASHBOARD_PER_CLIENT_LIMIT,
    DASHBOARD_RECENT_LIMIT,
    DEFAULT_CONFIG_FILE_NAME,
    DETAIL_REQUEST_LIMIT,
    RECENT_ACTIVITY_LIMIT,
    REFRESH_INTERVAL_SECONDS,
)

__all__ = [
    "HTTP_SUCCESS_MIN",
    "HTTP_REDIRECT_MIN",
    "HTTP_CLIENT_ERROR_MIN",
    "HTTP_NOT_FOUND",
    "REFRESH_INTERVAL_SECONDS",
    "CHART_WINDOW_SIZE",
    "DASHBOARD_MAX_CLIENTS",
    "DASHBOARD_PER_CLIENT_LIMIT",
    "DASHBOARD_RECENT_LIMIT",
    "DETAIL_REQUEST_LIMIT",
    "RECENT_ACTIVITY_LIMIT",
    "DEFAULT_CONFIG_FILE_NAME",
]

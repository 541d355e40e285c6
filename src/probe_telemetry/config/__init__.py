"""Shared configuration helpers and dataclasses."""

from ..exceptions import ConfigurationError
from .runtime import env_bool, env_float, env_int, env_seconds, env_str
from .settings import TelemetrySettings, get_telemetry_settings

__all__ = [
    "ConfigurationError",
    "TelemetrySettings",
    "env_bool",
    "env_float",
    "env_int",
    "env_seconds",
    "env_str",
    "get_telemetry_settings",
]

"""Telemetry data models package."""

from .client import Client, ClientStatus
from .config_file import ClientConfig, ConfigFile, Target, default_client_config, default_config_document
from .probe_request import LATENCY_METRICS, ProbeRequest

__all__ = [
    "Client",
    "ClientStatus",
    "ClientConfig",
    "ConfigFile",
    "Target",
    "default_client_config",
    "default_config_document",
    "ProbeRequest",
    "LATENCY_METRICS",
]

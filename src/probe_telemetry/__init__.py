"""Telemetry aggregation and refresh engine for network-probe dashboards."""

__version__ = "0.1.0"

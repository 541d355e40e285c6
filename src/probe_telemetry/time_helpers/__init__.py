"""Timestamp parsing and formatting helpers."""

from .timestamp_parser import format_clock_label, parse_timestamp

__all__ = ["format_clock_label", "parse_timestamp"]

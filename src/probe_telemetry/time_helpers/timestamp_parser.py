from __future__ import annotations

"""Shared timestamp parsing helpers."""

from datetime import datetime, timezone, tzinfo
from typing import Any, Optional

from dateutil import parser as dateutil_parser

# Go's zero time.Time serialises to this value
_ZERO_TIME_PREFIX = "0001-01-01T00:00:00"


def parse_timestamp(value: Any, *, allow_none: bool = False) -> datetime | None:
    """
    Convert an RFC3339 string or datetime into an aware UTC datetime.

    Args:
        value: Timestamp-like input (iso string or datetime).
        allow_none: When True, return None on missing/zero input instead of raising.

    Raises:
        ValueError: If the value is missing (and allow_none is False) or unparseable.
        TypeError: If the value is of an unsupported type.
    """
    if value is None:
        if allow_none:
            return None
        raise ValueError("Timestamp value is required")

    if isinstance(value, datetime):
        return _to_utc(value)

    if not isinstance(value, str):
        raise TypeError(f"Unsupported timestamp type: {type(value)}")

    token = value.strip()
    if not token or token.startswith(_ZERO_TIME_PREFIX):
        if allow_none:
            return None
        raise ValueError(f"Timestamp string is empty or zero: {value!r}")

    return _to_utc(dateutil_parser.isoparse(token))


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_clock_label(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """Render a timestamp as an ``HH:MM:SS`` chart label, optionally in another timezone."""
    if tz is not None:
        value = value.astimezone(tz)
    return value.strftime("%H:%M:%S")

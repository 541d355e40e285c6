"""
Probe request data model.

A probe request is one recorded network check performed by a client against a
target URL, with a latency breakdown in milliseconds. Requests are immutable
historical records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple

from ..constants import HTTP_CLIENT_ERROR_MIN
from ..time_helpers import parse_timestamp

# Latency metrics exposed to stats and charts, in presentation order.
LATENCY_METRICS: Tuple[str, ...] = ("total_time", "dns_time", "tcp_time", "tls_time")


@dataclass(frozen=True)
class ProbeRequest:
    """One recorded probe. Ordering key is ``start_time``."""

    id: str
    client_id: str
    target_name: str
    url: str
    start_time: datetime
    status_code: Optional[int] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    dns_time: float = 0
    tcp_time: float = 0
    tls_time: float = 0
    total_time: float = 0
    method: str = ""
    end_time: Optional[datetime] = None
    request_time: float = 0
    response_time: float = 0

    @property
    def is_successful(self) -> bool:
        """True iff no error was recorded and the status code is below 400.

        An error always wins over a status code. A missing status code with no
        error is not a success either: there is no response to judge.
        """
        if self.error:
            return False
        if self.status_code is None:
            return False
        return self.status_code < HTTP_CLIENT_ERROR_MIN

    @property
    def is_failed(self) -> bool:
        return not self.is_successful

    def metric(self, name: str) -> float:
        """Return one of LATENCY_METRICS by name."""
        if name not in LATENCY_METRICS:
            raise KeyError(f"Unknown latency metric: {name}")
        return getattr(self, name)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], client_id: str = "") -> "ProbeRequest":
        """
        Build a ProbeRequest from the server's JSON representation.

        Args:
            payload: Decoded JSON object using the server's camelCase keys
            client_id: Owning client, used when the payload does not carry one

        Returns:
            ProbeRequest instance

        Raises:
            ValueError: If ``startTime`` is missing or unparseable
        """
        start_time = parse_timestamp(payload.get("startTime"))
        assert start_time is not None

        status_code = payload.get("statusCode")
        return cls(
            id=str(payload.get("id") or ""),
            client_id=str(payload.get("clientId") or client_id),
            target_name=str(payload.get("targetName") or ""),
            url=str(payload.get("url") or ""),
            start_time=start_time,
            status_code=int(status_code) if status_code is not None else None,
            # The server encodes "no error" as an empty string
            error=payload.get("error") or None,
            error_type=payload.get("errorType") or None,
            dns_time=_duration(payload, "dnsTime"),
            tcp_time=_duration(payload, "tcpTime"),
            tls_time=_duration(payload, "tlsTime"),
            total_time=_duration(payload, "totalTime"),
            method=str(payload.get("method") or ""),
            end_time=parse_timestamp(payload.get("endTime"), allow_none=True),
            request_time=_duration(payload, "requestTime"),
            response_time=_duration(payload, "responseTime"),
        )


def _duration(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be numeric (got {value!r})") from exc

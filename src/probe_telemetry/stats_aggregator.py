"""
Rollup statistics over a set of probe requests.

Averages cover successful requests only and are rounded half-up to whole
milliseconds. When no request succeeded every average is 0, which reads the
same as an instant response; callers that need to tell the two apart should
check ``success_count``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List

from .data_models import ProbeRequest

_PERCENT = 100


@dataclass(frozen=True)
class RequestStats:
    """Counts and mean latencies for a request set."""

    total: int = 0
    success_count: int = 0
    error_count: int = 0
    avg_total_time: int = 0
    avg_dns_time: int = 0
    avg_tcp_time: int = 0
    avg_tls_time: int = 0

    @property
    def success_rate(self) -> int:
        """Whole-number success percentage; 100 for an empty set."""
        if self.total == 0:
            return _PERCENT
        return _round_half_up(self.success_count / self.total * _PERCENT)

    def averages(self) -> dict:
        return {
            "total_time": self.avg_total_time,
            "dns_time": self.avg_dns_time,
            "tcp_time": self.avg_tcp_time,
            "tls_time": self.avg_tls_time,
        }


def aggregate_request_stats(requests: Iterable[ProbeRequest]) -> RequestStats:
    """
    Compute RequestStats for ``requests``.

    A request with an error is a failure even when it also carries a status
    code below 400.
    """
    total = 0
    successful: List[ProbeRequest] = []
    for request in requests:
        total += 1
        if request.is_successful:
            successful.append(request)

    return RequestStats(
        total=total,
        success_count=len(successful),
        error_count=total - len(successful),
        avg_total_time=_mean(request.total_time for request in successful),
        avg_dns_time=_mean(request.dns_time for request in successful),
        avg_tcp_time=_mean(request.tcp_time for request in successful),
        avg_tls_time=_mean(request.tls_time for request in successful),
    )


def _mean(values: Iterable[float]) -> int:
    items = list(values)
    if not items:
        return 0
    return _round_half_up(sum(items) / len(items))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

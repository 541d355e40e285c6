"""
Fixed-size time series for latency charts.

The builder sorts a copy of the window by ``start_time``, keeps the trailing
``window_size`` entries and explodes them into parallel arrays. Failed
requests put ``None`` in every metric array so indices stay aligned with the
labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Iterable, List, Optional, Sequence, Tuple

from .constants import CHART_WINDOW_SIZE
from .data_models import LATENCY_METRICS, ProbeRequest
from .time_helpers import format_clock_label

SeriesValues = Tuple[Optional[float], ...]


@dataclass(frozen=True)
class ChartWindow:
    """Trailing window of requests, ascending by start time, plus per-metric arrays."""

    requests: Tuple[ProbeRequest, ...] = ()
    labels: Tuple[str, ...] = ()
    total_time: SeriesValues = ()
    dns_time: SeriesValues = ()
    tcp_time: SeriesValues = ()
    tls_time: SeriesValues = ()

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def is_empty(self) -> bool:
        return not self.labels

    def series(self, metric: str) -> SeriesValues:
        if metric not in LATENCY_METRICS:
            raise KeyError(f"Unknown latency metric: {metric}")
        return getattr(self, metric)


def sort_by_start_time(requests: Iterable[ProbeRequest]) -> List[ProbeRequest]:
    """Stable ascending copy; the input is left untouched."""
    return sorted(requests, key=lambda request: request.start_time)


def build_chart_window(
    requests: Sequence[ProbeRequest],
    window_size: int = CHART_WINDOW_SIZE,
    tz: Optional[tzinfo] = None,
) -> ChartWindow:
    """
    Derive the chart projection for ``requests``.

    Args:
        requests: Request window in any order
        window_size: Number of most recent requests to keep (K)
        tz: Timezone for ``HH:MM:SS`` labels; defaults to the timestamps' own (UTC)

    Returns:
        ChartWindow whose arrays all have length ``min(window_size, len(requests))``
    """
    if window_size < 0:
        raise ValueError(f"window_size must be non-negative (got {window_size})")

    ordered = sort_by_start_time(requests)
    trailing = ordered[len(ordered) - window_size :] if window_size else []

    series = {metric: tuple(_metric_value(request, metric) for request in trailing) for metric in LATENCY_METRICS}

    return ChartWindow(
        requests=tuple(trailing),
        labels=tuple(format_clock_label(request.start_time, tz) for request in trailing),
        total_time=series["total_time"],
        dns_time=series["dns_time"],
        tcp_time=series["tcp_time"],
        tls_time=series["tls_time"],
    )


def _metric_value(request: ProbeRequest, metric: str) -> Optional[float]:
    # A failed probe has no meaningful latency breakdown
    if request.is_failed:
        return None
    return request.metric(metric)

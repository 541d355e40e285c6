"""Single-client page: latest client record, request window, stats and chart."""

from __future__ import annotations

import asyncio
import logging
from datetime import tzinfo
from typing import Callable, Optional, Tuple

from ..api_client import ITelemetryApi
from ..chart_series_builder import ChartWindow, build_chart_window
from ..constants import CHART_WINDOW_SIZE, DETAIL_REQUEST_LIMIT, HTTP_NOT_FOUND, RECENT_ACTIVITY_LIMIT
from ..data_models import Client, ProbeRequest
from ..exceptions import TransportError
from ..refresh_scheduler import RefreshScheduler
from ..request_window_store import RequestWindowStore
from ..stats_aggregator import RequestStats, aggregate_request_stats
from .base import ScheduledView

logger = logging.getLogger(__name__)


class ClientDetailsView(ScheduledView):
    """
    Detail view for one client.

    The client record and its request window are fetched concurrently and each
    is applied as soon as it arrives. Stats and the chart window are derived
    from whatever window is current, never stored separately.
    """

    def __init__(
        self,
        api: ITelemetryApi,
        client_id: str,
        *,
        limit: int = DETAIL_REQUEST_LIMIT,
        chart_window_size: int = CHART_WINDOW_SIZE,
        label_tz: Optional[tzinfo] = None,
        store: Optional[RequestWindowStore] = None,
        scheduler: Optional[RefreshScheduler] = None,
        on_update: Optional[Callable[["ClientDetailsView"], None]] = None,
    ):
        super().__init__(f"client-{client_id}", scheduler=scheduler, on_update=on_update)
        self._api = api
        self.client_id = client_id
        self.limit = limit
        self.chart_window_size = chart_window_size
        self.label_tz = label_tz
        self.store = store or RequestWindowStore(api)
        self._client: Optional[Client] = None
        self._issued_sequence = 0
        self._applied_sequence = 0
        self._derived_for: Optional[Tuple[ProbeRequest, ...]] = None
        self._stats = RequestStats()
        self._chart = ChartWindow()

    @property
    def client(self) -> Optional[Client]:
        """Latest client record; None until the first successful fetch."""
        return self._client

    @property
    def requests(self) -> Tuple[ProbeRequest, ...]:
        return self.store.window(self.client_id)

    @property
    def stats(self) -> RequestStats:
        self._ensure_derived()
        return self._stats

    @property
    def chart(self) -> ChartWindow:
        self._ensure_derived()
        return self._chart

    def recent_activity(self, count: int = RECENT_ACTIVITY_LIMIT) -> Tuple[ProbeRequest, ...]:
        """First ``count`` requests of the window, in server order."""
        return self.requests[:count]

    async def refresh(self) -> None:
        results = await asyncio.gather(
            self._refresh_client(),
            self.store.refresh(self.client_id, self.limit),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            raise failures[0]

    async def _refresh_client(self) -> None:
        self._issued_sequence += 1
        sequence = self._issued_sequence
        try:
            client = await self._api.fetch_client(self.client_id)
        except TransportError as exc:
            if exc.status_code == HTTP_NOT_FOUND and self._accept(sequence):
                logger.info("Client %s no longer exists on the server", self.client_id)
                self._client = None
            raise
        if self._accept(sequence):
            self._client = client

    def _accept(self, sequence: int) -> bool:
        if sequence < self._applied_sequence:
            logger.debug(
                "Discarding client record from refresh %d; %d already applied", sequence, self._applied_sequence
            )
            return False
        self._applied_sequence = sequence
        return True

    def _ensure_derived(self) -> None:
        window = self.store.window(self.client_id)
        if window is self._derived_for:
            return
        self._stats = aggregate_request_stats(window)
        self._chart = build_chart_window(window, self.chart_window_size, self.label_tz)
        self._derived_for = window

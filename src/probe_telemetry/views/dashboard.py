"""Fleet-wide dashboard: client counts plus the most recent probes across clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from ..api_client import ITelemetryApi
from ..client_registry import ClientRegistryView
from ..constants import DASHBOARD_MAX_CLIENTS, DASHBOARD_PER_CLIENT_LIMIT, DASHBOARD_RECENT_LIMIT
from ..data_models import ProbeRequest
from ..multi_client_merger import TaggedRequest
from ..refresh_scheduler import RefreshScheduler
from ..request_window_store import RequestWindowStore
from ..stats_aggregator import aggregate_request_stats
from .base import ScheduledView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSummary:
    total_clients: int = 0
    online_clients: int = 0
    offline_clients: int = 0
    total_requests: int = 0
    error_requests: int = 0
    success_rate: int = 100

    @classmethod
    def build(cls, registry: ClientRegistryView, requests: Iterable[ProbeRequest]) -> "DashboardSummary":
        stats = aggregate_request_stats(requests)
        online = registry.online_count()
        return cls(
            total_clients=registry.total_count(),
            online_clients=online,
            offline_clients=registry.total_count() - online,
            total_requests=stats.total,
            error_requests=stats.error_count,
            success_rate=stats.success_rate,
        )


class DashboardView(ScheduledView):
    """Refreshes the registry, then merges recent probes of the first online clients."""

    def __init__(
        self,
        api: ITelemetryApi,
        *,
        max_clients: int = DASHBOARD_MAX_CLIENTS,
        per_client_limit: int = DASHBOARD_PER_CLIENT_LIMIT,
        recent_limit: int = DASHBOARD_RECENT_LIMIT,
        scheduler: Optional[RefreshScheduler] = None,
        on_update: Optional[Callable[["DashboardView"], None]] = None,
    ):
        super().__init__("dashboard", scheduler=scheduler, on_update=on_update)
        self.registry = ClientRegistryView(api)
        self.store = RequestWindowStore(api, self.registry)
        self.max_clients = max_clients
        self.per_client_limit = per_client_limit
        self.recent_limit = recent_limit
        self._recent: Tuple[TaggedRequest, ...] = ()
        self._summary = DashboardSummary()

    @property
    def recent_requests(self) -> Tuple[TaggedRequest, ...]:
        return self._recent

    @property
    def summary(self) -> DashboardSummary:
        return self._summary

    async def refresh(self) -> None:
        await self.registry.refresh()
        self.store.prune(self.registry.client_ids())

        result = await self.store.merge_across_online(
            max_clients=self.max_clients,
            per_client_limit=self.per_client_limit,
            recent_limit=self.recent_limit,
        )
        self._recent = result.recent
        self._summary = DashboardSummary.build(self.registry, result.all_requests())
        logger.debug(
            "Dashboard refreshed: %d clients, %d recent requests, %d failed fetches",
            self._summary.total_clients,
            len(self._recent),
            len(result.failed_client_ids),
        )

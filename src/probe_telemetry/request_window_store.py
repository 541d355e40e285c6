"""
Per-client bounded history of recent probe requests.

Windows are replaced wholesale on every refresh, never appended to, so a
missed or duplicated fetch heals on the next cycle. The mapping of windows is
itself swapped on each change, giving readers a consistent snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from .api_client import ITelemetryApi
from .client_registry import ClientRegistryView
from .constants import DASHBOARD_MAX_CLIENTS, DASHBOARD_PER_CLIENT_LIMIT, DASHBOARD_RECENT_LIMIT
from .data_models import Client, ProbeRequest
from .exceptions import ApplicationError
from .multi_client_merger import TaggedRequest, merge_client_requests
from .network_errors import TRANSPORT_ERROR_TYPES

logger = logging.getLogger(__name__)

RequestWindow = Tuple[ProbeRequest, ...]

# Per-client fetch failures isolated during a multi-client merge.
CLIENT_FETCH_ERRORS = (ApplicationError,) + TRANSPORT_ERROR_TYPES


@dataclass(frozen=True)
class MergeResult:
    """Outcome of one multi-client fetch-and-merge cycle."""

    recent: Tuple[TaggedRequest, ...] = ()
    windows: Mapping[str, RequestWindow] = field(default_factory=dict)
    failed_client_ids: Tuple[str, ...] = ()

    def all_requests(self) -> List[ProbeRequest]:
        """Every request fetched this cycle, before truncation to the recent feed."""
        return [request for window in self.windows.values() for request in window]


class RequestWindowStore:
    """Holds the latest request window for each client."""

    def __init__(self, api: ITelemetryApi, registry: Optional[ClientRegistryView] = None):
        self._api = api
        self._registry = registry
        self._windows: Mapping[str, RequestWindow] = MappingProxyType({})
        self._issued_sequence = 0
        self._applied: Dict[str, int] = {}
        self._pruned_at = 0
        self._kept: FrozenSet[str] = frozenset()

    def window(self, client_id: str) -> RequestWindow:
        """Latest window for ``client_id``; empty when none has been fetched."""
        return self._windows.get(client_id, ())

    def windows(self) -> Mapping[str, RequestWindow]:
        return self._windows

    async def refresh(self, client_id: str, limit: int) -> RequestWindow:
        """
        Fetch up to ``limit`` most recent requests and replace the client's window.

        Raises:
            TransportError: If the fetch fails; the previous window is kept
        """
        if limit <= 0:
            raise ValueError(f"limit must be positive (got {limit})")

        self._issued_sequence += 1
        sequence = self._issued_sequence

        requests = await self._api.fetch_client_requests(client_id, limit)

        return self._apply(client_id, sequence, _bound(requests, limit))

    def _apply(self, client_id: str, sequence: int, window: RequestWindow) -> RequestWindow:
        if sequence < self._applied.get(client_id, 0):
            logger.debug("Discarding stale window for client %s (refresh %d)", client_id, sequence)
            return self.window(client_id)
        if sequence <= self._pruned_at and client_id not in self._kept:
            logger.debug("Discarding window for pruned client %s (refresh %d)", client_id, sequence)
            return ()

        updated = dict(self._windows)
        updated[client_id] = window
        self._windows = MappingProxyType(updated)
        self._applied[client_id] = sequence
        return window

    def prune(self, keep_client_ids: Iterable[str]) -> None:
        """
        Drop windows and refresh bookkeeping of clients no longer in the registry.

        A refresh for a dropped client that was issued before this call and
        resolves after it is discarded.
        """
        keep = frozenset(keep_client_ids)
        self._pruned_at = self._issued_sequence
        self._kept = keep
        self._applied = {cid: sequence for cid, sequence in self._applied.items() if cid in keep}
        if set(self._windows) <= keep:
            return
        self._windows = MappingProxyType({cid: window for cid, window in self._windows.items() if cid in keep})

    async def merge_across_online(
        self,
        max_clients: int = DASHBOARD_MAX_CLIENTS,
        per_client_limit: int = DASHBOARD_PER_CLIENT_LIMIT,
        recent_limit: int = DASHBOARD_RECENT_LIMIT,
    ) -> MergeResult:
        """
        Fetch windows for the first ``max_clients`` online clients and merge them.

        Fetches run concurrently and are isolated: a client whose fetch fails
        contributes an empty window to this cycle's merge and keeps its stored
        window untouched.
        """
        if self._registry is None:
            raise ValueError("merge_across_online requires a client registry")

        selected = self._registry.online_clients()[:max_clients]
        windows = await asyncio.gather(*(self._fetch_isolated(client, per_client_limit) for client in selected))

        failed = tuple(client.id for client, window in zip(selected, windows) if window is None)
        streams: List[Tuple[Client, Sequence[ProbeRequest]]] = [
            (client, window or ()) for client, window in zip(selected, windows)
        ]

        return MergeResult(
            recent=tuple(merge_client_requests(streams, limit=recent_limit)),
            windows=MappingProxyType({client.id: tuple(window) for client, window in streams}),
            failed_client_ids=failed,
        )

    async def _fetch_isolated(self, client: Client, limit: int) -> Optional[RequestWindow]:
        try:
            return await self.refresh(client.id, limit)
        except CLIENT_FETCH_ERRORS as exc:
            logger.warning("Request fetch for client %s failed; using empty window this cycle: %s", client.id, exc)
            return None


def _bound(requests: Sequence[ProbeRequest], limit: int) -> RequestWindow:
    """Keep at most ``limit`` most recent requests, preserving server order."""
    if len(requests) <= limit:
        return tuple(requests)
    newest = sorted(range(len(requests)), key=lambda index: requests[index].start_time, reverse=True)[:limit]
    keep = set(newest)
    return tuple(request for index, request in enumerate(requests) if index in keep)

"""
Latest known snapshot of all clients.

Each refresh replaces the snapshot wholesale, so readers never see a partially
updated list. A client missing from the latest full fetch is removed; lookups
for it return None rather than raising.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .api_client import ITelemetryApi
from .data_models import Client
from .exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ClientRegistryView:
    """Copy-on-write registry of clients, in server order."""

    def __init__(self, api: ITelemetryApi):
        self._api = api
        self._clients: Tuple[Client, ...] = ()
        self._by_id: Mapping[str, Client] = MappingProxyType({})
        self._issued_sequence = 0
        self._applied_sequence = 0
        self.last_refreshed_at: Optional[datetime] = None

    async def refresh(self) -> Tuple[Client, ...]:
        """
        Fetch the full client list and swap it in.

        Returns:
            The snapshot in effect after this call

        Raises:
            TransportError: If the fetch fails; the previous snapshot is kept
        """
        self._issued_sequence += 1
        sequence = self._issued_sequence

        clients = await self._api.fetch_clients()

        if sequence < self._applied_sequence:
            logger.debug("Discarding client list from refresh %d; %d already applied", sequence, self._applied_sequence)
            return self._clients

        self._apply(sequence, clients)
        return self._clients

    def _apply(self, sequence: int, clients: List[Client]) -> None:
        by_id: Dict[str, Client] = {}
        ordered: List[Client] = []
        for client in clients:
            if client.id in by_id:
                logger.warning("Duplicate client id %s in client list; keeping first entry", client.id)
                continue
            by_id[client.id] = client
            ordered.append(client)

        removed = set(self._by_id) - set(by_id)
        if removed:
            logger.info("Clients no longer reported by server: %s", ", ".join(sorted(removed)))

        self._clients = tuple(ordered)
        self._by_id = MappingProxyType(by_id)
        self._applied_sequence = sequence
        self.last_refreshed_at = datetime.now(timezone.utc)

    @property
    def clients(self) -> Tuple[Client, ...]:
        return self._clients

    def client_ids(self) -> Tuple[str, ...]:
        return tuple(client.id for client in self._clients)

    def online_clients(self) -> Tuple[Client, ...]:
        return tuple(client for client in self._clients if client.is_online)

    def offline_clients(self) -> Tuple[Client, ...]:
        return tuple(client for client in self._clients if not client.is_online)

    def online_count(self) -> int:
        return sum(1 for client in self._clients if client.is_online)

    def total_count(self) -> int:
        return len(self._clients)

    def by_id(self, client_id: str) -> Optional[Client]:
        """Return the client, or None when it is absent from the latest snapshot."""
        return self._by_id.get(client_id)

    def require(self, client_id: str) -> Client:
        client = self._by_id.get(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} is not in the latest snapshot", client_id=client_id)
        return client

"""Protocol for the telemetry server API collaborator.

Stores, views and the config file transaction depend on this interface rather
than on the aiohttp implementation, so tests can substitute in-memory fakes.
Every method is a suspension point and may raise TransportError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol

if TYPE_CHECKING:
    from ..data_models import Client, ConfigFile, ProbeRequest


class ITelemetryApi(Protocol):
    """Fallible asynchronous access to clients, requests and config files."""

    async def fetch_clients(self) -> List[Client]:
        ...

    async def fetch_client(self, client_id: str) -> Client:
        ...

    async def fetch_client_requests(self, client_id: str, limit: int = 100) -> List[ProbeRequest]:
        ...

    async def get_config_file(self, client_id: str, path: str) -> ConfigFile:
        ...

    async def update_config_file(self, client_id: str, path: str, content: str) -> None:
        ...

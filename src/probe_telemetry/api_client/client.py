"""Concrete aiohttp implementation of the telemetry server API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..config import TelemetrySettings, get_telemetry_settings
from ..data_models import Client, ConfigFile, ProbeRequest
from ..exceptions import TransportError
from ..http_utils import ensure_http_url
from .request_operations import TelemetryRequestOperations
from .session_manager import TelemetrySessionManager

logger = logging.getLogger(__name__)

_SERVICE_NAME = "probe-telemetry"


class TelemetryApiClient:
    """
    Typed access to the telemetry server's JSON API.

    Usable as an async context manager; the underlying session is created
    lazily on the first request and released by ``close()``.
    """

    def __init__(self, settings: Optional[TelemetrySettings] = None):
        self.settings = settings or get_telemetry_settings()
        self.base_url = ensure_http_url(self.settings.base_url).rstrip("/")
        self.session_manager = TelemetrySessionManager(
            _SERVICE_NAME,
            self.settings.connection_timeout_seconds,
            self.settings.request_timeout_seconds,
        )
        self.request_ops = TelemetryRequestOperations(_SERVICE_NAME, self.base_url, self.session_manager)

    async def __aenter__(self) -> "TelemetryApiClient":
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.session_manager.close_session()

    async def fetch_clients(self) -> List[Client]:
        payload = await self.request_ops.request_json("GET", "/api/clients")
        return [_parse(Client.from_payload, item, "/api/clients") for item in _require_list(payload, "/api/clients")]

    async def fetch_client(self, client_id: str) -> Client:
        endpoint = f"/api/clients/{_segment(client_id)}"
        payload = await self.request_ops.request_json("GET", endpoint)
        return _parse(Client.from_payload, payload, endpoint)

    async def fetch_client_requests(self, client_id: str, limit: int = 100) -> List[ProbeRequest]:
        """Fetch up to ``limit`` most recent probes; server order is not guaranteed sorted."""
        endpoint = f"/api/clients/{_segment(client_id)}/requests"
        payload = await self.request_ops.request_json("GET", endpoint, params={"limit": str(limit)})
        return [
            _parse(ProbeRequest.from_payload, item, endpoint, client_id=client_id)
            for item in _require_list(payload, endpoint)
        ]

    async def get_config_file(self, client_id: str, path: str) -> ConfigFile:
        endpoint = f"/api/clients/{_segment(client_id)}/files"
        payload = await self.request_ops.request_json("POST", endpoint, json={"path": path})
        return _parse(ConfigFile.from_payload, _require_dict(payload, endpoint), endpoint, path=path)

    async def update_config_file(self, client_id: str, path: str, content: str) -> None:
        endpoint = f"/api/clients/{_segment(client_id)}/files"
        await self.request_ops.request_json("PUT", endpoint, json={"path": path, "content": content})
        logger.info("Updated %s on client %s", path, client_id)

    async def fetch_server_config(self) -> Dict[str, Any]:
        payload = await self.request_ops.request_json("GET", "/api/config")
        return _require_dict(payload, "/api/config")

    async def update_server_config(self, config: Dict[str, Any]) -> Any:
        return await self.request_ops.request_json("PUT", "/api/config", json=config)

    async def update_client_config(self, client_id: str, config: Dict[str, Any]) -> Any:
        endpoint = f"/api/clients/{_segment(client_id)}/config"
        return await self.request_ops.request_json("PUT", endpoint, json=config)

    async def send_client_command(self, client_id: str, command: Dict[str, Any]) -> Any:
        endpoint = f"/api/clients/{_segment(client_id)}/command"
        return await self.request_ops.request_json("POST", endpoint, json=command)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _require_list(payload: Any, endpoint: str) -> List[Any]:
    # The server serialises an empty slice as null
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise TransportError(f"Expected a JSON array from {endpoint}", url=endpoint)
    return payload


def _require_dict(payload: Any, endpoint: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise TransportError(f"Expected a JSON object from {endpoint}", url=endpoint)
    return payload


def _parse(factory, payload: Any, endpoint: str, **kwargs):
    if not isinstance(payload, dict):
        raise TransportError(f"Expected JSON objects from {endpoint}", url=endpoint)
    try:
        return factory(payload, **kwargs)
    except (TypeError, ValueError) as exc:
        raise TransportError(f"Malformed payload from {endpoint}: {exc}", url=endpoint) from exc

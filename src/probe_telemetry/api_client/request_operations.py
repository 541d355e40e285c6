"""Telemetry API request operations."""

import logging
from typing import Any, Optional

import aiohttp

from ..constants import HTTP_REDIRECT_MIN, HTTP_SUCCESS_MIN
from ..exceptions import TransportError
from ..network_errors import TRANSPORT_ERROR_TYPES, is_network_unreachable_error
from .session_manager import TelemetrySessionManager


class TelemetryRequestOperations:
    """Issues JSON requests and converts every failure into TransportError."""

    def __init__(self, service_name: str, base_url: str, session_manager: TelemetrySessionManager):
        self.service_name = service_name
        self.base_url = base_url
        self.session_manager = session_manager
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    async def request_json(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        Make an HTTP request and decode its JSON body.

        Args:
            method: HTTP method
            endpoint: Path relative to the service origin
            **kwargs: Passed through to ``aiohttp.ClientSession.request``

        Returns:
            Decoded JSON payload, or None for an empty body

        Raises:
            TransportError: On connection failure, non-2xx status or undecodable body
        """
        session = await self.session_manager.ensure_session()
        url = f"{self.base_url}{endpoint}"
        self.logger.debug("Making %s request: %s", method, url)

        try:
            async with session.request(method, url, **kwargs) as response:
                if not HTTP_SUCCESS_MIN <= response.status < HTTP_REDIRECT_MIN:
                    raise TransportError.from_response(response.status, response.reason, url)
                return await self._decode_body(response, url)
        except TransportError:
            raise
        except TRANSPORT_ERROR_TYPES as exc:
            if is_network_unreachable_error(exc):
                self.logger.warning("Telemetry server unreachable: %s %s (%s)", method, url, exc)
            else:
                self.logger.warning("HTTP request failed: %s %s (%s)", method, url, exc)
            raise TransportError(f"Request to {url} failed: {exc}", url=url) from exc

    async def _decode_body(self, response: aiohttp.ClientResponse, url: str) -> Optional[Any]:
        text = await response.text()
        if not text.strip():
            return None
        try:
            return await response.json(content_type=None)
        except ValueError as exc:
            raise TransportError(f"Malformed JSON from {url}", url=url, status_code=response.status) from exc

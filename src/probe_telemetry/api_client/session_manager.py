"""HTTP session management for the telemetry API client."""

import asyncio
import logging
from typing import Optional

import aiohttp

from ..http_utils import is_aiohttp_session_open


class TelemetrySessionManager:
    """Owns the aiohttp session used for all API calls."""

    def __init__(self, service_name: str, connection_timeout: float, request_timeout: float):
        self.service_name = service_name
        self.connection_timeout = connection_timeout
        self.request_timeout = request_timeout
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    async def create_session(self) -> aiohttp.ClientSession:
        """Create HTTP session, closing any previous one first."""
        if self.session and not self.session.closed:
            await self.close_session()

        timeout = aiohttp.ClientTimeout(
            total=self.request_timeout,
            connect=self.connection_timeout,
        )

        self.session = aiohttp.ClientSession(
            timeout=timeout,
            headers={
                "User-Agent": f"{self.service_name}-client/1.0",
                "Content-Type": "application/json",
            },
            connector=aiohttp.TCPConnector(
                limit=100,
                limit_per_host=30,
                ttl_dns_cache=300,
                use_dns_cache=True,
            ),
        )
        self.logger.debug("HTTP session created")
        return self.session

    async def ensure_session(self) -> aiohttp.ClientSession:
        """Return the open session, creating one lazily."""
        session = self.get_session()
        if session is None:
            session = await self.create_session()
        return session

    async def close_session(self) -> None:
        """Close HTTP session."""
        if not self.session:
            return

        try:
            if not self.session.closed:
                self.logger.debug("Closing HTTP session")
                await asyncio.wait_for(self.session.close(), timeout=5.0)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError):
            self.logger.warning("Error closing HTTP session", exc_info=True)
        finally:
            self.session = None

    def get_session(self) -> Optional[aiohttp.ClientSession]:
        """Get current session if it is still open."""
        return self.session if is_aiohttp_session_open(self.session) else None

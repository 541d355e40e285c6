from __future__ import annotations

"""HTTP helper utilities shared by the API client."""

from typing import Any, Optional
from urllib.parse import urlsplit

from .exceptions import ConfigurationError


def is_aiohttp_session_open(session: Optional[Any]) -> bool:
    """Return True when the provided aiohttp session exists and remains open."""
    if session is None:
        return False
    if not hasattr(session, "closed"):
        return False
    return not bool(session.closed)


def ensure_http_url(request_url: str) -> str:
    """Ensure the provided URL uses an allowed HTTP/HTTPS scheme."""
    parsed = urlsplit(request_url)
    scheme = parsed.scheme.lower()
    if scheme not in {"http", "https"}:
        raise ConfigurationError(f"Unsupported URL scheme: {request_url}")
    if not parsed.netloc:
        raise ConfigurationError(f"URL missing network location: {request_url}")
    return request_url


__all__ = ["is_aiohttp_session_open", "ensure_http_url"]

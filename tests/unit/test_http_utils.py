from types import SimpleNamespace

import pytest

from probe_telemetry import http_utils
from probe_telemetry.exceptions import ConfigurationError


def test_is_aiohttp_session_open_returns_false_for_none() -> None:
    assert not http_utils.is_aiohttp_session_open(None)


def test_is_aiohttp_session_open_returns_false_when_closed_attribute_true() -> None:
    session = SimpleNamespace(closed=True)
    assert not http_utils.is_aiohttp_session_open(session)


def test_is_aiohttp_session_open_returns_false_when_closed_attribute_missing() -> None:
    session = SimpleNamespace()
    assert not http_utils.is_aiohttp_session_open(session)


def test_is_aiohttp_session_open_returns_true_when_closed_attribute_false() -> None:
    session = SimpleNamespace(closed=False)
    assert http_utils.is_aiohttp_session_open(session)


@pytest.mark.parametrize(
    "url",
    ["http://localhost:8080", "https://monitor.example.com/api", "HTTP://example.com", "https://host/path?x=1"],
)
def test_ensure_http_url_accepts_http_urls(url) -> None:
    assert http_utils.ensure_http_url(url) == url


def test_ensure_http_url_invalid_scheme() -> None:
    with pytest.raises(ConfigurationError, match="Unsupported URL scheme"):
        http_utils.ensure_http_url("ws://localhost:8080")


def test_ensure_http_url_missing_netloc() -> None:
    with pytest.raises(ConfigurationError, match="URL missing network location"):
        http_utils.ensure_http_url("http://")

"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from probe_telemetry.config import get_telemetry_settings, runtime
from tests.helpers.telemetry_fakes import FakeTelemetryApi, ManualSleep


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep developer .env files and cached settings out of tests."""
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    for name in (
        "TELEMETRY_BASE_URL",
        "TELEMETRY_REQUEST_TIMEOUT_SECONDS",
        "TELEMETRY_CONNECTION_TIMEOUT_SECONDS",
        "LOG_DIRECTORY",
        "LOG_APPEND",
    ):
        monkeypatch.delenv(name, raising=False)
    runtime.reset_default_values()
    get_telemetry_settings.cache_clear()
    yield
    runtime.reset_default_values()
    get_telemetry_settings.cache_clear()


@pytest.fixture
def fake_api() -> FakeTelemetryApi:
    """Provide an in-memory telemetry API."""
    return FakeTelemetryApi()


@pytest.fixture
def manual_sleep() -> ManualSleep:
    return ManualSleep()

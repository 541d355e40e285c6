"""Tests for environment-backed configuration helpers."""

import pytest

from probe_telemetry.config import (
    ConfigurationError,
    TelemetrySettings,
    env_bool,
    env_float,
    env_int,
    env_seconds,
    env_str,
    get_telemetry_settings,
    runtime,
)
from probe_telemetry.config.runtime_helpers import DotenvLoader


def _use_dotenv(monkeypatch, tmp_path, text):
    path = tmp_path / ".env"
    path.write_text(text, encoding="utf-8")
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (path,))
    runtime.reset_default_values()
    return path


class TestEnvHelpers:
    def test_env_str_returns_default_when_unset(self):
        assert env_str("PROBE_UNSET_VALUE", or_value="fallback") == "fallback"

    def test_env_str_strips_and_treats_blank_as_unset(self, monkeypatch):
        monkeypatch.setenv("PROBE_VALUE", "  spaced  ")
        monkeypatch.setenv("PROBE_BLANK", "   ")

        assert env_str("PROBE_VALUE") == "spaced"
        assert env_str("PROBE_BLANK", or_value="x") == "x"

    def test_required_value_missing(self):
        with pytest.raises(ConfigurationError):
            env_str("PROBE_UNSET_VALUE", required=True)

    def test_env_int_and_float(self, monkeypatch):
        monkeypatch.setenv("PROBE_INT", "42")
        monkeypatch.setenv("PROBE_FLOAT", "2.5")

        assert env_int("PROBE_INT") == 42
        assert env_float("PROBE_FLOAT") == 2.5

    def test_env_int_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("PROBE_INT", "forty-two")

        with pytest.raises(ConfigurationError):
            env_int("PROBE_INT")

    @pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False), ("0", False)])
    def test_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("PROBE_FLAG", raw)

        assert env_bool("PROBE_FLAG") is expected

    def test_env_bool_rejects_unknown_word(self, monkeypatch):
        monkeypatch.setenv("PROBE_FLAG", "maybe")

        with pytest.raises(ConfigurationError):
            env_bool("PROBE_FLAG")

    def test_env_seconds_rejects_negative(self, monkeypatch):
        monkeypatch.setenv("PROBE_SECONDS", "-1")

        with pytest.raises(ConfigurationError):
            env_seconds("PROBE_SECONDS")

    def test_dotenv_supplies_missing_values(self, monkeypatch, tmp_path):
        _use_dotenv(monkeypatch, tmp_path, "PROBE_FROM_FILE=from-file\n")

        assert env_str("PROBE_FROM_FILE") == "from-file"

    def test_environment_wins_over_dotenv(self, monkeypatch, tmp_path):
        _use_dotenv(monkeypatch, tmp_path, "PROBE_FROM_FILE=from-file\n")
        monkeypatch.setenv("PROBE_FROM_FILE", "from-env")

        assert env_str("PROBE_FROM_FILE") == "from-env"


def test_dotenv_loader_parses_lines(tmp_path):
    path = tmp_path / "values.env"
    path.write_text(
        "# comment\n\nexport TELEMETRY_BASE_URL='http://monitor:8080'\nLOG_APPEND=\"1\"\nnot a pair\n",
        encoding="utf-8",
    )

    assert DotenvLoader.load_from_file(path) == {"TELEMETRY_BASE_URL": "http://monitor:8080", "LOG_APPEND": "1"}


def test_dotenv_loader_missing_file(tmp_path):
    assert DotenvLoader.load_from_file(tmp_path / "absent.env") == {}


class TestTelemetrySettings:
    def test_defaults(self):
        settings = get_telemetry_settings()

        assert settings == TelemetrySettings(
            base_url="http://localhost:8080", request_timeout_seconds=30.0, connection_timeout_seconds=10.0
        )

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TELEMETRY_BASE_URL", "https://monitor.example.com/")
        monkeypatch.setenv("TELEMETRY_REQUEST_TIMEOUT_SECONDS", "12")
        monkeypatch.setenv("TELEMETRY_CONNECTION_TIMEOUT_SECONDS", "3.5")

        settings = get_telemetry_settings()

        assert settings.base_url == "https://monitor.example.com"
        assert settings.request_timeout_seconds == 12.0
        assert settings.connection_timeout_seconds == 3.5

    def test_settings_from_dotenv(self, monkeypatch, tmp_path):
        _use_dotenv(monkeypatch, tmp_path, "TELEMETRY_BASE_URL=http://from-dotenv:9000\n")

        assert get_telemetry_settings().base_url == "http://from-dotenv:9000"

    def test_invalid_base_url(self, monkeypatch):
        monkeypatch.setenv("TELEMETRY_BASE_URL", "localhost:8080")

        with pytest.raises(ConfigurationError):
            get_telemetry_settings()

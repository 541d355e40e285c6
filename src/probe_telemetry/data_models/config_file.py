"""
Remote client configuration file models.

Clients store their settings in a JSON document (``client.json``) that the
dashboard can fetch and rewrite through the server. These models describe the
document and provide the built-in default used when the remote copy cannot be
fetched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, Dict, List, Mapping, Optional

import orjson

from ..constants import DEFAULT_CONFIG_FILE_NAME
from ..exceptions import ValidationError
from ..time_helpers import parse_timestamp

_VALID_LOG_LEVELS = {"debug", "info", "warn", "warning", "error"}


@dataclass(frozen=True)
class ConfigFile:
    """A named remote document as returned by the files endpoint."""

    name: str
    content: str
    path: str = ""
    last_edit: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], path: str = "") -> "ConfigFile":
        content = payload.get("content")
        if not isinstance(content, str):
            raise ValueError("Config file payload is missing string content")
        return cls(
            name=str(payload.get("name") or PurePosixPath(path).name),
            content=content,
            path=str(payload.get("path") or path),
            last_edit=parse_timestamp(payload.get("lastEdit"), allow_none=True),
        )


@dataclass(frozen=True)
class Target:
    """A website monitored by a client."""

    name: str
    url: str
    interval: int = 60
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "url": self.url, "interval": self.interval, "enabled": self.enabled}

    @classmethod
    def from_dict(cls, payload: Any, index: int) -> "Target":
        if not isinstance(payload, dict):
            raise ValidationError(f"targets[{index}] must be an object")
        name = payload.get("name")
        url = payload.get("url")
        interval = payload.get("interval", 60)
        enabled = payload.get("enabled", True)
        if not isinstance(name, str) or not name:
            raise ValidationError(f"targets[{index}].name must be a non-empty string")
        if not isinstance(url, str) or not url:
            raise ValidationError(f"targets[{index}].url must be a non-empty string")
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            raise ValidationError(f"targets[{index}].interval must be a positive integer")
        if not isinstance(enabled, bool):
            raise ValidationError(f"targets[{index}].enabled must be a boolean")
        return cls(name=name, url=url, interval=interval, enabled=enabled)


@dataclass(frozen=True)
class ClientConfig:
    """Parsed contents of a client's ``client.json``."""

    server_address: str
    client_name: str
    targets: List[Target] = field(default_factory=list)
    log_level: str = "info"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serverAddress": self.server_address,
            "clientName": self.client_name,
            "targets": [target.to_dict() for target in self.targets],
            "logLevel": self.log_level,
        }

    def to_document(self) -> str:
        """Render as 2-space indented JSON."""
        return orjson.dumps(self.to_dict(), option=orjson.OPT_INDENT_2).decode("utf-8")

    @classmethod
    def from_document(cls, content: str) -> "ClientConfig":
        """
        Parse and validate a ``client.json`` document.

        Raises:
            ValidationError: If the content is not valid JSON or a field is malformed
        """
        payload = parse_json_object(content)

        server_address = payload.get("serverAddress")
        client_name = payload.get("clientName")
        targets = payload.get("targets", [])
        log_level = payload.get("logLevel", "info")

        if not isinstance(server_address, str) or not server_address:
            raise ValidationError("serverAddress must be a non-empty string")
        if not isinstance(client_name, str):
            raise ValidationError("clientName must be a string")
        if not isinstance(targets, list):
            raise ValidationError("targets must be a list")
        if not isinstance(log_level, str) or log_level.lower() not in _VALID_LOG_LEVELS:
            raise ValidationError(f"logLevel must be one of {sorted(_VALID_LOG_LEVELS)}")

        return cls(
            server_address=server_address,
            client_name=client_name,
            targets=[Target.from_dict(item, index) for index, item in enumerate(targets)],
            log_level=log_level,
        )


def parse_json_object(content: str) -> Dict[str, Any]:
    """Decode ``content`` and require a top-level JSON object."""
    try:
        payload = orjson.loads(content)
    except orjson.JSONDecodeError as exc:
        raise ValidationError(f"Config content is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Config content must be a JSON object")
    return payload


def validate_config_document(path: str, content: str) -> None:
    """
    Validate content before it is written back to ``path``.

    JSON files must hold an object; the client settings file is additionally
    checked field by field. Other file types are passed through unchecked.
    """
    name = PurePosixPath(path).name
    if name == DEFAULT_CONFIG_FILE_NAME:
        ClientConfig.from_document(content)
    elif name.endswith(".json"):
        parse_json_object(content)


def default_client_config() -> ClientConfig:
    return ClientConfig(
        server_address="http://localhost:8080",
        client_name="NetworkMonitor Client",
        targets=[
            Target(name="Google", url="https://www.google.com", interval=60, enabled=True),
            Target(name="GitHub", url="https://github.com", interval=60, enabled=True),
        ],
        log_level="info",
    )


def default_config_document() -> ConfigFile:
    """Editable fallback used when the remote file cannot be fetched."""
    return ConfigFile(
        name=DEFAULT_CONFIG_FILE_NAME,
        content=default_client_config().to_document(),
        path=DEFAULT_CONFIG_FILE_NAME,
    )

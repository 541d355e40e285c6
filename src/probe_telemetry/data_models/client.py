"""
Client data model.

A client is a remote agent reporting its own status and probe history. The
server snapshot is authoritative: instances are rebuilt wholesale from each
successful fetch and never patched in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from ..time_helpers import parse_timestamp


class ClientStatus(str, Enum):
    """Connection status reported by the server."""

    ONLINE = "online"
    OFFLINE = "offline"

    @classmethod
    def from_payload(cls, value: Any) -> "ClientStatus":
        """Map a raw status string; anything unrecognised is treated as offline."""
        if isinstance(value, str) and value.strip().lower() == cls.ONLINE.value:
            return cls.ONLINE
        return cls.OFFLINE


@dataclass(frozen=True)
class Client:
    """Latest known state of one remote client. Identity is ``id``."""

    id: str
    name: str
    status: ClientStatus
    ip_address: str = ""
    os_info: str = ""
    version: str = ""
    last_seen: Optional[datetime] = None
    connected_at: Optional[datetime] = None
    disconnected_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Client id must be a non-empty string")

    @property
    def is_online(self) -> bool:
        return self.status is ClientStatus.ONLINE

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Client":
        """
        Build a Client from the server's JSON representation.

        Args:
            payload: Decoded JSON object using the server's camelCase keys

        Returns:
            Client instance

        Raises:
            ValueError: If the id is missing or a timestamp cannot be parsed
        """
        return cls(
            id=str(payload.get("id") or ""),
            name=str(payload.get("name") or ""),
            status=ClientStatus.from_payload(payload.get("status")),
            ip_address=str(payload.get("ipAddress") or ""),
            os_info=str(payload.get("osInfo") or ""),
            version=str(payload.get("version") or ""),
            last_seen=parse_timestamp(payload.get("lastSeen"), allow_none=True),
            connected_at=parse_timestamp(payload.get("connectedAt"), allow_none=True),
            disconnected_at=parse_timestamp(payload.get("disconnectedAt"), allow_none=True),
        )

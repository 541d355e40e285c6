"""
Single-document edit session for a client's remote configuration file.

State machine::

    CLOSED -> FETCHING -> READY -> SAVING -> CLOSED
                  |          |
                  +----------+-- discard() --> CLOSED

``open`` never fails outward: when the remote file cannot be fetched the
session is seeded with the built-in default document. ``save`` closes the
session whether or not the write succeeds and reports the outcome as a
SaveResult. There is exactly one transaction object per client, handed out by
ConfigFileTransactionRegistry, and reopening replaces the current session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from .api_client import ITelemetryApi
from .constants import DEFAULT_CONFIG_FILE_NAME
from .data_models import default_config_document
from .data_models.config_file import validate_config_document
from .exceptions import ApplicationError, SessionStateError, TransportError
from .network_errors import TRANSPORT_ERROR_TYPES

logger = logging.getLogger(__name__)

_FETCH_ERRORS = (ApplicationError,) + TRANSPORT_ERROR_TYPES


class SessionState(str, Enum):
    CLOSED = "closed"
    FETCHING = "fetching"
    READY = "ready"
    SAVING = "saving"

    @property
    def is_open(self) -> bool:
        return self in (SessionState.FETCHING, SessionState.READY)


@dataclass(frozen=True)
class ConfigFileSession:
    """Snapshot of an edit session. ``original_content`` never changes after open."""

    client_id: str
    path: str
    name: str = ""
    original_content: str = ""
    working_content: str = ""
    is_open: bool = False
    from_default: bool = False

    @property
    def is_modified(self) -> bool:
        return self.working_content != self.original_content


@dataclass(frozen=True)
class SaveResult:
    client_id: str
    path: str
    success: bool
    error: Optional[ApplicationError] = None


class ConfigFileTransaction:
    """Owns the edit session for one client's remote file."""

    def __init__(self, api: ITelemetryApi, client_id: str):
        self._api = api
        self.client_id = client_id
        self._state = SessionState.CLOSED
        self._session: Optional[ConfigFileSession] = None
        self._token: Optional[object] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[ConfigFileSession]:
        """Current session snapshot, or None once closed."""
        return self._session

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    async def open(self, path: str = DEFAULT_CONFIG_FILE_NAME) -> ConfigFileSession:
        """
        Fetch ``path`` and start a session, replacing any current one.

        Returns:
            The READY session, or a closed snapshot if this open was superseded
            (discarded or reopened) while the fetch was pending
        """
        if self._state is not SessionState.CLOSED:
            logger.info("Replacing %s config session for client %s", self._state.value, self.client_id)
            self._close()

        token = object()
        self._token = token
        self._state = SessionState.FETCHING
        self._session = ConfigFileSession(client_id=self.client_id, path=path, is_open=True)

        from_default = False
        try:
            document = await self._api.get_config_file(self.client_id, path)
        except _FETCH_ERRORS as exc:
            logger.warning("Could not fetch %s from client %s, using default document: %s", path, self.client_id, exc)
            document = default_config_document()
            from_default = True

        if token is not self._token:
            logger.debug("Config session for client %s superseded during fetch", self.client_id)
            return ConfigFileSession(client_id=self.client_id, path=path, is_open=False)

        self._session = ConfigFileSession(
            client_id=self.client_id,
            path=path,
            name=document.name,
            original_content=document.content,
            working_content=document.content,
            is_open=True,
            from_default=from_default,
        )
        self._state = SessionState.READY
        return self._session

    def edit(self, new_content: str) -> ConfigFileSession:
        """Replace the working buffer. Only valid while READY."""
        if self._state is not SessionState.READY or self._session is None:
            raise SessionStateError.invalid_transition("edit", self._state.value)
        self._session = replace(self._session, working_content=new_content)
        return self._session

    async def save(self) -> SaveResult:
        """
        Validate and write the working buffer, then close the session.

        Raises:
            SessionStateError: If the session is not READY
        """
        if self._state is not SessionState.READY or self._session is None:
            raise SessionStateError.invalid_transition("save", self._state.value)

        session = self._session
        token = self._token
        self._state = SessionState.SAVING

        error: Optional[ApplicationError] = None
        try:
            validate_config_document(session.path, session.working_content)
            await self._api.update_config_file(self.client_id, session.path, session.working_content)
        except ApplicationError as exc:
            error = exc
        except TRANSPORT_ERROR_TYPES as exc:
            error = TransportError(f"Saving {session.path} failed: {exc}")
        finally:
            if token is self._token:
                self._close()

        if error is not None:
            logger.warning("Saving %s on client %s failed: %s", session.path, self.client_id, error)
            return SaveResult(client_id=self.client_id, path=session.path, success=False, error=error)

        logger.info("Saved %s on client %s", session.path, self.client_id)
        return SaveResult(client_id=self.client_id, path=session.path, success=True)

    def discard(self) -> None:
        """Drop the session and its working buffer. No-op when already closed."""
        if self._state is SessionState.CLOSED:
            return
        if self._state is SessionState.SAVING:
            raise SessionStateError.invalid_transition("discard", self._state.value)
        self._close()

    def _close(self) -> None:
        self._state = SessionState.CLOSED
        self._session = None
        self._token = None


class ConfigFileTransactionRegistry:
    """Hands out the single transaction object for each client."""

    def __init__(self, api: ITelemetryApi):
        self._api = api
        self._transactions: Dict[str, ConfigFileTransaction] = {}

    def for_client(self, client_id: str) -> ConfigFileTransaction:
        transaction = self._transactions.get(client_id)
        if transaction is None:
            transaction = ConfigFileTransaction(self._api, client_id)
            self._transactions[client_id] = transaction
        return transaction

    def open_client_ids(self) -> Tuple[str, ...]:
        return tuple(client_id for client_id, txn in self._transactions.items() if txn.is_open)

    def discard_all(self) -> None:
        for transaction in self._transactions.values():
            if transaction.is_open:
                transaction.discard()

"""Tests for probe_telemetry.client_registry."""

import asyncio

import pytest

from probe_telemetry.client_registry import ClientRegistryView
from probe_telemetry.exceptions import NotFoundError, TransportError
from tests.helpers.telemetry_fakes import FakeTelemetryApi, make_client, settle


class _ScriptedClientsApi(FakeTelemetryApi):
    """Each fetch_clients call waits on its own future."""

    def __init__(self):
        super().__init__()
        self.pending = []

    async def fetch_clients(self):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


@pytest.mark.asyncio
async def test_refresh_replaces_snapshot_in_server_order(fake_api):
    fake_api.clients = [make_client("b"), make_client("a", status="offline"), make_client("c")]
    registry = ClientRegistryView(fake_api)

    clients = await registry.refresh()

    assert registry.client_ids() == ("b", "a", "c")
    assert clients == registry.clients
    assert [client.id for client in registry.online_clients()] == ["b", "c"]
    assert [client.id for client in registry.offline_clients()] == ["a"]
    assert registry.online_count() == 2
    assert registry.total_count() == 3
    assert registry.last_refreshed_at is not None


@pytest.mark.asyncio
async def test_duplicate_ids_keep_first_entry(fake_api):
    fake_api.clients = [make_client("a", "First"), make_client("a", "Second")]
    registry = ClientRegistryView(fake_api)

    await registry.refresh()

    assert registry.total_count() == 1
    assert registry.by_id("a").name == "First"


@pytest.mark.asyncio
async def test_client_missing_from_latest_fetch_is_removed(fake_api):
    fake_api.clients = [make_client("a"), make_client("b")]
    registry = ClientRegistryView(fake_api)
    await registry.refresh()

    fake_api.clients = [make_client("b")]
    await registry.refresh()

    assert registry.by_id("a") is None
    with pytest.raises(NotFoundError):
        registry.require("a")
    assert registry.require("b").id == "b"


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_snapshot(fake_api):
    fake_api.clients = [make_client("a")]
    registry = ClientRegistryView(fake_api)
    await registry.refresh()
    refreshed_at = registry.last_refreshed_at

    fake_api.failures["clients"] = TransportError(status_code=502, status_text="Bad Gateway")
    with pytest.raises(TransportError):
        await registry.refresh()

    assert registry.client_ids() == ("a",)
    assert registry.last_refreshed_at == refreshed_at


@pytest.mark.asyncio
async def test_older_refresh_resolving_late_is_discarded():
    api = _ScriptedClientsApi()
    registry = ClientRegistryView(api)

    older = asyncio.create_task(registry.refresh())
    newer = asyncio.create_task(registry.refresh())
    await settle()

    api.pending[1].set_result([make_client("new")])
    await newer
    api.pending[0].set_result([make_client("old")])
    result = await older

    assert registry.client_ids() == ("new",)
    assert [client.id for client in result] == ["new"]


@pytest.mark.asyncio
async def test_snapshot_reference_is_not_mutated_by_refresh(fake_api):
    fake_api.clients = [make_client("a")]
    registry = ClientRegistryView(fake_api)
    await registry.refresh()
    before = registry.clients

    fake_api.clients = [make_client("b")]
    await registry.refresh()

    assert [client.id for client in before] == ["a"]
    assert registry.client_ids() == ("b",)


def test_empty_registry_before_first_refresh(fake_api):
    registry = ClientRegistryView(fake_api)

    assert registry.clients == ()
    assert registry.by_id("missing") is None
    assert registry.online_count() == 0

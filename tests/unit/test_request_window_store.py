"""Tests for probe_telemetry.request_window_store."""

import asyncio

import aiohttp
import pytest

from probe_telemetry.client_registry import ClientRegistryView
from probe_telemetry.exceptions import TransportError
from probe_telemetry.request_window_store import RequestWindowStore
from tests.helpers.telemetry_fakes import FakeTelemetryApi, make_client, make_request, settle


def _requests(client_id, count, start=0):
    return [make_request(f"{client_id}-{index}", client_id, start + index) for index in range(count)]


class _UnboundedApi(FakeTelemetryApi):
    """Ignores the limit, like a server that returns everything it has."""

    async def fetch_client_requests(self, client_id, limit=100):
        await self._enter(f"requests:{client_id}")
        return list(self.requests.get(client_id, []))


class _ScriptedRequestsApi(FakeTelemetryApi):
    def __init__(self):
        super().__init__()
        self.pending = []

    async def fetch_client_requests(self, client_id, limit=100):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


@pytest.mark.asyncio
async def test_refresh_replaces_window_wholesale(fake_api):
    fake_api.requests["c1"] = _requests("c1", 3)
    store = RequestWindowStore(fake_api)
    await store.refresh("c1", 10)

    fake_api.requests["c1"] = _requests("c1", 2, start=50)
    window = await store.refresh("c1", 10)

    assert [request.id for request in window] == ["c1-0", "c1-1"]
    assert store.window("c1") == window
    assert all(request.start_time.second >= 50 for request in window)


@pytest.mark.asyncio
async def test_window_is_bounded_to_most_recent_in_server_order():
    api = _UnboundedApi()
    api.requests["c1"] = [
        make_request("old", offset_seconds=1),
        make_request("newest", offset_seconds=9),
        make_request("oldest", offset_seconds=0),
        make_request("mid", offset_seconds=5),
    ]
    store = RequestWindowStore(api)

    window = await store.refresh("c1", 2)

    assert [request.id for request in window] == ["newest", "mid"]


@pytest.mark.asyncio
async def test_unknown_client_has_empty_window(fake_api):
    store = RequestWindowStore(fake_api)

    assert store.window("nobody") == ()


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, -5])
async def test_non_positive_limit_rejected(fake_api, limit):
    store = RequestWindowStore(fake_api)

    with pytest.raises(ValueError):
        await store.refresh("c1", limit)

    assert fake_api.calls == []


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_window(fake_api):
    fake_api.requests["c1"] = _requests("c1", 4)
    store = RequestWindowStore(fake_api)
    original = await store.refresh("c1", 10)

    fake_api.failures["requests:c1"] = TransportError(status_code=500, status_text="Internal Server Error")
    with pytest.raises(TransportError):
        await store.refresh("c1", 10)

    assert store.window("c1") is original


@pytest.mark.asyncio
async def test_older_refresh_resolving_late_is_discarded():
    api = _ScriptedRequestsApi()
    store = RequestWindowStore(api)

    older = asyncio.create_task(store.refresh("c1", 10))
    newer = asyncio.create_task(store.refresh("c1", 10))
    await settle()

    api.pending[1].set_result([make_request("fresh")])
    await newer
    api.pending[0].set_result([make_request("stale")])
    await older

    assert [request.id for request in store.window("c1")] == ["fresh"]


@pytest.mark.asyncio
async def test_prune_drops_windows_of_removed_clients(fake_api):
    fake_api.requests = {"a": _requests("a", 1), "b": _requests("b", 1)}
    store = RequestWindowStore(fake_api)
    await store.refresh("a", 5)
    await store.refresh("b", 5)

    store.prune(["b"])

    assert set(store.windows()) == {"b"}
    assert store.window("a") == ()


@pytest.mark.asyncio
async def test_merge_isolates_failed_client(fake_api):
    fake_api.clients = [make_client("c1", "One"), make_client("c2", "Two"), make_client("c3", "Three")]
    fake_api.requests = {"c1": _requests("c1", 5), "c2": _requests("c2", 4), "c3": _requests("c3", 8, start=100)}
    fake_api.failures["requests:c2"] = aiohttp.ClientConnectionError("connection reset")
    registry = ClientRegistryView(fake_api)
    await registry.refresh()
    store = RequestWindowStore(fake_api, registry)

    result = await store.merge_across_online(max_clients=3, per_client_limit=10, recent_limit=10)

    assert len(result.recent) == 10
    assert all(entry.client_id != "c2" for entry in result.recent)
    assert result.failed_client_ids == ("c2",)
    assert result.windows["c2"] == ()
    assert len(result.all_requests()) == 13
    starts = [entry.start_time for entry in result.recent]
    assert starts == sorted(starts, reverse=True)


@pytest.mark.asyncio
async def test_merge_failure_leaves_stored_window_untouched(fake_api):
    fake_api.clients = [make_client("c1")]
    fake_api.requests["c1"] = _requests("c1", 3)
    registry = ClientRegistryView(fake_api)
    await registry.refresh()
    store = RequestWindowStore(fake_api, registry)
    stored = await store.refresh("c1", 10)

    fake_api.failures["requests:c1"] = TransportError("Request failed")
    result = await store.merge_across_online()

    assert result.recent == ()
    assert store.window("c1") is stored


@pytest.mark.asyncio
async def test_merge_selects_first_online_clients_only(fake_api):
    fake_api.clients = [
        make_client("off", status="offline"),
        make_client("o1"),
        make_client("o2"),
        make_client("o3"),
        make_client("o4"),
    ]
    fake_api.requests = {client.id: _requests(client.id, 1) for client in fake_api.clients}
    registry = ClientRegistryView(fake_api)
    await registry.refresh()
    store = RequestWindowStore(fake_api, registry)

    result = await store.merge_across_online(max_clients=3)

    assert list(result.windows) == ["o1", "o2", "o3"]
    assert "requests:off" not in fake_api.calls
    assert "requests:o4" not in fake_api.calls


@pytest.mark.asyncio
async def test_merge_requires_registry(fake_api):
    store = RequestWindowStore(fake_api)

    with pytest.raises(ValueError):
        await store.merge_across_online()


@pytest.mark.asyncio
async def test_prune_forgets_refresh_bookkeeping(fake_api):
    fake_api.requests = {"a": _requests("a", 1), "b": _requests("b", 1)}
    store = RequestWindowStore(fake_api)
    await store.refresh("a", 5)
    await store.refresh("b", 5)

    store.prune(["b"])

    assert set(store._applied) == {"b"}


@pytest.mark.asyncio
async def test_refresh_for_pruned_client_resolving_late_is_discarded():
    api = _ScriptedRequestsApi()
    store = RequestWindowStore(api)

    pending = asyncio.create_task(store.refresh("gone", 10))
    await settle()
    store.prune([])
    api.pending[0].set_result([make_request("late", "gone")])

    assert await pending == ()
    assert store.window("gone") == ()
    assert dict(store.windows()) == {}


@pytest.mark.asyncio
async def test_client_refreshed_again_after_prune(fake_api):
    fake_api.requests = {"a": _requests("a", 2)}
    store = RequestWindowStore(fake_api)
    await store.refresh("a", 5)
    store.prune([])

    window = await store.refresh("a", 5)

    assert len(window) == 2
    assert store.window("a") == window

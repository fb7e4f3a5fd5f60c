import httpx
import pytest

from flightcal.conftest import login
from flightcal.offline import OfflineSyncClient, PendingRequestStore, SyncResult
from flightcal.offline.sync_client import OFFLINE_SAVED, SYNC_COMPLETE

BASE_URL = "http://testserver"


def offline_client():
    def refuse(request):
        raise httpx.ConnectError("network is unreachable", request=request)
    return httpx.Client(transport=httpx.MockTransport(refuse))


def answering_client(status_code):
    return httpx.Client(transport=httpx.MockTransport(
        lambda request: httpx.Response(status_code, json={"error": "nope"})
    ))


@pytest.fixture
def store():
    return PendingRequestStore("sqlite://")


@pytest.fixture
def sync_client(store):
    client = OfflineSyncClient(BASE_URL, store=store, http_client=offline_client(), interval=0.01)
    yield client
    client.stop()


def test_store_orders_by_timestamp(store):
    late = store.add("http://x/api", "POST", {}, "{}", timestamp=20.0)
    early = store.add("http://x/api", "POST", {}, "{}", timestamp=10.0)
    assert [item.id for item in store.all()] == [early, late]
    store.delete(early)
    assert store.count() == 1
    store.clear()
    assert store.count() == 0


def test_offline_write_is_queued_and_acknowledged(sync_client, store):
    messages = []
    sync_client.subscribe(messages.append)

    resp = sync_client.save_day("2026-01-02", 3)

    assert resp.status_code == 200
    assert resp.json()["offline"] is True
    assert resp.json()["success"] is True
    assert store.count() == 1
    item = store.all()[0]
    assert item.url == "http://testserver/api"
    assert item.method == "POST"
    assert item.header_dict() == {"Content-Type": "application/json"}
    assert messages == [{"type": OFFLINE_SAVED, "data": {"date": "2026-01-02", "status": 3, "isDelete": False}}]


def test_replay_preserves_write_order(sync_client, store, client, make_user):
    make_user("pilot", "secret123")
    sync_client.save_day("2026-01-02", 1)
    sync_client.save_day("2026-01-02", 3)
    sync_client.save_day("2026-01-03", 2)
    assert store.count() == 3

    login(client, "pilot", "secret123")
    sync_client.http_client = client
    messages = []
    sync_client.subscribe(messages.append)

    result = sync_client.sync()

    assert result == SyncResult(synced=3, failed=0, remaining=0)
    assert messages == [{"type": SYNC_COMPLETE, "synced": 3, "failed": 0, "remaining": 0}]
    assert sync_client.fetch_days()["data"] == {"2026-01-02": 3, "2026-01-03": 2}


def test_unauthorized_replay_is_kept(sync_client, store):
    sync_client.save_day("2026-01-02", 1)
    sync_client.http_client = answering_client(401)
    assert sync_client.sync() == SyncResult(synced=0, failed=1, remaining=1)
    assert store.count() == 1


def test_rejected_replay_is_dropped(sync_client, store):
    sync_client.save_day("2026-01-02", 1)
    sync_client.http_client = answering_client(500)
    assert sync_client.sync() == SyncResult(synced=0, failed=1, remaining=0)


def test_still_offline_keeps_everything(sync_client, store):
    sync_client.save_day("2026-01-02", 1)
    sync_client.save_day("2026-01-03", 1)
    assert sync_client.sync() == SyncResult(synced=0, failed=2, remaining=2)


def test_empty_queue_sync(sync_client):
    assert sync_client.sync() == SyncResult(0, 0, 0)


def test_tick_syncs_on_reconnect(sync_client, store):
    sync_client.save_day("2026-01-02", 1)
    assert sync_client.tick() is None

    sync_client.http_client = answering_client(200)
    assert sync_client.tick() == SyncResult(synced=1, failed=0, remaining=0)
    # online with nothing queued
    assert sync_client.tick() is None


def test_unsubscribe(sync_client):
    messages = []
    unsubscribe = sync_client.subscribe(messages.append)
    unsubscribe()
    sync_client.save_day("2026-01-02", 1)
    assert messages == []


def test_failing_listener_does_not_break_queueing(sync_client, store):
    def boom(message):
        raise RuntimeError("listener bug")

    sync_client.subscribe(boom)
    assert sync_client.save_day("2026-01-02", 1).json()["offline"] is True
    assert store.count() == 1


def test_background_thread_starts_and_stops(sync_client):
    sync_client.start()
    assert sync_client._thread.is_alive()
    sync_client.stop()
    assert sync_client._thread is None


def test_replay_without_session_stays_queued(sync_client, store, client, make_user):
    make_user("pilot", "secret123")
    sync_client.save_day("2026-01-02", 4)

    # the data API accepts a session-less write as localOnly and stores nothing
    sync_client.http_client = client
    assert sync_client.sync() == SyncResult(synced=0, failed=1, remaining=1)
    assert store.count() == 1

    login(client, "pilot", "secret123")
    assert sync_client.sync() == SyncResult(synced=1, failed=0, remaining=0)
    assert sync_client.fetch_days()["data"] == {"2026-01-02": 4}

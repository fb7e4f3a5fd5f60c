"""
sync_client.py — Offline-tolerant client for the calendar data API.

Data writes that fail at the network level are queued locally and answered
with a synthetic success ({"offline": true}) so callers need no failure path.
Queued writes are replayed oldest first on reconnect, on every background
tick, or when sync() is called directly. A replay the server did not store
(401, or a {"localOnly": true} answer to a session-less write) stays queued
until the user logs in again.
"""

import json
import logging
import threading
from typing import Callable, NamedTuple

import httpx

from flightcal.config import SYNC_INTERVAL_SECONDS
from flightcal.offline.queue_store import PendingRequestStore

logger = logging.getLogger(__name__)

DATA_PATH = "/api"
AUTH_PATH = "/api/auth"
JSON_HEADERS = {"Content-Type": "application/json"}

OFFLINE_SAVED = "OFFLINE_SAVED"
SYNC_COMPLETE = "SYNC_COMPLETE"


def _stored_locally_only(response: httpx.Response) -> bool:
    """The data API answers anonymous writes with 200 {"localOnly": true} and stores nothing."""
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("localOnly") is True


class SyncResult(NamedTuple):
    synced: int
    failed: int
    remaining: int


class OfflineSyncClient:
    """Calendar API client with a durable replay queue for data writes."""

    def __init__(self, base_url: str, store: PendingRequestStore | None = None,
                 http_client: httpx.Client | None = None, interval: float = SYNC_INTERVAL_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.store = store or PendingRequestStore()
        self.http_client = http_client or httpx.Client(base_url=self.base_url, timeout=10.0)
        self.interval = interval

        self._listeners: list[Callable[[dict], None]] = []
        self._sync_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._online = True

    # ------------------------------------------------------------------
    def subscribe(self, callback: Callable[[dict], None]) -> Callable[[], None]:
        """Register a listener for OFFLINE_SAVED / SYNC_COMPLETE messages. Returns an unsubscribe function."""
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)

    def _broadcast(self, message: dict) -> None:
        for callback in list(self._listeners):
            try:
                callback(message)
            except Exception:
                logger.exception(f"Listener failed on {message.get('type')}")

    # ------------------------------------------------------------------
    def login(self, username: str, password: str) -> httpx.Response:
        """Log in; the session cookie stays in the client's jar for later replays."""
        return self.http_client.post(f"{self.base_url}{AUTH_PATH}", json={"username": username, "password": password})

    def fetch_days(self) -> dict:
        resp = self.http_client.get(f"{self.base_url}{DATA_PATH}")
        resp.raise_for_status()
        return resp.json()

    def save_day(self, date_key: str, status: int, is_delete: bool = False) -> httpx.Response:
        return self.send("POST", DATA_PATH, {"date": date_key, "status": status, "isDelete": is_delete})

    def send(self, method: str, path: str, payload: dict) -> httpx.Response:
        """Send a data write, queueing it locally if the server cannot be reached."""
        url = f"{self.base_url}{path}"
        body = json.dumps(payload)
        try:
            response = self.http_client.request(method, url, headers=JSON_HEADERS, content=body)
            self._online = True
            return response
        except httpx.TransportError as e:
            self._online = False
            logger.info(f"Offline ({e.__class__.__name__}), queueing {method} {path} for later sync")
            self.store.add(url, method, JSON_HEADERS, body)
            self._broadcast({"type": OFFLINE_SAVED, "data": payload})
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "offline": True,
                    "message": "Saved offline, will sync automatically when the network is back",
                },
                request=httpx.Request(method, url),
            )

    # ------------------------------------------------------------------
    def pending_count(self) -> int:
        return self.store.count()

    def sync(self) -> SyncResult:
        """Replay queued writes oldest first. One sweep at a time; later triggers wait their turn."""
        with self._sync_lock:
            result = self._sweep()
        self._broadcast({"type": SYNC_COMPLETE, **result._asdict()})
        return result

    def _sweep(self) -> SyncResult:
        pending = self.store.all()
        if not pending:
            return SyncResult(0, 0, 0)

        synced = 0
        failed = 0
        for item in pending:
            try:
                response = self.http_client.request(
                    item.method, item.url, headers=item.header_dict(), content=item.body,
                )
            except httpx.TransportError as e:
                # still offline, keep it
                failed += 1
                logger.warning(f"Sync failed for queued request {item.id}: {e}")
                continue

            if response.status_code == 401 or _stored_locally_only(response):
                # session gone; keep until the user logs in again
                failed += 1
            elif response.is_success:
                self.store.delete(item.id)
                synced += 1
            else:
                # rejected by the server, replaying it would never succeed
                self.store.delete(item.id)
                failed += 1
                logger.warning(f"Dropped queued request {item.id}: server answered {response.status_code}")

        remaining = self.store.count()
        logger.info(f"Offline sync: {synced} synced, {failed} failed, {remaining} remaining")
        return SyncResult(synced, failed, remaining)

    # ------------------------------------------------------------------
    def is_online(self) -> bool:
        try:
            self.http_client.get(f"{self.base_url}{DATA_PATH}")
            return True
        except httpx.TransportError:
            return False

    def tick(self) -> SyncResult | None:
        """One background step: probe the server, sync on reconnect or when work is queued."""
        was_online = self._online
        self._online = self.is_online()
        if not self._online:
            return None
        if not was_online:
            logger.info("Connection restored, syncing queued writes")
        if not was_online or self.pending_count():
            return self.sync()
        return None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.tick()
            except Exception:
                logger.exception("Background sync tick failed")

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="flightcal-offline-sync", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join()
            self._thread = None

    def close(self) -> None:
        self.stop()
        self.http_client.close()

from flightcal.offline.queue_store import PendingRequest, PendingRequestStore
from flightcal.offline.sync_client import OfflineSyncClient, SyncResult


__all__ = [
    "PendingRequest",
    "PendingRequestStore",
    "OfflineSyncClient",
    "SyncResult",
]

"""Device-side services for the training core."""

from backend.services.offline_queue import OfflineQueue, PendingLog, SyncReport, SyncStatus

__all__ = [
    "OfflineQueue",
    "PendingLog",
    "SyncReport",
    "SyncStatus",
]

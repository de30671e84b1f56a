"""HTTP adapters used on the device side."""

from infrastructure.http.training_log_client import (
    HttpTrainingLogClient,
    SyncRejected,
    SyncUnavailable,
)

__all__ = ["HttpTrainingLogClient", "SyncRejected", "SyncUnavailable"]

"""
Training log writer (Port).

Destination for finalized sessions. On the server this is the record-training-log
use case; on a device it is the HTTP client that syncs to the API.
"""
from typing import List, Protocol

from domain.models import LoggedSet, TrainingLog


class TrainingLogWriter(Protocol):
    """Persists one finalized session."""

    def record(self, training_log: TrainingLog, logged_sets: List[LoggedSet]) -> TrainingLog:
        """
        Persist a training log and its logged sets.

        Must be idempotent on training_log.session_id: recording the same
        session twice yields one stored log.

        Returns:
            The stored training log (the existing one on a duplicate)

        Raises:
            PersistenceError: If the write fails
        """
        ...

"""
Offline retry queue for finalized sessions.

Finalized sessions that could not be written are parked here, in the
device-local store, until a later sync succeeds:
- PendingLog model for a queued session (log + sets + retry bookkeeping)
- OfflineQueue class for enqueuing and draining in insertion order

Entries are keyed by session id; enqueuing the same session twice replaces
the earlier entry, and the writer dedups on the same key server-side.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from application.exceptions import PersistenceError
from application.ports import DeviceStore, TrainingLogWriter
from domain.models import LoggedSet, TrainingLog

logger = logging.getLogger(__name__)

PENDING_LOGS_KEY = "offline:pending_logs"


class SyncStatus(str, Enum):
    """Outcome of one drain attempt for a queued session."""

    SYNCED = "synced"
    FAILED = "failed"


class PendingLog(BaseModel):
    """
    A finalized session waiting to be written.

    Attributes:
        training_log: The finalized log (its session_id is the queue key)
        logged_sets: One record per qualifying set
        attempts: Failed sync attempts so far
        last_error: Message from the most recent failure
        queued_at: When the session was first queued
    """

    training_log: TrainingLog
    logged_sets: List[LoggedSet] = Field(default_factory=list)
    attempts: int = 0
    last_error: Optional[str] = None
    queued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def session_id(self) -> str:
        return self.training_log.session_id


@dataclass
class SyncReport:
    """Result of draining the queue."""

    results: Dict[str, SyncStatus] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    remaining: int = 0

    @property
    def synced(self) -> List[str]:
        return [sid for sid, status in self.results.items() if status == SyncStatus.SYNCED]

    @property
    def failed(self) -> List[str]:
        return [sid for sid, status in self.results.items() if status == SyncStatus.FAILED]


class OfflineQueue:
    """
    Durable queue of finalized sessions awaiting sync.

    Backed by a single key in the device store holding a JSON list.
    """

    def __init__(self, store: DeviceStore, key: str = PENDING_LOGS_KEY):
        self._store = store
        self._key = key

    def _load(self) -> List[PendingLog]:
        blob = self._store.get(self._key)
        if not blob:
            return []
        return [PendingLog.model_validate(item) for item in json.loads(blob)]

    def _save(self, entries: List[PendingLog]) -> None:
        if not entries:
            self._store.remove(self._key)
            return
        self._store.set(
            self._key,
            json.dumps([e.model_dump(mode="json") for e in entries]),
        )

    def pending(self) -> List[PendingLog]:
        """Queued sessions, oldest first."""
        return self._load()

    def __len__(self) -> int:
        return len(self._load())

    def __contains__(self, session_id: str) -> bool:
        return any(e.session_id == session_id for e in self._load())

    def enqueue(
        self,
        training_log: TrainingLog,
        logged_sets: List[LoggedSet],
        error: Optional[str] = None,
    ) -> str:
        """
        Queue a finalized session for a later sync.

        Args:
            training_log: Finalized log
            logged_sets: Its set records
            error: Why the immediate write failed, kept for display

        Returns:
            The session id (queue key)
        """
        entries = self._load()
        entry = PendingLog(
            training_log=training_log,
            logged_sets=logged_sets,
            last_error=error,
        )

        for i, existing in enumerate(entries):
            if existing.session_id == entry.session_id:
                entry.attempts = existing.attempts
                entry.queued_at = existing.queued_at
                entries[i] = entry
                break
        else:
            entries.append(entry)

        self._save(entries)
        logger.info(f"Queued session {entry.session_id} for sync ({len(entries)} pending)")
        return entry.session_id

    def drain(self, writer: TrainingLogWriter) -> SyncReport:
        """
        Retry every queued session in insertion order.

        Successful entries are removed; failed ones stay queued with their
        attempt counter bumped.

        Args:
            writer: Destination for the training logs

        Returns:
            SyncReport with the per-session outcome
        """
        report = SyncReport()
        remaining: List[PendingLog] = []

        for entry in self._load():
            try:
                writer.record(entry.training_log, entry.logged_sets)
            except PersistenceError as e:
                entry.attempts += 1
                entry.last_error = str(e)
                remaining.append(entry)
                report.results[entry.session_id] = SyncStatus.FAILED
                report.errors[entry.session_id] = str(e)
                logger.warning(
                    f"Sync of session {entry.session_id} failed "
                    f"(attempt {entry.attempts}): {e}"
                )
                continue

            report.results[entry.session_id] = SyncStatus.SYNCED
            logger.info(f"Synced session {entry.session_id}")

        self._save(remaining)
        report.remaining = len(remaining)
        return report

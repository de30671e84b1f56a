"""
RecordTrainingLog Use Case.

Server side of session finalize and offline sync. Writes a training log and
its set records atomically, deduplicating on the session id so a retried
finalize never creates a second log.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from application.exceptions import AuthorizationError, ValidationError
from application.ports import BatchOp, RecordStore
from domain.models import LoggedSet, TrainingLog

logger = logging.getLogger(__name__)

TRAINING_LOGS = "training_logs"
LOGGED_SETS = "logged_sets"


@dataclass
class RecordTrainingLogResult:
    """Result of the RecordTrainingLog use case execution."""

    training_log: TrainingLog
    created: bool


class RecordTrainingLogUseCase:
    """
    Use case for persisting finalized sessions.

    Also satisfies the TrainingLogWriter port through record(), so a session
    engine running next to the record store can write through it directly.
    """

    def __init__(self, record_store: RecordStore) -> None:
        self._store = record_store

    def find_existing(self, session_id: str) -> Optional[TrainingLog]:
        rows = self._store.query(TRAINING_LOGS, [("session_id", "==", session_id)], limit=1)
        if not rows:
            return None
        return TrainingLog.model_validate(rows[0])

    def execute(
        self,
        training_log: TrainingLog,
        logged_sets: List[LoggedSet],
        user_id: Optional[str] = None,
    ) -> RecordTrainingLogResult:
        """
        Store a training log with its set records.

        Args:
            training_log: Finalized log; its session_id is the idempotency key
            logged_sets: Set records belonging to the same session
            user_id: Authenticated caller; must be the log's athlete when given

        Returns:
            RecordTrainingLogResult, created=False when the session was already stored

        Raises:
            AuthorizationError: If user_id is not the log's athlete
            ValidationError: If a set record belongs to another session or athlete
            PersistenceError: If the batch write fails
        """
        if user_id is not None and training_log.athlete_id != user_id:
            raise AuthorizationError("Training logs can only be recorded by their athlete")

        mismatched = [
            s.id
            for s in logged_sets
            if s.session_id != training_log.session_id or s.athlete_id != training_log.athlete_id
        ]
        if mismatched:
            raise ValidationError(
                "Logged sets do not belong to this session", errors=mismatched
            )

        existing = self.find_existing(training_log.session_id)
        if existing is not None:
            logger.info(f"Session {training_log.session_id} already recorded, skipping")
            return RecordTrainingLogResult(training_log=existing, created=False)

        ops = [
            BatchOp(
                "set",
                TRAINING_LOGS,
                training_log.session_id,
                {"id": training_log.session_id, **training_log.model_dump(mode="json")},
            )
        ]
        ops.extend(
            BatchOp("set", LOGGED_SETS, s.id, s.model_dump(mode="json"))
            for s in logged_sets
        )
        self._store.batch_write(ops)

        logger.info(
            f"Recorded session {training_log.session_id} for athlete "
            f"{training_log.athlete_id} ({len(logged_sets)} sets)"
        )
        return RecordTrainingLogResult(training_log=training_log, created=True)

    def record(self, training_log: TrainingLog, logged_sets: List[LoggedSet]) -> TrainingLog:
        """TrainingLogWriter entry point."""
        return self.execute(training_log, logged_sets).training_log

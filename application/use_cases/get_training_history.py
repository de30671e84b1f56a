"""
GetTrainingHistory Use Case.

Lists an athlete's finalized training logs, newest first.
"""

from typing import List

from application.exceptions import ValidationError
from application.ports import OrderBy, RecordStore
from domain.models import TrainingLog

TRAINING_LOGS = "training_logs"

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100


class GetTrainingHistoryUseCase:
    """Use case for reading an athlete's training history."""

    def __init__(self, record_store: RecordStore) -> None:
        self._store = record_store

    def execute(self, athlete_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> List[TrainingLog]:
        """
        Return up to `limit` logs, most recent date first.

        Raises:
            ValidationError: If limit is outside 1-100
        """
        if not 1 <= limit <= MAX_HISTORY_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_HISTORY_LIMIT}")
        rows = self._store.query(
            TRAINING_LOGS,
            [("athlete_id", "==", athlete_id)],
            order_by=OrderBy("date", descending=True),
            limit=limit,
        )
        return [TrainingLog.model_validate(r) for r in rows]

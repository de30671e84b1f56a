"""
Calendar classification for assigned routines.

Combines an athlete's active routine with their finalized training logs to
describe each date: what was planned (no plan, rest, training) and what
happened (completed, pending, missed, extra session).
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Set

from application.exceptions import ValidationError
from application.ports import OrderBy, RecordStore
from domain.models import AssignedRoutine, ScheduleDay

logger = logging.getLogger(__name__)

ASSIGNED_ROUTINES = "assigned_routines"
TRAINING_LOGS = "training_logs"

MAX_CALENDAR_DAYS = 62


# =============================================================================
# Enums
# =============================================================================


class DayPlan(str, Enum):
    """What the routine prescribes for a date."""

    NO_PLAN = "no_plan"
    REST = "rest"
    TRAINING = "training"


class DayOutcome(str, Enum):
    """Plan combined with whether a log was recorded."""

    COMPLETED = "completed"
    PENDING = "pending"
    MISSED = "missed"
    REST = "rest"
    EXTRA_SESSION = "extra_session"
    NO_PLAN = "no_plan"


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class DayClassification:
    """Classification of one calendar date."""

    date: date
    weekday_index: int
    plan: DayPlan
    outcome: DayOutcome
    recorded: bool
    exercise_count: int = 0
    day_id: Optional[str] = None
    day_name: Optional[str] = None


# =============================================================================
# Classification
# =============================================================================


def weekday_index(day: date) -> int:
    """Monday=0 .. Sunday=6."""
    return day.weekday()


def _schedule_day_for(routine: AssignedRoutine, day: date) -> Optional[ScheduleDay]:
    if len(routine.schedule) == 1:
        return routine.schedule[0]
    index = weekday_index(day)
    if index >= len(routine.schedule):
        return None
    return routine.schedule[index]


def classify_day(
    day: date,
    routine: Optional[AssignedRoutine],
    recorded: bool,
    today: date,
) -> DayClassification:
    """
    Classify a single date.

    Args:
        day: The date to classify
        routine: The athlete's assigned routine, or None
        recorded: Whether at least one training log exists on that date
        today: Reference date separating "missed" from "pending"

    Returns:
        DayClassification for the date
    """
    index = weekday_index(day)

    if routine is None or day < routine.start_date:
        return DayClassification(
            date=day,
            weekday_index=index,
            plan=DayPlan.NO_PLAN,
            outcome=DayOutcome.EXTRA_SESSION if recorded else DayOutcome.NO_PLAN,
            recorded=recorded,
        )

    scheduled = _schedule_day_for(routine, day)
    if scheduled is None or scheduled.is_rest:
        return DayClassification(
            date=day,
            weekday_index=index,
            plan=DayPlan.REST,
            outcome=DayOutcome.EXTRA_SESSION if recorded else DayOutcome.REST,
            recorded=recorded,
            day_id=scheduled.id if scheduled else None,
            day_name=scheduled.name if scheduled else None,
        )

    if recorded:
        outcome = DayOutcome.COMPLETED
    elif day < today:
        outcome = DayOutcome.MISSED
    else:
        outcome = DayOutcome.PENDING

    return DayClassification(
        date=day,
        weekday_index=index,
        plan=DayPlan.TRAINING,
        outcome=outcome,
        recorded=recorded,
        exercise_count=scheduled.exercise_count,
        day_id=scheduled.id,
        day_name=scheduled.name,
    )


def classify_range(
    start: date,
    end: date,
    routine: Optional[AssignedRoutine],
    recorded_dates: Iterable[date],
    today: date,
) -> List[DayClassification]:
    """Classify every date from start to end inclusive."""
    recorded: Set[date] = set(recorded_dates)
    days = []
    current = start
    while current <= end:
        days.append(classify_day(current, routine, current in recorded, today))
        current += timedelta(days=1)
    return days


# =============================================================================
# Service
# =============================================================================


class CalendarService:
    """
    Reads an athlete's active routine and logs to build a calendar view.

    Read-only: never writes to the record store.
    """

    def __init__(self, record_store: RecordStore):
        self._store = record_store

    def get_active_routine(self, athlete_id: str) -> Optional[AssignedRoutine]:
        """Return the athlete's active routine, or None."""
        rows = self._store.query(
            ASSIGNED_ROUTINES,
            [("athlete_id", "==", athlete_id), ("active", "==", True)],
            order_by=OrderBy("created_at", descending=True),
            limit=1,
        )
        if not rows:
            return None
        return AssignedRoutine.model_validate(rows[0])

    def get_recorded_dates(self, athlete_id: str, start: date, end: date) -> Set[date]:
        rows = self._store.query(
            TRAINING_LOGS,
            [
                ("athlete_id", "==", athlete_id),
                ("date", ">=", start.isoformat()),
                ("date", "<=", end.isoformat()),
            ],
        )
        recorded = set()
        for row in rows:
            value = row.get("date")
            if isinstance(value, date):
                recorded.add(value)
            elif value:
                recorded.add(date.fromisoformat(str(value)[:10]))
        return recorded

    def get_calendar(
        self,
        athlete_id: str,
        start: date,
        end: date,
        today: Optional[date] = None,
    ) -> List[DayClassification]:
        """
        Classify every date in [start, end] for an athlete.

        Raises:
            ValidationError: If end precedes start or the range is too long
        """
        if end < start:
            raise ValidationError("Calendar end date must not precede start date")
        if (end - start).days + 1 > MAX_CALENDAR_DAYS:
            raise ValidationError(f"Calendar range is limited to {MAX_CALENDAR_DAYS} days")

        routine = self.get_active_routine(athlete_id)
        recorded = self.get_recorded_dates(athlete_id, start, end)
        logger.debug(
            f"Calendar for {athlete_id}: {len(recorded)} recorded dates, "
            f"routine={routine.id if routine else None}"
        )
        return classify_range(start, end, routine, recorded, today or date.today())

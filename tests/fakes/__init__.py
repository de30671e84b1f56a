"""
Fake implementations of the training core ports for testing.

This package provides in-memory fakes for fast, isolated testing. No
database, filesystem or network required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Factory functions for common documents (templates, routines, logs)

Usage:
    from tests.fakes import FakeRecordStore, create_template_doc

    store = FakeRecordStore()
    store.seed("routine_templates", [create_template_doc(coach_id="coach-1")])
"""
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from domain.models import (
    AssignedRoutine,
    ExerciseSpec,
    LoggedSet,
    RoutineTemplate,
    RoutineType,
    ScheduleDay,
    TrainingLog,
    TrainingLogExercise,
    TrainingLogSet,
)

from tests.fakes.record_store import FakeRecordStore
from tests.fakes.device_store import FakeDeviceStore
from tests.fakes.training_log_writer import FakeTrainingLogWriter
from tests.fakes.capability_resolver import COACH_CAPABILITIES, FakeCapabilityResolver


# =============================================================================
# Factory Functions
# =============================================================================


def create_training_day(name: str, *exercise_ids: str, day_id: Optional[str] = None) -> ScheduleDay:
    """A training day with three working sets of each exercise."""
    exercises = [
        ExerciseSpec(
            exercise_id=exercise_id,
            exercise_name=exercise_id.replace("-", " ").title(),
            sets=3,
            reps="5",
            rpe=8,
        )
        for exercise_id in exercise_ids or ("squat",)
    ]
    if day_id is None:
        return ScheduleDay(name=name, exercises=exercises)
    return ScheduleDay(id=day_id, name=name, exercises=exercises)


def create_template_doc(
    *,
    template_id: str = "tpl-1",
    coach_id: str = "coach-1",
    routine_type: RoutineType = RoutineType.WEEKLY,
    num_days: int = 3,
) -> Dict[str, Any]:
    """
    Create a routine template document as stored in routine_templates.

    Args:
        template_id: Document id
        coach_id: Owning coach
        routine_type: weekly or daily
        num_days: Number of training days ("Day A", "Day B", ...)
    """
    schedule = [
        create_training_day(f"Day {chr(ord('A') + i)}", "squat", day_id=f"day-{i + 1}")
        for i in range(num_days)
    ]
    template = RoutineTemplate(
        id=template_id,
        coach_id=coach_id,
        name="Strength Block",
        type=routine_type,
        schedule=schedule,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    return template.model_dump(mode="json")


def create_routine(
    *,
    routine_id: str = "routine-1",
    athlete_id: str = "athlete-1",
    schedule: Optional[List[ScheduleDay]] = None,
    start_date: date = date(2024, 1, 1),
    routine_type: RoutineType = RoutineType.WEEKLY,
    active: bool = True,
) -> AssignedRoutine:
    """Create an assigned routine (not stored)."""
    return AssignedRoutine(
        id=routine_id,
        athlete_id=athlete_id,
        coach_id="coach-1",
        template_id="tpl-1",
        name="Strength Block",
        type=routine_type,
        schedule=schedule or [create_training_day("Monday", "squat", day_id="day-a")],
        active=active,
        start_date=start_date,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def create_training_log_doc(
    *,
    session_id: str,
    athlete_id: str = "athlete-1",
    log_date: date = date(2024, 1, 1),
    exercises: Optional[List[TrainingLogExercise]] = None,
    duration_seconds: int = 0,
) -> Dict[str, Any]:
    """Create a training log document as stored in training_logs."""
    log = TrainingLog(
        session_id=session_id,
        athlete_id=athlete_id,
        date=log_date,
        duration_seconds=duration_seconds,
        exercises=exercises
        or [
            TrainingLogExercise(
                exercise_id="squat",
                exercise_name="Squat",
                sets=[TrainingLogSet(weight=100, reps=5, completed=True)],
            )
        ],
    )
    return {"id": session_id, **log.model_dump(mode="json")}


def create_logged_set_doc(
    *,
    session_id: str,
    n: int,
    weight: float,
    reps: int,
    rpe: Optional[float] = None,
    exercise_id: str = "squat",
    athlete_id: str = "athlete-1",
    logged_at: datetime = datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc),
) -> Dict[str, Any]:
    """Create a logged set document as stored in logged_sets."""
    logged = LoggedSet(
        id=f"{session_id}-{n}",
        session_id=session_id,
        athlete_id=athlete_id,
        exercise_id=exercise_id,
        weight=weight,
        reps=reps,
        rpe=rpe,
        completed=True,
        logged_at=logged_at,
    )
    return logged.model_dump(mode="json")


__all__ = [
    "FakeRecordStore",
    "FakeDeviceStore",
    "FakeTrainingLogWriter",
    "FakeCapabilityResolver",
    "COACH_CAPABILITIES",
    "create_training_day",
    "create_template_doc",
    "create_routine",
    "create_training_log_doc",
    "create_logged_set_doc",
]

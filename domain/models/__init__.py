"""
Domain models for the training core.

These models are independent of infrastructure concerns (database, API,
device storage) and represent the core business concepts:
- RoutineTemplate: coach-authored routine with 1-7 schedule days
- AssignedRoutine: athlete-bound, Monday-first copy of a template
- TrainingSession: resumable state of one workout on a device
- TrainingLog / LoggedSet: finalized records of what was performed
- ProgressionSuggestion / PersonalRecord: derived read models

Usage:
    >>> from domain.models import ExerciseSpec, ScheduleDay, RoutineTemplate

    >>> template = RoutineTemplate(
    ...     coach_id="coach-1",
    ...     name="Upper/Lower",
    ...     schedule=[
    ...         ScheduleDay(name="Upper", exercises=[
    ...             ExerciseSpec(exercise_id="bench", exercise_name="Bench Press", sets=3, reps=8),
    ...         ]),
    ...         ScheduleDay(name="Lower", exercises=[
    ...             ExerciseSpec(exercise_id="squat", exercise_name="Back Squat", sets=3, reps=5),
    ...         ]),
    ...     ],
    ... )
    >>> len(template.training_days)
    2
"""

from domain.models.routine import (
    AssignedRoutine,
    ExerciseSpec,
    RoutineTemplate,
    RoutineType,
    ScheduleDay,
    SetSpec,
    SetType,
)
from domain.models.training import (
    LoggedSet,
    MonthlyStats,
    PersonalRecord,
    ProgressionSuggestion,
    StrengthProgress,
    TrainingLog,
    TrainingLogExercise,
    TrainingLogSet,
    WeeklyProgress,
)
from domain.models.session import (
    SessionExercise,
    SessionSet,
    SessionState,
    TrainingSession,
)

__all__ = [
    # Routines
    "RoutineTemplate",
    "AssignedRoutine",
    "ScheduleDay",
    "ExerciseSpec",
    "SetSpec",
    # Training records
    "TrainingLog",
    "TrainingLogExercise",
    "TrainingLogSet",
    "LoggedSet",
    "ProgressionSuggestion",
    "PersonalRecord",
    "WeeklyProgress",
    "StrengthProgress",
    "MonthlyStats",
    # Session state
    "TrainingSession",
    "SessionExercise",
    "SessionSet",
    # Enums
    "RoutineType",
    "SetType",
    "SessionState",
]

"""
Domain layer for the training core.

Pure models and converters, independent of infrastructure concerns
(database, API, device storage).
"""

from domain.models import (
    AssignedRoutine,
    ExerciseSpec,
    LoggedSet,
    RoutineTemplate,
    RoutineType,
    ScheduleDay,
    SessionState,
    SetSpec,
    SetType,
    TrainingLog,
    TrainingSession,
)

__all__ = [
    "AssignedRoutine",
    "ExerciseSpec",
    "LoggedSet",
    "RoutineTemplate",
    "RoutineType",
    "ScheduleDay",
    "SessionState",
    "SetSpec",
    "SetType",
    "TrainingLog",
    "TrainingSession",
]

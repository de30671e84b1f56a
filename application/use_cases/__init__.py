"""
Application Use Cases for the training core.

This package contains application-level use cases that orchestrate domain
logic and coordinate between ports/adapters. Use cases are the entry points
for server-side business operations.

Architecture follows Clean Architecture / Hexagonal pattern:
- Use cases orchestrate domain objects and record store ports
- Dependencies are injected via constructors for testability
- Use cases return domain models or Result dataclasses, not API responses

Usage:
    from application.use_cases import AssignRoutineUseCase

    use_case = AssignRoutineUseCase(record_store=store)
    result = use_case.execute(
        template_id="tpl-1",
        athlete_id="athlete-1",
        actor_id="coach-1",
        capabilities=capabilities,
    )
"""

from application.use_cases.assign_routine import (
    AssignRoutineUseCase,
    AssignRoutineResult,
)
from application.use_cases.record_training_log import (
    RecordTrainingLogUseCase,
    RecordTrainingLogResult,
)
from application.use_cases.manage_templates import ManageTemplatesUseCase
from application.use_cases.log_retroactive_workout import (
    LogRetroactiveWorkoutUseCase,
    RetroactiveExercise,
    RetroactiveSet,
    slugify_exercise,
)
from application.use_cases.get_training_history import GetTrainingHistoryUseCase

__all__ = [
    # Assignment
    "AssignRoutineUseCase",
    "AssignRoutineResult",
    # Training logs
    "RecordTrainingLogUseCase",
    "RecordTrainingLogResult",
    "LogRetroactiveWorkoutUseCase",
    "RetroactiveExercise",
    "RetroactiveSet",
    "slugify_exercise",
    "GetTrainingHistoryUseCase",
    # Templates
    "ManageTemplatesUseCase",
]

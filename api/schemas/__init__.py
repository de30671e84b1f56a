"""
Pydantic schemas for API requests and responses.

Organized by feature/domain:
- routines: Templates and assignments
- training: Training logs, calendar and progression
"""

from api.schemas.routines import (
    AssignRoutineRequest,
    AssignRoutineResponse,
    AssignedRoutineResponse,
    RoutineTemplateListResponse,
    RoutineTemplateRequest,
    RoutineTemplateResponse,
)
from api.schemas.training import (
    CalendarDayResponse,
    CalendarResponse,
    PersonalRecordItem,
    PersonalRecordsResponse,
    ProgressionSuggestionResponse,
    RecordTrainingLogRequest,
    RecordTrainingLogResponse,
    RetroactiveExerciseRequest,
    RetroactiveSetRequest,
    RetroactiveWorkoutRequest,
    SuggestionEnvelope,
    TrainingHistoryResponse,
    WeeklyProgressResponse,
    StrengthProgressResponse,
    MonthlyStatsResponse,
)

__all__ = [
    "AssignRoutineRequest",
    "AssignRoutineResponse",
    "AssignedRoutineResponse",
    "RoutineTemplateListResponse",
    "RoutineTemplateRequest",
    "RoutineTemplateResponse",
    "CalendarDayResponse",
    "CalendarResponse",
    "PersonalRecordItem",
    "PersonalRecordsResponse",
    "ProgressionSuggestionResponse",
    "RecordTrainingLogRequest",
    "RecordTrainingLogResponse",
    "RetroactiveExerciseRequest",
    "RetroactiveSetRequest",
    "RetroactiveWorkoutRequest",
    "SuggestionEnvelope",
    "TrainingHistoryResponse",
    "WeeklyProgressResponse",
    "StrengthProgressResponse",
    "MonthlyStatsResponse",
]

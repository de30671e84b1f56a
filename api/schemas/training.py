"""Request and response models for training logs, calendar and progression."""

import datetime as dt
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.models import LoggedSet, TrainingLog


# =============================================================================
# Training Logs
# =============================================================================


class RecordTrainingLogRequest(BaseModel):
    """Finalized session as sent by a device."""
    training_log: TrainingLog
    logged_sets: List[LoggedSet] = Field(default_factory=list)


class RecordTrainingLogResponse(BaseModel):
    training_log: TrainingLog
    created: bool


class RetroactiveSetRequest(BaseModel):
    weight: float = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)


class RetroactiveExerciseRequest(BaseModel):
    exercise_name: str = ""
    exercise_id: Optional[str] = None
    sets: List[RetroactiveSetRequest] = Field(default_factory=list)


class RetroactiveWorkoutRequest(BaseModel):
    """A workout logged after the fact."""
    date: dt.date
    duration_minutes: int = Field(default=0, ge=0, le=24 * 60)
    session_rpe: Optional[float] = Field(default=None, ge=1, le=10)
    notes: str = Field(default="", max_length=5000)
    exercises: List[RetroactiveExerciseRequest] = Field(default_factory=list)


class TrainingHistoryResponse(BaseModel):
    logs: List[TrainingLog]
    total: int


# =============================================================================
# Calendar
# =============================================================================


class CalendarDayResponse(BaseModel):
    date: dt.date
    weekday_index: int
    plan: str
    outcome: str
    recorded: bool
    exercise_count: int = 0
    day_id: Optional[str] = None
    day_name: Optional[str] = None


class CalendarResponse(BaseModel):
    athlete_id: str
    routine_id: Optional[str] = None
    start_date: Optional[date] = None
    days: List[CalendarDayResponse]


# =============================================================================
# Progression
# =============================================================================


class ProgressionSuggestionResponse(BaseModel):
    exercise_id: str
    suggested_weight: float
    reason: str
    reason_code: str
    last_weight: float
    last_reps: int
    last_rpe: Optional[float] = None
    last_date: Optional[datetime] = None


class SuggestionEnvelope(BaseModel):
    """Suggestion is null when the athlete has no history for the exercise."""
    suggestion: Optional[ProgressionSuggestionResponse] = None


class PersonalRecordItem(BaseModel):
    exercise_id: str
    exercise_name: str
    weight: float
    reps: int
    achieved_on: date
    session_id: str


class PersonalRecordsResponse(BaseModel):
    records: List[PersonalRecordItem]


class WeeklyProgressResponse(BaseModel):
    week_start: date
    completed: int
    target: int


class StrengthProgressResponse(BaseModel):
    """Percent change of average estimated 1RM, newer half of history vs older half."""
    percent_change: float
    recent_e1rm: float
    older_e1rm: float
    logs_compared: int


class MonthlyStatsResponse(BaseModel):
    month_start: date
    total_sessions: int
    duration_hours: float
    total_volume: float

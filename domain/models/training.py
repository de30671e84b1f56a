"""
Training records: what an athlete actually performed.

LoggedSet rows are append-only; a TrainingLog is immutable once stored.
"""

import datetime as dt
from datetime import date, datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from domain.models.routine import SetType


class LoggedSet(BaseModel):
    """One performed set, stored as its own record for progression queries."""

    id: str = Field(..., min_length=1, description="Deterministic id: {session_id}-{n}")
    session_id: str = Field(..., min_length=1)
    athlete_id: str = Field(..., min_length=1)
    exercise_id: str = Field(..., min_length=1, description="Exercise actually performed")
    weight: float = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    completed: bool = False
    logged_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TrainingLogSet(BaseModel):
    weight: float = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    completed: bool = False
    set_type: SetType = SetType.WORKING

    @property
    def volume(self) -> float:
        return self.weight * self.reps


class TrainingLogExercise(BaseModel):
    """Sets performed for one executed exercise, grouped by exercise id."""

    exercise_id: str = Field(..., min_length=1)
    exercise_name: str = ""
    planned_exercise_id: Optional[str] = None
    feedback: str = ""
    sets: List[TrainingLogSet] = Field(default_factory=list)


class TrainingLog(BaseModel):
    """
    A finalized session.

    total_volume and total_sets are derived from the exercises on every
    construction, so values supplied by a caller are ignored.

    Examples:
        >>> log = TrainingLog(
        ...     session_id="s1",
        ...     athlete_id="a1",
        ...     date=date(2024, 3, 4),
        ...     exercises=[TrainingLogExercise(
        ...         exercise_id="squat",
        ...         sets=[TrainingLogSet(weight=100, reps=5), TrainingLogSet(weight=100, reps=3)],
        ...     )],
        ... )
        >>> log.total_volume, log.total_sets
        (800.0, 2)
    """

    session_id: str = Field(..., min_length=1, description="Idempotency key and document id")
    athlete_id: str = Field(..., min_length=1)
    routine_id: Optional[str] = None
    day_id: Optional[str] = None
    day_name: Optional[str] = None
    date: dt.date
    duration_seconds: int = Field(default=0, ge=0)
    session_rpe: Optional[float] = Field(default=None, ge=1, le=10)
    notes: str = ""
    status: Literal["completed"] = "completed"
    exercises: List[TrainingLogExercise] = Field(default_factory=list)
    total_volume: float = 0
    total_sets: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _compute_totals(self) -> "TrainingLog":
        sets = [s for e in self.exercises for s in e.sets]
        self.total_volume = float(sum(s.volume for s in sets))
        self.total_sets = len(sets)
        return self

    @property
    def id(self) -> str:
        return self.session_id

    @property
    def duration_minutes(self) -> int:
        return round(self.duration_seconds / 60)


class ProgressionSuggestion(BaseModel):
    """Next-load recommendation for one exercise. Derived, never persisted."""

    exercise_id: str
    suggested_weight: float
    reason: str
    reason_code: str
    last_weight: float
    last_reps: int
    last_rpe: Optional[float] = None
    last_date: Optional[datetime] = None
    session_id: Optional[str] = None


class PersonalRecord(BaseModel):
    """Heaviest completed set for an exercise within the recent history window."""

    exercise_id: str
    exercise_name: str
    weight: float
    reps: int
    achieved_on: date
    session_id: str


class WeeklyProgress(BaseModel):
    """Sessions logged since Monday against the weekly session target."""

    week_start: date
    completed: int
    target: int


class StrengthProgress(BaseModel):
    """
    Change in average estimated 1RM between the recent and older halves of
    the history window, in percent (one decimal).
    """

    percent_change: float = 0.0
    recent_e1rm: float = 0.0
    older_e1rm: float = 0.0
    logs_compared: int = 0


class MonthlyStats(BaseModel):
    """Totals over the training logs dated in the current calendar month."""

    month_start: date
    total_sessions: int = 0
    duration_hours: float = 0.0
    total_volume: float = 0.0

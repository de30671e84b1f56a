"""
Routine models: templates authored by coaches and the assigned copies
athletes actually train from.
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from domain.converters.set_specs import normalize_exercise_payload, normalize_set


class SetType(str, Enum):
    """Kind of set within an exercise prescription."""

    WARMUP = "warmup"
    WORKING = "working"
    FAILURE = "failure"
    DROP = "drop"


class RoutineType(str, Enum):
    """How a template is scheduled: one repeating day or a weekly split."""

    DAILY = "daily"
    WEEKLY = "weekly"


def _new_day_id() -> str:
    return uuid.uuid4().hex[:12]


class SetSpec(BaseModel):
    """
    Planned set: type, rep target, RPE target and rest.

    Reps are kept as a string so ranges ("8-12") and single numbers share a
    type.
    """

    type: SetType = Field(default=SetType.WORKING, description="Set type")
    reps: str = Field(default="10-12", min_length=1, description="Target reps, number or range")
    rpe_target: Optional[float] = Field(default=None, ge=1, le=10, description="Target RPE (1-10)")
    rest_seconds: Optional[int] = Field(default=None, ge=0, description="Rest after this set")

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data):
        return normalize_set(data)

    @field_validator("reps", mode="before")
    @classmethod
    def _reps_to_str(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v)) if float(v).is_integer() else str(v)
        return v


class ExerciseSpec(BaseModel):
    """
    Planned exercise within a schedule day.

    Examples:
        >>> spec = ExerciseSpec(exercise_id="squat", exercise_name="Back Squat", sets=3, reps=5)
        >>> [s.reps for s in spec.sets]
        ['5', '5', '5']
    """

    exercise_id: str = Field(..., min_length=1, description="Planned exercise id")
    exercise_name: str = Field(..., min_length=1, description="Display name")
    notes: str = Field(default="", description="Freeform coaching notes")
    sets: List[SetSpec] = Field(default_factory=list, description="Ordered set prescription")
    rest_seconds: Optional[int] = Field(
        default=None, ge=0, description="Rest between sets when the set itself has none"
    )
    variants: List[str] = Field(
        default_factory=list, description="Alternate exercise ids allowed as substitutes"
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize_payload(cls, data):
        return normalize_exercise_payload(data)

    @field_validator("notes", mode="before")
    @classmethod
    def _none_notes(cls, v):
        return v if v is not None else ""


class ScheduleDay(BaseModel):
    """One day of a schedule: a training day with exercises, or a rest day."""

    id: str = Field(default_factory=_new_day_id, min_length=1)
    name: str = Field(..., min_length=1, description="Display name")
    is_rest: bool = Field(default=False)
    exercises: List[ExerciseSpec] = Field(default_factory=list)
    source_name: Optional[str] = Field(
        default=None, description="Template day name when renamed to a weekday label"
    )

    @property
    def exercise_count(self) -> int:
        return 0 if self.is_rest else len(self.exercises)


class RoutineTemplate(BaseModel):
    """
    Coach-authored, reusable routine definition.

    The schedule holds 1-7 days in training order. Day count rules are
    enforced by the use cases so they surface as domain validation errors.
    """

    id: Optional[str] = None
    coach_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    type: RoutineType = RoutineType.WEEKLY
    schedule: List[ScheduleDay] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def training_days(self) -> List[ScheduleDay]:
        return [d for d in self.schedule if not d.is_rest]


class AssignedRoutine(BaseModel):
    """
    Athlete-specific copy of a template, the unit that is scheduled and trained.

    Weekly routines always carry exactly 7 days (Monday first); daily
    routines carry their single day, which applies to every date.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    athlete_id: str = Field(..., min_length=1)
    coach_id: str = Field(..., min_length=1)
    template_id: str = Field(..., min_length=1)
    name: str
    type: RoutineType
    schedule: List[ScheduleDay]
    active: bool = True
    start_date: date
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def training_days(self) -> List[ScheduleDay]:
        return [d for d in self.schedule if not d.is_rest]

    def get_day(self, day_id: str) -> Optional[ScheduleDay]:
        """Find a schedule day by id."""
        for day in self.schedule:
            if day.id == day_id:
                return day
        return None

"""
Device-local workout session state.

A TrainingSession is the full, serializable state of one run through a
schedule day. It is written to the device store after every change and
restored verbatim on reload, so everything the engine needs lives here.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.models.routine import ExerciseSpec, SetSpec, SetType


class SessionState(str, Enum):
    """Lifecycle states of a workout session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    RESTING = "resting"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.CANCELLED)


class SessionSet(BaseModel):
    """Logged values for one planned set, plus the targets shown alongside."""

    weight: float = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    completed: bool = False
    target_reps: str = ""
    target_rpe: Optional[float] = None
    set_type: SetType = SetType.WORKING
    rest_seconds: Optional[int] = None

    @classmethod
    def placeholder(cls, spec: SetSpec) -> "SessionSet":
        """Empty set carrying the plan's targets."""
        return cls(
            target_reps=spec.reps,
            target_rpe=spec.rpe_target,
            set_type=spec.type,
            rest_seconds=spec.rest_seconds,
        )

    @property
    def has_values(self) -> bool:
        return self.weight > 0 or self.reps > 0


class SessionExercise(BaseModel):
    """
    One slot of the mutable exercise list.

    `planned` is what the routine prescribed (or what a swap/add put in the
    slot). `exercise_id_used` is what was actually performed; it differs from
    the plan when a variant is selected.
    """

    planned: ExerciseSpec
    exercise_id_used: str
    exercise_name_used: str
    feedback: str = ""
    sets: List[SessionSet] = Field(default_factory=list)

    @classmethod
    def from_spec(cls, spec: ExerciseSpec) -> "SessionExercise":
        return cls(
            planned=spec,
            exercise_id_used=spec.exercise_id,
            exercise_name_used=spec.exercise_name,
            sets=[SessionSet.placeholder(s) for s in spec.sets],
        )


class TrainingSession(BaseModel):
    """Pointer state and logged values for one in-flight workout."""

    session_id: str = Field(..., min_length=1)
    athlete_id: str = Field(..., min_length=1)
    routine_id: str = Field(..., min_length=1)
    day_id: str = Field(..., min_length=1)
    day_name: str = ""
    state: SessionState = SessionState.NOT_STARTED
    current_exercise_index: int = Field(default=0, ge=0)
    current_set_index: int = Field(default=0, ge=0)
    elapsed_seconds: int = Field(default=0, ge=0)
    rest_remaining_seconds: int = Field(default=0, ge=0)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    exercises: List[SessionExercise] = Field(default_factory=list)

    @property
    def is_resting(self) -> bool:
        return self.state == SessionState.RESTING

    @property
    def current_exercise(self) -> Optional[SessionExercise]:
        if 0 <= self.current_exercise_index < len(self.exercises):
            return self.exercises[self.current_exercise_index]
        return None

"""
LogRetroactiveWorkout Use Case.

Lets an athlete record a workout after the fact: an explicit past date,
duration in minutes, session RPE and notes. The result goes through the
same idempotent write path as a finalized session.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Callable, List, Optional

from application.exceptions import ValidationError
from application.use_cases.record_training_log import (
    RecordTrainingLogResult,
    RecordTrainingLogUseCase,
)
from domain.models import LoggedSet, TrainingLog, TrainingLogExercise, TrainingLogSet

logger = logging.getLogger(__name__)


def slugify_exercise(name: str) -> str:
    """Exercise id derived from a free-typed name."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


@dataclass
class RetroactiveSet:
    weight: float = 0
    reps: int = 0
    rpe: Optional[float] = None


@dataclass
class RetroactiveExercise:
    exercise_name: str
    exercise_id: Optional[str] = None
    sets: List[RetroactiveSet] = field(default_factory=list)


class LogRetroactiveWorkoutUseCase:
    """
    Use case for logging a past workout.

    Orchestrates the following workflow:
    1. Validate the date and exercise names
    2. Drop sets with neither weight nor reps
    3. Build a TrainingLog and its LoggedSets under a fresh session id
    4. Persist through RecordTrainingLogUseCase
    """

    def __init__(
        self,
        record_training_log: RecordTrainingLogUseCase,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._record = record_training_log
        self._today = today or date.today

    def execute(
        self,
        athlete_id: str,
        workout_date: date,
        exercises: List[RetroactiveExercise],
        duration_minutes: int = 0,
        session_rpe: Optional[float] = None,
        notes: str = "",
        session_id: Optional[str] = None,
    ) -> RecordTrainingLogResult:
        """
        Record the workout.

        Raises:
            ValidationError: If the date is in the future, an exercise has no
                name, or no set carries any value
            PersistenceError: If the write fails
        """
        errors: List[str] = []
        if workout_date > self._today():
            errors.append("Workout date cannot be in the future")
        if duration_minutes < 0:
            errors.append("Duration cannot be negative")
        if session_rpe is not None and not 1 <= session_rpe <= 10:
            errors.append("Session RPE must be between 1 and 10")
        if not exercises:
            errors.append("At least one exercise is required")
        for i, exercise in enumerate(exercises):
            if not exercise.exercise_name.strip():
                errors.append(f"Exercise {i + 1} needs a name")
        if errors:
            raise ValidationError("Invalid retroactive workout", errors=errors)

        log_exercises = []
        for exercise in exercises:
            sets = [
                TrainingLogSet(weight=s.weight, reps=s.reps, rpe=s.rpe, completed=True)
                for s in exercise.sets
                if s.weight > 0 or s.reps > 0
            ]
            if not sets:
                continue
            name = exercise.exercise_name.strip()
            log_exercises.append(
                TrainingLogExercise(
                    exercise_id=exercise.exercise_id or slugify_exercise(name),
                    exercise_name=name,
                    sets=sets,
                )
            )
        if not log_exercises:
            raise ValidationError("At least one set with weight or reps is required")

        session_id = session_id or str(uuid.uuid4())
        logged_at = datetime.combine(workout_date, time(12, 0), tzinfo=timezone.utc)
        training_log = TrainingLog(
            session_id=session_id,
            athlete_id=athlete_id,
            date=workout_date,
            duration_seconds=duration_minutes * 60,
            session_rpe=session_rpe,
            notes=notes.strip(),
            exercises=log_exercises,
        )
        logged_sets = [
            LoggedSet(
                id=f"{session_id}-{n}",
                session_id=session_id,
                athlete_id=athlete_id,
                exercise_id=exercise.exercise_id,
                weight=s.weight,
                reps=s.reps,
                rpe=s.rpe,
                completed=True,
                logged_at=logged_at,
            )
            for n, (exercise, s) in enumerate(
                (e, s) for e in log_exercises for s in e.sets
            )
        ]

        logger.info(f"Logging retroactive workout {session_id} for {workout_date.isoformat()}")
        return self._record.execute(training_log, logged_sets, user_id=athlete_id)

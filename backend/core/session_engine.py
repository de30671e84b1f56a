"""
Workout Session Engine.

Runs one workout on a device as an explicit state machine:

    not_started -> in_progress <-> resting -> completed
                   in_progress -> cancelled

This module provides:
- SessionStore: load/save/clear of session state in the device store
- WorkoutSession: the session aggregate and every operation on it
- SessionTicker: asyncio task driving the one-second session clock

State is written to the device store after every change so a reload
restores the session exactly. Finalizing hands the log to a
TrainingLogWriter; if that fails the log goes to the offline queue and the
session still completes.
"""

import asyncio
import contextlib
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

import pydantic

from application.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    SessionStateError,
    ValidationError,
)
from application.ports import Capabilities, DeviceStore, TrainingLogWriter
from backend.services.offline_queue import OfflineQueue
from domain.converters import default_working_sets
from domain.models import (
    AssignedRoutine,
    ExerciseSpec,
    LoggedSet,
    SessionExercise,
    SessionSet,
    SessionState,
    SetSpec,
    TrainingLog,
    TrainingLogExercise,
    TrainingLogSet,
    TrainingSession,
)

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session"
DEFAULT_REST_SECONDS = 90
REST_EXTENSION_SECONDS = 30

ACTIVE_STATES = (SessionState.IN_PROGRESS, SessionState.RESTING)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def session_key(routine_id: str, day_id: str) -> str:
    """Device store key for the session of one routine day."""
    return f"{SESSION_KEY_PREFIX}:{routine_id}:{day_id}"


def _with_default_sets(spec: ExerciseSpec) -> ExerciseSpec:
    if spec.sets:
        return spec
    return spec.model_copy(
        update={"sets": [SetSpec.model_validate(s) for s in default_working_sets()]}
    )


# =============================================================================
# Local Persistence
# =============================================================================


class SessionStore:
    """Session state persistence on top of a DeviceStore."""

    def __init__(self, device_store: DeviceStore):
        self._device = device_store

    def load(self, routine_id: str, day_id: str) -> Optional[TrainingSession]:
        """Return the persisted session for a routine day, or None."""
        blob = self._device.get(session_key(routine_id, day_id))
        if not blob:
            return None
        try:
            return TrainingSession.model_validate_json(blob)
        except pydantic.ValidationError as e:
            logger.warning(f"Ignoring unreadable session state for {routine_id}/{day_id}: {e}")
            return None

    def save(self, session: TrainingSession) -> None:
        self._device.set(
            session_key(session.routine_id, session.day_id),
            session.model_dump_json(),
        )

    def clear(self, routine_id: str, day_id: str) -> None:
        self._device.remove(session_key(routine_id, day_id))


# =============================================================================
# Session Aggregate
# =============================================================================


@dataclass
class FinalizeResult:
    """Outcome of finalizing a session."""

    training_log: TrainingLog
    logged_sets: List[LoggedSet]
    queued: bool = False


class WorkoutSession:
    """
    One workout run through a schedule day.

    Create it with WorkoutSession.start(); the constructor wraps an existing
    TrainingSession state and is used for restores and tests.

    Usage:
        session = WorkoutSession.start(
            routine, day_id, athlete_id,
            store=SessionStore(device_store),
            writer=writer,
            offline_queue=OfflineQueue(device_store),
            capabilities=capabilities,
        )
        session.log_set(0, 0, weight=100, reps=5, rpe=8)
        session.toggle_set_complete(0, 0)
        session.advance()
    """

    def __init__(
        self,
        session: TrainingSession,
        *,
        store: SessionStore,
        writer: TrainingLogWriter,
        offline_queue: OfflineQueue,
        capabilities: Optional[Capabilities] = None,
        default_rest_seconds: int = DEFAULT_REST_SECONDS,
        rest_extension_seconds: int = REST_EXTENSION_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._session = session
        self._store = store
        self._writer = writer
        self._queue = offline_queue
        self._capabilities = capabilities or Capabilities()
        self._default_rest = default_rest_seconds
        self._rest_extension = rest_extension_seconds
        self._clock = clock or _local_now

    @classmethod
    def start(
        cls,
        routine: AssignedRoutine,
        day_id: str,
        athlete_id: str,
        *,
        store: SessionStore,
        writer: TrainingLogWriter,
        offline_queue: OfflineQueue,
        capabilities: Optional[Capabilities] = None,
        default_rest_seconds: int = DEFAULT_REST_SECONDS,
        rest_extension_seconds: int = REST_EXTENSION_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
        session_id: Optional[str] = None,
    ) -> "WorkoutSession":
        """
        Start a session for one day of an assigned routine.

        If this device already holds an unfinished session for the same
        routine day, it is restored as-is instead of building a new one.

        Raises:
            AuthorizationError: If the routine belongs to another athlete
            NotFoundError: If the day is not part of the routine
            ValidationError: If the day is a rest day or has no exercises
        """
        options = dict(
            store=store,
            writer=writer,
            offline_queue=offline_queue,
            capabilities=capabilities,
            default_rest_seconds=default_rest_seconds,
            rest_extension_seconds=rest_extension_seconds,
            clock=clock,
        )

        if routine.athlete_id != athlete_id:
            raise AuthorizationError("Routine is assigned to a different athlete")

        restored = store.load(routine.id, day_id)
        if restored is not None and not restored.state.is_terminal:
            logger.info(f"Restored session {restored.session_id} for {routine.id}/{day_id}")
            return cls(restored, **options)

        day = routine.get_day(day_id)
        if day is None:
            raise NotFoundError(
                f"Day '{day_id}' not found in routine {routine.id}", resource="schedule_day"
            )
        if day.is_rest:
            raise ValidationError(f"'{day.name}' is a rest day")
        if not day.exercises:
            raise ValidationError(f"'{day.name}' has no exercises")

        now = (clock or _local_now)()
        state = TrainingSession(
            session_id=session_id or str(uuid.uuid4()),
            athlete_id=athlete_id,
            routine_id=routine.id,
            day_id=day.id,
            day_name=day.source_name or day.name,
            started_at=now,
            exercises=[SessionExercise.from_spec(_with_default_sets(e)) for e in day.exercises],
        )
        session = cls(state, **options)
        state.state = SessionState.IN_PROGRESS
        session._persist()
        logger.info(f"Started session {state.session_id} for {routine.id}/{day_id}")
        return session

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_active(self) -> bool:
        return self._session.state in ACTIVE_STATES

    @property
    def exercises(self) -> List[SessionExercise]:
        return self._session.exercises

    def snapshot(self) -> TrainingSession:
        """Deep copy of the current state."""
        return self._session.model_copy(deep=True)

    @property
    def has_incomplete_sets(self) -> bool:
        """True when some set has values but is not marked complete."""
        return any(
            s.has_values and not s.completed
            for e in self._session.exercises
            for s in e.sets
        )

    @property
    def progress(self) -> float:
        """Fraction of planned sets marked complete."""
        sets = [s for e in self._session.exercises for s in e.sets]
        if not sets:
            return 0.0
        return sum(1 for s in sets if s.completed) / len(sets)

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    def _require_active(self, action: str) -> None:
        if not self.is_active:
            raise SessionStateError(
                f"Cannot {action}: session is {self._session.state.value}",
                state=self._session.state.value,
            )

    def _require_capability(self, capability: str, action: str) -> None:
        if not getattr(self._capabilities, capability):
            raise AuthorizationError(f"Not allowed to {action}")

    def _exercise_at(self, index: int) -> SessionExercise:
        if not 0 <= index < len(self._session.exercises):
            raise ValidationError(f"Exercise index {index} out of range")
        return self._session.exercises[index]

    def _set_at(self, exercise_index: int, set_index: int) -> SessionSet:
        exercise = self._exercise_at(exercise_index)
        if not 0 <= set_index < len(exercise.sets):
            raise ValidationError(
                f"Set index {set_index} out of range for exercise {exercise_index}"
            )
        return exercise.sets[set_index]

    def _persist(self) -> None:
        try:
            self._store.save(self._session)
        except OSError as e:
            logger.warning(f"Could not persist session {self.session_id}: {e}")

    def _clear_local(self) -> None:
        try:
            self._store.clear(self._session.routine_id, self._session.day_id)
        except OSError as e:
            logger.warning(f"Could not clear session {self.session_id}: {e}")

    # -------------------------------------------------------------------------
    # Logging sets
    # -------------------------------------------------------------------------

    def log_set(
        self,
        exercise_index: int,
        set_index: int,
        weight: float,
        reps: int,
        rpe: Optional[float] = None,
    ) -> None:
        """Store values for a set. Does not move the pointer."""
        self._require_active("log a set")
        target = self._set_at(exercise_index, set_index)
        if weight < 0 or reps < 0:
            raise ValidationError("Weight and reps must not be negative")
        if rpe is not None and not 1 <= rpe <= 10:
            raise ValidationError("RPE must be between 1 and 10")

        target.weight = weight
        target.reps = reps
        target.rpe = rpe
        self._persist()

    def toggle_set_complete(self, exercise_index: int, set_index: int) -> bool:
        """Flip a set's completed flag. Returns the new value."""
        self._require_active("complete a set")
        target = self._set_at(exercise_index, set_index)
        target.completed = not target.completed
        self._persist()
        return target.completed

    def set_feedback(self, exercise_index: int, feedback: str) -> None:
        self._require_active("add feedback")
        self._exercise_at(exercise_index).feedback = feedback.strip()
        self._persist()

    # -------------------------------------------------------------------------
    # Pointer and rest
    # -------------------------------------------------------------------------

    def _rest_after(self, exercise: SessionExercise, set_index: int) -> int:
        if 0 <= set_index < len(exercise.sets):
            rest = exercise.sets[set_index].rest_seconds
            if rest is not None:
                return rest
        if exercise.planned.rest_seconds is not None:
            return exercise.planned.rest_seconds
        return self._default_rest

    def _enter_rest(self, seconds: int) -> None:
        if seconds > 0:
            self._session.state = SessionState.RESTING
            self._session.rest_remaining_seconds = seconds
        else:
            self._session.state = SessionState.IN_PROGRESS
            self._session.rest_remaining_seconds = 0

    def advance(self) -> Optional[FinalizeResult]:
        """
        Move to the next set, the next exercise, or finish.

        Entering a new set or exercise starts a rest countdown. Advancing
        past the last set of the last exercise finalizes the session with no
        session RPE and returns the FinalizeResult.
        """
        self._require_active("advance")
        s = self._session
        exercise = self._exercise_at(s.current_exercise_index)
        rest = self._rest_after(exercise, s.current_set_index)

        if s.current_set_index < len(exercise.sets) - 1:
            s.current_set_index += 1
        elif s.current_exercise_index < len(s.exercises) - 1:
            s.current_exercise_index += 1
            s.current_set_index = 0
        else:
            return self.finalize()

        self._enter_rest(rest)
        self._persist()
        return None

    def tick(self, seconds: int = 1) -> None:
        """Advance the session clock and any rest countdown."""
        if not self.is_active:
            return
        s = self._session
        s.elapsed_seconds += seconds
        if s.state == SessionState.RESTING:
            s.rest_remaining_seconds = max(0, s.rest_remaining_seconds - seconds)
            if s.rest_remaining_seconds == 0:
                s.state = SessionState.IN_PROGRESS
        self._persist()

    def extend_rest(self) -> int:
        """Add the extension to the running rest. Returns the remaining seconds."""
        if self._session.state != SessionState.RESTING:
            raise SessionStateError("Not resting", state=self._session.state.value)
        self._session.rest_remaining_seconds += self._rest_extension
        self._persist()
        return self._session.rest_remaining_seconds

    def skip_rest(self) -> None:
        if self._session.state != SessionState.RESTING:
            raise SessionStateError("Not resting", state=self._session.state.value)
        self._enter_rest(0)
        self._persist()

    # -------------------------------------------------------------------------
    # Plan changes
    # -------------------------------------------------------------------------

    def swap_exercise(self, index: int, new_exercise: ExerciseSpec) -> None:
        """
        Replace the exercise in a slot. Logged values for the slot are cleared.

        A replacement without sets keeps the slot's set prescription.
        """
        self._require_capability("can_edit_planned_exercises", "swap exercises")
        self._require_active("swap an exercise")
        slot = self._exercise_at(index)

        spec = new_exercise
        if not spec.sets:
            spec = spec.model_copy(
                update={"sets": [s.model_copy() for s in slot.planned.sets]}
            )
        self._session.exercises[index] = SessionExercise.from_spec(_with_default_sets(spec))
        if self._session.current_exercise_index == index:
            self._session.current_set_index = 0
        self._persist()
        logger.info(
            f"Session {self.session_id}: swapped slot {index} "
            f"{slot.planned.exercise_id} -> {spec.exercise_id}"
        )

    def add_exercise(self, new_exercise: ExerciseSpec) -> int:
        """Append an exercise (three working sets if none given). Returns its index."""
        self._require_capability("can_edit_planned_exercises", "add exercises")
        self._require_active("add an exercise")
        self._session.exercises.append(SessionExercise.from_spec(_with_default_sets(new_exercise)))
        self._persist()
        return len(self._session.exercises) - 1

    def remove_exercise(self, index: int) -> None:
        """
        Remove an exercise slot and re-point the cursor.

        Raises:
            ValidationError: If it is the only exercise left
        """
        self._require_capability("can_edit_planned_exercises", "remove exercises")
        self._require_active("remove an exercise")
        self._exercise_at(index)
        if len(self._session.exercises) == 1:
            raise ValidationError("A session must keep at least one exercise")

        s = self._session
        del s.exercises[index]
        if s.current_exercise_index > index:
            s.current_exercise_index -= 1
        elif s.current_exercise_index == index:
            s.current_set_index = 0
            if s.current_exercise_index >= len(s.exercises):
                s.current_exercise_index = len(s.exercises) - 1
        self._persist()

    def select_variant(
        self,
        index: int,
        variant_id: str,
        variant_name: Optional[str] = None,
    ) -> None:
        """
        Record a substitute as the exercise actually performed in a slot.

        The plan is untouched. Selecting the planned id reverts the substitution.

        Raises:
            ValidationError: If variant_id is not one of the slot's variants
        """
        self._require_active("select a variant")
        slot = self._exercise_at(index)
        planned = slot.planned

        if variant_id == planned.exercise_id:
            slot.exercise_id_used = planned.exercise_id
            slot.exercise_name_used = planned.exercise_name
        elif variant_id in planned.variants:
            slot.exercise_id_used = variant_id
            slot.exercise_name_used = variant_name or variant_id
        else:
            raise ValidationError(
                f"'{variant_id}' is not a variant of {planned.exercise_id}"
            )
        self._persist()

    # -------------------------------------------------------------------------
    # Finish
    # -------------------------------------------------------------------------

    def _build_log(
        self,
        session_rpe: Optional[float],
        notes: str,
        now: datetime,
    ) -> TrainingLog:
        grouped: Dict[str, TrainingLogExercise] = {}
        for exercise in self._session.exercises:
            sets = [
                TrainingLogSet(
                    weight=s.weight,
                    reps=s.reps,
                    rpe=s.rpe,
                    completed=s.completed,
                    set_type=s.set_type,
                )
                for s in exercise.sets
                if s.has_values
            ]
            if not sets:
                continue
            entry = grouped.get(exercise.exercise_id_used)
            if entry is None:
                entry = TrainingLogExercise(
                    exercise_id=exercise.exercise_id_used,
                    exercise_name=exercise.exercise_name_used,
                    planned_exercise_id=exercise.planned.exercise_id,
                    feedback=exercise.feedback,
                )
                grouped[exercise.exercise_id_used] = entry
            elif exercise.feedback:
                entry.feedback = "\n".join(f for f in (entry.feedback, exercise.feedback) if f)
            entry.sets.extend(sets)

        s = self._session
        return TrainingLog(
            session_id=s.session_id,
            athlete_id=s.athlete_id,
            routine_id=s.routine_id,
            day_id=s.day_id,
            day_name=s.day_name,
            date=now.date(),
            duration_seconds=s.elapsed_seconds,
            session_rpe=session_rpe,
            notes=notes.strip(),
            exercises=list(grouped.values()),
            created_at=now,
        )

    def finalize(
        self,
        session_rpe: Optional[float] = None,
        notes: str = "",
    ) -> FinalizeResult:
        """
        Finish the session and write its training log.

        Sets with neither weight nor reps are dropped; the rest are grouped
        by the exercise actually performed. If the writer fails, the log is
        queued offline under the session id. Either way the local session
        state is cleared and the session ends completed.

        Args:
            session_rpe: Overall session effort (1-10), optional
            notes: Free text for the whole session

        Returns:
            FinalizeResult; queued is True when the write was deferred
        """
        self._require_active("finish")
        if session_rpe is not None and not 1 <= session_rpe <= 10:
            raise ValidationError("Session RPE must be between 1 and 10")

        now = self._clock()
        log = self._build_log(session_rpe, notes, now)
        logged_sets = [
            LoggedSet(
                id=f"{log.session_id}-{n}",
                session_id=log.session_id,
                athlete_id=log.athlete_id,
                exercise_id=exercise.exercise_id,
                weight=s.weight,
                reps=s.reps,
                rpe=s.rpe,
                completed=s.completed,
                logged_at=now,
            )
            for n, (exercise, s) in enumerate(
                (e, s) for e in log.exercises for s in e.sets
            )
        ]

        queued = False
        try:
            self._writer.record(log, logged_sets)
        except PersistenceError as e:
            logger.warning(f"Session {log.session_id} not saved, queued for sync: {e}")
            self._queue.enqueue(log, logged_sets, error=str(e))
            queued = True

        self._session.state = SessionState.COMPLETED
        self._session.rest_remaining_seconds = 0
        self._clear_local()
        logger.info(
            f"Finalized session {log.session_id}: {log.total_sets} sets, "
            f"volume {log.total_volume:.1f}{' (queued)' if queued else ''}"
        )
        return FinalizeResult(training_log=log, logged_sets=logged_sets, queued=queued)

    def cancel(self, confirmed: bool = False) -> None:
        """
        Abandon the session. Nothing is written and local state is discarded.

        Raises:
            ValidationError: If the caller did not confirm
        """
        if self._session.state.is_terminal:
            raise SessionStateError(
                f"Cannot cancel: session is {self._session.state.value}",
                state=self._session.state.value,
            )
        if not confirmed:
            raise ValidationError("Cancelling a session requires confirmation")
        self._session.state = SessionState.CANCELLED
        self._session.rest_remaining_seconds = 0
        self._clear_local()
        logger.info(f"Cancelled session {self.session_id}")


# =============================================================================
# Session Clock
# =============================================================================


class SessionTicker:
    """
    Calls session.tick() once per interval while the session is active.

    The task ends by itself when the session completes or is cancelled;
    stop() cancels it early (e.g. on UI teardown).
    """

    def __init__(self, session: WorkoutSession, interval: float = 1.0):
        self._session = session
        self._interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the ticking task on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while self._session.is_active:
            await asyncio.sleep(self._interval)
            if not self._session.is_active:
                break
            self._session.tick()

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

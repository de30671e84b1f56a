"""
Unit tests for the workout session engine.

Tests for:
- Starting, restoring and persisting a session
- Logging sets and toggling completion
- Pointer advance, rest countdown, extend and skip
- Plan changes: swap, add, remove, variant selection
- Finalize (volume, grouping, offline queueing) and cancel
"""
import logging
from datetime import datetime, timezone

import httpx
import pytest

from application.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    SessionStateError,
    ValidationError,
)
from application.ports import Capabilities
from application.use_cases import RecordTrainingLogUseCase
from backend.core.session_engine import SessionStore, WorkoutSession, session_key
from backend.services.offline_queue import OfflineQueue
from domain.models import ExerciseSpec, ScheduleDay, SessionState, SetType
from infrastructure.http import HttpTrainingLogClient
from tests.fakes import FakeTrainingLogWriter, create_routine

pytestmark = pytest.mark.unit

NOW = datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)
EDITOR = Capabilities(can_edit_planned_exercises=True)


def _schedule():
    return [
        ScheduleDay(
            id="day-a",
            name="Monday",
            source_name="Day A",
            exercises=[
                ExerciseSpec(
                    exercise_id="squat",
                    exercise_name="Back Squat",
                    sets=[
                        {"reps": "5", "rpe_target": 8, "rest_seconds": 120},
                        {"reps": "5", "rpe_target": 8},
                    ],
                    rest_seconds=180,
                ),
                ExerciseSpec(
                    exercise_id="bench",
                    exercise_name="Bench Press",
                    sets=2,
                    reps="8",
                    variants=["db-bench"],
                ),
            ],
        ),
        ScheduleDay(id="rest-tuesday", name="Tuesday", is_rest=True),
        ScheduleDay(id="day-empty", name="Wednesday"),
    ]


@pytest.fixture
def routine():
    return create_routine(schedule=_schedule())


@pytest.fixture
def queue(device_store) -> OfflineQueue:
    return OfflineQueue(device_store)


@pytest.fixture
def start(routine, device_store, writer, queue):
    """Start (or restore) the day-a session with injectable collaborators."""

    def _start(capabilities=None, writer_override=None, day_id="day-a", athlete_id="athlete-1"):
        return WorkoutSession.start(
            routine,
            day_id,
            athlete_id,
            store=SessionStore(device_store),
            writer=writer_override or writer,
            offline_queue=queue,
            capabilities=capabilities,
            default_rest_seconds=90,
            rest_extension_seconds=30,
            clock=lambda: NOW,
            session_id="session-1",
        )

    return _start


@pytest.fixture
def session(start) -> WorkoutSession:
    return start()


# =============================================================================
# Start and Restore
# =============================================================================


class TestStart:
    def test_builds_placeholder_sets_from_plan(self, session):
        exercises = session.exercises

        assert session.state == SessionState.IN_PROGRESS
        assert [e.exercise_id_used for e in exercises] == ["squat", "bench"]
        assert [s.target_reps for s in exercises[0].sets] == ["5", "5"]
        assert [s.target_reps for s in exercises[1].sets] == ["8", "8"]
        assert all(s.weight == 0 and s.reps == 0 and not s.completed for s in exercises[0].sets)

    def test_day_name_keeps_template_name(self, session):
        assert session.snapshot().day_name == "Day A"

    def test_state_is_persisted_on_start(self, session, device_store):
        assert device_store.get(session_key("routine-1", "day-a")) is not None

    def test_rest_day_cannot_be_started(self, start):
        with pytest.raises(ValidationError):
            start(day_id="rest-tuesday")

    def test_day_without_exercises_cannot_be_started(self, start):
        with pytest.raises(ValidationError):
            start(day_id="day-empty")

    def test_unknown_day(self, start):
        with pytest.raises(NotFoundError):
            start(day_id="day-z")

    def test_other_athletes_routine(self, start):
        with pytest.raises(AuthorizationError):
            start(athlete_id="athlete-2")

    def test_exercise_without_sets_gets_default_sets(self, device_store, writer, queue):
        routine = create_routine(schedule=[
            ScheduleDay(
                id="day-a",
                name="Monday",
                exercises=[ExerciseSpec(exercise_id="plank", exercise_name="Plank")],
            )
        ])
        session = WorkoutSession.start(
            routine,
            "day-a",
            "athlete-1",
            store=SessionStore(device_store),
            writer=writer,
            offline_queue=queue,
        )
        sets = session.exercises[0].sets
        assert len(sets) == 3
        assert all(s.target_reps == "10-12" and s.target_rpe == 8 for s in sets)


class TestRestore:
    def test_reload_restores_identical_state(self, start):
        original = start()
        original.log_set(0, 0, weight=100, reps=5, rpe=8)
        original.toggle_set_complete(0, 0)
        original.advance()

        restored = start()

        assert restored.snapshot() == original.snapshot()
        assert restored.state == SessionState.RESTING

    def test_finished_session_is_not_restored(self, start, writer):
        first = start()
        first.log_set(0, 0, weight=100, reps=5)
        first.finalize()

        second = start()
        assert second.state == SessionState.IN_PROGRESS
        assert second.exercises[0].sets[0].weight == 0

    def test_unreadable_state_is_ignored(self, start, device_store):
        device_store.set(session_key("routine-1", "day-a"), "{not json")

        session = start()
        assert session.state == SessionState.IN_PROGRESS

    def test_persist_failure_does_not_break_session(self, session, device_store):
        device_store.fail_writes = True

        session.log_set(0, 0, weight=100, reps=5)
        assert session.exercises[0].sets[0].weight == 100


# =============================================================================
# Logging Sets
# =============================================================================


class TestLogSet:
    def test_log_set_stores_values_without_moving_pointer(self, session):
        session.log_set(0, 1, weight=102.5, reps=4, rpe=9)

        snap = session.snapshot()
        assert snap.exercises[0].sets[1].weight == 102.5
        assert snap.exercises[0].sets[1].reps == 4
        assert snap.exercises[0].sets[1].rpe == 9
        assert (snap.current_exercise_index, snap.current_set_index) == (0, 0)

    @pytest.mark.parametrize(
        "weight,reps,rpe",
        [(-1, 5, None), (100, -1, None), (100, 5, 11), (100, 5, 0.5)],
    )
    def test_invalid_values_rejected(self, session, weight, reps, rpe):
        with pytest.raises(ValidationError):
            session.log_set(0, 0, weight=weight, reps=reps, rpe=rpe)
        assert session.exercises[0].sets[0].weight == 0

    def test_index_out_of_range(self, session):
        with pytest.raises(ValidationError):
            session.log_set(0, 5, weight=100, reps=5)
        with pytest.raises(ValidationError):
            session.log_set(9, 0, weight=100, reps=5)

    def test_toggle_complete(self, session):
        assert session.toggle_set_complete(0, 0) is True
        assert session.toggle_set_complete(0, 0) is False

    def test_feedback_is_trimmed(self, session):
        session.set_feedback(1, "  shoulder felt tight ")
        assert session.exercises[1].feedback == "shoulder felt tight"

    def test_incomplete_sets_and_progress(self, session):
        assert session.has_incomplete_sets is False
        assert session.progress == 0

        session.log_set(0, 0, weight=100, reps=5)
        assert session.has_incomplete_sets is True

        session.toggle_set_complete(0, 0)
        assert session.has_incomplete_sets is False
        assert session.progress == 0.25


# =============================================================================
# Pointer and Rest
# =============================================================================


class TestAdvanceAndRest:
    def test_rest_uses_set_rest_first(self, session):
        session.advance()

        snap = session.snapshot()
        assert snap.state == SessionState.RESTING
        assert snap.rest_remaining_seconds == 120
        assert (snap.current_exercise_index, snap.current_set_index) == (0, 1)

    def test_rest_falls_back_to_exercise_rest(self, session):
        session.advance()
        session.skip_rest()
        session.advance()

        snap = session.snapshot()
        assert snap.rest_remaining_seconds == 180
        assert (snap.current_exercise_index, snap.current_set_index) == (1, 0)

    def test_rest_falls_back_to_default(self, session):
        for _ in range(2):
            session.advance()
            session.skip_rest()
        session.advance()

        assert session.snapshot().rest_remaining_seconds == 90

    def test_tick_counts_down_and_ends_rest(self, session):
        session.advance()
        session.tick(100)

        snap = session.snapshot()
        assert snap.elapsed_seconds == 100
        assert snap.rest_remaining_seconds == 20
        assert snap.state == SessionState.RESTING

        session.tick(30)
        snap = session.snapshot()
        assert snap.rest_remaining_seconds == 0
        assert snap.state == SessionState.IN_PROGRESS

    def test_extend_rest(self, session):
        session.advance()
        assert session.extend_rest() == 150

    def test_extend_or_skip_without_rest(self, session):
        with pytest.raises(SessionStateError):
            session.extend_rest()
        with pytest.raises(SessionStateError):
            session.skip_rest()

    def test_advance_past_last_set_finalizes(self, session, writer):
        result = None
        for _ in range(4):
            result = session.advance()

        assert result is not None
        assert session.state == SessionState.COMPLETED
        assert writer.calls == ["session-1"]

    def test_tick_after_finish_is_ignored(self, session):
        session.finalize()
        session.tick(10)
        assert session.snapshot().elapsed_seconds == 0


# =============================================================================
# Plan Changes
# =============================================================================


class TestPlanChanges:
    def test_swap_requires_capability(self, session):
        with pytest.raises(AuthorizationError):
            session.swap_exercise(0, ExerciseSpec(exercise_id="front-squat", exercise_name="Front Squat"))

    def test_swap_keeps_slot_sets_and_clears_values(self, start):
        session = start(capabilities=EDITOR)
        session.log_set(0, 0, weight=100, reps=5)

        session.swap_exercise(0, ExerciseSpec(exercise_id="front-squat", exercise_name="Front Squat"))

        slot = session.exercises[0]
        assert slot.exercise_id_used == "front-squat"
        assert slot.planned.exercise_id == "front-squat"
        assert [s.target_reps for s in slot.sets] == ["5", "5"]
        assert all(s.weight == 0 for s in slot.sets)

    def test_swap_with_own_sets(self, start):
        session = start(capabilities=EDITOR)
        session.swap_exercise(
            1, ExerciseSpec(exercise_id="dips", exercise_name="Dips", sets=4, reps="AMRAP")
        )
        assert [s.target_reps for s in session.exercises[1].sets] == ["AMRAP"] * 4

    def test_add_exercise_appends_default_sets(self, start):
        session = start(capabilities=EDITOR)

        index = session.add_exercise(ExerciseSpec(exercise_id="curl", exercise_name="Curl"))

        assert index == 2
        sets = session.exercises[2].sets
        assert len(sets) == 3
        assert all(s.target_reps == "10-12" and s.target_rpe == 8 for s in sets)
        assert all(s.set_type == SetType.WORKING for s in sets)

    def test_add_requires_capability(self, session):
        with pytest.raises(AuthorizationError):
            session.add_exercise(ExerciseSpec(exercise_id="curl", exercise_name="Curl"))

    def test_remove_before_pointer_reindexes(self, start):
        session = start(capabilities=EDITOR)
        session.advance()
        session.skip_rest()
        session.advance()
        session.skip_rest()
        assert session.snapshot().current_exercise_index == 1

        session.remove_exercise(0)

        snap = session.snapshot()
        assert [e.exercise_id_used for e in snap.exercises] == ["bench"]
        assert snap.current_exercise_index == 0

    def test_remove_current_last_exercise_moves_pointer_back(self, start):
        session = start(capabilities=EDITOR)
        session.add_exercise(ExerciseSpec(exercise_id="curl", exercise_name="Curl"))
        for _ in range(4):
            session.advance()
            session.skip_rest()
        assert session.snapshot().current_exercise_index == 2

        session.remove_exercise(2)

        snap = session.snapshot()
        assert snap.current_exercise_index == 1
        assert snap.current_set_index == 0

    def test_cannot_remove_only_exercise(self, start):
        session = start(capabilities=EDITOR)
        session.remove_exercise(1)
        before = session.snapshot()

        with pytest.raises(ValidationError):
            session.remove_exercise(0)

        assert session.snapshot() == before

    def test_select_variant_changes_executed_exercise(self, session):
        session.select_variant(1, "db-bench", "Dumbbell Bench")

        slot = session.exercises[1]
        assert slot.exercise_id_used == "db-bench"
        assert slot.exercise_name_used == "Dumbbell Bench"
        assert slot.planned.exercise_id == "bench"

    def test_select_planned_id_reverts_variant(self, session):
        session.select_variant(1, "db-bench")
        session.select_variant(1, "bench")

        assert session.exercises[1].exercise_id_used == "bench"
        assert session.exercises[1].exercise_name_used == "Bench Press"

    def test_unknown_variant_rejected(self, session):
        with pytest.raises(ValidationError):
            session.select_variant(1, "pushup")


# =============================================================================
# Finalize and Cancel
# =============================================================================


class TestFinalize:
    def test_volume_and_set_count(self, session, writer, device_store):
        session.log_set(0, 0, weight=100, reps=5)
        session.log_set(0, 1, weight=100, reps=3)
        session.toggle_set_complete(0, 0)
        session.toggle_set_complete(0, 1)

        result = session.finalize(session_rpe=8, notes=" good ")

        log = result.training_log
        assert log.total_volume == 800
        assert log.total_sets == 2
        assert log.session_rpe == 8
        assert log.notes == "good"
        assert log.date == NOW.date()
        assert [e.exercise_id for e in log.exercises] == ["squat"]
        assert [s.id for s in result.logged_sets] == ["session-1-0", "session-1-1"]
        assert result.queued is False
        assert writer.logs["session-1"] == log
        assert session.state == SessionState.COMPLETED
        assert device_store.get(session_key("routine-1", "day-a")) is None

    def test_variant_sets_logged_under_variant(self, session):
        session.select_variant(1, "db-bench", "Dumbbell Bench")
        session.log_set(1, 0, weight=30, reps=10)

        result = session.finalize()

        exercise = result.training_log.exercises[0]
        assert exercise.exercise_id == "db-bench"
        assert exercise.planned_exercise_id == "bench"
        assert result.logged_sets[0].exercise_id == "db-bench"

    def test_slots_with_same_exercise_are_grouped(self, start):
        session = start(capabilities=EDITOR)
        index = session.add_exercise(ExerciseSpec(exercise_id="squat", exercise_name="Back Squat", sets=1))
        session.log_set(0, 0, weight=100, reps=5)
        session.log_set(index, 0, weight=80, reps=8)

        log = session.finalize().training_log

        assert len(log.exercises) == 1
        assert [s.weight for s in log.exercises[0].sets] == [100, 80]

    def test_session_rpe_out_of_range(self, session):
        with pytest.raises(ValidationError):
            session.finalize(session_rpe=11)
        assert session.is_active

    def test_writer_failure_queues_log(self, start, queue):
        session = start(writer_override=FakeTrainingLogWriter(always_fail=True))
        session.log_set(0, 0, weight=100, reps=5)

        result = session.finalize()

        assert result.queued is True
        assert session.state == SessionState.COMPLETED
        assert "session-1" in queue
        assert queue.pending()[0].last_error == "Training API unavailable"

    def test_unreadable_sync_response_queues_log(self, start, queue, device_store):
        client = HttpTrainingLogClient(
            "http://api.test",
            max_attempts=1,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, text="<html>portal</html>")
            ),
        )
        session = start(writer_override=client)
        session.log_set(0, 0, weight=100, reps=5)

        result = session.finalize(8, "")

        assert result.queued is True
        assert session.state == SessionState.COMPLETED
        assert "session-1" in queue
        assert device_store.get(session_key("routine-1", "day-a")) is None

    def test_finalize_is_logged(self, session, caplog):
        session.log_set(0, 0, weight=100, reps=5)

        with caplog.at_level(logging.INFO, logger="backend.core.session_engine"):
            session.finalize()

        assert "Finalized session session-1: 1 sets, volume 500.0" in caplog.messages

    def test_operations_after_finish_rejected(self, session):
        session.finalize()
        with pytest.raises(SessionStateError):
            session.log_set(0, 0, weight=100, reps=5)
        with pytest.raises(SessionStateError):
            session.finalize()

    def test_queued_log_recorded_exactly_once(self, start, queue, record_store):
        """A write that succeeded but whose response was lost is not duplicated."""
        use_case = RecordTrainingLogUseCase(record_store)

        class LostResponseWriter:
            def record(self, training_log, logged_sets):
                use_case.record(training_log, logged_sets)
                raise PersistenceError("Connection reset")

        session = start(writer_override=LostResponseWriter())
        session.log_set(0, 0, weight=100, reps=5)
        assert session.finalize().queued is True

        report = queue.drain(use_case)

        assert report.synced == ["session-1"]
        assert len(record_store.all("training_logs")) == 1
        assert len(record_store.all("logged_sets")) == 1


class TestCancel:
    def test_cancel_requires_confirmation(self, session):
        with pytest.raises(ValidationError):
            session.cancel()
        assert session.is_active

    def test_cancel_discards_everything(self, session, writer, queue, device_store):
        session.log_set(0, 0, weight=100, reps=5)

        session.cancel(confirmed=True)

        assert session.state == SessionState.CANCELLED
        assert writer.calls == []
        assert len(queue) == 0
        assert device_store.keys() == []

    def test_cancel_after_finish_rejected(self, session):
        session.finalize()
        with pytest.raises(SessionStateError):
            session.cancel(confirmed=True)

"""
Unit tests for the progression decision rule and ProgressionService.

Tests for:
- suggest_next_weight() rule table
- Top set selection
- Suggestion uses only the most recent session
- Personal records over recent training logs
- Estimated 1RM, strength trend, weekly progress and monthly totals
"""
from datetime import date, datetime, timezone

import pytest

from backend.core.progression_service import (
    ProgressionRules,
    ProgressionService,
    ReasonCode,
    REASON_TEXT,
    estimate_e1rm,
    select_top_set,
    strength_change,
    suggest_next_weight,
)
from domain.models import (
    LoggedSet,
    RoutineType,
    TrainingLog,
    TrainingLogExercise,
    TrainingLogSet,
)
from tests.fakes import (
    create_logged_set_doc,
    create_routine,
    create_training_day,
    create_training_log_doc,
)

pytestmark = pytest.mark.unit

EARLIER = datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)
LATER = datetime(2024, 1, 8, 18, 0, tzinfo=timezone.utc)


# =============================================================================
# Decision Rule
# =============================================================================


class TestSuggestNextWeight:
    @pytest.mark.parametrize(
        "weight,rpe,expected_weight,expected_code",
        [
            (80, 5, 82.5, ReasonCode.INCREASE),
            (80, 7, 82.5, ReasonCode.INCREASE),
            (80, 7.5, 80, ReasonCode.MAINTAIN),
            (80, 8, 80, ReasonCode.MAINTAIN),
            (80, 9, 80, ReasonCode.MAINTAIN),
            (80, 9.5, 80, ReasonCode.CONSOLIDATE),
            (80, 10, 80, ReasonCode.CONSOLIDATE),
            (80, None, 80, ReasonCode.LOG_RPE),
            (0, 8, 0, ReasonCode.ADD_REPS_OR_LOAD),
            (0, None, 0, ReasonCode.ADD_REPS_OR_LOAD),
        ],
    )
    def test_rule_table(self, weight, rpe, expected_weight, expected_code):
        assert suggest_next_weight(weight, rpe) == (expected_weight, expected_code)

    def test_custom_increment_and_threshold(self):
        rules = ProgressionRules(increment=5, increase_max_rpe=6)
        assert suggest_next_weight(100, 6, rules) == (105, ReasonCode.INCREASE)
        assert suggest_next_weight(100, 7, rules) == (100, ReasonCode.MAINTAIN)

    def test_every_code_has_text(self):
        assert set(REASON_TEXT) == set(ReasonCode)


class TestSelectTopSet:
    def _set(self, n, weight, reps):
        return LoggedSet(
            id=f"s-{n}", session_id="s", athlete_id="a", exercise_id="squat",
            weight=weight, reps=reps,
        )

    def test_heaviest_wins(self):
        top = select_top_set([self._set(0, 100, 5), self._set(1, 105, 3)])
        assert top.weight == 105

    def test_tie_broken_by_reps(self):
        top = select_top_set([self._set(0, 100, 3), self._set(1, 100, 5)])
        assert top.reps == 5


# =============================================================================
# Service
# =============================================================================


@pytest.fixture
def service(record_store) -> ProgressionService:
    return ProgressionService(record_store)


class TestGetSuggestion:
    def test_no_history_returns_none(self, service):
        assert service.get_suggestion("squat", "athlete-1") is None

    def test_uses_latest_session_top_set(self, service, record_store):
        record_store.seed("logged_sets", [
            create_logged_set_doc(session_id="old", n=0, weight=120, reps=3, rpe=9, logged_at=EARLIER),
            create_logged_set_doc(session_id="new", n=0, weight=80, reps=5, rpe=5, logged_at=LATER),
            create_logged_set_doc(session_id="new", n=1, weight=75, reps=8, rpe=6, logged_at=LATER),
        ])

        suggestion = service.get_suggestion("squat", "athlete-1")

        assert suggestion.suggested_weight == 82.5
        assert suggestion.reason_code == "increase"
        assert suggestion.reason == "RPE low, increase load"
        assert suggestion.last_weight == 80
        assert suggestion.last_reps == 5
        assert suggestion.session_id == "new"

    def test_high_rpe_consolidates(self, service, record_store):
        record_store.seed("logged_sets", [
            create_logged_set_doc(session_id="s1", n=0, weight=80, reps=5, rpe=10),
        ])
        suggestion = service.get_suggestion("squat", "athlete-1")
        assert suggestion.suggested_weight == 80
        assert suggestion.reason_code == "consolidate"

    def test_missing_rpe_asks_to_log_it(self, service, record_store):
        record_store.seed("logged_sets", [
            create_logged_set_doc(session_id="s1", n=0, weight=80, reps=5),
        ])
        suggestion = service.get_suggestion("squat", "athlete-1")
        assert suggestion.reason_code == "log_rpe"
        assert suggestion.reason == "Log RPE for better suggestions"

    def test_ignores_other_athletes_and_exercises(self, service, record_store):
        record_store.seed("logged_sets", [
            create_logged_set_doc(session_id="s1", n=0, weight=200, reps=1, rpe=5, athlete_id="athlete-2"),
            create_logged_set_doc(session_id="s2", n=0, weight=60, reps=5, rpe=5, exercise_id="bench"),
        ])
        assert service.get_suggestion("squat", "athlete-1") is None

    def test_custom_rules(self, record_store):
        record_store.seed("logged_sets", [
            create_logged_set_doc(session_id="s1", n=0, weight=80, reps=5, rpe=5),
        ])
        service = ProgressionService(record_store, ProgressionRules(increment=5))
        assert service.get_suggestion("squat", "athlete-1").suggested_weight == 85


class TestPersonalRecords:
    def _exercise(self, exercise_id, *sets):
        return TrainingLogExercise(
            exercise_id=exercise_id,
            exercise_name=exercise_id.title(),
            sets=[TrainingLogSet(weight=w, reps=r, completed=c) for w, r, c in sets],
        )

    def test_heaviest_completed_set_per_exercise(self, service, record_store):
        record_store.seed("training_logs", [
            create_training_log_doc(
                session_id="s1",
                log_date=date(2024, 1, 1),
                exercises=[
                    self._exercise("squat", (100, 5, True), (140, 1, False)),
                    self._exercise("bench", (80, 5, True)),
                ],
            ),
            create_training_log_doc(
                session_id="s2",
                log_date=date(2024, 1, 8),
                exercises=[
                    self._exercise("squat", (110, 3, True)),
                    self._exercise("pullup", (0, 10, True)),
                ],
            ),
        ])

        records = service.get_personal_records("athlete-1")

        assert [(r.exercise_id, r.weight) for r in records] == [("squat", 110), ("bench", 80)]
        assert records[0].achieved_on == date(2024, 1, 8)
        assert records[0].session_id == "s2"

    def test_limit(self, service, record_store):
        record_store.seed("training_logs", [
            create_training_log_doc(
                session_id="s1",
                exercises=[
                    self._exercise("squat", (100, 5, True)),
                    self._exercise("bench", (80, 5, True)),
                    self._exercise("row", (70, 8, True)),
                    self._exercise("press", (50, 5, True)),
                ],
            ),
        ])
        records = service.get_personal_records("athlete-1", limit=2)
        assert [r.exercise_id for r in records] == ["squat", "bench"]

    def test_no_logs(self, service):
        assert service.get_personal_records("athlete-1") == []


# =============================================================================
# Training Analytics
# =============================================================================

THURSDAY = date(2024, 3, 7)


def _squat(*sets):
    """TrainingLogExercise for squat from (weight, reps, rpe) tuples, all completed."""
    return TrainingLogExercise(
        exercise_id="squat",
        sets=[TrainingLogSet(weight=w, reps=r, rpe=rpe, completed=True) for w, r, rpe in sets],
    )


def _log(session_id, *sets, log_date=THURSDAY):
    return TrainingLog(
        session_id=session_id,
        athlete_id="athlete-1",
        date=log_date,
        exercises=[_squat(*sets)],
    )


class TestEstimateE1rm:
    def test_rpe_ten_is_epley(self):
        assert estimate_e1rm(90, 6, 10) == pytest.approx(108)

    def test_missing_rpe_counts_as_eight(self):
        assert estimate_e1rm(100, 5) == pytest.approx(estimate_e1rm(100, 5, 8))
        assert estimate_e1rm(100, 5) == pytest.approx(100 * (1 + 7 / 30))


class TestStrengthChange:
    def test_fewer_than_two_logs(self):
        assert strength_change([]).percent_change == 0
        assert strength_change([_log("s1", (100, 5, 8))]).percent_change == 0

    def test_recent_half_against_older_half(self):
        # RPE 10: e1rm = weight * (1 + reps / 30)
        logs = [
            _log("s4", (120, 3, 10)),
            _log("s3", (120, 3, 10)),
            _log("s2", (100, 3, 10)),
            _log("s1", (100, 3, 10)),
        ]
        progress = strength_change(logs)
        assert progress.percent_change == 20.0
        assert progress.recent_e1rm == 132.0
        assert progress.older_e1rm == 110.0
        assert progress.logs_compared == 4

    def test_sets_without_reps_are_ignored(self):
        logs = [_log("s2", (120, 0, 10)), _log("s1", (100, 0, 10))]
        assert strength_change(logs).percent_change == 0

    def test_odd_count_puts_extra_log_in_recent_half(self):
        logs = [
            _log("s3", (110, 3, 10)),
            _log("s2", (110, 3, 10)),
            _log("s1", (100, 3, 10)),
        ]
        assert strength_change(logs).percent_change == 10.0

    def test_best_set_per_exercise_counts(self):
        logs = [
            _log("s2", (100, 3, 10), (120, 3, 10)),
            _log("s1", (100, 3, 10)),
        ]
        assert strength_change(logs).percent_change == 20.0

    def test_older_half_without_data_is_hundred(self):
        logs = [
            _log("s2", (100, 3, 10)),
            _log("s1", (0, 10, 10)),
        ]
        assert strength_change(logs).percent_change == 100.0


class TestAnalyticsService:
    @pytest.fixture
    def service(self, record_store) -> ProgressionService:
        return ProgressionService(record_store, today=lambda: THURSDAY)

    def test_weekly_progress_counts_logs_since_monday(self, service, record_store):
        routine = create_routine(
            schedule=[
                create_training_day("Monday", day_id="d1"),
                create_training_day("Wednesday", day_id="d3"),
                create_training_day("Friday", day_id="d5"),
                create_training_day("Saturday", day_id="d6"),
            ]
        )
        record_store.seed("assigned_routines", [routine.model_dump(mode="json")])
        record_store.seed("training_logs", [
            create_training_log_doc(session_id="prev", log_date=date(2024, 3, 3)),
            create_training_log_doc(session_id="mon", log_date=date(2024, 3, 4)),
            create_training_log_doc(session_id="wed", log_date=date(2024, 3, 6)),
            create_training_log_doc(session_id="other", athlete_id="athlete-2", log_date=date(2024, 3, 5)),
        ])

        progress = service.get_weekly_progress("athlete-1")

        assert progress.week_start == date(2024, 3, 4)
        assert progress.completed == 2
        assert progress.target == 4

    def test_weekly_target_for_daily_routine(self, service, record_store):
        routine = create_routine(routine_type=RoutineType.DAILY)
        record_store.seed("assigned_routines", [routine.model_dump(mode="json")])
        assert service.get_weekly_progress("athlete-1").target == 7

    def test_weekly_target_falls_back_to_profile_then_default(self, service, record_store):
        assert service.get_weekly_progress("athlete-1").target == 3

        record_store.seed("profiles", [{"id": "athlete-1", "role": "athlete", "available_days": 5}])
        assert service.get_weekly_progress("athlete-1").target == 5

    def test_inactive_routine_is_ignored(self, service, record_store):
        routine = create_routine(active=False)
        record_store.seed("assigned_routines", [routine.model_dump(mode="json")])
        assert service.get_weekly_progress("athlete-1").target == 3

    def test_strength_progress_reads_recent_logs(self, service, record_store):
        record_store.seed("training_logs", [
            create_training_log_doc(
                session_id="s2",
                log_date=date(2024, 3, 6),
                exercises=[_squat((120, 3, 10))],
            ),
            create_training_log_doc(
                session_id="s1",
                log_date=date(2024, 3, 4),
                exercises=[_squat((100, 3, 10))],
            ),
        ])

        assert service.get_strength_progress("athlete-1").percent_change == 20.0

    def test_monthly_stats(self, service, record_store):
        record_store.seed("training_logs", [
            create_training_log_doc(
                session_id="feb",
                log_date=date(2024, 2, 28),
                duration_seconds=3600,
            ),
            create_training_log_doc(
                session_id="m1",
                log_date=date(2024, 3, 1),
                duration_seconds=3600,
                exercises=[_squat((100, 5, 8))],
            ),
            create_training_log_doc(
                session_id="m2",
                log_date=date(2024, 3, 5),
                duration_seconds=1800,
                exercises=[_squat((100, 3, 8))],
            ),
        ])

        stats = service.get_monthly_stats("athlete-1")

        assert stats.month_start == date(2024, 3, 1)
        assert stats.total_sessions == 2
        assert stats.duration_hours == 1.5
        assert stats.total_volume == 800

    def test_monthly_stats_without_logs(self, service):
        stats = service.get_monthly_stats("athlete-1")
        assert stats.total_sessions == 0
        assert stats.duration_hours == 0
        assert stats.total_volume == 0

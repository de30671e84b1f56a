"""
Progression Service for next-load suggestions.

This module provides business logic for load progression:
- Top-set selection from the most recent session of an exercise
- RPE-driven decision rule for the next working weight
- Personal records over the recent training history
- Weekly session count, strength trend (estimated 1RM) and monthly totals

All operations are read-then-compute; nothing is written back.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from application.ports import OrderBy, RecordStore
from domain.models import (
    AssignedRoutine,
    LoggedSet,
    MonthlyStats,
    PersonalRecord,
    ProgressionSuggestion,
    RoutineType,
    StrengthProgress,
    TrainingLog,
    WeeklyProgress,
)

logger = logging.getLogger(__name__)

LOGGED_SETS = "logged_sets"
TRAINING_LOGS = "training_logs"
ASSIGNED_ROUTINES = "assigned_routines"
PROFILES = "profiles"


# =============================================================================
# Decision Rule
# =============================================================================


class ReasonCode(str, Enum):
    """Why a suggestion was made."""

    LOG_RPE = "log_rpe"
    INCREASE = "increase"
    CONSOLIDATE = "consolidate"
    MAINTAIN = "maintain"
    ADD_REPS_OR_LOAD = "add_reps_or_load"


REASON_TEXT: Dict[ReasonCode, str] = {
    ReasonCode.LOG_RPE: "Log RPE for better suggestions",
    ReasonCode.INCREASE: "RPE low, increase load",
    ReasonCode.CONSOLIDATE: "RPE high, consolidate",
    ReasonCode.MAINTAIN: "Good effort zone, add reps",
    ReasonCode.ADD_REPS_OR_LOAD: "Add reps or external load",
}


@dataclass(frozen=True)
class ProgressionRules:
    """Tunable thresholds for the decision rule."""

    increment: float = 2.5
    increase_max_rpe: float = 7.0
    consolidate_min_rpe: float = 9.0
    history_window: int = 20


def suggest_next_weight(
    weight: float,
    rpe: Optional[float],
    rules: ProgressionRules = ProgressionRules(),
) -> Tuple[float, ReasonCode]:
    """
    Apply the decision rule to a top set.

    Bodyweight sets (weight 0) always get "add reps or load", whatever the RPE.

    Examples:
        >>> suggest_next_weight(80, 5)
        (82.5, <ReasonCode.INCREASE: 'increase'>)
        >>> suggest_next_weight(80, 10)
        (80, <ReasonCode.CONSOLIDATE: 'consolidate'>)
    """
    if weight == 0:
        return 0, ReasonCode.ADD_REPS_OR_LOAD
    if rpe is None:
        return weight, ReasonCode.LOG_RPE
    if rpe <= rules.increase_max_rpe:
        return weight + rules.increment, ReasonCode.INCREASE
    if rpe > rules.consolidate_min_rpe:
        return weight, ReasonCode.CONSOLIDATE
    return weight, ReasonCode.MAINTAIN


def select_top_set(sets: Sequence[LoggedSet]) -> LoggedSet:
    """
    Heaviest set, ties broken by higher reps.

    Remaining ties keep the first set in the given order.
    """
    return max(sets, key=lambda s: (s.weight, s.reps))


# =============================================================================
# Training Analytics
# =============================================================================

DEFAULT_E1RM_RPE = 8.0
DEFAULT_WEEKLY_TARGET = 3


def estimate_e1rm(weight: float, reps: int, rpe: Optional[float] = None) -> float:
    """
    RPE-adjusted estimated one-rep max: weight * (1 + (reps + 10 - rpe) / 30).

    A set without RPE is taken as RPE 8.

    Examples:
        >>> round(estimate_e1rm(100, 5), 1)
        123.3
    """
    effort = DEFAULT_E1RM_RPE if rpe is None else rpe
    return weight * (1 + (reps + (10 - effort)) / 30)


def average_e1rm(logs: Sequence[TrainingLog]) -> float:
    """Mean over (log, exercise) pairs of the best completed-set e1RM; 0 when none."""
    best_per_exercise = []
    for log in logs:
        for exercise in log.exercises:
            estimates = [
                estimate_e1rm(s.weight, s.reps, s.rpe)
                for s in exercise.sets
                if s.completed and s.weight > 0 and s.reps > 0
            ]
            if estimates:
                best_per_exercise.append(max(estimates))
    if not best_per_exercise:
        return 0.0
    return sum(best_per_exercise) / len(best_per_exercise)


def strength_change(logs: Sequence[TrainingLog]) -> StrengthProgress:
    """
    Compare the newer half of `logs` (newest first) with the older half.

    The newer half gets the extra log when the count is odd. With fewer than
    two logs there is nothing to compare and the change is 0.
    """
    if len(logs) < 2:
        return StrengthProgress(logs_compared=len(logs))

    half = math.ceil(len(logs) / 2)
    recent = average_e1rm(logs[:half])
    older = average_e1rm(logs[half:])

    if older > 0:
        change = (recent - older) / older * 100
    elif recent > 0:
        change = 100.0
    else:
        change = 0.0
    return StrengthProgress(
        percent_change=round(change, 1),
        recent_e1rm=round(recent, 1),
        older_e1rm=round(older, 1),
        logs_compared=len(logs),
    )


def weekly_target(routine: Optional[AssignedRoutine], profile: Optional[Dict[str, Any]]) -> int:
    """
    Sessions expected per week.

    A weekly routine counts its training days and a daily routine applies to
    all seven. Without a routine the profile's available_days is used, then 3.
    """
    if routine is not None:
        if routine.type == RoutineType.DAILY:
            return 7
        return len(routine.training_days)
    if profile and profile.get("available_days"):
        return int(profile["available_days"])
    return DEFAULT_WEEKLY_TARGET


# =============================================================================
# Progression Service
# =============================================================================


class ProgressionService:
    """
    Service for load progression and personal records.

    Reads LoggedSet and TrainingLog records from the record store.
    """

    def __init__(
        self,
        record_store: RecordStore,
        rules: Optional[ProgressionRules] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize the progression service.

        Args:
            record_store: Document store holding logged sets and training logs
            rules: Decision thresholds (defaults match the standard rule table)
            today: Provider for the current local date (injectable for tests)
        """
        self._store = record_store
        self._rules = rules or ProgressionRules()
        self._today = today or date.today

    def get_suggestion(
        self,
        exercise_id: str,
        athlete_id: str,
    ) -> Optional[ProgressionSuggestion]:
        """
        Suggest the next working weight for an exercise.

        Looks at the most recent set records (bounded window), keeps only the
        latest session among them and applies the decision rule to that
        session's top set.

        Args:
            exercise_id: Exercise actually performed
            athlete_id: Athlete whose history is read

        Returns:
            ProgressionSuggestion, or None when there is no history
        """
        rows = self._store.query(
            LOGGED_SETS,
            [("exercise_id", "==", exercise_id), ("athlete_id", "==", athlete_id)],
            order_by=OrderBy("logged_at", descending=True),
            limit=self._rules.history_window,
        )
        if not rows:
            return None

        recent = [LoggedSet.model_validate(r) for r in rows]
        latest_session = recent[0].session_id
        session_sets = [s for s in recent if s.session_id == latest_session]
        top = select_top_set(session_sets)

        suggested, code = suggest_next_weight(top.weight, top.rpe, self._rules)
        logger.debug(
            f"Suggestion for {athlete_id}/{exercise_id}: {top.weight} -> {suggested} ({code.value})"
        )
        return ProgressionSuggestion(
            exercise_id=exercise_id,
            suggested_weight=suggested,
            reason=REASON_TEXT[code],
            reason_code=code.value,
            last_weight=top.weight,
            last_reps=top.reps,
            last_rpe=top.rpe,
            last_date=top.logged_at,
            session_id=top.session_id,
        )

    def get_personal_records(
        self,
        athlete_id: str,
        *,
        limit: int = 3,
    ) -> List[PersonalRecord]:
        """
        Heaviest completed set per exercise over the recent training logs.

        Args:
            athlete_id: Athlete whose logs are read
            limit: Number of records to return, heaviest first

        Returns:
            Up to `limit` PersonalRecord entries
        """
        best: Dict[str, PersonalRecord] = {}
        for log in self._recent_logs(athlete_id):
            for exercise in log.exercises:
                for s in exercise.sets:
                    if not s.completed or s.weight <= 0:
                        continue
                    current = best.get(exercise.exercise_id)
                    if current is None or s.weight > current.weight:
                        best[exercise.exercise_id] = PersonalRecord(
                            exercise_id=exercise.exercise_id,
                            exercise_name=exercise.exercise_name or exercise.exercise_id,
                            weight=s.weight,
                            reps=s.reps,
                            achieved_on=log.date,
                            session_id=log.session_id,
                        )

        records = sorted(best.values(), key=lambda r: r.weight, reverse=True)
        return records[:limit]

    def _recent_logs(self, athlete_id: str) -> List[TrainingLog]:
        rows = self._store.query(
            TRAINING_LOGS,
            [("athlete_id", "==", athlete_id)],
            order_by=OrderBy("date", descending=True),
            limit=self._rules.history_window,
        )
        return [TrainingLog.model_validate(r) for r in rows]

    def _logs_between(self, athlete_id: str, start: date, end: date) -> List[TrainingLog]:
        rows = self._store.query(
            TRAINING_LOGS,
            [
                ("athlete_id", "==", athlete_id),
                ("date", ">=", start.isoformat()),
                ("date", "<=", end.isoformat()),
            ],
        )
        return [TrainingLog.model_validate(r) for r in rows]

    def get_weekly_progress(self, athlete_id: str, today: Optional[date] = None) -> WeeklyProgress:
        """
        Sessions logged from this week's Monday through today against the weekly target.

        Args:
            athlete_id: Athlete whose logs are counted
            today: Reference date (defaults to the injected clock)
        """
        today = today or self._today()
        week_start = today - timedelta(days=today.weekday())

        completed = len(self._logs_between(athlete_id, week_start, today))

        routine_rows = self._store.query(
            ASSIGNED_ROUTINES,
            [("athlete_id", "==", athlete_id), ("active", "==", True)],
            order_by=OrderBy("created_at", descending=True),
            limit=1,
        )
        routine = AssignedRoutine.model_validate(routine_rows[0]) if routine_rows else None
        profile = None
        if routine is None:
            profiles = self._store.query(PROFILES, [("id", "==", athlete_id)], limit=1)
            profile = profiles[0] if profiles else None

        return WeeklyProgress(
            week_start=week_start,
            completed=completed,
            target=weekly_target(routine, profile),
        )

    def get_strength_progress(self, athlete_id: str) -> StrengthProgress:
        """
        Estimated-1RM trend over the recent training logs.

        The history window is split into a newer and an older half; the
        result is the percent change of the average best e1RM per exercise.
        """
        return strength_change(self._recent_logs(athlete_id))

    def get_monthly_stats(self, athlete_id: str, today: Optional[date] = None) -> MonthlyStats:
        """Session count, hours and volume for logs dated this month up to today."""
        today = today or self._today()
        month_start = today.replace(day=1)
        logs = self._logs_between(athlete_id, month_start, today)

        duration_seconds = sum(log.duration_seconds for log in logs)
        return MonthlyStats(
            month_start=month_start,
            total_sessions=len(logs),
            duration_hours=round(duration_seconds / 3600, 1),
            total_volume=sum(log.total_volume for log in logs),
        )

"""
Schedule placement for routine assignment.

This module turns a template's training days into the calendar an athlete
trains from:
- Fixed placement of N training days onto a Monday-first week
- Rest-day filling for the unmapped weekdays
- Start date calculation (the next Monday strictly after today)
- Day-count validation for templates

Everything here is pure; persistence is handled by the assign-routine use case.
"""

from datetime import date, timedelta
from typing import Dict, List, Sequence, Tuple

from application.exceptions import ValidationError
from domain.models import RoutineTemplate, RoutineType, ScheduleDay


# =============================================================================
# Constants
# =============================================================================

WEEKDAY_LABELS: Tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

DAYS_PER_WEEK = 7
MAX_TEMPLATE_DAYS = 7

# Training-day count -> weekday indexes (Monday=0)
PLACEMENT_TABLE: Dict[int, Tuple[int, ...]] = {
    1: (0,),
    2: (0, 3),
    3: (0, 2, 4),
    4: (0, 1, 3, 4),
    5: (0, 1, 2, 3, 4),
    6: (0, 1, 2, 3, 4, 5),
    7: (0, 1, 2, 3, 4, 5, 6),
}


# =============================================================================
# Validation
# =============================================================================


def validate_template_days(routine_type: RoutineType, schedule: Sequence[ScheduleDay]) -> None:
    """
    Reject day counts the scheduler cannot place.

    Raises:
        ValidationError: If there are no training days, more than 7 days,
            duplicate day ids, or a daily template without exactly one day
    """
    errors: List[str] = []
    training_days = [d for d in schedule if not d.is_rest]

    if len(schedule) > MAX_TEMPLATE_DAYS:
        errors.append(f"Template has {len(schedule)} days, maximum is {MAX_TEMPLATE_DAYS}")
    if not training_days:
        errors.append("Template must have at least one training day")
    if routine_type == RoutineType.DAILY and len(schedule) != 1:
        errors.append(f"A daily template must have exactly 1 day, got {len(schedule)}")

    day_ids = [d.id for d in schedule]
    if len(set(day_ids)) != len(day_ids):
        errors.append("Schedule day ids must be unique")

    if errors:
        raise ValidationError("Invalid routine schedule", errors=errors)


def training_slots(training_day_count: int) -> Tuple[int, ...]:
    """
    Weekday indexes that receive training days.

    Raises:
        ValidationError: If the count is outside 1-7
    """
    slots = PLACEMENT_TABLE.get(training_day_count)
    if slots is None:
        raise ValidationError(
            f"Cannot place {training_day_count} training days on a week (expected 1-7)"
        )
    return slots


# =============================================================================
# Placement
# =============================================================================


def build_weekly_schedule(training_days: Sequence[ScheduleDay]) -> List[ScheduleDay]:
    """
    Place training days onto a Monday-first week.

    Training days are consumed in template order and renamed to their weekday
    label; the original name is kept as source_name. Every other weekday
    becomes a rest day with no exercises.

    Args:
        training_days: The template's training days, 1-7 of them

    Returns:
        Exactly 7 ScheduleDay entries, Monday first

    Raises:
        ValidationError: If the number of training days is outside 1-7
    """
    slots = set(training_slots(len(training_days)))
    remaining = iter(training_days)
    week: List[ScheduleDay] = []

    for index, label in enumerate(WEEKDAY_LABELS):
        if index in slots:
            day = next(remaining)
            week.append(
                day.model_copy(
                    update={
                        "name": label,
                        "is_rest": False,
                        "source_name": day.source_name or day.name,
                    },
                    deep=True,
                )
            )
        else:
            week.append(
                ScheduleDay(
                    id=f"rest-{label.lower()}",
                    name=label,
                    is_rest=True,
                    exercises=[],
                )
            )
    return week


def build_assigned_schedule(template: RoutineTemplate) -> List[ScheduleDay]:
    """
    Schedule an athlete's copy of template.

    Weekly templates are expanded to a full week. Daily templates stay a
    single day; which weekdays it is trained on is left to the athlete, and
    the calendar applies it to every date.
    """
    validate_template_days(template.type, template.schedule)

    if template.type == RoutineType.DAILY:
        return [template.schedule[0].model_copy(deep=True)]
    return build_weekly_schedule(template.training_days)


# =============================================================================
# Start Date
# =============================================================================


def next_start_date(today: date) -> date:
    """
    The next Monday strictly after today.

    Assigning on a Monday starts a full week later; assigning on a Sunday
    starts tomorrow.

    Examples:
        >>> next_start_date(date(2024, 3, 4))   # Monday
        datetime.date(2024, 3, 11)
        >>> next_start_date(date(2024, 3, 10))  # Sunday
        datetime.date(2024, 3, 11)
    """
    return today + timedelta(days=8 - today.isoweekday())

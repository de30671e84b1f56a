"""
Schedule router for the athlete calendar view.

Classifies each date in a range against the athlete's active routine and
their recorded training logs.
"""
from dataclasses import asdict
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from api.access import require_athlete_access
from api.deps import get_calendar_service, get_current_capabilities, get_current_user
from api.errors import to_http_exception
from api.schemas.training import CalendarDayResponse, CalendarResponse
from application.exceptions import TrainingCoreError
from application.ports import Capabilities
from backend.core.calendar_service import CalendarService

router = APIRouter(
    tags=["Schedule"],
)


@router.get("/athletes/{athlete_id}/calendar", response_model=CalendarResponse)
def get_calendar(
    athlete_id: str = Path(..., min_length=1),
    start: Optional[date] = Query(None, description="First date (default: Monday of this week)"),
    end: Optional[date] = Query(None, description="Last date (default: start + 6 days)"),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    service: CalendarService = Depends(get_calendar_service),
) -> CalendarResponse:
    """
    Classify every date from start to end (inclusive).

    Each day reports the plan (no_plan, rest, training), whether a log was
    recorded, and the combined outcome (completed, pending, missed, rest,
    extra_session, no_plan).
    """
    require_athlete_access(user_id, athlete_id, capabilities)

    today = date.today()
    if start is None:
        start = today - timedelta(days=today.weekday())
    if end is None:
        end = start + timedelta(days=6)

    try:
        routine = service.get_active_routine(athlete_id)
        days = service.get_calendar(athlete_id, start, end, today=today)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e

    return CalendarResponse(
        athlete_id=athlete_id,
        routine_id=routine.id if routine else None,
        start_date=routine.start_date if routine else None,
        days=[
            CalendarDayResponse(
                **{
                    **asdict(d),
                    "plan": d.plan.value,
                    "outcome": d.outcome.value,
                }
            )
            for d in days
        ],
    )

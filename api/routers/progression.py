"""
Progression router for load suggestions and personal records.

This router provides endpoints for:
- Next working weight suggestion for an exercise
- Personal records over recent training history
- Weekly session count, strength trend and monthly totals
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from api.access import require_athlete_access
from api.deps import get_current_capabilities, get_current_user, get_progression_service
from api.errors import to_http_exception
from api.schemas.training import (
    MonthlyStatsResponse,
    PersonalRecordItem,
    PersonalRecordsResponse,
    ProgressionSuggestionResponse,
    StrengthProgressResponse,
    SuggestionEnvelope,
    WeeklyProgressResponse,
)
from application.exceptions import TrainingCoreError
from application.ports import Capabilities
from backend.core.progression_service import ProgressionService

router = APIRouter(
    prefix="/progression",
    tags=["Progression"],
)


@router.get("/exercises/{exercise_id}/suggestion", response_model=SuggestionEnvelope)
def get_suggestion(
    exercise_id: str = Path(..., min_length=1, max_length=200),
    athlete_id: Optional[str] = Query(None, description="Athlete to read (default: caller)"),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    service: ProgressionService = Depends(get_progression_service),
) -> SuggestionEnvelope:
    """
    Suggest the next working weight for an exercise.

    Returns {"suggestion": null} when there is no history; that is not an error.
    """
    athlete_id = athlete_id or user_id
    require_athlete_access(user_id, athlete_id, capabilities)

    try:
        suggestion = service.get_suggestion(exercise_id, athlete_id)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e

    if suggestion is None:
        return SuggestionEnvelope(suggestion=None)
    return SuggestionEnvelope(
        suggestion=ProgressionSuggestionResponse(**suggestion.model_dump(exclude={"session_id"}))
    )


@router.get("/records", response_model=PersonalRecordsResponse)
def get_personal_records(
    athlete_id: Optional[str] = Query(None, description="Athlete to read (default: caller)"),
    limit: int = Query(3, ge=1, le=20, description="Number of records"),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    service: ProgressionService = Depends(get_progression_service),
) -> PersonalRecordsResponse:
    """Heaviest completed set per exercise over the most recent logs."""
    athlete_id = athlete_id or user_id
    require_athlete_access(user_id, athlete_id, capabilities)

    try:
        records = service.get_personal_records(athlete_id, limit=limit)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return PersonalRecordsResponse(
        records=[PersonalRecordItem(**r.model_dump()) for r in records]
    )


@router.get("/weekly", response_model=WeeklyProgressResponse)
def get_weekly_progress(
    athlete_id: Optional[str] = Query(None, description="Athlete to read (default: caller)"),
    on: Optional[date] = Query(None, description="Reference date (default: today)"),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    service: ProgressionService = Depends(get_progression_service),
) -> WeeklyProgressResponse:
    """Sessions logged this week (Monday first) against the weekly target."""
    athlete_id = athlete_id or user_id
    require_athlete_access(user_id, athlete_id, capabilities)

    try:
        progress = service.get_weekly_progress(athlete_id, today=on)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return WeeklyProgressResponse(**progress.model_dump())


@router.get("/strength", response_model=StrengthProgressResponse)
def get_strength_progress(
    athlete_id: Optional[str] = Query(None, description="Athlete to read (default: caller)"),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    service: ProgressionService = Depends(get_progression_service),
) -> StrengthProgressResponse:
    """Estimated-1RM trend across the recent training logs."""
    athlete_id = athlete_id or user_id
    require_athlete_access(user_id, athlete_id, capabilities)

    try:
        progress = service.get_strength_progress(athlete_id)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return StrengthProgressResponse(**progress.model_dump())


@router.get("/monthly", response_model=MonthlyStatsResponse)
def get_monthly_stats(
    athlete_id: Optional[str] = Query(None, description="Athlete to read (default: caller)"),
    on: Optional[date] = Query(None, description="Reference date (default: today)"),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    service: ProgressionService = Depends(get_progression_service),
) -> MonthlyStatsResponse:
    athlete_id = athlete_id or user_id
    require_athlete_access(user_id, athlete_id, capabilities)

    try:
        stats = service.get_monthly_stats(athlete_id, today=on)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return MonthlyStatsResponse(**stats.model_dump())

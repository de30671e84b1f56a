"""
Routines router for template management and assignment.

This router provides endpoints for:
- Routine template CRUD (owning coach only)
- Assigning a template to an athlete
- Reading an athlete's active routine
"""
from fastapi import APIRouter, Depends, HTTPException, Path

from api.access import require_athlete_access
from api.deps import (
    get_assign_routine_use_case,
    get_calendar_service,
    get_current_capabilities,
    get_current_user,
    get_templates_use_case,
)
from api.errors import to_http_exception
from api.schemas.routines import (
    AssignedRoutineResponse,
    AssignRoutineRequest,
    AssignRoutineResponse,
    RoutineTemplateListResponse,
    RoutineTemplateRequest,
    RoutineTemplateResponse,
)
from application.exceptions import TrainingCoreError
from application.ports import Capabilities
from application.use_cases import AssignRoutineUseCase, ManageTemplatesUseCase
from backend.core.calendar_service import CalendarService

router = APIRouter(
    tags=["Routines"],
)


# =============================================================================
# Templates
# =============================================================================


@router.post("/routines", response_model=RoutineTemplateResponse, status_code=201)
def create_template(
    body: RoutineTemplateRequest,
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    use_case: ManageTemplatesUseCase = Depends(get_templates_use_case),
) -> RoutineTemplateResponse:
    """Create a routine template owned by the caller."""
    try:
        template = use_case.create(
            coach_id=user_id,
            capabilities=capabilities,
            name=body.name,
            routine_type=body.type,
            schedule=body.schedule,
            description=body.description,
        )
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return RoutineTemplateResponse.from_template(template)


@router.get("/routines", response_model=RoutineTemplateListResponse)
def list_templates(
    user_id: str = Depends(get_current_user),
    use_case: ManageTemplatesUseCase = Depends(get_templates_use_case),
) -> RoutineTemplateListResponse:
    """List the caller's templates, newest first."""
    try:
        templates = use_case.list_for_coach(user_id)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return RoutineTemplateListResponse(
        templates=[RoutineTemplateResponse.from_template(t) for t in templates],
        total=len(templates),
    )


@router.get("/routines/{template_id}", response_model=RoutineTemplateResponse)
def get_template(
    template_id: str = Path(..., min_length=1),
    user_id: str = Depends(get_current_user),
    use_case: ManageTemplatesUseCase = Depends(get_templates_use_case),
) -> RoutineTemplateResponse:
    try:
        template = use_case.get(template_id, user_id)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return RoutineTemplateResponse.from_template(template)


@router.put("/routines/{template_id}", response_model=RoutineTemplateResponse)
def update_template(
    body: RoutineTemplateRequest,
    template_id: str = Path(..., min_length=1),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    use_case: ManageTemplatesUseCase = Depends(get_templates_use_case),
) -> RoutineTemplateResponse:
    """Replace a template's name, description, type and schedule."""
    try:
        template = use_case.update(
            template_id,
            coach_id=user_id,
            capabilities=capabilities,
            name=body.name,
            routine_type=body.type,
            schedule=body.schedule,
            description=body.description,
        )
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return RoutineTemplateResponse.from_template(template)


@router.delete("/routines/{template_id}", status_code=204)
def delete_template(
    template_id: str = Path(..., min_length=1),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    use_case: ManageTemplatesUseCase = Depends(get_templates_use_case),
) -> None:
    """Delete a template. Routines already assigned from it are unaffected."""
    try:
        use_case.delete(template_id, user_id, capabilities)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e


# =============================================================================
# Assignment
# =============================================================================


@router.post(
    "/routines/{template_id}/assign",
    response_model=AssignRoutineResponse,
    status_code=201,
)
def assign_routine(
    body: AssignRoutineRequest,
    template_id: str = Path(..., min_length=1),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    use_case: AssignRoutineUseCase = Depends(get_assign_routine_use_case),
) -> AssignRoutineResponse:
    """
    Assign a template to an athlete.

    Any routine the athlete had active is deactivated in the same atomic write.
    """
    try:
        result = use_case.execute(
            template_id=template_id,
            athlete_id=body.athlete_id,
            actor_id=user_id,
            capabilities=capabilities,
        )
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return AssignRoutineResponse(
        routine=AssignedRoutineResponse.from_routine(result.routine),
        deactivated_ids=result.deactivated_ids,
    )


@router.get("/athletes/{athlete_id}/routine", response_model=AssignedRoutineResponse)
def get_active_routine(
    athlete_id: str = Path(..., min_length=1),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    service: CalendarService = Depends(get_calendar_service),
) -> AssignedRoutineResponse:
    """Return the athlete's active routine."""
    require_athlete_access(user_id, athlete_id, capabilities)
    try:
        routine = service.get_active_routine(athlete_id)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    if routine is None:
        raise HTTPException(status_code=404, detail="No active routine")
    return AssignedRoutineResponse.from_routine(routine)

"""
Training logs router.

This router provides endpoints for:
- Recording a finalized session (idempotent on session id; devices sync here)
- Logging a past workout retroactively
- Reading an athlete's training history
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from api.access import require_athlete_access
from api.deps import (
    get_current_capabilities,
    get_current_user,
    get_record_training_log_use_case,
    get_retroactive_use_case,
    get_training_history_use_case,
)
from api.errors import to_http_exception
from api.schemas.training import (
    RecordTrainingLogRequest,
    RecordTrainingLogResponse,
    RetroactiveWorkoutRequest,
    TrainingHistoryResponse,
)
from application.exceptions import TrainingCoreError
from application.ports import Capabilities
from application.use_cases import (
    GetTrainingHistoryUseCase,
    LogRetroactiveWorkoutUseCase,
    RecordTrainingLogUseCase,
    RetroactiveExercise,
    RetroactiveSet,
)


router = APIRouter(
    prefix="/training-logs",
    tags=["Training Logs"],
)


@router.post("", response_model=RecordTrainingLogResponse)
def record_training_log(
    body: RecordTrainingLogRequest,
    response: Response,
    user_id: str = Depends(get_current_user),
    use_case: RecordTrainingLogUseCase = Depends(get_record_training_log_use_case),
) -> RecordTrainingLogResponse:
    """
    Store a finalized session.

    Responds 201 when the log was created and 200 when the session id was
    already recorded (the stored log is returned unchanged).
    """
    try:
        result = use_case.execute(body.training_log, body.logged_sets, user_id=user_id)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e

    response.status_code = 201 if result.created else 200
    return RecordTrainingLogResponse(training_log=result.training_log, created=result.created)


@router.post("/retroactive", response_model=RecordTrainingLogResponse, status_code=201)
def log_retroactive_workout(
    body: RetroactiveWorkoutRequest,
    user_id: str = Depends(get_current_user),
    use_case: LogRetroactiveWorkoutUseCase = Depends(get_retroactive_use_case),
) -> RecordTrainingLogResponse:
    """Log a workout performed on an earlier date."""
    exercises = [
        RetroactiveExercise(
            exercise_name=e.exercise_name,
            exercise_id=e.exercise_id,
            sets=[RetroactiveSet(weight=s.weight, reps=s.reps, rpe=s.rpe) for s in e.sets],
        )
        for e in body.exercises
    ]
    try:
        result = use_case.execute(
            athlete_id=user_id,
            workout_date=body.date,
            exercises=exercises,
            duration_minutes=body.duration_minutes,
            session_rpe=body.session_rpe,
            notes=body.notes,
        )
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return RecordTrainingLogResponse(training_log=result.training_log, created=result.created)


@router.get("", response_model=TrainingHistoryResponse)
def get_training_history(
    athlete_id: Optional[str] = Query(None, description="Athlete to read (default: caller)"),
    limit: int = Query(20, ge=1, le=100, description="Maximum logs to return"),
    user_id: str = Depends(get_current_user),
    capabilities: Capabilities = Depends(get_current_capabilities),
    use_case: GetTrainingHistoryUseCase = Depends(get_training_history_use_case),
) -> TrainingHistoryResponse:
    """Return training logs, newest first."""
    athlete_id = athlete_id or user_id
    require_athlete_access(user_id, athlete_id, capabilities)

    try:
        logs = use_case.execute(athlete_id, limit=limit)
    except TrainingCoreError as e:
        raise to_http_exception(e) from e
    return TrainingHistoryResponse(logs=logs, total=len(logs))

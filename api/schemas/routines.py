"""Request and response models for routine templates and assignments."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.models import AssignedRoutine, RoutineTemplate, RoutineType, ScheduleDay


class RoutineTemplateRequest(BaseModel):
    """Body for creating or replacing a template."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    type: RoutineType = RoutineType.WEEKLY
    schedule: List[ScheduleDay] = Field(default_factory=list)


class RoutineTemplateResponse(BaseModel):
    id: str
    coach_id: str
    name: str
    description: str
    type: RoutineType
    schedule: List[ScheduleDay]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_template(cls, template: RoutineTemplate) -> "RoutineTemplateResponse":
        return cls.model_validate(template.model_dump())


class RoutineTemplateListResponse(BaseModel):
    templates: List[RoutineTemplateResponse]
    total: int


class AssignRoutineRequest(BaseModel):
    """Body for assigning a template to an athlete."""
    athlete_id: str = Field(..., min_length=1)


class AssignedRoutineResponse(BaseModel):
    id: str
    athlete_id: str
    coach_id: str
    template_id: str
    name: str
    type: RoutineType
    schedule: List[ScheduleDay]
    active: bool
    start_date: date
    created_at: datetime

    @classmethod
    def from_routine(cls, routine: AssignedRoutine) -> "AssignedRoutineResponse":
        return cls.model_validate(routine.model_dump())


class AssignRoutineResponse(BaseModel):
    routine: AssignedRoutineResponse
    deactivated_ids: List[str] = Field(default_factory=list)

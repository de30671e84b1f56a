"""
Routine template management.

Create, read, update and delete coach-authored templates. Every operation is
restricted to the template's owning coach. Assigned routines are copies, so
editing or deleting a template never changes what athletes already have.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from application.exceptions import AuthorizationError, NotFoundError
from application.ports import BatchOp, Capabilities, OrderBy, RecordStore
from backend.core.schedule_service import validate_template_days
from domain.models import RoutineTemplate, RoutineType, ScheduleDay

logger = logging.getLogger(__name__)

ROUTINE_TEMPLATES = "routine_templates"


class ManageTemplatesUseCase:
    """
    Use case for routine template CRUD.

    Usage:
        >>> use_case = ManageTemplatesUseCase(record_store=store)
        >>> template = use_case.create(
        ...     coach_id="coach-1",
        ...     capabilities=Capabilities(can_manage_templates=True),
        ...     name="Full Body",
        ...     routine_type=RoutineType.WEEKLY,
        ...     schedule=[ScheduleDay(name="A", exercises=[...])],
        ... )
    """

    def __init__(self, record_store: RecordStore) -> None:
        self._store = record_store

    @staticmethod
    def _require_manage(capabilities: Capabilities) -> None:
        if not capabilities.can_manage_templates:
            raise AuthorizationError("Not allowed to manage routine templates")

    def _load(self, template_id: str) -> RoutineTemplate:
        rows = self._store.query(ROUTINE_TEMPLATES, [("id", "==", template_id)], limit=1)
        if not rows:
            raise NotFoundError(f"Routine template {template_id} not found", resource="template")
        return RoutineTemplate.model_validate(rows[0])

    def create(
        self,
        coach_id: str,
        capabilities: Capabilities,
        name: str,
        routine_type: RoutineType,
        schedule: List[ScheduleDay],
        description: str = "",
    ) -> RoutineTemplate:
        """
        Create a template owned by coach_id.

        Raises:
            AuthorizationError: If the actor cannot manage templates
            ValidationError: If the schedule has an invalid day count
        """
        self._require_manage(capabilities)
        validate_template_days(routine_type, schedule)

        now = datetime.now(timezone.utc)
        template = RoutineTemplate(
            coach_id=coach_id,
            name=name,
            description=description,
            type=routine_type,
            schedule=schedule,
            created_at=now,
            updated_at=now,
        )
        doc = template.model_dump(mode="json", exclude={"id"})
        template_id = self._store.add(ROUTINE_TEMPLATES, doc)
        logger.info(f"Created routine template {template_id} for coach {coach_id}")
        return template.model_copy(update={"id": template_id})

    def list_for_coach(self, coach_id: str) -> List[RoutineTemplate]:
        rows = self._store.query(
            ROUTINE_TEMPLATES,
            [("coach_id", "==", coach_id)],
            order_by=OrderBy("created_at", descending=True),
        )
        return [RoutineTemplate.model_validate(r) for r in rows]

    def get(self, template_id: str, coach_id: str) -> RoutineTemplate:
        """
        Read one template.

        Raises:
            NotFoundError: If it does not exist
            AuthorizationError: If coach_id does not own it
        """
        template = self._load(template_id)
        if template.coach_id != coach_id:
            raise AuthorizationError("Only the template's coach can read it")
        return template

    def update(
        self,
        template_id: str,
        coach_id: str,
        capabilities: Capabilities,
        name: str,
        routine_type: RoutineType,
        schedule: List[ScheduleDay],
        description: str = "",
    ) -> RoutineTemplate:
        """Replace a template's content. Same validation as create()."""
        self._require_manage(capabilities)
        current = self.get(template_id, coach_id)
        validate_template_days(routine_type, schedule)

        updated = current.model_copy(
            update={
                "name": name,
                "description": description,
                "type": routine_type,
                "schedule": schedule,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        data = updated.model_dump(mode="json", include={"name", "description", "type", "schedule", "updated_at"})
        self._store.batch_write([BatchOp("update", ROUTINE_TEMPLATES, template_id, data)])
        logger.info(f"Updated routine template {template_id}")
        return updated

    def delete(self, template_id: str, coach_id: str, capabilities: Capabilities) -> None:
        self._require_manage(capabilities)
        self.get(template_id, coach_id)
        self._store.batch_write([BatchOp("delete", ROUTINE_TEMPLATES, template_id)])
        logger.info(f"Deleted routine template {template_id}")

"""
AssignRoutine Use Case.

Copies a coach's routine template onto an athlete's calendar and makes it
the athlete's only active routine, in one atomic batch.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from application.exceptions import AuthorizationError, NotFoundError
from application.ports import BatchOp, Capabilities, RecordStore
from backend.core.schedule_service import build_assigned_schedule, next_start_date
from domain.models import AssignedRoutine, RoutineTemplate

logger = logging.getLogger(__name__)

ROUTINE_TEMPLATES = "routine_templates"
ASSIGNED_ROUTINES = "assigned_routines"


@dataclass
class AssignRoutineResult:
    """Result of the AssignRoutine use case execution."""

    routine: AssignedRoutine
    deactivated_ids: List[str] = field(default_factory=list)


class AssignRoutineUseCase:
    """
    Use case for assigning a routine template to an athlete.

    Orchestrates the following workflow:
    1. Check the actor may assign routines and owns the template
    2. Validate the template's day count
    3. Place the template days onto a Monday-first week
    4. Compute the start date (next Monday strictly after today)
    5. Deactivate every active routine of the athlete and insert the new
       one in a single atomic batch

    Usage:
        >>> use_case = AssignRoutineUseCase(record_store=store)
        >>> result = use_case.execute(
        ...     template_id="tpl-1",
        ...     athlete_id="athlete-1",
        ...     actor_id="coach-1",
        ...     capabilities=Capabilities(can_assign_routines=True),
        ... )
        >>> result.routine.active
        True
    """

    def __init__(
        self,
        record_store: RecordStore,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        """
        Initialize the use case with required dependencies.

        Args:
            record_store: Document store for templates and assignments
            today: Provider for the current local date (injectable for tests)
        """
        self._store = record_store
        self._today = today or date.today

    def _load_template(self, template_id: str) -> RoutineTemplate:
        rows = self._store.query(ROUTINE_TEMPLATES, [("id", "==", template_id)], limit=1)
        if not rows:
            raise NotFoundError(f"Routine template {template_id} not found", resource="template")
        return RoutineTemplate.model_validate(rows[0])

    def execute(
        self,
        template_id: str,
        athlete_id: str,
        actor_id: str,
        capabilities: Capabilities,
    ) -> AssignRoutineResult:
        """
        Execute the assignment.

        Args:
            template_id: Template to assign
            athlete_id: Athlete receiving the routine
            actor_id: Authenticated user performing the assignment
            capabilities: Actor's resolved capabilities

        Returns:
            AssignRoutineResult with the new routine and the ids deactivated

        Raises:
            AuthorizationError: If the actor cannot assign or does not own the template
            NotFoundError: If the template does not exist
            ValidationError: If the template's day count cannot be scheduled
            PersistenceError: If the batch write fails (nothing is applied)
        """
        if not capabilities.can_assign_routines:
            raise AuthorizationError("Not allowed to assign routines")

        template = self._load_template(template_id)
        if template.coach_id != actor_id:
            raise AuthorizationError("Only the template's coach can assign it")

        schedule = build_assigned_schedule(template)
        routine = AssignedRoutine(
            id=str(uuid.uuid4()),
            athlete_id=athlete_id,
            coach_id=template.coach_id,
            template_id=template_id,
            name=template.name,
            type=template.type,
            schedule=schedule,
            active=True,
            start_date=next_start_date(self._today()),
            created_at=datetime.now(timezone.utc),
        )

        active = (("athlete_id", "==", athlete_id), ("active", "==", True))
        deactivated = [row["id"] for row in self._store.query(ASSIGNED_ROUTINES, active)]

        # Deactivation is matched inside the batch, so a routine assigned
        # concurrently after the read above is switched off too
        self._store.batch_write([
            BatchOp("update_where", ASSIGNED_ROUTINES, data={"active": False}, where=active),
            BatchOp("set", ASSIGNED_ROUTINES, routine.id, routine.model_dump(mode="json")),
        ])

        logger.info(
            f"Assigned template {template_id} to athlete {athlete_id} as {routine.id} "
            f"(start {routine.start_date.isoformat()}, deactivated {len(deactivated)})"
        )
        return AssignRoutineResult(routine=routine, deactivated_ids=deactivated)

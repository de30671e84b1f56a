"""Access rule for reading another athlete's data."""

from fastapi import HTTPException

from application.ports import Capabilities


def require_athlete_access(user_id: str, athlete_id: str, capabilities: Capabilities) -> None:
    """
    Athletes may always read their own data; others need can_view_athletes.

    Raises:
        HTTPException: 403 when the caller may not read athlete_id's data
    """
    if user_id != athlete_id and not capabilities.can_view_athletes:
        raise HTTPException(status_code=403, detail="Not allowed to view this athlete")

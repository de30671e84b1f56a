"""
Profile-based Capability Resolver.

Resolves an actor's capabilities from the role stored on their profile.
This is the only place role strings are interpreted; everything else works
with the resolved Capabilities booleans.
"""
import logging
from typing import Dict

from application.ports import Capabilities, RecordStore

logger = logging.getLogger(__name__)

PROFILES = "profiles"

ROLE_CAPABILITIES: Dict[str, Capabilities] = {
    "coach": Capabilities(
        can_assign_routines=True,
        can_manage_templates=True,
        can_edit_planned_exercises=True,
        can_view_athletes=True,
    ),
    "athlete": Capabilities(),
}


class ProfileCapabilityResolver:
    """CapabilityResolver backed by the profiles collection."""

    def __init__(self, record_store: RecordStore):
        self._store = record_store

    def resolve(self, user_id: str) -> Capabilities:
        rows = self._store.query(PROFILES, [("id", "==", user_id)], limit=1)
        if not rows:
            logger.debug(f"No profile for {user_id}, resolving empty capabilities")
            return Capabilities()
        role = str(rows[0].get("role") or "").lower()
        return ROLE_CAPABILITIES.get(role, Capabilities())

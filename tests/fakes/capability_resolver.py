"""
Fake CapabilityResolver for testing.
"""
from typing import Dict, Optional

from application.ports import Capabilities

COACH_CAPABILITIES = Capabilities(
    can_assign_routines=True,
    can_manage_templates=True,
    can_edit_planned_exercises=True,
    can_view_athletes=True,
)


class FakeCapabilityResolver:
    """Resolves from a fixed user_id -> Capabilities mapping; unknown users get none."""

    def __init__(self, capabilities: Optional[Dict[str, Capabilities]] = None):
        self._capabilities = dict(capabilities or {})

    def grant(self, user_id: str, capabilities: Capabilities) -> None:
        self._capabilities[user_id] = capabilities

    def resolve(self, user_id: str) -> Capabilities:
        return self._capabilities.get(user_id, Capabilities())

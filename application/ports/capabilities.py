"""
Capability resolution (Port).

The core never compares role strings. Callers resolve a Capabilities set once
per actor and pass it in; the engines only read the booleans.
"""
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Capabilities:
    """Resolved permissions for one authenticated actor."""
    can_assign_routines: bool = False
    can_manage_templates: bool = False
    can_edit_planned_exercises: bool = False
    can_view_athletes: bool = False


class CapabilityResolver(Protocol):
    """Resolves the capability set of an authenticated actor."""

    def resolve(self, user_id: str) -> Capabilities:
        """
        Return the capabilities for user_id.

        Unknown actors resolve to an empty capability set rather than an error.
        """
        ...

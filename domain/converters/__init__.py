"""
Domain converters for routine payloads.

Pure functions that bring external document shapes into the canonical
model shape before pydantic validation runs.

Examples:
    >>> from domain.converters import normalize_sets
    >>> normalize_sets(2, reps=5)
    [{'type': 'working', 'reps': '5', 'rpe_target': 8, 'rest_seconds': None}, {'type': 'working', 'reps': '5', 'rpe_target': 8, 'rest_seconds': None}]
"""

from domain.converters.set_specs import (
    DEFAULT_SET_COUNT,
    default_working_set,
    default_working_sets,
    normalize_exercise_payload,
    normalize_set,
    normalize_sets,
)

__all__ = [
    "DEFAULT_SET_COUNT",
    "default_working_set",
    "default_working_sets",
    "normalize_exercise_payload",
    "normalize_set",
    "normalize_sets",
]

"""
Set-shape normalization for exercise payloads.

Routine documents in the wild describe an exercise's sets in two shapes:
an explicit list of set objects, or a plain count with the rep/RPE target
on the exercise itself:

    {"exerciseName": "Squat", "sets": [{"reps": "5", "rpeTarget": 8}, ...]}
    {"exerciseName": "Squat", "sets": 3, "reps": "8-10", "rpe": 8}

Both are converted here into a single list of set dicts so nothing past the
model boundary ever branches on the shape.
"""

from typing import Any, Dict, List, Optional

DEFAULT_SET_COUNT = 3
DEFAULT_TARGET_REPS = "10-12"
DEFAULT_TARGET_RPE = 8

# camelCase keys accepted from imported/legacy documents
_SET_KEY_ALIASES = {
    "rpe": "rpe_target",
    "rpeTarget": "rpe_target",
    "restSeconds": "rest_seconds",
    "rest": "rest_seconds",
}

_EXERCISE_KEY_ALIASES = {
    "exerciseId": "exercise_id",
    "exerciseName": "exercise_name",
    "name": "exercise_name",
    "restSeconds": "rest_seconds",
    "rest": "rest_seconds",
}


def default_working_set(
    reps: Optional[Any] = None,
    rpe_target: Optional[Any] = None,
    rest_seconds: Optional[int] = None,
) -> Dict[str, Any]:
    """Build one working set dict, falling back to the default targets."""
    return {
        "type": "working",
        "reps": str(reps) if reps is not None else DEFAULT_TARGET_REPS,
        "rpe_target": rpe_target if rpe_target is not None else DEFAULT_TARGET_RPE,
        "rest_seconds": rest_seconds,
    }


def default_working_sets(count: int = DEFAULT_SET_COUNT) -> List[Dict[str, Any]]:
    """Default prescription for an exercise added without a set plan."""
    return [default_working_set() for _ in range(count)]


def normalize_set(raw: Any) -> Any:
    """Rename camelCase keys on a single set dict. Non-dicts pass through."""
    if not isinstance(raw, dict):
        return raw
    normalized = {}
    for key, value in raw.items():
        normalized[_SET_KEY_ALIASES.get(key, key)] = value
    if "reps" in normalized and normalized["reps"] is not None:
        normalized["reps"] = str(normalized["reps"])
    return normalized


def normalize_sets(
    sets: Any,
    *,
    reps: Optional[Any] = None,
    rpe_target: Optional[Any] = None,
    rest_seconds: Optional[int] = None,
) -> Any:
    """
    Convert either set shape into a list of set dicts.

    Args:
        sets: A list of set objects, a set count, or None
        reps: Exercise-level rep target used when sets is a count
        rpe_target: Exercise-level RPE target used when sets is a count
        rest_seconds: Exercise-level rest used when sets is a count

    Returns:
        A list of set dicts (empty when sets is None). Anything else is
        returned unchanged so the model's own validation reports it.
    """
    if sets is None:
        return []
    if isinstance(sets, bool):
        return sets
    if isinstance(sets, int):
        if sets < 0:
            return sets
        return [default_working_set(reps, rpe_target, rest_seconds) for _ in range(sets)]
    if isinstance(sets, str) and sets.strip().isdigit():
        return normalize_sets(int(sets), reps=reps, rpe_target=rpe_target, rest_seconds=rest_seconds)
    if isinstance(sets, (list, tuple)):
        return [normalize_set(s) for s in sets]
    return sets


def normalize_exercise_payload(raw: Any) -> Any:
    """
    Normalize an exercise dict: key aliases plus the set shape.

    Exercise-level "reps"/"rpe" keys only carry meaning for the count shape
    and are dropped once the sets are expanded.
    """
    if not isinstance(raw, dict):
        return raw
    data: Dict[str, Any] = {}
    for key, value in raw.items():
        data[_EXERCISE_KEY_ALIASES.get(key, key)] = value

    reps = data.pop("reps", None)
    rpe_target = data.pop("rpe", data.pop("rpeTarget", data.pop("rpe_target", None)))
    data["sets"] = normalize_sets(
        data.get("sets"),
        reps=reps,
        rpe_target=rpe_target,
        rest_seconds=data.get("rest_seconds"),
    )
    return data

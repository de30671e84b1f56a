"""
Device command line for running a workout session.

Each invocation restores the session from the device store, applies one
command and persists the result, so a session survives across invocations
(and crashes) exactly like it would across app reloads.

Usage:
    python -m backend.cli start routine.json --day day-a --athlete athlete-1
    python -m backend.cli log 0 0 --weight 100 --reps 5 --rpe 8
    python -m backend.cli complete 0 0
    python -m backend.cli next
    python -m backend.cli timer --seconds 90
    python -m backend.cli finish --rpe 8 --notes "felt strong"
    python -m backend.cli sync
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from application.exceptions import TrainingCoreError
from application.ports import Capabilities, DeviceStore
from backend.core.session_engine import SessionStore, SessionTicker, WorkoutSession
from backend.services.offline_queue import OfflineQueue
from backend.settings import Settings, get_settings
from domain.converters import normalize_sets
from domain.models import AssignedRoutine, ExerciseSpec
from infrastructure.http import HttpTrainingLogClient
from infrastructure.local import FileDeviceStore

CURRENT_KEY = "cli:current"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a workout session on this device")
    parser.add_argument(
        "--allow-edits",
        action="store_true",
        help="Allow swapping, adding and removing exercises",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser("start", help="Start or resume a session")
    start.add_argument("routine", help="Assigned routine JSON file")
    start.add_argument("--day", required=True, help="Schedule day id")
    start.add_argument("--athlete", required=True, help="Athlete id")

    sub.add_parser("status", help="Show the current session")

    log = sub.add_parser("log", help="Log values for a set")
    log.add_argument("exercise", type=int)
    log.add_argument("set", type=int)
    log.add_argument("--weight", type=float, required=True)
    log.add_argument("--reps", type=int, required=True)
    log.add_argument("--rpe", type=float)

    complete = sub.add_parser("complete", help="Toggle a set's completed flag")
    complete.add_argument("exercise", type=int)
    complete.add_argument("set", type=int)

    sub.add_parser("next", help="Advance to the next set or exercise")

    rest = sub.add_parser("rest", help="Extend or skip the running rest")
    rest.add_argument("action", choices=["extend", "skip"])

    timer = sub.add_parser("timer", help="Run the session clock")
    timer.add_argument("--seconds", type=int, default=60)

    feedback = sub.add_parser("feedback", help="Attach feedback to an exercise")
    feedback.add_argument("exercise", type=int)
    feedback.add_argument("text")

    swap = sub.add_parser("swap", help="Replace an exercise")
    swap.add_argument("exercise", type=int)
    swap.add_argument("--id", required=True, dest="exercise_id")
    swap.add_argument("--name", required=True, dest="exercise_name")
    swap.add_argument("--sets", type=int, help="Set count (default: keep the slot's sets)")

    add = sub.add_parser("add", help="Append an exercise")
    add.add_argument("--id", required=True, dest="exercise_id")
    add.add_argument("--name", required=True, dest="exercise_name")
    add.add_argument("--sets", type=int, help="Set count (default: 3)")

    remove = sub.add_parser("remove", help="Remove an exercise")
    remove.add_argument("exercise", type=int)

    variant = sub.add_parser("variant", help="Record a substitute exercise")
    variant.add_argument("exercise", type=int)
    variant.add_argument("variant_id")
    variant.add_argument("--name")

    finish = sub.add_parser("finish", help="Finish and save the session")
    finish.add_argument("--rpe", type=float)
    finish.add_argument("--notes", default="")

    cancel = sub.add_parser("cancel", help="Discard the session")
    cancel.add_argument("--yes", action="store_true", help="Confirm cancelling")

    sub.add_parser("sync", help="Retry queued sessions")
    return parser


# =============================================================================
# Session wiring
# =============================================================================


def _writer(settings: Settings) -> HttpTrainingLogClient:
    return HttpTrainingLogClient(
        settings.api_base_url,
        api_key=settings.device_api_key,
        timeout=settings.sync_timeout_seconds,
        max_attempts=settings.sync_max_attempts,
    )


def _open_session(
    device_store: DeviceStore,
    settings: Settings,
    capabilities: Capabilities,
    routine: AssignedRoutine,
    day_id: str,
    athlete_id: str,
) -> WorkoutSession:
    return WorkoutSession.start(
        routine,
        day_id,
        athlete_id,
        store=SessionStore(device_store),
        writer=_writer(settings),
        offline_queue=OfflineQueue(device_store),
        capabilities=capabilities,
        default_rest_seconds=settings.default_rest_seconds,
        rest_extension_seconds=settings.rest_extension_seconds,
    )


def _resume(device_store: DeviceStore, settings: Settings, capabilities: Capabilities) -> WorkoutSession:
    blob = device_store.get(CURRENT_KEY)
    if not blob:
        raise SystemExit("No session in progress. Run 'start' first.")
    current = json.loads(blob)
    routine = AssignedRoutine.model_validate(current["routine"])
    return _open_session(
        device_store, settings, capabilities, routine, current["day_id"], current["athlete_id"]
    )


def _exercise_spec(exercise_id: str, exercise_name: str, sets: Optional[int]) -> ExerciseSpec:
    return ExerciseSpec(
        exercise_id=exercise_id,
        exercise_name=exercise_name,
        sets=normalize_sets(sets),
    )


def _print_status(session: WorkoutSession) -> None:
    snap = session.snapshot()
    print(f"Session {snap.session_id} [{snap.state.value}] {snap.day_name}")
    print(f"Elapsed {snap.elapsed_seconds // 60}:{snap.elapsed_seconds % 60:02d}", end="")
    if snap.rest_remaining_seconds:
        print(f"  resting {snap.rest_remaining_seconds}s", end="")
    print(f"  progress {session.progress:.0%}")
    for i, exercise in enumerate(snap.exercises):
        marker = ">" if i == snap.current_exercise_index else " "
        used = exercise.exercise_name_used
        if exercise.exercise_id_used != exercise.planned.exercise_id:
            used = f"{used} (for {exercise.planned.exercise_name})"
        print(f"{marker} [{i}] {used}")
        for j, s in enumerate(exercise.sets):
            pointer = "*" if marker == ">" and j == snap.current_set_index else " "
            done = "x" if s.completed else " "
            rpe = f" @{s.rpe:g}" if s.rpe is not None else ""
            print(
                f"   {pointer}{j}. [{done}] {s.weight:g} x {s.reps}{rpe}"
                f"   target {s.target_reps}"
                + (f" @{s.target_rpe:g}" if s.target_rpe is not None else "")
            )


async def _run_timer(session: WorkoutSession, seconds: int) -> None:
    ticker = SessionTicker(session)
    ticker.start()
    try:
        await asyncio.sleep(seconds)
    finally:
        await ticker.stop()


# =============================================================================
# Entry point
# =============================================================================


def run(args: argparse.Namespace, settings: Settings, device_store: DeviceStore) -> int:
    capabilities = Capabilities(can_edit_planned_exercises=args.allow_edits)

    if args.command == "sync":
        report = OfflineQueue(device_store).drain(_writer(settings))
        print(f"Synced {len(report.synced)}, failed {len(report.failed)}, pending {report.remaining}")
        for session_id, error in report.errors.items():
            print(f"  {session_id}: {error}", file=sys.stderr)
        return 0 if not report.failed else 1

    if args.command == "start":
        with open(args.routine, "r") as f:
            routine = AssignedRoutine.model_validate(json.load(f))
        session = _open_session(device_store, settings, capabilities, routine, args.day, args.athlete)
        device_store.set(
            CURRENT_KEY,
            json.dumps({
                "routine": routine.model_dump(mode="json"),
                "day_id": args.day,
                "athlete_id": args.athlete,
            }),
        )
        _print_status(session)
        return 0

    session = _resume(device_store, settings, capabilities)

    if args.command == "status":
        pass
    elif args.command == "log":
        session.log_set(args.exercise, args.set, args.weight, args.reps, args.rpe)
    elif args.command == "complete":
        session.toggle_set_complete(args.exercise, args.set)
    elif args.command == "next":
        result = session.advance()
        if result is not None:
            device_store.remove(CURRENT_KEY)
            print(f"Workout finished: {result.training_log.total_sets} sets, "
                  f"volume {result.training_log.total_volume:g}"
                  + (" (queued for sync)" if result.queued else ""))
            return 0
    elif args.command == "rest":
        if args.action == "extend":
            session.extend_rest()
        else:
            session.skip_rest()
    elif args.command == "timer":
        asyncio.run(_run_timer(session, args.seconds))
    elif args.command == "feedback":
        session.set_feedback(args.exercise, args.text)
    elif args.command == "swap":
        session.swap_exercise(
            args.exercise, _exercise_spec(args.exercise_id, args.exercise_name, args.sets)
        )
    elif args.command == "add":
        session.add_exercise(_exercise_spec(args.exercise_id, args.exercise_name, args.sets))
    elif args.command == "remove":
        session.remove_exercise(args.exercise)
    elif args.command == "variant":
        session.select_variant(args.exercise, args.variant_id, args.name)
    elif args.command == "finish":
        if session.has_incomplete_sets:
            print("Warning: some sets have values but are not marked complete", file=sys.stderr)
        result = session.finalize(args.rpe, args.notes)
        device_store.remove(CURRENT_KEY)
        print(f"Workout saved: {result.training_log.total_sets} sets, "
              f"volume {result.training_log.total_volume:g}"
              + (" (queued for sync)" if result.queued else ""))
        return 0
    elif args.command == "cancel":
        session.cancel(confirmed=args.yes)
        device_store.remove(CURRENT_KEY)
        print("Session cancelled")
        return 0

    _print_status(session)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    device_store = FileDeviceStore(settings.device_store_dir)

    try:
        return run(args, settings, device_store)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        return 1
    except TrainingCoreError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Build a structured running plan from the coach's block editor.

The editor describes a workout as a list of blocks, each repeated
``repeatCount`` times and holding run/rest steps:

    [{"repeatCount": 5, "steps": [
        {"type": "run", "durationType": "distance", "durationUnit": "meters",
         "durationValue": 1000, "paceMode": "specific", "pace": "4:00"},
        {"type": "rest", "durationType": "time", "durationUnit": "seconds",
         "durationValue": 90},
    ]}]

``build_plan_payload`` turns that into the Garmin-compatible plan JSON the
plans API stores: one ``WorkoutRepeatStep`` per block wrapping one
``WorkoutStep`` per step, durations in seconds/meters and pace targets as
speeds in m/s.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime

from pace import min_per_km_to_mps, parse_pace

logger = logging.getLogger(__name__)

REPEAT_UNTIL_STEPS_COMPLETE = "REPEAT_UNTIL_STEPS_CMPLT"

# unit -> multiplier to seconds (time) or meters (distance)
_TIME_UNITS = {"seconds": 1, "minutes": 60}
_DISTANCE_UNITS = {"meters": 1, "kilometers": 1000}


class PlanValidationError(ValueError):
    """Raised when editor blocks can't be turned into a plan."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def _pace_value(value) -> float | None:
    """Decimal min/km from either an m:ss string or a number."""
    if isinstance(value, str):
        return parse_pace(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def normalize_duration(value: float, duration_type: str, unit: str | None = None) -> float:
    """Convert a duration to seconds (time) or meters (distance)."""
    if duration_type == "time":
        return value * _TIME_UNITS.get(unit or "seconds", 1)
    return value * _DISTANCE_UNITS.get(unit or "meters", 1)


def _validate_step(prefix: str, step: dict, errors: dict[str, str]):
    duration = step.get("durationValue")
    if not isinstance(duration, (int, float)) or duration <= 0:
        errors[f"{prefix}-duration"] = "Duration must be greater than 0"

    if step.get("durationType") not in ("time", "distance"):
        errors[f"{prefix}-durationType"] = "Duration type must be 'time' or 'distance'"

    if step.get("type") != "run":
        return

    mode = step.get("paceMode")
    if not mode:
        errors[f"{prefix}-paceMode"] = "Pace mode is required for run steps"
    elif mode == "specific":
        pace = _pace_value(step.get("pace"))
        if pace is None or pace <= 0:
            errors[f"{prefix}-pace"] = "Pace must be greater than 0"
    elif mode == "range":
        low = _pace_value(step.get("paceLow"))
        high = _pace_value(step.get("paceHigh"))
        if low is None or low <= 0:
            errors[f"{prefix}-paceLow"] = "Low pace must be greater than 0"
        if high is None or high <= 0:
            errors[f"{prefix}-paceHigh"] = "High pace must be greater than 0"
        if low is not None and high is not None and low > high:
            errors[f"{prefix}-paceRange"] = "Low pace must be less than or equal to high pace"
    else:
        errors[f"{prefix}-paceMode"] = f"Unknown pace mode: {mode}"


def validate_blocks(blocks: list[dict], name: str | None = "", workout_date=None,
                    require_meta: bool = True) -> dict[str, str]:
    """Check editor blocks (and optionally name/date). Returns field -> message."""
    errors: dict[str, str] = {}
    if require_meta:
        if not (name or "").strip():
            errors["workoutName"] = "Workout name is required"
        if not workout_date:
            errors["workoutDate"] = "Workout date is required"

    if not blocks:
        errors["blocks"] = "At least one workout block is required"
        return errors
    if not isinstance(blocks, list):
        errors["blocks"] = "Blocks must be a list"
        return errors

    for b, block in enumerate(blocks):
        if not isinstance(block, dict):
            errors[f"interval-{b}"] = "Interval must be an object"
            continue
        repeat = block.get("repeatCount", 1)
        if not isinstance(repeat, int) or repeat < 1:
            errors[f"interval-{b}-repeat"] = "Repeat count must be at least 1"
        steps = block.get("steps") or []
        if not steps:
            errors[f"interval-{b}-steps"] = "Interval must have at least one step"
        for s, step in enumerate(steps):
            if not isinstance(step, dict):
                errors[f"interval-{b}-step-{s}"] = "Step must be an object"
                continue
            _validate_step(f"interval-{b}-step-{s}", step, errors)

    return errors


def _build_step(order: int, step: dict) -> dict:
    target_low = target_high = 0.0
    intensity = "REST"

    if step.get("type") == "run":
        intensity = "INTERVAL"
        if step.get("paceMode") == "range":
            # Pace bounds are min/km, the faster pace gives the higher speed
            target_low = min_per_km_to_mps(_pace_value(step["paceLow"]))
            target_high = min_per_km_to_mps(_pace_value(step["paceHigh"]))
        else:
            target_low = target_high = min_per_km_to_mps(_pace_value(step["pace"]))

    duration_type = step["durationType"]
    return {
        "targetType": "PACE",
        "stepOrder": order,
        "repeatValue": 0,
        "type": "WorkoutStep",
        "steps": None,
        "description": "run" if step.get("type") == "run" else "rest",
        "durationType": duration_type.upper(),
        "durationValue": float(normalize_duration(
            step["durationValue"], duration_type, step.get("durationUnit"),
        )),
        "intensity": intensity,
        "targetValueLow": target_low,
        "targetValueHigh": target_high,
        "repeatType": None,
    }


def _repeat_step(order: int, repeat: int, steps: list[dict]) -> dict:
    return {
        "targetType": "PACE",
        "stepOrder": order,
        "repeatValue": repeat,
        "type": "WorkoutRepeatStep",
        "steps": steps,
        "description": "Run",
        "durationType": None,
        "durationValue": 0.0,
        "intensity": "INTERVAL",
        "targetValueLow": 0.0,
        "targetValueHigh": 0.0,
        "repeatType": REPEAT_UNTIL_STEPS_COMPLETE,
    }


def build_plan_payload(name: str, blocks: list[dict], description: str = "") -> dict:
    """Build the plan JSON for a list of editor blocks.

    Raises PlanValidationError if the blocks are invalid.
    """
    errors = validate_blocks(blocks, name, require_meta=False)
    if not (name or "").strip():
        errors["workoutName"] = "Workout name is required"
    if errors:
        raise PlanValidationError(errors)

    steps = []
    for b, block in enumerate(blocks):
        workout_steps = [_build_step(s + 1, step) for s, step in enumerate(block["steps"])]
        steps.append(_repeat_step(b + 1, block.get("repeatCount", 1), workout_steps))

    logger.debug("Built plan %r with %d blocks", name, len(steps))
    return {
        "sport": "RUNNING",
        "steps": steps,
        "workoutName": name,
        "description": description or "",
    }


def format_plan_date(value) -> str:
    """Format a date (or ISO date/datetime string) as yyyy-MM-dd."""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return value.isoformat()


def build_add_workout_request(target_name: str, workout_date, payload: dict,
                              is_flock: bool = False) -> dict:
    """Request body for scheduling a plan for an athlete or a flock."""
    if not (target_name or "").strip():
        raise PlanValidationError({
            "targetName": "Flock name is required" if is_flock else "Athlete name is required",
        })
    return {
        "targetName": target_name,
        "isFlock": is_flock,
        "jsonBody": json.dumps(payload),
        "date": format_plan_date(workout_date),
    }

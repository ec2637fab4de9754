"""Parse raw planned-workout JSON into a typed interval tree.

A plan's ``intervals`` are either leaves (a single timed or measured
segment) or repeat blocks (``steps`` run ``repeatValue`` times). The API
sends both as the same loosely-typed object; here they become two types
so the flattener can branch on the type instead of on optional fields.

Parsing never raises: missing keys, ``null`` collections, non-dict nodes
and non-numeric values are read as absent.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Union

logger = logging.getLogger(__name__)

REST_INTENSITY = "REST"

# Deeper repeat blocks are dropped so parsing and walking stay within the recursion limit
MAX_NESTING_DEPTH = 50


class DurationType(enum.Enum):
    DISTANCE = "DISTANCE"
    TIME = "TIME"

    @classmethod
    def parse(cls, value) -> DurationType | None:
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class LeafInterval:
    """A single segment: run (or rest) for a time or a distance."""
    step_order: int = 0
    duration_type: DurationType | None = None
    duration_value: float = 0.0     # meters for DISTANCE, seconds for TIME
    intensity: str = ""
    target_low: float = 0.0         # m/s
    target_high: float = 0.0        # m/s
    repeat_value: int = 1
    description: str = ""

    @property
    def is_rest(self) -> bool:
        return self.intensity.strip().upper() == REST_INTENSITY


@dataclass(frozen=True)
class RepeatBlock:
    """A block whose steps are executed ``repeat_value`` times in order."""
    step_order: int = 0
    repeat_value: int = 1
    steps: tuple = ()
    description: str = ""


Interval = Union[LeafInterval, RepeatBlock]


@dataclass(frozen=True)
class WorkoutPlan:
    workout_id: str | None = None
    name: str = ""
    description: str = ""
    date: str | None = None
    coach_name: str = ""
    athlete_names: tuple = ()
    intervals: tuple = field(default_factory=tuple)


def _as_float(value) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _as_int(value) -> int:
    number = _as_float(value)
    return int(number)


def _as_repeat(value) -> int:
    """Repeat counts round up (2.5 runs 3 times) and default to 1 when absent, zero or negative."""
    count = math.ceil(_as_float(value))
    return count if count >= 1 else 1


def _as_str(value) -> str:
    return value if isinstance(value, str) else ""


def parse_interval(raw, depth: int = 0) -> Interval | None:
    """Parse one raw interval dict. Returns None for non-dict input.

    Blocks nested deeper than MAX_NESTING_DEPTH are dropped.
    """
    if isinstance(raw, (LeafInterval, RepeatBlock)):
        return raw
    if not isinstance(raw, dict):
        return None

    steps = raw.get("steps")
    if isinstance(steps, list) and steps:
        if depth >= MAX_NESTING_DEPTH:
            logger.debug("Dropping step %s: nested too deep", raw.get("stepOrder"))
            return None
        return RepeatBlock(
            step_order=_as_int(raw.get("stepOrder")),
            repeat_value=_as_repeat(raw.get("repeatValue")),
            steps=parse_intervals(steps, depth + 1),
            description=_as_str(raw.get("description")),
        )

    return LeafInterval(
        step_order=_as_int(raw.get("stepOrder")),
        duration_type=DurationType.parse(raw.get("durationType")),
        duration_value=_as_float(raw.get("durationValue")),
        intensity=_as_str(raw.get("intensity")),
        target_low=_as_float(raw.get("targetValueLow")),
        target_high=_as_float(raw.get("targetValueHigh")),
        repeat_value=_as_repeat(raw.get("repeatValue")),
        description=_as_str(raw.get("description")),
    )


def parse_intervals(raw_list, depth: int = 0) -> tuple:
    """Parse a list of raw intervals, dropping anything that isn't a dict."""
    if not isinstance(raw_list, list):
        return ()
    parsed = (parse_interval(item, depth) for item in raw_list)
    return tuple(interval for interval in parsed if interval is not None)


def parse_plan(raw) -> WorkoutPlan:
    """Parse a planned running workout as returned by the plans API."""
    if isinstance(raw, WorkoutPlan):
        return raw
    if not isinstance(raw, dict):
        return WorkoutPlan()

    athlete_names = raw.get("athleteNames")
    workout_id = raw.get("workoutId")
    return WorkoutPlan(
        workout_id=str(workout_id) if workout_id is not None else None,
        name=_as_str(raw.get("workoutName")),
        description=_as_str(raw.get("description")),
        date=_as_str(raw.get("date")) or None,
        coach_name=_as_str(raw.get("coachName")),
        athlete_names=tuple(
            n for n in athlete_names if isinstance(n, str)
        ) if isinstance(athlete_names, list) else (),
        # Built payloads (plan_builder) use "steps" at the top level
        intervals=parse_intervals(raw.get("intervals", raw.get("steps"))),
    )

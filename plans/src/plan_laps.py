"""Flatten a planned workout's interval tree into synthesized laps for charting.

Each leaf interval becomes at most one lap with a distance, a duration and
a pace. Repeat blocks are unrolled in place, so the lap order matches a
depth-first walk of the plan. Leaves that can't produce a positive
distance, duration and pace are dropped rather than emitted with zeros.

Two behaviours differ between the pages that chart plans and are exposed
as ``FlattenOptions``:

- ``leaf_repeat``: honour ``repeatValue`` on a leaf that isn't wrapped in
  a repeat block (off by default, only ``steps`` blocks unroll).
- ``fallback_duration_seconds``: treat a leaf with no usable
  ``durationType`` as a timed leaf. Its own ``durationValue`` is used as
  seconds when positive, otherwise this many seconds (off by default,
  such leaves are skipped).

Output is capped at ``max_laps`` laps (500 unless told otherwise).
"""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Iterator

from intervals import (
    MAX_NESTING_DEPTH,
    DurationType,
    Interval,
    LeafInterval,
    RepeatBlock,
    WorkoutPlan,
    parse_intervals,
    parse_plan,
)
from pace import mps_to_min_per_km

logger = logging.getLogger(__name__)

# Rest bars all render at the same, visibly slow height
REST_PACE_MIN_PER_KM = 10.0

# Laps beyond this count are dropped so a pathological plan can't stall rendering
DEFAULT_MAX_LAPS = 500


@dataclass(frozen=True)
class Lap:
    """A synthesized lap of a planned workout."""
    distance_km: float
    duration_seconds: float
    pace_min_per_km: float
    avg_heart_rate: int = 0     # plans carry no sensor data

    def to_dict(self) -> dict:
        """Lap in the JSON shape used for recorded workout laps."""
        return {
            "lapDistanceInKilometers": self.distance_km,
            "lapDurationInSeconds": self.duration_seconds,
            "lapPaceInMinKm": self.pace_min_per_km,
            "avgHeartRate": self.avg_heart_rate,
        }


@dataclass(frozen=True)
class FlattenOptions:
    leaf_repeat: bool = False
    fallback_duration_seconds: float | None = None
    max_laps: int | None = DEFAULT_MAX_LAPS


DEFAULT_OPTIONS = FlattenOptions()


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def leaf_pace(leaf: LeafInterval) -> float | None:
    """Pace in min/km for a leaf, or None if the leaf has no usable target."""
    if leaf.is_rest:
        return REST_PACE_MIN_PER_KM
    avg_speed_mps = (leaf.target_low + leaf.target_high) / 2
    return mps_to_min_per_km(avg_speed_mps)


def synthesize_lap(leaf: LeafInterval, options: FlattenOptions = DEFAULT_OPTIONS) -> Lap | None:
    """Build the lap for one leaf interval, or None if it can't be charted."""
    pace = leaf_pace(leaf)
    if pace is None:
        logger.debug("Skipping step %s: no target pace", leaf.step_order)
        return None

    duration_type = leaf.duration_type
    duration_value = leaf.duration_value
    if duration_type is None and options.fallback_duration_seconds:
        duration_type = DurationType.TIME
        if duration_value <= 0:
            duration_value = options.fallback_duration_seconds

    if duration_type is DurationType.DISTANCE:
        distance_km = duration_value / 1000
        duration_seconds = distance_km * pace * 60
    elif duration_type is DurationType.TIME:
        duration_seconds = duration_value
        distance_km = duration_seconds / (pace * 60)
    else:
        logger.debug("Skipping step %s: no duration type", leaf.step_order)
        return None

    if not (_positive(distance_km) and _positive(duration_seconds) and _positive(pace)):
        logger.debug("Skipping step %s: non-positive lap values", leaf.step_order)
        return None

    return Lap(
        distance_km=distance_km,
        duration_seconds=duration_seconds,
        pace_min_per_km=pace,
    )


def _walk(intervals: Iterable[Interval], options: FlattenOptions, depth: int = 0) -> Iterator[Lap]:
    for interval in intervals:
        if isinstance(interval, RepeatBlock):
            if not interval.steps:
                continue
            if depth >= MAX_NESTING_DEPTH:
                logger.debug("Skipping step %s: nested too deep", interval.step_order)
                continue
            for _ in range(interval.repeat_value):
                emitted = False
                for lap in _walk(interval.steps, options, depth + 1):
                    emitted = True
                    yield lap
                # Every repetition is identical, so an empty one means they all are
                if not emitted:
                    break
            continue
        if not isinstance(interval, LeafInterval):
            continue

        lap = synthesize_lap(interval, options)
        if lap is None:
            continue
        repeat = interval.repeat_value if options.leaf_repeat else 1
        for _ in range(repeat):
            yield lap


def iter_laps(intervals, options: FlattenOptions | None = None) -> Iterator[Lap]:
    """Lazily yield laps for a sequence of intervals in plan order.

    ``intervals`` may be parsed intervals or the raw JSON list.
    """
    options = options or DEFAULT_OPTIONS
    if isinstance(intervals, list):
        intervals = parse_intervals(intervals)
    elif not isinstance(intervals, tuple):
        intervals = ()

    laps = _walk(intervals, options)
    if options.max_laps is None:
        yield from laps
        return

    yield from itertools.islice(laps, options.max_laps)
    if next(laps, None) is not None:
        logger.warning("Plan produces more than %d laps, truncating", options.max_laps)


def flatten_plan(plan, options: FlattenOptions | None = None) -> list[Lap]:
    """Flatten a plan (WorkoutPlan, raw plan dict, or list of intervals) into laps."""
    if isinstance(plan, (list, tuple)):
        return list(iter_laps(plan, options))
    if not isinstance(plan, WorkoutPlan):
        plan = parse_plan(plan)
    return list(iter_laps(plan.intervals, options))


def laps_for_feed(response, options: FlattenOptions | None = None) -> dict[str, list[Lap]]:
    """Laps for every running workout in a planned-workout feed or by-date response.

    Keyed by ``workoutId``; workouts without an id are keyed by their index.
    """
    if not isinstance(response, dict):
        return {}
    workouts = response.get("runningWorkouts")
    if not isinstance(workouts, list):
        return {}

    result: dict[str, list[Lap]] = {}
    for index, raw in enumerate(workouts):
        plan = parse_plan(raw)
        key = plan.workout_id if plan.workout_id is not None else str(index)
        result[key] = flatten_plan(plan, options)
    return result

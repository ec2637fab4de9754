"""Bar geometry for the lap chart.

Each lap is one bar: width is its share of the total distance, height is
its pace inverted (faster laps stand taller) and colour runs blue -> purple
for the faster half of the paces and purple -> red for the slower half.
Paces are normalized against the laps being drawn, not a fixed scale.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from pace import format_pace
from plan_laps import Lap

MIN_BAR_HEIGHT_PCT = 10.0

BLUE_600 = (37, 99, 235)
PURPLE_600 = (147, 51, 234)
RED_500 = (239, 68, 68)


@dataclass(frozen=True)
class LapBar:
    index: int
    lap: Lap
    width_pct: float
    height_pct: float
    color: str

    @property
    def title(self) -> str:
        return (
            f"Lap {self.index + 1}: {self.lap.distance_km:.2f} km, "
            f"Pace: {format_pace(self.lap.pace_min_per_km)} /km"
        )


def _lerp(start: tuple, end: tuple, ratio: float) -> tuple:
    # round half up, matching the browser renderer
    return tuple(math.floor(a + (b - a) * ratio + 0.5) for a, b in zip(start, end))


def pace_range(laps: list[Lap]) -> tuple[float, float] | None:
    """(fastest, slowest) pace among the laps, or None for no laps."""
    if not laps:
        return None
    paces = [lap.pace_min_per_km for lap in laps]
    return min(paces), max(paces)


def pace_color(pace: float, min_pace: float, max_pace: float) -> str:
    """CSS rgb() colour for a pace within [min_pace, max_pace]."""
    spread = (max_pace - min_pace) or 1
    normalized = min(max((pace - min_pace) / spread, 0.0), 1.0)
    if normalized <= 0.5:
        r, g, b = _lerp(BLUE_600, PURPLE_600, normalized * 2)
    else:
        r, g, b = _lerp(PURPLE_600, RED_500, (normalized - 0.5) * 2)
    return f"rgb({r}, {g}, {b})"


def build_bars(laps: list[Lap]) -> list[LapBar]:
    """Compute width, height and colour of every bar in the lap chart."""
    total_distance = sum(lap.distance_km for lap in laps)
    if not laps or total_distance <= 0:
        return []

    min_pace, max_pace = pace_range(laps)
    spread = (max_pace - min_pace) or 1

    bars = []
    for index, lap in enumerate(laps):
        normalized = (max_pace - lap.pace_min_per_km) / spread
        bars.append(LapBar(
            index=index,
            lap=lap,
            width_pct=lap.distance_km / total_distance * 100,
            height_pct=max(normalized * 100, MIN_BAR_HEIGHT_PCT),
            color=pace_color(lap.pace_min_per_km, min_pace, max_pace),
        ))
    return bars

"""Speed and pace conversions (m/s <-> min/km) and m:ss pace strings."""

from __future__ import annotations

import math


def mps_to_min_per_km(mps: float | None) -> float | None:
    """Convert a speed in m/s to a pace in decimal minutes per km.

    Returns None when the speed is missing or not positive.
    """
    if not mps or mps <= 0 or not math.isfinite(mps):
        return None
    km_per_hour = mps * 3.6
    return 60 / km_per_hour


def min_per_km_to_mps(min_per_km: float) -> float:
    """Convert a pace in decimal minutes per km to m/s (Garmin target units)."""
    if min_per_km is None or min_per_km <= 0:
        raise ValueError(f"Pace must be greater than 0, got {min_per_km!r}")
    return 1000 / (min_per_km * 60)


def format_pace(min_per_km: float) -> str:
    """Format decimal minutes as m:ss, e.g. 5.5 -> '5:30'."""
    if min_per_km is None or not math.isfinite(min_per_km) or min_per_km < 0:
        return ""
    mins = int(min_per_km)
    secs = round((min_per_km - mins) * 60)
    if secs == 60:
        mins, secs = mins + 1, 0
    return f"{mins}:{secs:02d}"


def parse_pace(pace: str) -> float | None:
    """Parse an m:ss pace string into decimal minutes. None if malformed."""
    if not pace or not pace.strip():
        return None
    parts = pace.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        minutes = int(parts[0])
        seconds = int(parts[1])
    except ValueError:
        return None
    if minutes < 0 or seconds < 0 or seconds >= 60:
        return None
    return minutes + seconds / 60

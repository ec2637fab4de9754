"""Configuration loaded from environment variables, with .env fallback."""

import os
from pathlib import Path

from dotenv import load_dotenv

from plan_laps import DEFAULT_MAX_LAPS, FlattenOptions

# Load .env from project root
load_dotenv(Path(__file__).resolve().parents[2] / ".env")

_TRUE_VALUES = ("1", "true", "yes", "on")
_NONE_VALUES = ("", "0", "none", "off")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_float(name: str) -> float | None:
    """Read a positive float, or None when unset/disabled."""
    raw = os.environ.get(name, "").strip()
    if raw.lower() in _NONE_VALUES:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    return value if value > 0 else None


def get_max_laps() -> int | None:
    """Get the lap cap: PLAN_MAX_LAPS, 0/none for unbounded."""
    raw = os.environ.get("PLAN_MAX_LAPS")
    if raw is None:
        return DEFAULT_MAX_LAPS
    raw = raw.strip()
    if raw.lower() in _NONE_VALUES:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"PLAN_MAX_LAPS must be an integer, got {raw!r}") from None
    return value if value > 0 else None


def get_flatten_options() -> FlattenOptions:
    """Build FlattenOptions from the current environment."""
    return FlattenOptions(
        leaf_repeat=_env_bool("PLAN_LEAF_REPEAT"),
        fallback_duration_seconds=_env_float("PLAN_FALLBACK_DURATION_SECONDS"),
        max_laps=get_max_laps(),
    )

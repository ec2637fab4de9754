"""Tests for pace/speed conversions."""

import pytest

from pace import format_pace, min_per_km_to_mps, mps_to_min_per_km, parse_pace


def test_mps_to_min_per_km():
    assert mps_to_min_per_km(3.0) == pytest.approx(5.5556, abs=1e-4)
    assert mps_to_min_per_km(1000 / 240) == pytest.approx(4.0)


@pytest.mark.parametrize("mps", [0, -1.5, None, float("inf")])
def test_mps_to_min_per_km_invalid(mps):
    assert mps_to_min_per_km(mps) is None


def test_min_per_km_to_mps():
    assert min_per_km_to_mps(4.0) == pytest.approx(4.1667, abs=1e-4)
    assert mps_to_min_per_km(min_per_km_to_mps(5.25)) == pytest.approx(5.25)


def test_min_per_km_to_mps_rejects_zero():
    with pytest.raises(ValueError):
        min_per_km_to_mps(0)


def test_format_pace():
    assert format_pace(5.5) == "5:30"
    assert format_pace(4.0) == "4:00"
    assert format_pace(10) == "10:00"


def test_format_pace_carries_rounded_minute():
    assert format_pace(4.999) == "5:00"


def test_format_pace_invalid():
    assert format_pace(-1) == ""
    assert format_pace(float("nan")) == ""


def test_parse_pace():
    assert parse_pace("4:30") == pytest.approx(4.5)
    assert parse_pace(" 5:05 ") == pytest.approx(5 + 5 / 60)


@pytest.mark.parametrize("text", ["", "   ", "4", "4:60", "4:-1", "a:30", "1:2:3"])
def test_parse_pace_invalid(text):
    assert parse_pace(text) is None

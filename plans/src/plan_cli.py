#!/usr/bin/env python3
"""
Inspect planned workouts from the command line.

Usage:
  python3 plan_cli.py laps plan.json                 # lap table
  python3 plan_cli.py laps plan.json --json          # laps as JSON
  python3 plan_cli.py laps feed.json --leaf-repeat   # every running workout in a feed
  python3 plan_cli.py chart plan.json                # bar widths/heights/colours
  python3 plan_cli.py build blocks.json --name "5x1k"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace

from config import get_flatten_options
from lap_chart import build_bars, pace_range
from pace import format_pace
from plan_builder import PlanValidationError, build_plan_payload
from plan_laps import flatten_plan, laps_for_feed

logger = logging.getLogger(__name__)


def _load_json(path: str):
    with open(path) as f:
        return json.load(f)


def _options_from_args(args):
    options = get_flatten_options()
    if args.leaf_repeat:
        options = replace(options, leaf_repeat=True)
    if args.fallback_seconds is not None:
        options = replace(options, fallback_duration_seconds=args.fallback_seconds or None)
    if args.max_laps is not None:
        options = replace(options, max_laps=args.max_laps or None)
    return options


def _plans_in(data, options) -> dict:
    """Laps per plan, for either a single plan or a feed response."""
    if isinstance(data, dict) and "runningWorkouts" in data:
        return laps_for_feed(data, options)
    name = data.get("workoutName", "plan") if isinstance(data, dict) else "plan"
    return {name: flatten_plan(data, options)}


def _print_laps(name: str, laps: list):
    print(f"\n{'=' * 50}")
    print(f"  {name}  ({len(laps)} laps)")
    print(f"{'=' * 50}")
    total_km = total_secs = 0.0
    for i, lap in enumerate(laps, start=1):
        total_km += lap.distance_km
        total_secs += lap.duration_seconds
        print(f"  {i:3}  {lap.distance_km:7.3f} km  {lap.duration_seconds:8.1f} s  "
              f"{format_pace(lap.pace_min_per_km):>6} /km")
    if laps:
        print(f"  total {total_km:.2f} km, {total_secs / 60:.1f} min")


def cmd_laps(args) -> int:
    plans = _plans_in(_load_json(args.file), _options_from_args(args))
    if args.json:
        print(json.dumps(
            {name: [lap.to_dict() for lap in laps] for name, laps in plans.items()},
            indent=2,
        ))
        return 0
    for name, laps in plans.items():
        _print_laps(name, laps)
    return 0


def cmd_chart(args) -> int:
    plans = _plans_in(_load_json(args.file), _options_from_args(args))
    for name, laps in plans.items():
        print(f"\n{name}")
        bars = build_bars(laps)
        if not bars:
            print("  No lap data available")
            continue
        for bar in bars:
            print(f"  {bar.width_pct:6.2f}% wide  {bar.height_pct:6.2f}% high  "
                  f"{bar.color:18}  {bar.title}")
        fastest, slowest = pace_range(laps)
        print(f"  Fastest: {format_pace(fastest)} /km   Slowest: {format_pace(slowest)} /km")
    return 0


def cmd_build(args) -> int:
    data = _load_json(args.file)
    blocks = data.get("blocks", []) if isinstance(data, dict) else data
    payload = build_plan_payload(args.name, blocks, description=args.description)
    print(json.dumps(payload, indent=2))
    return 0


def _add_flatten_args(parser):
    parser.add_argument("file", help="Plan or planned-workout feed JSON file")
    parser.add_argument("--leaf-repeat", action="store_true",
                        help="Repeat leaf steps by their own repeatValue")
    parser.add_argument("--fallback-seconds", type=float, metavar="SECS",
                        help="Chart steps with no duration type as SECS long (0 to skip them)")
    parser.add_argument("--max-laps", type=int, metavar="N",
                        help="Stop after N laps (0 for no limit)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Planned workout laps and charts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    laps = sub.add_parser("laps", help="Print synthesized laps")
    _add_flatten_args(laps)
    laps.add_argument("--json", action="store_true", help="Print laps as JSON")
    laps.set_defaults(func=cmd_laps)

    chart = sub.add_parser("chart", help="Print lap chart bars")
    _add_flatten_args(chart)
    chart.set_defaults(func=cmd_chart)

    build = sub.add_parser("build", help="Build plan JSON from editor blocks")
    build.add_argument("file", help="JSON file with a list of blocks (or {\"blocks\": [...]})")
    build.add_argument("--name", required=True, help="Workout name")
    build.add_argument("--description", default="", help="Workout description")
    build.set_defaults(func=cmd_build)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )
    try:
        return args.func(args)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Could not read %s: %s", args.file, e)
    except PlanValidationError as e:
        logger.error("Invalid workout blocks:")
        for field, message in e.errors.items():
            logger.error("  %s: %s", field, message)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
    return 1


if __name__ == "__main__":
    sys.exit(main())

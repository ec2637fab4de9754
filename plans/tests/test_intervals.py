"""Test parsing of raw plan JSON into the interval tree."""

from intervals import (
    MAX_NESTING_DEPTH,
    DurationType,
    LeafInterval,
    RepeatBlock,
    WorkoutPlan,
    parse_interval,
    parse_intervals,
    parse_plan,
)

SAMPLE_PLAN = {
    "date": "03/07/2026",
    "workoutName": "5x1k",
    "description": "Race pace repeats",
    "coachName": "coach_kim",
    "athleteNames": ["runner1", "runner2"],
    "workoutId": 1234,
    "intervals": [
        {
            "stepOrder": 1,
            "repeatValue": 5,
            "type": "WorkoutRepeatStep",
            "steps": [
                {"stepOrder": 1, "repeatValue": 0, "type": "WorkoutStep", "steps": None,
                 "description": "run", "durationType": "DISTANCE", "durationValue": 1000.0,
                 "intensity": "INTERVAL", "targetValueLow": 4.082, "targetValueHigh": 4.255,
                 "repeatType": None},
                {"stepOrder": 2, "repeatValue": 0, "type": "WorkoutStep", "steps": None,
                 "description": "rest", "durationType": "TIME", "durationValue": 90.0,
                 "intensity": "REST", "targetValueLow": 0.0, "targetValueHigh": 0.0,
                 "repeatType": None},
            ],
            "description": "Run",
            "durationType": None,
            "durationValue": 0.0,
            "intensity": "INTERVAL",
            "targetValueLow": 0.0,
            "targetValueHigh": 0.0,
            "repeatType": "REPEAT_UNTIL_STEPS_CMPLT",
        }
    ],
}


def test_parse_plan_extracts_metadata():
    plan = parse_plan(SAMPLE_PLAN)
    assert plan.workout_id == "1234"
    assert plan.name == "5x1k"
    assert plan.coach_name == "coach_kim"
    assert plan.athlete_names == ("runner1", "runner2")
    assert plan.date == "03/07/2026"


def test_parse_plan_builds_repeat_block():
    plan = parse_plan(SAMPLE_PLAN)
    assert len(plan.intervals) == 1
    block = plan.intervals[0]
    assert isinstance(block, RepeatBlock)
    assert block.repeat_value == 5
    assert len(block.steps) == 2

    run, rest = block.steps
    assert isinstance(run, LeafInterval)
    assert run.duration_type is DurationType.DISTANCE
    assert run.duration_value == 1000.0
    assert run.target_low == 4.082
    assert not run.is_rest
    assert rest.duration_type is DurationType.TIME
    assert rest.is_rest


def test_leaf_repeat_value_defaults_to_one():
    leaf = parse_interval({"repeatValue": 0, "durationType": "TIME", "durationValue": 30})
    assert leaf.repeat_value == 1


def test_fractional_repeat_value_rounds_up():
    block = parse_interval({"repeatValue": 2.5, "steps": [{"durationType": "TIME"}]})
    assert block.repeat_value == 3
    assert parse_interval({"repeatValue": 0.2}).repeat_value == 1


def test_deep_nesting_is_cut_off():
    raw = {"durationType": "TIME", "durationValue": 60}
    for _ in range(400):
        raw = {"repeatValue": 1, "steps": [raw]}
    block = parse_interval(raw)
    depth = 0
    while block.steps:
        block = block.steps[0]
        depth += 1
    assert isinstance(block, RepeatBlock)
    assert depth == MAX_NESTING_DEPTH - 1


def test_empty_steps_is_a_leaf():
    assert isinstance(parse_interval({"steps": []}), LeafInterval)
    assert isinstance(parse_interval({"steps": None}), LeafInterval)


def test_parse_handles_missing_fields():
    leaf = parse_interval({})
    assert leaf == LeafInterval()
    assert leaf.duration_type is None
    assert leaf.target_low == 0.0
    assert leaf.intensity == ""


def test_duration_type_parse():
    assert DurationType.parse("distance") is DurationType.DISTANCE
    assert DurationType.parse(" Time ") is DurationType.TIME
    assert DurationType.parse("LAP_BUTTON") is None
    assert DurationType.parse(None) is None
    assert DurationType.parse(3) is None


def test_non_numeric_values_read_as_zero():
    leaf = parse_interval({"durationValue": "far", "targetValueLow": "fast",
                           "targetValueHigh": float("nan")})
    assert leaf.duration_value == 0.0
    assert leaf.target_low == 0.0
    assert leaf.target_high == 0.0


def test_non_string_intensity_ignored():
    leaf = parse_interval({"intensity": None})
    assert leaf.intensity == ""
    assert not leaf.is_rest


def test_parse_intervals_skips_non_dicts():
    parsed = parse_intervals([{"durationType": "TIME"}, None, "x", 5])
    assert len(parsed) == 1


def test_parse_intervals_non_list():
    assert parse_intervals(None) == ()
    assert parse_intervals({"durationType": "TIME"}) == ()


def test_parse_plan_non_dict():
    assert parse_plan(None) == WorkoutPlan()
    assert parse_plan([1, 2]) == WorkoutPlan()


def test_parse_plan_passes_parsed_plan_through():
    plan = parse_plan(SAMPLE_PLAN)
    assert parse_plan(plan) is plan


def test_parse_plan_reads_built_payload_steps():
    payload = {"workoutName": "Built", "steps": SAMPLE_PLAN["intervals"]}
    plan = parse_plan(payload)
    assert len(plan.intervals) == 1
    assert plan.workout_id is None

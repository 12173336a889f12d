"""Tests for advisory plan validation."""

import copy

import pytest

from houseplan.exceptions import PlanValidationError
from houseplan.normalize.normalizer import normalize_plan
from houseplan.validate.plan_validator import IssueKind, PlanValidator, require_valid, validate_plan
from tests.utils_plans import ROOM_A, ROOM_B, V05_PLAN, two_block_plan, two_room_plan


def _errors_containing(errors, text):
    return [error for error in errors if text in error]


def test_valid_plan_has_no_errors():
    assert validate_plan(two_room_plan()) == []


def test_valid_rooms_first_plan_has_no_errors():
    assert validate_plan(V05_PLAN) == []


def test_zero_width_is_out_of_range():
    document = two_room_plan(footprint={"width": 0, "depth": 6000})
    errors = validate_plan(document)

    assert _errors_containing(errors, "footprint.width must be 1-100000 mm")


def test_oversized_depth_is_out_of_range():
    document = two_room_plan(footprint={"width": 8000, "depth": 150000})
    assert _errors_containing(validate_plan(document), "footprint.depth")


def test_wall_thickness_must_leave_interior():
    document = two_room_plan(wall={"thickness_mm": 3500, "height_mm": 2700})
    errors = validate_plan(document)

    assert _errors_containing(errors, "wall.thickness_mm*2 must be < min(width, depth)")


def test_missing_footprint_is_reported():
    document = two_room_plan()
    del document["floors"][0]["footprint"]

    assert _errors_containing(validate_plan(document), "footprint is missing")


def test_units_must_be_millimetres():
    document = two_room_plan()
    document["units"] = "cm"

    assert validate_plan(document) == ['units must be "mm"']


def test_plan_without_floors():
    errors = validate_plan({"version": "1.0", "units": "mm", "floors": []})
    assert _errors_containing(errors, "plan has no floors")


def test_opening_past_wall_end():
    document = two_room_plan(
        openings=[{"id": "D1", "type": "door", "wall": "front", "offset": 7500, "width": 900, "height": 2100}]
    )
    assert _errors_containing(validate_plan(document), "opening D1 offset+width exceeds wall length (8000 mm)")


def test_opening_on_side_wall_uses_depth():
    document = two_room_plan(
        openings=[{"id": "W2", "type": "window", "wall": "right", "offset": 5000, "width": 1200, "sill": 900}]
    )
    assert _errors_containing(validate_plan(document), "exceeds wall length (6000 mm)")


def test_window_needs_sill():
    document = two_room_plan(openings=[{"id": "W1", "type": "window", "wall": "front", "offset": 0, "width": 1000}])
    assert _errors_containing(validate_plan(document), "window W1 sill must be >= 0")


def test_negative_sill_is_rejected():
    document = two_room_plan(
        openings=[{"id": "W1", "type": "window", "wall": "front", "offset": 0, "width": 1000, "sill": -10}]
    )
    assert _errors_containing(validate_plan(document), "sill must be >= 0")


def test_opening_type_and_wall_are_checked():
    document = two_room_plan(openings=[{"id": "X", "type": "hatch", "wall": "roof", "offset": 0, "width": 100}])
    errors = validate_plan(document)

    assert _errors_containing(errors, "opening X type must be door or window")
    assert _errors_containing(errors, "opening X wall must be front, back, left or right")


def test_opening_on_authored_wall_path():
    walls = [{"id": "w1", "path": [[0, 0], [3000, 0]]}]
    fits = two_room_plan(walls=walls, openings=[{"id": "D1", "type": "door", "wall_id": "w1", "at_mm": 1000, "width": 900}])
    overflows = two_room_plan(walls=walls, openings=[{"id": "D1", "type": "door", "wall_id": "w1", "at_mm": 2500, "width": 900}])
    unknown = two_room_plan(walls=walls, openings=[{"id": "D1", "type": "door", "wall_id": "w9", "at_mm": 0, "width": 900}])

    assert validate_plan(fits) == []
    assert _errors_containing(validate_plan(overflows), "exceeds wall length (3000 mm)")
    assert _errors_containing(validate_plan(unknown), "references unknown wall w9")


def test_short_wall_path():
    document = two_room_plan(walls=[{"id": "w1", "path": [[0, 0]]}])
    assert _errors_containing(validate_plan(document), "wall w1 path needs at least 2 vertices")


def test_room_polygon_needs_three_vertices():
    document = two_room_plan(rooms=[{"id": "A", "polygon": [[0, 0], [1000, 0]]}])
    assert _errors_containing(validate_plan(document), "room A polygon needs at least 3 vertices")


def test_duplicate_room_reports_id_and_self_owned_walls():
    document = two_room_plan(rooms=[{"id": "A", "polygon": ROOM_A}, {"id": "A", "polygon": copy.deepcopy(ROOM_A)}])
    errors = validate_plan(document)

    assert _errors_containing(errors, "duplicate room id A")
    assert _errors_containing(errors, "separates room A from itself")


def test_overlapping_rooms():
    overlap = [[3000, 0], [6000, 0], [6000, 6000], [3000, 6000]]
    document = two_room_plan(rooms=[{"id": "A", "polygon": ROOM_A}, {"id": "C", "polygon": overlap}])

    assert _errors_containing(validate_plan(document), "rooms A and C overlap")


def test_touching_rooms_do_not_overlap():
    document = two_room_plan(rooms=[{"id": "A", "polygon": ROOM_A}, {"id": "B", "polygon": ROOM_B}])
    assert not _errors_containing(validate_plan(document), "overlap")


def test_stairs_and_voids():
    document = two_room_plan(
        stairs=[{"id": "S1", "fromLevelId": "f0", "toLevelId": "f9", "rise_mm": 0, "run_mm": 260}],
        voids=[{"id": "V1", "polygon": [[0, 0], [1000, 0]]}],
    )
    errors = validate_plan(document)

    assert _errors_containing(errors, "stair S1 references unknown level f9")
    assert _errors_containing(errors, "stair S1 rise_mm must be > 0")
    assert _errors_containing(errors, "void V1 polygon needs at least 3 vertices")


@pytest.mark.parametrize(
    "roof, fragment",
    [
        ({"type": "flat", "pitch_degrees": 35}, 'type must be "gable"'),
        ({"type": "gable"}, "pitch_degrees must be 5-60 (got missing)"),
        ({"type": "gable", "pitch_degrees": 70}, "pitch_degrees must be 5-60 (got 70)"),
        ({"type": "gable", "pitch_degrees": 35, "overhang_mm": 2500}, "overhang_mm must be 0-2000"),
        ({"type": "gable", "pitch_degrees": 35, "thickness_mm": 5}, "thickness_mm must be 10-500"),
        ({"type": "gable", "pitch_degrees": 35, "ridge_direction": "z"}, "ridge_direction must be x or y"),
        ({"type": "gable", "pitch_degrees": 35, "ridge_mode": "equal_height"}, "ridge_mode must be"),
        ({"type": "gable", "pitch_degrees": 35, "ridge_offset_mm": 3000}, "|ridge_offset_mm| (3000) must be < 2500 mm"),
    ],
)
def test_roof_rules(roof, fragment):
    document = two_room_plan()
    document["roof"] = roof

    assert _errors_containing(validate_plan(document), fragment)


def test_ridge_offset_within_limit_is_valid():
    document = two_room_plan()
    document["roof"]["ridge_offset_mm"] = -2000

    assert validate_plan(document) == []


def test_block_roof_is_checked_against_block_footprint():
    document = two_block_plan()
    document["blocks"][1]["roof"] = {"type": "gable", "pitch_degrees": 35, "overhang_mm": 0, "ridge_offset_mm": 3000}

    assert _errors_containing(validate_plan(document), "block B roof: |ridge_offset_mm| (3000) must be < 3000 mm")


def test_shared_roof_with_matching_wall_tops_is_valid():
    assert validate_plan(two_block_plan()) == []


def test_shared_roof_with_different_wall_tops_is_flagged():
    errors = validate_plan(two_block_plan(height_a=2700, height_b=3000))
    assert _errors_containing(errors, "different wall-top elevations (A=2700, B=3000 mm)")


def test_validation_is_deterministic_and_does_not_mutate():
    plan = normalize_plan(two_room_plan(wall={"thickness_mm": 3500}, footprint={"width": 0, "depth": 6000}))
    before = plan.to_document()

    first = validate_plan(plan)
    second = validate_plan(plan)

    assert first == second
    assert len(first) > 1
    assert plan.to_document() == before


def test_issue_kinds():
    plan = normalize_plan(two_room_plan(footprint={"width": 0, "depth": 6000}))
    issues = PlanValidator().issues(plan)
    by_path = {issue.path: issue for issue in issues}

    assert by_path["f0.footprint.width"].kind is IssueKind.OUT_OF_RANGE
    assert [issue.message for issue in issues] == validate_plan(plan)


def test_require_valid_raises_with_all_errors():
    plan = normalize_plan(two_room_plan(footprint={"width": 0, "depth": 0}))

    with pytest.raises(PlanValidationError) as excinfo:
        require_valid(plan)

    assert excinfo.value.errors == validate_plan(plan)
    assert excinfo.value.details["errors"] == excinfo.value.errors


def test_require_valid_returns_plan():
    plan = normalize_plan(two_room_plan())
    assert require_valid(plan) is plan

"""Tests for facade (elevation) layout."""

import pytest

from houseplan.facade.layout import facade_layout
from houseplan.normalize.normalizer import normalize_plan
from tests.utils_plans import two_block_plan


def _two_storey_plan(ridge_offset_mm=0):
    return normalize_plan(
        {
            "version": "1.0",
            "units": "mm",
            "floors": [
                {
                    "id": "f1",
                    "name": "Upper",
                    "elevation_mm": 2700,
                    "footprint": {"width": 10000, "depth": 8000},
                    "wall": {"height_mm": 2500},
                },
                {
                    "id": "f0",
                    "name": "Ground",
                    "elevation_mm": 0,
                    "footprint": {"width": 10000, "depth": 8000},
                    "wall": {"height_mm": 2700},
                    "openings": [
                        {"id": "D1", "type": "door", "wall": "front", "offset": 1000, "width": 900},
                        {"id": "W1", "type": "window", "wall": "right", "offset": 1000, "width": 1200, "sill": 900},
                    ],
                },
            ],
            "roof": {
                "type": "gable",
                "pitch_degrees": 45,
                "overhang_mm": 500,
                "ridge_direction": "x",
                "ridge_offset_mm": ridge_offset_mm,
            },
        }
    )


def test_slope_facade_stacks_floors_and_uses_solver_rise():
    layout = facade_layout(_two_storey_plan(), "north")

    assert layout.wall == "front"
    assert layout.roof_kind == "slope"
    assert [band.level_key for band in layout.bands] == ["f0", "f1"]
    assert layout.facade_width_mm == 10000
    assert layout.facade_depth_mm == 8000
    assert layout.building_top_mm == 5200
    assert layout.roof_rise_mm == pytest.approx(4000)
    assert layout.total_height_mm == pytest.approx(9200)
    assert layout.roof_width_mm == 11000
    assert layout.ridge_position_mm is None


def test_openings_are_filtered_to_facing_wall():
    layout = facade_layout(_two_storey_plan(), "north")

    assert [opening.id for opening in layout.bands[0].openings] == ["D1"]
    assert layout.bands[1].openings == []
    east = facade_layout(_two_storey_plan(), "east")
    assert [opening.id for opening in east.bands[0].openings] == ["W1"]


def test_gable_end_facade():
    layout = facade_layout(_two_storey_plan(), "east")

    assert layout.wall == "right"
    assert layout.roof_kind == "gable"
    assert layout.facade_width_mm == 8000
    assert layout.roof_rise_mm == pytest.approx(4500)
    assert layout.ridge_position_mm == 4000


def test_ridge_offset_is_mirrored_between_opposite_gables():
    east = facade_layout(_two_storey_plan(ridge_offset_mm=500), "east")
    west = facade_layout(_two_storey_plan(ridge_offset_mm=500), "west")

    assert east.ridge_position_mm == 4500
    assert west.ridge_position_mm == 3500


def test_offset_slope_facade_shows_visible_side():
    north = facade_layout(_two_storey_plan(ridge_offset_mm=1000), "north")
    south = facade_layout(_two_storey_plan(ridge_offset_mm=1000), "south")

    # looking north shows the south slope, which is the shorter one for a positive offset
    assert north.roof_rise_mm == pytest.approx(3000)
    assert south.roof_rise_mm == pytest.approx(5000)


def test_blocks_plan_is_not_laid_out():
    layout = facade_layout(normalize_plan(two_block_plan()), "north")

    assert layout.bands == []
    assert layout.notes


def test_unknown_direction():
    layout = facade_layout(_two_storey_plan(), "up")

    assert layout.wall is None
    assert layout.bands == []
    assert "unknown direction" in layout.notes[0]

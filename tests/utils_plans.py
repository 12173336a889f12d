"""Sample plan documents shared by the test modules."""

from __future__ import annotations

import copy
from typing import Any

ROOM_A = [[0, 0], [4000, 0], [4000, 6000], [0, 6000]]
ROOM_B = [[4000, 0], [8000, 0], [8000, 6000], [4000, 6000]]


def two_room_plan(**floor_overrides: Any) -> dict[str, Any]:
    """Valid single-floor v1.0 plan: 8000x6000 footprint split into rooms A and B."""
    floor = {
        "id": "f0",
        "name": "Ground",
        "elevation_mm": 0,
        "footprint": {"type": "rect", "width": 8000, "depth": 6000},
        "wall": {"thickness_mm": 200, "height_mm": 2700},
        "openings": [
            {"id": "D1", "type": "door", "wall": "front", "offset": 500, "width": 900, "height": 2100},
            {"id": "W1", "type": "window", "wall": "left", "offset": 1000, "width": 1200, "height": 1200, "sill": 900},
        ],
        "rooms": [
            {"id": "A", "name": "Living", "polygon": copy.deepcopy(ROOM_A)},
            {"id": "B", "name": "Kitchen", "polygon": copy.deepcopy(ROOM_B)},
        ],
    }
    floor.update(floor_overrides)
    return {
        "version": "1.0",
        "units": "mm",
        "floors": [floor],
        "roof": {"type": "gable", "pitch_degrees": 35, "overhang_mm": 500, "ridge_direction": "x"},
    }


def two_block_plan(height_a: float = 2700, height_b: float = 2700) -> dict[str, Any]:
    """Two side-by-side blocks under one shared top-level roof."""
    return {
        "version": "1.0",
        "units": "mm",
        "blocks": [
            {
                "id": "A",
                "position": {"x": 0, "z": 0},
                "footprint": {"width": 8000, "depth": 6000},
                "floors": [{"id": "f0", "wall": {"height_mm": height_a}}],
            },
            {
                "id": "B",
                "position": {"x": 9000, "z": 0},
                "footprint": {"width": 6000, "depth": 6000},
                "floors": [{"id": "f0", "wall": {"height_mm": height_b}}],
            },
        ],
        "roof": {"type": "gable", "pitch_degrees": 35},
    }


V0_PLAN = {
    "units": "mm",
    "footprint": {"width": 8000, "depth": 6000},
    "wall": {"thickness": 250, "height": 2600},
    "openings": [{"type": "Door", "wall": "FRONT", "offset": 500, "width": 900, "height": 2100}],
}

V02_PLAN = {
    "units": "mm",
    "floors": [
        {"id": "eg", "name": "EG", "footprint": {"width": 9000, "depth": 7000}, "wall": {"thickness": 240}},
        {"name": "OG", "elevation": 2800, "footprint": {"width": 9000, "depth": 7000}},
    ],
}

V03_PLAN = {
    "units": "mm",
    "floors": [{"id": "f0", "footprint": {"width": 10000, "depth": 8000}}],
    "roof": {"type": "Gable", "pitch_degrees": "40", "overhang_mm": 600, "ridge_direction": "Y"},
}

V04_PLAN = {
    "units": "mm",
    "blocks": [
        {
            "id": "main",
            "footprint": {"width": 10000, "depth": 8000},
            "materials": {"wall": "brick"},
            "floors": [{"id": "f0", "rooms": [{"id": "r1", "polygon": [[0, 0], [5000, 0], [5000, 8000], [0, 8000]]}]}],
            "roof": {"type": "gable", "pitch_degrees": 30},
        },
        {"name": "garage", "position": {"x": 10000, "y": 2000}, "footprint": {"width": 4000, "depth": 6000}},
    ],
    "extension": {"author": "unit-test"},
}

V05_PLAN = {
    "version": "0.5",
    "units": "mm",
    "levels": [{"id": "L0", "name": "Ground", "elevation": 0}, {"id": "L1", "name": "Upper", "elevation": 2800}],
    "buildings": [
        {
            "id": "house",
            "footprints": [
                {"levelId": "L0", "polygon": [[0, 0], [9000, 0], [9000, 7000], [0, 7000]]},
                {"levelId": "L1", "polygon": [{"x": 0, "y": 0}, {"x": 9000, "y": 0}, {"x": 9000, "y": 7000}]},
            ],
            "rooms": [
                {"id": "R1", "levelId": "L0", "polygon": [[0, 0], [4500, 0], [4500, 7000], [0, 7000]], "unitId": "u1"},
                {"id": "R2", "levelId": "L0", "polygon": [[4500, 0], [9000, 0], [9000, 7000], [4500, 7000]], "unitId": "u2"},
                {"id": "R3", "levelId": "L1", "polygon": [[0, 0], [9000, 0], [9000, 7000], [0, 7000]]},
            ],
            "stairs": [{"id": "S1", "fromLevelId": "L0", "toLevelId": "L1", "rise_mm": 175, "run_mm": 260}],
            "voids": [{"id": "V1", "levelId": "L1", "polygon": [[0, 0], [1000, 0], [1000, 3000], [0, 3000]]}],
        }
    ],
}

V05_TWO_BUILDINGS = {
    "version": "0.5",
    "units": "mm",
    "levels": [{"id": "L0", "elevation": 0}],
    "buildings": [
        {"id": "west", "footprints": [{"levelId": "L0", "polygon": [[0, 0], [6000, 0], [6000, 5000], [0, 5000]]}]},
        {"id": "east", "footprints": [{"levelId": "L0", "polygon": [[0, 0], [4000, 0], [4000, 3000], [0, 3000]]}]},
    ],
}

from __future__ import annotations

"""
Geometry Contract

Single source of truth for geometric defaults, tolerances and validation
bounds used by the plan engine. All modules import from here instead of
hardcoding. All lengths are millimetres; angles are degrees unless noted.
"""

import math

UNITS = "mm"
CANONICAL_VERSION = "1.0"

# Walls
DEFAULT_WALL_THICKNESS_MM = 200.0
DEFAULT_WALL_HEIGHT_MM = 2700.0
INTERIOR_WALL_THICKNESS_MM = 98.0
BETWEEN_UNITS_WALL_THICKNESS_MM = 200.0

# Segment keys for derived walls are snapped to this grid
SEGMENT_SNAP_MM = 5.0

# Footprints
FOOTPRINT_MIN_MM = 1.0
FOOTPRINT_MAX_MM = 100000.0

# Rooms / wall paths
MIN_ROOM_VERTICES = 3
MIN_WALL_PATH_VERTICES = 2
ROOM_OVERLAP_AREA_MM2 = 1.0  # intersections below this are shared edges

# Roof
DEFAULT_ROOF_PITCH_DEG = 35.0
DEFAULT_ROOF_OVERHANG_MM = 500.0
ROOF_PITCH_MIN_DEG = 5.0
ROOF_PITCH_MAX_DEG = 60.0
ROOF_OVERHANG_MAX_MM = 2000.0
ROOF_THICKNESS_MIN_MM = 10.0
ROOF_THICKNESS_MAX_MM = 500.0

# Editing (drag and drop)
EDIT_SNAP_GRID_MM = 100.0
EDIT_SNAP_DISTANCE_MM = 120.0
DEFAULT_BLOCK_SIZE_MM = 8000.0

# Elevation comparison
ELEVATION_TOLERANCE_MM = 0.5


def snap(value: float, grid: float = SEGMENT_SNAP_MM) -> float:
    """Round ``value`` to the nearest multiple of ``grid``."""
    if grid <= 0:
        return float(value)
    # half-up; round() is half-even
    return float(math.floor(value / grid + 0.5) * grid)

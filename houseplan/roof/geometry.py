"""Shared gable-roof geometry.

:func:`solve_gable_roof` is the single source for roof slopes, rises and eave
elevations. Elevation views and the 3D mesh builder both consume its result
instead of repeating the trigonometry, so asymmetric roofs look the same in
2D and 3D. Lengths are millimetres, angles radians unless the name says
degrees.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from loguru import logger

from houseplan.geometry.contract import (
    DEFAULT_BLOCK_SIZE_MM,
    DEFAULT_ROOF_OVERHANG_MM,
    DEFAULT_ROOF_PITCH_DEG,
)
from houseplan.model.schema import RoofSpec
from houseplan.normalize.normalizer import normalize_roof

RIDGE_MODES = ("equal_pitch", "equal_eave")
RIDGE_DIRECTIONS = ("x", "y")

# ridge along x separates north/south, ridge along y separates west/east
SIDE_NAMES = {"x": ("north", "south"), "y": ("west", "east")}

# viewing direction -> side whose slope faces the viewer
_VISIBLE_SIDE = {
    "x": {"north": "south", "south": "north"},
    "y": {"east": "west", "west": "east"},
}


@dataclass(frozen=True)
class RoofSide:
    """One slope of the roof."""

    name: str
    pitch_rad: float
    rise_mm: float
    eave_distance_mm: float
    eave_elevation_mm: float

    @property
    def pitch_degrees(self) -> float:
        return math.degrees(self.pitch_rad)


@dataclass(frozen=True)
class RoofGeometry:
    ridge_direction: str
    ridge_mode: str
    nominal_pitch_rad: float
    overhang_mm: float
    ridge_offset_mm: float
    width_mm: float
    depth_mm: float
    top_elevation_mm: float
    ridge_height_mm: float
    side_a: RoofSide
    side_b: RoofSide

    @property
    def sides(self) -> Tuple[RoofSide, RoofSide]:
        return self.side_a, self.side_b

    @property
    def ridge_elevation_mm(self) -> float:
        return self.top_elevation_mm + self.ridge_height_mm

    def side(self, name: str) -> RoofSide:
        for candidate in self.sides:
            if candidate.name == name:
                return candidate
        raise KeyError(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ridgeDirection": self.ridge_direction,
            "ridgeMode": self.ridge_mode,
            "nominalPitchRad": self.nominal_pitch_rad,
            "overhangMm": self.overhang_mm,
            "ridgeOffsetMm": self.ridge_offset_mm,
            "widthMm": self.width_mm,
            "depthMm": self.depth_mm,
            "topElevationMm": self.top_elevation_mm,
            "ridgeHeightMm": self.ridge_height_mm,
            "ridgeElevationMm": self.ridge_elevation_mm,
            "sides": {
                side.name: {
                    "pitchRad": side.pitch_rad,
                    "pitchDegrees": side.pitch_degrees,
                    "riseMm": side.rise_mm,
                    "eaveDistanceMm": side.eave_distance_mm,
                    "eaveElevationMm": side.eave_elevation_mm,
                }
                for side in self.sides
            },
        }


def _as_spec(roof: Union[RoofSpec, Mapping[str, Any], None]) -> Optional[RoofSpec]:
    if roof is None or isinstance(roof, RoofSpec):
        return roof
    return normalize_roof(roof)


def _positive(value: Optional[float], default: float) -> float:
    return float(value) if value else default


def solve_gable_roof(
    roof: Union[RoofSpec, Mapping[str, Any], None],
    width_mm: float,
    depth_mm: float,
    *,
    top_elevation_mm: float = 0.0,
) -> Optional[RoofGeometry]:
    """Solve slopes, rises and eave elevations of a gable roof.

    Args:
        roof: Roof record (canonical or raw).
        width_mm: Footprint extent along x.
        depth_mm: Footprint extent along the plan's second axis.
        top_elevation_mm: Wall-top elevation the roof sits on.

    Returns:
        The geometry, or ``None`` for non-gable roofs and for ridge offsets that
        put the ridge outside the footprint (the validator reports those).
    """
    spec = _as_spec(roof)
    if spec is None or spec.type != "gable":
        return None

    pitch = math.radians(DEFAULT_ROOF_PITCH_DEG if spec.pitch_degrees is None else spec.pitch_degrees)
    overhang = DEFAULT_ROOF_OVERHANG_MM if spec.overhang_mm is None else float(spec.overhang_mm)
    offset = float(spec.ridge_offset_mm or 0.0)
    mode = spec.ridge_mode if spec.ridge_mode in RIDGE_MODES else "equal_pitch"
    direction = spec.ridge_direction if spec.ridge_direction in RIDGE_DIRECTIONS else "x"
    width = _positive(width_mm, DEFAULT_BLOCK_SIZE_MM)
    depth = _positive(depth_mm, DEFAULT_BLOCK_SIZE_MM)

    half_span = (depth if direction == "x" else width) / 2.0
    dist_a = half_span + offset
    dist_b = half_span - offset
    if dist_a <= 0 or dist_b <= 0:
        logger.warning(
            "Ridge offset {offset} mm places the ridge outside a {span} mm span; roof not solved",
            offset=offset,
            span=half_span * 2,
        )
        return None

    slope = math.tan(pitch)
    if mode == "equal_pitch":
        ridge_height = slope * max(dist_a, dist_b)
        pitch_a = pitch_b = pitch
        rise_a = slope * dist_a
        rise_b = slope * dist_b
    else:
        ridge_height = max(slope * dist_a, slope * dist_b)
        pitch_a = math.atan(ridge_height / dist_a)
        pitch_b = math.atan(ridge_height / dist_b)
        rise_a = rise_b = ridge_height

    ridge_elevation = top_elevation_mm + ridge_height
    name_a, name_b = SIDE_NAMES[direction]
    logger.debug(
        "Solved gable roof mode={mode} dir={direction} ridge={ridge:.1f} mm",
        mode=mode,
        direction=direction,
        ridge=ridge_height,
    )
    return RoofGeometry(
        ridge_direction=direction,
        ridge_mode=mode,
        nominal_pitch_rad=pitch,
        overhang_mm=overhang,
        ridge_offset_mm=offset,
        width_mm=width,
        depth_mm=depth,
        top_elevation_mm=float(top_elevation_mm),
        ridge_height_mm=ridge_height,
        side_a=RoofSide(name_a, pitch_a, rise_a, dist_a, ridge_elevation - rise_a),
        side_b=RoofSide(name_b, pitch_b, rise_b, dist_b, ridge_elevation - rise_b),
    )


def is_viewing_slope(ridge_direction: str, direction: str) -> bool:
    """True when a facade seen from ``direction`` shows a roof slope, False for a gable end."""
    return direction.lower() in _VISIBLE_SIDE.get((ridge_direction or "x").lower(), {})


def facade_rise_mm(geometry: Optional[RoofGeometry], direction: str) -> float:
    """Rise of the slope visible from ``direction``; 0 for gable ends."""
    if geometry is None:
        return 0.0
    visible = _VISIBLE_SIDE.get(geometry.ridge_direction, {}).get(direction.lower())
    if visible is None:
        return 0.0
    return geometry.side(visible).rise_mm


def gable_end_rise_mm(roof: Union[RoofSpec, Mapping[str, Any], None], facade_width_mm: float) -> float:
    """Rise drawn on a gable end so that the visible angle equals the nominal pitch.

    The triangle spans the facade plus both overhangs.
    """
    spec = _as_spec(roof)
    if spec is None or spec.type != "gable":
        return 0.0
    pitch = math.radians(DEFAULT_ROOF_PITCH_DEG if spec.pitch_degrees is None else spec.pitch_degrees)
    overhang = DEFAULT_ROOF_OVERHANG_MM if spec.overhang_mm is None else float(spec.overhang_mm)
    half_run = _positive(facade_width_mm, DEFAULT_BLOCK_SIZE_MM) / 2.0 + overhang
    return max(0.0, half_run * math.tan(pitch))


__all__ = [
    "RIDGE_DIRECTIONS",
    "RIDGE_MODES",
    "RoofGeometry",
    "RoofSide",
    "facade_rise_mm",
    "gable_end_rise_mm",
    "is_viewing_slope",
    "solve_gable_roof",
]

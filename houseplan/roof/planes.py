"""Placement of the two roof planes for mesh builders.

Plan coordinates are centred on the footprint. With the ridge along x the
slopes face north (-z) and south (+z); with the ridge along y they face west
(-x) and east (+x). A positive ridge offset moves the ridge towards +z / +x.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List

from houseplan.roof.geometry import RoofGeometry, RoofSide


@dataclass(frozen=True)
class RoofPlane:
    side: str
    axis: str  # plan axis across the slope: "z" for ridge x, "x" for ridge y
    ridge_coord_mm: float
    eave_coord_mm: float
    eave_coord_with_overhang_mm: float
    ridge_elevation_mm: float
    eave_elevation_mm: float
    eave_elevation_with_overhang_mm: float
    slope_length_mm: float
    overhang_slope_length_mm: float
    span_mm: float  # extent along the ridge, overhangs included
    pitch_rad: float

    @property
    def total_slope_length_mm(self) -> float:
        return self.slope_length_mm + self.overhang_slope_length_mm

    @property
    def center_coord_mm(self) -> float:
        return (self.ridge_coord_mm + self.eave_coord_with_overhang_mm) / 2.0

    @property
    def center_elevation_mm(self) -> float:
        return (self.ridge_elevation_mm + self.eave_elevation_with_overhang_mm) / 2.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "side": self.side,
            "axis": self.axis,
            "ridgeCoordMm": self.ridge_coord_mm,
            "eaveCoordMm": self.eave_coord_mm,
            "eaveCoordWithOverhangMm": self.eave_coord_with_overhang_mm,
            "ridgeElevationMm": self.ridge_elevation_mm,
            "eaveElevationMm": self.eave_elevation_mm,
            "eaveElevationWithOverhangMm": self.eave_elevation_with_overhang_mm,
            "slopeLengthMm": self.slope_length_mm,
            "overhangSlopeLengthMm": self.overhang_slope_length_mm,
            "spanMm": self.span_mm,
            "pitchRad": self.pitch_rad,
        }


def _plane(geometry: RoofGeometry, side: RoofSide, sign: float) -> RoofPlane:
    overhang = geometry.overhang_mm
    ridge = geometry.ridge_offset_mm
    eave = ridge + sign * side.eave_distance_mm
    along = geometry.width_mm if geometry.ridge_direction == "x" else geometry.depth_mm
    return RoofPlane(
        side=side.name,
        axis="z" if geometry.ridge_direction == "x" else "x",
        ridge_coord_mm=ridge,
        eave_coord_mm=eave,
        eave_coord_with_overhang_mm=eave + sign * overhang,
        ridge_elevation_mm=geometry.ridge_elevation_mm,
        eave_elevation_mm=side.eave_elevation_mm,
        eave_elevation_with_overhang_mm=side.eave_elevation_mm - overhang * math.tan(side.pitch_rad),
        slope_length_mm=math.hypot(side.eave_distance_mm, side.rise_mm),
        overhang_slope_length_mm=overhang / math.cos(side.pitch_rad),
        span_mm=along + 2.0 * overhang,
        pitch_rad=side.pitch_rad,
    )


def roof_planes(geometry: RoofGeometry) -> List[RoofPlane]:
    """Both slopes of a solved roof, first side towards the negative axis."""
    return [_plane(geometry, geometry.side_a, -1.0), _plane(geometry, geometry.side_b, 1.0)]

"""Elevation (facade) layout: floors stacked by elevation with the roof on top.

Only single-body plans are laid out; block plans are drawn per block by the
caller and get an empty layout with a note.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from houseplan.geometry.contract import DEFAULT_BLOCK_SIZE_MM, DEFAULT_ROOF_OVERHANG_MM
from houseplan.model.levels import LevelView, iter_levels
from houseplan.model.schema import CanonicalPlan, Opening
from houseplan.roof.geometry import facade_rise_mm, gable_end_rise_mm, is_viewing_slope, solve_gable_roof

DIRECTIONS = ("north", "south", "east", "west")

# viewing direction -> cardinal wall of the footprint
DIRECTION_TO_WALL = {"north": "front", "south": "back", "east": "right", "west": "left"}


@dataclass
class FacadeBand:
    level_key: str
    name: str
    elevation_mm: float
    wall_height_mm: float
    openings: List[Opening] = field(default_factory=list)

    @property
    def top_mm(self) -> float:
        return self.elevation_mm + self.wall_height_mm


@dataclass
class FacadeLayout:
    direction: str
    wall: Optional[str]
    facade_width_mm: float = 0.0
    facade_depth_mm: float = 0.0
    bands: List[FacadeBand] = field(default_factory=list)
    roof_kind: Optional[Literal["slope", "gable"]] = None
    roof_rise_mm: float = 0.0
    roof_overhang_mm: float = 0.0
    ridge_position_mm: Optional[float] = None
    notes: List[str] = field(default_factory=list)

    @property
    def building_top_mm(self) -> float:
        return max((band.top_mm for band in self.bands), default=0.0)

    @property
    def total_height_mm(self) -> float:
        return self.building_top_mm + self.roof_rise_mm

    @property
    def roof_width_mm(self) -> float:
        return self.facade_width_mm + 2.0 * self.roof_overhang_mm


def _dimensions(view: LevelView, wall: str) -> tuple[float, float]:
    footprint = view.footprint
    width = (footprint.width if footprint else None) or DEFAULT_BLOCK_SIZE_MM
    depth = (footprint.depth if footprint else None) or DEFAULT_BLOCK_SIZE_MM
    if wall in ("front", "back"):
        return width, depth
    return depth, width


def facade_layout(plan: CanonicalPlan, direction: str) -> FacadeLayout:
    """Lay out the facade seen when looking in ``direction``."""
    mode = (direction or "").strip().lower()
    wall = DIRECTION_TO_WALL.get(mode)
    layout = FacadeLayout(direction=mode, wall=wall)
    if wall is None:
        layout.notes.append(f"unknown direction {direction!r}; expected one of {', '.join(DIRECTIONS)}")
        return layout
    if plan.is_blocks:
        layout.notes.append("full facades are only laid out for single-body plans; draw blocks individually")
        return layout

    levels = sorted(iter_levels(plan), key=lambda view: view.floor.elevation_mm)
    if not levels:
        layout.notes.append("plan has no floors")
        return layout

    base = levels[0]
    layout.facade_width_mm, layout.facade_depth_mm = _dimensions(base, wall)
    layout.bands = [
        FacadeBand(
            level_key=view.key,
            name=view.floor.name or view.floor.id,
            elevation_mm=float(view.floor.elevation_mm),
            wall_height_mm=view.wall_height_mm,
            openings=[opening for opening in view.floor.openings if opening.wall == wall],
        )
        for view in levels
    ]

    roof = plan.roof
    if roof is None or roof.type != "gable":
        return layout

    layout.roof_overhang_mm = DEFAULT_ROOF_OVERHANG_MM if roof.overhang_mm is None else float(roof.overhang_mm)
    if is_viewing_slope(roof.ridge_direction, mode):
        footprint = base.footprint
        geometry = solve_gable_roof(
            roof,
            (footprint.width if footprint else None) or DEFAULT_BLOCK_SIZE_MM,
            (footprint.depth if footprint else None) or DEFAULT_BLOCK_SIZE_MM,
            top_elevation_mm=layout.building_top_mm,
        )
        layout.roof_kind = "slope"
        layout.roof_rise_mm = facade_rise_mm(geometry, mode)
        if geometry is None:
            layout.notes.append("roof could not be solved for this footprint")
    else:
        layout.roof_kind = "gable"
        layout.roof_rise_mm = gable_end_rise_mm(roof, layout.facade_width_mm)
        offset = float(roof.ridge_offset_mm or 0.0)
        # mirrored on the west and south facades
        signed = -offset if mode in ("west", "south") else offset
        layout.ridge_position_mm = layout.facade_width_mm / 2.0 + signed
    return layout


__all__ = ["DIRECTIONS", "DIRECTION_TO_WALL", "FacadeBand", "FacadeLayout", "facade_layout"]

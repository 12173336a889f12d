"""
Plan Validator

Advisory, non-fail-fast validation of canonical plans. Every rule appends to
the issue list; nothing stops at the first failure and the plan is never
modified, so the UI can show the complete list while a plan is mid-edit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from loguru import logger
from shapely.geometry import LineString, Polygon

from houseplan.exceptions import PlanValidationError
from houseplan.geometry.contract import (
    DEFAULT_ROOF_OVERHANG_MM,
    ELEVATION_TOLERANCE_MM,
    FOOTPRINT_MAX_MM,
    FOOTPRINT_MIN_MM,
    MIN_ROOM_VERTICES,
    MIN_WALL_PATH_VERTICES,
    ROOF_OVERHANG_MAX_MM,
    ROOF_PITCH_MAX_DEG,
    ROOF_PITCH_MIN_DEG,
    ROOF_THICKNESS_MAX_MM,
    ROOF_THICKNESS_MIN_MM,
    ROOM_OVERLAP_AREA_MM2,
    SEGMENT_SNAP_MM,
    UNITS,
)
from houseplan.model.levels import LevelView, iter_levels
from houseplan.model.schema import CanonicalPlan, Footprint, Opening, RoofSpec, Room
from houseplan.normalize.normalizer import normalize_plan
from houseplan.roof.geometry import RIDGE_DIRECTIONS, RIDGE_MODES
from houseplan.walls.derived import derive_walls


class IssueKind(str, Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    OUT_OF_RANGE = "out_of_range"
    GEOMETRY_VIOLATION = "geometry_violation"
    DEGENERATE_INPUT = "degenerate_input"


@dataclass(frozen=True)
class PlanIssue:
    kind: IssueKind
    path: str
    message: str


def _fmt(value: Optional[float]) -> str:
    if value is None:
        return "missing"
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _opening_label(opening: Opening, index: int) -> str:
    return opening.id or f"#{index + 1}"


def _rect(footprint: Optional[Footprint]) -> tuple[float, float]:
    if footprint is None:
        return 0.0, 0.0
    return float(footprint.width or 0.0), float(footprint.depth or 0.0)


class PlanValidator:
    """Runs every plan rule and collects :class:`PlanIssue` records."""

    def __init__(self, *, grid_mm: float = SEGMENT_SNAP_MM) -> None:
        self.grid_mm = grid_mm

    def validate(self, plan: CanonicalPlan) -> List[str]:
        return [issue.message for issue in self.issues(plan)]

    def issues(self, plan: CanonicalPlan) -> List[PlanIssue]:
        issues: List[PlanIssue] = []
        if plan.units != UNITS:
            issues.append(PlanIssue(IssueKind.UNSUPPORTED_FORMAT, "units", f'units must be "{UNITS}"'))

        levels = list(iter_levels(plan))
        if not levels:
            issues.append(PlanIssue(
                IssueKind.UNSUPPORTED_FORMAT,
                "blocks" if plan.is_blocks else "floors",
                "plan has no floors (expected footprint, floors[] or blocks[])",
            ))
        level_ids = {view.level_id for view in levels}
        for view in levels:
            issues.extend(self._level(view, level_ids))

        for index, block in enumerate((plan.blocks or []) if plan.is_blocks else []):
            if block.roof is not None:
                footprint = block.footprint or next(
                    (floor.footprint for floor in block.floors if floor.footprint is not None), None
                )
                issues.extend(self._roof(block.roof, f"blocks.{index}.roof", f"block {block.id} roof", [footprint]))

        if plan.roof is not None:
            footprints = [view.footprint for view in levels]
            issues.extend(self._roof(plan.roof, "roof", "roof", footprints))
            if plan.is_blocks:
                issues.extend(self._shared_roof_eaves(plan, levels))

        if issues:
            logger.debug("Plan validation found {count} issues", count=len(issues))
        return issues

    # --- levels --------------------------------------------------------------

    def _level(self, view: LevelView, level_ids: set[str]) -> Iterable[PlanIssue]:
        path = view.key
        label = view.label
        footprint = view.footprint
        if footprint is None:
            yield PlanIssue(IssueKind.DEGENERATE_INPUT, f"{path}.footprint", f"{label}: footprint is missing")
        else:
            yield from self._footprint(footprint, path, label)
            yield from self._wall(view, path, label)
            yield from self._openings(view, path, label)
        yield from self._rooms(view, path, label)
        yield from self._authored_walls(view, path, label)
        yield from self._stairs(view, path, label, level_ids)
        for index, void in enumerate(view.floor.voids):
            if len(void.polygon) < MIN_ROOM_VERTICES:
                name = void.id or f"#{index + 1}"
                yield PlanIssue(
                    IssueKind.DEGENERATE_INPUT,
                    f"{path}.voids.{index}",
                    f"{label}: void {name} polygon needs at least {MIN_ROOM_VERTICES} vertices",
                )

    def _footprint(self, footprint: Footprint, path: str, label: str) -> Iterable[PlanIssue]:
        for name in ("width", "depth"):
            value = getattr(footprint, name)
            if value is None or not FOOTPRINT_MIN_MM <= value <= FOOTPRINT_MAX_MM:
                yield PlanIssue(
                    IssueKind.OUT_OF_RANGE,
                    f"{path}.footprint.{name}",
                    f"{label}: footprint.{name} must be {_fmt(FOOTPRINT_MIN_MM)}-{_fmt(FOOTPRINT_MAX_MM)} mm "
                    f"(got {_fmt(value)})",
                )

    def _wall(self, view: LevelView, path: str, label: str) -> Iterable[PlanIssue]:
        thickness = view.wall_thickness_mm
        height = view.wall_height_mm
        width, depth = _rect(view.footprint)
        if thickness <= 0:
            yield PlanIssue(IssueKind.OUT_OF_RANGE, f"{path}.wall.thickness_mm", f"{label}: wall.thickness_mm must be > 0")
        if height <= 0:
            yield PlanIssue(IssueKind.OUT_OF_RANGE, f"{path}.wall.height_mm", f"{label}: wall.height_mm must be > 0")
        if thickness > 0 and width > 0 and depth > 0 and thickness * 2 >= min(width, depth):
            yield PlanIssue(
                IssueKind.GEOMETRY_VIOLATION,
                f"{path}.wall.thickness_mm",
                f"{label}: wall.thickness_mm*2 must be < min(width, depth) "
                f"({_fmt(thickness * 2)} >= {_fmt(min(width, depth))})",
            )

    def _openings(self, view: LevelView, path: str, label: str) -> Iterable[PlanIssue]:
        width, depth = _rect(view.footprint)
        side_lengths = {"front": width, "back": width, "left": depth, "right": depth}
        paths = {wall.id: wall.path for wall in view.floor.walls if wall.id}
        for index, opening in enumerate(view.floor.openings):
            name = _opening_label(opening, index)
            where = f"{path}.openings.{index}"
            if opening.type not in ("door", "window"):
                yield PlanIssue(IssueKind.UNSUPPORTED_FORMAT, f"{where}.type", f"{label}: opening {name} type must be door or window")

            if opening.wall_id is not None and opening.wall is None:
                host = paths.get(opening.wall_id)
                if host is None:
                    yield PlanIssue(
                        IssueKind.GEOMETRY_VIOLATION,
                        f"{where}.wall_id",
                        f"{label}: opening {name} references unknown wall {opening.wall_id}",
                    )
                    length = None
                else:
                    length = LineString(host).length if len(host) >= MIN_WALL_PATH_VERTICES else 0.0
                start = opening.at_mm if opening.at_mm is not None else opening.offset
            elif opening.wall in side_lengths:
                length = side_lengths[opening.wall]
                start = opening.offset
            else:
                yield PlanIssue(
                    IssueKind.GEOMETRY_VIOLATION,
                    f"{where}.wall",
                    f"{label}: opening {name} wall must be front, back, left or right",
                )
                length = None
                start = opening.offset

            if length is not None and (start or 0.0) + (opening.width or 0.0) > length:
                yield PlanIssue(
                    IssueKind.GEOMETRY_VIOLATION,
                    where,
                    f"{label}: opening {name} offset+width exceeds wall length ({_fmt(length)} mm)",
                )
            if opening.type == "window" and (opening.sill is None or opening.sill < 0):
                yield PlanIssue(IssueKind.OUT_OF_RANGE, f"{where}.sill", f"{label}: window {name} sill must be >= 0")

    def _rooms(self, view: LevelView, path: str, label: str) -> Iterable[PlanIssue]:
        shapes: list[tuple[Room, Polygon]] = []
        seen: dict[str, int] = {}
        for index, room in enumerate(view.floor.rooms):
            where = f"{path}.rooms.{index}"
            if room.id in seen:
                yield PlanIssue(IssueKind.GEOMETRY_VIOLATION, f"{where}.id", f"{label}: duplicate room id {room.id}")
            seen.setdefault(room.id, index)
            if len(room.polygon) < MIN_ROOM_VERTICES:
                yield PlanIssue(
                    IssueKind.DEGENERATE_INPUT,
                    f"{where}.polygon",
                    f"{label}: room {room.id} polygon needs at least {MIN_ROOM_VERTICES} vertices",
                )
                continue
            polygon = Polygon(room.polygon)
            if not polygon.is_valid:
                polygon = polygon.buffer(0)
            shapes.append((room, polygon))

        for i, (room_a, shape_a) in enumerate(shapes):
            for room_b, shape_b in shapes[i + 1:]:
                if room_a.id == room_b.id:
                    continue
                if shape_a.intersection(shape_b).area > ROOM_OVERLAP_AREA_MM2:
                    yield PlanIssue(
                        IssueKind.GEOMETRY_VIOLATION,
                        f"{path}.rooms",
                        f"{label}: rooms {room_a.id} and {room_b.id} overlap",
                    )

        for wall in derive_walls(view, grid_mm=self.grid_mm):
            if len(set(wall.room_ids)) < 2:
                yield PlanIssue(
                    IssueKind.GEOMETRY_VIOLATION,
                    f"{path}.rooms",
                    f"{label}: derived wall {wall.id} separates room {wall.room_ids[0]} from itself",
                )

    def _authored_walls(self, view: LevelView, path: str, label: str) -> Iterable[PlanIssue]:
        for index, wall in enumerate(view.floor.walls):
            if len(wall.path) < MIN_WALL_PATH_VERTICES:
                name = wall.id or f"#{index + 1}"
                yield PlanIssue(
                    IssueKind.DEGENERATE_INPUT,
                    f"{path}.walls.{index}.path",
                    f"{label}: wall {name} path needs at least {MIN_WALL_PATH_VERTICES} vertices",
                )

    def _stairs(self, view: LevelView, path: str, label: str, level_ids: set[str]) -> Iterable[PlanIssue]:
        for index, stair in enumerate(view.floor.stairs):
            name = stair.id or f"#{index + 1}"
            where = f"{path}.stairs.{index}"
            for attr, level_id in (("fromLevelId", stair.from_level_id), ("toLevelId", stair.to_level_id)):
                if level_id is not None and level_id not in level_ids:
                    yield PlanIssue(
                        IssueKind.GEOMETRY_VIOLATION,
                        f"{where}.{attr}",
                        f"{label}: stair {name} references unknown level {level_id}",
                    )
            for attr in ("rise_mm", "run_mm", "tread_mm"):
                value = getattr(stair, attr)
                if value is not None and value <= 0:
                    yield PlanIssue(IssueKind.OUT_OF_RANGE, f"{where}.{attr}", f"{label}: stair {name} {attr} must be > 0")
            if stair.riser_count is not None and stair.riser_count < 1:
                yield PlanIssue(IssueKind.OUT_OF_RANGE, f"{where}.riser_count", f"{label}: stair {name} riser_count must be >= 1")

    # --- roofs ---------------------------------------------------------------

    def _roof(
        self,
        roof: RoofSpec,
        path: str,
        label: str,
        footprints: Iterable[Optional[Footprint]],
    ) -> Iterable[PlanIssue]:
        if roof.type != "gable":
            yield PlanIssue(IssueKind.UNSUPPORTED_FORMAT, f"{path}.type", f'{label}: type must be "gable"')
        pitch = roof.pitch_degrees
        if pitch is None or not ROOF_PITCH_MIN_DEG <= pitch <= ROOF_PITCH_MAX_DEG:
            yield PlanIssue(
                IssueKind.OUT_OF_RANGE,
                f"{path}.pitch_degrees",
                f"{label}: pitch_degrees must be {_fmt(ROOF_PITCH_MIN_DEG)}-{_fmt(ROOF_PITCH_MAX_DEG)} (got {_fmt(pitch)})",
            )
        if roof.overhang_mm is not None and not 0 <= roof.overhang_mm <= ROOF_OVERHANG_MAX_MM:
            yield PlanIssue(
                IssueKind.OUT_OF_RANGE,
                f"{path}.overhang_mm",
                f"{label}: overhang_mm must be 0-{_fmt(ROOF_OVERHANG_MAX_MM)}",
            )
        if roof.thickness_mm is not None and not ROOF_THICKNESS_MIN_MM <= roof.thickness_mm <= ROOF_THICKNESS_MAX_MM:
            yield PlanIssue(
                IssueKind.OUT_OF_RANGE,
                f"{path}.thickness_mm",
                f"{label}: thickness_mm must be {_fmt(ROOF_THICKNESS_MIN_MM)}-{_fmt(ROOF_THICKNESS_MAX_MM)}",
            )
        if roof.ridge_direction not in RIDGE_DIRECTIONS:
            yield PlanIssue(IssueKind.UNSUPPORTED_FORMAT, f"{path}.ridge_direction", f"{label}: ridge_direction must be x or y")
        if roof.ridge_mode not in RIDGE_MODES:
            yield PlanIssue(
                IssueKind.UNSUPPORTED_FORMAT,
                f"{path}.ridge_mode",
                f"{label}: ridge_mode must be equal_pitch or equal_eave",
            )
        if roof.type != "gable" or roof.ridge_direction not in RIDGE_DIRECTIONS:
            return

        sizes = [_rect(footprint) for footprint in footprints if footprint is not None]
        span = max((depth if roof.ridge_direction == "x" else width for width, depth in sizes), default=0.0)
        if span <= 0:
            return
        overhang = DEFAULT_ROOF_OVERHANG_MM if roof.overhang_mm is None else roof.overhang_mm
        limit = span / 2 - overhang
        offset = roof.ridge_offset_mm or 0.0
        if abs(offset) >= limit:
            yield PlanIssue(
                IssueKind.GEOMETRY_VIOLATION,
                f"{path}.ridge_offset_mm",
                f"{label}: |ridge_offset_mm| ({_fmt(offset)}) must be < {_fmt(int(limit))} mm",
            )

    def _shared_roof_eaves(self, plan: CanonicalPlan, levels: List[LevelView]) -> Iterable[PlanIssue]:
        """Blocks without their own roof share the plan roof; their wall tops must agree."""
        tops: dict[str, float] = {}
        for view in levels:
            if view.block is None or view.block.roof is not None:
                continue
            tops[view.block.id] = max(tops.get(view.block.id, float("-inf")), view.top_elevation_mm)
        if len(tops) > 1 and max(tops.values()) - min(tops.values()) > ELEVATION_TOLERANCE_MM:
            listing = ", ".join(f"{block_id}={_fmt(top)}" for block_id, top in sorted(tops.items()))
            yield PlanIssue(
                IssueKind.GEOMETRY_VIOLATION,
                "roof",
                f"roof: blocks under the shared roof have different wall-top elevations ({listing} mm)",
            )


def validate_plan(
    plan: Union[CanonicalPlan, Mapping[str, Any]],
    *,
    grid_mm: float = SEGMENT_SNAP_MM,
) -> List[str]:
    """Validate a plan and return every error message (empty list means valid).

    Raw documents are normalized first.
    """
    canonical = plan if isinstance(plan, CanonicalPlan) else normalize_plan(plan)
    return PlanValidator(grid_mm=grid_mm).validate(canonical)


def require_valid(plan: CanonicalPlan, *, grid_mm: float = SEGMENT_SNAP_MM) -> CanonicalPlan:
    """Return ``plan`` unchanged or raise :class:`PlanValidationError` with all errors."""
    errors = validate_plan(plan, grid_mm=grid_mm)
    if errors:
        raise PlanValidationError(errors)
    return plan


__all__ = ["IssueKind", "PlanIssue", "PlanValidator", "require_valid", "validate_plan"]

"""Deterministic interior-wall inference from room polygons (rooms-first).

Every room polygon is split into its boundary edges. Edges are keyed by a
grid-snapped, direction-independent segment key; a key shared by exactly two
rooms becomes one derived wall. Keys touched by a single room belong to the
exterior wall band and are left to the exterior renderer.
"""

from __future__ import annotations

import re
import zlib
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from houseplan.geometry.contract import (
    DEFAULT_WALL_THICKNESS_MM,
    MIN_ROOM_VERTICES,
    SEGMENT_SNAP_MM,
    snap,
)
from houseplan.model.levels import LevelView, block_levels, find_level, iter_levels, level_key
from houseplan.model.schema import CanonicalPlan, DerivedWall, PlanPoint, Room

Segment = Tuple[float, float, float, float]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _fmt(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def segment_endpoints(x1: float, y1: float, x2: float, y2: float, grid: float = SEGMENT_SNAP_MM) -> Segment:
    """Snap both endpoints and order them lexicographically."""
    a = (snap(x1, grid), snap(y1, grid))
    b = (snap(x2, grid), snap(y2, grid))
    if b < a:
        a, b = b, a
    return a[0], a[1], b[0], b[1]


def segment_key(x1: float, y1: float, x2: float, y2: float, grid: float = SEGMENT_SNAP_MM) -> str:
    """Direction-independent key of an edge: ``x1,y1,x2,y2`` with the smaller endpoint first."""
    return ",".join(_fmt(value) for value in segment_endpoints(x1, y1, x2, y2, grid))


def polygon_segments(polygon: Sequence[Sequence[float]]) -> List[Segment]:
    """Boundary edges of a polygon, wrapping from the last vertex to the first."""
    if not polygon or len(polygon) < MIN_ROOM_VERTICES:
        return []
    points = [(float(p[0]), float(p[1])) for p in polygon]
    segments = []
    for i, (x1, y1) in enumerate(points):
        x2, y2 = points[(i + 1) % len(points)]
        segments.append((x1, y1, x2, y2))
    return segments


def wall_id(level: str, seg_key: str, thickness_mm: float, wall_type: str) -> str:
    """Content-addressed id: identical geometry and parameters give the identical id."""
    digest = zlib.crc32(f"{level}|{seg_key}|{_fmt(thickness_mm)}|{wall_type}".encode("utf-8"))
    return f"W_{re.sub(r'[^a-zA-Z0-9]', '_', level)}_{_base36(digest)}"


def _wall_type(room_a: Room, room_b: Room) -> str:
    if room_a.unit_id is not None and room_b.unit_id is not None and room_a.unit_id != room_b.unit_id:
        return "betweenUnits"
    return "interior"


def _thickness(level: LevelView, rooms: Sequence[Room], wall_type: str) -> float:
    for room in rooms:
        if room.wall_thickness_mm is not None:
            return float(room.wall_thickness_mm)
    rule = level.defaults.wall_rules.get(wall_type)
    if rule is not None and rule.thickness_mm is not None:
        return float(rule.thickness_mm)
    thickness = level.defaults.wall.thickness_mm
    return DEFAULT_WALL_THICKNESS_MM if thickness is None else float(thickness)


def _material(level: LevelView, first_room: Room, wall_type: str) -> str:
    material = level.defaults.materials.get("wall", "default_wall")
    block_material = level.block.materials.get("wall") if level.block is not None else None
    if block_material:
        material = block_material
    if first_room.materials.get("wall"):
        material = first_room.materials["wall"]
    if wall_type == "betweenUnits" and block_material:
        material = block_material
    return material


def derive_walls(level: LevelView, *, grid_mm: float = SEGMENT_SNAP_MM) -> List[DerivedWall]:
    """Derived interior walls of one level, sorted by segment key.

    Rooms with fewer than three vertices contribute nothing. Owners are tracked
    per room entry, so a duplicated room yields a wall between the room and
    itself; the validator reports that.
    """
    owners: Dict[str, List[Room]] = defaultdict(list)
    endpoints: Dict[str, Segment] = {}

    for room in level.floor.rooms:
        segments = polygon_segments(room.polygon)
        if not segments:
            logger.debug("Skipping room {room} on {level}: fewer than 3 vertices", room=room.id, level=level.key)
            continue
        seen: set[str] = set()
        for x1, y1, x2, y2 in segments:
            ordered = segment_endpoints(x1, y1, x2, y2, grid_mm)
            if ordered[:2] == ordered[2:]:
                continue
            key = segment_key(x1, y1, x2, y2, grid_mm)
            if key in seen:
                continue
            seen.add(key)
            owners[key].append(room)
            endpoints[key] = ordered

    height = level.wall_height_mm
    walls: List[DerivedWall] = []
    for key in sorted(owners):
        rooms = owners[key]
        if len(rooms) != 2:
            continue
        rooms = sorted(rooms, key=lambda room: room.id)
        wall_type = _wall_type(rooms[0], rooms[1])
        thickness = _thickness(level, rooms, wall_type)
        ax, ay, bx, by = endpoints[key]
        walls.append(
            DerivedWall(
                id=wall_id(level.key, key, thickness, wall_type),
                level_id=level.key,
                a=PlanPoint(x=ax, y=ay),
                b=PlanPoint(x=bx, y=by),
                thickness_mm=thickness,
                wall_type=wall_type,
                room_ids=[room.id for room in rooms],
                material_id=_material(level, rooms[0], wall_type),
                height_mm=height,
            )
        )
    logger.debug("Derived {count} interior walls on {level}", count=len(walls), level=level.key)
    return walls


def regenerate_level(
    plan: CanonicalPlan,
    block_id: Optional[str],
    level_id: str,
    *,
    grid_mm: float = SEGMENT_SNAP_MM,
) -> List[DerivedWall]:
    """Recompute one level and overwrite its ``derived.wallsByLevel`` entry wholesale."""
    key = level_key(block_id, level_id)
    view = find_level(plan, key)
    walls = derive_walls(view, grid_mm=grid_mm) if view is not None else []
    plan.derived.walls_by_level[key] = walls
    return walls


def regenerate_block(plan: CanonicalPlan, block_id: str, *, grid_mm: float = SEGMENT_SNAP_MM) -> Dict[str, List[DerivedWall]]:
    return {
        view.key: regenerate_level(plan, block_id, view.level_id, grid_mm=grid_mm)
        for view in block_levels(plan, block_id)
    }


def regenerate_all(plan: CanonicalPlan, *, grid_mm: float = SEGMENT_SNAP_MM) -> Dict[str, List[DerivedWall]]:
    """Recompute every level; levels no longer present are dropped from the cache."""
    walls_by_level = {view.key: derive_walls(view, grid_mm=grid_mm) for view in iter_levels(plan)}
    plan.derived.walls_by_level = walls_by_level
    return walls_by_level


__all__ = [
    "derive_walls",
    "polygon_segments",
    "regenerate_all",
    "regenerate_block",
    "regenerate_level",
    "segment_endpoints",
    "segment_key",
    "wall_id",
]

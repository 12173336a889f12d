"""Plan edit session.

Holds the loaded plan and the selected level for one editor. Every geometry
edit re-derives the interior walls of the affected levels so that
``derived.wallsByLevel`` never goes stale.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from loguru import logger

from houseplan.exceptions import BlockNotFoundError, LevelNotFoundError, PlanParseError, RoomNotFoundError
from houseplan.geometry.contract import (
    DEFAULT_BLOCK_SIZE_MM,
    DEFAULT_WALL_HEIGHT_MM,
    DEFAULT_WALL_THICKNESS_MM,
    EDIT_SNAP_DISTANCE_MM,
    EDIT_SNAP_GRID_MM,
    SEGMENT_SNAP_MM,
    snap,
)
from houseplan.model.levels import LevelView, find_level, iter_levels
from houseplan.model.schema import Block, CanonicalPlan, DerivedWall, Footprint, Position, Room
from houseplan.normalize.normalizer import normalize_plan
from houseplan.settings import Settings, get_settings
from houseplan.validate.plan_validator import validate_plan
from houseplan.walls.derived import regenerate_all, regenerate_block, regenerate_level


def snap_to_targets(value: float, targets: Sequence[float], max_distance: float = EDIT_SNAP_DISTANCE_MM) -> float:
    """First target within ``max_distance`` of ``value``, else ``value`` unchanged."""
    for target in targets:
        if abs(value - target) <= max_distance:
            return float(target)
    return value


def _block_size(block: Block) -> tuple[float, float]:
    footprint = block.footprint
    width = footprint.width if footprint and footprint.width else DEFAULT_BLOCK_SIZE_MM
    depth = footprint.depth if footprint and footprint.depth else DEFAULT_BLOCK_SIZE_MM
    return float(width), float(depth)


class PlanSession:
    """Editable plan plus the current level selection."""

    def __init__(
        self,
        plan: Optional[CanonicalPlan] = None,
        *,
        segment_grid_mm: float = SEGMENT_SNAP_MM,
        edit_grid_mm: float = EDIT_SNAP_GRID_MM,
        snap_distance_mm: float = EDIT_SNAP_DISTANCE_MM,
        wall_thickness_mm: float = DEFAULT_WALL_THICKNESS_MM,
        wall_height_mm: float = DEFAULT_WALL_HEIGHT_MM,
    ) -> None:
        self.segment_grid_mm = segment_grid_mm
        self.wall_thickness_mm = wall_thickness_mm
        self.wall_height_mm = wall_height_mm
        self.edit_grid_mm = edit_grid_mm
        self.snap_distance_mm = snap_distance_mm
        self.plan: Optional[CanonicalPlan] = None
        self.selected_level: Optional[str] = None
        if plan is not None:
            self.load(plan)

    # --- loading -------------------------------------------------------------

    def load(self, document: Any) -> CanonicalPlan:
        """Normalize ``document``, rebuild every derived wall and select the first level."""
        plan = normalize_plan(document, wall_thickness_mm=self.wall_thickness_mm, wall_height_mm=self.wall_height_mm)
        regenerate_all(plan, grid_mm=self.segment_grid_mm)
        self.plan = plan
        first = next(iter_levels(plan), None)
        self.selected_level = first.key if first else None
        logger.info(
            "Loaded {kind} plan with {levels} levels",
            kind=plan.body_kind,
            levels=len(self.levels()),
        )
        return plan

    def _require_plan(self) -> CanonicalPlan:
        if self.plan is None:
            raise PlanParseError("No plan loaded")
        return self.plan

    # --- levels --------------------------------------------------------------

    def levels(self) -> List[str]:
        if self.plan is None:
            return []
        return [view.key for view in iter_levels(self.plan)]

    def select_level(self, key: str) -> LevelView:
        view = self._level(key)
        self.selected_level = view.key
        return view

    @property
    def active_level(self) -> Optional[LevelView]:
        if self.plan is None or self.selected_level is None:
            return None
        return find_level(self.plan, self.selected_level)

    def _level(self, key: Optional[str]) -> LevelView:
        plan = self._require_plan()
        target = key if key is not None else self.selected_level
        view = find_level(plan, target) if target is not None else None
        if view is None:
            raise LevelNotFoundError(f"Level not found: {target}", {"level": target})
        return view

    def _room(self, view: LevelView, room_id: str) -> Room:
        for room in view.floor.rooms:
            if room.id == room_id:
                return room
        raise RoomNotFoundError(f"Room not found: {room_id}", {"level": view.key, "room": room_id})

    def _block(self, block_id: str) -> Block:
        block = self._require_plan().find_block(block_id)
        if block is None:
            raise BlockNotFoundError(f"Block not found: {block_id}", {"block": block_id})
        return block

    def _regenerate(self, view: LevelView) -> List[DerivedWall]:
        return regenerate_level(self._require_plan(), view.block_id, view.level_id, grid_mm=self.segment_grid_mm)

    # --- rooms ---------------------------------------------------------------

    def set_room_polygon(
        self,
        room_id: str,
        polygon: Sequence[Sequence[float]],
        *,
        level: Optional[str] = None,
    ) -> List[DerivedWall]:
        """Replace a room outline and return the regenerated walls of its level."""
        view = self._level(level)
        room = self._room(view, room_id)
        room.polygon = [[float(point[0]), float(point[1])] for point in polygon]
        return self._regenerate(view)

    def move_room(self, room_id: str, dx: float, dy: float, *, level: Optional[str] = None) -> Room:
        """Translate a room by a grid-snapped delta.

        Vertices are clamped into the level footprint when one is known.
        """
        view = self._level(level)
        room = self._room(view, room_id)
        step_x = snap(dx, self.edit_grid_mm)
        step_y = snap(dy, self.edit_grid_mm)
        moved = [[point[0] + step_x, point[1] + step_y] for point in room.polygon]

        footprint: Optional[Footprint] = view.footprint
        if footprint is not None and footprint.width and footprint.depth:
            moved = [
                [min(max(x, 0.0), float(footprint.width)), min(max(y, 0.0), float(footprint.depth))]
                for x, y in moved
            ]
        room.polygon = moved
        self._regenerate(view)
        logger.debug("Moved room {room} by ({dx}, {dy}) on {level}", room=room_id, dx=step_x, dy=step_y, level=view.key)
        return room

    # --- blocks --------------------------------------------------------------

    def move_block(self, block_id: str, x: float, z: float) -> Position:
        """Place a block at ``(x, z)``, snapping to other blocks' edges and then to the edit grid."""
        plan = self._require_plan()
        block = self._block(block_id)
        others = [other for other in plan.blocks or [] if other is not block]
        if others:
            edges_x: List[float] = []
            edges_z: List[float] = []
            for other in others:
                width, depth = _block_size(other)
                edges_x.extend((other.position.x, other.position.x + width))
                edges_z.extend((other.position.z, other.position.z + depth))
            x = snap_to_targets(x, edges_x, self.snap_distance_mm)
            z = snap_to_targets(z, edges_z, self.snap_distance_mm)
        block.position = Position(x=snap(x, self.edit_grid_mm), z=snap(z, self.edit_grid_mm))
        regenerate_block(plan, block.id, grid_mm=self.segment_grid_mm)
        return block.position

    def resize_block(self, block_id: str, width: float, depth: float) -> Footprint:
        block = self._block(block_id)
        footprint = block.footprint or Footprint(type="rect")
        footprint.width = float(width)
        footprint.depth = float(depth)
        footprint.polygon = None
        block.footprint = footprint
        regenerate_block(self._require_plan(), block.id, grid_mm=self.segment_grid_mm)
        return footprint

    # --- output --------------------------------------------------------------

    def errors(self) -> List[str]:
        if self.plan is None:
            return []
        return validate_plan(self.plan, grid_mm=self.segment_grid_mm)

    def document(self) -> dict[str, Any]:
        return self._require_plan().to_document()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, plan: Any = None) -> "PlanSession":
        """Session whose snapping and wall defaults come from the loaded configuration."""
        settings = settings or get_settings()
        session = cls(
            segment_grid_mm=settings.engine.segment_snap_mm,
            edit_grid_mm=settings.edit.snap_grid_mm,
            snap_distance_mm=settings.edit.snap_distance_mm,
            **settings.engine.wall_defaults,
        )
        if plan is not None:
            session.load(plan)
        return session

    @classmethod
    def from_document(cls, document: Mapping[str, Any], **kwargs: Any) -> "PlanSession":
        session = cls(**kwargs)
        session.load(document)
        return session


__all__ = ["PlanSession", "snap_to_targets"]

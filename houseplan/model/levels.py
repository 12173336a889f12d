"""Level resolution for canonical plans.

Presentation layers, the validator and derived-wall regeneration all walk the
levels of a plan through :func:`iter_levels`, so that the blocks/floors split
is handled in exactly one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from houseplan.geometry.contract import DEFAULT_WALL_HEIGHT_MM, DEFAULT_WALL_THICKNESS_MM
from houseplan.model.schema import Block, CanonicalPlan, Defaults, Floor, Footprint


def level_key(block_id: str | None, level_id: str) -> str:
    """Cache key of a level: ``blockId:levelId`` inside blocks, ``levelId`` otherwise."""
    return f"{block_id}:{level_id}" if block_id else level_id


def _first(*values: Optional[float]) -> Optional[float]:
    for value in values:
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class LevelView:
    """One floor of a plan together with everything needed to interpret it."""

    key: str
    floor: Floor
    block: Optional[Block]
    defaults: Defaults
    index: int

    @property
    def level_id(self) -> str:
        return self.floor.id

    @property
    def block_id(self) -> Optional[str]:
        return self.block.id if self.block else None

    @property
    def label(self) -> str:
        name = self.floor.name or self.floor.id
        if self.block is not None:
            return f"block {self.block.id} floor {name}"
        return f"floor {name}"

    @property
    def footprint(self) -> Optional[Footprint]:
        if self.floor.footprint is not None:
            return self.floor.footprint
        if self.block is not None:
            return self.block.footprint
        return None

    @property
    def wall_thickness_mm(self) -> float:
        value = _first(
            self.floor.wall.thickness_mm if self.floor.wall else None,
            self.block.wall.thickness_mm if self.block and self.block.wall else None,
            self.defaults.wall.thickness_mm,
        )
        return DEFAULT_WALL_THICKNESS_MM if value is None else float(value)

    @property
    def wall_height_mm(self) -> float:
        value = _first(
            self.floor.wall.height_mm if self.floor.wall else None,
            self.floor.height_mm,
            self.block.wall.height_mm if self.block and self.block.wall else None,
            self.defaults.wall.height_mm,
        )
        return DEFAULT_WALL_HEIGHT_MM if value is None else float(value)

    @property
    def top_elevation_mm(self) -> float:
        return float(self.floor.elevation_mm) + self.wall_height_mm


def iter_levels(plan: CanonicalPlan) -> Iterator[LevelView]:
    if plan.is_blocks:
        index = 0
        for block in plan.blocks or []:
            for floor in block.floors:
                yield LevelView(level_key(block.id, floor.id), floor, block, plan.defaults, index)
                index += 1
        return
    for index, floor in enumerate(plan.floors or []):
        yield LevelView(level_key(None, floor.id), floor, None, plan.defaults, index)


def find_level(plan: CanonicalPlan, key: str) -> Optional[LevelView]:
    for view in iter_levels(plan):
        if view.key == key:
            return view
    return None


def block_levels(plan: CanonicalPlan, block_id: str) -> list[LevelView]:
    return [view for view in iter_levels(plan) if view.block_id == block_id]

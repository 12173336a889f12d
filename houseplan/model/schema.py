"""Canonical JSON schema for building plan documents (v1.0).

Every length is in millimetres. Field names follow the document keys; where the
document uses camelCase the model exposes a snake_case attribute with an alias.
Unknown keys are kept so that documents round-trip through normalization.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from houseplan.geometry.contract import CANONICAL_VERSION


Polygon2D = List[List[float]]


class PlanModel(BaseModel):
    """Base model for document records."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class WallSpec(PlanModel):
    """Exterior wall parameters of a floor, block or the plan defaults."""
    thickness_mm: Optional[float] = None
    height_mm: Optional[float] = None


class WallRule(PlanModel):
    thickness_mm: Optional[float] = Field(None, alias="thicknessMm")


class MaterialRecord(PlanModel):
    id: str
    name: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None


class Defaults(PlanModel):
    wall: WallSpec = Field(default_factory=WallSpec)
    materials: Dict[str, str] = Field(default_factory=dict)
    wall_rules: Dict[str, WallRule] = Field(default_factory=dict, alias="wallRules")


class Footprint(PlanModel):
    """Rectangular outline; ``polygon`` is kept when the source was polygonal."""
    type: Optional[str] = None
    width: Optional[float] = None
    depth: Optional[float] = None
    polygon: Optional[Polygon2D] = None


class Position(PlanModel):
    x: float = 0.0
    z: float = 0.0


class Opening(PlanModel):
    """Door or window on a cardinal wall (``wall``) or an authored wall path (``wall_id``)."""
    id: Optional[str] = None
    type: Optional[str] = None
    wall: Optional[str] = None
    wall_id: Optional[str] = None
    at_mm: Optional[float] = None
    offset: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    sill: Optional[float] = None
    swing: Optional[str] = None


class Room(PlanModel):
    id: str
    name: Optional[str] = None
    polygon: Polygon2D = Field(default_factory=list)
    floor_finish: Optional[str] = None
    ceiling_height_mm: Optional[float] = None
    wall_thickness_mm: Optional[float] = None
    unit_id: Optional[str] = Field(None, alias="unitId")
    materials: Dict[str, str] = Field(default_factory=dict)


class AuthoredWall(PlanModel):
    """Explicitly drawn wall given as a polyline path."""
    id: Optional[str] = None
    path: Polygon2D = Field(default_factory=list)
    thickness_mm: Optional[float] = None


class Stair(PlanModel):
    id: Optional[str] = None
    from_level_id: Optional[str] = Field(None, alias="fromLevelId")
    to_level_id: Optional[str] = Field(None, alias="toLevelId")
    rise_mm: Optional[float] = None
    run_mm: Optional[float] = None
    riser_count: Optional[int] = None
    tread_mm: Optional[float] = None
    polygon: Optional[Polygon2D] = None


class Void(PlanModel):
    """Stairwell opening in the slab of a level."""
    id: Optional[str] = None
    polygon: Polygon2D = Field(default_factory=list)


class Floor(PlanModel):
    id: str
    name: Optional[str] = None
    level: Optional[int] = None
    elevation_mm: float = 0.0
    height_mm: Optional[float] = Field(None, alias="heightMm")
    footprint: Optional[Footprint] = None
    wall: Optional[WallSpec] = None
    openings: List[Opening] = Field(default_factory=list)
    rooms: List[Room] = Field(default_factory=list)
    stairs: List[Stair] = Field(default_factory=list)
    voids: List[Void] = Field(default_factory=list)
    walls: List[AuthoredWall] = Field(default_factory=list)


class RoofSpec(PlanModel):
    type: Optional[str] = None
    pitch_degrees: Optional[float] = None
    overhang_mm: Optional[float] = None
    thickness_mm: Optional[float] = None
    ridge_direction: str = "x"
    ridge_offset_mm: float = 0.0
    ridge_mode: str = "equal_pitch"


class Block(PlanModel):
    """Independently positioned rectangular wing of a multi-body plan."""
    id: str
    name: Optional[str] = None
    position: Position = Field(default_factory=Position)
    footprint: Optional[Footprint] = None
    wall: Optional[WallSpec] = None
    floors: List[Floor] = Field(default_factory=list)
    roof: Optional[RoofSpec] = None
    materials: Dict[str, str] = Field(default_factory=dict)


class PlanPoint(BaseModel):
    x: float
    y: float


class DerivedWall(BaseModel):
    """Interior wall inferred from two rooms sharing an edge. Never hand-edited."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    level_id: str = Field(..., alias="levelId")
    a: PlanPoint
    b: PlanPoint
    thickness_mm: float = Field(..., alias="thicknessMm")
    wall_type: Literal["interior", "betweenUnits"] = Field(..., alias="wallType")
    room_ids: List[str] = Field(..., alias="roomIds")
    material_id: str = Field(..., alias="materialId")
    height_mm: float = Field(..., alias="heightMm")

    @property
    def length_mm(self) -> float:
        return ((self.b.x - self.a.x) ** 2 + (self.b.y - self.a.y) ** 2) ** 0.5


class DerivedState(PlanModel):
    walls_by_level: Dict[str, List[DerivedWall]] = Field(default_factory=dict, alias="wallsByLevel")


class CanonicalPlan(PlanModel):
    """Canonical plan: exactly one of ``floors`` / ``blocks`` is authoritative, named by ``body_kind``."""

    version: str = CANONICAL_VERSION
    units: Optional[str] = None
    body_kind: Literal["floors", "blocks"] = Field("floors", alias="bodyKind")
    defaults: Defaults = Field(default_factory=Defaults)
    material_library: List[MaterialRecord] = Field(default_factory=list, alias="materialLibrary")
    floors: Optional[List[Floor]] = None
    blocks: Optional[List[Block]] = None
    roof: Optional[RoofSpec] = None
    derived: DerivedState = Field(default_factory=DerivedState)

    @property
    def is_blocks(self) -> bool:
        return self.body_kind == "blocks"

    def find_block(self, block_id: str) -> Block | None:
        for block in self.blocks or []:
            if block.id == block_id:
                return block
        return None

    def to_document(self) -> dict[str, Any]:
        """Dump to the JSON document shape consumed by renderers."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "AuthoredWall",
    "Block",
    "CanonicalPlan",
    "Defaults",
    "DerivedState",
    "DerivedWall",
    "Floor",
    "Footprint",
    "MaterialRecord",
    "Opening",
    "PlanPoint",
    "Polygon2D",
    "Position",
    "RoofSpec",
    "Room",
    "Stair",
    "Void",
    "WallRule",
    "WallSpec",
]

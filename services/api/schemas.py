from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class PlanRequest(BaseModel):
    plan: dict[str, Any]
    strict: bool = False


class NormalizeResponse(BaseModel):
    plan: dict[str, Any]
    errors: list[str]


class ValidateResponse(BaseModel):
    valid: bool
    errors: list[str]


class DerivedWallsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    walls_by_level: dict[str, list[dict[str, Any]]] = Field(..., alias="wallsByLevel")


class RoofSolveRequest(BaseModel):
    roof: dict[str, Any]
    width_mm: float = Field(..., gt=0.0)
    depth_mm: float = Field(..., gt=0.0)
    top_elevation_mm: float = 0.0


class FacadeRequest(BaseModel):
    plan: dict[str, Any]
    direction: Literal["north", "south", "east", "west"]


class FacadeBandOut(BaseModel):
    level_key: str
    name: str
    elevation_mm: float
    wall_height_mm: float
    top_mm: float
    openings: list[dict[str, Any]] = Field(default_factory=list)


class FacadeResponse(BaseModel):
    direction: str
    wall: str | None = None
    facade_width_mm: float
    facade_depth_mm: float
    building_top_mm: float
    total_height_mm: float
    roof_kind: Literal["slope", "gable"] | None = None
    roof_rise_mm: float
    roof_overhang_mm: float
    roof_width_mm: float
    ridge_position_mm: float | None = None
    bands: list[FacadeBandOut]
    notes: list[str] = Field(default_factory=list)


__all__ = [
    "DerivedWallsResponse",
    "FacadeBandOut",
    "FacadeRequest",
    "FacadeResponse",
    "NormalizeResponse",
    "PlanRequest",
    "RoofSolveRequest",
    "ValidateResponse",
]

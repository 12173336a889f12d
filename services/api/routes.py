from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from houseplan.exceptions import PlanValidationError, RoofGeometryError
from houseplan.facade.layout import facade_layout
from houseplan.model.schema import CanonicalPlan
from houseplan.normalize.normalizer import normalize_plan, normalize_roof
from houseplan.roof.geometry import solve_gable_roof
from houseplan.roof.planes import roof_planes
from houseplan.settings import get_settings
from houseplan.validate.plan_validator import require_valid, validate_plan
from houseplan.walls.derived import regenerate_all
from services.api.schemas import (
    DerivedWallsResponse,
    FacadeBandOut,
    FacadeRequest,
    FacadeResponse,
    NormalizeResponse,
    PlanRequest,
    RoofSolveRequest,
    ValidateResponse,
)

router = APIRouter(prefix="/v1", tags=["plans"])


def _normalize(document: Any) -> CanonicalPlan:
    return normalize_plan(document, **get_settings().engine.wall_defaults)


@router.post("/plans/normalize", response_model=NormalizeResponse)
async def normalize_endpoint(request: PlanRequest) -> NormalizeResponse:
    grid = get_settings().engine.segment_snap_mm
    plan = _normalize(request.plan)
    regenerate_all(plan, grid_mm=grid)
    errors = validate_plan(plan, grid_mm=grid)
    return NormalizeResponse(plan=plan.to_document(), errors=errors)


@router.post(
    "/plans/validate",
    response_model=ValidateResponse,
    responses={422: {"model": ValidateResponse}},
)
async def validate_endpoint(request: PlanRequest) -> Any:
    errors = validate_plan(_normalize(request.plan), grid_mm=get_settings().engine.segment_snap_mm)
    if errors:
        logger.info("Plan rejected with {count} validation errors", count=len(errors))
        return JSONResponse(
            status_code=422,
            content=ValidateResponse(valid=False, errors=errors).model_dump(),
        )
    return ValidateResponse(valid=True, errors=[])


@router.post("/plans/derived-walls", response_model=DerivedWallsResponse, response_model_by_alias=True)
async def derived_walls_endpoint(request: PlanRequest) -> DerivedWallsResponse:
    grid = get_settings().engine.segment_snap_mm
    plan = _normalize(request.plan)
    if request.strict:
        require_valid(plan, grid_mm=grid)
    walls_by_level = regenerate_all(plan, grid_mm=grid)
    return DerivedWallsResponse(
        walls_by_level={
            key: [wall.model_dump(mode="json", by_alias=True) for wall in walls]
            for key, walls in walls_by_level.items()
        }
    )


@router.post("/roof/solve", tags=["roof"])
async def solve_roof_endpoint(request: RoofSolveRequest) -> dict[str, Any]:
    spec = normalize_roof(request.roof)
    if spec is None or spec.type != "gable":
        raise PlanValidationError(['roof: type must be "gable"'], "Only gable roofs can be solved")
    geometry = solve_gable_roof(spec, request.width_mm, request.depth_mm, top_elevation_mm=request.top_elevation_mm)
    if geometry is None:
        raise RoofGeometryError(
            "Ridge offset places the ridge outside the footprint",
            {"ridge_offset_mm": spec.ridge_offset_mm, "width_mm": request.width_mm, "depth_mm": request.depth_mm},
        )
    return {**geometry.to_dict(), "planes": [plane.to_dict() for plane in roof_planes(geometry)]}


@router.post("/plans/facade", response_model=FacadeResponse, tags=["facade"])
async def facade_endpoint(request: FacadeRequest) -> FacadeResponse:
    layout = facade_layout(_normalize(request.plan), request.direction)
    return FacadeResponse(
        direction=layout.direction,
        wall=layout.wall,
        facade_width_mm=layout.facade_width_mm,
        facade_depth_mm=layout.facade_depth_mm,
        building_top_mm=layout.building_top_mm,
        total_height_mm=layout.total_height_mm,
        roof_kind=layout.roof_kind,
        roof_rise_mm=layout.roof_rise_mm,
        roof_overhang_mm=layout.roof_overhang_mm,
        roof_width_mm=layout.roof_width_mm,
        ridge_position_mm=layout.ridge_position_mm,
        bands=[
            FacadeBandOut(
                level_key=band.level_key,
                name=band.name,
                elevation_mm=band.elevation_mm,
                wall_height_mm=band.wall_height_mm,
                top_mm=band.top_mm,
                openings=[opening.model_dump(mode="json", exclude_none=True) for opening in band.openings],
            )
            for band in layout.bands
        ],
        notes=layout.notes,
    )


__all__ = ["router"]

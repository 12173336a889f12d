"""FastAPI exception handlers for house-planner exceptions."""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

from houseplan.exceptions import (
    ConfigurationError,
    GeometryError,
    HousePlanError,
    LookupFailedError,
    PlanParseError,
    ValidationError,
)


def status_for(exc: HousePlanError) -> int:
    if isinstance(exc, (ConfigurationError, PlanParseError)):
        return 400
    if isinstance(exc, LookupFailedError):
        return 404
    if isinstance(exc, (ValidationError, GeometryError)):
        return 422
    return 500


async def houseplan_exception_handler(request: Request, exc: HousePlanError) -> JSONResponse:
    """Handle house-planner exceptions."""
    status_code = status_for(exc)

    logger.error(
        "House planner exception: {type} - {message}",
        type=type(exc).__name__,
        message=str(exc),
        details=exc.details,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )

"""Custom exception hierarchy for the house planner engine."""

from __future__ import annotations

from typing import Any


class HousePlanError(Exception):
    """Base exception for all house-planner errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(HousePlanError):
    """Raised when configuration is invalid or missing."""
    pass


class PlanParseError(HousePlanError):
    """Raised when raw input cannot be read as a JSON plan document."""
    pass


class ValidationError(HousePlanError):
    """Base class for validation errors."""
    pass


class PlanValidationError(ValidationError):
    """Raised by hard gates when a plan has validation errors.

    The complete error list is available in ``details["errors"]``.
    """

    def __init__(self, errors: list[str], message: str | None = None) -> None:
        super().__init__(message or f"Plan validation failed ({len(errors)} errors)", {"errors": list(errors)})
        self.errors = list(errors)


class GeometryError(HousePlanError):
    """Raised when geometry operations fail."""
    pass


class RoofGeometryError(GeometryError):
    """Raised when a roof cannot be solved for the requested footprint."""
    pass


class LookupFailedError(HousePlanError):
    """Base class for edit-session lookups that found nothing."""
    pass


class LevelNotFoundError(LookupFailedError):
    """Raised when a level id is not present in the plan."""
    pass


class BlockNotFoundError(LookupFailedError):
    """Raised when a block id is not present in the plan."""
    pass


class RoomNotFoundError(LookupFailedError):
    """Raised when a room id is not present on a level."""
    pass

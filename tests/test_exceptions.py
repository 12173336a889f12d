"""Tests for custom exception hierarchy."""

from houseplan.exceptions import (
    BlockNotFoundError,
    ConfigurationError,
    GeometryError,
    HousePlanError,
    LevelNotFoundError,
    LookupFailedError,
    PlanParseError,
    PlanValidationError,
    RoofGeometryError,
    RoomNotFoundError,
    ValidationError,
)


def test_houseplan_error_base():
    """Test base HousePlanError."""
    error = HousePlanError("Test error", {"key": "value"})
    assert str(error) == "Test error"
    assert error.message == "Test error"
    assert error.details == {"key": "value"}


def test_details_default_to_empty_dict():
    assert HousePlanError("x").details == {}


def test_configuration_error():
    """Test ConfigurationError."""
    error = ConfigurationError("Config missing", {"path": "config/default.yaml"})
    assert isinstance(error, HousePlanError)
    assert error.message == "Config missing"


def test_plan_parse_error():
    assert isinstance(PlanParseError("bad"), HousePlanError)


def test_plan_validation_error_carries_errors():
    """Test PlanValidationError keeps the complete list."""
    error = PlanValidationError(["first", "second"])
    assert isinstance(error, ValidationError)
    assert error.errors == ["first", "second"]
    assert error.details == {"errors": ["first", "second"]}
    assert error.message == "Plan validation failed (2 errors)"


def test_plan_validation_error_custom_message():
    error = PlanValidationError(["x"], "Roof could not be solved")
    assert str(error) == "Roof could not be solved"


def test_roof_geometry_error():
    error = RoofGeometryError("Ridge outside footprint")
    assert isinstance(error, GeometryError)
    assert isinstance(error, HousePlanError)


def test_lookup_errors():
    """Test edit-session lookup errors share a base."""
    for cls in (LevelNotFoundError, BlockNotFoundError, RoomNotFoundError):
        error = cls("missing", {"id": "x"})
        assert isinstance(error, LookupFailedError)
        assert error.details == {"id": "x"}

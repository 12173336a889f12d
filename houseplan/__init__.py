"""House planner engine.

Normalizes plan documents of every supported format version into one canonical
model, derives interior walls from room polygons, solves gable-roof geometry
and validates plans.
"""

from houseplan.exceptions import HousePlanError, PlanValidationError
from houseplan.model.schema import CanonicalPlan, DerivedWall, RoofSpec
from houseplan.normalize.normalizer import normalize_plan
from houseplan.roof.geometry import RoofGeometry, solve_gable_roof
from houseplan.roof.planes import RoofPlane, roof_planes
from houseplan.session import PlanSession
from houseplan.validate.plan_validator import require_valid, validate_plan
from houseplan.walls.derived import derive_walls, regenerate_all, regenerate_level, segment_key

__all__ = [
    "CanonicalPlan",
    "DerivedWall",
    "HousePlanError",
    "PlanSession",
    "PlanValidationError",
    "RoofGeometry",
    "RoofPlane",
    "RoofSpec",
    "derive_walls",
    "normalize_plan",
    "regenerate_all",
    "regenerate_level",
    "require_valid",
    "roof_planes",
    "segment_key",
    "solve_gable_roof",
    "validate_plan",
]

"""Command line entry point: normalize, validate, derive walls and solve roofs for plan files."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from loguru import logger

from houseplan.exceptions import HousePlanError, PlanParseError
from houseplan.logging_config import setup_logging
from houseplan.model.levels import iter_levels
from houseplan.model.schema import CanonicalPlan
from houseplan.normalize.normalizer import normalize_plan
from houseplan.roof.geometry import solve_gable_roof
from houseplan.settings import get_settings
from houseplan.validate.plan_validator import validate_plan
from houseplan.walls.derived import regenerate_all


def read_plan(path: Path) -> dict[str, Any]:
    """Read a JSON plan document, raising :class:`PlanParseError` for anything but a JSON object."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PlanParseError(f"Cannot read {path}: {exc}", {"path": str(path)}) from exc
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"Invalid JSON in {path}: {exc.msg}", {"path": str(path), "line": exc.lineno}) from exc
    if not isinstance(document, dict):
        raise PlanParseError(f"{path} does not contain a JSON object", {"path": str(path)})
    return document


def solve_plan_roofs(plan: CanonicalPlan) -> dict[str, Optional[dict[str, Any]]]:
    """Solve every roof of a plan, keyed by block id (``"roof"`` for the plan-level roof)."""
    levels = list(iter_levels(plan))
    solved: dict[str, Optional[dict[str, Any]]] = {}
    for block in (plan.blocks or []) if plan.is_blocks else []:
        roof = block.roof or plan.roof
        if roof is None:
            continue
        block_levels = [view for view in levels if view.block_id == block.id]
        footprint = block.footprint or next((view.footprint for view in block_levels if view.footprint), None)
        top = max((view.top_elevation_mm for view in block_levels), default=0.0)
        geometry = solve_gable_roof(
            roof,
            footprint.width if footprint else 0.0,
            footprint.depth if footprint else 0.0,
            top_elevation_mm=top,
        )
        solved[block.id] = geometry.to_dict() if geometry else None
    if not plan.is_blocks and plan.roof is not None:
        footprints = [view.footprint for view in levels if view.footprint is not None]
        geometry = solve_gable_roof(
            plan.roof,
            max((fp.width or 0.0 for fp in footprints), default=0.0),
            max((fp.depth or 0.0 for fp in footprints), default=0.0),
            top_elevation_mm=max((view.top_elevation_mm for view in levels), default=0.0),
        )
        solved["roof"] = geometry.to_dict() if geometry else None
    return solved


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False))
    sys.stdout.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="houseplan", description="Work with building plan JSON documents")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--log-level", default=None, help="Log level (default from configuration)")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("normalize", "Print the canonical form of a plan"),
        ("validate", "List validation errors; exits 1 when there are any"),
        ("walls", "Print derived interior walls per level"),
        ("roof", "Print solved gable-roof geometry"),
    ):
        command = sub.add_parser(name, help=help_text)
        command.add_argument("file", type=Path, help="Plan JSON file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings(str(args.config) if args.config else None)
    except HousePlanError as exc:
        setup_logging(level="ERROR")
        logger.error(exc.message)
        return 2
    setup_logging(level=args.log_level or settings.logging.level, json_format=settings.logging.json_format)
    grid = settings.engine.segment_snap_mm

    try:
        document = read_plan(args.file)
    except PlanParseError as exc:
        logger.error(exc.message)
        return 2

    plan = normalize_plan(document, **settings.engine.wall_defaults)
    if args.command == "normalize":
        regenerate_all(plan, grid_mm=grid)
        _emit(plan.to_document())
        return 0
    if args.command == "validate":
        errors = validate_plan(plan, grid_mm=grid)
        _emit({"valid": not errors, "errors": errors})
        if errors:
            logger.warning("Found {count} validation errors in {file}", count=len(errors), file=str(args.file))
            return 1
        return 0
    if args.command == "walls":
        walls = regenerate_all(plan, grid_mm=grid)
        _emit({key: [wall.model_dump(mode="json", by_alias=True) for wall in items] for key, items in walls.items()})
        return 0
    _emit(solve_plan_roofs(plan))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

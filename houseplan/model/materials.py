"""Default material library, per-category material assignment and wall rules."""

from __future__ import annotations

from typing import Any, Mapping

from houseplan.geometry.contract import (
    BETWEEN_UNITS_WALL_THICKNESS_MM,
    INTERIOR_WALL_THICKNESS_MM,
)

DEFAULT_MATERIAL_LIBRARY: list[dict[str, str]] = [
    {"id": "default_floor", "name": "Standard floor", "category": "floor", "color": "#d4a574"},
    {"id": "default_wall", "name": "Standard wall", "category": "wall", "color": "#c4b8a8"},
    {"id": "default_ceiling", "name": "Standard ceiling", "category": "ceiling", "color": "#e8e8e8"},
    {"id": "default_roof", "name": "Standard roof", "category": "roof", "color": "#8b4513"},
]

DEFAULT_MATERIALS: dict[str, str] = {
    "floor": "default_floor",
    "wall": "default_wall",
    "ceiling": "default_ceiling",
    "roof": "default_roof",
}

DEFAULT_WALL_RULES: dict[str, dict[str, float]] = {
    "interior": {"thicknessMm": INTERIOR_WALL_THICKNESS_MM},
    "betweenUnits": {"thicknessMm": BETWEEN_UNITS_WALL_THICKNESS_MM},
}


def merge_materials(materials: Mapping[str, Any] | None) -> dict[str, str]:
    """Default category assignment overlaid with the plan's own choices."""
    merged = dict(DEFAULT_MATERIALS)
    for category, material_id in (materials or {}).items():
        if material_id is None:
            continue
        merged[str(category)] = str(material_id)
    return merged


def merge_wall_rules(rules: Mapping[str, Any] | None) -> dict[str, dict[str, Any]]:
    merged: dict[str, dict[str, Any]] = {name: dict(rule) for name, rule in DEFAULT_WALL_RULES.items()}
    for name, rule in (rules or {}).items():
        if isinstance(rule, Mapping):
            merged[str(name)] = {**merged.get(str(name), {}), **rule}
    return merged


def material_library_or_default(library: Any) -> list[dict[str, Any]]:
    """The plan's library when it has entries, otherwise a copy of the default library."""
    if isinstance(library, list):
        records = [dict(item) for item in library if isinstance(item, Mapping) and item.get("id") is not None]
        if records:
            for record in records:
                record["id"] = str(record["id"])
            return records
    return [dict(item) for item in DEFAULT_MATERIAL_LIBRARY]

"""Normalization of any supported plan document into the canonical v1.0 model.

``normalize_plan`` is total: it never raises. Missing or malformed values are
coerced or defaulted (wall thickness 200 mm and height 2700 mm unless the
caller passes other defaults) and bad records are dropped, so that callers
always get a :class:`CanonicalPlan` back and the validator can report what is
wrong with it. Normalization is idempotent.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from shapely.geometry import MultiPoint

from houseplan.geometry.contract import (
    CANONICAL_VERSION,
    DEFAULT_WALL_HEIGHT_MM,
    DEFAULT_WALL_THICKNESS_MM,
)
from houseplan.model.materials import material_library_or_default, merge_materials, merge_wall_rules
from houseplan.model.schema import (
    AuthoredWall,
    Block,
    CanonicalPlan,
    DerivedWall,
    Floor,
    Footprint,
    Opening,
    RoofSpec,
    Room,
    Stair,
    Void,
)
from houseplan.normalize.formats import SourceFormat, detect_format

DEFAULT_FLOOR_NAME = "Ground floor"

# Top-level keys that are consumed by normalization and never copied verbatim
_TOP_LEVEL_KEYS = {
    "version", "units", "bodyKind", "body_kind", "defaults", "materialLibrary", "material_library",
    "floors", "blocks", "roof", "derived", "footprint", "wall", "openings", "rooms", "stairs",
    "voids", "walls", "levels", "buildings",
}


def _model_keys(model: type[BaseModel], *legacy: str) -> set[str]:
    keys: set[str] = set(legacy)
    for name, field in model.model_fields.items():
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return keys


def _num(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default


def _int(value: Any, default: Optional[int] = None) -> Optional[int]:
    number = _num(value)
    return int(number) if number is not None else default


def _text(value: Any, default: Optional[str] = None) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value)) if value.is_integer() else str(value)
    return default


def _lower(value: Any, default: Optional[str] = None) -> Optional[str]:
    text = _text(value)
    return text.strip().lower() if text is not None else default


def _mapping(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _records(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _extras(raw: Mapping[str, Any], consumed: Iterable[str]) -> dict[str, Any]:
    skip = set(consumed)
    return {key: value for key, value in raw.items() if isinstance(key, str) and key not in skip}


def _str_map(value: Any) -> dict[str, str]:
    result: dict[str, str] = {}
    for key, item in _mapping(value).items():
        text = _text(item)
        if text is not None:
            result[str(key)] = text
    return result


def _point(value: Any) -> Optional[list[float]]:
    if isinstance(value, Mapping):
        x, y = value.get("x"), value.get("y", value.get("z"))
    elif isinstance(value, (list, tuple)) and len(value) >= 2:
        x, y = value[0], value[1]
    else:
        return None
    return [_num(x, 0.0), _num(y, 0.0)]


def _polygon(value: Any) -> list[list[float]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [point for point in (_point(item) for item in value) if point is not None]


def _bbox_size(points: list[list[float]]) -> tuple[float, float]:
    minx, miny, maxx, maxy = MultiPoint([tuple(point) for point in points]).bounds
    return float(maxx - minx), float(maxy - miny)


# --- records ---------------------------------------------------------------

def _wall_spec(raw: Any, *, defaults: Optional[tuple[float, float]] = None) -> Optional[dict[str, Any]]:
    if not isinstance(raw, Mapping):
        if defaults is None:
            return None
        raw = {}
    thickness = _num(raw.get("thickness_mm"), _num(raw.get("thickness")))
    height = _num(raw.get("height_mm"), _num(raw.get("height")))
    if defaults is not None:
        thickness = defaults[0] if thickness is None else thickness
        height = defaults[1] if height is None else height
    return {
        "thickness_mm": thickness,
        "height_mm": height,
        **_extras(raw, {"thickness", "height", "thickness_mm", "height_mm"}),
    }


def _footprint(raw: Any) -> Optional[dict[str, Any]]:
    if not isinstance(raw, Mapping):
        return None
    polygon = _polygon(raw.get("polygon")) or None
    width = _num(raw.get("width"))
    depth = _num(raw.get("depth"))
    if polygon and (width is None or depth is None):
        box_width, box_depth = _bbox_size(polygon)
        width = box_width if width is None else width
        depth = box_depth if depth is None else depth
    return {
        "type": _text(raw.get("type")),
        "width": width,
        "depth": depth,
        "polygon": polygon,
        **_extras(raw, _model_keys(Footprint)),
    }


def _opening(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": _text(raw.get("id")),
        "type": _lower(raw.get("type")),
        "wall": _lower(raw.get("wall")),
        "wall_id": _text(raw.get("wall_id", raw.get("wallId"))),
        "at_mm": _num(raw.get("at_mm")),
        "offset": _num(raw.get("offset")),
        "width": _num(raw.get("width")),
        "height": _num(raw.get("height")),
        "sill": _num(raw.get("sill")),
        "swing": _text(raw.get("swing")),
        **_extras(raw, _model_keys(Opening, "wallId", "levelId")),
    }


def _room(raw: Mapping[str, Any], room_id: str) -> dict[str, Any]:
    return {
        "id": room_id,
        "name": _text(raw.get("name")),
        "polygon": _polygon(raw.get("polygon")),
        "floor_finish": _text(raw.get("floor_finish")),
        "ceiling_height_mm": _num(raw.get("ceiling_height_mm")),
        "wall_thickness_mm": _num(raw.get("wall_thickness_mm")),
        "unitId": _text(raw.get("unitId", raw.get("unit_id"))),
        "materials": _str_map(raw.get("materials")),
        **_extras(raw, _model_keys(Room, "levelId")),
    }


def _rooms(items: Any) -> list[dict[str, Any]]:
    """Rooms of one level. A missing id becomes ``R<position>``, or the next free ``R<n>``."""
    records = _records(items)
    taken = {_text(item.get("id")) for item in records} - {None, ""}
    rooms = []
    for index, item in enumerate(records):
        room_id = _text(item.get("id"))
        if not room_id:
            n = index + 1
            while f"R{n}" in taken:
                n += 1
            room_id = f"R{n}"
            taken.add(room_id)
        rooms.append(_room(item, room_id))
    return rooms


def _authored_wall(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": _text(raw.get("id")),
        "path": _polygon(raw.get("path")),
        "thickness_mm": _num(raw.get("thickness_mm"), _num(raw.get("thickness"))),
        **_extras(raw, _model_keys(AuthoredWall, "thickness")),
    }


def _stair(raw: Mapping[str, Any]) -> dict[str, Any]:
    polygon = _polygon(raw.get("polygon")) if "polygon" in raw else None
    return {
        "id": _text(raw.get("id")),
        "fromLevelId": _text(raw.get("fromLevelId", raw.get("from_level_id"))),
        "toLevelId": _text(raw.get("toLevelId", raw.get("to_level_id"))),
        "rise_mm": _num(raw.get("rise_mm")),
        "run_mm": _num(raw.get("run_mm")),
        "riser_count": _int(raw.get("riser_count")),
        "tread_mm": _num(raw.get("tread_mm")),
        "polygon": polygon,
        **_extras(raw, _model_keys(Stair)),
    }


def _void(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": _text(raw.get("id")),
        "polygon": _polygon(raw.get("polygon")),
        **_extras(raw, _model_keys(Void, "levelId")),
    }


def _floor(raw: Mapping[str, Any], index: int) -> dict[str, Any]:
    return {
        "id": _text(raw.get("id")) or f"f{index}",
        "name": _text(raw.get("name")),
        "level": _int(raw.get("level"), index),
        "elevation_mm": _num(raw.get("elevation_mm"), _num(raw.get("elevation"), 0.0)),
        "heightMm": _num(raw.get("heightMm", raw.get("height_mm"))),
        "footprint": _footprint(raw.get("footprint")),
        "wall": _wall_spec(raw.get("wall")),
        "openings": [_opening(item) for item in _records(raw.get("openings"))],
        "rooms": _rooms(raw.get("rooms")),
        "stairs": [_stair(item) for item in _records(raw.get("stairs"))],
        "voids": [_void(item) for item in _records(raw.get("voids"))],
        "walls": [_authored_wall(item) for item in _records(raw.get("walls"))],
        **_extras(raw, _model_keys(Floor, "elevation")),
    }


def _roof(raw: Any) -> Optional[dict[str, Any]]:
    if not isinstance(raw, Mapping):
        return None
    return {
        "type": _lower(raw.get("type")),
        "pitch_degrees": _num(raw.get("pitch_degrees")),
        "overhang_mm": _num(raw.get("overhang_mm")),
        "thickness_mm": _num(raw.get("thickness_mm")),
        "ridge_direction": _lower(raw.get("ridge_direction"), "x"),
        "ridge_offset_mm": _num(raw.get("ridge_offset_mm"), 0.0),
        "ridge_mode": _lower(raw.get("ridge_mode"), "equal_pitch"),
        **_extras(raw, _model_keys(RoofSpec)),
    }


def _block(raw: Mapping[str, Any], index: int) -> dict[str, Any]:
    position = _mapping(raw.get("position"))
    return {
        "id": _text(raw.get("id")) or f"B{index + 1}",
        "name": _text(raw.get("name")),
        "position": {
            "x": _num(position.get("x"), 0.0),
            "z": _num(position.get("z"), _num(position.get("y"), 0.0)),
        },
        "footprint": _footprint(raw.get("footprint")),
        "wall": _wall_spec(raw.get("wall")),
        "floors": [_floor(item, i) for i, item in enumerate(_records(raw.get("floors")))],
        "roof": _roof(raw.get("roof")),
        "materials": _str_map(raw.get("materials")),
        **_extras(raw, _model_keys(Block)),
    }


def normalize_roof(raw: Any) -> Optional[RoofSpec]:
    """Coerce a raw roof record; ``None`` when it is not a mapping."""
    data = _roof(raw)
    return RoofSpec.model_validate(data) if data is not None else None


# --- document --------------------------------------------------------------

def _defaults(document: Mapping[str, Any], wall: tuple[float, float]) -> dict[str, Any]:
    raw = _mapping(document.get("defaults"))
    rules: dict[str, Any] = {}
    for name, rule in merge_wall_rules(_mapping(raw.get("wallRules"))).items():
        rules[name] = {
            "thicknessMm": _num(rule.get("thicknessMm"), _num(rule.get("thickness_mm"))),
            **_extras(rule, {"thicknessMm", "thickness_mm"}),
        }
    return {
        "wall": _wall_spec(raw.get("wall"), defaults=wall),
        "materials": merge_materials(_str_map(raw.get("materials"))),
        "wallRules": rules,
        **_extras(raw, {"wall", "materials", "wallRules", "wall_rules"}),
    }


def _material_library(document: Mapping[str, Any]) -> list[dict[str, Any]]:
    library = []
    for record in material_library_or_default(document.get("materialLibrary")):
        library.append({
            **record,
            "name": _text(record.get("name")),
            "category": _text(record.get("category")),
            "color": _text(record.get("color")),
        })
    return library


def _derived(document: Mapping[str, Any]) -> dict[str, Any]:
    walls_by_level: dict[str, list[dict[str, Any]]] = {}
    raw = _mapping(_mapping(document.get("derived")).get("wallsByLevel"))
    for key, walls in raw.items():
        kept = []
        for wall in _records(walls):
            try:
                kept.append(DerivedWall.model_validate(wall).model_dump(by_alias=True))
            except PydanticValidationError:
                logger.debug("Dropping malformed derived wall on level {key}", key=key)
        walls_by_level[str(key)] = kept
    return {"wallsByLevel": walls_by_level}


def _single_floor(document: Mapping[str, Any]) -> dict[str, Any]:
    """Wrap a bare-footprint document into the synthetic floor ``f0``."""
    return _floor(
        {
            "id": "f0",
            "name": DEFAULT_FLOOR_NAME,
            "level": 0,
            "elevation_mm": 0,
            "footprint": document.get("footprint"),
            "wall": document.get("wall"),
            "openings": document.get("openings"),
            "rooms": document.get("rooms"),
            "stairs": document.get("stairs"),
            "voids": document.get("voids"),
            "walls": document.get("walls"),
        },
        0,
    )


def _level_records(items: Any, level_id: str) -> list[dict[str, Any]]:
    return [dict(item) for item in _records(items) if _text(item.get("levelId")) == level_id]


def _building_floors(building: Mapping[str, Any], levels: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    footprints = {_text(fp.get("levelId")): fp for fp in _records(building.get("footprints"))}
    floors = []
    for index, level in enumerate(levels):
        level_id = _text(level.get("id")) or f"L{index}"
        outline = footprints.get(level_id)
        stairs = [
            dict(stair)
            for stair in _records(building.get("stairs"))
            if _text(stair.get("fromLevelId")) == level_id
            or (stair.get("fromLevelId") is None and _text(stair.get("toLevelId")) == level_id)
        ]
        floors.append(_floor(
            {
                **_extras(level, {"id", "elevation", "elevation_mm"}),
                "id": level_id,
                "level": level.get("level", index),
                "elevation_mm": level.get("elevation_mm", level.get("elevation", 0)),
                "footprint": {"type": "polygon", "polygon": outline.get("polygon")} if outline else None,
                "wall": outline.get("outerWall") if outline else None,
                "rooms": _level_records(building.get("rooms"), level_id),
                "openings": _level_records(building.get("openings"), level_id),
                "stairs": stairs,
                "voids": _level_records(building.get("voids"), level_id),
            },
            index,
        ))
    return floors


def _building_footprint(floors: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
    points = [point for floor in floors for point in ((floor.get("footprint") or {}).get("polygon") or [])]
    if not points:
        return None
    width, depth = _bbox_size(points)
    return {"type": "rect", "width": width, "depth": depth, "polygon": None}


def _rooms_first(document: Mapping[str, Any]) -> tuple[Optional[list], Optional[list], Any]:
    """v0.5: ``levels[]`` + ``buildings[]``; one building becomes floors, several become blocks."""
    levels = list(_records(document.get("levels")))
    buildings = list(_records(document.get("buildings")))
    roof = document.get("roof")
    if len(buildings) <= 1:
        building = buildings[0] if buildings else {}
        return _building_floors(building, levels), None, building.get("roof", roof)
    blocks = []
    for index, building in enumerate(buildings):
        floors = _building_floors(building, levels)
        blocks.append(_block(
            {
                **_extras(building, {"footprints", "rooms", "openings", "stairs", "voids", "derived", "floors"}),
                "footprint": _building_footprint(floors),
            },
            index,
        ) | {"floors": floors})
    return None, blocks, roof


def _empty_plan(wall: tuple[float, float], units: Optional[str] = None) -> CanonicalPlan:
    return CanonicalPlan.model_validate({
        "version": CANONICAL_VERSION,
        "units": units,
        "bodyKind": "floors",
        "defaults": _defaults({}, wall),
        "materialLibrary": _material_library({}),
        "floors": [],
    })


def normalize_plan(
    document: Any,
    *,
    wall_thickness_mm: float = DEFAULT_WALL_THICKNESS_MM,
    wall_height_mm: float = DEFAULT_WALL_HEIGHT_MM,
) -> CanonicalPlan:
    """Normalize any supported document (or an existing canonical plan).

    ``wall_thickness_mm`` and ``wall_height_mm`` fill ``defaults.wall`` when the
    document does not set them.
    """
    wall = (float(wall_thickness_mm), float(wall_height_mm))
    if isinstance(document, CanonicalPlan):
        document = document.to_document()
    if not isinstance(document, Mapping):
        logger.warning("Plan document is not an object ({kind}); using an empty plan", kind=type(document).__name__)
        return _empty_plan(wall)

    source = detect_format(document)
    floors: Optional[list] = None
    blocks: Optional[list] = None
    roof = document.get("roof")

    if source is SourceFormat.V05:
        floors, blocks, roof = _rooms_first(document)
    elif source in (SourceFormat.V04, SourceFormat.V1) and _records(document.get("blocks")):
        blocks = [_block(item, i) for i, item in enumerate(_records(document.get("blocks")))]
        if _records(document.get("floors")):
            logger.warning("Plan has both blocks and floors; blocks are authoritative, floors dropped")
    elif isinstance(document.get("floors"), list):
        floors = [_floor(item, i) for i, item in enumerate(_records(document.get("floors")))]
    elif isinstance(document.get("footprint"), Mapping):
        floors = [_single_floor(document)]
    else:
        logger.warning("Unrecognised plan document (format={source}); defaulting to an empty body", source=source.value)
        floors = []

    payload = {
        **_extras(document, _TOP_LEVEL_KEYS),
        "version": CANONICAL_VERSION,
        "units": _text(document.get("units")),
        "bodyKind": "blocks" if blocks is not None else "floors",
        "defaults": _defaults(document, wall),
        "materialLibrary": _material_library(document),
        "floors": floors,
        "blocks": blocks,
        "roof": _roof(roof),
        "derived": _derived(document),
    }
    try:
        plan = CanonicalPlan.model_validate(payload)
    except PydanticValidationError as exc:
        logger.warning("Plan could not be normalized ({count} field errors); using an empty plan", count=exc.error_count())
        return _empty_plan(wall, _text(document.get("units")))

    logger.debug(
        "Normalized plan from {source} into {body} body ({levels} levels)",
        source=source.value,
        body=plan.body_kind,
        levels=sum(len(block.floors) for block in plan.blocks or []) + len(plan.floors or []),
    )
    return plan


__all__ = ["DEFAULT_FLOOR_NAME", "normalize_plan", "normalize_roof"]

"""Tests for the houseplan command line interface."""

import json
from pathlib import Path

import pytest

from houseplan.cli import main, read_plan
from houseplan.exceptions import PlanParseError
from tests.utils_plans import two_block_plan, two_room_plan


def _write(tmp_path: Path, document, name="plan.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_validate_valid_plan(tmp_path, capsys):
    path = _write(tmp_path, two_room_plan())

    assert main(["validate", str(path)]) == 0
    assert json.loads(capsys.readouterr().out) == {"valid": True, "errors": []}


def test_validate_invalid_plan_exits_non_zero(tmp_path, capsys):
    path = _write(tmp_path, two_room_plan(footprint={"width": 0, "depth": 6000}))

    assert main(["validate", str(path)]) == 1
    output = json.loads(capsys.readouterr().out)
    assert output["valid"] is False
    assert output["errors"]


def test_normalize_prints_canonical_plan(tmp_path, capsys):
    path = _write(tmp_path, {"units": "mm", "footprint": {"width": 8000, "depth": 6000}})

    assert main(["normalize", str(path)]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["version"] == "1.0"
    assert output["floors"][0]["id"] == "f0"


def test_walls_command(tmp_path, capsys):
    path = _write(tmp_path, two_room_plan())

    assert main(["walls", str(path)]) == 0
    output = json.loads(capsys.readouterr().out)
    assert [wall["roomIds"] for wall in output["f0"]] == [["A", "B"]]


def test_roof_command_for_floors(tmp_path, capsys):
    path = _write(tmp_path, two_room_plan())

    assert main(["roof", str(path)]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["roof"]["topElevationMm"] == 2700
    assert output["roof"]["sides"]["north"]["riseMm"] == pytest.approx(3000 * 0.7002075, abs=0.1)


def test_roof_command_for_blocks(tmp_path, capsys):
    path = _write(tmp_path, two_block_plan())

    assert main(["roof", str(path)]) == 0
    output = json.loads(capsys.readouterr().out)
    assert set(output) == {"A", "B"}


def test_non_json_file_exits_with_parse_error(tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    assert main(["validate", str(path)]) == 2
    assert capsys.readouterr().out == ""


def test_read_plan_rejects_non_objects(tmp_path):
    path = _write(tmp_path, [1, 2, 3])

    with pytest.raises(PlanParseError):
        read_plan(path)


def test_read_plan_rejects_missing_file(tmp_path):
    with pytest.raises(PlanParseError):
        read_plan(tmp_path / "absent.json")


def test_config_file_changes_wall_defaults(tmp_path, capsys):
    config = tmp_path / "houseplan.yaml"
    config.write_text("engine:\n  default_wall_thickness_mm: 300\n  default_wall_height_mm: 3100\n", encoding="utf-8")
    path = _write(tmp_path, {"units": "mm", "footprint": {"width": 8000, "depth": 6000}})

    assert main(["--config", str(config), "normalize", str(path)]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["defaults"]["wall"] == {"thickness_mm": 300, "height_mm": 3100}

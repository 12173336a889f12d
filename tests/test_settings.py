"""Tests for YAML settings loading."""

from pathlib import Path

import pytest

pytest.importorskip("yaml")

from houseplan.exceptions import ConfigurationError
from houseplan.settings import Settings, get_settings


def test_missing_file_gives_defaults(tmp_path: Path):
    settings = Settings.load(tmp_path / "absent.yaml")

    assert settings.engine.segment_snap_mm == 5
    assert settings.edit.snap_grid_mm == 100
    assert settings.edit.snap_distance_mm == 120
    assert settings.engine.default_wall_height_mm == 2700


def test_yaml_values_override_defaults(tmp_path: Path):
    config = tmp_path / "config.yaml"
    config.write_text("edit:\n  snap_grid_mm: 50\napi:\n  title: Test API\n", encoding="utf-8")

    settings = Settings.load(config)

    assert settings.edit.snap_grid_mm == 50
    assert settings.edit.snap_distance_mm == 120
    assert settings.api.title == "Test API"


def test_invalid_values_raise_configuration_error(tmp_path: Path):
    config = tmp_path / "config.yaml"
    config.write_text("engine:\n  segment_snap_mm: -1\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as excinfo:
        Settings.load(config)

    assert excinfo.value.details["path"] == str(config)


def test_non_mapping_root_is_rejected(tmp_path: Path):
    config = tmp_path / "config.yaml"
    config.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        Settings.load(config)


def test_broken_yaml_is_rejected(tmp_path: Path):
    config = tmp_path / "config.yaml"
    config.write_text("engine: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        Settings.load(config)


def test_environment_variable_selects_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    config = tmp_path / "env.yaml"
    config.write_text("engine:\n  segment_snap_mm: 10\n", encoding="utf-8")
    monkeypatch.setenv("HOUSEPLAN_CONFIG", str(config))

    assert Settings.load().engine.segment_snap_mm == 10


def test_get_settings_is_cached(tmp_path: Path):
    config = str(tmp_path / "absent.yaml")
    get_settings.cache_clear()
    try:
        assert get_settings(config) is get_settings(config)
    finally:
        get_settings.cache_clear()


def test_cors_origins_include_loopback_variant():
    settings = Settings(api={"ui_origin": "http://localhost:3001", "extra_origins": "https://plans.example.org"})

    assert settings.api.cors_origins == [
        "http://127.0.0.1:3001",
        "http://localhost:3001",
        "https://plans.example.org",
    ]


def test_shipped_default_config_is_valid():
    config = Path(__file__).resolve().parent.parent / "config" / "default.yaml"

    settings = Settings.load(config)

    assert settings.engine.segment_snap_mm == 5
    assert settings.logging.level == "INFO"


def test_wall_defaults_feed_normalizer_keywords(tmp_path: Path):
    config = tmp_path / "config.yaml"
    config.write_text("engine:\n  default_wall_thickness_mm: 240\n", encoding="utf-8")

    assert Settings.load(config).engine.wall_defaults == {"wall_thickness_mm": 240, "wall_height_mm": 2700}

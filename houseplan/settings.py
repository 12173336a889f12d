from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from houseplan.exceptions import ConfigurationError
from houseplan.geometry.contract import (
    DEFAULT_WALL_HEIGHT_MM,
    DEFAULT_WALL_THICKNESS_MM,
    EDIT_SNAP_DISTANCE_MM,
    EDIT_SNAP_GRID_MM,
    SEGMENT_SNAP_MM,
)

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

DEFAULT_CONFIG_PATH = Path("config/default.yaml")


class EngineSettings(BaseModel):
    segment_snap_mm: float = Field(SEGMENT_SNAP_MM, gt=0.0)
    default_wall_thickness_mm: float = Field(DEFAULT_WALL_THICKNESS_MM, gt=0.0)
    default_wall_height_mm: float = Field(DEFAULT_WALL_HEIGHT_MM, gt=0.0)

    @property
    def wall_defaults(self) -> dict[str, float]:
        """Keyword arguments for ``normalize_plan``."""
        return {
            "wall_thickness_mm": self.default_wall_thickness_mm,
            "wall_height_mm": self.default_wall_height_mm,
        }


class EditSettings(BaseModel):
    snap_grid_mm: float = Field(EDIT_SNAP_GRID_MM, gt=0.0)
    snap_distance_mm: float = Field(EDIT_SNAP_DISTANCE_MM, ge=0.0)


class ApiSettings(BaseModel):
    title: str = "House Planner API"
    ui_origin: str = "http://localhost:3000"
    extra_origins: list[str] = Field(default_factory=list)

    @field_validator("extra_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def cors_origins(self) -> list[str]:
        origins = {self.ui_origin, *self.extra_origins}
        if "localhost" in self.ui_origin:
            origins.add(self.ui_origin.replace("localhost", "127.0.0.1"))
        elif "127.0.0.1" in self.ui_origin:
            origins.add(self.ui_origin.replace("127.0.0.1", "localhost"))
        return sorted(origins)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False
    file: str | None = None


class Settings(BaseModel):
    engine: EngineSettings = Field(default_factory=EngineSettings)
    edit: EditSettings = Field(default_factory=EditSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from a YAML configuration file.

        Args:
            path: Optional path to the configuration file. If not provided, uses
                the HOUSEPLAN_CONFIG environment variable or config/default.yaml.

        Returns:
            Settings instance. A missing file yields the built-in defaults.

        Raises:
            ConfigurationError: If the file cannot be parsed or fails validation.
        """
        config_path = path or Path(os.getenv("HOUSEPLAN_CONFIG", str(DEFAULT_CONFIG_PATH)))
        if not config_path.exists():
            return cls()
        try:
            with config_path.open("r", encoding="utf-8") as fp:
                payload = yaml.safe_load(fp) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}", {"path": str(config_path)}) from exc
        if not isinstance(payload, dict):
            raise ConfigurationError("Configuration root must be a mapping", {"path": str(config_path)})
        try:
            return cls(**payload)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}", {"path": str(config_path)}) from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "ApiSettings",
    "EditSettings",
    "EngineSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]

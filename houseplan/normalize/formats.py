"""Structural detection of the historical plan document formats."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


class SourceFormat(str, Enum):
    """Known document shapes, newest first."""
    V1 = "v1"  # explicit version "1.x", floors[] or blocks[]
    V05 = "v0.5"  # rooms-first: levels[] + buildings[]
    V04 = "v0.4"  # blocks[] (multi-wing)
    V03 = "v0.3"  # floors[] + roof
    V02 = "v0.2"  # floors[] with wall and openings
    V0 = "v0"  # bare footprint
    UNKNOWN = "unknown"


def _version(document: Mapping[str, Any]) -> str:
    version = document.get("version")
    if version is None or isinstance(version, bool):
        return ""
    return str(version).strip()


def detect_format(document: Any) -> SourceFormat:
    """Classify a raw document; the first matching signature wins."""
    if not isinstance(document, Mapping):
        return SourceFormat.UNKNOWN
    version = _version(document)
    if version.startswith("1"):
        return SourceFormat.V1
    if version.startswith("0.5"):
        return SourceFormat.V05
    blocks = document.get("blocks")
    if isinstance(blocks, list) and blocks:
        return SourceFormat.V04
    if isinstance(document.get("floors"), list):
        return SourceFormat.V03 if document.get("roof") else SourceFormat.V02
    if isinstance(document.get("footprint"), Mapping):
        return SourceFormat.V0
    return SourceFormat.UNKNOWN

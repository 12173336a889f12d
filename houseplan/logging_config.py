"""loguru sinks for the engine, the CLI and the API.

Console output is colored text by default. With ``json_format`` every record
is written as one JSON object per line, with bound and keyword ``extra`` values
merged into the top level.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

LOG_ROTATION = "10 MB"
LOG_RETENTION = "7 days"

_PAYLOAD_KEY = "json_line"


def _payload(record: dict[str, Any]) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "location": f"{record['function']}:{record['line']}",
        "message": record["message"],
    }
    error = record["exception"]
    if error is not None and error.type is not None:
        payload["error"] = {"type": error.type.__name__, "message": str(error.value)}
    payload.update((key, value) for key, value in record["extra"].items() if key != _PAYLOAD_KEY)
    return payload


class JSONFormatter:
    """Callable loguru format that renders a record as one JSON line."""

    def __call__(self, record: dict[str, Any]) -> str:
        # the returned string is itself a template, so the JSON goes through extra
        record["extra"][_PAYLOAD_KEY] = json.dumps(_payload(record), ensure_ascii=False, default=str)
        return "{extra[" + _PAYLOAD_KEY + "]}\n"


def setup_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: Path | None = None,
) -> None:
    """Replace every loguru sink with a stderr sink and, optionally, a rotating file.

    Args:
        level: Minimum level name for both sinks.
        json_format: Write JSON lines instead of colored text.
        log_file: File for the second sink; parent directories are created.
    """
    logger.remove()
    fmt: Any = JSONFormatter() if json_format else TEXT_FORMAT

    logger.add(sys.stderr, format=fmt, level=level, colorize=not json_format)
    if log_file is None:
        return

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        format=fmt,
        level=level,
        rotation=LOG_ROTATION,
        retention=LOG_RETENTION,
        compression="zip",
    )

"""
Logging setup for polyarb.

config/logging.yaml is applied with dictConfig when present. Without it,
local runs get a readable single-line format and any other environment
(POLYARB_ENV != local) gets one JSON object per line.
"""

import json
import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

ROOT_LOGGER = "polyarb"
TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonLinesFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _default_config_path() -> Optional[Path]:
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent / "config" / "logging.yaml"
    return None


def _apply_yaml_config(path: Path) -> None:
    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    for handler in config.get("handlers", {}).values():
        if "filename" in handler:
            Path(handler["filename"]).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(config)


def _apply_basic_config(env: str, level: int) -> None:
    handler = logging.StreamHandler(sys.stdout)
    if env == "local":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(JsonLinesFormatter())

    logging.basicConfig(level=level, handlers=[handler], force=True)
    for noisy in ("httpx", "httpcore", "apscheduler"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Configure logging for a CLI run.

    Args:
        config_path: Path to logging.yaml. Defaults to config/logging.yaml
            next to pyproject.toml.
        log_level: Level for the polyarb loggers. Falls back to $LOG_LEVEL.
    """
    env = os.getenv("POLYARB_ENV", "local")
    level_name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    path = Path(config_path) if config_path else _default_config_path()
    if path is not None and path.exists():
        _apply_yaml_config(path)
    else:
        _apply_basic_config(env, level)

    logging.getLogger(ROOT_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the polyarb namespace."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class LoggerMixin:
    """Gives a class a `logger` named after it."""

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger

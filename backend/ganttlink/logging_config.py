"""
Logging configuration for ganttlink.

Two audiences read these logs: someone at a terminal watching drags get
resolved, and a log pipeline. The first gets colored lines, the second one
JSON object per line. Engine modules (ganttlink.services) resolve every
drag frame, so their level can be turned up or down on its own with
GANTTLINK_ENGINE_LOG_LEVEL without touching the API logs.
"""

import json
import logging
import sys
from typing import Optional

from ganttlink.config import get_settings

ENGINE_LOGGER = "ganttlink.services"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

RESET = "\x1b[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\x1b[38;20m",
    logging.INFO: "\x1b[32;20m",
    logging.WARNING: "\x1b[33;20m",
    logging.ERROR: "\x1b[31;20m",
    logging.CRITICAL: "\x1b[31;1m",
}

# Attributes passed through `extra=` that are worth keeping in JSON output
CONTEXT_FIELDS = ("task_id",)


class ColoredFormatter(logging.Formatter):
    """Colors the whole line by level."""

    def __init__(self):
        super().__init__(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record):
        line = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{RESET}" if color else line


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with the task a record is about when known."""

    def format(self, record):
        log_record = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def _level(name: Optional[str], default: int) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    engine_level: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, emit JSON lines instead of colored text
        engine_level: Level for the constraint engine; defaults to level
    """
    settings = get_settings()

    numeric_level = _level(level or settings.log_level, logging.DEBUG if settings.debug else logging.INFO)
    engine_numeric_level = _level(engine_level or settings.engine_log_level, numeric_level)
    if json_format is None:
        json_format = settings.log_json

    root_logger = logging.getLogger()
    root_logger.setLevel(min(numeric_level, engine_numeric_level))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter() if json_format else ColoredFormatter())
    root_logger.addHandler(console_handler)

    # Silence noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("ganttlink").setLevel(numeric_level)
    logging.getLogger(ENGINE_LOGGER).setLevel(engine_numeric_level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the shared 'ganttlink' parent.

    Usage:
        logger = get_logger(__name__)
    """
    if not name.startswith("ganttlink"):
        name = f"ganttlink.{name}"
    return logging.getLogger(name)

"""
Centralized Logging

Architectural Intent:
- One place that configures the `dockhand` logger tree for the CLI
- Human-readable lines by default, JSON lines with --json-logs
- Records carrying a deployment_id (the audit log) keep it in both formats
"""

import json
import logging
import sys
from datetime import datetime, UTC
from typing import Union

LOGGER_NAME = "dockhand"
HUMAN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _deployment_id(record: logging.LogRecord) -> str:
    return getattr(record, "deployment_id", "") or ""


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if _deployment_id(record):
            entry["deployment_id"] = _deployment_id(record)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class HumanFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(HUMAN_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        deployment_id = _deployment_id(record)
        return f"{line} [{deployment_id}]" if deployment_id else line


def parse_level(name: str) -> int:
    """Maps a level name from config to a logging level, WARNING if unknown."""
    return LEVELS.get(str(name).strip().upper(), logging.WARNING)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    json_format: bool = False,
) -> logging.Logger:
    """Route the `dockhand` logger tree to stderr.

    Args:
        level: A logging level or a level name such as "info".
        json_format: Emit JSON lines instead of human-readable text.

    Calling it again replaces the previous handler.
    """
    if isinstance(level, str):
        level = parse_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    logger.addHandler(handler)
    return logger

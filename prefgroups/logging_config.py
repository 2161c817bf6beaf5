"""
Logging setup for the prefgroups command line.

Format: 2026-01-06T14:05:52Z [prefgroups] LEVEL message

Environment Variables:
    LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING" or "ERROR"

Library modules only call get_logger(__name__); configure_logging is
called once by the CLI.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

SOURCE = "prefgroups"


class ISO8601Formatter(logging.Formatter):
    """Formatter producing UTC ISO8601 timestamps and a fixed source tag."""

    def __init__(self, source: str = SOURCE):
        self.source = source
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{timestamp} [{self.source}] {record.levelname} {message}"


def _level_from_env() -> int:
    name = os.getenv("LOG_LEVEL", "").upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[int] = None, verbose: bool = False) -> logging.Logger:
    """Install a single stderr handler on the root logger and return it.

    Args:
        level: Explicit logging level; wins over everything else
        verbose: Use DEBUG when no explicit level is given

    Returns:
        Configured root logger
    """
    if level is None:
        level = logging.DEBUG if verbose else _level_from_env()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter())
    root_logger.addHandler(handler)

    # matplotlib is chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name."""
    return logging.getLogger(name)

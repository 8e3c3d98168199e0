"""
Logging utilities for skillhub.

Every module logs through a child of the ``skillhub`` logger so the CLI
(or a host process embedding the package manager) configures output in one
place. httpx logs one INFO line per request; those are only shown when
skillhub itself runs at DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

LOG_LEVEL_ENV_VAR = "SKILLHUB_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Loggers of the HTTP stack, kept quiet unless debugging
_HTTP_LOGGERS = ("httpx", "httpcore")

_root_logger = logging.getLogger("skillhub")


def _to_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: str | int | None = None,
    format: str | None = None,
    stream: TextIO | None = None,
    file: str | None = None,
) -> None:
    """
    Configure the ``skillhub`` logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Log level name or int. ``None`` reads ``$SKILLHUB_LOG_LEVEL``
            and falls back to WARNING.
        format: Custom log format string
        stream: Output stream (defaults to stderr)
        file: Optional file path to also write logs to

    Example:
        from skillhub.logging import setup_logging

        setup_logging("DEBUG")
        setup_logging("INFO", file="skillhub.log")
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING")
    level = _to_level(level)

    _root_logger.setLevel(level)
    _root_logger.handlers.clear()
    _root_logger.propagate = False

    formatter = logging.Formatter(format or DEFAULT_FORMAT)

    stream_handler = logging.StreamHandler(stream or sys.stderr)
    stream_handler.setFormatter(formatter)
    _root_logger.addHandler(stream_handler)

    if file:
        file_handler = logging.FileHandler(file)
        file_handler.setFormatter(formatter)
        _root_logger.addHandler(file_handler)

    http_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger for a submodule.

    Args:
        name: Submodule name (e.g., "hub.client", "hub.install")

    Returns:
        Logger instance
    """
    if name.startswith("skillhub."):
        return logging.getLogger(name)
    return logging.getLogger(f"skillhub.{name}")

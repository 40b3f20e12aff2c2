"""Structured logging utilities.

Service lines follow ``Event | key=value | key=value`` so a planning session
can be followed with grep: upload, parse summary, then one line per query.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from backend.utils.config import get_settings


_LOGGER_INITIALIZED = False

FIELD_SEPARATOR = " | "


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once, at ``HOTEL_PLANNING_LOG_LEVEL``."""

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)


def _format_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(_format_value(item) for item in value)
    # Keep the separator unambiguous inside free-text values.
    return str(value).replace("|", "/")


def format_event(event: str, **fields: Any) -> str:
    """Render one event line; fields keep their keyword order."""
    parts = [event]
    parts.extend(f"{key}={_format_value(value)}" for key, value in fields.items())
    return FIELD_SEPARATOR.join(parts)


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    if logger.isEnabledFor(level):
        logger.log(level, format_event(event, **fields))

"""Logging utilities for agentry."""

from __future__ import annotations

import logging
import os
import traceback
from typing import Final

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_LEVEL_ENV_VAR: Final[str] = "AGENTRY_LOG_LEVEL"
_LEVELS: Final[dict[str, int]] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure application logging.

    Args:
        level: Logging level name (e.g., "INFO", "DEBUG"). Falls back to the
            ``AGENTRY_LOG_LEVEL`` environment variable, then INFO.
        fmt: Optional logging format string. Defaults to a pipe-separated format.
    """

    resolved = level or os.getenv(LOG_LEVEL_ENV_VAR) or "INFO"
    logging.basicConfig(
        level=normalize_level(resolved),
        format=fmt or DEFAULT_LOG_FORMAT,
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module or component."""

    return logging.getLogger(name)


def normalize_level(level: str) -> int:
    """Translate a level name into a logging constant, defaulting to INFO."""

    normalized = level.strip().upper()
    return _LEVELS.get(normalized, logging.INFO)


def format_traceback_entries(exception: BaseException, limit: int = 10) -> list[str]:
    """Return up to ``limit`` rendered traceback entries for an exception.

    Entries start at the frame that raised and walk outwards, one string per
    frame. Repeated frames are listed individually. An exception that was
    never raised has no traceback and yields an empty list.
    """

    tb = exception.__traceback__
    if tb is None:
        return []
    frames = traceback.extract_tb(tb)[::-1][:limit]
    return [_format_frame(frame) for frame in frames]


def _format_frame(frame: traceback.FrameSummary) -> str:
    entry = f'File "{frame.filename}", line {frame.lineno}, in {frame.name}'
    if frame.line:
        entry = f"{entry}\n    {frame.line.strip()}"
    return entry

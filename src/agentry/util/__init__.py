"""Utility helpers package."""

from agentry.util.logging import (
    configure_logging,
    format_traceback_entries,
    get_logger,
    normalize_level,
)

__all__ = [
    "configure_logging",
    "format_traceback_entries",
    "get_logger",
    "normalize_level",
]

"""
Central logging configuration for callboard.

Owns the colour console handler, keeps HTTP and PDF libraries quiet, and stamps
an export id on every record so all log lines of one export can be correlated.
"""

import contextlib
import contextvars
import logging
import os
import sys
import uuid
from collections.abc import Iterator
from typing import Optional

from colorlog import ColoredFormatter

NO_EXPORT_ID = "no-export-id"

_export_id: contextvars.ContextVar[str] = contextvars.ContextVar("callboard_export_id", default=NO_EXPORT_ID)

# Libraries that log request and font details at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "reportlab")

_LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def get_export_id() -> str:
    return _export_id.get()


@contextlib.contextmanager
def export_context(export_id: Optional[str] = None) -> Iterator[str]:
    """Tag log records emitted inside the block with an export id."""
    token = _export_id.set(export_id or uuid.uuid4().hex[:8])
    try:
        yield _export_id.get()
    finally:
        _export_id.reset(token)


class ExportIdFilter(logging.Filter):
    """Add the current export id to all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.export_id = get_export_id()
        return True


def debug_requested() -> bool:
    """True when CALLBOARD_DEBUG holds 1, true, yes or on."""
    return os.getenv("CALLBOARD_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


def console_handler() -> logging.Handler:
    """Colour stderr handler; only the level name is coloured."""
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(
        ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s [%(export_id)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
            log_colors=_LEVEL_COLORS,
        )
    )
    handler.addFilter(ExportIdFilter())
    return handler


def configure_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for callboard.

    Args:
        debug_mode: Whether to enable debug logging for callboard modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        CALLBOARD_DEBUG: Truthy value forces debug logging
        CALLBOARD_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    if force_debug is not None:
        final_debug = force_debug
    else:
        final_debug = debug_mode or debug_requested()

    root_level = logging.DEBUG if final_debug else logging.INFO
    env_log_level = os.getenv("CALLBOARD_LOG_LEVEL", "").upper()
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    if not root_logger.handlers:
        root_logger.addHandler(console_handler())
    for handler in root_logger.handlers:
        if not any(isinstance(f, ExportIdFilter) for f in handler.filters):
            handler.addFilter(ExportIdFilter())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    # Submodules inherit from the package logger
    logging.getLogger("callboard").setLevel(logging.DEBUG if final_debug else logging.INFO)

    if final_debug:
        root_logger.info("Debug logging enabled for callboard modules")

"""
Root logger setup for the dbcompare command line.

Records go to stderr, and optionally to a rotating file; stdout carries
nothing but comparison results.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

from .formatters import ConsoleFormatter, JSONFormatter

LOG_FILE_MAX_BYTES = 20 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Third-party loggers that flood DEBUG output
QUIET_LOGGERS = ("mysql.connector", "opentelemetry")

_installed: list[logging.Handler] = []


def _file_handler(log_file: str, json_format: bool) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
    )
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter(use_colors=False))
    return handler


def setup_logging(level: str = "INFO", log_file: str | None = None, json_format: bool = False) -> None:
    """
    Route every dbcompare logger through the root logger.

    Args:
        level: Level name; unknown names fall back to INFO
        log_file: Also append records to this file, rotated by size
        json_format: One JSON object per record instead of text lines
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(numeric_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    _installed.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    _installed.append(console)
    if log_file:
        _installed.append(_file_handler(log_file, json_format))

    for handler in _installed:
        root.addHandler(handler)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging at {logging.getLevelName(numeric_level)}, file={log_file}")


def shutdown_logging() -> None:
    """Flush and detach the handlers setup_logging installed."""
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

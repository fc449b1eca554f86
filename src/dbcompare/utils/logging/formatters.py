"""
Text and JSON renderings of log records.

Fields passed through `extra=` (table_name, strategy, ...) are kept in
both: appended as key=value pairs on text lines, nested under "context"
in JSON.
"""

import json
import logging
import sys
from datetime import UTC, datetime

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> dict:
    """Fields a caller attached to the record with extra=."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.pathname}:{record.lineno}",
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        context = record_context(record)
        if context:
            entry["context"] = context
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    `time [LEVEL] logger: message [key=value, ...]`

    The level name is coloured only when asked for and stderr is a terminal.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stderr.isatty()

    def formatMessage(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        if color is None:
            line = super().formatMessage(record)
        else:
            plain = record.levelname
            record.levelname = f"{color}{plain}{self.RESET}"
            try:
                line = super().formatMessage(record)
            finally:
                record.levelname = plain

        context = record_context(record)
        if context:
            line += " [" + ", ".join(f"{key}={value}" for key, value in context.items()) + "]"
        return line

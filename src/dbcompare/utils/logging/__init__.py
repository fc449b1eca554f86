"""
Logging setup for the dbcompare command line.

Usage:
    from dbcompare.utils.logging import setup_logging, shutdown_logging

    setup_logging(level="INFO", log_file="/var/log/dbcompare/run.log")
    try:
        ...
    finally:
        shutdown_logging()

Modules log through `logging.getLogger(__name__)`; context passed with
`extra={"table_name": ...}` is rendered by both formatters.
"""

from .config import setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
]

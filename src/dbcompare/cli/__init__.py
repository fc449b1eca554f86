"""
Command-line interface for database drift comparison.

Available commands:
- tables: List the tables selected by a configuration
- run: Compare two databases table by table
"""

import logging
import sys

from ..exceptions import DbCompareError
from ..utils.logging import setup_logging, shutdown_logging
from ..utils.tracing import initialize_tracing, shutdown_tracing
from .commands import EXIT_DRIFT, EXIT_FAILURE, EXIT_OK, cmd_run, cmd_tables
from .parser import create_parser

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the dbcompare CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file, json_format=args.log_json)
    if args.trace:
        initialize_tracing(console_export=True)

    try:
        if args.command == 'run':
            return cmd_run(args)
        elif args.command == 'tables':
            return cmd_tables(args)
        else:
            parser.print_help()
            return EXIT_FAILURE
    except DbCompareError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    finally:
        shutdown_tracing()
        shutdown_logging()


__all__ = [
    'EXIT_DRIFT',
    'EXIT_FAILURE',
    'EXIT_OK',
    'cmd_run',
    'cmd_tables',
    'create_parser',
    'main',
]


if __name__ == '__main__':
    sys.exit(main())

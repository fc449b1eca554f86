"""
Command-line argument parser configuration.

This module sets up the argument parser for the dbcompare CLI tool,
defining all commands and their options.
"""

import argparse

from ..strategies import NewRowsSource, Strategy


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='dbcompare',
        description="Detect data drift between two SQL databases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the tables a configuration selects, with their metadata
  dbcompare tables --config compare.json

  # Rows added or removed, keyed by id
  dbcompare run --config compare.json --strategy unique --first restore --second live

  # Rows of the second database newer than the first's latest write_date
  dbcompare run --config compare.json --strategy max --column write_date --pretty

  # Rows committed after the first database's latest commit (PostgreSQL)
  dbcompare run --config compare.json --strategy commit-ts --continue-on-error

Exit status: 0 no drift, 1 drift found, 2 error or cancelled run.
        """
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )
    parser.add_argument(
        '--log-json',
        action='store_true',
        help='Write logs as JSON lines'
    )
    parser.add_argument(
        '--log-file',
        help='Also write logs to this file (rotated)'
    )
    parser.add_argument(
        '--trace',
        action='store_true',
        help='Export OpenTelemetry spans to stderr'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ========== Tables command ==========
    tables_parser = subparsers.add_parser('tables', help='List the tables selected for comparison')
    tables_parser.add_argument(
        '--config',
        required=True,
        help='JSON configuration file'
    )
    tables_parser.add_argument(
        '--pretty',
        action='store_true',
        help='Indent JSON output (default: prettyJSON from the configuration)'
    )

    # ========== Run command ==========
    run_parser = subparsers.add_parser('run', help='Compare two databases table by table')
    run_parser.add_argument(
        '--config',
        required=True,
        help='JSON configuration file'
    )
    run_parser.add_argument(
        '--strategy',
        choices=[s.value for s in Strategy],
        required=True,
        help='Diff strategy applied to every table'
    )
    run_parser.add_argument(
        '--first',
        help='Reference database (default: defaultDBConnection)'
    )
    run_parser.add_argument(
        '--second',
        help='Compared database (default: the first other configured database)'
    )
    run_parser.add_argument(
        '--column',
        default='id',
        help='Key column (unique) or watermark column (max) (default: id)'
    )
    run_parser.add_argument(
        '--wrap',
        action='store_true',
        help='Compare and bind column values as text'
    )
    run_parser.add_argument(
        '--new-rows-from',
        choices=[s.value for s in NewRowsSource],
        default=NewRowsSource.FIRST.value,
        help='Database new rows are read from with the unique strategy (default: first)'
    )
    run_parser.add_argument(
        '--id-limit',
        type=int,
        help='Read at most this many keys per side with the unique strategy'
    )
    run_parser.add_argument(
        '--continue-on-error',
        action='store_true',
        help='Continue with remaining tables if one fails'
    )
    run_parser.add_argument(
        '--pretty',
        action='store_true',
        help='Indent JSON output (default: prettyJSON from the configuration)'
    )
    run_parser.add_argument(
        '--output',
        help='Write results to this file instead of stdout'
    )
    run_parser.add_argument(
        '--metrics-file',
        help='Write Prometheus metrics to this file after the run'
    )

    return parser

"""
CLI command implementations.

This module contains the implementation of the CLI commands:
- tables: List the tables selected by a configuration
- run: Compare two databases with one strategy
"""

import argparse
import dataclasses
import logging
import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

from ..backends import connect
from ..config import ErrorPolicy, load_config
from ..introspection import introspect_tables
from ..orchestrator import Comparison
from ..report import JsonLinesSink, format_summary_console
from ..strategies import NewRowsSource, Strategy, StrategySelector
from ..utils.metrics import write_metrics

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DRIFT = 1
EXIT_FAILURE = 2


@contextmanager
def _output_stream(path: str | None) -> Iterator[TextIO]:
    if path is None:
        yield sys.stdout
        return
    with open(path, 'w', encoding='utf-8') as f:
        yield f


@contextmanager
def _cancel_on_sigint(event: threading.Event) -> Iterator[None]:
    """Turn Ctrl-C into a cancellation checked between tables."""

    def handle(signum, frame):
        logger.warning("Interrupt received, stopping after the current table")
        event.set()

    previous = signal.signal(signal.SIGINT, handle)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def cmd_tables(args: argparse.Namespace) -> int:
    """
    Print the descriptors of the tables a configuration selects

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit status
    """
    config = load_config(args.config)
    spec = config.database()

    handle = connect(spec, query_timeout=config.query_timeout)
    try:
        descriptors = introspect_tables(handle.adapter, handle, config)
    finally:
        handle.close()

    sink = JsonLinesSink(sys.stdout, pretty=args.pretty or config.pretty_json)
    for descriptor in descriptors:
        sink.emit_descriptor(descriptor)
    return EXIT_OK


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run a comparison between two databases

    Args:
        args: Parsed command-line arguments

    Returns:
        EXIT_OK when no table drifted, EXIT_DRIFT when one did,
        EXIT_FAILURE when a table failed or the run was cancelled
    """
    config = load_config(args.config)
    if args.continue_on_error:
        config = dataclasses.replace(config, on_error=ErrorPolicy.SKIP)

    handler = StrategySelector(
        strategy=Strategy(args.strategy),
        first=args.first,
        second=args.second,
        column=args.column,
        wrap=args.wrap,
        new_rows_from=NewRowsSource(args.new_rows_from),
        id_limit=args.id_limit,
    )
    # Fail on unknown database names before connecting to anything
    for name in (args.first, args.second):
        if name:
            config.database(name)

    logger.info(f"Starting comparison with strategy {handler.strategy.value}")

    cancel_event = threading.Event()
    with _cancel_on_sigint(cancel_event), _output_stream(args.output) as stream:
        sink = JsonLinesSink(stream, pretty=args.pretty or config.pretty_json)
        summary = Comparison(config, handler, sink=sink, cancel_event=cancel_event).run()

    print(format_summary_console(summary.to_dict()), file=sys.stderr)

    if args.metrics_file:
        write_metrics(args.metrics_file)

    if not summary.ok:
        return EXIT_FAILURE
    return EXIT_DRIFT if summary.changed else EXIT_OK

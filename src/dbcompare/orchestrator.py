"""
Comparison orchestration.

Opens every configured database, enumerates the candidate tables of the
default database, and calls a table handler for each table in order.

Example:
    >>> config = load_config("compare.json")
    >>> handler = StrategySelector(Strategy.MAX, column="write_date")
    >>> with Comparison(config, handler, sink=JsonLinesSink()) as comparison:
    ...     summary = comparison.run()
"""

import logging
import threading
import time
from collections.abc import Callable, Mapping
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Protocol

from .backends import get_adapter, open_handles
from .backends.base import BackendHandle
from .config import CompareConfig, ConnectionSpec, ErrorPolicy
from .exceptions import QueryError
from .introspection import TableDescriptor, introspect_tables
from .strategies.results import ComparisonResult, RowSet, SetDiff
from .utils.metrics import DIFF_ROWS_TOTAL, TABLES_TOTAL
from .utils.tracing import trace_operation

logger = logging.getLogger(__name__)


class ResultSink(Protocol):
    """Receives the result of every table that changed."""

    def emit(self, table: str, result: ComparisonResult) -> None: ...


class CompareSession:
    """What a table handler can reach during a run: config and open handles."""

    def __init__(self, config: CompareConfig, handles: Mapping[str, BackendHandle]):
        self.config = config
        self._handles = dict(handles)

    @property
    def default_database(self) -> str:
        return self.config.default_database

    @property
    def handles(self) -> Mapping[str, BackendHandle]:
        return dict(self._handles)

    def handle(self, name: str | None = None) -> BackendHandle:
        """Open handle of a configured database (default: defaultDBConnection)."""
        spec = self.config.database(name)
        return self._handles[spec.name]

    def spec(self, name: str | None = None) -> ConnectionSpec:
        return self.config.database(name)


TableHandler = Callable[[TableDescriptor, CompareSession], ComparisonResult | None]


@dataclass
class RunSummary:
    """Outcome of one comparison run."""

    tables_total: int = 0
    compared: int = 0
    changed: int = 0
    failed: dict[str, str] = field(default_factory=dict)
    cancelled: bool = False
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed and not self.cancelled

    def to_dict(self) -> dict[str, Any]:
        return {
            "tables_total": self.tables_total,
            "compared": self.compared,
            "changed": self.changed,
            "failed": dict(self.failed),
            "cancelled": self.cancelled,
            "duration_seconds": round(self.duration_seconds, 3),
        }


def _record_diff_rows(result: ComparisonResult) -> None:
    if isinstance(result, SetDiff):
        DIFF_ROWS_TOTAL.labels(kind="deleted").inc(result.deleted.count)
        DIFF_ROWS_TOTAL.labels(kind="new").inc(result.new.count)
    elif isinstance(result, RowSet):
        DIFF_ROWS_TOTAL.labels(kind="rows").inc(result.count)


class Comparison:
    """
    One comparison run over the tables of the default database.

    Used as a context manager, handles are opened and tables introspected
    on entry and every handle is closed on exit. run() outside a `with`
    block does both around a single run.

    Args:
        config: Comparison configuration
        handler: Called as handler(descriptor, session) for every table
        sink: Receives every non-empty result
        cancel_event: When set, the run stops before the next table
    """

    def __init__(
        self,
        config: CompareConfig,
        handler: TableHandler,
        *,
        sink: ResultSink | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.config = config
        self.handler = handler
        self.sink = sink
        self.cancel_event = cancel_event or threading.Event()
        self._stack: ExitStack | None = None
        self._session: CompareSession | None = None
        self._tables: list[TableDescriptor] = []

    def __enter__(self) -> "Comparison":
        stack = ExitStack()
        try:
            handles = stack.enter_context(
                open_handles(self.config.databases.values(), query_timeout=self.config.query_timeout)
            )
            default_handle = handles[self.config.default_database]
            with trace_operation("introspect", db_name=default_handle.name):
                self._tables = introspect_tables(
                    get_adapter(default_handle.dialect), default_handle, self.config
                )
        except BaseException:
            stack.close()
            raise

        self._stack = stack
        self._session = CompareSession(self.config, handles)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._stack is not None:
            self._stack.close()
        self._stack = None
        self._session = None

    @property
    def tables(self) -> list[TableDescriptor]:
        self._require_open()
        return list(self._tables)

    @property
    def session(self) -> CompareSession:
        self._require_open()
        return self._session

    def _require_open(self) -> None:
        if self._session is None:
            raise RuntimeError("Comparison is not open; use it as a context manager")

    def run(self) -> RunSummary:
        """
        Call the handler for every table, in introspection order.

        Returns:
            RunSummary of the run

        Raises:
            QueryError: If a table fails and the error policy is ABORT
        """
        if self._session is None:
            with self:
                return self._run()
        return self._run()

    compare = run

    def _run(self) -> RunSummary:
        summary = RunSummary(tables_total=len(self._tables))
        policy = ErrorPolicy(self.config.on_error)
        start = time.monotonic()

        try:
            for descriptor in self._tables:
                if self.cancel_event.is_set():
                    logger.warning(f"Comparison cancelled after {summary.compared} table(s)")
                    summary.cancelled = True
                    break

                table = descriptor.table_name
                try:
                    with trace_operation("compare_table", table=table):
                        result = self.handler(descriptor, self._session)
                except QueryError as e:
                    TABLES_TOTAL.labels(status="failed").inc()
                    if policy == ErrorPolicy.ABORT:
                        logger.error(f"Comparison of {table} failed, aborting: {e}")
                        raise
                    logger.error(f"Comparison of {table} failed, skipping: {e}")
                    summary.failed[table] = str(e)
                    continue

                summary.compared += 1
                if not result:
                    TABLES_TOTAL.labels(status="unchanged").inc()
                    logger.debug(f"{table}: no difference")
                    continue

                summary.changed += 1
                TABLES_TOTAL.labels(status="changed").inc()
                _record_diff_rows(result)
                logger.info(f"{table}: difference found")
                if self.sink is not None:
                    self.sink.emit(table, result)
        finally:
            summary.duration_seconds = time.monotonic() - start

        logger.info(
            f"Comparison finished: {summary.compared}/{summary.tables_total} compared, "
            f"{summary.changed} changed, {len(summary.failed)} failed"
        )
        return summary

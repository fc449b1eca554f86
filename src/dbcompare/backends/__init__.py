"""
Backend adapters for the supported SQL dialects.

The registry is a plain mapping from Dialect to adapter instance; adding a
backend means implementing BackendAdapter and adding an entry here.
"""

import logging
from collections.abc import Iterable, Iterator
from contextlib import ExitStack, contextmanager

from ..config import ConnectionSpec
from ..exceptions import BackendConnectionError
from ..utils.dialect import Dialect
from .base import NOT_FOUND, BackendAdapter, BackendHandle, DbApiAdapter, ResultSet, single_column_values
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlserver import SQLServerAdapter
from .statement import Statement, StatementBuilder

logger = logging.getLogger(__name__)

BACKENDS: dict[Dialect, BackendAdapter] = {
    Dialect.POSTGRES: PostgresAdapter(),
    Dialect.MYSQL: MySQLAdapter(),
    Dialect.SQLSERVER: SQLServerAdapter(),
}


def get_adapter(dialect: Dialect | str) -> BackendAdapter:
    """
    Look up the adapter for a dialect.

    Raises:
        BackendConnectionError: If no adapter is registered for the dialect
    """
    adapter = BACKENDS.get(dialect)
    if adapter is None:
        raise BackendConnectionError(f"No backend registered for dialect {dialect!r}", dialect=str(dialect))
    return adapter


def connect(spec: ConnectionSpec, *, query_timeout: float | None = None) -> BackendHandle:
    """Open a handle for a configured database through its dialect's adapter."""
    try:
        adapter = get_adapter(spec.dialect)
    except BackendConnectionError as e:
        e.name = spec.name
        raise
    return adapter.connect(spec, query_timeout=query_timeout)


@contextmanager
def open_handles(
    specs: Iterable[ConnectionSpec],
    *,
    query_timeout: float | None = None,
) -> Iterator[dict[str, BackendHandle]]:
    """
    Open one handle per spec, closing all of them on exit.

    Handles opened before a failing connect are closed before the error
    propagates.

    Yields:
        Mapping of database name to handle
    """
    with ExitStack() as stack:
        handles: dict[str, BackendHandle] = {}
        for spec in specs:
            handle = connect(spec, query_timeout=query_timeout)
            stack.callback(handle.close)
            handles[spec.name] = handle
        yield handles


__all__ = [
    "BACKENDS",
    "NOT_FOUND",
    "BackendAdapter",
    "BackendHandle",
    "DbApiAdapter",
    "MySQLAdapter",
    "PostgresAdapter",
    "ResultSet",
    "SQLServerAdapter",
    "Statement",
    "StatementBuilder",
    "connect",
    "get_adapter",
    "open_handles",
    "single_column_values",
]

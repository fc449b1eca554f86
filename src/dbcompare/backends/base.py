"""
Backend adapter protocol and the DB-API implementation shared by all dialects.

An adapter opens connections for one dialect and runs statements on them.
Each dialect module only supplies the driver-specific parts: how to open a
connection, which exceptions the driver raises, and the catalog schema.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from opentelemetry import trace

from ..config import ConnectionSpec
from ..exceptions import BackendConnectionError, QueryError
from ..utils.dialect import Dialect
from ..utils.metrics import QUERIES_TOTAL, QUERY_DURATION
from ..utils.tracing import trace_operation

logger = logging.getLogger(__name__)

Params = Mapping[str, Any] | Sequence[Any] | None


class _NotFound:
    """Sentinel type for a single-value query that returned no row."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


# Distinct from None, which is a legitimate NULL value
NOT_FOUND = _NotFound()


@dataclass
class ResultSet:
    """Open cursor over the rows of one executed statement."""

    cursor: Any
    columns: tuple[str, ...] = ()

    def close(self) -> None:
        self.cursor.close()

    def __enter__(self) -> "ResultSet":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


@dataclass(eq=False)
class BackendHandle:
    """
    Live connection to one configured database.

    The handle remembers the adapter that opened it, so strategies can run
    statements without knowing the dialect.
    """

    spec: ConnectionSpec
    adapter: "BackendAdapter"
    connection: Any = field(repr=False)
    closed: bool = False

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def dialect(self) -> Dialect:
        return self.spec.dialect

    @property
    def schema(self) -> str:
        """Catalog schema this database's tables are listed and read from."""
        return self.adapter.catalog_schema(self.spec)

    def execute(self, sql: str, params: Params = None) -> ResultSet:
        return self.adapter.execute(self, sql, params)

    def query_single_value(self, sql: str, params: Params = None) -> Any:
        return self.adapter.query_single_value(self, sql, params)

    def query_all_rows(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        return self.adapter.query_all_rows(self, sql, params)

    def close(self) -> None:
        self.adapter.close(self)


@runtime_checkable
class BackendAdapter(Protocol):
    """Operations every dialect backend provides."""

    dialect: Dialect

    def connect(self, spec: ConnectionSpec, *, query_timeout: float | None = None) -> BackendHandle: ...

    def close(self, handle: BackendHandle) -> None: ...

    def execute(self, handle: BackendHandle, sql: str, params: Params = None) -> ResultSet: ...

    def fetch_indexed(self, result_set: ResultSet) -> tuple | None: ...

    def fetch_named(self, result_set: ResultSet) -> dict[str, Any] | None: ...

    def fetch_all(self, result_set: ResultSet) -> list[dict[str, Any]]: ...

    def query_single_value(self, handle: BackendHandle, sql: str, params: Params = None) -> Any: ...

    def query_all_rows(self, handle: BackendHandle, sql: str, params: Params = None) -> list[dict[str, Any]]: ...

    def catalog_schema(self, spec: ConnectionSpec) -> str: ...


class DbApiAdapter(ABC):
    """
    Base class for DB-API 2.0 backed adapters.

    Subclasses implement _open_connection(), _driver_errors() and
    catalog_schema(). Connections are opened in autocommit mode so a failed
    statement never leaves the connection in an aborted transaction.
    """

    dialect: Dialect

    @abstractmethod
    def _open_connection(self, spec: ConnectionSpec, query_timeout: float | None) -> Any:
        """Open a driver connection with autocommit on and the timeout applied."""
        pass

    @abstractmethod
    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        """Exception types raised by the driver."""
        pass

    @abstractmethod
    def catalog_schema(self, spec: ConnectionSpec) -> str:
        """Schema whose tables are enumerated and compared."""
        pass

    def _cursor(self, connection: Any) -> Any:
        return connection.cursor()

    def connect(self, spec: ConnectionSpec, *, query_timeout: float | None = None) -> BackendHandle:
        """
        Open a connection for a configured database.

        Args:
            spec: Connection definition
            query_timeout: Per-statement timeout in seconds (None for server default)

        Returns:
            BackendHandle bound to this adapter

        Raises:
            BackendConnectionError: If the driver cannot connect
        """
        with trace_operation(
            f"{self.dialect.value}_connect",
            kind=trace.SpanKind.CLIENT,
            db_system=self.dialect.value,
            db_name=spec.name,
        ):
            try:
                connection = self._open_connection(spec, query_timeout)
            except self._driver_errors() as e:
                raise BackendConnectionError(
                    f"Cannot connect to {spec.name} ({self.dialect.value}): {e}",
                    name=spec.name,
                    dialect=self.dialect.value,
                ) from e

        logger.info(f"Connected to {spec.name} ({self.dialect.value})")
        return BackendHandle(spec=spec, adapter=self, connection=connection)

    def close(self, handle: BackendHandle) -> None:
        """Close a handle; closing twice is a no-op."""
        if handle.closed:
            return
        handle.closed = True
        try:
            handle.connection.close()
        except self._driver_errors() as e:
            logger.warning(f"Error closing connection to {handle.name}: {e}")
        logger.debug(f"Closed connection to {handle.name}")

    def execute(self, handle: BackendHandle, sql: str, params: Params = None) -> ResultSet:
        """
        Execute a statement and return its open result set.

        Raises:
            QueryError: If the handle is closed or the driver rejects the statement
        """
        if handle.closed:
            raise QueryError(sql, params, RuntimeError(f"connection to {handle.name} is closed"))

        dialect = self.dialect.value
        start = time.perf_counter()

        with trace_operation("db_query", kind=trace.SpanKind.CLIENT, db_system=dialect, db_name=handle.name):
            cursor = self._cursor(handle.connection)
            try:
                if params is None:
                    cursor.execute(sql)
                else:
                    cursor.execute(sql, params)
            except self._driver_errors() as e:
                cursor.close()
                QUERIES_TOTAL.labels(dialect=dialect, status="error").inc()
                logger.debug(f"Statement failed on {handle.name}: {sql}")
                raise QueryError(sql, params, e) from e
            finally:
                QUERY_DURATION.labels(dialect=dialect).observe(time.perf_counter() - start)

        QUERIES_TOTAL.labels(dialect=dialect, status="ok").inc()
        columns = tuple(column[0] for column in cursor.description) if cursor.description else ()
        return ResultSet(cursor=cursor, columns=columns)

    def fetch_indexed(self, result_set: ResultSet) -> tuple | None:
        row = result_set.cursor.fetchone()
        return None if row is None else tuple(row)

    def fetch_named(self, result_set: ResultSet) -> dict[str, Any] | None:
        row = result_set.cursor.fetchone()
        return None if row is None else dict(zip(result_set.columns, row))

    def fetch_all(self, result_set: ResultSet) -> list[dict[str, Any]]:
        return [dict(zip(result_set.columns, row)) for row in result_set.cursor.fetchall()]

    def query_single_value(self, handle: BackendHandle, sql: str, params: Params = None) -> Any:
        """First column of the first row, or NOT_FOUND when there is no row."""
        with self.execute(handle, sql, params) as result_set:
            row = self.fetch_indexed(result_set)
        return NOT_FOUND if row is None else row[0]

    def query_all_rows(self, handle: BackendHandle, sql: str, params: Params = None) -> list[dict[str, Any]]:
        with self.execute(handle, sql, params) as result_set:
            return self.fetch_all(result_set)


def single_column_values(rows: Sequence[Mapping[str, Any]], column: str | None = None) -> list[Any]:
    """
    Collapse rows to the values of one column.

    Args:
        rows: Rows as returned by query_all_rows()
        column: Column to read; the first column of each row when None

    Returns:
        List of values in row order
    """
    if column is not None:
        return [row[column] for row in rows]
    return [next(iter(row.values())) for row in rows if row]

"""
Statements issued by the diff strategies.

Each helper builds one statement (or one per IN-list batch) for the
handle's dialect and runs it. Values are always bound, and tables are
qualified with the handle's catalog schema so they resolve to the tables
introspection listed.
"""

from collections.abc import Iterable
from typing import Any

from ..backends.base import NOT_FOUND, BackendHandle, single_column_values
from ..backends.statement import StatementBuilder, in_batches


def _from(builder: StatementBuilder, handle: BackendHandle, table: str) -> str:
    return builder.table(table, handle.schema)


def fetch_column_values(handle: BackendHandle, table: str, column: str, limit: int | None = None) -> list[Any]:
    """Values of one column, optionally capped at `limit` rows."""
    builder = StatementBuilder(handle.dialect)
    limit_placeholder = None if limit is None else builder.bind(limit)
    sql = handle.dialect.limited_select(builder.ident(column), _from(builder, handle, table), limit_placeholder)
    statement = builder.build(sql)
    return single_column_values(handle.query_all_rows(statement.sql, statement.params))


def fetch_rows_where_in(
    handle: BackendHandle,
    table: str,
    column: str,
    values: Iterable[Any],
    as_text: bool = False,
) -> list[dict[str, Any]]:
    """Rows whose `column` is one of `values`, fetched in IN-list batches."""
    rows: list[dict[str, Any]] = []
    for batch in in_batches(values, handle.dialect, as_text):
        builder = StatementBuilder(handle.dialect)
        predicate = builder.in_predicate(builder.ident(column), batch, as_text)
        statement = builder.build(f"SELECT * FROM {_from(builder, handle, table)} WHERE {predicate}")
        rows.extend(handle.query_all_rows(statement.sql, statement.params))
    return rows


def fetch_all_rows(handle: BackendHandle, table: str) -> list[dict[str, Any]]:
    builder = StatementBuilder(handle.dialect)
    statement = builder.build(f"SELECT * FROM {_from(builder, handle, table)}")
    return handle.query_all_rows(statement.sql, statement.params)


def count_rows(handle: BackendHandle, table: str) -> int:
    builder = StatementBuilder(handle.dialect)
    statement = builder.build(f"SELECT count(*) FROM {_from(builder, handle, table)}")
    count = handle.query_single_value(statement.sql, statement.params)
    return int(count or 0)


def fetch_rows_from_offset(handle: BackendHandle, table: str, offset: int) -> list[dict[str, Any]]:
    """Rows of an unordered scan after skipping the first `offset`."""
    builder = StatementBuilder(handle.dialect)
    clause = handle.dialect.offset_clause(builder.bind(offset))
    statement = builder.build(f"SELECT * FROM {_from(builder, handle, table)} {clause}")
    return handle.query_all_rows(statement.sql, statement.params)


def max_value(handle: BackendHandle, table: str, column: str) -> Any:
    """max(column), or None for an empty table or an all-NULL column."""
    builder = StatementBuilder(handle.dialect)
    statement = builder.build(f"SELECT max({builder.ident(column)}) FROM {_from(builder, handle, table)}")
    value = handle.query_single_value(statement.sql, statement.params)
    return None if value is NOT_FOUND else value


def fetch_rows_above(handle: BackendHandle, table: str, column: str, bound: Any) -> list[dict[str, Any]]:
    builder = StatementBuilder(handle.dialect)
    statement = builder.build(
        f"SELECT * FROM {_from(builder, handle, table)} WHERE {builder.ident(column)} > {builder.bind(bound)}"
    )
    return handle.query_all_rows(statement.sql, statement.params)


def fetch_rows_not_null(handle: BackendHandle, table: str, column: str) -> list[dict[str, Any]]:
    """Rows with any value in `column`."""
    builder = StatementBuilder(handle.dialect)
    statement = builder.build(
        f"SELECT * FROM {_from(builder, handle, table)} WHERE {builder.ident(column)} IS NOT NULL"
    )
    return handle.query_all_rows(statement.sql, statement.params)


def commit_timestamp_enabled(handle: BackendHandle) -> bool:
    """Whether the server records commit timestamps (PostgreSQL)."""
    builder = StatementBuilder(handle.dialect)
    statement = builder.build(f"SELECT current_setting({builder.bind('track_commit_timestamp')})")
    setting = handle.query_single_value(statement.sql, statement.params)
    return str(setting).lower() == "on"


def max_commit_timestamp(handle: BackendHandle, table: str) -> Any:
    """Latest commit timestamp of the table's live rows, or None."""
    builder = StatementBuilder(handle.dialect)
    statement = builder.build(f"SELECT max(pg_xact_commit_timestamp(xmin)) FROM {_from(builder, handle, table)}")
    value = handle.query_single_value(statement.sql, statement.params)
    return None if value is NOT_FOUND else value


def fetch_rows_committed_after(handle: BackendHandle, table: str, timestamp: Any) -> list[dict[str, Any]]:
    builder = StatementBuilder(handle.dialect)
    statement = builder.build(
        f"SELECT * FROM {_from(builder, handle, table)}"
        f" WHERE pg_xact_commit_timestamp(xmin) > {builder.bind(timestamp)}"
    )
    return handle.query_all_rows(statement.sql, statement.params)

"""Schema introspection: enumerate the tables a comparison visits."""

import logging

from opentelemetry import trace

from ..backends.base import BackendAdapter, BackendHandle, single_column_values
from ..config import CompareConfig
from ..utils.tracing import trace_operation
from .models import TableDescriptor
from .query import build_column_names_query, build_tables_query

logger = logging.getLogger(__name__)


def introspect_tables(
    adapter: BackendAdapter,
    handle: BackendHandle,
    config: CompareConfig,
) -> list[TableDescriptor]:
    """
    Enumerate candidate tables of a database.

    Applies the include/exclude filters and collects the column count,
    column presence flags and column names the configuration asks for.

    Args:
        adapter: Adapter that opened the handle
        handle: Open handle to the introspected database
        config: Comparison configuration

    Returns:
        Descriptors ordered by table name

    Raises:
        QueryError: If a catalog query fails
    """
    schema = adapter.catalog_schema(handle.spec)
    statement = build_tables_query(config, handle.dialect, schema)

    with trace_operation("introspect_tables", kind=trace.SpanKind.CLIENT, db_name=handle.name, schema=schema):
        rows = adapter.query_all_rows(handle, statement.sql, statement.params)

    descriptors = [TableDescriptor.from_row(row, config.has_columns) for row in rows]

    if config.include_column_names:
        descriptors = attach_column_names(adapter, handle, descriptors, schema)

    logger.info(f"Found {len(descriptors)} table(s) in {handle.name} (schema {schema})")
    return descriptors


def attach_column_names(
    adapter: BackendAdapter,
    handle: BackendHandle,
    descriptors: list[TableDescriptor],
    schema: str,
) -> list[TableDescriptor]:
    """Return copies of the descriptors carrying their sorted column names."""
    attached = []
    for descriptor in descriptors:
        statement = build_column_names_query(handle.dialect, schema, descriptor.table_name)
        rows = adapter.query_all_rows(handle, statement.sql, statement.params)
        attached.append(descriptor.with_column_names(single_column_values(rows, "column_name")))
    return attached

"""
Watermark strategies: rows appended to the second database after a point
taken from the first.
"""

import logging

from ..backends.base import BackendHandle
from . import queries
from .results import ComparisonResult, rows_or_empty

logger = logging.getLogger(__name__)


def offset_diff(table: str, db1: BackendHandle, db2: BackendHandle) -> ComparisonResult:
    """
    Rows of db2 beyond db1's row count.

    Only meaningful for insert-only tables whose scan order in db2 is
    stable: the first count(db1) rows of the scan are assumed to be the
    rows db1 already has.
    """
    count = queries.count_rows(db1, table)
    rows = queries.fetch_rows_from_offset(db2, table, count)
    logger.debug(f"{table}: {len(rows)} row(s) past offset {count}")
    return rows_or_empty(rows)


def max_value_diff(
    column_name: str,
    table: str,
    db1: BackendHandle,
    db2: BackendHandle,
    wrap: bool = False,
) -> ComparisonResult:
    """
    Rows of db2 whose column exceeds db1's maximum.

    Args:
        column_name: Monotonic column (serial id, write date, ...)
        table: Table to compare
        db1: Database the maximum is read from
        db2: Database the newer rows are read from
        wrap: Bind the maximum as text

    Returns:
        RowSet of newer rows, or EMPTY. A NULL maximum (empty db1 table, or
        no value in the column) makes every db2 row with a value new.
    """
    bound = queries.max_value(db1, table, column_name)
    if bound is None:
        logger.debug(f"{table}: no {column_name} maximum in {db1.name}, every valued row of {db2.name} is new")
        return rows_or_empty(queries.fetch_rows_not_null(db2, table, column_name))

    rows = queries.fetch_rows_above(db2, table, column_name, str(bound) if wrap else bound)
    return rows_or_empty(rows)

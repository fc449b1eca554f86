"""
Key set comparison.

Compares the set of values of a unique column in both databases and
re-fetches the rows behind the keys that are only on one side.
"""

import logging
from enum import Enum
from typing import Any

from ..backends.base import BackendHandle
from ..utils.sql_safety import validate_integer_param
from . import queries
from .results import EMPTY, ComparisonResult, RowSet, SetDiff

logger = logging.getLogger(__name__)


class NewRowsSource(str, Enum):
    """Database the rows behind new keys are read from."""

    FIRST = "first"
    SECOND = "second"


def _ordered(values: set[Any]) -> list[Any]:
    try:
        return sorted(values)
    except TypeError:
        # Mixed key types; any stable order will do
        return sorted(values, key=repr)


def _key_set(values: list[Any], as_text: bool) -> set[Any]:
    # NULL keys cannot be matched by an IN list
    return {str(value) if as_text else value for value in values if value is not None}


def unique_column_diff(
    table: str,
    db1: BackendHandle,
    db2: BackendHandle,
    column_name: str = "id",
    wrap: bool = False,
    *,
    id_limit: int | None = None,
    new_rows_from: NewRowsSource = NewRowsSource.FIRST,
) -> ComparisonResult:
    """
    Diff two databases by the values of a unique column.

    Keys only in db1 are deleted, keys only in db2 are new. Deleted rows
    are read from db1; new rows from db1 unless new_rows_from is SECOND.

    Args:
        table: Table to compare
        db1: Reference database
        db2: Compared database
        column_name: Unique key column
        wrap: Compare and bind keys as text
        id_limit: Cap on the keys read from each side (None reads all)
        new_rows_from: Database the new rows are read from

    Returns:
        EMPTY when both key sets agree, otherwise SetDiff(deleted, new)
    """
    if id_limit is not None:
        validate_integer_param(id_limit, "id_limit")

    first_keys = _key_set(queries.fetch_column_values(db1, table, column_name, limit=id_limit), wrap)
    second_keys = _key_set(queries.fetch_column_values(db2, table, column_name, limit=id_limit), wrap)

    deleted_keys = first_keys - second_keys
    new_keys = second_keys - first_keys

    if not deleted_keys and not new_keys:
        return EMPTY

    logger.debug(f"{table}: {len(deleted_keys)} deleted and {len(new_keys)} new {column_name} value(s)")

    new_source = db2 if NewRowsSource(new_rows_from) == NewRowsSource.SECOND else db1
    deleted = queries.fetch_rows_where_in(db1, table, column_name, _ordered(deleted_keys), as_text=wrap)
    new = queries.fetch_rows_where_in(new_source, table, column_name, _ordered(new_keys), as_text=wrap)
    return SetDiff(deleted=RowSet.of(deleted), new=RowSet.of(new))

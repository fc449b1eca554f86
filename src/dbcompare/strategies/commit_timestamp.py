"""Commit timestamp strategy (PostgreSQL with track_commit_timestamp)."""

import logging

from ..backends.base import BackendHandle
from ..exceptions import UnsupportedOperationError
from . import queries
from .results import EMPTY, ComparisonResult, rows_or_empty

logger = logging.getLogger(__name__)


def commit_timestamp_diff(table: str, db1: BackendHandle, db2: BackendHandle) -> ComparisonResult:
    """
    Rows of db2 committed after the latest commit seen in db1.

    Args:
        table: Table to compare
        db1: Database the latest commit timestamp is read from
        db2: Database the newer rows are read from

    Returns:
        RowSet of newer rows, or EMPTY when db1 does not track commit
        timestamps or has no timestamped row

    Raises:
        UnsupportedOperationError: If either database is not PostgreSQL
    """
    for handle in (db1, db2):
        if not handle.dialect.supports_commit_timestamp:
            raise UnsupportedOperationError("commit_timestamp_diff", handle.dialect.value)

    if not queries.commit_timestamp_enabled(db1):
        logger.warning(f"track_commit_timestamp is off on {db1.name}, skipping {table}")
        return EMPTY

    bound = queries.max_commit_timestamp(db1, table)
    if bound is None:
        return EMPTY

    return rows_or_empty(queries.fetch_rows_committed_after(db2, table, bound))

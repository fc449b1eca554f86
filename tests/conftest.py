"""
Pytest configuration and fixtures for dbcompare tests.

Provides in-memory stand-ins for database handles so strategies and the
orchestrator can be exercised without a live server.
"""

from pathlib import Path
from types import MappingProxyType
from unittest.mock import MagicMock

import pytest

from dbcompare.backends.base import BackendHandle
from dbcompare.config import CompareConfig, ConnectionSpec
from dbcompare.strategies import queries
from dbcompare.utils.dialect import Dialect


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: needs a live database (PG* environment variables)")


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


class MemoryHandle:
    """
    Handle over in-memory tables.

    Tables map a name to a list of row dicts. `commits` optionally maps a
    table to one commit timestamp per row.
    """

    def __init__(self, name, tables=None, dialect=Dialect.POSTGRES, commits=None, track_commit_timestamp=True):
        self.name = name
        self.dialect = dialect
        self.tables = tables or {}
        self.commits = commits or {}
        self.track_commit_timestamp = track_commit_timestamp
        self.calls = []

    def rows(self, table):
        return self.tables.get(table, [])


def _fetch_column_values(handle, table, column, limit=None):
    handle.calls.append(("fetch_column_values", table))
    values = [row[column] for row in handle.rows(table)]
    return values if limit is None else values[:limit]


def _fetch_rows_where_in(handle, table, column, values, as_text=False):
    handle.calls.append(("fetch_rows_where_in", table))
    wanted = set(values)
    return [
        row for row in handle.rows(table)
        if (str(row[column]) if as_text else row[column]) in wanted
    ]


def _fetch_all_rows(handle, table):
    handle.calls.append(("fetch_all_rows", table))
    return list(handle.rows(table))


def _count_rows(handle, table):
    handle.calls.append(("count_rows", table))
    return len(handle.rows(table))


def _fetch_rows_from_offset(handle, table, offset):
    handle.calls.append(("fetch_rows_from_offset", table))
    return list(handle.rows(table)[offset:])


def _max_value(handle, table, column):
    handle.calls.append(("max_value", table))
    values = [row[column] for row in handle.rows(table) if row[column] is not None]
    return max(values) if values else None


def _fetch_rows_above(handle, table, column, bound):
    handle.calls.append(("fetch_rows_above", table))
    return [row for row in handle.rows(table) if row[column] is not None and row[column] > bound]


def _fetch_rows_not_null(handle, table, column):
    handle.calls.append(("fetch_rows_not_null", table))
    return [row for row in handle.rows(table) if row[column] is not None]


def _commit_timestamp_enabled(handle):
    handle.calls.append(("commit_timestamp_enabled", None))
    return handle.track_commit_timestamp


def _max_commit_timestamp(handle, table):
    handle.calls.append(("max_commit_timestamp", table))
    stamps = handle.commits.get(table, [])
    return max(stamps) if stamps else None


def _fetch_rows_committed_after(handle, table, timestamp):
    handle.calls.append(("fetch_rows_committed_after", table))
    stamps = handle.commits.get(table, [])
    return [row for row, stamp in zip(handle.rows(table), stamps) if stamp > timestamp]


@pytest.fixture
def memory_queries(monkeypatch):
    """Route the strategy statements to MemoryHandle tables."""
    fakes = {
        "fetch_column_values": _fetch_column_values,
        "fetch_rows_where_in": _fetch_rows_where_in,
        "fetch_all_rows": _fetch_all_rows,
        "count_rows": _count_rows,
        "fetch_rows_from_offset": _fetch_rows_from_offset,
        "max_value": _max_value,
        "fetch_rows_above": _fetch_rows_above,
        "fetch_rows_not_null": _fetch_rows_not_null,
        "commit_timestamp_enabled": _commit_timestamp_enabled,
        "max_commit_timestamp": _max_commit_timestamp,
        "fetch_rows_committed_after": _fetch_rows_committed_after,
    }
    for name, fake in fakes.items():
        monkeypatch.setattr(queries, name, fake)
    return MemoryHandle


def make_spec(name="db1", dialect=Dialect.POSTGRES, **params):
    return ConnectionSpec(name=name, dialect=dialect, params=MappingProxyType(params))


@pytest.fixture
def spec_factory():
    return make_spec


CATALOG_SCHEMAS = {Dialect.POSTGRES: "public", Dialect.MYSQL: "shop", Dialect.SQLSERVER: "dbo"}


@pytest.fixture
def mock_handle():
    """
    Factory for a BackendHandle whose adapter is a MagicMock.

    The catalog schema is the `schema` param when given, else a per-dialect default.
    """

    def factory(dialect=Dialect.POSTGRES, name="db1", rows=None, value=None, **params):
        adapter = MagicMock()
        adapter.query_all_rows.return_value = rows if rows is not None else []
        adapter.query_single_value.return_value = value
        adapter.catalog_schema.return_value = params.get("schema", CATALOG_SCHEMAS[dialect])
        return BackendHandle(spec=make_spec(name, dialect, **params), adapter=adapter, connection=MagicMock())

    return factory


@pytest.fixture
def base_config_data():
    return {
        "databases": {
            "restore": {"type": "postgres", "host": "localhost", "dbname": "restore", "user": "odoo"},
            "live": {"type": "postgres", "host": "localhost", "dbname": "live", "user": "odoo"},
        },
        "defaultDBConnection": "restore",
    }


@pytest.fixture
def base_config(base_config_data):
    return CompareConfig.from_mapping(base_config_data)

"""
dbcompare: detect data drift between SQL databases.

Enumerates the tables of a database through information_schema and
compares them with a second database using key set, offset, maximum value
or commit timestamp strategies.
"""

from .backends import BACKENDS, NOT_FOUND, BackendAdapter, BackendHandle, connect, get_adapter, open_handles
from .config import CompareConfig, ConnectionSpec, ErrorPolicy, ExcludeMode, load_config
from .exceptions import (
    BackendConnectionError,
    ConfigError,
    DbCompareError,
    QueryError,
    UnsupportedOperationError,
)
from .introspection import TableDescriptor, introspect_tables
from .orchestrator import Comparison, CompareSession, RunSummary
from .report import JsonLinesSink
from .strategies import (
    EMPTY,
    NewRowsSource,
    RowSet,
    SetDiff,
    Strategy,
    StrategySelector,
    commit_timestamp_diff,
    max_value_diff,
    offset_diff,
    single_column_values,
    unique_column_diff,
)
from .utils.dialect import Dialect

__version__ = "0.1.0"

__all__ = [
    "BACKENDS",
    "EMPTY",
    "NOT_FOUND",
    "BackendAdapter",
    "BackendConnectionError",
    "BackendHandle",
    "CompareConfig",
    "CompareSession",
    "Comparison",
    "ConfigError",
    "ConnectionSpec",
    "DbCompareError",
    "Dialect",
    "ErrorPolicy",
    "ExcludeMode",
    "JsonLinesSink",
    "NewRowsSource",
    "QueryError",
    "RowSet",
    "RunSummary",
    "SetDiff",
    "Strategy",
    "StrategySelector",
    "TableDescriptor",
    "UnsupportedOperationError",
    "commit_timestamp_diff",
    "connect",
    "get_adapter",
    "introspect_tables",
    "load_config",
    "max_value_diff",
    "offset_diff",
    "open_handles",
    "single_column_values",
    "unique_column_diff",
]

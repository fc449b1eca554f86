"""
Row diff strategies.

Each strategy is a plain function of a table name and two open handles
returning a ComparisonResult; none keeps state between calls.
"""

from ..backends.base import single_column_values
from .commit_timestamp import commit_timestamp_diff
from .results import EMPTY, ComparisonResult, Empty, RowSet, SetDiff
from .selector import Strategy, StrategySelector
from .set_diff import NewRowsSource, unique_column_diff
from .watermark import max_value_diff, offset_diff

__all__ = [
    "EMPTY",
    "ComparisonResult",
    "Empty",
    "NewRowsSource",
    "RowSet",
    "SetDiff",
    "Strategy",
    "StrategySelector",
    "commit_timestamp_diff",
    "max_value_diff",
    "offset_diff",
    "single_column_values",
    "unique_column_diff",
]

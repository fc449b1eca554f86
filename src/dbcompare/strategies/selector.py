"""
Built-in table handler applying one strategy to every table.

The orchestrator accepts any callable; StrategySelector is the one the CLI
uses. It compares a pair of configured databases and skips tables whose
presence flags show the strategy's column is missing.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..exceptions import ConfigError
from ..introspection.models import TableDescriptor
from .commit_timestamp import commit_timestamp_diff
from .results import EMPTY, ComparisonResult
from .set_diff import NewRowsSource, unique_column_diff
from .watermark import max_value_diff, offset_diff

if TYPE_CHECKING:
    from ..orchestrator import CompareSession

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    """Strategies selectable by name."""

    UNIQUE = "unique"
    OFFSET = "offset"
    MAX = "max"
    COMMIT_TS = "commit-ts"

    @property
    def uses_column(self) -> bool:
        return self in (Strategy.UNIQUE, Strategy.MAX)


@dataclass(frozen=True)
class StrategySelector:
    """
    Per-table handler running one named strategy between two databases.

    Attributes:
        strategy: Strategy to apply
        first: Reference database (default: defaultDBConnection)
        second: Compared database (default: the first other configured database)
        column: Key or watermark column for the unique and max strategies
        wrap: Compare and bind values as text
        new_rows_from: Source of new rows for the unique strategy
        id_limit: Cap on keys read by the unique strategy
    """

    strategy: Strategy
    first: str | None = None
    second: str | None = None
    column: str = "id"
    wrap: bool = False
    new_rows_from: NewRowsSource = NewRowsSource.FIRST
    id_limit: int | None = None

    def database_pair(self, session: "CompareSession") -> tuple[str, str]:
        """
        Resolve the names of the compared databases.

        Raises:
            ConfigError: If no second database can be chosen
        """
        first = self.first or session.default_database
        if self.second:
            return first, self.second
        others = [name for name in session.config.databases if name != first]
        if not others:
            raise ConfigError("Comparison needs a second database")
        return first, others[0]

    def __call__(self, descriptor: TableDescriptor, session: "CompareSession") -> ComparisonResult:
        table = descriptor.table_name

        if self.strategy.uses_column and descriptor.has(self.column) is False:
            logger.info(f"Skipping {table}: no {self.column} column")
            return EMPTY

        first, second = self.database_pair(session)
        db1 = session.handle(first)
        db2 = session.handle(second)

        if self.strategy == Strategy.UNIQUE:
            return unique_column_diff(
                table,
                db1,
                db2,
                self.column,
                self.wrap,
                id_limit=self.id_limit,
                new_rows_from=self.new_rows_from,
            )
        if self.strategy == Strategy.OFFSET:
            return offset_diff(table, db1, db2)
        if self.strategy == Strategy.MAX:
            return max_value_diff(self.column, table, db1, db2, self.wrap)
        return commit_timestamp_diff(table, db1, db2)

"""
Statement building with bound parameters and quoted identifiers.

Every value that reaches a database (LIKE patterns, hasColumns names,
diff keys, watermarks) goes through StatementBuilder.bind(), so SQL text only
ever contains quoted identifiers, fixed keywords and placeholders.

Example:
    >>> builder = StatementBuilder(Dialect.POSTGRES)
    >>> where = builder.in_predicate(builder.ident("id"), [1, 2, 3])
    >>> builder.build(f"SELECT * FROM {builder.table('users', 'public')} WHERE {where}")
    Statement(sql='SELECT * FROM "public"."users" WHERE "id" = ANY(%(p0)s)', params={'p0': [1, 2, 3]})
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from ..utils.dialect import Dialect
from ..utils.sql_safety import quote_identifier, quote_table

# Maximum members bound into one IN list
IN_BATCH_SIZE = 1000


@dataclass(frozen=True)
class Statement:
    """SQL text plus the parameters for the driver's paramstyle."""

    sql: str
    params: dict[str, Any] | list[Any] | None = None


def binds_array(dialect: Dialect, as_text: bool = False) -> bool:
    """Whether IN lists bind as one array parameter instead of one per member."""
    return dialect == Dialect.POSTGRES and not as_text


def in_batches(values: Iterable[Any], dialect: Dialect, as_text: bool = False) -> Iterator[list[Any]]:
    """
    Split IN-list members into the batches one statement can bind.

    Args:
        values: Members of the IN list
        dialect: Target dialect
        as_text: Members are bound as text

    Yields:
        Lists of members (a single list when the dialect binds arrays)
    """
    members = list(values)
    if not members:
        return
    if binds_array(dialect, as_text):
        yield members
        return
    for start in range(0, len(members), IN_BATCH_SIZE):
        yield members[start:start + IN_BATCH_SIZE]


class StatementBuilder:
    """Accumulates bound parameters for one statement."""

    def __init__(self, dialect: Dialect):
        self.dialect = dialect
        self._named: dict[str, Any] = {}
        self._positional: list[Any] = []

    def bind(self, value: Any) -> str:
        """Bind a value and return its placeholder."""
        if self.dialect.paramstyle == "qmark":
            self._positional.append(value)
            return "?"
        name = f"p{len(self._named)}"
        self._named[name] = value
        return self.dialect.placeholder(name)

    def bind_list(self, values: Sequence[Any]) -> str:
        """Bind each member and return the comma separated placeholders."""
        return ", ".join(self.bind(value) for value in values)

    def in_predicate(self, column_sql: str, values: Sequence[Any], as_text: bool = False) -> str:
        """
        Membership test of a column against bound values.

        Args:
            column_sql: Quoted column expression
            values: Members (one batch, see in_batches)
            as_text: Bind members as strings

        Returns:
            SQL predicate; always false for an empty list
        """
        if not values:
            return "1 = 0"
        if as_text:
            values = [str(value) for value in values]
        if binds_array(self.dialect, as_text):
            return f"{column_sql} = ANY({self.bind(list(values))})"
        return f"{column_sql} IN ({self.bind_list(values)})"

    def _sql_text(self, text: str) -> str:
        # pyformat drivers read a bare % as the start of a placeholder
        if self.dialect.paramstyle == "pyformat":
            return text.replace("%", "%%")
        return text

    def ident(self, name: str) -> str:
        return self._sql_text(quote_identifier(name, self.dialect))

    def table(self, name: str, schema: str | None = None) -> str:
        """Quoted table reference, qualified when a schema is given."""
        return self._sql_text(quote_table(name, self.dialect, schema))

    @property
    def params(self) -> dict[str, Any] | list[Any] | None:
        if self.dialect.paramstyle == "qmark":
            return list(self._positional) if self._positional else None
        return dict(self._named) if self._named else None

    def build(self, sql: str) -> Statement:
        params = self.params
        if params is None and self.dialect.paramstyle == "pyformat":
            # Without parameters the driver sends the text as is
            sql = sql.replace("%%", "%")
        return Statement(sql=sql, params=params)

"""
SQL dialect enumeration for type-safe backend identification.

Replaces bare 'postgres' / 'mysql' strings throughout the codebase and
carries the few pieces of syntax that differ between the supported engines.
"""

from enum import Enum

# Largest value MySQL accepts for LIMIT; it has no OFFSET without LIMIT.
MYSQL_MAX_LIMIT = 18446744073709551615

_ALIASES = {
    "postgres": "postgres",
    "postgresql": "postgres",
    "pgsql": "postgres",
    "mysql": "mysql",
    "mariadb": "mysql",
    "sqlserver": "sqlserver",
    "mssql": "sqlserver",
}


class Dialect(str, Enum):
    """
    Enumeration of supported SQL dialects.

    Inherits from str for JSON serialization compatibility and
    easy comparison with configuration values.
    """

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"

    @classmethod
    def from_tag(cls, tag: str) -> "Dialect":
        """
        Resolve a configuration dialect tag (case-insensitive, common aliases).

        Args:
            tag: Dialect tag such as 'postgres', 'postgresql' or 'mysql'

        Returns:
            Dialect enum value

        Raises:
            ValueError: If the tag names no supported dialect
        """
        key = str(tag).strip().lower()
        if key not in _ALIASES:
            supported = ", ".join(sorted(d.value for d in cls))
            raise ValueError(f"Unknown dialect {tag!r} (supported: {supported})")
        return cls(_ALIASES[key])

    @property
    def paramstyle(self) -> str:
        """DB-API paramstyle of the driver used for this dialect."""
        if self == Dialect.SQLSERVER:
            return "qmark"
        return "pyformat"

    @property
    def identifier_quotes(self) -> tuple[str, str]:
        """Opening and closing identifier quote characters."""
        if self == Dialect.MYSQL:
            return ("`", "`")
        if self == Dialect.SQLSERVER:
            return ("[", "]")
        return ('"', '"')

    @property
    def supports_commit_timestamp(self) -> bool:
        """Whether rows carry a commit timestamp (PostgreSQL track_commit_timestamp)."""
        return self == Dialect.POSTGRES

    def placeholder(self, name: str) -> str:
        """
        Get parameter placeholder for this dialect.

        Args:
            name: Parameter name (ignored for positional drivers)

        Returns:
            Placeholder string
        """
        if self.paramstyle == "qmark":
            return "?"
        return f"%({name})s"

    def offset_clause(self, offset_placeholder: str) -> str:
        """
        Clause that skips the first N rows of an unordered scan.

        Args:
            offset_placeholder: Placeholder already bound to the row count

        Returns:
            SQL fragment appended after the FROM clause
        """
        if self == Dialect.MYSQL:
            return f"LIMIT {MYSQL_MAX_LIMIT} OFFSET {offset_placeholder}"
        if self == Dialect.SQLSERVER:
            return f"ORDER BY (SELECT NULL) OFFSET {offset_placeholder} ROWS"
        return f"OFFSET {offset_placeholder}"

    def limited_select(self, select_list: str, from_clause: str, limit: str | None) -> str:
        """
        Build SELECT ... FROM ... with an optional row limit.

        Args:
            select_list: Projection, already quoted
            from_clause: Table reference, already quoted
            limit: Placeholder bound to the limit, or None for no limit

        Returns:
            SQL string
        """
        if limit is None:
            return f"SELECT {select_list} FROM {from_clause}"
        if self == Dialect.SQLSERVER:
            return f"SELECT TOP ({limit}) {select_list} FROM {from_clause}"
        return f"SELECT {select_list} FROM {from_clause} LIMIT {limit}"

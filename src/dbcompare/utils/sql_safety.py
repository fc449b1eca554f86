"""
SQL safety utilities for preventing SQL injection.

Provides identifier validation and quoting functions for safe SQL query construction.
Values never go into SQL text; see dbcompare.backends.statement for binding.
"""

import re

from .dialect import Dialect

# Strict ASCII-only pattern for identifiers that are spliced into aliases
VALID_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def validate_identifier(identifier: str) -> None:
    """
    Validate a SQL identifier (column name used to build an alias, etc.).

    Args:
        identifier: The identifier to validate

    Raises:
        ValueError: If the identifier contains invalid characters
    """
    if not identifier:
        raise ValueError("SQL identifier cannot be empty")

    if not VALID_IDENTIFIER.match(identifier):
        raise ValueError(
            f"Invalid SQL identifier: {identifier!r}. "
            "Only ASCII letters, digits, and underscores are allowed, "
            "and must start with a letter or underscore."
        )


def quote_identifier(identifier: str, dialect: Dialect) -> str:
    """
    Quote a single identifier for the given dialect.

    The closing quote character is doubled, so any name the catalog can hold
    is representable without being able to break out of the quotes.

    Args:
        identifier: Table or column name
        dialect: Dialect whose quoting style to use

    Returns:
        Quoted identifier safe for use in SQL

    Raises:
        ValueError: If the identifier is empty or contains a NUL byte
    """
    if not identifier:
        raise ValueError("SQL identifier cannot be empty")
    if "\x00" in identifier:
        raise ValueError(f"Invalid SQL identifier: {identifier!r}")

    opening, closing = dialect.identifier_quotes
    return f"{opening}{identifier.replace(closing, closing * 2)}{closing}"


def quote_table(table: str, dialect: Dialect, schema: str | None = None) -> str:
    """
    Quote a table reference, optionally qualified by its schema.

    Names are taken as the catalog stores them: a dot inside `table` is part
    of the name, not a schema separator.

    Args:
        table: Table name as listed by information_schema
        dialect: Dialect whose quoting style to use
        schema: Schema the table lives in, or None for an unqualified name

    Returns:
        Quoted table reference, e.g. [sales].[orders]

    Raises:
        ValueError: If a name is empty or contains a NUL byte
    """
    quoted = quote_identifier(table, dialect)
    if schema is None:
        return quoted
    return f"{quote_identifier(schema, dialect)}.{quoted}"


def validate_integer_param(value: int, param_name: str, min_value: int = 0) -> None:
    """
    Validate an integer parameter for SQL queries.

    Args:
        value: The value to validate
        param_name: Name of the parameter (for error messages)
        min_value: Minimum allowed value (default 0)

    Raises:
        ValueError: If the value is not a valid integer or below minimum
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(
            f"Invalid {param_name}: {value!r}. Must be an integer."
        )

    if value < min_value:
        raise ValueError(
            f"Invalid {param_name}: {value}. Must be >= {min_value}."
        )

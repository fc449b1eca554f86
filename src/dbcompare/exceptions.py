"""
Exception hierarchy for dbcompare.

Every error raised on purpose by the package derives from DbCompareError.
The subclasses also derive from the closest builtin so callers that only
know the builtins (ConnectionError, ValueError, ...) still catch them.
"""

from typing import Any


class DbCompareError(Exception):
    """Base exception for dbcompare errors."""

    pass


class ConfigError(DbCompareError, ValueError):
    """Raised when the comparison configuration is invalid."""

    pass


class BackendConnectionError(DbCompareError, ConnectionError):
    """Raised when a database cannot be connected to (host, auth, or dialect)."""

    def __init__(self, message: str, name: str | None = None, dialect: str | None = None):
        super().__init__(message)
        self.name = name
        self.dialect = dialect


class QueryError(DbCompareError):
    """
    Raised when a statement fails on the server or in the driver.

    Attributes:
        sql: The statement text that failed
        params: The bound parameters
        cause: The driver exception
    """

    def __init__(self, sql: str, params: Any = None, cause: BaseException | None = None):
        message = f"Query failed: {cause}" if cause is not None else "Query failed"
        super().__init__(message)
        self.sql = sql
        self.params = params
        self.cause = cause


class UnsupportedOperationError(DbCompareError, NotImplementedError):
    """Raised when an operation needs a capability the dialect lacks."""

    def __init__(self, operation: str, dialect: str):
        super().__init__(f"{operation} is not supported on {dialect}")
        self.operation = operation
        self.dialect = dialect

"""MySQL / MariaDB backend using mysql-connector-python."""

import logging
from typing import Any

import mysql.connector

from ..config import ConnectionSpec
from ..exceptions import BackendConnectionError, ConfigError
from ..utils.dialect import Dialect
from .base import DbApiAdapter

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10

# Keys naming the database, in precedence order
DATABASE_KEYS = ("database", "dbname", "schema")


class MySQLAdapter(DbApiAdapter):
    """
    Adapter for MySQL and MariaDB databases.

    Cursors are buffered: an unread result on an unbuffered cursor would
    make the next statement on the connection fail.
    """

    dialect = Dialect.MYSQL

    def _open_connection(self, spec: ConnectionSpec, query_timeout: float | None) -> Any:
        if spec.connection_string:
            raise BackendConnectionError(
                f"Database {spec.name}: mysql does not accept connectionString, use host/port/user keys",
                name=spec.name,
                dialect=self.dialect.value,
            )

        kwargs = {
            "host": spec.get("host"),
            "port": spec.get("port"),
            "user": spec.get("user", "username"),
            "password": spec.get("password", "pass"),
            "database": spec.get(*DATABASE_KEYS),
            "unix_socket": spec.get("socket", "unix_socket"),
            "connection_timeout": spec.get("connect_timeout", default=DEFAULT_CONNECT_TIMEOUT),
        }
        kwargs = {key: value for key, value in kwargs.items() if value is not None}

        conn = mysql.connector.connect(**kwargs)
        try:
            conn.autocommit = True
            if query_timeout is not None:
                cursor = conn.cursor()
                try:
                    cursor.execute(
                        "SET SESSION MAX_EXECUTION_TIME = %(ms)s",
                        {"ms": int(query_timeout * 1000)},
                    )
                finally:
                    cursor.close()
        except mysql.connector.Error:
            conn.close()
            raise

        return conn

    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        return (mysql.connector.Error,)

    def _cursor(self, connection: Any) -> Any:
        return connection.cursor(buffered=True)

    def catalog_schema(self, spec: ConnectionSpec) -> str:
        """The configured database; MySQL has no schema level below it."""
        schema = spec.get(*DATABASE_KEYS)
        if schema is None:
            raise ConfigError(f"Database {spec.name}: mysql needs a 'database' (or 'dbname', 'schema') key")
        return schema

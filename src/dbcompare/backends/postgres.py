"""PostgreSQL backend using psycopg2."""

import logging

import psycopg2
import psycopg2.extensions

from ..config import ConnectionSpec
from ..utils.dialect import Dialect
from .base import DbApiAdapter

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10


class PostgresAdapter(DbApiAdapter):
    """Adapter for PostgreSQL databases."""

    dialect = Dialect.POSTGRES

    def _open_connection(
        self, spec: ConnectionSpec, query_timeout: float | None
    ) -> psycopg2.extensions.connection:
        kwargs = {
            "host": spec.get("host"),
            "port": spec.get("port"),
            "dbname": spec.get("dbname", "database"),
            "user": spec.get("user", "username"),
            "password": spec.get("password", "pass"),
            "sslmode": spec.get("sslmode"),
            "connect_timeout": spec.get("connect_timeout", default=DEFAULT_CONNECT_TIMEOUT),
            "application_name": spec.get("application_name", default="dbcompare"),
        }
        kwargs = {key: value for key, value in kwargs.items() if value is not None}

        if query_timeout is not None:
            kwargs["options"] = f"-c statement_timeout={int(query_timeout * 1000)}"

        # A connectionString is a libpq DSN; explicit keys override it
        conn = psycopg2.connect(spec.connection_string, **kwargs)
        conn.autocommit = True
        return conn

    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        return (psycopg2.Error,)

    def catalog_schema(self, spec: ConnectionSpec) -> str:
        """Only the public schema is compared."""
        return "public"

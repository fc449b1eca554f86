"""SQL Server backend using pyodbc."""

import logging
import math
from typing import Any

from ..config import ConnectionSpec
from ..utils.dialect import Dialect
from .base import DbApiAdapter

logger = logging.getLogger(__name__)

DEFAULT_DRIVER = "ODBC Driver 18 for SQL Server"
DEFAULT_SCHEMA = "dbo"
DEFAULT_LOGIN_TIMEOUT = 10


def build_connection_string(spec: ConnectionSpec) -> str:
    """
    Build an ODBC connection string from individual parameters.

    Args:
        spec: Connection definition with host, port, database, user, password

    Returns:
        ODBC connection string
    """
    host = spec.get("host", default="localhost")
    port = spec.get("port")
    server = f"{host},{port}" if port else host

    parts = [
        f"DRIVER={{{spec.get('driver', default=DEFAULT_DRIVER)}}}",
        f"SERVER={server}",
    ]
    database = spec.get("database", "dbname")
    if database:
        parts.append(f"DATABASE={database}")
    user = spec.get("user", "username")
    if user:
        parts.append(f"UID={user}")
        parts.append(f"PWD={spec.get('password', 'pass', default='')}")
    else:
        parts.append("Trusted_Connection=yes")
    if spec.get("trust_server_certificate", default=True):
        parts.append("TrustServerCertificate=yes")
    return ";".join(parts)


class SQLServerAdapter(DbApiAdapter):
    """
    Adapter for SQL Server databases.

    pyodbc is imported on first use since it needs the unixODBC runtime,
    which hosts comparing only PostgreSQL or MySQL may not have.
    """

    dialect = Dialect.SQLSERVER

    def _open_connection(self, spec: ConnectionSpec, query_timeout: float | None) -> Any:
        import pyodbc

        conn = pyodbc.connect(
            spec.connection_string or build_connection_string(spec),
            autocommit=True,
            timeout=spec.get("connect_timeout", default=DEFAULT_LOGIN_TIMEOUT),
        )
        if query_timeout is not None:
            conn.timeout = max(1, math.ceil(query_timeout))
        return conn

    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        import pyodbc

        return (pyodbc.Error,)

    def catalog_schema(self, spec: ConnectionSpec) -> str:
        return spec.get("schema", default=DEFAULT_SCHEMA)

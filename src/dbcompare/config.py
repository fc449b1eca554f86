"""
Comparison configuration.

The configuration is plain nested key/value data (a JSON object on disk)
parsed once into frozen dataclasses and threaded explicitly to every
component that needs it. Recognised keys keep the camelCase spelling of the
configuration file:

    {
        "databases": {
            "restore": {"type": "postgres", "host": "localhost", "dbname": "a", "user": "odoo"},
            "test":    {"type": "postgres", "host": "localhost", "dbname": "b", "user": "odoo"}
        },
        "defaultDBConnection": "restore",
        "prettyJSON": true,
        "includeColumnCount": true,
        "includeTables": ["account%"],
        "excludeTables": ["account_invoice_report"],
        "hasColumns": ["write_date", "id"]
    }

Keys the engine does not recognise are kept in ``CompareConfig.options`` so
table handlers can read their own settings.
"""

import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .exceptions import ConfigError
from .utils.dialect import Dialect
from .utils.sql_safety import validate_identifier

logger = logging.getLogger(__name__)

PASSWORD_ENV_TEMPLATE = "DBCOMPARE_{name}_PASSWORD"

_SPEC_RESERVED_KEYS = ("type", "dialect", "connectionString")

_RECOGNISED_KEYS = frozenset({
    "databases",
    "defaultDBConnection",
    "prettyJSON",
    "includeColumnNames",
    "includeColumnCount",
    "includeTables",
    "excludeTables",
    "excludeTablesMode",
    "hasColumns",
    "queryTimeout",
    "onError",
})


class ErrorPolicy(str, Enum):
    """What the orchestrator does when a table's comparison query fails."""

    ABORT = "abort"
    SKIP = "skip"


class ExcludeMode(str, Enum):
    """
    How several exclude patterns combine.

    OR keeps a table unless it matches every pattern, which is how the
    original tool behaved; AND drops a table matching any pattern.
    """

    OR = "or"
    AND = "and"


def password_env_var(name: str) -> str:
    """Environment variable consulted for a database without a password."""
    return PASSWORD_ENV_TEMPLATE.format(name=re.sub(r"[^A-Za-z0-9]", "_", name).upper())


@dataclass(frozen=True)
class ConnectionSpec:
    """
    Connection definition for one named database.

    Attributes:
        name: Unique key of the database in the configuration
        dialect: SQL dialect of the server
        params: Dialect-specific parameters (host, port, dbname, user, ...)
        connection_string: Raw driver connection string, used instead of params
    """

    name: str
    dialect: Dialect
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    connection_string: str | None = None

    @classmethod
    def from_mapping(
        cls,
        name: str,
        data: Mapping[str, Any],
        environ: Mapping[str, str] | None = None,
    ) -> "ConnectionSpec":
        """
        Build a spec from its configuration entry.

        Args:
            name: Database name (key under "databases")
            data: Entry with a "type" (or "dialect") tag and driver parameters
            environ: Environment consulted for a missing password

        Returns:
            ConnectionSpec

        Raises:
            ConfigError: If the entry is not a mapping or the dialect is unknown
        """
        if not isinstance(data, Mapping):
            raise ConfigError(f"Database {name!r} must be a mapping, got {type(data).__name__}")

        tag = data.get("type", data.get("dialect"))
        if tag is None:
            raise ConfigError(f"Database {name!r} has no 'type'")
        try:
            dialect = Dialect.from_tag(tag)
        except ValueError as e:
            raise ConfigError(f"Database {name!r}: {e}") from e

        params = {k: v for k, v in data.items() if k not in _SPEC_RESERVED_KEYS}

        if environ is not None and "password" not in params and "pass" not in params:
            env_password = environ.get(password_env_var(name))
            if env_password:
                params["password"] = env_password
                logger.debug(f"Password for database {name!r} taken from environment")

        return cls(
            name=name,
            dialect=dialect,
            params=MappingProxyType(params),
            connection_string=data.get("connectionString"),
        )

    def get(self, *keys: str, default: Any = None) -> Any:
        """Return the first of several alias keys present in params."""
        for key in keys:
            if key in self.params and self.params[key] not in (None, ""):
                return self.params[key]
        return default

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks
        shown = {k: ("***" if k in ("password", "pass") else v) for k, v in self.params.items()}
        return f"ConnectionSpec(name={self.name!r}, dialect={self.dialect.value!r}, params={shown})"


def _string_list(data: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"'{key}' must be a list of strings")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"'{key}' must be a list of strings, got {item!r}")
    return tuple(value)


def _flag(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false")
    return value


@dataclass(frozen=True)
class CompareConfig:
    """Immutable comparison configuration."""

    databases: Mapping[str, ConnectionSpec]
    default_database: str
    pretty_json: bool = False
    include_column_names: bool = False
    include_column_count: bool = False
    include_tables: tuple[str, ...] = ()
    exclude_tables: tuple[str, ...] = ()
    exclude_tables_mode: ExcludeMode = ExcludeMode.OR
    has_columns: tuple[str, ...] = ()
    query_timeout: float | None = None
    on_error: ErrorPolicy = ErrorPolicy.ABORT
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        environ: Mapping[str, str] | None = None,
    ) -> "CompareConfig":
        """
        Parse and validate a configuration mapping.

        Args:
            data: Configuration data (see module docstring)
            environ: Environment for password fallback (None disables it)

        Returns:
            CompareConfig

        Raises:
            ConfigError: If a key is missing, mistyped or inconsistent
        """
        if not isinstance(data, Mapping):
            raise ConfigError("Configuration must be a mapping")

        raw_databases = data.get("databases")
        if not isinstance(raw_databases, Mapping) or not raw_databases:
            raise ConfigError("'databases' is required and must name at least one database")

        databases = {
            name: ConnectionSpec.from_mapping(name, entry, environ)
            for name, entry in raw_databases.items()
        }

        default_database = data.get("defaultDBConnection") or next(iter(databases))
        if default_database not in databases:
            raise ConfigError(f"defaultDBConnection {default_database!r} is not a configured database")

        has_columns = _string_list(data, "hasColumns")
        for column in has_columns:
            try:
                validate_identifier(column)
            except ValueError as e:
                raise ConfigError(f"hasColumns: {e}") from e

        try:
            exclude_mode = ExcludeMode(str(data.get("excludeTablesMode", "or")).lower())
            on_error = ErrorPolicy(str(data.get("onError", "abort")).lower())
        except ValueError as e:
            raise ConfigError(str(e)) from e

        query_timeout = data.get("queryTimeout")
        if query_timeout is not None:
            if isinstance(query_timeout, bool) or not isinstance(query_timeout, (int, float)) or query_timeout <= 0:
                raise ConfigError("'queryTimeout' must be a positive number of seconds")
            query_timeout = float(query_timeout)

        options = {k: v for k, v in data.items() if k not in _RECOGNISED_KEYS}

        return cls(
            databases=MappingProxyType(databases),
            default_database=default_database,
            pretty_json=_flag(data, "prettyJSON"),
            include_column_names=_flag(data, "includeColumnNames"),
            include_column_count=_flag(data, "includeColumnCount"),
            include_tables=_string_list(data, "includeTables"),
            exclude_tables=_string_list(data, "excludeTables"),
            exclude_tables_mode=exclude_mode,
            has_columns=has_columns,
            query_timeout=query_timeout,
            on_error=on_error,
            options=MappingProxyType(options),
        )

    def database(self, name: str | None = None) -> ConnectionSpec:
        """
        Look up a database spec, defaulting to defaultDBConnection.

        Raises:
            ConfigError: If the name is not configured
        """
        key = name or self.default_database
        try:
            return self.databases[key]
        except KeyError:
            raise ConfigError(f"Unknown database {key!r}") from None

    def option(self, key: str, default: Any = None) -> Any:
        """Read a handler-specific option the engine itself does not use."""
        return self.options.get(key, default)


def load_config(path: str | Path, environ: Mapping[str, str] | None = None) -> CompareConfig:
    """
    Load a comparison configuration from a JSON file.

    Args:
        path: Path to the JSON configuration
        environ: Environment for password fallback (default: os.environ)

    Returns:
        CompareConfig

    Raises:
        ConfigError: If the file is missing, not JSON, or invalid
    """
    config_path = Path(path)
    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Configuration file {config_path} is not valid JSON: {e}") from e

    config = CompareConfig.from_mapping(data, os.environ if environ is None else environ)
    logger.info(
        f"Loaded configuration {config_path}: {len(config.databases)} database(s), "
        f"default={config.default_database}"
    )
    return config

"""
Catalog queries over information_schema.

Builds the table enumeration query from the configuration. Table filters,
hasColumns names and the schema are bound parameters; only the has_<col>
aliases are identifiers, and those are quoted.
"""

import logging

from ..backends.statement import Statement, StatementBuilder
from ..config import CompareConfig, ExcludeMode
from ..utils.dialect import Dialect

logger = logging.getLogger(__name__)


def build_tables_query(config: CompareConfig, dialect: Dialect, schema: str) -> Statement:
    """
    Build the statement enumerating candidate tables.

    Args:
        config: Comparison configuration (filters and metadata flags)
        dialect: Dialect of the introspected database
        schema: Catalog schema the tables live in

    Returns:
        Statement yielding table_name, column_count and has_<col> columns,
        ordered by table_name
    """
    builder = StatementBuilder(dialect)
    columns = ["t.table_name AS table_name"]
    joins = []

    if config.include_column_count:
        columns.append("cc.column_count AS column_count")
        joins.append(
            "LEFT JOIN (SELECT c.table_name AS table_name, count(*) AS column_count"
            " FROM information_schema.columns c"
            f" WHERE c.table_schema = {builder.bind(schema)}"
            " GROUP BY c.table_name) cc ON cc.table_name = t.table_name"
        )

    for index, column in enumerate(config.has_columns):
        alias = builder.ident(f"has_{column}")
        columns.append(f"hc{index}.{alias} AS {alias}")
        joins.append(
            f"LEFT JOIN (SELECT c.table_name AS table_name, 1 AS {alias}"
            " FROM information_schema.columns c"
            f" WHERE c.table_schema = {builder.bind(schema)}"
            f" AND c.column_name = {builder.bind(column)})"
            f" hc{index} ON hc{index}.table_name = t.table_name"
        )

    wheres = [f"t.table_schema = {builder.bind(schema)}"]

    if config.include_tables:
        included = " OR ".join(f"t.table_name LIKE {builder.bind(p)}" for p in config.include_tables)
        wheres.append(f"({included})")

    if config.exclude_tables:
        if config.exclude_tables_mode == ExcludeMode.OR:
            if len(config.exclude_tables) > 1:
                logger.warning(
                    "excludeTables patterns are combined with OR: a table is only excluded "
                    "when it matches every pattern (set excludeTablesMode to \"and\" to exclude any match)"
                )
            joiner = " OR "
        else:
            joiner = " AND "
        excluded = joiner.join(f"t.table_name NOT LIKE {builder.bind(p)}" for p in config.exclude_tables)
        wheres.append(f"({excluded})")

    sql = (
        f"SELECT {', '.join(columns)} FROM information_schema.tables t"
        f"{''.join(' ' + join for join in joins)}"
        f" WHERE {' AND '.join(wheres)}"
        " ORDER BY t.table_name ASC"
    )
    return builder.build(sql)


def build_column_names_query(dialect: Dialect, schema: str, table_name: str) -> Statement:
    """Statement listing a table's column names in ascending order."""
    builder = StatementBuilder(dialect)
    sql = (
        "SELECT c.column_name AS column_name FROM information_schema.columns c"
        f" WHERE c.table_name = {builder.bind(table_name)}"
        f" AND c.table_schema = {builder.bind(schema)}"
        " ORDER BY c.column_name ASC"
    )
    return builder.build(sql)

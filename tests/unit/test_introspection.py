"""
Unit tests for schema introspection.
"""

import logging
from unittest.mock import MagicMock

import pytest

from dbcompare.backends.base import BackendHandle
from dbcompare.config import CompareConfig
from dbcompare.introspection import (
    TableDescriptor,
    build_column_names_query,
    build_tables_query,
    introspect_tables,
)
from dbcompare.utils.dialect import Dialect


def _config(base_config_data, **overrides):
    return CompareConfig.from_mapping({**base_config_data, **overrides})


class TestBuildTablesQuery:
    """Test the catalog query builder"""

    def test_minimal_query(self, base_config):
        """Test no filters: schema restriction and ordering only"""
        statement = build_tables_query(base_config, Dialect.POSTGRES, "public")

        assert statement.sql == (
            "SELECT t.table_name AS table_name FROM information_schema.tables t"
            " WHERE t.table_schema = %(p0)s ORDER BY t.table_name ASC"
        )
        assert statement.params == {"p0": "public"}

    def test_column_count_join(self, base_config_data):
        """Test the count subquery is joined and schema scoped"""
        config = _config(base_config_data, includeColumnCount=True)

        statement = build_tables_query(config, Dialect.POSTGRES, "public")

        assert "cc.column_count AS column_count" in statement.sql
        assert "LEFT JOIN (SELECT c.table_name AS table_name, count(*) AS column_count" in statement.sql
        assert "GROUP BY c.table_name) cc ON cc.table_name = t.table_name" in statement.sql
        assert statement.params == {"p0": "public", "p1": "public"}

    def test_has_column_joins(self, base_config_data):
        """Test one aliased join per checked column, names bound"""
        config = _config(base_config_data, hasColumns=["write_date", "id"])

        statement = build_tables_query(config, Dialect.POSTGRES, "public")

        assert 'hc0."has_write_date" AS "has_write_date"' in statement.sql
        assert 'hc1."has_id" AS "has_id"' in statement.sql
        assert "hc1 ON hc1.table_name = t.table_name" in statement.sql
        assert "write_date" in statement.params.values()
        assert "id" in statement.params.values()

    def test_include_and_exclude_filters(self, base_config_data):
        """Test whitelist OR-joined, blacklist OR-joined, combined with AND"""
        config = _config(
            base_config_data,
            includeTables=["account%", "res_%"],
            excludeTables=["account_invoice_report", "res_log"],
        )

        statement = build_tables_query(config, Dialect.MYSQL, "odoo")

        assert (
            "WHERE t.table_schema = %(p0)s"
            " AND (t.table_name LIKE %(p1)s OR t.table_name LIKE %(p2)s)"
            " AND (t.table_name NOT LIKE %(p3)s OR t.table_name NOT LIKE %(p4)s)"
        ) in statement.sql
        assert statement.params == {
            "p0": "odoo",
            "p1": "account%",
            "p2": "res_%",
            "p3": "account_invoice_report",
            "p4": "res_log",
        }

    def test_exclude_or_mode_warns(self, base_config_data, caplog):
        """Test OR-combined exclusions are warned about"""
        config = _config(base_config_data, excludeTables=["a%", "b%"])

        with caplog.at_level(logging.WARNING):
            build_tables_query(config, Dialect.POSTGRES, "public")

        assert "combined with OR" in caplog.text

    def test_single_exclude_does_not_warn(self, base_config_data, caplog):
        """Test one exclusion is unambiguous"""
        config = _config(base_config_data, excludeTables=["a%"])

        with caplog.at_level(logging.WARNING):
            build_tables_query(config, Dialect.POSTGRES, "public")

        assert "combined with OR" not in caplog.text

    def test_exclude_and_mode(self, base_config_data):
        """Test AND mode excludes any match"""
        config = _config(base_config_data, excludeTables=["a%", "b%"], excludeTablesMode="and")

        statement = build_tables_query(config, Dialect.POSTGRES, "public")

        assert "(t.table_name NOT LIKE %(p1)s AND t.table_name NOT LIKE %(p2)s)" in statement.sql

    def test_sqlserver_positional_order(self, base_config_data):
        """Test positional params follow placeholder order in the text"""
        config = _config(
            base_config_data,
            includeColumnCount=True,
            hasColumns=["id"],
            includeTables=["orders%"],
        )

        statement = build_tables_query(config, Dialect.SQLSERVER, "dbo")

        assert statement.sql.count("?") == len(statement.params)
        assert statement.params == ["dbo", "dbo", "id", "dbo", "orders%"]
        assert "hc0.[has_id] AS [has_id]" in statement.sql

    def test_patterns_never_in_sql_text(self, base_config_data):
        """Test configured values are bound, not interpolated"""
        pattern = "x' OR '1'='1"
        config = _config(base_config_data, includeTables=[pattern], excludeTables=[pattern])

        statement = build_tables_query(config, Dialect.POSTGRES, "public")

        assert pattern not in statement.sql

    def test_column_names_query(self):
        """Test column listing is bound and ordered"""
        statement = build_column_names_query(Dialect.MYSQL, "shop", "orders")

        assert statement.sql == (
            "SELECT c.column_name AS column_name FROM information_schema.columns c"
            " WHERE c.table_name = %(p0)s AND c.table_schema = %(p1)s"
            " ORDER BY c.column_name ASC"
        )
        assert statement.params == {"p0": "orders", "p1": "shop"}


class TestTableDescriptor:
    """Test descriptor construction and access"""

    def test_from_row(self):
        """Test presence flags from joined columns, NULL meaning absent"""
        descriptor = TableDescriptor.from_row(
            {"table_name": "account_move", "column_count": 12, "has_id": 1, "has_write_date": None},
            ["id", "write_date"],
        )

        assert descriptor.table_name == "account_move"
        assert descriptor.column_count == 12
        assert descriptor.has("id") is True
        assert descriptor.has("write_date") is False
        assert descriptor.has("name") is None

    def test_to_dict(self):
        """Test the flat row shape"""
        descriptor = TableDescriptor.from_row({"table_name": "t", "has_id": 1}, ["id"])
        descriptor = descriptor.with_column_names(["a", "id"])

        assert descriptor.to_dict() == {"table_name": "t", "has_id": True, "column_names": ["a", "id"]}

    def test_column_count_absent_when_not_requested(self):
        """Test column_count is None without includeColumnCount"""
        assert TableDescriptor.from_row({"table_name": "t"}).column_count is None


class TestIntrospectTables:
    """Test introspect_tables against a mocked adapter"""

    def setup_method(self):
        self.adapter = MagicMock()
        self.adapter.catalog_schema.return_value = "public"
        self.handle = BackendHandle(spec=MagicMock(name="spec"), adapter=self.adapter, connection=MagicMock())
        self.handle.spec.dialect = Dialect.POSTGRES
        self.handle.spec.name = "restore"

    def test_descriptors_in_catalog_order(self, base_config_data):
        """Test rows become descriptors in the order returned"""
        config = _config(base_config_data, hasColumns=["id"])
        self.adapter.query_all_rows.return_value = [
            {"table_name": "account_account", "has_id": 1},
            {"table_name": "account_move", "has_id": None},
        ]

        descriptors = introspect_tables(self.adapter, self.handle, config)

        assert [d.table_name for d in descriptors] == ["account_account", "account_move"]
        assert [d.has("id") for d in descriptors] == [True, False]
        self.adapter.catalog_schema.assert_called_once_with(self.handle.spec)

    def test_column_names_attached(self, base_config_data):
        """Test one column query per table when includeColumnNames is set"""
        config = _config(base_config_data, includeColumnNames=True)
        self.adapter.query_all_rows.side_effect = [
            [{"table_name": "a"}, {"table_name": "b"}],
            [{"column_name": "id"}, {"column_name": "name"}],
            [{"column_name": "code"}],
        ]

        descriptors = introspect_tables(self.adapter, self.handle, config)

        assert descriptors[0].column_names == ("id", "name")
        assert descriptors[1].column_names == ("code",)
        assert self.adapter.query_all_rows.call_count == 3
        _, sql, params = self.adapter.query_all_rows.call_args_list[1].args
        assert params == {"p0": "a", "p1": "public"}

    def test_deterministic(self, base_config_data):
        """Test the same catalog yields the same descriptors"""
        config = _config(base_config_data, includeColumnCount=True, hasColumns=["id"])
        rows = [{"table_name": "a", "column_count": 3, "has_id": 1}]
        self.adapter.query_all_rows.return_value = rows

        first = introspect_tables(self.adapter, self.handle, config)
        second = introspect_tables(self.adapter, self.handle, config)

        assert first == second

    def test_query_error_propagates(self, base_config):
        """Test catalog failures are not swallowed"""
        from dbcompare.exceptions import QueryError

        self.adapter.query_all_rows.side_effect = QueryError("SELECT", None, RuntimeError("denied"))

        with pytest.raises(QueryError):
            introspect_tables(self.adapter, self.handle, base_config)

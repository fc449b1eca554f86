"""
Unit tests for SQL injection prevention.

Identifiers are quoted per dialect with the quote character doubled;
values are always bound parameters, never part of the SQL text.
"""

import pytest

from dbcompare.backends.statement import IN_BATCH_SIZE, StatementBuilder, in_batches
from dbcompare.utils.dialect import MYSQL_MAX_LIMIT, Dialect
from dbcompare.utils.sql_safety import (
    quote_identifier,
    quote_table,
    validate_identifier,
    validate_integer_param,
)


class TestIdentifierQuoting:
    """Test per-dialect identifier quoting"""

    @pytest.mark.parametrize("dialect,expected", [
        (Dialect.POSTGRES, '"customers"'),
        (Dialect.MYSQL, "`customers`"),
        (Dialect.SQLSERVER, "[customers]"),
    ])
    def test_quote_simple_name(self, dialect, expected):
        """Test quoting simple table name"""
        assert quote_identifier("customers", dialect) == expected

    @pytest.mark.parametrize("dialect,name,expected", [
        (Dialect.POSTGRES, 'bad"name', '"bad""name"'),
        (Dialect.MYSQL, "bad`name", "`bad``name`"),
        (Dialect.SQLSERVER, "bad]name", "[bad]]name]"),
    ])
    def test_quote_character_is_doubled(self, dialect, name, expected):
        """Test the closing quote cannot terminate the identifier early"""
        assert quote_identifier(name, dialect) == expected

    def test_injection_attempt_stays_inside_quotes(self):
        """Test a malicious name becomes a single quoted identifier"""
        quoted = quote_identifier('users"; DROP TABLE users; --', Dialect.POSTGRES)
        assert quoted == '"users""; DROP TABLE users; --"'

    def test_reject_empty_and_nul(self):
        """Test empty names and NUL bytes are rejected"""
        with pytest.raises(ValueError, match="cannot be empty"):
            quote_identifier("", Dialect.POSTGRES)
        with pytest.raises(ValueError, match="Invalid SQL identifier"):
            quote_identifier("customers\x00malicious", Dialect.POSTGRES)

    def test_quote_schema_table(self):
        """Test a table qualified by its schema"""
        assert quote_table("customers", Dialect.SQLSERVER, "sales") == "[sales].[customers]"
        assert quote_table("customers", Dialect.POSTGRES, "public") == '"public"."customers"'
        assert quote_table("customers", Dialect.MYSQL) == "`customers`"

    def test_dots_stay_inside_the_name(self):
        """Test a dotted catalog name is quoted as one identifier"""
        assert quote_table("public.dbo.customers", Dialect.POSTGRES) == '"public.dbo.customers"'
        assert quote_table("a.b", Dialect.SQLSERVER, "dbo") == "[dbo].[a.b]"


class TestValidation:
    """Test identifier and integer validation"""

    @pytest.mark.parametrize("name", ["id", "write_date", "_col9", "WriteDate"])
    def test_valid_identifiers(self, name):
        """Test plain identifiers pass"""
        validate_identifier(name)

    @pytest.mark.parametrize("name", [
        "customers; DROP TABLE users--",
        "customers' OR '1'='1",
        "9lives",
        "naïve",
        "two words",
    ])
    def test_invalid_identifiers(self, name):
        """Test anything but ASCII identifiers is rejected"""
        with pytest.raises(ValueError, match="Invalid SQL identifier"):
            validate_identifier(name)

    def test_integer_param(self):
        """Test integer validation"""
        validate_integer_param(0, "limit")
        with pytest.raises(ValueError, match="Must be an integer"):
            validate_integer_param(True, "limit")
        with pytest.raises(ValueError, match="Must be >= 0"):
            validate_integer_param(-1, "limit")


class TestDialect:
    """Test dialect syntax helpers"""

    @pytest.mark.parametrize("tag,expected", [
        ("postgres", Dialect.POSTGRES),
        ("PostgreSQL", Dialect.POSTGRES),
        ("mysql", Dialect.MYSQL),
        ("mariadb", Dialect.MYSQL),
        ("mssql", Dialect.SQLSERVER),
    ])
    def test_from_tag(self, tag, expected):
        """Test tag aliases resolve"""
        assert Dialect.from_tag(tag) == expected

    def test_from_tag_unknown(self):
        """Test unknown tags are rejected"""
        with pytest.raises(ValueError, match="Unknown dialect"):
            Dialect.from_tag("sqlite")

    def test_placeholders(self):
        """Test placeholder style per driver"""
        assert Dialect.POSTGRES.placeholder("p0") == "%(p0)s"
        assert Dialect.MYSQL.placeholder("p0") == "%(p0)s"
        assert Dialect.SQLSERVER.placeholder("p0") == "?"

    def test_offset_clauses(self):
        """Test each dialect skips rows its own way"""
        assert Dialect.POSTGRES.offset_clause("%(p0)s") == "OFFSET %(p0)s"
        assert Dialect.MYSQL.offset_clause("%(p0)s") == f"LIMIT {MYSQL_MAX_LIMIT} OFFSET %(p0)s"
        assert Dialect.SQLSERVER.offset_clause("?") == "ORDER BY (SELECT NULL) OFFSET ? ROWS"

    def test_limited_select(self):
        """Test row limits per dialect"""
        assert Dialect.POSTGRES.limited_select('"id"', '"t"', None) == 'SELECT "id" FROM "t"'
        assert Dialect.MYSQL.limited_select("`id`", "`t`", "%(p0)s") == "SELECT `id` FROM `t` LIMIT %(p0)s"
        assert Dialect.SQLSERVER.limited_select("[id]", "[t]", "?") == "SELECT TOP (?) [id] FROM [t]"

    def test_commit_timestamp_support(self):
        """Test only PostgreSQL tracks commit timestamps"""
        assert Dialect.POSTGRES.supports_commit_timestamp
        assert not Dialect.MYSQL.supports_commit_timestamp
        assert not Dialect.SQLSERVER.supports_commit_timestamp


class TestStatementBuilder:
    """Test parameter binding"""

    def test_named_binding(self):
        """Test pyformat dialects bind named parameters"""
        builder = StatementBuilder(Dialect.MYSQL)
        sql = f"SELECT * FROM {builder.table('t')} WHERE {builder.ident('a')} = {builder.bind(1)}"

        statement = builder.build(sql)

        assert statement.sql == "SELECT * FROM `t` WHERE `a` = %(p0)s"
        assert statement.params == {"p0": 1}

    def test_positional_binding(self):
        """Test qmark dialects bind positional parameters in order"""
        builder = StatementBuilder(Dialect.SQLSERVER)
        sql = f"SELECT * FROM t WHERE a = {builder.bind('x')} AND b = {builder.bind('y')}"

        statement = builder.build(sql)

        assert statement.sql == "SELECT * FROM t WHERE a = ? AND b = ?"
        assert statement.params == ["x", "y"]

    def test_no_params(self):
        """Test statements without values carry no params"""
        assert StatementBuilder(Dialect.POSTGRES).build("SELECT 1").params is None

    def test_percent_escaped_for_pyformat(self):
        """Test % in identifiers cannot start a placeholder"""
        builder = StatementBuilder(Dialect.POSTGRES)
        sql = f"SELECT {builder.ident('rate_%')} FROM {builder.table('t', 'public')} WHERE a = {builder.bind(1)}"

        statement = builder.build(sql)

        assert statement.sql == 'SELECT "rate_%%" FROM "public"."t" WHERE a = %(p0)s'

    def test_percent_literal_without_params(self):
        """Test % stays single when nothing is bound"""
        builder = StatementBuilder(Dialect.MYSQL)

        statement = builder.build(f"SELECT * FROM {builder.table('rate_%')}")

        assert statement.sql == "SELECT * FROM `rate_%`"
        assert statement.params is None

    def test_percent_untouched_for_qmark(self):
        builder = StatementBuilder(Dialect.SQLSERVER)

        statement = builder.build(f"SELECT * FROM {builder.table('rate_%')} WHERE a = {builder.bind(1)}")

        assert statement.sql == "SELECT * FROM [rate_%] WHERE a = ?"

    def test_postgres_in_binds_array(self):
        """Test PostgreSQL binds one array"""
        builder = StatementBuilder(Dialect.POSTGRES)
        predicate = builder.in_predicate('"id"', [1, 2, 3])

        assert predicate == '"id" = ANY(%(p0)s)'
        assert builder.params == {"p0": [1, 2, 3]}

    def test_mysql_in_binds_each_member(self):
        """Test MySQL binds one placeholder per member"""
        builder = StatementBuilder(Dialect.MYSQL)
        predicate = builder.in_predicate("`id`", [1, 2])

        assert predicate == "`id` IN (%(p0)s, %(p1)s)"
        assert builder.params == {"p0": 1, "p1": 2}

    def test_in_as_text(self):
        """Test text binding stringifies members and avoids arrays"""
        builder = StatementBuilder(Dialect.POSTGRES)
        predicate = builder.in_predicate('"id"', [1, 2], as_text=True)

        assert predicate == '"id" IN (%(p0)s, %(p1)s)'
        assert builder.params == {"p0": "1", "p1": "2"}

    def test_empty_in_is_false(self):
        """Test an empty member list matches nothing"""
        builder = StatementBuilder(Dialect.SQLSERVER)
        assert builder.in_predicate("[id]", []) == "1 = 0"
        assert builder.params is None

    def test_malicious_value_is_bound(self):
        """Test values never reach the SQL text"""
        builder = StatementBuilder(Dialect.POSTGRES)
        value = "x' OR '1'='1"
        statement = builder.build(f"SELECT * FROM t WHERE name = {builder.bind(value)}")

        assert value not in statement.sql
        assert statement.params == {"p0": value}


class TestInBatches:
    """Test IN-list batching"""

    def test_postgres_single_batch(self):
        """Test arrays are not split"""
        batches = list(in_batches(range(2500), Dialect.POSTGRES))
        assert len(batches) == 1
        assert len(batches[0]) == 2500

    def test_per_member_batches(self):
        """Test per-member binding is capped per statement"""
        batches = list(in_batches(range(2500), Dialect.SQLSERVER))

        assert [len(b) for b in batches] == [IN_BATCH_SIZE, IN_BATCH_SIZE, 500]
        assert [v for b in batches for v in b] == list(range(2500))

    def test_postgres_text_batches(self):
        """Test text binding on PostgreSQL is batched like other dialects"""
        batches = list(in_batches(range(1001), Dialect.POSTGRES, as_text=True))
        assert [len(b) for b in batches] == [1000, 1]

    def test_empty(self):
        """Test no members produces no statement"""
        assert list(in_batches([], Dialect.MYSQL)) == []

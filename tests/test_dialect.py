"""Tests for the vendor dialects and the dialect registry."""

from datetime import date, datetime, time

import pandas as pd
import pytest

from schemagraph.dialect import (
    CubridDialect,
    DB2Dialect,
    Derby10_6Dialect,
    DerbyDialect,
    DialectRule,
    Firebird2_5Dialect,
    FirebirdDialect,
    H2Dialect,
    HSQL2Dialect,
    HSQLDialect,
    MySQLDialect,
    OracleDialect,
    PostgreSQL10Dialect,
    PostgreSQLDialect,
    SqlServerDialect,
    UnknownDialect,
    VersionNumber,
    get_dialect_for_product,
)
from schemagraph.errors import ConfigurationError, UnsupportedOperationError
from schemagraph.model import Sequence

QUERY = "select a from t"
TIMESTAMP = pd.Timestamp("2024-01-31 12:30:05.123456789")


class TestRegistry:
    """Tests for get_dialect_for_product."""

    @pytest.mark.parametrize("product,version,expected", [
        ("HSQL Database Engine", "1.8.0", HSQLDialect),
        ("HSQL Database Engine", "2", HSQL2Dialect),
        ("HSQL Database Engine", "2.0.0", HSQL2Dialect),
        ("HSQL Database Engine", "2.9", HSQL2Dialect),
        ("HSQL Database Engine", None, HSQL2Dialect),
        ("Oracle", "Oracle Database 19c Enterprise Edition Release 19.0.0.0.0", OracleDialect),
        ("PostgreSQL", "9.6", PostgreSQLDialect),
        ("PostgreSQL", "10.4 (Debian 10.4-2.pgdg90+1)", PostgreSQL10Dialect),
        ("MySQL", "8.0.33", MySQLDialect),
        ("H2", "2.1.214", H2Dialect),
        ("Apache Derby", "10.5.3.0", DerbyDialect),
        ("Apache Derby", "10.14.2.0", Derby10_6Dialect),
        ("DB2/LINUXX8664", "11.5", DB2Dialect),
        ("Microsoft SQL Server", "15.00.2000", SqlServerDialect),
        ("Firebird", "2.1", FirebirdDialect),
        ("Firebird", "3.0", Firebird2_5Dialect),
        ("CUBRID", "11.0", CubridDialect),
    ])
    def test_product_mapping(self, product, version, expected):
        assert type(get_dialect_for_product(product, version)) is expected

    def test_each_call_creates_a_new_dialect(self):
        assert get_dialect_for_product("Oracle") is not get_dialect_for_product("Oracle")

    def test_unknown_product(self):
        dialect = get_dialect_for_product("Sybase", "16")
        assert isinstance(dialect, UnknownDialect)
        assert dialect.system == "Sybase"

    def test_missing_product(self):
        dialect = get_dialect_for_product(None)
        assert isinstance(dialect, UnknownDialect)
        assert dialect.system == "unknown"

    def test_custom_rules(self):
        rules = [
            DialectRule.from_dict({"product": "acme", "min_version": 3,
                                   "dialect": "schemagraph.dialect.h2.H2Dialect"}),
            DialectRule.from_dict({"product": "ACME", "dialect": "schemagraph.dialect.mysql.MySQLDialect"}),
        ]
        assert isinstance(get_dialect_for_product("Acme DB", "3.1", rules), H2Dialect)
        assert isinstance(get_dialect_for_product("Acme DB", "2.9", rules), MySQLDialect)
        assert isinstance(get_dialect_for_product("Oracle", "19", rules), UnknownDialect)

    def test_rule_without_dialect(self):
        with pytest.raises(ConfigurationError):
            DialectRule.from_dict({"product": "acme"})

    @pytest.mark.parametrize("path", [
        "schemagraph.dialect.nowhere.NoDialect",
        "schemagraph.dialect.h2.NoDialect",
        "schemagraph.model.table.Table",
    ])
    def test_unloadable_dialect_class(self, path):
        rules = [DialectRule.from_dict({"product": "acme", "dialect": path})]
        with pytest.raises(ConfigurationError):
            get_dialect_for_product("acme", None, rules)

    def test_database_dialect(self, shop_database):
        assert isinstance(shop_database.dialect, HSQL2Dialect)
        assert shop_database.dialect is shop_database.dialect


class TestVersionNumber:
    """Tests for VersionNumber."""

    def test_trailing_zeros_do_not_matter(self):
        assert VersionNumber.parse("2") == VersionNumber.parse("2.0.0")
        assert hash(VersionNumber.parse("2")) == hash(VersionNumber.parse("2.0"))

    def test_ordering(self):
        assert VersionNumber.parse("1.8.0") < VersionNumber.parse("2")
        assert VersionNumber.parse("10.14") > VersionNumber.parse("10.6")
        assert VersionNumber.parse("10.6") <= VersionNumber.parse("10.6.0")

    def test_text_around_the_number(self):
        assert VersionNumber.parse("10.4 (Debian 10.4-2)") == VersionNumber((10, 4))
        assert str(VersionNumber.parse("v 1.2.3 beta")) == "1.2.3"

    def test_no_number(self):
        assert VersionNumber.parse("unknown") is None
        assert VersionNumber.parse(None) is None


class TestFormatValue:
    """Tests for rendering literals."""

    @pytest.mark.parametrize("value,expected", [
        (None, "null"),
        ("O'Brien", "'O''Brien'"),
        (42, "42"),
        (1.5, "1.5"),
        (date(2024, 1, 31), "'2024-01-31'"),
        (datetime(2024, 1, 31), "'2024-01-31'"),
        (datetime(2024, 1, 31, 8, 5, 3), "'2024-01-31 08:05:03'"),
        (time(8, 5, 3), "'08:05:03'"),
        (TIMESTAMP, "'2024-01-31 12:30:05.123456789'"),
    ])
    def test_hsql(self, value, expected):
        assert HSQL2Dialect().format_value(value) == expected

    def test_oracle(self):
        dialect = OracleDialect()
        assert dialect.format_value(date(2024, 1, 31)) == "to_date('2024-01-31', 'yyyy-mm-dd')"
        assert dialect.format_value(datetime(2024, 1, 31, 8, 5, 3)) == (
            "to_date('2024-01-31 08:05:03', 'yyyy-mm-dd HH24:mi:ss')"
        )
        assert dialect.format_value(TIMESTAMP) == (
            "to_timestamp('2024-01-31 12:30:05.123456789', 'yyyy-mm-dd HH24:mi:ss.FF')"
        )

    def test_postgres(self):
        dialect = PostgreSQLDialect()
        assert dialect.format_value(date(2024, 1, 31)) == "date '2024-01-31'"
        assert dialect.format_value(TIMESTAMP) == "timestamp '2024-01-31 12:30:05.123456789'"

    def test_timestamp_without_fraction(self):
        value = pd.Timestamp("2024-01-31 12:30:05")
        assert HSQL2Dialect().format_value(value) == "'2024-01-31 12:30:05.000000000'"

    def test_derby_and_sql_server(self):
        assert DerbyDialect().format_value(date(2024, 1, 31)) == "DATE('2024-01-31')"
        value = datetime(2024, 1, 31, 8, 5, 3)
        assert SqlServerDialect().format_value(value) == "'2024-01-31T08:05:03'"

    def test_booleans(self):
        assert HSQL2Dialect().format_value(True) == "true"
        assert PostgreSQLDialect().format_value(False) == "false"
        assert OracleDialect().format_value(False) == "0"
        assert SqlServerDialect().format_value(True) == "1"


class TestSequences:
    """Tests for sequence DDL."""

    def test_oracle(self):
        sequence = Sequence("SEQ_A", schema_name="APP")
        sequence.start = 100
        sequence.cycle = False
        sequence.cache = 20
        sequence.order = False
        assert OracleDialect().render_create_sequence(sequence) == (
            'CREATE SEQUENCE "APP"."SEQ_A" START WITH 100 NOCYCLE CACHE 20 NOORDER'
        )

    def test_postgres(self):
        sequence = Sequence("SEQ_A")
        sequence.start = 100
        sequence.increment = 5
        sequence.max_value = 999
        sequence.cycle = False
        sequence.cache = 10
        assert PostgreSQLDialect().render_create_sequence(sequence) == (
            "CREATE SEQUENCE SEQ_A START WITH 100 INCREMENT BY 5 MAXVALUE 999 NO CYCLE CACHE 10"
        )

    def test_defaults_are_omitted(self):
        assert HSQL2Dialect().render_create_sequence(Sequence("S")) == "CREATE SEQUENCE S"

    def test_mysql_has_no_sequences(self):
        dialect = MySQLDialect()
        assert not dialect.is_sequence_supported()
        with pytest.raises(UnsupportedOperationError, match="Sequence not supported in mysql"):
            dialect.render_create_sequence(Sequence("S"))
        with pytest.raises(UnsupportedOperationError):
            dialect.render_fetch_sequence_value("S")

    def test_firebird_generator(self):
        sequence = Sequence("SEQ_A")
        sequence.start = 10
        assert FirebirdDialect().render_create_sequence(sequence) == (
            "CREATE GENERATOR SEQ_A; SET GENERATOR SEQ_A TO 9;"
        )
        assert FirebirdDialect().render_drop_sequence("SEQ_A") == "drop generator SEQ_A"

    def test_derby_sequences_by_version(self):
        sequence = Sequence("S", schema_name="APP")
        sequence.cycle = True
        assert Derby10_6Dialect().render_create_sequence(sequence) == "CREATE SEQUENCE APP.S AS BIGINT CYCLE"
        with pytest.raises(UnsupportedOperationError):
            DerbyDialect().render_create_sequence(sequence)

    def test_fetch_and_set(self):
        assert OracleDialect().render_fetch_sequence_value("S") == "select S.nextval from dual"
        assert PostgreSQLDialect().render_set_sequence_value("s", 5) == "select setval('s', 5, false)"
        assert DB2Dialect().render_fetch_sequence_value("S") == "select nextval for S from sysibm.sysdummy1"
        assert DB2Dialect().render_fetch_sequence_value("T.S") == "select nextval for S from T"

    def test_postgres10_detail_query(self):
        query = PostgreSQL10Dialect().render_sequence_detail_query("seq_a")
        assert "from pg_sequences" in query
        assert query.endswith("where sequencename = 'seq_a'")


class TestRestrictRownums:
    """Tests for restrict_rownums."""

    @pytest.mark.parametrize("dialect,offset,expected", [
        (HSQL2Dialect(), 0, "select TOP 10 a from t"),
        (HSQL2Dialect(), 5, "select LIMIT 5 10 a from t"),
        (OracleDialect(), 0, "select a from t WHERE ROWNUM <= 10"),
        (PostgreSQLDialect(), 0, "select a from t LIMIT 10"),
        (PostgreSQLDialect(), 5, "select a from t LIMIT 10 OFFSET 5"),
        (MySQLDialect(), 5, "select a from t LIMIT 10 OFFSET 5"),
        (H2Dialect(), 5, "select a from t LIMIT 10 OFFSET 5"),
        (DerbyDialect(), 5, "select a from t OFFSET 5 ROWS FETCH NEXT 10 ROWS ONLY"),
        (DB2Dialect(), 0, "select a from t FETCH FIRST 10 ROWS ONLY"),
        (DB2Dialect(), 5, "select a from t OFFSET 5 ROWS FETCH FIRST 10 ROWS ONLY"),
        (SqlServerDialect(), 0, "select TOP 10 a from t"),
        (SqlServerDialect(), 5, "select a from t OFFSET 5 ROWS FETCH NEXT 10 ROWS ONLY"),
        (CubridDialect(), 0, "select a from t limit 10"),
        (CubridDialect(), 5, "select a from t limit 5, 10"),
        (FirebirdDialect(), 5, "select FIRST 10 SKIP 5 a from t"),
    ])
    def test_vendor_syntax(self, dialect, offset, expected):
        assert dialect.restrict_rownums(offset, 10, QUERY) == expected

    def test_oracle_extends_where_clause(self):
        result = OracleDialect().restrict_rownums(5, 10, "select a from t where a > 1")
        assert result == "select a from t where a > 1 AND ROWNUM BETWEEN 5 AND 15"

    def test_oracle_where_in_subquery(self):
        query = "select a from t where a in (select b from u where c = 1) order by a"
        assert OracleDialect().restrict_rownums(0, 10, query) == (
            "select a from t where a in (select b from u where c = 1) AND ROWNUM <= 10 order by a"
        )

    def test_oracle_where_only_in_subquery(self):
        query = "select a from (select b a from u where c = 1) x"
        assert OracleDialect().restrict_rownums(0, 10, query) == (
            "select a from (select b a from u where c = 1) x WHERE ROWNUM <= 10"
        )

    def test_oracle_where_inside_literal(self):
        query = "select a from t where b = 'x where y'"
        assert OracleDialect().restrict_rownums(0, 10, query) == (
            "select a from t where b = 'x where y' AND ROWNUM <= 10"
        )

    def test_oracle_before_group_by(self):
        query = "select a, count(*) from t group by a"
        assert OracleDialect().restrict_rownums(0, 10, query) == (
            "select a, count(*) from t WHERE ROWNUM <= 10 group by a"
        )

    def test_select_distinct(self):
        result = HSQL2Dialect().restrict_rownums(0, 3, "SELECT DISTINCT a FROM t")
        assert result == "SELECT DISTINCT TOP 3 a FROM t"

    def test_not_a_select(self):
        with pytest.raises(ConfigurationError):
            SqlServerDialect().restrict_rownums(0, 3, "update t set a = 1")

    def test_unknown_dialect(self):
        with pytest.raises(UnsupportedOperationError) as exc_info:
            UnknownDialect("Sybase").restrict_rownums(0, 10, QUERY)
        assert exc_info.value.system == "Sybase"


class TestExpressions:
    """Tests for regex, trim, case and type mapping."""

    def test_regex(self):
        assert OracleDialect().regex("NAME", True, "^A") == "NOT REGEXP_LIKE(NAME, '^A')"
        assert PostgreSQLDialect().regex("NAME", False, "^A") == "NAME ~ '^A'"
        assert MySQLDialect().regex("NAME", True, "^A") == "NAME NOT REGEXP '^A'"
        assert HSQL2Dialect().regex("NAME", False, "^A") == "REGEXP_MATCHES(NAME, '^A')"
        assert Firebird2_5Dialect().regex("NAME", False, "A%") == "NAME SIMILAR TO 'A%'"

    def test_regex_unsupported(self):
        dialect = HSQLDialect()
        assert not dialect.supports_regex()
        with pytest.raises(UnsupportedOperationError):
            dialect.regex("NAME", False, "^A")

    def test_trim(self):
        assert HSQL2Dialect().trim("NAME") == "LTRIM(RTRIM(NAME))"
        assert OracleDialect().trim("NAME") == "TRIM(NAME)"
        with pytest.raises(UnsupportedOperationError):
            UnknownDialect("x").trim("NAME")

    def test_case(self):
        pairs = (("A > 1", "1"), ("A < 0", "-1"))
        assert OracleDialect().render_case("FLAG", "0", *pairs) == (
            "CASE WHEN A > 1 THEN 1 WHEN A < 0 THEN -1 ELSE 0 END AS FLAG"
        )
        assert SqlServerDialect().render_case("FLAG", None, *pairs) == (
            "FLAG = CASE WHEN A > 1 THEN 1 WHEN A < 0 THEN -1 END"
        )

    def test_special_types(self):
        assert OracleDialect().special_type("VARCHAR") == "varchar2"
        assert PostgreSQLDialect().special_type("double") == "numeric"
        assert MySQLDialect().special_type("long") == "bigint"
        assert H2Dialect().special_type("VARCHAR") == "VARCHAR"


class TestNames:
    """Tests for reserved words, default namespaces and generated names."""

    def test_reserved_words(self):
        assert OracleDialect().is_reserved_word("rownum")
        assert not PostgreSQLDialect().is_reserved_word("rownum")
        assert HSQL2Dialect().is_reserved_word("select")
        assert not HSQL2Dialect().is_reserved_word("")

    def test_driver_keywords(self):
        dialect = HSQL2Dialect()
        assert dialect.is_reserved_word("bar", "FOO, BAR")
        assert dialect.is_reserved_word("foo")

    def test_driver_keywords_of_later_calls(self):
        dialect = HSQL2Dialect()
        assert not dialect.is_reserved_word("baz")
        assert dialect.is_reserved_word("bar", "FOO, BAR")
        assert dialect.is_reserved_word("baz", ["BAZ"])
        assert dialect.is_reserved_word("foo")

    def test_generated_names(self):
        oracle = OracleDialect()
        assert not oracle.is_deterministic_pk_name("SYS_C00012345")
        assert oracle.is_deterministic_pk_name("ORDERS_PK")
        assert not oracle.is_deterministic_check_name("SYS_C00012345")
        hsql = HSQL2Dialect()
        assert not hsql.is_deterministic_fk_name("SYS_FK_10093")
        assert PostgreSQLDialect().is_deterministic_index_name("orders_pkey")

    def test_simple_not_null_check(self):
        assert OracleDialect().is_simple_not_null_check('"ID" IS NOT NULL')
        assert not OracleDialect().is_simple_not_null_check('"ID" > 0')
        assert not PostgreSQLDialect().is_simple_not_null_check('"ID" IS NOT NULL')

    def test_default_namespaces(self):
        assert OracleDialect().is_default_schema("scott", "SCOTT")
        assert PostgreSQLDialect().is_default_schema("public", None)
        assert SqlServerDialect().is_default_schema("dbo", None)
        assert DerbyDialect().is_default_schema("APP", "ME")
        assert not MySQLDialect().is_default_catalog("shop", "me")


class TestPreparedStatements:
    """Tests for insert and update statements."""

    def test_insert_quotes_names(self, shop_database):
        table = shop_database.get_table("ORDERS")
        columns = table.get_columns(["ID", "CUSTOMER_ID"])
        assert HSQL2Dialect().insert(table, columns) == (
            'insert into "PUBLIC"."ORDERS" ("ID","CUSTOMER_ID") values (?,?)'
        )

    def test_insert_unquoted(self, shop_database):
        table = shop_database.get_table("ORDERS")
        columns = table.get_columns(["ID", "CUSTOMER_ID"])
        assert MySQLDialect().insert(table, columns) == (
            "insert into PUBLIC.ORDERS (ID,CUSTOMER_ID) values (?,?)"
        )

    def test_update(self, shop_database):
        table = shop_database.get_table("ORDERS")
        columns = table.get_columns(["CUSTOMER_ID", "ORDER_DATE"])
        assert MySQLDialect().update(table, table.get_pk_column_names(), columns) == (
            "update PUBLIC.ORDERS set CUSTOMER_ID=?, ORDER_DATE=? where ID=?"
        )

    def test_update_requires_primary_key(self, shop_database):
        table = shop_database.get_table("ORDERS")
        with pytest.raises(ConfigurationError):
            MySQLDialect().update(table, (), table.get_columns())

"""
Tests for the output module.

Tests the SQL script, CSV and YAML exporters.
"""

import pandas as pd

from schemagraph.dialect import MySQLDialect
from schemagraph.metadata import YamlModelImporter
from schemagraph.model import UniqueConstraint
from schemagraph.output import CsvModelExporter, SqlExportConfig, SqlScriptExporter, YamlModelExporter
from schemagraph.sql.rendering import NameSpec


class TestSqlExportConfig:
    """Tests for SqlExportConfig."""

    def test_defaults(self):
        config = SqlExportConfig()
        assert config.name_spec == NameSpec.IF_REPRODUCIBLE
        assert config.include_foreign_keys
        assert config.file_name == "create_tables.sql"

    def test_dict_round_trip(self):
        config = SqlExportConfig(name_spec=NameSpec.NEVER, break_cycles=False, schema_name="APP")
        data = config.to_dict()
        assert data["name_spec"] == NameSpec.NEVER.value
        assert SqlExportConfig.from_dict(data) == config

    def test_from_empty_dict(self):
        assert SqlExportConfig.from_dict({}) == SqlExportConfig()


class TestSqlScriptExporter:
    """Tests for SqlScriptExporter."""

    def test_tables_in_dependency_order(self, shop_database):
        statements = SqlScriptExporter(shop_database).render_statements()
        creates = [s for s in statements if s.startswith("create table")]
        assert [s.split()[2] for s in creates] == ["CUSTOMER", "ORDERS", "PRODUCT", "ORDER_ITEM"]
        assert all("FOREIGN KEY" not in s for s in creates)

    def test_foreign_keys_after_tables(self, shop_database):
        statements = SqlScriptExporter(shop_database).render_statements()
        alters = statements[4:]
        assert len(alters) == 3
        assert alters[0] == (
            "ALTER TABLE ORDERS ADD \n"
            "\tCONSTRAINT ORDERS_CUSTOMER_FK FOREIGN KEY (CUSTOMER_ID) REFERENCES PUBLIC.CUSTOMER(ID)"
        )
        assert all(s.startswith("ALTER TABLE ORDER_ITEM") for s in alters[1:])

    def test_without_foreign_keys(self, shop_database):
        config = SqlExportConfig(include_foreign_keys=False)
        statements = SqlScriptExporter(shop_database, config).render_statements()
        assert len(statements) == 4

    def test_sequences_first(self, yaml_importer):
        database = yaml_importer.create_database()
        statements = SqlScriptExporter(database).render_statements()
        assert statements[0].startswith("CREATE SEQUENCE SEQ_ORDER START WITH 1000")
        assert statements[1].startswith("create table CUSTOMER")

    def test_sequences_skipped_without_support(self, yaml_importer):
        database = yaml_importer.create_database()
        database.dialect = MySQLDialect()
        statements = SqlScriptExporter(database).render_statements()
        assert not any(s.startswith("CREATE SEQUENCE") for s in statements)

    def test_schema_restriction(self, shop_database):
        config = SqlExportConfig(schema_name="PUBLIC", include_foreign_keys=False)
        statements = SqlScriptExporter(shop_database, config).render_statements()
        assert len(statements) == 4

    def test_write(self, shop_database, tmp_path):
        exporter = SqlScriptExporter(shop_database, SqlExportConfig(file_name="shop.sql"))
        output_path = exporter.write(tmp_path / "ddl")
        assert output_path == tmp_path / "ddl" / "shop.sql"
        content = output_path.read_text()
        assert content == exporter.render()
        assert content.count(";\n\n") == 7


class TestCsvModelExporter:
    """Tests for CsvModelExporter."""

    def test_column_frame(self, shop_database):
        df = CsvModelExporter(shop_database).column_frame()
        assert len(df) == 13
        first = df.iloc[0]
        assert (first["table"], first["column"], first["position"]) == ("ORDER_ITEM", "ORDER_ID", 1)
        quantity = df[df["column"] == "QUANTITY"].iloc[0]
        assert (quantity["size"], quantity["fraction_digits"]) == (8, 2)

    def test_multi_column_keys_are_one_row_per_column(self, shop_database):
        df = CsvModelExporter(shop_database).primary_key_frame()
        order_item = df[df["table"] == "ORDER_ITEM"]
        assert list(order_item["column"]) == ["ORDER_ID", "LINE_NO"]
        assert list(order_item["position"]) == [1, 2]

    def test_foreign_key_frame(self, shop_database):
        df = CsvModelExporter(shop_database).foreign_key_frame()
        assert len(df) == 3
        row = df[df["constraint"] == "ORDERS_CUSTOMER_FK"].iloc[0]
        assert (row["referee_table"], row["referee_column"]) == ("CUSTOMER", "ID")
        assert row["delete_rule"] == "NO ACTION"

    def test_imported_model(self, yaml_importer):
        database = yaml_importer.create_database()
        frames = CsvModelExporter(database).frames()
        assert len(frames["checks.csv"]) == 2
        assert len(frames["sequences.csv"]) == 1
        indexes = frames["indexes.csv"]
        assert list(indexes["index"]) == ["ORDERS_DATE_IDX", "CUSTOMER_EMAIL_UK"]
        assert list(frames["unique_keys.csv"]["constraint"]) == ["CUSTOMER_EMAIL_UK"]

    def test_empty_frames_keep_their_columns(self, shop_database):
        df = CsvModelExporter(shop_database).index_frame()
        assert df.empty
        assert list(df.columns) == ["schema", "table", "index", "unique", "name_deterministic", "position", "column"]

    def test_write(self, shop_database, tmp_path):
        paths = CsvModelExporter(shop_database).write(tmp_path)
        assert set(paths) == {
            "columns.csv", "primary_keys.csv", "unique_keys.csv", "foreign_keys.csv",
            "checks.csv", "indexes.csv", "sequences.csv",
        }
        assert all(path.exists() for path in paths.values())
        columns = pd.read_csv(paths["columns.csv"])
        assert len(columns) == 13
        assert list(columns["table"].unique()) == ["ORDER_ITEM", "ORDERS", "CUSTOMER", "PRODUCT"]


class TestYamlModelExporter:
    """Tests for YamlModelExporter."""

    def test_to_dict(self, yaml_importer):
        data = YamlModelExporter(yaml_importer.create_database()).to_dict()
        assert data["environment"] == "shop"
        assert data["user"] == "SA"
        schema = data["schemas"][0]
        assert schema["name"] == "PUBLIC"
        assert [t["name"] for t in schema["tables"]] == ["ORDER_ITEM", "ORDERS", "CUSTOMER", "PRODUCT"]
        assert schema["sequences"][0]["start"] == 1000
        orders = schema["tables"][1]
        assert orders["primary_key"]["name_deterministic"] is False
        assert orders["doc"] == "Customer orders"

    def test_without_database_aspects(self, yaml_importer):
        exporter = YamlModelExporter(yaml_importer.create_database(), include_database_aspects=False)
        schema = exporter.to_dict()["schemas"][0]
        assert "sequences" not in schema
        assert all("checks" not in table for table in schema["tables"])

    def test_code_built_unique_constraint_is_exported_as_index(self, shop_database):
        UniqueConstraint(shop_database.get_table("CUSTOMER"), "CUSTOMER_NAME_UK", True, "NAME")
        tables = YamlModelExporter(shop_database).to_dict()["schemas"][0]["tables"]
        customer = next(t for t in tables if t["name"] == "CUSTOMER")
        assert customer["indexes"] == [
            {"name": "CUSTOMER_NAME_UK", "name_deterministic": True, "unique": True, "columns": ["NAME"]}
        ]

    def test_round_trip(self, yaml_importer, tmp_path):
        database = yaml_importer.create_database()
        output_path = YamlModelExporter(database).write(tmp_path / "snapshot.yaml")
        reloaded = YamlModelImporter.from_file(output_path).create_database()
        assert reloaded.is_identical(database)
        assert reloaded.get_sequence("SEQ_ORDER").is_identical(database.get_sequence("SEQ_ORDER"))
        assert len(reloaded.get_check_constraints()) == 2
        assert reloaded.get_table("ORDERS").get_column("ORDER_DATE").default_value == "CURRENT_DATE"

    def test_render_is_loadable(self, shop_database):
        text = YamlModelExporter(shop_database).render()
        reloaded = YamlModelImporter.from_string(text).create_database()
        assert [t.name for t in reloaded.get_tables()] == ["ORDER_ITEM", "ORDERS", "CUSTOMER", "PRODUCT"]
        fk = reloaded.get_table("ORDERS").get_foreign_key_constraint("CUSTOMER_ID")
        assert fk.referee_table is reloaded.get_table("CUSTOMER")

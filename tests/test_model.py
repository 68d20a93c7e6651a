"""Tests for the composite metadata model."""

import pytest

from schemagraph.errors import (
    ConstraintParseError,
    ObjectNotFoundError,
    StructuralError,
)
from schemagraph.model import (
    Catalog,
    CheckConstraint,
    Column,
    DataType,
    Database,
    FKChangeRule,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    Row,
    Schema,
    Table,
    TableType,
    UniqueConstraint,
    contains_mandatory_column,
    equivalent,
)


class TestNavigation:
    """Tests for looking up objects in the containment tree."""

    def test_table_lookup_is_case_insensitive(self, shop_database):
        assert shop_database.get_table("orders").name == "ORDERS"
        assert shop_database.get_table("Order_Item").name == "ORDER_ITEM"

    def test_qualified_table_lookup(self, shop_database):
        assert shop_database.get_table("PUBLIC.CUSTOMER").name == "CUSTOMER"
        assert shop_database.get_table("OTHER.CUSTOMER", required=False) is None

    def test_missing_table_raises(self, shop_database):
        with pytest.raises(ObjectNotFoundError) as exc_info:
            shop_database.get_table("INVOICE")
        assert exc_info.value.name == "INVOICE"
        assert shop_database.get_table("INVOICE", required=False) is None

    def test_missing_table_is_a_lookup_error(self, shop_database):
        with pytest.raises(LookupError):
            shop_database.get_schema("PUBLIC").get_table("INVOICE")

    def test_owners(self, shop_database):
        table = shop_database.get_table("ORDERS")
        assert table.schema is shop_database.get_schema("PUBLIC")
        assert table.catalog is shop_database.get_catalog(None)
        assert table.database is shop_database
        assert table.get_column("ID").table is table

    def test_tables_keep_insertion_order(self, shop_database):
        names = [table.name for table in shop_database.get_tables()]
        assert names == ["ORDER_ITEM", "ORDERS", "CUSTOMER", "PRODUCT"]

    def test_remove_table(self, shop_database):
        removed = shop_database.remove_table("PRODUCT")
        assert removed.name == "PRODUCT"
        assert removed.schema is None
        assert shop_database.get_table("PRODUCT", required=False) is None

    def test_table_filter(self):
        database = Database(
            "filtered",
            table_inclusion_pattern="ORD.*",
            table_exclusion_pattern=".*_TMP",
        )
        assert database.accepts_table_name("ORDERS")
        assert database.accepts_table_name("orders")
        assert not database.accepts_table_name("ORDERS_TMP")
        assert not database.accepts_table_name("CUSTOMER")


class TestColumns:
    """Tests for Column."""

    def test_column_order_and_names(self, shop_database):
        table = shop_database.get_table("CUSTOMER")
        assert table.get_column_names() == ("ID", "NAME", "EMAIL")
        assert [c.name for c in table.get_columns(["EMAIL", "ID"])] == ["EMAIL", "ID"]

    def test_nullable(self, shop_database):
        table = shop_database.get_table("CUSTOMER")
        assert table.get_column("NAME").nullable is False
        assert table.get_column("EMAIL").nullable is True
        table.get_column("EMAIL").nullable = False
        assert table.get_column("EMAIL").not_null_constraint is not None

    def test_pk_component_and_foreign_key(self, shop_database):
        orders = shop_database.get_table("ORDERS")
        assert orders.get_column("ID").is_pk_component()
        assert not orders.get_column("CUSTOMER_ID").is_pk_component()
        fk = orders.get_column("CUSTOMER_ID").get_foreign_key_constraint()
        assert fk.name == "ORDERS_CUSTOMER_FK"
        assert orders.get_column("ORDER_DATE").get_foreign_key_constraint() is None

    def test_integer_type(self, shop_database):
        order_item = shop_database.get_table("ORDER_ITEM")
        assert order_item.get_column("ORDER_ID").is_integer_type()
        assert not order_item.get_column("QUANTITY").is_integer_type()

    def test_str(self, shop_database):
        table = shop_database.get_table("ORDER_ITEM")
        assert str(table.get_column("QUANTITY")) == "QUANTITY : DECIMAL(8,2)"
        assert str(table.get_column("ORDER_ID")) == "ORDER_ID : INTEGER NOT NULL"

    def test_data_types_are_shared(self):
        assert DataType.get_instance("varchar") is DataType.get_instance("VARCHAR")
        assert DataType.get_instance("TIMESTAMP(6) WITH TIME ZONE").is_temporal()
        assert DataType.get_instance("NUMBER").is_number()


class TestConstraints:
    """Tests for keys and constraint helpers."""

    def test_primary_key(self, shop_database):
        table = shop_database.get_table("ORDER_ITEM")
        pk = table.get_primary_key_constraint()
        assert pk.name == "ORDER_ITEM_PK"
        assert pk.table is table
        assert table.get_pk_column_names() == ("ORDER_ID", "LINE_NO")

    def test_unique_constraint_registers_with_columns(self, shop_database):
        table = shop_database.get_table("CUSTOMER")
        uk = UniqueConstraint(table, "CUSTOMER_EMAIL_UK", True, "EMAIL")
        assert table.get_unique_constraints() == [uk]
        assert table.get_unique_constraint(["email"]) is uk
        assert table.get_unique_constraint_by_name("CUSTOMER_EMAIL_UK") is uk
        assert table.get_column("EMAIL").is_unique()
        assert not contains_mandatory_column(uk)

    def test_unique_constraint_list_can_include_pk(self, shop_database):
        table = shop_database.get_table("CUSTOMER")
        assert table.get_unique_constraints(include_pk=True) == [table.get_primary_key_constraint()]

    def test_primary_key_given_as_unique_constraint(self, shop_database):
        table = shop_database.get_table("PRODUCT")
        pk = PrimaryKeyConstraint(None, "PRODUCT_PK2", True, "ID", "NAME")
        table.add_unique_constraint(pk)
        assert table.get_primary_key_constraint() is pk
        assert table.get_unique_constraints() == []

    def test_equivalent_unique_and_primary_key(self, shop_database):
        table = shop_database.get_table("CUSTOMER")
        pk = table.get_primary_key_constraint()
        assert equivalent(UniqueConstraint(None, "U1", True, "id"), pk)
        assert not equivalent(UniqueConstraint(None, "U2", True, "ID", "NAME"), pk)
        assert contains_mandatory_column(pk)

    def test_foreign_key_accessors(self, shop_database):
        order_item = shop_database.get_table("ORDER_ITEM")
        fk = order_item.get_foreign_key_constraint("product_id")
        assert fk.referee_table is shop_database.get_table("PRODUCT")
        assert fk.column_referenced_by("PRODUCT_ID") == "ID"
        assert fk.column_referenced_by("LINE_NO", required=False) is None
        assert fk.update_rule == FKChangeRule.NO_ACTION

    def test_foreign_key_column_count_mismatch(self, shop_database):
        orders = shop_database.get_table("ORDERS")
        customer = shop_database.get_table("CUSTOMER")
        with pytest.raises(StructuralError):
            ForeignKeyConstraint("BAD_FK", True, orders, ["CUSTOMER_ID", "ID"], customer, ["ID"])

    def test_missing_foreign_key_raises(self, shop_database):
        with pytest.raises(ObjectNotFoundError):
            shop_database.get_table("ORDERS").get_foreign_key_constraint("ORDER_DATE")

    def test_is_identical_ignores_owner(self, shop_database):
        customer = shop_database.get_table("CUSTOMER")
        other = Table("OTHER")
        Column("ID", other, "INTEGER")
        a = UniqueConstraint(customer, "UK", True, "ID")
        b = UniqueConstraint(other, "UK", True, "ID")
        assert a.is_identical(b)
        assert a != b

    def test_change_rules(self):
        assert FKChangeRule.from_name("cascade") == FKChangeRule.CASCADE
        assert FKChangeRule.from_name("SET_NULL") == FKChangeRule.SET_NULL
        assert FKChangeRule.from_name("RESTRICT") == FKChangeRule.NO_ACTION
        assert FKChangeRule.from_name(None) == FKChangeRule.NO_ACTION

    def test_table_types(self):
        assert TableType.from_name("VIEW") == TableType.VIEW
        assert TableType.from_name("system_table") == TableType.SYSTEM_TABLE
        assert TableType.from_name("materialized thing") == TableType.TABLE


class TestCheckConstraint:
    """Tests for CheckConstraint."""

    def test_registers_with_table(self, shop_database):
        table = shop_database.get_table("PRODUCT")
        check = CheckConstraint("PRODUCT_PRICE_CHK", True, table, "PRICE >= 0")
        assert table.get_check_constraints() == [check]
        assert check.table_name == "PRODUCT"
        assert shop_database.get_check_constraints() == [check]

    def test_column_names_are_scanned_lazily(self, shop_database):
        table = shop_database.get_table("PRODUCT")
        check = CheckConstraint("C1", True, table, "PRICE >= 0 AND (NAME <> '' OR price IS NULL)")
        assert check.column_names == ("PRICE", "NAME")
        assert check.contains_column("name")

    def test_unparseable_condition(self, shop_database):
        check = CheckConstraint("C2", True, shop_database.get_table("PRODUCT"), "   ")
        with pytest.raises(ConstraintParseError):
            check.column_names

    def test_equivalent_ignores_whitespace(self):
        a = CheckConstraint("A", True, "PRODUCT", "PRICE >=  0")
        b = CheckConstraint("B", False, "product", "PRICE >= 0")
        assert a.is_equivalent(b)
        assert not a.is_identical(b)


class TestRow:
    """Tests for Row."""

    def test_cells_are_case_insensitive(self):
        row = Row()
        row.set_cell_value("Name", "Ann")
        assert row.get_cell_value("NAME") == "Ann"
        assert row.cells == {"Name": "Ann"}

    def test_single_and_composite_keys(self, shop_database):
        order_item = shop_database.get_table("ORDER_ITEM")
        row = Row(order_item)
        row.set_pk_value((7, 1))
        assert row.get_pk_value() == (7, 1)
        assert row.get_cell_value("line_no") == 1

        fk = order_item.get_foreign_key_constraint("PRODUCT_ID")
        row.set_fk_value(fk, 42)
        assert row.get_fk_value(fk) == 42
        assert row.get_fk_components(fk) == (42,)

    def test_value_count_mismatch(self):
        with pytest.raises(StructuralError):
            Row().set_cell_values(["A", "B"], [1])


class TestIdentity:
    """Tests for structural comparison of whole models."""

    def test_databases_from_same_description_are_identical(self, yaml_importer):
        first = yaml_importer.create_database()
        second = yaml_importer.create_database()
        assert first.is_identical(second)

    def test_difference_in_a_column_is_detected(self, yaml_importer):
        first = yaml_importer.create_database()
        second = yaml_importer.create_database()
        second.get_table("CUSTOMER").get_column("NAME").size = 50
        assert not first.is_identical(second)

    def test_schema_built_in_code(self):
        database = Database("code")
        catalog = Catalog("SHOP", database)
        schema = Schema("APP", catalog)
        table = Table("T", schema=schema)
        assert database.get_schema("app") is schema
        assert catalog.get_table("t") is table
        assert database.importer is None
        assert database.import_date is None

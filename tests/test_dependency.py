"""Tests for foreign key dependency ordering."""

import pytest

from schemagraph.dependency import dependency_ordered_tables, resolve_dependencies
from schemagraph.errors import CyclicDependencyError
from schemagraph.model import Catalog, Column, Database, ForeignKeyConstraint, Schema, Table


def build_cycle(a_nullable=True, b_nullable=False):
    """Two tables A and B referencing each other."""
    database = Database("cycle")
    schema = Schema("APP", Catalog(None, database))
    a = Table("A", schema=schema)
    b = Table("B", schema=schema)
    Column("ID", a, "INTEGER").nullable = False
    Column("B_ID", a, "INTEGER").nullable = a_nullable
    Column("ID", b, "INTEGER").nullable = False
    Column("A_ID", b, "INTEGER").nullable = b_nullable
    ForeignKeyConstraint("A_B_FK", True, a, "B_ID", b, "ID")
    ForeignKeyConstraint("B_A_FK", True, b, "A_ID", a, "ID")
    return database


class TestResolveDependencies:
    """Tests for resolve_dependencies."""

    def test_providers_come_first(self, shop_database):
        order = resolve_dependencies(shop_database)
        assert order.table_names() == ["CUSTOMER", "ORDERS", "PRODUCT", "ORDER_ITEM"]
        assert not order.has_cycles

    def test_schema_as_holder(self, shop_database):
        tables = dependency_ordered_tables(shop_database.get_schema("PUBLIC"))
        assert [t.name for t in tables] == ["CUSTOMER", "ORDERS", "PRODUCT", "ORDER_ITEM"]

    def test_holder_order_is_kept_without_dependencies(self):
        tables = [Table("Z"), Table("A"), Table("M")]
        assert dependency_ordered_tables(tables) == tables

    def test_foreign_keys_outside_the_list_are_ignored(self, shop_database):
        order_item = shop_database.get_table("ORDER_ITEM")
        orders = shop_database.get_table("ORDERS")
        assert dependency_ordered_tables([order_item, orders]) == [orders, order_item]

    def test_self_reference_is_ignored(self):
        database = Database("self")
        schema = Schema("APP", Catalog(None, database))
        employee = Table("EMPLOYEE", schema=schema)
        Column("ID", employee, "INTEGER").nullable = False
        Column("MANAGER_ID", employee, "INTEGER")
        ForeignKeyConstraint("EMP_MGR_FK", True, employee, "MANAGER_ID", employee, "ID")
        order = resolve_dependencies(database)
        assert order.tables == [employee]
        assert order.deferred_foreign_keys == []

    def test_cycle_defers_nullable_foreign_key(self):
        database = build_cycle(a_nullable=True, b_nullable=False)
        order = resolve_dependencies(database)
        assert order.table_names() == ["A", "B"]
        assert [fk.name for fk in order.deferred_foreign_keys] == ["A_B_FK"]
        assert order.has_cycles

    def test_cycle_defers_the_other_side_when_that_is_nullable(self):
        database = build_cycle(a_nullable=False, b_nullable=True)
        order = resolve_dependencies(database)
        assert order.table_names() == ["B", "A"]
        assert [fk.name for fk in order.deferred_foreign_keys] == ["B_A_FK"]

    def test_cycle_without_nullable_foreign_key(self):
        database = build_cycle(a_nullable=False, b_nullable=False)
        order = resolve_dependencies(database)
        assert order.table_names() == ["A", "B"]
        assert [fk.name for fk in order.deferred_foreign_keys] == ["A_B_FK"]

    def test_cycle_raises_when_not_broken(self):
        database = build_cycle()
        with pytest.raises(CyclicDependencyError) as exc_info:
            resolve_dependencies(database, break_cycles=False)
        assert exc_info.value.table_names == ["A", "B"]

    def test_to_dict(self):
        order = resolve_dependencies(build_cycle())
        assert order.to_dict() == {
            "tables": ["A", "B"],
            "deferred_foreign_keys": [{"name": "A_B_FK", "table": "A", "referee_table": "B"}],
        }

    def test_imported_database(self, yaml_importer):
        database = yaml_importer.create_database()
        names = [t.name for t in dependency_ordered_tables(database)]
        assert names.index("CUSTOMER") < names.index("ORDERS") < names.index("ORDER_ITEM")
        assert names.index("PRODUCT") < names.index("ORDER_ITEM")


class TestDependencyQueries:
    """Tests for the provider queries of Table."""

    def test_providers(self, shop_database):
        order_item = shop_database.get_table("ORDER_ITEM")
        assert order_item.count_providers() == 2
        assert order_item.get_provider(0).name == "ORDERS"
        assert order_item.requires_provider(1)
        orders = shop_database.get_table("ORDERS")
        assert not orders.requires_provider(0)

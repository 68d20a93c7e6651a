"""
Shared fixtures: a small shop schema, built in code and described in YAML.

Model objects only hold weak references to their owners, so tests keep the
Database returned by a fixture in a local variable while using its tables.
"""

from collections import Counter

import pytest

from schemagraph.metadata import YamlModelImporter
from schemagraph.model import (
    Catalog,
    Column,
    Database,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    Schema,
    Table,
)

SHOP_YAML = """
environment: shop
product_name: HSQL Database Engine
product_version: "2.7.1"
user: SA
schemas:
  - name: PUBLIC
    catalog: null
    tables:
      - name: ORDER_ITEM
        columns:
          - {name: ORDER_ID, type: INTEGER, nullable: false}
          - {name: LINE_NO, type: INTEGER, nullable: false}
          - {name: PRODUCT_ID, type: INTEGER, nullable: false}
          - {name: QUANTITY, type: "DECIMAL(8,2)"}
        primary_key: {name: ORDER_ITEM_PK, columns: [ORDER_ID, LINE_NO]}
        foreign_keys:
          - name: ORDER_ITEM_ORDER_FK
            columns: [ORDER_ID]
            referee_table: ORDERS
            referee_columns: [ID]
            delete_rule: CASCADE
          - name: ORDER_ITEM_PRODUCT_FK
            columns: [PRODUCT_ID]
            referee_table: PRODUCT
            referee_columns: [ID]
        checks:
          - {name: ORDER_ITEM_QTY_CHK, condition: "QUANTITY > 0"}
      - name: ORDERS
        doc: Customer orders
        columns:
          - {name: ID, type: INTEGER, nullable: false}
          - {name: CUSTOMER_ID, type: INTEGER}
          - {name: ORDER_DATE, type: DATE, default: CURRENT_DATE}
        primary_key: {name: SYS_IDX_46, columns: [ID]}
        indexes:
          - {name: ORDERS_DATE_IDX, columns: [ORDER_DATE]}
        foreign_keys:
          - name: ORDERS_CUSTOMER_FK
            columns: [CUSTOMER_ID]
            referee_table: CUSTOMER
            referee_columns: [ID]
      - name: CUSTOMER
        columns:
          - {name: ID, type: INTEGER, nullable: false}
          - {name: NAME, type: VARCHAR(40), nullable: false}
          - {name: EMAIL, type: VARCHAR(80)}
        primary_key: {name: CUSTOMER_PK, columns: [ID]}
        indexes:
          - {name: CUSTOMER_EMAIL_UK, unique: true, columns: [EMAIL]}
      - name: PRODUCT
        columns:
          - {name: ID, type: INTEGER, nullable: false}
          - {name: NAME, type: VARCHAR(40)}
          - {name: PRICE, type: "NUMERIC(10,2)"}
        primary_key: {name: PRODUCT_PK, columns: [ID]}
        checks:
          - {name: PRODUCT_PRICE_CHK, condition: "PRICE >= 0 AND NAME <> ''"}
    sequences:
      - {name: SEQ_ORDER, start: 1000, cache: 20}
    triggers:
      - {name: TRG_ORDERS_DATE, trigger_type: BEFORE EACH ROW, triggering_event: INSERT,
         table_name: ORDERS}
"""


class CountingImporter(YamlModelImporter):
    """YAML importer that counts how often each aspect is imported."""

    def __init__(self, data, source="<dict>"):
        super().__init__(data, source)
        self.calls = Counter()

    def import_catalogs(self, database):
        self.calls["catalogs"] += 1
        super().import_catalogs(database)

    def import_columns(self, table, receiver):
        self.calls["columns"] += 1
        self.calls[f"columns:{table.name}"] += 1
        super().import_columns(table, receiver)

    def import_primary_key(self, table, receiver):
        self.calls["primary_key"] += 1
        super().import_primary_key(table, receiver)

    def import_indexes(self, table, receiver):
        self.calls["indexes"] += 1
        super().import_indexes(table, receiver)

    def import_imported_keys(self, table, receiver):
        self.calls["foreign_keys"] += 1
        super().import_imported_keys(table, receiver)

    def import_referrers(self, table, receiver):
        self.calls["referrers"] += 1
        super().import_referrers(table, receiver)

    def import_sequences(self, database):
        self.calls["sequences"] += 1
        super().import_sequences(database)

    def import_triggers(self, database):
        self.calls["triggers"] += 1
        super().import_triggers(database)

    def import_checks(self, database):
        self.calls["checks"] += 1
        super().import_checks(database)


@pytest.fixture
def shop_yaml():
    return SHOP_YAML


@pytest.fixture
def yaml_importer():
    return YamlModelImporter.from_string(SHOP_YAML)


@pytest.fixture
def counting_importer():
    import yaml
    return CountingImporter(yaml.safe_load(SHOP_YAML))


@pytest.fixture
def shop_database():
    """
    The shop schema built in code, without an importer.

    Tables are added in the order ORDER_ITEM, ORDERS, CUSTOMER, PRODUCT so
    that dependency ordering has to move them around.
    """
    database = Database("test", product_name="HSQL Database Engine", product_version="2.7.1")
    schema = Schema("PUBLIC", Catalog(None, database))

    order_item = Table("ORDER_ITEM", schema=schema)
    orders = Table("ORDERS", schema=schema)
    customer = Table("CUSTOMER", schema=schema)
    product = Table("PRODUCT", schema=schema)

    for name in ("ORDER_ID", "LINE_NO", "PRODUCT_ID"):
        Column(name, order_item, "INTEGER").nullable = False
    Column("QUANTITY", order_item, "DECIMAL", 8, 2)
    PrimaryKeyConstraint(order_item, "ORDER_ITEM_PK", True, "ORDER_ID", "LINE_NO")

    Column("ID", orders, "INTEGER").nullable = False
    Column("CUSTOMER_ID", orders, "INTEGER")
    Column("ORDER_DATE", orders, "DATE")
    PrimaryKeyConstraint(orders, "ORDERS_PK", True, "ID")

    Column("ID", customer, "INTEGER").nullable = False
    Column("NAME", customer, "VARCHAR", 40).nullable = False
    Column("EMAIL", customer, "VARCHAR", 80)
    PrimaryKeyConstraint(customer, "CUSTOMER_PK", True, "ID")

    Column("ID", product, "INTEGER").nullable = False
    Column("NAME", product, "VARCHAR", 40)
    Column("PRICE", product, "NUMERIC", 10, 2)
    PrimaryKeyConstraint(product, "PRODUCT_PK", True, "ID")

    ForeignKeyConstraint("ORDER_ITEM_ORDER_FK", True, order_item, "ORDER_ID", orders, "ID")
    ForeignKeyConstraint("ORDER_ITEM_PRODUCT_FK", True, order_item, "PRODUCT_ID", product, "ID")
    ForeignKeyConstraint("ORDERS_CUSTOMER_FK", True, orders, "CUSTOMER_ID", customer, "ID")
    return database

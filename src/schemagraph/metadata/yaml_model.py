"""
Importer reading a database model from a YAML schema description.

The description lists schemas with their tables, sequences, triggers and
packages:

    environment: demo
    product_name: HSQL Database Engine
    product_version: "2.7"
    schemas:
      - name: PUBLIC
        catalog: null
        tables:
          - name: PARENT
            columns:
              - {name: ID, type: INTEGER, nullable: false}
              - {name: NAME, type: VARCHAR(30)}
            primary_key: {name: PARENT_PK, columns: [ID]}
          - name: CHILD
            columns:
              - {name: ID, type: INTEGER, nullable: false}
              - {name: PARENT_ID, type: INTEGER}
            primary_key: {columns: [ID]}
            foreign_keys:
              - {name: CHILD_PARENT_FK, columns: [PARENT_ID],
                 referee_table: PARENT, referee_columns: [ID]}
            checks:
              - {name: CHILD_ID_CHK, condition: ID > 0}
        sequences:
          - {name: SEQ_ID, start: 1000}

Unique constraints are described as unique indexes, like database metadata
reports them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from schemagraph.errors import ConfigurationError, ObjectNotFoundError
from schemagraph.model.constraints import CheckConstraint, ForeignKeyConstraint
from schemagraph.model.database import Catalog, Database
from schemagraph.model.importer import (
    ColumnReceiver,
    FKReceiver,
    Importer,
    IndexReceiver,
    PKReceiver,
    ReferrerReceiver,
)
from schemagraph.model.index import IndexInfo
from schemagraph.model.schema import Package, Procedure, Schema, Sequence, Trigger
from schemagraph.model.table import Table
from schemagraph.model.types import DataType, FKChangeRule, TableType
from schemagraph.sql.rendering import parse_column_type_and_size

logger = logging.getLogger(__name__)

TableKey = Tuple[str, str]


def _key(name: Optional[str]) -> str:
    return (name or "").lower()


class YamlModelImporter(Importer):
    """
    Importer backed by a YAML schema description.

    Args:
        data: Parsed description (see module docstring)
        source: Where the description came from, for messages
    """

    def __init__(self, data: Dict[str, Any], source: str = "<dict>"):
        super().__init__(
            product_name=data.get("product_name"),
            product_version=_as_text(data.get("product_version")),
            user=data.get("user"),
        )
        self.data = data
        self.source = source
        self.environment = data.get("environment") or Path(source).stem
        self._schema_specs: List[Dict[str, Any]] = list(data.get("schemas") or [])
        self._table_specs: Dict[TableKey, Dict[str, Any]] = {}
        for schema_spec in self._schema_specs:
            for table_spec in schema_spec.get("tables") or []:
                self._table_specs[(_key(schema_spec.get("name")), _key(table_spec["name"]))] = table_spec

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> YamlModelImporter:
        """
        Load a YAML schema description.

        Raises:
            ConfigurationError: If the file does not exist
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Schema description not found: {path}")
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loaded schema description from {path}")
        return cls(data, source=str(path))

    @classmethod
    def from_string(cls, text: str) -> YamlModelImporter:
        return cls(yaml.safe_load(text) or {}, source="<string>")

    def create_database(
        self,
        table_inclusion_pattern: Optional[str] = None,
        table_exclusion_pattern: Optional[str] = None,
    ) -> Database:
        """Build a Database from the description, importing its structure right away."""
        return Database(
            self.environment,
            importer=self,
            table_inclusion_pattern=table_inclusion_pattern,
            table_exclusion_pattern=table_exclusion_pattern,
        )

    # structure ----------------------------------------------------------------------------------------

    def import_catalogs(self, database: Database) -> None:
        for spec in self._schema_specs:
            name = spec.get("catalog")
            if database.get_catalog(name, required=False) is None:
                Catalog(name, database)

    def import_schemas(self, database: Database) -> None:
        for spec in self._schema_specs:
            catalog = database.get_catalog(spec.get("catalog"))
            Schema(spec.get("name"), catalog)

    def import_tables(self, database: Database) -> None:
        for schema_spec in self._schema_specs:
            schema = database.get_schema(schema_spec.get("name"))
            for table_spec in schema_spec.get("tables") or []:
                name = table_spec["name"]
                if not database.accepts_table_name(name):
                    logger.debug(f"Excluding table {name}")
                    continue
                Table(
                    name,
                    TableType.from_name(table_spec.get("type")),
                    doc=table_spec.get("doc"),
                    schema=schema,
                    importer=self,
                )

    # table aspects ------------------------------------------------------------------------------------

    def import_columns(self, table: Table, receiver: ColumnReceiver) -> None:
        for spec in self._table_spec(table).get("columns") or []:
            type_name, size, fraction_digits = _column_type(spec)
            receiver.receive_column(
                spec["name"],
                DataType.get_instance(type_name),
                size,
                fraction_digits,
                spec.get("nullable", True),
                _as_text(spec.get("default")),
                spec.get("doc"),
                table,
            )

    def import_primary_key(self, table: Table, receiver: PKReceiver) -> None:
        spec = self._table_spec(table).get("primary_key")
        if not spec:
            return
        name = spec.get("name")
        receiver.receive_pk(
            name,
            _deterministic(spec, name, table, "pk"),
            list(spec["columns"]),
            table,
        )

    def import_indexes(self, table: Table, receiver: IndexReceiver) -> None:
        for spec in self._table_spec(table).get("indexes") or []:
            name = spec.get("name")
            info = IndexInfo(
                name=name,
                unique=bool(spec.get("unique", False)),
                column_names=list(spec["columns"]),
                index_type=spec.get("type"),
            )
            kind = "uk" if info.unique else "index"
            receiver.receive_index(info, _deterministic(spec, name, table, kind), table, table.schema)

    def import_imported_keys(self, table: Table, receiver: FKReceiver) -> None:
        for spec in self._table_spec(table).get("foreign_keys") or []:
            referee = _find_table(table, spec["referee_table"])
            if referee is None:
                continue
            name = spec.get("name")
            fk = ForeignKeyConstraint(
                name,
                _deterministic(spec, name, table, "fk"),
                None,
                list(spec["columns"]),
                referee,
                list(spec["referee_columns"]),
            )
            fk.update_rule = FKChangeRule.from_name(spec.get("update_rule"))
            fk.delete_rule = FKChangeRule.from_name(spec.get("delete_rule"))
            receiver.receive_fk(fk, table)

    def import_referrers(self, table: Table, receiver: ReferrerReceiver) -> None:
        schema_name = table.schema.name if table.schema is not None else None
        for (referrer_schema, _), spec in self._table_specs.items():
            for fk_spec in spec.get("foreign_keys") or []:
                target_schema, target_table = _split_qualified(fk_spec["referee_table"])
                if target_schema is None:
                    target_schema = referrer_schema
                if _key(target_table) == _key(table.name) and _key(target_schema) == _key(schema_name):
                    if referrer_schema == _key(schema_name):
                        receiver.receive_referrer(spec["name"], table)
                    else:
                        receiver.receive_referrer(f"{referrer_schema}.{spec['name']}", table)
                    break

    # database aspects ---------------------------------------------------------------------------------

    def import_sequences(self, database: Database) -> None:
        for schema, spec in self._schema_items(database, "sequences"):
            sequence = Sequence(spec["name"])
            sequence.start = int(spec.get("start", 1))
            sequence.increment = int(spec.get("increment", 1))
            sequence.max_value = spec.get("max_value")
            sequence.min_value = spec.get("min_value")
            sequence.cycle = spec.get("cycle")
            sequence.cache = spec.get("cache")
            sequence.order = spec.get("order")
            sequence.last_number = int(spec.get("last_number", 0))
            schema.receive_sequence(sequence)

    def import_triggers(self, database: Database) -> None:
        for schema, spec in self._schema_items(database, "triggers"):
            attributes = {k: v for k, v in spec.items() if k != "name"}
            schema.receive_trigger(Trigger(spec["name"], **attributes))

    def import_packages(self, database: Database) -> None:
        for schema, spec in self._schema_items(database, "packages"):
            package = Package(spec["name"])
            package.package_type = spec.get("type")
            package.status = spec.get("status")
            for procedure_spec in spec.get("procedures") or []:
                if isinstance(procedure_spec, str):
                    procedure_spec = {"name": procedure_spec}
                procedure = Procedure(procedure_spec["name"], package)
                procedure.overload = _as_text(procedure_spec.get("overload"))
            schema.receive_package(package)

    def import_checks(self, database: Database) -> None:
        for (schema_name, table_name), spec in self._table_specs.items():
            checks = spec.get("checks") or []
            if not checks:
                continue
            schema = database.get_schema(schema_name, required=False)
            table = schema.get_table(table_name, required=False) if schema is not None else None
            if table is None:
                logger.debug(f"Skipping checks of excluded table {spec['name']}")
                continue
            for check_spec in checks:
                name = check_spec.get("name")
                deterministic = check_spec.get("name_deterministic")
                if deterministic is None:
                    deterministic = name is not None and database.dialect.is_deterministic_check_name(name)
                CheckConstraint(name, deterministic, table, check_spec["condition"])

    # helpers ------------------------------------------------------------------------------------------

    def _table_spec(self, table: Table) -> Dict[str, Any]:
        schema_name = table.schema.name if table.schema is not None else None
        spec = self._table_specs.get((_key(schema_name), _key(table.name)))
        if spec is None:
            raise ObjectNotFoundError("table", table.name, self.source)
        return spec

    def _schema_items(self, database: Database, section: str) -> Iterator[Tuple[Schema, Dict[str, Any]]]:
        for schema_spec in self._schema_specs:
            items = schema_spec.get(section) or []
            if not items:
                continue
            schema = database.get_schema(schema_spec.get("name"))
            for item in items:
                yield schema, item


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _column_type(spec: Dict[str, Any]) -> Tuple[str, Optional[int], Optional[int]]:
    parsed = parse_column_type_and_size(str(spec["type"]))
    type_name = parsed[0]
    size = spec.get("size", parsed[1] if len(parsed) > 1 else None)
    fraction_digits = spec.get("fraction_digits", parsed[2] if len(parsed) > 2 else None)
    return type_name, size, fraction_digits


def _deterministic(spec: Dict[str, Any], name: Optional[str], table: Table, kind: str) -> bool:
    """Use the description's flag, else ask the database's dialect about the name."""
    if "name_deterministic" in spec:
        return bool(spec["name_deterministic"])
    if name is None:
        return False
    database = table.database
    if database is None:
        return True
    return getattr(database.dialect, f"is_deterministic_{kind}_name")(name)


def _split_qualified(name: str) -> Tuple[Optional[str], str]:
    if "." in name:
        schema_name, table_name = name.rsplit(".", 1)
        return schema_name, table_name
    return None, name


def _find_table(table: Table, referee_name: str) -> Optional[Table]:
    """
    Resolve a referenced table, searching the referring table's schema first.

    Returns None for tables excluded by the database's table filter.
    """
    schema_name, table_name = _split_qualified(referee_name)
    database = table.database
    if schema_name is None and table.schema is not None:
        referee = table.schema.get_table(table_name, required=False)
        if referee is not None:
            return referee
    if database is None:
        raise ObjectNotFoundError("table", referee_name, f"schema '{table.schema.name}'")
    referee = database.get_table(referee_name, required=False)
    if referee is None:
        if not database.accepts_table_name(table_name):
            logger.debug(f"Ignoring foreign key of {table.name} to excluded table {referee_name}")
            return None
        raise ObjectNotFoundError("table", referee_name, f"database '{database.name}'")
    return referee

"""
Importer that remembers what another importer delivered.

Reading metadata from a live database is slow, and tools often build the
model of the same environment several times (before and after a migration,
once per comparison run). CachingImporter wraps the real importer, records
the structure and the table aspects of the first import, and replays them
for every later Database of the same environment.

Database-level aspects (sequences, triggers, packages, checks) are passed
through to the wrapped importer unchanged.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from schemagraph.errors import ObjectNotFoundError
from schemagraph.model.constraints import ForeignKeyConstraint
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
from schemagraph.model.schema import Schema
from schemagraph.model.table import Table
from schemagraph.model.types import DataType, FKChangeRule, TableType

logger = logging.getLogger(__name__)

StructureKey = Tuple[str, str, str]
TableKey = Tuple[StructureKey, str, str]


@dataclass
class _TableShell:
    name: str
    table_type: TableType
    doc: Optional[str]


@dataclass
class _SchemaShell:
    name: Optional[str]
    tables: List[_TableShell] = field(default_factory=list)


@dataclass
class _CatalogShell:
    name: Optional[str]
    schemas: List[_SchemaShell] = field(default_factory=list)


@dataclass
class _RecordedFK:
    """Foreign key by names, so it can be rebuilt against another Database."""
    name: Optional[str]
    name_deterministic: bool
    column_names: Tuple[str, ...]
    referee_schema: Optional[str]
    referee_table: str
    referee_column_names: Tuple[str, ...]
    update_rule: FKChangeRule
    delete_rule: FKChangeRule


def _lower(name: Optional[str]) -> str:
    return (name or "").lower()


def _structure_key(database: Database) -> StructureKey:
    return (
        _lower(database.name),
        database.table_inclusion_pattern or "",
        database.table_exclusion_pattern or "",
    )


class _RecordingColumnReceiver(ColumnReceiver):
    def __init__(self, target: ColumnReceiver):
        self.target = target
        self.calls: List[Tuple[Any, ...]] = []

    def receive_column(
        self,
        name: str,
        data_type: DataType,
        size: Optional[int],
        fraction_digits: Optional[int],
        nullable: bool,
        default_value: Optional[str],
        comment: Optional[str],
        table: Table,
    ) -> None:
        self.calls.append((name, data_type, size, fraction_digits, nullable, default_value, comment))
        self.target.receive_column(
            name, data_type, size, fraction_digits, nullable, default_value, comment, table
        )


class _RecordingPKReceiver(PKReceiver):
    def __init__(self, target: PKReceiver):
        self.target = target
        self.calls: List[Tuple[Any, ...]] = []

    def receive_pk(
        self,
        name: Optional[str],
        name_deterministic: bool,
        column_names: Sequence[str],
        table: Table,
    ) -> None:
        self.calls.append((name, name_deterministic, tuple(column_names)))
        self.target.receive_pk(name, name_deterministic, column_names, table)


class _RecordingIndexReceiver(IndexReceiver):
    def __init__(self, target: IndexReceiver):
        self.target = target
        self.calls: List[Tuple[IndexInfo, bool]] = []

    def receive_index(
        self,
        index_info: IndexInfo,
        name_deterministic: bool,
        table: Table,
        schema: Optional[Schema],
    ) -> None:
        self.calls.append((replace(index_info, column_names=list(index_info.column_names)), name_deterministic))
        self.target.receive_index(index_info, name_deterministic, table, schema)


class _RecordingFKReceiver(FKReceiver):
    def __init__(self, target: FKReceiver):
        self.target = target
        self.calls: List[_RecordedFK] = []

    def receive_fk(self, constraint: ForeignKeyConstraint, table: Table) -> None:
        referee = constraint.referee_table
        self.calls.append(_RecordedFK(
            name=constraint.name,
            name_deterministic=constraint.name_deterministic,
            column_names=tuple(constraint.column_names),
            referee_schema=referee.schema.name if referee.schema is not None else None,
            referee_table=referee.name,
            referee_column_names=tuple(constraint.referee_column_names),
            update_rule=constraint.update_rule,
            delete_rule=constraint.delete_rule,
        ))
        self.target.receive_fk(constraint, table)


class _RecordingReferrerReceiver(ReferrerReceiver):
    def __init__(self, target: ReferrerReceiver):
        self.target = target
        self.calls: List[str] = []

    def receive_referrer(self, referencing_table_name: str, table: Table) -> None:
        self.calls.append(referencing_table_name)
        self.target.receive_referrer(referencing_table_name, table)


class CachingImporter(Importer):
    """
    Caches the structure and table aspects delivered by another importer.

    Structure is cached per environment name and table filter; table aspects
    per environment, schema and table name (case-insensitive).

    Args:
        delegate: Importer doing the actual reading
    """

    def __init__(self, delegate: Importer):
        super().__init__(
            product_name=delegate.product_name,
            product_version=delegate.product_version,
            user=delegate.user,
        )
        self.delegate = delegate
        self._lock = threading.RLock()
        self._structures: Dict[StructureKey, List[_CatalogShell]] = {}
        self._aspects: Dict[Tuple[str, TableKey], Any] = {}
        # Databases whose structure was just read through the delegate
        self._fresh: Set[int] = set()

    def clear(self) -> None:
        """Forget everything recorded so far."""
        with self._lock:
            self._structures.clear()
            self._aspects.clear()
        logger.info("Cleared metadata cache")

    def sql_keywords(self) -> str:
        return self.delegate.sql_keywords()

    # structure ----------------------------------------------------------------------------------------

    def import_catalogs(self, database: Database) -> None:
        key = _structure_key(database)
        with self._lock:
            shells = self._structures.get(key)
            if shells is None:
                self._import_and_record_structure(database, key)
                return
        logger.debug(f"Replaying cached structure of {database.name}")
        for catalog_shell in shells:
            Catalog(catalog_shell.name, database)

    def import_schemas(self, database: Database) -> None:
        if id(database) in self._fresh:
            return
        for catalog_shell in self._structures[_structure_key(database)]:
            catalog = database.get_catalog(catalog_shell.name)
            for schema_shell in catalog_shell.schemas:
                Schema(schema_shell.name, catalog)

    def import_tables(self, database: Database) -> None:
        if id(database) in self._fresh:
            self._fresh.discard(id(database))
            return
        for catalog_shell in self._structures[_structure_key(database)]:
            catalog = database.get_catalog(catalog_shell.name)
            for schema_shell in catalog_shell.schemas:
                schema = catalog.get_schema(schema_shell.name)
                for shell in schema_shell.tables:
                    Table(shell.name, shell.table_type, doc=shell.doc, schema=schema, importer=self)

    def _import_and_record_structure(self, database: Database, key: StructureKey) -> None:
        logger.info(f"Reading structure of {database.name} through {type(self.delegate).__name__}")
        self.delegate.import_catalogs(database)
        self.delegate.import_schemas(database)
        self.delegate.import_tables(database)
        shells = []
        for catalog in database.get_catalogs():
            catalog_shell = _CatalogShell(catalog.name)
            for schema in catalog.get_schemas():
                schema_shell = _SchemaShell(schema.name)
                for table in schema.get_tables():
                    table.importer = self
                    schema_shell.tables.append(_TableShell(table.name, table.table_type, table.doc))
                catalog_shell.schemas.append(schema_shell)
            shells.append(catalog_shell)
        self._structures[key] = shells
        self._fresh.add(id(database))

    # table aspects ------------------------------------------------------------------------------------

    def _table_key(self, table: Table) -> TableKey:
        database = table.database
        if database is None:
            raise ObjectNotFoundError("database", None, f"table '{table.name}'")
        schema_name = table.schema.name if table.schema is not None else None
        return _structure_key(database), _lower(schema_name), _lower(table.name)

    def _cached(self, aspect: str, table: Table) -> Tuple[Tuple[str, TableKey], Optional[Any]]:
        key = (aspect, self._table_key(table))
        with self._lock:
            calls = self._aspects.get(key)
        if calls is not None:
            logger.debug(f"Replaying cached {aspect} of {table.name}")
        return key, calls

    def _store(self, key: Tuple[str, TableKey], calls: Any) -> None:
        with self._lock:
            self._aspects[key] = calls

    def import_columns(self, table: Table, receiver: ColumnReceiver) -> None:
        key, calls = self._cached("columns", table)
        if calls is None:
            recorder = _RecordingColumnReceiver(receiver)
            self.delegate.import_columns(table, recorder)
            self._store(key, recorder.calls)
            return
        for args in calls:
            receiver.receive_column(*args, table)

    def import_primary_key(self, table: Table, receiver: PKReceiver) -> None:
        key, calls = self._cached("primary key", table)
        if calls is None:
            recorder = _RecordingPKReceiver(receiver)
            self.delegate.import_primary_key(table, recorder)
            self._store(key, recorder.calls)
            return
        for name, name_deterministic, column_names in calls:
            receiver.receive_pk(name, name_deterministic, list(column_names), table)

    def import_indexes(self, table: Table, receiver: IndexReceiver) -> None:
        key, calls = self._cached("indexes", table)
        if calls is None:
            recorder = _RecordingIndexReceiver(receiver)
            self.delegate.import_indexes(table, recorder)
            self._store(key, recorder.calls)
            return
        for info, name_deterministic in calls:
            copy = replace(info, column_names=list(info.column_names))
            receiver.receive_index(copy, name_deterministic, table, table.schema)

    def import_imported_keys(self, table: Table, receiver: FKReceiver) -> None:
        key, calls = self._cached("foreign keys", table)
        if calls is None:
            recorder = _RecordingFKReceiver(receiver)
            self.delegate.import_imported_keys(table, recorder)
            self._store(key, recorder.calls)
            return
        for recorded in calls:
            referee = self._find_referee(table, recorded)
            if referee is None:
                continue
            fk = ForeignKeyConstraint(
                recorded.name,
                recorded.name_deterministic,
                None,
                recorded.column_names,
                referee,
                recorded.referee_column_names,
            )
            fk.update_rule = recorded.update_rule
            fk.delete_rule = recorded.delete_rule
            receiver.receive_fk(fk, table)

    def import_referrers(self, table: Table, receiver: ReferrerReceiver) -> None:
        key, calls = self._cached("referrers", table)
        if calls is None:
            recorder = _RecordingReferrerReceiver(receiver)
            self.delegate.import_referrers(table, recorder)
            self._store(key, recorder.calls)
            return
        for referrer_name in calls:
            receiver.receive_referrer(referrer_name, table)

    def _find_referee(self, table: Table, recorded: _RecordedFK) -> Optional[Table]:
        database = table.database
        if recorded.referee_schema is not None:
            name = f"{recorded.referee_schema}.{recorded.referee_table}"
        else:
            name = recorded.referee_table
        referee = database.get_table(name, required=False)
        if referee is None:
            if not database.accepts_table_name(recorded.referee_table):
                return None
            raise ObjectNotFoundError("table", name, f"database '{database.name}'")
        return referee

    # database aspects ---------------------------------------------------------------------------------

    def import_sequences(self, database: Database) -> None:
        self.delegate.import_sequences(database)

    def import_triggers(self, database: Database) -> None:
        self.delegate.import_triggers(database)

    def import_packages(self, database: Database) -> None:
        self.delegate.import_packages(database)

    def import_checks(self, database: Database) -> None:
        self.delegate.import_checks(database)

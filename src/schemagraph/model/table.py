"""
Database table with lazily imported aspects.

Columns, primary key, indexes (together with the unique constraints they
imply), foreign keys and referrer tables are imported independently, each
through its own ImportOnce guard. Guards pull in the aspects they build on
first: columns before the primary key, the primary key before indexes and
foreign keys, foreign keys before referrers. Without an importer a guard
simply marks its aspect as imported, so tables built in code behave as
complete, in-memory models.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from schemagraph.errors import ObjectNotFoundError
from schemagraph.model.base import CompositeDBObject, DBObject, ImportOnce, OrderedNameMap
from schemagraph.model.column import Column
from schemagraph.model.constraints import (
    CheckConstraint,
    ForeignKeyConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
    _same_names,
)
from schemagraph.model.importer import (
    ColumnReceiver,
    FKReceiver,
    Importer,
    IndexReceiver,
    PKReceiver,
    ReferrerReceiver,
)
from schemagraph.model.index import Index, IndexInfo, NonUniqueIndex, UniqueIndex
from schemagraph.model.types import DataType, TableType

if TYPE_CHECKING:
    from schemagraph.model.database import Catalog, Database
    from schemagraph.model.schema import Schema

logger = logging.getLogger(__name__)


class Table(CompositeDBObject):
    """
    A table (or view) of a schema.

    Args:
        name: Table name
        table_type: TABLE, VIEW, ...
        doc: Table comment
        schema: Owning schema; the table adds itself to it
        importer: Source of the table's aspects, None for tables built in code
    """

    def __init__(
        self,
        name: str,
        table_type: TableType = TableType.TABLE,
        doc: Optional[str] = None,
        schema: Optional["Schema"] = None,
        importer: Optional[Importer] = None,
    ):
        super().__init__(name, "table", owner=schema, doc=doc)
        self.table_type = table_type
        self.importer = importer

        self._columns: OrderedNameMap[Column] = OrderedNameMap()
        self._pk: Optional[PrimaryKeyConstraint] = None
        self._unique_constraints: List[UniqueConstraint] = []
        self._indexes: OrderedNameMap[Index] = OrderedNameMap()
        self._foreign_keys: List[ForeignKeyConstraint] = []
        self._referrers: List[Table] = []
        self._checks: List[CheckConstraint] = []

        self._columns_import = ImportOnce("columns")
        self._pk_import = ImportOnce("primary key")
        self._indexes_import = ImportOnce("indexes")
        self._fks_import = ImportOnce("foreign keys")
        self._referrers_import = ImportOnce("referrers")

        if schema is not None:
            schema.add_table(self)

    # navigation ---------------------------------------------------------------------------------------

    @property
    def schema(self) -> Optional["Schema"]:
        return self.owner

    @schema.setter
    def schema(self, schema: Optional["Schema"]) -> None:
        self.owner = schema

    @property
    def catalog(self) -> Optional["Catalog"]:
        schema = self.schema
        return schema.catalog if schema is not None else None

    @property
    def database(self) -> Optional["Database"]:
        catalog = self.catalog
        return catalog.database if catalog is not None else None

    def get_components(self) -> List[DBObject]:
        components: List[DBObject] = list(self.get_columns())
        pk = self.get_primary_key_constraint()
        if pk is not None:
            components.append(pk)
        components.extend(self.get_unique_constraints(include_pk=False))
        components.extend(self.get_indexes())
        components.extend(self.get_foreign_key_constraints())
        return components

    def _check_attached(self, guard: ImportOnce) -> None:
        if not guard.done and self.importer is not None:
            self.ensure_attached()

    # columns ------------------------------------------------------------------------------------------

    def have_columns_imported(self) -> None:
        self._check_attached(self._columns_import)

        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_columns(self, _ColumnReceiver(self))

        self._columns_import.ensure(fetch, self._columns.clear, self.name)

    @property
    def columns_imported(self) -> bool:
        return self._columns_import.done

    def get_columns(self, column_names: Optional[Sequence[str]] = None) -> List[Column]:
        """Return all columns, or the named ones in the requested order."""
        self.have_columns_imported()
        if column_names is None:
            return self._columns.values()
        return [self.get_column(name) for name in column_names]

    def get_column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.get_columns())

    def get_column(self, column_name: str, required: bool = True) -> Optional[Column]:
        self.have_columns_imported()
        column = self._columns.get(column_name)
        if column is None and required:
            raise ObjectNotFoundError("column", column_name, f"table '{self.name}'")
        return column

    def add_column(self, column: Column) -> None:
        self.have_columns_imported()
        self.receive_column(column)

    def receive_column(self, column: Column) -> None:
        column.table = self
        self._columns.put(column.name, column)

    # primary key --------------------------------------------------------------------------------------

    def have_pk_imported(self) -> None:
        self.have_columns_imported()
        self._check_attached(self._pk_import)

        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_primary_key(self, _PKReceiver(self))

        def reset() -> None:
            self._pk = None

        self._pk_import.ensure(fetch, reset, self.name)

    @property
    def pk_imported(self) -> bool:
        return self._pk_import.done

    def get_primary_key_constraint(self) -> Optional[PrimaryKeyConstraint]:
        self.have_pk_imported()
        return self._pk

    def set_primary_key(self, pk: PrimaryKeyConstraint) -> None:
        self.have_pk_imported()
        self._pk = pk
        pk.table = self
        self._register_uk_columns(pk)

    def get_pk_column_names(self) -> Tuple[str, ...]:
        pk = self.get_primary_key_constraint()
        return pk.column_names if pk is not None else ()

    def _register_uk_columns(self, constraint: UniqueConstraint) -> None:
        for column_name in constraint.column_names:
            column = self._columns.get(column_name)
            if column is not None:
                column.add_uk_constraint(constraint)

    # unique constraints and indexes -------------------------------------------------------------------

    def have_indexes_imported(self) -> None:
        self.have_pk_imported()
        self._check_attached(self._indexes_import)

        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_indexes(self, _IndexReceiver(self))

        def reset() -> None:
            self._unique_constraints.clear()
            self._indexes.clear()

        self._indexes_import.ensure(fetch, reset, self.name)

    @property
    def indexes_imported(self) -> bool:
        return self._indexes_import.done

    def get_unique_constraints(self, include_pk: bool = False) -> List[UniqueConstraint]:
        self.have_indexes_imported()
        result: List[UniqueConstraint] = []
        if include_pk and self._pk is not None:
            result.append(self._pk)
        result.extend(self._unique_constraints)
        return result

    def get_unique_constraint(self, column_names: Sequence[str]) -> Optional[UniqueConstraint]:
        """Find the unique constraint (primary key included) over exactly these columns."""
        self.have_indexes_imported()
        if self._pk is not None and _same_names(column_names, self._pk.column_names):
            return self._pk
        for constraint in self._unique_constraints:
            if _same_names(column_names, constraint.column_names):
                return constraint
        return None

    def get_unique_constraint_by_name(self, name: str) -> Optional[UniqueConstraint]:
        self.have_indexes_imported()
        if self._pk is not None and self._pk.name and self._pk.name.lower() == name.lower():
            return self._pk
        for constraint in self._unique_constraints:
            if constraint.name == name:
                return constraint
        return None

    def add_unique_constraint(self, uk: UniqueConstraint) -> None:
        self.have_indexes_imported()
        if isinstance(uk, PrimaryKeyConstraint):
            self.set_primary_key(uk)
            return
        uk.table = self
        if not any(existing is uk for existing in self._unique_constraints):
            self._unique_constraints.append(uk)
        self._register_uk_columns(uk)

    def remove_unique_constraint(self, uk: UniqueConstraint) -> None:
        self.have_indexes_imported()
        self._unique_constraints = [c for c in self._unique_constraints if c is not uk]

    def get_indexes(self) -> List[Index]:
        self.have_indexes_imported()
        return self._indexes.values()

    def get_index(self, name: str) -> Optional[Index]:
        self.have_indexes_imported()
        return self._indexes.get(name)

    def add_index(self, index: Index) -> None:
        self.have_indexes_imported()
        index.table = self
        self._indexes.put(index.name, index)

    def remove_index(self, index: Index) -> None:
        self.have_indexes_imported()
        self._indexes.remove(index.name)

    # foreign keys -------------------------------------------------------------------------------------

    def have_fks_imported(self) -> None:
        self.have_pk_imported()
        self._check_attached(self._fks_import)

        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_imported_keys(self, _FKReceiver(self))

        self._fks_import.ensure(fetch, self._foreign_keys.clear, self.name)

    @property
    def fks_imported(self) -> bool:
        return self._fks_import.done

    def get_foreign_key_constraints(self) -> List[ForeignKeyConstraint]:
        self.have_fks_imported()
        return list(self._foreign_keys)

    def get_foreign_key_constraint(self, *column_names: str) -> ForeignKeyConstraint:
        self.have_fks_imported()
        for fk in self._foreign_keys:
            if _same_names(fk.column_names, column_names):
                return fk
        raise ObjectNotFoundError(
            "foreign key", f"({', '.join(column_names)})", f"table '{self.name}'"
        )

    def add_foreign_key(self, fk: ForeignKeyConstraint) -> None:
        self.have_fks_imported()
        self.receive_foreign_key(fk)

    def receive_foreign_key(self, fk: ForeignKeyConstraint) -> None:
        fk.table = self
        if not any(existing is fk for existing in self._foreign_keys):
            self._foreign_keys.append(fk)

    def remove_foreign_key_constraint(self, fk: ForeignKeyConstraint) -> None:
        self.have_fks_imported()
        self._foreign_keys = [c for c in self._foreign_keys if c is not fk]

    # check constraints --------------------------------------------------------------------------------

    def _have_checks_imported(self) -> None:
        database = self.database
        if database is None:
            self.ensure_attached()
        else:
            database.have_checks_imported()

    def get_check_constraints(self) -> List[CheckConstraint]:
        self._have_checks_imported()
        return list(self._checks)

    def add_check_constraint(self, check: CheckConstraint) -> None:
        self._have_checks_imported()
        check.table = self
        check.table_name = self.name
        self.receive_check_constraint(check)

    def receive_check_constraint(self, check: CheckConstraint) -> None:
        if not any(existing is check for existing in self._checks):
            self._checks.append(check)

    def clear_check_constraints(self) -> None:
        self._checks.clear()

    # referrers ----------------------------------------------------------------------------------------

    def have_referrers_imported(self) -> None:
        self.have_fks_imported()
        self._check_attached(self._referrers_import)

        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_referrers(self, _ReferrerReceiver(self))

        self._referrers_import.ensure(fetch, self._referrers.clear, self.name)

    @property
    def referrers_imported(self) -> bool:
        return self._referrers_import.done

    def get_referrers(self) -> List[Table]:
        """Return the tables that have a foreign key pointing to this table."""
        self.have_referrers_imported()
        return list(self._referrers)

    def add_referrer(self, referrer: Table) -> None:
        self.have_referrers_imported()
        self.receive_referrer(referrer)

    def receive_referrer(self, referrer: Table) -> None:
        if not any(existing is referrer for existing in self._referrers):
            self._referrers.append(referrer)

    # dependencies -------------------------------------------------------------------------------------

    def count_providers(self) -> int:
        return len(self.get_foreign_key_constraints())

    def get_provider(self, index: int) -> Table:
        return self.get_foreign_key_constraints()[index].referee_table

    def requires_provider(self, index: int) -> bool:
        """A provider is required if the first column of its foreign key is NOT NULL."""
        fk = self.get_foreign_key_constraints()[index]
        return not self.get_column(fk.column_names[0]).nullable

    def __repr__(self) -> str:
        return f"Table({self.name!r})"


class _ColumnReceiver(ColumnReceiver):
    def __init__(self, table: Table):
        self.table = table

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
        column = Column(name, self.table, data_type, size, fraction_digits, doc=comment)
        column.nullable = nullable
        column.default_value = default_value


class _PKReceiver(PKReceiver):
    def __init__(self, table: Table):
        self.table = table

    def receive_pk(
        self,
        name: Optional[str],
        name_deterministic: bool,
        column_names: Sequence[str],
        table: Table,
    ) -> None:
        pk = PrimaryKeyConstraint(None, name, name_deterministic, *column_names)
        for column_name in column_names:
            self.table.get_column(column_name)
        self.table._pk = pk
        pk.table = self.table
        self.table._register_uk_columns(pk)


class _IndexReceiver(IndexReceiver):
    def __init__(self, table: Table):
        self.table = table

    def receive_index(
        self,
        index_info: IndexInfo,
        name_deterministic: bool,
        table: Table,
        schema: Optional["Schema"],
    ) -> None:
        target = self.table
        index: Index
        if index_info.unique:
            pk = target.get_primary_key_constraint()
            if pk is not None and _same_names(index_info.column_names, pk.column_names):
                constraint: UniqueConstraint = pk
            else:
                constraint = UniqueConstraint(
                    target, index_info.name, name_deterministic, *index_info.column_names
                )
            index = UniqueIndex(index_info.name, name_deterministic, constraint)
        else:
            index = NonUniqueIndex(
                index_info.name, name_deterministic, target, *index_info.column_names
            )
        target.add_index(index)


class _FKReceiver(FKReceiver):
    def __init__(self, table: Table):
        self.table = table

    def receive_fk(self, constraint: ForeignKeyConstraint, table: Table) -> None:
        self.table.receive_foreign_key(constraint)


class _ReferrerReceiver(ReferrerReceiver):
    def __init__(self, table: Table):
        self.table = table

    def receive_referrer(self, referencing_table_name: str, table: Table) -> None:
        referrer = None
        schema = self.table.schema
        if schema is not None:
            referrer = schema.get_table(referencing_table_name, required=False)
        database = self.table.database
        if referrer is None and database is not None:
            referrer = database.get_table(referencing_table_name, required=False)
            if referrer is None and not database.accepts_table_name(referencing_table_name):
                logger.debug(
                    f"Skipping referrer {referencing_table_name} of {self.table.name}: "
                    f"excluded by table filter"
                )
                return
        if referrer is None:
            raise ObjectNotFoundError("table", referencing_table_name, "database")
        self.table.receive_referrer(referrer)

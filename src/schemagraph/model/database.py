"""
Database and Catalog, the top of the metadata model.

A Database with an importer imports its structure (catalogs, schemas and
table shells) on construction, unless told not to. Table aspects are
imported by the tables themselves; sequences, triggers, packages and check
constraints are database-wide aspects imported on first access.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from schemagraph.errors import ObjectNotFoundError
from schemagraph.model.base import CompositeDBObject, DBObject, ImportOnce, OrderedNameMap
from schemagraph.model.constraints import CheckConstraint
from schemagraph.model.importer import Importer
from schemagraph.model.schema import Package, Schema, Sequence, Trigger
from schemagraph.model.table import Table

if TYPE_CHECKING:
    from schemagraph.dialect.base import DatabaseDialect

logger = logging.getLogger(__name__)


class Catalog(CompositeDBObject):
    """
    A catalog holding schemas.

    Args:
        name: Catalog name, None for databases without catalogs
        database: Owning database; the catalog adds itself to it
    """

    def __init__(self, name: Optional[str], database: Optional["Database"] = None):
        super().__init__(name, "catalog", owner=database)
        self._schemas: OrderedNameMap[Schema] = OrderedNameMap()
        if database is not None:
            database.add_catalog(self)

    @property
    def database(self) -> Optional["Database"]:
        return self.owner

    def get_components(self) -> List[DBObject]:
        return list(self._schemas.values())

    def get_schemas(self) -> List[Schema]:
        return self._schemas.values()

    def get_schema(self, name: Optional[str], required: bool = True) -> Optional[Schema]:
        schema = self._schemas.get(name)
        if schema is None and required:
            raise ObjectNotFoundError("schema", name, f"catalog '{self.name}'")
        return schema

    def add_schema(self, schema: Schema) -> None:
        schema.catalog = self
        self._schemas.put(schema.name, schema)

    def remove_schema(self, schema: Schema) -> None:
        self._schemas.remove(schema.name)

    def get_tables(self) -> List[Table]:
        tables: List[Table] = []
        for schema in self._schemas:
            tables.extend(schema.get_tables())
        return tables

    def get_table(self, name: str, required: bool = True) -> Optional[Table]:
        for schema in self._schemas:
            table = schema.get_table(name, required=False)
            if table is not None:
                return table
        if required:
            raise ObjectNotFoundError("table", name, f"catalog '{self.name}'")
        return None


class Database(CompositeDBObject):
    """
    Root of the metadata model.

    Args:
        environment: Name of the environment the metadata was read from
        product_name: Database product name, defaults to the importer's
        product_version: Product version string, defaults to the importer's
        import_date: When the metadata was read; now() for imported databases
        importer: Metadata source, None for models built in code
        prepopulate: Import catalogs, schemas and table shells right away
        table_inclusion_pattern: Regex a table name must match to be accepted
        table_exclusion_pattern: Regex excluding matching table names
    """

    def __init__(
        self,
        environment: str,
        product_name: Optional[str] = None,
        product_version: Optional[str] = None,
        import_date: Optional[datetime] = None,
        importer: Optional[Importer] = None,
        prepopulate: bool = True,
        table_inclusion_pattern: Optional[str] = None,
        table_exclusion_pattern: Optional[str] = None,
    ):
        super().__init__(environment, "database")
        self.importer = importer
        self.product_name = product_name or (importer.product_name if importer else None)
        self.product_version = product_version or (importer.product_version if importer else None)
        self.user = importer.user if importer else None
        if import_date is None and importer is not None:
            import_date = datetime.now()
        self.import_date = import_date
        self.table_inclusion_pattern = table_inclusion_pattern
        self.table_exclusion_pattern = table_exclusion_pattern
        self._dialect: Optional["DatabaseDialect"] = None
        self._catalogs: OrderedNameMap[Catalog] = OrderedNameMap()

        self._sequences_import = ImportOnce("sequences")
        self._triggers_import = ImportOnce("triggers")
        self._packages_import = ImportOnce("packages")
        self._checks_import = ImportOnce("checks")

        if importer is not None and prepopulate:
            self._import_structure()

    @property
    def environment(self) -> str:
        return self.name

    def _import_structure(self) -> None:
        logger.info(f"Importing database structure of {self.name}")
        self.importer.import_catalogs(self)
        self.importer.import_schemas(self)
        self.importer.import_tables(self)
        logger.info(
            f"Imported {len(self._catalogs)} catalog(s) and "
            f"{len(self.get_tables())} table(s) of {self.name}"
        )

    def get_components(self) -> List[DBObject]:
        return list(self._catalogs.values())

    # dialect ------------------------------------------------------------------------------------------

    @property
    def dialect(self) -> "DatabaseDialect":
        if self._dialect is None:
            from schemagraph.dialect.manager import get_dialect_for_product
            self._dialect = get_dialect_for_product(self.product_name, self.product_version)
        return self._dialect

    @dialect.setter
    def dialect(self, dialect: "DatabaseDialect") -> None:
        self._dialect = dialect

    def is_reserved_word(self, word: Optional[str]) -> bool:
        keywords = self.importer.sql_keywords() if self.importer is not None else None
        return self.dialect.is_reserved_word(word, keywords)

    def accepts_table_name(self, table_name: str) -> bool:
        """Apply the inclusion and exclusion patterns (full match, case-insensitive)."""
        if self.table_inclusion_pattern and not re.fullmatch(
            self.table_inclusion_pattern, table_name, re.IGNORECASE
        ):
            return False
        if self.table_exclusion_pattern and re.fullmatch(
            self.table_exclusion_pattern, table_name, re.IGNORECASE
        ):
            return False
        return True

    # catalogs and schemas -----------------------------------------------------------------------------

    def get_catalogs(self) -> List[Catalog]:
        return self._catalogs.values()

    def get_catalog(self, name: Optional[str], required: bool = True) -> Optional[Catalog]:
        catalog = self._catalogs.get(name)
        if catalog is None and required:
            raise ObjectNotFoundError("catalog", name, f"database '{self.name}'")
        return catalog

    def add_catalog(self, catalog: Catalog) -> None:
        catalog.owner = self
        self._catalogs.put(catalog.name, catalog)

    def remove_catalog(self, catalog: Catalog) -> None:
        self._catalogs.remove(catalog.name)

    def get_schemas(self) -> List[Schema]:
        schemas: List[Schema] = []
        for catalog in self._catalogs:
            schemas.extend(catalog.get_schemas())
        return schemas

    def get_schema(self, name: Optional[str], required: bool = True) -> Optional[Schema]:
        for catalog in self._catalogs:
            schema = catalog.get_schema(name, required=False)
            if schema is not None:
                return schema
        if required:
            raise ObjectNotFoundError("schema", name, f"database '{self.name}'")
        return None

    # tables -------------------------------------------------------------------------------------------

    def get_tables(self) -> List[Table]:
        tables: List[Table] = []
        for catalog in self._catalogs:
            tables.extend(catalog.get_tables())
        return tables

    def get_table(self, name: str, required: bool = True) -> Optional[Table]:
        """
        Find a table by name in any schema.

        A qualified name 'schema.table' restricts the search to that schema.
        """
        if "." in name:
            schema_name, table_name = name.rsplit(".", 1)
            schema = self.get_schema(schema_name, required=False)
            table = schema.get_table(table_name, required=False) if schema is not None else None
        else:
            table = None
            for catalog in self._catalogs:
                table = catalog.get_table(name, required=False)
                if table is not None:
                    break
        if table is None and required:
            raise ObjectNotFoundError("table", name, f"database '{self.name}'")
        return table

    def remove_table(self, name: str) -> Optional[Table]:
        table = self.get_table(name, required=False)
        if table is not None and table.schema is not None:
            table.schema.remove_table(table.name)
        return table

    # sequences ----------------------------------------------------------------------------------------

    def have_sequences_imported(self) -> None:
        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_sequences(self)

        def reset() -> None:
            for schema in self.get_schemas():
                schema.clear_sequences()

        self._sequences_import.ensure(fetch, reset, self.name)

    def get_sequences(self) -> List[Sequence]:
        self.have_sequences_imported()
        sequences: List[Sequence] = []
        for schema in self.get_schemas():
            sequences.extend(schema.get_sequences())
        return sequences

    def get_sequence(self, name: str, required: bool = True) -> Optional[Sequence]:
        for sequence in self.get_sequences():
            if sequence.name.lower() == name.lower():
                return sequence
        if required:
            raise ObjectNotFoundError("sequence", name, f"database '{self.name}'")
        return None

    # triggers -----------------------------------------------------------------------------------------

    def have_triggers_imported(self) -> None:
        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_triggers(self)

        def reset() -> None:
            for schema in self.get_schemas():
                schema.clear_triggers()

        self._triggers_import.ensure(fetch, reset, self.name)

    def get_triggers(self) -> List[Trigger]:
        self.have_triggers_imported()
        triggers: List[Trigger] = []
        for schema in self.get_schemas():
            triggers.extend(schema.get_triggers())
        return triggers

    # packages -----------------------------------------------------------------------------------------

    def have_packages_imported(self) -> None:
        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_packages(self)

        def reset() -> None:
            for schema in self.get_schemas():
                schema.clear_packages()

        self._packages_import.ensure(fetch, reset, self.name)

    def get_packages(self) -> List[Package]:
        self.have_packages_imported()
        packages: List[Package] = []
        for schema in self.get_schemas():
            packages.extend(schema.get_packages())
        return packages

    # check constraints --------------------------------------------------------------------------------

    def have_checks_imported(self) -> None:
        def fetch() -> None:
            if self.importer is not None:
                self.importer.import_checks(self)

        def reset() -> None:
            for table in self.get_tables():
                table.clear_check_constraints()

        self._checks_import.ensure(fetch, reset, self.name)

    def get_check_constraints(self) -> List[CheckConstraint]:
        self.have_checks_imported()
        checks: List[CheckConstraint] = []
        for table in self.get_tables():
            checks.extend(table.get_check_constraints())
        return checks

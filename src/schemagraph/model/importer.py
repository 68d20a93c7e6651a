"""
Importer collaborator interface.

An importer reads raw metadata from some source (a live database, a YAML
description, a cache) and pushes it into the model. Table aspects are
delivered through small receiver objects handed out by the table, so the
importer never touches the table's internal collections. Database-level
aspects (sequences, triggers, packages, check constraints) are delivered by
calling the receive/add methods of the schemas and tables directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Sequence

from schemagraph.model.types import DataType

if TYPE_CHECKING:
    from schemagraph.model.constraints import ForeignKeyConstraint
    from schemagraph.model.database import Database
    from schemagraph.model.index import IndexInfo
    from schemagraph.model.schema import Schema
    from schemagraph.model.table import Table


class ColumnReceiver(ABC):
    @abstractmethod
    def receive_column(
        self,
        name: str,
        data_type: DataType,
        size: Optional[int],
        fraction_digits: Optional[int],
        nullable: bool,
        default_value: Optional[str],
        comment: Optional[str],
        table: "Table",
    ) -> None:
        ...


class PKReceiver(ABC):
    @abstractmethod
    def receive_pk(
        self,
        name: Optional[str],
        name_deterministic: bool,
        column_names: Sequence[str],
        table: "Table",
    ) -> None:
        ...


class IndexReceiver(ABC):
    @abstractmethod
    def receive_index(
        self,
        index_info: "IndexInfo",
        name_deterministic: bool,
        table: "Table",
        schema: Optional["Schema"],
    ) -> None:
        ...


class FKReceiver(ABC):
    @abstractmethod
    def receive_fk(self, constraint: "ForeignKeyConstraint", table: "Table") -> None:
        ...


class ReferrerReceiver(ABC):
    @abstractmethod
    def receive_referrer(self, referencing_table_name: str, table: "Table") -> None:
        ...


class Importer(ABC):
    """
    Source of raw metadata for a Database.

    Subclasses must supply the structure (catalogs, schemas, tables) and the
    five table aspects. Database-level aspects default to "nothing to import".

    Args:
        product_name: Database product name, e.g. 'Oracle' or 'PostgreSQL'
        product_version: Product version string
        user: Name of the user the metadata was read as
    """

    def __init__(
        self,
        product_name: Optional[str] = None,
        product_version: Optional[str] = None,
        user: Optional[str] = None,
    ):
        self.product_name = product_name
        self.product_version = product_version
        self.user = user

    # structure ------------------------------------------------------------------------------------

    @abstractmethod
    def import_catalogs(self, database: "Database") -> None:
        """Create the database's catalogs."""

    @abstractmethod
    def import_schemas(self, database: "Database") -> None:
        """Create the schemas of all catalogs."""

    @abstractmethod
    def import_tables(self, database: "Database") -> None:
        """Create the tables of all schemas, with this importer attached."""

    # table aspects --------------------------------------------------------------------------------

    @abstractmethod
    def import_columns(self, table: "Table", receiver: ColumnReceiver) -> None:
        ...

    @abstractmethod
    def import_primary_key(self, table: "Table", receiver: PKReceiver) -> None:
        ...

    @abstractmethod
    def import_indexes(self, table: "Table", receiver: IndexReceiver) -> None:
        ...

    @abstractmethod
    def import_imported_keys(self, table: "Table", receiver: FKReceiver) -> None:
        ...

    @abstractmethod
    def import_referrers(self, table: "Table", receiver: ReferrerReceiver) -> None:
        ...

    # database aspects -----------------------------------------------------------------------------

    def import_sequences(self, database: "Database") -> None:
        pass

    def import_triggers(self, database: "Database") -> None:
        pass

    def import_packages(self, database: "Database") -> None:
        pass

    def import_checks(self, database: "Database") -> None:
        pass

    def sql_keywords(self) -> str:
        """Comma-separated keywords the driver reports beyond SQL:2003."""
        return ""

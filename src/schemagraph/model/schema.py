"""
Schema and the schema-level objects: sequences, triggers, packages and procedures.

Sequences, triggers and packages are imported per database, not per schema:
asking a schema for them makes its database run the respective import once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional

from schemagraph.errors import ObjectNotFoundError
from schemagraph.model.base import CompositeDBObject, DBObject, OrderedNameMap
from schemagraph.model.table import Table

if TYPE_CHECKING:
    from schemagraph.model.database import Catalog, Database

logger = logging.getLogger(__name__)


class Schema(CompositeDBObject):
    """
    A schema holding tables, sequences, triggers and packages.

    Args:
        name: Schema name, None for databases without schemas
        catalog: Owning catalog; the schema adds itself to it
    """

    def __init__(self, name: Optional[str], catalog: Optional["Catalog"] = None):
        super().__init__(name, "schema", owner=catalog)
        self._tables: OrderedNameMap[Table] = OrderedNameMap()
        self._sequences: OrderedNameMap[Sequence] = OrderedNameMap()
        self._triggers: OrderedNameMap[Trigger] = OrderedNameMap()
        self._packages: OrderedNameMap[Package] = OrderedNameMap()
        if catalog is not None:
            catalog.add_schema(self)

    @property
    def catalog(self) -> Optional["Catalog"]:
        return self.owner

    @catalog.setter
    def catalog(self, catalog: Optional["Catalog"]) -> None:
        self.owner = catalog

    @property
    def database(self) -> Optional["Database"]:
        catalog = self.catalog
        return catalog.database if catalog is not None else None

    def get_components(self) -> List[DBObject]:
        return list(self._tables.values())

    # tables -------------------------------------------------------------------------------------------

    def get_tables(self) -> List[Table]:
        return self._tables.values()

    def get_table(self, name: str, required: bool = True) -> Optional[Table]:
        table = self._tables.get(name)
        if table is None and required:
            raise ObjectNotFoundError("table", name, f"schema '{self.name}'")
        return table

    def add_table(self, table: Table) -> None:
        table.schema = self
        self._tables.put(table.name, table)

    def remove_table(self, name: str) -> Optional[Table]:
        table = self._tables.remove(name)
        if table is not None:
            table.schema = None
        return table

    # sequences ----------------------------------------------------------------------------------------

    def _have_database_imported(self, aspect: str) -> None:
        database = self.database
        if database is None:
            self.ensure_attached()
        else:
            getattr(database, f"have_{aspect}_imported")()

    def get_sequences(self) -> List[Sequence]:
        self._have_database_imported("sequences")
        return self._sequences.values()

    def get_sequence(self, name: str, required: bool = True) -> Optional[Sequence]:
        self._have_database_imported("sequences")
        sequence = self._sequences.get(name)
        if sequence is None and required:
            raise ObjectNotFoundError("sequence", name, f"schema '{self.name}'")
        return sequence

    def add_sequence(self, sequence: Sequence) -> None:
        self._have_database_imported("sequences")
        self.receive_sequence(sequence)

    def receive_sequence(self, sequence: Sequence) -> None:
        sequence.owner = self
        self._sequences.put(sequence.name, sequence)

    def remove_sequence(self, name: str) -> Optional[Sequence]:
        return self._sequences.remove(name)

    def clear_sequences(self) -> None:
        self._sequences.clear()

    # triggers -----------------------------------------------------------------------------------------

    def get_triggers(self) -> List[Trigger]:
        self._have_database_imported("triggers")
        return self._triggers.values()

    def get_trigger(self, name: str, required: bool = True) -> Optional[Trigger]:
        self._have_database_imported("triggers")
        trigger = self._triggers.get(name)
        if trigger is None and required:
            raise ObjectNotFoundError("trigger", name, f"schema '{self.name}'")
        return trigger

    def add_trigger(self, trigger: Trigger) -> None:
        self._have_database_imported("triggers")
        self.receive_trigger(trigger)

    def receive_trigger(self, trigger: Trigger) -> None:
        trigger.owner = self
        self._triggers.put(trigger.name, trigger)

    def clear_triggers(self) -> None:
        self._triggers.clear()

    # packages -----------------------------------------------------------------------------------------

    def get_packages(self) -> List[Package]:
        self._have_database_imported("packages")
        return self._packages.values()

    def get_package(self, name: str, required: bool = True) -> Optional[Package]:
        self._have_database_imported("packages")
        package = self._packages.get(name)
        if package is None and required:
            raise ObjectNotFoundError("package", name, f"schema '{self.name}'")
        return package

    def add_package(self, package: Package) -> None:
        self._have_database_imported("packages")
        self.receive_package(package)

    def receive_package(self, package: Package) -> None:
        package.owner = self
        self._packages.put(package.name, package)

    def clear_packages(self) -> None:
        self._packages.clear()


class Sequence(DBObject):
    """
    Database sequence.

    A sequence is either owned by a schema or detached, in which case it
    carries its catalog and schema names itself. A start or increment of 1 is
    the default and is omitted when rendering DDL.
    """

    def __init__(
        self,
        name: str,
        schema: Optional[Schema] = None,
        catalog_name: Optional[str] = None,
        schema_name: Optional[str] = None,
    ):
        self.catalog_name = catalog_name
        self.schema_name = schema_name
        super().__init__(name, "sequence")
        self.start = 1
        self.increment = 1
        self.max_value: Optional[int] = None
        self.min_value: Optional[int] = None
        self.cycle: Optional[bool] = None
        self.cache: Optional[int] = None
        self.order: Optional[bool] = None
        self.last_number = 0
        if schema is not None:
            schema.add_sequence(self)

    @property
    def owner(self) -> Optional[Schema]:
        return DBObject.owner.fget(self)

    @owner.setter
    def owner(self, owner: Optional[Schema]) -> None:
        DBObject.owner.fset(self, owner)
        if owner is not None:
            self.schema_name = owner.name
            catalog = owner.catalog
            self.catalog_name = catalog.name if catalog is not None else None

    @property
    def schema(self) -> Optional[Schema]:
        return self.owner

    def start_if_not_default(self) -> Optional[int]:
        return None if self.start == 1 else self.start

    def increment_if_not_default(self) -> Optional[int]:
        return None if self.increment == 1 else self.increment

    def drop_ddl(self) -> str:
        return f"drop sequence {self.name}"

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, Sequence):
            return False
        return (
            self.name == other.name
            and self.start == other.start
            and self.increment == other.increment
            and self.max_value == other.max_value
            and self.min_value == other.min_value
            and self.cycle == other.cycle
            and self.cache == other.cache
            and self.order == other.order
        )


class Trigger(DBObject):
    """Trigger definition as reported by the database dictionary."""

    def __init__(self, name: str, schema: Optional[Schema] = None, **attributes: Any):
        super().__init__(name, "trigger")
        self.trigger_type: Optional[str] = attributes.get("trigger_type")
        self.triggering_event: Optional[str] = attributes.get("triggering_event")
        self.table_owner: Optional[str] = attributes.get("table_owner")
        self.base_object_type: Optional[str] = attributes.get("base_object_type")
        self.table_name: Optional[str] = attributes.get("table_name")
        self.column_name: Optional[str] = attributes.get("column_name")
        self.referencing_names: Optional[str] = attributes.get("referencing_names")
        self.when_clause: Optional[str] = attributes.get("when_clause")
        self.status: Optional[str] = attributes.get("status")
        self.description: Optional[str] = attributes.get("description")
        self.action_type: Optional[str] = attributes.get("action_type")
        self.trigger_body: Optional[str] = attributes.get("trigger_body")
        if schema is not None:
            schema.add_trigger(self)

    @property
    def schema(self) -> Optional[Schema]:
        return self.owner

    def get_normalized_description(self) -> str:
        """Return the description without the owner's default '"SCHEMA".' prefix."""
        result = (self.description or "").strip()
        schema = self.schema
        if schema is not None and schema.name:
            prefix = f'"{schema.name.upper()}".'
            if result.startswith(prefix):
                result = result[len(prefix):]
        return result

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, Trigger):
            return False
        return (
            self.trigger_type == other.trigger_type
            and self.triggering_event == other.triggering_event
            and self.base_object_type == other.base_object_type
            and self.table_name == other.table_name
            and self.column_name == other.column_name
            and self.referencing_names == other.referencing_names
            and self.when_clause == other.when_clause
            and self.status == other.status
            and self.action_type == other.action_type
            and (self.trigger_body or "").strip() == (other.trigger_body or "").strip()
        )


class Package(CompositeDBObject):
    """Stored package (Oracle) grouping procedures."""

    def __init__(self, name: str, schema: Optional[Schema] = None):
        super().__init__(name, "package")
        self.sub_object_name: Optional[str] = None
        self.object_id: Optional[str] = None
        self.data_object_id: Optional[str] = None
        self.package_type: Optional[str] = None
        self.status: Optional[str] = None
        self._procedures: OrderedNameMap[Procedure] = OrderedNameMap()
        if schema is not None:
            schema.add_package(self)

    @property
    def schema(self) -> Optional[Schema]:
        return self.owner

    def get_procedures(self) -> List[Procedure]:
        return self._procedures.values()

    def add_procedure(self, procedure: Procedure) -> None:
        procedure.owner = self
        self._procedures.put(procedure.name, procedure)

    def get_components(self) -> List[DBObject]:
        return list(self._procedures.values())

    def is_identical(self, other: Any) -> bool:
        if not isinstance(other, Package):
            return False
        return (
            self.name == other.name
            and self.package_type == other.package_type
            and self.status == other.status
            and super().is_identical(other)
        )


class Procedure(DBObject):
    def __init__(self, name: str, package: Optional[Package] = None):
        super().__init__(name, "procedure")
        self.object_id: Optional[str] = None
        self.sub_program_id: Optional[str] = None
        self.overload: Optional[str] = None
        if package is not None:
            package.add_procedure(self)

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, Procedure):
            return False
        return (
            self.name == other.name
            and self.sub_program_id == other.sub_program_id
            and self.overload == other.overload
        )

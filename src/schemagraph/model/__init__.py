"""
Composite metadata model.

Database -> Catalog -> Schema -> {Table, Sequence, Trigger, Package} ->
{Column, Index, Constraint}, populated lazily through an Importer.
"""

from schemagraph.model.base import (
    CompositeDBObject,
    DBObject,
    ImportOnce,
    ImportState,
    OrderedNameMap,
)
from schemagraph.model.types import DataType, FKChangeRule, TableType, jdbc_type_for
from schemagraph.model.constraints import (
    CheckConstraint,
    Constraint,
    ForeignKeyConstraint,
    NotNullConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
    contains_mandatory_column,
    equivalent,
)
from schemagraph.model.column import Column
from schemagraph.model.index import Index, IndexInfo, NonUniqueIndex, UniqueIndex
from schemagraph.model.importer import (
    ColumnReceiver,
    FKReceiver,
    Importer,
    IndexReceiver,
    PKReceiver,
    ReferrerReceiver,
)
from schemagraph.model.table import Table
from schemagraph.model.schema import Package, Procedure, Schema, Sequence, Trigger
from schemagraph.model.database import Catalog, Database
from schemagraph.model.row import Row
from schemagraph.model.fk_path import ForeignKeyPath

__all__ = [
    # Foundation
    "DBObject",
    "CompositeDBObject",
    "OrderedNameMap",
    "ImportOnce",
    "ImportState",
    # Types
    "DataType",
    "TableType",
    "FKChangeRule",
    "jdbc_type_for",
    # Containers
    "Database",
    "Catalog",
    "Schema",
    "Table",
    "Column",
    # Constraints and indexes
    "Constraint",
    "UniqueConstraint",
    "PrimaryKeyConstraint",
    "ForeignKeyConstraint",
    "CheckConstraint",
    "NotNullConstraint",
    "equivalent",
    "contains_mandatory_column",
    "Index",
    "IndexInfo",
    "UniqueIndex",
    "NonUniqueIndex",
    # Schema-level objects
    "Sequence",
    "Trigger",
    "Package",
    "Procedure",
    # Data and navigation
    "Row",
    "ForeignKeyPath",
    # Importer interface
    "Importer",
    "ColumnReceiver",
    "PKReceiver",
    "IndexReceiver",
    "FKReceiver",
    "ReferrerReceiver",
]

"""
Schemagraph - Relational database metadata as a lazily populated object graph

Reads catalogs, schemas, tables, columns, constraints, indexes, sequences,
triggers and packages through pluggable importers and offers the tooling
built on top of that model.

Features:
- Lazy, thread-safe import of each metadata aspect on first use
- Vendor SQL dialects selected by product name and version
- Foreign key dependency ordering with cycle breaking
- Check constraint scanning and SQL rendering helpers
- Export to DDL scripts, CSV and YAML
"""

__version__ = "0.1.0"
__author__ = "DDG Team"

from schemagraph.errors import (
    ConfigurationError,
    ConstraintParseError,
    CyclicDependencyError,
    ImportFailedError,
    ObjectNotFoundError,
    SchemaGraphError,
    StructuralError,
    UnsupportedOperationError,
)
from schemagraph.model import (
    Catalog,
    Column,
    Database,
    ForeignKeyConstraint,
    Importer,
    Schema,
    Table,
)
from schemagraph.dialect import DatabaseDialect, get_dialect_for_product
from schemagraph.dependency import DependencyOrder, dependency_ordered_tables, resolve_dependencies
from schemagraph.metadata import CachingImporter, OracleImporter, YamlModelImporter
from schemagraph.output import (
    CsvModelExporter,
    SqlExportConfig,
    SqlScriptExporter,
    YamlModelExporter,
)

__all__ = [
    # Errors
    "SchemaGraphError",
    "ObjectNotFoundError",
    "ConfigurationError",
    "UnsupportedOperationError",
    "StructuralError",
    "CyclicDependencyError",
    "ConstraintParseError",
    "ImportFailedError",
    # Model
    "Database",
    "Catalog",
    "Schema",
    "Table",
    "Column",
    "ForeignKeyConstraint",
    "Importer",
    # Dialects
    "DatabaseDialect",
    "get_dialect_for_product",
    # Dependencies
    "DependencyOrder",
    "resolve_dependencies",
    "dependency_ordered_tables",
    # Importers
    "YamlModelImporter",
    "OracleImporter",
    "CachingImporter",
    # Output
    "SqlExportConfig",
    "SqlScriptExporter",
    "CsvModelExporter",
    "YamlModelExporter",
]

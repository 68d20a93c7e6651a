"""
YAML Model Exporter - Write a database model in the schema description format.

The output can be read back with YamlModelImporter, which makes it a
convenient snapshot of a live database for tests and offline comparisons.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from schemagraph.model.database import Database
from schemagraph.model.schema import Package, Schema, Sequence, Trigger
from schemagraph.model.table import Table

logger = logging.getLogger(__name__)

_TRIGGER_ATTRIBUTES = (
    "trigger_type", "triggering_event", "table_owner", "base_object_type", "table_name",
    "column_name", "referencing_names", "when_clause", "status", "description",
    "action_type", "trigger_body",
)


def _without_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


class YamlModelExporter:
    """
    Exports a database model to YAML.

    Args:
        database: Model to export
        include_database_aspects: Also export sequences, triggers, packages
            and check constraints
    """

    def __init__(self, database: Database, include_database_aspects: bool = True):
        self.database = database
        self.include_database_aspects = include_database_aspects

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model to the schema description structure."""
        database = self.database
        result: Dict[str, Any] = {
            "environment": database.environment,
            "product_name": database.product_name,
            "product_version": database.product_version,
        }
        if database.user:
            result["user"] = database.user
        result["schemas"] = [self._schema_dict(schema) for schema in database.get_schemas()]
        return result

    def _schema_dict(self, schema: Schema) -> Dict[str, Any]:
        catalog = schema.catalog
        data: Dict[str, Any] = {
            "name": schema.name,
            "catalog": catalog.name if catalog is not None else None,
            "tables": [self._table_dict(table) for table in schema.get_tables()],
        }
        if self.include_database_aspects:
            sequences = [_sequence_dict(sequence) for sequence in schema.get_sequences()]
            triggers = [_trigger_dict(trigger) for trigger in schema.get_triggers()]
            packages = [_package_dict(package) for package in schema.get_packages()]
            if sequences:
                data["sequences"] = sequences
            if triggers:
                data["triggers"] = triggers
            if packages:
                data["packages"] = packages
        return data

    def _table_dict(self, table: Table) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": table.name}
        if table.table_type.value != "TABLE":
            data["type"] = table.table_type.value
        if table.doc:
            data["doc"] = table.doc
        data["columns"] = [
            _without_none({
                "name": column.name,
                "type": str(column.type) if column.type is not None else None,
                "size": column.size,
                "fraction_digits": column.fraction_digits,
                "nullable": column.nullable,
                "default": column.default_value,
                "doc": column.doc,
            })
            for column in table.get_columns()
        ]

        pk = table.get_primary_key_constraint()
        if pk is not None:
            data["primary_key"] = _without_none({
                "name": pk.name,
                "name_deterministic": pk.name_deterministic,
                "columns": list(pk.column_names),
            })

        indexes = self._index_list(table)
        if indexes:
            data["indexes"] = indexes

        fks = []
        for fk in table.get_foreign_key_constraints():
            fks.append(_without_none({
                "name": fk.name,
                "name_deterministic": fk.name_deterministic,
                "columns": list(fk.column_names),
                "referee_table": _relative_name(fk.referee_table, table.schema),
                "referee_columns": list(fk.referee_column_names),
                "update_rule": fk.update_rule.value,
                "delete_rule": fk.delete_rule.value,
            }))
        if fks:
            data["foreign_keys"] = fks

        if self.include_database_aspects:
            checks = [
                _without_none({
                    "name": check.name,
                    "name_deterministic": check.name_deterministic,
                    "condition": check.condition_text,
                })
                for check in table.get_check_constraints()
            ]
            if checks:
                data["checks"] = checks
        return data

    def _index_list(self, table: Table) -> List[Dict[str, Any]]:
        """Indexes, plus unique constraints that have no index of their own."""
        result = []
        covered = []
        for index in table.get_indexes():
            result.append(_without_none({
                "name": index.name,
                "name_deterministic": index.name_deterministic,
                "unique": index.unique,
                "columns": list(index.column_names),
            }))
            if index.unique:
                covered.append(index.column_names)
        for uk in table.get_unique_constraints(include_pk=False):
            if uk.column_names in covered:
                continue
            result.append(_without_none({
                "name": uk.name,
                "name_deterministic": uk.name_deterministic,
                "unique": True,
                "columns": list(uk.column_names),
            }))
        return result

    def render(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)

    def write(self, output_path: Union[str, Path]) -> Path:
        """Write the YAML description to output_path and return the path."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, default_flow_style=False)
        logger.info(f"Wrote schema description of {self.database.name} to {output_path}")
        return output_path


def _relative_name(table: Table, schema: Optional[Schema]) -> str:
    if table.schema is None or table.schema is schema:
        return table.name
    return f"{table.schema.name}.{table.name}"


def _sequence_dict(sequence: Sequence) -> Dict[str, Any]:
    return _without_none({
        "name": sequence.name,
        "start": sequence.start,
        "increment": sequence.increment,
        "min_value": sequence.min_value,
        "max_value": sequence.max_value,
        "cycle": sequence.cycle,
        "cache": sequence.cache,
        "order": sequence.order,
        "last_number": sequence.last_number,
    })


def _trigger_dict(trigger: Trigger) -> Dict[str, Any]:
    data = {"name": trigger.name}
    data.update({attribute: getattr(trigger, attribute) for attribute in _TRIGGER_ATTRIBUTES})
    return _without_none(data)


def _package_dict(package: Package) -> Dict[str, Any]:
    return _without_none({
        "name": package.name,
        "type": package.package_type,
        "status": package.status,
        "procedures": [
            _without_none({"name": procedure.name, "overload": procedure.overload})
            for procedure in package.get_procedures()
        ] or None,
    })

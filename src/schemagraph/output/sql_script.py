"""
SQL Script Exporter - Write a CREATE script that rebuilds a database model.

The script is ordered so it can run against an empty database:
- CREATE SEQUENCE statements (if the dialect supports sequences)
- CREATE TABLE statements in foreign key dependency order
- ALTER TABLE ... ADD for every foreign key, including those deferred to
  break dependency cycles
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from schemagraph.dependency import resolve_dependencies
from schemagraph.model.database import Database
from schemagraph.sql.rendering import NameSpec, render_add_foreign_key, render_create_table

logger = logging.getLogger(__name__)


@dataclass
class SqlExportConfig:
    """Options of a SQL script export."""
    name_spec: NameSpec = NameSpec.IF_REPRODUCIBLE
    include_sequences: bool = True
    include_foreign_keys: bool = True
    break_cycles: bool = True
    schema_name: Optional[str] = None
    file_name: str = "create_tables.sql"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name_spec": self.name_spec.value,
            "include_sequences": self.include_sequences,
            "include_foreign_keys": self.include_foreign_keys,
            "break_cycles": self.break_cycles,
            "schema_name": self.schema_name,
            "file_name": self.file_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SqlExportConfig:
        """Create from dictionary."""
        return cls(
            name_spec=NameSpec(data.get("name_spec", NameSpec.IF_REPRODUCIBLE.value)),
            include_sequences=data.get("include_sequences", True),
            include_foreign_keys=data.get("include_foreign_keys", True),
            break_cycles=data.get("break_cycles", True),
            schema_name=data.get("schema_name"),
            file_name=data.get("file_name", "create_tables.sql"),
        )


class SqlScriptExporter:
    """
    Renders a database model as a DDL script.

    Args:
        database: Model to export
        config: Export options, defaults to SqlExportConfig()
    """

    def __init__(self, database: Database, config: Optional[SqlExportConfig] = None):
        self.database = database
        self.config = config or SqlExportConfig()

    def _table_holder(self) -> Any:
        if self.config.schema_name is None:
            return self.database
        return self.database.get_schema(self.config.schema_name)

    def render_statements(self) -> List[str]:
        """Return the script's statements in execution order, without terminators."""
        statements: List[str] = []
        dialect = self.database.dialect
        holder = self._table_holder()

        if self.config.include_sequences:
            if dialect.is_sequence_supported():
                for sequence in holder.get_sequences():
                    statements.append(dialect.render_create_sequence(sequence))
            else:
                logger.info(f"Skipping sequences: not supported by {dialect.system}")

        order = resolve_dependencies(holder, break_cycles=self.config.break_cycles)
        for table in order.tables:
            statements.append(
                render_create_table(table, include_foreign_keys=False, name_spec=self.config.name_spec)
            )

        if self.config.include_foreign_keys:
            for table in order.tables:
                for fk in table.get_foreign_key_constraints():
                    statements.append(render_add_foreign_key(fk, self.config.name_spec))

        if order.has_cycles:
            logger.info(
                f"Deferred {len(order.deferred_foreign_keys)} foreign key(s) to break dependency cycles"
            )
        return statements

    def render(self) -> str:
        """Render the whole script, one statement per block, each ending with ';'."""
        return "".join(f"{statement};\n\n" for statement in self.render_statements())

    def write(self, output_dir: Union[str, Path]) -> Path:
        """
        Write the script into output_dir.

        Returns:
            Path of the written script
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / self.config.file_name
        statements = self.render_statements()
        output_path.write_text("".join(f"{statement};\n\n" for statement in statements))
        logger.info(f"Wrote {len(statements)} statements to {output_path}")
        return output_path

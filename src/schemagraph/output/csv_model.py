"""
CSV Model Exporter - Write a database model as one CSV file per aspect.

Output Structure:
    <output_dir>/
    ├── columns.csv
    ├── primary_keys.csv
    ├── unique_keys.csv
    ├── foreign_keys.csv
    ├── checks.csv
    ├── indexes.csv
    └── sequences.csv

Multi-column constraints are written one row per column, with the column's
position in the constraint, so the files load cleanly into spreadsheets and
dataframes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from schemagraph.model.database import Database
from schemagraph.model.table import Table

logger = logging.getLogger(__name__)

COLUMNS = ["schema", "table", "position", "column", "type", "size", "fraction_digits",
           "nullable", "default_value", "comment"]
PRIMARY_KEYS = ["schema", "table", "constraint", "name_deterministic", "position", "column"]
UNIQUE_KEYS = PRIMARY_KEYS
FOREIGN_KEYS = ["schema", "table", "constraint", "name_deterministic", "position", "column",
                "referee_schema", "referee_table", "referee_column", "update_rule", "delete_rule"]
CHECKS = ["schema", "table", "constraint", "name_deterministic", "condition"]
INDEXES = ["schema", "table", "index", "unique", "name_deterministic", "position", "column"]
SEQUENCES = ["schema", "sequence", "start", "increment", "min_value", "max_value", "cycle", "cache"]


def _schema_name(table: Table) -> Optional[str]:
    return table.schema.name if table.schema is not None else None


class CsvModelExporter:
    """
    Exports the tables, constraints, indexes and sequences of a database.

    Args:
        database: Model to export
        schema_name: Restrict the export to one schema
    """

    def __init__(self, database: Database, schema_name: Optional[str] = None):
        self.database = database
        self.schema_name = schema_name

    def _tables(self) -> List[Table]:
        if self.schema_name is None:
            return self.database.get_tables()
        return self.database.get_schema(self.schema_name).get_tables()

    def column_frame(self) -> pd.DataFrame:
        rows = []
        for table in self._tables():
            for position, column in enumerate(table.get_columns(), start=1):
                rows.append({
                    "schema": _schema_name(table),
                    "table": table.name,
                    "position": position,
                    "column": column.name,
                    "type": str(column.type) if column.type is not None else None,
                    "size": column.size,
                    "fraction_digits": column.fraction_digits,
                    "nullable": column.nullable,
                    "default_value": column.default_value,
                    "comment": column.doc,
                })
        return pd.DataFrame(rows, columns=COLUMNS)

    def primary_key_frame(self) -> pd.DataFrame:
        rows = []
        for table in self._tables():
            pk = table.get_primary_key_constraint()
            if pk is None:
                continue
            for position, column_name in enumerate(pk.column_names, start=1):
                rows.append({
                    "schema": _schema_name(table),
                    "table": table.name,
                    "constraint": pk.name,
                    "name_deterministic": pk.name_deterministic,
                    "position": position,
                    "column": column_name,
                })
        return pd.DataFrame(rows, columns=PRIMARY_KEYS)

    def unique_key_frame(self) -> pd.DataFrame:
        rows = []
        for table in self._tables():
            for uk in table.get_unique_constraints(include_pk=False):
                for position, column_name in enumerate(uk.column_names, start=1):
                    rows.append({
                        "schema": _schema_name(table),
                        "table": table.name,
                        "constraint": uk.name,
                        "name_deterministic": uk.name_deterministic,
                        "position": position,
                        "column": column_name,
                    })
        return pd.DataFrame(rows, columns=UNIQUE_KEYS)

    def foreign_key_frame(self) -> pd.DataFrame:
        rows = []
        for table in self._tables():
            for fk in table.get_foreign_key_constraints():
                referee = fk.referee_table
                pairs = zip(fk.column_names, fk.referee_column_names)
                for position, (column_name, referee_column) in enumerate(pairs, start=1):
                    rows.append({
                        "schema": _schema_name(table),
                        "table": table.name,
                        "constraint": fk.name,
                        "name_deterministic": fk.name_deterministic,
                        "position": position,
                        "column": column_name,
                        "referee_schema": _schema_name(referee),
                        "referee_table": referee.name,
                        "referee_column": referee_column,
                        "update_rule": fk.update_rule.value,
                        "delete_rule": fk.delete_rule.value,
                    })
        return pd.DataFrame(rows, columns=FOREIGN_KEYS)

    def check_frame(self) -> pd.DataFrame:
        rows = []
        for table in self._tables():
            for check in table.get_check_constraints():
                rows.append({
                    "schema": _schema_name(table),
                    "table": table.name,
                    "constraint": check.name,
                    "name_deterministic": check.name_deterministic,
                    "condition": check.condition_text,
                })
        return pd.DataFrame(rows, columns=CHECKS)

    def index_frame(self) -> pd.DataFrame:
        rows = []
        for table in self._tables():
            for index in table.get_indexes():
                for position, column_name in enumerate(index.column_names, start=1):
                    rows.append({
                        "schema": _schema_name(table),
                        "table": table.name,
                        "index": index.name,
                        "unique": index.unique,
                        "name_deterministic": index.name_deterministic,
                        "position": position,
                        "column": column_name,
                    })
        return pd.DataFrame(rows, columns=INDEXES)

    def sequence_frame(self) -> pd.DataFrame:
        if self.schema_name is None:
            sequences = self.database.get_sequences()
        else:
            sequences = self.database.get_schema(self.schema_name).get_sequences()
        rows = [
            {
                "schema": sequence.schema_name,
                "sequence": sequence.name,
                "start": sequence.start,
                "increment": sequence.increment,
                "min_value": sequence.min_value,
                "max_value": sequence.max_value,
                "cycle": sequence.cycle,
                "cache": sequence.cache,
            }
            for sequence in sequences
        ]
        return pd.DataFrame(rows, columns=SEQUENCES)

    def frames(self) -> Dict[str, pd.DataFrame]:
        """Return file name -> DataFrame for every exported aspect."""
        return {
            "columns.csv": self.column_frame(),
            "primary_keys.csv": self.primary_key_frame(),
            "unique_keys.csv": self.unique_key_frame(),
            "foreign_keys.csv": self.foreign_key_frame(),
            "checks.csv": self.check_frame(),
            "indexes.csv": self.index_frame(),
            "sequences.csv": self.sequence_frame(),
        }

    def write(self, output_dir: Union[str, Path]) -> Dict[str, Path]:
        """
        Write all CSV files into output_dir.

        Returns:
            Dict of file name -> written path
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_paths: Dict[str, Path] = {}
        for file_name, df in self.frames().items():
            output_path = output_dir / file_name
            df.to_csv(output_path, index=False, na_rep="")
            output_paths[file_name] = output_path
            logger.info(f"Wrote {len(df)} rows to {output_path}")
        return output_paths

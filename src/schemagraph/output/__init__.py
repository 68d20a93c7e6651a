"""
Output module for writing database models to various formats.

Supports:
- DDL scripts (sequences, tables in dependency order, foreign keys)
- CSV files, one per model aspect
- YAML schema descriptions readable by YamlModelImporter
"""

from schemagraph.output.sql_script import SqlExportConfig, SqlScriptExporter
from schemagraph.output.csv_model import CsvModelExporter
from schemagraph.output.yaml_model import YamlModelExporter

__all__ = [
    "SqlExportConfig",
    "SqlScriptExporter",
    "CsvModelExporter",
    "YamlModelExporter",
]

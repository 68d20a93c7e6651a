"""
Metadata importers for Oracle data dictionaries and YAML schema descriptions.

Provides Importer implementations that populate the schemagraph model,
plus a caching wrapper that replays an earlier import.
"""

from schemagraph.metadata.caching import CachingImporter
from schemagraph.metadata.oracle import OracleImporter
from schemagraph.metadata.yaml_model import YamlModelImporter

__all__ = [
    "CachingImporter",
    "OracleImporter",
    "YamlModelImporter",
]

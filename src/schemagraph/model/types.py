"""
Enumerations and the column data type used by the metadata model.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Dict, Optional


class TableType(str, Enum):
    """Kinds of table-like objects reported by database metadata."""
    TABLE = "TABLE"
    VIEW = "VIEW"
    SYSTEM_TABLE = "SYSTEM TABLE"
    GLOBAL_TEMPORARY = "GLOBAL TEMPORARY"
    LOCAL_TEMPORARY = "LOCAL TEMPORARY"
    ALIAS = "ALIAS"
    SYNONYM = "SYNONYM"

    @classmethod
    def from_name(cls, name: Optional[str]) -> TableType:
        """Map a metadata table type label to a TableType (unknown labels map to TABLE)."""
        if not name:
            return cls.TABLE
        normalized = name.strip().upper().replace("_", " ")
        for member in cls:
            if member.value == normalized:
                return member
        return cls.TABLE


class FKChangeRule(str, Enum):
    """Referential action of a foreign key on update or delete."""
    NO_ACTION = "NO ACTION"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"

    @classmethod
    def from_name(cls, name: Optional[str]) -> FKChangeRule:
        if not name:
            return cls.NO_ACTION
        normalized = name.strip().upper().replace("_", " ")
        if normalized == "RESTRICT":
            return cls.NO_ACTION
        return cls(normalized)


# java.sql.Types codes, used in exports and for type classification
JDBC_TYPES: Dict[str, int] = {
    "BIT": -7,
    "TINYINT": -6,
    "SMALLINT": 5,
    "INTEGER": 4,
    "INT": 4,
    "BIGINT": -5,
    "FLOAT": 6,
    "REAL": 7,
    "DOUBLE": 8,
    "DOUBLE PRECISION": 8,
    "NUMERIC": 2,
    "DECIMAL": 3,
    "NUMBER": 3,
    "CHAR": 1,
    "VARCHAR": 12,
    "VARCHAR2": 12,
    "LONGVARCHAR": -1,
    "TEXT": -1,
    "LONG": -1,
    "DATE": 91,
    "TIME": 92,
    "TIMESTAMP": 93,
    "DATETIME": 93,
    "BINARY": -2,
    "VARBINARY": -3,
    "RAW": -3,
    "LONGVARBINARY": -4,
    "BLOB": 2004,
    "CLOB": 2005,
    "NCLOB": 2011,
    "BOOLEAN": 16,
    "NCHAR": -15,
    "NVARCHAR": -9,
    "NVARCHAR2": -9,
    "LONGNVARCHAR": -16,
    "OTHER": 1111,
}

_LOB_TYPES = {"BLOB", "CLOB", "NCLOB"}
_VAR_CHAR_TYPES = {"VARCHAR", "VARCHAR2", "NVARCHAR", "NVARCHAR2", "LONGVARCHAR", "LONGNVARCHAR", "TEXT"}
_ALPHA_TYPES = _VAR_CHAR_TYPES | {"CHAR", "NCHAR", "CLOB", "NCLOB", "LONG"}
_INTEGER_TYPES = {"TINYINT", "SMALLINT", "INTEGER", "INT", "BIGINT", "BIT"}
_DECIMAL_TYPES = {"DECIMAL", "NUMERIC", "NUMBER"}
_FLOAT_TYPES = {"FLOAT", "REAL", "DOUBLE", "DOUBLE PRECISION"}
_TEMPORAL_TYPES = {"DATE", "TIME", "TIMESTAMP", "DATETIME"}


def jdbc_type_for(name: str) -> Optional[int]:
    """Return the java.sql.Types code for a type name, or None if unknown."""
    return JDBC_TYPES.get(name.strip().upper())


class DataType:
    """
    Column data type.

    Instances are shared: get_instance() returns the same object for the same
    (case-insensitive) type name.
    """

    _instances: Dict[str, "DataType"] = {}
    _lock = threading.Lock()

    def __init__(self, name: str, jdbc_type: Optional[int] = None):
        self.name = name.upper()
        self.jdbc_type = jdbc_type if jdbc_type is not None else jdbc_type_for(name)

    @classmethod
    def get_instance(cls, name: str, jdbc_type: Optional[int] = None) -> DataType:
        key = name.strip().upper()
        with cls._lock:
            instance = cls._instances.get(key)
            if instance is None:
                instance = cls(key, jdbc_type)
                cls._instances[key] = instance
            return instance

    @property
    def _base_name(self) -> str:
        # 'TIMESTAMP(6) WITH TIME ZONE' classifies as TIMESTAMP
        return self.name.split("(")[0].split(" WITH")[0].strip()

    def is_lob(self) -> bool:
        return self._base_name in _LOB_TYPES

    def is_alpha(self) -> bool:
        return self._base_name in _ALPHA_TYPES

    def is_var_char(self) -> bool:
        return self._base_name in _VAR_CHAR_TYPES

    def is_integer(self) -> bool:
        return self._base_name in _INTEGER_TYPES

    def is_decimal(self) -> bool:
        return self._base_name in _DECIMAL_TYPES

    def is_number(self) -> bool:
        return self.is_integer() or self.is_decimal() or self._base_name in _FLOAT_TYPES

    def is_temporal(self) -> bool:
        return self._base_name in _TEMPORAL_TYPES

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DataType) and self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"DataType({self.name!r})"

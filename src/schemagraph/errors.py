"""
Error types raised by the schemagraph package.

All errors derive from SchemaGraphError so callers can catch the whole family,
while the more specific classes also inherit from the matching builtin
(LookupError, ValueError) for code that only knows about those.
"""

from __future__ import annotations

from typing import Iterable, Optional


class SchemaGraphError(Exception):
    """Base class of all schemagraph errors."""


class ObjectNotFoundError(SchemaGraphError, LookupError):
    """A named database object is absent from an already imported aspect."""

    def __init__(self, object_type: str, name: Optional[str], container: Optional[str] = None):
        self.object_type = object_type
        self.name = name
        self.container = container
        location = f" in {container}" if container else ""
        super().__init__(f"{object_type} '{name}' not found{location}")


class ConfigurationError(SchemaGraphError):
    """Required setup is missing or invalid."""


class UnsupportedOperationError(ConfigurationError):
    """A dialect was asked for a capability its database does not offer."""

    def __init__(self, message: str, system: Optional[str] = None):
        self.system = system
        super().__init__(message)


class StructuralError(SchemaGraphError, ValueError):
    """Objects do not fit together, e.g. FK path edges that do not chain."""


class CyclicDependencyError(StructuralError):
    """Foreign keys form a cycle that the resolver was told not to break."""

    def __init__(self, table_names: Iterable[str]):
        self.table_names = list(table_names)
        super().__init__(
            f"Cyclic foreign key dependency between tables: {', '.join(self.table_names)}"
        )


class ParseError(SchemaGraphError, ValueError):
    """Text could not be parsed."""


class ConstraintParseError(ParseError):
    """A check constraint condition is not a valid SQL expression."""


class ColumnTypeParseError(ParseError):
    """A column type specification like 'number(8,2)' is malformed."""


class ImportFailedError(SchemaGraphError):
    """The importer failed while materializing an aspect."""

    def __init__(self, aspect: str, owner: str, cause: BaseException):
        self.aspect = aspect
        self.owner = owner
        super().__init__(f"Failed to import {aspect} of {owner}: {cause}")

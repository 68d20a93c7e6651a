"""
Table indexes and the raw index record delivered by importers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from schemagraph.model.base import DBObject
from schemagraph.model.constraints import UniqueConstraint

if TYPE_CHECKING:
    from schemagraph.model.table import Table


@dataclass
class IndexInfo:
    """Index description as read from database metadata, one entry per index."""
    name: str
    unique: bool
    column_names: List[str] = field(default_factory=list)
    index_type: Optional[str] = None
    ascending: Optional[bool] = None
    cardinality: Optional[int] = None
    pages: Optional[int] = None
    filter_condition: Optional[str] = None

    def add_column(self, position: int, column_name: str) -> None:
        """Place a column at its 1-based position, as metadata rows arrive out of order."""
        while len(self.column_names) < position:
            self.column_names.append("")
        self.column_names[position - 1] = column_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "unique": self.unique,
            "column_names": list(self.column_names),
            "index_type": self.index_type,
        }


class Index(DBObject):
    """Base class of unique and non-unique indexes."""

    def __init__(self, name: Optional[str], name_deterministic: bool, table: Optional["Table"]):
        super().__init__(name, "index", owner=table)
        self.name_deterministic = name_deterministic

    @property
    def table(self) -> Optional["Table"]:
        return self.owner

    @table.setter
    def table(self, table: Optional["Table"]) -> None:
        self.owner = table

    @property
    def unique(self) -> bool:
        raise NotImplementedError

    @property
    def column_names(self) -> Tuple[str, ...]:
        raise NotImplementedError

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, Index):
            return False
        return (
            self.name == other.name
            and self.unique == other.unique
            and self.column_names == other.column_names
        )

    def __str__(self) -> str:
        kind = "unique index" if self.unique else "index"
        return f"{kind} {self.name} ({', '.join(self.column_names)})"


class UniqueIndex(Index):
    """Index backed by a unique constraint (which may be the primary key)."""

    def __init__(self, name: Optional[str], name_deterministic: bool, constraint: UniqueConstraint):
        super().__init__(name, name_deterministic, constraint.table)
        self.constraint = constraint

    @property
    def unique(self) -> bool:
        return True

    @property
    def column_names(self) -> Tuple[str, ...]:
        return self.constraint.column_names


class NonUniqueIndex(Index):
    def __init__(
        self,
        name: Optional[str],
        name_deterministic: bool,
        table: Optional["Table"],
        *column_names: str,
    ):
        super().__init__(name, name_deterministic, table)
        self._column_names = list(column_names)

    @property
    def unique(self) -> bool:
        return False

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(self._column_names)

    def add_column_name(self, column_name: str) -> None:
        self._column_names.append(column_name)

"""
Table constraints: primary key, unique, foreign key, check and not null.

Constraint equality anchors on the owning table and the column list and
ignores the constraint name, while is_identical() compares name and columns
without looking at the owner.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Tuple, Union

from schemagraph.errors import ConfigurationError, ObjectNotFoundError, StructuralError
from schemagraph.model.base import DBObject
from schemagraph.model.types import FKChangeRule

if TYPE_CHECKING:
    from schemagraph.model.table import Table

logger = logging.getLogger(__name__)

ColumnNames = Union[str, Sequence[str]]


def _as_names(names: Optional[ColumnNames]) -> Tuple[str, ...]:
    if names is None:
        return ()
    if isinstance(names, str):
        return (names,)
    return tuple(names)


def _same_names(a: Sequence[str], b: Sequence[str]) -> bool:
    return len(a) == len(b) and all(x.lower() == y.lower() for x, y in zip(a, b))


class Constraint(DBObject):
    """
    Base class of all table constraints.

    Args:
        table: Owning table
        name: Constraint name as reported by the database, may be None
        name_deterministic: False if the database generated the name, so that
            it would differ after re-creating the constraint
        object_type: Type label
        column_names: Constrained columns in definition order
    """

    def __init__(
        self,
        table: Optional["Table"],
        name: Optional[str],
        name_deterministic: bool,
        object_type: str,
        column_names: Iterable[str] = (),
    ):
        super().__init__(name, object_type, owner=table)
        self.name_deterministic = name_deterministic
        self._column_names: List[str] = list(column_names)

    @property
    def table(self) -> Optional["Table"]:
        return self.owner

    @table.setter
    def table(self, table: Optional["Table"]) -> None:
        self.owner = table

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(self._column_names)

    def column_count(self) -> int:
        return len(self.column_names)

    def contains_column(self, column_name: str) -> bool:
        return any(name.lower() == column_name.lower() for name in self.column_names)

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if other is None or type(self) is not type(other):
            return False
        return self.owner == other.owner and self.column_names == other.column_names

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.column_names))


class UniqueConstraint(Constraint):
    """Unique key; registers itself with the table it is created for."""

    object_label = "unique constraint"

    def __init__(
        self,
        table: Optional["Table"],
        name: Optional[str],
        name_deterministic: bool,
        *column_names: str,
    ):
        super().__init__(table, name, name_deterministic, self.object_label, column_names)
        if table is not None:
            table.add_unique_constraint(self)

    def add_column_name(self, column_name: str) -> None:
        self._column_names.append(column_name)

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, UniqueConstraint):
            return False
        return self.name == other.name and self.column_names == other.column_names

    def __str__(self) -> str:
        from schemagraph.sql.rendering import NameSpec, uk_spec
        return uk_spec(self, NameSpec.ALWAYS)


class PrimaryKeyConstraint(UniqueConstraint):
    """Primary key; becomes the table's primary key when created for a table."""

    object_label = "primary key constraint"

    def __str__(self) -> str:
        from schemagraph.sql.rendering import NameSpec, pk_spec
        return pk_spec(self, NameSpec.ALWAYS)


class ForeignKeyConstraint(Constraint):
    """
    Foreign key from columns of the owning table to columns of a referee table.

    Args:
        name: Constraint name
        name_deterministic: Whether the name survives re-creation
        table: Referring (child) table
        fk_column_names: Referring columns
        referee_table: Referenced (parent) table
        referee_column_names: Referenced columns, same count as fk_column_names
    """

    def __init__(
        self,
        name: Optional[str],
        name_deterministic: bool,
        table: Optional["Table"],
        fk_column_names: ColumnNames,
        referee_table: "Table",
        referee_column_names: ColumnNames,
    ):
        fk_columns = _as_names(fk_column_names)
        referee_columns = _as_names(referee_column_names)
        if referee_table is None:
            raise ConfigurationError(f"Referee table of foreign key {name} is required")
        if len(fk_columns) != len(referee_columns):
            raise StructuralError(
                f"Foreign key {name} has {len(fk_columns)} columns "
                f"but references {len(referee_columns)} columns"
            )
        super().__init__(table, name, name_deterministic, "foreign key constraint", fk_columns)
        self.referee_table = referee_table
        self.referee_column_names: Tuple[str, ...] = referee_columns
        self.update_rule = FKChangeRule.NO_ACTION
        self.delete_rule = FKChangeRule.NO_ACTION
        if table is not None:
            table.add_foreign_key(self)

    @property
    def fk_column_names(self) -> Tuple[str, ...]:
        return self.column_names

    def column_referenced_by(self, fk_column_name: str, required: bool = True) -> Optional[str]:
        """Return the referee column that the given foreign key column points to."""
        for fk_column, referee_column in zip(self.column_names, self.referee_column_names):
            if fk_column.lower() == fk_column_name.lower():
                return referee_column
        if required:
            raise ObjectNotFoundError("foreign key column", fk_column_name, f"foreign key {self.name}")
        return None

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, ForeignKeyConstraint):
            return False
        return (
            self.name == other.name
            and self.column_names == other.column_names
            and self.referee_column_names == other.referee_column_names
            and self.referee_table.name == other.referee_table.name
        )

    def __eq__(self, other: Any) -> bool:
        if not super().__eq__(other):
            return False
        return (
            self.referee_column_names == other.referee_column_names
            and self.referee_table == other.referee_table
        )

    def __hash__(self) -> int:
        return hash((super().__hash__(), self.referee_column_names, self.referee_table.name))

    def __str__(self) -> str:
        from schemagraph.sql.rendering import NameSpec, fk_spec
        return fk_spec(self, NameSpec.ALWAYS)


class CheckConstraint(Constraint):
    """
    Check constraint holding the raw condition text.

    The referenced column names are scanned from the condition on first use;
    an unparseable condition raises ConstraintParseError at that point.
    """

    def __init__(
        self,
        name: Optional[str],
        name_deterministic: bool,
        table: Union["Table", str, None],
        condition_text: str,
    ):
        owner = None if isinstance(table, str) else table
        super().__init__(owner, name, name_deterministic, "check constraint")
        self.table_name = table if isinstance(table, str) else (table.name if table is not None else None)
        self.condition_text = condition_text
        self._scanned = False
        if owner is not None:
            owner.add_check_constraint(self)

    @property
    def column_names(self) -> Tuple[str, ...]:
        if not self._scanned:
            from schemagraph.sql.check_scanner import referenced_columns
            table = self.table
            database = table.database if table is not None else None
            dialect = database.dialect.sqlglot_dialect if database is not None else None
            self._column_names = list(referenced_columns(self.condition_text, dialect))
            self._scanned = True
        return tuple(self._column_names)

    def is_equivalent(self, other: CheckConstraint) -> bool:
        """Same table and same condition up to whitespace."""
        return (
            (self.table_name or "").lower() == (other.table_name or "").lower()
            and _normalize_space(self.condition_text) == _normalize_space(other.condition_text)
        )

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, CheckConstraint):
            return False
        return self.name == other.name and self.condition_text == other.condition_text

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, CheckConstraint):
            return False
        return self.owner == other.owner and self.condition_text == other.condition_text

    def __hash__(self) -> int:
        return hash(("CheckConstraint", self.condition_text))

    def __str__(self) -> str:
        from schemagraph.sql.rendering import NameSpec, check_spec
        return check_spec(self, NameSpec.ALWAYS)


class NotNullConstraint(Constraint):
    """NOT NULL on a single column; held by the column, not the table."""

    def __init__(
        self,
        table: Optional["Table"],
        name: Optional[str],
        name_deterministic: bool,
        column_name: str,
    ):
        super().__init__(table, name, name_deterministic, "not null constraint", [column_name])

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, NotNullConstraint):
            return False
        return self.name == other.name and self.column_names == other.column_names


def _normalize_space(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def equivalent(uk: UniqueConstraint, pk: PrimaryKeyConstraint) -> bool:
    """Tell if a unique constraint covers exactly the primary key columns."""
    return _same_names(uk.column_names, pk.column_names)


def contains_mandatory_column(constraint: Constraint) -> bool:
    """Tell if at least one of the constraint's columns is NOT NULL."""
    table = constraint.table
    if table is None:
        raise ConfigurationError(f"Constraint {constraint.name} is not attached to a table")
    return any(not table.get_column(name).nullable for name in constraint.column_names)

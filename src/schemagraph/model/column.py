"""
Table column.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Union

from schemagraph.model.base import DBObject
from schemagraph.model.constraints import (
    ForeignKeyConstraint,
    NotNullConstraint,
    UniqueConstraint,
)
from schemagraph.model.types import DataType

if TYPE_CHECKING:
    from schemagraph.model.table import Table


class Column(DBObject):
    """
    A column of a table.

    Args:
        name: Column name
        table: Owning table; the column adds itself to the table's columns
        data_type: DataType or a type name like 'VARCHAR'
        size: Length or precision
        fraction_digits: Scale of decimal types
        doc: Column comment
    """

    def __init__(
        self,
        name: str,
        table: Optional["Table"] = None,
        data_type: Union[DataType, str, None] = None,
        size: Optional[int] = None,
        fraction_digits: Optional[int] = None,
        doc: Optional[str] = None,
    ):
        super().__init__(name, "column", owner=table, doc=doc)
        if isinstance(data_type, str):
            data_type = DataType.get_instance(data_type)
        self.type: Optional[DataType] = data_type
        self.size = size
        self.fraction_digits = fraction_digits
        self.default_value: Optional[str] = None
        self.version_column = False
        self.uk_constraints: List[UniqueConstraint] = []
        self.not_null_constraint: Optional[NotNullConstraint] = None
        if table is not None:
            table.receive_column(self)

    @property
    def table(self) -> Optional["Table"]:
        return self.owner

    @table.setter
    def table(self, table: Optional["Table"]) -> None:
        self.owner = table

    @property
    def nullable(self) -> bool:
        return self.not_null_constraint is None

    @nullable.setter
    def nullable(self, nullable: bool) -> None:
        if nullable:
            self.not_null_constraint = None
        elif self.not_null_constraint is None:
            table = self.table
            constraint_name = f"{table.name if table is not None else '_'}_{self.name}_NOT_NULL"
            self.not_null_constraint = NotNullConstraint(table, constraint_name, True, self.name)

    def add_uk_constraint(self, constraint: UniqueConstraint) -> None:
        if not any(existing is constraint for existing in self.uk_constraints):
            self.uk_constraints.append(constraint)

    def is_unique(self) -> bool:
        """Tell if the column alone forms a unique key."""
        return any(len(uk.column_names) == 1 for uk in self.uk_constraints)

    def is_pk_component(self) -> bool:
        table = self.table
        if table is None:
            return False
        pk = table.get_primary_key_constraint()
        return pk is not None and pk.contains_column(self.name)

    def is_integer_type(self) -> bool:
        if self.type is None:
            return False
        return self.type.is_integer() or (
            self.type.is_decimal() and (self.fraction_digits is None or self.fraction_digits == 0)
        )

    def get_foreign_key_constraint(self) -> Optional[ForeignKeyConstraint]:
        """Return the single-column foreign key on this column, if any."""
        table = self.table
        if table is None:
            return None
        for fk in table.get_foreign_key_constraints():
            if len(fk.column_names) == 1 and fk.column_names[0].lower() == self.name.lower():
                return fk
        return None

    def is_equivalent(self, other: Column) -> bool:
        """Same type, size and fraction digits."""
        return (
            self.type == other.type
            and self.size == other.size
            and self.fraction_digits == other.fraction_digits
        )

    def is_identical(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, Column):
            return False
        return self.name == other.name and self.is_equivalent(other)

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, Column):
            return False
        return (
            self.is_identical(other)
            and self.default_value == other.default_value
            and self.version_column == other.version_column
            and self.nullable == other.nullable
            and self.owner == other.owner
        )

    def __hash__(self) -> int:
        return hash(("Column", self.name))

    def __str__(self) -> str:
        from schemagraph.sql.rendering import render_column_type_with_size
        text = f"{self.name} : {render_column_type_with_size(self)}"
        return text if self.nullable else text + " NOT NULL"

"""
A single table row with case-insensitive cell access.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from schemagraph.errors import StructuralError
from schemagraph.model.base import OrderedNameMap
from schemagraph.model.constraints import ForeignKeyConstraint
from schemagraph.model.table import Table


class Row:
    """
    Cell values of one row of a table.

    Single-column keys are read and written as plain values, composite keys
    as tuples in key column order.
    """

    def __init__(self, table: Optional[Table] = None):
        self.table = table
        self._cells: OrderedNameMap[Any] = OrderedNameMap()

    def with_table(self, table: Table) -> Row:
        self.table = table
        return self

    @property
    def cells(self) -> Dict[str, Any]:
        return dict(zip(self._cells.names(), self._cells.values()))

    def get_cell_value(self, column_name: str) -> Any:
        return self._cells.get(column_name)

    def set_cell_value(self, column_name: str, value: Any) -> None:
        self._cells.put(column_name, value)

    def get_cell_values(self, column_names: Sequence[str]) -> Tuple[Any, ...]:
        return tuple(self._cells.get(name) for name in column_names)

    def set_cell_values(self, column_names: Sequence[str], values: Sequence[Any]) -> None:
        if len(column_names) != len(values):
            raise StructuralError(
                f"Mismatch of column and value counts: {len(column_names)} columns, "
                f"{len(values)} values"
            )
        for name, value in zip(column_names, values):
            self.set_cell_value(name, value)

    # keys ---------------------------------------------------------------------------------------------

    def get_pk_values(self) -> Tuple[Any, ...]:
        return self.get_cell_values(self.table.get_pk_column_names())

    def get_pk_value(self) -> Any:
        return self._get_key(self.table.get_pk_column_names())

    def set_pk_value(self, value: Any) -> None:
        self._set_key(self.table.get_pk_column_names(), value)

    def get_fk_value(self, fk: ForeignKeyConstraint) -> Any:
        return self._get_key(fk.column_names)

    def set_fk_value(self, fk: ForeignKeyConstraint, value: Any) -> None:
        self._set_key(fk.column_names, value)

    def get_fk_components(self, fk: ForeignKeyConstraint) -> Tuple[Any, ...]:
        return self.get_cell_values(fk.column_names)

    def _get_key(self, column_names: Sequence[str]) -> Any:
        if len(column_names) == 1:
            return self.get_cell_value(column_names[0])
        return self.get_cell_values(column_names)

    def _set_key(self, column_names: Sequence[str], value: Any) -> None:
        if len(column_names) == 1:
            self.set_cell_value(column_names[0], value)
        else:
            self.set_cell_values(column_names, value)

    def __str__(self) -> str:
        table_name = self.table.name if self.table is not None else ""
        return f"{table_name}{self._cells.values()}"

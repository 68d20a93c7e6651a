"""
Chains of foreign keys leading from one table to another.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from schemagraph.errors import ObjectNotFoundError, StructuralError
from schemagraph.model.constraints import ForeignKeyConstraint
from schemagraph.model.table import Table

if TYPE_CHECKING:
    from schemagraph.model.database import Database


class ForeignKeyPath:
    """
    A route through foreign keys, e.g. ORDER_ITEM(order_id) -> ORDER(customer_id) -> CUSTOMER(id).

    Each edge must start at the table the previous edge referenced; the first
    edge must start at the start table if one was given.

    Args:
        *edges: Foreign keys in route order
        start_table: Name of the start table for a path without edges yet
    """

    def __init__(self, *edges: ForeignKeyConstraint, start_table: Optional[str] = None):
        self.start_table = start_table
        self.edges: List[ForeignKeyConstraint] = []
        for edge in edges:
            self.add_edge(edge)

    def copy(self) -> ForeignKeyPath:
        result = ForeignKeyPath(start_table=self.start_table)
        result.edges = list(self.edges)
        return result

    def add_edge(self, fk: ForeignKeyConstraint) -> None:
        table_name = fk.table.name
        if not self.edges:
            if self.start_table is None:
                self.start_table = table_name
            elif self.start_table != table_name:
                raise StructuralError(
                    f"Expected reference from {self.start_table}, but found one from {table_name}"
                )
        else:
            previous = self.edges[-1].referee_table.name
            if previous != table_name:
                raise StructuralError(
                    f"Expected reference from {previous}, but found one from {table_name}"
                )
        self.edges.append(fk)

    def derive_path(self, fk: ForeignKeyConstraint) -> ForeignKeyPath:
        """Return a copy of this path extended by one edge."""
        result = self.copy()
        result.add_edge(fk)
        return result

    def get_target_table(self) -> Optional[str]:
        if self.edges:
            return self.edges[-1].referee_table.name
        return self.start_table

    def get_intermediates(self) -> List[Table]:
        return [edge.referee_table for edge in self.edges[:-1]]

    def has_intermediate(self, table: Table) -> bool:
        return any(edge.referee_table == table for edge in self.edges[:-1])

    def get_end_column_names(self) -> Tuple[str, ...]:
        if not self.edges:
            raise StructuralError("Foreign key path has no edges")
        return self.edges[-1].referee_column_names

    def get_table_path(self) -> str:
        names = [edge.table.name for edge in self.edges]
        if self.edges:
            names.append(self.edges[-1].referee_table.name)
        return ", ".join(names)

    @staticmethod
    def parse(text: str, database: "Database") -> ForeignKeyPath:
        """
        Parse a path like 'ORDER_ITEM(order_id) -> ORDER(customer_id) -> CUSTOMER(id)'.

        Every node but the last names the foreign key columns of its table;
        the last node only marks the target.
        """
        nodes = text.split(" ->")
        path = ForeignKeyPath()
        for node in nodes[:-1]:
            path.add_edge(_parse_fk(node, database))
        return path

    def __len__(self) -> int:
        return len(self.edges)

    def __str__(self) -> str:
        from schemagraph.sql.rendering import render_column_names
        parts = [
            f"{edge.table.name}{render_column_names(edge.column_names)} -> " for edge in self.edges
        ]
        if self.edges:
            end = self.edges[-1]
            parts.append(f"{end.referee_table.name}{render_column_names(end.referee_column_names)}")
        return "".join(parts)


def _parse_fk(node: str, database: "Database") -> ForeignKeyConstraint:
    node = node.strip()
    bracket = node.find("(")
    if bracket < 0 or not node.endswith(")"):
        raise StructuralError(f"Illegal foreign key path node: {node}")
    table_name = node[:bracket].strip()
    columns = [c.strip() for c in node[bracket + 1:-1].split(",")]
    table = database.get_table(table_name)
    try:
        return table.get_foreign_key_constraint(*columns)
    except ObjectNotFoundError:
        raise ObjectNotFoundError(
            "foreign key constraint", f"{table_name}({', '.join(columns)})"
        ) from None

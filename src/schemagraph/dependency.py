"""
Foreign key dependency ordering of tables.

Tables are ordered so that every table comes after the tables its foreign
keys reference, which is the order in which tables can be created or filled
with data. Among tables without a mutual dependency the holder's order is
kept.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set, Union

from schemagraph.errors import CyclicDependencyError
from schemagraph.model.constraints import ForeignKeyConstraint
from schemagraph.model.table import Table

logger = logging.getLogger(__name__)


@dataclass
class DependencyOrder:
    """
    Result of resolving table dependencies.

    Attributes:
        tables: Tables with providers before their dependents
        deferred_foreign_keys: Foreign keys removed from the graph to break
            cycles; they must be created after all tables
    """
    tables: List[Table] = field(default_factory=list)
    deferred_foreign_keys: List[ForeignKeyConstraint] = field(default_factory=list)

    @property
    def has_cycles(self) -> bool:
        return bool(self.deferred_foreign_keys)

    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tables": self.table_names(),
            "deferred_foreign_keys": [
                {
                    "name": fk.name,
                    "table": fk.table.name if fk.table is not None else None,
                    "referee_table": fk.referee_table.name,
                }
                for fk in self.deferred_foreign_keys
            ],
        }


@dataclass
class _Edge:
    """'child requires parent' by way of one foreign key."""
    child: int
    parent: int
    fk: ForeignKeyConstraint
    active: bool = True


def _tables_of(table_holder: Union[Any, Iterable[Table]]) -> List[Table]:
    if hasattr(table_holder, "get_tables"):
        return list(table_holder.get_tables())
    return list(table_holder)


def _is_nullable(fk: ForeignKeyConstraint) -> bool:
    table = fk.table
    if table is None:
        return False
    for column_name in fk.column_names:
        column = table.get_column(column_name, required=False)
        if column is None or not column.nullable:
            return False
    return True


def resolve_dependencies(
    table_holder: Union[Any, Iterable[Table]], break_cycles: bool = True
) -> DependencyOrder:
    """
    Order tables by their foreign key dependencies.

    Uses Kahn's algorithm; among the tables that are ready at a time the one
    that comes first in the holder is emitted first. Foreign keys of a table
    to itself and to tables outside the holder are ignored.

    If the foreign keys form a cycle, one foreign key on the cycle is
    deferred: the first stuck table's nullable foreign key if there is one,
    otherwise its first foreign key on the cycle.

    Args:
        table_holder: Database, Catalog, Schema or any object with
            get_tables(), or an iterable of tables
        break_cycles: Defer foreign keys on cycles instead of raising

    Returns:
        DependencyOrder with the ordered tables and the deferred foreign keys

    Raises:
        CyclicDependencyError: If break_cycles is False and a cycle exists
    """
    tables = _tables_of(table_holder)
    position = {id(table): i for i, table in enumerate(tables)}

    edges: List[_Edge] = []
    provider_edges: List[List[_Edge]] = [[] for _ in tables]
    dependent_edges: List[List[_Edge]] = [[] for _ in tables]
    in_degree = [0] * len(tables)

    for i, table in enumerate(tables):
        for fk in table.get_foreign_key_constraints():
            j = position.get(id(fk.referee_table))
            if j is None or j == i:
                continue
            edge = _Edge(child=i, parent=j, fk=fk)
            edges.append(edge)
            provider_edges[i].append(edge)
            dependent_edges[j].append(edge)
            in_degree[i] += 1

    ready = [i for i in range(len(tables)) if in_degree[i] == 0]
    heapq.heapify(ready)
    emitted: Set[int] = set()
    result = DependencyOrder()

    while len(emitted) < len(tables):
        if not ready:
            edge = _select_edge_to_defer(tables, emitted, provider_edges)
            if not break_cycles:
                cycle = _cycle_members(tables, emitted, provider_edges)
                raise CyclicDependencyError(tables[i].name for i in cycle)
            logger.warning(
                f"Cyclic foreign key dependency: deferring {edge.fk.name or 'unnamed foreign key'} "
                f"from {tables[edge.child].name} to {tables[edge.parent].name}"
            )
            edge.active = False
            result.deferred_foreign_keys.append(edge.fk)
            in_degree[edge.child] -= 1
            if in_degree[edge.child] == 0:
                heapq.heappush(ready, edge.child)
            continue
        i = heapq.heappop(ready)
        emitted.add(i)
        result.tables.append(tables[i])
        for edge in dependent_edges[i]:
            if edge.active:
                edge.active = False
                in_degree[edge.child] -= 1
                if in_degree[edge.child] == 0:
                    heapq.heappush(ready, edge.child)

    logger.debug(f"Dependency order: {', '.join(result.table_names())}")
    return result


def dependency_ordered_tables(
    table_holder: Union[Any, Iterable[Table]], break_cycles: bool = True
) -> List[Table]:
    """Return the holder's tables with referenced tables before referencing ones."""
    return resolve_dependencies(table_holder, break_cycles).tables


def _reaches(start: int, target: int, provider_edges: List[List[_Edge]]) -> bool:
    """Tell if target is reachable from start following active 'requires' edges."""
    stack = [start]
    seen = {start}
    while stack:
        node = stack.pop()
        if node == target:
            return True
        for edge in provider_edges[node]:
            if edge.active and edge.parent not in seen:
                seen.add(edge.parent)
                stack.append(edge.parent)
    return False


def _cycle_edges(
    tables: List[Table], emitted: Set[int], provider_edges: List[List[_Edge]]
) -> List[_Edge]:
    result = []
    for i in range(len(tables)):
        if i in emitted:
            continue
        for edge in provider_edges[i]:
            if edge.active and _reaches(edge.parent, i, provider_edges):
                result.append(edge)
    return result


def _select_edge_to_defer(
    tables: List[Table], emitted: Set[int], provider_edges: List[List[_Edge]]
) -> _Edge:
    candidates = _cycle_edges(tables, emitted, provider_edges)
    for edge in candidates:
        if _is_nullable(edge.fk):
            return edge
    return candidates[0]


def _cycle_members(
    tables: List[Table], emitted: Set[int], provider_edges: List[List[_Edge]]
) -> List[int]:
    members = {edge.child for edge in _cycle_edges(tables, emitted, provider_edges)}
    return sorted(members)

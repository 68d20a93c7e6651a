"""
PostgreSQL dialects.

PostgreSQL 10 moved sequence settings from the sequence relation itself into
the pg_sequences view, so only the sequence detail query differs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import pandas as pd

from schemagraph.dialect.base import NameRuleDialect

if TYPE_CHECKING:
    from schemagraph.model.schema import Sequence as DBSequence

DATE_PATTERN = "date '%Y-%m-%d'"
TIME_PATTERN = "time '%H:%M:%S'"
DATETIME_PATTERN = "timestamp '%Y-%m-%d %H:%M:%S'"

SEQUENCE_NAMES_QUERY = "select relname from pg_class where relkind = 'S'"


class PostgreSQLDialect(NameRuleDialect):
    """PostgreSQL generates deterministic constraint and index names."""

    sqlglot_dialect = "postgres"

    def __init__(self):
        super().__init__("postgres", True, True, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def format_timestamp(self, value: pd.Timestamp) -> str:
        return "timestamp " + super().format_timestamp(value)

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return catalog == "" or (
            catalog is not None and user is not None and catalog.lower() == user.lower()
        )

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return schema is not None and schema.lower() == "public"

    # sequences ----------------------------------------------------------------------------------------

    def sequence_no_cycle(self) -> str:
        return "NO CYCLE"

    def render_create_sequence(self, sequence: "DBSequence") -> str:
        sql = super().render_create_sequence(sequence)
        if sequence.cache is not None:
            sql += f" CACHE {sequence.cache}"
        return sql

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        return f"select nextval('{sequence_name}')"

    def render_set_sequence_value(self, sequence_name: str, value: int) -> str:
        return f"select setval('{sequence_name}', {value}, false)"

    def render_sequence_names_query(self) -> str:
        return SEQUENCE_NAMES_QUERY

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        return (
            "select sequence_name, start_value, increment_by, max_value, min_value, "
            f"is_cycled, cache_value, last_value from {sequence_name}"
        )

    # query fragments ----------------------------------------------------------------------------------

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        query = f"{query} LIMIT {row_count}"
        if row_offset > 0:
            query += f" OFFSET {row_offset}"
        return query

    def supports_regex(self) -> bool:
        return True

    def regex(self, expression: str, not_: bool, regex: str) -> str:
        return f"{'NOT ' if not_ else ''}{expression} ~ '{regex}'"

    def trim(self, expression: str) -> str:
        return f"TRIM({expression})"

    def special_type(self, type_name: str) -> str:
        if type_name.lower() == "double":
            return "numeric"
        return type_name


class PostgreSQL10Dialect(PostgreSQLDialect):

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        return (
            "select sequencename, start_value, increment_by, max_value, min_value, "
            "cycle, cache_size, last_value from pg_sequences "
            f"where sequencename = '{sequence_name}'"
        )

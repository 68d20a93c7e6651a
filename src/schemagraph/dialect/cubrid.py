"""
CUBRID dialect. CUBRID calls its sequences serials.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from schemagraph.dialect.base import NameRuleDialect

if TYPE_CHECKING:
    from schemagraph.model.schema import Sequence as DBSequence

DATE_PATTERN = "'%Y-%m-%d'"
TIME_PATTERN = "'%H:%M:%S'"
DATETIME_PATTERN = "'%Y-%m-%d %H:%M:%S'"

SEQUENCE_DETAIL_QUERY = (
    "select name, owner, current_val, increment_val, max_val, min_val, cyclic, "
    "class_name, att_name, cached_num from db_serial"
)


class CubridDialect(NameRuleDialect):

    def __init__(self):
        super().__init__("cubrid", True, True, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return True

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return True

    # sequences ----------------------------------------------------------------------------------------

    def render_create_sequence(self, sequence: "DBSequence") -> str:
        sql = "CREATE SERIAL " + self.render_sequence_name_and_type(sequence)
        start = sequence.start_if_not_default()
        if start is not None:
            sql += f" START WITH {start}"
        increment = sequence.increment_if_not_default()
        if increment is not None:
            sql += f" INCREMENT BY {increment}"
        if sequence.max_value is not None:
            sql += f" MAXVALUE {sequence.max_value}"
        if sequence.min_value is not None:
            sql += f" MINVALUE {sequence.min_value}"
        if sequence.cache is not None:
            sql += f" CACHE {sequence.cache}"
        if sequence.cycle is not None:
            sql += " CYCLE" if sequence.cycle else " " + self.sequence_no_cycle()
        return sql

    def render_drop_sequence(self, sequence_name: str) -> str:
        return f"drop serial {sequence_name}"

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        return f"SELECT {sequence_name}.NEXT_VALUE"

    def render_set_sequence_value(self, sequence_name: str, value: int) -> str:
        return f"ALTER SERIAL {sequence_name} START WITH {value}"

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        return SEQUENCE_DETAIL_QUERY

    # query fragments ----------------------------------------------------------------------------------

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        if row_offset == 0:
            return f"{query} limit {row_count}"
        return f"{query} limit {row_offset}, {row_count}"

    def supports_regex(self) -> bool:
        return True

    def regex(self, expression: str, not_: bool, regex: str) -> str:
        return f"{expression}{' NOT' if not_ else ''} REGEX '{regex}'"

    def trim(self, expression: str) -> str:
        return f"trim({expression})"

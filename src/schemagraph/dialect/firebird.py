"""
Firebird dialects.

Firebird calls its sequences generators. A generator holds the last value
handed out, so setting it to n makes the next fetch return n + 1.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from schemagraph.dialect.base import NameRuleDialect, add_select_option

if TYPE_CHECKING:
    from schemagraph.model.schema import Sequence as DBSequence

DATE_PATTERN = "'%Y-%m-%d'"
TIME_PATTERN = "'%H:%M:%S'"
DATETIME_PATTERN = "'%Y-%m-%d %H:%M:%S'"

SEQUENCE_DETAIL_QUERY = (
    "select RDB$GENERATOR_NAME, RDB$GENERATOR_ID, RDB$SYSTEM_FLAG, RDB$DESCRIPTION "
    "from RDB$GENERATORS where RDB$GENERATOR_NAME NOT LIKE '%$%'"
)


class FirebirdDialect(NameRuleDialect):

    random_pk_name_pattern = r"INTEG_\d+"
    random_uk_name_pattern = r"RDB\$\w+"
    random_fk_name_pattern = r"INTEG_\d+"
    random_index_name_pattern = r"RDB\$\w+"

    def __init__(self):
        super().__init__("firebird", True, True, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return True

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return True

    # sequences ----------------------------------------------------------------------------------------

    def is_sequence_boundary_supported(self) -> bool:
        return False

    def render_create_sequence(self, sequence: "DBSequence") -> str:
        sql = f"CREATE GENERATOR {sequence.name}"
        start = sequence.start_if_not_default()
        if start is not None:
            sql += f"; {self.render_set_sequence_value(sequence.name, start)};"
        return sql

    def render_set_sequence_value(self, sequence_name: str, value: int) -> str:
        return f"SET GENERATOR {sequence_name} TO {value - 1}"

    def render_drop_sequence(self, sequence_name: str) -> str:
        return f"drop generator {sequence_name}"

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        return f"select gen_id({sequence_name}, 1) from RDB$DATABASE;"

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        return SEQUENCE_DETAIL_QUERY

    # query fragments ----------------------------------------------------------------------------------

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        option = f"FIRST {row_count}"
        if row_offset > 0:
            option += f" SKIP {row_offset}"
        return add_select_option(query, option)


class Firebird2_5Dialect(FirebirdDialect):

    def supports_regex(self) -> bool:
        return True

    def regex(self, expression: str, not_: bool, regex: str) -> str:
        return f"{expression}{' NOT ' if not_ else ' '}SIMILAR TO '{regex}'"

"""
IBM DB2 dialect.
"""

from __future__ import annotations

from typing import Optional

from schemagraph.dialect.base import NameRuleDialect

DATE_PATTERN = "'%Y-%m-%d'"
TIME_PATTERN = "'%H:%M:%S'"
DATETIME_PATTERN = "'%Y-%m-%d %H:%M:%S'"

RANDOM_NAME_PATTERN = r"SQL\d{15}"

# single-row table used when a sequence name has no table qualifier
DUMMY_TABLE = "sysibm.sysdummy1"


class DB2Dialect(NameRuleDialect):

    random_pk_name_pattern = RANDOM_NAME_PATTERN
    random_uk_name_pattern = RANDOM_NAME_PATTERN
    random_fk_name_pattern = RANDOM_NAME_PATTERN
    random_index_name_pattern = RANDOM_NAME_PATTERN

    def __init__(self):
        super().__init__("db2", False, True, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return True

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return True

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        """
        Render 'select nextval for SEQ from TABLE'.

        A qualified name 'table.seq' selects from that table, otherwise the
        DB2 dummy table is used.
        """
        table = DUMMY_TABLE
        sequence = sequence_name
        separator = sequence_name.rfind(".")
        if separator > 0:
            table = sequence_name[:separator]
            sequence = sequence_name[separator + 1:]
        return f"select nextval for {sequence} from {table}"

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        if row_offset > 0:
            return f"{query} OFFSET {row_offset} ROWS FETCH FIRST {row_count} ROWS ONLY"
        return f"{query} FETCH FIRST {row_count} ROWS ONLY"

"""
Microsoft SQL Server dialect.
"""

from __future__ import annotations

from typing import Optional, Tuple

from schemagraph.dialect.base import NameRuleDialect, add_select_option

DATE_PATTERN = "'%Y-%m-%d'"
TIME_PATTERN = "'%H:%M:%S'"
DATETIME_PATTERN = "'%Y-%m-%dT%H:%M:%S'"

RANDOM_NAME_PATTERN = r"SYS_\w*"


class SqlServerDialect(NameRuleDialect):

    sqlglot_dialect = "tsql"

    random_pk_name_pattern = RANDOM_NAME_PATTERN
    random_uk_name_pattern = RANDOM_NAME_PATTERN
    random_fk_name_pattern = RANDOM_NAME_PATTERN
    random_index_name_pattern = RANDOM_NAME_PATTERN

    def __init__(self):
        super().__init__("sql_server", True, False, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def format_boolean(self, value: bool) -> str:
        return "1" if value else "0"

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return True

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return schema is not None and schema.upper() == "DBO"

    def render_case(
        self,
        column_name: Optional[str],
        else_expression: Optional[str],
        *when_then_pairs: Tuple[str, str],
    ) -> str:
        """Render 'column = CASE WHEN c THEN v ... [ELSE e] END'."""
        sql = f"{column_name} = CASE"
        for condition, result in when_then_pairs:
            sql += f" WHEN {condition} THEN {result}"
        if else_expression:
            sql += f" ELSE {else_expression}"
        return sql + " END"

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        if row_offset == 0:
            return add_select_option(query, f"TOP {row_count}")
        return f"{query} OFFSET {row_offset} ROWS FETCH NEXT {row_count} ROWS ONLY"

    def trim(self, expression: str) -> str:
        return f"LTRIM(RTRIM({expression}))"

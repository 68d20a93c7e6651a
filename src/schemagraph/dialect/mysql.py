"""
MySQL dialect. MySQL has neither sequences nor schemas in the SQL sense.
"""

from __future__ import annotations

from typing import Optional

from schemagraph.dialect.base import NameRuleDialect

DATE_PATTERN = "'%Y-%m-%d'"
TIME_PATTERN = "'%H:%M:%S'"
DATETIME_PATTERN = "'%Y-%m-%d %H:%M:%S'"


class MySQLDialect(NameRuleDialect):

    sqlglot_dialect = "mysql"

    def __init__(self):
        super().__init__("mysql", False, False, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        # the default catalog is a property of the connection, not of the user
        return False

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return False

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        query = f"{query} LIMIT {row_count}"
        if row_offset > 0:
            query += f" OFFSET {row_offset}"
        return query

    def supports_regex(self) -> bool:
        return True

    def regex(self, expression: str, not_: bool, regex: str) -> str:
        return f"{expression}{' NOT' if not_ else ''} REGEXP '{regex}'"

    def trim(self, expression: str) -> str:
        return f"TRIM({expression})"

    def special_type(self, type_name: str) -> str:
        if type_name.lower() == "long":
            return "bigint"
        return type_name

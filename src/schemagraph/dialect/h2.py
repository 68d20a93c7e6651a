"""
H2 dialect.
"""

from __future__ import annotations

from typing import Optional

from schemagraph.dialect.base import NameRuleDialect

DATE_PATTERN = "'%Y-%m-%d'"
TIME_PATTERN = "'%H:%M:%S'"
DATETIME_PATTERN = "'%Y-%m-%d %H:%M:%S'"

SEQUENCE_DETAIL_QUERY = (
    "select SEQUENCE_CATALOG, SEQUENCE_SCHEMA, SEQUENCE_NAME, CURRENT_VALUE, INCREMENT, CACHE "
    "from information_schema.sequences"
)


class H2Dialect(NameRuleDialect):

    random_pk_name_pattern = r"CONSTRAINT_\w+"
    random_uk_name_pattern = r"CONSTRAINT_INDEX_\w+"
    random_fk_name_pattern = r"CONSTRAINT_\w+"
    random_index_name_pattern = r"CONSTRAINT_INDEX_\w+|PRIMARY_KEY_\w+"

    def __init__(self):
        super().__init__("h2", True, True, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return catalog is None

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return schema is not None and schema.upper() == "PUBLIC"

    # sequences ----------------------------------------------------------------------------------------

    def is_sequence_boundary_supported(self) -> bool:
        return False

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        return f"select next value for {sequence_name}"

    def render_set_sequence_value(self, sequence_name: str, value: int) -> str:
        return f"alter sequence {sequence_name} restart with {value}"

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        return SEQUENCE_DETAIL_QUERY

    # query fragments ----------------------------------------------------------------------------------

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        # LIMIT is mandatory and must precede OFFSET
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

"""
HSQLDB dialects. Version 2 added regular expression support.
"""

from __future__ import annotations

from typing import Optional

from schemagraph.dialect.base import NameRuleDialect, add_select_option

DATE_PATTERN = "'%Y-%m-%d'"
TIME_PATTERN = "'%H:%M:%S'"
DATETIME_PATTERN = "'%Y-%m-%d %H:%M:%S'"

SEQUENCE_DETAIL_QUERY = (
    "select SEQUENCE_CATALOG, SEQUENCE_SCHEMA, SEQUENCE_NAME, START_WITH, INCREMENT, "
    "MINIMUM_VALUE, MAXIMUM_VALUE, CYCLE_OPTION from information_schema.system_sequences"
)


class HSQLDialect(NameRuleDialect):

    random_pk_name_pattern = r"SYS_IDX_\w+"
    random_uk_name_pattern = r"SYS_IDX_SYS_\w+"
    random_fk_name_pattern = r"SYS_FK_\w+"
    random_index_name_pattern = r"SYS_IDX_\w+"

    def __init__(self):
        super().__init__("hsql", True, True, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return catalog is None

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return schema is not None and schema.upper() == "PUBLIC"

    # sequences ----------------------------------------------------------------------------------------

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        return f"call next value for {sequence_name}"

    def render_set_sequence_value(self, sequence_name: str, value: int) -> str:
        return f"alter sequence {sequence_name} restart with {value}"

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        return SEQUENCE_DETAIL_QUERY

    # query fragments ----------------------------------------------------------------------------------

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        if row_offset == 0:
            return add_select_option(query, f"TOP {row_count}")
        return add_select_option(query, f"LIMIT {row_offset} {row_count}")

    def trim(self, expression: str) -> str:
        return f"LTRIM(RTRIM({expression}))"


class HSQL2Dialect(HSQLDialect):

    def supports_regex(self) -> bool:
        return True

    def regex(self, expression: str, not_: bool, regex: str) -> str:
        return f"{'NOT ' if not_ else ''}REGEXP_MATCHES({expression}, '{regex}')"

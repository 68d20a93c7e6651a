"""
Oracle dialect.

Oracle generates names of the form SYS_Cnnnnnnnn for unnamed constraints and
indexes and reports every NOT NULL column as a check constraint of its own,
which the importer filters out with is_simple_not_null_check().
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

import pandas as pd

from schemagraph.dialect.base import NameRuleDialect, timestamp_parts, add_where_condition

if TYPE_CHECKING:
    from schemagraph.model.schema import Sequence as DBSequence

DATE_PATTERN = "to_date('%Y-%m-%d', 'yyyy-mm-dd')"
TIME_PATTERN = "to_date('%H:%M:%S', 'HH24:mi:ss')"
DATETIME_PATTERN = "to_date('%Y-%m-%d %H:%M:%S', 'yyyy-mm-dd HH24:mi:ss')"
TIMESTAMP_PATTERN = "to_timestamp('{date} {time}.{nanos:09d}', 'yyyy-mm-dd HH24:mi:ss.FF')"

SIMPLE_NOT_NULL_CHECK = re.compile(r'"[A-Z0-9_]+" IS NOT NULL')
RANDOM_NAME_PATTERN = r"SYS_C\d{8}"

SEQUENCE_DETAIL_QUERY = (
    "select sequence_name, min_value, max_value, increment_by, "
    "cycle_flag, order_flag, cache_size, last_number from user_sequences"
)
CHECK_CONSTRAINT_QUERY = (
    "select owner, constraint_name, table_name, search_condition "
    "from user_constraints where constraint_type = 'C'"
)
TRIGGER_QUERY = (
    "SELECT OWNER, TRIGGER_NAME, TRIGGER_TYPE, TRIGGERING_EVENT, TABLE_OWNER, BASE_OBJECT_TYPE, "
    "TABLE_NAME, COLUMN_NAME, REFERENCING_NAMES, WHEN_CLAUSE, STATUS, DESCRIPTION, ACTION_TYPE, "
    "TRIGGER_BODY FROM SYS.ALL_TRIGGERS"
)
PACKAGE_QUERY = (
    "SELECT USER, OBJECT_NAME, SUBOBJECT_NAME, OBJECT_ID, OBJECT_TYPE, STATUS "
    "FROM USER_OBJECTS WHERE UPPER(OBJECT_TYPE) = 'PACKAGE'"
)
PROCEDURE_QUERY = (
    "SELECT OBJECT_NAME, PROCEDURE_NAME, OBJECT_ID, SUBPROGRAM_ID, OVERLOAD "
    "FROM SYS.USER_PROCEDURES WHERE UPPER(OBJECT_TYPE) = 'PACKAGE' AND PROCEDURE_NAME IS NOT NULL"
)


class OracleDialect(NameRuleDialect):

    sqlglot_dialect = "oracle"

    random_pk_name_pattern = RANDOM_NAME_PATTERN
    random_uk_name_pattern = RANDOM_NAME_PATTERN
    random_fk_name_pattern = RANDOM_NAME_PATTERN
    random_index_name_pattern = RANDOM_NAME_PATTERN

    def __init__(self):
        super().__init__("oracle", True, True, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def format_timestamp(self, value: pd.Timestamp) -> str:
        return TIMESTAMP_PATTERN.format(**timestamp_parts(value))

    def format_boolean(self, value: bool) -> str:
        # no boolean literals in SQL, NUMBER(1) flags instead
        return "1" if value else "0"

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return catalog is None

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return user is not None and schema is not None and user.lower() == schema.lower()

    # sequences ----------------------------------------------------------------------------------------

    def render_create_sequence(self, sequence: "DBSequence") -> str:
        sql = super().render_create_sequence(sequence)
        if sequence.cache is not None:
            sql += f" CACHE {sequence.cache}"
        if sequence.order is not None:
            sql += " ORDER" if sequence.order else " NOORDER"
        return sql

    def render_sequence_name_and_type(self, sequence: "DBSequence") -> str:
        prefix = f'"{sequence.schema_name}".' if sequence.schema_name is not None else ""
        return f'{prefix}"{sequence.name}"'

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        return f"select {sequence_name}.nextval from dual"

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        return SEQUENCE_DETAIL_QUERY

    # checks -------------------------------------------------------------------------------------------

    def is_deterministic_check_name(self, check_name: str) -> bool:
        return self._is_deterministic(check_name, RANDOM_NAME_PATTERN)

    def is_simple_not_null_check(self, condition: Optional[str]) -> bool:
        return condition is not None and SIMPLE_NOT_NULL_CHECK.fullmatch(condition.strip()) is not None

    # query fragments ----------------------------------------------------------------------------------

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        if row_offset > 1:
            condition = f"ROWNUM BETWEEN {row_offset} AND {row_offset + row_count}"
        else:
            condition = f"ROWNUM <= {row_count}"
        return add_where_condition(query, condition, self.sqlglot_dialect)

    def supports_regex(self) -> bool:
        return True

    def regex(self, expression: str, not_: bool, regex: str) -> str:
        return f"{'NOT ' if not_ else ''}REGEXP_LIKE({expression}, '{regex}')"

    def trim(self, expression: str) -> str:
        return f"TRIM({expression})"

    def special_type(self, type_name: str) -> str:
        lowered = type_name.lower()
        if lowered == "varchar":
            return "varchar2"
        if lowered == "double":
            return "number"
        return type_name

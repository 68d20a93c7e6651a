"""
Apache Derby dialects. Sequences are available from Derby 10.6 on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from schemagraph.dialect.base import NameRuleDialect

if TYPE_CHECKING:
    from schemagraph.model.schema import Sequence as DBSequence

DATE_PATTERN = "DATE('%Y-%m-%d')"
TIME_PATTERN = "TIME('%H:%M:%S')"
DATETIME_PATTERN = "TIMESTAMP('%Y-%m-%d %H:%M:%S')"

SEQUENCE_DETAIL_QUERY = (
    "SELECT SEQUENCENAME, STARTVALUE, INCREMENT, MAXIMUMVALUE, MINIMUMVALUE, "
    "CYCLEOPTION, CURRENTVALUE FROM SYS.SYSSEQUENCES"
)


class DerbyDialect(NameRuleDialect):

    sqlglot_dialect = None

    random_pk_name_pattern = r"SQL[0-9A-F]{15}"
    random_uk_name_pattern = r"SQL[0-9A-F]{15}"
    random_fk_name_pattern = r"FK[0-9A-F]{15,16}"
    random_index_name_pattern = r"SQL\d+"

    def __init__(self, sequence_supported: bool = False):
        super().__init__(
            "derby", True, sequence_supported, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN
        )

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return True

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        if schema is None:
            return False
        schema = schema.upper()
        return schema == "APP" or (user is not None and schema == user.upper())

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        return f"{query} OFFSET {row_offset} ROWS FETCH NEXT {row_count} ROWS ONLY"


class Derby10_6Dialect(DerbyDialect):

    def __init__(self):
        super().__init__(True)

    def render_sequence_name_and_type(self, sequence: "DBSequence") -> str:
        prefix = f"{sequence.schema_name}." if sequence.schema_name is not None else ""
        return f"{prefix}{sequence.name} AS BIGINT"

    def sequence_no_cycle(self) -> str:
        return "NO CYCLE"

    def render_drop_sequence(self, sequence_name: str) -> str:
        return f"DROP SEQUENCE {sequence_name} RESTRICT"

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        return f"VALUES (NEXT VALUE FOR {sequence_name})"

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        return SEQUENCE_DETAIL_QUERY

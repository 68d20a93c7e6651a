"""
Fallback dialect for database products without a registered dialect.
"""

from __future__ import annotations

from typing import Optional

from schemagraph.dialect.base import NameRuleDialect
from schemagraph.errors import UnsupportedOperationError

DATE_PATTERN = "'%d-%b-%Y'"
TIME_PATTERN = "'%H-%M-%S'"
DATETIME_PATTERN = "'%d-%b-%Y %H-%M-%S'"


class UnknownDialect(NameRuleDialect):
    """
    Assumes reproducible constraint names and takes the first catalog and
    schema found as the default ones.
    """

    def __init__(self, system: str):
        super().__init__(system, False, False, DATE_PATTERN, TIME_PATTERN, DATETIME_PATTERN)

    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        return True

    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        return True

    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        raise UnsupportedOperationError(
            f"Row number restriction is not supported for {self.system}", self.system
        )

"""
Base class of the vendor SQL dialects.

A dialect knows how a database product spells literals, quotes identifiers,
handles sequences and names the constraints it creates itself. Vendor
subclasses override the parts that differ; capabilities a vendor lacks raise
UnsupportedOperationError.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from importlib import resources
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence, Set, Tuple, Union

import pandas as pd
import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from schemagraph.errors import ConfigurationError, UnsupportedOperationError

if TYPE_CHECKING:
    from schemagraph.model.column import Column
    from schemagraph.model.schema import Sequence as DBSequence
    from schemagraph.model.table import Table

logger = logging.getLogger(__name__)

RESERVED_WORDS_PACKAGE = "schemagraph.dialect.resources.reserved_words"
DEFAULT_RESERVED_WORDS = "SQL2003"

DEFAULT_TIMESTAMP_PATTERN = "'{date} {time}.{nanos:09d}'"


class DatabaseDialect(ABC):
    """
    Vendor-specific SQL rendering rules.

    Args:
        system: Lowercase system id, e.g. 'oracle' or 'postgres'
        quote_table_names: Whether table and column names are rendered in double quotes
        sequence_supported: Whether the database has sequences
        date_pattern: strftime template rendering a date literal
        time_pattern: strftime template rendering a time literal
        datetime_pattern: strftime template rendering a date and time literal
    """

    # sqlglot dialect used for reading SQL text of this database
    sqlglot_dialect: Optional[str] = None

    def __init__(
        self,
        system: str,
        quote_table_names: bool,
        sequence_supported: bool,
        date_pattern: str,
        time_pattern: str,
        datetime_pattern: str,
    ):
        self.system = system
        self.quote_table_names = quote_table_names
        self.sequence_supported = sequence_supported
        self.date_pattern = date_pattern
        self.time_pattern = time_pattern
        self.datetime_pattern = datetime_pattern
        self._reserved_words: Optional[Set[str]] = None

    # literals -----------------------------------------------------------------------------------------

    def format_value(self, value: Any) -> str:
        """
        Render a Python value as a SQL literal.

        Strings are single-quoted with embedded quotes doubled. Timestamps,
        datetimes, dates and times use the dialect's patterns; a datetime at
        exact midnight renders as a date.
        """
        if value is None:
            return "null"
        if isinstance(value, str):
            return "'" + value.replace("'", "''") + "'"
        if isinstance(value, pd.Timestamp):
            return self.format_timestamp(value)
        if isinstance(value, datetime):
            if value.time() == time(0, 0):
                return value.strftime(self.date_pattern)
            return value.strftime(self.datetime_pattern)
        if isinstance(value, date):
            return value.strftime(self.date_pattern)
        if isinstance(value, time):
            return value.strftime(self.time_pattern)
        if isinstance(value, bool):
            return self.format_boolean(value)
        return str(value)

    def format_boolean(self, value: bool) -> str:
        return "true" if value else "false"

    def format_timestamp(self, value: pd.Timestamp) -> str:
        """Render a timestamp with nanosecond precision."""
        return DEFAULT_TIMESTAMP_PATTERN.format(**timestamp_parts(value))

    # reserved words -----------------------------------------------------------------------------------

    def is_reserved_word(
        self, word: Optional[str], driver_keywords: Union[str, Iterable[str], None] = None
    ) -> bool:
        """
        Tell if a word is reserved in this database (case-insensitive).

        The word set is built on first use from the vendor's reserved word
        list (SQL:2003 if there is none). Keywords reported by the driver,
        given as comma-separated text or as an iterable, are merged into it
        on every call that passes them.
        """
        if not word:
            return False
        return word.upper() in self.get_reserved_words(driver_keywords)

    def get_reserved_words(
        self, driver_keywords: Union[str, Iterable[str], None] = None
    ) -> Set[str]:
        if self._reserved_words is None:
            self._reserved_words = _load_reserved_words(self.system)
        if isinstance(driver_keywords, str):
            driver_keywords = driver_keywords.split(",")
        if driver_keywords:
            imported = {k.strip().upper() for k in driver_keywords if k and k.strip()}
            added = imported - self._reserved_words
            if added:
                logger.debug(f"Imported {len(added)} driver keywords for {self.system}")
                self._reserved_words |= added
        return self._reserved_words

    # sequences ----------------------------------------------------------------------------------------

    def is_sequence_supported(self) -> bool:
        return self.sequence_supported

    def is_sequence_boundary_supported(self) -> bool:
        return self.sequence_supported

    def render_create_sequence(self, sequence: "DBSequence") -> str:
        if not self.sequence_supported:
            raise self.check_sequence_support("render_create_sequence")
        sql = "CREATE SEQUENCE " + self.render_sequence_name_and_type(sequence)
        start = sequence.start_if_not_default()
        if start is not None:
            sql += f" START WITH {start}"
        increment = sequence.increment_if_not_default()
        if increment is not None:
            sql += f" INCREMENT BY {increment}"
        if self.is_sequence_boundary_supported():
            if sequence.max_value is not None:
                sql += f" MAXVALUE {sequence.max_value}"
            if sequence.min_value is not None:
                sql += f" MINVALUE {sequence.min_value}"
        if sequence.cycle is not None:
            sql += " CYCLE" if sequence.cycle else " " + self.sequence_no_cycle()
        return sql

    def render_sequence_name_and_type(self, sequence: "DBSequence") -> str:
        return sequence.name

    def sequence_no_cycle(self) -> str:
        return "NOCYCLE"

    def render_drop_sequence(self, sequence_name: str) -> str:
        if not self.sequence_supported:
            raise self.check_sequence_support("render_drop_sequence")
        return f"drop sequence {sequence_name}"

    def render_fetch_sequence_value(self, sequence_name: str) -> str:
        raise self.check_sequence_support("render_fetch_sequence_value")

    def render_set_sequence_value(self, sequence_name: str, value: int) -> str:
        raise self.check_sequence_support("render_set_sequence_value")

    def render_sequence_detail_query(self, sequence_name: Optional[str] = None) -> str:
        """Query reading sequence settings, for all sequences or the named one."""
        raise self.check_sequence_support("render_sequence_detail_query")

    def check_sequence_support(self, method_name: str) -> UnsupportedOperationError:
        if not self.sequence_supported:
            return UnsupportedOperationError(f"Sequence not supported in {self.system}", self.system)
        return UnsupportedOperationError(
            f"{method_name}() not implemented for {self.system}", self.system
        )

    # constraint names ---------------------------------------------------------------------------------

    @abstractmethod
    def is_deterministic_pk_name(self, pk_name: str) -> bool:
        ...

    @abstractmethod
    def is_deterministic_uk_name(self, uk_name: str) -> bool:
        ...

    @abstractmethod
    def is_deterministic_fk_name(self, fk_name: str) -> bool:
        ...

    @abstractmethod
    def is_deterministic_index_name(self, index_name: str) -> bool:
        ...

    def is_deterministic_check_name(self, check_name: str) -> bool:
        return True

    def is_simple_not_null_check(self, condition: Optional[str]) -> bool:
        """Tell if a check condition only states that one column is NOT NULL."""
        return False

    # default namespaces -------------------------------------------------------------------------------

    @abstractmethod
    def is_default_catalog(self, catalog: Optional[str], user: Optional[str]) -> bool:
        ...

    @abstractmethod
    def is_default_schema(self, schema: Optional[str], user: Optional[str]) -> bool:
        ...

    # query fragments ----------------------------------------------------------------------------------

    @abstractmethod
    def restrict_rownums(self, row_offset: int, row_count: int, query: str) -> str:
        """Limit a query to row_count rows starting after row_offset."""

    def supports_regex(self) -> bool:
        return False

    def regex(self, expression: str, not_: bool, regex: str) -> str:
        raise UnsupportedOperationError(
            f"{self.system} does not support regular expressions", self.system
        )

    def trim(self, expression: str) -> str:
        raise UnsupportedOperationError(f"{self.system} does not support trimming", self.system)

    def render_case(
        self,
        column_name: Optional[str],
        else_expression: Optional[str],
        *when_then_pairs: Tuple[str, str],
    ) -> str:
        """
        Render 'CASE WHEN c THEN v ... [ELSE e] END [AS column]'.

        Args:
            column_name: Alias of the result column, None for a bare expression
            else_expression: Result if no condition matches
            when_then_pairs: (condition, result) tuples
        """
        sql = "CASE"
        for condition, result in when_then_pairs:
            sql += f" WHEN {condition} THEN {result}"
        if else_expression:
            sql += f" ELSE {else_expression}"
        sql += " END"
        if column_name:
            sql += f" AS {column_name}"
        return sql

    def special_type(self, type_name: str) -> str:
        """Map a generic type name to this database's name for it."""
        return type_name

    # prepared statements ------------------------------------------------------------------------------

    def insert(self, table: "Table", column_infos: Sequence["Column"]) -> str:
        """Render a prepared INSERT with one '?' marker per column."""
        names = ",".join(self._quote(column.name) for column in column_infos)
        markers = ",".join("?" for _ in column_infos)
        return f"insert into {self._qualified_table_name(table)} ({names}) values ({markers})"

    def update(
        self, table: "Table", pk_column_names: Sequence[str], column_infos: Sequence["Column"]
    ) -> str:
        """
        Render a prepared UPDATE of the given columns, selecting the row by primary key.

        Raises:
            ConfigurationError: If the table has no primary key columns
        """
        if not pk_column_names:
            raise ConfigurationError(
                f"Cannot update table {table.name} without primary key, "
                "please define a primary key"
            )
        assignments = ", ".join(f"{self._quote(column.name)}=?" for column in column_infos)
        selector = " and ".join(f"{self._quote(name)}=?" for name in pk_column_names)
        return f"update {self._qualified_table_name(table)} set {assignments} where {selector}"

    def _quote(self, name: str) -> str:
        return f'"{name}"' if self.quote_table_names else name

    def _qualified_table_name(self, table: "Table") -> str:
        from schemagraph.sql.rendering import create_cat_sch_tab_string

        catalog = table.catalog
        schema = table.schema
        return create_cat_sch_tab_string(
            catalog.name if catalog is not None else None,
            schema.name if schema is not None else None,
            table.name,
            self,
        )

    def __str__(self) -> str:
        return self.system

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.system!r})"


class NameRuleDialect(DatabaseDialect):
    """
    Dialect whose generated constraint names follow known patterns.

    A name is deterministic unless it fully matches the vendor's pattern for
    system-generated names of that object kind. Subclasses set the patterns
    as class attributes; None means every name is deterministic.
    """

    random_pk_name_pattern: Optional[str] = None
    random_uk_name_pattern: Optional[str] = None
    random_fk_name_pattern: Optional[str] = None
    random_index_name_pattern: Optional[str] = None

    @staticmethod
    def _is_deterministic(name: Optional[str], pattern: Optional[str]) -> bool:
        if pattern is None or name is None:
            return True
        return re.fullmatch(pattern, name) is None

    def is_deterministic_pk_name(self, pk_name: str) -> bool:
        return self._is_deterministic(pk_name, self.random_pk_name_pattern)

    def is_deterministic_uk_name(self, uk_name: str) -> bool:
        return self._is_deterministic(uk_name, self.random_uk_name_pattern)

    def is_deterministic_fk_name(self, fk_name: str) -> bool:
        return self._is_deterministic(fk_name, self.random_fk_name_pattern)

    def is_deterministic_index_name(self, index_name: str) -> bool:
        return self._is_deterministic(index_name, self.random_index_name_pattern)


_SELECT_PREFIX = re.compile(r"^\s*select(\s+distinct)?\s+", re.IGNORECASE)

# Top-level clauses that follow WHERE in a SELECT
_AFTER_WHERE = {
    TokenType.GROUP_BY,
    TokenType.HAVING,
    TokenType.ORDER_BY,
    TokenType.LIMIT,
    TokenType.FETCH,
    TokenType.UNION,
    TokenType.EXCEPT,
    TokenType.INTERSECT,
}


def add_select_option(query: str, option: str) -> str:
    """Insert an option like 'TOP 10' right after the leading SELECT [DISTINCT]."""
    match = _SELECT_PREFIX.match(query)
    if match is None:
        raise ConfigurationError(f"Not a SELECT query: {query}")
    return f"{query[:match.end()]}{option} {query[match.end():]}"


def add_where_condition(query: str, condition: str, dialect: Optional[str] = None) -> str:
    """
    AND a condition to the query's WHERE clause, or add one.

    Only the top-level statement counts: WHERE keywords inside subqueries
    or string literals are skipped. The condition goes in front of a
    trailing GROUP BY, HAVING, ORDER BY, LIMIT or set operation.

    Raises:
        ConfigurationError: If the query cannot be tokenized
    """
    try:
        tokens = sqlglot.tokenize(query, read=dialect)
    except TokenError as e:
        raise ConfigurationError(f"Cannot tokenize query: {query}") from e
    depth = 0
    has_where = False
    insert_at = len(query)
    for token in tokens:
        if token.token_type == TokenType.L_PAREN:
            depth += 1
        elif token.token_type == TokenType.R_PAREN:
            depth -= 1
        elif depth == 0:
            if token.token_type == TokenType.WHERE:
                has_where = True
            elif token.token_type in _AFTER_WHERE:
                insert_at = token.start
                break
    head = query[:insert_at].rstrip()
    tail = query[insert_at:]
    keyword = "AND" if has_where else "WHERE"
    result = f"{head} {keyword} {condition}"
    return f"{result} {tail}" if tail else result


def timestamp_parts(value: pd.Timestamp) -> dict:
    return {
        "date": value.strftime("%Y-%m-%d"),
        "time": value.strftime("%H:%M:%S"),
        "nanos": value.microsecond * 1000 + value.nanosecond,
    }


def _read_word_list(name: str) -> Optional[Set[str]]:
    resource = resources.files(RESERVED_WORDS_PACKAGE).joinpath(f"{name}.txt")
    if not resource.is_file():
        return None
    words = set()
    for line in resource.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            words.add(line.upper())
    return words


def _load_reserved_words(system: str) -> Set[str]:
    words = _read_word_list(system.lower())
    if words is None:
        logger.debug(f"No reserved word list for {system}, using {DEFAULT_RESERVED_WORDS}")
        words = _read_word_list(DEFAULT_RESERVED_WORDS) or set()
    return words

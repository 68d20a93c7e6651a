"""
Statement classification and SQL text normalization.

Classifiers work on a normalized form of the statement (lower case, comments
removed, whitespace collapsed) and match it against known keyword prefixes.
"""

from __future__ import annotations

import re
from typing import List, Optional

DDL_PREFIXES = (
    "create table",
    "alter table",
    "drop table",
    "create unique index",
    "create index",
    "drop index",
    "alter index",
    "rename",
    "create sequence",
    "alter sequence",
    "drop sequence",
    "create view",
    "create or replace view",
    "drop view",
    "create materialized view",
    "alter materialized view",
    "drop materialized view",
)

DML_PREFIXES = ("insert", "update", "delete", "truncate", "select into", "merge")

PROCEDURE_CALL_PREFIXES = ("execute", "exec", "call")


# Tokens of normalize(); the comment alternatives only apply when comments are removed
_TOKEN_PATTERN = re.compile(
    r"(?P<ws>[ \t\r\n]+)"
    r"|(?P<quoted>'(?:[^']|'')*'|\"[^\"]*\")"
    r"|(?P<word>[A-Za-z0-9_]+)"
    r"|(?P<other>.)",
    re.DOTALL,
)
_TOKEN_PATTERN_NO_COMMENTS = re.compile(
    r"(?P<ws>[ \t\r\n]+)"
    r"|(?P<comment>/\*.*?\*/|--[^\n]*)"
    r"|(?P<quoted>'(?:[^']|'')*'|\"[^\"]*\")"
    r"|(?P<word>[A-Za-z0-9_]+)"
    r"|(?P<other>.)",
    re.DOTALL,
)


def _strip_comments(sql: str, line_comments: bool = True) -> str:
    """Drop comments outside of quoted strings and quoted identifiers."""
    parts: List[str] = []
    for match in _TOKEN_PATTERN_NO_COMMENTS.finditer(sql):
        text = match.group()
        if match.lastgroup == "comment" and (line_comments or text.startswith("/*")):
            parts.append(" " if line_comments else "")
        else:
            parts.append(text)
    return "".join(parts)


def _normalize_sql(sql: str) -> str:
    """Lower-case the statement, remove comments and collapse whitespace."""
    sql = _strip_comments(sql).lower()
    return re.sub(r"\s+", " ", sql).strip()


def _starts_with_any(sql: str, prefixes) -> bool:
    return any(sql.startswith(prefix) for prefix in prefixes)


def _is_select_into(sql: str) -> bool:
    """Tell if a normalized SELECT or WITH statement writes its result INTO a table."""
    if not (sql.startswith("select") or sql.startswith("with")):
        return False
    unquoted = re.sub(r"'(?:[^']|'')*'|\"[^\"]*\"", " ", sql)
    return "into" in re.split(r"[\s(),]+", unquoted)


def is_ddl(sql: str) -> bool:
    return _starts_with_any(_normalize_sql(sql), DDL_PREFIXES)


def is_dml(sql: str) -> bool:
    sql = _normalize_sql(sql)
    return _starts_with_any(sql, DML_PREFIXES) or _is_select_into(sql)


def is_procedure_call(sql: str) -> bool:
    return _starts_with_any(_normalize_sql(sql), PROCEDURE_CALL_PREFIXES)


def is_query(sql: str) -> bool:
    """
    Tell if the statement only reads data.

    SELECT and WITH statements are queries unless they contain an INTO
    clause, which makes them write their result into a table.
    """
    sql = _normalize_sql(sql)
    if not (sql.startswith("select") or sql.startswith("with")):
        return False
    return not _is_select_into(sql)


def mutates_structure(sql: str) -> bool:
    return is_ddl(sql)


def mutates_data_or_structure(sql: str) -> Optional[bool]:
    """
    Tell if executing the statement may change data or structure.

    Returns:
        True for DDL and DML, False for queries and ALTER SESSION, None if
        the statement kind is unknown (e.g. a procedure call)
    """
    sql = _normalize_sql(sql)
    if sql.startswith("alter session"):
        return False
    if mutates_structure(sql):
        return True
    if is_query(sql):
        return False
    if is_dml(sql):
        return True
    return None


def remove_comments(sql: str) -> str:
    """Remove all /* ... */ comment sections outside of quoted text."""
    return _strip_comments(sql, line_comments=False)


def normalize(sql: str, remove_comments: bool = True) -> str:
    """
    Reformat a statement into a canonical single-line token sequence.

    Tokens are separated by single spaces, except that no space is placed
    before ')' and ',', after '(', or around '.'. Quoted strings and quoted
    identifiers are kept verbatim. Comments are dropped if requested,
    otherwise the comment markers stay intact.
    """
    pattern = _TOKEN_PATTERN_NO_COMMENTS if remove_comments else _TOKEN_PATTERN
    tokens: List[str] = []
    for match in pattern.finditer(sql):
        kind = match.lastgroup
        if kind in ("ws", "comment"):
            continue
        tokens.append(match.group())
    parts: List[str] = []
    last: Optional[str] = None
    for token in tokens:
        if last is not None and _space_between(last, token):
            parts.append(" ")
        parts.append(token)
        last = token
    return "".join(parts)


def _space_between(last: str, token: str) -> bool:
    if token in (")", ",", ".") or last in ("(", "."):
        return False
    # keep comment markers together when comments are retained
    return (last, token) not in (("/", "*"), ("-", "-"), ("*", "/"))

"""
Scanner for check constraint conditions.

Databases report check constraints as raw SQL condition text. The scanner
parses that text with sqlglot and reduces the syntax tree to three node
kinds: column references, literals and wrapper nodes that combine
sub-expressions. The referenced column set is what the model needs to relate
a check constraint to its table's columns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from schemagraph.errors import ConstraintParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnReference:
    """Terminal node naming a column, without identifier quotes."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Literal:
    """Terminal node holding a constant or keyword as SQL text."""
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class WrapperExpression:
    """Composite node: an operator or function applied to operands."""
    operator: str
    operands: Tuple["Expression", ...] = ()

    def __str__(self) -> str:
        return f"{self.operator}({', '.join(str(o) for o in self.operands)})"


Expression = Union[ColumnReference, Literal, WrapperExpression]


def parse_condition(text: str, dialect: Optional[str] = None) -> Expression:
    """
    Parse a boolean SQL condition into an expression tree.

    Args:
        text: Condition text like "STATUS IN ('A', 'B') AND AMOUNT >= 0"
        dialect: sqlglot dialect name used for reading, e.g. 'oracle'

    Returns:
        Root node of the converted tree

    Raises:
        ConstraintParseError: If the text is empty or not a valid expression
    """
    if text is None or not text.strip():
        raise ConstraintParseError("Empty check constraint condition")
    try:
        ast = sqlglot.parse_one(text, read=dialect)
    except SqlglotError as e:
        raise ConstraintParseError(f"Failed to parse check condition '{text}': {e}") from e
    if ast is None:
        raise ConstraintParseError(f"No expression found in check condition '{text}'")
    return _convert(ast)


def _convert(node: exp.Expression) -> Expression:
    if isinstance(node, exp.Column):
        return ColumnReference(node.name)
    children = list(node.iter_expressions())
    if not children:
        return Literal(node.sql())
    return WrapperExpression(node.key, tuple(_convert(child) for child in children))


def referenced_columns(
    condition: Union[str, Expression], dialect: Optional[str] = None
) -> Tuple[str, ...]:
    """
    Collect the distinct column names referenced by a condition.

    Names are returned in order of first appearance; a name that reappears
    in different letter case counts once.

    Args:
        condition: Condition text or an already parsed expression
        dialect: sqlglot dialect name used when parsing text

    Raises:
        ConstraintParseError: If condition text cannot be parsed
    """
    if isinstance(condition, (ColumnReference, Literal, WrapperExpression)):
        expression = condition
    else:
        expression = parse_condition(condition, dialect)
    names: List[str] = []
    seen = set()
    _collect(expression, names, seen)
    logger.debug(f"Columns referenced by check condition: {names}")
    return tuple(names)


def _collect(expression: Expression, names: List[str], seen: set) -> None:
    if isinstance(expression, ColumnReference):
        key = expression.name.lower()
        if key not in seen:
            seen.add(key)
            names.append(expression.name)
    elif isinstance(expression, WrapperExpression):
        for operand in expression.operands:
            _collect(operand, names, seen)

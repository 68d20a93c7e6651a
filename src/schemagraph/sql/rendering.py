"""
SQL rendering helpers.

Stateless functions that turn model objects into DDL and DML fragments:
column definitions, CREATE TABLE statements, constraint clauses, joins along
foreign keys and simple predicates. Functions that need literal formatting or
identifier quoting take a DatabaseDialect.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Tuple

from schemagraph.errors import ColumnTypeParseError, ConfigurationError, StructuralError
from schemagraph.model.constraints import (
    CheckConstraint,
    Constraint,
    ForeignKeyConstraint,
    NotNullConstraint,
    PrimaryKeyConstraint,
    UniqueConstraint,
)

if TYPE_CHECKING:
    from schemagraph.dialect.base import DatabaseDialect
    from schemagraph.model.base import DBObject
    from schemagraph.model.column import Column
    from schemagraph.model.fk_path import ForeignKeyPath
    from schemagraph.model.table import Table

logger = logging.getLogger(__name__)

# Types rendered without a size even if the metadata reports one
NO_SIZE_TYPES = {"DATE", "BLOB", "CLOB", "NCLOB"}


class NameSpec(str, Enum):
    """When to render a constraint's name in DDL."""
    ALWAYS = "always"
    NEVER = "never"
    IF_REPRODUCIBLE = "if_reproducible"


# column types ---------------------------------------------------------------------------------------


def parse_column_type_and_size(spec: str) -> Tuple[Any, ...]:
    """
    Split a type specification like 'NUMBER(8,2)' into its parts.

    Returns:
        (type,), (type, size) or (type, size, fraction_digits)

    Raises:
        ColumnTypeParseError: If the brackets or numbers are malformed
    """
    lparen = spec.find("(")
    if lparen < 0:
        return (spec,)
    rparen = spec.find(")", lparen)
    if rparen < 0:
        raise ColumnTypeParseError(f"Illegal column type format: {spec}")
    type_name = spec[:lparen]
    try:
        numbers = [int(part.strip()) for part in spec[lparen + 1:rparen].split(",")]
    except ValueError as e:
        raise ColumnTypeParseError(f"Illegal column type format: {spec}") from e
    return (type_name, *numbers[:2])


def render_column_type_with_size(column: "Column") -> str:
    type_name = column.type.name if column.type is not None else None
    text = str(type_name) if type_name is not None else "null"
    if column.size is not None and type_name not in NO_SIZE_TYPES:
        if column.fraction_digits is not None:
            text += f"({column.size},{column.fraction_digits})"
        else:
            text += f"({column.size})"
    return text


def render_column(column: "Column") -> str:
    """Render a column definition like 'ID NUMBER(8) DEFAULT 0 NOT NULL'."""
    text = f"{column.name} {render_column_type_with_size(column)}"
    if column.default_value is not None:
        text += f" DEFAULT {column.default_value}"
    return text + (" NULL" if column.nullable else " NOT NULL")


def render_column_names(columns: Iterable[Any]) -> str:
    """Render names (or Column objects) as a bracketed list '(a, b)'."""
    return "(" + ", ".join(getattr(c, "name", c) for c in columns) + ")"


def prepend_alias(table_alias: Optional[str], column_names: Sequence[str]) -> List[str]:
    if table_alias is None:
        return list(column_names)
    return [f"{table_alias}.{name}" for name in column_names]


def render_column_list_with_table_name(table: str, *columns: str) -> str:
    return ", ".join(f"{table}.{column}" for column in columns)


# constraints ----------------------------------------------------------------------------------------


def _quote_name_if_spaces(name: Optional[str]) -> Optional[str]:
    return f'"{name}"' if name is not None and " " in name else name


def constraint_name(constraint: Constraint, name_spec: Optional[NameSpec] = NameSpec.ALWAYS) -> str:
    """
    Render the 'CONSTRAINT name ' prefix, or '' if the name is omitted.

    The name is rendered for ALWAYS, and for IF_REPRODUCIBLE only if the
    name is deterministic. A name containing spaces is double-quoted.
    """
    if constraint.name is None:
        return ""
    if name_spec == NameSpec.ALWAYS or (
        name_spec == NameSpec.IF_REPRODUCIBLE and constraint.name_deterministic
    ):
        return f"CONSTRAINT {_quote_name_if_spaces(constraint.name)} "
    return ""


def pk_spec(pk: PrimaryKeyConstraint, name_spec: Optional[NameSpec]) -> str:
    return f"{constraint_name(pk, name_spec)}PRIMARY KEY {render_column_names(pk.column_names)}"


def uk_spec(uk: UniqueConstraint, name_spec: Optional[NameSpec]) -> str:
    return f"{constraint_name(uk, name_spec)}UNIQUE {render_column_names(uk.column_names)}"


def fk_spec(fk: ForeignKeyConstraint, name_spec: Optional[NameSpec]) -> str:
    referee = fk.referee_table
    schema = referee.schema
    qualified = f"{schema.name}.{referee.name}" if schema is not None and schema.name else referee.name
    return (
        f"{constraint_name(fk, name_spec)}FOREIGN KEY {render_column_names(fk.column_names)} "
        f"REFERENCES {qualified}{render_column_names(fk.referee_column_names)}"
    )


def check_spec(check: CheckConstraint, name_spec: Optional[NameSpec]) -> str:
    return f"{constraint_name(check, name_spec)}CHECK {check.condition_text}"


def not_null_spec(constraint: NotNullConstraint) -> str:
    return f"{constraint.column_names[0]} NOT NULL"


def constraint_spec(constraint: Constraint, name_spec: Optional[NameSpec]) -> str:
    """Render the DDL clause of any constraint type."""
    if isinstance(constraint, PrimaryKeyConstraint):
        return pk_spec(constraint, name_spec)
    if isinstance(constraint, UniqueConstraint):
        return uk_spec(constraint, name_spec)
    if isinstance(constraint, ForeignKeyConstraint):
        return fk_spec(constraint, name_spec)
    if isinstance(constraint, NotNullConstraint):
        return not_null_spec(constraint)
    if isinstance(constraint, CheckConstraint):
        return check_spec(constraint, name_spec)
    raise ConfigurationError(f"Unknown constraint type: {type(constraint).__name__}")


# DDL ------------------------------------------------------------------------------------------------


def render_create_table(
    table: "Table",
    include_foreign_keys: bool = True,
    name_spec: NameSpec = NameSpec.IF_REPRODUCIBLE,
) -> str:
    """
    Render a CREATE TABLE statement (without trailing semicolon).

    Clauses appear in the order columns, primary key, unique constraints,
    foreign keys (if included), check constraints, one per line.
    """
    clauses = [render_column(column) for column in table.get_columns()]
    pk = table.get_primary_key_constraint()
    if pk is not None:
        clauses.append(pk_spec(pk, name_spec))
    clauses.extend(uk_spec(uk, name_spec) for uk in table.get_unique_constraints(include_pk=False))
    if include_foreign_keys:
        clauses.extend(fk_spec(fk, name_spec) for fk in table.get_foreign_key_constraints())
    clauses.extend(check_spec(check, name_spec) for check in table.get_check_constraints())
    body = ",\n".join(f"\t{clause}" for clause in clauses)
    return f"create table {table.name} (\n{body}\n)"


def render_add_foreign_key(fk: ForeignKeyConstraint, name_spec: NameSpec) -> str:
    return f"ALTER TABLE {fk.table.name} ADD \n\t{fk_spec(fk, name_spec)}"


# names ----------------------------------------------------------------------------------------------


def owner_dot_component(obj: "DBObject") -> str:
    owner = obj.owner
    return f"{owner}.{obj.name}" if owner is not None else str(obj.name)


def type_and_name(obj: Optional["DBObject"]) -> Optional[str]:
    """Render 'object_type name'; unnamed constraints show as 'CONSTRAINT'."""
    if obj is None:
        return None
    name = obj.name
    if name is None and isinstance(obj, Constraint):
        name = "CONSTRAINT"
    return f"{obj.object_type} {name}"


def _quote_if_necessary(name: str, quote: bool) -> str:
    return f'"{name}"' if quote else name


def create_cat_sch_tab_string(
    catalog: Optional[str],
    schema: Optional[str],
    table: Optional[str],
    dialect: Optional["DatabaseDialect"] = None,
) -> str:
    """
    Render a qualified table name 'catalog.schema.table'.

    Empty parts are skipped. Oracle has no catalogs in table names, and
    without a dialect the catalog is omitted as well. Names are quoted if the
    dialect quotes table names.

    Raises:
        ConfigurationError: If the table name is missing
    """
    if not table:
        raise ConfigurationError("Table is missing")
    quote = bool(dialect is not None and dialect.quote_table_names)
    parts = []
    if catalog and dialect is not None and dialect.system.lower() != "oracle":
        parts.append(_quote_if_necessary(catalog, quote))
    if schema:
        parts.append(_quote_if_necessary(schema, quote))
    parts.append(_quote_if_necessary(table, quote))
    return ".".join(parts)


def _table_qualifiers(table: "Table") -> Tuple[Optional[str], Optional[str]]:
    catalog = table.catalog
    schema = table.schema
    return (
        catalog.name if catalog is not None else None,
        schema.name if schema is not None else None,
    )


# DML and queries ------------------------------------------------------------------------------------


def render_simple_select_all_query(table: "Table", dialect: "DatabaseDialect") -> str:
    catalog, schema = _table_qualifiers(table)
    return f"SELECT * FROM {create_cat_sch_tab_string(catalog, schema, table.name, dialect)}"


def render_query(
    catalog: Optional[str],
    schema: Optional[str],
    table: str,
    dialect: "DatabaseDialect",
    column_names: Optional[Sequence[str]] = None,
    selector: Optional[str] = None,
) -> str:
    """Render 'SELECT cols FROM table [WHERE selector]'; all columns if none are given."""
    if column_names:
        columns = ", ".join(_quote_if_necessary(c, dialect.quote_table_names) for c in column_names)
    else:
        columns = "*"
    sql = f"SELECT {columns} FROM {create_cat_sch_tab_string(catalog, schema, table, dialect)}"
    if selector:
        sql += f" WHERE {selector}"
    return sql


def render_where_clause(
    column_names: Sequence[str], values: Sequence[Any], dialect: "DatabaseDialect"
) -> str:
    if len(column_names) != len(values):
        raise StructuralError(
            f"Mismatch of column and value counts: {len(column_names)} vs. {len(values)}"
        )
    return " AND ".join(
        f"{name} = {dialect.format_value(value)}" for name, value in zip(column_names, values)
    )


def insert(
    catalog: Optional[str],
    schema: Optional[str],
    table: str,
    dialect: "DatabaseDialect",
    *values: Any,
) -> str:
    target = create_cat_sch_tab_string(catalog, schema, table, dialect)
    return f"insert into {target} values ({format_value_list(values, dialect)})"


def format_value_list(values: Iterable[Any], dialect: "DatabaseDialect") -> str:
    return ", ".join(dialect.format_value(value) for value in values)


def substitute_markers(sql: str, marker: str, substitution: Any, dialect: "DatabaseDialect") -> str:
    return sql.replace(marker, dialect.format_value(substitution))


def escape(text: str) -> str:
    """Double single quotes for use in a SQL string literal."""
    return text.replace("'", "''")


# predicates -----------------------------------------------------------------------------------------


def equals(
    table_alias1: Optional[str],
    column_names1: Sequence[str],
    table_alias2: Optional[str],
    column_names2: Sequence[str],
) -> str:
    """Render 'a1.x = a2.y AND ...' pairing the column lists position by position."""
    if len(column_names1) != len(column_names2):
        raise StructuralError(
            f"Column count mismatch: {len(column_names1)} vs. {len(column_names2)}"
        )
    left = prepend_alias(table_alias1, column_names1)
    right = prepend_alias(table_alias2, column_names2)
    return " AND ".join(f"{a} = {b}" for a, b in zip(left, right))


def all_null(column_names: Sequence[str], table_alias: Optional[str] = None) -> str:
    return " AND ".join(f"{name} IS NULL" for name in prepend_alias(table_alias, column_names))


def add_required_condition(condition: str, text: str) -> str:
    """Append a condition with AND."""
    return f"{text} AND {condition}" if text else condition


def add_optional_condition(condition: str, text: str) -> str:
    """Append a condition with OR."""
    return f"{text} OR {condition}" if text else condition


# joins ----------------------------------------------------------------------------------------------


def join(
    join_type: Optional[str],
    left_alias: str,
    left_columns: Sequence[str],
    right_table: str,
    right_alias: str,
    right_columns: Sequence[str],
) -> str:
    """
    Render '[type ]JOIN table alias ON l.a = r.b AND ...'.

    An empty type or INNER renders as a plain JOIN.
    """
    if len(left_columns) != len(right_columns):
        raise StructuralError(
            f"The join partners' column count does not match: "
            f"{len(left_columns)} vs. {len(right_columns)}"
        )
    prefix = f"{join_type} " if join_type and join_type.upper() != "INNER" else ""
    condition = " AND ".join(
        f"{left_alias}.{left} = {right_alias}.{right}"
        for left, right in zip(left_columns, right_columns)
    )
    return f"{prefix}JOIN {right_table} {right_alias} ON {condition}"


def left_join(
    left_alias: str,
    left_columns: Sequence[str],
    right_table: str,
    right_alias: str,
    right_columns: Sequence[str],
) -> str:
    return join("LEFT", left_alias, left_columns, right_table, right_alias, right_columns)


def inner_join(
    left_alias: str,
    left_columns: Sequence[str],
    right_table: str,
    right_alias: str,
    right_columns: Sequence[str],
) -> str:
    return join("INNER", left_alias, left_columns, right_table, right_alias, right_columns)


def join_fk(
    fk: ForeignKeyConstraint, join_type: Optional[str], referer_alias: str, referee_alias: str
) -> str:
    """Join from the referring table (aliased) to the referee table of a foreign key."""
    return join(
        join_type,
        referer_alias,
        fk.column_names,
        fk.referee_table.name,
        referee_alias,
        fk.referee_column_names,
    )


def join_fk_path(
    route: "ForeignKeyPath",
    join_type: Optional[str],
    start_alias: str,
    end_alias: str,
    intermediate_alias_base: str,
    indent: Optional[str] = None,
) -> str:
    """
    Render the joins along a foreign key path.

    Intermediate tables get the aliases '<base>_1__', '<base>_2__', ...; the
    last referee table gets end_alias. With an indent, every join after the
    first starts on a new tab-indented line.
    """
    edges = route.edges
    if not edges:
        raise StructuralError("Cannot join along an empty foreign key path")
    parts = []
    current = start_alias
    for i, fk in enumerate(edges[:-1]):
        referee_alias = f"{intermediate_alias_base}_{i + 1}__"
        parts.append(join_fk(fk, join_type, current, referee_alias))
        parts.append(" ")
        if indent is not None:
            parts.append("\n\t")
        current = referee_alias
    parts.append(join_fk(edges[-1], join_type, current, end_alias))
    return "".join(parts)

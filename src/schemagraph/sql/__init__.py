"""
SQL text utilities: check constraint scanning, statement classification and
DDL/DML rendering.
"""

from schemagraph.sql.check_scanner import (
    ColumnReference,
    Literal,
    WrapperExpression,
    parse_condition,
    referenced_columns,
)
from schemagraph.sql.statements import (
    is_ddl,
    is_dml,
    is_procedure_call,
    is_query,
    mutates_data_or_structure,
    mutates_structure,
    normalize,
    remove_comments,
)
from schemagraph.sql.rendering import (
    NameSpec,
    constraint_spec,
    create_cat_sch_tab_string,
    join_fk_path,
    render_add_foreign_key,
    render_column,
    render_create_table,
)

__all__ = [
    # Check scanner
    "ColumnReference",
    "Literal",
    "WrapperExpression",
    "parse_condition",
    "referenced_columns",
    # Statement classification
    "is_ddl",
    "is_dml",
    "is_procedure_call",
    "is_query",
    "mutates_structure",
    "mutates_data_or_structure",
    "normalize",
    "remove_comments",
    # Rendering
    "NameSpec",
    "constraint_spec",
    "create_cat_sch_tab_string",
    "join_fk_path",
    "render_add_foreign_key",
    "render_column",
    "render_create_table",
]

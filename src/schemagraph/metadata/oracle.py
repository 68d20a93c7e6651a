"""
Oracle metadata importer using the data dictionary views.

Reads tables, columns, constraints, indexes, sequences, check constraints,
triggers and packages of one schema owner through a DB-API connection (for
example an oracledb connection). The caller opens and closes the connection.

Uses:
- ALL_TAB_COMMENTS / ALL_TAB_COLUMNS / ALL_COL_COMMENTS
- ALL_CONSTRAINTS / ALL_CONS_COLUMNS
- ALL_INDEXES / ALL_IND_COLUMNS
- USER_SEQUENCES / USER_CONSTRAINTS / SYS.ALL_TRIGGERS / USER_OBJECTS / SYS.USER_PROCEDURES
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from schemagraph.dialect.oracle import (
    CHECK_CONSTRAINT_QUERY,
    PACKAGE_QUERY,
    PROCEDURE_QUERY,
    TRIGGER_QUERY,
    OracleDialect,
)
from schemagraph.errors import ConfigurationError, ObjectNotFoundError
from schemagraph.model.constraints import CheckConstraint, ForeignKeyConstraint
from schemagraph.model.database import Catalog, Database
from schemagraph.model.importer import (
    ColumnReceiver,
    FKReceiver,
    Importer,
    IndexReceiver,
    PKReceiver,
    ReferrerReceiver,
)
from schemagraph.model.index import IndexInfo
from schemagraph.model.schema import Package, Procedure, Schema, Sequence, Trigger
from schemagraph.model.table import Table
from schemagraph.model.types import DataType, FKChangeRule, TableType

logger = logging.getLogger(__name__)

# Types whose size is the precision rather than the byte length
_PRECISION_TYPES = {"NUMBER", "FLOAT"}
_CHAR_TYPES = {"CHAR", "NCHAR", "VARCHAR2", "NVARCHAR2"}


class OracleImporter(Importer):
    """
    Imports the metadata of one Oracle schema.

    Args:
        connection: Open DB-API connection
        schema_name: Owner whose objects are imported, defaults to the user
        user: Name of the connected user
        product_version: Server version string, e.g. connection.version
    """

    def __init__(
        self,
        connection: Any,
        schema_name: Optional[str] = None,
        user: Optional[str] = None,
        product_version: Optional[str] = None,
    ):
        super().__init__(product_name="Oracle", product_version=product_version, user=user)
        self._conn = connection
        owner = schema_name or user
        if not owner:
            raise ConfigurationError("Either schema_name or user is required")
        self.owner = owner.upper()
        self.dialect = OracleDialect()

    def _query(self, sql: str, **params: Any) -> List[Tuple[Any, ...]]:
        cursor = self._conn.cursor()
        try:
            cursor.execute(sql, params)
            return list(cursor.fetchall())
        finally:
            cursor.close()

    # structure ----------------------------------------------------------------------------------------

    def import_catalogs(self, database: Database) -> None:
        Catalog(None, database)

    def import_schemas(self, database: Database) -> None:
        Schema(self.owner, database.get_catalog(None))

    def import_tables(self, database: Database) -> None:
        schema = database.get_schema(self.owner)
        rows = self._query("""
            SELECT table_name, table_type, comments
            FROM all_tab_comments
            WHERE owner = :owner
            ORDER BY table_name
        """, owner=self.owner)
        for table_name, table_type, comments in rows:
            if not database.accepts_table_name(table_name):
                logger.debug(f"Excluding table {table_name}")
                continue
            Table(table_name, TableType.from_name(table_type), doc=comments, schema=schema, importer=self)
        logger.info(f"Imported {len(schema.get_tables())} tables of {self.owner}")

    # table aspects ------------------------------------------------------------------------------------

    def import_columns(self, table: Table, receiver: ColumnReceiver) -> None:
        rows = self._query("""
            SELECT
                c.column_name,
                c.data_type,
                c.nullable,
                c.data_length,
                c.char_length,
                c.data_precision,
                c.data_scale,
                c.data_default,
                m.comments
            FROM all_tab_columns c
            LEFT JOIN all_col_comments m
                ON c.owner = m.owner
                AND c.table_name = m.table_name
                AND c.column_name = m.column_name
            WHERE c.owner = :owner AND c.table_name = :table_name
            ORDER BY c.column_id
        """, owner=self.owner, table_name=table.name)
        for name, data_type, nullable, length, char_length, precision, scale, default, comment in rows:
            type_name = data_type.upper()
            if type_name in _PRECISION_TYPES:
                size, fraction_digits = precision, scale
            elif type_name in _CHAR_TYPES:
                size, fraction_digits = char_length or length, None
            elif type_name.startswith("TIMESTAMP") or type_name in ("DATE", "BLOB", "CLOB", "NCLOB"):
                size, fraction_digits = None, None
            else:
                size, fraction_digits = length, None
            receiver.receive_column(
                name,
                DataType.get_instance(type_name),
                size,
                fraction_digits,
                nullable == "Y",
                default.strip() if default else None,
                comment,
                table,
            )

    def import_primary_key(self, table: Table, receiver: PKReceiver) -> None:
        rows = self._query("""
            SELECT c.constraint_name, cc.column_name
            FROM all_constraints c
            JOIN all_cons_columns cc
                ON c.owner = cc.owner
                AND c.constraint_name = cc.constraint_name
            WHERE c.owner = :owner
                AND c.table_name = :table_name
                AND c.constraint_type = 'P'
            ORDER BY cc.position
        """, owner=self.owner, table_name=table.name)
        if not rows:
            return
        name = rows[0][0]
        receiver.receive_pk(
            name, self.dialect.is_deterministic_pk_name(name), [row[1] for row in rows], table
        )

    def import_indexes(self, table: Table, receiver: IndexReceiver) -> None:
        rows = self._query("""
            SELECT i.index_name, i.uniqueness, i.index_type, c.column_name, c.column_position
            FROM all_indexes i
            JOIN all_ind_columns c
                ON i.owner = c.index_owner
                AND i.index_name = c.index_name
            WHERE i.table_owner = :owner AND i.table_name = :table_name
            ORDER BY i.index_name, c.column_position
        """, owner=self.owner, table_name=table.name)
        infos: Dict[str, IndexInfo] = {}
        for index_name, uniqueness, index_type, column_name, position in rows:
            info = infos.get(index_name)
            if info is None:
                info = IndexInfo(index_name, uniqueness == "UNIQUE", index_type=index_type)
                infos[index_name] = info
            info.add_column(int(position), column_name)
        for info in infos.values():
            receiver.receive_index(
                info, self.dialect.is_deterministic_index_name(info.name), table, table.schema
            )

    def import_imported_keys(self, table: Table, receiver: FKReceiver) -> None:
        rows = self._query("""
            SELECT
                c.constraint_name,
                c.delete_rule,
                cc.column_name,
                rc.owner as ref_owner,
                rc.table_name as ref_table,
                rcc.column_name as ref_column
            FROM all_constraints c
            JOIN all_cons_columns cc
                ON c.owner = cc.owner
                AND c.constraint_name = cc.constraint_name
            JOIN all_constraints rc
                ON c.r_owner = rc.owner
                AND c.r_constraint_name = rc.constraint_name
            JOIN all_cons_columns rcc
                ON rc.owner = rcc.owner
                AND rc.constraint_name = rcc.constraint_name
                AND cc.position = rcc.position
            WHERE c.owner = :owner
                AND c.table_name = :table_name
                AND c.constraint_type = 'R'
            ORDER BY c.constraint_name, cc.position
        """, owner=self.owner, table_name=table.name)
        grouped: Dict[str, Dict[str, Any]] = {}
        for name, delete_rule, column, ref_owner, ref_table, ref_column in rows:
            entry = grouped.setdefault(name, {
                "delete_rule": delete_rule,
                "referee": (ref_owner, ref_table),
                "columns": [],
                "referee_columns": [],
            })
            entry["columns"].append(column)
            entry["referee_columns"].append(ref_column)
        for name, entry in grouped.items():
            referee = self._find_referee(table, *entry["referee"])
            if referee is None:
                continue
            fk = ForeignKeyConstraint(
                name,
                self.dialect.is_deterministic_fk_name(name),
                None,
                entry["columns"],
                referee,
                entry["referee_columns"],
            )
            fk.delete_rule = FKChangeRule.from_name(entry["delete_rule"])
            receiver.receive_fk(fk, table)

    def import_referrers(self, table: Table, receiver: ReferrerReceiver) -> None:
        rows = self._query("""
            SELECT DISTINCT c.table_name
            FROM all_constraints c
            JOIN all_constraints rc
                ON c.r_owner = rc.owner
                AND c.r_constraint_name = rc.constraint_name
            WHERE c.constraint_type = 'R'
                AND c.owner = :owner
                AND rc.owner = :owner
                AND rc.table_name = :table_name
            ORDER BY c.table_name
        """, owner=self.owner, table_name=table.name)
        for (referrer_name,) in rows:
            receiver.receive_referrer(referrer_name, table)

    # database aspects ---------------------------------------------------------------------------------

    def import_sequences(self, database: Database) -> None:
        schema = database.get_schema(self.owner)
        for row in self._query(self.dialect.render_sequence_detail_query()):
            name, min_value, max_value, increment, cycle_flag, order_flag, cache, last_number = row
            sequence = Sequence(name)
            sequence.min_value = int(min_value)
            sequence.max_value = int(max_value)
            sequence.increment = int(increment)
            sequence.cycle = cycle_flag == "Y"
            sequence.order = order_flag == "Y"
            sequence.cache = int(cache)
            sequence.last_number = int(last_number)
            schema.receive_sequence(sequence)
            logger.debug(f"Imported sequence {name}")

    def import_checks(self, database: Database) -> None:
        rows = self._query(CHECK_CONSTRAINT_QUERY + " and owner = :owner", owner=self.owner)
        count = 0
        for owner, constraint_name, table_name, condition in rows:
            if self.dialect.is_simple_not_null_check(condition):
                continue
            table = database.get_table(f"{owner}.{table_name}", required=False)
            if table is None:
                logger.debug(f"Skipping check {constraint_name} of unavailable table {table_name}")
                continue
            CheckConstraint(
                constraint_name,
                self.dialect.is_deterministic_check_name(constraint_name),
                table,
                condition,
            )
            count += 1
        logger.info(f"Imported {count} check constraints of {self.owner}")

    def import_triggers(self, database: Database) -> None:
        schema = database.get_schema(self.owner)
        rows = self._query(TRIGGER_QUERY + " WHERE OWNER = :owner", owner=self.owner)
        for row in rows:
            trigger = Trigger(
                row[1],
                trigger_type=row[2],
                triggering_event=row[3],
                table_owner=row[4],
                base_object_type=row[5],
                table_name=row[6],
                column_name=row[7],
                referencing_names=row[8],
                when_clause=row[9],
                status=row[10],
                description=row[11],
                action_type=row[12],
                trigger_body=row[13],
            )
            schema.receive_trigger(trigger)
            logger.debug(f"Imported trigger {trigger.name}")

    def import_packages(self, database: Database) -> None:
        schema = database.get_schema(self.owner)
        packages: Dict[str, Package] = {}
        for _, object_name, sub_object_name, object_id, object_type, status in self._query(PACKAGE_QUERY):
            package = Package(object_name)
            package.sub_object_name = sub_object_name
            package.object_id = _as_text(object_id)
            package.package_type = object_type
            package.status = status
            schema.receive_package(package)
            packages[object_name] = package
        for object_name, procedure_name, object_id, sub_program_id, overload in self._query(PROCEDURE_QUERY):
            package = packages.get(object_name)
            if package is None:
                logger.warning(f"Procedure {procedure_name} refers to unknown package {object_name}")
                continue
            procedure = Procedure(procedure_name, package)
            procedure.object_id = _as_text(object_id)
            procedure.sub_program_id = _as_text(sub_program_id)
            procedure.overload = _as_text(overload)

    # helpers ------------------------------------------------------------------------------------------

    def _find_referee(self, table: Table, owner: str, table_name: str) -> Optional[Table]:
        database = table.database
        referee = database.get_table(f"{owner}.{table_name}", required=False)
        if referee is not None:
            return referee
        if owner != self.owner or not database.accepts_table_name(table_name):
            logger.debug(f"Ignoring foreign key of {table.name} to {owner}.{table_name}")
            return None
        raise ObjectNotFoundError("table", table_name, f"schema '{owner}'")


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)

"""
Vendor SQL dialects and the product-to-dialect registry.
"""

from schemagraph.dialect.base import DatabaseDialect, NameRuleDialect
from schemagraph.dialect.cubrid import CubridDialect
from schemagraph.dialect.db2 import DB2Dialect
from schemagraph.dialect.derby import Derby10_6Dialect, DerbyDialect
from schemagraph.dialect.firebird import Firebird2_5Dialect, FirebirdDialect
from schemagraph.dialect.h2 import H2Dialect
from schemagraph.dialect.hsql import HSQL2Dialect, HSQLDialect
from schemagraph.dialect.manager import DialectRule, VersionNumber, get_dialect_for_product
from schemagraph.dialect.mysql import MySQLDialect
from schemagraph.dialect.oracle import OracleDialect
from schemagraph.dialect.postgresql import PostgreSQL10Dialect, PostgreSQLDialect
from schemagraph.dialect.sqlserver import SqlServerDialect
from schemagraph.dialect.unknown import UnknownDialect

__all__ = [
    # Base
    "DatabaseDialect",
    "NameRuleDialect",
    # Registry
    "get_dialect_for_product",
    "DialectRule",
    "VersionNumber",
    # Vendors
    "OracleDialect",
    "PostgreSQLDialect",
    "PostgreSQL10Dialect",
    "MySQLDialect",
    "H2Dialect",
    "HSQLDialect",
    "HSQL2Dialect",
    "DerbyDialect",
    "Derby10_6Dialect",
    "DB2Dialect",
    "SqlServerDialect",
    "FirebirdDialect",
    "Firebird2_5Dialect",
    "CubridDialect",
    "UnknownDialect",
]

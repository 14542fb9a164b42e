"""
Declared column type codes and their resolution.

This module provides:
- SqlType: the declared type codes the value coercer dispatches on
- resolve_sql_type: resolve a driver type code to an SqlType
- get_dialect_name: detect the dialect of a DB-API cursor
"""
import enum
import logging
from typing import Any

from psycopg.postgres import types as pg_types

logger = logging.getLogger(__name__)


class SqlType(enum.IntEnum):
    """Declared SQL column types.

    Values follow the JDBC ``java.sql.Types`` numbering so that type codes
    coming from JDBC bridges resolve directly.
    """
    BIT = -7
    TINYINT = -6
    BIGINT = -5
    LONGVARBINARY = -4
    VARBINARY = -3
    BINARY = -2
    LONGVARCHAR = -1
    NULL = 0
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111
    JAVA_OBJECT = 2000
    STRUCT = 2002
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005


INTEGER_TYPES = frozenset({SqlType.BIGINT, SqlType.INTEGER, SqlType.SMALLINT,
                           SqlType.TINYINT})
FLOATING_TYPES = frozenset({SqlType.DOUBLE, SqlType.FLOAT, SqlType.REAL})
TEMPORAL_TYPES = frozenset({SqlType.DATE, SqlType.TIME, SqlType.TIMESTAMP})


# PostgreSQL - OID -> SqlType

_oid = lambda x: pg_types.get(x).oid

postgres_types: dict[int, SqlType] = {
    _oid('int8'): SqlType.BIGINT,
    _oid('int4'): SqlType.INTEGER,
    _oid('int2'): SqlType.SMALLINT,
    _oid('float8'): SqlType.DOUBLE,
    _oid('float4'): SqlType.REAL,
    _oid('numeric'): SqlType.NUMERIC,
    _oid('date'): SqlType.DATE,
    _oid('time'): SqlType.TIME,
    _oid('timetz'): SqlType.TIME,
    _oid('timestamp'): SqlType.TIMESTAMP,
    _oid('timestamptz'): SqlType.TIMESTAMP,
    _oid('bool'): SqlType.BOOLEAN,
    _oid('bytea'): SqlType.BINARY,
    _oid('bpchar'): SqlType.CHAR,
    _oid('"char"'): SqlType.CHAR,
}

for v in [_oid('text'), _oid('varchar'), _oid('name')]:
    postgres_types[v] = SqlType.VARCHAR

for v in [_oid('json'), _oid('jsonb'), _oid('uuid')]:
    postgres_types[v] = SqlType.OTHER


# SQLite - declared type name -> SqlType

sqlite_types: dict[str, SqlType] = {
    'BIGINT': SqlType.BIGINT,
    'INTEGER': SqlType.BIGINT,
    'INT': SqlType.INTEGER,
    'SMALLINT': SqlType.SMALLINT,
    'TINYINT': SqlType.TINYINT,
    'REAL': SqlType.DOUBLE,
    'DOUBLE': SqlType.DOUBLE,
    'FLOAT': SqlType.DOUBLE,
    'NUMERIC': SqlType.NUMERIC,
    'DECIMAL': SqlType.DECIMAL,
    'TEXT': SqlType.VARCHAR,
    'VARCHAR': SqlType.VARCHAR,
    'CHAR': SqlType.CHAR,
    'BLOB': SqlType.BLOB,
    'BOOLEAN': SqlType.BOOLEAN,
    'DATE': SqlType.DATE,
    'TIME': SqlType.TIME,
    'DATETIME': SqlType.TIMESTAMP,
    'TIMESTAMP': SqlType.TIMESTAMP,
}


def _resolve_by_column_name(column_name: str) -> SqlType | None:
    """Guess a declared type from common column naming patterns.
    """
    name_lower = column_name.lower()

    if name_lower.endswith('_id') or name_lower == 'id':
        return SqlType.BIGINT

    if name_lower.endswith(('_datetime', '_at', '_timestamp')) or name_lower == 'timestamp':
        return SqlType.TIMESTAMP

    if name_lower.endswith('_date') or name_lower == 'date':
        return SqlType.DATE

    if name_lower.endswith('_time') or name_lower == 'time':
        return SqlType.TIME

    if (name_lower.endswith(('_price', '_cost', '_amount')) or
            name_lower.startswith(('price_', 'cost_', 'amount_'))):
        return SqlType.DOUBLE

    return None


def resolve_sql_type(
    dialect: str | None,
    type_code: Any,
    column_name: str | None = None,
) -> SqlType:
    """Resolve a driver type code to a declared SqlType.

    Priority:
    1. SqlType passed through
    2. Dialect lookup (PostgreSQL OIDs, SQLite declared type names)
    3. Integer JDBC type codes
    4. Column name patterns
    5. Default to OTHER

    Args:
        dialect: Database dialect ('postgresql', 'sqlite' or None)
        type_code: Driver-specific type code from cursor.description
        column_name: Optional column name for pattern matching

    Returns
        SqlType
    """
    if isinstance(type_code, SqlType):
        return type_code

    if dialect == 'postgresql':
        if type_code in postgres_types:
            return postgres_types[type_code]
    elif dialect == 'sqlite':
        if isinstance(type_code, str):
            base_type = type_code.split('(')[0].strip().upper()
            if base_type in sqlite_types:
                return sqlite_types[base_type]
    elif isinstance(type_code, int) and not isinstance(type_code, bool):
        try:
            return SqlType(type_code)
        except ValueError:
            logger.debug(f'Unknown type code {type_code} for column {column_name!r}')

    if column_name:
        resolved = _resolve_by_column_name(column_name)
        if resolved is not None:
            return resolved

    return SqlType.OTHER


def get_dialect_name(cursor: Any) -> str | None:
    """Get the dialect name for a DB-API cursor, or None when unknown.
    """
    if hasattr(cursor, 'dialect'):
        dialect = cursor.dialect
        if isinstance(dialect, str):
            return dialect.lower()

    type_name = f'{type(cursor).__module__}.{type(cursor).__name__}'
    if 'psycopg' in type_name:
        return 'postgresql'
    if 'sqlite3' in type_name:
        return 'sqlite'

    return None

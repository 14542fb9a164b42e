"""
Column metadata describing the shape of a result.
"""
import logging
from collections.abc import Sequence
from typing import Any, Self

from cursorframe.types import SqlType, resolve_sql_type

logger = logging.getLogger(__name__)


class ColumnMetaData:
    """Representation of a result column with its declared type

    Technical implementation details:
    - Built from one item of a DB-API cursor.description
    - Maps the driver type_code to a declared SqlType via resolve_sql_type
    - Keeps the raw type_code alongside the declared type for diagnostics

    Database compatibility:
    - PostgreSQL: description items are psycopg Column objects carrying OIDs
    - SQLite: description items are 7-tuples with no type information, so the
      declared type falls back to column name patterns
    """

    def __init__(self,
                 ordinal: int,
                 name: str,
                 sql_type: SqlType,
                 type_code: Any = None,
                 display_size: int | None = None,
                 internal_size: int | None = None,
                 precision: int | None = None,
                 scale: int | None = None,
                 nullable: bool | None = None):
        """
        Initialize column metadata

        Args:
            ordinal: Zero-based position of the column
            name: Display name of the column
            sql_type: Declared SqlType used for value coercion
            type_code: Raw driver type code
            display_size: Maximum display size (character count)
            internal_size: Internal storage size (bytes)
            precision: Numeric precision (for numeric types)
            scale: Numeric scale (for numeric types)
            nullable: Whether the column allows NULL values
        """
        self.ordinal = ordinal
        self.name = name
        self.sql_type = sql_type
        self.type_code = type_code
        self.display_size = display_size
        self.internal_size = internal_size
        self.precision = precision
        self.scale = scale
        self.nullable = nullable

    @classmethod
    def from_cursor_description(cls, ordinal: int, description_item: Any,
                                dialect: str | None = None) -> Self:
        """Create column metadata from one cursor description item.
        """
        if dialect == 'postgresql':
            column_info = cls._extract_postgres_column_info(description_item)
        else:
            column_info = cls._extract_sequence_column_info(description_item)

        column_info['sql_type'] = resolve_sql_type(
            dialect, column_info['type_code'], column_name=column_info['name'])
        return cls(ordinal=ordinal, **column_info)

    @classmethod
    def _extract_postgres_column_info(cls, description_item: Any) -> dict:
        return {
            'name': getattr(description_item, 'name', None),
            'type_code': getattr(description_item, 'type_code', None),
            'display_size': getattr(description_item, 'display_size', None),
            'internal_size': getattr(description_item, 'internal_size', None),
            'precision': getattr(description_item, 'precision', None),
            'scale': getattr(description_item, 'scale', None),
            'nullable': None,
            }

    @classmethod
    def _extract_sequence_column_info(cls, description_item: Sequence) -> dict:
        if len(description_item) >= 7:
            nullable = description_item[6]
            return {
                'name': description_item[0],
                'type_code': description_item[1],
                'display_size': description_item[2],
                'internal_size': description_item[3],
                'precision': description_item[4],
                'scale': description_item[5],
                'nullable': None if nullable is None else bool(nullable),
                }
        return {
            'name': description_item[0] if len(description_item) > 0 else None,
            'type_code': description_item[1] if len(description_item) > 1 else None,
            'display_size': None, 'internal_size': None,
            'precision': None, 'scale': None, 'nullable': None,
            }

    def __repr__(self) -> str:
        return (f'ColumnMetaData(ordinal={self.ordinal}, name={self.name!r}, '
                f'sql_type={self.sql_type.name})')

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnMetaData):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            'ordinal': self.ordinal,
            'name': self.name,
            'sql_type': self.sql_type.name,
            'type_code': self.type_code,
            'display_size': self.display_size,
            'internal_size': self.internal_size,
            'precision': self.precision,
            'scale': self.scale,
            'nullable': self.nullable,
        }


class Signature:
    """Column count, names and declared types of a result.

    Treated as opaque by the adapter and handed back to callers unchanged.
    """

    def __init__(self, columns: Sequence[ColumnMetaData], sql: str | None = None):
        self.columns = tuple(columns)
        self.sql = sql

    @classmethod
    def of(cls, *columns: tuple[str, SqlType], sql: str | None = None) -> Self:
        """Build a signature from ``(name, sql_type)`` pairs.
        """
        return cls([ColumnMetaData(i, name, SqlType(sql_type))
                    for i, (name, sql_type) in enumerate(columns)], sql=sql)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    @property
    def column_types(self) -> list[SqlType]:
        return [col.sql_type for col in self.columns]

    def __len__(self) -> int:
        return len(self.columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Signature):
            return NotImplemented
        return self.columns == other.columns and self.sql == other.sql

    def __repr__(self) -> str:
        return f'Signature(columns={list(self.columns)!r})'


def signature_from_description(description: Sequence | None,
                               dialect: str | None = None,
                               sql: str | None = None) -> Signature:
    """Create a Signature from a DB-API cursor description.

    A cursor with no description (a statement that produced no result set)
    yields an empty signature.
    """
    if description is None:
        return Signature([], sql=sql)
    columns = [ColumnMetaData.from_cursor_description(i, desc, dialect)
               for i, desc in enumerate(description)]
    logger.debug(f'Derived signature: {[(c.name, c.sql_type.name) for c in columns]}')
    return Signature(columns, sql=sql)

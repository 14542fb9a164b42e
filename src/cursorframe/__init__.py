"""
Cursor-to-frame adapter for DB-API 2.0 cursors.

Turns an open, forward-only cursor into pages ("frames") of rows whose
values are normalized to canonical, timezone-independent representations.

All operations can be called either as:
- Module functions: cursorframe.create_from_cursor(cid, sid, cursor)
- Factory methods: CursorResultSet.create(cid, sid, cursor)

The module functions are facades over the factory methods.
"""
__version__ = '0.1.0'

from typing import Any

from cursorframe.coercion import UTC_CONTEXT, TimeZoneContext, coerce_value
from cursorframe.coercion import to_python
from cursorframe.cursor import ResultCursor, wrap_cursor
from cursorframe.exceptions import CursorAccessError, DatabaseError
from cursorframe.exceptions import TypeConversionError, ValidationError
from cursorframe.frame import EMPTY_FRAME, UNLIMITED, Frame, frame
from cursorframe.options import FrameOptions
from cursorframe.resultset import CursorResultSet, MetaResultSet
from cursorframe.signature import ColumnMetaData, Signature
from cursorframe.signature import signature_from_description
from cursorframe.types import SqlType


def create_from_cursor(connection_id: str, statement_id: int, cursor: Any,
                       max_row_count: int = UNLIMITED,
                       signature: Signature | None = None,
                       options: FrameOptions | dict | None = None) -> CursorResultSet:
    """Create a result set whose first frame is read from an open cursor.
    """
    return CursorResultSet.create(connection_id, statement_id, cursor,
                                  max_row_count, signature=signature, options=options)


def create_empty(connection_id: str, statement_id: int,
                 signature: Signature | None,
                 options: FrameOptions | dict | None = None) -> CursorResultSet:
    """Create a result set with an empty, done first frame.
    """
    return CursorResultSet.empty(connection_id, statement_id, signature, options=options)


def create_for_update_count(connection_id: str, statement_id: int,
                            update_count: int) -> CursorResultSet:
    """Create a result set carrying only an update count.
    """
    return CursorResultSet.count(connection_id, statement_id, update_count)


def fetch_frame(cursor: ResultCursor, offset: int, fetch_max_row_count: int,
                context: TimeZoneContext = UTC_CONTEXT) -> Frame:
    """Fetch a follow-up frame from a cursor still owned by a result set.
    """
    return frame(cursor, offset, fetch_max_row_count, context)


__all__ = [
    'create_from_cursor',
    'create_empty',
    'create_for_update_count',
    'fetch_frame',
    'frame',
    'coerce_value',
    'to_python',
    'wrap_cursor',
    'signature_from_description',
    'CursorResultSet',
    'MetaResultSet',
    'ResultCursor',
    'Frame',
    'EMPTY_FRAME',
    'UNLIMITED',
    'FrameOptions',
    'TimeZoneContext',
    'UTC_CONTEXT',
    'Signature',
    'ColumnMetaData',
    'SqlType',
    'DatabaseError',
    'CursorAccessError',
    'TypeConversionError',
    'ValidationError',
]

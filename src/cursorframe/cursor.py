"""
Forward-only cursor abstraction over a DB-API 2.0 cursor (PEP-249).

The adapter only ever advances, reads the current row and releases. Reads
return None for SQL NULL, so no separate "was the last read null" check is
needed.
"""
import logging
from typing import Any

from cursorframe.exceptions import CursorAccessError, wrap_cursor_errors
from cursorframe.signature import Signature, signature_from_description
from cursorframe.types import SqlType, get_dialect_name

logger = logging.getLogger(__name__)


class ResultCursor:
    """Stateful single-pass handle over an open DB-API cursor.

    Not safe for concurrent use; callers serialize fetches against one
    cursor.
    """

    def __init__(self, cursor: Any, dialect: str | None = None,
                 signature: Signature | None = None) -> None:
        """Initialize cursor wrapper.

        Args:
            cursor: The underlying, already executed DB-API cursor
            dialect: Optional dialect name (auto-detected from the cursor if not provided)
            signature: Optional column metadata (derived from cursor.description if not provided)
        """
        self.dbapi_cursor = cursor
        self.dialect = dialect or get_dialect_name(cursor)
        self._signature = signature
        self._row: tuple | None = None
        self._position = 0
        self._closed = False

    def __repr__(self) -> str:
        state = 'closed' if self._closed else f'position={self._position}'
        return f'ResultCursor(dialect={self.dialect!r}, {state})'

    @property
    def closed(self) -> bool:
        """Whether the cursor has been released."""
        return self._closed

    @property
    def position(self) -> int:
        """Number of rows consumed so far."""
        return self._position

    @property
    @wrap_cursor_errors('reading cursor metadata')
    def metadata(self) -> Signature:
        """Column metadata, derived once from cursor.description."""
        if self._signature is None:
            self._check_open()
            self._signature = signature_from_description(
                self.dbapi_cursor.description, self.dialect)
        return self._signature

    def column_types(self) -> list[SqlType]:
        """Declared type of each column in column order."""
        return self.metadata.column_types

    @wrap_cursor_errors('advancing cursor')
    def next(self) -> bool:
        """Advance to the next row. Returns False once the cursor is exhausted."""
        self._check_open()
        self._row = self.dbapi_cursor.fetchone()
        if self._row is None:
            return False
        self._position += 1
        return True

    @wrap_cursor_errors('reading column value')
    def get(self, index: int) -> Any:
        """Read column ``index`` (zero-based) of the current row; None for NULL."""
        self._check_open()
        if self._row is None:
            raise CursorAccessError('Cursor is not positioned on a row')
        return self._row[index]

    @wrap_cursor_errors('releasing cursor')
    def close(self) -> bool:
        """Release the underlying cursor.

        Only the first call releases; later calls do nothing and return False.
        The cursor counts as released even when the driver fails to close it,
        so release is never attempted twice.
        """
        if self._closed:
            return False
        self._closed = True
        self._row = None
        logger.debug(f'Releasing cursor after {self._position} rows')
        self.dbapi_cursor.close()
        return True

    def _check_open(self) -> None:
        if self._closed:
            raise CursorAccessError('Cursor has already been released')


def wrap_cursor(cursor: Any, dialect: str | None = None,
                signature: Signature | None = None) -> ResultCursor:
    """Return ``cursor`` as a ResultCursor, wrapping a raw DB-API cursor if needed.
    """
    if isinstance(cursor, ResultCursor):
        return cursor
    return ResultCursor(cursor, dialect=dialect, signature=signature)

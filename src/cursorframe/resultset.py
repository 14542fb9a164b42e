"""
Result descriptors built on top of an open DB-API cursor.

A descriptor bundles the connection and statement identifiers with either
the result signature and its first frame, or the update count of a
statement that produced no result set.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Self

from cursorframe.cursor import ResultCursor, wrap_cursor
from cursorframe.exceptions import CursorAccessError, ValidationError
from cursorframe.exceptions import wrap_cursor_errors
from cursorframe.frame import EMPTY_FRAME, UNLIMITED, Frame, first_fetch_row_count
from cursorframe.frame import frame
from cursorframe.options import FrameOptions, load_frame_options
from cursorframe.signature import Signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetaResultSet:
    """Handle returned to callers for one executed statement.

    Attributes:
        connection_id: Identifier of the connection the statement ran on
        statement_id: Identifier of the statement
        own_statement: True when this descriptor owns the still-open cursor
            and must eventually release it
        signature: Column metadata, None for update counts
        first_frame: First page of rows, None for update counts
        update_count: Rows modified by a non-query statement, otherwise None
        cursor: The open cursor when own_statement is True, otherwise None
        data_loader: Loader used by load(), taken from FrameOptions
    """
    connection_id: str
    statement_id: int
    own_statement: bool
    signature: Signature | None
    first_frame: Frame | None
    update_count: int | None = None
    cursor: ResultCursor | None = field(default=None, repr=False, compare=False)
    data_loader: Callable[..., Any] | None = field(default=None, repr=False, compare=False)

    @property
    def is_update_count(self) -> bool:
        return self.update_count is not None

    def load(self, **kwargs: Any) -> Any:
        """Load the first frame through the configured data loader.

        Only the first frame is loaded; follow-up frames come from fetch_frame.
        """
        if self.first_frame is None or self.signature is None:
            raise ValidationError(
                f'Statement {self.statement_id} has no signature and frame to load')
        return self.first_frame.load(self.signature, self.data_loader, **kwargs)

    def close(self) -> None:
        """Release the owned cursor, if any."""
        if self.cursor is not None:
            self.cursor.close()


class CursorResultSet(MetaResultSet):
    """Factory for descriptors over DB-API cursors.
    """

    @classmethod
    def create(cls, connection_id: str, statement_id: int, cursor: Any,
               max_row_count: int = UNLIMITED, signature: Signature | None = None,
               options: FrameOptions | dict | None = None) -> Self:
        """Create a descriptor whose first frame is read from ``cursor``.

        The signature is derived from the cursor description unless given.
        The first frame is capped by ``first_fetch_row_count``; if it is
        already done the cursor is released and the descriptor owns nothing.

        Any failure is raised as CursorAccessError; no descriptor is returned.
        """
        options = load_frame_options(options)
        result_cursor = wrap_cursor(cursor, signature=signature)
        try:
            return cls._create(connection_id, statement_id, result_cursor,
                               max_row_count, signature, options)
        except CursorAccessError:
            logger.error(f'Could not create result set for statement '
                         f'{connection_id}/{statement_id}')
            raise

    @classmethod
    @wrap_cursor_errors('creating first frame')
    def _create(cls, connection_id: str, statement_id: int, cursor: ResultCursor,
                max_row_count: int, signature: Signature | None,
                options: FrameOptions) -> Self:
        if signature is None:
            signature = cursor.metadata
        fetch_row_count = first_fetch_row_count(max_row_count, options.first_frame_max_rows)
        if fetch_row_count != max_row_count:
            logger.debug(f'Clamped first frame of statement {statement_id} from '
                         f'{max_row_count} to {fetch_row_count} rows')
        first_frame = frame(cursor, 0, fetch_row_count, options.context)
        if first_frame.done:
            cursor.close()
        owned = not cursor.closed
        return cls(connection_id, statement_id, owned, signature, first_frame,
                   cursor=cursor if owned else None,
                   data_loader=options.data_loader)

    @classmethod
    def empty(cls, connection_id: str, statement_id: int,
              signature: Signature | None,
              options: FrameOptions | dict | None = None) -> Self:
        """Create a descriptor with an empty, done first frame and no cursor.
        """
        options = load_frame_options(options)
        return cls(connection_id, statement_id, False, signature, EMPTY_FRAME,
                   data_loader=options.data_loader)

    @classmethod
    def count(cls, connection_id: str, statement_id: int, update_count: int) -> Self:
        """Create a descriptor carrying only the update count of a statement.
        """
        return cls(connection_id, statement_id, False, None, None, update_count)

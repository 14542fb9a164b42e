"""
Frames: pages of materialized cursor rows.

The materializer drains up to a row cap from a forward-only cursor. The cap
selects one of three policies:

- 0         empty page, done, nothing consumed and the cursor left open
- negative  drain every remaining row, done, cursor released
- N > 0     at most N rows; done and released only if the cursor ran out
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from cursorframe.coercion import UTC_CONTEXT, TimeZoneContext, get_value
from cursorframe.coercion import to_python
from cursorframe.cursor import ResultCursor
from cursorframe.exceptions import ValidationError, wrap_cursor_errors
from cursorframe.options import iterdict_data_loader
from cursorframe.signature import Signature

logger = logging.getLogger(__name__)

UNLIMITED = -2


@dataclass(frozen=True)
class Frame:
    """An immutable page of canonical rows.

    Attributes:
        offset: Index of the first row of this page within the whole result
        done: True once the cursor is exhausted or the page was capped at zero
        rows: Row tuples, one canonical value per column in column order
    """
    offset: int
    done: bool
    rows: tuple[tuple, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, 'rows', tuple(tuple(row) for row in self.rows))

    @property
    def next_offset(self) -> int:
        """Offset a follow-up fetch of the same cursor should start at."""
        return self.offset + len(self.rows)

    def to_pylist(self) -> list[list[Any]]:
        """Rows with canonical numpy scalars converted to plain Python values."""
        return [[to_python(value) for value in row] for row in self.rows]

    def load(self, signature: Signature, data_loader: Callable[..., Any] | None = None,
             **kwargs: Any) -> Any:
        """Hand the rows to a data loader (list of dicts, DataFrame, ...).
        """
        if data_loader is None:
            data_loader = iterdict_data_loader
        return data_loader(self.to_pylist(), signature, **kwargs)


EMPTY_FRAME = Frame(0, True, ())


@wrap_cursor_errors('materializing frame')
def frame(cursor: ResultCursor, offset: int, fetch_max_row_count: int,
          context: TimeZoneContext = UTC_CONTEXT) -> Frame:
    """Create a frame holding up to ``fetch_max_row_count`` rows of ``cursor``.

    A negative count drains the cursor. Exhausting the cursor releases it.
    A count of zero returns an empty, done frame without touching or
    releasing the cursor; release is then up to the caller.

    Args:
        cursor: Open cursor, advanced in place
        offset: Logical index of the first row of this frame
        fetch_max_row_count: Row cap (0, negative for unlimited, or N > 0)
        context: Timezone context for date/time normalization

    Returns
        Frame
    """
    if offset < 0:
        raise ValidationError(f'Frame offset must not be negative: {offset}')

    types = cursor.column_types()
    column_count = len(types)
    rows: list[tuple] = []
    done = fetch_max_row_count == 0

    i = 0
    while fetch_max_row_count < 0 or i < fetch_max_row_count:
        if not cursor.next():
            done = True
            cursor.close()
            break
        rows.append(tuple(get_value(cursor, j, types[j], context)
                          for j in range(column_count)))
        i += 1

    logger.debug(f'Frame at offset {offset}: {len(rows)} rows, done={done} '
                 f'(cap {fetch_max_row_count})')
    return Frame(offset, done, tuple(rows))


def first_fetch_row_count(max_row_count: int, first_frame_max_rows: int = 100) -> int:
    """Row cap for the first frame of a result.

    -1 and anything above ``first_frame_max_rows`` clamp to
    ``first_frame_max_rows``; UNLIMITED (-2) and other values pass through.
    """
    if max_row_count == -1 or max_row_count > first_frame_max_rows:
        return first_frame_max_rows
    return max_row_count


from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pandas as pd
import pyarrow as pa
from cursorframe.coercion import TimeZoneContext
from cursorframe.exceptions import ValidationError
from cursorframe.types import SqlType

from libb import ConfigOptions, load_options

__all__ = [
    'FrameOptions',
    'load_frame_options',
    'pandas_numpy_data_loader',
    'pandas_pyarrow_data_loader',
    'iterdict_data_loader',
]

# Canonical encodings map onto Arrow types without conversion: DATE is int32
# days, TIME int32 milliseconds of the day, TIMESTAMP int64 epoch milliseconds.
_ARROW_TYPES: dict[SqlType, tuple[pa.DataType, pa.DataType]] = {
    SqlType.BIGINT: (pa.int64(), pa.int64()),
    SqlType.INTEGER: (pa.int32(), pa.int32()),
    SqlType.SMALLINT: (pa.int16(), pa.int16()),
    SqlType.TINYINT: (pa.int8(), pa.int8()),
    SqlType.DOUBLE: (pa.float64(), pa.float64()),
    SqlType.FLOAT: (pa.float64(), pa.float64()),
    SqlType.REAL: (pa.float32(), pa.float32()),
    SqlType.DATE: (pa.int32(), pa.date32()),
    SqlType.TIME: (pa.int32(), pa.time32('ms')),
    SqlType.TIMESTAMP: (pa.int64(), pa.timestamp('ms', tz='UTC')),
}


def iterdict_data_loader(rows, signature, **kwargs) -> list[dict]:
    """Minimal data loader: one dict per row keyed by column name.

    Accepts additional keyword arguments for compatibility with other data
    loaders, but doesn't use them.
    """
    names = signature.column_names
    return [dict(zip(names, row)) for row in rows]


def pandas_numpy_data_loader(rows, signature, **kwargs) -> pd.DataFrame:
    """Pandas DataFrame loader using NumPy dtypes.

    Date/time columns keep their integer encodings. The declared type of each
    column is kept in DataFrame.attrs['sql_types'].
    """
    df = pd.DataFrame.from_records(list(rows), columns=signature.column_names)
    df.attrs['sql_types'] = {col.name: col.sql_type.name for col in signature.columns}
    return df


def pandas_pyarrow_data_loader(rows, signature, **kwargs) -> pd.DataFrame:
    """Pandas DataFrame loader backed by Arrow arrays.

    Columns with a canonical encoding get a typed Arrow array; DATE, TIME and
    TIMESTAMP integers are reinterpreted as date32, time32[ms] and
    timestamp[ms, UTC]. Other columns are inferred by Arrow.
    """
    arrays = []
    for i, col in enumerate(signature.columns):
        values = [row[i] for row in rows]
        if col.sql_type in _ARROW_TYPES:
            storage, logical = _ARROW_TYPES[col.sql_type]
            arrays.append(pa.array(values, type=storage).cast(logical))
        else:
            arrays.append(pa.array(values))
    table = pa.Table.from_arrays(arrays, names=signature.column_names)
    df = table.to_pandas(types_mapper=pd.ArrowDtype)
    df.attrs['sql_types'] = {col.name: col.sql_type.name for col in signature.columns}
    return df


@dataclass
class FrameOptions(ConfigOptions):
    """Options

    - timezone: zone date/time values are normalized through (default: UTC)
    - first_frame_max_rows: cap applied to the first frame when the requested
      cap is -1 or larger than this (default: 100)
    - data_loader: callable used by MetaResultSet.load to turn the first
      frame into the caller's format (default: list of dicts)
    """
    timezone: str = 'UTC'
    first_frame_max_rows: int = 100
    data_loader: Callable[..., Any] | None = None

    def __post_init__(self):
        if self.first_frame_max_rows <= 0:
            raise ValidationError('first_frame_max_rows must be positive')
        try:
            TimeZoneContext.from_name(self.timezone)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if self.data_loader is None:
            self.data_loader = iterdict_data_loader

    @property
    def context(self) -> TimeZoneContext:
        """Timezone context for a fetch under these options."""
        return TimeZoneContext.from_name(self.timezone)


_options_loader = load_options(cls=FrameOptions)(lambda o, c: o)


def load_frame_options(options: 'FrameOptions | dict[str, Any] | str | None' = None,
                       config: Any | None = None, **kw: Any) -> FrameOptions:
    """Resolve options given as FrameOptions, a dict, a config path or keywords.
    """
    if isinstance(options, FrameOptions):
        return options
    if options is None and not kw:
        return FrameOptions()
    return _options_loader(options or {}, config, **kw)

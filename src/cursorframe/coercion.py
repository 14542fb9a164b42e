"""
Value coercion from driver values to canonical column values.

Canonical values are numpy scalars of a fixed width for numeric columns,
integers for date/time columns, and the untouched driver value for every
other declared type. SQL NULL is always None.

Date/time columns are normalized through a TimeZoneContext:
- DATE      -> whole days since 1970-01-01 (int32)
- TIME      -> milliseconds since midnight (int32)
- TIMESTAMP -> milliseconds since the epoch (int64)

Naive driver values are read as wall-clock values in the context zone; aware
values are first converted to the context zone. The same instant therefore
encodes to the same integers whatever zone the driver reported it in.
"""
import datetime
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd
from cursorframe.exceptions import TypeConversionError
from cursorframe.types import SqlType
from dateutil import tz

logger = logging.getLogger(__name__)

MILLIS_PER_DAY = 86_400_000
EPOCH_DATE = datetime.date(1970, 1, 1)
EPOCH = datetime.datetime(1970, 1, 1, tzinfo=tz.UTC)
_ONE_MILLI = datetime.timedelta(milliseconds=1)
_isoparser = dateutil.parser.isoparser()


@dataclass(frozen=True)
class TimeZoneContext:
    """Immutable calendar context used to normalize date/time values.

    One context is shared by every column of every row of a fetch.
    """
    zone: datetime.tzinfo = field(default_factory=lambda: tz.UTC)

    @classmethod
    def from_name(cls, name: str) -> 'TimeZoneContext':
        """Build a context from an IANA zone name such as 'UTC' or 'Europe/Paris'.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f'Timezone must be a non-empty name, got {name!r}')
        zone = tz.UTC if name.upper() in {'UTC', 'GMT', 'Z'} else tz.gettz(name)
        if zone is None:
            raise ValueError(f'Unknown timezone: {name!r}')
        return cls(zone)

    def normalize(self, value: datetime.datetime) -> datetime.datetime:
        """Return ``value`` as an aware datetime in this context's zone."""
        if value.tzinfo is None or value.utcoffset() is None:
            return value.replace(tzinfo=self.zone)
        return value.astimezone(self.zone)


UTC_CONTEXT = TimeZoneContext()


# Numeric coercion

def _coerce_integer(value: Any, dtype: type[np.integer], sql_type: SqlType) -> np.integer:
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise TypeConversionError(
            f'Cannot convert {value!r} to {sql_type.name}') from e
    info = np.iinfo(dtype)
    if not info.min <= number <= info.max:
        raise TypeConversionError(
            f'Value {number} out of range for {sql_type.name}')
    return dtype(number)


def _coerce_floating(value: Any, dtype: type[np.floating], sql_type: SqlType) -> np.floating:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise TypeConversionError(
            f'Cannot convert {value!r} to {sql_type.name}') from e
    if math.isfinite(number) and abs(number) > np.finfo(dtype).max:
        raise TypeConversionError(
            f'Value {number} out of range for {sql_type.name}')
    return dtype(number)


# Date/time coercion

def _parse_datetime(value: str, sql_type: SqlType) -> datetime.datetime:
    """Parse ISO 8601 text (how SQLite stores dates) into a datetime."""
    try:
        return dateutil.parser.isoparse(value)
    except (ValueError, OverflowError) as e:
        raise TypeConversionError(
            f'Cannot parse {value!r} as {sql_type.name}') from e


def _as_datetime(value: Any, sql_type: SqlType) -> datetime.datetime | datetime.date:
    """Unify the date/time representations drivers hand back."""
    if isinstance(value, str):
        return _parse_datetime(value, sql_type)
    if isinstance(value, np.datetime64):
        return pd.Timestamp(value).to_pydatetime()
    if isinstance(value, datetime.date):
        return value
    raise TypeConversionError(
        f'Cannot convert {type(value).__name__} value {value!r} to {sql_type.name}')


def _coerce_date(value: Any, context: TimeZoneContext) -> np.int32:
    value = _as_datetime(value, SqlType.DATE)
    if isinstance(value, datetime.datetime):
        value = context.normalize(value).date()
    return np.int32((value - EPOCH_DATE).days)


def _time_millis(value: datetime.time) -> int:
    return (((value.hour * 60 + value.minute) * 60 + value.second) * 1000
            + value.microsecond // 1000)


def _coerce_time(value: Any, context: TimeZoneContext) -> np.int32:
    if isinstance(value, datetime.timedelta):
        return np.int32((value // _ONE_MILLI) % MILLIS_PER_DAY)
    if isinstance(value, str):
        try:
            value = _isoparser.parse_isotime(value)
        except ValueError:
            value = _parse_datetime(value, SqlType.TIME)
    if isinstance(value, datetime.time):
        if value.tzinfo is not None:
            value = datetime.datetime.combine(EPOCH_DATE, value)
        else:
            return np.int32(_time_millis(value))
    value = _as_datetime(value, SqlType.TIME)
    if not isinstance(value, datetime.datetime):
        raise TypeConversionError(f'Cannot convert date {value!r} to TIME')
    return np.int32(_time_millis(context.normalize(value).time()))


def _coerce_timestamp(value: Any, context: TimeZoneContext) -> np.int64:
    value = _as_datetime(value, SqlType.TIMESTAMP)
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time())
    return np.int64((context.normalize(value) - EPOCH) // _ONE_MILLI)


_NUMERIC_COERCERS: dict[SqlType, Callable[[Any], Any]] = {
    SqlType.BIGINT: lambda v: _coerce_integer(v, np.int64, SqlType.BIGINT),
    SqlType.INTEGER: lambda v: _coerce_integer(v, np.int32, SqlType.INTEGER),
    SqlType.SMALLINT: lambda v: _coerce_integer(v, np.int16, SqlType.SMALLINT),
    SqlType.TINYINT: lambda v: _coerce_integer(v, np.int8, SqlType.TINYINT),
    SqlType.DOUBLE: lambda v: _coerce_floating(v, np.float64, SqlType.DOUBLE),
    SqlType.FLOAT: lambda v: _coerce_floating(v, np.float64, SqlType.FLOAT),
    SqlType.REAL: lambda v: _coerce_floating(v, np.float32, SqlType.REAL),
}

_TEMPORAL_COERCERS: dict[SqlType, Callable[[Any, TimeZoneContext], Any]] = {
    SqlType.DATE: _coerce_date,
    SqlType.TIME: _coerce_time,
    SqlType.TIMESTAMP: _coerce_timestamp,
}


def coerce_value(value: Any, sql_type: SqlType,
                 context: TimeZoneContext = UTC_CONTEXT) -> Any:
    """Convert one driver value to its canonical value for ``sql_type``.

    A stored zero stays zero; only SQL NULL (None, or NaT from pandas-backed
    drivers) becomes None.
    """
    if value is None:
        return None

    if sql_type in _NUMERIC_COERCERS:
        return _NUMERIC_COERCERS[sql_type](value)

    if sql_type in _TEMPORAL_COERCERS:
        if value is pd.NaT:
            return None
        return _TEMPORAL_COERCERS[sql_type](value, context)

    return value


def get_value(cursor: Any, index: int, sql_type: SqlType,
              context: TimeZoneContext = UTC_CONTEXT) -> Any:
    """Read column ``index`` of the cursor's current row as a canonical value.
    """
    return coerce_value(cursor.get(index), sql_type, context)


def to_python(value: Any) -> Any:
    """Convert a canonical value to a plain Python value.
    """
    if isinstance(value, np.generic):
        return value.item()
    return value

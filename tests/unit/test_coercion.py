"""
Tests for value coercion into canonical column values.
"""
import datetime
from decimal import Decimal

import numpy as np
import pandas as pd
import pytest
from cursorframe import ResultCursor, SqlType, TimeZoneContext, TypeConversionError
from cursorframe import coerce_value, frame, to_python
from cursorframe.coercion import MILLIS_PER_DAY, get_value
from dateutil import tz

NEW_YORK = tz.gettz('America/New_York')
PARIS = tz.gettz('Europe/Paris')
NEW_YEAR_2024_MS = 1_704_067_200_000


@pytest.mark.parametrize(('sql_type', 'dtype'), [
    (SqlType.BIGINT, np.int64),
    (SqlType.INTEGER, np.int32),
    (SqlType.SMALLINT, np.int16),
    (SqlType.TINYINT, np.int8),
    (SqlType.DOUBLE, np.float64),
    (SqlType.FLOAT, np.float64),
    (SqlType.REAL, np.float32),
])
def test_numeric_zero_is_not_null(sql_type, dtype):
    """A stored zero coerces to zero of the declared width, never None"""
    value = coerce_value(0, sql_type)

    assert value is not None
    assert isinstance(value, dtype)
    assert value == 0


@pytest.mark.parametrize('sql_type', list(SqlType))
def test_null_is_null_for_every_type(sql_type):
    assert coerce_value(None, sql_type) is None


def test_numeric_widths():
    assert coerce_value(2**40, SqlType.BIGINT) == 2**40
    assert coerce_value(-2**31, SqlType.INTEGER) == -2**31
    assert coerce_value(32767, SqlType.SMALLINT) == 32767
    assert coerce_value(-128, SqlType.TINYINT) == -128
    assert coerce_value(True, SqlType.TINYINT) == 1
    assert coerce_value(Decimal('12'), SqlType.INTEGER) == 12
    assert coerce_value('42', SqlType.BIGINT) == 42


@pytest.mark.parametrize(('value', 'sql_type'), [
    (2**31, SqlType.INTEGER),
    (-32769, SqlType.SMALLINT),
    (128, SqlType.TINYINT),
    (2**63, SqlType.BIGINT),
])
def test_integer_out_of_range(value, sql_type):
    with pytest.raises(TypeConversionError, match='out of range'):
        coerce_value(value, sql_type)


@pytest.mark.parametrize(('value', 'sql_type'), [
    ('abc', SqlType.BIGINT),
    (float('inf'), SqlType.INTEGER),
    (b'\x00', SqlType.DOUBLE),
    ('n/a', SqlType.REAL),
])
def test_unconvertible_numbers(value, sql_type):
    with pytest.raises(TypeConversionError):
        coerce_value(value, sql_type)


def test_floating_values():
    assert coerce_value(Decimal('1.25'), SqlType.DOUBLE) == 1.25
    single = coerce_value(0.1, SqlType.REAL)
    assert isinstance(single, np.float32)
    assert single == np.float32(0.1)


@pytest.mark.parametrize(('value', 'sql_type'), [
    (10**400, SqlType.DOUBLE),
    (1e300, SqlType.REAL),
    (-1e39, SqlType.REAL),
])
def test_floating_out_of_range(value, sql_type):
    with pytest.raises(TypeConversionError):
        coerce_value(value, sql_type)


def test_floating_infinity_is_kept():
    assert np.isinf(coerce_value(float('inf'), SqlType.REAL))
    assert np.isnan(coerce_value(float('nan'), SqlType.DOUBLE))


def test_other_types_pass_through_unchanged():
    payload = {'k': [1, 2]}
    amount = Decimal('10.05')

    assert coerce_value(payload, SqlType.OTHER) is payload
    assert coerce_value(amount, SqlType.NUMERIC) is amount
    assert coerce_value('abc', SqlType.VARCHAR) == 'abc'
    assert coerce_value(b'\x01', SqlType.BINARY) == b'\x01'


# Dates

@pytest.mark.parametrize(('value', 'expected'), [
    (datetime.date(1970, 1, 1), 0),
    (datetime.date(1970, 1, 2), 1),
    (datetime.date(1969, 12, 31), -1),
    (datetime.date(2024, 1, 1), NEW_YEAR_2024_MS // MILLIS_PER_DAY),
    ('2024-01-01', NEW_YEAR_2024_MS // MILLIS_PER_DAY),
])
def test_date_as_days_since_epoch(value, expected):
    days = coerce_value(value, SqlType.DATE)

    assert isinstance(days, np.int32)
    assert days == expected


def test_date_from_aware_datetime_uses_context_zone():
    """An instant just after midnight in Paris is still the previous day in UTC"""
    value = datetime.datetime(2024, 1, 1, 0, 30, tzinfo=PARIS)

    utc_days = coerce_value(value, SqlType.DATE)
    paris_days = coerce_value(value, SqlType.DATE, TimeZoneContext(PARIS))

    assert utc_days == (datetime.date(2023, 12, 31) - datetime.date(1970, 1, 1)).days
    assert paris_days == utc_days + 1


# Times

@pytest.mark.parametrize(('value', 'expected'), [
    (datetime.time(0, 0), 0),
    (datetime.time(0, 0, 1), 1000),
    (datetime.time(16, 30, 0, 250000), 59_400_250),
    (datetime.time(23, 59, 59, 999999), MILLIS_PER_DAY - 1),
    ('16:30:00.250', 59_400_250),
    (datetime.timedelta(hours=1, milliseconds=5), 3_600_005),
    (datetime.timedelta(days=1, seconds=1), 1000),
])
def test_time_as_millis_since_midnight(value, expected):
    millis = coerce_value(value, SqlType.TIME)

    assert isinstance(millis, np.int32)
    assert millis == expected


def test_time_from_aware_time_is_normalized():
    """The same instant expressed in two offsets gives the same milliseconds"""
    utc_time = datetime.time(12, 0, tzinfo=tz.UTC)
    plus_two = datetime.time(14, 0, tzinfo=tz.tzoffset(None, 7200))

    assert coerce_value(utc_time, SqlType.TIME) == coerce_value(plus_two, SqlType.TIME)
    assert coerce_value(plus_two, SqlType.TIME) == 12 * 3_600_000


def test_time_from_datetime_keeps_time_of_day():
    value = datetime.datetime(2024, 6, 1, 8, 15, tzinfo=tz.tzoffset(None, -3600))

    assert coerce_value(value, SqlType.TIME) == (9 * 60 + 15) * 60_000


def test_date_in_time_column_rejected():
    with pytest.raises(TypeConversionError):
        coerce_value(datetime.date(2024, 1, 1), SqlType.TIME)


# Timestamps

def test_timestamp_as_millis_since_epoch():
    naive = datetime.datetime(2024, 1, 1)
    millis = coerce_value(naive, SqlType.TIMESTAMP)

    assert isinstance(millis, np.int64)
    assert millis == NEW_YEAR_2024_MS
    assert coerce_value(datetime.datetime(1969, 12, 31, 23, 59, 59), SqlType.TIMESTAMP) == -1000
    assert coerce_value(datetime.datetime(1970, 1, 1, 0, 0, 0, 1500), SqlType.TIMESTAMP) == 1


def test_same_instant_in_different_zones_is_identical():
    """Instants reported in different zones encode identically under one context"""
    in_utc = datetime.datetime(2024, 1, 1, 12, 0, tzinfo=tz.UTC)
    in_new_york = datetime.datetime(2024, 1, 1, 7, 0, tzinfo=NEW_YORK)
    in_paris = datetime.datetime(2024, 1, 1, 13, 0, tzinfo=PARIS)

    for sql_type in (SqlType.DATE, SqlType.TIME, SqlType.TIMESTAMP):
        encoded = {int(coerce_value(v, sql_type)) for v in (in_utc, in_new_york, in_paris)}
        assert len(encoded) == 1, sql_type


def test_naive_timestamp_read_in_context_zone():
    naive = datetime.datetime(2024, 1, 1)

    paris = coerce_value(naive, SqlType.TIMESTAMP, TimeZoneContext(PARIS))

    assert paris == NEW_YEAR_2024_MS - 3_600_000


def test_timestamp_from_text_and_numpy():
    assert coerce_value('2024-01-01T01:00:00+01:00', SqlType.TIMESTAMP) == NEW_YEAR_2024_MS
    assert coerce_value('2024-01-01 00:00:00', SqlType.TIMESTAMP) == NEW_YEAR_2024_MS
    assert coerce_value(np.datetime64('2024-01-01T00:00:00'), SqlType.TIMESTAMP) == NEW_YEAR_2024_MS
    assert coerce_value(pd.Timestamp('2024-01-01', tz='UTC'), SqlType.TIMESTAMP) == NEW_YEAR_2024_MS


def test_timestamp_from_date_is_midnight():
    assert coerce_value(datetime.date(2024, 1, 1), SqlType.TIMESTAMP) == NEW_YEAR_2024_MS


def test_nat_is_null():
    assert coerce_value(pd.NaT, SqlType.TIMESTAMP) is None
    assert coerce_value(pd.NaT, SqlType.DATE) is None


@pytest.mark.parametrize('sql_type', [SqlType.DATE, SqlType.TIME, SqlType.TIMESTAMP])
def test_unparseable_temporal_values(sql_type):
    with pytest.raises(TypeConversionError):
        coerce_value('not a date', sql_type)
    with pytest.raises(TypeConversionError):
        coerce_value(12345, sql_type)


# Context and helpers

def test_timezone_context_from_name():
    assert TimeZoneContext.from_name('UTC') == TimeZoneContext()
    assert TimeZoneContext.from_name('Europe/Paris').zone is not None
    with pytest.raises(ValueError):
        TimeZoneContext.from_name('Not/AZone')


@pytest.mark.parametrize('name', ['', '  ', None])
def test_timezone_context_requires_a_name(name):
    with pytest.raises(ValueError):
        TimeZoneContext.from_name(name)


def test_to_python():
    assert to_python(np.int64(5)) == 5
    assert type(to_python(np.int64(5))) is int
    assert type(to_python(np.float32(1.5))) is float
    assert to_python('abc') == 'abc'
    assert to_python(None) is None


def test_get_value_reads_current_row(make_cursor):
    cursor = ResultCursor(make_cursor([('a', SqlType.BIGINT), ('b', SqlType.DOUBLE)],
                                      [(0, None)]))
    cursor.next()

    assert get_value(cursor, 0, SqlType.BIGINT) == 0
    assert get_value(cursor, 1, SqlType.DOUBLE) is None


def test_null_price_row(make_cursor):
    """(id BIGINT, name generic, price DOUBLE) with a NULL price keeps the NULL"""
    raw = make_cursor([('id', SqlType.BIGINT), ('name', SqlType.OTHER), ('price', SqlType.DOUBLE)],
                      [(1, 'a', None), (2, 'b', 0.0)])

    page = frame(ResultCursor(raw), 0, -1)

    assert page.to_pylist() == [[1, 'a', None], [2, 'b', 0.0]]
    assert page.rows[0][2] is None
    assert page.rows[1][2] is not None


if __name__ == '__main__':
    __import__('pytest').main([__file__])

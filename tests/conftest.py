"""
Shared fixtures for cursorframe tests.

Provides an in-memory DB-API cursor so the adapter can be exercised without
a database connection.

Usage:
    def test_paging(make_cursor):
        cursor = make_cursor([('id', SqlType.BIGINT)], [(1,), (2,)])
"""
import sqlite3

import pytest
from cursorframe import SqlType


class FakeCursor:
    """Minimal forward-only DB-API cursor over a list of row tuples.
    """

    def __init__(self, columns, rows, fail_on_fetch=None, fail_on_close=False):
        self.description = [(name, type_code, None, None, None, None, True)
                            for name, type_code in columns]
        self._rows = list(rows)
        self._index = 0
        self.fetch_count = 0
        self.close_count = 0
        self.fail_on_fetch = fail_on_fetch
        self.fail_on_close = fail_on_close

    @property
    def closed(self):
        return self.close_count > 0

    def fetchone(self):
        if self.closed:
            raise sqlite3.ProgrammingError('Cannot operate on a closed cursor.')
        self.fetch_count += 1
        if self.fail_on_fetch is not None and self._index == self.fail_on_fetch:
            raise sqlite3.OperationalError('disk I/O error')
        if self._index >= len(self._rows):
            return None
        row = self._rows[self._index]
        self._index += 1
        return row

    def close(self):
        self.close_count += 1
        if self.fail_on_close:
            raise sqlite3.OperationalError('cannot close cursor')

    @property
    def remaining(self):
        return len(self._rows) - self._index


@pytest.fixture
def make_cursor():
    """
    Fixture that provides a factory function to create fake cursors.

    Columns are ``(name, type_code)`` pairs; type codes may be SqlType members.
    """
    def factory(columns, rows, **kwargs):
        return FakeCursor(columns, rows, **kwargs)

    return factory


@pytest.fixture
def numbered_cursor(make_cursor):
    """Factory for a two-column cursor holding ``count`` numbered rows."""
    def factory(count, **kwargs):
        rows = [(i, f'row{i}') for i in range(count)]
        return make_cursor([('id', SqlType.BIGINT), ('label', SqlType.VARCHAR)],
                           rows, **kwargs)

    return factory


@pytest.fixture
def sqlite_conn():
    """Create an in-memory SQLite database for testing"""
    conn = sqlite3.connect(':memory:')

    conn.execute("""
    CREATE TABLE trade (
        trade_id INTEGER PRIMARY KEY,
        symbol TEXT NOT NULL,
        unit_price REAL,
        quantity INTEGER,
        trade_date DATE,
        settle_time TIME,
        created_at TIMESTAMP
    )
    """)

    conn.executemany("""
    INSERT INTO trade (trade_id, symbol, unit_price, quantity, trade_date, settle_time, created_at)
    VALUES (?, ?, ?, ?, ?, ?, ?)
    """, [
        (1, 'AAPL', 0.0, 0, '1970-01-02', '00:00:01', '1970-01-01 00:00:01'),
        (2, 'MSFT', None, None, None, None, None),
        (3, 'IBM', 142.5, 100, '2024-03-15', '16:30:00.250', '2024-03-15T16:30:00+02:00'),
    ])
    conn.commit()

    yield conn
    conn.close()

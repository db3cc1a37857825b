"""
Unit tests for the cursor wrapper and the ConnectionWrapper executor.
"""
import enum
from unittest.mock import MagicMock

import pytest
from daotemplate import ConnectionWrapper, DatabaseOptions, Null, ValueKind
from daotemplate import transaction
from daotemplate.connection import create_url_from_options
from daotemplate.cursor import Cursor
from daotemplate.strategy import PostgresStrategy, SQLiteStrategy


class Flag(enum.Enum):
    OFF = 0
    ON = 1


@pytest.fixture
def sqlite_options():
    return DatabaseOptions(drivername='sqlite', database=':memory:', batch_size=3)


def make_wrapper(options, strategy, rowcount=1, description=None, rows=()):
    sa_connection = MagicMock()
    sa_connection.closed = False
    dbapi_cursor = sa_connection.connection.cursor.return_value
    dbapi_cursor.rowcount = rowcount
    dbapi_cursor.description = description
    dbapi_cursor.fetchall.return_value = list(rows)
    return ConnectionWrapper(sa_connection, options, strategy), dbapi_cursor


def test_execute_converts_params(sqlite_options):
    cn, dbapi_cursor = make_wrapper(sqlite_options, SQLiteStrategy())

    assert cn.execute('INSERT INTO T(A,B,C) VALUES(?,?,?)',
                      ['x', Null(ValueKind.LONG), Flag.ON]) == 1
    dbapi_cursor.execute.assert_called_once_with('INSERT INTO T(A,B,C) VALUES(?,?,?)',
                                                 ('x', None, 1))
    dbapi_cursor.close.assert_called_once()
    assert cn.calls == 1


def test_execute_postgres_placeholders():
    options = DatabaseOptions(hostname='h', username='u', password='p', database='d',
                              port=5432, timeout=30)
    cn, dbapi_cursor = make_wrapper(options, PostgresStrategy())

    cn.execute("UPDATE T SET A=? WHERE B LIKE 'x%'", [1])
    dbapi_cursor.execute.assert_called_once_with("UPDATE T SET A=%s WHERE B LIKE 'x%%'", (1,))


def test_execute_without_params(sqlite_options):
    cn, dbapi_cursor = make_wrapper(sqlite_options, SQLiteStrategy())
    cn.execute('DELETE FROM T')
    dbapi_cursor.execute.assert_called_once_with('DELETE FROM T')


def test_execute_batch_uses_option_batch_size(sqlite_options):
    """Seven parameter sets with batch_size 3 run as three executemany calls"""
    cn, dbapi_cursor = make_wrapper(sqlite_options, SQLiteStrategy(), rowcount=3)

    counts = cn.execute_batch('INSERT INTO T(A) VALUES(?)', [[i] for i in range(7)])

    assert counts == [3, 3, 3]
    sizes = [len(c.args[1]) for c in dbapi_cursor.executemany.call_args_list]
    assert sizes == [3, 3, 1]


def test_execute_batch_explicit_size(sqlite_options):
    cn, dbapi_cursor = make_wrapper(sqlite_options, SQLiteStrategy())
    cn.execute_batch('DELETE FROM T WHERE ID=?', [[1], [2]], 40)
    dbapi_cursor.executemany.assert_called_once_with('DELETE FROM T WHERE ID=?', [(1,), (2,)])


def test_execute_batch_empty(sqlite_options):
    cn, dbapi_cursor = make_wrapper(sqlite_options, SQLiteStrategy())
    assert cn.execute_batch('DELETE FROM T WHERE ID=?', []) == []
    dbapi_cursor.executemany.assert_not_called()


def test_query_maps_rows(sqlite_options):
    cn, _ = make_wrapper(sqlite_options, SQLiteStrategy(),
                         description=[('ID',), ('NAME',)],
                         rows=[(1, 'a'), (2, 'b')])

    result = cn.query('SELECT ID, NAME FROM T', (), lambda row, columns: dict(zip(columns, row)))
    assert result == [{'ID': 1, 'NAME': 'a'}, {'ID': 2, 'NAME': 'b'}]


def test_cursor_columns():
    dbapi_cursor = MagicMock()
    dbapi_cursor.description = [('a', None), ('b', None)]
    assert Cursor(dbapi_cursor, MagicMock(), SQLiteStrategy()).columns == ['a', 'b']
    dbapi_cursor.description = None
    assert Cursor(dbapi_cursor, MagicMock(), SQLiteStrategy()).columns == []


def test_close_once(sqlite_options):
    cn, _ = make_wrapper(sqlite_options, SQLiteStrategy())
    cn.close()
    cn.sa_connection.close.assert_called_once()


def test_transaction_commits(sqlite_options):
    cn, _ = make_wrapper(sqlite_options, SQLiteStrategy())
    with transaction(cn):
        assert cn.in_transaction
        assert cn.driver_connection.isolation_level == 'DEFERRED'
    cn.sa_connection.connection.commit.assert_called_once()
    assert cn.driver_connection.isolation_level is None
    assert not cn.in_transaction


def test_transaction_rolls_back(sqlite_options):
    cn, _ = make_wrapper(sqlite_options, SQLiteStrategy())
    with pytest.raises(RuntimeError, match='boom'), transaction(cn):
        raise RuntimeError('boom')
    cn.sa_connection.connection.rollback.assert_called_once()
    cn.sa_connection.connection.commit.assert_not_called()
    assert cn.driver_connection.isolation_level is None


def test_nested_transaction(sqlite_options):
    cn, _ = make_wrapper(sqlite_options, SQLiteStrategy())
    with transaction(cn), pytest.raises(RuntimeError, match='Nested'):
        transaction(cn)


def test_url_from_options(sqlite_options):
    assert create_url_from_options(sqlite_options).drivername == 'sqlite'

    options = DatabaseOptions(hostname='h', username='u', password='p', database='d',
                              port=5432, timeout=30, appname='app')
    url = create_url_from_options(options)
    assert url.drivername == 'postgresql+psycopg'
    assert url.query['connect_timeout'] == '30'
    assert url.query['application_name'] == 'app'

"""
Unit tests for dialect strategies and their registry.
"""
import datetime
import sqlite3
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from daotemplate.strategy import PostgresStrategy, SQLiteStrategy
from daotemplate.strategy import get_available_dialects, get_strategy
from daotemplate.strategy import get_strategy_class, is_supported_dialect
from daotemplate.strategy.sqlite import adapt_date, adapt_datetime, convert_date
from daotemplate.strategy.sqlite import convert_datetime, convert_decimal


def test_registry():
    assert set(get_available_dialects()) == {'postgresql', 'sqlite'}
    assert is_supported_dialect('sqlite')
    assert not is_supported_dialect('mssql')
    assert get_strategy_class('postgresql') is PostgresStrategy


def test_strategy_instances_are_cached():
    assert get_strategy('sqlite') is get_strategy('sqlite')
    assert isinstance(get_strategy('sqlite'), SQLiteStrategy)


def test_unknown_dialect():
    with pytest.raises(ValueError, match='Unsupported dialect'):
        get_strategy('oracle')


def test_standardize_sql():
    sql = 'UPDATE T SET A=? WHERE ID=?'
    assert get_strategy('postgresql').standardize_sql(sql) == 'UPDATE T SET A=%s WHERE ID=%s'
    assert get_strategy('sqlite').standardize_sql(sql) == sql


def test_postgres_autocommit():
    raw = MagicMock()
    strategy = PostgresStrategy()

    strategy.configure_connection(raw)
    assert raw.driver_connection.autocommit is True

    strategy.disable_autocommit(raw)
    assert raw.autocommit is False


def test_sqlite_autocommit():
    raw = sqlite3.connect(':memory:')
    strategy = SQLiteStrategy()

    strategy.configure_connection(raw)
    assert raw.isolation_level is None
    assert raw.execute('PRAGMA foreign_keys').fetchone()[0] == 1

    strategy.disable_autocommit(raw)
    assert raw.isolation_level == 'DEFERRED'
    raw.close()


def test_sqlite_engine_kwargs():
    kwargs = SQLiteStrategy().get_engine_kwargs(None)
    assert kwargs['connect_args']['detect_types'] == sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES


def test_sqlite_adapters():
    assert adapt_datetime(datetime.datetime(2024, 1, 2, 3, 4, 5)) == '2024-01-02 03:04:05'
    assert adapt_date(datetime.date(2024, 1, 2)) == '2024-01-02'
    assert convert_date(b'2024-01-02') == datetime.date(2024, 1, 2)
    assert convert_datetime(b'2024-01-02 03:04:05') == datetime.datetime(2024, 1, 2, 3, 4, 5)
    assert convert_decimal(b'12.50') == Decimal('12.50')

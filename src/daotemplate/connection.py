"""
Connections: the SQLAlchemy-backed executor DaoTemplate runs against.

`connect()` resolves options, checks a connection out of a cached engine and
configures it through the dialect strategy. The returned ConnectionWrapper
works on the raw DBAPI connection and satisfies the Executor protocol.

Connections run in autocommit mode: every statement is committed as it runs
unless a Transaction is active on the connection.
"""
import atexit
import logging
import threading
from collections.abc import Sequence
from dataclasses import fields
from typing import Any, Self, TypeVar

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from daotemplate.cursor import Cursor
from daotemplate.executor import RowMapper
from daotemplate.options import DatabaseOptions
from daotemplate.strategy import DatabaseStrategy, get_strategy

from libb import load_options

__all__ = [
    'ConnectionWrapper',
    'connect',
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')

_engines: dict[str, Engine] = {}
_engines_lock = threading.RLock()


def create_url_from_options(options: DatabaseOptions) -> sa.URL:
    """SQLAlchemy URL for the options' dialect.
    """
    return get_strategy(options.drivername).create_url(options)


def _pool_kwargs(options: DatabaseOptions) -> dict[str, Any]:
    if not options.use_pool:
        return {'poolclass': NullPool}
    return {
        'pool_size': options.pool_max_connections,
        'pool_recycle': options.pool_max_idle_time,
        'pool_timeout': options.pool_wait_timeout,
        'pool_pre_ping': True,
        'pool_reset_on_return': 'rollback',
        }


def get_engine_for_options(options: DatabaseOptions, **kwargs: Any) -> Engine:
    """Engine for the options, created on first use and cached afterwards.

    Without `use_pool` the engine uses NullPool and every connect() opens a
    new DBAPI connection.
    """
    key = str(options)
    with _engines_lock:
        engine = _engines.get(key)
        if engine is not None:
            return engine

        engine_kwargs = {
            **get_strategy(options.drivername).get_engine_kwargs(options),
            **_pool_kwargs(options),
            **kwargs,
            }
        engine = sa.create_engine(create_url_from_options(options), **engine_kwargs)
        _engines[key] = engine
        logger.debug(f'Created {options.drivername} engine (pooled: {options.use_pool})')
        return engine


def dispose_all_engines() -> None:
    """Dispose and forget every cached engine.
    """
    with _engines_lock:
        for engine in _engines.values():
            engine.dispose()
        _engines.clear()
    logger.debug('Disposed all engines')


atexit.register(dispose_all_engines)


class ConnectionWrapper:
    """Executor over one checked-out SQLAlchemy connection.

    Statements run on the raw DBAPI connection through a Cursor, which
    converts parameters and placeholders. `calls` and `time` accumulate the
    number of statements and the seconds spent running them.
    """

    def __init__(self, sa_connection: sa.engine.Connection,
                 options: DatabaseOptions,
                 strategy: DatabaseStrategy | None = None) -> None:
        self.sa_connection = sa_connection
        self.options = options
        self.dbapi_connection = sa_connection.connection
        self.strategy = strategy or get_strategy(options.drivername)
        self.calls = 0
        self.time = 0.0
        self.in_transaction = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def dialect(self) -> str:
        return self.strategy.dialect_name

    @property
    def driver_connection(self) -> Any:
        """The sqlite3 or psycopg connection under the pool proxy."""
        return self.dbapi_connection.driver_connection

    @property
    def closed(self) -> bool:
        return self.sa_connection.closed

    def cursor(self) -> Cursor:
        return Cursor(self.dbapi_connection.cursor(), self, self.strategy)

    def addcall(self, elapsed: float) -> None:
        self.time += elapsed
        self.calls += 1

    def commit(self) -> None:
        self.dbapi_connection.commit()

    def rollback(self) -> None:
        self.dbapi_connection.rollback()

    def close(self) -> None:
        if self.sa_connection.closed:
            return
        self.sa_connection.close()
        logger.debug(f'Closed connection after {self.calls} statements '
                     f'in {self.time:.2f}s')

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run one statement and return the affected row count.
        """
        cursor = self.cursor()
        try:
            return cursor.execute(sql, params)
        finally:
            cursor.close()

    def execute_batch(self, sql: str, seq_of_params: Sequence[Sequence[Any]],
                      batch_size: int | None = None) -> list[int]:
        """Run one statement per parameter set.

        Parameter sets go to the driver's executemany `batch_size` at a time
        (the `batch_size` option when omitted). Returns the driver's row count
        for each executemany call, which aggregates over that call's sets.
        """
        cursor = self.cursor()
        try:
            return cursor.executemany(sql, seq_of_params,
                                      batch_size or self.options.batch_size)
        finally:
            cursor.close()

    def query(self, sql: str, params: Sequence[Any],
              row_mapper: RowMapper[T]) -> list[T]:
        """Run a query and map each row with `row_mapper(row, columns)`.
        """
        cursor = self.cursor()
        try:
            cursor.execute(sql, params)
            columns = cursor.columns
            return [row_mapper(row, columns) for row in cursor.fetchall()]
        finally:
            cursor.close()


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> ConnectionWrapper:
    """Open a connection.

    Args:
        options: DatabaseOptions, a dict of options, or the name of a section
            in `config`
        config: Config module or object holding option sections
        **kw: Option overrides

    Returns
        ConnectionWrapper in autocommit mode
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options = load_options(cls=DatabaseOptions)(lambda o, c: o)(options, config, **kw)

    sa_connection = get_engine_for_options(options).connect()
    strategy = get_strategy(options.drivername)
    strategy.configure_connection(sa_connection.connection)
    logger.debug(f'Connected to {options.drivername} database {options.database}')

    return ConnectionWrapper(sa_connection, options, strategy)

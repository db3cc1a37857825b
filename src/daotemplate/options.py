"""
Connection options.
"""
from dataclasses import dataclass

from daotemplate.batch import BATCH_SIZE
from daotemplate.strategy import get_available_dialects, get_strategy_class
from daotemplate.strategy import is_supported_dialect

from libb import ConfigOptions, scriptname

__all__ = ['DatabaseOptions']


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options for `connect()`.

    drivername: `postgresql` or `sqlite`. Postgres needs hostname, username,
    password, database, port and timeout; sqlite needs database (a path or
    `:memory:`).

    batch_size: parameter sets per driver executemany call when the caller
    of `execute_batch` gives none.

    Pooling (off by default, every connect() opens a new connection):
    - use_pool: keep connections in a SQLAlchemy QueuePool
    - pool_max_connections: pool size
    - pool_max_idle_time: seconds before a pooled connection is recycled
    - pool_wait_timeout: seconds to wait for a free connection
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    batch_size: int = BATCH_SIZE
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            raise ValueError(f'drivername must be one of: {get_available_dialects()}')
        if self.batch_size < 1:
            raise ValueError(f'batch_size must be positive, got {self.batch_size}')
        self.appname = self.appname or scriptname() or 'python_console'
        get_strategy_class(self.drivername).validate_options(self)

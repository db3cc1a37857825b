"""
SQLite dialect.

sqlite3 stores neither decimals nor timestamps natively. Decimal values are
bound as text and date/datetime values as ISO-8601 text; columns declared
DATE, DATETIME, TIMESTAMP or DECIMAL are parsed back by converters, which
need the connection opened with `detect_types`.
"""
import datetime
import logging
import sqlite3
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import dateutil.parser
import sqlalchemy as sa

from daotemplate.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from daotemplate.options import DatabaseOptions

logger = logging.getLogger(__name__)


def adapt_datetime(val: datetime.datetime) -> str:
    return val.isoformat(' ')


def adapt_date(val: datetime.date) -> str:
    return val.isoformat()


def convert_date(val: bytes) -> datetime.date:
    """Parse a stored ISO-8601 value as a date."""
    return dateutil.parser.isoparse(val.decode()).date()


def convert_datetime(val: bytes) -> datetime.datetime:
    """Parse a stored ISO-8601 value as a datetime."""
    return dateutil.parser.isoparse(val.decode())


def convert_decimal(val: bytes) -> Decimal:
    return Decimal(val.decode())


_adapters = {
    Decimal: str,
    datetime.datetime: adapt_datetime,
    datetime.date: adapt_date,
}

_converters = {
    'date': convert_date,
    'datetime': convert_datetime,
    'timestamp': convert_datetime,
    'decimal': convert_decimal,
}


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):

    @property
    def dialect_name(self) -> str:
        return 'sqlite'

    def create_url(self, options: 'DatabaseOptions') -> sa.URL:
        return sa.URL.create(drivername='sqlite', database=options.database)

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        detect_types = sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
        return {'connect_args': {'detect_types': detect_types}}

    @classmethod
    def get_required_options(cls) -> list[str]:
        return ['database']

    def register_type_adapters(self) -> None:
        """Install the module-wide sqlite3 adapters and converters.
        """
        for python_type, adapter in _adapters.items():
            sqlite3.register_adapter(python_type, adapter)
        for decltype, converter in _converters.items():
            sqlite3.register_converter(decltype, converter)

    def configure_connection(self, conn: Any) -> None:
        sqlite_conn = self.driver_connection(conn)
        self.register_type_adapters()
        sqlite_conn.execute('PRAGMA foreign_keys = ON')
        self.enable_autocommit(sqlite_conn)
        logger.debug('Configured sqlite connection')

    def enable_autocommit(self, raw_conn: Any) -> None:
        """No implicit BEGIN; every statement commits on its own."""
        raw_conn.isolation_level = None

    def disable_autocommit(self, raw_conn: Any) -> None:
        """sqlite3 opens a transaction before the next DML statement."""
        raw_conn.isolation_level = 'DEFERRED'

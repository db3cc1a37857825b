"""
PostgreSQL dialect over psycopg 3.

psycopg binds Decimal, datetime and bool natively. Its placeholder is `%s`,
so generated statements are rewritten before execution and literal percent
signs are doubled.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa

from daotemplate.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from daotemplate.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):

    @property
    def dialect_name(self) -> str:
        return 'postgresql'

    def create_url(self, options: 'DatabaseOptions') -> sa.URL:
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        if options.appname:
            query['application_name'] = options.appname
        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port,
            database=options.database,
            query=query,
            )

    @classmethod
    def get_required_options(cls) -> list[str]:
        return ['hostname', 'username', 'password', 'database', 'port', 'timeout']

    def configure_connection(self, conn: Any) -> None:
        self.enable_autocommit(self.driver_connection(conn))
        logger.debug('Configured postgresql connection')

    def enable_autocommit(self, raw_conn: Any) -> None:
        raw_conn.autocommit = True

    def disable_autocommit(self, raw_conn: Any) -> None:
        raw_conn.autocommit = False

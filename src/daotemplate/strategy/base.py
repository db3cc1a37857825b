"""
Dialect strategy interface.

A strategy owns everything that differs between supported databases: the
SQLAlchemy URL and engine arguments, driver adapters, how autocommit is
switched on the raw connection, and the placeholder style. ConnectionWrapper
and Cursor only talk to this interface.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa

from daotemplate.sql import standardize_placeholders

if TYPE_CHECKING:
    from daotemplate.options import DatabaseOptions

# dialect name -> strategy class, filled by register_strategy
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Class decorator registering a strategy under a dialect name.

    Usage:
        @register_strategy('sqlite')
        class SQLiteStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Per-dialect connection and statement handling.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Dialect identifier, also the `drivername` option value."""

    @abstractmethod
    def create_url(self, options: 'DatabaseOptions') -> sa.URL:
        """SQLAlchemy URL for the options.
        """

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Extra create_engine arguments.
        """
        return {}

    @abstractmethod
    def configure_connection(self, conn: Any) -> None:
        """Prepare a freshly checked out DBAPI connection.

        Implementations register type adapters and switch autocommit on, so
        statements outside a Transaction are committed as they run.
        """

    @abstractmethod
    def enable_autocommit(self, raw_conn: Any) -> None:
        """Turn autocommit on for a driver connection."""

    @abstractmethod
    def disable_autocommit(self, raw_conn: Any) -> None:
        """Turn autocommit off for a driver connection."""

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Option fields that must be set for this dialect."""

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Raise ValueError naming the first required option that is unset.
        """
        for name in cls.get_required_options():
            if not getattr(options, name):
                raise ValueError(f'field {name} cannot be None or 0')

    def standardize_sql(self, sql: str, has_params: bool = True) -> str:
        """Rewrite generated `?` placeholders into this dialect's style.
        """
        return standardize_placeholders(sql, self.dialect_name, has_params)

    @staticmethod
    def driver_connection(conn: Any) -> Any:
        """Unwrap a pooled SQLAlchemy connection to the driver's own object."""
        return getattr(conn, 'driver_connection', conn)

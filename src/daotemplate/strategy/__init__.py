"""
Registered dialect strategies and lookup helpers.
"""
from functools import cache

from daotemplate.strategy.base import _STRATEGY_REGISTRY
from daotemplate.strategy.base import DatabaseStrategy as DatabaseStrategy
from daotemplate.strategy.base import register_strategy as register_strategy
from daotemplate.strategy.postgres import PostgresStrategy as PostgresStrategy
from daotemplate.strategy.sqlite import SQLiteStrategy as SQLiteStrategy


def get_strategy_class(dialect: str) -> type[DatabaseStrategy]:
    """Strategy class registered for `dialect`.

    Raises ValueError for unknown dialects.
    """
    try:
        return _STRATEGY_REGISTRY[dialect]
    except KeyError:
        raise ValueError(f'Unsupported dialect: {dialect}. '
                         f'Available: {get_available_dialects()}') from None


@cache
def get_strategy(dialect: str) -> DatabaseStrategy:
    """Shared strategy instance for `dialect`.
    """
    return get_strategy_class(dialect)()


def get_available_dialects() -> list[str]:
    return list(_STRATEGY_REGISTRY)


def is_supported_dialect(dialect: str) -> bool:
    return dialect in _STRATEGY_REGISTRY

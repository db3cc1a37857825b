"""
DBAPI cursor wrapper used by ConnectionWrapper.

Parameters are converted for binding (typed nulls to None, enum members to
ordinals) and `?` placeholders are rewritten for the dialect. Each statement
is logged at DEBUG with its arguments and timing, and logged at ERROR when
the driver raises.
"""
import logging
import time
from collections.abc import Sequence
from functools import wraps
from typing import Any

from daotemplate.coercion import convert_params

logger = logging.getLogger(__name__)


def dumpsql(describe):
    """Log and time a cursor method taking the SQL as its first argument.

    `describe(args)` renders the remaining arguments for the log line.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, operation: str, *args: Any, **kwargs: Any):
            start = time.time()
            logger.debug(f'SQL:\n{operation}\n{describe(args)}')
            try:
                return func(self, operation, *args, **kwargs)
            except Exception:
                logger.error(f'Error with {func.__name__}:\nSQL:\n{operation}\n{describe(args)}')
                raise
            finally:
                elapsed = time.time() - start
                self.connwrapper.addcall(elapsed)
                logger.debug(f'{func.__name__} time: {elapsed:.4f}s')
        return wrapper
    return decorator


def _args(args):
    return f'args: {args[0] if args else ()}'


def _rows(args):
    return f'params: {len(args[0]) if args else 0} rows'


class Cursor:

    def __init__(self, cursor: Any, connection_wrapper: Any, strategy: Any) -> None:
        self.dbapi_cursor = cursor
        self.connwrapper = connection_wrapper
        self.strategy = strategy

    def __getattr__(self, name: str) -> Any:
        return getattr(self.dbapi_cursor, name)

    @property
    def description(self) -> list[tuple] | None:
        return self.dbapi_cursor.description

    @property
    def columns(self) -> list[str]:
        """Labels of the last result set, empty for statements without one."""
        return [desc[0] for desc in (self.dbapi_cursor.description or [])]

    @property
    def rowcount(self) -> int:
        return self.dbapi_cursor.rowcount

    def close(self) -> None:
        self.dbapi_cursor.close()

    def fetchall(self) -> list[tuple]:
        return self.dbapi_cursor.fetchall()

    @dumpsql(_args)
    def execute(self, operation: str, params: Sequence[Any] = ()) -> int:
        """Run one statement and return the driver's row count.
        """
        params = convert_params(params)
        operation = self.strategy.standardize_sql(operation, has_params=bool(params))
        if params:
            self.dbapi_cursor.execute(operation, params)
        else:
            self.dbapi_cursor.execute(operation)
        return self.dbapi_cursor.rowcount

    @dumpsql(_rows)
    def executemany(self, operation: str, seq_of_parameters: Sequence[Sequence[Any]],
                    batch_size: int = 40) -> list[int]:
        """Run the statement for every parameter set, `batch_size` sets per
        driver executemany call.

        Returns one row count per executemany call.
        """
        if not seq_of_parameters:
            logger.warning('executemany called with no parameter sequences')
            return []

        operation = self.strategy.standardize_sql(operation)
        seq_of_parameters = [convert_params(p) for p in seq_of_parameters]

        rowcounts = []
        for start in range(0, len(seq_of_parameters), batch_size):
            self.dbapi_cursor.executemany(operation, seq_of_parameters[start:start + batch_size])
            rowcounts.append(self.dbapi_cursor.rowcount)
        return rowcounts

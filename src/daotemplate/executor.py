"""
The executor boundary.

DaoTemplate never talks to a connection directly. It generates SQL, binds
parameters and maps rows, and leaves running the statements to an object
satisfying the Executor protocol. ConnectionWrapper is the implementation
shipped with this package.
"""
from collections.abc import Callable, Sequence
from typing import Any, Protocol, TypeVar

T = TypeVar('T')

RowMapper = Callable[[Sequence[Any], Sequence[str]], T]


class Executor(Protocol):
    """Runs parameterized SQL.

    Parameters are positional; items may be Null to bind a typed NULL.
    """

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute one statement and return the affected row count."""

    def execute_batch(self, sql: str, seq_of_params: Sequence[Sequence[Any]],
                      batch_size: int | None = None) -> list[int]:
        """Execute one statement per parameter set.

        Returns affected row counts; drivers that only report an aggregate
        return it as a single element.
        """

    def query(self, sql: str, params: Sequence[Any],
              row_mapper: RowMapper[T]) -> list[T]:
        """Execute a query and map each row with `row_mapper(row, columns)`."""

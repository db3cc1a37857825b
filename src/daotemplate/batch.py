"""
Splitting of unbounded record and id sequences into batch-sized groups.
"""
from collections.abc import Iterable
from typing import TypeVar

from more_itertools import chunked

T = TypeVar('T')

BATCH_SIZE = 40


def chunk(items: Iterable[T], size: int = BATCH_SIZE) -> list[list[T]]:
    """Split `items` into contiguous groups of at most `size` items.

    Order is preserved and an empty input yields no groups.

    Example:
        >>> chunk(range(5), 2)
        [[0, 1], [2, 3], [4]]
    """
    if size < 1:
        raise ValueError(f'chunk size must be positive, got {size}')
    return list(chunked(items, size))

"""
Unit tests for splitting items into batch-sized groups.
"""
import math

import pytest
from daotemplate.batch import BATCH_SIZE, chunk


def test_default_batch_size():
    assert BATCH_SIZE == 40


def test_empty_input_yields_no_groups():
    assert chunk([]) == []
    assert chunk(iter([]), 3) == []


def test_exact_multiple():
    """80 items in groups of 40 give exactly two full groups"""
    groups = chunk(list(range(80)), 40)
    assert [len(g) for g in groups] == [40, 40]


def test_remainder_group():
    groups = chunk(list(range(81)), 40)
    assert [len(g) for g in groups] == [40, 40, 1]
    assert groups[-1] == [80]


@pytest.mark.parametrize(('count', 'size'), [(1, 40), (39, 40), (41, 40), (7, 3), (100, 1)])
def test_group_count_and_order(count, size):
    """Groups are contiguous, in order, and their concatenation is the input"""
    items = [f'item-{i}' for i in range(count)]
    groups = chunk(items, size)
    assert len(groups) == math.ceil(count / size)
    assert all(len(g) <= size for g in groups)
    assert [x for g in groups for x in g] == items


def test_accepts_generators():
    groups = chunk((i * 2 for i in range(5)), 2)
    assert groups == [[0, 2], [4, 6], [8]]


@pytest.mark.parametrize('size', [0, -1])
def test_size_must_be_positive(size):
    with pytest.raises(ValueError, match='positive'):
        chunk([1, 2, 3], size)

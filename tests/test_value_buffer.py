# tests/test_value_buffer.py
"""Tests for the growable value buffer."""

import pytest

from median_agg.core import INITIAL_CAPACITY, ValueBuffer
from median_agg.types import DEFAULT_REGISTRY, INT4_OID


@pytest.fixture
def raw():
    return DEFAULT_REGISTRY.value_type(INT4_OID).raw


class TestValueBuffer:
    """Test ValueBuffer growth and compaction."""

    def test_initial_state(self):
        buffer = ValueBuffer()
        assert buffer.count == 0
        assert buffer.capacity == INITIAL_CAPACITY == 8
        assert list(buffer) == []

    def test_capacity_doubles_on_overflow(self):
        """Capacity only grows when an append would exceed it."""
        buffer = ValueBuffer()
        for i in range(8):
            buffer.append(i)
        assert buffer.capacity == 8

        buffer.append(8)
        assert buffer.capacity == 16
        assert buffer.count == 9

        for i in range(9, 17):
            buffer.append(i)
        assert buffer.capacity == 32
        assert list(buffer) == list(range(17))

    def test_remove_first_match_compacts_left(self, raw):
        buffer = ValueBuffer()
        for v in [5, 1, 7, 1, 9]:
            buffer.append(v)

        assert buffer.remove_first_match(1, raw) is True
        assert list(buffer) == [5, 7, 1, 9]
        assert buffer.count == 4

    def test_remove_missing_is_noop(self, raw):
        buffer = ValueBuffer()
        for v in [3, 4]:
            buffer.append(v)

        assert buffer.remove_first_match(42, raw) is False
        assert list(buffer) == [3, 4]

    def test_remove_never_shrinks_capacity(self, raw):
        buffer = ValueBuffer()
        for i in range(20):
            buffer.append(i)
        for i in range(20):
            buffer.remove_first_match(i, raw)

        assert buffer.count == 0
        assert buffer.capacity == 32

    def test_sort_puts_nulls_last(self):
        buffer = ValueBuffer.from_values([3, None, 1, 2], capacity=8)
        buffer.sort()
        assert list(buffer) == [1, 2, 3, None]

    def test_copy_is_independent(self):
        buffer = ValueBuffer()
        buffer.append(1)
        clone = buffer.copy()
        clone.append(2)

        assert list(buffer) == [1]
        assert list(clone) == [1, 2]
        assert clone.capacity == buffer.capacity

    def test_from_values_rejects_small_capacity(self):
        with pytest.raises(ValueError):
            ValueBuffer.from_values([1, 2, 3], capacity=2)

    def test_indexing(self):
        buffer = ValueBuffer.from_values([10, 20, 30], capacity=8)
        assert buffer[0] == 10
        assert buffer[-1] == 30
        with pytest.raises(IndexError):
            buffer[3]

    def test_large_capacity_is_reserved_lazily(self):
        buffer = ValueBuffer(1 << 28)
        assert buffer.capacity == 1 << 28
        assert buffer.count == 0
        assert buffer._values == []
        buffer.append(1)
        assert buffer.capacity == 1 << 28
        assert list(buffer) == [1]

    def test_null_count(self):
        buffer = ValueBuffer.from_values([None, 1, None, 2], capacity=8)
        assert buffer.null_count() == 2
        buffer.sort()
        assert list(buffer) == [1, 2, None, None]

# tests/test_codec.py
"""Tests for median state serialization."""

import uuid
from datetime import date
from decimal import Decimal

import numpy as np
import pytest

from median_agg.codec import HEADER_DTYPE, decode, encode
from median_agg.config import CodecConfig
from median_agg.core import OrderStatisticEngine, ValueBuffer, add, finalize, merge, remove
from median_agg.errors import CorruptDataError, TypeResolutionError
from median_agg.types import (
    DATE_OID,
    DEFAULT_REGISTRY,
    FLOAT4_OID,
    FLOAT8_OID,
    INT4_OID,
    NUMERIC_OID,
    POINT_OID,
    TEXT_OID,
    UUID_OID,
)


def build(values, type_id=INT4_OID):
    state = add(None, None, type_id)
    for value in values:
        state = add(state, value, type_id)
    return state


def header(type_id, count, capacity):
    data = np.zeros(1, dtype=HEADER_DTYPE)
    data["type_id"] = type_id
    data["count"] = count
    data["capacity"] = capacity
    return data.tobytes()


def assert_same_state(restored, original):
    assert restored.type_id == original.type_id
    assert restored.count == original.count
    assert restored.capacity == original.capacity
    raw = original.value_type.raw
    assert [raw(v) for v in restored.buffer] == [raw(v) for v in original.buffer]


class TestEncode:

    def test_header_layout(self):
        blob = encode(build([1, 2, 3]))
        assert HEADER_DTYPE.itemsize == 20
        assert blob[:4] == INT4_OID.to_bytes(4, "little")
        assert blob[4:12] == (3).to_bytes(8, "little")
        assert blob[12:20] == (8).to_bytes(8, "little")
        # flag + 4 value bytes per record
        assert len(blob) == 20 + 3 * 5

    def test_fixed_width_record(self):
        blob = encode(build([7]))
        assert blob[20:] == b"\x00" + (7).to_bytes(4, "little")

    def test_variable_width_record(self):
        blob = encode(build(["héllo"], TEXT_OID))
        payload = "héllo".encode("utf-8")
        assert blob[20:] == b"\x00" + len(payload).to_bytes(4, "little") + payload

    def test_zero_value_is_not_null(self):
        """A zero datum is written as a value, never as a null record."""
        blob = encode(build([0]))
        assert blob[20] == 0
        assert decode(blob).buffer[0] == 0

    def test_absent_state(self):
        assert encode(None) is None
        assert decode(None) is None


class TestRoundTrip:

    @pytest.mark.parametrize("type_id,values", [
        (INT4_OID, [3, -1, 0, 2**31 - 1, 5, 5, 8, 9, 10]),
        (FLOAT8_OID, [0.0, -0.0, 1.5, float("inf")]),
        (NUMERIC_OID, [Decimal("1.0"), Decimal("1.00"), Decimal("-3.14159")]),
        (TEXT_OID, ["", "apple", "ünïcode"]),
        (DATE_OID, [date(2024, 2, 29), date(1970, 1, 1)]),
        (UUID_OID, [uuid.UUID(int=1), uuid.UUID(int=2**128 - 1)]),
    ])
    def test_round_trip(self, type_id, values):
        state = build(values, type_id)
        restored = decode(encode(state))
        assert_same_state(restored, state)
        assert restored.comparator.type_id == type_id

    def test_empty_state(self):
        state = build([])
        restored = decode(encode(state))
        assert_same_state(restored, state)
        assert finalize(restored) is None

    def test_capacity_survives_removal(self):
        state = build(range(20))
        for value in range(15):
            remove(state, value)
        restored = decode(encode(state))
        assert restored.capacity == 32
        assert list(restored.buffer) == [15, 16, 17, 18, 19]

    @pytest.mark.parametrize("type_name", ["int4", "float4", "numeric", "timestamptz"])
    @pytest.mark.parametrize("n", [1, 2, 256, 257])
    def test_median_survives(self, type_name, n, sample_values):
        type_id = DEFAULT_REGISTRY.lookup(type_name).type_id
        state = build(sample_values(type_name, n), type_id)
        restored = decode(encode(state))
        assert_same_state(restored, state)
        assert list(restored.buffer) == list(state.buffer)
        assert finalize(restored) == finalize(state)

    def test_float4_value_reads_back_unchanged(self):
        state = build([1.1, 2.2, 3.3, 4.4, 5.5], FLOAT4_OID)
        assert finalize(decode(encode(state))) == finalize(state) == float(np.float32(3.3))

    def test_decoded_partials_merge(self):
        left = decode(encode(build([1, 2, 3])))
        right = decode(encode(build([4, 5, 6, 7])))
        assert finalize(merge(left, right)) == 4

    def test_null_records(self):
        buffer = ValueBuffer.from_values([2, None, 1], capacity=8)
        state = OrderStatisticEngine(
            DEFAULT_REGISTRY.resolve_comparator(INT4_OID),
            DEFAULT_REGISTRY.value_type(INT4_OID),
            buffer,
        )
        blob = encode(state)
        assert blob[20 + 5] == 1
        restored = decode(blob)
        assert list(restored.buffer) == [2, None, 1]

    def test_decoded_nulls_are_skipped_by_finalize(self):
        blob = (
            header(INT4_OID, 3, 8)
            + b"\x01"
            + b"\x00" + (5).to_bytes(4, "little")
            + b"\x01"
        )
        restored = decode(blob)
        assert restored.count == 3
        assert finalize(restored) == 5

    def test_decoded_nulls_with_even_values(self):
        blob = (
            header(INT4_OID, 3, 8)
            + b"\x00" + (9).to_bytes(4, "little")
            + b"\x01"
            + b"\x00" + (1).to_bytes(4, "little")
        )
        assert finalize(decode(blob)) == 5

    def test_accepts_bytearray_and_memoryview(self):
        blob = encode(build([1, 2]))
        assert decode(bytearray(blob)).count == 2
        assert decode(memoryview(blob)).count == 2


class TestDecodeErrors:

    def test_truncated_header(self):
        with pytest.raises(CorruptDataError):
            decode(b"\x17\x00\x00")

    @pytest.mark.parametrize("cut", [1, 5, 10, 20, 24])
    def test_truncated_records(self, cut):
        blob = encode(build([1, 2, 3, 4, 5]))
        with pytest.raises(CorruptDataError):
            decode(blob[:-cut])

    def test_truncated_variable_payload(self):
        blob = encode(build(["abcdef"], TEXT_OID))
        with pytest.raises(CorruptDataError):
            decode(blob[:-2])

    def test_negative_count(self):
        with pytest.raises(CorruptDataError):
            decode(header(INT4_OID, -1, 8))

    @pytest.mark.parametrize("capacity", [0, 2])
    def test_capacity_too_small(self, capacity):
        blob = header(INT4_OID, 3, capacity) + b"\x00\x01\x00\x00\x00" * 3
        with pytest.raises(CorruptDataError):
            decode(blob)

    def test_capacity_limit(self):
        blob = header(INT4_OID, 0, 1 << 20)
        with pytest.raises(CorruptDataError):
            decode(blob, config=CodecConfig(max_capacity=1 << 16))
        assert decode(blob).capacity == 1 << 20

    def test_large_capacity_is_not_materialized(self):
        restored = decode(header(INT4_OID, 0, CodecConfig().max_capacity))
        assert restored.capacity == CodecConfig().max_capacity
        assert restored.count == 0
        assert list(restored.buffer) == []
        add(restored, 1, INT4_OID)
        assert restored.capacity == CodecConfig().max_capacity

    def test_count_larger_than_payload(self):
        with pytest.raises(CorruptDataError):
            decode(header(INT4_OID, 1000, 1024) + b"\x00")

    def test_invalid_null_flag(self):
        blob = header(INT4_OID, 1, 8) + b"\x07" + b"\x00" * 4
        with pytest.raises(CorruptDataError):
            decode(blob)

    def test_negative_length(self):
        blob = header(TEXT_OID, 1, 8) + b"\x00" + (-1).to_bytes(4, "little", signed=True)
        with pytest.raises(CorruptDataError):
            decode(blob)

    def test_trailing_bytes(self):
        blob = encode(build([1]))
        with pytest.raises(CorruptDataError):
            decode(blob + b"\x00")

    def test_invalid_payload(self):
        payload = b"\xff\xfe"
        blob = header(TEXT_OID, 1, 8) + b"\x00" + len(payload).to_bytes(4, "little") + payload
        with pytest.raises(CorruptDataError) as excinfo:
            decode(blob)
        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)

    def test_invalid_numeric_payload(self):
        payload = b"abc"
        blob = header(NUMERIC_OID, 1, 8) + b"\x00" + len(payload).to_bytes(4, "little") + payload
        with pytest.raises(CorruptDataError):
            decode(blob)

    def test_unknown_type(self):
        with pytest.raises(TypeResolutionError):
            decode(header(123456, 0, 8))

    def test_type_without_ordering(self):
        with pytest.raises(TypeResolutionError):
            decode(header(POINT_OID, 0, 8))

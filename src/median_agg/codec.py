"""Binary serialization of median states.

Layout (all multi-byte fields little-endian)::

    [ type_id: uint32 ][ count: int64 ][ capacity: int64 ]
    count times:
        [ null_flag: uint8 ]                      0 = value follows, 1 = null
        fixed-width type:    [ raw value: layout.width bytes ]
        variable-width type: [ length: int32 ][ payload: length bytes ]

The comparator is never written; ``decode`` resolves it again from
``type_id`` through the type registry.
"""

import logging
from typing import Any, Optional, Union

import numpy as np

from .config import CodecConfig
from .core.engine import OrderStatisticEngine
from .core.value_buffer import ValueBuffer
from .errors import CorruptDataError
from .types import DEFAULT_REGISTRY, TypeRegistry, ValueType

logger = logging.getLogger(__name__)

HEADER_DTYPE = np.dtype([
    ("type_id", "<u4"),
    ("count", "<i8"),
    ("capacity", "<i8"),
])
LENGTH_DTYPE = np.dtype("<i4")

NOT_NULL = b"\x00"
NULL = b"\x01"

BytesLike = Union[bytes, bytearray, memoryview]


def encode(state: Optional[OrderStatisticEngine]) -> Optional[bytes]:
    """Serialize ``state``; an absent state serializes to None."""
    if state is None:
        return None

    header = np.zeros(1, dtype=HEADER_DTYPE)
    header["type_id"] = state.type_id
    header["count"] = state.count
    header["capacity"] = state.capacity

    value_type = state.value_type
    fixed_width = value_type.layout.fixed_width
    parts = [header.tobytes()]
    for value in state.buffer:
        if value is None:
            parts.append(NULL)
            continue
        payload = value_type.raw(value)
        parts.append(NOT_NULL)
        if not fixed_width:
            if len(payload) > np.iinfo(LENGTH_DTYPE).max:
                raise ValueError(
                    f"{value_type.name} value of {len(payload)} bytes is too large to serialize"
                )
            parts.append(np.asarray(len(payload), dtype=LENGTH_DTYPE).tobytes())
        parts.append(payload)
    return b"".join(parts)


class _Reader:
    """Bounds-checked cursor over a byte sequence."""

    def __init__(self, data: BytesLike):
        self._data = memoryview(data).cast("B")
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset

    def take(self, size: int, what: str) -> memoryview:
        if size > self.remaining:
            raise CorruptDataError(
                f"Truncated median state: {what} needs {size} bytes at offset "
                f"{self.offset}, only {self.remaining} left"
            )
        chunk = self._data[self.offset:self.offset + size]
        self.offset += size
        return chunk


def _read_value(reader: _Reader, value_type: ValueType, index: int) -> Any:
    flag = reader.take(1, f"null flag of record {index}")[0]
    if flag == NULL[0]:
        return None
    if flag != NOT_NULL[0]:
        raise CorruptDataError(f"Invalid null flag {flag} in record {index}")

    layout = value_type.layout
    if layout.fixed_width:
        payload = reader.take(layout.width, f"record {index}")
    else:
        length = int(np.frombuffer(reader.take(LENGTH_DTYPE.itemsize, f"length of record {index}"),
                                   dtype=LENGTH_DTYPE, count=1)[0])
        if length < 0:
            raise CorruptDataError(f"Negative length {length} in record {index}")
        payload = reader.take(length, f"record {index}")

    try:
        return value_type.unpack(bytes(payload))
    except (ValueError, ArithmeticError) as exc:
        raise CorruptDataError(
            f"Record {index} is not a valid {value_type.name} value"
        ) from exc


def decode(
    data: Optional[BytesLike],
    registry: Optional[TypeRegistry] = None,
    config: Optional[CodecConfig] = None,
) -> Optional[OrderStatisticEngine]:
    """Rebuild a median state from bytes produced by ``encode``.

    Raises:
        CorruptDataError: The bytes are truncated or malformed
        TypeResolutionError: ``type_id`` has no comparator in ``registry``
    """
    if data is None:
        return None
    registry = registry or DEFAULT_REGISTRY
    config = config or CodecConfig()

    reader = _Reader(data)
    header = np.frombuffer(reader.take(HEADER_DTYPE.itemsize, "header"),
                           dtype=HEADER_DTYPE, count=1)[0]
    type_id = int(header["type_id"])
    count = int(header["count"])
    capacity = int(header["capacity"])

    if count < 0:
        raise CorruptDataError(f"Negative value count {count}")
    if capacity < 1 or capacity < count:
        raise CorruptDataError(f"Capacity {capacity} cannot hold {count} values")
    if capacity > config.max_capacity:
        raise CorruptDataError(
            f"Capacity {capacity} exceeds the limit of {config.max_capacity}"
        )
    # every record carries at least its null flag
    if count > reader.remaining:
        raise CorruptDataError(
            f"Header announces {count} values but only {reader.remaining} bytes follow"
        )

    comparator = registry.resolve_comparator(type_id)
    value_type = registry.value_type(type_id)

    values = [_read_value(reader, value_type, index) for index in range(count)]
    if reader.remaining:
        raise CorruptDataError(f"{reader.remaining} trailing bytes after last record")

    buffer = ValueBuffer.from_values(values, capacity)
    logger.debug(
        f"Decoded median state of type {value_type.name}: "
        f"{count} values, capacity {capacity}"
    )
    return OrderStatisticEngine(comparator, value_type, buffer)

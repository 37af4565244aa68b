"""Built-in value types, keyed by their PostgreSQL type OIDs.

Fixed-width types are packed with explicit little-endian numpy dtypes so the
raw representation is identical on every platform. Types that PostgreSQL
passes by reference (uuid, point) are packed from their payload bytes.
"""

import math
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from functools import partial

import numpy as np

from .registry import TypeLayout, TypeRegistry, ValueType

BOOL_OID = 16
BYTEA_OID = 17
INT8_OID = 20
INT2_OID = 21
INT4_OID = 23
TEXT_OID = 25
POINT_OID = 600
FLOAT4_OID = 700
FLOAT8_OID = 701
VARCHAR_OID = 1043
DATE_OID = 1082
TIMESTAMPTZ_OID = 1184
NUMERIC_OID = 1700
UUID_OID = 2950

# PostgreSQL counts dates and timestamps from 2000-01-01
PG_EPOCH_DATE = date(2000, 1, 1)
PG_EPOCH = datetime(2000, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


# ---------------------------------------------------------------- comparison

def compare_default(left, right) -> int:
    return (left > right) - (left < right)


def compare_float(left: float, right: float) -> int:
    """NaN sorts after every other value and equal to itself."""
    left_nan, right_nan = math.isnan(left), math.isnan(right)
    if left_nan or right_nan:
        return int(left_nan) - int(right_nan)
    return compare_default(left, right)


def compare_numeric(left: Decimal, right: Decimal) -> int:
    left_nan, right_nan = left.is_nan(), right.is_nan()
    if left_nan or right_nan:
        return int(left_nan) - int(right_nan)
    return compare_default(left, right)


# ---------------------------------------------------------- pack / unpack

def pack_scalar(dtype: np.dtype, value) -> bytes:
    if dtype.kind == "i":
        try:
            integral = int(value)
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"{value!r} is not an integer") from None
        if integral != value:
            raise ValueError(f"{value!r} is not an integer")
        value = integral
        info = np.iinfo(dtype)
        if not info.min <= value <= info.max:
            raise OverflowError(f"{value} is out of range for {dtype}")
    return np.asarray(value, dtype=dtype).tobytes()


def unpack_scalar(dtype: np.dtype, data: bytes):
    return np.frombuffer(data, dtype=dtype, count=1)[0].item()


def pack_text(value: str) -> bytes:
    return value.encode("utf-8")


def unpack_text(data: bytes) -> str:
    return data.decode("utf-8")


def pack_bytea(value: bytes) -> bytes:
    return bytes(value)


def unpack_bytea(data: bytes) -> bytes:
    return bytes(data)


def pack_numeric(value: Decimal) -> bytes:
    return str(value).encode("ascii")


def unpack_numeric(data: bytes) -> Decimal:
    return Decimal(data.decode("ascii"))


def pack_date(value: date) -> bytes:
    return pack_scalar(np.dtype("<i4"), (value - PG_EPOCH_DATE).days)


def unpack_date(data: bytes) -> date:
    return PG_EPOCH_DATE + timedelta(days=unpack_scalar(np.dtype("<i4"), data))


def pack_timestamptz(value: datetime) -> bytes:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return pack_scalar(np.dtype("<i8"), (value - PG_EPOCH) // _MICROSECOND)


def unpack_timestamptz(data: bytes) -> datetime:
    return PG_EPOCH + unpack_scalar(np.dtype("<i8"), data) * _MICROSECOND


def pack_uuid(value: uuid.UUID) -> bytes:
    return value.bytes


def unpack_uuid(data: bytes) -> uuid.UUID:
    return uuid.UUID(bytes=bytes(data))


def pack_point(value) -> bytes:
    coords = np.asarray(value, dtype="<f8")
    if coords.shape != (2,):
        raise ValueError(f"A point has two coordinates, got shape {coords.shape}")
    return coords.tobytes()


def unpack_point(data: bytes):
    return tuple(np.frombuffer(data, dtype="<f8", count=2).tolist())


# ------------------------------------------------------------------ parsing

def parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in {"t", "true", "1", "yes", "on", "y"}:
        return True
    if lowered in {"f", "false", "0", "no", "off", "n"}:
        return False
    raise ValueError(f"invalid input syntax for type boolean: {text!r}")


def parse_bytea(text: str) -> bytes:
    if text.startswith("\\x"):
        return bytes.fromhex(text[2:])
    return text.encode("utf-8")


def parse_timestamptz(text: str) -> datetime:
    value = datetime.fromisoformat(text.strip())
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_point(text: str):
    x, y = text.strip().strip("()").split(",")
    return (float(x), float(y))


def _int(text: str) -> int:
    return int(text.strip())


def _float(text: str) -> float:
    return float(text.strip())


def _fixed(type_id, name, dtype, parse, compare=compare_default, aliases=()):
    dtype = np.dtype(dtype)
    return ValueType(
        type_id=type_id,
        name=name,
        layout=TypeLayout.fixed(dtype.itemsize),
        pack=partial(pack_scalar, dtype),
        unpack=partial(unpack_scalar, dtype),
        parse=parse,
        compare=compare,
        aliases=aliases,
    )


BUILTIN_TYPES = (
    _fixed(BOOL_OID, "bool", "?", parse_bool, aliases=("boolean",)),
    _fixed(INT2_OID, "int2", "<i2", _int, aliases=("smallint",)),
    _fixed(INT4_OID, "int4", "<i4", _int, aliases=("integer", "int")),
    _fixed(INT8_OID, "int8", "<i8", _int, aliases=("bigint",)),
    _fixed(FLOAT4_OID, "float4", "<f4", _float, compare_float, aliases=("real",)),
    _fixed(FLOAT8_OID, "float8", "<f8", _float, compare_float,
           aliases=("double precision", "double")),
    ValueType(
        type_id=NUMERIC_OID,
        name="numeric",
        layout=TypeLayout.variable(),
        pack=pack_numeric,
        unpack=unpack_numeric,
        parse=Decimal,
        compare=compare_numeric,
        aliases=("decimal",),
    ),
    ValueType(
        type_id=TEXT_OID,
        name="text",
        layout=TypeLayout.variable(),
        pack=pack_text,
        unpack=unpack_text,
        compare=compare_default,
    ),
    ValueType(
        type_id=VARCHAR_OID,
        name="varchar",
        layout=TypeLayout.variable(),
        pack=pack_text,
        unpack=unpack_text,
        compare=compare_default,
        aliases=("character varying",),
    ),
    ValueType(
        type_id=BYTEA_OID,
        name="bytea",
        layout=TypeLayout.variable(),
        pack=pack_bytea,
        unpack=unpack_bytea,
        parse=parse_bytea,
        compare=compare_default,
    ),
    ValueType(
        type_id=DATE_OID,
        name="date",
        layout=TypeLayout.fixed(4),
        pack=pack_date,
        unpack=unpack_date,
        parse=date.fromisoformat,
        compare=compare_default,
    ),
    ValueType(
        type_id=TIMESTAMPTZ_OID,
        name="timestamptz",
        layout=TypeLayout.fixed(8),
        pack=pack_timestamptz,
        unpack=unpack_timestamptz,
        parse=parse_timestamptz,
        compare=compare_default,
        aliases=("timestamp with time zone",),
    ),
    ValueType(
        type_id=UUID_OID,
        name="uuid",
        layout=TypeLayout.fixed(16),
        pack=pack_uuid,
        unpack=unpack_uuid,
        parse=uuid.UUID,
        compare=compare_default,
    ),
    # No btree opclass exists for point, so it cannot be aggregated
    ValueType(
        type_id=POINT_OID,
        name="point",
        layout=TypeLayout.fixed(16),
        pack=pack_point,
        unpack=unpack_point,
        parse=parse_point,
    ),
)

DEFAULT_REGISTRY = TypeRegistry(BUILTIN_TYPES)

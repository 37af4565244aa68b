"""Value types and the registry that resolves their comparators."""

from .registry import (
    VARIABLE_WIDTH,
    Comparator,
    TypeLayout,
    TypeRegistry,
    ValueType,
)
from .builtin import (
    BUILTIN_TYPES,
    DEFAULT_REGISTRY,
    BOOL_OID,
    BYTEA_OID,
    DATE_OID,
    FLOAT4_OID,
    FLOAT8_OID,
    INT2_OID,
    INT4_OID,
    INT8_OID,
    NUMERIC_OID,
    POINT_OID,
    TEXT_OID,
    TIMESTAMPTZ_OID,
    UUID_OID,
    VARCHAR_OID,
)

__all__ = [
    "VARIABLE_WIDTH",
    "Comparator",
    "TypeLayout",
    "TypeRegistry",
    "ValueType",
    "BUILTIN_TYPES",
    "DEFAULT_REGISTRY",
    "BOOL_OID",
    "BYTEA_OID",
    "DATE_OID",
    "FLOAT4_OID",
    "FLOAT8_OID",
    "INT2_OID",
    "INT4_OID",
    "INT8_OID",
    "NUMERIC_OID",
    "POINT_OID",
    "TEXT_OID",
    "TIMESTAMPTZ_OID",
    "UUID_OID",
    "VARCHAR_OID",
]

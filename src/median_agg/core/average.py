"""Averaging of the two middle values for even-sized inputs."""

from decimal import Decimal
from typing import Any, Callable, Dict

import numpy as np

from ..types.builtin import (
    FLOAT4_OID,
    FLOAT8_OID,
    INT4_OID,
    INT8_OID,
    NUMERIC_OID,
)


def average_integer(left: int, right: int) -> int:
    """Integer division of the sum, truncated toward zero."""
    total = left + right
    half = abs(total) // 2
    return half if total >= 0 else -half


def average_float4(left: float, right: float) -> float:
    total = np.float32(left) + np.float32(right)
    return float(total / np.float32(2))


def average_float8(left: float, right: float) -> float:
    return (left + right) / 2


def average_numeric(left: Decimal, right: Decimal) -> Decimal:
    return (left + right) / Decimal(2)


AVERAGERS: Dict[int, Callable[[Any, Any], Any]] = {
    INT4_OID: average_integer,
    INT8_OID: average_integer,
    FLOAT4_OID: average_float4,
    FLOAT8_OID: average_float8,
    NUMERIC_OID: average_numeric,
}


def average(type_id: int, left: Any, right: Any) -> Any:
    """Average two middle values.

    Types without an averaging rule return ``left`` unchanged, so the
    median of an even-sized set is its lower middle element.
    """
    averager = AVERAGERS.get(type_id)
    if averager is None:
        return left
    return averager(left, right)

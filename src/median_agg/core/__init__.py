"""Core components of the median aggregate."""

from .value_buffer import INITIAL_CAPACITY, ValueBuffer
from .average import AVERAGERS, average
from .engine import (
    EngineState,
    OrderStatisticEngine,
    add,
    finalize,
    merge,
    remove,
)

__all__ = [
    "INITIAL_CAPACITY",
    "ValueBuffer",
    "AVERAGERS",
    "average",
    "EngineState",
    "OrderStatisticEngine",
    "add",
    "finalize",
    "merge",
    "remove",
]

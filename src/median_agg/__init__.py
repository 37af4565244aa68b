# src/median_agg/__init__.py
"""Incremental median aggregate with sliding-window, merge and serialization support."""

__version__ = "0.1.0"

from .core import OrderStatisticEngine, ValueBuffer, add, remove, merge, finalize
from .codec import encode, decode
from .aggregators import get_aggregator, AGGREGATORS
from .config import MedianConfig
from .errors import (
    MedianAggError,
    TypeResolutionError,
    InvalidStateError,
    TypeMismatchError,
    CorruptDataError,
)
from .types import DEFAULT_REGISTRY, TypeRegistry

__all__ = [
    "OrderStatisticEngine",
    "ValueBuffer",
    "add",
    "remove",
    "merge",
    "finalize",
    "encode",
    "decode",
    "get_aggregator",
    "AGGREGATORS",
    "MedianConfig",
    "MedianAggError",
    "TypeResolutionError",
    "InvalidStateError",
    "TypeMismatchError",
    "CorruptDataError",
    "DEFAULT_REGISTRY",
    "TypeRegistry",
]

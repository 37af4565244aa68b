# src/median_agg/aggregators/__init__.py
from typing import Dict, Type
from .base import BaseAggregator, AggregationResult
from .scan import ScanAggregator
from .moving import MovingAggregator
from .partitioned import PartitionedAggregator
from .parallel import ParallelAggregator

AGGREGATORS: Dict[str, Type[BaseAggregator]] = {
    "scan": ScanAggregator,
    "moving": MovingAggregator,
    "partitioned": PartitionedAggregator,
    "parallel": ParallelAggregator,
}

def get_aggregator(name: str, **kwargs) -> BaseAggregator:
    """Factory function for creating aggregators."""
    if name not in AGGREGATORS:
        raise ValueError(f"Unknown aggregator: {name}. Available: {list(AGGREGATORS.keys())}")
    return AGGREGATORS[name](**kwargs)

__all__ = [
    "AGGREGATORS",
    "AggregationResult",
    "BaseAggregator",
    "MovingAggregator",
    "ParallelAggregator",
    "PartitionedAggregator",
    "ScanAggregator",
    "get_aggregator",
]

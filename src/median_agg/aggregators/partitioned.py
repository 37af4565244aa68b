# src/median_agg/aggregators/partitioned.py
from typing import Any, Dict

from ..core import OrderStatisticEngine, add, finalize
from .base import BaseAggregator, AggregationResult

class PartitionedAggregator(BaseAggregator):
    """Median per key over ``(key, value)`` rows."""

    def aggregate(self, rows) -> AggregationResult:
        states: Dict[Any, OrderStatisticEngine] = {}
        for row in rows:
            try:
                key, value = row
            except (TypeError, ValueError):
                raise ValueError(f"Expected (key, value) pairs, got {row!r}") from None
            states[key] = add(states.get(key), value, self.type_id, self.registry)

        return AggregationResult(
            value={key: finalize(state) for key, state in states.items()},
            count=sum(state.count for state in states.values()),
            metadata={"n_inputs": len(rows), "n_partitions": len(states)},
        )

# src/median_agg/aggregators/scan.py
from ..core import add, finalize
from .base import BaseAggregator, AggregationResult

class ScanAggregator(BaseAggregator):
    """Median over every input value."""

    def aggregate(self, values) -> AggregationResult:
        state = None
        for value in values:
            state = add(state, value, self.type_id, self.registry)
        return AggregationResult(
            value=finalize(state),
            count=state.count if state is not None else 0,
            metadata={"n_inputs": len(values)},
        )

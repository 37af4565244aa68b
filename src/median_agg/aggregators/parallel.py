# src/median_agg/aggregators/parallel.py
from typing import Optional

from ..config import CodecConfig
from ..core import finalize
from ..parallel import parallel_aggregate
from .base import BaseAggregator, AggregationResult

class ParallelAggregator(BaseAggregator):
    """Median computed from per-worker partial states."""

    def __init__(
        self,
        value_type="float8",
        registry=None,
        num_workers: Optional[int] = None,
        min_chunk_size: int = 1024,
        codec: Optional[CodecConfig] = None,
        show_progress: bool = False,
    ):
        super().__init__(value_type=value_type, registry=registry)
        self.num_workers = num_workers
        self.min_chunk_size = min_chunk_size
        self.codec = codec
        self.show_progress = show_progress

    def aggregate(self, values) -> AggregationResult:
        state = parallel_aggregate(
            values,
            self.type_id,
            num_workers=self.num_workers,
            min_chunk_size=self.min_chunk_size,
            registry=self.registry,
            config=self.codec,
            show_progress=self.show_progress,
        )
        return AggregationResult(
            value=finalize(state),
            count=state.count if state is not None else 0,
            metadata={"n_inputs": len(values), "num_workers": self.num_workers},
        )

# src/median_agg/aggregators/moving.py
from collections import deque
from typing import Optional

from ..core import add, finalize, remove
from .base import BaseAggregator, AggregationResult

class MovingAggregator(BaseAggregator):
    """Median over a frame ending at each row.

    With ``window=None`` the frame starts at the first row (running median).
    Otherwise it covers the last ``window`` rows, and rows leaving the frame
    are retracted with the inverse transition.
    """

    def __init__(self, value_type="float8", registry=None, window: Optional[int] = None):
        super().__init__(value_type=value_type, registry=registry)
        if window is not None and window < 1:
            raise ValueError(f"window must be positive, got {window}")
        self.window = window

    def aggregate(self, values) -> AggregationResult:
        state = None
        frame = deque()
        medians = []
        for value in values:
            state = add(state, value, self.type_id, self.registry)
            frame.append(value)
            if self.window is not None and len(frame) > self.window:
                state = remove(state, frame.popleft())
            medians.append(finalize(state))

        return AggregationResult(
            value=medians,
            count=state.count if state is not None else 0,
            metadata={"n_inputs": len(values), "window": self.window},
        )

"""Parallel partial aggregation.

Each worker process accumulates a private median state over one chunk of the
input and returns it serialized. The coordinator decodes the partial states
and folds them together sequentially with ``merge``.
"""

import logging
import math
import os
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Iterable, List, Optional, Sequence

from tqdm import tqdm

from .codec import decode, encode
from .config import CodecConfig
from .core.engine import OrderStatisticEngine, add, finalize, merge
from .types import TypeRegistry

logger = logging.getLogger(__name__)


def partial_state(
    values: Iterable[Any],
    type_id: int,
    registry: Optional[TypeRegistry] = None,
) -> Optional[bytes]:
    """Worker helper: aggregate ``values`` and return the encoded state."""
    state = None
    for value in values:
        state = add(state, value, type_id, registry)
    return encode(state)


def combine_states(
    blobs: Iterable[Optional[bytes]],
    registry: Optional[TypeRegistry] = None,
    config: Optional[CodecConfig] = None,
    show_progress: bool = False,
) -> Optional[OrderStatisticEngine]:
    """Decode partial states and merge them in iteration order."""
    state = None
    for blob in tqdm(blobs, desc="Combining partial states", disable=not show_progress):
        state = merge(state, decode(blob, registry, config))
    return state


def split_chunks(
    values: Sequence[Any],
    num_workers: int,
    min_chunk_size: int = 1,
) -> List[Sequence[Any]]:
    """Split ``values`` into at most ``num_workers`` contiguous chunks."""
    if num_workers < 1:
        raise ValueError(f"num_workers must be positive, got {num_workers}")
    if min_chunk_size < 1:
        raise ValueError(f"min_chunk_size must be positive, got {min_chunk_size}")
    n = len(values)
    if n == 0:
        return []
    num_chunks = min(num_workers, max(1, n // min_chunk_size))
    size = int(math.ceil(n / num_chunks))
    return [values[start:start + size] for start in range(0, n, size)]


def parallel_aggregate(
    values: Iterable[Any],
    type_id: int,
    num_workers: Optional[int] = None,
    min_chunk_size: int = 1024,
    registry: Optional[TypeRegistry] = None,
    config: Optional[CodecConfig] = None,
    show_progress: bool = False,
) -> Optional[OrderStatisticEngine]:
    """Aggregate ``values`` across worker processes and return the merged state.

    Partial states are combined in chunk order, so the merged buffer holds
    the values in input order. With a single chunk no process is spawned.
    Custom registries must be picklable to reach the workers.
    """
    values = list(values)
    if num_workers is None:
        num_workers = os.cpu_count() or 1

    chunks = split_chunks(values, int(num_workers), min_chunk_size)
    if len(chunks) <= 1:
        blobs = [partial_state(chunk, type_id, registry) for chunk in chunks]
    else:
        logger.info(
            f"Aggregating {len(values)} values in {len(chunks)} worker processes"
        )
        with ProcessPoolExecutor(max_workers=len(chunks)) as executor:
            futures = [
                executor.submit(partial_state, chunk, type_id, registry)
                for chunk in chunks
            ]
            blobs = [fut.result() for fut in futures]

    state = combine_states(blobs, registry, config, show_progress)
    logger.info(f"Combined {len(blobs)} partial states")
    return state


def parallel_median(values: Iterable[Any], type_id: int, **kwargs) -> Any:
    """Median of ``values`` computed with ``parallel_aggregate``."""
    return finalize(parallel_aggregate(values, type_id, **kwargs))

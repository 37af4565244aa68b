"""Unsorted, geometrically growing value storage."""

import logging
from typing import Any, Callable, Iterator, List, Optional

logger = logging.getLogger(__name__)

INITIAL_CAPACITY = 8


class ValueBuffer:
    """Append-only sequence of values with an explicit capacity.

    ``capacity`` is the reserved slot count: it starts at
    ``INITIAL_CAPACITY``, doubles when an append would overflow it and never
    shrinks. Only the ``count`` live values are materialized, so a large
    reserved capacity costs nothing until it is filled.
    """

    def __init__(self, capacity: int = INITIAL_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self._values: List[Any] = []
        self._capacity = capacity

    @property
    def count(self) -> int:
        return len(self._values)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, value: Any) -> None:
        if self.count + 1 > self._capacity:
            self._grow()
        self._values.append(value)

    def _grow(self) -> None:
        old = self._capacity
        self._capacity *= 2
        logger.debug(f"Buffer grown from {old} to {self._capacity} slots")

    def remove_first_match(self, value: Any, raw: Callable[[Any], bytes]) -> bool:
        """Delete the first element whose raw representation equals ``value``'s.

        Remaining elements keep their relative order. Returns False, leaving
        the buffer untouched, when nothing matches.
        """
        target = raw(value)
        for index, element in enumerate(self._values):
            if element is not None and raw(element) == target:
                del self._values[index]
                return True
        return False

    def null_count(self) -> int:
        return sum(1 for v in self._values if v is None)

    def sort(self, key: Optional[Callable[[Any], Any]] = None) -> None:
        """Sort the live values in place; null entries go last."""
        present = [v for v in self._values if v is not None]
        nulls = len(self._values) - len(present)
        present.sort(key=key)
        self._values = present + [None] * nulls

    def copy(self) -> "ValueBuffer":
        clone = ValueBuffer(self._capacity)
        clone._values = list(self._values)
        return clone

    @classmethod
    def from_values(cls, values: List[Any], capacity: int) -> "ValueBuffer":
        """Build a buffer holding ``values`` with ``capacity`` reserved slots."""
        if capacity < len(values):
            raise ValueError(
                f"Capacity {capacity} cannot hold {len(values)} values"
            )
        buffer = cls(capacity)
        buffer._values = list(values)
        return buffer

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._values))

    def __getitem__(self, index: int) -> Any:
        return self._values[index]

    def __repr__(self) -> str:
        return f"ValueBuffer(count={self.count}, capacity={self._capacity})"

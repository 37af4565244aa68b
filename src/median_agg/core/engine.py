"""Median aggregate state and the transition functions that drive it."""

import enum
import logging
from typing import Any, Optional

from ..errors import InvalidStateError, TypeMismatchError
from ..types import DEFAULT_REGISTRY, Comparator, TypeRegistry, ValueType
from .average import average
from .value_buffer import INITIAL_CAPACITY, ValueBuffer

logger = logging.getLogger(__name__)


class EngineState(enum.Enum):
    EMPTY = "empty"
    UNSORTED = "unsorted"
    SORTED = "sorted"


class OrderStatisticEngine:
    """Accumulates values of one type and extracts their median.

    Values are kept unsorted while accumulating; ``finalize`` sorts once
    with the type's comparator. Removal matches values by their raw byte
    representation rather than by the comparator, so two values that
    compare equal but are stored differently (``Decimal("1.0")`` and
    ``Decimal("1.00")``, ``0.0`` and ``-0.0``) are distinct to ``remove``.

    An instance has a single writer. Parallel aggregation uses one engine
    per worker and folds them together with ``merge``.
    """

    def __init__(
        self,
        comparator: Comparator,
        value_type: ValueType,
        buffer: Optional[ValueBuffer] = None,
    ):
        if comparator.type_id != value_type.type_id:
            raise TypeMismatchError(
                f"Comparator for type {comparator.type_id} cannot order "
                f"{value_type.name} ({value_type.type_id}) values"
            )
        self.comparator = comparator
        self.value_type = value_type
        self.buffer = buffer if buffer is not None else ValueBuffer(INITIAL_CAPACITY)
        self._sorted = False

    @classmethod
    def create(
        cls,
        type_id: int,
        registry: Optional[TypeRegistry] = None,
    ) -> "OrderStatisticEngine":
        """Resolve the comparator for ``type_id`` and build an empty engine.

        Raises:
            TypeResolutionError: The type is unknown or has no ordering
        """
        registry = registry or DEFAULT_REGISTRY
        comparator = registry.resolve_comparator(type_id)
        engine = cls(comparator, registry.value_type(type_id))
        logger.debug(f"Created median state for type {engine.value_type.name}")
        return engine

    @property
    def type_id(self) -> int:
        return self.comparator.type_id

    @property
    def count(self) -> int:
        return self.buffer.count

    @property
    def capacity(self) -> int:
        return self.buffer.capacity

    @property
    def state(self) -> EngineState:
        if self.buffer.count == 0:
            return EngineState.EMPTY
        return EngineState.SORTED if self._sorted else EngineState.UNSORTED

    def add(self, value: Any) -> None:
        """Store ``value`` in the canonical form it has after serialization.

        Raises:
            ValueError: ``value`` is not representable in the engine's type
        """
        self.buffer.append(self.value_type.canonical(value))
        self._sorted = False

    def remove(self, value: Any) -> bool:
        """Discard the first stored value with the same raw representation."""
        found = self.buffer.remove_first_match(value, self.value_type.raw)
        if found:
            self._sorted = False
        else:
            logger.debug(f"Value {value!r} not present in median state; nothing removed")
        return found

    def merge(self, other: "OrderStatisticEngine") -> None:
        """Append every value of ``other`` to this engine."""
        self._check_compatible(other)
        for value in other.buffer:
            self.buffer.append(value)
        if other.count:
            self._sorted = False

    def copy(self) -> "OrderStatisticEngine":
        clone = OrderStatisticEngine(self.comparator, self.value_type, self.buffer.copy())
        clone._sorted = self._sorted
        return clone

    def finalize(self) -> Any:
        """Return the median of the non-null values, or None when there are none."""
        count = self.buffer.count - self.buffer.null_count()
        if count == 0:
            return None
        if not self._sorted:
            # nulls end up after every value
            self.buffer.sort(key=self.comparator.sort_key())
            self._sorted = True

        midpoint = count // 2
        if count % 2:
            return self.buffer[midpoint]
        return average(self.type_id, self.buffer[midpoint - 1], self.buffer[midpoint])

    def _check_compatible(self, other: "OrderStatisticEngine") -> None:
        if other.type_id != self.type_id:
            raise TypeMismatchError(
                f"Cannot combine median state of type {other.type_id} "
                f"into state of type {self.type_id}"
            )

    def __repr__(self) -> str:
        return (
            f"OrderStatisticEngine(type={self.value_type.name}, "
            f"count={self.count}, capacity={self.capacity}, "
            f"state={self.state.value})"
        )


# ---------------------------------------------------------------------------
# Functions driven by a hosting aggregation framework. A state of None means
# the aggregate has not been initialized yet.
# ---------------------------------------------------------------------------

def add(
    state: Optional[OrderStatisticEngine],
    value: Any,
    type_id: int,
    registry: Optional[TypeRegistry] = None,
) -> OrderStatisticEngine:
    """Transition function: incorporate ``value`` into ``state``.

    The state is created on the first call even when ``value`` is None;
    null values are never stored.
    """
    if state is None:
        state = OrderStatisticEngine.create(type_id, registry)
    elif state.type_id != type_id:
        raise TypeMismatchError(
            f"Value of type {type_id} added to median state of type {state.type_id}"
        )
    if value is not None:
        state.add(value)
    return state


def remove(state: Optional[OrderStatisticEngine], value: Any) -> OrderStatisticEngine:
    """Inverse transition function used for moving-window aggregation."""
    if state is None:
        raise InvalidStateError("remove called with no median state")
    if value is not None:
        state.remove(value)
    return state


def merge(
    target: Optional[OrderStatisticEngine],
    source: Optional[OrderStatisticEngine],
) -> Optional[OrderStatisticEngine]:
    """Combine function: fold ``source`` into ``target``.

    An absent target becomes a structural copy of the source; otherwise the
    source values are appended one by one.
    """
    if source is None or source.count == 0:
        return target
    if target is None:
        return source.copy()
    target.merge(source)
    return target


def finalize(state: Optional[OrderStatisticEngine]) -> Any:
    if state is None:
        return None
    return state.finalize()

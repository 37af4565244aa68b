# src/median_agg/aggregators/base.py
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

from ..types import DEFAULT_REGISTRY, TypeRegistry, ValueType

@dataclass
class AggregationResult:
    """Standardized output from all aggregators."""
    value: Any
    count: int = 0  # Non-null inputs that reached the final state
    metadata: dict = None

    def __post_init__(self):
        self.metadata = self.metadata or {}

class BaseAggregator(ABC):
    """Abstract base class for the median aggregation drivers."""

    def __init__(
        self,
        value_type: Union[str, int] = "float8",
        registry: Optional[TypeRegistry] = None,
    ):
        self.registry = registry or DEFAULT_REGISTRY
        self.value_type: ValueType = self.registry.lookup(value_type)
        # Fail early when the type cannot be ordered.
        self.registry.resolve_comparator(self.value_type.type_id)

    @property
    def type_id(self) -> int:
        return self.value_type.type_id

    @abstractmethod
    def aggregate(self, values: List[Any]) -> AggregationResult:
        """
        Aggregate input values.

        Args:
            values: Input rows; None entries are nulls and are skipped

        Returns:
            AggregationResult containing the median and metadata
        """
        pass

    def __call__(self, values: Iterable[Any]) -> AggregationResult:
        return self.aggregate(self._validate_input(values))

    def _validate_input(self, values: Iterable[Any]) -> List[Any]:
        if isinstance(values, (str, bytes, bytearray)):
            raise ValueError(
                f"Expected an iterable of values, got {type(values).__name__}"
            )
        return list(values)

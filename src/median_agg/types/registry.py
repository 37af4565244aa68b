"""Type registry: the collaborator that supplies ordering and layout per type."""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple, Union

from ..errors import TypeResolutionError

logger = logging.getLogger(__name__)

VARIABLE_WIDTH = -1


@dataclass(frozen=True)
class TypeLayout:
    """Storage layout of a value type."""
    fixed_width: bool
    width: int

    @classmethod
    def fixed(cls, width: int) -> "TypeLayout":
        if width <= 0:
            raise ValueError(f"Fixed width must be positive, got {width}")
        return cls(fixed_width=True, width=width)

    @classmethod
    def variable(cls) -> "TypeLayout":
        return cls(fixed_width=False, width=VARIABLE_WIDTH)


@dataclass(frozen=True)
class Comparator:
    """Ordering capability resolved once per value type.

    ``compare(a, b)`` returns a negative number, zero or a positive number,
    in the manner of a btree support function.
    """
    type_id: int
    compare: Callable[[Any, Any], int]

    def __call__(self, left: Any, right: Any) -> int:
        return self.compare(left, right)

    def sort_key(self) -> Callable[[Any], Any]:
        return functools.cmp_to_key(self.compare)


@dataclass(frozen=True)
class ValueType:
    """Everything the aggregate needs to know about one value type.

    Attributes:
        type_id: Identifier carried in serialized states (uint32)
        name: Canonical type name
        layout: Fixed or variable width storage
        pack: Converts a value to its raw byte representation
        unpack: Inverse of ``pack``
        parse: Converts a text literal to a value
        compare: Ordering function, or None when the type has no ordering
        aliases: Additional names accepted by ``TypeRegistry.lookup``
    """
    type_id: int
    name: str
    layout: TypeLayout
    pack: Callable[[Any], bytes]
    unpack: Callable[[bytes], Any]
    parse: Callable[[str], Any] = str
    compare: Optional[Callable[[Any, Any], int]] = None
    aliases: Tuple[str, ...] = ()

    def raw(self, value: Any) -> bytes:
        """Return the raw representation of ``value``."""
        data = bytes(self.pack(value))
        if self.layout.fixed_width and len(data) != self.layout.width:
            raise ValueError(
                f"Type {self.name} packs to {self.layout.width} bytes, "
                f"got {len(data)}"
            )
        return data

    def canonical(self, value: Any) -> Any:
        """Return ``value`` exactly as it reads back after serialization.

        Raises:
            ValueError: ``value`` cannot be represented in this type
        """
        try:
            return self.unpack(self.raw(value))
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise ValueError(f"{value!r} is not a valid {self.name} value") from exc


class TypeRegistry:
    """Maps type identifiers (and names) to ValueType descriptions."""

    def __init__(self, types: Iterable[ValueType] = ()):
        self._by_id: Dict[int, ValueType] = {}
        self._by_name: Dict[str, ValueType] = {}
        for value_type in types:
            self.register(value_type)

    def register(self, value_type: ValueType, replace: bool = False) -> None:
        """Add a type to the registry."""
        if not 0 <= value_type.type_id <= 0xFFFFFFFF:
            raise ValueError(
                f"Type id must fit in 32 unsigned bits, got {value_type.type_id}"
            )
        if value_type.type_id in self._by_id and not replace:
            raise ValueError(f"Type id {value_type.type_id} is already registered")

        self._by_id[value_type.type_id] = value_type
        for name in (value_type.name, *value_type.aliases):
            self._by_name[name.lower()] = value_type
        logger.debug(f"Registered type {value_type.name} ({value_type.type_id})")

    def value_type(self, type_id: int) -> ValueType:
        try:
            return self._by_id[type_id]
        except KeyError:
            raise TypeResolutionError(type_id, f"unknown type {type_id}") from None

    def lookup(self, name_or_id: Union[str, int]) -> ValueType:
        """Find a type by id or by (case-insensitive) name."""
        if isinstance(name_or_id, int):
            return self.value_type(name_or_id)
        try:
            return self._by_name[name_or_id.lower()]
        except KeyError:
            raise TypeResolutionError(name_or_id, f"unknown type {name_or_id!r}") from None

    def resolve_comparator(self, type_id: int) -> Comparator:
        value_type = self.value_type(type_id)
        if value_type.compare is None:
            raise TypeResolutionError(
                type_id,
                f"could not identify a comparison function for type {value_type.name}",
            )
        return Comparator(type_id=type_id, compare=value_type.compare)

    def layout_of(self, type_id: int) -> TypeLayout:
        return self.value_type(type_id).layout

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._by_id

    def __iter__(self) -> Iterator[ValueType]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

"""Immutable collection values used by generated conversion code."""

from collections.abc import Callable, Hashable, Iterable, Iterator
from typing import Any, Self


class UnknownVariantError(ValueError):
    """Raised by generated code when a value matches no variant of its type."""

    def __init__(self, type_name: str, value: Any):
        self.type_name = type_name
        self.value = value
        super().__init__(f"Unknown {type_name} variant: {value!r}")


class Seq:
    """An immutable sequence. Strings are sequences of characters."""

    __slots__ = ("_items", "is_string")

    def __init__(self, items: Iterable[Any] = (), *, is_string: bool = False):
        self._items = tuple(items)
        self.is_string = is_string

    @classmethod
    def from_string(cls, text: str | None) -> Self:
        return cls(text or "", is_string=True)

    @property
    def Elements(self) -> tuple[Any, ...]:
        return self._items

    def VerbatimString(self, asliteral: bool) -> str:
        """Join the characters back into a string, quoted when `asliteral`."""
        text = "".join(self._items)
        return repr(text) if asliteral else text

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Seq(self._items[index], is_string=self.is_string)
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Seq):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        if self.is_string:
            return f"Seq.from_string({self.VerbatimString(True)})"
        return f"Seq({list(self._items)!r})"


class Set:
    """An immutable, unordered set exposing its members as `Elements`."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Hashable] = ()):
        self._items = frozenset(items)

    @property
    def Elements(self) -> frozenset:
        return self._items

    def contains(self, item: Hashable) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Set):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"Set({set(self._items)!r})"


class Map:
    """An immutable mapping, grown one entry at a time with `update`."""

    __slots__ = ("_items",)

    Empty: "Map"

    def __init__(self, items: dict | None = None):
        self._items = dict(items or {})

    def update(self, key: Hashable, value: Any) -> "Map":
        """Return a new map with `key` bound to `value`."""
        items = dict(self._items)
        items[key] = value
        return Map(items)

    @property
    def Keys(self) -> Set:
        return Set(self._items.keys())

    @property
    def Values(self) -> list[Any]:
        return list(self._items.values())

    @property
    def Items(self) -> list[tuple[Any, Any]]:
        return list(self._items.items())

    def get(self, key: Hashable) -> Any:
        return self._items[key]

    def contains(self, key: Hashable) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Map):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._items.items()))

    def __repr__(self) -> str:
        return f"Map({self._items!r})"


Map.Empty = Map()


def tuple_constructor(arity: int) -> Callable[..., tuple]:
    """Return the constructor for tuples of the given arity."""

    def construct(*items: Any) -> tuple:
        if len(items) != arity:
            raise TypeError(f"Tuple{arity} takes {arity} items, got {len(items)}")
        return tuple(items)

    construct.__name__ = f"Tuple{arity}"
    return construct

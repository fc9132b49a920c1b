"""Tagged-union values with the constructor and accessor names generated code uses.

A datatype class exposes, for every variant `V` and field `f`:

* `create_V(...)` building the variant from positional field values,
* `is_V`, true when a value is that variant,
* `dtor_f`, the value of field `f` (for variants that declare it).
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any


class Datatype:
    """Base class of every class built by `datatype`."""

    __slots__ = ("_variant", "_values")

    _type_name = "Datatype"
    _variants: dict[str, tuple[str, ...]] = {}

    def __init__(self, variant: str, values: tuple[Any, ...]):
        fields = self._variants[variant]
        if len(values) != len(fields):
            raise TypeError(
                f"{self._type_name}.{variant} takes {len(fields)} values, got {len(values)}"
            )
        self._variant = variant
        self._values = values

    @property
    def variant(self) -> str:
        return self._variant

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._variant == other._variant and self._values == other._values

    def __hash__(self) -> int:
        return hash((self._type_name, self._variant, self._values))

    def __repr__(self) -> str:
        fields = self._variants.get(self._variant, ())
        args = ", ".join(f"{name}={value!r}" for name, value in zip(fields, self._values))
        return f"{self._type_name}.{self._variant}({args})"


def _constructor(variant: str) -> classmethod:
    def create(cls, *values):
        return cls(variant, values)

    return classmethod(create)


def _flag(variant: str) -> property:
    return property(lambda self: self._variant == variant)


def _destructor(field_name: str) -> property:
    def get(self):
        fields = self._variants[self._variant]
        if field_name not in fields:
            raise AttributeError(
                f"{self._type_name}.{self._variant} has no field '{field_name}'"
            )
        return self._values[fields.index(field_name)]

    return property(get)


def datatype(
    name: str,
    variants: Mapping[str, Sequence[str]],
    mangle: Callable[[str], str] | None = None,
) -> type[Datatype]:
    """Build a datatype class.

    Args:
        name: The datatype name, used in reprs and errors.
        variants: Variant names mapped to their field names, in declaration order.
        mangle: Applied to variant and field names when naming members, so the
            class matches a generator configured with the same mangling.

    Returns:
        A new `Datatype` subclass.
    """
    mangle = mangle or (lambda s: s)
    namespace: dict[str, Any] = {
        "__slots__": (),
        "_type_name": name,
        "_variants": {variant: tuple(fields) for variant, fields in variants.items()},
    }

    for variant, fields in variants.items():
        namespace[f"create_{mangle(variant)}"] = _constructor(variant)
        namespace[f"is_{mangle(variant)}"] = _flag(variant)
        for field_name in fields:
            namespace.setdefault(f"dtor_{mangle(field_name)}", _destructor(field_name))

    return type(name, (Datatype,), namespace)

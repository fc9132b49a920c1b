"""Typed-value runtime for code generated by adtjson.

Tuple constructors are resolved on attribute access: `Tuple2(a, b)`,
`Tuple3(a, b, c)` and so on.
"""

from .datatypes import Datatype as Datatype
from .datatypes import datatype as datatype
from .values import Map as Map
from .values import Seq as Seq
from .values import Set as Set
from .values import UnknownVariantError as UnknownVariantError
from .values import tuple_constructor


def __getattr__(name: str):
    suffix = name.removeprefix("Tuple")
    if suffix != name and suffix.isdigit():
        return tuple_constructor(int(suffix))
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

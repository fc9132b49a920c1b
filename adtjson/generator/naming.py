"""Identifier rules shared by the converter and API emitters."""

import keyword
import re
from collections.abc import Callable
from dataclasses import dataclass, field

_INVALID_IDENT_CHARS = re.compile(r"[^0-9A-Za-z_]")

# Characters the Dafny compiler escapes inside identifiers, and their escapes
_DAFNY_ESCAPES = {"'": "_k", "_": "__", "?": "_q", "#": "_h"}

Mangler = Callable[[str], str]


def sanitize(name: str) -> str:
    """Replace characters that are invalid in an identifier (e.g. `_tuple#2`)."""
    return _INVALID_IDENT_CHARS.sub("_", name)


def lower_name(type_name: str) -> str:
    return sanitize(type_name).lower()


def from_json_name(type_name: str) -> str:
    return f"{lower_name(type_name)}FromJson"


def to_json_name(type_name: str) -> str:
    return f"{lower_name(type_name)}ToJson"


def py_identifier(name: str) -> str:
    """Make a name usable as a Python parameter or attribute name."""
    ident = sanitize(name)
    if ident[:1].isdigit():
        ident = f"_{ident}"
    if keyword.iskeyword(ident):
        ident += "_"
    return ident


def accessor_name(field_name: str) -> str:
    return "Get" + field_name[:1].upper() + field_name[1:]


def dafny_mangle(name: str) -> str:
    """Apply the identifier escaping of Dafny-compiled runtimes."""
    if name[:1].isdigit():
        return f"_{name}"
    if not any(c in _DAFNY_ESCAPES for c in name):
        return name
    return "".join(_DAFNY_ESCAPES.get(c, c) for c in name)


def no_mangle(name: str) -> str:
    return name


MANGLERS: dict[str, Mangler] = {
    "dafny": dafny_mangle,
    "none": no_mangle,
}


@dataclass(frozen=True)
class RuntimeConvention:
    """How generated code reaches into the typed-value runtime.

    The mangler is injected so the emitters can target runtimes that spell
    constructor, discriminator and field accessor names differently.
    """

    mangle: Mangler = field(default=dafny_mangle)

    def constructor(self, module_name: str, type_name: str, variant: str) -> str:
        return f"{module_name}.{sanitize(type_name)}.create_{self.mangle(variant)}"

    def is_variant(self, value: str, variant: str) -> str:
        return f"{value}.is_{self.mangle(variant)}"

    def variant_flag(self, variant: str) -> str:
        return f"is_{self.mangle(variant)}"

    def destructor(self, value: str, field_name: str) -> str:
        return f"{value}.{self.field_attribute(field_name)}"

    def field_attribute(self, field_name: str) -> str:
        return f"dtor_{self.mangle(field_name)}"

    def function(self, module_name: str, name: str) -> str:
        return f"{module_name}.{self.mangle(name)}"

"""Type annotations and declarations for the typed output profile.

Every generated datatype gets two declarations: `<Name>Json`, the shape of
its external (JSON) form, and `<Name>Value`, the shape of its runtime form.
"""

import json

from .naming import RuntimeConvention, sanitize
from .types import DatatypeDefinition, DatatypeShape, TypeDescriptor, TypeKind

TYPING_IMPORTS = ["Any", "Callable", "Literal", "Optional", "Protocol", "TypedDict", "Union"]

CONVERTER_ANNOTATION = "Callable[[Any], Any]"


def json_type_name(type_name: str) -> str:
    return f"{sanitize(type_name)}Json"


def value_type_name(type_name: str) -> str:
    return f"{sanitize(type_name)}Value"


def external_annotation(t: TypeDescriptor) -> str:
    """Annotation for the external (JSON) form of a type."""
    kind = t.kind
    if kind == TypeKind.INT:
        return "int"
    if kind == TypeKind.BOOL:
        return "bool"
    if kind == TypeKind.STRING:
        return "str"
    if kind in (TypeKind.SEQ, TypeKind.SET):
        inner = external_annotation(t.type_args[0]) if t.type_args else "Any"
        return f"list[{inner}]"
    if kind == TypeKind.MAP:
        inner = external_annotation(t.type_args[1]) if len(t.type_args) >= 2 else "Any"
        return f"dict[str, {inner}]"
    if kind == TypeKind.TUPLE:
        return "list[Any]"
    if kind == TypeKind.DATATYPE:
        return f'"{json_type_name(t.name)}"'
    return "Any"


def internal_annotation(t: TypeDescriptor, runtime_alias: str = "_rt") -> str:
    """Annotation for the runtime form of a type."""
    kind = t.kind
    if kind == TypeKind.INT:
        return "int"
    if kind == TypeKind.BOOL:
        return "bool"
    if kind in (TypeKind.STRING, TypeKind.SEQ):
        return f"{runtime_alias}.Seq"
    if kind == TypeKind.SET:
        return f"{runtime_alias}.Set"
    if kind == TypeKind.MAP:
        return f"{runtime_alias}.Map"
    if kind == TypeKind.TUPLE:
        return "tuple"
    if kind == TypeKind.DATATYPE:
        return f'"{value_type_name(t.name)}"'
    return "Any"


class DeclarationEmitter:
    """Emits the external and runtime shape declarations of a datatype."""

    def __init__(self, convention: RuntimeConvention, runtime_alias: str = "_rt"):
        self.convention = convention
        self.rt = runtime_alias

    def emit(self, dt: DatatypeDefinition) -> str:
        return "\n".join(self.external_view(dt) + [""] + self.internal_view(dt))

    def external_view(self, dt: DatatypeDefinition) -> list[str]:
        name = json_type_name(dt.name)
        shape = dt.shape

        if shape == DatatypeShape.ENUM_LIKE:
            tags = ", ".join(json.dumps(v.name) for v in dt.variants)
            return [f"{name} = Literal[{tags}]"]

        if len(dt.variants) == 1:
            return [self._typed_dict(name, dt.variants[0].fields, tag=None)]

        lines: list[str] = []
        variant_names: list[str] = []
        for variant in dt.variants:
            variant_name = f"{sanitize(dt.name)}{sanitize(variant.name)}Json"
            variant_names.append(variant_name)
            lines.append(self._typed_dict(variant_name, variant.fields, tag=variant.name))
        lines.append(f"{name} = Union[{', '.join(variant_names)}]")
        return lines

    def _typed_dict(self, name: str, fields: list, tag: str | None) -> str:
        entries: list[str] = []
        if tag is not None:
            entries.append(f'"type": Literal[{json.dumps(tag)}]')
        entries.extend(f"{json.dumps(f.name)}: {external_annotation(f.type)}" for f in fields)
        return f'{name} = TypedDict("{name}", {{{", ".join(entries)}}})'

    def internal_view(self, dt: DatatypeDefinition) -> list[str]:
        name = value_type_name(dt.name)

        if dt.shape == DatatypeShape.ERASED_WRAPPER:
            inner = internal_annotation(dt.variants[0].fields[0].type, self.rt)
            return [f"{name} = {inner}"]

        lines = [f"class {name}(Protocol):"]
        for variant in dt.variants:
            lines.append(f"    {self.convention.variant_flag(variant.name)}: bool")

        seen: set[str] = set()
        for variant in dt.variants:
            for f in variant.fields:
                attribute = self.convention.field_attribute(f.name)
                if attribute in seen:
                    continue
                seen.add(attribute)
                lines.append(f"    {attribute}: {internal_annotation(f.type, self.rt)}")
        return lines

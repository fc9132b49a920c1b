"""Type descriptors for datatype definitions and function signatures."""

from dataclasses import dataclass, field
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin


class TypeKind(StrEnum):
    """Closed set of type kinds understood by the converters."""

    INT = auto()
    BOOL = auto()
    STRING = auto()
    SEQ = auto()
    SET = auto()
    MAP = auto()
    TUPLE = auto()
    DATATYPE = auto()
    TYPE_PARAM = auto()
    OPAQUE = auto()


class DatatypeShape(StrEnum):
    """How a datatype is represented externally."""

    ERASED_WRAPPER = auto()  # one variant, one field: the field stands in for the value
    ENUM_LIKE = auto()  # several variants, none with fields: bare variant name
    GENERAL = auto()  # object with a "type" discriminant (when needed) plus fields


@dataclass(frozen=True)
class TypeDescriptor(DataClassJsonMixin):
    """Describes a type to convert.

    Descriptors are finite trees. Datatype references are by name only, the
    (possibly cyclic) graph of definitions is reached through a catalog lookup.
    """

    kind: TypeKind
    name: str
    type_args: list["TypeDescriptor"] = field(default_factory=list)

    def __str__(self) -> str:
        if not self.type_args:
            return self.name
        return f"{self.name}<{', '.join(str(arg) for arg in self.type_args)}>"


@dataclass(frozen=True)
class Field(DataClassJsonMixin):
    """A named, typed field of a variant (or a function parameter)."""

    name: str
    type: TypeDescriptor


@dataclass(frozen=True)
class Variant(DataClassJsonMixin):
    """One constructor of a datatype."""

    name: str
    fields: list[Field] = field(default_factory=list)


@dataclass(frozen=True)
class DatatypeDefinition(DataClassJsonMixin):
    """A named tagged union."""

    module_name: str
    name: str
    variants: list[Variant]
    type_params: list[str] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.module_name}.{self.name}"

    @property
    def shape(self) -> DatatypeShape:
        if len(self.variants) == 1 and len(self.variants[0].fields) == 1:
            return DatatypeShape.ERASED_WRAPPER
        if len(self.variants) > 1 and all(not v.fields for v in self.variants):
            return DatatypeShape.ENUM_LIKE
        return DatatypeShape.GENERAL

    @property
    def is_erased(self) -> bool:
        return self.shape == DatatypeShape.ERASED_WRAPPER

    @property
    def is_enum_like(self) -> bool:
        return self.shape == DatatypeShape.ENUM_LIKE

    def generic_params(self) -> list[str]:
        """Return the generic parameters, in declaration order.

        Definitions that do not declare their parameters get them from the
        type parameters used by their fields, in order of first use.
        """
        if self.type_params:
            return list(self.type_params)

        found: list[str] = []
        for variant in self.variants:
            for f in variant.fields:
                _collect_type_params(f.type, found)
        return found


@dataclass(frozen=True)
class FunctionSignature(DataClassJsonMixin):
    """A typed function exposed through the API wrapper."""

    module_name: str
    name: str
    parameters: list[Field]
    return_type: TypeDescriptor


@dataclass
class TypeCatalog(DataClassJsonMixin):
    """Every definition and signature known to one generation run."""

    definitions: list[DatatypeDefinition] = field(default_factory=list)
    functions: list[FunctionSignature] = field(default_factory=list)

    def lookup(self, name: str) -> list[DatatypeDefinition]:
        """Return every definition with the given bare name, in declaration order."""
        return [dt for dt in self.definitions if dt.name == name]

    def definitions_in(self, module_name: str) -> list[DatatypeDefinition]:
        return [dt for dt in self.definitions if dt.module_name == module_name]

    def functions_in(self, module_name: str) -> list[FunctionSignature]:
        return [fn for fn in self.functions if fn.module_name == module_name]

    def modules(self) -> list[str]:
        names: list[str] = []
        for item in [*self.definitions, *self.functions]:
            if item.module_name not in names:
                names.append(item.module_name)
        return names

    def detect_domain_module(self, action_type: str = "Action") -> str:
        """Guess the domain module: the one declaring the action type."""
        for dt in self.definitions:
            if dt.name == action_type:
                return dt.module_name
        if self.definitions:
            return self.definitions[0].module_name
        return "Domain"


def _collect_type_params(t: TypeDescriptor, found: list[str]) -> None:
    if t.kind == TypeKind.TYPE_PARAM and t.name not in found:
        found.append(t.name)
    for arg in t.type_args:
        _collect_type_params(arg, found)


def int_type(name: str = "int") -> TypeDescriptor:
    return TypeDescriptor(TypeKind.INT, name)


def bool_type() -> TypeDescriptor:
    return TypeDescriptor(TypeKind.BOOL, "bool")


def string_type() -> TypeDescriptor:
    return TypeDescriptor(TypeKind.STRING, "string")


def seq_of(elem: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.SEQ, "seq", [elem])


def set_of(elem: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.SET, "set", [elem])


def map_of(key: TypeDescriptor, value: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.MAP, "map", [key, value])


def tuple_of(*elems: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.TUPLE, f"Tuple{len(elems)}", list(elems))


def datatype_ref(name: str, *type_args: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.DATATYPE, name, list(type_args))


def type_param(name: str) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.TYPE_PARAM, name)


def opaque(name: str) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.OPAQUE, name)

"""Datatype declaration parser using Lark."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from lark import Lark, Token
from lark.visitors import Transformer

from .types import (
    DatatypeDefinition,
    Field,
    FunctionSignature,
    TypeCatalog,
    TypeDescriptor,
    TypeKind,
    Variant,
    bool_type,
    datatype_ref,
    int_type,
    map_of,
    opaque,
    seq_of,
    set_of,
    string_type,
    tuple_of,
    type_param,
)

logger = logging.getLogger(__name__)

_g_parser: Lark | None = None

INT_NAMES = frozenset({"int", "nat"})
STRING_NAMES = frozenset({"string", "char"})
SEQ_NAMES = frozenset({"seq"})
SET_NAMES = frozenset({"set", "iset"})
MAP_NAMES = frozenset({"map", "imap"})


class ValidationError(RuntimeError):
    """Raised when declaration validation fails."""


@dataclass
class _Name:
    value: str


@dataclass
class _QualifiedName:
    value: str

    @property
    def last(self) -> str:
        return self.value.rsplit(".", 1)[-1]


@dataclass
class _TypeParams:
    names: list[str]


@dataclass
class _TypeRef:
    """A type as written, resolved once every datatype name is known."""

    name: _QualifiedName | None
    args: list["_TypeRef"] = field(default_factory=list)


@dataclass
class _Field:
    name: str
    type: _TypeRef
    ghost: bool


@dataclass
class _Variant:
    name: str
    fields: list[_Field]


@dataclass
class _Datatype:
    name: str
    type_params: list[str]
    variants: list[_Variant]


@dataclass
class _Function:
    name: str
    kind: str
    type_params: list[str]
    params: list[_Field]
    return_type: _TypeRef | None
    ghost: bool


@dataclass
class _Module:
    name: str
    abstract: bool
    datatypes: list[_Datatype]
    functions: list[_Function]


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


TMany = TypeVar("TMany")


def _find_many(args: list[Any], class_type: type[TMany]) -> list[TMany]:
    return _filter(args, class_type)


def _has_token(args: list[Any], token_type: str) -> bool:
    return any(isinstance(a, Token) and a.type == token_type for a in args)


def _find_token(args: list[Any], token_type: str) -> str | None:
    for a in args:
        if isinstance(a, Token) and a.type == token_type:
            return str(a)
    return None


class TreeTransformer(Transformer):
    """Transform parse tree into declaration records."""

    def datatype(self, args: list[Any]) -> _Datatype:
        params = _find_one(args, _TypeParams)
        return _Datatype(
            name=_find_one(args, _Name),
            type_params=params.names if params else [],
            variants=_find_many(args, _Variant),
        )

    def field(self, args: list[Any]) -> _Field:
        return _Field(
            name=_find_one(args, _Name),
            type=_find_one(args, _TypeRef),
            ghost=_has_token(args, "GHOST"),
        )

    def function(self, args: list[Any]) -> _Function:
        params = _find_one(args, _TypeParams)
        return_types = _find_many(args, _TypeRef)
        return _Function(
            name=_find_one(args, _Name),
            kind=_find_token(args, "FUNCTION_KIND") or "function",
            type_params=params.names if params else [],
            params=_find_many(args, _Field),
            return_type=return_types[0] if return_types else None,
            ghost=_has_token(args, "GHOST"),
        )

    def module(self, args: list[Any]) -> _Module:
        return _Module(
            name=_find_one(args, _QualifiedName),
            abstract=_has_token(args, "ABSTRACT"),
            datatypes=_find_many(args, _Datatype),
            functions=_find_many(args, _Function),
        )

    def name(self, args: list[Any]) -> _Name:
        return _Name(value=str(args[0]))

    def named_type(self, args: list[Any]) -> _TypeRef:
        return _TypeRef(name=args[0], args=_find_many(args[1:], _TypeRef))

    # Parameters share the field shape
    param = field

    def qualified_name(self, args: list[Any]) -> _QualifiedName:
        return _QualifiedName(value=".".join(str(a) for a in args))

    def tuple_type(self, args: list[Any]) -> _TypeRef:
        elems = _find_many(args, _TypeRef)
        # A parenthesized single type is that type
        if len(elems) == 1:
            return elems[0]
        return _TypeRef(name=None, args=elems)

    def type_params(self, args: list[Any]) -> _TypeParams:
        return _TypeParams(names=[str(a) for a in args])

    def variant(self, args: list[Any]) -> _Variant:
        return _Variant(name=_find_one(args, _Name), fields=_find_many(args, _Field))


class _Resolver:
    """Turns written types into descriptors once every datatype name is known."""

    def __init__(self, datatype_names: set[str]):
        self.datatype_names = datatype_names

    def resolve(self, ref: _TypeRef, type_params: list[str]) -> TypeDescriptor:
        args = [self.resolve(arg, type_params) for arg in ref.args]

        if ref.name is None:
            return tuple_of(*args)

        name = ref.name.last
        if ref.name.value in type_params:
            return type_param(ref.name.value)
        if name in INT_NAMES:
            return int_type(name)
        if name == "bool":
            return bool_type()
        if name in STRING_NAMES:
            return string_type()
        # Containers written without their type arguments convert without element mapping
        if name in SEQ_NAMES:
            return seq_of(args[0]) if args else TypeDescriptor(TypeKind.SEQ, name)
        if name in SET_NAMES:
            return set_of(args[0]) if args else TypeDescriptor(TypeKind.SET, name)
        if name in MAP_NAMES:
            if len(args) >= 2:
                return map_of(args[0], args[1])
            return TypeDescriptor(TypeKind.MAP, name, args)
        if name in self.datatype_names:
            return datatype_ref(name, *args)

        logger.debug("Treating unknown type '%s' as opaque", ref.name.value)
        return opaque(ref.name.value)

    def definition(self, module_name: str, dt: _Datatype) -> DatatypeDefinition:
        variants = []
        for v in dt.variants:
            fields = [
                Field(f.name, self.resolve(f.type, dt.type_params)) for f in v.fields if not f.ghost
            ]
            variants.append(Variant(v.name, fields))
        return DatatypeDefinition(module_name, dt.name, variants, list(dt.type_params))

    def signature(self, module_name: str, fn: _Function) -> FunctionSignature:
        if fn.return_type is not None:
            return_type = self.resolve(fn.return_type, fn.type_params)
        elif fn.kind == "predicate":
            return_type = bool_type()
        else:
            raise ValidationError(f"Function {module_name}.{fn.name} has no return type")

        params = [
            Field(p.name, self.resolve(p.type, fn.type_params)) for p in fn.params if not p.ghost
        ]
        return FunctionSignature(module_name, fn.name, params, return_type)


def validate(modules: list[_Module]) -> None:
    """Validate parsed declarations."""
    for module in modules:
        seen: set[str] = set()
        for dt in module.datatypes:
            if dt.name in seen:
                raise ValidationError(f"Datatype {module.name}.{dt.name} declared twice")
            seen.add(dt.name)

            variant_names: set[str] = set()
            for v in dt.variants:
                if v.name in variant_names:
                    raise ValidationError(f"Duplicate variant {v.name} in {module.name}.{dt.name}")
                variant_names.add(v.name)

                field_names: set[str] = set()
                for f in v.fields:
                    if f.name in field_names:
                        raise ValidationError(
                            f"Duplicate field {f.name} in {module.name}.{dt.name}.{v.name}"
                        )
                    field_names.add(f.name)


def parse(text: str) -> TypeCatalog:
    """Parse a declaration file into a catalog."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/typedef.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar)

    tree = _g_parser.parse(text)
    tree = TreeTransformer().transform(tree)

    modules = _find_many(tree.children, _Module)
    validate(modules)

    concrete = []
    for module in modules:
        if module.abstract:
            logger.debug("Skipping abstract module %s", module.name)
            continue
        concrete.append(module)

    resolver = _Resolver({dt.name for module in concrete for dt in module.datatypes})
    catalog = TypeCatalog()
    for module in concrete:
        for dt in module.datatypes:
            catalog.definitions.append(resolver.definition(module.name, dt))
        for fn in module.functions:
            if fn.ghost:
                logger.debug("Skipping ghost function %s.%s", module.name, fn.name)
                continue
            catalog.functions.append(resolver.signature(module.name, fn))

    return catalog


def load(path: str | Path) -> TypeCatalog:
    """Load a catalog from a declaration file or a JSON descriptor document."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return TypeCatalog.from_json(text)
    return parse(text)

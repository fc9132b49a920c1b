"""Type-directed synthesis of conversion expressions.

Given a type descriptor and the Python expression holding a value, the
synthesizer produces the Python expression that converts that value to the
external (JSON) form or back to the internal (runtime) form. Datatypes are
not expanded inline: they dispatch to the per-definition converter functions
emitted by `converters`, so recursive types terminate.

The generated expressions rely on the helpers rendered from
`templates/helpers.py.j2` (`_to_number`, `_string_to_json`, `_seq_to_list`,
`_map_from_json`) and on the runtime module bound to `runtime_alias`.
"""

from collections.abc import Mapping
from enum import StrEnum, auto

from .naming import from_json_name, to_json_name
from .types import TypeDescriptor, TypeKind, opaque

ParamConverters = Mapping[str, str]


class Direction(StrEnum):
    """Conversion direction."""

    TO_EXTERNAL = auto()
    FROM_EXTERNAL = auto()


def _map_args(t: TypeDescriptor) -> tuple[TypeDescriptor, TypeDescriptor]:
    # A map written without type arguments copies its entries unconverted
    if len(t.type_args) < 2:
        return opaque("key"), opaque("value")
    return t.type_args[0], t.type_args[1]


def placeholder(base: str, depth: int) -> str:
    """Name of a bound variable at the given nesting depth (x, x1, x2, ...)."""
    return base if depth == 0 else f"{base}{depth}"


class Synthesizer:
    """Builds conversion expressions for type descriptors."""

    def __init__(self, runtime_alias: str = "_rt"):
        self.rt = runtime_alias

    def synthesize(
        self,
        direction: Direction,
        t: TypeDescriptor,
        source: str,
        param_converters: ParamConverters | None = None,
        depth: int = 0,
    ) -> str:
        if direction == Direction.FROM_EXTERNAL:
            return self.from_external(t, source, param_converters, depth)
        return self.to_external(t, source, param_converters, depth)

    # =========================================================================
    # External -> internal
    # =========================================================================

    def from_external(
        self,
        t: TypeDescriptor,
        source: str,
        param_converters: ParamConverters | None = None,
        depth: int = 0,
    ) -> str:
        params = param_converters or {}
        kind = t.kind

        if kind == TypeKind.INT:
            return f"int({source})"
        if kind == TypeKind.BOOL:
            return source
        if kind == TypeKind.STRING:
            return f"{self.rt}.Seq.from_string({source})"
        if kind == TypeKind.SEQ:
            return self._collection_from(f"{self.rt}.Seq", t, source, params, depth)
        if kind == TypeKind.SET:
            return self._collection_from(f"{self.rt}.Set", t, source, params, depth)
        if kind == TypeKind.MAP:
            return self._map_from(t, source, params, depth)
        if kind == TypeKind.TUPLE:
            return self._tuple_from(t, source, params, depth)
        if kind == TypeKind.DATATYPE:
            return self._datatype_call(Direction.FROM_EXTERNAL, t, source, params, depth)
        if kind == TypeKind.TYPE_PARAM:
            conv = params.get(t.name)
            return f"{conv}({source})" if conv else source
        # Opaque values are assumed to be acceptable on both sides
        return source

    def _collection_from(
        self, ctor: str, t: TypeDescriptor, source: str, params: ParamConverters, depth: int
    ) -> str:
        if not t.type_args:
            return f"{ctor}({source} or [])"

        x = placeholder("x", depth)
        elem = self.from_external(t.type_args[0], x, params, depth + 1)
        if elem == x:
            return f"{ctor}({source} or [])"
        return f"{ctor}([{elem} for {x} in ({source} or [])])"

    def _map_from(self, t: TypeDescriptor, source: str, params: ParamConverters, depth: int) -> str:
        key_type, val_type = _map_args(t)
        k = placeholder("k", depth)
        v = placeholder("v", depth)
        key = self.from_external(key_type, k, params, depth + 1)
        val = self.from_external(val_type, v, params, depth + 1)
        return f"_map_from_json({source}, lambda {k}: {key}, lambda {v}: {val})"

    def _tuple_from(self, t: TypeDescriptor, source: str, params: ParamConverters, depth: int) -> str:
        arity = len(t.type_args)
        if arity == 0:
            return source

        elems = [
            self.from_external(arg, f"{source}[{i}]", params, depth)
            for i, arg in enumerate(t.type_args)
        ]
        return f"{self.rt}.Tuple{arity}({', '.join(elems)})"

    # =========================================================================
    # Internal -> external
    # =========================================================================

    def to_external(
        self,
        t: TypeDescriptor,
        source: str,
        param_converters: ParamConverters | None = None,
        depth: int = 0,
    ) -> str:
        params = param_converters or {}
        kind = t.kind

        if kind == TypeKind.INT:
            return f"_to_number({source})"
        if kind == TypeKind.BOOL:
            return source
        if kind == TypeKind.STRING:
            return f"_string_to_json({source})"
        if kind == TypeKind.SEQ:
            seq = f"_seq_to_list({source})"
            return self._collection_to(seq, seq, t, params, depth)
        if kind == TypeKind.SET:
            elements = f"{source}.Elements"
            return self._collection_to(f"list({elements})", elements, t, params, depth)
        if kind == TypeKind.MAP:
            return self._map_to(t, source, params, depth)
        if kind == TypeKind.TUPLE:
            return self._tuple_to(t, source, params, depth)
        if kind == TypeKind.DATATYPE:
            return self._datatype_call(Direction.TO_EXTERNAL, t, source, params, depth)
        if kind == TypeKind.TYPE_PARAM:
            conv = params.get(t.name)
            return f"{conv}({source})" if conv else source
        return source

    def _collection_to(
        self,
        identity: str,
        elements: str,
        t: TypeDescriptor,
        params: ParamConverters,
        depth: int,
    ) -> str:
        if not t.type_args:
            return identity

        x = placeholder("x", depth)
        elem = self.to_external(t.type_args[0], x, params, depth + 1)
        if elem == x:
            return identity
        return f"[{elem} for {x} in {elements}]"

    def _map_key_to(self, key_type: TypeDescriptor, key: str, params: ParamConverters, depth: int) -> str:
        converted = self.to_external(key_type, key, params, depth)
        if key_type.kind == TypeKind.STRING:
            return converted
        return f"str({converted})"

    def _map_to(self, t: TypeDescriptor, source: str, params: ParamConverters, depth: int) -> str:
        key_type, val_type = _map_args(t)
        k = placeholder("k", depth)
        key = self._map_key_to(key_type, k, params, depth + 1)
        val = self.to_external(val_type, f"{source}.get({k})", params, depth + 1)
        return f"{{{key}: {val} for {k} in {source}.Keys.Elements}}"

    def _tuple_to(self, t: TypeDescriptor, source: str, params: ParamConverters, depth: int) -> str:
        if not t.type_args:
            return source

        elems = [
            self.to_external(arg, f"{source}[{i}]", params, depth)
            for i, arg in enumerate(t.type_args)
        ]
        return f"[{', '.join(elems)}]"

    # =========================================================================
    # Datatypes and generic arguments
    # =========================================================================

    def _datatype_call(
        self,
        direction: Direction,
        t: TypeDescriptor,
        source: str,
        params: ParamConverters,
        depth: int,
    ) -> str:
        if direction == Direction.FROM_EXTERNAL:
            func_name = from_json_name(t.name)
        else:
            func_name = to_json_name(t.name)

        if not t.type_args:
            return f"{func_name}({source})"

        converters = [self.converter(direction, arg, params, depth) for arg in t.type_args]
        return f"{func_name}({source}, {', '.join(converters)})"

    def converter(
        self,
        direction: Direction,
        t: TypeDescriptor,
        param_converters: ParamConverters | None = None,
        depth: int = 0,
    ) -> str:
        """Return a callable expression converting one value of type `t`."""
        params = param_converters or {}

        if t.kind == TypeKind.DATATYPE and not t.type_args:
            if direction == Direction.FROM_EXTERNAL:
                return from_json_name(t.name)
            return to_json_name(t.name)
        if t.kind == TypeKind.TYPE_PARAM and t.name in params:
            return params[t.name]

        x = placeholder("x", depth)
        body = self.synthesize(direction, t, x, params, depth + 1)
        return f"lambda {x}: {body}"

    # =========================================================================
    # Statement blocks for associative containers
    # =========================================================================

    def map_from_external_block(
        self,
        t: TypeDescriptor,
        source: str,
        result_var: str,
        indent: str = "    ",
        param_converters: ParamConverters | None = None,
    ) -> list[str]:
        """Statements building an internal map in `result_var` by repeated update."""
        params = param_converters or {}
        key_type, val_type = _map_args(t)
        key = self.from_external(key_type, "k", params, 1)
        val = self.from_external(val_type, "v", params, 1)
        return [
            f"{indent}{result_var} = {self.rt}.Map.Empty",
            f"{indent}for k, v in ({source} or {{}}).items():",
            f"{indent}    {result_var} = {result_var}.update({key}, {val})",
        ]

    def map_to_external_block(
        self,
        t: TypeDescriptor,
        source: str,
        result_var: str,
        indent: str = "    ",
        param_converters: ParamConverters | None = None,
    ) -> list[str]:
        """Statements filling a fresh external object in `result_var`."""
        params = param_converters or {}
        key_type, val_type = _map_args(t)
        key = self._map_key_to(key_type, "k", params, 1)
        val = self.to_external(val_type, "v", params, 1)
        return [
            f"{indent}{result_var} = {{}}",
            f"{indent}if {source} is not None:",
            f"{indent}    for k in {source}.Keys.Elements:",
            f"{indent}        v = {source}.get(k)",
            f"{indent}        {result_var}[{key}] = {val}",
        ]

"""Per-datatype conversion functions.

Each definition in the generation set gets a `<name>FromJson` and a
`<name>ToJson` function. The body depends on the definition's shape:

* erased wrappers convert their single field and nothing else,
* enum-like definitions map variant names to nullary constructors,
* general definitions read and write objects, discriminated on `"type"` when
  there is more than one variant.

Every default branch raises `UnknownVariantError` from the runtime.
"""

import json

from .annotations import CONVERTER_ANNOTATION, json_type_name, value_type_name
from .naming import RuntimeConvention, from_json_name, py_identifier, sanitize, to_json_name
from .synth import Synthesizer
from .types import DatatypeDefinition, DatatypeShape, Field, TypeKind, Variant

INDENT = "    "


def _quote(text: str) -> str:
    return json.dumps(text)


def _is_block_map(f: Field) -> bool:
    return f.type.kind == TypeKind.MAP and len(f.type.type_args) >= 2


class ConverterEmitter:
    """Emits the FromJson/ToJson pair for datatype definitions."""

    def __init__(
        self,
        synth: Synthesizer,
        convention: RuntimeConvention,
        *,
        typed: bool = False,
    ):
        self.synth = synth
        self.convention = convention
        self.typed = typed
        self.rt = synth.rt

    def emit(self, dt: DatatypeDefinition) -> str:
        return f"{self.emit_from_json(dt)}\n\n\n{self.emit_to_json(dt)}"

    # =========================================================================
    # Signatures
    # =========================================================================

    def _param_converters(self, dt: DatatypeDefinition, suffix: str) -> dict[str, str]:
        return {p: f"{sanitize(p)}_{suffix}" for p in dt.generic_params()}

    def _signature(
        self,
        func_name: str,
        arg: str,
        arg_type: str,
        return_type: str,
        converters: dict[str, str],
    ) -> str:
        if self.typed:
            params = [f"{arg}: {arg_type}"]
            params += [f"{c}: {CONVERTER_ANNOTATION}" for c in converters.values()]
            return f"def {func_name}({', '.join(params)}) -> {return_type}:"
        return f"def {func_name}({', '.join([arg, *converters.values()])}):"

    def _unknown(self, dt: DatatypeDefinition, offending: str) -> str:
        return f"{INDENT}raise {self.rt}.UnknownVariantError({_quote(dt.name)}, {offending})"

    # =========================================================================
    # External -> internal
    # =========================================================================

    def emit_from_json(self, dt: DatatypeDefinition) -> str:
        params = self._param_converters(dt, "fromJson")
        lines = [
            self._signature(
                from_json_name(dt.name),
                "json",
                f'"{json_type_name(dt.name)}"',
                f'"{value_type_name(dt.name)}"',
                params,
            )
        ]
        shape = dt.shape

        if shape == DatatypeShape.ERASED_WRAPPER:
            setup, expr = self._read_field(dt.variants[0].fields[0], params, INDENT)
            lines.extend(setup)
            lines.append(f"{INDENT}return {expr}")
            return "\n".join(lines)

        if shape == DatatypeShape.ENUM_LIKE:
            for variant in dt.variants:
                lines.append(f"{INDENT}if json == {_quote(variant.name)}:")
                lines.append(f"{INDENT * 2}return {self._constructor(dt, variant)}()")
            lines.append(self._unknown(dt, "json"))
            return "\n".join(lines)

        if len(dt.variants) == 1:
            lines.extend(self._construct(dt, dt.variants[0], params, INDENT))
            return "\n".join(lines)

        lines.append(f'{INDENT}tag = json.get("type")')
        for variant in dt.variants:
            lines.append(f"{INDENT}if tag == {_quote(variant.name)}:")
            lines.extend(self._construct(dt, variant, params, INDENT * 2))
        lines.append(self._unknown(dt, "tag"))
        return "\n".join(lines)

    def _constructor(self, dt: DatatypeDefinition, variant: Variant) -> str:
        return self.convention.constructor(dt.module_name, dt.name, variant.name)

    def _read_field(self, f: Field, params: dict[str, str], indent: str) -> tuple[list[str], str]:
        source = f"json.get({_quote(f.name)})"
        if _is_block_map(f):
            temp = f"__{py_identifier(f.name)}"
            block = self.synth.map_from_external_block(f.type, source, temp, indent, params)
            return block, temp
        return [], self.synth.from_external(f.type, source, params)

    def _construct(
        self,
        dt: DatatypeDefinition,
        variant: Variant,
        params: dict[str, str],
        indent: str,
    ) -> list[str]:
        ctor = self._constructor(dt, variant)
        if not variant.fields:
            return [f"{indent}return {ctor}()"]

        setup: list[str] = []
        args: list[str] = []
        for f in variant.fields:
            lines, expr = self._read_field(f, params, indent)
            setup.extend(lines)
            args.append(expr)

        return [
            *setup,
            f"{indent}return {ctor}(",
            *(f"{indent}{INDENT}{arg}," for arg in args),
            f"{indent})",
        ]

    # =========================================================================
    # Internal -> external
    # =========================================================================

    def emit_to_json(self, dt: DatatypeDefinition) -> str:
        params = self._param_converters(dt, "toJson")
        lines = [
            self._signature(
                to_json_name(dt.name),
                "value",
                f'"{value_type_name(dt.name)}"',
                f'"{json_type_name(dt.name)}"',
                params,
            )
        ]
        shape = dt.shape

        if shape == DatatypeShape.ERASED_WRAPPER:
            f = dt.variants[0].fields[0]
            if _is_block_map(f):
                temp = f"__{py_identifier(f.name)}_json"
                lines.extend(self.synth.map_to_external_block(f.type, "value", temp, INDENT, params))
                expr = temp
            else:
                expr = self.synth.to_external(f.type, "value", params)
            lines.append(f"{INDENT}return {{{_quote(f.name)}: {expr}}}")
            return "\n".join(lines)

        if shape == DatatypeShape.ENUM_LIKE:
            for variant in dt.variants:
                lines.append(f"{INDENT}if {self.convention.is_variant('value', variant.name)}:")
                lines.append(f"{INDENT * 2}return {_quote(variant.name)}")
            lines.append(self._unknown(dt, "value"))
            return "\n".join(lines)

        if len(dt.variants) == 1:
            lines.extend(self._deconstruct(dt.variants[0], params, INDENT, tagged=False))
            return "\n".join(lines)

        for variant in dt.variants:
            lines.append(f"{INDENT}if {self.convention.is_variant('value', variant.name)}:")
            lines.extend(self._deconstruct(variant, params, INDENT * 2, tagged=True))
        lines.append(self._unknown(dt, "value"))
        return "\n".join(lines)

    def _deconstruct(
        self,
        variant: Variant,
        params: dict[str, str],
        indent: str,
        *,
        tagged: bool,
    ) -> list[str]:
        setup: list[str] = []
        entries: list[str] = []
        if tagged:
            entries.append(f'"type": {_quote(variant.name)}')

        for f in variant.fields:
            source = self.convention.destructor("value", f.name)
            if _is_block_map(f):
                temp = f"__{py_identifier(f.name)}_json"
                setup.extend(self.synth.map_to_external_block(f.type, source, temp, indent, params))
                entries.append(f"{_quote(f.name)}: {temp}")
            else:
                entries.append(f"{_quote(f.name)}: {self.synth.to_external(f.type, source, params)}")

        if not entries:
            return [*setup, f"{indent}return {{}}"]

        return [
            *setup,
            f"{indent}return {{",
            *(f"{indent}{INDENT}{entry}," for entry in entries),
            f"{indent}}}",
        ]

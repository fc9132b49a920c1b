"""The `App` class: constructors, model accessors and function wrappers.

Members take and return external (JSON) values wherever a conversion exists,
so callers holding parsed JSON can drive the domain without touching the
runtime directly. Datatype-typed arguments are the exception: they are
expected to be values previously obtained from this same class.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .annotations import external_annotation, internal_annotation, value_type_name
from .closure import GenerationSet
from .naming import RuntimeConvention, accessor_name, lower_name, py_identifier
from .options import GeneratorOptions
from .synth import Synthesizer
from .types import DatatypeDefinition, Field, FunctionSignature, TypeDescriptor, TypeKind, Variant

logger = logging.getLogger(__name__)

INDENT = "    "


@dataclass
class _Section:
    title: str
    members: list[list[str]] = field(default_factory=list)


class ApiEmitter:
    """Builds the text of the `App` class for one generation set."""

    def __init__(
        self,
        synth: Synthesizer,
        convention: RuntimeConvention,
        generation_set: GenerationSet,
        functions: Sequence[FunctionSignature],
        options: GeneratorOptions,
        domain_module: str,
    ):
        self.synth = synth
        self.convention = convention
        self.generation_set = generation_set
        self.functions = list(functions)
        self.options = options
        self.domain_module = domain_module
        self.typed = options.typed
        self.rt = synth.rt

    # =========================================================================
    # Helpers
    # =========================================================================

    def _domain_type(self, name: str) -> DatatypeDefinition | None:
        for dt in self.generation_set:
            if dt.module_name == self.domain_module and dt.name == name:
                return dt
        return None

    def _is_erased(self, t: TypeDescriptor) -> bool:
        dt = self.generation_set.get(t.name)
        return dt is not None and dt.is_erased

    def _def(self, name: str, params: list[tuple[str, str]], returns: str) -> list[str]:
        if self.typed:
            args = ", ".join(f"{p}: {annotation}" for p, annotation in params)
            header = f"def {name}({args}) -> {returns}:"
        else:
            header = f"def {name}({', '.join(p for p, _ in params)}):"
        return [f"{INDENT}@staticmethod", f"{INDENT}{header}"]

    def _body(self, *lines: str) -> list[str]:
        return [f"{INDENT * 2}{line}" for line in lines]

    def _call(self, func: str, args: list[str]) -> str:
        return f"{func}({', '.join(args)})"

    # =========================================================================
    # Members
    # =========================================================================

    def _constructor(self, dt: DatatypeDefinition, variant: Variant, *, action: bool) -> list[str]:
        name = py_identifier(variant.name)
        ctor = self.convention.constructor(dt.module_name, dt.name, variant.name)
        returns = f'"{value_type_name(dt.name)}"'

        params: list[tuple[str, str]] = []
        args: list[str] = []
        for f in variant.fields:
            param = py_identifier(f.name)
            if f.type.kind == TypeKind.DATATYPE and (action or not self._is_erased(f.type)):
                params.append((param, internal_annotation(f.type, self.rt)))
                args.append(param)
            else:
                params.append((param, external_annotation(f.type)))
                args.append(self.synth.from_external(f.type, param))

        if dt.is_erased and not action:
            # The runtime elides the wrapper, the field value is the datatype value
            return self._def(name, params, returns) + self._body(f"return {args[0]}")
        return self._def(name, params, returns) + self._body(f"return {self._call(ctor, args)}")

    def _accessor(self, model: DatatypeDefinition, f: Field) -> list[str]:
        name = py_identifier(accessor_name(f.name))
        access = "m" if model.is_erased else self.convention.destructor("m", f.name)
        model_annotation = f'"{value_type_name(model.name)}"'

        if f.type.kind == TypeKind.MAP and len(f.type.type_args) >= 2:
            key_type, val_type = f.type.type_args[0], f.type.type_args[1]
            params = [("m", model_annotation), ("key", external_annotation(key_type))]
            returns = f"Optional[{external_annotation(val_type)}]"
            return self._def(name, params, returns) + self._body(
                f"dafny_key = {self.synth.from_external(key_type, 'key')}",
                f"if {access}.contains(dafny_key):",
                f"{INDENT}val = {access}.get(dafny_key)",
                f"{INDENT}return {self.synth.to_external(val_type, 'val')}",
                "return None",
            )

        returns = external_annotation(f.type)
        return self._def(name, [("m", model_annotation)], returns) + self._body(
            f"return {self.synth.to_external(f.type, access)}"
        )

    def _return_conversion(self, t: TypeDescriptor, expr: str) -> tuple[str, str]:
        if t.kind in (TypeKind.INT, TypeKind.STRING, TypeKind.SEQ):
            return self.synth.to_external(t, expr), external_annotation(t)
        return expr, internal_annotation(t, self.rt)

    def _function(self, sig: FunctionSignature) -> list[str]:
        params: list[tuple[str, str]] = []
        args: list[str] = []
        for p in sig.parameters:
            param = py_identifier(p.name)
            if p.type.kind in (TypeKind.DATATYPE, TypeKind.OPAQUE):
                params.append((param, internal_annotation(p.type, self.rt)))
                args.append(param)
            else:
                params.append((param, external_annotation(p.type)))
                args.append(self.synth.from_external(p.type, param))

        call = self._call(self.convention.function(self.options.app_core_module, sig.name), args)
        result, returns = self._return_conversion(sig.return_type, call)
        return self._def(py_identifier(sig.name), params, returns) + self._body(f"return {result}")

    # =========================================================================
    # Sections
    # =========================================================================

    def sections(self) -> list[_Section]:
        action_type = self._domain_type(self.options.action_type)
        model_type = self._domain_type(self.options.model_type)
        function_names = {py_identifier(sig.name) for sig in self.functions}
        taken: set[str] = set()
        sections: list[_Section] = []

        def add(section: _Section, name: str, member: list[str]) -> None:
            if name in taken:
                logger.debug("Skipping App member '%s': name already taken", name)
                return
            taken.add(name)
            section.members.append(member)

        distinguished = {self.options.action_type, self.options.model_type}
        for dt in self.generation_set:
            if dt.module_name != self.domain_module or dt.name in distinguished:
                continue
            section = _Section(f"{dt.name} constructors")
            for variant in dt.variants:
                name = py_identifier(variant.name)
                if name in function_names:
                    logger.debug("Skipping constructor '%s': shadowed by a function", name)
                    continue
                add(section, name, self._constructor(dt, variant, action=False))
            sections.append(section)

        reserved: set[str] = set()

        if action_type is not None:
            section = _Section("Action constructors")
            for variant in action_type.variants:
                name = py_identifier(variant.name)
                reserved.add(name)
                add(section, name, self._constructor(action_type, variant, action=True))
            sections.append(section)

        if model_type is not None and model_type.variants:
            section = _Section("Model accessors")
            for f in model_type.variants[0].fields:
                name = py_identifier(accessor_name(f.name))
                reserved.add(name)
                add(section, name, self._accessor(model_type, f))
            sections.append(section)

        section = _Section(f"{self.options.app_core_module} functions")
        for sig in self.functions:
            name = py_identifier(sig.name)
            if name in reserved:
                logger.debug("Skipping wrapper for '%s': covered by the action or model", name)
                continue
            add(section, name, self._function(sig))
        sections.append(section)

        return [s for s in sections if s.members]

    def exports(self) -> list[str]:
        lines: list[str] = []
        exported: set[str] = set()
        for dt in self.generation_set:
            lower = lower_name(dt.name)
            if lower in exported:
                continue
            exported.add(lower)
            lines.append(f"{INDENT}{lower}ToJson = staticmethod({lower}ToJson)")
            lines.append(f"{INDENT}{lower}FromJson = staticmethod({lower}FromJson)")
        return lines

    def emit(self) -> str:
        body: list[str] = []
        for section in self.sections():
            body.append(f"{INDENT}# {section.title}")
            for member in section.members:
                body.extend(member)
                body.append("")

        exports = self.exports()
        if exports:
            body.append(f"{INDENT}# Conversion functions")
            body.extend(exports)

        while body and body[-1] == "":
            body.pop()
        if not body:
            body = [f"{INDENT}pass"]
        return "\n".join(["class App:", *body])

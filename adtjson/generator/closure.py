"""Closure resolution: which datatypes need converters in one generation run."""

import logging
from collections import deque
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from .types import DatatypeDefinition, FunctionSignature, TypeDescriptor, TypeKind

logger = logging.getLogger(__name__)

Lookup = Callable[[str], Sequence[DatatypeDefinition]]


class GenerationError(RuntimeError):
    """Raised when generation cannot produce consistent output."""


class AmbiguousTypeError(GenerationError):
    """Two differently-shaped datatypes share a bare name in one generation set."""

    def __init__(self, name: str, first_module: str, second_module: str):
        self.name = name
        self.first_module = first_module
        self.second_module = second_module
        super().__init__(
            f"Duplicate datatype name '{name}' found in modules '{first_module}' and "
            f"'{second_module}' with different structures. Consider renaming one of the types."
        )


@dataclass(frozen=True)
class MergeNote:
    """A duplicate definition that was dropped in favour of an identical one."""

    dropped: DatatypeDefinition
    kept: DatatypeDefinition

    def __str__(self) -> str:
        return (
            f"Skipping duplicate type '{self.dropped.full_name}' "
            f"(identical to '{self.kept.full_name}')"
        )


@dataclass(frozen=True)
class GenerationSet:
    """Ordered, deduplicated definitions that get converter functions."""

    root_module: str
    definitions: tuple[DatatypeDefinition, ...]
    merged: tuple[MergeNote, ...] = ()

    def __iter__(self) -> Iterator[DatatypeDefinition]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)

    def get(self, name: str) -> DatatypeDefinition | None:
        for dt in self.definitions:
            if dt.name == name:
                return dt
        return None

    def names(self) -> list[str]:
        return [dt.name for dt in self.definitions]


def collect_datatype_names(t: TypeDescriptor, found: list[str]) -> None:
    """Append datatype names referenced by `t` (containers are transparent)."""
    if t.kind == TypeKind.DATATYPE and t.name not in found:
        found.append(t.name)
    for arg in t.type_args:
        collect_datatype_names(arg, found)


def structurally_identical(a: DatatypeDefinition, b: DatatypeDefinition) -> bool:
    """Shallow structural comparison.

    Field types are compared by name and kind only; type arguments are not
    inspected.
    """
    if len(a.variants) != len(b.variants):
        return False

    for va, vb in zip(a.variants, b.variants):
        if va.name != vb.name or len(va.fields) != len(vb.fields):
            return False
        for fa, fb in zip(va.fields, vb.fields):
            if fa.name != fb.name:
                return False
            if fa.type.name != fb.type.name or fa.type.kind != fb.type.kind:
                return False

    return True


def _discover(
    root_definitions: Sequence[DatatypeDefinition],
    signatures: Sequence[FunctionSignature],
    lookup: Lookup,
) -> list[str]:
    """Return every reachable datatype name, in discovery order."""
    discovered: list[str] = []

    for sig in signatures:
        for param in sig.parameters:
            collect_datatype_names(param.type, discovered)
        collect_datatype_names(sig.return_type, discovered)
    for dt in root_definitions:
        if dt.name not in discovered:
            discovered.append(dt.name)

    pending = deque(discovered)
    expanded: set[str] = set()

    while pending:
        name = pending.popleft()
        if name in expanded:
            continue
        expanded.add(name)

        definitions = lookup(name)
        if not definitions:
            logger.debug("No definition for referenced type '%s'; not expanding it", name)
            continue

        for dt in definitions:
            for variant in dt.variants:
                for f in variant.fields:
                    found: list[str] = []
                    collect_datatype_names(f.type, found)
                    for ref in found:
                        if ref not in discovered:
                            discovered.append(ref)
                            pending.append(ref)

    return discovered


def resolve(
    root_definitions: Sequence[DatatypeDefinition],
    signatures: Sequence[FunctionSignature],
    lookup: Lookup,
    *,
    root_module: str | None = None,
) -> GenerationSet:
    """Compute the generation set for a root module and a function surface.

    Raises:
        AmbiguousTypeError: when two definitions share a bare name but differ
            in structure. Nothing may be generated in that case.
    """
    if root_module is None:
        root_module = root_definitions[0].module_name if root_definitions else ""

    roots = [dt for dt in root_definitions if dt.module_name == root_module]
    roots_by_name = {dt.name: dt for dt in roots}

    accepted: list[DatatypeDefinition] = []
    accepted_by_name: dict[str, DatatypeDefinition] = {}
    merged: list[MergeNote] = []

    for name in _discover(roots, signatures, lookup):
        for candidate in lookup(name):
            if candidate.module_name == root_module:
                continue

            existing = roots_by_name.get(name) or accepted_by_name.get(name)
            if existing is None:
                accepted.append(candidate)
                accepted_by_name[name] = candidate
                continue

            if not structurally_identical(existing, candidate):
                raise AmbiguousTypeError(name, existing.module_name, candidate.module_name)

            note = MergeNote(dropped=candidate, kept=existing)
            logger.info("%s", note)
            merged.append(note)

    return GenerationSet(
        root_module=root_module,
        definitions=tuple(roots) + tuple(accepted),
        merged=tuple(merged),
    )

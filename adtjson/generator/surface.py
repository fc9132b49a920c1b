"""Summary of what generated code exposes for a catalog."""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin, LetterCase, config

from .options import GeneratorOptions
from .python import domain_module_for, generation_set_for
from .types import Field, TypeCatalog, Variant

_CAMEL = config(letter_case=LetterCase.CAMEL)["dataclasses_json"]


@dataclass
class FieldEntry(DataClassJsonMixin):
    dataclass_json_config = _CAMEL

    name: str
    type: str


@dataclass
class ConstructorEntry(DataClassJsonMixin):
    dataclass_json_config = _CAMEL

    name: str
    fields: list[FieldEntry]


@dataclass
class DatatypeEntry(DataClassJsonMixin):
    dataclass_json_config = _CAMEL

    name: str
    module: str
    constructors: list[ConstructorEntry]


@dataclass
class FunctionEntry(DataClassJsonMixin):
    dataclass_json_config = _CAMEL

    name: str
    params: list[FieldEntry]
    return_type: str


@dataclass
class LogicSurface(DataClassJsonMixin):
    """The model, actions, datatypes and functions of one catalog."""

    dataclass_json_config = _CAMEL

    model: str | None
    actions: list[ConstructorEntry]
    datatypes: list[DatatypeEntry]
    app_core_functions: list[FunctionEntry]
    has_app_core: bool
    generation_set: list[str]


def _fields(fields: list[Field]) -> list[FieldEntry]:
    return [FieldEntry(f.name, str(f.type)) for f in fields]


def _constructors(variants: list[Variant]) -> list[ConstructorEntry]:
    return [ConstructorEntry(v.name, _fields(v.fields)) for v in variants]


def describe_surface(catalog: TypeCatalog, options: GeneratorOptions | None = None) -> LogicSurface:
    """Describe the surface generated code would expose.

    Raises:
        AmbiguousTypeError: when the catalog cannot produce a consistent set.
    """
    options = options or GeneratorOptions()
    domain_module = domain_module_for(catalog, options)
    generation_set = generation_set_for(catalog, options)

    model = None
    actions: list[ConstructorEntry] = []
    for dt in catalog.definitions_in(domain_module):
        if dt.name == options.model_type:
            model = dt.name
        if dt.name == options.action_type:
            actions = _constructors(dt.variants)

    functions = catalog.functions_in(options.app_core_module)
    return LogicSurface(
        model=model,
        actions=actions,
        datatypes=[
            DatatypeEntry(dt.name, dt.module_name, _constructors(dt.variants))
            for dt in catalog.definitions
            if dt.name != options.action_type
        ],
        app_core_functions=[
            FunctionEntry(fn.name, _fields(fn.parameters), str(fn.return_type)) for fn in functions
        ],
        has_app_core=bool(functions),
        generation_set=[dt.full_name for dt in generation_set],
    )

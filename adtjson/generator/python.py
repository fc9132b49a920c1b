"""Python code generator for adtjson datatype catalogs."""

import logging
from importlib import resources

from jinja2 import Environment, PackageLoader

from .. import __version__
from .annotations import TYPING_IMPORTS, DeclarationEmitter
from .api import ApiEmitter
from .closure import GenerationSet, resolve
from .converters import ConverterEmitter
from .options import GeneratorOptions
from .synth import Synthesizer
from .types import TypeCatalog

logger = logging.getLogger(__name__)

RUNTIME_FILES = [
    "__init__.py",
    "values.py",
    "datatypes.py",
]

env = Environment(
    loader=PackageLoader("adtjson.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")
helpers_template = env.get_template("helpers.py.j2")


def render_helpers(typed: bool = False, runtime_alias: str = "_rt") -> str:
    """Render the helper functions the converters depend on."""
    return helpers_template.render(typed=typed, runtime_alias=runtime_alias)


def domain_module_for(catalog: TypeCatalog, options: GeneratorOptions) -> str:
    return options.domain_module or catalog.detect_domain_module(options.action_type)


def generation_set_for(catalog: TypeCatalog, options: GeneratorOptions) -> GenerationSet:
    """Resolve the definitions that need converters.

    Raises:
        AmbiguousTypeError: when the catalog cannot produce a consistent set.
    """
    domain_module = domain_module_for(catalog, options)
    return resolve(
        catalog.definitions_in(domain_module),
        catalog.functions_in(options.app_core_module),
        catalog.lookup,
        root_module=domain_module,
    )


def _module_names(generation_set: GenerationSet, catalog: TypeCatalog, options: GeneratorOptions) -> list[str]:
    names = [generation_set.root_module]
    if catalog.functions_in(options.app_core_module):
        names.append(options.app_core_module)
    for dt in generation_set:
        if dt.module_name not in names:
            names.append(dt.module_name)
    return names


def render(catalog: TypeCatalog, options: GeneratorOptions | None = None) -> str:
    """Render a catalog to Python source code.

    Resolution happens before any text is produced, so a generation error
    leaves no partial output behind.
    """
    options = options or GeneratorOptions()
    generation_set = generation_set_for(catalog, options)
    logger.debug(
        "Generating converters for %d datatypes: %s",
        len(generation_set),
        ", ".join(generation_set.names()),
    )

    convention = options.convention()
    synth = Synthesizer(options.runtime_alias)
    converter_emitter = ConverterEmitter(synth, convention, typed=options.typed)
    api_emitter = ApiEmitter(
        synth,
        convention,
        generation_set,
        catalog.functions_in(options.app_core_module),
        options,
        generation_set.root_module,
    )

    declarations: list[str] = []
    if options.typed:
        declaration_emitter = DeclarationEmitter(convention, options.runtime_alias)
        declarations = [declaration_emitter.emit(dt) for dt in generation_set]

    return template.render(
        version=__version__,
        typed=options.typed,
        typing_imports=TYPING_IMPORTS,
        runtime_alias=options.runtime_alias,
        runtime_import=options.runtime_import,
        modules_import=options.modules_import,
        module_names=_module_names(generation_set, catalog, options),
        helpers=render_helpers(options.typed, options.runtime_alias).rstrip("\n"),
        declarations=declarations,
        converters=[converter_emitter.emit(dt) for dt in generation_set],
        api=api_emitter.emit(),
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("adtjson.runtime").joinpath(filename).read_text()
        result[filename] = content
    return result

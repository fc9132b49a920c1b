"""Fixtures for executing generated code against the runtime."""

import os
from types import SimpleNamespace

import pytest

from adtjson.generator import GeneratorOptions, parse
from adtjson.generator.naming import dafny_mangle, sanitize
from adtjson.generator.python import render
from adtjson.runtime import datatype

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def runtime_modules(catalog):
    """Build a runtime class for every definition, grouped by module."""
    modules = {}
    for dt in catalog.definitions:
        module = modules.setdefault(dt.module_name, SimpleNamespace())
        variants = {v.name: [f.name for f in v.fields] for v in dt.variants}
        setattr(module, sanitize(dt.name), datatype(dt.name, variants, mangle=dafny_mangle))
    return modules


@pytest.fixture
def domain_text():
    with open(f"{FILE_DIR}/domain.adt", encoding="utf-8") as f:
        return f.read()


@pytest.fixture
def gen_code():
    def generate(text, app_core=None, **options):
        catalog = parse(text)
        generated_code = render(
            catalog, GeneratorOptions(runtime_import="adtjson.runtime", **options)
        )
        gbl = dict(runtime_modules(catalog))
        if app_core is not None:
            gbl["AppCore"] = app_core(gbl) if callable(app_core) else app_core
        exec(generated_code, gbl)
        gbl["__source__"] = generated_code
        return gbl

    return generate

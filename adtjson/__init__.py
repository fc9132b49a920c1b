"""adtjson - JSON marshalling code generator for algebraic datatypes."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("adtjson")
except PackageNotFoundError:
    __version__ = "(local)"

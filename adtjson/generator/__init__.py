"""adtjson converter generator."""

from .closure import AmbiguousTypeError as AmbiguousTypeError
from .closure import GenerationError as GenerationError
from .closure import GenerationSet as GenerationSet
from .closure import resolve as resolve
from .options import GeneratorOptions as GeneratorOptions
from .options import Profile as Profile
from .parser import ValidationError as ValidationError
from .parser import load as load
from .parser import parse as parse
from .surface import describe_surface as describe_surface
from .synth import Direction as Direction
from .synth import Synthesizer as Synthesizer
from .types import *

"""Value generators and the registry that selects them."""

from .base import Arbitrary, FunctionArbitrary, MappedArbitrary, arbitrary
from .primitives import (
    BoolArbitrary,
    BytesArbitrary,
    DateArbitrary,
    DateTimeArbitrary,
    DecimalArbitrary,
    ElementsArbitrary,
    FloatArbitrary,
    IntegerArbitrary,
    StringArbitrary,
    UUIDArbitrary,
    elements,
    floats,
    integers,
    strings,
)
from .registry import GeneratorRegistry, default_generators

__all__ = [
    "Arbitrary",
    "BoolArbitrary",
    "BytesArbitrary",
    "DateArbitrary",
    "DateTimeArbitrary",
    "DecimalArbitrary",
    "ElementsArbitrary",
    "FloatArbitrary",
    "FunctionArbitrary",
    "GeneratorRegistry",
    "IntegerArbitrary",
    "MappedArbitrary",
    "StringArbitrary",
    "UUIDArbitrary",
    "arbitrary",
    "default_generators",
    "elements",
    "floats",
    "integers",
    "strings",
]

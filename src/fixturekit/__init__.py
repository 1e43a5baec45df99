"""Randomized test-fixture generation driven by type introspection.

``fixturekit`` reconstructs instances of user-defined types (dataclasses,
named tuples, pydantic models, annotated classes, builder-pattern classes,
enums and generics) from their annotations.  Sub-paths of the generated
object graph can be fixed, nulled, sized or constrained with predicates::

    kit = FixtureKit(seed=7)
    order = (
        kit.give_me_builder(Order)
        .size("items", 3)
        .set("items[0].quantity", 5)
        .set_post_condition(lambda o: o.total >= 0)
        .sample()
    )
"""

from .arbitrary import Arbitrary, arbitrary, elements, floats, integers, strings
from .builder import ArbitraryBuilder
from .config import ConfigModel, load_config
from .customization import Customization, Operation
from .fixture import FixtureKit
from .introspect import (
    ConstraintTranslator,
    IntrospectionStrategy,
    Kind,
    StrategyResult,
    TypeDescriptor,
)
from .path import PropertyPath, parse_path
from .utils.errors import (
    FixtureKitError,
    GenerationConstraintConflict,
    InvalidPathError,
    PostConditionUnsatisfiable,
    RecursionLimitExceeded,
    RegistryFrozenError,
    UnsupportedTypeError,
)

__version__ = "0.1.0"

__all__ = [
    "Arbitrary",
    "ArbitraryBuilder",
    "ConfigModel",
    "ConstraintTranslator",
    "Customization",
    "FixtureKit",
    "FixtureKitError",
    "GenerationConstraintConflict",
    "IntrospectionStrategy",
    "InvalidPathError",
    "Kind",
    "Operation",
    "PostConditionUnsatisfiable",
    "PropertyPath",
    "RecursionLimitExceeded",
    "RegistryFrozenError",
    "StrategyResult",
    "TypeDescriptor",
    "UnsupportedTypeError",
    "arbitrary",
    "elements",
    "floats",
    "integers",
    "strings",
    "load_config",
    "parse_path",
]

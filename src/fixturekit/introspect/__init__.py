"""Type introspection: annotations in, structural descriptors out."""

from .base import (
    ConstraintTranslator,
    Construction,
    IntrospectionStrategy,
    Kind,
    Member,
    StrategyResult,
    TypeDescriptor,
)
from .introspector import PRIMITIVE_TYPES, Introspector
from .strategies import (
    BuilderStrategy,
    ConstructorStrategy,
    FieldStrategy,
    ModelFieldsStrategy,
    default_strategy_chain,
)

__all__ = [
    "BuilderStrategy",
    "ConstraintTranslator",
    "Construction",
    "ConstructorStrategy",
    "FieldStrategy",
    "IntrospectionStrategy",
    "Introspector",
    "Kind",
    "Member",
    "ModelFieldsStrategy",
    "PRIMITIVE_TYPES",
    "StrategyResult",
    "TypeDescriptor",
    "default_strategy_chain",
]

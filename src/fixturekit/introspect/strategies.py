"""Introspection strategies forming the default failover chain.

Each strategy answers one question about a class: can its members be
discovered and can an instance be assembled from generated member values?
Strategies only collect member *annotations*; the
:class:`~fixturekit.introspect.introspector.Introspector` verifies that every
member is describable before accepting a result.

The default chain is :class:`ModelFieldsStrategy` (pydantic models), then
:class:`ConstructorStrategy`, then :class:`FieldStrategy`, then
:class:`BuilderStrategy`.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, get_origin, get_type_hints

from .base import Construction, IntrospectionStrategy, Member, StrategyResult
from .typing_utils import is_nullable, substitute

if TYPE_CHECKING:  # pragma: no cover
    from .introspector import Introspector

__all__ = [
    "ModelFieldsStrategy",
    "ConstructorStrategy",
    "FieldStrategy",
    "BuilderStrategy",
    "class_hints",
    "default_strategy_chain",
]

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def class_hints(cls: type, type_map: Mapping[Any, Any]) -> dict[str, Any] | None:
    """Return resolved, substituted class-level annotations of ``cls``.

    ``ClassVar`` annotations are dropped.  ``None`` is returned when forward
    references cannot be resolved.
    """

    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        return None
    resolved: dict[str, Any] = {}
    for name, annotation in hints.items():
        if annotation is ClassVar or get_origin(annotation) is ClassVar:
            continue
        resolved[name] = substitute(annotation, type_map)
    return resolved


def _signature(target: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError):
        return None


def _init_hints(cls: type) -> dict[str, Any]:
    init = cls.__dict__.get("__init__")
    if init is None:
        return {}
    try:
        return get_type_hints(init, include_extras=True)
    except (NameError, TypeError):
        return {}


class ModelFieldsStrategy:
    """Describe pydantic models through their evaluated ``model_fields``.

    Field annotations are already resolved by pydantic, so forward references
    in the model module do not need to be evaluated again.
    """

    def name(self) -> str:
        return "model_fields"

    def describe(
        self,
        cls: type,
        type_map: Mapping[Any, Any],
        introspector: "Introspector",
    ) -> StrategyResult | None:
        fields = getattr(cls, "model_fields", None)
        if not isinstance(fields, Mapping):
            return None
        members: list[Member] = []
        for name, info in fields.items():
            annotation = substitute(info.annotation, type_map)
            members.append(
                Member(
                    name,
                    annotation,
                    nullable=is_nullable(annotation),
                    has_default=not info.is_required(),
                    alias=info.alias,
                )
            )
        return StrategyResult(tuple(members), Construction.CONSTRUCTOR)


class ConstructorStrategy:
    """Describe a class through its constructor parameters.

    Parameter annotations are taken from class-level annotations with a
    matching name, falling back to the constructor's own annotations.
    Unannotated parameters with defaults are left to their defaults.
    """

    def name(self) -> str:
        return "constructor"

    def describe(
        self,
        cls: type,
        type_map: Mapping[Any, Any],
        introspector: "Introspector",
    ) -> StrategyResult | None:
        hints = class_hints(cls, type_map)
        sig = _signature(cls)
        if hints is None or sig is None:
            return None
        init_hints = _init_hints(cls)

        members: list[Member] = []
        for param in sig.parameters.values():
            if param.kind in _SKIPPED_KINDS:
                continue
            has_default = param.default is not inspect.Parameter.empty
            annotation = hints.get(param.name)
            if annotation is None and param.name in init_hints:
                annotation = substitute(init_hints[param.name], type_map)
            if annotation is None:
                if has_default:
                    continue
                return None
            if param.kind is inspect.Parameter.POSITIONAL_ONLY:
                return None
            members.append(
                Member(param.name, annotation, nullable=is_nullable(annotation), has_default=has_default)
            )

        if not members and hints:
            # A bare ``object.__init__`` cannot populate annotated fields.
            return None
        return StrategyResult(tuple(members), Construction.CONSTRUCTOR)


class FieldStrategy:
    """Describe a class through its annotated fields.

    Requires a constructor callable without arguments; members are assigned
    with ``setattr`` after construction.
    """

    def name(self) -> str:
        return "fields"

    def describe(
        self,
        cls: type,
        type_map: Mapping[Any, Any],
        introspector: "Introspector",
    ) -> StrategyResult | None:
        hints = class_hints(cls, type_map)
        sig = _signature(cls)
        if not hints or sig is None:
            return None
        for param in sig.parameters.values():
            if param.kind in _SKIPPED_KINDS:
                continue
            if param.default is inspect.Parameter.empty:
                return None
        members = tuple(
            Member(name, annotation, nullable=is_nullable(annotation), has_default=hasattr(cls, name))
            for name, annotation in hints.items()
        )
        return StrategyResult(members, Construction.FIELD_ASSIGNMENT)


class BuilderStrategy:
    """Describe a class exposing a ``builder()`` factory.

    The builder object must offer ``build()``; member values are applied
    through ``name(value)`` or ``with_name(value)`` methods, or by attribute
    assignment when neither exists.
    """

    factory_name: str = "builder"

    def name(self) -> str:
        return "builder"

    def describe(
        self,
        cls: type,
        type_map: Mapping[Any, Any],
        introspector: "Introspector",
    ) -> StrategyResult | None:
        factory = getattr(cls, self.factory_name, None)
        if factory is None or not callable(factory):
            return None
        hints = class_hints(cls, type_map)
        if not hints:
            return None
        probe = factory()
        if not callable(getattr(probe, "build", None)):
            return None
        members = tuple(
            Member(name, annotation, nullable=is_nullable(annotation))
            for name, annotation in hints.items()
        )
        return StrategyResult(members, Construction.BUILDER, builder=factory)


def default_strategy_chain() -> tuple[IntrospectionStrategy, ...]:
    """Return the default ordered failover chain."""

    return (ModelFieldsStrategy(), ConstructorStrategy(), FieldStrategy(), BuilderStrategy())

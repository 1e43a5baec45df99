"""Structural type descriptions and the introspection plugin protocols.

A :class:`TypeDescriptor` is the closed, explicit description of a type that
every other component works with.  Descriptors are immutable and shared
read-only; nested shapes are referenced by *annotation* rather than by
descriptor so that self-referential types stay finite.  The owning
:class:`~fixturekit.introspect.introspector.Introspector` resolves those
annotations through its memoized ``describe``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover
    from ..customization import Customization
    from .introspector import Introspector


class Kind(Enum):
    """Enumeration of descriptor kinds."""

    PRIMITIVE = "PRIMITIVE"
    RECORD = "RECORD"
    COLLECTION = "COLLECTION"
    MAP = "MAP"
    ENUM = "ENUM"
    GENERIC = "GENERIC"

    @property
    def is_record(self) -> bool:
        return self in (Kind.RECORD, Kind.GENERIC)

    @property
    def is_indexable(self) -> bool:
        return self in (Kind.COLLECTION, Kind.MAP)


class Construction(Enum):
    """How an instance of a described type is assembled."""

    LITERAL = "LITERAL"
    CONSTRUCTOR = "CONSTRUCTOR"
    FIELD_ASSIGNMENT = "FIELD_ASSIGNMENT"
    BUILDER = "BUILDER"
    CONTAINER = "CONTAINER"


@dataclass(slots=True, frozen=True)
class Member:
    """A named, typed member of a record.

    ``annotation`` is concrete: generic type variables of the owner have
    already been substituted.
    """

    name: str
    annotation: Any
    nullable: bool = False
    has_default: bool = False
    alias: str | None = None

    @property
    def argument_name(self) -> str:
        """Return the keyword used when passing this member to a constructor."""

        return self.alias or self.name


@dataclass(slots=True, frozen=True)
class TypeDescriptor:
    """Structural shape of a type used to drive generation and construction."""

    kind: Kind
    py_type: Any
    annotation: Any
    construction: Construction = Construction.LITERAL
    members: tuple[Member, ...] = ()
    element: Any = None
    key: Any = None
    value: Any = None
    values: tuple[Any, ...] = ()
    nullable: bool = False
    type_args: tuple[Any, ...] = ()
    builder: Callable[[], Any] | None = field(default=None, compare=False)
    constraints: tuple["Customization", ...] = field(default=(), compare=False)

    @property
    def name(self) -> str:
        """Return a readable name for messages and the CLI."""

        base = getattr(self.py_type, "__qualname__", None) or repr(self.py_type)
        if self.type_args:
            args = ", ".join(getattr(a, "__qualname__", None) or repr(a) for a in self.type_args)
            base = f"{base}[{args}]"
        return f"{base} | None" if self.nullable else base

    def member(self, name: str) -> Member | None:
        """Return the member called ``name`` or ``None``."""

        for m in self.members:
            if m.name == name:
                return m
        return None


@dataclass(slots=True, frozen=True)
class StrategyResult:
    """Outcome of a successful introspection strategy."""

    members: tuple[Member, ...]
    construction: Construction
    builder: Callable[[], Any] | None = None


@runtime_checkable
class IntrospectionStrategy(Protocol):
    """Protocol for one link of the introspection failover chain.

    A strategy inspects a class and either returns a :class:`StrategyResult`
    describing its members or ``None`` when it cannot describe the class.
    """

    def name(self) -> str:
        """Return a short, stable identifier for the strategy."""

        ...

    def describe(
        self,
        cls: type,
        type_map: Mapping[Any, Any],
        introspector: "Introspector",
    ) -> StrategyResult | None:
        """Describe ``cls`` with type variables bound through ``type_map``."""

        ...


@runtime_checkable
class ConstraintTranslator(Protocol):
    """Protocol for plugins turning ``Annotated`` metadata into customizations.

    Returned customizations use paths relative to the annotated node (``$``
    addresses the node itself) and rank below any builder customization.
    """

    def translate(self, metadata: Any, annotation: Any) -> Iterable["Customization"]:
        """Return customizations for one ``Annotated`` metadata object."""

        ...

"""Memoized conversion of type annotations into :class:`TypeDescriptor` objects.

Resolution order for an annotation:

1. ``Annotated`` metadata is handed to the constraint translators.
2. ``Optional`` layers mark the descriptor nullable.
3. Primitives, enums and ``Literal`` values, collections and mappings are
   recognised directly.
4. Registered substitutes replace abstract types with concrete ones.
5. Any other class goes through the introspection strategy chain; the first
   strategy whose members are all describable wins.

Descriptors are cached per annotation behind a re-entrant lock.  Once a type
has been described, concurrent readers hit the cache without locking.
"""

from __future__ import annotations

import collections
import collections.abc as abc
import datetime
import decimal
import inspect
import threading
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import replace
from enum import Enum
from typing import Any, Literal, Protocol, TypeVar, get_args, get_origin

from ..utils.errors import UnsupportedTypeError
from ..utils.logging import get_logger
from .base import (
    ConstraintTranslator,
    Construction,
    IntrospectionStrategy,
    Kind,
    TypeDescriptor,
)
from .strategies import default_strategy_chain
from .typing_utils import NONE_TYPE, type_map_for, unwrap

__all__ = ["PRIMITIVE_TYPES", "Introspector"]

log = get_logger(__name__)

PRIMITIVE_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    str,
    bytes,
    decimal.Decimal,
    datetime.datetime,
    datetime.date,
    uuid.UUID,
)

_COLLECTION_TYPES: dict[Any, type] = {
    list: list,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
    collections.deque: collections.deque,
    abc.Iterable: list,
    abc.Collection: list,
    abc.Sequence: list,
    abc.MutableSequence: list,
    abc.Set: frozenset,
    abc.MutableSet: set,
}

_MAP_TYPES: dict[Any, type] = {
    dict: dict,
    collections.OrderedDict: collections.OrderedDict,
    abc.Mapping: dict,
    abc.MutableMapping: dict,
}


def _cache_key(annotation: Any) -> Any:
    try:
        hash(annotation)
    except TypeError:
        return ("id", id(annotation))
    return annotation


class Introspector:
    """Describe annotations once and serve the cached descriptors."""

    def __init__(
        self,
        strategies: Iterable[IntrospectionStrategy] | None = None,
        *,
        substitutes: Mapping[type, type] | None = None,
        translators: Iterable[ConstraintTranslator] = (),
    ) -> None:
        self._strategies: tuple[IntrospectionStrategy, ...] = (
            tuple(strategies) if strategies is not None else default_strategy_chain()
        )
        if not self._strategies:
            raise ValueError("introspection strategy chain must not be empty")
        self._substitutes: dict[type, type] = dict(substitutes or {})
        self._translators: tuple[ConstraintTranslator, ...] = tuple(translators)
        self._leaf_types: set[type] = set()
        self._cache: dict[Any, TypeDescriptor] = {}
        self._in_progress: set[Any] = set()
        self._lock = threading.RLock()

    @property
    def strategies(self) -> tuple[IntrospectionStrategy, ...]:
        return self._strategies

    def add_substitute(self, abstract: type, concrete: type) -> None:
        """Describe ``abstract`` as ``concrete`` from now on."""

        with self._lock:
            self._substitutes[abstract] = concrete
            # Wrapped forms (Optional, Annotated, containers) embed the old shape.
            self._cache.clear()

    def add_leaf_type(self, tp: type) -> None:
        """Treat ``tp`` as an opaque primitive produced by a registered generator."""

        with self._lock:
            self._leaf_types.add(tp)
            self._cache.clear()

    # -- Public API ---------------------------------------------------------

    def describe(self, annotation: Any) -> TypeDescriptor:
        """Return the memoized descriptor for ``annotation``.

        Raises
        ------
        UnsupportedTypeError
            If no rule or strategy can describe the annotation.
        """

        key = _cache_key(annotation)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            if key in self._in_progress:
                raise UnsupportedTypeError(f"{annotation!r} refers to itself without indirection")
            self._in_progress.add(key)
            try:
                descriptor = self._describe(annotation)
            finally:
                self._in_progress.discard(key)
            self._cache[key] = descriptor
            return descriptor

    def is_describing(self, annotation: Any) -> bool:
        """Return ``True`` while ``annotation`` is being described higher up."""

        return _cache_key(annotation) in self._in_progress

    # -- Resolution ---------------------------------------------------------

    def _describe(self, annotation: Any) -> TypeDescriptor:
        inner, nullable, metadata = unwrap(annotation)
        if inner is not annotation:
            descriptor = self.describe(inner)
            constraints = descriptor.constraints + self._translate(metadata, inner)
            return replace(
                descriptor,
                annotation=annotation,
                nullable=descriptor.nullable or nullable,
                constraints=constraints,
            )
        return self._describe_plain(annotation)

    def _translate(self, metadata: tuple[Any, ...], annotation: Any) -> tuple[Any, ...]:
        found: list[Any] = []
        for item in metadata:
            for translator in self._translators:
                found.extend(translator.translate(item, annotation))
        return tuple(found)

    def _require(self, annotation: Any) -> None:
        """Describe a nested annotation unless it is the one being described."""

        inner = unwrap(annotation)[0]
        if self.is_describing(annotation) or self.is_describing(inner):
            return
        self.describe(annotation)

    def _describe_plain(self, tp: Any) -> TypeDescriptor:
        if tp is NONE_TYPE or tp is None:
            raise UnsupportedTypeError("NoneType cannot be generated on its own")
        if tp is Any or tp is object:
            raise UnsupportedTypeError(f"{tp!r} carries no structure to generate")
        if isinstance(tp, TypeVar):
            if tp.__bound__ is not None:
                return replace(self.describe(tp.__bound__), annotation=tp)
            raise UnsupportedTypeError(f"unbound type variable {tp!r}")
        supertype = getattr(tp, "__supertype__", None)
        if supertype is not None:
            return replace(self.describe(supertype), annotation=tp)

        origin = get_origin(tp)
        args = get_args(tp)
        if origin is Literal:
            if not args:
                raise UnsupportedTypeError("empty Literal")
            return TypeDescriptor(Kind.ENUM, type(args[0]), tp, values=args)
        cls = origin if origin is not None else tp

        if isinstance(tp, type) and tp in self._leaf_types:
            return TypeDescriptor(Kind.PRIMITIVE, tp, tp)
        if cls in PRIMITIVE_TYPES:
            return TypeDescriptor(Kind.PRIMITIVE, cls, tp)
        if isinstance(cls, type) and issubclass(cls, Enum):
            values = tuple(cls)
            if not values:
                raise UnsupportedTypeError(f"enum {cls.__qualname__} declares no members")
            return TypeDescriptor(Kind.ENUM, cls, tp, values=values)
        if cls in _COLLECTION_TYPES:
            return self._describe_collection(tp, cls, args)
        if cls in _MAP_TYPES:
            if len(args) != 2:
                raise UnsupportedTypeError(f"mapping {tp!r} needs key and value types")
            for arg in args:
                self._require(arg)
            return TypeDescriptor(
                Kind.MAP,
                _MAP_TYPES[cls],
                tp,
                construction=Construction.CONTAINER,
                key=args[0],
                value=args[1],
            )
        if cls in self._substitutes:
            concrete = self._substitutes[cls]
            target = concrete[args] if args else concrete
            return replace(self.describe(target), annotation=tp)
        if isinstance(cls, type):
            return self._describe_record(tp, cls, args)
        raise UnsupportedTypeError(f"cannot describe {tp!r}")

    def _describe_collection(self, tp: Any, cls: Any, args: tuple[Any, ...]) -> TypeDescriptor:
        if cls is tuple:
            if len(args) != 2 or args[1] is not Ellipsis:
                raise UnsupportedTypeError(
                    f"only homogeneous tuples (tuple[T, ...]) are supported, got {tp!r}"
                )
            args = args[:1]
        if len(args) != 1:
            raise UnsupportedTypeError(f"collection {tp!r} needs an element type")
        self._require(args[0])
        return TypeDescriptor(
            Kind.COLLECTION,
            _COLLECTION_TYPES[cls],
            tp,
            construction=Construction.CONTAINER,
            element=args[0],
        )

    def _describe_record(self, tp: Any, cls: type, args: tuple[Any, ...]) -> TypeDescriptor:
        if inspect.isabstract(cls) or getattr(cls, "_is_protocol", False) or cls is Protocol:
            raise UnsupportedTypeError(
                f"{cls.__qualname__} is abstract; register a concrete substitute for it"
            )
        type_map = type_map_for(cls, args)
        failures: list[str] = []
        for strategy in self._strategies:
            result = strategy.describe(cls, type_map, self)
            if result is None:
                failures.append(f"{strategy.name()}: not applicable")
                continue
            try:
                for member in result.members:
                    self._require(member.annotation)
            except UnsupportedTypeError as exc:
                failures.append(f"{strategy.name()}: {exc}")
                continue
            log.debug("described %s with strategy %s", cls.__qualname__, strategy.name())
            kind = Kind.GENERIC if args and getattr(cls, "__parameters__", ()) else Kind.RECORD
            return TypeDescriptor(
                kind,
                cls,
                tp,
                construction=result.construction,
                members=result.members,
                type_args=args,
                builder=result.builder,
            )
        raise UnsupportedTypeError(
            f"no introspection strategy can describe {cls.__qualname__} ({'; '.join(failures)})"
        )

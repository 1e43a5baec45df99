"""Registry mapping descriptors to value generators.

Precedence of generators for a node, highest first:
    1. A per-path generator set on the active builder (passed in as
       ``override``).
    2. A per-type override registered on the registry during setup.
    3. The default generator for the descriptor's kind.

Records, collections and maps have no leaf generator by default; for them
:meth:`GeneratorRegistry.resolve_generator` returns ``None`` and the engine
descends structurally.

The registry has a two-phase lifecycle: overrides may be registered until
:meth:`GeneratorRegistry.freeze` is called, after which it is read-only and
safe for unsynchronized concurrent reads.
"""

from __future__ import annotations

import datetime
import decimal
import random
import threading
import uuid
from collections.abc import Callable
from typing import Any

from ..config import ConfigModel
from ..introspect import Introspector, Kind, TypeDescriptor
from ..introspect.typing_utils import unwrap
from ..utils.errors import (
    GenerationConstraintConflict,
    RegistryFrozenError,
    UnsupportedTypeError,
)
from ..utils.logging import get_logger
from .base import Arbitrary, arbitrary
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
)

__all__ = ["GeneratorRegistry", "default_generators"]

log = get_logger(__name__)


def default_generators(cfg: ConfigModel) -> dict[type, Arbitrary]:
    """Build the kind-level default generators from ``cfg``."""

    int_low, int_high = cfg.numbers.int_range
    float_low, float_high = cfg.numbers.float_range
    len_low, len_high = cfg.strings.length_range
    return {
        bool: BoolArbitrary(),
        int: IntegerArbitrary(int_low, int_high),
        float: FloatArbitrary(float_low, float_high),
        str: StringArbitrary(len_low, len_high, cfg.strings.charset),
        bytes: BytesArbitrary(len_low, len_high),
        decimal.Decimal: DecimalArbitrary(float_low, float_high),
        datetime.date: DateArbitrary(),
        datetime.datetime: DateTimeArbitrary(),
        uuid.UUID: UUIDArbitrary(),
    }


def _override_key(annotation: Any) -> Any:
    try:
        inner = unwrap(annotation)[0]
    except UnsupportedTypeError:
        return annotation
    try:
        hash(inner)
    except TypeError:
        return None
    return inner


class GeneratorRegistry:
    """Resolve the generator responsible for a descriptor."""

    def __init__(self, cfg: ConfigModel, introspector: Introspector) -> None:
        self.cfg = cfg
        self._introspector = introspector
        self._defaults = default_generators(cfg)
        self._overrides: dict[Any, Arbitrary] = {}
        self._frozen = False
        self._lock = threading.Lock()

    # -- Setup phase --------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the setup phase; later registrations raise ``RegistryFrozenError``."""

        self._frozen = True

    def register(self, annotation: Any, generator: Arbitrary | Callable[[random.Random], Any]) -> None:
        """Register ``generator`` for every node described by ``annotation``.

        Types no introspection strategy can describe (for example abstract
        classes) become opaque leaves produced only by ``generator``.

        Raises
        ------
        RegistryFrozenError
            If sampling has already started.
        GenerationConstraintConflict
            If ``generator`` declares kinds incompatible with the type.
        """

        gen = arbitrary(generator)
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"cannot register {annotation!r}: the registry is already in use"
                )
            try:
                kind = self._introspector.describe(annotation).kind
            except UnsupportedTypeError:
                if not isinstance(annotation, type):
                    raise
                self._introspector.add_leaf_type(annotation)
                kind = Kind.PRIMITIVE
            if not gen.accepts(kind):
                allowed = ", ".join(sorted(k.value for k in gen.kinds or ()))
                raise GenerationConstraintConflict(
                    f"generator {gen!r} produces {allowed} values but {annotation!r} "
                    f"is described as {kind.value}"
                )
            key = _override_key(annotation)
            if key is None:
                raise GenerationConstraintConflict(f"cannot register unhashable type {annotation!r}")
            self._overrides[key] = gen
            log.debug("registered override %r for %r", gen, annotation)

    # -- Read phase ---------------------------------------------------------

    def type_override(self, descriptor: TypeDescriptor) -> Arbitrary | None:
        """Return the tier-2 override for ``descriptor`` if one is registered."""

        if not self._overrides:
            return None
        key = _override_key(descriptor.annotation)
        if key is not None and key in self._overrides:
            return self._overrides[key]
        if descriptor.kind is Kind.COLLECTION or descriptor.kind is Kind.MAP:
            return None
        return self._overrides.get(descriptor.py_type)

    def resolve_generator(
        self, descriptor: TypeDescriptor, override: Arbitrary | None = None
    ) -> Arbitrary | None:
        """Return the generator for ``descriptor`` following the precedence tiers.

        ``None`` means the engine builds the value structurally.
        """

        if override is not None:
            return override
        registered = self.type_override(descriptor)
        if registered is not None:
            return registered
        return self.default_generator(descriptor)

    def default_generator(self, descriptor: TypeDescriptor) -> Arbitrary | None:
        """Return the kind-level default generator."""

        if descriptor.kind is Kind.ENUM:
            return ElementsArbitrary(descriptor.values)
        if descriptor.kind is Kind.PRIMITIVE:
            for tp in (descriptor.py_type, *getattr(descriptor.py_type, "__mro__", ())[1:]):
                found = self._defaults.get(tp)
                if found is not None:
                    return found
            raise UnsupportedTypeError(f"no generator registered for {descriptor.name}")
        return None

    @property
    def size_range(self) -> tuple[int, int]:
        """Default size range for collections and maps."""

        return self.cfg.collections.size_range

"""The :class:`Arbitrary` generator abstraction.

An arbitrary produces one random value per call from the random source it is
handed.  It never owns randomness itself, so a single instance can be shared
between concurrent samples.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any

from ..introspect.base import Kind

__all__ = ["Arbitrary", "FunctionArbitrary", "MappedArbitrary", "arbitrary"]


class Arbitrary(ABC):
    """Strategy producing random values of one shape.

    ``kinds`` lists the descriptor kinds the produced values are compatible
    with; ``None`` accepts every kind.
    """

    kinds: frozenset[Kind] | None = None

    @abstractmethod
    def generate(self, rng: random.Random) -> Any:
        """Return one value drawn with ``rng``."""

    def accepts(self, kind: Kind) -> bool:
        return self.kinds is None or kind in self.kinds

    def map(self, func: Callable[[Any], Any]) -> "Arbitrary":
        """Return an arbitrary applying ``func`` to every generated value."""

        return MappedArbitrary(self, func)


class FunctionArbitrary(Arbitrary):
    """Adapter for a plain ``rng -> value`` callable."""

    def __init__(self, func: Callable[[random.Random], Any], kinds: Iterable[Kind] | None = None):
        self.func = func
        self.kinds = frozenset(kinds) if kinds is not None else None

    def generate(self, rng: random.Random) -> Any:
        return self.func(rng)

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", None) or repr(self.func)
        return f"arbitrary({name})"


class MappedArbitrary(Arbitrary):
    """Arbitrary post-processing the values of another one."""

    def __init__(self, source: Arbitrary, func: Callable[[Any], Any]) -> None:
        self.source = source
        self.func = func
        self.kinds = source.kinds

    def generate(self, rng: random.Random) -> Any:
        return self.func(self.source.generate(rng))

    def __repr__(self) -> str:
        return f"{self.source!r}.map({getattr(self.func, '__qualname__', self.func)!r})"


def arbitrary(
    func: Callable[[random.Random], Any], *, kinds: Iterable[Kind] | None = None
) -> Arbitrary:
    """Wrap ``func`` so it can be passed to ``set`` or registered as an override."""

    if isinstance(func, Arbitrary):
        return func
    if not callable(func):
        raise TypeError(f"expected a callable taking a random source, got {func!r}")
    return FunctionArbitrary(func, kinds)

"""The :class:`FixtureKit` facade.

A kit bundles the configuration, the introspector, the generator registry
and the sample sequence.  It is constructed explicitly and passed around;
there is no module-level default instance.

Lifecycle: overrides may be registered until the first builder is created
or the first sample is drawn, after which the registry is frozen and the
kit is safe to share between threads.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .arbitrary import Arbitrary, GeneratorRegistry
from .builder import ArbitraryBuilder
from .config import ConfigModel, load_config, with_overrides
from .engine import SampleSequence, Sampler, rng_for
from .introspect import (
    ConstraintTranslator,
    IntrospectionStrategy,
    Introspector,
    TypeDescriptor,
)
from .utils.errors import RegistryFrozenError
from .utils.logging import get_logger

__all__ = ["FixtureKit"]

log = get_logger(__name__)

Override = Arbitrary | Callable[[random.Random], Any] | type


class FixtureKit:
    """Entry point producing builders and instances of arbitrary types.

    Parameters
    ----------
    cfg:
        Validated configuration; defaults to :func:`~fixturekit.config.load_config`.
    type_overrides:
        Mapping of type to a generator (``Arbitrary`` or ``rng -> value``
        callable) or to a concrete substitute class.
    introspection_strategy_chain:
        Replaces the default strategy chain.
    constraint_translators:
        Plugins turning ``Annotated`` metadata into customizations.
    **options:
        Flat overrides of scalar configuration options such as ``seed=7``.
    """

    def __init__(
        self,
        cfg: ConfigModel | None = None,
        *,
        type_overrides: Mapping[Any, Override] | None = None,
        introspection_strategy_chain: Iterable[IntrospectionStrategy] | None = None,
        constraint_translators: Iterable[ConstraintTranslator] = (),
        **options: Any,
    ) -> None:
        self.cfg = with_overrides(cfg if cfg is not None else load_config(), **options)
        self.introspector = Introspector(
            introspection_strategy_chain, translators=constraint_translators
        )
        self.registry = GeneratorRegistry(self.cfg, self.introspector)
        self._sampler = Sampler(self.cfg, self.introspector, self.registry)
        self._sequence = SampleSequence()
        for tp, override in (type_overrides or {}).items():
            self.register(tp, override)

    @property
    def seed(self) -> int | None:
        return self.cfg.generation.seed

    def register(self, tp: Any, override: Override) -> "FixtureKit":
        """Register a per-type generator or concrete substitute.

        Raises
        ------
        RegistryFrozenError
            If a builder has already been created or a sample drawn.
        """

        if isinstance(override, type) and not isinstance(override, Arbitrary):
            if self.registry.frozen:
                raise RegistryFrozenError(
                    f"cannot substitute {tp!r}: the kit is already in use"
                )
            self.introspector.add_substitute(tp, override)
            log.debug("substituting %r with %r", tp, override)
        else:
            self.registry.register(tp, override)
        return self

    def describe_once(self, tp: Any) -> TypeDescriptor:
        """Return the memoized descriptor of ``tp``.

        Raises
        ------
        UnsupportedTypeError
            If ``tp`` cannot be described.
        """

        return self.introspector.describe(tp)

    def give_me_builder(self, tp: Any) -> ArbitraryBuilder:
        self._freeze()
        return ArbitraryBuilder(self, tp, self.describe_once(tp))

    def give_me_one(self, tp: Any) -> Any:
        return self.give_me_builder(tp).sample()

    def give_me(self, tp: Any, n: int) -> list[Any]:
        return self.give_me_builder(tp).sample_list(n)

    def _freeze(self) -> None:
        if not self.registry.frozen:
            self.registry.freeze()

    def _sample(self, builder: ArbitraryBuilder, sequence: int) -> Any:
        self._freeze()
        rng = rng_for(self.seed, sequence)
        return self._sampler.sample(builder.descriptor, builder.customizations, rng)

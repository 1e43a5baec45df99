from __future__ import annotations

import abc
import datetime
import decimal
import random
from dataclasses import dataclass

import pytest

from fixturekit.arbitrary import GeneratorRegistry, arbitrary, integers
from fixturekit.config import load_config, with_overrides
from fixturekit.introspect import Introspector, Kind
from fixturekit.utils.errors import (
    GenerationConstraintConflict,
    RegistryFrozenError,
    UnsupportedTypeError,
)


@dataclass
class Money:
    amount: int
    currency: str


class Shape(abc.ABC):
    @abc.abstractmethod
    def area(self) -> float: ...


class Circle(Shape):
    def area(self) -> float:
        return 3.14


class Flag(int):
    pass


@pytest.fixture()
def registry() -> GeneratorRegistry:
    return GeneratorRegistry(load_config(env={}), Introspector())


def test_default_generators_follow_config() -> None:
    cfg = with_overrides(load_config(env={}), int_range=(7, 7), length_range=(3, 3))
    intro = Introspector()
    reg = GeneratorRegistry(cfg, intro)
    rng = random.Random(0)
    assert reg.resolve_generator(intro.describe(int)).generate(rng) == 7  # type: ignore[union-attr]
    assert len(reg.resolve_generator(intro.describe(str)).generate(rng)) == 3  # type: ignore[union-attr]


def test_default_generator_types(registry: GeneratorRegistry) -> None:
    intro = Introspector()
    rng = random.Random(1)
    for tp in (bool, int, float, str, bytes, decimal.Decimal, datetime.date, datetime.datetime):
        gen = registry.default_generator(intro.describe(tp))
        assert gen is not None
        assert isinstance(gen.generate(rng), tp)


def test_primitive_subclass_uses_base_generator(registry: GeneratorRegistry) -> None:
    intro = Introspector()
    intro.add_leaf_type(Flag)
    assert registry.default_generator(intro.describe(Flag)) is not None


def test_structural_kinds_have_no_generator(registry: GeneratorRegistry) -> None:
    intro = Introspector()
    assert registry.resolve_generator(intro.describe(Money)) is None
    assert registry.resolve_generator(intro.describe(list[int])) is None


def test_precedence_tiers(registry: GeneratorRegistry) -> None:
    intro = Introspector()
    desc = intro.describe(int)
    per_path = integers(1, 1)
    registry.register(int, integers(2, 2))
    rng = random.Random(0)
    assert registry.resolve_generator(desc, per_path) is per_path
    assert registry.resolve_generator(desc).generate(rng) == 2  # type: ignore[union-attr]


def test_override_applies_to_optional(registry: GeneratorRegistry) -> None:
    intro = Introspector()
    registry.register(int, integers(2, 2))
    assert registry.type_override(intro.describe(int | None)) is not None


def test_record_override(registry: GeneratorRegistry) -> None:
    intro = Introspector()
    registry.register(Money, lambda rng: Money(1, "EUR"))
    gen = registry.type_override(intro.describe(Money))
    assert gen is not None
    assert gen.generate(random.Random(0)) == Money(1, "EUR")


def test_opaque_type_becomes_leaf() -> None:
    intro = Introspector()
    reg = GeneratorRegistry(load_config(env={}), intro)
    reg.register(Shape, lambda rng: Circle())
    desc = intro.describe(Shape)
    assert desc.kind is Kind.PRIMITIVE
    assert isinstance(reg.type_override(desc).generate(random.Random(0)), Circle)  # type: ignore[union-attr]


def test_kind_conflict(registry: GeneratorRegistry) -> None:
    with pytest.raises(GenerationConstraintConflict):
        registry.register(Money, integers(0, 1))


def test_unsupported_non_class(registry: GeneratorRegistry) -> None:
    with pytest.raises(UnsupportedTypeError):
        registry.register(int | str, arbitrary(lambda rng: 1))


def test_frozen(registry: GeneratorRegistry) -> None:
    registry.freeze()
    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register(int, integers(0, 1))


def test_size_range(registry: GeneratorRegistry) -> None:
    assert registry.size_range == (0, 3)

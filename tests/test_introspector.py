from __future__ import annotations

import abc
import collections
import enum
from dataclasses import dataclass, field
from typing import Annotated, Generic, Literal, NamedTuple, NewType, Optional, TypeVar, Union

import pytest
from pydantic import BaseModel, Field

from fixturekit.introspect import (
    BuilderStrategy,
    Construction,
    ConstructorStrategy,
    FieldStrategy,
    IntrospectionStrategy,
    Introspector,
    Kind,
    ModelFieldsStrategy,
    default_strategy_chain,
)
from fixturekit.utils.errors import UnsupportedTypeError

T = TypeVar("T")
UserId = NewType("UserId", int)


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


@dataclass
class Address:
    street: str
    city: str
    zip_code: Optional[str] = None


@dataclass
class Person:
    name: str
    age: int
    address: Address
    tags: list[str] = field(default_factory=list)


class Point(NamedTuple):
    x: int
    y: int


class Account(BaseModel):
    account_id: int = Field(alias="accountId")
    owner: str
    balance: Optional[float] = None


class Settings:
    host: str
    port: int

    def __init__(self) -> None:
        self.host = "localhost"
        self.port = 0


class Widget:
    label: str
    weight: int

    def __init__(self, builder):  # noqa: ANN001
        self.label = builder.label
        self.weight = builder.weight

    @classmethod
    def builder(cls) -> "WidgetBuilder":
        return WidgetBuilder()


class WidgetBuilder:
    def __init__(self) -> None:
        self.label = ""
        self.weight = 0

    def with_label(self, value: str) -> "WidgetBuilder":
        self.label = value
        return self

    def build(self) -> Widget:
        return Widget(self)


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int


@dataclass
class Node:
    value: int
    next: Optional[Node] = None


class Shape(abc.ABC):
    @abc.abstractmethod
    def area(self) -> float: ...


@dataclass
class Drawing:
    shape: Shape


@pytest.fixture()
def intro() -> Introspector:
    return Introspector()


def test_dataclass_record(intro: Introspector) -> None:
    desc = intro.describe(Person)
    assert desc.kind is Kind.RECORD
    assert desc.construction is Construction.CONSTRUCTOR
    assert [m.name for m in desc.members] == ["name", "age", "address", "tags"]
    assert desc.member("tags").has_default is True  # type: ignore[union-attr]
    assert desc.member("missing") is None


def test_nullable_members(intro: Introspector) -> None:
    desc = intro.describe(Address)
    assert desc.member("zip_code").nullable is True  # type: ignore[union-attr]
    assert intro.describe(Optional[str]).nullable is True
    assert intro.describe(str).nullable is False


def test_named_tuple(intro: Introspector) -> None:
    desc = intro.describe(Point)
    assert desc.kind is Kind.RECORD
    assert [m.name for m in desc.members] == ["x", "y"]


def test_pydantic_model(intro: Introspector) -> None:
    desc = intro.describe(Account)
    assert desc.construction is Construction.CONSTRUCTOR
    member = desc.member("account_id")
    assert member is not None
    assert member.argument_name == "accountId"
    assert desc.member("balance").nullable is True  # type: ignore[union-attr]


def test_field_assignment_class(intro: Introspector) -> None:
    desc = intro.describe(Settings)
    assert desc.construction is Construction.FIELD_ASSIGNMENT
    assert {m.name for m in desc.members} == {"host", "port"}


def test_builder_class(intro: Introspector) -> None:
    desc = intro.describe(Widget)
    assert desc.construction is Construction.BUILDER
    assert desc.builder is not None
    assert {m.name for m in desc.members} == {"label", "weight"}


def test_generic_binding(intro: Introspector) -> None:
    desc = intro.describe(Page[Address])
    assert desc.kind is Kind.GENERIC
    assert desc.type_args == (Address,)
    items = desc.member("items")
    assert items is not None
    assert intro.describe(items.annotation).element is Address
    assert desc.name == "Page[Address]"


def test_self_reference_is_finite(intro: Introspector) -> None:
    desc = intro.describe(Node)
    nxt = desc.member("next")
    assert nxt is not None
    assert intro.describe(nxt.annotation).py_type is Node


def test_containers(intro: Introspector) -> None:
    assert intro.describe(list[int]).kind is Kind.COLLECTION
    assert intro.describe(frozenset[str]).py_type is frozenset
    assert intro.describe(tuple[int, ...]).py_type is tuple
    assert intro.describe(collections.deque[int]).py_type is collections.deque
    mapping = intro.describe(dict[str, Address])
    assert mapping.kind is Kind.MAP
    assert (mapping.key, mapping.value) == (str, Address)


def test_enums_and_literals(intro: Introspector) -> None:
    assert intro.describe(Color).values == (Color.RED, Color.GREEN)
    lit = intro.describe(Literal["a", "b"])
    assert lit.kind is Kind.ENUM
    assert lit.values == ("a", "b")


def test_new_type_and_annotated(intro: Introspector) -> None:
    assert intro.describe(UserId).py_type is int
    assert intro.describe(Annotated[int, "meta"]).py_type is int


def test_memoized(intro: Introspector) -> None:
    assert intro.describe(Person) is intro.describe(Person)


@pytest.mark.parametrize(
    "annotation",
    [Union[int, str], tuple[int, str], Shape, Drawing, list, type(None)],
)
def test_unsupported(intro: Introspector, annotation: object) -> None:
    with pytest.raises(UnsupportedTypeError):
        intro.describe(annotation)


def test_substitute_for_abstract_type(intro: Introspector) -> None:
    @dataclass
    class Square(Shape):
        side: float

        def area(self) -> float:
            return self.side * self.side

    intro.add_substitute(Shape, Square)
    assert intro.describe(Shape).py_type is Square
    assert intro.describe(Drawing).kind is Kind.RECORD


def test_leaf_type(intro: Introspector) -> None:
    intro.add_leaf_type(Shape)
    assert intro.describe(Shape).kind is Kind.PRIMITIVE


def test_default_chain_order() -> None:
    chain = default_strategy_chain()
    assert [type(s) for s in chain] == [
        ModelFieldsStrategy,
        ConstructorStrategy,
        FieldStrategy,
        BuilderStrategy,
    ]
    assert all(isinstance(s, IntrospectionStrategy) for s in chain)


def test_custom_chain() -> None:
    intro = Introspector([FieldStrategy()])
    with pytest.raises(UnsupportedTypeError) as info:
        intro.describe(Person)
    assert "fields" in str(info.value)


def test_empty_chain_rejected() -> None:
    with pytest.raises(ValueError):
        Introspector([])

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pytest

from fixturekit.introspect import Introspector, Kind
from fixturekit.path import PathResolver, parse_path
from fixturekit.utils.errors import InvalidPathError


@dataclass
class LineItem:
    sku: str
    quantity: int


@dataclass
class Order:
    id: int
    items: list[LineItem]
    notes: Optional[str]
    scores: dict[str, int]
    by_id: dict[int, LineItem]


@pytest.fixture()
def resolver() -> tuple[PathResolver, Introspector]:
    introspector = Introspector()
    return PathResolver(introspector), introspector


def test_resolve_nested_member(resolver: tuple[PathResolver, Introspector]) -> None:
    res, intro = resolver
    root = intro.describe(Order)
    assert res.resolve(parse_path("items[0].quantity"), root).py_type is int
    assert res.resolve(parse_path("items[*]"), root).py_type is LineItem
    assert res.resolve(parse_path("items"), root).kind is Kind.COLLECTION
    assert res.resolve(parse_path("$"), root) is root


def test_resolve_map_keys(resolver: tuple[PathResolver, Introspector]) -> None:
    res, intro = resolver
    root = intro.describe(Order)
    assert res.resolve(parse_path("scores['a']"), root).py_type is int
    assert res.resolve(parse_path("by_id[7].sku"), root).py_type is str
    assert res.resolve(parse_path("scores[*]"), root).py_type is int


def test_resolve_nullable_member(resolver: tuple[PathResolver, Introspector]) -> None:
    res, intro = resolver
    target = res.resolve(parse_path("notes"), intro.describe(Order))
    assert target.nullable is True


@pytest.mark.parametrize(
    "expression",
    [
        "missing",
        "items.sku",
        "items['a']",
        "id[0]",
        "id.value",
        "scores[1]",
        "by_id['x']",
        "items[0].price",
    ],
)
def test_invalid_paths(resolver: tuple[PathResolver, Introspector], expression: str) -> None:
    res, intro = resolver
    with pytest.raises(InvalidPathError) as info:
        res.resolve(parse_path(expression), intro.describe(Order))
    assert info.value.path == expression

from __future__ import annotations

import pytest

from fixturekit.path import ROOT, Step, StepKind, format_steps, parse_path
from fixturekit.utils.errors import InvalidPathError


def test_parse_members_and_indexes() -> None:
    path = parse_path("items[0].quantity")
    assert path.steps == (Step.member("items"), Step.index(0), Step.member("quantity"))


def test_parse_root_forms() -> None:
    assert parse_path("$") == ROOT
    assert parse_path("$.id").steps == (Step.member("id"),)
    assert parse_path("$[2]").steps == (Step.index(2),)
    assert parse_path("$[*].name").steps == (Step(StepKind.WILDCARD), Step.member("name"))


def test_parse_quoted_keys() -> None:
    assert parse_path("scores['alice']").steps[1] == Step.key("alice")
    assert parse_path('scores["a b"]').steps[1] == Step.key("a b")
    assert parse_path(r"scores['it\'s']").steps[1] == Step.key("it's")


def test_parse_nested_indexes() -> None:
    path = parse_path("grid[1][*]")
    assert path.steps == (Step.member("grid"), Step.index(1), Step(StepKind.WILDCARD))


@pytest.mark.parametrize(
    "expression",
    ["", "a..b", "items[-1]", "items[01]", "1abc", "items[", "a.", "$x", "items[0]x", "items['a]"],
)
def test_malformed_paths(expression: str) -> None:
    with pytest.raises(InvalidPathError):
        parse_path(expression)


def test_non_string_path() -> None:
    with pytest.raises(InvalidPathError):
        parse_path(3)  # type: ignore[arg-type]


def test_specificity_prefers_exact_steps_left_to_right() -> None:
    exact = parse_path("items[0].tags[*]")
    wild = parse_path("items[*].tags[1]")
    assert exact.specificity > wild.specificity
    assert parse_path("items[0]").specificity > parse_path("items[*]").specificity


def test_matches_positions() -> None:
    position = (Step.member("items"), Step.index(2), Step.member("quantity"))
    assert parse_path("items[2].quantity").matches(position)
    assert parse_path("items[*].quantity").matches(position)
    assert not parse_path("items[1].quantity").matches(position)
    assert not parse_path("items[*]").matches(position)
    assert parse_path("items[*]").targets_below(position)
    assert not parse_path("items[2].quantity").targets_below(position)


def test_wildcard_matches_map_keys_but_not_members() -> None:
    assert parse_path("m[*]").matches((Step.member("m"), Step.key("x")))
    assert not Step(StepKind.WILDCARD).matches(Step.member("m"))


def test_integer_index_matches_integer_keys() -> None:
    assert parse_path("m[3]").matches((Step.member("m"), Step.key(3)))
    assert not parse_path("m[3]").matches((Step.member("m"), Step.key("3")))


def test_format_steps() -> None:
    assert format_steps(()) == "$"
    assert format_steps((Step.index(0), Step.member("name"))) == "$[0].name"
    assert format_steps((Step.member("m"), Step.key("k"))) == "m['k']"


def test_rebase() -> None:
    prefix = (Step.member("items"), Step.index(1))
    rebased = parse_path("$.quantity").rebase(prefix)
    assert rebased.steps == prefix + (Step.member("quantity"),)
    assert str(rebased) == "items[1].quantity"

"""Property path expressions.

Grammar::

    path     := '$' | ('$.')? segment ('.' segment)* | '$' index+ ('.' segment)*
    segment  := identifier index*
    index    := '[' (nonNegativeInteger | '*' | quotedString) ']'

``$`` is the root of the generated object, so the first element of a root
list is ``$[0]``.  Integers address collection indices (or integer map keys),
quoted strings address map keys and ``*`` matches every realized index or
key.  Parsing is purely syntactic; whether the members exist is decided when
the path is resolved against a descriptor.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from ..utils.errors import InvalidPathError

__all__ = ["StepKind", "Step", "PropertyPath", "ROOT", "parse_path", "format_steps"]

_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INDEX = re.compile(r"\[(?:(?P<num>0|[1-9][0-9]*)|(?P<star>\*)|'(?P<sq>(?:[^'\\]|\\.)*)'|\"(?P<dq>(?:[^\"\\]|\\.)*)\")\]")
_ESCAPE = re.compile(r"\\(.)")


class StepKind(Enum):
    """Kinds of path steps."""

    MEMBER = "MEMBER"
    INDEX = "INDEX"
    KEY = "KEY"
    WILDCARD = "WILDCARD"


@dataclass(slots=True, frozen=True)
class Step:
    """One step of a path pattern or of a concrete generated position."""

    kind: StepKind
    value: Any = None

    @classmethod
    def member(cls, name: str) -> "Step":
        return cls(StepKind.MEMBER, name)

    @classmethod
    def index(cls, index: int) -> "Step":
        return cls(StepKind.INDEX, index)

    @classmethod
    def key(cls, key: Any) -> "Step":
        return cls(StepKind.KEY, key)

    @property
    def is_exact(self) -> bool:
        return self.kind is not StepKind.WILDCARD

    def matches(self, concrete: "Step") -> bool:
        """Return ``True`` when this pattern step addresses ``concrete``."""

        if self.kind is StepKind.MEMBER:
            return concrete.kind is StepKind.MEMBER and concrete.value == self.value
        if concrete.kind is StepKind.MEMBER:
            return False
        if self.kind is StepKind.WILDCARD:
            return True
        if self.kind is StepKind.INDEX:
            return (
                concrete.kind in (StepKind.INDEX, StepKind.KEY)
                and type(concrete.value) is int
                and concrete.value == self.value
            )
        return concrete.kind is StepKind.KEY and concrete.value == self.value

    def __str__(self) -> str:
        if self.kind is StepKind.MEMBER:
            return str(self.value)
        if self.kind is StepKind.WILDCARD:
            return "[*]"
        if self.kind is StepKind.KEY and not isinstance(self.value, int):
            return f"[{self.value!r}]"
        return f"[{self.value}]"


def format_steps(steps: Iterable[Step]) -> str:
    """Render ``steps`` back into path syntax (``$`` for the root)."""

    out: list[str] = []
    for step in steps:
        if step.kind is StepKind.MEMBER:
            out.append(f".{step.value}" if out else str(step.value))
        else:
            out.append(str(step) if out else f"${step}")
    return "".join(out) or "$"


@dataclass(slots=True, frozen=True)
class PropertyPath:
    """A parsed path pattern."""

    expression: str
    steps: tuple[Step, ...]

    def __str__(self) -> str:
        return self.expression

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def specificity(self) -> tuple[int, ...]:
        """Exactness per step; compared lexicographically, higher wins."""

        return tuple(1 if step.is_exact else 0 for step in self.steps)

    def matches(self, position: tuple[Step, ...]) -> bool:
        """Return ``True`` when the pattern addresses exactly ``position``."""

        if len(position) != len(self.steps):
            return False
        return all(p.matches(c) for p, c in zip(self.steps, position))

    def targets_below(self, position: tuple[Step, ...]) -> bool:
        """Return ``True`` when the pattern addresses something inside ``position``."""

        if len(self.steps) <= len(position):
            return False
        return all(p.matches(c) for p, c in zip(self.steps, position))

    def step_after(self, position: tuple[Step, ...]) -> Step:
        """Return the pattern step directly below ``position``."""

        return self.steps[len(position)]

    def rebase(self, prefix: tuple[Step, ...]) -> "PropertyPath":
        """Return this relative pattern anchored at the concrete ``prefix``."""

        steps = prefix + self.steps
        return PropertyPath(format_steps(steps), steps)


ROOT = PropertyPath("$", ())


def _unescape(text: str) -> str:
    return _ESCAPE.sub(r"\1", text)


def _parse_indexes(expression: str, pos: int, steps: list[Step]) -> int:
    while pos < len(expression) and expression[pos] == "[":
        match = _INDEX.match(expression, pos)
        if match is None:
            raise InvalidPathError(
                f"malformed index at position {pos} in {expression!r}", path=expression
            )
        if match.group("num") is not None:
            steps.append(Step.index(int(match.group("num"))))
        elif match.group("star") is not None:
            steps.append(Step(StepKind.WILDCARD))
        elif match.group("sq") is not None:
            steps.append(Step.key(_unescape(match.group("sq"))))
        else:
            steps.append(Step.key(_unescape(match.group("dq"))))
        pos = match.end()
    return pos


@lru_cache(maxsize=1024)
def parse_path(expression: str) -> PropertyPath:
    """Parse ``expression`` into a :class:`PropertyPath`.

    Raises
    ------
    InvalidPathError
        If the expression does not follow the path grammar.
    """

    if not isinstance(expression, str):
        raise InvalidPathError(f"path must be a string, got {type(expression).__name__}")
    if not expression:
        raise InvalidPathError("path must not be empty", path=expression)

    steps: list[Step] = []
    pos = 0
    if expression[0] == "$":
        pos = _parse_indexes(expression, 1, steps)
        if pos == len(expression):
            return PropertyPath(expression, tuple(steps))
        if expression[pos] != ".":
            raise InvalidPathError(
                f"unexpected {expression[pos]!r} at position {pos} in {expression!r}",
                path=expression,
            )
        pos += 1

    while True:
        match = _IDENT.match(expression, pos)
        if match is None:
            raise InvalidPathError(
                f"expected a member name at position {pos} in {expression!r}", path=expression
            )
        steps.append(Step.member(match.group()))
        pos = _parse_indexes(expression, match.end(), steps)
        if pos == len(expression):
            return PropertyPath(expression, tuple(steps))
        if expression[pos] != ".":
            raise InvalidPathError(
                f"unexpected {expression[pos]!r} at position {pos} in {expression!r}",
                path=expression,
            )
        pos += 1

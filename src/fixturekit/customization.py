"""Path-scoped customization operations.

A builder is an append-only log of :class:`Customization` values.  Each one
binds an operation to a parsed :class:`~fixturekit.path.PropertyPath` and
remembers its registration order, which breaks ties between equally
specific paths (later wins).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .arbitrary.base import Arbitrary
from .path import ROOT, PropertyPath, Step, parse_path
from .utils.errors import GenerationConstraintConflict

__all__ = [
    "Operation",
    "Customization",
    "set_value",
    "set_null",
    "set_not_null",
    "set_size",
    "post_condition",
]


class Operation(Enum):
    """Customization operations."""

    SET = "SET"
    SET_NULL = "SET_NULL"
    SET_NOT_NULL = "SET_NOT_NULL"
    SIZE = "SIZE"
    POST_CONDITION = "POST_CONDITION"

    @property
    def is_value(self) -> bool:
        """``True`` for operations that decide a node's value."""

        return self in (Operation.SET, Operation.SET_NULL, Operation.SET_NOT_NULL)


@dataclass(slots=True, frozen=True)
class Customization:
    """A single override bound to a path pattern.

    ``translated`` marks customizations produced by a constraint translator;
    these always rank below customizations registered on a builder.
    """

    operation: Operation
    path: PropertyPath
    value: Any = None
    generator: Arbitrary | None = None
    size: tuple[int, int] | None = None
    predicate: Callable[[Any], bool] | None = None
    order: int = 0
    translated: bool = False

    @property
    def is_literal(self) -> bool:
        return self.operation is Operation.SET and self.generator is None

    def rank(self) -> tuple[int, tuple[int, ...], int]:
        """Sort key: builder over translated, then specificity, then order."""

        return (0 if self.translated else 1, self.path.specificity, self.order)

    def with_order(self, order: int) -> "Customization":
        return replace(self, order=order)

    def rebase(self, prefix: tuple[Step, ...]) -> "Customization":
        """Anchor a node-relative customization at ``prefix``."""

        return replace(self, path=self.path.rebase(prefix), translated=True)

    def describe(self) -> str:
        """Return a short human readable form for logs and errors."""

        if self.operation is Operation.SET:
            shown = f"generator {self.generator!r}" if self.generator else repr(self.value)
            return f"set {self.path} = {shown}"
        if self.operation is Operation.SIZE and self.size is not None:
            low, high = self.size
            return f"size {self.path} = {low}" if low == high else f"size {self.path} in [{low}, {high}]"
        return f"{self.operation.value.lower()} {self.path}"


def _path(path: str | PropertyPath | None) -> PropertyPath:
    if path is None:
        return ROOT
    if isinstance(path, PropertyPath):
        return path
    return parse_path(path)


def set_value(path: str | PropertyPath, value: Any) -> Customization:
    """Fix ``path`` to ``value``; an :class:`Arbitrary` value acts as a generator."""

    if isinstance(value, Arbitrary):
        return Customization(Operation.SET, _path(path), generator=value)
    return Customization(Operation.SET, _path(path), value=value)


def set_null(path: str | PropertyPath) -> Customization:
    return Customization(Operation.SET_NULL, _path(path))


def set_not_null(path: str | PropertyPath) -> Customization:
    return Customization(Operation.SET_NOT_NULL, _path(path))


def set_size(path: str | PropertyPath, min_size: int, max_size: int | None = None) -> Customization:
    """Constrain the collection or map at ``path`` to an exact size or a range.

    Raises
    ------
    GenerationConstraintConflict
        If the range is negative or inverted.
    """

    high = min_size if max_size is None else max_size
    for bound in (min_size, high):
        if isinstance(bound, bool) or not isinstance(bound, int):
            raise GenerationConstraintConflict(f"size bounds must be integers, got {bound!r}")
    if min_size < 0:
        raise GenerationConstraintConflict(f"size must be non-negative, got {min_size}")
    if min_size > high:
        raise GenerationConstraintConflict(f"inverted size range [{min_size}, {high}]")
    return Customization(Operation.SIZE, _path(path), size=(min_size, high))


def post_condition(
    predicate: Callable[[Any], bool], path: str | PropertyPath | None = None
) -> Customization:
    """Require ``predicate`` to hold for the instance, or for every value at ``path``."""

    if not callable(predicate):
        raise TypeError("post condition must be callable")
    return Customization(Operation.POST_CONDITION, _path(path), predicate=predicate)

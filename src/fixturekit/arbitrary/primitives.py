"""Default arbitraries for primitives and enumerations.

Every constructor validates its bounds eagerly and raises
:class:`~fixturekit.utils.errors.GenerationConstraintConflict` for empty or
inverted ranges, so misconfiguration surfaces at registration time rather
than in the middle of a sample.
"""

from __future__ import annotations

import datetime
import decimal
import random
import string
import uuid
from collections.abc import Iterable, Sequence
from typing import Any

from ..introspect.base import Kind
from ..utils.errors import GenerationConstraintConflict
from .base import Arbitrary

__all__ = [
    "IntegerArbitrary",
    "FloatArbitrary",
    "BoolArbitrary",
    "StringArbitrary",
    "BytesArbitrary",
    "DecimalArbitrary",
    "DateArbitrary",
    "DateTimeArbitrary",
    "UUIDArbitrary",
    "ElementsArbitrary",
    "integers",
    "floats",
    "strings",
    "elements",
]

_PRIMITIVE = frozenset({Kind.PRIMITIVE})
_EPOCH = datetime.date(1970, 1, 1)
_LAST_DAY = datetime.date(2037, 12, 31)


def _check_bounds(low: Any, high: Any, what: str) -> None:
    if low > high:
        raise GenerationConstraintConflict(f"inverted {what} range [{low}, {high}]")


class IntegerArbitrary(Arbitrary):
    """Uniform integers in ``[low, high]``."""

    kinds = _PRIMITIVE

    def __init__(self, low: int, high: int) -> None:
        _check_bounds(low, high, "integer")
        self.low = low
        self.high = high

    def generate(self, rng: random.Random) -> int:
        return rng.randint(self.low, self.high)

    def __repr__(self) -> str:
        return f"integers({self.low}, {self.high})"


class FloatArbitrary(Arbitrary):
    """Uniform floats in ``[low, high]``."""

    kinds = _PRIMITIVE

    def __init__(self, low: float, high: float) -> None:
        _check_bounds(low, high, "float")
        self.low = float(low)
        self.high = float(high)

    def generate(self, rng: random.Random) -> float:
        return rng.uniform(self.low, self.high)

    def __repr__(self) -> str:
        return f"floats({self.low}, {self.high})"


class BoolArbitrary(Arbitrary):
    kinds = _PRIMITIVE

    def generate(self, rng: random.Random) -> bool:
        return rng.random() < 0.5


class StringArbitrary(Arbitrary):
    """Strings with a uniform length in ``[min_length, max_length]``."""

    kinds = _PRIMITIVE

    def __init__(
        self,
        min_length: int = 0,
        max_length: int = 10,
        charset: str = string.ascii_letters + string.digits,
    ) -> None:
        if min_length < 0:
            raise GenerationConstraintConflict(f"negative string length {min_length}")
        _check_bounds(min_length, max_length, "string length")
        if not charset:
            raise GenerationConstraintConflict("string charset must not be empty")
        self.min_length = min_length
        self.max_length = max_length
        self.charset = charset

    def generate(self, rng: random.Random) -> str:
        length = rng.randint(self.min_length, self.max_length)
        return "".join(rng.choice(self.charset) for _ in range(length))

    def __repr__(self) -> str:
        return f"strings({self.min_length}, {self.max_length})"


class BytesArbitrary(Arbitrary):
    """Random bytes with a uniform length in ``[min_length, max_length]``."""

    kinds = _PRIMITIVE

    def __init__(self, min_length: int = 0, max_length: int = 10) -> None:
        if min_length < 0:
            raise GenerationConstraintConflict(f"negative bytes length {min_length}")
        _check_bounds(min_length, max_length, "bytes length")
        self.min_length = min_length
        self.max_length = max_length

    def generate(self, rng: random.Random) -> bytes:
        length = rng.randint(self.min_length, self.max_length)
        return bytes(rng.getrandbits(8) for _ in range(length))


class DecimalArbitrary(Arbitrary):
    """Decimals with two fractional digits in ``[low, high]``."""

    kinds = _PRIMITIVE

    def __init__(self, low: float, high: float) -> None:
        _check_bounds(low, high, "decimal")
        self.low = low
        self.high = high

    def generate(self, rng: random.Random) -> decimal.Decimal:
        cents = rng.randint(round(self.low * 100), round(self.high * 100))
        return decimal.Decimal(cents).scaleb(-2)


class DateArbitrary(Arbitrary):
    """Dates uniformly between ``start`` and ``end`` inclusive."""

    kinds = _PRIMITIVE

    def __init__(self, start: datetime.date = _EPOCH, end: datetime.date = _LAST_DAY) -> None:
        _check_bounds(start, end, "date")
        self.start = start
        self.end = end

    def generate(self, rng: random.Random) -> datetime.date:
        return self.start + datetime.timedelta(days=rng.randint(0, (self.end - self.start).days))


class DateTimeArbitrary(Arbitrary):
    """Naive datetimes with second precision between ``start`` and ``end``."""

    kinds = _PRIMITIVE

    def __init__(
        self,
        start: datetime.datetime = datetime.datetime(1970, 1, 1),
        end: datetime.datetime = datetime.datetime(2037, 12, 31, 23, 59, 59),
    ) -> None:
        _check_bounds(start, end, "datetime")
        self.start = start
        self.end = end

    def generate(self, rng: random.Random) -> datetime.datetime:
        span = int((self.end - self.start).total_seconds())
        return self.start + datetime.timedelta(seconds=rng.randint(0, span))


class UUIDArbitrary(Arbitrary):
    """Version 4 UUIDs drawn from the sample's random source."""

    kinds = _PRIMITIVE

    def generate(self, rng: random.Random) -> uuid.UUID:
        return uuid.UUID(int=rng.getrandbits(128), version=4)


class ElementsArbitrary(Arbitrary):
    """Uniform choice among a fixed sequence of values."""

    kinds = frozenset({Kind.ENUM, Kind.PRIMITIVE})

    def __init__(self, values: Sequence[Any]) -> None:
        if not values:
            raise GenerationConstraintConflict("cannot choose from an empty set of values")
        self.values = tuple(values)

    def generate(self, rng: random.Random) -> Any:
        return rng.choice(self.values)

    def __repr__(self) -> str:
        return f"elements{self.values!r}"


def integers(low: int, high: int) -> Arbitrary:
    return IntegerArbitrary(low, high)


def floats(low: float, high: float) -> Arbitrary:
    return FloatArbitrary(low, high)


def strings(min_length: int = 0, max_length: int = 10, charset: str | None = None) -> Arbitrary:
    if charset is None:
        return StringArbitrary(min_length, max_length)
    return StringArbitrary(min_length, max_length, charset)


def elements(values: Iterable[Any]) -> Arbitrary:
    return ElementsArbitrary(tuple(values))

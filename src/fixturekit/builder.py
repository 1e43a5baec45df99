"""Immutable builders accumulating path-scoped customizations.

Every customization method returns a new :class:`ArbitraryBuilder`; the
receiver is never modified, so a builder can be shared between tests and
threads and used as the base of several variants::

    base = kit.give_me_builder(Order).size("items", 1, 3)
    one_item = base.size("items", 1)
    free = base.set("items[*].price", 0)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from . import customization as cz
from .customization import Customization
from .introspect import TypeDescriptor
from .path import PropertyPath
from .utils.errors import GenerationConstraintConflict

if TYPE_CHECKING:  # pragma: no cover
    from .fixture import FixtureKit

__all__ = ["ArbitraryBuilder"]


@dataclass(slots=True, frozen=True)
class ArbitraryBuilder:
    """Builder for instances of one root type."""

    kit: "FixtureKit"
    annotation: Any
    descriptor: TypeDescriptor
    customizations: tuple[Customization, ...] = ()

    def _with(self, item: Customization) -> "ArbitraryBuilder":
        ordered = item.with_order(len(self.customizations))
        return ArbitraryBuilder(
            self.kit, self.annotation, self.descriptor, self.customizations + (ordered,)
        )

    # -- Customizations -----------------------------------------------------

    def set(self, path: str | PropertyPath, value: Any) -> "ArbitraryBuilder":
        """Fix the value at ``path``.

        ``value`` is used as is (it is not copied); pass an
        :class:`~fixturekit.arbitrary.Arbitrary` to generate a fresh value per
        sample instead.
        """

        return self._with(cz.set_value(path, value))

    def set_null(self, path: str | PropertyPath) -> "ArbitraryBuilder":
        return self._with(cz.set_null(path))

    def set_not_null(self, path: str | PropertyPath) -> "ArbitraryBuilder":
        return self._with(cz.set_not_null(path))

    def size(
        self, path: str | PropertyPath, min_size: int, max_size: int | None = None
    ) -> "ArbitraryBuilder":
        """Constrain the collection or map at ``path`` to ``min_size`` elements,
        or to a uniformly drawn size in ``[min_size, max_size]``."""

        return self._with(cz.set_size(path, min_size, max_size))

    def set_post_condition(
        self, predicate: Callable[[Any], bool], path: str | PropertyPath | None = None
    ) -> "ArbitraryBuilder":
        """Require ``predicate`` to hold; failing instances are regenerated."""

        return self._with(cz.post_condition(predicate, path))

    # -- Generation ---------------------------------------------------------

    def sample(self) -> Any:
        """Generate one instance."""

        return self.kit._sample(self, self.kit._sequence.next())

    def sample_list(self, n: int) -> list[Any]:
        """Generate ``n`` independent instances.

        Raises
        ------
        GenerationConstraintConflict
            If ``n`` is negative.
        """

        if isinstance(n, bool) or not isinstance(n, int):
            raise GenerationConstraintConflict(f"sample count must be an integer, got {n!r}")
        if n < 0:
            raise GenerationConstraintConflict(f"sample count must be non-negative, got {n}")
        return [self.kit._sample(self, seq) for seq in self.kit._sequence.reserve(n)]

    def __repr__(self) -> str:
        ops = ", ".join(c.describe() for c in self.customizations)
        return f"ArbitraryBuilder({self.descriptor.name}{': ' + ops if ops else ''})"

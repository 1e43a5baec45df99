"""Per-sample generation state."""

from __future__ import annotations

import random
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from ..customization import Customization, Operation

__all__ = ["GenerationContext"]


@dataclass(slots=True)
class GenerationContext:
    """State owned by exactly one ``sample()`` call.

    Holds the private random source, the stack of record types currently
    being generated, the attempt counter for postcondition retries and the
    customizations active for the current attempt.
    """

    rng: random.Random
    retry_limit: int
    depth_limit: int
    attempt: int = 0
    stack: list[Any] = field(default_factory=list)
    rules: list[Customization] = field(default_factory=list)
    post_rules: list[Customization] = field(default_factory=list)

    def begin_attempt(self, customizations: Sequence[Customization]) -> None:
        """Reset per-attempt state and count the attempt."""

        self.attempt += 1
        self.stack.clear()
        self.rules = [c for c in customizations if c.operation is not Operation.POST_CONDITION]
        self.post_rules = [c for c in customizations if c.operation is Operation.POST_CONDITION]

    def add_constraints(self, constraints: Sequence[Customization]) -> None:
        for constraint in constraints:
            if constraint.operation is Operation.POST_CONDITION:
                self.post_rules.append(constraint)
            else:
                self.rules.append(constraint)

    def depth_of(self, tp: Any) -> int:
        """Return how often ``tp`` is on the active stack."""

        return sum(1 for entry in self.stack if entry is tp)

    @contextmanager
    def entering(self, tp: Any) -> Iterator[None]:
        self.stack.append(tp)
        try:
            yield
        finally:
            self.stack.pop()

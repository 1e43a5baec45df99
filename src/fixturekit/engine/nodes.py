"""Generation tree nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..introspect import TypeDescriptor
from ..path import Step, format_steps

if TYPE_CHECKING:  # pragma: no cover
    from ..customization import Customization

__all__ = ["GenerationNode"]


@dataclass(slots=True, eq=False)
class GenerationNode:
    """One addressable position of the tree generated for a sample.

    A parent owns its children; ``customization`` is the value customization
    that won at this position, if any, and ``value`` the realized value.
    """

    descriptor: TypeDescriptor
    position: tuple[Step, ...] = ()
    parent: "GenerationNode | None" = None
    children: list["GenerationNode"] = field(default_factory=list)
    customization: "Customization | None" = None
    value: Any = None

    @property
    def path(self) -> str:
        return format_steps(self.position)

    def child(self, descriptor: TypeDescriptor, step: Step) -> "GenerationNode":
        """Create and attach a child reached through ``step``."""

        node = GenerationNode(descriptor, self.position + (step,), parent=self)
        self.children.append(node)
        return node

    def discard_last_child(self) -> None:
        self.children.pop()

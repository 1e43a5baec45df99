"""Semantic resolution of property paths against descriptor trees.

Syntax errors are reported by :func:`~fixturekit.path.expression.parse_path`
when a customization is registered.  Whether a member exists, or whether an
index is applied to something indexable, can only be answered once the
concrete descriptor tree is known; :class:`PathResolver` answers it at
generation time.
"""

from __future__ import annotations

from ..introspect import Introspector, Kind, TypeDescriptor
from ..utils.errors import InvalidPathError, UnsupportedTypeError
from .expression import PropertyPath, StepKind

__all__ = ["PathResolver"]


class PathResolver:
    """Walk :class:`PropertyPath` patterns over descriptors."""

    def __init__(self, introspector: Introspector) -> None:
        self._introspector = introspector

    def resolve(self, path: PropertyPath, root: TypeDescriptor) -> TypeDescriptor:
        """Return the descriptor addressed by ``path`` below ``root``.

        Raises
        ------
        InvalidPathError
            If a step names a missing member, indexes a non-indexable node or
            uses a key literal of the wrong type.
        """

        current = root
        for depth, step in enumerate(path.steps):
            where = f"{path.expression!r} (step {depth + 1}, {current.name})"
            if step.kind is StepKind.MEMBER:
                if not current.kind.is_record:
                    raise InvalidPathError(
                        f"{where}: {current.kind.value.lower()} has no member {step.value!r}",
                        path=path.expression,
                    )
                member = current.member(step.value)
                if member is None:
                    raise InvalidPathError(
                        f"{where}: no member named {step.value!r}", path=path.expression
                    )
                current = self._describe(member.annotation, path)
                continue

            if current.kind is Kind.COLLECTION:
                if step.kind is StepKind.KEY:
                    raise InvalidPathError(
                        f"{where}: key literal {step.value!r} used on a collection",
                        path=path.expression,
                    )
                current = self._describe(current.element, path)
            elif current.kind is Kind.MAP:
                if step.kind is not StepKind.WILDCARD:
                    key = self._describe(current.key, path)
                    if not isinstance(step.value, key.py_type):
                        raise InvalidPathError(
                            f"{where}: key {step.value!r} does not fit {key.name}",
                            path=path.expression,
                        )
                current = self._describe(current.value, path)
            else:
                raise InvalidPathError(
                    f"{where}: {current.kind.value.lower()} cannot be indexed",
                    path=path.expression,
                )
        return current

    def _describe(self, annotation: object, path: PropertyPath) -> TypeDescriptor:
        try:
            return self._introspector.describe(annotation)
        except UnsupportedTypeError as exc:
            raise UnsupportedTypeError(f"while resolving {path.expression!r}: {exc}") from exc

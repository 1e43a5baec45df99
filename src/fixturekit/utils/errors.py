"""Typed exceptions raised by introspection, path handling and generation."""

from __future__ import annotations


class FixtureKitError(Exception):
    """Base class for all errors raised by the package."""


class UnsupportedTypeError(FixtureKitError, TypeError):
    """Raised when no introspection strategy can describe a type."""


class InvalidPathError(FixtureKitError, ValueError):
    """Raised for malformed paths or paths that do not fit the generated shape.

    ``path`` holds the offending expression when one is known.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class RecursionLimitExceeded(FixtureKitError, RecursionError):
    """Raised when a self-referential type exceeds the depth limit."""


class PostConditionUnsatisfiable(FixtureKitError):
    """Raised when the postcondition retry budget is exhausted."""

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class GenerationConstraintConflict(FixtureKitError, ValueError):
    """Raised for empty or inverted ranges and incompatible overrides."""


class RegistryFrozenError(FixtureKitError, RuntimeError):
    """Raised when registering on a registry that is already in use."""


__all__ = [
    "FixtureKitError",
    "UnsupportedTypeError",
    "InvalidPathError",
    "RecursionLimitExceeded",
    "PostConditionUnsatisfiable",
    "GenerationConstraintConflict",
    "RegistryFrozenError",
]

"""Helpers for taking ``typing`` annotations apart."""

from __future__ import annotations

import types
from collections.abc import Mapping
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

from ..utils.errors import UnsupportedTypeError

__all__ = ["NONE_TYPE", "unwrap", "is_nullable", "substitute", "type_map_for"]

NONE_TYPE = type(None)

_UNION_ORIGINS = (Union, types.UnionType)


def unwrap(annotation: Any) -> tuple[Any, bool, tuple[Any, ...]]:
    """Strip ``Annotated`` and ``Optional`` layers from ``annotation``.

    Returns ``(inner, nullable, metadata)``.  Unions with more than one
    non-``None`` alternative raise :class:`UnsupportedTypeError`.
    """

    nullable = False
    metadata: list[Any] = []
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            metadata.extend(annotation.__metadata__)
            annotation = get_args(annotation)[0]
            continue
        if origin in _UNION_ORIGINS:
            args = get_args(annotation)
            rest = [a for a in args if a is not NONE_TYPE]
            if len(rest) != len(args):
                nullable = True
            if len(rest) == 1:
                annotation = rest[0]
                continue
            raise UnsupportedTypeError(f"unions are not supported: {annotation!r}")
        return annotation, nullable, tuple(metadata)


def is_nullable(annotation: Any) -> bool:
    """Return ``True`` when ``annotation`` admits ``None``."""

    try:
        return unwrap(annotation)[1]
    except UnsupportedTypeError:
        return False


def substitute(annotation: Any, type_map: Mapping[Any, Any]) -> Any:
    """Replace type variables in ``annotation`` using ``type_map``."""

    if not type_map:
        return annotation
    if isinstance(annotation, TypeVar):
        return type_map.get(annotation, annotation)
    if get_origin(annotation) is None:
        return annotation
    params = getattr(annotation, "__parameters__", ())
    if not params:
        return annotation
    return annotation[tuple(type_map.get(p, p) for p in params)]


def type_map_for(origin: type, args: tuple[Any, ...]) -> dict[Any, Any]:
    """Bind the type parameters of ``origin`` and of its generic bases.

    ``Page[Item]`` binds ``T`` of ``Page``; a subclass ``ItemPage(Page[Item])``
    binds ``T`` through ``__orig_bases__``.
    """

    mapping: dict[Any, Any] = {}
    params = getattr(origin, "__parameters__", ())
    mapping.update(zip(params, args))
    for klass in getattr(origin, "__mro__", (origin,)):
        for base in vars(klass).get("__orig_bases__", ()):
            base_origin = get_origin(base)
            base_params = getattr(base_origin, "__parameters__", ())
            for param, arg in zip(base_params, get_args(base)):
                mapping.setdefault(param, substitute(arg, mapping))
    return mapping

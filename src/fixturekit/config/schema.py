"""Typed configuration schema and loader for the fixturekit package."""

from __future__ import annotations

import os
import string
from collections.abc import Mapping
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, confloat, conint, field_validator

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

SEED_ENV = "FIXTUREKIT_SEED"


def _check_range(value: tuple[Any, Any], *, allow_negative: bool) -> tuple[Any, Any]:
    low, high = value
    if low > high:
        raise ValueError(f"inverted range [{low}, {high}]")
    if not allow_negative and low < 0:
        raise ValueError(f"range must be non-negative, got [{low}, {high}]")
    return value


class GenerationSettings(BaseModel):
    """Options controlling nullability, seeding and the retry backstops."""

    default_not_null: bool
    null_probability: confloat(ge=0.0, le=1.0) = 0.2
    seed: int | None = None
    retry_limit: conint(ge=1)
    recursion_depth_limit: conint(ge=1)

    model_config = ConfigDict(extra="forbid")


class CollectionSettings(BaseModel):
    """Default sizing of generated collections and maps."""

    size_range: tuple[int, int]

    model_config = ConfigDict(extra="forbid")

    @field_validator("size_range")
    @classmethod
    def _valid_size(cls, value: tuple[int, int]) -> tuple[int, int]:
        return _check_range(value, allow_negative=False)


class StringSettings(BaseModel):
    """Length range and alphabet for generated strings and bytes."""

    length_range: tuple[int, int]
    charset: str = string.ascii_letters + string.digits

    model_config = ConfigDict(extra="forbid")

    @field_validator("length_range")
    @classmethod
    def _valid_length(cls, value: tuple[int, int]) -> tuple[int, int]:
        return _check_range(value, allow_negative=False)

    @field_validator("charset")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("charset must not be empty")
        return value


class NumberSettings(BaseModel):
    """Bounds for generated integers and floats."""

    int_range: tuple[int, int]
    float_range: tuple[float, float]

    model_config = ConfigDict(extra="forbid")

    @field_validator("int_range", "float_range")
    @classmethod
    def _valid_bounds(cls, value: tuple[Any, Any]) -> tuple[Any, Any]:
        return _check_range(value, allow_negative=True)


class ConfigModel(BaseModel):
    """Top-level configuration model."""

    schema_version: conint(ge=1)
    generation: GenerationSettings
    collections: CollectionSettings
    strings: StringSettings
    numbers: NumberSettings

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Loader utilities
# ---------------------------------------------------------------------------


def deep_merge_dicts(a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge mapping ``b`` onto ``a`` returning a new dict."""

    result: dict[str, Any] = dict(a)
    for key, b_val in b.items():
        if key in result and isinstance(result[key], dict) and isinstance(b_val, dict):
            result[key] = deep_merge_dicts(result[key], b_val)
        else:
            result[key] = b_val
    return result


def load_config(
    path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> ConfigModel:
    """Load configuration from defaults and optional user overrides.

    Precedence of sources: package ``defaults.yml`` < user-provided YAML <
    ``FIXTUREKIT_SEED`` environment variable for the random seed.
    """

    with (
        importlib_resources.files("fixturekit.config")
        .joinpath("defaults.yml")
        .open("r", encoding="utf-8") as f
    ):
        defaults = yaml.safe_load(f) or {}

    if path is not None:
        with Path(path).open("r", encoding="utf-8") as f:
            overrides = yaml.safe_load(f) or {}
        merged = deep_merge_dicts(defaults, overrides)
    else:
        merged = defaults

    environ = env if env is not None else os.environ
    if environ.get(SEED_ENV):
        merged = deep_merge_dicts(merged, {"generation": {"seed": environ[SEED_ENV]}})

    return ConfigModel.model_validate(merged)


def with_overrides(cfg: ConfigModel, **options: Any) -> ConfigModel:
    """Return a validated copy of ``cfg`` with flat keyword overrides applied.

    Keys are the field names of the nested sections, for example
    ``seed=7`` or ``size_range=(1, 2)``.  Unknown keys raise ``TypeError``.
    """

    if not options:
        return cfg
    sections = {
        name: type(getattr(cfg, name)).model_fields
        for name in ("generation", "collections", "strings", "numbers")
    }
    patch: dict[str, dict[str, Any]] = {}
    for key, value in options.items():
        owner = next((sec for sec, fields in sections.items() if key in fields), None)
        if owner is None:
            raise TypeError(f"unknown configuration option: {key!r}")
        patch.setdefault(owner, {})[key] = value
    merged = deep_merge_dicts(cfg.model_dump(), patch)
    return ConfigModel.model_validate(merged)


__all__ = [
    "SEED_ENV",
    "ConfigModel",
    "GenerationSettings",
    "CollectionSettings",
    "StringSettings",
    "NumberSettings",
    "deep_merge_dicts",
    "load_config",
    "with_overrides",
]

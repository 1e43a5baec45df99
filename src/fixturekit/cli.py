"""Typer-based command line interface.

``fixturekit sample`` imports a type given as ``module:QualifiedName``,
applies the customizations passed as options and prints the generated
instances as JSON.  ``fixturekit describe`` prints the descriptor tree the
generator works from.

Exit codes
----------
0 success
2 usage error (malformed option, invalid path)
3 target import error
4 configuration error
5 generation error (unsupported type, recursion, postconditions, conflicts)
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import importlib
import json
import os
import sys
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
import yaml
from pydantic import BaseModel, ValidationError

from .builder import ArbitraryBuilder
from .config import ConfigModel, load_config, with_overrides
from .fixture import FixtureKit
from .introspect import Introspector, Kind, TypeDescriptor
from .utils.errors import FixtureKitError, InvalidPathError
from .utils.logging import configure_logging, get_logger

if not sys.stdout.isatty():  # pragma: no cover - CLI test context
    os.environ.setdefault("NO_COLOR", "1")
    os.environ.setdefault("RICH_DISABLE_NO_COLOR", "1")

app = typer.Typer(
    name="fixturekit",
    help="Generate random fixture instances. Use 'fixturekit sample' to draw instances.",
)

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _safe_exit(code: int, msg: str | None = None) -> NoReturn:
    """Exit the CLI with ``code`` emitting ``msg`` to stderr if provided."""

    if msg:
        typer.echo(msg, err=True)
    raise typer.Exit(code)


def _import_target(target: str) -> Any:
    """Resolve ``module:QualifiedName`` to the object it names."""

    module_name, sep, qualname = target.partition(":")
    if not sep or not module_name or not qualname:
        _safe_exit(2, f"target must look like 'module:QualifiedName', got {target!r}")
    try:
        obj: Any = importlib.import_module(module_name)
        for part in qualname.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as exc:
        _safe_exit(3, f"cannot import {target}: {exc}")
    return obj


def _load_cfg(config_path: Path | None, seed: int | None) -> ConfigModel:
    try:
        cfg = load_config(config_path)
        if seed is not None:
            cfg = with_overrides(cfg, seed=seed)
    except (OSError, ValidationError, yaml.YAMLError) as exc:
        _safe_exit(4, f"Config error: {exc}")
    return cfg


def _split(option: str, raw: str) -> tuple[str, str]:
    path, sep, value = raw.partition("=")
    if not sep or not path:
        _safe_exit(2, f"{option} expects PATH=VALUE, got {raw!r}")
    return path.strip(), value


def _parse_size(raw: str) -> tuple[str, int, int | None]:
    path, bounds = _split("--size", raw)
    low, sep, high = bounds.partition(":")
    try:
        return path, int(low), (int(high) if sep else None)
    except ValueError:
        _safe_exit(2, f"--size expects K or MIN:MAX, got {bounds!r}")


def _customize(
    builder: ArbitraryBuilder,
    sets: list[str],
    nulls: list[str],
    sizes: list[str],
) -> ArbitraryBuilder:
    for raw in sizes:
        path, low, high = _parse_size(raw)
        builder = builder.size(path, low, high)
    for raw in sets:
        path, text = _split("--set", raw)
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            _safe_exit(2, f"--set {path}: value is not valid JSON ({exc.msg})")
        builder = builder.set(path, value)
    for path in nulls:
        builder = builder.set_null(path)
    return builder


def to_jsonable(value: Any) -> Any:
    """Convert a generated instance into JSON-compatible data."""

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, enum.Enum):
        return to_jsonable(value.value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, tuple) and hasattr(value, "_asdict"):
        return {k: to_jsonable(v) for k, v in value._asdict().items()}
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, (decimal.Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, Mapping):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((to_jsonable(v) for v in value), key=repr)
    if isinstance(value, (list, tuple)) or hasattr(value, "__iter__"):
        return [to_jsonable(v) for v in value]
    if hasattr(value, "__dict__"):
        return {k: to_jsonable(v) for k, v in vars(value).items() if not k.startswith("_")}
    return repr(value)


def render_descriptor(introspector: Introspector, descriptor: TypeDescriptor) -> list[str]:
    """Render ``descriptor`` and its nested shapes as indented lines."""

    lines: list[str] = []
    seen: set[Any] = set()

    def visit(desc: TypeDescriptor, label: str, depth: int) -> None:
        pad = "  " * depth
        head = f"{pad}{label}{desc.name} [{desc.kind.value.lower()}"
        if desc.kind.is_record:
            head += f", {desc.construction.value.lower()}"
        lines.append(head + "]")
        if desc.kind.is_record:
            if desc.py_type in seen:
                lines.append(f"{pad}  ...")
                return
            seen.add(desc.py_type)
            for member in desc.members:
                visit(introspector.describe(member.annotation), f"{member.name}: ", depth + 1)
            seen.discard(desc.py_type)
        elif desc.kind is Kind.COLLECTION:
            visit(introspector.describe(desc.element), "[*]: ", depth + 1)
        elif desc.kind is Kind.MAP:
            visit(introspector.describe(desc.key), "<key>: ", depth + 1)
            visit(introspector.describe(desc.value), "<value>: ", depth + 1)
        elif desc.kind is Kind.ENUM:
            shown = ", ".join(repr(to_jsonable(v)) for v in desc.values)
            lines.append(f"{pad}  values: {shown}")

    visit(descriptor, "", 0)
    return lines


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main() -> None:
    """Entry point for the fixturekit command group."""
    pass


@app.command()
def sample(  # noqa: PLR0913
    target: str = typer.Argument(..., help="Type to generate, as module:QualifiedName"),
    count: int = typer.Option(1, "--count", "-n", min=0, help="Number of instances"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible output"),
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config", help="YAML config to override defaults"
    ),
    sets: Optional[list[str]] = typer.Option(  # noqa: B008
        None, "--set", help="Fix PATH to a JSON value, as PATH=JSON"
    ),
    nulls: Optional[list[str]] = typer.Option(  # noqa: B008
        None, "--null", help="Force the nullable PATH to null"
    ),
    sizes: Optional[list[str]] = typer.Option(  # noqa: B008
        None, "--size", help="Size of the collection at PATH, as PATH=K or PATH=MIN:MAX"
    ),
    out_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--out", help="Write JSON to this file instead of stdout"
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Log generation details to stderr"
    ),
) -> None:
    """Generate ``count`` instances of ``target`` and print them as JSON."""

    configure_logging(verbose)
    cfg = _load_cfg(config_path, seed)
    tp = _import_target(target)
    kit = FixtureKit(cfg)
    try:
        builder = _customize(kit.give_me_builder(tp), sets or [], nulls or [], sizes or [])
        instances = builder.sample_list(count)
    except InvalidPathError as exc:
        _safe_exit(2, f"Path error: {exc}")
    except FixtureKitError as exc:
        _safe_exit(5, f"Generation error: {exc}")

    log.debug("generated %d instance(s) of %s", count, target)
    payload = [to_jsonable(item) for item in instances]
    text = json.dumps(payload[0] if count == 1 else payload, indent=2, sort_keys=True)
    if out_path is not None:
        try:
            out_path.write_text(text + "\n", encoding="utf-8")
        except OSError as exc:
            _safe_exit(3, f"cannot write {out_path}: {exc}")
        if verbose:
            typer.echo(f"[fixturekit] wrote {count} instance(s) to {out_path}", err=True)
    else:
        typer.echo(text)


@app.command()
def describe(
    target: str = typer.Argument(..., help="Type to describe, as module:QualifiedName"),
) -> None:
    """Print the structural description of ``target``."""

    tp = _import_target(target)
    kit = FixtureKit()
    try:
        descriptor = kit.describe_once(tp)
    except FixtureKitError as exc:
        _safe_exit(5, f"Unsupported type: {exc}")
    for line in render_descriptor(kit.introspector, descriptor):
        typer.echo(line)


if __name__ == "__main__":  # pragma: no cover
    app()

from __future__ import annotations

import abc
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from typer.testing import CliRunner

from fixturekit.cli import app


@dataclass
class Item:
    id: int
    tags: list[str]
    note: Optional[str] = None


class Unsupported(abc.ABC):
    @abc.abstractmethod
    def run(self) -> None: ...


TARGET = f"{__name__}:Item"


def test_sample_json() -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["sample", TARGET, "--count", "2", "--seed", "7", "--set", "id=7", "--size", "tags=2"],
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert len(data) == 2
    assert all(item["id"] == 7 and len(item["tags"]) == 2 for item in data)


def test_sample_single_with_null_and_range() -> None:
    runner = CliRunner()
    result = runner.invoke(
        app, ["sample", TARGET, "--null", "note", "--size", "tags=1:2", "--set", 'tags[0]="a"']
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["note"] is None
    assert data["tags"][0] == "a"
    assert 1 <= len(data["tags"]) <= 2


def test_seed_is_reproducible() -> None:
    runner = CliRunner()
    first = runner.invoke(app, ["sample", TARGET, "--seed", "3", "--count", "3"])
    second = runner.invoke(app, ["sample", TARGET, "--seed", "3", "--count", "3"])
    assert first.exit_code == 0
    assert first.stdout == second.stdout


def test_sample_to_file(tmp_path: Path) -> None:
    out = tmp_path / "out.json"
    runner = CliRunner()
    result = runner.invoke(app, ["sample", TARGET, "--out", str(out), "--set", "id=1"])
    assert result.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["id"] == 1


def test_describe() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["describe", TARGET])
    assert result.exit_code == 0
    assert "Item [record, constructor]" in result.stdout
    assert "id: int [primitive]" in result.stdout
    assert "note: str | None [primitive]" in result.stdout


def test_import_error() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["sample", "no_such_module_xyz:Thing"])
    assert result.exit_code == 3
    assert "no_such_module_xyz" in result.stderr


def test_bad_target_syntax() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["sample", "Item"])
    assert result.exit_code == 2


def test_bad_config(tmp_path: Path) -> None:
    bad_cfg = tmp_path / "bad.yml"
    bad_cfg.write_text("unknown: true\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(app, ["sample", TARGET, "--config", str(bad_cfg)])
    assert result.exit_code == 4


def test_invalid_path() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["sample", TARGET, "--set", "missing=1"])
    assert result.exit_code == 2
    assert "missing" in result.stderr


def test_invalid_json_value() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["sample", TARGET, "--set", "id=not-json"])
    assert result.exit_code == 2


def test_invalid_size_option() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["sample", TARGET, "--size", "tags=a:b"])
    assert result.exit_code == 2


def test_generation_error() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["sample", f"{__name__}:Unsupported"])
    assert result.exit_code == 5
    result = runner.invoke(app, ["describe", f"{__name__}:Unsupported"])
    assert result.exit_code == 5

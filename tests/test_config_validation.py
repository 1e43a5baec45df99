from pathlib import Path

import pytest
from pydantic import ValidationError

from fixturekit.config import load_config, with_overrides


def test_invalid_null_probability(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yml"
    cfg_file.write_text("generation:\n  null_probability: 2.0\n")
    with pytest.raises(ValidationError):
        load_config(cfg_file)


def test_unknown_key(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yml"
    cfg_file.write_text("unknown:\n  foo: 1\n")
    with pytest.raises(ValidationError):
        load_config(cfg_file)


def test_inverted_size_range(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yml"
    cfg_file.write_text("collections:\n  size_range: [5, 1]\n")
    with pytest.raises(ValidationError):
        load_config(cfg_file)


def test_negative_length_range(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yml"
    cfg_file.write_text("strings:\n  length_range: [-1, 4]\n")
    with pytest.raises(ValidationError):
        load_config(cfg_file)


def test_retry_limit_must_be_positive(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yml"
    cfg_file.write_text("generation:\n  retry_limit: 0\n")
    with pytest.raises(ValidationError):
        load_config(cfg_file)


def test_partial_override_keeps_defaults(tmp_path: Path) -> None:
    cfg_file = tmp_path / "cfg.yml"
    cfg_file.write_text("collections:\n  size_range: [2, 2]\n")
    cfg = load_config(cfg_file, env={})
    assert cfg.collections.size_range == (2, 2)
    assert cfg.generation.retry_limit == 100


def test_with_overrides() -> None:
    cfg = load_config(env={})
    new_cfg = with_overrides(cfg, seed=7, size_range=(1, 1), default_not_null=True)
    assert new_cfg.generation.seed == 7
    assert new_cfg.generation.default_not_null is True
    assert new_cfg.collections.size_range == (1, 1)
    # original untouched
    assert cfg.generation.seed is None


def test_with_overrides_unknown_option() -> None:
    cfg = load_config(env={})
    with pytest.raises(TypeError):
        with_overrides(cfg, colour="blue")


def test_with_overrides_validates() -> None:
    cfg = load_config(env={})
    with pytest.raises(ValidationError):
        with_overrides(cfg, retry_limit=0)

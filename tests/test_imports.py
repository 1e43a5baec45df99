"""Smoke tests for package import and version."""

import fixturekit


def test_import_package() -> None:
    assert isinstance(fixturekit, object)


def test_version() -> None:
    assert fixturekit.__version__ == "0.1.0"


def test_public_names() -> None:
    for name in fixturekit.__all__:
        assert hasattr(fixturekit, name), name

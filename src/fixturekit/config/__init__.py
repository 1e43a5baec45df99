"""Configuration loading utilities.

Precedence of configuration sources:
    1. Package defaults (``defaults.yml``)
    2. Optional user-provided YAML passed to :func:`load_config`
    3. ``FIXTUREKIT_SEED`` environment variable for the random seed
"""

from .schema import ConfigModel, load_config, with_overrides

__all__ = ["ConfigModel", "load_config", "with_overrides"]

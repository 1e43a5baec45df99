"""Logging utilities.

Purpose:
    Centralize logging configuration for the package.

Key responsibilities:
    - Provide helper to obtain loggers under the ``fixturekit`` hierarchy.
    - Allow optional verbose/debug mode for the command line.

Public contracts:
    - `get_logger(name)`: Return a logger namespaced under the package.
    - `configure_logging(verbose)`: Install a single stderr handler.

Notes/Edge cases:
    - Logging configuration is idempotent; repeated calls only adjust levels.
    - The library never configures the root logger.
"""

from __future__ import annotations

import logging
import sys

__all__ = ["LOGGER_NAME", "get_logger", "configure_logging"]

LOGGER_NAME = "fixturekit"

_HANDLER_ATTR = "_fixturekit_handler"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger for ``name`` below the package logger."""

    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the package logger once.

    ``verbose`` selects ``DEBUG``; otherwise only warnings are emitted.
    """

    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose else logging.WARNING
    handler = next((h for h in logger.handlers if getattr(h, _HANDLER_ATTR, False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)
    elif isinstance(handler, logging.StreamHandler):
        # sys.stderr may have been swapped since the handler was created.
        handler.setStream(sys.stderr)
    handler.setLevel(level)
    logger.setLevel(level)
    return logger

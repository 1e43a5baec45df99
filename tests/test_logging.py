from __future__ import annotations

import logging

from fixturekit.utils.logging import LOGGER_NAME, configure_logging, get_logger


def test_get_logger_namespacing() -> None:
    assert get_logger().name == LOGGER_NAME
    assert get_logger("engine").name == "fixturekit.engine"
    assert get_logger("fixturekit.path").name == "fixturekit.path"


def test_configure_logging_idempotent() -> None:
    logger = configure_logging(verbose=True)
    handlers = list(logger.handlers)
    assert logger.level == logging.DEBUG
    configure_logging(verbose=False)
    assert logger.handlers == handlers
    assert logger.level == logging.WARNING

"""Tests for logging configuration."""

import logging

from nutritrack.api.app import create_app
from nutritrack.app_logging import configure_logging
from nutritrack.containers import AppContainer


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("nutritrack")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_accepts_level_names() -> None:
    logger = logging.getLogger("nutritrack")
    try:
        configure_logging("warning")
        assert logger.level == logging.WARNING
    finally:
        configure_logging(logging.INFO)


def test_app_uses_configured_log_level(container: AppContainer) -> None:
    container.settings.log_level = "DEBUG"
    try:
        create_app(container)
        assert logging.getLogger("nutritrack").level == logging.DEBUG
    finally:
        configure_logging(logging.INFO)

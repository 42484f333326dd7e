"""Tests for logging configuration."""

import logging

from meal_vault.api.app import create_app
from meal_vault.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("meal_vault")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging(logging.DEBUG)
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.level == logging.DEBUG


def test_create_app_applies_configured_level(container) -> None:
    logger = logging.getLogger("meal_vault")
    logger.handlers.clear()
    container.settings.log_level = "warning"

    create_app(container)

    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1

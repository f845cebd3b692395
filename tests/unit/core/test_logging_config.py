# tests/unit/core/test_logging_config.py
import logging

import pytest

from upleer.core.config import clear_settings_cache
from upleer.core.logging_config import configure_logging


@pytest.fixture
def restore_levels():
    app_logger = logging.getLogger("upleer")
    previous = app_logger.level
    yield app_logger
    app_logger.setLevel(previous)
    clear_settings_cache()


def test_level_comes_from_settings(monkeypatch, restore_levels):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    clear_settings_cache()

    assert configure_logging() == "DEBUG"
    assert restore_levels.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_explicit_level_wins_and_unknown_falls_back(monkeypatch, restore_levels):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    clear_settings_cache()

    assert configure_logging("warning") == "WARNING"
    assert restore_levels.level == logging.WARNING

    assert configure_logging("chatty") == "INFO"
    assert restore_levels.level == logging.INFO

"""
Settings and logging setup.
"""

import logging

from precast_qa.config import Settings, configure_logging, settings


def test_settings_defaults():
    fresh = Settings()
    assert fresh.MAX_TEST_HISTORY == 100
    assert fresh.MAX_DEFAULT_AGGREGATES == 8


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("MAX_TEST_HISTORY", "25")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    fresh = Settings()
    assert fresh.MAX_TEST_HISTORY == 25
    assert fresh.LOG_LEVEL == "debug"


def test_test_database_in_use():
    assert settings.DATABASE_URL == "sqlite:///./test.db"


def test_configure_logging_sets_level_once():
    logger = logging.getLogger("precast_qa")
    configure_logging("debug")
    configure_logging("warning")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1

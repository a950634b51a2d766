"""Tests for logger setup."""

import logging

from util.logging_util import default_log_level, setup_logger


class TestDefaultLogLevel:
    """Tests for default_log_level."""

    def test_info_when_unset(self, monkeypatch):
        monkeypatch.delenv("NEWS_CURATOR_LOG_LEVEL", raising=False)

        assert default_log_level() == logging.INFO

    def test_reads_level_name(self, monkeypatch):
        monkeypatch.setenv("NEWS_CURATOR_LOG_LEVEL", "debug")

        assert default_log_level() == logging.DEBUG

    def test_unknown_name_falls_back(self, monkeypatch):
        monkeypatch.setenv("NEWS_CURATOR_LOG_LEVEL", "chatty")

        assert default_log_level() == logging.INFO


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_single_handler_on_repeat_calls(self):
        setup_logger("tests.logging.repeat")
        logger = setup_logger("tests.logging.repeat")

        assert len(logger.handlers) == 1

    def test_explicit_level(self):
        logger = setup_logger("tests.logging.level", level=logging.WARNING)

        assert logger.level == logging.WARNING

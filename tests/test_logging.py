"""
Tests for core.logging module and the CLI --verbose flag.
"""

import logging

import pytest
from typer.testing import CliRunner

from core.logging import APP_LOGGER, configure_logging, get_logger
from pipeline.run_storybook import app


@pytest.fixture
def app_logger(monkeypatch):
    """App logger, restored to INFO afterwards."""
    monkeypatch.delenv("STORYBOOK_LOG_LEVEL", raising=False)
    yield logging.getLogger(APP_LOGGER)
    monkeypatch.delenv("STORYBOOK_LOG_LEVEL", raising=False)
    configure_logging(logging.INFO)


class TestGetLogger:
    """Tests for get_logger function."""

    def test_module_logger_under_app_logger(self, app_logger):
        logger = get_logger("pipeline.story")

        assert logger.name == "journal_storybook.pipeline.story"
        assert not logger.handlers
        assert app_logger.handlers

    def test_handlers_attached_once(self, app_logger):
        configure_logging()
        count = len(app_logger.handlers)
        configure_logging()

        assert len(app_logger.handlers) == count


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_level(self, app_logger):
        configure_logging(logging.WARNING)
        assert app_logger.level == logging.WARNING

    def test_env_level_wins(self, app_logger, monkeypatch):
        monkeypatch.setenv("STORYBOOK_LOG_LEVEL", "debug")
        configure_logging(logging.INFO)

        assert app_logger.level == logging.DEBUG

    def test_unknown_env_level_ignored(self, app_logger, monkeypatch):
        monkeypatch.setenv("STORYBOOK_LOG_LEVEL", "chatty")
        configure_logging(logging.ERROR)

        assert app_logger.level == logging.ERROR

    def test_cli_verbose_flag(self, app_logger):
        result = CliRunner().invoke(app, ["--verbose", "parse", "anime"])

        assert result.exit_code == 0
        assert app_logger.level == logging.DEBUG

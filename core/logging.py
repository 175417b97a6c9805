"""
Journal Storybook - Logging

Every module logger sits under the "journal_storybook" app logger, which owns
two handlers: Rich console output and a plain-text file in logs/.

Env vars:
    STORYBOOK_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

APP_LOGGER = "journal_storybook"

LOG_FILE = Path(__file__).parent.parent / "logs" / "journal_storybook.log"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

# Shared with the CLI so log lines and tables interleave cleanly
console = Console()


def configure_logging(level: int = logging.INFO, log_file: Optional[Path] = LOG_FILE) -> logging.Logger:
    """
    Set the app log level and attach handlers on first call.

    STORYBOOK_LOG_LEVEL, when set, wins over `level`.

    Args:
        level: Default logging level
        log_file: Log file path, or None for console only

    Returns:
        The app logger
    """
    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(LEVELS.get(os.environ.get("STORYBOOK_LOG_LEVEL", "").upper(), level))
    app_logger.propagate = False

    if app_logger.handlers:
        return app_logger

    app_logger.addHandler(RichHandler(
        console=console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    ))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        app_logger.addHandler(file_handler)

    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger, e.g. get_logger("pipeline.story") -> journal_storybook.pipeline.story."""
    if not logging.getLogger(APP_LOGGER).handlers:
        configure_logging()
    return logging.getLogger(f"{APP_LOGGER}.{name}")

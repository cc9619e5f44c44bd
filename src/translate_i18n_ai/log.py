"""
Logging setup.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are installed by applications (the CLI) through ``setup_logging``.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler

from translate_i18n_ai.config import LoggingConfig

PACKAGE_LOGGER = "translate_i18n_ai"


def setup_logging(config: LoggingConfig | None = None, console: Console | None = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        config: Logging section of the settings (defaults if None).
        console: Rich console for terminal output (stderr if None).

    Returns:
        The configured package logger.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(config.level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(config.format))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger

"""Logging setup driven by LoggingConfig."""

import logging
import sys

from filmindex.config import LoggingConfig


def setup_logging(settings: LoggingConfig) -> logging.Logger:
    """
    Configure the ``filmindex`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Returns:
        The configured package logger
    """
    logger = logging.getLogger('filmindex')
    logger.setLevel(settings.log_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(settings.log_format, datefmt=settings.date_format)

    if settings.console_output:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        logger.addHandler(console)

    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger

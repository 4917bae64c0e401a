from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes (INFO|WARN|ERROR|SUMMARY).

The application logger is ``tabmap``. Library modules log through
``logging.getLogger(__name__)``, so their records propagate into it and pick up the
labeled stdout handler once ``setup_logging`` has run.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

APP_LOGGER_NAME = "tabmap"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formats records as ``LABEL message``."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{level_label} {record.getMessage()}"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the ``tabmap`` logger with one labeled stdout handler.

    Idempotent: later calls return the same logger and only adjust the level when
    ``debug`` is requested.
    """
    global _logger

    level = logging.DEBUG if debug else logging.INFO
    if _logger is not None:
        if debug:
            _set_level(_logger, level)
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    _set_level(logger, level)

    # Avoid duplicate output through the root logger
    logger.propagate = False

    _logger = logger
    return logger


def _set_level(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log ``message`` at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers[:]:
            _logger.removeHandler(handler)
        _logger.propagate = True
    _logger = None

"""Structured logger setup shared across Lambdas."""

import logging
import os

from pythonjsonlogger.json import JsonFormatter

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

# Names of loggers configured by get_logger.
_managed_loggers = set()


def _resolve_level(level: str) -> int:
    return _LEVELS.get((level or "").upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Configure a JSON logger once and reuse it.

    Starts at LOG_LEVEL; set_log_level() later applies the invocation's
    configured level to every logger created here.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = JsonFormatter("%(levelname)s %(name)s %(message)s %(asctime)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(_resolve_level(os.environ.get("LOG_LEVEL", "INFO")))
    logger.propagate = False
    _managed_loggers.add(name)
    return logger


def set_log_level(level: str) -> None:
    """Apply a level name (DEBUG/INFO/WARNING/ERROR) to all managed loggers."""
    resolved = _resolve_level(level)
    for name in _managed_loggers:
        logging.getLogger(name).setLevel(resolved)

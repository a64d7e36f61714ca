"""Logging setup for the sitespend package.

Every module logs through a child of the "sitespend" logger:

    from sitespend.runtime import get_logger
    logger = get_logger(__name__)

Parser modules log their heuristic decisions at DEBUG, recoverable stage
failures at WARNING, and unusable inputs at ERROR.

Environment variables:
    SITESPEND_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or a numeric level. Default: INFO
"""

import logging
import os
import sys
from typing import TextIO

LOG_NAMESPACE = "sitespend"
LOG_LEVEL_ENV_VAR = "SITESPEND_LOG_LEVEL"

DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_handler: logging.Handler | None = None


def _level_from_env() -> int:
    raw = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip().upper()
    if raw.isdigit():
        return int(raw)
    return LEVEL_NAMES.get(raw, DEFAULT_LOG_LEVEL)


def _formatter_for(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | None = None, stream: TextIO | None = None) -> None:
    """Attach a stderr handler to the sitespend namespace once.

    Args:
        level: Log level; when None it comes from SITESPEND_LOG_LEVEL
        stream: Handler output stream, stderr by default
    """
    global _handler

    if _handler is not None:
        return

    if level is None:
        level = _level_from_env()

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(_formatter_for(level))

    namespace_logger = logging.getLogger(LOG_NAMESPACE)
    namespace_logger.setLevel(level)
    namespace_logger.addHandler(_handler)
    namespace_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return the namespaced logger for a module, configuring logging on first use."""
    configure_logging()

    if name == LOG_NAMESPACE or name.startswith(f"{LOG_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOG_NAMESPACE}.{name}")


def set_log_level(level: int) -> None:
    """Change the namespace log level at runtime, switching to line numbers at DEBUG."""
    configure_logging(level)
    logging.getLogger(LOG_NAMESPACE).setLevel(level)
    if _handler is not None:
        _handler.setFormatter(_formatter_for(level))

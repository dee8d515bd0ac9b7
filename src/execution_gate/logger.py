"""Logger factory shared by the gate, the record store and the backends."""

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = "execution_gate"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. ``execution_gate.gate``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Host applications that already configure logging can skip this; records
    propagate to the root logger either way.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger

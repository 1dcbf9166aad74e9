from __future__ import annotations

import logging
import sys


FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
}

LOGGER_NAME = "app"


def configure_logging(level: str = "INFO", format_type: str = "simple") -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Calling this again replaces the handler, so tests and reloads do not
    duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(FORMATS.get(format_type, FORMATS["simple"])))
    logger.addHandler(handler)
    return logger

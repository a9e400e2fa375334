"""
Logger hierarchy for nnviz.

Library modules only create loggers; handlers are installed by the CLI
through ``configure_logging``.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "nnviz"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def get_logger(name: str) -> logging.Logger:
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logger.getChild(name)


def configure_logging(debug: bool = False) -> None:
    """Send nnviz logs to stderr; stdout may carry the rendered graph."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

"""
Miscellaneous utilities shared across nnviz.
"""

from .logging import configure_logging, get_logger, logger
from .config import VizConfig

__all__ = ["VizConfig", "configure_logging", "get_logger", "logger"]

"""Logging setup shared by every pokerbot module."""
import logging
import sys
from typing import Optional

from pokerbot.config import config

ROOT_LOGGER = "pokerbot"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the ``pokerbot`` hierarchy.

    The stdout handler lives on the package logger only, so tables in
    several channels log through one handler.

    Args:
        name: Logger name, typically __name__ of the calling module.
    """
    root = _configure_root()
    if not name or name == ROOT_LOGGER:
        return root
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)

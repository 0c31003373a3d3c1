"""
Logging helpers for the Vocdoni core.

All module loggers hang below the ``vocdoni_core`` logger, which owns the
only handler. The level is read from VOCDONI_LOG_LEVEL the first time a
logger is requested.
"""

import logging
import os
from typing import Optional

ROOT_LOGGER_NAME = "vocdoni_core"
_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        root.addHandler(handler)

        level_str = os.getenv("VOCDONI_LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level_str, logging.INFO))
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the package root logger.

    Names outside the ``vocdoni_core`` namespace are nested below it, so
    every record goes through the same handler and level.
    """
    root = _configure_root()
    if not name or name == ROOT_LOGGER_NAME:
        return root
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)

"""Console logging for the command-line scripts.

Library modules only call ``logging.getLogger(__name__)``; the package logger
carries a ``NullHandler`` (see ``budget_analytics/__init__.py``) until a script
calls :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

from .config import LOG_LEVEL_ENV

PACKAGE_LOGGER = "budget_analytics"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_console: Optional[logging.Handler] = None


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Explicit level, else ``BUDGET_LOG_LEVEL``, else INFO; unknown names mean INFO."""
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, str):
        name = level.strip().upper()
        level = int(name) if name.isdigit() else logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None) -> logging.Logger:
    """Send package logs to stderr; repeated calls only change the level."""
    global _console
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _console is None:
        _console = logging.StreamHandler()
        _console.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_console)
        logger.propagate = False
    logger.setLevel(resolve_level(level))
    return logger

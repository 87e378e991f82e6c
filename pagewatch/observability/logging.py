"""
Logger factory for PageWatch.

Every module logs through get_logger(__name__). One stream handler is attached
to the root logger on first use; the level comes from PAGEWATCH_LOG_LEVEL (or
the bare LOG_LEVEL) and is re-read on every call, so a level change in the
environment applies to loggers created afterwards.
"""

from __future__ import annotations

import logging
from typing import Final

from pagewatch.infrastructure.env import lookup_env

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DEFAULT_LEVEL: Final[str] = "INFO"


def resolve_level() -> int:
    """Configured level as a logging constant; unknown names fall back to INFO."""
    level_name = (lookup_env("LOG_LEVEL") or _DEFAULT_LEVEL).upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Return a PageWatch module logger, attaching the shared handler once."""
    global _HANDLER_ATTACHED

    level = resolve_level()
    root = logging.getLogger()

    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        _HANDLER_ATTACHED = True
    root.setLevel(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger

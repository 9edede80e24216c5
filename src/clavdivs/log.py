"""Logging setup for clavdivs.

Records go to stderr so stdout stays clean for agent output.
"""

from __future__ import annotations

import logging
import os
import sys

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def resolve_log_level(level: str | None = None) -> int:
    """Resolve a level name, falling back to LOG_LEVEL and then INFO."""
    name = (level or os.environ.get("LOG_LEVEL") or "info").lower()
    return _LEVELS.get(name, logging.INFO)


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stderr handler to the ``clavdivs`` logger.

    Calling it again replaces the handler rather than adding another.
    """
    logger = logging.getLogger("clavdivs")
    logger.setLevel(resolve_log_level(level))

    for handler in list(logger.handlers):
        if getattr(handler, "_clavdivs_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._clavdivs_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


__all__ = ["LOG_FORMAT", "configure_logging", "resolve_log_level"]

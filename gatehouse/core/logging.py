"""Process-wide logging configuration."""

from __future__ import annotations

import logging

from .config import LOG_LEVEL

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def _level(name: str) -> int:
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    """Attach a stream handler to the root logger at ``LOG_LEVEL``.

    Safe to call more than once. When a handler is already installed only the
    level is adjusted.
    """
    root = logging.getLogger()
    level = _level(LOG_LEVEL)
    if root.handlers:
        # Host process owns the handlers.
        root.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    root.setLevel(level)
    root.addHandler(handler)


__all__ = ["setup_logging"]

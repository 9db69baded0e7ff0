"""Logging configuration for the CLI and scenario runs."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single stderr handler.

    Unknown level names fall back to INFO. aiohttp is kept at WARNING.
    Calling this again replaces the handler installed by the previous call.
    """
    global _handler

    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(_handler)
    root.setLevel(resolved)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)

"""Logging helpers shared by the engine, the scanner, and the entry points."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", stream=None) -> None:
    """Attach a single stream handler to the root logger.

    Calling this more than once is a no-op so that the CLI and the API
    server can both call it safely.

    Args:
        level: Logging level name. Unknown names fall back to INFO.
        stream: Target stream, stdout when omitted.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (usually the module's ``__name__``)."""
    return logging.getLogger(name)

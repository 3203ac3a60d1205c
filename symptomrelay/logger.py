"""Logging configuration for the symptom relay.

Module loggers are children of the ``symptomrelay`` logger, which owns the
one file handler and does not propagate, so uvicorn's console output only
carries access lines.
"""

import logging
import os
from pathlib import Path

ROOT_LOGGER_NAME = "symptomrelay"
LOG_FILE = Path(os.environ.get("SYMPTOMRELAY_LOG_FILE", "symptomrelay.log"))
LOG_LEVEL = os.environ.get("SYMPTOMRELAY_LOG_LEVEL", "DEBUG").upper()
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.FileHandler(LOG_FILE, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.setLevel(LOG_LEVEL)
        root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger that writes through the relay's file handler.

    Names outside the package (``__main__`` when a module is run directly)
    are nested under it.
    """
    root = _root_logger()
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return root.getChild(name)


def preview(text: str, limit: int = 50) -> str:
    """Shorten user-supplied text before it goes into a log line."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."

"""Logging helpers."""

import logging

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the lectern hierarchy."""
    return logging.getLogger(name)


def configure_logging(level: int | str = logging.INFO, fmt: str = DEFAULT_FORMAT) -> None:
    """
    Attach a stream handler to the root ``lectern`` logger.

    Safe to call more than once; only the first call adds a handler.
    """
    root = logging.getLogger("lectern")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

"""Logging setup with rich console output."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "chess_coach"


def setup_logging(level: str | int = "WARNING") -> logging.Logger:
    """Attach a rich stderr handler to the package logger.

    Args:
        level: Logging level name or number.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    return logger

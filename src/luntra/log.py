"""Logging bootstrap.

Modules log through ``logging.getLogger(__name__)``; this module only wires
handlers onto the package logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "luntra"


def parse_level(raw: str | None) -> int:
    """Convert a level name (``"debug"``, ``"INFO"``...) to a logging level.

    Unknown names fall back to WARNING.
    """
    normalized = str(raw or "WARNING").strip().upper()
    level = logging.getLevelName(normalized)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: str | None = None, console: Console | None = None) -> logging.Logger:
    """Attach a Rich handler to the package logger.

    Safe to call more than once; the handler is replaced, not duplicated.

    Args:
        level: Level name, defaults to WARNING
        console: Console to log to, defaults to stderr

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(parse_level(level))
    logger.propagate = False
    return logger

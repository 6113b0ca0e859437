"""Logging setup for clawlog: rich console output plus an optional log file."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "clawlog"


def setup_logging(
    level: str | int = "INFO",
    *,
    verbose: bool = False,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure the ``clawlog`` logger hierarchy.

    Args:
        level: Base level name or number (e.g. ``"INFO"``).
        verbose: Force DEBUG and show source paths in console output.
        log_file: Optional file to append plain-text log lines to.

    Returns:
        The configured ``clawlog`` logger.
    """
    if verbose:
        resolved = logging.DEBUG
    elif isinstance(level, int):
        resolved = level
    else:
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=resolved, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(resolved)
    return logger


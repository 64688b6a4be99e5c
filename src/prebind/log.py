"""Logging setup for prebind."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from prebind.config import debug_enabled

console = Console(stderr=True)

LOGGER_NAME = "prebind"


def _level(verbose: bool) -> int:
    if debug_enabled():
        return logging.DEBUG
    return logging.INFO if verbose else logging.WARNING


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Route prebind's log records to stderr through rich.

    Scanner diagnostics and unresolved effect functions are warnings and
    always shown. `verbose` adds the per-prototype compaction summary,
    PREBIND_DEBUG adds pruned observer cache entries and source paths.

    Calling it again replaces the rich handler it installed before; other
    handlers on the `prebind` logger are left alone.
    """
    level = _level(verbose)
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console,
        level=level,
        show_time=verbose,
        show_path=level == logging.DEBUG,
        markup=False,
    )
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger

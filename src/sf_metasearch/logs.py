"""Logging setup for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "sf_metasearch"


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Route package logs through rich on stderr.

    Branch failures are warnings; per-branch timings show up with --verbose.
    """
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)
    log.handlers.clear()
    log.addHandler(
        RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
    )
    log.propagate = False
    return log

"""Logging configuration for the voxlock CLI."""

import logging
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler


def resolve_level(verbosity: int = 0, quiet: bool = False, debug: bool = False) -> int:
    """Map CLI flags to a log level.

    Precedence is quiet > debug > verbosity.
    """
    if quiet:
        return logging.WARNING
    if debug or verbosity >= 1:
        return logging.DEBUG
    return logging.INFO


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO | None = None,
    debug: bool = False,
) -> Console:
    """Install a Rich handler for voxlock's loggers.

    Args:
        verbosity: Number of -v flags
        quiet: Only show warnings and errors
        no_color: Disable colored output
        stream: Output stream for logs (defaults to whatever sys.stderr is at write time)
        debug: Same as -v, also shows timestamps and source paths

    Returns:
        Configured Rich console for output
    """
    level = resolve_level(verbosity, quiet, debug)
    detailed = debug or verbosity >= 2

    console = Console(
        file=stream,
        stderr=True,
        force_terminal=not no_color,
        no_color=no_color,
    )
    handler = RichHandler(
        console=console,
        show_time=detailed,
        show_path=detailed,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    return console

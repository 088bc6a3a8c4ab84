"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import os

import typer
from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the hashtpl CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - shows config and context files being loaded
    - Debug (HASHTPL_DEBUG=1): DEBUG level - parse summaries, includes, loops
    """
    debug = bool(os.environ.get("HASHTPL_DEBUG"))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("hashtpl")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def fail(error: Exception | str, exit_code: int = 1) -> typer.Exit:
    """Print an error line and return the Exit to raise."""
    typer.secho(f"Error: {error}", err=True, fg=typer.colors.RED)
    return typer.Exit(code=exit_code)

"""
logging_utils.py

A small collection of logging helpers used across the labnotes CLI.

Output goes through Typer's echo so that it behaves the same in a terminal
and under CliRunner.
"""

import json
from typing import Any

import typer


def log_verbose(message: str, verbose: bool) -> None:
    """
    Print a high‑level progress message when verbose mode is enabled.

    Parameters
    ----------
    message : str
        Short, plain‑English description of what the command is doing
        (e.g., "Fetching legacy notebook rows...").

    verbose : bool
        When False, this function does nothing.
    """
    if verbose:
        typer.echo(message)


def log_debug(label: str, payload: Any, debug: bool) -> None:
    """
    Print a labelled JSON dump of `payload` when debug mode is enabled.

    Values that JSON cannot encode (datetimes, LOB objects) are rendered
    with str().
    """
    if not debug:
        return
    typer.echo(f"{label}:")
    typer.echo(json.dumps(payload, indent=2, default=str))


def log_warning(message: str) -> None:
    """Print a warning to stderr. Always shown."""
    typer.echo(f"Warning: {message}", err=True)

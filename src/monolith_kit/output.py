"""Output helpers with clear intent.

``user_output`` is for progress and status messages (stderr), so that
``machine_output`` (stdout) stays clean for piping command results.
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True, color: bool | None = None) -> None:
    """Print a message for the user on stderr."""
    click.echo(message, nl=nl, err=True, color=color)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Print command results on stdout."""
    click.echo(message, nl=nl)


def success_line(text: str) -> str:
    return click.style("  ✓ ", fg="green") + text


def warning_line(text: str) -> str:
    return click.style("  ! ", fg="yellow") + text


def error_line(text: str) -> str:
    return click.style("  ✗ ", fg="red") + text

"""
This module provides functions for formatted output to stdout. Status lines are
prefixed with a green checkmark when the Internet is reachable and with a red
exclamation mark otherwise, errors use the same red mark.
"""

from __future__ import annotations

import enum

import click


class Prefix(enum.Enum):
    """Prefix for command line output"""

    Ok = ("✓", "green")
    Warn = ("!", "red")
    NONE = ("", None)


def echo(message: str, nl: bool = True, prefix: Prefix = Prefix.NONE) -> None:
    """
    Print a message to stdout.

    :param message: The string to output.
    :param nl: Whether to end with a new line.
    :param prefix: Symbol to output before the message.
    """
    symbol, color = prefix.value

    if symbol:
        message = f"{click.style(symbol, fg=color)} {message}"

    click.echo(message, nl=nl)


def warn(message: str, nl: bool = True) -> None:
    """Print a warning or a lost connection. Will be prefixed with an exclamation
    mark."""
    echo(message, nl=nl, prefix=Prefix.Warn)


def ok(message: str, nl: bool = True) -> None:
    """Print a confirmation or an available connection. Will be prefixed with a
    checkmark."""
    echo(message, nl=nl, prefix=Prefix.Ok)

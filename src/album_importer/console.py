"""Shared Rich console for album-importer CLI output."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape

# Global console instance, created on first use
_console: Console | None = None


def get_console() -> Console:
    """Get the global Rich console instance.

    Returns:
        The global Console, a stderr console created on first use
    """
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def set_console(console: Console) -> None:
    """Set the global Rich console instance.

    Args:
        console: The Console instance to use globally
    """
    global _console
    _console = console


def print(*args: Any, **kwargs: Any) -> None:
    """Print to the global console.

    Args:
        *args: Positional arguments passed to console.print()
        **kwargs: Keyword arguments passed to console.print()
    """
    get_console().print(*args, **kwargs)


def print_error(message: str) -> None:
    """Print an error message in red.

    Args:
        message: Error message to display; markup in it is shown literally
    """
    get_console().print(f"[red]Error: {escape(message)}[/red]", highlight=False)


def print_success(message: str) -> None:
    """Print a success message in green.

    Args:
        message: Success message to display; markup in it is shown literally
    """
    get_console().print(f"[green]{escape(message)}[/green]", highlight=False)

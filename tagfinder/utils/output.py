"""Rich console output helpers for tag-finder."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

# Set by cli.py after argument parsing
_verbose_enabled: bool = False

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "path": "blue underline",
        "tags": "magenta",
        "sql": "green",
    }
)

console = Console(theme=THEME, stderr=False)
error_console = Console(theme=THEME, stderr=True)


def set_verbosity(*, verbose: bool = False, debug: bool = False) -> None:
    """Enable verbose messages; debug implies verbose."""
    global _verbose_enabled
    _verbose_enabled = verbose or debug


def set_color(enabled: bool) -> None:
    """Enable or disable color on both console instances."""
    console.no_color = not enabled
    error_console.no_color = not enabled


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/info]")


def warning(message: str) -> None:
    """Print a warning message to stderr."""
    error_console.print(f"[warning]Warning:[/warning] {message}")


def error(message: str, hint: str | None = None) -> None:
    """Print an error message to stderr.

    Args:
        message: The error message.
        hint: Optional hint for resolution.
    """
    error_console.print(f"[error]Error:[/error] {message}")
    if hint:
        error_console.print(f"  [info]Hint:[/info] {hint}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/success]")


def verbose(message: str) -> None:
    """Print a message only when verbose mode is enabled."""
    if _verbose_enabled:
        console.print(f"[info]{message}[/info]")


def print_sql(fragment: str) -> None:
    """Print generated SQL or FTS text verbatim on one line.

    Markup and highlighting are off: brackets, quotes and backslashes are
    part of the output.
    """
    console.print(fragment, style="sql", markup=False, highlight=False, soft_wrap=True)


def create_table(title: str | None = None, **kwargs: Any) -> Table:
    """Create a styled table.

    Args:
        title: Optional table title.
        **kwargs: Additional Table arguments.

    Returns:
        Rich Table instance.
    """
    return Table(title=title, **kwargs)

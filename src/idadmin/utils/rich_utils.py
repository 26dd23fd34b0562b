"""Rich console shared by the CLI, plus table rendering helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.theme import Theme
from rich.traceback import install as rich_traceback_install

_console: Console | None = None

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red",
        "success": "green",
        "muted": "grey62",
    }
)


def get_console() -> Console:
    """Return the shared Rich Console, creating it on first use."""
    global _console
    if _console is None:
        _console = Console(theme=THEME, highlight=False, soft_wrap=False)
    return _console


def set_console(console: Console | None) -> None:
    """Replace the shared console; None resets it to the default on next use."""
    global _console
    _console = console


def install_rich_tracebacks() -> None:
    """Enable rich tracebacks globally for nicer error output."""
    rich_traceback_install(show_locals=False, word_wrap=True, suppress=["click"])


def build_table(
    title: str, columns: Sequence[str], rows: Iterable[Sequence[Any]]
) -> Table:
    """Build a table; ``None`` cells render as a muted dash."""
    table = Table(title=title, header_style="bold cyan")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("[muted]-[/muted]" if cell is None else str(cell) for cell in row))
    return table

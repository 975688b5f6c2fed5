"""Shared Rich display functions for entries.

Provides table builders and the interactive picker used by the list
and restore commands.
"""

import json

import typer
from rich.markup import escape
from rich.table import Table

from toss.models.entry import Entry
from toss.utils.formatting import console, format_size, print_error


def format_timestamp(entry: Entry) -> str:
    """Format an entry's toss time in local time (YYYY-MM-DD HH:MM)."""
    return entry.tossed_at.astimezone().strftime("%Y-%m-%d %H:%M")


def create_entries_table(entries: list[Entry], title: str = "Tossed Items") -> Table:
    """Create a Rich table displaying entries.

    Builds a numbered table with toss time, size and original path.
    Directories are marked with a trailing '[dir]'.

    Args:
        entries: Entries to display, in order.
        title: Table title.

    Returns:
        Rich Table configured for entry display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="header",
        border_style="border",
    )
    table.add_column("No.", justify="right", width=4)
    table.add_column("Tossed At", style="muted", no_wrap=True)
    table.add_column("Size", style="size", justify="right")
    table.add_column("Path", overflow="fold")

    for number, entry in enumerate(entries, start=1):
        path = escape(entry.original_path)
        if entry.is_dir:
            path = f"[directory]{path}[/] [muted]\\[dir][/]"
        table.add_row(
            str(number),
            format_timestamp(entry),
            format_size(entry.size_bytes),
            path,
        )

    return table


def print_entries_json(entries: list[Entry]) -> None:
    """Print entries as JSON for scripting."""
    console.print_json(json.dumps([entry.to_dict() for entry in entries]))


def pick_entry(entries: list[Entry]) -> Entry:
    """Ask the user to choose one of several entries.

    Args:
        entries: Candidate entries (at least two).

    Returns:
        The chosen entry.

    Raises:
        typer.Exit: With code 1 if the selection is invalid.
    """
    console.print(create_entries_table(entries, title="Multiple matches found"))
    choice = typer.prompt(f"Choose [1-{len(entries)}]", type=int)
    if not 1 <= choice <= len(entries):
        print_error("invalid selection")
        raise typer.Exit(code=1)
    return entries[choice - 1]

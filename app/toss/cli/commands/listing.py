"""List command for viewing the holding area.

This module provides the `toss list` command.
"""

from typing import Annotated

import typer

from toss.cli.display import create_entries_table, print_entries_json
from toss.cli.types import OutputFormat, open_holding_area
from toss.utils.formatting import console, format_size, print_info


def list_entries(
    ctx: typer.Context,
    query: Annotated[
        str | None,
        typer.Argument(help="Only show items whose path or bin name contains this text."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List tossed items, oldest first.

    Examples:
        toss list
        toss list report        # only matching items
        toss list -f json       # JSON output for scripting
    """
    with open_holding_area(ctx) as holding:
        entries = holding.search_entries(query) if query else holding.list_entries()

    if output_format == OutputFormat.JSON:
        print_entries_json(entries)
        return

    if not entries:
        print_info("bin is empty" if not query else "No matching items found.")
        return

    console.print(create_entries_table(entries))
    total = sum(entry.size_bytes for entry in entries)
    console.print(f"\n[muted]{len(entries)} item(s), {format_size(total)} total[/muted]")

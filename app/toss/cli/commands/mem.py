"""Mem command for reporting holding-area disk usage."""

import typer

from toss.cli.types import open_holding_area
from toss.utils.formatting import console, format_size


def mem(ctx: typer.Context) -> None:
    """Show disk space used by the holding area."""
    with open_holding_area(ctx) as holding:
        usage = holding.disk_usage()

    console.print(f"bin usage: [size]{format_size(usage)}[/size]")

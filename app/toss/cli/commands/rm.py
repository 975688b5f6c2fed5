"""Toss command for moving paths into the holding area.

This module provides the `toss rm` command, a safer rm that moves
files and directories into the holding area instead of deleting them.
"""

from pathlib import Path
from typing import Annotated

import typer

from toss.cli.types import open_holding_area
from toss.utils.formatting import print_error, print_success


def rm(
    ctx: typer.Context,
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files, directories or symlinks to toss."),
    ],
) -> None:
    """Move files and directories to the holding area.

    Every path is processed even if an earlier one fails; the command
    exits with code 1 if any path could not be tossed.

    Examples:
        toss rm report.txt
        toss rm build/ notes.md old-link
    """
    quiet = ctx.ensure_object(dict).get("quiet", False)

    with open_holding_area(ctx) as holding:
        results = holding.toss_many(paths)

    for result in results:
        if result.success and result.entry is not None:
            if not quiet:
                print_success(f"tossed: {result.entry.original_path}")
        else:
            print_error(str(result.error))

    if any(not r.success for r in results):
        raise typer.Exit(code=1)

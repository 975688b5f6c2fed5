"""Empty command for permanently deleting everything in the holding area.

This module provides the `toss empty` command.
"""

from typing import Annotated

import typer

from toss.cli.types import get_config, open_holding_area
from toss.core.errors import TossError
from toss.utils.formatting import print_error, print_info, print_success


def empty(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Skip confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Permanently delete all tossed items.

    This cannot be undone.

    Examples:
        toss empty
        toss empty --force
    """
    with open_holding_area(ctx) as holding:
        count = holding.count_entries()

        if count == 0:
            print_info("bin is already empty")
            return

        if not force and get_config(ctx).confirm_empty:
            confirmed = typer.confirm(
                f"Permanently delete {count} item(s)?",
                default=False,
            )
            if not confirmed:
                print_info("Aborted.")
                return

        try:
            removed = holding.empty_bin()
        except TossError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    print_success(f"emptied bin ({removed} item(s) permanently deleted)")

"""Restore command for moving items back to their original location.

This module provides the `toss restore` command. Choosing among several
matches and deciding whether to overwrite an occupied destination happen
here; the holding area itself never overwrites anything. An occupant
being replaced is renamed aside and only deleted once the restore has
succeeded.
"""

import os
from typing import Annotated

import typer

from toss.cli.display import pick_entry
from toss.cli.types import open_holding_area
from toss.core.errors import TossError
from toss.core.ids import is_valid_id
from toss.holding.mover import remove_path
from toss.holding.operations import HoldingArea
from toss.models.entry import Entry
from toss.utils.formatting import print_error, print_info, print_success, print_warning


def restore(
    ctx: typer.Context,
    query: Annotated[
        str | None,
        typer.Argument(help="Text matched against the original path or bin name."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Overwrite an existing destination without asking.",
        ),
    ] = False,
) -> None:
    """Restore a tossed item to its original location.

    Without a query every item is a candidate. When several items match,
    a numbered list is shown to choose from.

    Examples:
        toss restore report.txt
        toss restore            # choose from everything in the bin
        toss restore notes -y   # overwrite if notes already exists
        toss restore 0f8fad5b-d9cb-469f-a165-70867728950e
    """
    with open_holding_area(ctx) as holding:
        entries = _find_candidates(holding, query)

        if not entries:
            print_error("no matching items found")
            raise typer.Exit(code=1)

        entry = entries[0] if len(entries) == 1 else pick_entry(entries)

        destination = entry.original_path
        if not os.path.lexists(holding.bin_path(entry)):
            print_error(f"Object missing from holding area: {holding.bin_path(entry)}")
            raise typer.Exit(code=1)

        set_aside: str | None = None
        if os.path.lexists(destination):
            if not yes:
                confirmed = typer.confirm(
                    f"{destination} already exists. Overwrite?",
                    default=False,
                )
                if not confirmed:
                    print_info("Aborted.")
                    return
            set_aside = f"{destination}.toss-{entry.id[:8]}"
            try:
                os.rename(destination, set_aside)
            except OSError as e:
                print_error(f"Cannot move existing {destination} aside: {e}")
                raise typer.Exit(code=1) from e

        try:
            holding.restore_entry(entry)
        except TossError as e:
            print_error(str(e))
            if set_aside is not None:
                _put_back(set_aside, destination)
            raise typer.Exit(code=1) from e

    if set_aside is not None:
        try:
            remove_path(set_aside)
        except OSError as e:
            print_warning(f"Restored, but could not delete the replaced copy {set_aside}: {e}")

    print_success(f"restored: {destination}")


def _find_candidates(holding: HoldingArea, query: str | None) -> list[Entry]:
    """Entries a restore query refers to. An exact id selects that entry alone."""
    if not query:
        return holding.list_entries()
    if is_valid_id(query):
        entry = holding.get_entry(query)
        if entry is not None:
            return [entry]
    return holding.search_entries(query)


def _put_back(set_aside: str, destination: str) -> None:
    """Return a replaced occupant to its place after a failed restore."""
    if os.path.lexists(destination):
        print_warning(f"Previous contents of {destination} kept at {set_aside}")
        return
    try:
        os.rename(set_aside, destination)
    except OSError as e:
        print_warning(f"Previous contents of {destination} kept at {set_aside}: {e}")


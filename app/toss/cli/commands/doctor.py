"""Doctor command for checking holding-area consistency.

This module provides the `toss doctor` command, which reports objects
in the holding area without a ledger record (orphans) and records whose
object is gone (stale). Nothing is modified.
"""

import typer
from rich.markup import escape

from toss.cli.display import create_entries_table
from toss.cli.types import open_holding_area
from toss.utils.formatting import console, print_success, print_warning


def doctor(ctx: typer.Context) -> None:
    """Check that the holding area and its ledger agree.

    Exits with code 1 if any orphaned object or stale record is found.
    """
    with open_holding_area(ctx) as holding:
        report = holding.reconcile()
        files_dir = holding.paths.files_dir

    if report.is_consistent:
        print_success("Holding area is consistent.")
        return

    if report.orphans:
        print_warning(f"{len(report.orphans)} untracked object(s) in {files_dir}:")
        for name in report.orphans:
            console.print(f"  - {escape(name)}")

    if report.stale:
        print_warning(f"{len(report.stale)} record(s) without an object in the bin:")
        console.print(create_entries_table(report.stale, title="Stale Records"))

    raise typer.Exit(code=1)

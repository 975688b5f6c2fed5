"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from toss import __version__
from toss.cli.commands import config, doctor, empty, listing, mem, restore, rm
from toss.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="toss",
    help="A safer rm: move files to a holding area instead of deleting them.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"toss version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            "-r",
            help="Holding-area root (overrides TOSS_HOME and config).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """toss - a safer rm.

    Tossed files and directories go to a holding area and can be
    restored to their original location until the bin is emptied.
    """
    _configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["root"] = root.expanduser() if root is not None else None
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="rm")(rm.rm)
app.command(name="list")(listing.list_entries)
app.command(name="restore")(restore.restore)
app.command(name="empty")(empty.empty)
app.command(name="mem")(mem.mem)
app.command(name="doctor")(doctor.doctor)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()

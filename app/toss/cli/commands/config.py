"""Config commands for inspecting and creating the configuration file.

Provides `toss config show` and `toss config init`.
"""

from typing import Annotated

import typer
from rich.table import Table

from toss.cli.types import get_config, resolve_bin_paths
from toss.core.config import ConfigError, TossConfig, save_config
from toss.core.paths import ensure_config_dir, get_config_path
from toss.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the toss configuration.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the resolved holding-area locations and settings."""
    config = get_config(ctx)
    paths = resolve_bin_paths(ctx)
    config_path = get_config_path()

    table = Table(title="toss configuration", show_header=False, border_style="border")
    table.add_column("Setting", style="header")
    table.add_column("Value", overflow="fold")
    table.add_row("Config file", f"{config_path}{'' if config_path.exists() else ' (not found)'}")
    table.add_row("Holding area", str(paths.root))
    table.add_row("Files", str(paths.files_dir))
    table.add_row("Ledger", str(paths.ledger_path))
    table.add_row("Confirm empty", "yes" if config.confirm_empty else "no")
    console.print(table)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a default configuration file."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_info(f"Config already exists: {config_path} (use --force to overwrite)")
        return

    try:
        ensure_config_dir()
        saved = save_config(TossConfig(), config_path)
    except (ConfigError, RuntimeError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Wrote default config to {saved}")

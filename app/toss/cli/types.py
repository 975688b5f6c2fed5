"""Shared types and utilities for CLI commands.

This module resolves the holding-area location for a command and opens
it, so every command module handles configuration the same way.

Resolution order for the holding-area root:
1. --root option
2. TOSS_HOME environment variable
3. root in ~/.config/toss/config.toml
4. ~/.local/share/toss (XDG data directory)
"""

import os
from enum import Enum
from pathlib import Path

import typer

from toss.core.config import ConfigError, TossConfig, load_config
from toss.core.errors import LedgerInitError
from toss.core.paths import TOSS_HOME_ENV
from toss.holding.operations import BinPaths, HoldingArea
from toss.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options for listing commands."""

    TABLE = "table"
    JSON = "json"


def get_config(ctx: typer.Context) -> TossConfig:
    """Load the user configuration once per invocation.

    Exits with code 1 if the configuration file is invalid.
    """
    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if config is None:
        try:
            config = load_config()
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        obj["config"] = config
    return config


def resolve_bin_paths(ctx: typer.Context) -> BinPaths:
    """Resolve the holding-area layout for this invocation.

    Args:
        ctx: Typer context carrying the global --root option.

    Returns:
        BinPaths for the selected holding area.
    """
    obj = ctx.ensure_object(dict)
    root: Path | None = obj.get("root")
    if root is None:
        env_root = os.environ.get(TOSS_HOME_ENV)
        if env_root:
            root = Path(env_root).expanduser()
    if root is not None:
        return BinPaths.from_root(root)
    return get_config(ctx).bin_paths()


def open_holding_area(ctx: typer.Context) -> HoldingArea:
    """Open the holding area selected for this invocation.

    Exits with code 1 if the ledger cannot be opened.
    """
    paths = resolve_bin_paths(ctx)
    try:
        return HoldingArea(paths)
    except LedgerInitError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

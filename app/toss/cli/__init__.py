"""CLI package for toss.

This package contains the Typer application and all subcommands.
"""

from toss.cli.main import app

__all__ = ["app"]

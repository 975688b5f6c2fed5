"""CLI commands for toss.

This package contains all subcommand implementations.
"""

from toss.cli.commands import config, doctor, empty, listing, mem, restore, rm

__all__ = ["config", "doctor", "empty", "listing", "mem", "restore", "rm"]

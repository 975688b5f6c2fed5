"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.markup import escape

from toss.core.theme import get_theme

_KB = 1024
_MB = 1024 * _KB
_GB = 1024 * _MB


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int) -> str:
    """Format byte count as a compact human-readable string.

    Args:
        size_bytes: Size in bytes.

    Returns:
        e.g. '512B', '1.5KB', '3.0MB', '2.1GB'.
    """
    if size_bytes >= _GB:
        return f"{size_bytes / _GB:.1f}GB"
    if size_bytes >= _MB:
        return f"{size_bytes / _MB:.1f}MB"
    if size_bytes >= _KB:
        return f"{size_bytes / _KB:.1f}KB"
    return f"{size_bytes}B"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")

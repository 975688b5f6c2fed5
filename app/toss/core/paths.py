"""XDG-compliant path management for toss.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and holding-area storage.

XDG defaults:
- Config: ~/.config/toss/
- Data: ~/.local/share/toss/  (holding-area root)

Holding-area layout under the root:
- files/   one entry per tossed object, named <id>-<basename>
- ledger   SQLite metadata store
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "toss"

# Environment override for the holding-area root (consumed by the CLI only)
TOSS_HOME_ENV = "TOSS_HOME"

FILES_DIRNAME = "files"
LEDGER_FILENAME = "ledger"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/toss/ (or XDG_CONFIG_HOME/toss/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    """Get the data directory path.

    The data directory is the default holding-area root.

    Returns:
        Path to ~/.local/share/toss/ (or XDG_DATA_HOME/toss/).
    """
    return _get_xdg_dir("XDG_DATA_HOME", ".local/share")


def get_config_path() -> Path:
    """Get the configuration file path.

    Returns:
        Path to ~/.config/toss/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_files_dir(root: Path) -> Path:
    """Get the directory holding tossed objects for a holding-area root."""
    return root / FILES_DIRNAME


def get_ledger_path(root: Path) -> Path:
    """Get the ledger file path for a holding-area root."""
    return root / LEDGER_FILENAME


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")

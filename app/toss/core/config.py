"""User configuration for toss.

This module provides the configuration model and I/O functions.
Configuration is stored in ~/.config/toss/config.toml; a missing file
means defaults.

Example config.toml:
    root = "/mnt/scratch/toss"
    confirm_empty = true
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from toss.core.paths import get_config_path, get_data_dir
from toss.holding.operations import BinPaths


class TossConfig(BaseModel):
    """Configuration for toss.

    Attributes:
        root: Holding-area root. If None, the XDG data directory is used.
        confirm_empty: Ask before permanently emptying the bin.
    """

    model_config = ConfigDict(extra="forbid")

    root: Annotated[
        Path | None,
        Field(description="Holding-area root (None = ~/.local/share/toss)"),
    ] = None
    confirm_empty: Annotated[
        bool,
        Field(description="Ask before emptying the bin"),
    ] = True

    @field_validator("root")
    @classmethod
    def validate_root(cls, v: Path | None) -> Path | None:
        """Expand '~' and require an absolute path."""
        if v is None:
            return None
        expanded = v.expanduser()
        if not expanded.is_absolute():
            msg = f"root must be an absolute path, got '{v}'"
            raise ValueError(msg)
        return expanded

    @property
    def effective_root(self) -> Path:
        """Holding-area root to use.

        Returns:
            The configured root if set, otherwise the XDG data directory.
        """
        if self.root is not None:
            return self.root
        return get_data_dir()

    def bin_paths(self) -> BinPaths:
        """Resolve the holding-area layout for this configuration."""
        return BinPaths.from_root(self.effective_root)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> TossConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated TossConfig. Defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return TossConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return TossConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: TossConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The TossConfig to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    data: dict[str, object] = {"confirm_empty": config.confirm_empty}
    if config.root is not None:
        data["root"] = str(config.root)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(tmp_path, config_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path

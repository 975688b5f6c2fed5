"""Color theme for the toss CLI.

The bundled data/theme.toml provides defaults; a [colors] table in
~/.config/toss/theme.toml overrides any subset of them.
"""

import logging
import re
import tomllib
from functools import cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from toss.core.paths import get_config_dir

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# Styles rendered in bold on top of their color
_BOLD_STYLES = frozenset({"header", "error", "directory"})


class ThemeColors(BaseModel):
    """Colors for each style name used in CLI output (#RGB or #RRGGBB)."""

    model_config = ConfigDict(extra="forbid")

    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"
    directory: str = "#0e8ac8"
    size: str = "#c1ff62"

    @field_validator("*")
    @classmethod
    def validate_hex_color(cls, v: str) -> str:
        """Require a hex color code."""
        color = v.strip()
        if not _HEX_COLOR.match(color):
            msg = f"invalid hex color {v!r}, expected #RGB or #RRGGBB"
            raise ValueError(msg)
        return color


def get_user_theme_path() -> Path:
    """Path of the user's theme overrides (~/.config/toss/theme.toml)."""
    return get_config_dir() / "theme.toml"


def _read_colors(source: Path) -> dict[str, str]:
    """Read the [colors] table of a theme file.

    Missing or unreadable files yield an empty mapping; problems other
    than a missing file are logged.
    """
    try:
        with source.open("rb") as f:
            colors = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", source, e)
        return {}

    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", source)
        return {}
    return {key: value for key, value in colors.items() if isinstance(value, str)}


def load_theme() -> ThemeColors:
    """Merge bundled colors with the user's overrides.

    Falls back to the built-in defaults if the merged colors are invalid.
    """
    bundled = resources.files("toss.data").joinpath("theme.toml")
    colors = {**_read_colors(Path(str(bundled))), **_read_colors(get_user_theme_path())}
    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors) -> Theme:
    """Build the Rich theme mapping each style name to its color."""
    return Theme(
        {
            name: f"bold {color}" if name in _BOLD_STYLES else color
            for name, color in colors.model_dump().items()
        }
    )


@cache
def get_theme() -> Theme:
    """Rich theme for the shared consoles, loaded once per process."""
    return get_rich_theme(load_theme())

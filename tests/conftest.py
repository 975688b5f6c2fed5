"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import errno
import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from toss.holding.operations import BinPaths, HoldingArea


@pytest.fixture
def bin_paths(tmp_path: Path) -> BinPaths:
    """Holding-area layout rooted in a temporary directory."""
    return BinPaths.from_root(tmp_path / "bin")


@pytest.fixture
def holding(bin_paths: BinPaths) -> Iterator[HoldingArea]:
    """Open holding area backed by a temporary directory."""
    with HoldingArea(bin_paths) as area:
        yield area


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Directory for objects to be tossed, separate from the holding area."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def zero_umask() -> Iterator[None]:
    """Set umask to 0 so created files get exactly the requested mode."""
    old = os.umask(0)
    try:
        yield
    finally:
        os.umask(old)


@pytest.fixture
def force_cross_volume() -> Iterator[None]:
    """Make every rename fail as if source and destination were on different volumes."""
    error = OSError(errno.EXDEV, "Invalid cross-device link")
    with patch("toss.holding.mover.os.rename", side_effect=error):
        yield


@pytest.fixture
def cli_env(tmp_path: Path) -> dict[str, str | None]:
    """Environment isolating CLI runs from the real user directories."""
    return {
        "XDG_CONFIG_HOME": str(tmp_path / "config"),
        "XDG_DATA_HOME": str(tmp_path / "data"),
        "TOSS_HOME": str(tmp_path / "bin"),
    }

"""Entry model for tossed objects.

This module defines the record kept for every object moved into the
holding area, and the closed set of filesystem object kinds the mover
knows how to relocate.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import PurePosixPath
from typing import Any


class ObjectKind(str, Enum):
    """Kind of filesystem object, classified without following links.

    Attributes:
        FILE: Regular file (or any non-directory, non-symlink object).
        DIRECTORY: Directory tree.
        SYMLINK: Symbolic link, dangling or not.
    """

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"

    @classmethod
    def of(cls, path: str | os.PathLike[str]) -> ObjectKind:
        """Classify a path using lstat.

        Args:
            path: Path to classify.

        Returns:
            The object kind.

        Raises:
            FileNotFoundError: If nothing exists at path.
        """
        mode = os.lstat(path).st_mode
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        return cls.FILE


def make_bin_name(entry_id: str, original_path: str) -> str:
    """Build the holding-area name for an object.

    Args:
        entry_id: Identifier of the entry.
        original_path: Absolute path the object occupied.

    Returns:
        '<id>-<basename>'.
    """
    return f"{entry_id}-{os.path.basename(original_path.rstrip(os.sep))}"


def sanitize_bin_name(value: str) -> str:
    """Reduce a stored bin name to its final path component.

    Ledger rows are treated as untrusted; a corrupted or hand-edited
    record must not be able to point outside the holding area.

    Args:
        value: Bin name as read from storage.

    Returns:
        The last path component.

    Raises:
        ValueError: If nothing usable remains.
    """
    name = PurePosixPath(value.replace("\\", "/")).name
    if name in ("", ".", ".."):
        msg = f"Invalid bin name: {value!r}"
        raise ValueError(msg)
    return name


def _format_timestamp(value: datetime) -> str:
    # Fixed-width UTC form so lexical order in SQL matches time order
    return value.astimezone(UTC).isoformat(timespec="microseconds")


@dataclass(frozen=True, slots=True)
class Entry:
    """Record of one object residing in the holding area.

    Entries are immutable; they are created when an object is tossed
    and deleted when it is restored or the bin is emptied.

    Attributes:
        id: Unique identifier (version-4 UUID string).
        original_path: Absolute path the object occupied before tossing.
        bin_name: Name inside the holding area, '<id>-<basename>'.
        tossed_at: When the object was moved (timezone-aware).
        is_dir: Whether the object was a directory.
        size_bytes: Size at toss time (recursive for directories).
    """

    id: str
    original_path: str
    bin_name: str
    tossed_at: datetime
    is_dir: bool = False
    size_bytes: int = 0

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "Entry ID cannot be empty"
            raise ValueError(msg)
        if not self.original_path:
            msg = "Original path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)
        if self.tossed_at.tzinfo is None:
            msg = "tossed_at must be timezone-aware"
            raise ValueError(msg)

    @property
    def basename(self) -> str:
        """Final component of the original path."""
        return os.path.basename(self.original_path.rstrip(os.sep))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output.

        Returns:
            Dictionary representation of the entry.
        """
        return {
            "id": self.id,
            "original_path": self.original_path,
            "bin_name": self.bin_name,
            "tossed_at": _format_timestamp(self.tossed_at),
            "is_dir": self.is_dir,
            "size_bytes": self.size_bytes,
        }

    def to_row(self) -> tuple[str, str, str, str, int, int]:
        """Serialize to a ledger row in column order.

        Returns:
            (id, original_path, bin_name, tossed_at, is_dir, size_bytes).
        """
        return (
            self.id,
            self.original_path,
            self.bin_name,
            _format_timestamp(self.tossed_at),
            int(self.is_dir),
            self.size_bytes,
        )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> Entry:
        """Deserialize from a ledger row.

        The bin name is re-sanitized to its final path component. The
        timestamp is converted to UTC; one without an offset is taken as UTC.

        Args:
            row: (id, original_path, bin_name, tossed_at, is_dir, size_bytes).

        Returns:
            Entry instance.

        Raises:
            ValueError: If the row contains invalid data.
        """
        entry_id, original_path, bin_name, tossed_at, is_dir, size_bytes = row
        timestamp = datetime.fromisoformat(tossed_at)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return cls(
            id=entry_id,
            original_path=original_path,
            bin_name=sanitize_bin_name(bin_name),
            tossed_at=timestamp.astimezone(UTC),
            is_dir=bool(is_dir),
            size_bytes=int(size_bytes),
        )

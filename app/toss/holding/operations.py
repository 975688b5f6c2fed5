"""Holding-area operations: toss, restore, empty.

Composes the ObjectMover and the Ledger into the user-visible
transitions. Moving an object and recording it are two separate steps
with no shared transaction, so two failure windows exist:

- Toss: the move succeeds but the ledger append fails. The object sits
  in the holding area untracked (an orphan). OrphanedObjectError is
  raised and the object is not moved back.
- Restore: the object is moved back but the ledger remove fails. A
  stale record still claims the object is in the bin. StaleRecordError
  is raised and nothing is corrected automatically.

reconcile() reports both conditions without modifying anything.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType

from toss.core.errors import (
    LedgerError,
    OrphanedObjectError,
    ProtectedPathError,
    StaleRecordError,
    TossError,
)
from toss.core.ids import new_id
from toss.core.ledger import Ledger
from toss.core.paths import get_files_dir, get_ledger_path
from toss.holding.mover import ObjectMover, directory_size
from toss.models.entry import Entry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BinPaths:
    """Locations making up one holding area.

    Attributes:
        root: Holding-area root directory.
        files_dir: Directory containing tossed objects.
        ledger_path: SQLite ledger file.
    """

    root: Path
    files_dir: Path
    ledger_path: Path

    @classmethod
    def from_root(cls, root: Path) -> BinPaths:
        """Derive the standard layout from a root directory.

        Args:
            root: Holding-area root (made absolute).

        Returns:
            BinPaths with files/ and ledger under root.
        """
        root = Path(os.path.abspath(root))
        return cls(root=root, files_dir=get_files_dir(root), ledger_path=get_ledger_path(root))


@dataclass(frozen=True, slots=True)
class TossResult:
    """Result of tossing a single path in a batch.

    Attributes:
        path: Path as given by the caller.
        success: Whether the object was moved and recorded.
        entry: The recorded entry on success, None otherwise.
        error: The failure on error, None otherwise.
    """

    path: str
    success: bool
    entry: Entry | None = None
    error: TossError | None = None


@dataclass(frozen=True, slots=True)
class ReconcileReport:
    """Differences between holding-area contents and the ledger.

    Attributes:
        orphans: Names in the files directory with no ledger entry.
        stale: Entries whose object is missing from the files directory.
    """

    orphans: list[str] = field(default_factory=list)
    stale: list[Entry] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        """True when every object is tracked and every entry has an object."""
        return not self.orphans and not self.stale


class HoldingArea:
    """Entry point for toss, restore and empty on one holding area.

    Owns the ledger connection; use as a context manager or call close().

    Attributes:
        paths: Locations of the files directory and ledger.
    """

    def __init__(self, paths: BinPaths, mover: ObjectMover | None = None) -> None:
        """Open the holding area's ledger.

        Args:
            paths: Holding-area locations.
            mover: Object mover to use (default: ObjectMover()).

        Raises:
            LedgerInitError: If the ledger cannot be opened.
        """
        self.paths = paths
        self._mover = mover or ObjectMover()
        self._ledger = Ledger.open(paths.ledger_path)

    def __enter__(self) -> HoldingArea:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the ledger."""
        self._ledger.close()

    def bin_path(self, entry: Entry) -> Path:
        """Location of an entry's object inside the holding area."""
        return self.paths.files_dir / entry.bin_name

    def toss(self, path: str | os.PathLike[str]) -> Entry:
        """Move a path into the holding area and record it.

        Args:
            path: File, directory or symlink to toss.

        Returns:
            The recorded entry.

        Raises:
            ProtectedPathError: If path is, contains, or lies inside the holding area.
            OrphanedObjectError: If the object was moved but not recorded.
            TossError: If the move failed (the source is untouched).
        """
        absolute = os.path.abspath(path)
        self._check_not_protected(absolute)

        entry = self._mover.move(absolute, self.paths.files_dir, entry_id=new_id())
        try:
            self._ledger.append(entry)
        except LedgerError as e:
            bin_path = str(self.bin_path(entry))
            logger.error("Orphaned object %s: moved but not recorded: %s", bin_path, e)
            msg = f"Moved {absolute} to {bin_path} but could not record it: {e}"
            raise OrphanedObjectError(msg, path=absolute, bin_path=bin_path, cause=e) from e

        logger.info("Tossed %s as %s", absolute, entry.bin_name)
        return entry

    def toss_many(self, paths: Iterable[str | os.PathLike[str]]) -> list[TossResult]:
        """Toss several paths sequentially and independently.

        A failure on one path never stops the others.

        Args:
            paths: Paths to toss, in order.

        Returns:
            One TossResult per input path, in the same order.
        """
        results: list[TossResult] = []
        for path in paths:
            try:
                entry = self.toss(path)
            except TossError as e:
                logger.info("Failed to toss %s: %s", path, e)
                results.append(TossResult(path=os.fspath(path), success=False, error=e))
                continue
            results.append(TossResult(path=os.fspath(path), success=True, entry=entry))
        return results

    def restore_entry(self, entry: Entry) -> None:
        """Move an entry's object back to its original path and forget it.

        If the move fails the ledger is left unchanged.

        Args:
            entry: Entry to restore.

        Raises:
            NotFoundError: If the object is missing from the holding area.
            DestinationExistsError: If the original path is occupied.
            StaleRecordError: If the object was restored but the record remains.
            TossError: For any other move failure.
        """
        self._mover.restore_move(self.bin_path(entry), entry.original_path)
        try:
            self._ledger.remove(entry.id)
        except LedgerError as e:
            logger.error("Stale record %s: restored but not removed: %s", entry.id, e)
            msg = f"Restored {entry.original_path} but could not update the ledger: {e}"
            raise StaleRecordError(msg, path=entry.original_path, cause=e) from e
        logger.info("Restored %s", entry.original_path)

    def empty_bin(self) -> int:
        """Permanently delete every object and clear the ledger.

        Returns:
            Number of ledger entries removed.

        Raises:
            TossError: If the holding area cannot be wiped.
            LedgerError: If the ledger cannot be cleared.
        """
        self._mover.purge(self.paths.files_dir)
        removed = self._ledger.clear()
        logger.info("Emptied holding area (%d entries)", removed)
        return removed

    def list_entries(self) -> list[Entry]:
        """Return all entries, oldest first."""
        return self._ledger.all()

    def get_entry(self, entry_id: str) -> Entry | None:
        """Return the entry with the given id, or None."""
        return self._ledger.get(entry_id)

    def count_entries(self) -> int:
        """Return the number of items in the bin."""
        return self._ledger.count()

    def search_entries(self, text: str) -> list[Entry]:
        """Return entries whose original path or bin name contains text."""
        return self._ledger.find_by_query(text)

    def disk_usage(self) -> int:
        """Total bytes of regular files stored in the holding area."""
        if not self.paths.files_dir.exists():
            return 0
        return directory_size(self.paths.files_dir)

    def reconcile(self) -> ReconcileReport:
        """Cross-check holding-area contents against the ledger.

        Read-only: nothing is moved, deleted or recorded.

        Returns:
            ReconcileReport listing orphans and stale entries.
        """
        entries = self._ledger.all()
        try:
            names = set(os.listdir(self.paths.files_dir))
        except FileNotFoundError:
            names = set()

        known = {entry.bin_name for entry in entries}
        orphans = sorted(names - known)
        stale = [entry for entry in entries if entry.bin_name not in names]
        return ReconcileReport(orphans=orphans, stale=stale)

    def _check_not_protected(self, absolute: str) -> None:
        """Refuse to toss the holding area, anything inside it, or any ancestor of it.

        Paths are compared both as given and with symlinks in the parent
        directories resolved. The target itself is not resolved, so a
        symlink that merely points at the holding area can still be tossed.
        """
        root = self.paths.root
        real_root = Path(os.path.realpath(root))
        target = Path(absolute)
        real_target = Path(os.path.realpath(target.parent)) / target.name
        if any(
            t.is_relative_to(r) or r.is_relative_to(t)
            for t, r in ((target, root), (real_target, real_root))
        ):
            msg = f"Refusing to toss the holding area itself: {absolute}"
            raise ProtectedPathError(msg, path=absolute)

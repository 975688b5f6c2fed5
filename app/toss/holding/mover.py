"""Object mover for the holding area.

Relocates files, directory trees and symlinks between two paths. An
atomic rename is always tried first; when source and destination live
on different volumes (EXDEV) the object is copied and only then is the
original removed.

Copy-then-delete is not atomic. If the copy fails part way the source
is left intact and the destination may hold a partial copy, which the
caller must treat as invalid. No rollback of partial copies is attempted.
"""

import errno
import logging
import os
import shutil
import stat
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType

from toss.core.errors import (
    CrossVolumeFallbackError,
    DestinationExistsError,
    NotFoundError,
    PermissionDeniedError,
    TossError,
)
from toss.core.ids import new_id
from toss.models.entry import Entry, ObjectKind, make_bin_name

logger = logging.getLogger(__name__)

# Mode for directories the mover creates on its own behalf
DEFAULT_DIR_MODE = 0o755


def _raise_walk_error(error: OSError) -> None:
    raise error


def directory_size(path: str | os.PathLike[str]) -> int:
    """Sum the sizes of all regular files below path.

    Symlinks and directory entries contribute nothing. Entries that
    cannot be read are skipped.

    Args:
        path: Directory to measure.

    Returns:
        Total size in bytes.
    """
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for name in filenames:
            full = os.path.join(dirpath, name)
            try:
                st = os.lstat(full)
            except OSError as e:
                logger.debug("Skipping unreadable entry %s: %s", full, e)
                continue
            if stat.S_ISREG(st.st_mode):
                total += st.st_size
    return total


def _copy_symlink(src: str, dest: str) -> None:
    """Recreate a symlink with the identical literal target."""
    os.symlink(os.readlink(src), dest)


def _copy_file(src: str, dest: str) -> None:
    """Copy file bytes and permission bits (and timestamps)."""
    shutil.copy2(src, dest, follow_symlinks=False)


def _copy_tree(src: str, dest: str) -> None:
    """Recursively copy a directory tree without following symlinks.

    Directories are created owner-writable first; their original mode
    and timestamps are applied deepest-first once their contents exist,
    so read-only directories can still be populated.
    """
    created: list[tuple[str, str]] = []

    for dirpath, dirnames, filenames in os.walk(src, onerror=_raise_walk_error):
        rel = os.path.relpath(dirpath, src)
        target_dir = dest if rel == os.curdir else os.path.join(dest, rel)
        os.mkdir(target_dir, 0o700)
        created.append((dirpath, target_dir))

        for name in dirnames + filenames:
            source_path = os.path.join(dirpath, name)
            target_path = os.path.join(target_dir, name)
            kind = ObjectKind.of(source_path)
            if kind is ObjectKind.SYMLINK:
                _copy_symlink(source_path, target_path)
            elif kind is ObjectKind.FILE:
                _copy_file(source_path, target_path)
            # Real subdirectories are created when os.walk reaches them

    for source_dir, target_dir in reversed(created):
        shutil.copystat(source_dir, target_dir, follow_symlinks=False)


def _make_writable_and_retry(
    func: Callable[[str], object],
    path: str,
    exc_info: tuple[type[BaseException], BaseException, TracebackType | None],
) -> None:
    """rmtree error handler for entries inside read-only directories.

    Grants the owner access to the parent directory, and to path itself
    when it is a directory, then retries. A directory that could not be
    listed is removed as a subtree of its own. Anything other than a
    permission failure is re-raised.
    """
    error = exc_info[1]
    if not isinstance(error, PermissionError):
        raise error
    for target in (os.path.dirname(path), path):
        if os.path.isdir(target) and not os.path.islink(target):
            os.chmod(target, stat.S_IMODE(os.lstat(target).st_mode) | stat.S_IRWXU)
    if func in (os.unlink, os.rmdir):
        func(path)
    elif os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path, onerror=_make_writable_and_retry)
    else:
        raise error


def remove_path(path: str | os.PathLike[str]) -> None:
    """Permanently delete a file, symlink or directory tree.

    Read-only directories inside a tree are made writable as needed.
    Symlinks are removed, never followed.

    Raises:
        OSError: If something cannot be deleted.
    """
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path, onerror=_make_writable_and_retry)
    else:
        os.unlink(path)


def _translate_os_error(error: OSError, path: str, action: str) -> TossError:
    """Map an OSError onto the toss error taxonomy."""
    message = f"Cannot {action} {path}: {error.strerror or error}"
    if isinstance(error, FileNotFoundError):
        return NotFoundError(message, path=path, cause=error)
    if isinstance(error, PermissionError):
        return PermissionDeniedError(message, path=path, cause=error)
    return TossError(message, path=path, cause=error)


class ObjectMover:
    """Moves filesystem objects into and out of the holding area."""

    def move(
        self,
        source: str | os.PathLike[str],
        destination_parent: Path,
        entry_id: str | None = None,
    ) -> Entry:
        """Move an object into destination_parent under '<id>-<basename>'.

        Args:
            source: Path of the object to move. Relative paths are made
                absolute; symlinks are not resolved.
            destination_parent: Holding-area directory (created if missing).
            entry_id: Identifier to use. A new one is generated if None.

        Returns:
            Entry describing the moved object.

        Raises:
            NotFoundError: If nothing exists at source.
            PermissionDeniedError: If the filesystem refuses access.
            CrossVolumeFallbackError: If the cross-volume copy failed.
            TossError: For any other filesystem failure.
        """
        original_path = os.path.abspath(source)
        try:
            st = os.lstat(original_path)
        except OSError as e:
            raise _translate_os_error(e, original_path, "toss") from e

        kind = ObjectKind.of(original_path)
        try:
            destination_parent.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise _translate_os_error(e, str(destination_parent), "create") from e

        entry_id = entry_id or new_id()
        bin_name = make_bin_name(entry_id, original_path)
        destination = str(destination_parent / bin_name)

        if kind is ObjectKind.DIRECTORY:
            size = directory_size(original_path)
        else:
            size = st.st_size

        self._relocate(original_path, destination, kind)
        logger.info("Moved %s -> %s", original_path, destination)

        return Entry(
            id=entry_id,
            original_path=original_path,
            bin_name=bin_name,
            tossed_at=datetime.now(UTC),
            is_dir=kind is ObjectKind.DIRECTORY,
            size_bytes=size,
        )

    def restore_move(
        self,
        source: str | os.PathLike[str],
        destination: str | os.PathLike[str],
    ) -> None:
        """Move a holding-area object back to its original location.

        Missing parent directories of destination are created.

        Args:
            source: Path of the object inside the holding area.
            destination: Original path to restore to; must not exist.

        Raises:
            NotFoundError: If the holding-area object is missing.
            DestinationExistsError: If something already occupies destination.
            PermissionDeniedError: If the filesystem refuses access.
            CrossVolumeFallbackError: If the cross-volume copy failed.
            TossError: For any other filesystem failure.
        """
        src = os.fspath(source)
        dest = os.fspath(destination)

        if not os.path.lexists(src):
            msg = f"Object missing from holding area: {src}"
            raise NotFoundError(msg, path=src)
        if os.path.lexists(dest):
            msg = f"Restore destination already exists: {dest}"
            raise DestinationExistsError(msg, path=dest)

        try:
            os.makedirs(os.path.dirname(dest), mode=DEFAULT_DIR_MODE, exist_ok=True)
        except OSError as e:
            raise _translate_os_error(e, os.path.dirname(dest), "create") from e

        self._relocate(src, dest, ObjectKind.of(src))
        logger.info("Restored %s -> %s", src, dest)

    def purge(self, directory: Path) -> None:
        """Permanently delete everything in directory, leaving it empty.

        Args:
            directory: Holding-area directory to wipe.

        Raises:
            PermissionDeniedError: If the filesystem refuses access.
            TossError: For any other filesystem failure.
        """
        try:
            if directory.exists():
                remove_path(directory)
            directory.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise _translate_os_error(e, str(directory), "empty") from e

    def _relocate(self, src: str, dest: str, kind: ObjectKind) -> None:
        """Rename src to dest, copying across volumes when necessary."""
        try:
            os.rename(src, dest)
            return
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise _translate_os_error(e, src, "move") from e

        logger.info("Cross-volume move of %s, copying instead of renaming", src)
        self._copy_then_delete(src, dest, kind)

    def _copy_then_delete(self, src: str, dest: str, kind: ObjectKind) -> None:
        """Copy src to dest, then remove src.

        Raises:
            CrossVolumeFallbackError: If copying fails. src is untouched;
                dest may contain a partial copy.
            TossError: If the copy succeeded but src could not be removed.
        """
        try:
            if kind is ObjectKind.DIRECTORY:
                _copy_tree(src, dest)
            elif kind is ObjectKind.SYMLINK:
                _copy_symlink(src, dest)
            elif kind is ObjectKind.FILE:
                _copy_file(src, dest)
            else:
                msg = f"Unsupported object kind: {kind}"
                raise ValueError(msg)
        except OSError as e:
            logger.error("Copy of %s to %s failed, destination may be partial", src, dest)
            msg = f"Cross-volume copy of {src} failed: {e.strerror or e}"
            raise CrossVolumeFallbackError(msg, path=src, destination=dest, cause=e) from e

        try:
            remove_path(src)
        except OSError as e:
            msg = f"Copied {src} to {dest} but could not remove the original: {e.strerror or e}"
            raise TossError(msg, path=src, cause=e) from e

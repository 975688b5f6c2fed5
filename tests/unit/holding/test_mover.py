"""Unit tests for the object mover.

Tests rename and cross-volume relocation of files, directories and
symlinks, size computation, restore, purge, and error translation.
"""

# pyright: reportPrivateUsage=false

import errno
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest
from toss.core.errors import (
    CrossVolumeFallbackError,
    DestinationExistsError,
    NotFoundError,
    PermissionDeniedError,
    TossError,
)
from toss.holding import mover as mover_module
from toss.holding.mover import ObjectMover, directory_size, remove_path

ENTRY_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"


@pytest.fixture
def mover() -> ObjectMover:
    """Fresh object mover."""
    return ObjectMover()


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """Holding-area files directory (not yet created)."""
    return tmp_path / "bin" / "files"


def _mode(path: Path) -> int:
    return stat.S_IMODE(os.lstat(path).st_mode)


def _build_tree(root: Path) -> None:
    """Create a small tree with a nested file and a relative symlink."""
    (root / "sub").mkdir(parents=True)
    (root / "top.txt").write_text("top")
    (root / "sub" / "nested.txt").write_text("nested!")
    os.symlink("nested.txt", root / "sub" / "link")


class TestDirectorySize:
    """Tests for directory_size."""

    def test_sums_regular_files_recursively(self, tmp_path: Path) -> None:
        """Sizes of regular files at every depth are added up."""
        _build_tree(tmp_path / "tree")

        assert directory_size(tmp_path / "tree") == len("top") + len("nested!")

    def test_symlinks_contribute_nothing(self, tmp_path: Path) -> None:
        """Symlinks are not followed or counted."""
        root = tmp_path / "tree"
        root.mkdir()
        big = tmp_path / "big.bin"
        big.write_bytes(b"x" * 1000)
        os.symlink(big, root / "link-to-big")
        os.symlink(tmp_path, root / "link-to-dir")

        assert directory_size(root) == 0

    def test_empty_directory(self, tmp_path: Path) -> None:
        """An empty directory has size zero."""
        assert directory_size(tmp_path) == 0

    def test_unreadable_entry_skipped(self, tmp_path: Path) -> None:
        """An entry that cannot be stat'ed is skipped, not fatal."""
        root = tmp_path / "tree"
        root.mkdir()
        (root / "ok.txt").write_text("12345")
        (root / "bad.txt").write_text("1234567890")
        real_lstat = os.lstat

        def flaky_lstat(path: str, *args: object, **kwargs: object) -> os.stat_result:
            if os.fspath(path).endswith("bad.txt"):
                raise PermissionError(errno.EACCES, "Permission denied", path)
            return real_lstat(path, *args, **kwargs)  # type: ignore[arg-type]

        with patch("toss.holding.mover.os.lstat", side_effect=flaky_lstat):
            assert directory_size(root) == 5


class TestMove:
    """Tests for ObjectMover.move with atomic rename."""

    def test_moves_file_under_bin_name(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """A file lands at '<id>-<basename>' and leaves its origin."""
        source = workspace / "report.txt"
        source.write_bytes(b"0123456789")

        entry = mover.move(source, files_dir, entry_id=ENTRY_ID)

        assert entry.id == ENTRY_ID
        assert entry.bin_name == f"{ENTRY_ID}-report.txt"
        assert entry.original_path == str(source)
        assert entry.size_bytes == 10
        assert entry.is_dir is False
        assert not source.exists()
        assert (files_dir / entry.bin_name).read_bytes() == b"0123456789"

    def test_generates_id_when_missing(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """Without an explicit id a fresh one is generated."""
        source = workspace / "a.txt"
        source.write_text("a")

        entry = mover.move(source, files_dir)

        assert entry.bin_name == f"{entry.id}-a.txt"

    def test_relative_source_made_absolute(
        self,
        mover: ObjectMover,
        workspace: Path,
        files_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Relative paths are recorded as absolute paths."""
        (workspace / "rel.txt").write_text("r")
        monkeypatch.chdir(workspace)

        entry = mover.move("rel.txt", files_dir, entry_id=ENTRY_ID)

        assert entry.original_path == str(workspace / "rel.txt")

    def test_preserves_permission_bits(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """Rename keeps the file mode."""
        source = workspace / "script.sh"
        source.write_text("#!/bin/sh\n")
        source.chmod(0o741)

        entry = mover.move(source, files_dir, entry_id=ENTRY_ID)

        assert _mode(files_dir / entry.bin_name) == 0o741

    def test_directory_size_and_flag(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """Directories are flagged and sized recursively."""
        _build_tree(workspace / "project")

        entry = mover.move(workspace / "project", files_dir, entry_id=ENTRY_ID)

        assert entry.is_dir is True
        assert entry.size_bytes == len("top") + len("nested!")
        assert (files_dir / entry.bin_name / "sub" / "nested.txt").read_text() == "nested!"

    def test_dangling_symlink_is_moved(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """A broken symlink is found and moved without being followed."""
        link = workspace / "broken"
        os.symlink("/nonexistent/target", link)

        entry = mover.move(link, files_dir, entry_id=ENTRY_ID)

        moved = files_dir / entry.bin_name
        assert moved.is_symlink()
        assert os.readlink(moved) == "/nonexistent/target"
        assert entry.is_dir is False
        assert not os.path.lexists(link)

    def test_symlink_to_directory_not_followed(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """A symlink to a directory is moved as a link, target untouched."""
        target = workspace / "real"
        target.mkdir()
        (target / "f").write_text("f")
        link = workspace / "alias"
        os.symlink(target, link)

        entry = mover.move(link, files_dir, entry_id=ENTRY_ID)

        assert entry.is_dir is False
        assert (files_dir / entry.bin_name).is_symlink()
        assert (target / "f").exists()

    def test_missing_source(self, mover: ObjectMover, workspace: Path, files_dir: Path) -> None:
        """A nonexistent source raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            mover.move(workspace / "ghost", files_dir)

        assert exc_info.value.path == str(workspace / "ghost")

    def test_rename_permission_error_leaves_source(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """A non-EXDEV rename failure is surfaced and the source is untouched."""
        source = workspace / "keep.txt"
        source.write_text("keep")
        error = PermissionError(errno.EACCES, "Permission denied")

        with (
            patch("toss.holding.mover.os.rename", side_effect=error),
            pytest.raises(PermissionDeniedError),
        ):
            mover.move(source, files_dir, entry_id=ENTRY_ID)

        assert source.read_text() == "keep"

    def test_rename_other_error_not_treated_as_cross_volume(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """Disk-full on rename does not trigger the copy fallback."""
        source = workspace / "keep.txt"
        source.write_text("keep")
        error = OSError(errno.ENOSPC, "No space left on device")

        with (
            patch("toss.holding.mover.os.rename", side_effect=error),
            patch.object(mover_module, "_copy_file") as copy_file,
            pytest.raises(TossError) as exc_info,
        ):
            mover.move(source, files_dir, entry_id=ENTRY_ID)

        assert not isinstance(exc_info.value, CrossVolumeFallbackError)
        copy_file.assert_not_called()
        assert source.exists()


@pytest.mark.usefixtures("force_cross_volume")
class TestCrossVolumeMove:
    """Tests for the copy-then-delete fallback."""

    def test_file_content_and_mode(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """Bytes and permission bits survive the copy; the source is removed."""
        source = workspace / "data.bin"
        source.write_bytes(bytes(range(256)))
        source.chmod(0o640)

        entry = mover.move(source, files_dir, entry_id=ENTRY_ID)

        copied = files_dir / entry.bin_name
        assert copied.read_bytes() == bytes(range(256))
        assert _mode(copied) == 0o640
        assert not source.exists()

    def test_directory_tree(self, mover: ObjectMover, workspace: Path, files_dir: Path) -> None:
        """Directories, files and relative symlinks are recreated."""
        _build_tree(workspace / "project")
        (workspace / "project" / "sub").chmod(0o750)

        entry = mover.move(workspace / "project", files_dir, entry_id=ENTRY_ID)

        copied = files_dir / entry.bin_name
        assert (copied / "top.txt").read_text() == "top"
        assert (copied / "sub" / "nested.txt").read_text() == "nested!"
        assert os.readlink(copied / "sub" / "link") == "nested.txt"
        assert _mode(copied / "sub") == 0o750
        assert not (workspace / "project").exists()

    def test_dangling_absolute_symlink_in_directory(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """A dangling absolute link keeps its exact unresolved target."""
        project = workspace / "project"
        project.mkdir()
        os.symlink("/definitely/not/here", project / "dangling")

        entry = mover.move(project, files_dir, entry_id=ENTRY_ID)

        copied_link = files_dir / entry.bin_name / "dangling"
        assert copied_link.is_symlink()
        assert os.readlink(copied_link) == "/definitely/not/here"

    def test_top_level_symlink(self, mover: ObjectMover, workspace: Path, files_dir: Path) -> None:
        """A tossed symlink is re-emitted, not dereferenced."""
        target = workspace / "target.txt"
        target.write_text("target")
        link = workspace / "link"
        os.symlink("target.txt", link)

        entry = mover.move(link, files_dir, entry_id=ENTRY_ID)

        copied = files_dir / entry.bin_name
        assert copied.is_symlink()
        assert os.readlink(copied) == "target.txt"
        assert target.read_text() == "target"
        assert not os.path.lexists(link)

    def test_symlinked_directory_inside_tree(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """A link to a directory inside the tree is copied as a link."""
        outside = workspace / "outside"
        outside.mkdir()
        (outside / "secret").write_text("s")
        project = workspace / "project"
        project.mkdir()
        os.symlink(outside, project / "out")

        entry = mover.move(project, files_dir, entry_id=ENTRY_ID)

        copied_link = files_dir / entry.bin_name / "out"
        assert copied_link.is_symlink()
        assert os.readlink(copied_link) == str(outside)
        assert (outside / "secret").exists()

    def test_partial_copy_leaves_source_intact(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """A copy failure part way keeps the source and reports the partial destination."""
        project = workspace / "project"
        project.mkdir()
        (project / "one.txt").write_text("1")
        (project / "two.txt").write_text("2")
        real_copy = mover_module._copy_file
        calls: list[str] = []

        def failing_second_copy(src: str, dest: str) -> None:
            calls.append(src)
            if len(calls) > 1:
                raise OSError(errno.ENOSPC, "No space left on device")
            real_copy(src, dest)

        with (
            patch.object(mover_module, "_copy_file", side_effect=failing_second_copy),
            pytest.raises(CrossVolumeFallbackError) as exc_info,
        ):
            mover.move(project, files_dir, entry_id=ENTRY_ID)

        error = exc_info.value
        assert error.path == str(project)
        assert error.destination == str(files_dir / f"{ENTRY_ID}-project")
        assert (project / "one.txt").read_text() == "1"
        assert (project / "two.txt").read_text() == "2"
        assert len(os.listdir(error.destination)) == 1

    def test_read_only_subdirectory_source_removed(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """The original tree is removed even when it holds read-only directories."""
        project = workspace / "mod"
        (project / "pkg").mkdir(parents=True)
        (project / "pkg" / "f.go").write_text("package pkg")
        (project / "pkg").chmod(0o555)

        entry = mover.move(project, files_dir, entry_id=ENTRY_ID)

        assert not project.exists()
        assert _mode(files_dir / entry.bin_name / "pkg") == 0o555
        mover.purge(files_dir)
        assert list(files_dir.iterdir()) == []

    def test_source_removal_failure(
        self, mover: ObjectMover, workspace: Path, files_dir: Path
    ) -> None:
        """If the original cannot be removed after copying, a TossError is raised."""
        source = workspace / "stuck.txt"
        source.write_text("stuck")
        error = PermissionError(errno.EACCES, "Permission denied")

        with (
            patch("toss.holding.mover.os.unlink", side_effect=error),
            pytest.raises(TossError, match="could not remove the original"),
        ):
            mover.move(source, files_dir, entry_id=ENTRY_ID)

        assert (files_dir / f"{ENTRY_ID}-stuck.txt").read_text() == "stuck"


class TestRestoreMove:
    """Tests for ObjectMover.restore_move."""

    def test_recreates_missing_parents(self, mover: ObjectMover, tmp_path: Path) -> None:
        """Intermediate directories are created before moving back."""
        stored = tmp_path / "stored.txt"
        stored.write_text("back")
        destination = tmp_path / "a" / "b" / "c" / "file.txt"

        mover.restore_move(stored, destination)

        assert destination.read_text() == "back"
        assert not stored.exists()

    def test_missing_source(self, mover: ObjectMover, tmp_path: Path) -> None:
        """A missing holding-area object raises NotFoundError."""
        with pytest.raises(NotFoundError):
            mover.restore_move(tmp_path / "gone", tmp_path / "dest")

    def test_occupied_destination(self, mover: ObjectMover, tmp_path: Path) -> None:
        """An existing destination is never overwritten."""
        stored = tmp_path / "stored.txt"
        stored.write_text("bin copy")
        destination = tmp_path / "dest.txt"
        destination.write_text("newer")

        with pytest.raises(DestinationExistsError):
            mover.restore_move(stored, destination)

        assert destination.read_text() == "newer"
        assert stored.read_text() == "bin copy"

    def test_dangling_symlink_counts_as_occupied(self, mover: ObjectMover, tmp_path: Path) -> None:
        """A broken link at the destination still blocks the restore."""
        stored = tmp_path / "stored.txt"
        stored.write_text("x")
        destination = tmp_path / "dest"
        os.symlink("/nowhere", destination)

        with pytest.raises(DestinationExistsError):
            mover.restore_move(stored, destination)

    @pytest.mark.usefixtures("force_cross_volume")
    def test_cross_volume_restore(self, mover: ObjectMover, tmp_path: Path) -> None:
        """Restore also falls back to copying across volumes."""
        stored = tmp_path / "stored"
        _build_tree(stored)
        destination = tmp_path / "home" / "project"

        mover.restore_move(stored, destination)

        assert os.readlink(destination / "sub" / "link") == "nested.txt"
        assert not stored.exists()


class TestPurge:
    """Tests for ObjectMover.purge."""

    def test_wipes_and_recreates(self, mover: ObjectMover, files_dir: Path) -> None:
        """Everything is deleted and an empty directory remains."""
        _build_tree(files_dir / "x-project")
        (files_dir / "y-file").write_text("y")

        mover.purge(files_dir)

        assert files_dir.is_dir()
        assert list(files_dir.iterdir()) == []

    def test_missing_directory_is_created(self, mover: ObjectMover, files_dir: Path) -> None:
        """Purging a directory that does not exist leaves it empty."""
        mover.purge(files_dir)

        assert files_dir.is_dir()

    def test_read_only_subdirectory(self, mover: ObjectMover, files_dir: Path) -> None:
        """Files inside read-only directories are deleted too."""
        locked = files_dir / "x-mod" / "pkg"
        locked.mkdir(parents=True)
        (locked / "f.go").write_text("package pkg")
        locked.chmod(0o555)

        mover.purge(files_dir)

        assert list(files_dir.iterdir()) == []

    def test_failure_translated(self, mover: ObjectMover, files_dir: Path) -> None:
        """Filesystem errors surface as TossError subclasses."""
        files_dir.mkdir(parents=True)
        error = PermissionError(errno.EACCES, "Permission denied")

        with (
            patch("toss.holding.mover.shutil.rmtree", side_effect=error),
            pytest.raises(PermissionDeniedError),
        ):
            mover.purge(files_dir)


class TestRemovePath:
    """Tests for remove_path and its rmtree error handler."""

    def test_file_and_symlink(self, tmp_path: Path) -> None:
        """Files and links are unlinked; link targets survive."""
        target = tmp_path / "target"
        target.write_text("t")
        link = tmp_path / "link"
        os.symlink(target, link)

        remove_path(link)
        remove_path(target)

        assert list(tmp_path.iterdir()) == []

    def test_tree_with_read_only_directories(self, tmp_path: Path) -> None:
        """Read-only directories at any depth do not block deletion."""
        root = tmp_path / "mod"
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "b" / "f").write_text("f")
        (root / "a" / "b").chmod(0o555)
        (root / "a").chmod(0o555)

        remove_path(root)

        assert not root.exists()

    def test_handler_grants_parent_write_and_retries(self, tmp_path: Path) -> None:
        """A permission failure on unlink makes the parent writable and retries."""
        locked = tmp_path / "locked"
        locked.mkdir()
        victim = locked / "f"
        victim.write_text("f")
        locked.chmod(0o555)
        error = PermissionError(errno.EACCES, "Permission denied")

        mover_module._make_writable_and_retry(
            os.unlink, str(victim), (PermissionError, error, None)
        )

        assert not victim.exists()
        assert _mode(locked) & stat.S_IWUSR

    def test_handler_removes_unlistable_directory(self, tmp_path: Path) -> None:
        """A directory that could not be listed is opened up and removed."""
        closed = tmp_path / "closed"
        closed.mkdir()
        (closed / "inner").write_text("i")
        closed.chmod(0o000)
        error = PermissionError(errno.EACCES, "Permission denied")

        mover_module._make_writable_and_retry(
            os.scandir, str(closed), (PermissionError, error, None)
        )

        assert not closed.exists()

    def test_handler_reraises_other_errors(self, tmp_path: Path) -> None:
        """Only permission failures are handled."""
        error = OSError(errno.EIO, "Input/output error")

        with pytest.raises(OSError, match="Input/output error"):
            mover_module._make_writable_and_retry(
                os.unlink, str(tmp_path / "x"), (OSError, error, None)
            )

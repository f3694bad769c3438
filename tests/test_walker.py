"""
Unit tests for the tree walker and the source cleaner.
"""

import os
import tempfile
from pathlib import Path

import pytest

from tree_mover.cleaner import clean_directories
from tree_mover.copier import FileCopier
from tree_mover.progress import CancellationToken, TransferProgress
from tree_mover.types import MoveState
from tree_mover.walker import TreeWalker


def _make_walker(total: int = 0, token=None):
    token = token or CancellationToken()
    errors = []

    def on_error(source, destination):
        errors.append((source, destination))

    copier = FileCopier(TransferProgress(total), token, on_error=on_error)
    walker = TreeWalker(copier, token, on_error=on_error)
    return walker, copier, errors


class TestTreeWalker:
    """Tests for TreeWalker.walk."""

    def test_mirrors_nested_tree(self):
        """Files are moved into the same relative layout."""
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "src"
            (src / "sub" / "deeper").mkdir(parents=True)
            (src / "empty").mkdir()
            (src / "a.txt").write_text("a")
            (src / "sub" / "b.txt").write_text("bb")
            (src / "sub" / "deeper" / "c.txt").write_text("ccc")
            dst = Path(tmp) / "dst"

            walker, copier, errors = _make_walker(6)
            walker.walk(src, dst, is_root=True)

            assert errors == []
            assert (dst / "a.txt").read_text() == "a"
            assert (dst / "sub" / "b.txt").read_text() == "bb"
            assert (dst / "sub" / "deeper" / "c.txt").read_text() == "ccc"
            assert (dst / "empty").is_dir()
            # Files are gone, directories are left for the cleaner
            assert not (src / "a.txt").exists()
            assert (src / "sub" / "deeper").is_dir()
            assert all(r.state == MoveState.COMPLETED for r in copier.results)

    def test_root_contents_land_in_destination(self):
        """The root directory's children go directly into the destination."""
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "src"
            src.mkdir()
            (src / "a.txt").write_text("a")
            dst = Path(tmp) / "dst"
            dst.mkdir()

            walker, _, _ = _make_walker(1)
            walker.walk(src, dst, is_root=True)

            assert (dst / "a.txt").exists()
            assert not (dst / "src").exists()

    def test_merges_into_existing_directories(self):
        """Existing destination directories are reused."""
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "src"
            (src / "sub").mkdir(parents=True)
            (src / "sub" / "new.txt").write_text("new")
            dst = Path(tmp) / "dst"
            (dst / "sub").mkdir(parents=True)
            (dst / "sub" / "existing.txt").write_text("old")

            walker, _, errors = _make_walker(3)
            walker.walk(src, dst, is_root=True)

            assert errors == []
            assert (dst / "sub" / "new.txt").read_text() == "new"
            assert (dst / "sub" / "existing.txt").read_text() == "old"

    def test_directory_blocked_by_file_still_descends(self):
        """A file where a directory belongs is reported, and the children are still tried."""
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "src"
            (src / "sub").mkdir(parents=True)
            (src / "sub" / "x.txt").write_text("x")
            (src / "y.txt").write_text("y")
            dst = Path(tmp) / "dst"
            dst.mkdir()
            (dst / "sub").write_text("not a directory")

            walker, copier, errors = _make_walker(2)
            walker.walk(src, dst, is_root=True)

            states = {Path(r.source_path).name: r.state for r in copier.results}
            assert states == {"x.txt": MoveState.FAILED, "y.txt": MoveState.COMPLETED}
            # One report for the directory, one for the file beneath it
            assert len(errors) == 2
            assert (src / "sub" / "x.txt").exists()
            assert (dst / "y.txt").exists()

    def test_precancelled_does_nothing(self):
        """Nothing is created or moved once cancellation is requested."""
        with tempfile.TemporaryDirectory() as tmp:
            src = Path(tmp) / "src"
            src.mkdir()
            (src / "a.txt").write_text("a")
            dst = Path(tmp) / "dst"

            token = CancellationToken()
            token.cancel()
            walker, copier, _ = _make_walker(1, token=token)
            walker.walk(src, dst, is_root=True)

            assert not dst.exists()
            assert (src / "a.txt").exists()
            assert copier.results == []

    def test_directory_symlink_skipped(self):
        """A directory symlink is reported and left in place."""
        with tempfile.TemporaryDirectory() as tmp:
            outside = Path(tmp) / "outside"
            outside.mkdir()
            (outside / "precious.txt").write_text("keep")
            src = Path(tmp) / "src"
            src.mkdir()
            try:
                os.symlink(outside, src / "link", target_is_directory=True)
            except (OSError, NotImplementedError):
                pytest.skip("Symlinks not supported here")
            dst = Path(tmp) / "dst"

            walker, _, errors = _make_walker()
            walker.walk(src, dst, is_root=True)

            assert len(errors) == 1
            assert errors[0][0] == src / "link"
            assert (outside / "precious.txt").read_text() == "keep"
            assert not (dst / "link").exists()


class TestCleanDirectories:
    """Tests for clean_directories function."""

    def test_removes_empty_tree(self):
        """A tree of empty directories is removed completely."""
        with tempfile.TemporaryDirectory() as tmp:
            top = Path(tmp) / "top"
            (top / "a" / "b").mkdir(parents=True)
            (top / "c").mkdir()

            assert clean_directories(top) is True
            assert not top.exists()

    def test_missing_path_counts_as_removed(self):
        with tempfile.TemporaryDirectory() as tmp:
            assert clean_directories(Path(tmp) / "gone") is True

    def test_leftover_file_kept(self):
        """A file that was not moved stays, and so do its ancestors."""
        with tempfile.TemporaryDirectory() as tmp:
            top = Path(tmp) / "top"
            (top / "a").mkdir(parents=True)
            (top / "a" / "keep.txt").write_text("not moved")
            (top / "b").mkdir()
            (top / "c" / "d").mkdir(parents=True)

            assert clean_directories(top) is False
            assert (top / "a" / "keep.txt").read_text() == "not moved"
            # Siblings after the failure are still cleaned
            assert not (top / "b").exists()
            assert not (top / "c").exists()

    def test_file_path_left_alone(self):
        """A file given as top is not deleted."""
        with tempfile.TemporaryDirectory() as tmp:
            f = Path(tmp) / "file.txt"
            f.write_text("data")

            assert clean_directories(f) is False
            assert f.exists()

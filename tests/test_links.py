"""
Tests for privilege detection and link creation.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

from tree_mover.links import create_link, is_elevated
from tree_mover.utils import available_space, is_same_file, is_same_or_inside, normalize_path


class TestIsElevated:

    def test_returns_bool(self):
        assert isinstance(is_elevated(), bool)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX uid check")
    def test_matches_effective_uid(self):
        assert is_elevated() == (os.geteuid() == 0)


@pytest.mark.skipif(sys.platform == "win32", reason="Symlink creation needs a privilege on Windows")
class TestCreateLink:
    """Tests for create_link function."""

    def test_directory_link(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "target"
            target.mkdir()
            (target / "f.txt").write_text("hi")
            link = Path(tmp) / "link"

            success, message = create_link(link, target)

            assert success
            assert "symbolic link" in message
            assert link.is_symlink()
            assert (link / "f.txt").read_text() == "hi"

    def test_file_link(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "target.txt"
            target.write_text("hi")
            link = Path(tmp) / "link.txt"

            success, _ = create_link(link, target)

            assert success
            assert link.read_text() == "hi"

    def test_existing_link_path(self):
        """An existing entry at the link path is never overwritten."""
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "target"
            target.mkdir()
            occupied = Path(tmp) / "occupied"
            occupied.write_text("mine")

            success, message = create_link(occupied, target)

            assert not success
            assert "already exists" in message
            assert occupied.read_text() == "mine"

    def test_missing_target(self):
        with tempfile.TemporaryDirectory() as tmp:
            success, message = create_link(Path(tmp) / "link", Path(tmp) / "missing")

            assert not success
            assert "does not exist" in message
            assert not os.path.lexists(Path(tmp) / "link")


class TestPathHelpers:
    """Tests for the path helpers in utils."""

    def test_same_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            assert is_same_or_inside(tmp, tmp)

    def test_nested_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            assert is_same_or_inside(Path(tmp) / "a" / "b", tmp)

    def test_sibling_with_common_prefix(self):
        """'src2' is not inside 'src'."""
        with tempfile.TemporaryDirectory() as tmp:
            assert not is_same_or_inside(Path(tmp) / "src2", Path(tmp) / "src")

    def test_parent_is_not_inside_child(self):
        with tempfile.TemporaryDirectory() as tmp:
            assert not is_same_or_inside(tmp, Path(tmp) / "child")

    def test_normalize_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            messy = os.path.join(tmp, "a", "..", "b")
            assert normalize_path(messy) == os.path.normpath(os.path.join(tmp, "b"))

    def test_available_space(self):
        with tempfile.TemporaryDirectory() as tmp:
            assert available_space(tmp) >= 0

    def test_same_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            f = Path(tmp) / "f.txt"
            f.write_text("x")
            assert is_same_file(f, Path(tmp) / "." / "f.txt")

    def test_same_file_missing_path(self):
        """A path that does not exist is never the same file."""
        with tempfile.TemporaryDirectory() as tmp:
            f = Path(tmp) / "f.txt"
            f.write_text("x")
            assert not is_same_file(f, Path(tmp) / "missing.txt")

"""
Shared fixtures for simulating filesystem failures.
"""

import builtins
import errno
import os
from pathlib import Path

import pytest


class FailingWriter:
    """Wraps a real file and raises on every write after the first."""

    def __init__(self, handle):
        self._handle = handle
        self.writes = 0

    def write(self, data):
        self.writes += 1
        if self.writes > 1:
            raise OSError(errno.EIO, "Input/output error")
        return self._handle.write(data)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self._handle.close()
        return False


@pytest.fixture
def fail_writes_to(monkeypatch):
    """Make writes to newly created files with the given names fail after one chunk."""
    real_open = builtins.open

    def install(*names):
        def patched_open(file, mode="r", *args, **kwargs):
            handle = real_open(file, mode, *args, **kwargs)
            if "x" in mode and Path(file).name in names:
                return FailingWriter(handle)
            return handle

        monkeypatch.setattr("tree_mover.copier.open", patched_open, raising=False)

    return install


@pytest.fixture
def fail_removal_of(monkeypatch):
    """Make os.remove refuse the given paths."""
    real_remove = os.remove

    def install(*paths):
        blocked = {Path(p) for p in paths}

        def patched_remove(path, *args, **kwargs):
            if Path(path) in blocked:
                raise PermissionError(errno.EACCES, "Permission denied", str(path))
            return real_remove(path, *args, **kwargs)

        monkeypatch.setattr(os, "remove", patched_remove)

    return install

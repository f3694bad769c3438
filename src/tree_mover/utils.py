"""
Path and filesystem helpers shared by the tree mover modules.

This module is responsible for:
- Normalizing paths for consistent comparison and logging
- Querying free space at a destination
- Detecting a destination nested inside its own source
- Detecting two paths that name the same file
"""

import os
import shutil
from pathlib import Path
from typing import Union


def normalize_path(path: Union[str, Path]) -> str:
    """
    Return an absolute, normalized string form of path.

    Symlinks are not resolved, so a link inside a tree keeps its own path.
    """
    return os.path.normpath(os.path.abspath(str(path)))


def available_space(path: Union[str, Path]) -> int:
    """Return the bytes available to this user on the volume holding path."""
    return shutil.disk_usage(normalize_path(path)).free


def is_same_or_inside(path: Union[str, Path], parent: Union[str, Path]) -> bool:
    """Return True if path is parent or lies somewhere beneath it."""
    path_norm = os.path.normcase(os.path.realpath(str(path)))
    parent_norm = os.path.normcase(os.path.realpath(str(parent)))
    if path_norm == parent_norm:
        return True
    return path_norm.startswith(parent_norm.rstrip(os.sep) + os.sep)


def is_same_file(path: Union[str, Path], other: Union[str, Path]) -> bool:
    """Return True if both paths exist and name the same file (hard links included)."""
    try:
        return os.path.samefile(str(path), str(other))
    except OSError:
        # Either side missing
        return False

"""
Size enumeration for a source file or directory tree.

The total is computed once, before any data is copied, and is used both
for the free-space check and as the denominator of progress reporting.

Python integers do not overflow, so totals are never narrowed. Real
volumes stay far below the signed 64-bit ceiling (8 EiB).
"""

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def enumerate_size(path: Union[str, Path]) -> int:
    """
    Return the total byte size of a file or directory tree.

    A regular file contributes its length; a directory contributes the
    sum of its children; empty directories contribute zero. Directory
    symlinks are not followed.

    Entries that cannot be read (permission denied, vanished while
    scanning) contribute zero and are logged. The total may therefore
    understate what the walker later moves.

    Args:
        path: File or directory to size

    Returns:
        Total size in bytes (0 for a missing path)
    """
    path_str = str(path)

    try:
        if os.path.islink(path_str) and os.path.isdir(path_str):
            return 0
        if os.path.isfile(path_str):
            return os.path.getsize(path_str)
        if not os.path.isdir(path_str):
            return 0
    except OSError as e:
        logger.warning(f"Cannot size {path_str}: {e}")
        return 0

    total = 0
    try:
        with os.scandir(path_str) as entries:
            for entry in entries:
                total += enumerate_size(entry.path)
    except OSError as e:
        logger.warning(f"Cannot scan directory {path_str}: {e}")

    return total

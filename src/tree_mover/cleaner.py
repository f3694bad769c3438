"""
Post-order removal of the now-empty source tree after a move.

Only directories are removed here. Files are deleted by the copier once
they were copied, so any file still present was not moved and is left
where it is.
"""

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def clean_directories(top: Union[str, Path]) -> bool:
    """
    Remove top and every directory beneath it, best effort.

    Every child is attempted even after an earlier sibling failed; top
    itself is removed only if all children were. A path that no longer
    exists counts as removed.

    Args:
        top: Source file or directory that was moved

    Returns:
        True if nothing remains at top
    """
    top_str = str(top)

    if not os.path.lexists(top_str):
        return True

    if os.path.islink(top_str) or not os.path.isdir(top_str):
        logger.debug(f"Left in place (not moved): {top_str}")
        return False

    try:
        with os.scandir(top_str) as entries:
            children = [entry.path for entry in entries]
    except OSError as e:
        logger.warning(f"Cannot list directory {top_str}: {e}")
        return False

    children_removed = True
    for child in children:
        # Evaluate the child first so a failure never skips later siblings
        children_removed = clean_directories(child) and children_removed

    if not children_removed:
        return False

    try:
        os.rmdir(top_str)
    except OSError as e:
        logger.warning(f"Cannot remove directory {top_str}: {e}")
        return False
    return True

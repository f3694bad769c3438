"""
Platform collaborators used around a move, never by the engine itself.

- is_elevated(): privilege check performed before a move is started
- create_link(): makes the moved data appear at its original location
  (directory junction on Windows, symbolic link elsewhere)
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Tuple, Union

logger = logging.getLogger(__name__)


def is_elevated() -> bool:
    """
    Check if the current process has administrator (or root) privileges.

    Returns:
        True if elevated, False otherwise or if it cannot be determined
    """
    if sys.platform == "win32":
        try:
            import ctypes
            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        except (AttributeError, OSError) as e:
            logger.debug(f"Could not check admin rights: {e}")
            return False

    return os.geteuid() == 0


def create_link(
    link_path: Union[str, Path],
    target: Union[str, Path]
) -> Tuple[bool, str]:
    """
    Create a link at link_path pointing to target.

    On Windows a directory target gets a junction (mklink /J), which does
    not need the symlink privilege; a file target gets a symbolic link.
    Elsewhere a symbolic link is created in both cases.

    Args:
        link_path: Where the link should appear (usually the old source path)
        target: Existing file or directory the link points to

    Returns:
        Tuple of (success, message)
    """
    link_path = Path(link_path)
    target = Path(target)

    if os.path.lexists(link_path):
        return False, f"Link path already exists: {link_path}"
    if not target.exists():
        return False, f"Link target does not exist: {target}"

    is_dir = target.is_dir()

    try:
        if sys.platform == "win32" and is_dir:
            completed = subprocess.run(
                ["cmd", "/c", "mklink", "/J", str(link_path), str(target)],
                capture_output=True,
                text=True
            )
            if completed.returncode != 0:
                message = (completed.stderr or completed.stdout).strip()
                return False, f"mklink failed: {message}"
            kind = "junction"
        else:
            os.symlink(target, link_path, target_is_directory=is_dir)
            kind = "symbolic link"
    except OSError as e:
        logger.error(f"Cannot create link {link_path} -> {target}: {e}")
        return False, f"Cannot create link: {e}"

    logger.info(f"Created {kind}: {link_path} -> {target}")
    return True, f"Created {kind} {link_path} -> {target}"

"""
Recursive tree walker that mirrors a source tree at the destination.

Directories are recreated at the destination and every file is handed to
a FileCopier. Cancellation is checked before each entry is started; an
entry that is already being moved always runs to its own checkpoint.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .copier import FileCopier
from .progress import CancellationToken
from .types import ErrorHandler

logger = logging.getLogger(__name__)


class TreeWalker:
    """Mirrors directory structure and delegates files to a FileCopier."""

    def __init__(
        self,
        copier: FileCopier,
        token: CancellationToken,
        on_error: Optional[ErrorHandler] = None
    ):
        self.copier = copier
        self.token = token
        self.on_error = on_error

    def _report(self, source: Path, destination: Path, message: str) -> None:
        logger.error(f"{message}: {source} -> {destination}")
        if self.on_error:
            self.on_error(source, destination)

    def walk(self, source: Path, dest: Path, is_root: bool = False) -> None:
        """
        Move source into dest.

        Args:
            source: File or directory to move
            dest: Destination directory; for the root entry this is the
                  literal target (the file path, or the directory that
                  receives the source's contents)
            is_root: True for the top-level call
        """
        if self.token.cancelled:
            return

        source = Path(source)
        dest = Path(dest)
        target = dest if is_root else dest / source.name

        if source.is_symlink() and source.is_dir():
            # Following it would move and delete data outside the tree
            self._report(source, target, "Skipping directory symlink")
            return

        if source.is_file():
            self.copier.copy(source, target)
            return

        if not source.is_dir():
            self._report(source, target, "Skipping unsupported entry")
            return

        try:
            target.mkdir()
            logger.debug(f"Created directory: {target}")
        except FileExistsError:
            if not target.is_dir():
                self._report(source, dest, "Destination exists and is not a directory")
        except OSError as e:
            # Keep going; the children will report their own failures
            self._report(source, dest, f"Cannot create directory {target} ({e})")

        try:
            with os.scandir(source) as entries:
                children = [Path(entry.path) for entry in entries]
        except OSError as e:
            self._report(source, target, f"Cannot list directory ({e})")
            return

        for child in children:
            if self.token.cancelled:
                logger.info(f"Cancellation requested, not descending further into {source}")
                break
            self.walk(child, target, is_root=False)

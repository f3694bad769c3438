"""
Single-file transfer for the tree mover.

This module is responsible for:
- Replacing an existing destination file (delete, then create)
- Streaming the source through a fixed-size buffer
- Updating shared byte progress after every written chunk
- Stopping at the next chunk boundary when cancellation is requested
- Deleting the source after a full copy, or the partial destination
  after a cancelled one
- Reporting each file exactly once through the per-file listener
"""

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

from .progress import CancellationToken, TransferProgress
from .types import (
    DEFAULT_BUFFER_SIZE,
    ErrorHandler,
    FileTransferResult,
    MoveState,
    normalize_buffer_size,
)
from .utils import is_same_file

logger = logging.getLogger(__name__)

# on_file_complete(source_file, dest_file, state); the engine binds its own handle
FileListener = Callable[[Path, Path, MoveState], None]


class FileCopier:
    """
    Moves individual files by copy-then-delete.

    Failures are local to the file being moved: they are reported through
    the error handler and recorded as FAILED, and never raised to the
    caller, so a walker can carry on with the next sibling.
    """

    def __init__(
        self,
        progress: TransferProgress,
        token: CancellationToken,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        on_error: Optional[ErrorHandler] = None,
        on_file_complete: Optional[FileListener] = None,
        verbose: bool = False
    ):
        """
        Initialize the copier.

        Args:
            progress: Shared byte counter, advanced after each written chunk
            token: Cancellation flag checked before each read
            buffer_size: Chunk size in bytes (clamped like MoveRequest)
            on_error: Called with (source_file, dest_file) on each failure
            on_file_complete: Called once per file with (source, dest, state)
            verbose: Log non-fatal cleanup problems as warnings
        """
        self.progress = progress
        self.token = token
        self.buffer_size = normalize_buffer_size(buffer_size)
        self.on_error = on_error
        self.on_file_complete = on_file_complete
        self.verbose = verbose
        self.results: List[FileTransferResult] = []

    def _warn(self, message: str) -> None:
        if self.verbose:
            logger.warning(message)
        else:
            logger.debug(message)

    def _record(
        self,
        source_file: Path,
        dest_file: Path,
        state: MoveState,
        transferred: int,
        message: str
    ) -> MoveState:
        self.results.append(FileTransferResult(
            source_path=str(source_file),
            dest_path=str(dest_file),
            state=state,
            bytes_transferred=transferred,
            message=message
        ))
        if self.on_file_complete:
            self.on_file_complete(source_file, dest_file, state)
        return state

    def _fail(
        self,
        source_file: Path,
        dest_file: Path,
        message: str,
        transferred: int = 0
    ) -> MoveState:
        logger.error(f"{message}: {source_file} -> {dest_file}")
        if self.on_error:
            self.on_error(source_file, dest_file)
        return self._record(source_file, dest_file, MoveState.FAILED, transferred, message)

    def copy(self, source_file: Path, dest_file: Path) -> MoveState:
        """
        Move one file from source_file to dest_file.

        Args:
            source_file: File to move
            dest_file: Literal destination file path

        Returns:
            COMPLETED if the file was fully copied, PARTIAL if cancellation
            stopped it, FAILED if the destination could not be prepared or
            an I/O error occurred
        """
        source_file = Path(source_file)
        dest_file = Path(dest_file)

        if is_same_file(source_file, dest_file):
            return self._fail(source_file, dest_file, "Source and destination are the same file")

        # Replace an existing destination file
        try:
            if dest_file.is_symlink() or dest_file.is_file():
                dest_file.unlink()
        except OSError as e:
            return self._fail(source_file, dest_file, f"Cannot delete existing file ({e})")

        transferred = 0
        finished = False
        try:
            with open(source_file, "rb") as reader, open(dest_file, "xb") as writer:
                while not self.token.cancelled:
                    chunk = reader.read(self.buffer_size)
                    if not chunk:
                        finished = True
                        break
                    writer.write(chunk)
                    transferred += len(chunk)
                    self.progress.add(len(chunk))
        except OSError as e:
            return self._fail(source_file, dest_file, f"Transfer failed ({e})", transferred)

        if not finished:
            logger.info(f"Cancelled while moving {source_file}")
            try:
                os.remove(dest_file)
            except OSError as e:
                self._warn(f"Cannot delete partial destination file {dest_file}: {e}")
            return self._record(
                source_file, dest_file, MoveState.PARTIAL, transferred,
                "Cancelled before the file was fully copied"
            )

        try:
            os.remove(source_file)
        except OSError as e:
            self._warn(f"Cannot delete source file {source_file}: {e}")
            message = f"Copied, but source could not be deleted: {e}"
        else:
            message = "Moved successfully"

        logger.debug(f"Moved file: {source_file} -> {dest_file} ({transferred} bytes)")
        return self._record(source_file, dest_file, MoveState.COMPLETED, transferred, message)

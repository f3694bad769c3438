"""
Type definitions and data classes for the tree mover.

This module defines:
- MoveState: Enum for the outcome of a single file and of a whole move
- EnginePhase: Enum for the phases of the background move operation
- MoveRequest: Immutable description of what to move and how
- FileTransferResult: Data class recording the outcome of one file transfer
- Callback type aliases used by the engine
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from .engine import MoveEngine

# Buffer sizes for streaming file copies (bytes)
DEFAULT_BUFFER_SIZE = 8192
MINIMUM_BUFFER_SIZE = 256


class MoveState(Enum):
    """Outcome of a file transfer or of an entire move operation."""
    COMPLETED = "completed"  # Everything moved, nothing left at the source
    PARTIAL = "partial"      # Some entries moved, some remain (cancel or local error)
    FAILED = "failed"        # Nothing moved


class EnginePhase(Enum):
    """Phase of a MoveEngine's background operation."""
    PENDING = "pending"
    VALIDATING = "validating"
    COPYING = "copying"
    CLEANING = "cleaning"
    TERMINAL = "terminal"


def normalize_buffer_size(buffer_size: Optional[int]) -> int:
    """Return buffer_size, or the default when it is missing or below the minimum."""
    if buffer_size is None or buffer_size < MINIMUM_BUFFER_SIZE:
        return DEFAULT_BUFFER_SIZE
    return int(buffer_size)


@dataclass(frozen=True)
class MoveRequest:
    """
    Immutable description of a move operation.

    Attributes:
        source: File or directory to move
        destination: Directory that receives the source's contents, or
                     the literal target path when moving a single file
        buffer_size: Streaming buffer size in bytes; values below
                     MINIMUM_BUFFER_SIZE fall back to DEFAULT_BUFFER_SIZE
        verbose: Surface non-fatal warnings (otherwise logged at DEBUG)
    """
    source: Path
    destination: Path
    buffer_size: int = DEFAULT_BUFFER_SIZE
    verbose: bool = False

    def __post_init__(self):
        object.__setattr__(self, "source", Path(self.source))
        object.__setattr__(self, "destination", Path(self.destination))
        object.__setattr__(self, "buffer_size", normalize_buffer_size(self.buffer_size))


@dataclass
class FileTransferResult:
    """Result of a single file transfer."""
    source_path: str
    dest_path: str
    state: MoveState
    bytes_transferred: int
    message: str


# on_error(source, destination)
ErrorHandler = Callable[[Path, Path], Any]

# on_complete(source, destination, state, engine)
CompletionListener = Callable[[Path, Path, MoveState, "MoveEngine"], Any]

# on_file_complete(source_file, dest_file, state, engine)
FileCompletionListener = Callable[[Path, Path, MoveState, "MoveEngine"], Any]

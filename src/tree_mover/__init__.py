"""
Tree Mover - Threaded File and Directory Tree Mover

A cross-platform library and CLI for moving a file or a whole directory
tree to another location with live byte progress.

This package provides functionality to:
- Size a file or directory tree up front
- Move it file by file on a background thread with a fixed-size buffer
- Cancel cooperatively, keeping everything not yet moved at the source
- Remove the emptied source directories after the move
- Report the outcome as COMPLETED, PARTIAL or FAILED
- Write CSV reports and optionally link the old location to the new one
"""

# Product identity constants
PRODUCT_NAME = "Tree Mover"
PRODUCT_VERSION = "1.0.0"
PRODUCT_DESCRIPTION = "Threaded File and Directory Tree Mover"

__version__ = PRODUCT_VERSION
__author__ = "Tree Mover Team"

from .engine import MoveEngine, MoveValidationError, move_tree  # noqa: E402
from .types import MoveRequest, MoveState  # noqa: E402

__all__ = [
    "MoveEngine",
    "MoveRequest",
    "MoveState",
    "MoveValidationError",
    "move_tree",
]

"""
Shared state between the caller thread and a move's background thread.

- TransferProgress: byte counter written only by the background thread
- CancellationToken: one-way cancellation flag written by the caller
"""

import threading


class TransferProgress:
    """
    Byte-level progress of a move.

    total_size is fixed when the object is created. current_transfer_size
    only grows and is never reported above total_size.
    """

    def __init__(self, total_size: int):
        if total_size < 0:
            raise ValueError(f"total_size must be non-negative, got {total_size}")
        self._total_size = total_size
        self._transferred = 0

    @property
    def total_size(self) -> int:
        return self._total_size

    @property
    def current_transfer_size(self) -> int:
        # A file can grow after it was sized; never expose more than the total
        return min(self._transferred, self._total_size)

    def add(self, length: int) -> None:
        """Record length bytes that were read and written."""
        if length > 0:
            self._transferred += length

    def complete(self) -> None:
        """Set the counter to the total after a fully successful move."""
        if self._transferred < self._total_size:
            self._transferred = self._total_size

    def fraction(self) -> float:
        """Progress in [0.0, 1.0]; an empty move counts as complete."""
        if self._total_size == 0:
            return 1.0
        return self.current_transfer_size / self._total_size


class CancellationToken:
    """Cooperative cancellation flag. Once set it stays set."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

"""
Background move engine.

This module is responsible for:
- Sizing the source once when the engine is created
- Running one background thread per move: validate, copy, clean
- Rejecting a move that cannot fit or cannot be placed, before any data
  is touched
- Classifying the outcome as COMPLETED, PARTIAL or FAILED
- Delivering the completion callback exactly once on every exit path
- Exposing progress and cancellation to the calling thread

Typical use::

    engine = MoveEngine(MoveRequest(source, destination), on_complete=done)
    engine.start()
    while engine.is_alive():
        show(engine.progress_fraction())
"""

import logging
import os
import threading
from pathlib import Path
from typing import List, Optional, Union

from .cleaner import clean_directories
from .copier import FileCopier
from .progress import CancellationToken, TransferProgress
from .sizing import enumerate_size
from .types import (
    CompletionListener,
    EnginePhase,
    ErrorHandler,
    FileCompletionListener,
    FileTransferResult,
    MoveRequest,
    MoveState,
)
from .utils import available_space, is_same_file, is_same_or_inside
from .walker import TreeWalker

logger = logging.getLogger(__name__)


class MoveValidationError(Exception):
    """Raised when a move is rejected before any data is touched."""
    pass


class MoveEngine:
    """
    Moves a file or directory tree on a background thread.

    The engine is inert until start() is called. All callbacks run on the
    background thread; marshaling them to a UI thread is up to the caller.
    """

    def __init__(
        self,
        request: MoveRequest,
        on_error: Optional[ErrorHandler] = None,
        on_complete: Optional[CompletionListener] = None,
        on_file_complete: Optional[FileCompletionListener] = None
    ):
        """
        Initialize the engine and size the source.

        Args:
            request: What to move, where, and how
            on_error: Called with (source, destination) for every failed
                      entry and for a rejected move
            on_complete: Called once with (source, destination, state, engine)
            on_file_complete: Called once per attempted file with
                              (source_file, dest_file, state, engine)
        """
        self.request = request
        self.on_error = on_error
        self.on_complete = on_complete
        self.on_file_complete = on_file_complete

        self.token = CancellationToken()
        self.progress = TransferProgress(enumerate_size(request.source))

        self._copier = FileCopier(
            self.progress,
            self.token,
            buffer_size=request.buffer_size,
            on_error=self._notify_error,
            on_file_complete=self._notify_file,
            verbose=request.verbose
        )
        self._walker = TreeWalker(self._copier, self.token, on_error=self._notify_error)

        self._thread: Optional[threading.Thread] = None
        self._phase = EnginePhase.PENDING
        self._result: Optional[MoveState] = None
        self._target: Optional[Path] = None
        self._error_count = 0
        # Set once cleaning has decided the outcome; cancel() is ignored after that
        self._settled = False

        # Guards the single transition into TERMINAL and the settling of the outcome
        self._terminal_lock = threading.Lock()

        logger.debug(
            f"Prepared move {request.source} -> {request.destination} "
            f"({self.progress.total_size} bytes, buffer {request.buffer_size})"
        )

    # ---- Lifecycle ----

    def start(self) -> "MoveEngine":
        """
        Launch the background thread.

        Returns:
            The engine itself, as the handle for polling and cancellation

        Raises:
            RuntimeError: If the engine was already started
        """
        if self._thread is not None:
            raise RuntimeError("Move operation has already been started")

        self._thread = threading.Thread(
            target=self._run,
            name=f"tree-mover[{self.request.source.name}]",
            daemon=True
        )
        self._thread.start()
        return self

    def wait(self, timeout: Optional[float] = None) -> Optional[MoveState]:
        """Block until the move finishes (or timeout) and return its state."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self._result

    def cancel(self) -> None:
        """Request cancellation. Repeated calls, and calls after the end, do nothing."""
        with self._terminal_lock:
            if self._result is not None or self._settled or self.token.cancelled:
                return
            self.token.cancel()
        logger.info(f"Cancellation requested for move of {self.request.source}")

    # ---- Query surface ----

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def is_canceling(self) -> bool:
        """Cancellation requested and the operation is still running."""
        return self.token.cancelled and self.is_alive()

    def is_canceled(self) -> bool:
        """Cancellation requested and the operation has stopped."""
        return self.token.cancelled and self._thread is not None and not self.is_alive()

    def get_total_size(self) -> int:
        return self.progress.total_size

    def get_current_transfer_size(self) -> int:
        return self.progress.current_transfer_size

    def progress_fraction(self) -> float:
        """Fraction moved in [0.0, 1.0]; a zero-byte move reads as 1.0."""
        return self.progress.fraction()

    @property
    def phase(self) -> EnginePhase:
        return self._phase

    @property
    def result(self) -> Optional[MoveState]:
        """Terminal state, or None while the move has not finished."""
        return self._result

    @property
    def file_results(self) -> List[FileTransferResult]:
        """Per-file outcomes, in the order the files were attempted."""
        return list(self._copier.results)

    @property
    def target(self) -> Optional[Path]:
        """Where the source ends up once validation has passed, else None."""
        return self._target

    @property
    def error_count(self) -> int:
        return self._error_count

    # ---- Background thread ----

    def _run(self) -> None:
        source = self.request.source
        destination = self.request.destination

        self._phase = EnginePhase.VALIDATING
        try:
            target = self._validate()
            self._target = target
        except MoveValidationError as e:
            logger.error(f"Move rejected: {e}")
            self._notify_error(source, destination)
            self._finish(MoveState.FAILED)
            return
        except Exception:
            logger.exception(f"Unexpected error while validating move of {source}")
            self._notify_error(source, destination)
            self._finish(MoveState.FAILED)
            return

        try:
            self._phase = EnginePhase.COPYING
            logger.info(f"Moving {source} -> {target} ({self.progress.total_size} bytes)")
            self._walker.walk(source, target, is_root=True)
            state = self._clean()
        except Exception:
            logger.exception(f"Unexpected error while moving {source}")
            state = MoveState.PARTIAL

        self._finish(state)

    def _validate(self) -> Path:
        """
        Check that the move can start and prepare the destination directory.

        Returns:
            The root target for the walker: the literal file path when
            moving a file, or the directory receiving a tree's contents

        Raises:
            MoveValidationError: If the move must not start
        """
        source = self.request.source
        destination = self.request.destination

        if not os.path.lexists(source):
            raise MoveValidationError(f"Source does not exist: {source}")

        if is_same_or_inside(destination, source):
            raise MoveValidationError(
                f"Destination {destination} is the source or lies inside it"
            )

        if source.is_file():
            # Like mv: an existing directory receives the file under its own name
            if destination.is_dir():
                target = destination / source.name
                target_dir = destination
            else:
                target = destination
                target_dir = destination.parent
        else:
            target = destination
            target_dir = destination
            if is_same_or_inside(source, target):
                # The mirrored tree would be written over the source itself
                raise MoveValidationError(
                    f"Source {source} lies inside destination {target}"
                )

        if is_same_or_inside(target, source) or is_same_file(target, source):
            raise MoveValidationError(
                f"Target {target} is the source or lies inside it"
            )

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MoveValidationError(
                f"Cannot create destination directory {target_dir}: {e}"
            ) from e

        try:
            free = available_space(target_dir)
        except OSError as e:
            raise MoveValidationError(
                f"Cannot determine free space at {target_dir}: {e}"
            ) from e

        total = self.progress.total_size
        if total > free:
            raise MoveValidationError(
                f"Not enough space at {target_dir}: need {total} bytes, {free} available"
            )

        return target

    def _clean(self) -> MoveState:
        source = self.request.source

        if self.token.cancelled:
            logger.info(f"Move of {source} cancelled; remaining source entries kept")
            return MoveState.PARTIAL

        self._phase = EnginePhase.CLEANING
        cleaned = clean_directories(source)

        with self._terminal_lock:
            cancelled = self.token.cancelled
            self._settled = True

        if cancelled:
            logger.info(f"Move of {source} cancelled during cleanup")
            return MoveState.PARTIAL

        if not cleaned:
            logger.warning(f"Some entries under {source} could not be moved")
            return MoveState.PARTIAL

        self.progress.complete()
        return MoveState.COMPLETED

    def _finish(self, state: MoveState) -> None:
        with self._terminal_lock:
            if self._result is not None:
                return
            self._result = state
            self._phase = EnginePhase.TERMINAL

        logger.info(
            f"Move {self.request.source} -> {self.request.destination} finished: "
            f"{state.value} ({self.progress.current_transfer_size}/"
            f"{self.progress.total_size} bytes, {self._error_count} errors)"
        )
        if self.on_complete:
            try:
                self.on_complete(self.request.source, self.request.destination, state, self)
            except Exception:
                logger.exception("Completion listener raised")

    # ---- Callback dispatch ----

    def _notify_error(self, source: Path, destination: Path) -> None:
        self._error_count += 1
        if self.on_error:
            try:
                self.on_error(source, destination)
            except Exception:
                logger.exception("Error handler raised")

    def _notify_file(self, source_file: Path, dest_file: Path, state: MoveState) -> None:
        if self.on_file_complete:
            try:
                self.on_file_complete(source_file, dest_file, state, self)
            except Exception:
                logger.exception("File completion listener raised")


def move_tree(
    source: Union[str, Path],
    destination: Union[str, Path],
    buffer_size: Optional[int] = None,
    verbose: bool = False,
    on_error: Optional[ErrorHandler] = None,
    on_file_complete: Optional[FileCompletionListener] = None
) -> MoveState:
    """
    Move source to destination and block until done.

    Args:
        source: File or directory to move
        destination: Destination directory (or file path for a file)
        buffer_size: Streaming buffer size in bytes
        verbose: Surface non-fatal warnings
        on_error: Optional error handler
        on_file_complete: Optional per-file listener

    Returns:
        The terminal MoveState
    """
    request = MoveRequest(
        source=Path(source),
        destination=Path(destination),
        buffer_size=buffer_size,
        verbose=verbose
    )
    engine = MoveEngine(
        request,
        on_error=on_error,
        on_file_complete=on_file_complete
    ).start()
    return engine.wait()

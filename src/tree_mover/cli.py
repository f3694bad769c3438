"""
Command-line interface for the tree mover.

This module is responsible for:
- Parsing command-line arguments using argparse
- Configuring logging based on verbosity level
- Running a MoveEngine and rendering its progress with tqdm
- Cancelling the move cleanly on Ctrl+C
- Writing the CSV report and creating the link after a completed move
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from tqdm import tqdm

from . import __version__, PRODUCT_NAME, PRODUCT_DESCRIPTION
from .engine import MoveEngine
from .links import create_link, is_elevated
from .report import ReportWriter
from .types import DEFAULT_BUFFER_SIZE, MINIMUM_BUFFER_SIZE, MoveRequest, MoveState

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2
EXIT_LINK_FAILED = 3
EXIT_NOT_ELEVATED = 4
EXIT_INTERRUPTED = 130

# Seconds between progress bar refreshes
POLL_INTERVAL = 0.1


class TqdmLoggingHandler(logging.Handler):
    """Logging handler that writes through tqdm so records don't tear the progress bar."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="tree-mover",
        description=f"""
{PRODUCT_NAME} - {PRODUCT_DESCRIPTION}

Move a file or a whole directory tree to another location, file by file,
with byte-level progress. The contents of a source directory are placed
directly into DESTINATION; the emptied source directories are removed
afterwards.
        """.strip(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Move a folder to another drive
  %(prog)s C:\\Games\\Big D:\\Games\\Big

  # Move it and leave a junction (Windows) or symlink behind
  %(prog)s C:\\Games\\Big D:\\Games\\Big --link

  # Larger buffer, CSV report, no confirmation prompt
  %(prog)s /data/old /mnt/new -b 1048576 --report moves.csv -y

Notes:
  - Press Ctrl+C to cancel; the file being copied is rolled back and
    everything not yet moved stays at the source
  - Existing files at the destination are replaced
  - The link is only created when every entry was moved
        """
    )

    parser.add_argument(
        "source",
        type=Path,
        help="File or directory to move"
    )
    parser.add_argument(
        "destination",
        type=Path,
        help="Destination directory (or file path when moving a single file)"
    )

    parser.add_argument(
        "-b", "--buffer-size",
        type=int,
        default=DEFAULT_BUFFER_SIZE,
        metavar="BYTES",
        help=(
            f"Copy buffer size in bytes (default: {DEFAULT_BUFFER_SIZE}; "
            f"values below {MINIMUM_BUFFER_SIZE} use the default)"
        )
    )
    parser.add_argument(
        "-r", "--report",
        type=Path,
        default=None,
        metavar="CSV_FILE",
        help="Write a per-file CSV report to this path"
    )
    parser.add_argument(
        "--link",
        action="store_true",
        help="After a complete move, create a link at the source path pointing to the destination"
    )
    parser.add_argument(
        "--require-admin",
        action="store_true",
        dest="require_admin",
        help="Refuse to run unless elevated (administrator / root)"
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        dest="no_progress",
        help="Do not show the progress bar"
    )
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Skip confirmation prompt (use with caution)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v for INFO, -vv for DEBUG)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=__version__
    )

    return parser


def setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[TqdmLoggingHandler()],
        force=True
    )


def validate_paths(args: argparse.Namespace) -> bool:
    """Validate the paths before any work is done."""
    errors = []

    if not args.source.exists():
        errors.append(f"Source not found: {args.source}")
    elif args.source.is_dir() and args.destination.exists() and not args.destination.is_dir():
        errors.append(f"Destination is not a directory: {args.destination}")

    for error in errors:
        logger.error(error)
        print(f"Error: {error}", file=sys.stderr)

    return len(errors) == 0


def get_run_parameters(args: argparse.Namespace, request: MoveRequest) -> Dict[str, str]:
    """
    Get run parameters as a dictionary for traceability.

    Args:
        args: Parsed command-line arguments
        request: The request actually handed to the engine

    Returns:
        Dictionary of parameter names to values
    """
    return {
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
        "source": str(request.source.resolve()),
        "destination": str(request.destination.resolve()),
        "buffer_size": str(request.buffer_size),
        "link": str(args.link),
        "report": str(args.report.resolve()) if args.report else "",
    }


def confirm_operation(source: Path, destination: Path, total_size: int) -> bool:
    """
    Prompt user to confirm the move operation.

    Returns:
        True if user confirms, False otherwise
    """
    print(f"\n{'!'*60}")
    print("CONFIRMATION REQUIRED")
    print(f"{'!'*60}")
    print(f"\nYou are about to MOVE {total_size} bytes from:")
    print(f"  {source}")
    print("to:")
    print(f"  {destination}")
    print("\nSource files are deleted as soon as they have been copied.")
    print(f"{'!'*60}\n")

    try:
        response = input("Type 'yes' to proceed, or anything else to cancel: ")
        return response.strip().lower() == "yes"
    except EOFError:
        # Non-interactive environment
        return False


def print_banner(args: argparse.Namespace) -> None:
    """Print startup banner with configuration."""
    print(f"\n{'='*60}")
    print(f"{PRODUCT_NAME}")
    print(f"Version {__version__}")
    print(f"{PRODUCT_DESCRIPTION}")
    print(f"{'='*60}")
    print(f"Source:       {args.source}")
    print(f"Destination:  {args.destination}")
    print(f"Buffer:       {args.buffer_size} bytes")
    if args.report:
        print(f"Report:       {args.report}")
    if args.link:
        print("Link:         create after a complete move")
    print(f"{'='*60}\n")


def print_summary(engine: MoveEngine, interrupted: bool) -> None:
    """Print final summary of the move."""
    counts = {state: 0 for state in MoveState}
    for result in engine.file_results:
        counts[result.state] += 1

    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    print(f"  Bytes moved:           {engine.get_current_transfer_size()}/{engine.get_total_size()}")
    print(f"  Files moved:           {counts[MoveState.COMPLETED]}")
    if counts[MoveState.PARTIAL]:
        print(f"  Files rolled back:     {counts[MoveState.PARTIAL]}")
    if counts[MoveState.FAILED]:
        print(f"  Files failed:          {counts[MoveState.FAILED]}")
    if engine.error_count:
        print(f"  Errors:                {engine.error_count}")
    outcome = engine.result.name if engine.result else "UNKNOWN"
    if interrupted:
        outcome += " (cancelled)"
    print(f"  Outcome:               {outcome}")
    print(f"{'='*60}\n")


def run_with_progress(engine: MoveEngine, show_progress: bool = True) -> Optional[MoveState]:
    """
    Block until a started engine finishes, drawing a byte progress bar.

    KeyboardInterrupt is propagated to the caller; the engine keeps running
    until it is cancelled.
    """
    with tqdm(
        total=engine.get_total_size(),
        unit="B",
        unit_scale=True,
        unit_divisor=1024,
        desc="Moving",
        disable=not show_progress,
        leave=True,
    ) as bar:
        while engine.is_alive():
            engine.wait(POLL_INTERVAL)
            bar.update(engine.get_current_transfer_size() - bar.n)
        bar.update(engine.get_current_transfer_size() - bar.n)

    return engine.result


def main(argv: list = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 complete, 1 failed, 2 partial, 3 link failed,
        4 not elevated, 130 cancelled)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    logger.info(f"{PRODUCT_NAME} v{__version__}")
    logger.debug(f"Arguments: {args}")

    if args.require_admin and not is_elevated():
        print("Error: administrator privileges are required (--require-admin)", file=sys.stderr)
        return EXIT_NOT_ELEVATED

    if not validate_paths(args):
        return EXIT_FAILED

    print_banner(args)

    request = MoveRequest(
        source=args.source,
        destination=args.destination,
        buffer_size=args.buffer_size,
        verbose=args.verbose > 0
    )

    def on_error(source: Path, destination: Path) -> None:
        tqdm.write(f"Couldn't move \"{source}\" to \"{destination}\"!", file=sys.stderr)

    def on_file_complete(source_file: Path, dest_file: Path, state: MoveState, engine: MoveEngine) -> None:
        logger.info(f"{state.name}: {source_file} -> {dest_file}")

    engine = MoveEngine(request, on_error=on_error, on_file_complete=on_file_complete)

    if not args.yes:
        if not confirm_operation(args.source, args.destination, engine.get_total_size()):
            print("\nOperation cancelled by user.")
            logger.info("Operation cancelled by user at confirmation prompt")
            return EXIT_OK
    else:
        logger.info("Confirmation skipped (--yes flag)")

    interrupted = False
    engine.start()
    try:
        state = run_with_progress(engine, show_progress=not args.no_progress)
    except KeyboardInterrupt:
        interrupted = True
        print("\nCancelling; waiting for the current file to stop...", file=sys.stderr)
        engine.cancel()
        state = engine.wait()

    if args.report:
        print(f"Writing report to {args.report}...")
        with ReportWriter(args.report) as writer:
            writer.write_parameters(get_run_parameters(args, request))
            for result in engine.file_results:
                writer.write_file_result(result)
            writer.write_outcome(
                request.source,
                request.destination,
                state,
                engine.get_current_transfer_size(),
                engine.get_total_size()
            )
            logger.info(writer.get_summary())

    print_summary(engine, interrupted)

    if interrupted:
        return EXIT_INTERRUPTED

    if state == MoveState.FAILED:
        print("No files were moved. Check the destination path and free space.", file=sys.stderr)
        return EXIT_FAILED

    if state == MoveState.PARTIAL:
        print(
            "Some files couldn't be moved. Everything that could be moved was moved."
            + (" The link was not created." if args.link else ""),
            file=sys.stderr
        )
        return EXIT_PARTIAL

    if args.link:
        success, message = create_link(request.source, engine.target)
        print(message)
        if not success:
            return EXIT_LINK_FAILED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

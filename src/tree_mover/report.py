"""
CSV report generator for documenting move operations.

This module is responsible for:
- Creating a CSV report with one row per attempted file
- Streaming writes to keep memory low on very large trees
- Recording run parameters and the overall outcome for traceability
- Generating summary statistics
"""

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

from .types import FileTransferResult, MoveState

logger = logging.getLogger(__name__)

# CSV column headers in order
REPORT_COLUMNS = [
    "timestamp",
    "status",
    "source_path",
    "dest_path",
    "bytes",
    "message",
]

PARAMETER_STATUS = "PARAMETER"
OUTCOME_STATUS = "OUTCOME"


class ReportWriter:
    """
    Streaming CSV report writer for move operations.

    Writes entries incrementally, so a report for hundreds of thousands
    of files never has to be held in memory.
    """

    def __init__(
        self,
        report_path: Union[str, Path],
        include_header: bool = True
    ):
        """
        Initialize the report writer.

        Args:
            report_path: Path where the CSV report will be written
            include_header: Whether to write header row (default: True)
        """
        self.report_path = Path(report_path)
        self.include_header = include_header

        self._file: Optional[TextIO] = None
        self._writer = None
        self._row_count = 0
        self._stats: Dict[str, int] = {}

    def __enter__(self):
        """Context manager entry - opens the file."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - closes the file."""
        self.close()
        return False

    def open(self) -> None:
        """Open the report file for writing."""
        if self._file is not None:
            return  # Already open

        self.report_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Opening report file: {self.report_path}")
        self._file = open(self.report_path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file, quoting=csv.QUOTE_MINIMAL)

        if self.include_header:
            self._writer.writerow(REPORT_COLUMNS)

    def close(self) -> None:
        """Close the report file."""
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None
            logger.info(
                f"Report closed: {self._row_count} rows written to {self.report_path}"
            )

    def _ensure_open(self) -> None:
        if self._file is None:
            self.open()

    def _get_timestamp(self) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def _write_row(self, row: list) -> None:
        self._ensure_open()
        self._writer.writerow(row)
        self._row_count += 1

        # Flush periodically for safety
        if self._row_count % 100 == 0:
            self._file.flush()

    def write_parameters(self, params: Dict[str, str]) -> None:
        """
        Write run parameters as PARAMETER rows at the start of the report.

        Args:
            params: Dictionary of parameter names to values
        """
        timestamp = self._get_timestamp()

        for key, value in params.items():
            if value:  # Only write non-empty values
                self._write_row([timestamp, PARAMETER_STATUS, "", "", "", f"{key}={value}"])

        self._write_row([timestamp, PARAMETER_STATUS, "", "", "", "--- END PARAMETERS ---"])
        self._file.flush()

    def write_file_result(
        self,
        result: FileTransferResult,
        timestamp: Optional[str] = None
    ) -> None:
        """
        Write one per-file outcome.

        Args:
            result: The FileTransferResult to record
            timestamp: Optional timestamp (defaults to current time)
        """
        status = result.state.name
        self._write_row([
            timestamp or self._get_timestamp(),
            status,
            result.source_path,
            result.dest_path,
            str(result.bytes_transferred),
            result.message,
        ])
        self._stats[status] = self._stats.get(status, 0) + 1

    def write_outcome(
        self,
        source: Union[str, Path],
        destination: Union[str, Path],
        state: MoveState,
        transferred: int,
        total: int
    ) -> None:
        """Write the overall outcome of the move as the final row."""
        self._write_row([
            self._get_timestamp(),
            OUTCOME_STATUS,
            str(source),
            str(destination),
            str(transferred),
            f"{state.name} ({transferred}/{total} bytes)",
        ])
        self._file.flush()

    def get_stats(self) -> Dict[str, int]:
        """Return per-file status counts written so far."""
        return dict(self._stats)

    def get_row_count(self) -> int:
        """Get total number of rows written."""
        return self._row_count

    def get_summary(self) -> str:
        """
        Get a human-readable summary of the report.

        Returns:
            Formatted summary string
        """
        files = sum(self._stats.values())
        lines = [f"Report Summary ({files} files):"]

        if self._stats.get(MoveState.COMPLETED.name, 0):
            lines.append(f"  Moved: {self._stats[MoveState.COMPLETED.name]}")
        if self._stats.get(MoveState.PARTIAL.name, 0):
            lines.append(f"  Interrupted: {self._stats[MoveState.PARTIAL.name]}")
        if self._stats.get(MoveState.FAILED.name, 0):
            lines.append(f"  Failed: {self._stats[MoveState.FAILED.name]}")

        return "\n".join(lines)

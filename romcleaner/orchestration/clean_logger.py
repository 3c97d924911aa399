"""CleanLogger for writing the audit log of a cleaning run.

This module provides the CleanLogger class that records, for every run, which
catalog was used, what happened to each file, and the final counters.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from romcleaner.models import CleanSummary, DatCatalog, FileOutcome, ProcessMode


class CleanLogger:
    """Audit logger for cleaning runs with structured output format.

    Generates log files with sections for header, catalog, per-file results
    and summary.

    Usage:
        with CleanLogger(log_path, mode=ProcessMode.MOVE) as logger:
            logger.log_header()
            logger.log_catalog(catalog, input_path, candidate_count)
            for outcome in outcomes:
                logger.log_outcome(outcome)
            logger.log_summary(summary)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(
        self,
        log_file_path: Optional[Path] = None,
        mode: ProcessMode = ProcessMode.MOVE,
        dry_run: bool = False,
    ) -> None:
        """Initialize the CleanLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            mode: The run's ProcessMode (shown in the header).
            dry_run: Whether this is a dry run (no actual changes made).

        Raises:
            OSError: If the log file path is not writable.
        """
        self._mode = mode
        self._dry_run = dry_run
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None
        self._results_started = False

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y%m%d_%H%M%S")
            self._log_file_path = Path.cwd() / f"romcleaner_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file's parent directory exists.

        Raises:
            OSError: If the parent directory doesn't exist or is not a directory.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "CleanLogger":
        """Enter the context manager, opening the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the context manager, closing the log file."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        """Get the path to the log file."""
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp and mode."""
        self._write_separator()
        self._write_line("ROM Cleaner - Run Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        mode = self._mode.value.upper()
        if self._dry_run:
            mode += " (DRY RUN)"
        self._write_line(f"Mode: {mode}")
        self._write_line("")

    def log_catalog(self, catalog: DatCatalog, input_path: Path, candidate_count: int) -> None:
        """Write the catalog section.

        Args:
            catalog: The loaded DatCatalog.
            input_path: Directory that was scanned.
            candidate_count: Number of ROM candidates found.
        """
        self._write_separator()
        self._write_line("CATALOG")
        self._write_separator()
        self._write_line(f"DAT file: {catalog.source_path}")
        self._write_line(f"Dialect: {catalog.dialect.value}")
        if catalog.system_name:
            self._write_line(f"System: {catalog.system_name}")
        self._write_line(f"ROMs in DAT: {len(catalog)}")
        self._write_line(f"Input path: {input_path}")
        self._write_line(f"Candidate files: {candidate_count}")
        self._write_line("")

    def log_outcome(self, outcome: FileOutcome) -> None:
        """Write one ``file >> status`` line."""
        if not self._results_started:
            self._write_separator()
            self._write_line("RESULTS")
            self._write_separator()
            self._results_started = True

        line = f"[{self._format_timestamp(datetime.now())}] {outcome.file_name} >> {outcome.result.label}"
        if outcome.catalog_name:
            line += f" ({outcome.catalog_name})"
        self._write_line(line)
        if outcome.destination is not None:
            self._write_line(f"-> {outcome.destination}", indent=2)
        if outcome.error:
            self._write_line(f"! {outcome.error}", indent=2)

    def log_summary(self, summary: CleanSummary) -> None:
        """Write the summary section."""
        self._write_line("")
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Processed: {summary.files_processed:,}")
        self._write_line(f"Unique: {summary.unique:,}")
        self._write_line(f"Duplicates: {summary.duplicates:,}")
        self._write_line(f"Not in DAT: {summary.not_in_dat:,}")
        self._write_line(f"Deleted: {summary.deleted:,}")

        if summary.errors:
            self._write_line(f"Total errors: {len(summary.errors)}")
            self._write_line("Errors:")
            for error in summary.errors:
                self._write_line(f"- {error}", indent=2)

        if summary.interrupted:
            self._write_line("Run interrupted by user")

        self._write_line(f"Duration: {self._format_duration(summary.duration_seconds)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _format_duration(self, seconds: float) -> str:
        """Format duration as "45s", "5m 23s" or "1h 5m 30s"."""
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation."""
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)

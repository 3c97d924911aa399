"""CleanOrchestrator for coordinating a ROM cleaning run.

This module provides the CleanOrchestrator class. A run goes through five
phases:

1. Pre-flight - the DAT file and the input directory must exist
2. Catalog - the DAT is parsed and the output areas are created
3. Scan - the input directory is walked for ROM candidates
4. Hash and dispose - candidates are hashed on a thread pool; results are
   consumed in discovery order, classified and disposed one at a time
5. Summary - counters are aggregated, displayed and logged

Example:
    from romcleaner.orchestration import CleanOrchestrator
    from romcleaner.models import ProcessMode

    orchestrator = CleanOrchestrator(
        dat_path=Path("games.dat"),
        input_path=Path("/roms/old"),
        output_path=Path("/roms"),
        mode=ProcessMode.MOVE,
    )
    summary = orchestrator.run()
"""

import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from rich.markup import escape

from romcleaner.catalog import load_catalog
from romcleaner.classification import SeenHashRegistry, classify
from romcleaner.errors import CatalogNotFound, InputDirectoryNotFound
from romcleaner.hashing import RomHasher
from romcleaner.models import (
    CandidateFile,
    CleanSummary,
    DatCatalog,
    Disposition,
    FileOutcome,
    ProcessMode,
    ProcessResult,
)
from romcleaner.operations import DispositionExecutor, LocalStorage, StorageEffects
from romcleaner.orchestration.clean_logger import CleanLogger
from romcleaner.scanning import RomScanner
from romcleaner.ui import CleanTUI

logger = logging.getLogger(__name__)


class CleanOrchestrator:
    """Orchestrates a complete cleaning run.

    Coordinates the catalog parser, RomScanner, RomHasher, the classifier,
    DispositionExecutor, CleanTUI and CleanLogger.

    Hashing is the only parallel phase. Classification and disposition run
    on the calling thread, in discovery order, so the first discovered file
    of a hash is always its first occurrence.

    Attributes:
        dat_path: Path to the DAT catalog.
        input_path: Directory scanned for ROMs.
        output_path: Root of the "new" and "checked" areas.
        mode: ProcessMode applied to every file.
        workers: Size of the hashing thread pool.
        log_file_path: Optional audit log path; None disables the audit log.
        dry_run: Whether to simulate operations without making changes.
        verbose: Whether to print every file's outcome.
    """

    def __init__(
        self,
        dat_path: Path,
        input_path: Path,
        output_path: Path,
        mode: ProcessMode = ProcessMode.MOVE,
        workers: int = 4,
        log_file_path: Optional[Path] = None,
        dry_run: bool = False,
        verbose: bool = False,
        storage: Optional[StorageEffects] = None,
        tui: Optional[CleanTUI] = None,
        hasher: Optional[RomHasher] = None,
    ) -> None:
        """Initialize the CleanOrchestrator.

        Args:
            dat_path: Path to the DAT catalog.
            input_path: Directory scanned for ROMs.
            output_path: Root of the "new" and "checked" areas.
            mode: ProcessMode for the run. Defaults to MOVE.
            workers: Hashing threads. Must be at least 1.
            log_file_path: Optional audit log path.
            dry_run: If True, no file is moved, copied or deleted.
            verbose: If True, print each file's outcome.
            storage: Storage backend. Defaults to LocalStorage(dry_run).
            tui: Console presenter. Defaults to a new CleanTUI.
            hasher: ROM hasher. Defaults to a new RomHasher.

        Raises:
            ValueError: If workers is less than 1.
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")

        self.dat_path = dat_path
        self.input_path = input_path
        self.output_path = output_path
        self.mode = mode
        self.workers = workers
        self.log_file_path = log_file_path
        self.dry_run = dry_run
        self.verbose = verbose

        self._storage = storage if storage is not None else LocalStorage(dry_run=dry_run)
        self._tui = tui if tui is not None else CleanTUI()
        self._hasher = hasher if hasher is not None else RomHasher()
        self._executor = DispositionExecutor(self._storage, output_path, mode)
        self._seen = SeenHashRegistry()

        self._errors: List[str] = []

    def preflight(self) -> None:
        """Check the conditions that must hold before any file is touched.

        Raises:
            CatalogNotFound: If the DAT file does not exist.
            InputDirectoryNotFound: If the input directory is missing.
        """
        if not self.dat_path.is_file():
            raise CatalogNotFound(self.dat_path)
        if not self.input_path.is_dir():
            raise InputDirectoryNotFound(self.input_path)

    def run(self) -> CleanSummary:
        """Execute the cleaning run.

        Returns:
            CleanSummary with aggregated counters.

        Raises:
            CatalogNotFound: If the DAT file does not exist.
            InputDirectoryNotFound: If the input directory is missing.
        """
        start_time = time.time()
        self._errors.clear()

        # Phase 1: Pre-flight
        self.preflight()

        # Phase 2: Catalog and output areas
        catalog = load_catalog(self.dat_path)
        self._tui.display_catalog(catalog)
        self._executor.prepare()

        # Phase 3: Scan
        candidates = self._scan()

        audit = self._open_audit_log()
        try:
            if audit is not None:
                audit.log_header()
                audit.log_catalog(catalog, self.input_path, len(candidates))

            # Phases 4 and 5
            summary = self._process(catalog, candidates, audit, start_time)

            if audit is not None:
                audit.log_summary(summary)
                if self.verbose:
                    self._tui.console.print(f"[dim]Log file: {escape(str(audit.get_log_path()))}[/dim]")
        finally:
            if audit is not None:
                audit.__exit__(None, None, None)

        return summary

    def _open_audit_log(self) -> Optional[CleanLogger]:
        """Open the audit log, or return None if it is disabled or unwritable."""
        if self.log_file_path is None:
            return None
        try:
            audit = CleanLogger(self.log_file_path, mode=self.mode, dry_run=self.dry_run)
            return audit.__enter__()
        except OSError as e:
            print(f"Warning: Could not create log file: {e}", file=sys.stderr)
            return None

    def _scan(self) -> List[CandidateFile]:
        """Walk the input directory, skipping the output areas."""
        scanner = RomScanner(exclude_dirs=[self._executor.new_dir, self._executor.checked_dir])
        candidates = scanner.scan(self.input_path)
        self._errors.extend(scanner.get_errors())
        logger.info(f"Found {len(candidates)} candidate files in {self.input_path}")
        return candidates

    def _process(
        self,
        catalog: DatCatalog,
        candidates: List[CandidateFile],
        audit: Optional[CleanLogger],
        start_time: float,
    ) -> CleanSummary:
        """Phases 4 and 5: hash, classify, dispose and summarize."""
        summary = CleanSummary(catalog_entries=len(catalog), dry_run=self.dry_run)

        progress, callback = self._tui.create_progress_callback(total_files=len(candidates))
        try:
            with progress:
                for index, candidate in enumerate(self._hash_all(candidates)):
                    outcome, duplicate = self._dispose(candidate, catalog)
                    self._record(summary, outcome, duplicate)
                    if audit is not None:
                        audit.log_outcome(outcome)
                    if self.verbose:
                        self._tui.display_outcome(outcome)
                    callback(index + 1)
        except KeyboardInterrupt:
            summary.interrupted = True
            self._tui.console.print("\n[yellow]Run interrupted by user.[/yellow]")

        summary.errors = self._errors + summary.errors
        summary.duration_seconds = time.time() - start_time
        self._tui.display_summary(summary)
        return summary

    def _hash_all(self, candidates: List[CandidateFile]) -> Iterator[CandidateFile]:
        """Hash candidates on the thread pool, yielding them in input order."""
        if self.workers == 1:
            for candidate in candidates:
                yield self._hash_one(candidate)
            return

        pool = ThreadPoolExecutor(max_workers=self.workers)
        try:
            yield from pool.map(self._hash_one, candidates)
        finally:
            # Pending hashes are dropped when the consumer stops early
            pool.shutdown(wait=True, cancel_futures=True)

    def _hash_one(self, candidate: CandidateFile) -> CandidateFile:
        try:
            candidate.computed_hash = self._hasher.hash_file(candidate.path)
        except Exception as e:
            logger.warning(f"Unexpected error hashing {candidate.path}: {e!r}")
            candidate.computed_hash = None
            candidate.hash_error = f"Could not hash {candidate.path}: {e}"
            return candidate
        if candidate.computed_hash is None:
            candidate.hash_error = self._hasher.error_for(candidate.path)
        return candidate

    def _dispose(self, candidate: CandidateFile, catalog: DatCatalog) -> Tuple[FileOutcome, bool]:
        """Classify and dispose one hashed file.

        Returns:
            The outcome and whether the file was a duplicate.
        """
        if candidate.computed_hash is None:
            reason = candidate.hash_error or f"Could not hash {candidate.path}"
            return self._error_outcome(candidate, reason), False

        try:
            classification = classify(candidate, catalog, self._seen)
            outcome = self._executor.execute(candidate, classification)
        except Exception as e:
            logger.warning(f"Unexpected error processing {candidate.path}: {e!r}")
            return self._error_outcome(candidate, f"Error processing {candidate.path}: {e}"), False

        logger.info(f"{outcome.file_name} >> {outcome.result.label}")
        duplicate = (
            classification.disposition is Disposition.DUPLICATE
            and outcome.result is not ProcessResult.ERROR
        )
        return outcome, duplicate

    def _error_outcome(self, candidate: CandidateFile, message: str) -> FileOutcome:
        return FileOutcome(
            file_name=candidate.display_name,
            result=ProcessResult.ERROR,
            source=candidate.path,
            error=message,
        )

    def _record(self, summary: CleanSummary, outcome: FileOutcome, duplicate: bool) -> None:
        summary.files_processed += 1
        if outcome.result in (ProcessResult.OK, ProcessResult.COPIED):
            summary.unique += 1
        elif outcome.result is ProcessResult.NOT_IN_DAT:
            summary.not_in_dat += 1
        elif outcome.result is ProcessResult.ERROR:
            summary.errors.append(outcome.error or f"Error processing {outcome.source}")

        if outcome.result is ProcessResult.DELETED:
            summary.deleted += 1
        if duplicate:
            summary.duplicates += 1

    @property
    def seen_hashes(self) -> SeenHashRegistry:
        """The run's registry of claimed hashes."""
        return self._seen

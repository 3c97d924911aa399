"""
Disposition executor for the ROM cleaner.

Maps a (classification, mode) pair onto one filesystem action and a
ProcessResult:

    Classification   MOVE                     BACKUP                   PURGE
    UNKNOWN          move -> new, NOT_IN_DAT  copy -> new, NOT_IN_DAT  delete, DELETED
    FIRST_OCCURRENCE move -> checked, OK      copy -> checked, COPIED  move -> checked, OK
    DUPLICATE        leave, ALREADY_EXISTS    leave, ALREADY_EXISTS    delete, DELETED
"""

import logging
from pathlib import Path
from typing import List

from romcleaner.models import (
    CandidateFile,
    Classification,
    Disposition,
    FileOutcome,
    ProcessMode,
    ProcessResult,
)

from .storage import StorageEffects

logger = logging.getLogger(__name__)

NEW_DIR_NAME = "new"
CHECKED_DIR_NAME = "checked"


class DispositionExecutor:
    """
    Applies the run's ProcessMode to classified files.

    Never raises for a single file: any OSError from the storage backend is
    logged and reported as an ERROR outcome so the run can continue.
    """

    def __init__(self, storage: StorageEffects, output_root: Path, mode: ProcessMode) -> None:
        """
        Parameters:
            storage (StorageEffects): Backend that performs the filesystem effects.
            output_root (Path): Root under which the "new" and "checked" areas live.
            mode (ProcessMode): Policy applied to every file of the run.
        """
        self.storage = storage
        self.mode = mode
        self.new_dir = output_root / NEW_DIR_NAME
        self.checked_dir = output_root / CHECKED_DIR_NAME

    def required_dirs(self) -> List[Path]:
        """Output areas the current mode writes into."""
        if self.mode is ProcessMode.PURGE:
            return [self.checked_dir]
        return [self.new_dir, self.checked_dir]

    def prepare(self) -> None:
        """Create the output areas for the mode. Idempotent."""
        for directory in self.required_dirs():
            self.storage.create_dir(directory)

    def execute(self, candidate: CandidateFile, classification: Classification) -> FileOutcome:
        """
        Perform the action for one file.

        Parameters:
            candidate (CandidateFile): The file being processed.
            classification (Classification): Decision from the classifier.

        Returns:
            FileOutcome: Result, destination and matched catalog name.
        """
        entry = classification.catalog_entry
        outcome = FileOutcome(
            file_name=candidate.display_name,
            result=ProcessResult.ERROR,
            source=candidate.path,
            catalog_name=entry.name if entry is not None else None,
        )

        try:
            if classification.disposition is Disposition.UNKNOWN:
                self._handle_unknown(candidate, outcome)
            elif classification.disposition is Disposition.FIRST_OCCURRENCE:
                self._handle_first(candidate, outcome)
            else:
                self._handle_duplicate(candidate, outcome)
        except OSError as e:
            outcome.result = ProcessResult.ERROR
            outcome.destination = None
            outcome.error = f"Error processing {candidate.path}: {e}"
            logger.warning(outcome.error)

        return outcome

    def _handle_unknown(self, candidate: CandidateFile, outcome: FileOutcome) -> None:
        if self.mode is ProcessMode.PURGE:
            self.storage.delete(candidate.path)
            outcome.result = ProcessResult.DELETED
            return

        dest = self.unique_destination(self.new_dir / candidate.path.name)
        if self.mode is ProcessMode.MOVE:
            self.storage.move(candidate.path, dest)
        else:
            self.storage.copy(candidate.path, dest)
        outcome.destination = dest
        outcome.result = ProcessResult.NOT_IN_DAT

    def _handle_first(self, candidate: CandidateFile, outcome: FileOutcome) -> None:
        dest = self.unique_destination(self.checked_dir / candidate.path.name)
        if self.mode is ProcessMode.BACKUP:
            self.storage.copy(candidate.path, dest)
            outcome.result = ProcessResult.COPIED
        else:
            self.storage.move(candidate.path, dest)
            outcome.result = ProcessResult.OK
        outcome.destination = dest

    def _handle_duplicate(self, candidate: CandidateFile, outcome: FileOutcome) -> None:
        if self.mode is ProcessMode.PURGE:
            self.storage.delete(candidate.path)
            outcome.result = ProcessResult.DELETED
            return
        outcome.result = ProcessResult.ALREADY_EXISTS

    def unique_destination(self, dest: Path) -> Path:
        """
        Return ``dest`` or, if it is taken, the first free ``<stem>_<n><suffix>``.
        """
        if not self.storage.exists(dest):
            return dest

        counter = 1
        while True:
            candidate = dest.with_name(f"{dest.stem}_{counter}{dest.suffix}")
            if not self.storage.exists(candidate):
                return candidate
            counter += 1

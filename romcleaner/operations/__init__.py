"""File operations package for romcleaner.

This package performs the filesystem side of a cleaning run:

- StorageEffects / LocalStorage: move, copy, delete, exists and create_dir,
  with a dry-run mode that leaves the disk untouched.
- DispositionExecutor: Applies the run's ProcessMode to each classified file
  and reports a FileOutcome.

Example:
    >>> from romcleaner.operations import DispositionExecutor, LocalStorage
    >>> from romcleaner.models import ProcessMode
    >>> executor = DispositionExecutor(LocalStorage(), Path("/roms/out"), ProcessMode.MOVE)
    >>> executor.prepare()
    >>> outcome = executor.execute(candidate, classification)
"""

from .disposition import CHECKED_DIR_NAME, NEW_DIR_NAME, DispositionExecutor
from .storage import LocalStorage, StorageEffects

__all__ = [
    "CHECKED_DIR_NAME",
    "NEW_DIR_NAME",
    "DispositionExecutor",
    "LocalStorage",
    "StorageEffects",
]

"""Exception hierarchy for the ROM cleaner.

Only pre-flight errors stop a run. Everything raised while handling a single
file is caught at the file boundary and reported through the run summary.
"""

from pathlib import Path


class RomCleanerError(Exception):
    """Base class for all ROM cleaner errors."""


class PreflightError(RomCleanerError):
    """A condition detected before any file is touched that aborts the run."""

    exit_code = 1


class CatalogNotFound(PreflightError):
    """The DAT catalog file does not exist."""

    exit_code = 2

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"DAT file not found: {path}")


class InputDirectoryNotFound(PreflightError):
    """The directory to scan for ROMs does not exist or is not a directory."""

    exit_code = 3

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Input directory not found: {path}")


class NoQualifyingMember(RomCleanerError):
    """A zip archive holds no member that looks like a ROM payload."""

    def __init__(self, zip_path: Path) -> None:
        self.zip_path = zip_path
        super().__init__(f"No ROM member found in archive: {zip_path}")


class SettingsError(RomCleanerError):
    """The settings file could not be parsed."""

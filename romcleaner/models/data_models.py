"""
Core data models for the ROM cleaner.

This module contains the following dataclasses:
- CatalogEntry: One ROM record from a DAT catalog
- DatCatalog: A parsed catalog with its detected dialect and system name
- CandidateFile: A file discovered during the directory walk
- Classification: The classifier's decision for a candidate file
- FileOutcome: The per-file result emitted by the disposition executor
- CleanSummary: Aggregate counters for a whole run
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .process_enums import DatDialect, Disposition, ProcessResult


@dataclass(frozen=True)
class CatalogEntry:
    """One ROM record from a DAT catalog, keyed by its CRC."""
    name: str                         # ROM name (falls back to the game name)
    crc: str                          # 8 upper-case hex digits
    size: Optional[int] = None        # Declared size in bytes, if any


@dataclass
class DatCatalog:
    """A parsed DAT catalog."""
    entries: Dict[str, CatalogEntry]  # Upper-case CRC -> entry
    dialect: DatDialect               # Detected encoding
    source_path: Path                 # File the catalog was read from
    system_name: Optional[str] = None # Header name (e.g. "Sega - Master System")

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, crc: object) -> bool:
        return isinstance(crc, str) and crc.upper() in self.entries

    def lookup(self, crc: Optional[str]) -> Optional[CatalogEntry]:
        """Case-insensitive lookup of a CRC string."""
        if not crc:
            return None
        return self.entries.get(crc.upper())


@dataclass
class CandidateFile:
    """A file found under the input root that may be a ROM."""
    path: Path                        # Full path to the file
    display_name: str                 # File name shown in logs
    size_bytes: int                   # Size on disk
    computed_hash: Optional[str] = None  # Canonical CRC, None if hashing failed
    hash_error: Optional[str] = None     # Why hashing failed, when it did


@dataclass(frozen=True)
class Classification:
    """Classifier decision for one candidate file."""
    disposition: Disposition
    catalog_entry: Optional[CatalogEntry] = None


@dataclass
class FileOutcome:
    """Result of processing a single candidate file."""
    file_name: str                    # Display name of the source file
    result: ProcessResult             # Outcome state
    source: Path                      # Original location
    catalog_name: Optional[str] = None    # Matched catalog entry name
    destination: Optional[Path] = None    # Where the file went, if anywhere
    error: Optional[str] = None           # Error message for ERROR outcomes


@dataclass
class CleanSummary:
    """Aggregate counters for a cleaning run returned by CleanOrchestrator."""
    files_processed: int = 0          # Files that received an outcome
    unique: int = 0                   # First occurrences (OK / COPIED)
    duplicates: int = 0               # Repeat matches (ALREADY_EXISTS or purged)
    not_in_dat: int = 0               # Unknown files moved/copied to "new"
    deleted: int = 0                  # Files removed from disk
    catalog_entries: int = 0          # Entries loaded from the DAT
    errors: List[str] = field(default_factory=list)  # Per-file error messages
    duration_seconds: float = 0.0     # Wall-clock run time
    dry_run: bool = False             # Whether the filesystem was left untouched
    interrupted: bool = False         # Whether the run was interrupted by user

"""
Models package for the ROM cleaner.

This package provides convenient imports for all data models:
- ProcessMode, ProcessResult, Disposition, DatDialect: Enums
- CatalogEntry, DatCatalog: Catalog data
- CandidateFile: Discovered file
- Classification: Classifier decision
- FileOutcome: Per-file result
- CleanSummary: Run summary
"""

from .process_enums import DatDialect, Disposition, ProcessMode, ProcessResult
from .data_models import (
    CandidateFile,
    CatalogEntry,
    Classification,
    CleanSummary,
    DatCatalog,
    FileOutcome,
)

__all__ = [
    "DatDialect",
    "Disposition",
    "ProcessMode",
    "ProcessResult",
    "CandidateFile",
    "CatalogEntry",
    "Classification",
    "CleanSummary",
    "DatCatalog",
    "FileOutcome",
]

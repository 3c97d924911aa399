"""romcleaner - ROM identification and deduplication tool.

Identifies ROM files by the CRC32 of their content, checks them against a
DAT catalog, and sorts them into "checked" and "new" areas while filtering
out duplicates.
"""

__version__ = "1.0.0"

from .models import (
    CandidateFile,
    CatalogEntry,
    Classification,
    CleanSummary,
    DatCatalog,
    DatDialect,
    Disposition,
    FileOutcome,
    ProcessMode,
    ProcessResult,
)

__all__ = [
    "__version__",
    "CandidateFile",
    "CatalogEntry",
    "Classification",
    "CleanSummary",
    "DatCatalog",
    "DatDialect",
    "Disposition",
    "FileOutcome",
    "ProcessMode",
    "ProcessResult",
]


def main() -> None:
    """Entry point for the romcleaner CLI application.

    Imports and runs the Typer app from the romcleaner.cli module.
    """
    from romcleaner.cli import app
    app()

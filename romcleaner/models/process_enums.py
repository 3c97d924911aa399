"""
Enumerations driving the ROM disposition state machine.

- ProcessMode: the run-wide policy chosen by the user (move, backup, purge)
- Disposition: what the classifier decided about a single file
- ProcessResult: the per-file outcome reported to counters and the audit log
- DatDialect: the two textual encodings a DAT catalog may use
"""

from enum import Enum


class ProcessMode(Enum):
    """Run-wide disposition policy."""
    MOVE = "move"        # Relocate files into the output areas
    BACKUP = "backup"    # Copy files into the output areas, leave sources alone
    PURGE = "purge"      # Keep first occurrences, delete everything else


class Disposition(Enum):
    """Classifier decision for a single candidate file."""
    UNKNOWN = "unknown"                      # Hash not present in the catalog
    FIRST_OCCURRENCE = "first_occurrence"    # First file of this run matching the hash
    DUPLICATE = "duplicate"                  # Hash already claimed earlier in this run


class ProcessResult(Enum):
    """Per-file outcome, used for counting and audit logging only."""
    OK = "ok"
    ALREADY_EXISTS = "already exists"
    COPIED = "copied"
    DELETED = "deleted"
    NOT_IN_DAT = "not in DAT"
    ERROR = "error"

    @property
    def label(self) -> str:
        """Audit log label for this result."""
        return self.value


class DatDialect(Enum):
    """Textual encoding of a DAT catalog."""
    XML = "xml"
    CLRMAMEPRO = "clrmamepro"

"""Hash classification against a DAT catalog.

``classify`` decides whether a candidate file is unknown to the catalog, the
first file of the run matching a catalog entry, or a repeat of an entry that
was already claimed. The "already claimed" state lives in a
SeenHashRegistry, whose check-and-insert is atomic so that two files with the
same hash can never both be first.
"""

import threading
from typing import Iterator, Mapping, Optional, Set, Union

from romcleaner.hashing.crc32 import EMPTY_HASH
from romcleaner.models import CandidateFile, CatalogEntry, Classification, DatCatalog, Disposition


class SeenHashRegistry:
    """Lock-guarded set of hashes already assigned a first occurrence.

    The registry only grows. It is scoped to one run and never persisted.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, crc: str) -> bool:
        """Mark a hash as seen.

        Returns:
            True if this call inserted the hash (first writer), False if it
            was already present.
        """
        key = crc.upper()
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def __contains__(self, crc: object) -> bool:
        if not isinstance(crc, str):
            return False
        with self._lock:
            return crc.upper() in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._seen))


CatalogLike = Union[DatCatalog, Mapping[str, CatalogEntry]]


def _lookup(catalog: CatalogLike, crc: str) -> Optional[CatalogEntry]:
    if isinstance(catalog, DatCatalog):
        return catalog.lookup(crc)
    return catalog.get(crc.upper())


def classify(
    candidate: CandidateFile, catalog: CatalogLike, seen_hashes: SeenHashRegistry
) -> Classification:
    """Classify one hashed candidate file.

    Args:
        candidate: File whose ``computed_hash`` has been populated.
        catalog: DatCatalog or a plain mapping of upper-case CRC to entry.
        seen_hashes: Run-wide registry of claimed hashes. Updated in place
            when the file is a first occurrence.

    Returns:
        UNKNOWN when the hash is missing, is the no-match hash, or is not in
        the catalog; FIRST_OCCURRENCE for the first claim of a catalog hash;
        DUPLICATE for every later file with the same hash.
    """
    crc = candidate.computed_hash
    if not crc or crc == EMPTY_HASH:
        return Classification(Disposition.UNKNOWN)

    entry = _lookup(catalog, crc)
    if entry is None:
        return Classification(Disposition.UNKNOWN)

    if seen_hashes.claim(crc):
        return Classification(Disposition.FIRST_OCCURRENCE, entry)
    return Classification(Disposition.DUPLICATE, entry)

"""ROM hashing utility with caching support.

This module provides the RomHasher class for computing the canonical CRC32 of
a ROM file. Plain files are hashed whole; zip archives are opened and the ROM
member inside them is hashed instead. Results are cached in memory keyed by
(path, modification time).

Example:
    >>> from romcleaner.hashing import RomHasher
    >>> hasher = RomHasher()
    >>> crc = hasher.hash_file(Path("/roms/Alex Kidd.zip"))
    >>> if crc:
    ...     print(f"CRC32: {crc}")
"""

import logging
import threading
import zipfile
import zlib
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from romcleaner.errors import NoQualifyingMember
from romcleaner.scanning.rom_scanner import ROM_EXTENSIONS

from .archive_reader import DEFAULT_MEMBER_EXTENSIONS, open_rom_member
from .crc32 import EMPTY_HASH, Crc32

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".zip"

# Anything the scanner would accept as a bare ROM may also sit inside an archive
MEMBER_EXTENSIONS: FrozenSet[str] = frozenset(
    (DEFAULT_MEMBER_EXTENSIONS | ROM_EXTENSIONS) - {ARCHIVE_EXTENSION}
)


class RomHasher:
    """Computes canonical CRC32 hashes of ROM files with caching support.

    The hasher keeps an in-memory cache keyed by (resolved path, mtime) so a
    file touched twice in one session is read once, while a modified file is
    re-hashed automatically. Each call uses its own Crc32 engine, and the
    cache is lock-guarded, so one hasher may be shared by a thread pool.

    Errors never propagate out of ``hash_file``: they are recorded and the
    method returns None. An archive without a ROM member is not an error; it
    hashes to ``EMPTY_HASH``.

    Attributes:
        _cache: Dictionary mapping (path, mtime) tuples to hex digests.
        _errors: List of error messages encountered during hashing operations.
        _cache_hits: Counter for cache hits.
        _cache_misses: Counter for cache misses.
    """

    def __init__(self, member_extensions: Optional[Iterable[str]] = None) -> None:
        """Initialize the RomHasher with an empty cache.

        Args:
            member_extensions: Extensions that identify the ROM member inside
                an archive. Defaults to MEMBER_EXTENSIONS.
        """
        self._member_extensions = frozenset(
            ext.lower() for ext in (member_extensions or MEMBER_EXTENSIONS)
        )
        self._cache: Dict[Tuple[Path, float], str] = {}
        self._errors: List[str] = []
        self._failures: Dict[Path, str] = {}
        self._cache_hits: int = 0
        self._cache_misses: int = 0
        self._lock = threading.Lock()

    def hash_file(self, file_path: Path) -> Optional[str]:
        """Compute the canonical CRC32 of a ROM file or zipped ROM.

        Args:
            file_path: Path to the file to hash.

        Returns:
            8 upper-case hex digits, ``EMPTY_HASH`` for an archive with no ROM
            member, or None if the file could not be read.
        """
        try:
            resolved_path = file_path.resolve()

            if not resolved_path.is_file():
                self._record_error(f"Not a file: {file_path}", file_path)
                return None

            cache_key = (resolved_path, resolved_path.stat().st_mtime)
            with self._lock:
                if cache_key in self._cache:
                    self._cache_hits += 1
                    self._failures.pop(file_path, None)
                    return self._cache[cache_key]
                self._cache_misses += 1

            hash_value = self._compute_hash(resolved_path)

            with self._lock:
                self._cache[cache_key] = hash_value
                self._failures.pop(file_path, None)
            return hash_value

        except PermissionError:
            self._record_error(f"Permission denied: {file_path}", file_path)
            return None
        except FileNotFoundError:
            self._record_error(f"File not found: {file_path}", file_path)
            return None
        except zipfile.BadZipFile as e:
            self._record_error(f"Corrupt archive {file_path}: {e}", file_path)
            return None
        except (zlib.error, EOFError, ValueError, RuntimeError, NotImplementedError) as e:
            # Encrypted or truncated members, bad member headers, unsupported compression
            self._record_error(f"Cannot read archive member in {file_path}: {e}", file_path)
            return None
        except OSError as e:
            self._record_error(f"OS error reading {file_path}: {e}", file_path)
            return None

    def _compute_hash(self, file_path: Path) -> str:
        """Hash a resolved path, dispatching on the archive extension."""
        crc = Crc32()

        if file_path.suffix.lower() == ARCHIVE_EXTENSION:
            try:
                with open_rom_member(file_path, self._member_extensions) as stream:
                    crc.append(stream)
            except NoQualifyingMember:
                logger.debug(f"No ROM member in archive: {file_path.name}")
                return EMPTY_HASH
            return crc.hexdigest()

        with open(file_path, "rb") as f:
            crc.append(f)
        return crc.hexdigest()

    def _record_error(self, message: str, file_path: Path) -> None:
        logger.warning(message)
        with self._lock:
            self._errors.append(message)
            self._failures[file_path] = message

    def clear_cache(self) -> None:
        """Clear the internal hash cache and reset the hit/miss counters."""
        with self._lock:
            self._cache.clear()
            self._cache_hits = 0
            self._cache_misses = 0

    def get_cache_stats(self) -> Dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with 'size', 'hits' and 'misses'.
        """
        with self._lock:
            return {
                "size": len(self._cache),
                "hits": self._cache_hits,
                "misses": self._cache_misses,
            }

    def get_errors(self) -> List[str]:
        """Get list of errors encountered during hashing operations."""
        with self._lock:
            return self._errors.copy()

    def error_for(self, file_path: Path) -> Optional[str]:
        """Return why the last ``hash_file`` call for ``file_path`` failed, if it did."""
        with self._lock:
            return self._failures.get(file_path)

    def clear_errors(self) -> None:
        """Clear the list of accumulated errors."""
        with self._lock:
            self._errors.clear()
            self._failures.clear()

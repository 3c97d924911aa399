"""ROM discovery for the cleaner.

This module provides the RomScanner class, which walks an input directory
recursively and collects every file whose extension is on the ROM allow-list.

Example:
    >>> from romcleaner.scanning import RomScanner
    >>> scanner = RomScanner()
    >>> candidates = scanner.scan(Path("/roms/old"))
    >>> for candidate in candidates:
    ...     print(f"{candidate.display_name}: {candidate.size_bytes} bytes")
"""

import os
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from romcleaner.models.data_models import CandidateFile

# File extensions considered ROMs (or zipped ROMs) during the walk
ROM_EXTENSIONS: FrozenSet[str] = frozenset({
    ".zip", ".rom", ".sms", ".gg", ".bin", ".md", ".gen", ".smd",
    ".nes", ".fds", ".gb", ".gbc", ".gba", ".n64", ".z64", ".v64",
    ".sg", ".col",
})


class RomScanner:
    """Walks a directory tree and collects ROM candidates.

    Directories and files are visited in sorted order so repeated runs over
    the same tree see files in the same order. Directory symlinks are not
    followed, and any directory listed in ``exclude_dirs`` (typically the
    output areas when they live under the input root) is pruned.

    Attributes:
        extensions: Lower-case extensions accepted by the scanner.
        _errors: List of error messages encountered during scanning.

    Example:
        >>> scanner = RomScanner(exclude_dirs=[Path("/roms/old/checked")])
        >>> candidates = scanner.scan(Path("/roms/old"))
    """

    def __init__(
        self,
        extensions: Optional[Iterable[str]] = None,
        exclude_dirs: Optional[Iterable[Path]] = None,
    ) -> None:
        """Initialize the RomScanner.

        Args:
            extensions: Extensions to accept. Defaults to ROM_EXTENSIONS.
            exclude_dirs: Directories whose contents must not be scanned.
        """
        self.extensions = frozenset(ext.lower() for ext in (extensions or ROM_EXTENSIONS))
        self._exclude_dirs: Set[Path] = set()
        for directory in exclude_dirs or ():
            self._exclude_dirs.add(Path(directory).resolve())
        self._errors: List[str] = []

    def is_rom_file(self, file_name: str) -> bool:
        """Return True if the file name carries an accepted extension."""
        return Path(file_name).suffix.lower() in self.extensions

    def scan(self, root_path: Path) -> List[CandidateFile]:
        """Collect ROM candidates under a directory.

        Args:
            root_path: Directory to walk recursively.

        Returns:
            CandidateFile instances in walk order. Files that cannot be
            stat'ed are skipped with an error recorded. A missing root yields
            an empty list and an error.
        """
        candidates: List[CandidateFile] = []

        try:
            resolved_path = root_path.resolve()

            if not resolved_path.exists():
                self._errors.append(f"Folder not found: {root_path}")
                return candidates

            if not resolved_path.is_dir():
                self._errors.append(f"Not a directory: {root_path}")
                return candidates

            # Track visited directories by (device, inode) to detect cycles
            visited_dirs: Set[Tuple[int, int]] = set()
            root_stat = resolved_path.stat()
            visited_dirs.add((root_stat.st_dev, root_stat.st_ino))

            for dirpath, dirnames, filenames in os.walk(resolved_path, followlinks=False):
                current = Path(dirpath)

                kept_dirs = []
                for dirname in sorted(dirnames):
                    dir_full_path = current / dirname
                    if dir_full_path in self._exclude_dirs or dir_full_path.is_symlink():
                        continue
                    try:
                        dir_stat = dir_full_path.stat()
                    except OSError:
                        continue
                    dir_id = (dir_stat.st_dev, dir_stat.st_ino)
                    if dir_id in visited_dirs:
                        continue
                    visited_dirs.add(dir_id)
                    kept_dirs.append(dirname)
                dirnames[:] = kept_dirs

                for filename in sorted(filenames):
                    if not self.is_rom_file(filename):
                        continue

                    file_path = current / filename
                    try:
                        size = file_path.stat().st_size
                    except PermissionError:
                        self._errors.append(f"Permission denied: {file_path}")
                        continue
                    except OSError as e:
                        self._errors.append(f"Error accessing {file_path}: {e}")
                        continue

                    candidates.append(
                        CandidateFile(path=file_path, display_name=filename, size_bytes=size)
                    )

        except PermissionError:
            self._errors.append(f"Permission denied accessing folder: {root_path}")
        except OSError as e:
            self._errors.append(f"Error scanning folder {root_path}: {e}")

        return candidates

    def get_errors(self) -> List[str]:
        """Get list of errors encountered during scanning operations."""
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the list of accumulated errors."""
        self._errors.clear()

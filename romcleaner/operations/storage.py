"""
Filesystem effects used by the disposition executor.

StorageEffects is the full set of mutations the cleaner may perform. The
decision logic only talks to this interface, so it can be exercised against
an in-memory fake; LocalStorage is the real-disk implementation.
"""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Set

logger = logging.getLogger(__name__)


class StorageEffects(ABC):
    """Capability set for moving, copying and deleting ROM files."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return True if something already occupies ``path``."""

    @abstractmethod
    def create_dir(self, path: Path) -> None:
        """Create a directory and its parents; no-op if it exists."""

    @abstractmethod
    def move(self, source: Path, dest: Path) -> None:
        """Move ``source`` to ``dest``."""

    @abstractmethod
    def copy(self, source: Path, dest: Path) -> None:
        """Copy ``source`` to ``dest``, leaving the source in place."""

    @abstractmethod
    def delete(self, path: Path) -> None:
        """Remove a file."""


class LocalStorage(StorageEffects):
    """
    Real-disk storage backend.

    In dry-run mode nothing on disk changes. Intended actions are logged at
    DEBUG, and destinations that would have been written are remembered so
    that ``exists`` keeps answering as if they had been, which keeps
    collision suffixing identical to a live run.
    """

    def __init__(self, dry_run: bool = False) -> None:
        """
        Parameters:
            dry_run (bool): If True, simulate operations without making filesystem changes.
        """
        self.dry_run = dry_run
        self._planned: Set[Path] = set()
        self._removed: Set[Path] = set()

    def exists(self, path: Path) -> bool:
        if path in self._planned:
            return True
        if path in self._removed:
            return False
        # A dangling symlink still occupies the name
        return os.path.lexists(path)

    def create_dir(self, path: Path) -> None:
        if self.dry_run:
            logger.debug(f"[DRY RUN] Would create directory: {path}")
            return
        path.mkdir(parents=True, exist_ok=True)

    def move(self, source: Path, dest: Path) -> None:
        if self.dry_run:
            logger.debug(f"[DRY RUN] Would move: {source} -> {dest}")
            self._planned.add(dest)
            self._removed.add(source)
            return
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(dest))

    def copy(self, source: Path, dest: Path) -> None:
        if self.dry_run:
            logger.debug(f"[DRY RUN] Would copy: {source} -> {dest}")
            self._planned.add(dest)
            return
        dest.parent.mkdir(parents=True, exist_ok=True)
        # Copy file preserving metadata
        shutil.copy2(source, dest)

    def delete(self, path: Path) -> None:
        if self.dry_run:
            logger.debug(f"[DRY RUN] Would delete: {path}")
            self._removed.add(path)
            return
        path.unlink()

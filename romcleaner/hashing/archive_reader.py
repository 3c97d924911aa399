"""Zip archive member selection.

A ROM distributed as a zip usually carries the image plus a readme or an .nfo
file. This module picks the one member whose bytes should be hashed.
"""

import zipfile
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Iterable, List, Optional

from romcleaner.errors import NoQualifyingMember

# Extensions that are documentation, never a ROM payload
NON_ROM_EXTENSIONS = frozenset({".txt", ".nfo", ".diz"})

# In-archive ROM extensions tried first
DEFAULT_MEMBER_EXTENSIONS = frozenset({".sms", ".rom", ".bin", ".sg", ".col", ".gg"})


def _member_extension(info: zipfile.ZipInfo) -> str:
    return PurePosixPath(info.filename).suffix.lower()


def select_rom_member(
    archive: zipfile.ZipFile, candidate_extensions: Iterable[str]
) -> Optional[zipfile.ZipInfo]:
    """Pick the member of an open archive that holds the ROM payload.

    The first non-empty member with a candidate extension wins. Failing that,
    the first non-empty member that is not documentation is used.

    Args:
        archive: An open ZipFile.
        candidate_extensions: Extensions (with leading dot, any case) that
            identify a ROM member.

    Returns:
        The selected ZipInfo, or None if no member qualifies.
    """
    extensions = {ext.lower() for ext in candidate_extensions}
    members: List[zipfile.ZipInfo] = [
        info for info in archive.infolist() if not info.is_dir() and info.file_size > 0
    ]

    for info in members:
        if _member_extension(info) in extensions:
            return info

    for info in members:
        if _member_extension(info) not in NON_ROM_EXTENSIONS:
            return info

    return None


class _MemberStream:
    """Read-only stream over one archive member that also closes the archive."""

    def __init__(self, archive: zipfile.ZipFile, member: zipfile.ZipInfo) -> None:
        self._archive = archive
        self._stream = archive.open(member, "r")
        self.name = member.filename

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def close(self) -> None:
        try:
            self._stream.close()
        finally:
            self._archive.close()

    def __enter__(self) -> "_MemberStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def open_rom_member(
    zip_path: Path, candidate_extensions: Iterable[str] = DEFAULT_MEMBER_EXTENSIONS
) -> BinaryIO:
    """Open the ROM payload inside a zip archive for reading.

    Args:
        zip_path: Path to the zip archive.
        candidate_extensions: Extensions that identify a ROM member.

    Returns:
        A binary stream over the selected member. Closing it closes the
        archive as well; use it as a context manager.

    Raises:
        NoQualifyingMember: If the archive holds nothing that looks like a ROM.
        zipfile.BadZipFile: If the file is not a readable zip archive.
        OSError: If the archive cannot be opened.
    """
    archive = zipfile.ZipFile(zip_path, "r")
    try:
        member = select_rom_member(archive, candidate_extensions)
        if member is None:
            raise NoQualifyingMember(zip_path)
        return _MemberStream(archive, member)  # type: ignore[return-value]
    except BaseException:
        archive.close()
        raise

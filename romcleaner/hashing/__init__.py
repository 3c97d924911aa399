"""ROM hashing package for romcleaner.

This package computes the CRC32 fingerprints used to identify ROMs:

- Crc32: Streaming CRC-32/ISO-HDLC engine with big-endian digests.
- open_rom_member / select_rom_member: Pick the ROM payload inside a zip.
- RomHasher: Hashes a plain ROM or a zipped ROM, with caching.

Example:
    >>> from romcleaner.hashing import RomHasher
    >>> hasher = RomHasher()
    >>> hasher.hash_file(Path("/roms/game.sms"))
    'CBF43926'
"""

from .archive_reader import NON_ROM_EXTENSIONS, open_rom_member, select_rom_member
from .crc32 import EMPTY_HASH, Crc32
from .rom_hasher import RomHasher

__all__ = [
    "Crc32",
    "EMPTY_HASH",
    "NON_ROM_EXTENSIONS",
    "RomHasher",
    "open_rom_member",
    "select_rom_member",
]

"""Streaming CRC-32/ISO-HDLC checksum engine.

This module provides the Crc32 class, a resettable streaming CRC32 over any
binary stream. The checksum is the same function zip archives and DAT
catalogs use (reflected polynomial 0xEDB88320, register seeded with
0xFFFFFFFF, result complemented).

Digests are exposed big-endian: ``finish()`` returns the most significant
byte first and ``hexdigest()`` renders those bytes as 8 upper-case hex digits.
That rendering is the canonical form compared against catalog hashes.

Example:
    >>> from romcleaner.hashing import Crc32
    >>> crc = Crc32()
    >>> crc.update(b"123456789")
    >>> crc.hexdigest()
    'CBF43926'
"""

import binascii
import struct
from typing import BinaryIO, List

# Reflected CRC-32/ISO-HDLC polynomial
POLYNOMIAL = 0xEDB88320

# Register seed; also the XOR mask applied to produce the digest
INITIAL_REGISTER = 0xFFFFFFFF

# Buffer size for chunked stream reading (8KB)
CHUNK_SIZE = 8192

# Canonical hash of "nothing to hash"
EMPTY_HASH = "00000000"


def build_table(polynomial: int = POLYNOMIAL) -> List[int]:
    """Precompute the 256-entry lookup table for a reflected polynomial."""
    table = []
    for i in range(256):
        entry = i
        for _ in range(8):
            if entry & 1:
                entry = (entry >> 1) ^ polynomial
            else:
                entry >>= 1
        table.append(entry)
    return table


CRC32_TABLE = build_table()


def update_register(register: int, data: bytes) -> int:
    """Feed bytes through the table-driven register update."""
    table = CRC32_TABLE
    for byte in data:
        register = table[(register ^ byte) & 0xFF] ^ (register >> 8)
    return register


class Crc32:
    """Resettable streaming CRC32 engine.

    The engine keeps a single 32-bit register. ``append`` drains a stream into
    it, ``finish`` returns the digest and resets, so one instance can hash
    many files in turn. Instances are not shared between threads.

    Args:
        accelerated: When True (default) bytes are folded in with
            ``binascii.crc32``, which computes the same table-driven
            CRC-32/ISO-HDLC in C. When False the pure-Python table loop
            is used.
    """

    def __init__(self, accelerated: bool = True) -> None:
        self._accelerated = accelerated
        self._register = INITIAL_REGISTER

    def reset(self) -> None:
        """Reseed the register, discarding any bytes seen so far."""
        self._register = INITIAL_REGISTER

    def update(self, data: bytes) -> None:
        """Fold a block of bytes into the register."""
        if not data:
            return
        if self._accelerated:
            # binascii works on finalized values: un-complement in, re-complement out
            self._register = binascii.crc32(data, self._register ^ INITIAL_REGISTER) ^ INITIAL_REGISTER
        else:
            self._register = update_register(self._register, data)

    def append(self, stream: BinaryIO) -> None:
        """Consume a binary stream to exhaustion.

        Args:
            stream: Any object with a ``read(size)`` method returning bytes.

        Raises:
            OSError: Propagated unchanged from the underlying stream.
        """
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            self.update(chunk)

    @property
    def value(self) -> int:
        """The digest of the bytes seen so far, without resetting."""
        return self._register ^ INITIAL_REGISTER

    def finish(self) -> bytes:
        """Return the 4-byte big-endian digest and reset the register."""
        digest = struct.pack(">I", self.value)
        self.reset()
        return digest

    def hexdigest(self) -> str:
        """Return the canonical 8-digit upper-case hex digest and reset."""
        return self.finish().hex().upper()

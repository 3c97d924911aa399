"""ROM discovery package for romcleaner.

- RomScanner: Walks an input directory and collects ROM candidates filtered
  by the extension allow-list.

Example:
    >>> from romcleaner.scanning import RomScanner
    >>> candidates = RomScanner().scan(Path("/roms/old"))
"""

from .rom_scanner import ROM_EXTENSIONS, RomScanner

__all__ = ["ROM_EXTENSIONS", "RomScanner"]

"""DAT catalog package for romcleaner.

- load_catalog: Parse a DAT file into a DatCatalog (entries, dialect, system name).
- parse_dat: Parse a DAT file into a plain mapping of upper-case CRC to entry.
- detect_dialect, parse_xml_dat, parse_clrmamepro_dat: The individual steps.

Example:
    >>> from romcleaner.catalog import load_catalog
    >>> catalog = load_catalog(Path("games.dat"))
    >>> catalog.lookup("aed9aac4").name
    'Alex Kidd.sms'
"""

from .dat_parser import (
    detect_dialect,
    load_catalog,
    normalize_crc,
    parse_clrmamepro_dat,
    parse_dat,
    parse_xml_dat,
)

__all__ = [
    "detect_dialect",
    "load_catalog",
    "normalize_crc",
    "parse_clrmamepro_dat",
    "parse_dat",
    "parse_xml_dat",
]

"""DAT catalog parsing.

Two catalog dialects are in circulation:

XML (Logiqx style)::

    <?xml version="1.0"?>
    <datafile>
      <header><name>Sega - Master System</name></header>
      <game name="Alex Kidd">
        <rom name="Alex Kidd.sms" size="131072" crc="aed9aac4"/>
      </game>
    </datafile>

ClrMamePro plain text::

    clrmamepro (
        name "Sega - Master System"
    )
    game (
        name "Alex Kidd"
        rom ( name "Alex Kidd.sms" size 131072 crc aed9aac4 )
    )

``detect_dialect`` picks one, then ``parse_xml_dat`` or
``parse_clrmamepro_dat`` turns the text into the same mapping of upper-case
CRC to CatalogEntry. Malformed records are dropped; only a missing file is
an error.
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Optional

from romcleaner.errors import CatalogNotFound
from romcleaner.models import CatalogEntry, DatCatalog, DatDialect

logger = logging.getLogger(__name__)

# Leading keywords of ClrMamePro lines that never hold a ROM record
_HEADER_KEYWORDS = ("clrmamepro", "header", "emulator")

_ROM_TOKEN_PATTERN = re.compile(r"\brom\s*\(")
_NAME_PATTERN = re.compile(r'name\s+"([^"]+)"')
_CRC_PATTERN = re.compile(r"\bcrc\s+([0-9a-fA-F]{1,8})\b")
_SIZE_PATTERN = re.compile(r"\bsize\s+(\d+)\b")
_QUOTED_PATTERN = re.compile(r'"[^"]*"')
_CMP_HEADER_START = re.compile(r"^\s*clrmamepro\s*\((.*)$")
_HEADER_NAME_PATTERN = re.compile(r'^\s*name\s+"(.+)"')


def normalize_crc(crc: str) -> str:
    """Render a CRC string in canonical form (8 upper-case hex digits)."""
    return crc.strip().upper().zfill(8)


def _parse_size(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    raw = raw.strip()
    return int(raw) if raw.isdigit() else None


def detect_dialect(text: str) -> DatDialect:
    """Decide which dialect a catalog's text is written in."""
    stripped = text.lstrip("\ufeff \t\r\n")
    if stripped.startswith("<"):
        return DatDialect.XML
    return DatDialect.CLRMAMEPRO


def parse_xml_dat(text: str) -> Dict[str, CatalogEntry]:
    """Parse the XML dialect.

    Every ``rom`` under a ``game`` (or MAME ``machine``) element with a
    ``crc`` attribute becomes an entry. The ROM name falls back to the game
    name. Returns an empty mapping for malformed XML.
    """
    entries: Dict[str, CatalogEntry] = {}

    try:
        root = ET.fromstring(text.lstrip("\ufeff \t\r\n"))
    except ET.ParseError as e:
        logger.warning(f"Malformed XML catalog, no entries loaded: {e}")
        return entries

    for tag in ("game", "machine"):
        for game in root.iter(tag):
            game_name = game.get("name", "")
            for rom in game.findall("rom"):
                crc = rom.get("crc")
                if not crc or not re.fullmatch(r"[0-9a-fA-F]{1,8}", crc.strip()):
                    continue
                name = rom.get("name") or game_name
                key = normalize_crc(crc)
                entries[key] = CatalogEntry(name=name, crc=key, size=_parse_size(rom.get("size")))

    return entries


def _parse_rom_record(record: str) -> Optional[CatalogEntry]:
    """Extract one entry from the text following a ``rom (`` token."""
    # Names may contain words like "crc" or "size"; match those outside quotes only
    unquoted = _QUOTED_PATTERN.sub('""', record)

    crc_match = _CRC_PATTERN.search(unquoted)
    if crc_match is None:
        return None

    name_match = _NAME_PATTERN.search(record)
    size_match = _SIZE_PATTERN.search(unquoted)
    key = normalize_crc(crc_match.group(1))

    return CatalogEntry(
        name=name_match.group(1) if name_match else "",
        crc=key,
        size=int(size_match.group(1)) if size_match else None,
    )


def parse_clrmamepro_dat(text: str) -> Dict[str, CatalogEntry]:
    """Parse the ClrMamePro plain-text dialect, one ROM record per line."""
    entries: Dict[str, CatalogEntry] = {}

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(_HEADER_KEYWORDS):
            continue

        if line.startswith("game") or line.startswith("machine"):
            # Single-line game blocks carry their rom inline; bare openers are skipped
            rom_token = _ROM_TOKEN_PATTERN.search(line)
            if rom_token is None:
                continue
            line = line[rom_token.start():]

        if not line.startswith("rom") or "crc" not in line:
            continue

        entry = _parse_rom_record(line)
        if entry is not None:
            entries[entry.crc] = entry

    return entries


def read_system_name(text: str, dialect: DatDialect) -> Optional[str]:
    """Extract the catalog's header name, or None if it has none."""
    if dialect is DatDialect.XML:
        try:
            root = ET.fromstring(text.lstrip("\ufeff \t\r\n"))
        except ET.ParseError:
            return None
        name = root.findtext("header/name")
        return name.strip() if name and name.strip() else None

    return _read_clrmamepro_system_name(text)


def _read_clrmamepro_system_name(text: str) -> Optional[str]:
    # The header block ends at a line holding only ")"
    lines = iter(text.lstrip("\ufeff").splitlines())
    for line in lines:
        start = _CMP_HEADER_START.match(line)
        if start is None:
            continue
        if start.group(1).strip():
            name_match = _NAME_PATTERN.search(start.group(1))
            return name_match.group(1) if name_match else None
        for inner in lines:
            if inner.strip() == ")":
                return None
            name_match = _HEADER_NAME_PATTERN.match(inner)
            if name_match:
                return name_match.group(1)
        return None
    return None


def _read_text(catalog_path: Path) -> str:
    if not catalog_path.is_file():
        raise CatalogNotFound(catalog_path)
    return catalog_path.read_text(encoding="utf-8", errors="ignore")


def parse_text(text: str) -> Dict[str, CatalogEntry]:
    """Detect the dialect of catalog text and parse it."""
    if detect_dialect(text) is DatDialect.XML:
        return parse_xml_dat(text)
    return parse_clrmamepro_dat(text)


def parse_dat(catalog_path: Path) -> Dict[str, CatalogEntry]:
    """Parse a catalog file into a mapping of upper-case CRC to entry.

    Raises:
        CatalogNotFound: If the file does not exist.
    """
    return parse_text(_read_text(catalog_path))


def load_catalog(catalog_path: Path) -> DatCatalog:
    """Parse a catalog file and keep its dialect and system name.

    Raises:
        CatalogNotFound: If the file does not exist.
    """
    text = _read_text(catalog_path)
    dialect = detect_dialect(text)
    entries = parse_text(text)
    system_name = read_system_name(text, dialect)

    logger.info(f"Loaded {len(entries)} ROMs from DAT file {catalog_path} ({dialect.value})")

    return DatCatalog(
        entries=entries,
        dialect=dialect,
        source_path=catalog_path,
        system_name=system_name,
    )

"""Pytest fixtures for romcleaner tests."""

import binascii
import io
import struct
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Dict, Generator, Iterable, Optional, Set, Tuple

import pytest
from rich.console import Console

from romcleaner.operations import StorageEffects
from romcleaner.ui import CleanTUI


# Reference CRC32 values (big-endian, upper-case) of small payloads
CHECK_PAYLOAD = b"123456789"
CHECK_CRC = "CBF43926"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: end-to-end runs on a temporary filesystem")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


def write_xml_dat(
    path: Path, roms: Iterable[Tuple[str, str, Optional[int]]], system_name: str = "Test System"
) -> Path:
    """Write a Logiqx-style XML catalog.

    Args:
        path: Destination file.
        roms: (rom name, crc, size) triples; size may be None.
        system_name: Header name.

    Returns:
        The written path.
    """
    lines = [
        '<?xml version="1.0"?>',
        "<datafile>",
        f"  <header><name>{system_name}</name></header>",
    ]
    for name, crc, size in roms:
        game = Path(name).stem
        size_attr = f' size="{size}"' if size is not None else ""
        lines.append(f'  <game name="{game}">')
        lines.append(f'    <rom name="{name}"{size_attr} crc="{crc}"/>')
        lines.append("  </game>")
    lines.append("</datafile>")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_clrmamepro_dat(
    path: Path, roms: Iterable[Tuple[str, str, Optional[int]]], system_name: str = "Test System"
) -> Path:
    """Write a ClrMamePro text catalog with one ``rom ( ... )`` line per entry."""
    lines = [
        "clrmamepro (",
        f'\tname "{system_name}"',
        ")",
        "",
    ]
    for name, crc, size in roms:
        game = Path(name).stem
        size_part = f" size {size}" if size is not None else ""
        lines.append("game (")
        lines.append(f'\tname "{game}"')
        lines.append(f'\trom ( name "{name}"{size_part} crc {crc} )')
        lines.append(")")
        lines.append("")
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def write_zip(path: Path, members: Dict[str, bytes]) -> Path:
    """Write a zip archive holding the given members in insertion order."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in members.items():
            archive.writestr(name, data)
    return path


def write_truncated_zip(path: Path, member: str, payload: bytes, claimed_size: int = 100000) -> Path:
    """Write a stored zip whose central directory claims a longer member than it holds."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as archive:
        archive.writestr(member, payload)
    data = bytearray(path.read_bytes())
    central = data.rindex(b"PK\x01\x02")
    # compressed and uncompressed sizes of the central directory entry
    struct.pack_into("<II", data, central + 20, claimed_size, claimed_size)
    path.write_bytes(bytes(data))
    return path


@pytest.fixture
def xml_dat_factory(temp_dir: Path) -> Callable[..., Path]:
    """Return a builder writing XML catalogs into the temporary directory."""
    def _factory(roms, name: str = "games.dat", system_name: str = "Test System") -> Path:
        return write_xml_dat(temp_dir / name, roms, system_name)
    return _factory


@pytest.fixture
def clrmamepro_dat_factory(temp_dir: Path) -> Callable[..., Path]:
    """Return a builder writing ClrMamePro catalogs into the temporary directory."""
    def _factory(roms, name: str = "games.dat", system_name: str = "Test System") -> Path:
        return write_clrmamepro_dat(temp_dir / name, roms, system_name)
    return _factory


@pytest.fixture
def zip_factory(temp_dir: Path) -> Callable[..., Path]:
    """Return a builder writing zip archives into the temporary directory."""
    def _factory(name: str, members: Dict[str, bytes], folder: Optional[Path] = None) -> Path:
        target = (folder or temp_dir) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        return write_zip(target, members)
    return _factory


class InMemoryStorage(StorageEffects):
    """Storage fake recording every effect instead of touching the disk.

    ``files`` is the simulated set of occupied paths; ``actions`` records
    (verb, source, dest) tuples in call order. Paths listed in ``fail_on``
    raise OSError when touched.
    """

    def __init__(self, files: Optional[Iterable[Path]] = None, fail_on: Optional[Iterable[Path]] = None):
        self.files: Set[Path] = set(files or ())
        self.dirs: Set[Path] = set()
        self.actions = []
        self.fail_on: Set[Path] = set(fail_on or ())

    def _check(self, path: Path) -> None:
        if path in self.fail_on:
            raise OSError(f"Simulated failure on {path}")

    def exists(self, path: Path) -> bool:
        return path in self.files or path in self.dirs

    def create_dir(self, path: Path) -> None:
        self.dirs.add(path)
        self.actions.append(("mkdir", path, None))

    def move(self, source: Path, dest: Path) -> None:
        self._check(source)
        self.files.discard(source)
        self.files.add(dest)
        self.actions.append(("move", source, dest))

    def copy(self, source: Path, dest: Path) -> None:
        self._check(source)
        self.files.add(dest)
        self.actions.append(("copy", source, dest))

    def delete(self, path: Path) -> None:
        self._check(path)
        self.files.discard(path)
        self.actions.append(("delete", path, None))


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    """Return an empty in-memory storage fake."""
    return InMemoryStorage()


@pytest.fixture
def tui_with_output() -> Tuple[CleanTUI, io.StringIO]:
    """Create a CleanTUI whose console writes to a StringIO.

    Returns:
        Tuple of (CleanTUI instance, StringIO for reading output).
    """
    output = io.StringIO()
    console = Console(file=output, width=120)
    return CleanTUI(console=console), output


@pytest.fixture
def rom_library(temp_dir: Path) -> Dict[str, Path]:
    """Create an input directory and catalog for end-to-end runs.

    Creates:
        temp_dir/
        ├── games.dat        (XML; lists Alpha and Beta)
        └── old/
            ├── alpha.sms        (Alpha payload)
            ├── beta.zip         (Beta payload + readme.txt)
            ├── mystery.sms      (not in the catalog)
            ├── readme.txt       (ignored: not a ROM extension)
            └── sub/
                └── alpha copy.sms (Alpha payload again)

    Returns:
        Dictionary of notable paths.
    """
    alpha = b"ALPHA ROM PAYLOAD" * 64
    beta = b"BETA ROM PAYLOAD" * 64
    mystery = b"NOT IN ANY CATALOG"

    old = temp_dir / "old"
    (old / "sub").mkdir(parents=True)
    (old / "alpha.sms").write_bytes(alpha)
    write_zip(old / "beta.zip", {"readme.txt": b"read me", "beta.sms": beta})
    (old / "mystery.sms").write_bytes(mystery)
    (old / "readme.txt").write_text("not a rom")
    (old / "sub" / "alpha copy.sms").write_bytes(alpha)

    dat = write_xml_dat(
        temp_dir / "games.dat",
        [
            ("Alpha.sms", crc_of(alpha), len(alpha)),
            ("Beta.sms", crc_of(beta), len(beta)),
        ],
    )

    return {
        "root": temp_dir,
        "dat": dat,
        "old": old,
        "alpha": old / "alpha.sms",
        "alpha_copy": old / "sub" / "alpha copy.sms",
        "beta": old / "beta.zip",
        "mystery": old / "mystery.sms",
        "readme": old / "readme.txt",
    }


def crc_of(data: bytes) -> str:
    """CRC32 of a payload in canonical form, computed independently of romcleaner."""
    return f"{binascii.crc32(data) & 0xFFFFFFFF:08X}"

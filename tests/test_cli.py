"""End-to-end tests for the romcleaner CLI.

This module tests the CLI interface using Typer's CliRunner against the
ROM library fixture from conftest.
"""

import json
from pathlib import Path
from typing import Dict

import pytest
from typer.testing import CliRunner

from romcleaner import __version__
from romcleaner.cli import app

from conftest import CHECK_CRC, CHECK_PAYLOAD, write_zip


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a CliRunner instance for testing."""
    return CliRunner()


def clean_args(library: Dict[str, Path], *extra: str) -> list:
    return [
        "clean",
        "--dat", str(library["dat"]),
        "--input", str(library["old"]),
        "--output", str(library["root"]),
        "--log-file", str(library["root"] / "run.log"),
        *extra,
    ]


class TestCliBasics:

    def test_version(self, cli_runner: CliRunner):
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"ROM Cleaner v{__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner: CliRunner):
        result = cli_runner.invoke(app, [])
        assert "Usage" in result.output
        assert "clean" in result.output

    def test_clean_help(self, cli_runner: CliRunner):
        result = cli_runner.invoke(app, ["clean", "--help"])
        assert result.exit_code == 0
        assert "--purge" in result.output
        assert "--backup" in result.output
        assert "--dry-run" in result.output


class TestCleanCommand:

    def test_move_run(self, cli_runner: CliRunner, rom_library):
        result = cli_runner.invoke(app, clean_args(rom_library))

        assert result.exit_code == 0, result.output
        root = rom_library["root"]
        assert (root / "checked" / "alpha.sms").exists()
        assert (root / "new" / "mystery.sms").exists()
        assert "Clean Summary" in result.output
        assert (root / "run.log").exists()

    def test_backup_run_keeps_sources(self, cli_runner: CliRunner, rom_library):
        result = cli_runner.invoke(app, clean_args(rom_library, "--backup"))

        assert result.exit_code == 0, result.output
        assert rom_library["alpha"].exists()
        assert (rom_library["root"] / "checked" / "alpha.sms").exists()
        assert "Mode: BACKUP" in (rom_library["root"] / "run.log").read_text()

    def test_purge_run(self, cli_runner: CliRunner, rom_library):
        result = cli_runner.invoke(app, clean_args(rom_library, "--purge"))

        assert result.exit_code == 0, result.output
        assert not rom_library["alpha_copy"].exists()
        assert not rom_library["mystery"].exists()

    def test_dry_run(self, cli_runner: CliRunner, rom_library):
        result = cli_runner.invoke(app, clean_args(rom_library, "--dry-run"))

        assert result.exit_code == 0, result.output
        assert "[DRY RUN MODE]" in result.output
        assert rom_library["alpha"].exists()
        assert not (rom_library["root"] / "checked").exists()

    def test_backup_and_purge_are_exclusive(self, cli_runner: CliRunner, rom_library):
        result = cli_runner.invoke(app, clean_args(rom_library, "--backup", "--purge"))

        assert result.exit_code == 2
        assert rom_library["alpha"].exists()

    def test_invalid_workers(self, cli_runner: CliRunner, rom_library):
        result = cli_runner.invoke(app, clean_args(rom_library, "--workers", "0"))
        assert result.exit_code == 2

    def test_missing_dat_exit_code(self, cli_runner: CliRunner, rom_library):
        rom_library["dat"].unlink()
        result = cli_runner.invoke(app, clean_args(rom_library))

        assert result.exit_code == 2
        assert "DAT file not found" in result.output

    def test_missing_input_exit_code(self, cli_runner: CliRunner, rom_library):
        args = clean_args(rom_library)
        args[args.index("--input") + 1] = str(rom_library["root"] / "nowhere")

        result = cli_runner.invoke(app, args)

        assert result.exit_code == 3
        assert "Input directory not found" in result.output

    def test_run_with_errors_exits_one(self, cli_runner: CliRunner, rom_library):
        (rom_library["old"] / "broken.zip").write_bytes(b"not a zip")

        result = cli_runner.invoke(app, clean_args(rom_library))

        assert result.exit_code == 1
        assert "Completed with 1 error(s)" in result.output
        # Everything else was still processed
        assert (rom_library["root"] / "checked" / "alpha.sms").exists()

    def test_settings_file(self, cli_runner: CliRunner, rom_library):
        root = rom_library["root"]
        config = root / "appsettings.json"
        config.write_text(json.dumps({
            "Settings": {
                "DatFilePath": str(rom_library["dat"]),
                "OldRomsPath": str(rom_library["old"]),
                "OutputPath": str(root / "sorted"),
                "LogFilePath": str(root / "from-settings.log"),
                "Workers": 2,
            }
        }))

        result = cli_runner.invoke(app, ["clean", "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert (root / "sorted" / "checked" / "alpha.sms").exists()
        assert (root / "from-settings.log").exists()

    def test_options_override_settings(self, cli_runner: CliRunner, rom_library):
        root = rom_library["root"]
        config = root / "appsettings.json"
        config.write_text(json.dumps({"Settings": {"OutputPath": str(root / "sorted")}}))

        result = cli_runner.invoke(app, clean_args(rom_library, "--config", str(config)))

        assert result.exit_code == 0, result.output
        assert (root / "checked" / "alpha.sms").exists()
        assert not (root / "sorted").exists()

    def test_invalid_settings_file(self, cli_runner: CliRunner, rom_library):
        config = rom_library["root"] / "appsettings.json"
        config.write_text("{broken")

        result = cli_runner.invoke(app, clean_args(rom_library, "--config", str(config)))

        assert result.exit_code == 1
        assert "Invalid settings file" in result.output

    def test_unrenderable_log_pattern_in_settings(self, cli_runner: CliRunner, rom_library):
        config = rom_library["root"] / "appsettings.json"
        config.write_text(json.dumps({"Settings": {"LogFilePath": "romcleaner_{date}.log"}}))
        args = clean_args(rom_library, "--config", str(config))
        log_index = args.index("--log-file")
        del args[log_index:log_index + 2]

        result = cli_runner.invoke(app, args)

        assert result.exit_code == 1
        assert "LogFilePath" in result.output
        assert rom_library["alpha"].exists()

    def test_default_log_file_name(self, cli_runner: CliRunner, rom_library, monkeypatch):
        monkeypatch.chdir(rom_library["root"])
        args = clean_args(rom_library)
        log_index = args.index("--log-file")
        del args[log_index:log_index + 2]

        result = cli_runner.invoke(app, args)

        assert result.exit_code == 0, result.output
        assert len(list(rom_library["root"].glob("romcleaner_*.log"))) == 1


class TestHashCommand:

    def test_hash_files(self, cli_runner: CliRunner, temp_dir: Path):
        rom = temp_dir / "check.sms"
        rom.write_bytes(CHECK_PAYLOAD)
        archive = write_zip(temp_dir / "check.zip", {"readme.txt": b"x", "check.gg": CHECK_PAYLOAD})

        result = cli_runner.invoke(app, ["hash", str(rom), str(archive)])

        assert result.exit_code == 0, result.output
        lines = [line for line in result.output.splitlines() if line.strip()]
        assert lines[0].startswith(CHECK_CRC)
        assert lines[1].startswith(CHECK_CRC)

    def test_hash_missing_file(self, cli_runner: CliRunner, temp_dir: Path):
        result = cli_runner.invoke(app, ["hash", str(temp_dir / "missing.sms")])

        assert result.exit_code == 1
        assert "ERROR" in result.output


class TestDatInfoCommand:

    def test_dat_info(self, cli_runner: CliRunner, rom_library):
        result = cli_runner.invoke(app, ["dat-info", str(rom_library["dat"])])

        assert result.exit_code == 0, result.output
        assert "Dialect: xml" in result.output
        assert "System: Test System" in result.output
        assert "ROMs: 2" in result.output

    def test_dat_info_entries(self, cli_runner: CliRunner, rom_library):
        result = cli_runner.invoke(app, ["dat-info", str(rom_library["dat"]), "--entries"])

        assert result.exit_code == 0, result.output
        assert "Alpha.sms" in result.output
        assert "Beta.sms" in result.output

    def test_dat_info_missing(self, cli_runner: CliRunner, temp_dir: Path):
        result = cli_runner.invoke(app, ["dat-info", str(temp_dir / "missing.dat")])

        assert result.exit_code == 2
        assert "DAT file not found" in result.output

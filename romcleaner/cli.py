"""
ROM Cleaner - CLI Interface.

A command-line interface for identifying ROM files against a DAT catalog and
sorting them into "checked" (known, first copy), "new" (not in the catalog)
or nowhere (duplicates), depending on the selected mode.

Usage Examples:
    # Move known ROMs to ./checked and unknown ones to ./new
    romcleaner clean --dat games.dat --input old

    # Copy instead of move, leaving the input untouched
    romcleaner clean --dat games.dat --input old --backup

    # Keep one copy of each known ROM, delete everything else
    romcleaner clean --dat games.dat --input old --purge --dry-run

    # Print the CRC32 of some files (zip archives are looked into)
    romcleaner hash "Alex Kidd.zip" sonic.sms

    # Inspect a DAT file
    romcleaner dat-info games.dat
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from romcleaner.catalog import load_catalog
from romcleaner.errors import PreflightError, SettingsError
from romcleaner.hashing import RomHasher
from romcleaner.models import ProcessMode
from romcleaner.orchestration import CleanOrchestrator
from romcleaner.settings import load_settings

__version__ = "1.0.0"

# Initialize Typer app
app = typer.Typer(
    name="romcleaner",
    help="ROM Cleaner - Identify ROMs by CRC32 against a DAT catalog and remove duplicates.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"ROM Cleaner v{__version__}")
        raise typer.Exit()


def validate_workers(value: Optional[int]) -> Optional[int]:
    """
    Validate the hashing thread count.

    Raises:
        typer.BadParameter: If value is less than 1.
    """
    if value is not None and value < 1:
        raise typer.BadParameter("Workers must be at least 1")
    return value


def configure_logging(verbose: bool) -> None:
    """Route diagnostics to stderr; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def resolve_mode(backup: bool, purge: bool) -> ProcessMode:
    """
    Map the mode flags to a ProcessMode.

    Raises:
        typer.BadParameter: If both flags are given.
    """
    if backup and purge:
        raise typer.BadParameter("--backup and --purge cannot be used together")
    if backup:
        return ProcessMode.BACKUP
    if purge:
        return ProcessMode.PURGE
    return ProcessMode.MOVE


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """ROM Cleaner - Identify ROMs by CRC32 against a DAT catalog and remove duplicates."""
    pass


@app.command()
def clean(
    dat: Optional[Path] = typer.Option(
        None,
        "--dat",
        "-d",
        help="DAT catalog to check ROMs against.",
    ),
    input_path: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        help="Directory to scan for ROMs.",
    ),
    output_path: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory under which 'new' and 'checked' are created.",
    ),
    backup: bool = typer.Option(
        False,
        "--backup",
        help="Copy files instead of moving them.",
    ),
    purge: bool = typer.Option(
        False,
        "--purge",
        help="Keep the first copy of each known ROM and delete everything else.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-C",
        help="Settings file (defaults to ./appsettings.json if present).",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Number of hashing threads.",
        callback=validate_workers,
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would happen without touching any file.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Identify, sort and deduplicate the ROMs of a directory.

    Every file is hashed and looked up in the DAT catalog:
    - Known ROM, first copy: goes to 'checked'
    - Known ROM, repeat copy: left in place (deleted with --purge)
    - Unknown file: goes to 'new' (deleted with --purge)
    """
    configure_logging(verbose)
    mode = resolve_mode(backup, purge)

    try:
        settings = load_settings(config)
    except SettingsError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if log_file is None:
        log_file = settings.log_file_for(datetime.now())

    try:
        if dry_run:
            console.print("[yellow][DRY RUN MODE][/yellow] No files will be modified.\n")

        orchestrator = CleanOrchestrator(
            dat_path=dat if dat is not None else settings.dat_file_path,
            input_path=input_path if input_path is not None else settings.input_path,
            output_path=output_path if output_path is not None else settings.output_path,
            mode=mode,
            workers=workers if workers is not None else settings.workers,
            log_file_path=log_file,
            dry_run=dry_run,
            verbose=verbose,
        )

        summary = orchestrator.run()

        if summary.errors:
            console.print(
                f"\n[yellow]Completed with {len(summary.errors)} error(s).[/yellow]"
            )

        if summary.interrupted:
            raise typer.Exit(130)
        elif summary.errors:
            raise typer.Exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Clean interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except PreflightError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(e.exit_code)

    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except PermissionError as e:
        console.print(f"[red]Error:[/red] Permission denied - {escape(str(e))}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command("hash")
def hash_files(
    files: List[Path] = typer.Argument(
        ...,
        help="Files to hash. Zip archives are hashed by their ROM member.",
    ),
) -> None:
    """
    Print the CRC32 of each file as 8 upper-case hex digits.

    Exits with status 1 if any file could not be hashed.
    """
    hasher = RomHasher()
    failed = False

    for path in files:
        crc = hasher.hash_file(path)
        if crc is None:
            failed = True
            console.print(f"[red]{'ERROR':<8}[/red]  {escape(str(path))}", highlight=False)
        else:
            console.print(f"{crc}  {escape(str(path))}", highlight=False)

    for error in hasher.get_errors():
        console.print(f"[dim]{escape(error)}[/dim]", highlight=False)

    if failed:
        raise typer.Exit(1)


@app.command("dat-info")
def dat_info(
    dat: Path = typer.Argument(
        ...,
        help="DAT catalog to inspect.",
    ),
    show_entries: bool = typer.Option(
        False,
        "--entries",
        "-e",
        help="List every ROM in the catalog.",
    ),
) -> None:
    """
    Show the dialect, system name and size of a DAT catalog.
    """
    try:
        catalog = load_catalog(dat)
    except PreflightError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(e.exit_code)
    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"DAT file: {escape(str(catalog.source_path))}", highlight=False)
    console.print(f"Dialect: {catalog.dialect.value}", highlight=False)
    console.print(f"System: {escape(catalog.system_name or '-')}", highlight=False)
    console.print(f"ROMs: {len(catalog):,}", highlight=False)

    if show_entries and len(catalog):
        table = Table(show_header=True, header_style="bold")
        table.add_column("CRC32", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Name")
        for crc, entry in sorted(catalog.entries.items(), key=lambda item: item[1].name.lower()):
            size = f"{entry.size:,}" if entry.size is not None else "-"
            table.add_row(crc, size, escape(entry.name))
        console.print(table)


if __name__ == "__main__":
    app()

"""Terminal output for romcleaner.

This module provides the CleanTUI class, a Rich-based presentation layer for
cleaning runs: catalog details, a progress bar over candidate files,
per-file lines in verbose mode, and the final summary.

Example:
    from romcleaner.ui import CleanTUI

    tui = CleanTUI()
    tui.display_catalog(catalog)
    progress, callback = tui.create_progress_callback(total_files=120)
    with progress:
        ...
    tui.display_summary(summary)
"""

from typing import Callable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from romcleaner.models import CleanSummary, DatCatalog, FileOutcome, ProcessResult

# Rich style per outcome
_RESULT_STYLES = {
    ProcessResult.OK: "green",
    ProcessResult.COPIED: "green",
    ProcessResult.ALREADY_EXISTS: "blue",
    ProcessResult.NOT_IN_DAT: "yellow",
    ProcessResult.DELETED: "magenta",
    ProcessResult.ERROR: "red",
}


class CleanTUI:
    """Rich-based console output for cleaning runs.

    Args:
        console: Optional Rich Console instance for output. Pass a Console
            writing to a StringIO to capture output in tests.

    Attributes:
        console: The Rich Console instance used for all output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_catalog(self, catalog: DatCatalog) -> None:
        """Show where the catalog came from and how many ROMs it lists."""
        lines = [
            f"DAT file: {escape(str(catalog.source_path))}",
            f"Dialect: {catalog.dialect.value}",
        ]
        if catalog.system_name:
            lines.append(f"System: {escape(catalog.system_name)}")
        lines.append(f"ROMs in DAT: {len(catalog):,}")
        self.console.print(Panel("\n".join(lines), title="Catalog", border_style="blue"))

    def display_outcome(self, outcome: FileOutcome) -> None:
        """Print a single ``file >> status`` line."""
        style = _RESULT_STYLES.get(outcome.result, "white")
        line = f"{escape(outcome.file_name)} >> [{style}]{outcome.result.label}[/{style}]"
        if outcome.catalog_name:
            line += f" [dim]({escape(outcome.catalog_name)})[/dim]"
        self.console.print(line, highlight=False)

    def display_summary(self, summary: CleanSummary) -> None:
        """Display final counters and any errors.

        Args:
            summary: CleanSummary with aggregated statistics.
        """
        title = "Clean Summary"
        if summary.dry_run:
            title += " [yellow][DRY RUN][/yellow]"

        self.console.print(Panel(title, border_style="yellow" if summary.dry_run else "green"))

        table = Table(show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("ROMs in DAT", f"{summary.catalog_entries:,}")
        table.add_row("Files processed", f"{summary.files_processed:,}")
        table.add_row("Unique", f"{summary.unique:,}")
        table.add_row("Duplicates", f"{summary.duplicates:,}")
        table.add_row("Not in DAT", f"{summary.not_in_dat:,}")
        table.add_row("Deleted", f"{summary.deleted:,}")
        table.add_row("Duration", self._format_duration(summary.duration_seconds))

        self.console.print(table)

        if summary.interrupted:
            self.console.print("[yellow]Run interrupted by user.[/yellow]")

        if summary.errors:
            self._display_errors(summary.errors)

    def create_progress_callback(
        self, total_files: int
    ) -> tuple[Progress, Callable[[int], None]]:
        """Create a progress bar and a callback that advances it.

        The caller owns the Progress lifecycle and must use it as a context
        manager around the processing loop.

        Args:
            total_files: Number of candidate files to process.

        Returns:
            Tuple of (Progress, callback taking the completed file count).
        """
        progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=self.console,
        )
        task_id = progress.add_task("Processing ROMs...", total=total_files)

        def callback(completed: int) -> None:
            progress.update(task_id, completed=completed)

        return progress, callback

    def _display_errors(self, errors: List[str]) -> None:
        """Display the first 10 errors in a panel."""
        max_display = 10
        error_text = "\n".join(f"- {escape(e)}" for e in errors[:max_display])
        remaining = len(errors) - max_display
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more errors"

        self.console.print(
            Panel(error_text, title=f"Errors ({len(errors)})", border_style="red")
        )

    def _format_duration(self, seconds: float) -> str:
        if seconds < 0:
            seconds = 0
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"

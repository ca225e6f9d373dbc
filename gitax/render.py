"""
Rendering functions for gitax output.

Services return records, this module makes them human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Optional

from .domain import FileStatus, HistoryRecord

console = Console()

STATUS_STYLES = {
    FileStatus.UNALTERED: "green",
    FileStatus.ADDED: "cyan",
    FileStatus.STAGED: "cyan",
    FileStatus.UNTRACKED: "yellow",
    FileStatus.MODIFIED: "yellow",
    FileStatus.MISSING: "red",
    FileStatus.REMOVED: "red",
    FileStatus.NON_EXISTENT: "dim",
}


def status_text(status: FileStatus) -> str:
    style = STATUS_STYLES.get(status, "magenta")
    return f"[{style}]{status.value}[/{style}]"


def render_history_table(records: List[HistoryRecord], title: Optional[str] = None) -> None:
    """
    Render file history records as a table.

    Args:
        records: Records from file_history
        title: Optional table title
    """
    if not records:
        console.print("[yellow]No history found.[/yellow]")
        return

    table = Table(
        title=title or f"History of {records[0].item_path}",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Commit", style="cyan")
    table.add_column("Date", style="dim")
    table.add_column("Author", style="green")
    table.add_column("Message")
    table.add_column("Copy", style="dim")

    for record in records:
        hours, rest = divmod(record.vcs_time, 3600)
        when = f"{record.vcs_date.isoformat() if record.vcs_date else ''} {hours:02d}:{rest // 60:02d}"
        table.add_row(record.sha_short, when, record.user, record.short_comment, record.filename)

    console.print(table)
    console.print(f"Working file: {status_text(records[0].file_status)}")


def render_files_table(records: List[HistoryRecord], title: str = "Files") -> None:
    """Render sync or index records as a table."""
    if not records:
        console.print("[yellow]No files.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Path", style="cyan")
    table.add_column("Status")
    table.add_column("Id", style="dim")
    table.add_column("Action", style="green")
    table.add_column("Copy", style="dim")

    for record in records:
        table.add_row(
            record.item_path,
            status_text(record.file_status),
            record.sha_short,
            record.action,
            record.filename,
        )

    console.print(table)

"""
Utility functions for the File Organizer.

Includes:
- Console output helpers
- Scan / plan / report tables
- JSON save helper
"""

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

# Global console instance
console = Console()


def print_header(title: str, subtitle: str = ""):
    """Print a styled header."""
    console.print(Panel(f"[bold blue]{title}[/bold blue]\n[italic]{escape(subtitle)}[/italic]", expand=False))


def print_error(msg: str):
    console.print(f"[bold red]ERROR:[/bold red] {escape(msg)}")


def print_warning(msg: str):
    console.print(f"[bold yellow]WARNING:[/bold yellow] {escape(msg)}")


def print_success(msg: str):
    console.print(f"[bold green]SUCCESS:[/bold green] {escape(msg)}")


def format_size(num_bytes: int) -> str:
    """Format a byte count for humans (1536 -> '1.5 KB')."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024 or unit == "TB":
            if unit == "B":
                return f"{int(size)} B"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{num_bytes} B"


def display_path(path: Path, root: Path | None = None) -> str:
    """Show a path relative to root when possible."""
    if root is not None:
        try:
            return str(Path(path).relative_to(root))
        except ValueError:
            pass
    return str(path)


def print_scan_table(stats) -> None:
    """Print per-category counts and sizes for a ScanStats."""
    console.print(f"Folder: {escape(str(stats.root))}")
    console.print(f"Total entries: {stats.total_entries}")
    console.print(f"Files: {stats.files}")
    console.print(f"Dirs: {stats.directories}")

    if not stats.categories:
        console.print("\nFiles by extension: [dim](none)[/dim]")
        return

    table = Table(title="Files by extension")
    table.add_column("Category", style="cyan")
    table.add_column("Files", style="magenta", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Bytes", style="dim", justify="right")

    for cat in stats.categories:
        table.add_row(escape(cat.category), str(cat.count), format_size(cat.total_bytes), str(cat.total_bytes))
    table.add_row("[bold]total[/bold]", str(stats.files), format_size(stats.total_bytes), str(stats.total_bytes))

    console.print(table)

    if stats.failures:
        print_warning(f"{len(stats.failures)} entries could not be read")
        for entry in stats.failures[:10]:
            console.print(f"  - {escape(display_path(entry.path, stats.root))}: {escape(entry.error)}", soft_wrap=True)
        if len(stats.failures) > 10:
            console.print(f"  ... and {len(stats.failures) - 10} more")


def print_plan_table(actions: list, root: Path | None = None):
    """Print a summary table of the plan."""
    folders = {a.destination.parent for a in actions}
    renamed = sum(1 for a in actions if a.disambiguator is not None)

    table = Table(title="Plan Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")

    table.add_row("Moves", str(len(actions)))
    table.add_row("Category Folders", str(len(folders)))
    table.add_row("Renamed (collision)", str(renamed))

    console.print(table)

    if actions:
        tree = Tree("[bold green]Sample Moves[/bold green]")
        for action in actions[:10]:
            src = escape(display_path(action.source, root))
            dst = escape(display_path(action.destination, root))
            tree.add(f"[yellow]{src}[/yellow] -> [blue]{dst}[/blue]")
        if len(actions) > 10:
            tree.add(f"[italic]... and {len(actions)-10} more[/italic]")
        console.print(tree)


def print_report_summary(report, root: Path | None = None) -> None:
    """Print the outcome of an executed (or simulated) plan."""
    if report.dry_run:
        console.print(f"\n[DRY-RUN] {report.would_move} files would be moved")
        console.print("Nothing was moved (dry-run).")
        return

    console.print(
        f"\n[APPLY] Complete: {report.succeeded} moved, {report.skipped} skipped, "
        f"{report.failed} failed, {format_size(report.bytes_moved)} moved"
    )

    if report.failures:
        console.print("\n[bold red]Failures:[/bold red]")
        for result in report.failures:
            src = escape(display_path(result.action.source, root))
            console.print(f"  - {src}: {escape(result.reason or 'unknown error')}", soft_wrap=True)


def save_json(data: Any, path: Path) -> None:
    """
    Save data to a JSON file with pretty formatting.

    Args:
        data: The data to serialize.
        path: The output file path.
    """
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    print(f"[INFO] Saved: {path}")

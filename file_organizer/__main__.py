#!/usr/bin/env python3
"""
File Organizer - CLI Entry Point
================================

Usage:
    python -m file_organizer scan ~/Downloads
    python -m file_organizer organize ~/Downloads --dry-run
    python -m file_organizer organize ~/Downloads --recursive --dest ~/Sorted
"""

import argparse
import os
import sys
from pathlib import Path

from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from . import __version__
from .errors import FatalError, RootNotADirectoryError
from .executor import apply_plan
from .planning import build_plan, validate_plan
from .scanner import DEFAULT_WORKERS, find_category_folders, scan_and_summarize, validate_root
from .utils import (
    console,
    print_error,
    print_header,
    print_plan_table,
    print_report_summary,
    print_scan_table,
    print_success,
    print_warning,
    save_json,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def run_scan(root: Path, recursive: bool, workers: int, exclude_dirs=()):
    """Scan with a spinner, returning (entries, stats)."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task_id = progress.add_task("Scanning...", total=None)

        def progress_cb(count, path):
            short_path = str(path)
            if len(short_path) > 40:
                short_path = "..." + short_path[-37:]
            progress.update(task_id, description=f"Scanning: {count} entries... {escape(short_path)}")

        return scan_and_summarize(
            root,
            recursive=recursive,
            exclude_dirs=exclude_dirs,
            max_workers=workers,
            progress_callback=progress_cb,
        )


# =============================================================================
# Subcommands
# =============================================================================

def cmd_scan(args) -> int:
    """Scan command - print per-category statistics."""
    root = validate_root(args.path)
    _, stats = run_scan(root, args.recursive, args.workers)
    print_scan_table(stats)
    return EXIT_OK


def cmd_organize(args) -> int:
    """Organize command - full pipeline (scan → plan → apply)."""
    root = validate_root(args.path)

    dest = Path(args.dest).expanduser().resolve() if args.dest else root
    if os.path.lexists(dest) and not os.path.isdir(dest):
        raise RootNotADirectoryError(f"Destination is not a directory: {dest}")

    mode_str = "dry-run" if args.dry_run else "apply"
    if args.recursive:
        mode_str += ", recursive"
    print_header("File Organizer", f"Root: {root}\nDestination: {dest}\nMode: {mode_str}")

    # Step 1: Scan
    exclude_dirs = find_category_folders(dest) if args.recursive else set()
    if exclude_dirs:
        console.print(f"[dim]Skipping {len(exclude_dirs)} existing category folders[/dim]")

    entries, stats = run_scan(root, args.recursive, args.workers, exclude_dirs)
    console.print(f"[INFO] Found {stats.files} files in {len(stats.categories)} categories")
    if stats.failures:
        print_warning(f"{len(stats.failures)} entries could not be read and will be left alone")

    # Step 2: Plan
    actions = build_plan(entries, dest, exclude_dirs=exclude_dirs)
    actions = validate_plan(actions, dest)

    if not actions:
        print_success(f"No files to organize in {root}")
        return EXIT_OK

    print_plan_table(actions, root)

    # Step 3: Apply
    report = apply_plan(actions, dry_run=args.dry_run, show_progress=not args.no_progress, root=root)
    print_report_summary(report, root)

    if args.report_out:
        save_json(report.to_dict(), args.report_out)

    if not report.ok:
        print_error(f"{report.failed} of {len(actions)} moves failed; their files were left in place")
        return EXIT_FAILURE

    if not args.dry_run:
        print_success(f"Files organized into {dest}")
    return EXIT_OK


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="file-organizer",
        description="Scan a folder and organize its files into subfolders by extension",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- SCAN command ---
    scan_parser = subparsers.add_parser("scan", help="Print a summary of files in a folder")
    scan_parser.add_argument("path", type=Path, nargs="?", default=Path.cwd(),
                            help="Folder to scan (default: current directory)")
    scan_parser.add_argument("--recursive", "-r", action="store_true",
                            help="Include files in subfolders")
    scan_parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, metavar="N",
                            help=f"Threads used for file metadata reads (default: {DEFAULT_WORKERS})")
    scan_parser.set_defaults(func=cmd_scan)

    # --- ORGANIZE command ---
    org_parser = subparsers.add_parser("organize", help="Organize files into subfolders by extension")
    org_parser.add_argument("path", type=Path, nargs="?", default=Path.cwd(),
                           help="Folder to organize (default: current directory)")
    org_parser.add_argument("--recursive", "-r", action="store_true",
                           help="Also organize files found in subfolders")
    org_parser.add_argument("--dry-run", action="store_true",
                           help="Show what would happen without moving files")
    org_parser.add_argument("--dest", type=Path, metavar="PATH",
                           help="Folder that receives the category folders (default: the scanned folder)")
    org_parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, metavar="N",
                           help=f"Threads used for file metadata reads (default: {DEFAULT_WORKERS})")
    org_parser.add_argument("--report-out", type=Path, metavar="FILE",
                           help="Write the execution report as JSON")
    org_parser.add_argument("--no-progress", action="store_true",
                           help="Hide the progress bar")
    org_parser.set_defaults(func=cmd_organize)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    if args.workers < 1:
        parser.error("--workers must be at least 1")

    try:
        return args.func(args)
    except FatalError as e:
        print_error(str(e))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\n[ABORT] Operation cancelled by user")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())

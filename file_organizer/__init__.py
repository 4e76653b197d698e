"""
File Organizer
==============

A command-line tool that scans a directory, reports per-extension file
statistics and optionally moves files into extension-named subfolders,
with a dry-run preview.
"""

__version__ = "1.0.0"

from .classifier import classify_name, extension_of, NO_EXTENSION, UNREADABLE
from .scanner import scan_directory, scan_and_summarize, validate_root
from .planning import build_plan, validate_plan
from .executor import apply_plan
from .models import Entry, ScanStats, MoveAction, MoveStatus, ExecutionResult, ExecutionReport

__all__ = [
    "classify_name",
    "extension_of",
    "NO_EXTENSION",
    "UNREADABLE",
    "scan_directory",
    "scan_and_summarize",
    "validate_root",
    "build_plan",
    "validate_plan",
    "apply_plan",
    "Entry",
    "ScanStats",
    "MoveAction",
    "MoveStatus",
    "ExecutionResult",
    "ExecutionReport",
]

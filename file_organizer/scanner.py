"""
Directory scanning and statistics collection.

Functions for walking a directory (top-level or recursively) and
turning what is found into classified Entry records.
"""

import os
import stat
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .classifier import UNREADABLE, classify_name, extension_of, is_category_name
from .errors import RootNotADirectoryError, RootNotFoundError, RootPermissionError
from .models import Entry, ScanStats, StatsAccumulator

# Folders that are never descended into
IGNORE_FOLDERS = {
    'System Volume Information', '$RECYCLE.BIN', '.fseventsd', '.Spotlight-V100', '.Trashes'
}

DEFAULT_WORKERS = min(8, os.cpu_count() or 1)


def validate_root(root: Path) -> Path:
    """
    Resolve a scan root and make sure it is a listable directory.

    Raises:
        RootNotFoundError, RootNotADirectoryError, RootPermissionError
    """
    root = Path(root).expanduser()
    # os.stat reports an unsearchable parent as EACCES instead of "missing"
    try:
        st = os.stat(root)
    except PermissionError as e:
        raise RootPermissionError(f"Permission denied: {root} ({e.strerror})") from e
    except (FileNotFoundError, NotADirectoryError) as e:
        raise RootNotFoundError(f"Directory not found: {root}") from e
    except OSError as e:
        raise RootPermissionError(f"Cannot access {root} ({e.strerror or e})") from e
    if not stat.S_ISDIR(st.st_mode):
        raise RootNotADirectoryError(f"Not a directory: {root}")
    try:
        root = root.resolve()
        with os.scandir(root):
            pass
    except PermissionError as e:
        raise RootPermissionError(f"Permission denied: {root} ({e.strerror})") from e
    except OSError as e:
        raise RootPermissionError(f"Cannot list {root} ({e.strerror or e})") from e
    return root


def _failed_entry(path: Path, is_dir: bool, error: OSError) -> Entry:
    reason = error.strerror or str(error)
    return Entry(
        path=path,
        is_dir=is_dir,
        extension=extension_of(path.name),
        size=0,
        mtime=None,
        category=UNREADABLE,
        error=reason,
    )


def _inspect(path: Path) -> tuple[Entry | None, tuple[int, int] | None]:
    """
    Stat a single path, following symlinks.

    Returns the Entry (None for node types that are neither files nor
    directories) and, for directories, their (device, inode) identity.
    """
    try:
        st = path.stat()
    except OSError as e:
        # Broken or looping symlinks end up here as well
        return _failed_entry(path, False, e), None

    try:
        mtime = datetime.fromtimestamp(st.st_mtime)
    except (OverflowError, ValueError, OSError):
        # Timestamp outside what the platform can represent
        mtime = None

    if stat.S_ISDIR(st.st_mode):
        entry = Entry(
            path=path,
            is_dir=True,
            extension="",
            size=st.st_size,
            mtime=mtime,
            category=None,
        )
        return entry, (st.st_dev, st.st_ino)

    if not stat.S_ISREG(st.st_mode):
        return None, None

    entry = Entry(
        path=path,
        is_dir=False,
        extension=extension_of(path.name),
        size=st.st_size,
        mtime=mtime,
        category=classify_name(path.name),
    )
    return entry, None


def _list_dir(directory: Path) -> list[Path]:
    with os.scandir(directory) as it:
        names = sorted(e.name for e in it)
    return [directory / name for name in names]


def scan_directory(
    root: Path,
    recursive: bool = False,
    exclude_dirs: Iterable[Path] = (),
    max_workers: int = DEFAULT_WORKERS,
    accumulator: StatsAccumulator | None = None,
    progress_callback: Callable[[int, Path], None] | None = None,
) -> Iterator[Entry]:
    """
    Scan a directory and yield an Entry for everything found in it.

    Children of each directory are yielded in name order and a recursive
    scan descends depth-first, so the output is reproducible for a given
    directory snapshot. Stat calls for the children of one directory run
    on a thread pool, but results are consumed in order on the calling
    thread.

    Args:
        root: The directory to scan.
        recursive: Descend into subdirectories.
        exclude_dirs: Directories to skip entirely (neither yielded nor entered).
        max_workers: Size of the stat thread pool (1 disables it).
        accumulator: If given, every yielded entry is added to it.
        progress_callback: Called as (count, path) every 500 entries.

    Yields:
        Entry records, including directories and failed entries.

    Raises:
        RootNotFoundError, RootNotADirectoryError, RootPermissionError:
            if the root itself cannot be scanned.
    """
    root = validate_root(root)
    excluded = {Path(p) for p in exclude_dirs}

    root_stat = root.stat()
    visited = {(root_stat.st_dev, root_stat.st_ino)}

    pool = ThreadPoolExecutor(max_workers=max_workers) if max_workers > 1 else None
    scanned_count = 0

    def inspect_all(paths: list[Path]):
        if pool is None:
            return map(_inspect, paths)
        return pool.map(_inspect, paths)

    def walk(directory: Path, is_root: bool) -> Iterator[Entry]:
        try:
            children = _list_dir(directory)
        except PermissionError as e:
            if is_root:
                raise RootPermissionError(f"Permission denied: {directory} ({e.strerror})") from e
            yield _failed_entry(directory, True, e)
            return
        except FileNotFoundError as e:
            if is_root:
                raise RootNotFoundError(f"Directory not found: {directory}") from e
            yield _failed_entry(directory, True, e)
            return
        except OSError as e:
            if is_root:
                raise RootPermissionError(f"Cannot list {directory} ({e.strerror or e})") from e
            yield _failed_entry(directory, True, e)
            return

        children = [c for c in children if c not in excluded]

        for entry, identity in inspect_all(children):
            if entry is None:
                continue
            yield entry

            if not (recursive and entry.is_dir and not entry.failed):
                continue
            if entry.name in IGNORE_FOLDERS:
                continue
            # Symlink cycles show up as an identity we have already entered
            if identity in visited:
                continue
            visited.add(identity)

            yield from walk(entry.path, False)

    try:
        for entry in walk(root, True):
            scanned_count += 1
            if progress_callback and scanned_count % 500 == 0:
                progress_callback(scanned_count, entry.path)
            if accumulator is not None:
                accumulator.add(entry)
            yield entry
    finally:
        if pool is not None:
            pool.shutdown(wait=True)


def scan_and_summarize(
    root: Path,
    recursive: bool = False,
    exclude_dirs: Iterable[Path] = (),
    max_workers: int = DEFAULT_WORKERS,
    progress_callback: Callable[[int, Path], None] | None = None,
) -> tuple[list[Entry], ScanStats]:
    """
    Run a full scan and return the entries together with their statistics.

    Returns:
        (entries, stats) where stats is frozen once the scan has completed.
    """
    root = validate_root(root)
    accumulator = StatsAccumulator()
    entries = list(scan_directory(
        root,
        recursive=recursive,
        exclude_dirs=exclude_dirs,
        max_workers=max_workers,
        accumulator=accumulator,
        progress_callback=progress_callback,
    ))
    return entries, accumulator.freeze(root)


def find_category_folders(destination_root: Path) -> set[Path]:
    """
    Find existing category output folders directly under the destination root.

    A folder counts when its name could be a category (``txt``,
    ``no_extension``...) and it directly holds at least one file of that
    category, so an ordinary folder such as ``projects`` is not mistaken
    for one.
    """
    destination_root = Path(destination_root)
    folders = set()
    if not destination_root.is_dir():
        return folders
    try:
        children = _list_dir(destination_root)
    except OSError:
        return folders

    for child in children:
        if not is_category_name(child.name) or not child.is_dir():
            continue
        try:
            with os.scandir(child) as it:
                if any(classify_name(e.name) == child.name and e.is_file() for e in it):
                    folders.add(child)
        except OSError:
            continue
    return folders

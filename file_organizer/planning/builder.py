"""
Move plan generation.

Turns scanned entries into MoveActions targeting
``destination_root/<category>/<file name>``.
"""

import os
from pathlib import Path
from typing import Iterable

from ..classifier import split_name
from ..errors import CollisionUnresolvedError
from ..models import Entry, MoveAction

MAX_DISAMBIGUATION_ATTEMPTS = 10_000


def _is_inside(path: Path, folders: set[Path]) -> bool:
    return any(parent in folders for parent in path.parents)


def build_plan(
    entries: Iterable[Entry],
    destination_root: Path,
    exclude_dirs: Iterable[Path] = (),
) -> list[MoveAction]:
    """
    Build the ordered list of moves for a set of scanned entries.

    Directories, failed entries, entries inside ``exclude_dirs`` and
    files already sitting in their category folder are left out.

    Name collisions, either with something already on disk or with an
    earlier move in the same plan, get a counter inserted before the
    extension: ``name (1).ext``, ``name (2).ext``, ...

    Files that sit where a category folder has to go are moved first.

    Only reads the filesystem.

    Args:
        entries: Entries in the order they should be moved.
        destination_root: Folder that receives the category folders.
        exclude_dirs: Folders whose contents must not be moved.

    Returns:
        MoveActions with pairwise distinct destinations.

    Raises:
        CollisionUnresolvedError: If no free name was found within
            MAX_DISAMBIGUATION_ATTEMPTS tries.
    """
    destination_root = Path(destination_root)
    excluded = {Path(p) for p in exclude_dirs}

    seen_destinations: set[Path] = set()
    next_counters: dict[Path, int] = {}  # target path -> next counter to try
    actions: list[MoveAction] = []

    for entry in entries:
        if entry.is_dir or entry.failed:
            continue
        if excluded and _is_inside(entry.path, excluded):
            continue

        category_dir = destination_root / entry.category

        # Already organized
        if entry.path.parent == category_dir:
            continue

        target = category_dir / entry.name
        disambiguator = None

        if target in seen_destinations or os.path.lexists(target):
            stem, suffix = split_name(entry.name)
            counter = next_counters.get(target, 1)
            while True:
                if counter > MAX_DISAMBIGUATION_ATTEMPTS:
                    raise CollisionUnresolvedError(
                        f"No free name for {target} after {MAX_DISAMBIGUATION_ATTEMPTS} attempts"
                    )
                candidate = category_dir / f"{stem} ({counter}){suffix}"
                if candidate not in seen_destinations and not os.path.lexists(candidate):
                    break
                counter += 1
            next_counters[target] = counter + 1
            disambiguator = counter
            target = candidate

        seen_destinations.add(target)
        actions.append(MoveAction(
            source=entry.path,
            destination=target,
            category=entry.category,
            size=entry.size,
            disambiguator=disambiguator,
        ))

    # A file named like a category folder (``txt``) has to move out of the
    # way before anything can be moved into that folder
    blockers = {a.destination.parent for a in actions} & {a.source for a in actions}
    if blockers:
        actions = (
            [a for a in actions if a.source in blockers]
            + [a for a in actions if a.source not in blockers]
        )

    return actions

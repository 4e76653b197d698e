"""
Data records shared by the scanner, planner and executor.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Entry:
    """
    A filesystem entry captured by the scanner.

    Directories have no category. Entries that could not be read carry
    the "unreadable" category and the OS reason in ``error``.
    """
    path: Path
    is_dir: bool
    extension: str
    size: int
    mtime: datetime | None
    category: str | None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class CategoryStats:
    category: str
    count: int
    total_bytes: int


@dataclass(frozen=True)
class ScanStats:
    """Aggregate counts for one completed scan."""
    root: Path
    total_entries: int
    files: int
    directories: int
    total_bytes: int
    categories: tuple[CategoryStats, ...]
    failures: tuple[Entry, ...]

    def get(self, category: str) -> CategoryStats | None:
        for stats in self.categories:
            if stats.category == category:
                return stats
        return None


class StatsAccumulator:
    """
    Mutable builder for ScanStats.

    One accumulator is meant to be fed by a single thread; partial
    accumulators can be combined with ``merge``.
    """

    def __init__(self):
        self.total_entries = 0
        self.files = 0
        self.directories = 0
        self.total_bytes = 0
        self.counts: dict[str, int] = defaultdict(int)
        self.sizes: dict[str, int] = defaultdict(int)
        self.failures: list[Entry] = []

    def add(self, entry: Entry) -> None:
        self.total_entries += 1

        if entry.failed:
            self.failures.append(entry)
            self.counts[entry.category] += 1
            return

        if entry.is_dir:
            self.directories += 1
            return

        self.files += 1
        self.total_bytes += entry.size
        self.counts[entry.category] += 1
        self.sizes[entry.category] += entry.size

    def merge(self, other: "StatsAccumulator") -> None:
        self.total_entries += other.total_entries
        self.files += other.files
        self.directories += other.directories
        self.total_bytes += other.total_bytes
        for key, count in other.counts.items():
            self.counts[key] += count
        for key, size in other.sizes.items():
            self.sizes[key] += size
        self.failures.extend(other.failures)

    def freeze(self, root: Path) -> ScanStats:
        categories = tuple(
            CategoryStats(key, self.counts[key], self.sizes.get(key, 0))
            for key in sorted(self.counts)
        )
        return ScanStats(
            root=root,
            total_entries=self.total_entries,
            files=self.files,
            directories=self.directories,
            total_bytes=self.total_bytes,
            categories=categories,
            failures=tuple(sorted(self.failures, key=lambda e: str(e.path))),
        )


@dataclass(frozen=True)
class MoveAction:
    """A planned relocation of one file."""
    source: Path
    destination: Path
    category: str
    size: int = 0
    disambiguator: int | None = None


class MoveStatus(str, Enum):
    WOULD_MOVE = "would_move"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutionResult:
    action: MoveAction
    status: MoveStatus
    reason: str | None = None


@dataclass
class ExecutionReport:
    """Outcome of running a plan, in plan order."""
    dry_run: bool
    results: list[ExecutionResult] = field(default_factory=list)
    executed_at: str = ""

    def _count(self, status: MoveStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(MoveStatus.SUCCEEDED)

    @property
    def skipped(self) -> int:
        return self._count(MoveStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(MoveStatus.FAILED)

    @property
    def would_move(self) -> int:
        return self._count(MoveStatus.WOULD_MOVE)

    @property
    def bytes_moved(self) -> int:
        return sum(r.action.size for r in self.results if r.status == MoveStatus.SUCCEEDED)

    @property
    def failures(self) -> list[ExecutionResult]:
        return [r for r in self.results if r.status == MoveStatus.FAILED]

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "executed_at": self.executed_at,
            "succeeded_count": self.succeeded,
            "skipped_count": self.skipped,
            "failed_count": self.failed,
            "would_move_count": self.would_move,
            "bytes_moved": self.bytes_moved,
            "results": [
                {
                    "source": str(r.action.source),
                    "destination": str(r.action.destination),
                    "category": r.action.category,
                    "status": r.status.value,
                    "reason": r.reason,
                }
                for r in self.results
            ],
        }

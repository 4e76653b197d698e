"""
Plan execution for the File Organizer.

Applies (or simulates) a move plan on the filesystem.
"""

import errno
import os
import shutil
from datetime import datetime
from pathlib import Path

from rich.markup import escape
from tqdm import tqdm

from .errors import ActionError, CrossDeviceVerificationError, MoveFailedError
from .models import ExecutionReport, ExecutionResult, MoveAction, MoveStatus
from .utils import console, display_path


# Errors from os.link that mean "no hard links here", not "move failed"
_NO_HARDLINKS = {errno.EPERM, errno.EMLINK, errno.ENOSYS, errno.EOPNOTSUPP, getattr(errno, "ENOTSUP", errno.EOPNOTSUPP)}
_LINK_NO_FOLLOW = os.link in os.supports_follow_symlinks


def _os_reason(e: OSError) -> str:
    return e.strerror or str(e)


def _remove_quietly(path: Path) -> None:
    try:
        if os.path.lexists(path):
            path.unlink()
    except OSError:
        pass


def _rename_no_replace(src: Path, dst: Path) -> None:
    """
    Rename src to dst, raising FileExistsError instead of replacing dst.

    The hard link claims the destination name atomically, then the source
    name is dropped. Filesystems without hard links get a plain rename.
    """
    if not _LINK_NO_FOLLOW:
        os.rename(src, dst)
        return
    try:
        os.link(src, dst, follow_symlinks=False)
    except OSError as e:
        if isinstance(e, FileExistsError) or e.errno not in _NO_HARDLINKS:
            raise
        os.rename(src, dst)
        return
    try:
        os.unlink(src)
    except OSError:
        _remove_quietly(dst)
        raise


def _relink(src: Path, dst: Path) -> None:
    """Move a symlink with a relative target so it still points at the same file."""
    target = os.readlink(src)
    new_target = os.path.relpath(os.path.join(os.path.dirname(src), target), dst.parent)
    os.symlink(new_target, dst)
    try:
        src.unlink()
    except OSError:
        _remove_quietly(dst)
        raise


def _copy_then_delete(src: Path, dst: Path) -> None:
    """
    Move a file across filesystems: copy, verify, then delete the source.

    The destination is removed again whenever a later step fails, so the
    file always ends up in exactly one place.
    """
    if not src.is_symlink():
        # Claim the name first; copy2 writes into it
        try:
            with open(dst, "x"):
                pass
        except FileExistsError:
            raise MoveFailedError("Destination exists") from None
        except OSError as e:
            raise MoveFailedError(f"Cross-device copy failed: {_os_reason(e)}") from e

    try:
        shutil.copy2(src, dst, follow_symlinks=False)
    except FileExistsError:
        raise MoveFailedError("Destination exists") from None
    except OSError as e:
        _remove_quietly(dst)
        raise MoveFailedError(f"Cross-device copy failed: {_os_reason(e)}") from e

    try:
        src_size = src.lstat().st_size
        dst_size = dst.lstat().st_size
    except OSError as e:
        _remove_quietly(dst)
        raise MoveFailedError(f"Could not verify copy: {_os_reason(e)}") from e

    if src_size != dst_size:
        _remove_quietly(dst)
        raise CrossDeviceVerificationError(
            f"Copy verification failed ({dst_size} of {src_size} bytes); source kept"
        )

    try:
        src.unlink()
    except OSError as e:
        _remove_quietly(dst)
        raise MoveFailedError(f"Could not remove source after copy: {_os_reason(e)}") from e


def _move_file(action: MoveAction, created_dirs: set[Path]) -> ExecutionResult:
    """Move a single file and describe the outcome. Never raises for OS errors."""
    src = action.source
    dst = action.destination

    if not os.path.lexists(src):
        return ExecutionResult(action, MoveStatus.SKIPPED, "Source not found")

    if os.path.lexists(dst):
        return ExecutionResult(action, MoveStatus.FAILED, "Destination exists")

    try:
        parent = dst.parent
        if parent not in created_dirs:
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except FileExistsError:
                raise MoveFailedError(f"Cannot create folder, a file is in the way: {parent}")
            except OSError as e:
                raise MoveFailedError(f"Failed to create folder {parent}: {_os_reason(e)}") from e
            created_dirs.add(parent)

        try:
            if src.is_symlink() and not os.path.isabs(os.readlink(src)):
                _relink(src, dst)
            else:
                _rename_no_replace(src, dst)
        except FileExistsError:
            return ExecutionResult(action, MoveStatus.FAILED, "Destination exists")
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise MoveFailedError(_os_reason(e)) from e
            _copy_then_delete(src, dst)

    except ActionError as e:
        return ExecutionResult(action, MoveStatus.FAILED, str(e))

    return ExecutionResult(action, MoveStatus.SUCCEEDED)


def apply_plan(
    actions: list[MoveAction],
    dry_run: bool = True,
    show_progress: bool = True,
    root: Path | None = None,
) -> ExecutionReport:
    """
    Apply (or simulate) a move plan.

    Actions are processed one at a time in plan order. A failing action is
    recorded in the report and the run carries on with the next one.

    Args:
        actions: The validated plan.
        dry_run: If True, only print what would be moved.
        show_progress: Show a progress bar for real moves.
        root: Used to shorten the paths printed in dry-run mode.

    Returns:
        ExecutionReport with one result per action.
    """
    report = ExecutionReport(dry_run=dry_run)
    mode = "DRY-RUN" if dry_run else "APPLY"
    console.print(f"\n[{mode}] Processing {len(actions)} moves...")

    if dry_run:
        for action in actions:
            src = display_path(action.source, root)
            dst = display_path(action.destination, root)
            console.print(f"  [WOULD MOVE] {escape(src)} -> {escape(dst)}", soft_wrap=True)
            report.results.append(ExecutionResult(action, MoveStatus.WOULD_MOVE))
    else:
        created_dirs: set[Path] = set()
        with tqdm(total=len(actions), unit="file", disable=not show_progress) as pbar:
            for action in actions:
                result = _move_file(action, created_dirs)
                if result.status == MoveStatus.FAILED:
                    tqdm.write(f"[ERROR] {result.reason}: {action.source}")
                elif result.status == MoveStatus.SKIPPED:
                    tqdm.write(f"[SKIP] {result.reason}: {action.source}")
                report.results.append(result)
                pbar.update(1)

    report.executed_at = datetime.now().isoformat(timespec='seconds')
    return report


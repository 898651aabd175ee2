"""Empty-dirs task -- reclaim directories left with no content.

Directories are processed longest-path-first so children go before their
parents. For each one:

1. Case collisions. Siblings whose names differ only by case ("Live",
   "live") are resolved as one group by CaseCollision: every member is
   renamed to a unique temporary name, truly empty members are deleted,
   and survivors are renamed back. A failed rename rolls the whole group
   back, so a group is either fully applied or fully reverted.
2. Plain empties. A directory with zero entries is deleted.

Directories in the skip set (or beneath one) are left alone and reported.
Dry runs simulate removals so parents emptied only by their children's
removal are counted the same as in a live run.
"""

from __future__ import annotations

import os
import uuid
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..models import EmptyDirResult
from ..walker import count_items, relative_label, resolve_scan_root, walk_tree

if TYPE_CHECKING:
    from ..cancellation import CancellationToken
    from ..reporting import Reporter

log = logger.bind(stage="empty-dirs")

CASE_DUPLICATE_TAG = "-CASE-DUPLICATE-"


class CollisionState(StrEnum):
    DETECTED = "detected"
    RENAMING = "renaming"
    CHECKING = "checking"
    RESTORING = "restoring"
    RESOLVED = "resolved"
    ROLLING_BACK = "rolling_back"
    ROLLED_BACK = "rolled_back"


def is_truly_empty(
    path: Path,
    removed: set[Path] | frozenset[Path] = frozenset(),
) -> bool:
    """True if path has no entries, ignoring subdirectories listed in removed.

    Unreadable directories are never considered empty.
    """
    try:
        with os.scandir(path) as it:
            for entry in it:
                if entry.is_dir(follow_symlinks=False) and Path(entry.path) in removed:
                    continue
                return False
    except OSError as exc:
        log.error(f"Error checking if directory is truly empty: {path}: {exc}")
        return False
    return True


def find_case_insensitive_siblings(path: Path) -> list[Path]:
    """Sibling directories whose name equals path's name except for case."""
    name = path.name
    lowered = name.lower()
    siblings: list[Path] = []
    try:
        with os.scandir(path.parent) as it:
            for entry in it:
                if (
                    entry.is_dir(follow_symlinks=False)
                    and entry.name != name
                    and entry.name.lower() == lowered
                ):
                    siblings.append(Path(entry.path))
    except OSError as exc:
        log.error(f"Error finding case-insensitive siblings for {path}: {exc}")
    return sorted(siblings)


def is_skipped(path: Path, skip_paths: list[str]) -> bool:
    """True if path equals a skip entry or lies beneath one."""
    candidate = os.path.normpath(os.path.abspath(path)).lower()
    return any(
        candidate == skip or candidate.startswith(skip.rstrip(os.sep) + os.sep)
        for skip in skip_paths
    )


class CaseCollision:
    """Rename-check-restore protocol for one group of case-colliding siblings.

    renames maps each original path to its temporary path and drives both
    the restore (after the emptiness check) and the rollback (after a
    failed rename).
    """

    def __init__(self, members: list[Path]) -> None:
        self.members = members
        self.state = CollisionState.DETECTED
        self.renames: dict[Path, Path] = {}
        self.deleted: list[Path] = []
        self.failures: list[str] = []

    def temporary_path(self, original: Path, position: int) -> Path:
        name = f"{original.name}{CASE_DUPLICATE_TAG}{position}"
        candidate = original.with_name(name)
        if candidate.exists():
            candidate = original.with_name(f"{name}-{uuid.uuid4().hex[:8]}")
        return candidate

    def resolve(self) -> list[Path]:
        """Run the protocol. Returns the original paths that were deleted."""
        self.state = CollisionState.RENAMING
        for position, original in enumerate(self.members, start=1):
            temporary = self.temporary_path(original, position)
            log.info(f"Renaming for uniqueness: {original.name} -> {temporary.name}")
            try:
                original.rename(temporary)
            except OSError as exc:
                self.failures.append(f"Failed to rename {original.name}: {exc}")
                self._roll_back()
                return []
            self.renames[original] = temporary

        self.state = CollisionState.CHECKING
        for original, temporary in self.renames.items():
            if not is_truly_empty(temporary):
                continue
            try:
                temporary.rmdir()
            except OSError as exc:
                self.failures.append(f"Failed to delete {temporary.name}: {exc}")
                continue
            log.info(f"Deleted empty directory: {temporary.name}")
            self.deleted.append(original)

        self.state = CollisionState.RESTORING
        for original, temporary in self.renames.items():
            if original in self.deleted:
                continue
            log.info(f"Restoring original name: {temporary.name} -> {original.name}")
            try:
                temporary.rename(original)
            except OSError as exc:
                self.failures.append(
                    f"Failed to restore original name for {temporary}: {exc}"
                )

        self.state = CollisionState.RESOLVED
        return list(self.deleted)

    def _roll_back(self) -> None:
        self.state = CollisionState.ROLLING_BACK
        for original, temporary in reversed(list(self.renames.items())):
            log.info(f"Rolling back rename: {temporary.name} -> {original.name}")
            try:
                temporary.rename(original)
            except OSError as exc:
                self.failures.append(f"Failed to roll back {temporary}: {exc}")
        self.renames.clear()
        self.state = CollisionState.ROLLED_BACK


def run(
    root: Path,
    token: CancellationToken,
    reporter: Reporter,
    dry_run: bool = False,
    case_sensitive: bool = True,
    skip_paths: list[str] | None = None,
    **kwargs,
) -> EmptyDirResult:
    """Empty-dirs task -- resolve case collisions, then delete empty directories."""
    skip_paths = skip_paths or []
    base = resolve_scan_root(root, case_sensitive)
    if skip_paths:
        reporter.info(f"Loaded {len(skip_paths)} paths to skip from configuration")

    total = count_items(base, only_directories=True, token=token)
    reporter.info(f"Found {total} directories to process")

    directories: list[Path] = []
    reporter.progress_total(total, label="Scanning")
    try:
        for entry in walk_tree(
            base,
            token,
            reporter,
            count_directories_only=True,
            case_sensitive=case_sensitive,
        ):
            if entry.is_dir:
                directories.append(entry.path)
    finally:
        reporter.progress_done()
    reporter.success("Initial scan complete!")

    # Deepest first: children are always handled before their parents
    directories.sort(key=lambda p: len(str(p)), reverse=True)

    result = EmptyDirResult()
    removed: set[Path] = set()
    handled: set[Path] = set()
    skipped: list[Path] = []

    reporter.progress_total(len(directories), label="Checking")
    try:
        for directory in directories:
            token.check()
            reporter.progress_update(relative_label(directory, base))

            if is_skipped(directory, skip_paths):
                skipped.append(directory)
                continue
            if directory in handled or directory in removed:
                continue

            siblings = [
                s
                for s in find_case_insensitive_siblings(directory)
                if s not in removed and not is_skipped(s, skip_paths)
            ]
            if siblings:
                members = [directory, *siblings]
                handled.update(members)
                deleted = _resolve_collision(members, base, reporter, dry_run, removed)
                removed.update(deleted)
                result.empty_directories_deleted_or_identified += len(deleted)
                continue

            if not is_truly_empty(directory, removed):
                continue

            label = relative_label(directory, base)
            if dry_run:
                reporter.dry_run(f"Would delete empty directory: {label}")
            else:
                token.check()
                try:
                    directory.rmdir()
                except OSError as exc:
                    reporter.error(f"Failed to delete empty directory: {label}: {exc}")
                    continue
                reporter.success(f"Deleted empty directory: {label}")
            removed.add(directory)
            result.empty_directories_deleted_or_identified += 1
    finally:
        reporter.progress_done()

    if skipped:
        reporter.warning(f"{len(skipped)} skipped directories:")
        for directory in skipped:
            reporter.info(f"  - {relative_label(directory, base)}")

    if result.empty_directories_deleted_or_identified == 0:
        reporter.info("No empty directories found.")
    return result


def _resolve_collision(
    members: list[Path],
    base: Path,
    reporter: Reporter,
    dry_run: bool,
    removed: set[Path],
) -> list[Path]:
    """Handle one case-collision group. Returns the member paths removed."""
    original, *siblings = members
    reporter.warning(
        f"Found case-sensitive duplicate directories for: {original.name}"
    )
    reporter.info(f"  Original: {original.name}")
    for sibling in siblings:
        reporter.info(f"  Sibling: {sibling.name}")

    if dry_run:
        reporter.dry_run(
            f"Would rename {original.name} and {len(siblings)} sibling(s) "
            "to unique names before checking emptiness"
        )
        empty = [m for m in members if is_truly_empty(m, removed)]
        for member in empty:
            reporter.dry_run(
                f"Would delete empty directory: {relative_label(member, base)}"
            )
        return empty

    # The protocol runs to completion once started; no cancellation polling inside
    collision = CaseCollision(members)
    deleted = collision.resolve()
    for failure in collision.failures:
        reporter.error(failure)
    if collision.state == CollisionState.ROLLED_BACK:
        reporter.error(f"Rolled back case-collision group for: {original.name}")
    for member in deleted:
        reporter.success(f"Deleted empty directory: {relative_label(member, base)}")
    return deleted

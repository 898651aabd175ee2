"""Directories task -- merge sibling folders that are the same collection.

Directories are grouped by album context and fuzzy-normalized name.
The album context is the directory's parent relative to the scan root,
cut to its first two segments (Artist, or Artist/Album). Root-level
directories have no context and are never matched.

Within each group one directory is kept, chosen by successive filters:
    1. names with diacritics over plain ones ("Café" beats "Cafe")
    2. most immediate subfolders
    3. most recent modification time
    4. first in group order
Every other member is merged into the keeper and then deleted. File
collisions keep the larger copy; on equal size the keeper's copy stays.
"""

from __future__ import annotations

import os
import shutil
from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import MergeError
from ..models import DirectoryRecord, DirectoryResult
from ..normalize import has_diacritics, normalize_for_fuzzy_matching
from ..walker import count_items, relative_label, resolve_scan_root, walk_tree

if TYPE_CHECKING:
    from ..cancellation import CancellationToken
    from ..reporting import Reporter

log = logger.bind(stage="directories")

ALBUM_CONTEXT_DEPTH = 2


def album_context(path: Path, root: Path) -> str:
    """Parent of path relative to root, truncated to ALBUM_CONTEXT_DEPTH parts.

    Returns "" for root-level directories (and paths outside root).
    """
    try:
        parent_parts = Path(path).relative_to(root).parts[:-1]
    except ValueError:
        return ""
    return "/".join(parent_parts[:ALBUM_CONTEXT_DEPTH])


def _subfolder_count(path: Path) -> int:
    try:
        with os.scandir(path) as it:
            return sum(1 for e in it if e.is_dir(follow_symlinks=False))
    except OSError:
        return 0


def collect_directories(
    root: Path,
    token: CancellationToken,
    reporter: Reporter,
    case_sensitive: bool = True,
) -> list[DirectoryRecord]:
    """Walk root and describe every directory below it."""
    base = resolve_scan_root(root, case_sensitive)
    total = count_items(base, only_directories=True, token=token)
    reporter.info(f"Found {total} directories to check")

    records: list[DirectoryRecord] = []
    reporter.progress_total(total, label="Scanning")
    try:
        for entry in walk_tree(
            base,
            token,
            reporter,
            count_directories_only=True,
            case_sensitive=case_sensitive,
        ):
            if not entry.is_dir:
                continue
            records.append(
                DirectoryRecord(
                    path=entry.path,
                    name=entry.path.name,
                    subfolder_count=_subfolder_count(entry.path),
                    last_modified=entry.stat.st_mtime,
                    has_diacritics=has_diacritics(entry.path.name),
                )
            )
    finally:
        reporter.progress_done()

    reporter.success("Scanning complete!")
    return records


def group_directories(
    records: list[DirectoryRecord], root: Path
) -> dict[tuple[str, str], list[DirectoryRecord]]:
    """Group by (album context, normalized name), skipping root-level dirs."""
    groups: dict[tuple[str, str], list[DirectoryRecord]] = defaultdict(list)
    for record in records:
        context = album_context(record.path, root)
        if not context:
            continue
        groups[(context, normalize_for_fuzzy_matching(record.name))].append(record)
    return groups


def select_directory_to_keep(group: list[DirectoryRecord]) -> DirectoryRecord:
    """Apply the keep-priority filters and return the winner."""
    candidates = list(group)

    with_diacritics = [d for d in candidates if d.has_diacritics]
    if with_diacritics:
        candidates = with_diacritics

    most_subfolders = max(d.subfolder_count for d in candidates)
    candidates = [d for d in candidates if d.subfolder_count == most_subfolders]

    newest = max(d.last_modified for d in candidates)
    candidates = [d for d in candidates if d.last_modified == newest]

    return candidates[0]


def _counterpart(target: Path, name: str) -> Path:
    """Entry in target corresponding to name: exact, else case-insensitive."""
    exact = target / name
    if exact.exists():
        return exact
    lowered = name.lower()
    try:
        with os.scandir(target) as it:
            for entry in it:
                if entry.name.lower() == lowered:
                    return Path(entry.path)
    except OSError:
        pass
    return exact


def merge_directories(
    source: Path, target: Path, token: CancellationToken
) -> None:
    """Merge source into target, then delete source.

    Subdirectories merge recursively. A file already present in target is
    replaced only when the source copy is strictly larger. Raises
    MergeError (before source is deleted) when a file meets a directory
    of the same name.
    """
    log.debug(f"merge_directories(source={source}, target={target})")
    target.mkdir(parents=True, exist_ok=True)

    with os.scandir(source) as it:
        entries = list(it)

    for entry in entries:
        token.check()
        src = Path(entry.path)
        dest = _counterpart(target, entry.name)

        if entry.is_dir(follow_symlinks=False):
            if dest.exists() and not dest.is_dir():
                raise MergeError(source, target, f"'{entry.name}' is a file in target")
            merge_directories(src, dest, token)
            continue

        if dest.is_dir():
            raise MergeError(source, target, f"'{entry.name}' is a directory in target")

        if dest.exists():
            src_size = src.stat().st_size
            dest_size = dest.stat().st_size
            if src_size > dest_size:
                log.debug(f"Replace {dest} ({dest_size}) with {src} ({src_size})")
                dest.unlink()
                shutil.copy2(src, dest)
            else:
                log.debug(f"Keep {dest} ({dest_size}), drop {src} ({src_size})")
        else:
            log.debug(f"Copy {src} -> {dest}")
            shutil.copy2(src, dest)

    token.check()
    shutil.rmtree(source)


def _is_nested(a: Path, b: Path) -> bool:
    return a == b or a.is_relative_to(b) or b.is_relative_to(a)


def _is_inside_any(path: Path, sources: list[Path]) -> bool:
    """True if path is one of sources or lies beneath one."""
    return any(path == s or path.is_relative_to(s) for s in sources)


def run(
    root: Path,
    token: CancellationToken,
    reporter: Reporter,
    dry_run: bool = False,
    case_sensitive: bool = True,
    **kwargs,
) -> DirectoryResult:
    """Directories task -- merge fuzzy-duplicate sibling directories."""
    reporter.info("Looking for similar directory names...")
    base = resolve_scan_root(root, case_sensitive)
    records = collect_directories(base, token, reporter, case_sensitive)
    token.check()

    groups = [
        (key, group)
        for key, group in group_directories(records, base).items()
        if len(group) > 1
    ]
    # Deepest first, so nested groups merge before their ancestors move
    groups.sort(key=lambda kv: max(len(d.path.parts) for d in kv[1]), reverse=True)

    result = DirectoryResult()
    merged = 0
    # Sources merged (or, in a dry run, reported as merged) so far
    merged_away: list[Path] = []

    for (context, normalized_name), group in groups:
        token.check()
        group = [d for d in group if not _is_inside_any(d.path, merged_away)]
        if not dry_run:
            group = [d for d in group if d.path.is_dir()]
        if len(group) < 2:
            continue

        reporter.info(f"Checking context: {context}")
        reporter.info(f"Found fuzzy matches for: {normalized_name}")
        for d in group:
            reporter.info(
                f"- {d.name} ({relative_label(d.path, base)}) "
                f"subfolders={d.subfolder_count} has_diacritics={d.has_diacritics}"
            )

        keep = select_directory_to_keep(group)
        reporter.success(f"Keeping: {keep.name} ({relative_label(keep.path, base)})")

        for d in group:
            if d is keep:
                continue
            token.check()
            label = f"{d.name} ({relative_label(d.path, base)})"
            if _is_nested(d.path, keep.path):
                reporter.warning(f"Skipping nested match: {label}")
                continue

            if dry_run:
                reporter.dry_run(f"Would merge and delete: {label}")
            else:
                try:
                    merge_directories(d.path, keep.path, token)
                except (OSError, MergeError) as exc:
                    reporter.error(f"Failed to merge {label}: {exc}")
                    continue
                reporter.success(f"Merged and deleted: {label}")
                merged += 1
            merged_away.append(d.path)
            result.directories_merged_or_processed += 1

    if result.directories_merged_or_processed == 0:
        reporter.info("No similar directories found that needed to be merged.")
    elif not dry_run:
        reporter.success(f"Merged {merged} directories.")
    return result

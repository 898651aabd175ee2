"""Duplicates task -- keep the largest copy of each track, drop the rest.

Files are grouped by parent directory, then by base name with any trailing
" (N)" copy counter stripped. In each group of two or more the largest file
is kept (first in listing order on a size tie) and the others are deleted.
Equal size is taken as equal content; nothing is hashed. Once the group's
deletions are done, a keeper still named "Song (2)" is renamed to "Song".
"""

from __future__ import annotations

import re
from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..inventory import scan_audio_files
from ..models import AudioRecord, DuplicateResult
from ..normalize import strip_counter_suffix
from ..reporting import readable_file_size
from ..walker import relative_label, resolve_scan_root

if TYPE_CHECKING:
    from ..cancellation import CancellationToken
    from ..reporting import Reporter

log = logger.bind(stage="duplicates")

_KEEPER_SUFFIX_RE = re.compile(r"^(.+?)\s+\(\d+\)$")


def group_duplicates(
    records: list[AudioRecord],
) -> dict[Path, dict[str, list[AudioRecord]]]:
    """Group records by parent directory, then by counter-stripped base name."""
    groups: dict[Path, dict[str, list[AudioRecord]]] = defaultdict(
        lambda: defaultdict(list)
    )
    for record in records:
        groups[record.path.parent][strip_counter_suffix(record.base_name)].append(
            record
        )
    return groups


def renamed_keeper_path(record: AudioRecord) -> Path | None:
    """Path the keeper should take once its " (N)" suffix is dropped."""
    match = _KEEPER_SUFFIX_RE.match(record.base_name)
    if not match:
        return None
    return record.path.with_name(f"{match.group(1)}{record.path.suffix}")


def run(
    root: Path,
    token: CancellationToken,
    reporter: Reporter,
    dry_run: bool = False,
    case_sensitive: bool = True,
    **kwargs,
) -> DuplicateResult:
    """Duplicates task -- resolve every same-directory duplicate group under root."""
    base = resolve_scan_root(root, case_sensitive)
    records = scan_audio_files(base, token, reporter, case_sensitive=case_sensitive)
    token.check()

    groups = group_duplicates(records)
    reporter.info(f"Grouped files across {len(groups)} directories")

    result = DuplicateResult()
    duplicate_groups = 0
    dirs_with_duplicates = 0

    reporter.progress_total(len(groups), label="Checking")
    try:
        for directory, by_name in groups.items():
            token.check()
            relative_dir = relative_label(directory, base)
            reporter.progress_update(relative_dir)

            found_in_dir = False
            for base_name, group in by_name.items():
                token.check()
                if len(group) < 2:
                    continue
                if not found_in_dir:
                    found_in_dir = True
                    dirs_with_duplicates += 1
                duplicate_groups += 1

                reporter.info(f"Found duplicates in: {relative_dir}")
                reporter.info(f"Duplicates for: {base_name}")
                try:
                    _resolve_group(group, token, reporter, dry_run, result)
                except OSError as exc:
                    reporter.error(f"Error resolving duplicates for {base_name}: {exc}")
    finally:
        reporter.progress_done()

    if duplicate_groups == 0:
        reporter.info("No duplicates found.")
    else:
        reporter.success(
            f"Found {duplicate_groups} duplicate groups across "
            f"{dirs_with_duplicates} directories."
        )
    return result


def _resolve_group(
    group: list[AudioRecord],
    token: CancellationToken,
    reporter: Reporter,
    dry_run: bool,
    result: DuplicateResult,
) -> None:
    # sorted() is stable, so size ties keep listing order
    keeper, *extras = sorted(group, key=lambda r: r.size, reverse=True)
    log.debug(
        f"Group of {len(group)}: keeper={keeper.path.name} size={keeper.size}, "
        f"extras={[r.path.name for r in extras]}"
    )
    reporter.success(
        f"Keeping: {keeper.path.name} ({readable_file_size(keeper.size)})"
    )

    deleted: set[Path] = set()
    for record in extras:
        token.check()
        label = f"{record.path.name} ({readable_file_size(record.size)})"
        if dry_run:
            reporter.dry_run(f"Would delete: {label}")
        else:
            try:
                record.path.unlink()
            except OSError as exc:
                reporter.error(f"Failed to delete: {label}: {exc}")
                continue
            reporter.info(f"Deleted: {label}")
        deleted.add(record.path)
        result.duplicate_files_deleted += 1

    # Rename only after every deletion in the group has completed
    new_path = renamed_keeper_path(keeper)
    if new_path is None:
        return

    token.check()
    label = f"{keeper.path.name} -> {new_path.name}"
    if new_path.exists() and new_path not in deleted:
        reporter.error(f"Failed to rename: {label} (target already exists)")
        return

    if dry_run:
        reporter.dry_run(f"Would rename: {label}")
    else:
        try:
            keeper.path.rename(new_path)
        except OSError as exc:
            reporter.error(f"Failed to rename: {label}: {exc}")
            return
        reporter.info(f"Renamed: {label}")
    result.files_renamed += 1

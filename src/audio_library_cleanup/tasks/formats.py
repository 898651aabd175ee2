"""Formats task -- delete lossy copies shadowed by a lossless copy.

Files are grouped by parent directory and a fuzzy-normalized base name
(counter stripped, lowercased, diacritics removed, '&' -> 'and'). When a
group holds both a lossless and a lossy file, every lossy file in it is
deleted. Sizes are not compared: lossless always wins.
"""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..inventory import scan_audio_files
from ..models import LOSSLESS_EXTENSIONS, LOSSY_EXTENSIONS, AudioRecord, FormatResult
from ..normalize import normalize_for_fuzzy_matching, strip_counter_suffix
from ..reporting import readable_file_size
from ..walker import relative_label, resolve_scan_root

if TYPE_CHECKING:
    from ..cancellation import CancellationToken
    from ..reporting import Reporter

log = logger.bind(stage="formats")


def format_key(base_name: str) -> str:
    """Normalized base name shared by every format of the same track."""
    return normalize_for_fuzzy_matching(strip_counter_suffix(base_name))


def group_formats(
    records: list[AudioRecord],
) -> dict[tuple[Path, str], list[AudioRecord]]:
    groups: dict[tuple[Path, str], list[AudioRecord]] = defaultdict(list)
    for record in records:
        groups[(record.path.parent, format_key(record.base_name))].append(record)
    return groups


def shadowed_files(group: list[AudioRecord]) -> list[AudioRecord]:
    """Lossy records made redundant by a lossless record in the same group."""
    if not any(r.extension in LOSSLESS_EXTENSIONS for r in group):
        return []
    return [r for r in group if r.extension in LOSSY_EXTENSIONS]


def run(
    root: Path,
    token: CancellationToken,
    reporter: Reporter,
    dry_run: bool = False,
    case_sensitive: bool = True,
    **kwargs,
) -> FormatResult:
    """Formats task -- delete lossy files wherever a lossless twin exists."""
    base = resolve_scan_root(root, case_sensitive)
    records = scan_audio_files(base, token, reporter, case_sensitive=case_sensitive)
    token.check()

    groups = group_formats(records)
    result = FormatResult()
    shadowed_groups = 0

    for (directory, key), group in groups.items():
        token.check()
        lossy = shadowed_files(group)
        if not lossy:
            continue

        shadowed_groups += 1
        reporter.info(
            f"Found FLAC and MP3 versions for: {key} "
            f"({relative_label(directory, base)})"
        )
        log.debug(f"Group {key}: {[r.path.name for r in group]}")

        for record in lossy:
            token.check()
            label = f"{record.path.name} ({readable_file_size(record.size)})"
            if dry_run:
                reporter.dry_run(f"Would delete lossy copy: {label}")
            else:
                try:
                    record.path.unlink()
                except OSError as exc:
                    reporter.error(f"Failed to delete lossy copy: {label}: {exc}")
                    continue
                reporter.info(f"Deleted lossy copy: {label}")
            result.mp3_files_deleted += 1

    if shadowed_groups == 0:
        reporter.info("No lossy files shadowed by a lossless copy.")
    else:
        reporter.success(
            f"Found {shadowed_groups} tracks with both lossless and lossy copies."
        )
    return result

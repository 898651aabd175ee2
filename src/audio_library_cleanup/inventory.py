"""Audio inventory -- flat records of every recognized audio file under a root."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from .models import AUDIO_EXTENSIONS, AudioRecord
from .walker import count_items, resolve_scan_root, walk_tree

if TYPE_CHECKING:
    from .cancellation import CancellationToken
    from .reporting import Reporter

log = logger.bind(stage="inventory")


def is_audio_file(name: str) -> bool:
    """Case-insensitive extension check against AUDIO_EXTENSIONS."""
    return Path(name).suffix.lower() in AUDIO_EXTENSIONS


def scan_audio_files(
    root: Path,
    token: CancellationToken,
    reporter: Reporter,
    case_sensitive: bool = True,
) -> list[AudioRecord]:
    """Walk root and return an AudioRecord for each audio file, in listing order."""
    log.debug(f"scan_audio_files(root={root}, case_sensitive={case_sensitive})")
    base = resolve_scan_root(root, case_sensitive)

    reporter.info("Counting items to process...")
    total = count_items(base, token=token)
    reporter.info(f"Found {total} items in directory, looking for audio files")

    records: list[AudioRecord] = []
    reporter.progress_total(total, label="Scanning")
    try:
        for entry in walk_tree(base, token, reporter, case_sensitive=case_sensitive):
            if entry.is_dir or not is_audio_file(entry.path.name):
                continue
            records.append(
                AudioRecord(
                    path=entry.path,
                    base_name=entry.path.stem,
                    size=entry.stat.st_size,
                    extension=entry.path.suffix.lower(),
                )
            )
    finally:
        reporter.progress_done()

    reporter.success(f"Scanning complete! Found {len(records)} audio files.")
    return records

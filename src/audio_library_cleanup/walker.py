"""Recursive, cancellable directory traversal.

walk_tree() yields every file and directory under a root before descending
into it, using os.scandir() so names keep their on-disk case. The root is
case-corrected first; a root that can't be found raises ScanRootError
before anything is yielded.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from loguru import logger

from .errors import ScanRootError
from .normalize import correct_case

if TYPE_CHECKING:
    from .cancellation import CancellationToken
    from .reporting import Reporter

log = logger.bind(stage="walker")


class TreeEntry(NamedTuple):
    path: Path
    is_dir: bool
    stat: os.stat_result


def resolve_scan_root(root: Path, case_sensitive: bool = True) -> Path:
    """Case-correct root. Raises ScanRootError if no such directory exists."""
    root = Path(root)
    corrected = correct_case(root, case_sensitive)
    if not corrected.is_dir():
        log.error(f"Directory does not exist: {root}")
        raise ScanRootError(root)
    if corrected != root:
        log.info(f"Corrected path case: {root} -> {corrected}")
    return corrected


def walk_tree(
    root: Path,
    token: CancellationToken,
    reporter: Reporter | None = None,
    *,
    count_directories_only: bool = False,
    case_sensitive: bool = True,
) -> Iterator[TreeEntry]:
    """Yield a TreeEntry for every file and directory under root.

    Each entry is yielded before its subtree. Progress is reported per
    entry, or per directory when count_directories_only is set. The token
    is polled on every recursion and every entry.
    """
    base = resolve_scan_root(root, case_sensitive)
    yield from _walk(base, base, token, reporter, count_directories_only)


def _walk(
    directory: Path,
    base: Path,
    token: CancellationToken,
    reporter: Reporter | None,
    count_directories_only: bool,
) -> Iterator[TreeEntry]:
    token.check()
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as exc:
        log.warning(f"Error traversing directory {directory}: {exc}")
        return

    for entry in entries:
        token.check()
        path = Path(entry.path)
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            stat = entry.stat(follow_symlinks=False)
        except OSError as exc:
            log.debug(f"Skipping unreadable entry {path}: {exc}")
            continue

        yield TreeEntry(path, is_dir, stat)

        if reporter is not None and (is_dir or not count_directories_only):
            reporter.progress_update(path.relative_to(base))

        if is_dir:
            yield from _walk(path, base, token, reporter, count_directories_only)


def count_items(
    root: Path,
    only_directories: bool = False,
    token: CancellationToken | None = None,
) -> int:
    """Best-effort count of entries under root, for progress totals.

    Unreadable subtrees contribute nothing (os.walk ignores errors).
    """
    total = 0
    for _dirpath, dirnames, filenames in os.walk(root):
        if token is not None:
            token.check()
        total += len(dirnames)
        if not only_directories:
            total += len(filenames)
    return total


def relative_label(path: Path, root: Path) -> str:
    """Display path relative to root, falling back to the full path."""
    try:
        return str(Path(path).relative_to(root)) or "."
    except ValueError:
        return str(path)

"""Name normalization and case correction against the real filesystem."""

import os
import re
import tempfile
import unicodedata
from pathlib import Path

from loguru import logger

log = logger.bind(stage="normalize")

_COMBINING_MARKS_RE = re.compile("[\u0300-\u036f]")
_WHITESPACE_RE = re.compile(r"\s+")
_COUNTER_SUFFIX_RE = re.compile(r"\(\d+\)$")


def normalize_for_fuzzy_matching(name: str) -> str:
    """Normalize a name for fuzzy equality.

    Lowercases, strips diacritics (NFD + combining marks), maps '&' to
    'and', collapses whitespace runs, and trims.
    """
    text = unicodedata.normalize("NFD", name.lower())
    text = _COMBINING_MARKS_RE.sub("", text)
    text = text.replace("&", "and")
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def has_diacritics(name: str) -> bool:
    """True if name carries a combining mark or composes differently."""
    if _COMBINING_MARKS_RE.search(name):
        return True
    return len(unicodedata.normalize("NFD", name)) != len(
        unicodedata.normalize("NFC", name)
    )


def strip_counter_suffix(name: str) -> str:
    """Strip a trailing copy counter: 'Song (2)' -> 'Song'."""
    return _COUNTER_SUFFIX_RE.sub("", name).strip()


def correct_case(path: Path, case_sensitive: bool = True) -> Path:
    """Return path with each component in its real on-disk case.

    On a case-sensitive filesystem an existing path is returned as-is.
    Otherwise the path is rebuilt from its anchor, substituting the
    directory entry that matches each component case-insensitively.
    Components with no match (or whose parent can't be listed) are kept
    verbatim, so the result may not exist -- callers must check.
    """
    path = Path(path)
    if case_sensitive and path.exists():
        return path

    if path.anchor:
        current = Path(path.anchor)
        parts = path.parts[1:]
    else:
        current = Path(".")
        parts = path.parts

    for part in parts:
        if part in (".", ".."):
            current = current / part
            continue
        try:
            names = os.listdir(current)
        except OSError:
            current = current / part
            continue
        if part in names:
            current = current / part
            continue
        lowered = part.lower()
        match = next((n for n in names if n.lower() == lowered), part)
        current = current / match

    if current != path:
        log.debug(f"correct_case: {path} -> {current}")
    return current


def probe_case_sensitivity(directory: Path) -> bool:
    """Determine whether the filesystem holding directory is case-sensitive.

    Uses the directory's own name with swapped case when it has letters
    (read-only). Falls back to a short-lived probe file otherwise.
    Returns True when the probe can't run.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return True

    name = directory.name
    swapped = name.swapcase()
    if name and swapped != name:
        twin = directory.with_name(swapped)
        try:
            result = not (twin.exists() and os.path.samefile(directory, twin))
        except OSError:
            result = True
        log.debug(f"probe_case_sensitivity({directory}) -> {result} (name probe)")
        return result

    try:
        with tempfile.NamedTemporaryFile(prefix=".casetest-", dir=directory) as fh:
            probe = Path(fh.name)
            result = not probe.with_name(probe.name.upper()).exists()
    except OSError as exc:
        log.warning(f"Case sensitivity probe failed in {directory}: {exc}")
        return True
    log.debug(f"probe_case_sensitivity({directory}) -> {result} (file probe)")
    return result

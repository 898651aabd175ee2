"""Core enums, constants, and record types for library cleanup.

Enums:
    CleanupTask    -- One reconciliation pass (duplicates, formats, directories,
                      empty-dirs). Values double as results file suffixes.

Records:
    AudioRecord     -- A recognized audio file found by the inventory scan.
    DirectoryRecord -- A directory candidate for fuzzy matching.

Results:
    DuplicateResult, FormatResult, DirectoryResult, EmptyDirResult -- per-pass
    counters. to_dict() emits the camelCase keys written to the results files.
"""

from dataclasses import dataclass, field, fields
from enum import StrEnum
from pathlib import Path


class CleanupTask(StrEnum):
    DUPLICATES = "duplicates"
    FORMATS = "formats"
    DIRECTORIES = "directories"
    EMPTY_DIRS = "empty-dirs"


# Reclaimer runs last so it sees what the other passes leave behind
TASK_ORDER: list[CleanupTask] = [
    CleanupTask.DUPLICATES,
    CleanupTask.FORMATS,
    CleanupTask.DIRECTORIES,
    CleanupTask.EMPTY_DIRS,
]

TASK_LABELS: dict[CleanupTask, str] = {
    CleanupTask.DUPLICATES: "Duplicate Files Cleanup",
    CleanupTask.FORMATS: "MP3/FLAC Cleanup",
    CleanupTask.DIRECTORIES: "Similar Directory Name Cleanup",
    CleanupTask.EMPTY_DIRS: "Empty Directories Cleanup",
}

LOSSLESS_EXTENSIONS: frozenset[str] = frozenset({".flac"})

LOSSY_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".mp3",
        ".m4a",
        ".ogg",
        ".wma",
    }
)

# .wav is recognized but never shadows or is shadowed by another format
AUDIO_EXTENSIONS: frozenset[str] = LOSSLESS_EXTENSIONS | LOSSY_EXTENSIONS | {".wav"}


@dataclass(frozen=True)
class AudioRecord:
    """A recognized audio file. Valid only for the scan that produced it."""

    path: Path
    base_name: str  # file name without extension
    size: int
    extension: str  # lowercased, with leading dot


@dataclass(frozen=True)
class DirectoryRecord:
    """A directory considered by the fuzzy matcher."""

    path: Path
    name: str
    subfolder_count: int
    last_modified: float  # st_mtime
    has_diacritics: bool


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass
class TaskResult:
    """Base for per-pass counters."""

    def to_dict(self) -> dict[str, int]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass
class DuplicateResult(TaskResult):
    duplicate_files_deleted: int = 0
    files_renamed: int = 0


@dataclass
class FormatResult(TaskResult):
    mp3_files_deleted: int = 0


@dataclass
class DirectoryResult(TaskResult):
    directories_merged_or_processed: int = 0


@dataclass
class EmptyDirResult(TaskResult):
    empty_directories_deleted_or_identified: int = 0


@dataclass
class RunSummary:
    """Outcome of one CleanupRunner.run() call."""

    root: Path
    dry_run: bool = False
    results: dict[str, dict[str, int]] = field(default_factory=dict)
    interrupted: bool = False

"""Tests for models.py -- task enum, extensions, counters."""

from audio_library_cleanup.models import (
    AUDIO_EXTENSIONS,
    LOSSLESS_EXTENSIONS,
    LOSSY_EXTENSIONS,
    TASK_LABELS,
    TASK_ORDER,
    CleanupTask,
    DirectoryResult,
    DuplicateResult,
    EmptyDirResult,
    FormatResult,
)


class TestCleanupTask:
    def test_values(self):
        assert [t.value for t in CleanupTask] == [
            "duplicates",
            "formats",
            "directories",
            "empty-dirs",
        ]

    def test_reclaimer_runs_last(self):
        assert TASK_ORDER[-1] == CleanupTask.EMPTY_DIRS
        assert set(TASK_ORDER) == set(CleanupTask)

    def test_every_task_labelled(self):
        assert set(TASK_LABELS) == set(CleanupTask)


class TestExtensions:
    def test_lossless_and_lossy_disjoint(self):
        assert not LOSSLESS_EXTENSIONS & LOSSY_EXTENSIONS

    def test_wav_recognized_but_neutral(self):
        assert ".wav" in AUDIO_EXTENSIONS
        assert ".wav" not in LOSSLESS_EXTENSIONS | LOSSY_EXTENSIONS


class TestResultCounters:
    def test_duplicates_keys(self):
        result = DuplicateResult(duplicate_files_deleted=2, files_renamed=1)
        assert result.to_dict() == {"duplicateFilesDeleted": 2, "filesRenamed": 1}

    def test_other_keys(self):
        assert FormatResult().to_dict() == {"mp3FilesDeleted": 0}
        assert DirectoryResult().to_dict() == {"directoriesMergedOrProcessed": 0}
        assert EmptyDirResult().to_dict() == {
            "emptyDirectoriesDeletedOrIdentified": 0
        }

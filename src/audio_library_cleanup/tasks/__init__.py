"""Task registry -- maps CleanupTask values to run functions.

Default order: duplicates -> formats -> directories -> empty-dirs

Tasks:
    duplicates  -- Group audio files by parent directory and base name with
                   any trailing " (N)" counter stripped. Keep the largest file
                   per group (first in listing order on a tie), delete the
                   rest, then rename a keeper still carrying " (N)". Counters:
                   duplicateFilesDeleted, filesRenamed.
    formats     -- Group by parent directory and fuzzy-normalized base name.
                   Delete every lossy file (.mp3, .m4a, .ogg, .wma) in a group
                   that also holds a lossless .flac. Sizes are not compared.
                   Counter: mp3FilesDeleted.
    directories -- Group sibling directories by two-level album context and
                   fuzzy-normalized name. Keep one per group (diacritics ->
                   subfolder count -> mtime -> order) and merge the others
                   into it, larger file wins on collision. Dry-run reports
                   only. Counter: directoriesMergedOrProcessed.
    empty-dirs  -- Deepest-first reclaim. Case-colliding sibling directories
                   go through a rename-check-restore protocol with rollback;
                   then directories with zero entries are deleted. Honors the
                   skip set. Counter: emptyDirectoriesDeletedOrIdentified.

Every run function takes (root, token, reporter, dry_run, case_sensitive,
**kwargs) and returns a TaskResult.
"""

from ..models import CleanupTask


def get_task_runner(task: CleanupTask):
    """Return the run function for a given task."""
    if task == CleanupTask.DUPLICATES:
        from .duplicates import run as duplicates_run

        return duplicates_run

    if task == CleanupTask.FORMATS:
        from .formats import run as formats_run

        return formats_run

    if task == CleanupTask.DIRECTORIES:
        from .directories import run as directories_run

        return directories_run

    if task == CleanupTask.EMPTY_DIRS:
        from .empty_dirs import run as empty_dirs_run

        return empty_dirs_run

    raise NotImplementedError(f"Task '{task}' is not implemented.")

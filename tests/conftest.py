"""Shared fixtures for cleanup tests."""

import os
from pathlib import Path

import pytest

from audio_library_cleanup.cancellation import CancellationToken
from audio_library_cleanup.reporting import Reporter

# Env vars that pydantic-settings reads -- must be cleaned so tests see defaults
CONFIG_ENV_VARS = [
    "AUDIO_LIBRARY_PATH", "SKIP_PATHS_CONFIG", "DRY_RUN", "VERBOSE",
    "LOG_LEVEL", "RESULTS_DIR", "WRITE_RESULTS", "LOG_DIR",
]


class RecordingReporter(Reporter):
    """Reporter that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []
        self.progress: list[tuple[str, object]] = []

    def info(self, message: str) -> None:
        self.events.append(("info", message))

    def success(self, message: str) -> None:
        self.events.append(("success", message))

    def warning(self, message: str) -> None:
        self.events.append(("warning", message))

    def error(self, message: str) -> None:
        self.events.append(("error", message))

    def dry_run(self, message: str) -> None:
        self.events.append(("dry_run", message))

    def progress_total(self, total: int, label: str = "Scanning") -> None:
        self.progress.append(("total", (label, total)))

    def progress_update(self, path) -> None:
        self.progress.append(("update", str(path)))

    def progress_done(self) -> None:
        self.progress.append(("done", None))

    def messages(self, kind: str) -> list[str]:
        return [m for k, m in self.events if k == kind]


def write_file(path: Path, size: int = 0, mtime: float | None = None) -> Path:
    """Create path (and parents) holding size bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x00" * size)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def token():
    return CancellationToken()


@pytest.fixture
def make_file():
    return write_file


@pytest.fixture
def clean_env(monkeypatch):
    """Remove cleanup env vars so config tests see actual defaults."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def tree_snapshot(root: Path) -> dict[str, int | None]:
    """Relative path -> size (None for directories) for everything under root."""
    snapshot: dict[str, int | None] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames:
            snapshot[os.path.relpath(os.path.join(dirpath, name), root)] = None
        for name in filenames:
            full = os.path.join(dirpath, name)
            snapshot[os.path.relpath(full, root)] = os.path.getsize(full)
    return snapshot


@pytest.fixture
def snapshot():
    return tree_snapshot

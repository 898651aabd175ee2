"""Reporting sink for cleanup events.

Components emit discrete events (info, success, warning, error, dry-run
notices, progress) to a Reporter. The base class writes them through
loguru; ConsoleReporter also drives a click progress bar.
"""

from __future__ import annotations

from contextlib import ExitStack
from pathlib import Path

import click
from loguru import logger


def readable_file_size(size: int, decimals: int = 2) -> str:
    """Render a byte count as e.g. '4.77 MB'."""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{value:.{decimals}f} {units[unit]}"


class Reporter:
    """Event sink. Rendering is up to the subclass; the core doesn't care."""

    def info(self, message: str) -> None:
        logger.opt(depth=1).info(message)

    def success(self, message: str) -> None:
        logger.opt(depth=1).success(message)

    def warning(self, message: str) -> None:
        logger.opt(depth=1).warning(message)

    def error(self, message: str) -> None:
        logger.opt(depth=1).error(message)

    def dry_run(self, message: str) -> None:
        logger.opt(depth=1).info(f"[DRY-RUN] {message}")

    def progress_total(self, total: int, label: str = "Scanning") -> None:
        """Start a new progress stream with a known item count."""

    def progress_update(self, path: Path | str) -> None:
        """Advance the current progress stream by one item."""

    def progress_done(self) -> None:
        """Finish the current progress stream, if any."""


class ConsoleReporter(Reporter):
    """Reporter that renders progress with click.progressbar."""

    def __init__(self) -> None:
        self._stack: ExitStack | None = None
        self._bar = None

    def progress_total(self, total: int, label: str = "Scanning") -> None:
        self.progress_done()
        self._stack = ExitStack()
        self._bar = self._stack.enter_context(
            click.progressbar(
                length=max(total, 0),
                label=label,
                show_pos=True,
                item_show_func=lambda item: str(item) if item else "",
            )
        )

    def progress_update(self, path: Path | str) -> None:
        if self._bar is not None:
            self._bar.update(1, path)

    def progress_done(self) -> None:
        if self._stack is not None:
            self._stack.close()
        self._stack = None
        self._bar = None

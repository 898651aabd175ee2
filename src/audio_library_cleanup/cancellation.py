"""Cooperative cancellation for cleanup passes.

The runner creates one CancellationToken per run and hands it to every
component that loops over groups, files, or directories. Components call
token.check() at the top of each loop body and before each destructive
operation; a tripped token raises CleanupInterrupted.
"""

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger

from .errors import CleanupInterrupted

log = logger.bind(stage="cancel")


class CancellationToken:
    """Process-local cancellation flag owned by a single run."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self) -> None:
        """Raise CleanupInterrupted if the token has been tripped."""
        if self._event.is_set():
            raise CleanupInterrupted()


@contextmanager
def handle_interrupts(token: CancellationToken) -> Iterator[CancellationToken]:
    """Route SIGINT to token.cancel() for the duration of the block.

    The first Ctrl+C requests a graceful stop at the next polling point.
    A second one raises KeyboardInterrupt. Outside the main thread
    signal handlers cannot be installed, so the block runs unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def _on_sigint(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt
        log.warning(
            "Gracefully shutting down... "
            "Please wait for the current operation to complete."
        )
        token.cancel()

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)

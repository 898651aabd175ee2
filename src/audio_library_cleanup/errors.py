"""Exception hierarchy for library cleanup."""

from pathlib import Path

USER_INTERRUPTION_MESSAGE = "Cleanup process halted by user."


class CleanupError(Exception):
    """Base exception for all cleanup errors."""


class ConfigError(CleanupError):
    """Invalid or missing configuration."""


class ScanRootError(CleanupError):
    """The scan root cannot be found or case-corrected. Fatal for the pass."""

    def __init__(self, root: Path) -> None:
        super().__init__(f"Directory does not exist: {root}")
        self.root = root


class MergeError(CleanupError):
    """A directory merge hit an entry it cannot reconcile."""

    def __init__(self, source: Path, target: Path, reason: str) -> None:
        super().__init__(f"Cannot merge {source} into {target}: {reason}")
        self.source = source
        self.target = target
        self.reason = reason


class CleanupInterrupted(Exception):
    """The operator interrupted the run.

    Not a CleanupError. Per-group error handlers never catch it; it
    unwinds to the runner.
    """

    def __init__(self, message: str = USER_INTERRUPTION_MESSAGE) -> None:
        super().__init__(message)

"""Cleanup runner -- drives the reconciliation passes over one library root."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from .cancellation import CancellationToken, handle_interrupts
from .config import CleanupConfig, load_skip_paths
from .errors import CleanupInterrupted
from .models import TASK_LABELS, TASK_ORDER, CleanupTask, RunSummary
from .normalize import probe_case_sensitivity
from .reporting import Reporter
from .results import write_results
from .tasks import get_task_runner
from .walker import resolve_scan_root

log = logger.bind(stage="runner")


class CleanupRunner:
    """Runs selected cleanup tasks, in order, against a library root.

    Owns the cancellation token for the duration of a run: created at
    start, tripped by SIGINT, discarded at the end.
    """

    def __init__(self, config: CleanupConfig, reporter: Reporter | None = None) -> None:
        self.config = config
        self.reporter = reporter or Reporter()
        self.token: CancellationToken | None = None

    def run(
        self,
        root: Path,
        tasks: Sequence[CleanupTask] = TASK_ORDER,
    ) -> RunSummary:
        """Run tasks against root.

        Raises ScanRootError if root can't be found. A user interrupt is
        logged once and ends the run early with summary.interrupted set.
        """
        dry_run = self.config.dry_run
        root = resolve_scan_root(Path(root))
        case_sensitive = probe_case_sensitivity(root)
        if not case_sensitive:
            root = resolve_scan_root(root, case_sensitive)
        log.debug(
            f"run(root={root}, tasks={list(tasks)}, case_sensitive={case_sensitive})"
        )

        skip_paths: list[str] = []
        if CleanupTask.EMPTY_DIRS in tasks:
            skip_paths = load_skip_paths(self.config.skip_paths_config, root)

        summary = RunSummary(root=root, dry_run=dry_run)
        self.reporter.info(f"Using directory: {root}")
        if dry_run:
            self.reporter.warning("Running in DRY RUN mode. No files will be modified.")

        self.token = CancellationToken()
        with handle_interrupts(self.token):
            try:
                for task in tasks:
                    self.token.check()
                    summary.results[task.value] = self._run_task(
                        task, root, case_sensitive, skip_paths
                    )
            except CleanupInterrupted as exc:
                summary.interrupted = True
                self.reporter.warning(str(exc))
            finally:
                self.reporter.progress_done()
                self.token = None

        if not summary.interrupted:
            self.reporter.success("Cleanup complete!")
        return summary

    def _run_task(
        self,
        task: CleanupTask,
        root: Path,
        case_sensitive: bool,
        skip_paths: list[str],
    ) -> dict[str, int]:
        label = TASK_LABELS[task]
        self.reporter.info(f"Starting {label}...")

        run_task = get_task_runner(task)
        with logger.contextualize(stage=task.value):
            result = run_task(
                root,
                token=self.token,
                reporter=self.reporter,
                dry_run=self.config.dry_run,
                case_sensitive=case_sensitive,
                skip_paths=skip_paths,
            )

        counters = result.to_dict()
        if self.config.write_results:
            write_results(self.config.results_dir, task.value, counters)
        self.reporter.success(f"{label} completed.")
        return counters

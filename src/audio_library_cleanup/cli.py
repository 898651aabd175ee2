"""CLI entry point for audio library cleanup."""

from __future__ import annotations

from pathlib import Path

import click
from loguru import logger

from .config import CleanupConfig
from .errors import CleanupError
from .models import TASK_ORDER, CleanupTask
from .reporting import ConsoleReporter
from .runner import CleanupRunner

log = logger.bind(stage="cli")

EXIT_INTERRUPTED = 130

directory_argument = click.argument(
    "directory",
    required=False,
    type=click.Path(file_okay=False),
)
dry_run_option = click.option(
    "-d",
    "--dry-run",
    is_flag=True,
    help="Show what would be changed without changing anything.",
)
skip_config_option = click.option(
    "-s",
    "--skip-config",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON file listing directories the empty-dir cleanup must skip.",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to .env file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_file: str | None) -> None:
    """Clean up an audio library: duplicates, lossy copies, similar and empty folders.

    DIRECTORY defaults to the AUDIO_LIBRARY_PATH environment variable.
    """
    ctx.obj = {"verbose": verbose, "config_file": config_file}


def _run(
    ctx: click.Context,
    directory: str | None,
    tasks: list[CleanupTask],
    dry_run: bool,
    skip_config: str | None = None,
) -> None:
    opts = ctx.obj or {}

    # Pass CLI flags as kwargs to avoid env pollution
    config_kwargs: dict = {}
    if dry_run:
        config_kwargs["dry_run"] = True
    if opts.get("verbose"):
        config_kwargs["verbose"] = True
        config_kwargs["log_level"] = "DEBUG"
    if skip_config:
        config_kwargs["skip_paths_config"] = Path(skip_config)
    if opts.get("config_file"):
        config_kwargs["_env_file"] = opts["config_file"]

    config = CleanupConfig(**config_kwargs)
    config.setup_logging()

    try:
        root = config.resolve_root(directory)
    except CleanupError as exc:
        raise click.UsageError(str(exc)) from exc

    if not tasks:
        click.echo("All tasks skipped; nothing to do.")
        return

    log.info(
        f"Starting cleanup: root={root} tasks={[t.value for t in tasks]} "
        f"dry_run={config.dry_run}"
    )
    runner = CleanupRunner(config=config, reporter=ConsoleReporter())
    try:
        summary = runner.run(root, tasks)
    except CleanupError as exc:
        raise click.ClickException(str(exc)) from exc

    if summary.interrupted:
        ctx.exit(EXIT_INTERRUPTED)


@main.command("all")
@directory_argument
@dry_run_option
@click.option("--skip-duplicates", is_flag=True, help="Skip duplicate file cleanup.")
@click.option(
    "--skip-formats",
    "--skip-mp3-flac",
    "skip_formats",
    is_flag=True,
    help="Skip MP3/FLAC cleanup.",
)
@click.option(
    "--skip-directories", is_flag=True, help="Skip similar directory name cleanup."
)
@click.option("--skip-empty-dirs", is_flag=True, help="Skip empty directory cleanup.")
@skip_config_option
@click.pass_context
def cleanup_all(
    ctx: click.Context,
    directory: str | None,
    dry_run: bool,
    skip_duplicates: bool,
    skip_formats: bool,
    skip_directories: bool,
    skip_empty_dirs: bool,
    skip_config: str | None,
) -> None:
    """Run every cleanup task in order."""
    skipped = {
        CleanupTask.DUPLICATES: skip_duplicates,
        CleanupTask.FORMATS: skip_formats,
        CleanupTask.DIRECTORIES: skip_directories,
        CleanupTask.EMPTY_DIRS: skip_empty_dirs,
    }
    for task, skip in skipped.items():
        if skip:
            log.info(f"Skipping {task.value}.")
    tasks = [t for t in TASK_ORDER if not skipped[t]]
    _run(ctx, directory, tasks, dry_run, skip_config)


@main.command("duplicates")
@directory_argument
@dry_run_option
@click.pass_context
def cleanup_duplicates(
    ctx: click.Context, directory: str | None, dry_run: bool
) -> None:
    """Remove duplicate audio files, keeping the largest copy."""
    _run(ctx, directory, [CleanupTask.DUPLICATES], dry_run)


@main.command("formats")
@directory_argument
@dry_run_option
@click.pass_context
def cleanup_formats(ctx: click.Context, directory: str | None, dry_run: bool) -> None:
    """Remove MP3 (lossy) files when a FLAC version exists."""
    _run(ctx, directory, [CleanupTask.FORMATS], dry_run)


@main.command("directories")
@directory_argument
@dry_run_option
@click.pass_context
def cleanup_directories(
    ctx: click.Context, directory: str | None, dry_run: bool
) -> None:
    """Merge directories whose names differ only in case, accents, or '&'."""
    _run(ctx, directory, [CleanupTask.DIRECTORIES], dry_run)


@main.command("empty-dirs")
@directory_argument
@dry_run_option
@skip_config_option
@click.pass_context
def cleanup_empty_dirs(
    ctx: click.Context,
    directory: str | None,
    dry_run: bool,
    skip_config: str | None,
) -> None:
    """Remove empty directories, resolving case-duplicate siblings first."""
    _run(ctx, directory, [CleanupTask.EMPTY_DIRS], dry_run, skip_config)

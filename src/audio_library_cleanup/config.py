"""Cleanup configuration via pydantic-settings (.env + env vars)."""

import json
import os
import sys
from pathlib import Path

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

log = logger.bind(stage="config")


class CleanupConfig(BaseSettings):
    """All cleanup configuration with layered resolution:
    .env file < environment variables < constructor kwargs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # -- Library --
    audio_library_path: Path | None = None
    skip_paths_config: Path | None = None

    # -- Behavior --
    dry_run: bool = False
    verbose: bool = False
    log_level: str = "INFO"

    # -- Output --
    results_dir: Path = Path("output")
    write_results: bool = True
    log_dir: Path = Path("logs")

    def resolve_root(self, directory: str | Path | None = None) -> Path:
        """Pick the library root: explicit argument, then AUDIO_LIBRARY_PATH."""
        if directory:
            return Path(directory).expanduser().absolute()
        if self.audio_library_path:
            return self.audio_library_path.expanduser().absolute()
        raise ConfigError(
            "No audio directory specified. Either provide a directory path or "
            "set the AUDIO_LIBRARY_PATH environment variable in a .env file."
        )

    def setup_logging(self) -> None:
        """Configure loguru for cleanup runs."""
        logger.remove()  # Remove default stderr handler

        log_format = (
            "{time:YYYY-MM-DDTHH:mm:ssZ} | {level:<8} | "
            "{extra[stage]:<12} | {message}"
        )

        def _default_extra(record):
            record["extra"].setdefault("stage", "")
            return True

        logger.add(
            sys.stderr,
            format=log_format,
            level=self.log_level.upper(),
            filter=_default_extra,
        )

        self.log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self.log_dir / "cleanup.log"),
            format=log_format,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            filter=_default_extra,
        )


def load_skip_paths(config_file: Path | None, root: Path) -> list[str]:
    """Load directories the reclaimer must never touch.

    Accepts a JSON array of paths or an object with a "paths" array.
    Relative entries resolve against root. Returns lowercase absolute
    paths; a missing or malformed file yields an empty list.
    """
    if config_file is None:
        return []

    config_file = Path(config_file)
    if not config_file.is_file():
        log.warning(f"Skip paths config not found: {config_file}")
        return []

    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        log.warning(f"Ignoring malformed skip paths config {config_file}: {exc}")
        return []

    if isinstance(data, dict):
        data = data.get("paths", [])
    if not isinstance(data, list):
        log.warning(f"Skip paths config has no path list: {config_file}")
        return []

    paths: list[str] = []
    for entry in data:
        if not isinstance(entry, str) or not entry.strip():
            continue
        candidate = Path(entry.strip()).expanduser()
        if not candidate.is_absolute():
            candidate = Path(root) / candidate
        paths.append(os.path.normpath(os.path.abspath(candidate)).lower())

    log.debug(f"Loaded {len(paths)} skip paths from {config_file}")
    return paths

"""Per-pass counters written as small JSON files."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from loguru import logger

log = logger.bind(stage="results")


def results_path(results_dir: Path, name: str) -> Path:
    return Path(results_dir) / f"cleanup-{name}.json"


def write_results(results_dir: Path, name: str, counters: dict[str, int]) -> Path:
    """Atomically write counters to <results_dir>/cleanup-<name>.json."""
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    target = results_path(results_dir, name)

    fd, tmp_path = tempfile.mkstemp(dir=str(results_dir), suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(counters, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, target)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError as cleanup_err:
            log.warning(f"Failed to cleanup temp file {tmp_path}: {cleanup_err}")
        raise

    log.info(f"Results saved to {target}")
    return target


def read_results(results_dir: Path, name: str) -> dict[str, int] | None:
    """Read a previously written counters record, or None if absent."""
    target = results_path(results_dir, name)
    if not target.exists():
        return None
    return json.loads(target.read_text())

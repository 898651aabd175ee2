"""Audio Library Cleanup -- reconcile an on-disk audio library in batch passes.

Core modules:
    config       -- Configuration via pydantic-settings (.env + env vars,
                    AUDIO_LIBRARY_PATH, SKIP_PATHS_CONFIG). Loguru setup and
                    skip-list loading.
    cli          -- Click command group: all, duplicates, formats, directories,
                    empty-dirs. CLI flags passed as kwargs to CleanupConfig.
    runner       -- Pass driver. Owns the cancellation token, probes case
                    sensitivity once, runs tasks, writes counters.
    normalize    -- Fuzzy-match normalization, diacritic detection, counter
                    suffix stripping, case correction, case-sensitivity probe.
    walker       -- Recursive, cancellable, case-preserving tree traversal
                    plus best-effort item counting for progress totals.
    inventory    -- Recognized audio files as flat AudioRecords.
    cancellation -- CancellationToken and the SIGINT handler that trips it.
    reporting    -- Reporter event sink (loguru) and ConsoleReporter (click
                    progress bar).
    results      -- Atomic JSON counters per pass.

Subpackages:
    tasks -- The four reconciliation passes (duplicates, formats,
             directories, empty-dirs).
"""

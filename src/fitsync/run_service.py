from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
import logging

from fitsync.config import JobConfig, get_job, load_config
from fitsync.models import PlannedAction, SyncStats
from fitsync.planner import SyncOptions, sync_directories
from fitsync.space_fitter import FitResult


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_INVALID_CONFIG = 3


@dataclass(slots=True)
class RunSummary:
    created: int = 0
    replaced: int = 0
    deleted: int = 0
    skipped: int = 0
    kept: int = 0
    processed_jobs: int = 0
    over_budget_jobs: int = 0
    failed: bool = False

    def absorb(self, result: FitResult, stats: SyncStats) -> None:
        self.created += stats.created
        self.replaced += stats.replaced
        self.deleted += stats.deleted
        self.skipped += stats.skipped
        self.kept += stats.kept
        self.processed_jobs += 1
        if not result.fits:
            self.over_budget_jobs += 1


def _prepare_target(job: JobConfig, dry_run: bool) -> bool:
    """Create a missing target root when the job allows it.

    Returns True when the target may stay missing for a dry run.
    """
    if job.target.exists() or not job.create_target_if_missing:
        return False
    if dry_run:
        return True
    job.target.mkdir(parents=True, exist_ok=True)
    return False


def run_sync_jobs(
    config_path: Path,
    job_name: str | None = None,
    dry_run: bool = False,
    logger: logging.Logger | None = None,
    on_action: Callable[[PlannedAction], None] | None = None,
) -> tuple[int, RunSummary]:
    log = logger or logging.getLogger("fitsync.run")

    try:
        config = load_config(config_path)
        jobs = get_job(config, job_name)
    except Exception as exc:
        log.error("Config error: %s", exc)
        return EXIT_INVALID_CONFIG, RunSummary(failed=True)

    summary = RunSummary()

    for job in jobs:
        try:
            allow_missing_target = _prepare_target(job, dry_run)
            options = SyncOptions(
                dry_run=dry_run,
                reserve=job.reserve,
                available=job.available,
                excludes=job.excludes,
                allow_missing_target=allow_missing_target,
            )
            result, stats = sync_directories(job.source, job.target, options, on_action=on_action)
        except (OSError, ValueError) as exc:
            summary.failed = True
            log.error("[%s] failed for %s -> %s: %s", job.name, job.source, job.target, exc)
            return EXIT_RUNTIME_ERROR, summary

        summary.absorb(result, stats)
        log.info(
            "[%s] %s -> %s | created=%s replaced=%s deleted=%s skipped=%s kept=%s",
            job.name,
            job.source,
            job.target,
            stats.created,
            stats.replaced,
            stats.deleted,
            stats.skipped,
            stats.kept,
        )
        if not result.fits:
            log.warning(
                "[%s] projected growth of %d bytes exceeds the %d bytes available",
                job.name,
                result.total,
                result.available,
            )

    return EXIT_SUCCESS, summary

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from pathlib import Path
import shutil

from fitsync.executor import ExecuteOptions, execute_plan
from fitsync.ignore_engine import IgnoreEngine, build_ignore_engine
from fitsync.models import PlannedAction, SyncStats
from fitsync.pairing import build_records
from fitsync.scanner import walk
from fitsync.space_fitter import FitResult, fit_to_space


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncOptions:
    dry_run: bool = False
    reserve: int = 0
    excludes: list[str] = field(default_factory=list)
    available: int | None = None
    allow_missing_target: bool = False


def validate_roots(source_root: Path, target_root: Path, allow_missing_target: bool = False) -> None:
    if not source_root.is_dir():
        raise ValueError(f"Source directory does not exist or is not a directory: {source_root}")
    missing_target_allowed = allow_missing_target and not target_root.exists()
    if not missing_target_allowed and not target_root.is_dir():
        raise ValueError(f"Target directory does not exist or is not a directory: {target_root}")

    source_resolved = source_root.resolve()
    target_resolved = target_root.resolve()
    if source_resolved == target_resolved:
        raise ValueError(f"Source and target are the same directory: {source_root}")
    if source_resolved in target_resolved.parents:
        raise ValueError(f"Target is inside source, which would recurse: {target_root}")
    if target_resolved in source_resolved.parents:
        raise ValueError(f"Source is inside target, which would sync it onto itself: {source_root}")


def available_space(target_root: Path, reserve: int = 0) -> int:
    """Free bytes on the filesystem holding ``target_root``, minus ``reserve``.

    The result is negative when less than ``reserve`` is free, which makes the
    fitter delete old target files until the reserve is restored.
    """
    probe = target_root
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    free = shutil.disk_usage(probe).free
    return free - reserve


def plan_sync(
    source_root: Path,
    target_root: Path,
    available: int,
    ignore: IgnoreEngine | None = None,
) -> FitResult:
    source_map = walk(source_root, ignore)
    target_map = walk(target_root, ignore)
    logger.info(
        "Planning %s -> %s: %d source file(s), %d target file(s), %d bytes available",
        source_root,
        target_root,
        len(source_map),
        len(target_map),
        available,
    )
    return fit_to_space(build_records(source_map, target_map), available)


def sync_directories(
    source_root: Path,
    target_root: Path,
    options: SyncOptions | None = None,
    on_action: Callable[[PlannedAction], None] | None = None,
) -> tuple[FitResult, SyncStats]:
    options = options or SyncOptions()
    validate_roots(source_root, target_root, options.allow_missing_target)

    if options.available is not None:
        available = options.available - options.reserve
    else:
        available = available_space(target_root, options.reserve)

    ignore = build_ignore_engine(source_root, options.excludes)
    result = plan_sync(source_root, target_root, available, ignore)
    stats = execute_plan(
        source_root,
        target_root,
        result.plan(),
        ExecuteOptions(dry_run=options.dry_run),
        on_action=on_action,
    )
    return result, stats

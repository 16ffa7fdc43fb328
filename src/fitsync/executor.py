from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import logging
from pathlib import Path
import shutil
import tempfile

from fitsync.models import Action, PlannedAction, SyncStats


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExecuteOptions:
    dry_run: bool = False


def _safe_copy(source_file: Path, destination_file: Path) -> None:
    destination_file.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(delete=False, dir=str(destination_file.parent)) as tmp:
        tmp_path = Path(tmp.name)
    try:
        shutil.copy2(source_file, tmp_path)
        tmp_path.replace(destination_file)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def _apply(source_root: Path, target_root: Path, planned: PlannedAction) -> None:
    destination_file = target_root / planned.path
    if planned.action is Action.CREATE:
        if destination_file.exists():
            raise FileExistsError(f"Refusing to overwrite unexpected target file: {destination_file}")
        _safe_copy(source_root / planned.path, destination_file)
    elif planned.action is Action.REPLACE:
        _safe_copy(source_root / planned.path, destination_file)
    elif planned.action is Action.DELETE:
        destination_file.unlink()


def execute_plan(
    source_root: Path,
    target_root: Path,
    plan: Iterable[PlannedAction],
    options: ExecuteOptions | None = None,
    on_action: Callable[[PlannedAction], None] | None = None,
) -> SyncStats:
    """Apply planned actions in order.

    ``on_action`` is called right before each action runs. The first OSError
    aborts the remaining plan; actions already applied stay applied.
    """
    options = options or ExecuteOptions()
    stats = SyncStats()

    for planned in plan:
        if on_action is not None:
            on_action(planned)
        if planned.action.mutates_target and not options.dry_run:
            logger.debug("%s %s", planned.action.value, planned.path)
            _apply(source_root, target_root, planned)
        stats.count(planned)

    return stats

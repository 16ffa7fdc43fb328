from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging

from fitsync.classifier import record_effect, resolve_action, space_effect
from fitsync.models import Action, PlannedAction, SyncRecord


logger = logging.getLogger(__name__)


def sort_records(records: Iterable[SyncRecord]) -> list[SyncRecord]:
    """Order records oldest first, breaking timestamp ties by path.

    Raises ValueError when two records share a path, since the (timestamp,
    path) order would no longer be total.
    """
    ordered = sorted(records, key=lambda record: record.sort_key)
    seen: set[str] = set()
    for record in ordered:
        if record.path in seen:
            raise ValueError(f"Duplicate sync record for path: {record.path}")
        seen.add(record.path)
    return ordered


@dataclass(frozen=True, slots=True)
class FitResult:
    records: tuple[SyncRecord, ...]
    excluded: frozenset[str]
    total: int
    available: int

    @property
    def fits(self) -> bool:
        return self.total <= self.available

    def is_included(self, record: SyncRecord) -> bool:
        return record.path not in self.excluded

    def action_for(self, record: SyncRecord) -> Action:
        return resolve_action(record, self.is_included(record))

    def plan(self) -> list[PlannedAction]:
        planned: list[PlannedAction] = []
        for record in self.records:
            action = self.action_for(record)
            planned.append(PlannedAction(record, action, space_effect(record, action)))
        return planned


def fit_to_space(records: Iterable[SyncRecord], available: int) -> FitResult:
    """Exclude the oldest records until the projected target growth fits ``available``.

    Every record starts included. Records are excluded strictly in
    (timestamp, path) order, including those whose exclusion frees nothing,
    until the projected total drops to ``available`` or no record is left.
    An unreachable budget is not an error; the result reports ``fits=False``.
    """
    ordered = sort_records(records)
    total = sum(record_effect(record, include=True) for record in ordered)
    excluded: set[str] = set()

    for record in ordered:
        if total <= available:
            break
        before = record_effect(record, include=True)
        excluded.add(record.path)
        after = record_effect(record, include=False)
        total += after - before
        logger.debug("Excluded %s (%+d bytes, projected total %d)", record.path, after - before, total)

    result = FitResult(
        records=tuple(ordered),
        excluded=frozenset(excluded),
        total=total,
        available=available,
    )
    if result.fits:
        logger.info(
            "Plan fits: %d record(s), %d excluded, projected %d of %d available bytes",
            len(ordered),
            len(excluded),
            total,
            available,
        )
    else:
        logger.warning(
            "Projected growth %d bytes still exceeds %d available bytes after excluding all %d record(s)",
            total,
            available,
            len(ordered),
        )
    return result

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class FileAttrs:
    size: int
    mtime: float


@dataclass(frozen=True, slots=True)
class SyncRecord:
    """State of one relative path across the source and target trees.

    ``source`` and ``target`` are present iff the file exists in that tree.
    """

    path: str
    source: FileAttrs | None = None
    target: FileAttrs | None = None

    def __post_init__(self) -> None:
        if self.source is None and self.target is None:
            raise ValueError(f"Record for {self.path!r} has neither source nor target attributes")

    @property
    def source_size(self) -> int:
        return self.source.size if self.source is not None else 0

    @property
    def target_size(self) -> int:
        return self.target.size if self.target is not None else 0

    @property
    def size_delta(self) -> int:
        return self.source_size - self.target_size

    @property
    def timestamp(self) -> float:
        if self.source is None:
            return self.target.mtime
        if self.target is None:
            return self.source.mtime
        return max(self.source.mtime, self.target.mtime)

    @property
    def sort_key(self) -> tuple[float, str]:
        return self.timestamp, self.path


class Action(Enum):
    KEEP = "keep"
    CREATE = "create"
    SAME_SIZE = "same-size"
    NEWER_IN_TARGET = "newer-in-target"
    REPLACE = "replace"
    TOO_OLD_SKIP = "too-old-skip"
    DELETE = "delete"

    @property
    def copies(self) -> bool:
        return self in (Action.CREATE, Action.REPLACE)

    @property
    def mutates_target(self) -> bool:
        return self in (Action.CREATE, Action.REPLACE, Action.DELETE)


@dataclass(frozen=True, slots=True)
class PlannedAction:
    record: SyncRecord
    action: Action
    space_effect: int

    @property
    def path(self) -> str:
        return self.record.path


@dataclass(slots=True)
class SyncStats:
    created: int = 0
    replaced: int = 0
    deleted: int = 0
    skipped: int = 0
    kept: int = 0
    bytes_written: int = 0
    bytes_freed: int = 0

    def count(self, planned: PlannedAction) -> None:
        action = planned.action
        if action is Action.CREATE:
            self.created += 1
            self.bytes_written += planned.record.source_size
        elif action is Action.REPLACE:
            self.replaced += 1
            self.bytes_written += planned.record.source_size
        elif action is Action.DELETE:
            self.deleted += 1
            self.bytes_freed += planned.record.target_size
        elif action is Action.KEEP:
            self.kept += 1
        else:
            self.skipped += 1

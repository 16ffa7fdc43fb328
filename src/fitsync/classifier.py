from __future__ import annotations

from fitsync.models import Action, SyncRecord


def _included_action(record: SyncRecord) -> Action:
    if record.source is None:
        return Action.KEEP
    if record.target is None:
        return Action.CREATE
    # Equal size means identical; mtimes are only compared when sizes differ.
    if record.source.size == record.target.size:
        return Action.SAME_SIZE
    if record.target.mtime > record.source.mtime:
        return Action.NEWER_IN_TARGET
    return Action.REPLACE


def resolve_action(record: SyncRecord, include: bool = True) -> Action:
    """Resolve what should happen to ``record`` in the target tree.

    ``include`` tells whether the file is wanted in the target after the sync.
    An excluded file that would have been created is simply not copied; any
    other excluded file is removed from the target.
    """
    action = _included_action(record)
    if include:
        return action
    if action is Action.CREATE:
        return Action.TOO_OLD_SKIP
    return Action.DELETE


def space_effect(record: SyncRecord, action: Action) -> int:
    """Signed number of bytes ``action`` adds to the target's used space."""
    if action.copies:
        return record.size_delta
    if action is Action.DELETE:
        return -record.target_size
    return 0


def record_effect(record: SyncRecord, include: bool = True) -> int:
    return space_effect(record, resolve_action(record, include))

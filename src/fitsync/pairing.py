from __future__ import annotations

from collections.abc import Mapping

from fitsync.models import FileAttrs, SyncRecord


def build_records(
    source_map: Mapping[str, FileAttrs],
    target_map: Mapping[str, FileAttrs],
) -> list[SyncRecord]:
    """Merge the source and target listings into one record per relative path."""
    all_paths = set(source_map) | set(target_map)
    return [
        SyncRecord(path=path, source=source_map.get(path), target=target_map.get(path))
        for path in all_paths
    ]

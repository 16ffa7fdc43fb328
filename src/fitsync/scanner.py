from __future__ import annotations

import logging
import os
from pathlib import Path

from fitsync.ignore_engine import IgnoreEngine
from fitsync.models import FileAttrs


logger = logging.getLogger(__name__)


def walk(root: Path, ignore: IgnoreEngine | None = None) -> dict[str, FileAttrs]:
    """Map every regular file under ``root`` to its size and modification time.

    Keys are POSIX-style paths relative to ``root``. Symlinks are not
    followed and non-regular files are skipped. A missing root yields an
    empty mapping.
    """
    files: dict[str, FileAttrs] = {}
    if not root.is_dir():
        return files

    for root_str, dirs, names in os.walk(root, topdown=True):
        current = Path(root_str)
        root_rel = current.relative_to(root)

        if ignore:
            dirs[:] = [
                dir_name
                for dir_name in dirs
                if not ignore.is_ignored((root_rel / dir_name).as_posix(), is_dir=True)
            ]

        for name in names:
            rel_path = (root_rel / name).as_posix()
            if ignore and ignore.is_ignored(rel_path):
                continue
            file_path = current / name
            if file_path.is_symlink() or not file_path.is_file():
                continue
            stat = file_path.stat()
            files[rel_path] = FileAttrs(size=stat.st_size, mtime=stat.st_mtime)

    logger.debug("Scanned %s: %d file(s)", root, len(files))
    return files

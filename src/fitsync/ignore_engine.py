from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pathspec


IGNORE_FILE_NAME = ".fitsyncignore"


def _read_ignore_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return []


class IgnoreEngine:
    def __init__(self, patterns: Iterable[str]) -> None:
        self._patterns = [pattern for pattern in patterns if pattern.strip()]
        self._spec = pathspec.PathSpec.from_lines("gitignore", self._patterns)

    def __bool__(self) -> bool:
        return bool(self._patterns)

    def is_ignored(self, relative_path: str, is_dir: bool = False) -> bool:
        candidate = f"{relative_path}/" if is_dir and not relative_path.endswith("/") else relative_path
        return self._spec.match_file(candidate)


def build_ignore_engine(source_root: Path, excludes: Iterable[str] = ()) -> IgnoreEngine:
    """Combine explicit exclude patterns with the source root's ignore file.

    The ignore file itself is always excluded so it is never copied.
    """
    patterns: list[str] = list(excludes)
    patterns.extend(_read_ignore_lines(source_root / IGNORE_FILE_NAME))
    patterns.append(f"/{IGNORE_FILE_NAME}")
    return IgnoreEngine(patterns)

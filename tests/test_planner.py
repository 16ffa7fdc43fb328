import os
from pathlib import Path
import shutil
from types import SimpleNamespace

import pytest

from fitsync.models import Action
from fitsync.planner import SyncOptions, available_space, plan_sync, sync_directories, validate_roots


def _write(path: Path, content: str, mtime: float | None = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))


def _roots(tmp_path: Path) -> tuple[Path, Path]:
    source = tmp_path / "src"
    target = tmp_path / "dst"
    source.mkdir()
    target.mkdir()
    return source, target


def test_newest_files_win_when_space_is_short(tmp_path: Path) -> None:
    source, target = _roots(tmp_path)
    _write(source / "a", "aaaaa", mtime=10)
    _write(source / "b", "bbbbb", mtime=20)

    result, stats = sync_directories(source, target, SyncOptions(available=6))

    assert {p.path: p.action for p in result.plan()} == {"a": Action.TOO_OLD_SKIP, "b": Action.CREATE}
    assert result.total == 5
    assert not (target / "a").exists()
    assert (target / "b").read_text(encoding="utf-8") == "bbbbb"
    assert stats.created == 1
    assert stats.skipped == 1


def test_old_target_file_is_deleted_to_make_room(tmp_path: Path) -> None:
    source, target = _roots(tmp_path)
    _write(target / "old", "x" * 100, mtime=1)
    _write(source / "fresh", "y" * 50, mtime=5)

    result, stats = sync_directories(source, target, SyncOptions(available=10))

    assert not (target / "old").exists()
    assert (target / "fresh").exists()
    assert result.total == -50
    assert stats.deleted == 1
    assert stats.created == 1


def test_second_run_only_keeps_or_matches(tmp_path: Path) -> None:
    source, target = _roots(tmp_path)
    _write(source / "one.txt", "1", mtime=10)
    _write(source / "dir" / "two.txt", "22", mtime=20)
    _write(target / "extra.txt", "333", mtime=5)
    _write(target / "dir" / "two.txt", "2", mtime=1)

    sync_directories(source, target, SyncOptions(available=10**12))
    rerun = plan_sync(source, target, available=10**12)

    assert {p.action for p in rerun.plan()} <= {Action.KEEP, Action.SAME_SIZE}


def test_reserve_is_subtracted_from_available(tmp_path: Path) -> None:
    source, target = _roots(tmp_path)
    _write(source / "a", "aaaaa", mtime=10)
    _write(source / "b", "bbbbb", mtime=20)

    result, _ = sync_directories(source, target, SyncOptions(available=10, reserve=4, dry_run=True))

    assert result.available == 6
    assert result.excluded == frozenset({"a"})
    assert not (target / "b").exists()


def test_excludes_hide_paths_from_both_trees(tmp_path: Path) -> None:
    source, target = _roots(tmp_path)
    _write(source / "keep.txt", "k")
    _write(source / "skip.tmp", "s")
    _write(target / "other.tmp", "o")

    result, _ = sync_directories(source, target, SyncOptions(available=10**9, excludes=["*.tmp"]))

    assert [p.path for p in result.plan()] == ["keep.txt"]
    assert not (target / "skip.tmp").exists()
    assert (target / "other.tmp").exists()


def test_report_hook_sees_plan_in_timestamp_order(tmp_path: Path) -> None:
    source, target = _roots(tmp_path)
    _write(source / "late", "1", mtime=30)
    _write(source / "early", "1", mtime=10)
    _write(target / "middle", "1", mtime=20)
    seen: list[str] = []

    sync_directories(source, target, SyncOptions(available=10**9), on_action=lambda p: seen.append(p.path))

    assert seen == ["early", "middle", "late"]


@pytest.mark.parametrize(
    "layout", ["missing-source", "missing-target", "same", "nested", "source-nested", "file-target"]
)
def test_validate_roots_rejects_bad_layouts(tmp_path: Path, layout: str) -> None:
    source = tmp_path / "src"
    source.mkdir()
    target = tmp_path / "dst"
    target.mkdir()
    if layout == "missing-source":
        source = tmp_path / "nope"
    elif layout == "missing-target":
        target = tmp_path / "nope"
    elif layout == "same":
        target = source
    elif layout == "nested":
        target = source / "inner"
        target.mkdir()
    elif layout == "source-nested":
        source = target / "incoming"
        source.mkdir()
    elif layout == "file-target":
        target = tmp_path / "file"
        target.write_text("x", encoding="utf-8")

    with pytest.raises(ValueError):
        validate_roots(source, target)


def test_validate_roots_can_allow_missing_target(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()

    validate_roots(source, tmp_path / "later", allow_missing_target=True)


def test_available_space_probes_nearest_existing_parent(tmp_path: Path, monkeypatch) -> None:
    probed: list[Path] = []

    def fake_disk_usage(path: Path) -> SimpleNamespace:
        probed.append(path)
        return SimpleNamespace(total=1_000, used=900, free=100)

    monkeypatch.setattr(shutil, "disk_usage", fake_disk_usage)

    assert available_space(tmp_path / "not" / "yet") == 100
    assert available_space(tmp_path, reserve=150) == -50
    assert probed == [tmp_path, tmp_path]


def test_source_inside_target_is_refused_and_left_intact(tmp_path: Path) -> None:
    target = tmp_path / "dst"
    source = target / "incoming"
    _write(source / "photo.jpg", "p" * 100, mtime=1)
    _write(source / "new.jpg", "n" * 10, mtime=50)

    with pytest.raises(ValueError, match="Source is inside target"):
        sync_directories(source, target, SyncOptions(available=5))

    assert (source / "photo.jpg").exists()
    assert (source / "new.jpg").exists()
    assert not (target / "new.jpg").exists()

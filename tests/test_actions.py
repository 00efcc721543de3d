"""Tests for trash, delete and shred actions."""

from __future__ import annotations

from pathlib import Path

import pytest

from zenscan.core import actions
from zenscan.core.actions import ActionCoordinator
from zenscan.core.progress import CancelToken
from zenscan.models.action_result import ActionMode
from zenscan.models.category import Category
from zenscan.models.duplicate import DuplicateFile
from zenscan.models.scan_result import ScanResultItem


def _item(path, size: int | None = None, is_dir: bool = False) -> ScanResultItem:
    if size is None:
        size = 0 if is_dir else path.stat().st_size
    return ScanResultItem(path, size, Category.OTHER, 0.0, is_dir=is_dir)


@pytest.fixture
def fake_trash(tmp_path, monkeypatch):
    """Replace send2trash with a move into a temp trash folder."""
    trash = tmp_path / "Trash"
    trash.mkdir()
    trashed: list[str] = []

    def _send2trash(path: str) -> None:
        trashed.append(path)
        Path(path).rename(trash / Path(path).name)

    monkeypatch.setattr(actions, "send2trash", _send2trash)
    return trashed


@pytest.fixture
def broken_trash(monkeypatch):
    def _send2trash(path: str) -> None:
        raise OSError(18, "Invalid cross-device link")

    monkeypatch.setattr(actions, "send2trash", _send2trash)


class TestTrash:
    def test_moves_to_trash(self, tmp_path, make_file, fake_trash):
        f = make_file(tmp_path / "junk" / "a.log", 100)
        result = ActionCoordinator().act([_item(f)], ActionMode.TRASH)
        assert result.succeeded == 1
        assert result.freed_bytes == 100
        assert fake_trash == [str(f)]
        assert not f.exists()
        assert (tmp_path / "Trash" / "a.log").exists()

    def test_falls_back_to_delete(self, tmp_path, make_file, broken_trash):
        d = tmp_path / "junk"
        make_file(d / "inner" / "file", 10)
        result = ActionCoordinator().act([_item(d, 10, is_dir=True)])
        assert result.succeeded == 1
        assert not d.exists()

    def test_no_fallback_records_failure(self, tmp_path, make_file, broken_trash):
        f = make_file(tmp_path / "keep.me", 10)
        result = ActionCoordinator(trash_fallback=False).act([_item(f)])
        assert result.succeeded == 0
        assert result.failures[0][0] == "keep.me"
        assert "trash" in result.failures[0][1]
        assert f.exists()


class TestDelete:
    def test_directory_tree(self, tmp_path, make_file):
        d = tmp_path / "cache"
        make_file(d / "a" / "b" / "c", 10)
        result = ActionCoordinator().act([_item(d, 10, is_dir=True)], ActionMode.DELETE)
        assert result.succeeded == 1
        assert not d.exists()

    def test_each_item_independent(self, tmp_path, make_file):
        a = make_file(tmp_path / "a", 10)
        b = make_file(tmp_path / "b", 20)
        gone = _item(tmp_path / "gone", 5)
        result = ActionCoordinator().act([_item(a), gone, _item(b)], ActionMode.DELETE)
        assert result.succeeded == 2
        assert result.freed_bytes == 30
        assert result.failures == [("gone", "No longer exists")]
        assert result.summary == "2 succeeded, 1 failed"

    def test_original_is_refused(self, tmp_path, make_file):
        orig = make_file(tmp_path / "orig", 10)
        copy = make_file(tmp_path / "copy", 10)
        files = [DuplicateFile(orig, 10, 1.0, is_original=True), DuplicateFile(copy, 10, 2.0)]
        result = ActionCoordinator().act(files, ActionMode.DELETE)
        assert orig.exists()
        assert not copy.exists()
        assert result.succeeded == 1
        assert [name for name, _ in result.failures] == ["orig"]

    def test_progress_and_cancel(self, tmp_path, make_file):
        items = [_item(make_file(tmp_path / f"f{i}", 1)) for i in range(3)]
        updates: list[float] = []
        ActionCoordinator().act(items, ActionMode.DELETE, on_progress=lambda f, s: updates.append(f))
        assert updates[-1] == 1.0
        assert updates.count(1.0) == 1

        kept = make_file(tmp_path / "kept", 1)
        token = CancelToken()
        token.cancel()
        result = ActionCoordinator().act([_item(kept)], ActionMode.DELETE, cancel=token)
        assert result.cancelled
        assert kept.exists()


class TestShredMode:
    def test_shreds_files_and_rejects_directories(self, tmp_path, make_file, fake_trash):
        f = make_file(tmp_path / "secret", 2048)
        d = tmp_path / "folder"
        d.mkdir()
        result = ActionCoordinator().act([_item(f), _item(d, is_dir=True)], ActionMode.SHRED, passes=1)
        assert result.mode is ActionMode.SHRED
        assert result.succeeded == 1
        assert result.freed_bytes == 2048
        assert result.failures == [("folder", "not a regular file")]
        assert not f.exists()
        assert fake_trash == []

    def test_missing_files_free_nothing(self, tmp_path, make_file):
        real = make_file(tmp_path / "real", 100)
        gone = _item(tmp_path / "gone", 5000)
        result = ActionCoordinator().act([_item(real), gone], ActionMode.SHRED, passes=1)
        assert result.succeeded == 1
        assert result.failures == [("gone", "file not found")]
        assert result.freed_bytes == 100


class TestRefresh:
    def test_called_after_action(self, tmp_path, make_file):
        calls: list[int] = []
        coordinator = ActionCoordinator(refresh=lambda: calls.append(1))
        coordinator.act([_item(make_file(tmp_path / "a", 1))], ActionMode.DELETE)
        coordinator.act([_item(tmp_path / "missing", 1)], ActionMode.DELETE)
        assert calls == [1, 1]

    def test_keeps_refreshed_result(self, tmp_path, make_file):
        survivors = iter([["b"], []])
        coordinator = ActionCoordinator(refresh=lambda: next(survivors))
        assert coordinator.last_refresh is None
        coordinator.act([_item(make_file(tmp_path / "a", 1))], ActionMode.DELETE)
        assert coordinator.last_refresh == ["b"]
        coordinator.act([_item(make_file(tmp_path / "b", 1))], ActionMode.DELETE)
        assert coordinator.last_refresh == []

    def test_refresh_errors_are_contained(self, tmp_path, make_file):
        def _boom() -> None:
            raise RuntimeError("refresh failed")

        result = ActionCoordinator(refresh=_boom).act([_item(make_file(tmp_path / "a", 1))], ActionMode.DELETE)
        assert result.succeeded == 1

"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

import zenscan.storage as storage


@pytest.fixture(autouse=True)
def isolate_xdg(tmp_path, monkeypatch):
    """Keep settings and user scanners out of the real home."""
    xdg = tmp_path / "xdg"
    for name in ("XDG_CONFIG_HOME", "XDG_DATA_HOME"):
        monkeypatch.setenv(name, str(xdg / name.lower()))
    return xdg


@pytest.fixture
def isolate_storage(tmp_path, monkeypatch):
    """Redirect storage to a temp directory."""
    data_dir = tmp_path / "zenscan_data"
    data_dir.mkdir()
    history_file = data_dir / "history.json"
    monkeypatch.setattr(storage, "HISTORY_FILE", history_file)
    monkeypatch.setattr(storage, "_DATA_DIR", data_dir)
    return history_file


@pytest.fixture
def make_file():
    """Return a helper creating a file (and its parents) of a given size or content."""

    def _make(path: Path, size: int = 0, content: bytes | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content if content is not None else b"\0" * size)
        return path

    return _make

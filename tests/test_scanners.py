"""Tests for the built-in scanners."""

from __future__ import annotations

import os
import time

import pytest

from zenscan.config import ScanConfig
from zenscan.core.pipeline import ScanPipeline
from zenscan.scanners import app_containers, developer, downloads, junk, large_files


@pytest.fixture
def home(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


def _run(module, scanner_id: str, config: ScanConfig):
    scanner = next(s for s in module.build(config) if s.id == scanner_id)
    return ScanPipeline(scanner, progress_interval=0).run()


class TestJunk:
    def test_user_cache(self, home, make_file):
        make_file(home / ".cache" / "app" / "blob", 4096)
        make_file(home / ".cache" / "tiny", 10)
        result = _run(junk, "user_cache", ScanConfig(home=home))
        assert [i.name for i in result.items] == ["app"]
        assert result.items[0].selected

    def test_user_logs(self, home, make_file):
        make_file(home / "Library" / "Logs" / "app.log", 2048)
        result = _run(junk, "user_logs", ScanConfig(home=home))
        assert [i.name for i in result.items] == ["app.log"]

    def test_library_logs_children_are_logs(self, home, make_file):
        make_file(home / "Library" / "Logs" / "DiagnosticReports" / "crash.ips", 2048)
        result = _run(junk, "user_logs", ScanConfig(home=home))
        assert [i.name for i in result.items] == ["DiagnosticReports"]

    def test_local_state_only_yields_logs(self, home, make_file):
        state = home / ".local" / "state"
        make_file(state / "nvim" / "shada" / "main.shada", 4096)
        make_file(state / "wireplumber" / "default-nodes", 4096)
        make_file(state / "lesshst", 4096)
        make_file(state / "nvim" / "log", 2048)
        make_file(state / "app" / "logs" / "today.txt", 2048)
        make_file(state / "other" / "run.log", 2048)

        result = _run(junk, "user_logs", ScanConfig(home=home))
        assert sorted(str(i.path.relative_to(state)) for i in result.items) == [
            os.path.join("app", "logs"),
            os.path.join("nvim", "log"),
            os.path.join("other", "run.log"),
        ]
        assert all(i.selected for i in result.items)

    def test_unavailable_without_locations(self, home):
        scanner = next(s for s in junk.build(ScanConfig(home=home)) if s.id == "user_cache")
        assert not scanner.is_available()
        assert "user cache" in scanner.unavailable_reason


class TestLargeFiles:
    def test_finds_large_files_only(self, home, make_file):
        make_file(home / "Downloads" / "movie.mkv", 2000)
        make_file(home / "Documents" / "sub" / "big.iso", 5000)
        make_file(home / "Documents" / "small.txt", 10)
        make_file(home / "Documents" / "Thing.app" / "huge", 9000)
        make_file(home / "Documents" / ".secret" / "huge", 9000)

        result = _run(large_files, "large_files", ScanConfig(home=home, large_file_threshold=1000))
        assert [i.name for i in result.items] == ["big.iso", "movie.mkv"]
        assert not any(i.selected for i in result.items)


class TestOldDownloads:
    def test_age_filter(self, home, make_file):
        old = make_file(home / "Downloads" / "old.zip", 10)
        make_file(home / "Downloads" / "new.zip", 10)
        long_ago = time.time() - 90 * 86_400
        os.utime(old, (long_ago, long_ago))

        result = _run(downloads, "old_downloads", ScanConfig(home=home, download_age_days=30))
        assert [i.name for i in result.items] == ["old.zip"]


class TestAppContainers:
    def test_containers(self, home, make_file):
        make_file(home / ".var" / "app" / "org.example.App" / "data", 100)
        (home / ".var" / "app" / "org.example.Empty").mkdir()
        result = _run(app_containers, "app_containers", ScanConfig(home=home))
        assert [i.name for i in result.items] == ["org.example.App"]


class TestDeveloper:
    def test_node_modules_not_nested(self, home, make_file):
        make_file(home / "Projects" / "web" / "node_modules" / "x.js", 100)
        make_file(home / "Projects" / "web" / "node_modules" / "dep" / "node_modules" / "y.js", 100)
        make_file(home / "Projects" / "web" / "src" / "index.js", 100)

        result = _run(developer, "node_modules", ScanConfig(home=home))
        assert len(result.items) == 1
        assert result.items[0].path == home / "Projects" / "web" / "node_modules"
        assert result.items[0].size_bytes == 200

    def test_xcode_locations_are_items(self, home, make_file):
        derived = home / "Library" / "Developer" / "Xcode" / "DerivedData"
        make_file(derived / "App-abc" / "Build" / "product", 300)

        result = _run(developer, "xcode_caches", ScanConfig(home=home))
        assert [i.path for i in result.items] == [derived]
        assert result.items[0].size_bytes == 300

    def test_node_caches_preselected(self, home, make_file):
        make_file(home / ".npm" / "_cacache" / "index-v5" / "entry", 500)
        make_file(home / ".pnpm-store" / "v3" / "files" / "pkg", 700)

        result = _run(developer, "node_caches", ScanConfig(home=home))
        assert [i.name for i in result.items] == [".pnpm-store", "_cacache"]
        assert all(i.selected for i in result.items)
        assert {i.category.value for i in result.items} == {"package_cache"}

    def test_homebrew_cache(self, home, make_file):
        make_file(home / ".cache" / "Homebrew" / "downloads" / "wget.tar.gz", 4096)
        make_file(home / "Library" / "Caches" / "Homebrew" / "old.bottle.tar.gz", 1024)

        result = _run(developer, "homebrew_cache", ScanConfig(home=home))
        assert [i.name for i in result.items] == ["downloads", "old.bottle.tar.gz"]
        assert all(i.selected for i in result.items)
        assert {i.category.value for i in result.items} == {"package_cache"}

    def test_git_repos_report_history_size(self, home, make_file):
        app = home / "Projects" / "app"
        make_file(app / ".git" / "objects" / "pack" / "pack-1.pack", 5000)
        make_file(app / ".git" / "HEAD", 21)
        make_file(app / "src" / "main.py", 100_000)
        make_file(home / "Documents" / "team" / "lib" / ".git" / "HEAD", 30)
        make_file(home / "Projects" / "plain" / "notes.txt", 100)

        result = _run(developer, "git_repos", ScanConfig(home=home))
        assert [i.path for i in result.items] == [app, home / "Documents" / "team" / "lib"]
        assert [i.size_bytes for i in result.items] == [5021, 30]
        assert not any(i.selected for i in result.items)

    def test_git_repos_are_not_removable(self, home):
        scanner = next(s for s in developer.build(ScanConfig(home=home)) if s.id == "git_repos")
        assert not scanner.removable
        assert all(s.removable for s in developer.build(ScanConfig(home=home)) if s.id != "git_repos")

    def test_git_worktree_file(self, home, make_file):
        make_file(home / "Projects" / "wt" / ".git", content=b"gitdir: /elsewhere/.git/worktrees/wt\n")
        result = _run(developer, "git_repos", ScanConfig(home=home))
        assert [i.name for i in result.items] == ["wt"]


def test_scanner_ids_are_unique():
    config = ScanConfig()
    ids = [s.id for m in (junk, large_files, downloads, app_containers, developer) for s in m.build(config)]
    assert len(ids) == len(set(ids)) == 11

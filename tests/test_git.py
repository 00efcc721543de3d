"""Tests for compacting Git repositories."""

from __future__ import annotations

from zenscan.core.external import CommandUnavailableError
from zenscan.core.git import git_gc
from zenscan.core.progress import CancelToken
from zenscan.models.action_result import ActionMode


class TestGitGc:
    def test_runs_gc_and_measures_shrinkage(self, tmp_path, make_file):
        repo = tmp_path / "repo"
        loose = make_file(repo / ".git" / "objects" / "ab" / "cdef", 3000)
        make_file(repo / ".git" / "HEAD", 21)
        calls: list[list[str]] = []

        def runner(args):
            calls.append(list(args))
            loose.unlink()
            return ""

        result = git_gc([repo], runner)
        assert calls == [["git", "-C", str(repo), "gc", "--prune=now", "--aggressive"]]
        assert result.mode is ActionMode.PRUNE
        assert result.succeeded == 1
        assert result.freed_bytes == 3000

    def test_growth_is_not_negative(self, tmp_path, make_file):
        repo = tmp_path / "repo"
        make_file(repo / ".git" / "HEAD", 21)

        def runner(args):
            make_file(repo / ".git" / "objects" / "pack" / "pack-1.pack", 500)
            return ""

        result = git_gc([repo], runner)
        assert result.succeeded == 1
        assert result.freed_bytes == 0

    def test_failure_does_not_stop_the_rest(self, tmp_path, make_file):
        broken = tmp_path / "broken"
        fine = tmp_path / "fine"
        make_file(broken / ".git" / "HEAD", 21)
        make_file(fine / ".git" / "HEAD", 21)

        def runner(args):
            if args[2] == str(broken):
                raise CommandUnavailableError("'git' failed (exit 128): fatal: bad object")
            return ""

        result = git_gc([broken, fine], runner)
        assert result.succeeded == 1
        assert result.failures == [("broken", "'git' failed (exit 128): fatal: bad object")]

    def test_cancelled(self, tmp_path):
        token = CancelToken()
        token.cancel()
        calls: list[list[str]] = []
        result = git_gc([tmp_path], lambda args: calls.append(list(args)) or "", cancel=token)
        assert result.cancelled
        assert calls == []

"""Compacting Git repositories with ``git gc``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from zenscan.core.external import CommandRunner, CommandUnavailableError, run_maintenance
from zenscan.core.progress import CancelToken
from zenscan.core.sizing import size_of
from zenscan.models.action_result import ActionMode, ActionResult

log = logging.getLogger(__name__)


def git_dir(repo: Path) -> Path:
    return repo / ".git"


def git_gc(
    repos: Iterable[Path],
    runner: CommandRunner = run_maintenance,
    cancel: CancelToken | None = None,
) -> ActionResult:
    """Run ``git gc --prune=now --aggressive`` in each repository.

    Unreachable objects are dropped immediately, so anything only kept
    alive by the reflog grace period is gone afterwards. The freed space
    is how much each ``.git`` folder shrank.
    """
    result = ActionResult(ActionMode.PRUNE)
    for repo in repos:
        if cancel is not None and cancel.cancelled:
            result.cancelled = True
            break
        repo = Path(repo)
        before = size_of(git_dir(repo))
        try:
            runner(["git", "-C", str(repo), "gc", "--prune=now", "--aggressive"])
        except CommandUnavailableError as e:
            log.warning("git gc failed in %s: %s", repo, e)
            result.failures.append((repo.name, str(e)))
            continue
        result.succeeded += 1
        result.freed_bytes += max(before - size_of(git_dir(repo)), 0)
    return result

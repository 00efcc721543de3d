"""Homebrew download cache and outdated packages via the brew CLI."""

from __future__ import annotations

import logging
from pathlib import Path

from zenscan.core.external import CommandRunner, CommandUnavailableError, parse_rows, run_command, run_maintenance
from zenscan.core.sizing import size_of
from zenscan.models.action_result import ActionMode, ActionResult
from zenscan.models.tool_report import ToolReport

log = logging.getLogger(__name__)

COLUMNS: dict[str, tuple[str, ...]] = {
    "outdated": ("Package",),
}


def cache_dirs(home: Path) -> tuple[Path, ...]:
    """Where brew keeps downloaded bottles on macOS and on Linux."""
    return (home / "Library" / "Caches" / "Homebrew", home / ".cache" / "Homebrew")


def cache_size(home: Path) -> int:
    return sum(size_of(d) for d in cache_dirs(home))


def homebrew_report(runner: CommandRunner = run_command) -> ToolReport:
    """List the installed packages that have a newer version.

    A missing ``brew`` yields an unavailable report rather than an
    exception.
    """
    report = ToolReport(tool="brew")
    try:
        output = runner(["brew", "outdated", "--quiet"])
    except CommandUnavailableError as e:
        log.info("Homebrew unavailable: %s", e)
        report.available = False
        report.unavailable_reason = str(e)
        return report
    report.rows["outdated"] = parse_rows(output, 1)
    return report


def homebrew_cleanup(home: Path, runner: CommandRunner = run_maintenance) -> ActionResult:
    """Run ``brew cleanup --prune=all`` and measure what it freed.

    brew does not report how much it removed, so the freed space is the
    shrinkage of the download cache. Space freed in the Cellar is not
    counted.
    """
    result = ActionResult(ActionMode.PRUNE)
    before = cache_size(home)
    try:
        runner(["brew", "cleanup", "--prune=all"])
    except CommandUnavailableError as e:
        log.warning("brew cleanup failed: %s", e)
        result.failures.append(("brew cleanup", str(e)))
        return result
    result.succeeded = 1
    result.freed_bytes = max(before - cache_size(home), 0)
    log.info("brew cleanup freed %d bytes", result.freed_bytes)
    return result

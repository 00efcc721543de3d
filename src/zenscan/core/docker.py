"""Docker disk usage, images, containers and volumes via the docker CLI."""

from __future__ import annotations

import logging
import re

from zenscan.core.external import CommandRunner, CommandUnavailableError, parse_rows, run_command, run_maintenance
from zenscan.models.action_result import ActionMode, ActionResult
from zenscan.models.tool_report import ToolReport
from zenscan.utils import parse_size

log = logging.getLogger(__name__)

# section -> (docker arguments, column count)
_QUERIES: dict[str, tuple[tuple[str, ...], int]] = {
    "disk_usage": (("system", "df", "--format", "{{.Type}}|{{.Size}}|{{.Reclaimable}}"), 3),
    "images": (("images", "--format", "{{.Repository}}|{{.Tag}}|{{.Size}}|{{.ID}}"), 4),
    "containers": (("ps", "-a", "--format", "{{.Names}}|{{.Image}}|{{.Status}}|{{.ID}}"), 4),
    "volumes": (("volume", "ls", "--format", "{{.Name}}|{{.Driver}}"), 2),
}

COLUMNS: dict[str, tuple[str, ...]] = {
    "disk_usage": ("Type", "Size", "Reclaimable"),
    "images": ("Repository", "Tag", "Size", "ID"),
    "containers": ("Name", "Image", "Status", "ID"),
    "volumes": ("Name", "Driver"),
}

_RECLAIMED = re.compile(r"Total reclaimed space:\s*(\S+)")


def docker_report(runner: CommandRunner = run_command) -> ToolReport:
    """Ask docker what it stores.

    A missing binary or a daemon that does not answer yields an
    unavailable report rather than an exception. The disk usage query
    decides availability; the listings that follow are best effort.
    """
    report = ToolReport(tool="docker")
    for section, (args, fields) in _QUERIES.items():
        try:
            output = runner(["docker", *args])
        except CommandUnavailableError as e:
            if section == "disk_usage":
                log.info("Docker unavailable: %s", e)
                report.available = False
                report.unavailable_reason = str(e)
                report.rows.clear()
                return report
            log.debug("docker %s failed: %s", args[0], e)
            continue
        report.rows[section] = parse_rows(output, fields)
    return report


def docker_prune(volumes: bool = False, runner: CommandRunner = run_maintenance) -> ActionResult:
    """Remove stopped containers, unused networks, dangling images and build cache.

    With *volumes* unused volumes go as well, and their data with them.
    The freed space is what docker reports as reclaimed.
    """
    args = ["docker", "system", "prune", "-f"]
    if volumes:
        args.append("--volumes")
    result = ActionResult(ActionMode.PRUNE)
    try:
        output = runner(args)
    except CommandUnavailableError as e:
        log.warning("docker system prune failed: %s", e)
        result.failures.append(("docker system prune", str(e)))
        return result
    result.succeeded = 1
    match = _RECLAIMED.search(output)
    if match is not None:
        try:
            result.freed_bytes = parse_size(match.group(1))
        except ValueError:
            log.debug("Cannot parse reclaimed space: %r", match.group(1))
    return result

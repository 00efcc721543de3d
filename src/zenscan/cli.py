"""CLI interface for ZenScan."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from zenscan.config import ScanConfig
from zenscan.core.actions import ActionCoordinator
from zenscan.core.docker import COLUMNS, docker_prune, docker_report
from zenscan.core.engine import ScanEngine
from zenscan.core.git import git_dir, git_gc
from zenscan.core.history import ScanHistory
from zenscan.core.homebrew import COLUMNS as HOMEBREW_COLUMNS
from zenscan.core.homebrew import cache_size as homebrew_cache_size
from zenscan.core.homebrew import homebrew_cleanup, homebrew_report
from zenscan.core.registry import ScannerRegistry
from zenscan.core.scanner_loader import load_scanners
from zenscan.core.selection import Selection
from zenscan.core.shredder import THREAT_MODEL_NOTICE, shred_files
from zenscan.core.sizing import size_of
from zenscan.core.treemap import build_tree, iter_layout
from zenscan.models.action_result import ActionMode, ActionResult
from zenscan.models.duplicate import DuplicateReport
from zenscan.models.scan_result import ScanResult
from zenscan.models.tool_report import ToolReport
from zenscan.models.treemap import Rect, TreemapNode
from zenscan.settings import Settings
from zenscan.utils import bytes_to_human, format_elapsed, format_relative_time, parse_size

# Rows printed per scan before the rest is summarised.
_MAX_ROWS = 50


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _load_config() -> ScanConfig:
    return ScanConfig.from_settings(Settings())


def _build_engine(config: ScanConfig | None = None) -> ScanEngine:
    config = config or _load_config()
    registry = ScannerRegistry()
    load_scanners(registry, config)
    return ScanEngine(registry, config, history=ScanHistory(config.history_limit))


def _print_action_result(result: ActionResult) -> None:
    for name, reason in result.failures:
        click.echo(f"  {click.style('✗', fg='red')} {name:35s} — {reason}")
    colour = "green" if not result.failures else "yellow"
    click.echo(
        f"\n{click.style(result.summary, fg=colour, bold=True)}, "
        f"freed {click.style(bytes_to_human(result.freed_bytes), fg='green', bold=True)}\n"
    )


def _print_rescan(after: ScanResult | DuplicateReport | None) -> None:
    if after is None or after.failed:
        click.echo(click.style("Could not scan again; run the scan to see what is left.", fg="yellow"))
        return
    click.echo(f"After cleaning: {after.summary}\n")


def _action_json(result: ActionResult) -> dict:
    return {
        "mode": result.mode.value,
        "succeeded": result.succeeded,
        "failed": result.failed,
        "freed_bytes": result.freed_bytes,
        "failures": [{"name": n, "reason": r} for n, r in result.failures],
    }


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """ZenScan — find and reclaim disk space."""
    _setup_logging(verbose)


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(as_json: bool) -> None:
    """List scanners and whether they apply to this system."""
    engine = _build_engine()

    if as_json:
        data = [
            {
                "id": s.id,
                "name": s.name,
                "description": s.description,
                "group": s.group,
                "available": s.is_available(),
                "roots": [str(r.path) for r in s.roots],
            }
            for s in engine.registry
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not len(engine.registry):
        click.echo("No scanners installed.")
        return

    for group, members in engine.registry.get_groups().items():
        click.echo(f"\n  {click.style(group.title(), fg='blue', bold=True)}")
        for scanner in members:
            reason = scanner.unavailable_reason
            status = click.style(f" [{reason}]", fg="bright_black") if reason else ""
            click.echo(f"    {click.style(scanner.id, fg='cyan', bold=True):30s}  {scanner.name}{status}")
            click.echo(f"      {scanner.description}")
    click.echo()


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("scanner_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(scanner_id: str, as_json: bool) -> None:
    """Run one scanner (preview only, never deletes)."""
    engine = _build_engine()
    result = engine.scan(scanner_id)

    if as_json:
        data = {
            "scanner_id": result.scanner_id,
            "scanner_name": result.scanner_name,
            "total_bytes": result.total_bytes,
            "item_count": len(result.items),
            "summary": result.summary,
            "error": result.error or None,
            "root_errors": result.root_errors,
            "items": [
                {
                    "path": str(i.path),
                    "size_bytes": i.size_bytes,
                    "category": i.category.value,
                    "modified": i.modified,
                    "is_dir": i.is_dir,
                    "selected": i.selected,
                }
                for i in result.items
            ],
        }
        click.echo(json.dumps(data, indent=2))
        if result.failed:
            sys.exit(1)
        return

    if result.failed:
        click.echo(f"{click.style('✗', fg='red')} {result.error}", err=True)
        sys.exit(1)

    click.echo(f"\n{click.style('🔍', bold=True)} {result.scanner_name}\n")
    for error in result.root_errors:
        click.echo(f"  {click.style('!', fg='yellow')} {error}")
    for item in result.items[:_MAX_ROWS]:
        mark = click.style("✓", fg="green") if item.selected else click.style("·", fg="bright_black")
        click.echo(
            f"  {mark} {bytes_to_human(item.size_bytes):>10s}  "
            f"{click.style(item.category.label, fg='cyan'):24s} {item.path}"
        )
    if len(result.items) > _MAX_ROWS:
        click.echo(f"  … and {len(result.items) - _MAX_ROWS:,} more")
    click.echo(f"\n{result.summary} in {format_elapsed(result.elapsed)}\n")


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("scanner_id")
@click.option("--all", "select_all", is_flag=True, help="Select every item, not only the pre-selected ones")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be removed without doing it")
@click.option("--permanent", is_flag=True, help="Delete permanently instead of moving to the trash")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(scanner_id: str, select_all: bool, yes: bool, dry_run: bool, permanent: bool, as_json: bool) -> None:
    """Scan and remove the selected items of one scanner."""
    engine = _build_engine()
    scanner = engine.registry.get(scanner_id)
    if scanner is not None and not scanner.removable:
        hint = " Use 'zenscan git-gc' to compact them." if scanner_id == "git_repos" else ""
        click.echo(f"{click.style('✗', fg='red')} {scanner.name} cannot be removed by clean.{hint}", err=True)
        sys.exit(1)
    result = engine.scan(scanner_id)
    if result.failed:
        click.echo(f"{click.style('✗', fg='red')} {result.error}", err=True)
        sys.exit(1)

    selection = Selection(result.items)
    if select_all:
        selection.select_all()
    items = selection.selected_items()

    if not items:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "result": None}))
        else:
            click.echo("Nothing selected to clean.")
        return

    total = selection.selected_total()
    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} {result.scanner_name}\n")
        for item in items[:_MAX_ROWS]:
            click.echo(f"  {click.style('✓', fg='green')} {bytes_to_human(item.size_bytes):>10s}  {item.path}")
        if len(items) > _MAX_ROWS:
            click.echo(f"  … and {len(items) - _MAX_ROWS:,} more")
        click.echo(f"\nTotal: {click.style(bytes_to_human(total), fg='green', bold=True)} in {len(items):,} items\n")

    if dry_run:
        if as_json:
            click.echo(json.dumps({"status": "dry_run", "would_free_bytes": total, "item_count": len(items)}, indent=2))
        else:
            click.echo("(dry run — nothing was removed)")
        return

    mode = ActionMode.DELETE if permanent else ActionMode.TRASH
    if not yes and not as_json:
        verb = "Delete permanently" if permanent else "Move to trash"
        if not click.confirm(f"{verb} {len(items):,} items?", default=False):
            click.echo("Aborted.")
            return

    coordinator = ActionCoordinator(refresh=lambda: engine.scan(scanner_id))
    action = coordinator.act(items, mode)
    engine.history.record_action(scanner_id, action)
    after: ScanResult | None = coordinator.last_refresh

    if as_json:
        data = {"status": "cleaned", "result": _action_json(action), "after": None}
        if after is not None and not after.failed:
            data["after"] = {"item_count": len(after.items), "total_bytes": after.total_bytes}
        click.echo(json.dumps(data, indent=2))
        return
    _print_action_result(action)
    _print_rescan(after)


# ── duplicates ───────────────────────────────────────────────────────────

@main.command()
@click.argument("roots", nargs=-1, required=True, type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--min-size", default=None, help="Ignore files smaller than this (e.g. 10K, 5M)")
@click.option("--full-hash", is_flag=True, help="Confirm matches with a whole-file hash")
@click.option("--delete", "delete", is_flag=True, help="Move every copy except the original to the trash (implies --full-hash)")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def duplicates(
    roots: tuple[Path, ...],
    min_size: str | None,
    full_hash: bool,
    delete: bool,
    yes: bool,
    as_json: bool,
) -> None:
    """Find identical files below ROOTS."""
    try:
        min_bytes = parse_size(min_size) if min_size is not None else None
    except ValueError:
        raise click.BadParameter(f"invalid size '{min_size}'", param_hint="--min-size") from None

    # Copies are never removed on a prefix match alone.
    if delete:
        full_hash = True

    engine = _build_engine()
    report = engine.find_duplicates(list(roots), min_size=min_bytes, full_hash=full_hash or None)
    if report.failed:
        click.echo(f"{click.style('✗', fg='red')} {report.error}", err=True)
        sys.exit(1)

    if not as_json:
        _print_duplicates(report)

    action: ActionResult | None = None
    after: DuplicateReport | None = None
    if delete and report.groups:
        selection = Selection(f for group in report.groups for f in group.files)
        selection.select_all()
        copies = selection.selected_items()
        if not as_json and not yes:
            prompt = f"Move {len(copies):,} copies ({bytes_to_human(selection.selected_total())}) to the trash?"
            if not click.confirm(prompt, default=False):
                click.echo("Aborted.")
                delete = False
        if delete:
            coordinator = ActionCoordinator(
                refresh=lambda: engine.find_duplicates(list(roots), min_size=min_bytes, full_hash=True)
            )
            action = coordinator.act(copies, ActionMode.TRASH)
            engine.history.record_action("duplicates", action)
            after = coordinator.last_refresh

    if as_json:
        data = {
            "summary": report.summary,
            "files_indexed": report.files_indexed,
            "full_hash": report.full_hash,
            "wasted_bytes": report.wasted_bytes,
            "root_errors": report.root_errors,
            "groups": [
                {
                    "fingerprint": g.fingerprint,
                    "size_bytes": g.size_bytes,
                    "wasted_bytes": g.wasted_bytes,
                    "files": [{"path": str(f.path), "is_original": f.is_original} for f in g.files],
                }
                for g in report.groups
            ],
            "action": _action_json(action) if action is not None else None,
            "after": None,
        }
        if after is not None and not after.failed:
            data["after"] = {"group_count": len(after.groups), "wasted_bytes": after.wasted_bytes}
        click.echo(json.dumps(data, indent=2))
        return

    if action is not None:
        _print_action_result(action)
        _print_rescan(after)


def _print_duplicates(report: DuplicateReport) -> None:
    for error in report.root_errors:
        click.echo(f"  {click.style('!', fg='yellow')} {error}")
    for group in report.groups:
        click.echo(
            f"\n  {click.style(bytes_to_human(group.size_bytes), bold=True)} × {len(group.files)} "
            f"(wasting {click.style(bytes_to_human(group.wasted_bytes), fg='yellow')})"
        )
        for f in group.files:
            tag = click.style("keep", fg="green") if f.is_original else click.style("copy", fg="bright_black")
            click.echo(f"    {tag}  {f.path}")
    if not report.full_hash and report.groups:
        click.echo(click.style("\nMatches compare the first 64 KiB only; use --full-hash to confirm.", fg="bright_black"))
    click.echo(f"\n{report.summary} ({report.files_indexed:,} files indexed)\n")


# ── tree ─────────────────────────────────────────────────────────────────

def _node_json(node: TreemapNode) -> dict:
    data = {"name": node.name, "path": str(node.path), "weight": node.weight}
    if node.children is not None:
        data["children"] = [_node_json(c) for c in node.children]
    return data


@main.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--depth", "-d", type=click.IntRange(min=1), default=None, help="Directory levels to expand")
@click.option("--width", type=click.FloatRange(min=0), default=100.0, show_default=True, help="Viewport width")
@click.option("--height", type=click.FloatRange(min=0), default=50.0, show_default=True, help="Viewport height")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tree(path: Path, depth: int | None, width: float, height: float, as_json: bool) -> None:
    """Show where the space below PATH goes, with treemap rectangles."""
    config = _load_config()
    depth = depth or config.treemap_depth
    root = build_tree(path, depth=depth, max_children=config.treemap_max_children)
    if root is None:
        click.echo(f"{click.style('✗', fg='red')} Cannot read {path}", err=True)
        sys.exit(1)

    bounds = Rect(0.0, 0.0, width, height)
    placed = list(iter_layout(root, bounds, depth))

    if as_json:
        data = {
            "tree": _node_json(root),
            "layout": [
                {
                    "path": str(node.path),
                    "name": node.name,
                    "level": level,
                    "weight": node.weight,
                    "rect": [rect.x, rect.y, rect.width, rect.height],
                }
                for node, rect, level in placed
            ],
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"\n  {click.style(str(path), bold=True)} — {bytes_to_human(root.weight)}\n")
    for node, rect, level in placed:
        share = node.weight / root.weight * 100 if root.weight else 0.0
        indent = "  " * level
        click.echo(
            f"{indent}{bytes_to_human(node.weight):>10s} {share:5.1f}%  {node.name:30s} "
            + click.style(f"[{rect.x:.1f},{rect.y:.1f} {rect.width:.1f}×{rect.height:.1f}]", fg="bright_black")
        )
    click.echo()


# ── shred ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--passes", "-n", type=click.IntRange(min=1), default=None, help="Overwrite passes per file")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def shred(paths: tuple[Path, ...], passes: int | None, yes: bool) -> None:
    """Overwrite files several times, then delete them."""
    passes = passes or _load_config().shred_passes
    click.echo(click.style(THREAT_MODEL_NOTICE, fg="yellow"))
    if not yes and not click.confirm(f"Shred {len(paths)} file(s) with {passes} passes?", default=False):
        click.echo("Aborted.")
        return

    result = shred_files(list(paths), passes)
    _print_action_result(result)
    if result.failures:
        sys.exit(1)


# ── history ──────────────────────────────────────────────────────────────

@main.command()
@click.option("--period", "-p", default="all", type=click.Choice(["today", "week", "month", "all"]))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def history(period: str, as_json: bool) -> None:
    """Show recent scans and the space cleaned."""
    scan_history = ScanHistory(_load_config().history_limit)
    data = scan_history.get_stats(period)

    if as_json:
        click.echo(json.dumps({**data, "entries": scan_history.entries()}, indent=2))
        return

    click.echo(f"\n{click.style('📊', bold=True)} History ({period})\n")
    click.echo(f"  Scans:         {data['scan_count']}")
    click.echo(f"  Found:         {bytes_to_human(data['bytes_found'])}")
    click.echo(f"  Cleaned:       {click.style(bytes_to_human(data['bytes_cleaned']), fg='green', bold=True)}")

    entries = scan_history.entries()
    if entries:
        click.echo("\n  Recent:")
        for entry in entries[:10]:
            if entry.get("kind") == "scan":
                detail = f"found {bytes_to_human(entry.get('bytes_found', 0))}"
            else:
                detail = f"cleaned {bytes_to_human(entry.get('bytes_cleaned', 0))}"
            click.echo(f"    {format_relative_time(entry['timestamp']):16s} {entry['scanner_id']:20s} {detail}")
    click.echo()


# ── docker ───────────────────────────────────────────────────────────────

@main.command()
@click.option("--prune", is_flag=True, help="Remove stopped containers, unused networks, dangling images and build cache")
@click.option("--volumes", is_flag=True, help="With --prune, remove unused volumes too")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def docker(prune: bool, volumes: bool, yes: bool, as_json: bool) -> None:
    """Show what Docker stores on disk, or prune what it no longer uses."""
    if prune:
        what = "stopped containers, unused networks, dangling images, build cache"
        if volumes:
            what += " and unused volumes"
        if not yes and not as_json and not click.confirm(f"Remove {what}?", default=False):
            click.echo("Aborted.")
            return
        _finish_maintenance("docker", docker_prune(volumes=volumes), as_json)
        return

    _print_tool_report(docker_report(), COLUMNS, "Docker", as_json)


def _print_tool_report(report: ToolReport, columns: dict[str, tuple[str, ...]], label: str, as_json: bool) -> None:
    if as_json:
        data = {
            "available": report.available,
            "unavailable_reason": report.unavailable_reason or None,
            "sections": {
                section: [dict(zip(columns[section], row)) for row in rows]
                for section, rows in report.rows.items()
            },
        }
        click.echo(json.dumps(data, indent=2))
        return

    if not report.available:
        click.echo(f"{click.style('✗', fg='bright_black')} {label} not available: {report.unavailable_reason}")
        return

    for section, rows in report.rows.items():
        click.echo(f"\n  {click.style(section.replace('_', ' ').title(), fg='blue', bold=True)}")
        if not rows:
            click.echo("    (none)")
        for row in rows:
            click.echo("    " + "  ".join(f"{value:20s}" for value in row))
    click.echo()


# ── brew ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--cleanup", is_flag=True, help="Run 'brew cleanup --prune=all'")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def brew(cleanup: bool, yes: bool, as_json: bool) -> None:
    """Show outdated Homebrew packages and the download cache, or clean it up."""
    home = _load_config().home
    if cleanup:
        if not yes and not as_json and not click.confirm("Remove old versions and the whole Homebrew cache?", default=False):
            click.echo("Aborted.")
            return
        _finish_maintenance("homebrew_cache", homebrew_cleanup(home), as_json)
        return

    report = homebrew_report()
    cached = homebrew_cache_size(home)
    if as_json:
        click.echo(json.dumps({
            "available": report.available,
            "unavailable_reason": report.unavailable_reason or None,
            "cache_bytes": cached,
            "outdated": [row[0] for row in report.rows.get("outdated", [])],
        }, indent=2))
        return

    click.echo(f"\n  Cache: {click.style(bytes_to_human(cached), fg='green', bold=True)}")
    _print_tool_report(report, HOMEBREW_COLUMNS, "Homebrew", as_json=False)


# ── git-gc ───────────────────────────────────────────────────────────────

@main.command("git-gc")
@click.argument("repos", nargs=-1, type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def git_gc_cmd(repos: tuple[Path, ...], yes: bool, as_json: bool) -> None:
    """Compact Git repositories with 'git gc --prune=now --aggressive'.

    Without arguments, the repositories found by the git_repos scanner
    are compacted.
    """
    targets = list(repos)
    if not targets:
        result = _build_engine().scan("git_repos")
        if result.failed:
            click.echo(f"{click.style('✗', fg='red')} {result.error}", err=True)
            sys.exit(1)
        targets = [item.path for item in result.items]

    if not targets:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "result": None}))
        else:
            click.echo("No Git repositories found.")
        return

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Git Repositories\n")
        for repo in targets[:_MAX_ROWS]:
            click.echo(f"  {click.style('✓', fg='green')} {bytes_to_human(size_of(git_dir(repo))):>10s}  {repo}")
        if len(targets) > _MAX_ROWS:
            click.echo(f"  … and {len(targets) - _MAX_ROWS:,} more")
        click.echo()
        click.echo(click.style("Unreachable objects are pruned immediately and cannot be recovered.", fg="yellow"))
        if not yes and not click.confirm(f"Run git gc in {len(targets):,} repositories?", default=False):
            click.echo("Aborted.")
            return

    _finish_maintenance("git_repos", git_gc(targets), as_json)


def _finish_maintenance(history_id: str, result: ActionResult, as_json: bool) -> None:
    ScanHistory(_load_config().history_limit).record_action(history_id, result)
    if as_json:
        click.echo(json.dumps({"status": "cleaned", "result": _action_json(result)}, indent=2))
    else:
        _print_action_result(result)
    if result.failures:
        sys.exit(1)

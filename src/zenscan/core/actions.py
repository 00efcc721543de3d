"""Terminal actions on selected scan results: trash, delete, shred."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Sequence

from send2trash import send2trash

from zenscan.core.progress import CancelToken, ProgressCallback, ProgressReporter
from zenscan.core.selection import Selectable
from zenscan.core.shredder import DEFAULT_PASSES, shred_files
from zenscan.models.action_result import ActionMode, ActionResult

log = logging.getLogger(__name__)


def delete_path(path: Path) -> None:
    """Permanently remove a file or directory tree."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def trash_path(path: Path) -> None:
    """Move *path* to the platform trash."""
    send2trash(str(path))


class ActionCoordinator:
    """Runs a destructive action over selected items and aggregates the outcome.

    Every item is handled on its own; a failure is recorded with a reason
    and the rest of the batch still runs. Items flagged ``is_original``
    are never touched.

    Args:
        trash_fallback: Permanently delete items that cannot be trashed.
        refresh: Re-runs the scan after every action so the caller sees the
            filesystem as it is instead of patching its old result. What it
            returns is kept in ``last_refresh``.
    """

    def __init__(
        self,
        trash_fallback: bool = True,
        refresh: Callable[[], object] | None = None,
    ) -> None:
        self.trash_fallback = trash_fallback
        self._refresh = refresh
        self.last_refresh: object = None

    def act(
        self,
        items: Sequence[Selectable],
        mode: ActionMode = ActionMode.TRASH,
        passes: int = DEFAULT_PASSES,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> ActionResult:
        result = ActionResult(mode=mode)
        eligible: list[Selectable] = []
        for item in items:
            if item.is_original:
                log.warning("Refusing to remove original copy: %s", item.path)
                result.failures.append((item.path.name, "Original copy is always kept"))
            else:
                eligible.append(item)

        if mode is ActionMode.SHRED:
            shredded = shred_files([i.path for i in eligible], passes, on_progress, cancel)
            result.succeeded += shredded.succeeded
            result.freed_bytes = shredded.freed_bytes
            result.failures.extend(shredded.failures)
            result.cancelled = shredded.cancelled
        else:
            self._remove(eligible, mode, result, on_progress, cancel)

        log.info("%s finished: %s", mode.value, result.summary)
        self._run_refresh()
        return result

    def _remove(
        self,
        items: Sequence[Selectable],
        mode: ActionMode,
        result: ActionResult,
        on_progress: ProgressCallback | None,
        cancel: CancelToken | None,
    ) -> None:
        reporter = ProgressReporter(on_progress)
        total = max(len(items), 1)
        verb = "Moving to trash" if mode is ActionMode.TRASH else "Deleting"

        for index, item in enumerate(items):
            if cancel is not None and cancel.cancelled:
                result.cancelled = True
                break
            reporter.update(index / total, f"{verb} {item.path.name}...")
            error = self._remove_one(item.path, mode)
            if error is None:
                result.succeeded += 1
                result.freed_bytes += item.size_bytes
            else:
                result.failures.append((item.path.name, error))

        if not result.cancelled:
            reporter.update(1.0, result.summary, force=True)

    def _remove_one(self, path: Path, mode: ActionMode) -> str | None:
        """Remove one path; return a failure reason or None on success."""
        if not path.exists() and not path.is_symlink():
            return "No longer exists"

        if mode is ActionMode.TRASH:
            try:
                trash_path(path)
                return None
            except OSError as e:
                if not self.trash_fallback:
                    log.debug("Cannot trash %s: %s", path, e)
                    return f"Cannot move to trash: {e}"
                log.warning("Cannot trash %s (%s), deleting permanently", path, e)

        try:
            delete_path(path)
        except OSError as e:
            log.debug("Cannot delete %s: %s", path, e)
            return e.strerror or str(e)
        return None

    def _run_refresh(self) -> None:
        if self._refresh is None:
            return
        try:
            self.last_refresh = self._refresh()
        except Exception:
            log.exception("Refresh after action failed")
            self.last_refresh = None

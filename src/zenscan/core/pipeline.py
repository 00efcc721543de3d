"""Generic scan pipeline shared by every scanner.

enumerate -> filter -> size -> classify -> collect, one root at a time.
Each root owns an equal slice of the progress range. Cancellation is
checked before every directory listing and every candidate, and a
cancelled scan returns what it had collected so far.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
import time
from pathlib import Path
from typing import Callable, Iterator

from zenscan.core.classifier import classify
from zenscan.core.progress import CancelToken, ProgressCallback, ProgressReporter
from zenscan.core.sizing import SizeLimits, is_hidden, is_package, size_of
from zenscan.models.scan_result import CandidateEntry, ScanResult, ScanResultItem, ScanRoot
from zenscan.models.scanner import Scanner
from zenscan.utils import bytes_to_human

log = logging.getLogger(__name__)

SnapshotCallback = Callable[[tuple[ScanResultItem, ...]], None]

# Publish a partial snapshot after this many new items.
_SNAPSHOT_BATCH = 200

# Per-item progress stays below this; 1.0 means the whole scan finished.
_ALMOST_DONE = 0.999


class ScanInProgressError(Exception):
    """Raised when a pipeline is asked to run while it is already running."""


def check_root(root: ScanRoot) -> str | None:
    """Return a structural error for *root*, or None when it can be scanned.

    Missing optional roots are not errors; callers skip them.
    """
    if not root.path.exists():
        return None if root.optional else f"{root.path}: does not exist"
    if not root.path.is_dir():
        return f"{root.path}: not a directory"
    return None


def _candidate(path: Path, st: os.stat_result) -> CandidateEntry | None:
    file_id = (st.st_dev, st.st_ino)
    if stat.S_ISDIR(st.st_mode):
        return CandidateEntry(path=path, size_bytes=None, modified=st.st_mtime, is_dir=True, file_id=file_id)
    if stat.S_ISREG(st.st_mode):
        return CandidateEntry(path=path, size_bytes=st.st_size, modified=st.st_mtime, file_id=file_id)
    return None


def candidate_from(entry: os.DirEntry) -> CandidateEntry | None:
    """Build a candidate from a directory entry; None for symlinks and specials."""
    try:
        # scandir reports st_ino and st_dev as zero on Windows.
        st = os.stat(entry.path, follow_symlinks=False) if os.name == "nt" else entry.stat(follow_symlinks=False)
    except OSError:
        log.debug("Cannot access: %s", entry.path)
        return None
    return _candidate(Path(entry.path), st)


def candidate_at(path: Path) -> CandidateEntry | None:
    """Build a candidate for a single path; None for symlinks, specials and missing paths."""
    try:
        st = os.lstat(path)
    except OSError:
        log.debug("Cannot access: %s", path)
        return None
    return _candidate(path, st)


def list_children(
    directory: Path | str,
    max_items: int | None,
    skip_hidden: bool,
) -> list[CandidateEntry]:
    """List up to *max_items* direct children of *directory*, sorted by name.

    Raises:
        OSError: if the directory itself cannot be read.
    """
    found: list[CandidateEntry] = []
    with os.scandir(directory) as it:
        for seen, entry in enumerate(it):
            if max_items is not None and seen >= max_items:
                log.debug("Item cap reached in %s", directory)
                break
            if skip_hidden and is_hidden(entry.name):
                continue
            candidate = candidate_from(entry)
            if candidate is not None:
                found.append(candidate)
    found.sort(key=lambda c: c.name)
    return found


def walk(
    root: ScanRoot,
    accept: Callable[[CandidateEntry], bool],
    cancel: CancelToken,
) -> Iterator[CandidateEntry]:
    """Yield every candidate below *root* that *accept* takes.

    Directories are offered to *accept* as well; accepted directories are
    yielded and not descended into. Unreadable subdirectories are skipped.

    Raises:
        OSError: if the root directory itself cannot be read.
    """
    stack: list[tuple[Path, int]] = [(root.path, 0)]
    while stack:
        if cancel.cancelled:
            return
        current, depth = stack.pop()
        try:
            children = list_children(current, root.max_items, root.skip_hidden)
        except OSError:
            if depth == 0:
                raise
            log.debug("Cannot read directory: %s", current)
            continue
        subdirs: list[Path] = []
        for candidate in children:
            if cancel.cancelled:
                return
            if accept(candidate):
                yield candidate
                continue
            if not candidate.is_dir:
                continue
            if root.skip_packages and is_package(candidate.path):
                continue
            if root.max_depth is None or depth < root.max_depth:
                subdirs.append(candidate.path)
        # Reversed so that directories are visited in name order.
        stack.extend((d, depth + 1) for d in reversed(subdirs))


class ScanPipeline:
    """Runs one :class:`Scanner`; at most one run at a time per instance."""

    def __init__(self, scanner: Scanner, progress_interval: float = 0.1) -> None:
        self.scanner = scanner
        self._progress_interval = progress_interval
        self._guard = threading.Lock()

    @property
    def running(self) -> bool:
        return self._guard.locked()

    def run(
        self,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
        on_snapshot: SnapshotCallback | None = None,
    ) -> ScanResult:
        """Scan every root of the scanner and return the sorted result.

        Raises:
            ScanInProgressError: if this pipeline is already running.
        """
        if not self._guard.acquire(blocking=False):
            raise ScanInProgressError(f"Scanner '{self.scanner.id}' is already running")
        try:
            return self._run(on_progress, cancel or CancelToken(), on_snapshot)
        finally:
            self._guard.release()

    def _run(
        self,
        on_progress: ProgressCallback | None,
        cancel: CancelToken,
        on_snapshot: SnapshotCallback | None,
    ) -> ScanResult:
        scanner = self.scanner
        reporter = ProgressReporter(on_progress, self._progress_interval)
        buffer: list[ScanResultItem] = []
        root_errors: list[str] = []
        started = time.monotonic()
        published = 0

        def _publish() -> None:
            nonlocal published
            if on_snapshot is not None and len(buffer) != published:
                published = len(buffer)
                on_snapshot(tuple(buffer))

        reporter.update(0.0, f"Scanning {scanner.name.lower()}...", force=True)
        total_roots = len(scanner.roots)

        for index, root in enumerate(scanner.roots):
            if cancel.cancelled:
                break
            low, high = index / total_roots, (index + 1) / total_roots
            label = root.path.name or str(root.path)
            reporter.update(low, f"Scanning {label}...", force=True)

            error = check_root(root)
            if error is not None:
                log.warning("Skipping scan root %s", error)
                root_errors.append(error)
                continue
            if not root.path.exists():
                log.debug("Optional scan root not found: %s", root.path)
                continue

            try:
                self._scan_root(root, low, high, label, buffer, reporter, cancel, _publish)
            except OSError as e:
                log.warning("Cannot read scan root %s: %s", root.path, e)
                root_errors.append(f"{root.path}: {e.strerror or e}")
            _publish()

        buffer.sort(key=scanner.sort_key)
        total_bytes = sum(i.size_bytes for i in buffer)
        if cancel.cancelled:
            summary = f"Cancelled after finding {len(buffer)} items"
            reporter.update(reporter.fraction, summary, force=True)
        else:
            summary = f"Found {len(buffer)} items totaling {bytes_to_human(total_bytes)}"
            reporter.update(1.0, summary, force=True)

        return ScanResult(
            scanner_id=scanner.id,
            scanner_name=scanner.name,
            items=buffer,
            total_bytes=total_bytes,
            summary=summary,
            root_errors=root_errors,
            cancelled=cancel.cancelled,
            elapsed=time.monotonic() - started,
        )

    def _scan_root(
        self,
        root: ScanRoot,
        low: float,
        high: float,
        label: str,
        buffer: list[ScanResultItem],
        reporter: ProgressReporter,
        cancel: CancelToken,
        publish: Callable[[], None],
    ) -> None:
        scanner = self.scanner
        if scanner.roots_as_items:
            own = candidate_at(root.path)
            candidates = iter([own] if own is not None and scanner.predicate(own) else [])
            total = 1
        elif scanner.recursive:
            candidates = walk(root, scanner.predicate, cancel)
            total = 0
        else:
            listed = list_children(root.path, root.max_items, root.skip_hidden)
            candidates = (c for c in listed if scanner.predicate(c))
            total = len(listed)

        limits = SizeLimits.from_root(root)
        pending = 0
        for done, candidate in enumerate(candidates, 1):
            if cancel.cancelled:
                break
            item = self._to_item(candidate, limits, cancel)
            if cancel.cancelled:
                # Sizing was cut short; the partial item is dropped.
                break
            if item is not None:
                buffer.append(item)
                pending += 1
                if pending >= _SNAPSHOT_BATCH:
                    pending = 0
                    publish()
            fraction = low + (high - low) * (done / total) if total else low
            reporter.update(min(fraction, _ALMOST_DONE), f"Scanning {label}... ({len(buffer)} found)")

    def _to_item(self, candidate: CandidateEntry, limits: SizeLimits, cancel: CancelToken) -> ScanResultItem | None:
        scanner = self.scanner
        if scanner.measure is not None:
            size = size_of(scanner.measure(candidate.path), limits, cancel)
        elif candidate.is_dir:
            size = size_of(candidate.path, limits, cancel)
        else:
            size = candidate.size_bytes or 0
        if size < scanner.min_size:
            return None
        classifier = scanner.classifier or classify
        return ScanResultItem(
            path=candidate.path,
            size_bytes=size,
            category=classifier(candidate.path, is_dir=candidate.is_dir),
            modified=candidate.modified,
            is_dir=candidate.is_dir,
            selected=scanner.preselect,
        )

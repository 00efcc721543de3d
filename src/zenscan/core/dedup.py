"""Duplicate file detection.

Two phases: files under the roots are bucketed by exact byte size, then
members of buckets with two or more files are fingerprinted and grouped
by fingerprint.

The default fingerprint is the SHA-256 of the first 64 KiB only. Files
that share a prefix but differ further on are reported as duplicates;
this is a known heuristic, traded for speed on large media files. Pass
``full_hash=True`` to confirm every prefix match with a whole-file hash
before a group is reported.

Hard links and paths that reach the same file through symlinks or
overlapping roots are indexed once, by device and inode number.

Inside a confirmed group the oldest file (lowest mtime, ties broken by
path) is kept as the original. That the oldest copy is the source is a
policy choice, not something the scan can prove.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import defaultdict
from pathlib import Path
from typing import Sequence

from zenscan.core.pipeline import ScanInProgressError, check_root, walk
from zenscan.core.progress import CancelToken, ProgressCallback, ProgressReporter
from zenscan.models.duplicate import DuplicateFile, DuplicateGroup, DuplicateReport
from zenscan.models.scan_result import CandidateEntry, ScanRoot
from zenscan.utils import bytes_to_human

log = logging.getLogger(__name__)

DEFAULT_MIN_SIZE = 10 * 1024
PREFIX_BYTES = 65_536
_CHUNK_SIZE = 65_536

# Share of the progress range spent indexing; hashing gets the rest.
_INDEX_SHARE = 0.3


def prefix_hash(path: Path, prefix_bytes: int = PREFIX_BYTES) -> str:
    """SHA-256 of the first *prefix_bytes* of a file."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        h.update(f.read(prefix_bytes))
    return h.hexdigest()


def full_hash(path: Path) -> str:
    """SHA-256 of a whole file using chunked reads."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            h.update(chunk)
    return h.hexdigest()


def elect_original(files: list[CandidateEntry]) -> list[CandidateEntry]:
    """Order *files* oldest first; the first one is the original."""
    return sorted(files, key=lambda c: (c.modified, str(c.path)))


class DuplicateFinder:
    """Finds groups of identical files below a set of roots."""

    def __init__(
        self,
        min_size: int = DEFAULT_MIN_SIZE,
        prefix_bytes: int = PREFIX_BYTES,
        full_hash: bool = False,
        progress_interval: float = 0.1,
    ) -> None:
        self.min_size = max(min_size, 1)
        self.prefix_bytes = prefix_bytes
        self.full_hash = full_hash
        self._progress_interval = progress_interval
        self._guard = threading.Lock()

    def find(
        self,
        roots: Sequence[ScanRoot],
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> DuplicateReport:
        """Search *roots* for duplicates, largest waste first.

        Raises:
            ScanInProgressError: if this finder is already running.
        """
        if not self._guard.acquire(blocking=False):
            raise ScanInProgressError("Duplicate search is already running")
        try:
            return self._find(roots, ProgressReporter(on_progress, self._progress_interval), cancel or CancelToken())
        finally:
            self._guard.release()

    def _find(self, roots: Sequence[ScanRoot], reporter: ProgressReporter, cancel: CancelToken) -> DuplicateReport:
        started = time.monotonic()
        report = DuplicateReport(full_hash=self.full_hash)

        reporter.update(0.0, "Indexing files...", force=True)
        by_size = self._index(roots, reporter, cancel, report)
        candidates = {size: files for size, files in by_size.items() if len(files) > 1}
        log.debug("%d files indexed, %d size buckets to compare", report.files_indexed, len(candidates))

        reporter.update(_INDEX_SHARE, "Calculating checksums...", force=True)
        total = len(candidates)
        for done, size in enumerate(sorted(candidates, reverse=True), 1):
            if cancel.cancelled:
                break
            report.groups.extend(self._confirm(size, candidates[size]))
            reporter.update(min(_INDEX_SHARE + (1 - _INDEX_SHARE) * done / total, 0.999), "Comparing files...")

        report.groups.sort(key=lambda g: (-g.wasted_bytes, str(g.original.path)))
        report.cancelled = cancel.cancelled
        report.elapsed = time.monotonic() - started
        if report.cancelled:
            report.summary = f"Cancelled after finding {len(report.groups)} duplicate groups"
            reporter.update(reporter.fraction, report.summary, force=True)
        else:
            report.summary = (
                f"Found {len(report.groups)} duplicate groups wasting {bytes_to_human(report.wasted_bytes)}"
            )
            reporter.update(1.0, report.summary, force=True)
        return report

    def _index(
        self,
        roots: Sequence[ScanRoot],
        reporter: ProgressReporter,
        cancel: CancelToken,
        report: DuplicateReport,
    ) -> dict[int, list[CandidateEntry]]:
        """Phase 1: bucket regular files by exact size."""
        by_size: dict[int, list[CandidateEntry]] = defaultdict(list)
        seen: set[tuple[int, int] | Path] = set()
        total_roots = max(len(roots), 1)

        for index, root in enumerate(roots):
            if cancel.cancelled:
                break
            label = root.path.name or str(root.path)
            reporter.update(index / total_roots * _INDEX_SHARE, f"Scanning {label}...", force=True)
            error = check_root(root)
            if error is not None:
                log.warning("Skipping scan root %s", error)
                report.root_errors.append(error)
                continue
            if not root.path.exists():
                continue
            try:
                for entry in walk(root, lambda c: not c.is_dir, cancel):
                    # One file reached twice (overlapping or symlinked roots,
                    # hard links) is one copy, not a duplicate of itself.
                    identity = entry.file_id or entry.path.resolve()
                    if identity in seen:
                        continue
                    seen.add(identity)
                    report.files_indexed += 1
                    if entry.size_bytes is not None and entry.size_bytes >= self.min_size:
                        by_size[entry.size_bytes].append(entry)
            except OSError as e:
                log.warning("Cannot read scan root %s: %s", root.path, e)
                report.root_errors.append(f"{root.path}: {e.strerror or e}")

        return by_size

    def _confirm(self, size: int, files: list[CandidateEntry]) -> list[DuplicateGroup]:
        """Phase 2: split one size bucket into groups of identical content."""
        by_print = self._group_by(files, lambda p: prefix_hash(p, self.prefix_bytes))
        if self.full_hash and size > self.prefix_bytes:
            confirmed: dict[str, list[CandidateEntry]] = {}
            for members in by_print.values():
                if len(members) > 1:
                    confirmed.update(self._group_by(members, full_hash))
            by_print = confirmed

        groups: list[DuplicateGroup] = []
        for fingerprint, members in by_print.items():
            if len(members) < 2:
                continue
            ordered = elect_original(members)
            groups.append(
                DuplicateGroup(
                    fingerprint=fingerprint,
                    size_bytes=size,
                    files=tuple(
                        DuplicateFile(
                            path=c.path,
                            size_bytes=size,
                            modified=c.modified,
                            is_original=(i == 0),
                        )
                        for i, c in enumerate(ordered)
                    ),
                )
            )
        return groups

    @staticmethod
    def _group_by(files: list[CandidateEntry], fingerprint) -> dict[str, list[CandidateEntry]]:
        grouped: dict[str, list[CandidateEntry]] = defaultdict(list)
        for candidate in files:
            try:
                grouped[fingerprint(candidate.path)].append(candidate)
            except OSError:
                log.debug("Cannot hash: %s", candidate.path)
        return grouped

"""Size accounting for files and directory trees.

Directory sizes are lower bounds: per-directory item caps, depth caps,
hidden-entry and package skipping all drop entries without telling the
caller, and unreadable entries count as zero.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from zenscan.core.progress import CancelToken
from zenscan.models.scan_result import ScanRoot

log = logging.getLogger(__name__)

# Directories that behave like single files (bundles on macOS).
PACKAGE_SUFFIXES = frozenset({
    ".app", ".bundle", ".framework", ".plugin", ".kext",
    ".photoslibrary", ".musiclibrary", ".xcarchive", ".pkg",
})


@dataclass(frozen=True, slots=True)
class SizeLimits:
    """Traversal bounds for directory aggregation."""

    max_items: int | None = None
    max_depth: int | None = None
    skip_hidden: bool = False
    skip_packages: bool = False

    @classmethod
    def from_root(cls, root: ScanRoot) -> SizeLimits:
        return cls(
            max_items=root.max_items,
            skip_hidden=root.skip_hidden,
            skip_packages=root.skip_packages,
        )


UNBOUNDED = SizeLimits()


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_package(path: Path | str) -> bool:
    """Whether a directory is a bundle that should be treated as opaque."""
    return os.path.splitext(str(path))[1].lower() in PACKAGE_SUFFIXES


def dir_info(
    path: Path | str,
    limits: SizeLimits = UNBOUNDED,
    cancel: CancelToken | None = None,
) -> tuple[int, int]:
    """Calculate total size and file count of a directory tree.

    Walks with ``os.scandir`` without following symlinks. Each directory
    contributes at most ``limits.max_items`` entries; once the cap is
    hit its remaining siblings are skipped.

    Returns:
        (total_bytes, file_count) tuple.
    """
    total = 0
    count = 0
    stack: list[tuple[str, int]] = [(str(path), 0)]
    while stack:
        if cancel is not None and cancel.cancelled:
            break
        current, depth = stack.pop()
        try:
            with os.scandir(current) as it:
                for seen, entry in enumerate(it):
                    if limits.max_items is not None and seen >= limits.max_items:
                        log.debug("Item cap reached in %s", current)
                        break
                    if limits.skip_hidden and is_hidden(entry.name):
                        continue
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                            count += 1
                        elif entry.is_dir(follow_symlinks=False):
                            if limits.skip_packages and is_package(entry.name):
                                continue
                            if limits.max_depth is None or depth < limits.max_depth:
                                stack.append((entry.path, depth + 1))
                    except OSError:
                        log.debug("Cannot access: %s", entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", current)
    return total, count


def dir_size(path: Path | str, limits: SizeLimits = UNBOUNDED, cancel: CancelToken | None = None) -> int:
    """Calculate total size of a directory tree."""
    return dir_info(path, limits, cancel)[0]


def size_of(path: Path | str, limits: SizeLimits = UNBOUNDED, cancel: CancelToken | None = None) -> int:
    """Return the byte size of a file, or the aggregated size of a directory.

    Never raises: a missing or unreadable path has size 0.
    """
    try:
        st = os.lstat(path)
    except OSError:
        log.debug("Cannot stat: %s", path)
        return 0
    if stat.S_ISDIR(st.st_mode):
        return dir_size(path, limits, cancel)
    if stat.S_ISREG(st.st_mode):
        return st.st_size
    return 0

"""Multi-pass secure erase.

Each pass rewrites the whole file in 1 MiB chunks with a pattern picked
by ``pass % 3`` (zeros, ones, random bytes) and is fsynced before the
next pass starts. The file is unlinked after the last pass.

This is a logical overwrite. On copy-on-write or journaling file systems
and on flash storage with wear levelling the original blocks may survive
untouched, so a shredded file is not guaranteed to be unrecoverable
there. More passes do not change that.
"""

from __future__ import annotations

import logging
import math
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from zenscan.core.progress import CancelToken, ProgressCallback, ProgressReporter
from zenscan.models.action_result import ActionMode, ActionResult

log = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
DEFAULT_PASSES = 3

THREAT_MODEL_NOTICE = (
    "Shredding overwrites file contents in place. On SSDs, copy-on-write "
    "file systems (APFS, Btrfs, ZFS) and journaling file systems the old "
    "data may still exist in blocks the overwrite never reaches."
)


class ShredError(Exception):
    """Base class for secure erase failures."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class ShredPreconditionError(ShredError):
    """The erase plan is invalid; nothing was written."""


class OverwriteError(ShredError):
    """Overwriting failed part way; the file may be partially overwritten."""


class RemovalError(ShredError):
    """All passes completed but the directory entry could not be removed."""


@dataclass(frozen=True, slots=True)
class ErasePlan:
    """One file to erase with a fixed number of passes."""

    path: Path
    passes: int = DEFAULT_PASSES

    def validate(self) -> int:
        """Check the plan before any I/O and return the file length.

        Raises:
            ShredPreconditionError: if the plan cannot be executed.
        """
        if self.passes < 1:
            raise ShredPreconditionError(self.path, "at least one overwrite pass is required")
        try:
            st = os.lstat(self.path)
        except FileNotFoundError:
            raise ShredPreconditionError(self.path, "file not found") from None
        except OSError as e:
            raise ShredPreconditionError(self.path, f"cannot determine file size ({e.strerror})") from None
        if not stat.S_ISREG(st.st_mode):
            raise ShredPreconditionError(self.path, "not a regular file")
        return st.st_size


def pattern(pass_index: int, size: int) -> bytes:
    """Overwrite bytes for one chunk of the given pass."""
    match pass_index % 3:
        case 0:
            return bytes(size)
        case 1:
            return b"\xff" * size
        case _:
            return os.urandom(size)


def shred(
    path: Path | str,
    passes: int = DEFAULT_PASSES,
    on_progress: ProgressCallback | None = None,
    chunk_size: int = CHUNK_SIZE,
) -> None:
    """Overwrite *path* with *passes* passes, then unlink it.

    Progress reaches 1.0 once, after the file has been removed.

    Raises:
        ShredPreconditionError: before any I/O, if the plan is invalid.
        OverwriteError: if opening, writing or syncing the file fails.
        RemovalError: if the data was overwritten but unlinking failed.
    """
    plan = ErasePlan(Path(path), passes)
    length = plan.validate()
    # Every chunk is reported; a pass must never be interrupted, so no throttling.
    reporter = ProgressReporter(on_progress, interval=0.0)
    chunk_count = math.ceil(length / chunk_size)

    try:
        fd = os.open(plan.path, os.O_WRONLY)
    except OSError as e:
        raise OverwriteError(plan.path, f"cannot open file for writing ({e.strerror})") from None

    try:
        for pass_index in range(plan.passes):
            reporter.update(pass_index / plan.passes, f"Pass {pass_index + 1} of {plan.passes}")
            os.lseek(fd, 0, os.SEEK_SET)
            for chunk in range(chunk_count):
                remaining = min(chunk_size, length - chunk * chunk_size)
                data = pattern(pass_index, remaining)
                written = 0
                while written < remaining:
                    written += os.write(fd, data[written:])
                done = (chunk + 1) / chunk_count
                # Capped below the pass boundary; 1.0 is reserved for completion.
                fraction = (pass_index + min(done, 0.999)) / plan.passes
                reporter.update(fraction, f"Pass {pass_index + 1}: {int(done * 100)}%")
            os.fsync(fd)
            log.debug("Completed pass %d/%d on %s", pass_index + 1, plan.passes, plan.path)
    except OSError as e:
        raise OverwriteError(plan.path, f"overwrite failed ({e.strerror})") from None
    finally:
        os.close(fd)

    reporter.update(reporter.fraction, "Removing file...")
    try:
        os.unlink(plan.path)
    except OSError as e:
        raise RemovalError(plan.path, f"contents destroyed but the file could not be removed ({e.strerror})") from None
    reporter.update(1.0, f"Shredded {plan.path.name}")
    log.info("Shredded %s with %d passes", plan.path, plan.passes)


def shred_files(
    paths: Sequence[Path | str],
    passes: int = DEFAULT_PASSES,
    on_progress: ProgressCallback | None = None,
    cancel: CancelToken | None = None,
) -> ActionResult:
    """Shred *paths* one after another.

    A failing file is recorded and the batch continues. Cancellation is
    only honoured between files.
    """
    result = ActionResult(mode=ActionMode.SHRED)
    reporter = ProgressReporter(on_progress, interval=0.0)
    total = max(len(paths), 1)

    for index, raw in enumerate(paths):
        if cancel is not None and cancel.cancelled:
            result.cancelled = True
            break
        path = Path(raw)
        start = index / total
        reporter.update(start, f"Shredding {path.name}...")
        try:
            size = path.lstat().st_size if path.is_file() else 0
        except OSError:
            size = 0

        def _nested(fraction: float, status: str, start: float = start) -> None:
            # Leave 1.0 to the batch itself.
            reporter.update(min(start + fraction / total, 0.999), status)

        try:
            shred(path, passes, _nested)
        except ShredError as e:
            log.warning("Shredding failed: %s", e)
            result.failures.append((path.name, e.reason))
            continue
        result.succeeded += 1
        result.freed_bytes += size

    if result.cancelled:
        reporter.update(reporter.fraction, "Cancelled")
    else:
        reporter.update(1.0, "Complete")
    return result

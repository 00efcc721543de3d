"""Scanning orchestration engine."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from zenscan.config import ScanConfig
from zenscan.core.dedup import DuplicateFinder
from zenscan.core.history import ScanHistory
from zenscan.core.pipeline import ScanInProgressError, ScanPipeline, SnapshotCallback
from zenscan.core.progress import CancelToken, ProgressCallback
from zenscan.core.registry import ScannerRegistry
from zenscan.models.duplicate import DuplicateReport
from zenscan.models.scan_result import ScanResult, ScanRoot

log = logging.getLogger(__name__)

DUPLICATES_JOB = "duplicates"


@dataclass(slots=True)
class ScanJob:
    """A scan running on the engine's worker pool."""

    key: str
    future: Future
    cancel_token: CancelToken

    def cancel(self) -> None:
        self.cancel_token.cancel()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: float | None = None):
        return self.future.result(timeout)


class ScanEngine:
    """Runs scanners and duplicate searches, in the foreground or on workers.

    A scanner id has at most one active run. Submitting the same id again
    cancels the previous job and starts the new one once the previous one
    has returned.
    """

    def __init__(
        self,
        registry: ScannerRegistry,
        config: ScanConfig | None = None,
        history: ScanHistory | None = None,
        max_workers: int = 4,
    ) -> None:
        self.registry = registry
        self.config = config or ScanConfig()
        self.history = history
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="zenscan")
        self._lock = threading.Lock()
        self._pipelines: dict[str, ScanPipeline] = {}
        self._jobs: dict[str, ScanJob] = {}
        self._last_scan: dict[str, ScanResult] = {}
        self._dedup_guard = threading.Lock()

    def __enter__(self) -> ScanEngine:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    def scan(
        self,
        scanner_id: str,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
        on_snapshot: SnapshotCallback | None = None,
    ) -> ScanResult:
        """Run one scanner in the calling thread.

        Failures never propagate; they are returned as a result whose
        ``error`` is set.
        """
        scanner = self.registry.get(scanner_id)
        if scanner is None:
            log.warning("Scanner '%s' not found", scanner_id)
            return ScanResult(scanner_id=scanner_id, scanner_name=scanner_id, error=f"Unknown scanner '{scanner_id}'")

        try:
            result = self._pipeline(scanner_id).run(on_progress, cancel, on_snapshot)
        except ScanInProgressError as e:
            log.info("%s", e)
            return ScanResult(scanner_id=scanner.id, scanner_name=scanner.name, error=str(e))
        except Exception:
            log.exception("Scanner '%s' failed during scan", scanner_id)
            return ScanResult(scanner_id=scanner.id, scanner_name=scanner.name, error="Scanner crashed during scan")

        log.info("%s: %s", scanner.name, result.summary)
        if not result.cancelled:
            with self._lock:
                self._last_scan[scanner_id] = result
            if self.history is not None:
                self.history.record_scan(result)
        return result

    def submit(
        self,
        scanner_id: str,
        on_progress: ProgressCallback | None = None,
        on_snapshot: SnapshotCallback | None = None,
    ) -> ScanJob:
        """Run one scanner on a worker thread."""
        return self._submit(
            scanner_id,
            lambda token: self.scan(scanner_id, on_progress, token, on_snapshot),
        )

    def find_duplicates(
        self,
        roots: Sequence[Path | str | ScanRoot],
        min_size: int | None = None,
        full_hash: bool | None = None,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> DuplicateReport:
        """Search *roots* for duplicate files in the calling thread.

        Arguments left as None fall back to the engine's config.
        """
        cfg = self.config
        finder = DuplicateFinder(
            min_size=cfg.duplicate_min_size if min_size is None else min_size,
            prefix_bytes=cfg.duplicate_prefix_bytes,
            full_hash=cfg.duplicate_full_hash if full_hash is None else full_hash,
            progress_interval=cfg.progress_interval,
        )
        if not self._dedup_guard.acquire(blocking=False):
            return DuplicateReport(error="Duplicate search is already running")
        try:
            report = finder.find([self._as_root(r) for r in roots], on_progress, cancel)
        except Exception:
            log.exception("Duplicate search failed")
            return DuplicateReport(error="Duplicate search crashed")
        finally:
            self._dedup_guard.release()
        log.info("%s", report.summary)
        return report

    def submit_duplicates(
        self,
        roots: Sequence[Path | str | ScanRoot],
        min_size: int | None = None,
        full_hash: bool | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ScanJob:
        """Run a duplicate search on a worker thread."""
        return self._submit(
            DUPLICATES_JOB,
            lambda token: self.find_duplicates(roots, min_size, full_hash, on_progress, token),
        )

    def get_last_scan(self, scanner_id: str) -> ScanResult | None:
        """Get the last completed scan result for a scanner."""
        with self._lock:
            return self._last_scan.get(scanner_id)

    def forget(self, scanner_id: str) -> None:
        """Drop the cached result of a scanner, e.g. after cleaning it."""
        with self._lock:
            self._last_scan.pop(scanner_id, None)

    def is_running(self, key: str) -> bool:
        with self._lock:
            job = self._jobs.get(key)
        return job is not None and not job.done()

    def cancel_all(self) -> None:
        with self._lock:
            jobs = list(self._jobs.values())
        for job in jobs:
            job.cancel()

    def shutdown(self, wait: bool = True) -> None:
        """Cancel running jobs and stop the worker pool."""
        self.cancel_all()
        self._executor.shutdown(wait=wait)

    def _pipeline(self, scanner_id: str) -> ScanPipeline:
        with self._lock:
            pipeline = self._pipelines.get(scanner_id)
            if pipeline is None:
                scanner = self.registry.get(scanner_id)
                pipeline = ScanPipeline(scanner, self.config.progress_interval)
                self._pipelines[scanner_id] = pipeline
            return pipeline

    def _submit(self, key: str, task: Callable[[CancelToken], object]) -> ScanJob:
        token = CancelToken()
        with self._lock:
            previous = self._jobs.get(key)
            if previous is not None and not previous.done():
                log.debug("Cancelling previous '%s' job", key)
                previous.cancel()
                # Never started: nothing to wait for.
                if previous.future.cancel():
                    previous = None
            else:
                previous = None

            def _run():
                if previous is not None:
                    wait_for([previous.future])
                return task(token)

            job = ScanJob(key=key, future=self._executor.submit(_run), cancel_token=token)
            self._jobs[key] = job
        return job

    def _as_root(self, root: Path | str | ScanRoot) -> ScanRoot:
        if isinstance(root, ScanRoot):
            return root
        return ScanRoot(
            path=Path(root).expanduser(),
            max_items=self.config.max_items_per_dir,
            skip_hidden=self.config.skip_hidden,
            optional=False,
        )

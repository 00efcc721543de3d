"""Keeps a short history of scans and cleanups across sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from zenscan import storage
from zenscan.models.action_result import ActionResult
from zenscan.models.scan_result import ScanResult

log = logging.getLogger(__name__)

DEFAULT_LIMIT = 30


class ScanHistory:
    """Records one entry per completed scan or cleanup, newest first."""

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        self.limit = max(limit, 1)

    def entries(self) -> list[dict[str, Any]]:
        """Stored entries, newest first. Entries that cannot be read are left out."""
        return [e for e in storage.load_history()["entries"] if _timestamp(e) is not None]

    def record_scan(self, result: ScanResult) -> None:
        """Record a finished scan. Failed and cancelled scans are not kept."""
        if result.failed or result.cancelled:
            return
        self._append({
            "timestamp": _now().isoformat(),
            "scanner_id": result.scanner_id,
            "kind": "scan",
            "bytes_found": result.total_bytes,
            "items_found": len(result.items),
            "bytes_cleaned": 0,
            "duration": round(result.elapsed, 3),
        })

    def record_action(self, scanner_id: str, result: ActionResult) -> None:
        """Record a cleanup that removed at least one item."""
        if result.succeeded == 0:
            return
        self._append({
            "timestamp": _now().isoformat(),
            "scanner_id": scanner_id,
            "kind": result.mode.value,
            "bytes_found": 0,
            "items_found": result.succeeded,
            "bytes_cleaned": result.freed_bytes,
            "duration": 0.0,
        })

    def get_last_time(self, scanner_id: str | None = None) -> str | None:
        """ISO timestamp of the newest entry, optionally for one scanner."""
        for entry in self.entries():
            if scanner_id is None or entry.get("scanner_id") == scanner_id:
                return entry["timestamp"]
        return None

    def get_stats(self, period: str = "all") -> dict[str, Any]:
        """Aggregate the history for a time period.

        Args:
            period: One of 'today', 'week', 'month', 'all'.
        """
        entries = self.entries()

        match period:
            case "today":
                cutoff = _start_of_today()
            case "week":
                cutoff = _start_of_today() - timedelta(days=7)
            case "month":
                cutoff = _start_of_today() - timedelta(days=30)
            case _:
                cutoff = None

        if cutoff is not None:
            entries = [e for e in entries if _timestamp(e) >= cutoff]

        per_scanner: dict[str, dict[str, int]] = {}
        for entry in entries:
            totals = per_scanner.setdefault(entry["scanner_id"], {"scans": 0, "bytes_cleaned": 0})
            if entry.get("kind") == "scan":
                totals["scans"] += 1
            totals["bytes_cleaned"] += entry.get("bytes_cleaned", 0)

        return {
            "period": period,
            "scan_count": sum(1 for e in entries if e.get("kind") == "scan"),
            "bytes_found": sum(e.get("bytes_found", 0) for e in entries),
            "bytes_cleaned": sum(e.get("bytes_cleaned", 0) for e in entries),
            "per_scanner": per_scanner,
        }

    def clear(self) -> None:
        storage.save_history({"entries": []})

    def _append(self, entry: dict[str, Any]) -> None:
        history = storage.load_history()
        history["entries"] = [entry, *history["entries"]][: self.limit]
        storage.save_history(history)
        log.debug("Recorded %s entry for %s", entry["kind"], entry["scanner_id"])


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _start_of_today() -> datetime:
    """Return the start of the current UTC day."""
    return _now().replace(hour=0, minute=0, second=0, microsecond=0)


def _timestamp(entry: Any) -> datetime | None:
    """The entry's time in UTC, or None if the entry is malformed."""
    if not isinstance(entry, dict) or not isinstance(entry.get("scanner_id"), str):
        log.debug("Skipping malformed history entry: %r", entry)
        return None
    try:
        stamp = datetime.fromisoformat(entry["timestamp"])
    except (KeyError, TypeError, ValueError):
        log.debug("Skipping history entry with bad timestamp: %r", entry)
        return None
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp

"""Tests for the scan history."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from zenscan import storage
from zenscan.core.history import ScanHistory
from zenscan.models.action_result import ActionMode, ActionResult
from zenscan.models.scan_result import ScanResult

pytestmark = pytest.mark.usefixtures("isolate_storage")


def _scan(scanner_id: str = "user_cache", total: int = 1000, **kwargs) -> ScanResult:
    return ScanResult(scanner_id=scanner_id, scanner_name=scanner_id, total_bytes=total, elapsed=0.5, **kwargs)


class TestScanHistory:
    def test_record_scan(self, isolate_storage):
        history = ScanHistory()
        history.record_scan(_scan())

        data = json.loads(isolate_storage.read_text())
        entry = data["entries"][0]
        assert entry["scanner_id"] == "user_cache"
        assert entry["kind"] == "scan"
        assert entry["bytes_found"] == 1000
        assert entry["duration"] == 0.5

    def test_newest_first(self):
        history = ScanHistory()
        history.record_scan(_scan("first"))
        history.record_scan(_scan("second"))
        assert [e["scanner_id"] for e in history.entries()] == ["second", "first"]

    def test_capped(self):
        history = ScanHistory(limit=3)
        for i in range(5):
            history.record_scan(_scan(f"s{i}"))
        assert [e["scanner_id"] for e in history.entries()] == ["s4", "s3", "s2"]

    def test_failed_and_cancelled_scans_not_recorded(self):
        history = ScanHistory()
        history.record_scan(_scan(error="boom"))
        history.record_scan(_scan(cancelled=True))
        assert history.entries() == []

    def test_record_action(self):
        history = ScanHistory()
        history.record_action("user_cache", ActionResult(ActionMode.TRASH, succeeded=2, freed_bytes=4096))
        history.record_action("user_cache", ActionResult(ActionMode.DELETE))
        entries = history.entries()
        assert len(entries) == 1
        assert entries[0]["kind"] == "trash"
        assert entries[0]["bytes_cleaned"] == 4096

    def test_get_last_time(self):
        history = ScanHistory()
        assert history.get_last_time() is None
        history.record_scan(_scan("a"))
        history.record_scan(_scan("b"))
        assert history.get_last_time("a") is not None
        assert history.get_last_time("missing") is None

    def test_stats_by_period(self):
        history = ScanHistory()
        history.record_scan(_scan("fresh", 100))
        history.record_action("fresh", ActionResult(ActionMode.TRASH, succeeded=1, freed_bytes=50))

        data = storage.load_history()
        old = dict(data["entries"][1], scanner_id="old", bytes_found=900)
        old["timestamp"] = (datetime.now(timezone.utc) - timedelta(days=60)).isoformat()
        data["entries"].append(old)
        storage.save_history(data)

        today = history.get_stats("today")
        assert today["scan_count"] == 1
        assert today["bytes_found"] == 100
        assert today["bytes_cleaned"] == 50
        assert today["per_scanner"] == {"fresh": {"scans": 1, "bytes_cleaned": 50}}

        everything = history.get_stats("all")
        assert everything["scan_count"] == 2
        assert everything["bytes_found"] == 1000

    def test_corrupt_file_is_ignored(self, isolate_storage):
        isolate_storage.write_text("{not json")
        history = ScanHistory()
        assert history.entries() == []
        history.record_scan(_scan())
        assert len(history.entries()) == 1

    def test_malformed_entries_are_skipped(self, isolate_storage):
        history = ScanHistory()
        history.record_scan(_scan("good", 100))
        data = storage.load_history()
        data["entries"] += [
            {"scanner_id": "bad_time", "kind": "scan", "timestamp": "yesterday-ish"},
            {"scanner_id": "no_time", "kind": "scan"},
            {"kind": "scan", "timestamp": datetime.now(timezone.utc).isoformat()},
            "not an entry",
        ]
        isolate_storage.write_text(json.dumps(data))

        assert [e["scanner_id"] for e in history.entries()] == ["good"]
        week = history.get_stats("week")
        assert week["scan_count"] == 1
        assert week["per_scanner"] == {"good": {"scans": 1, "bytes_cleaned": 0}}
        assert history.get_last_time() is not None

    def test_naive_timestamp_is_utc(self, isolate_storage):
        naive = datetime.now(timezone.utc).replace(tzinfo=None).isoformat()
        isolate_storage.write_text(json.dumps({"entries": [
            {"scanner_id": "legacy", "kind": "scan", "timestamp": naive, "bytes_found": 7},
        ]}))
        assert ScanHistory().get_stats("today")["bytes_found"] == 7

    def test_clear(self):
        history = ScanHistory()
        history.record_scan(_scan())
        history.clear()
        assert history.entries() == []

"""Downloads that have not been touched for a while."""

from __future__ import annotations

import time

from zenscan.config import ScanConfig
from zenscan.models.scan_result import CandidateEntry
from zenscan.models.scanner import Scanner, newest_first

_DAY = 86_400


def build(config: ScanConfig) -> list[Scanner]:
    max_age = config.download_age_days * _DAY

    def _is_old(entry: CandidateEntry) -> bool:
        return time.time() - entry.modified >= max_age

    return [
        Scanner(
            id="old_downloads",
            name="Old Downloads",
            description=f"Downloads older than {config.download_age_days} days",
            roots=(config.root(config.home / "Downloads"),),
            predicate=_is_old,
            sort_key=newest_first,
        ),
    ]

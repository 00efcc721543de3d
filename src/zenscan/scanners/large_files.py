"""Large files in the usual user folders."""

from __future__ import annotations

from zenscan.config import ScanConfig
from zenscan.models.scan_result import CandidateEntry
from zenscan.models.scanner import Scanner

USER_FOLDERS = ("Downloads", "Documents", "Desktop", "Movies", "Videos", "Music", "Pictures")


def build(config: ScanConfig) -> list[Scanner]:
    threshold = config.large_file_threshold

    def _is_large(entry: CandidateEntry) -> bool:
        return not entry.is_dir and (entry.size_bytes or 0) >= threshold

    return [
        Scanner(
            id="large_files",
            name="Large Files",
            description="Files of at least the configured size in your user folders",
            roots=tuple(config.root(config.home / name, skip_packages=True) for name in USER_FOLDERS),
            predicate=_is_large,
            min_size=threshold,
            recursive=True,
        ),
    ]

"""Scan configuration.

Everything tunable is collected in one immutable :class:`ScanConfig` that
is handed to the engine and to every scanner builder.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path

from zenscan.models.scan_result import ScanRoot
from zenscan.settings import Settings

log = logging.getLogger(__name__)

MiB = 1024 * 1024


@dataclass(frozen=True)
class ScanConfig:
    large_file_threshold: int = 100 * MiB
    junk_min_size: int = 1024
    download_age_days: int = 30
    duplicate_min_size: int = 10 * 1024
    duplicate_prefix_bytes: int = 64 * 1024
    duplicate_full_hash: bool = False
    max_items_per_dir: int = 5000
    skip_hidden: bool = True
    shred_passes: int = 3
    treemap_depth: int = 2
    treemap_max_children: int = 20
    progress_interval: float = 0.1
    history_limit: int = 30
    home: Path = field(default_factory=Path.home)

    @classmethod
    def from_settings(cls, settings: Settings) -> ScanConfig:
        """Build a config from the ``scan.*`` keys of *settings*.

        Values of the wrong type are ignored with a warning.
        """
        overrides = {}
        for f in dataclasses.fields(cls):
            value = settings.get(f"scan.{f.name}")
            if value is None:
                continue
            try:
                if f.name == "home":
                    overrides[f.name] = Path(value).expanduser()
                else:
                    overrides[f.name] = _coerce(value, type(f.default))
            except (TypeError, ValueError):
                log.warning("Ignoring invalid setting scan.%s=%r", f.name, value)
        return cls(**overrides)

    def root(self, path: Path | str, **options) -> ScanRoot:
        """A scan root below *path* with this config's traversal limits."""
        options.setdefault("max_items", self.max_items_per_dir)
        options.setdefault("skip_hidden", self.skip_hidden)
        return ScanRoot(path=Path(path), **options)


def _coerce(value, kind: type):
    if kind is bool:
        if not isinstance(value, bool):
            raise TypeError(value)
        return value
    if isinstance(value, bool):
        raise TypeError(value)
    return kind(value)

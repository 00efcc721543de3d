"""Scan input and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from zenscan.models.category import Category


@dataclass(frozen=True, slots=True)
class ScanRoot:
    """A directory to scan together with its traversal limits.

    ``max_items`` caps how many entries of any single directory are
    looked at; the rest are skipped, so sizes are lower bounds.
    ``optional`` roots that do not exist are skipped without reporting
    an error (e.g. macOS-only locations on Linux).
    """

    path: Path
    max_depth: int | None = None
    max_items: int | None = 5000
    skip_hidden: bool = True
    skip_packages: bool = False
    optional: bool = True


@dataclass(frozen=True, slots=True)
class CandidateEntry:
    """Single path produced by enumeration, before sizing.

    ``size_bytes`` is None for directories until the size accountant
    has aggregated them. ``file_id`` is the ``(st_dev, st_ino)`` pair, the
    same for every path that reaches one file.
    """

    path: Path
    size_bytes: int | None
    modified: float
    is_dir: bool = False
    file_id: tuple[int, int] | None = None

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class ScanResultItem:
    """A sized and classified scan hit.

    ``selected`` is the initial selection policy of the scanner that
    produced the item. Live selection state is kept by
    :class:`zenscan.core.selection.Selection`.
    """

    path: Path
    size_bytes: int
    category: Category
    modified: float
    is_dir: bool = False
    selected: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_original(self) -> bool:
        return False


@dataclass(slots=True)
class ScanResult:
    """Result of running one scanner."""

    scanner_id: str
    scanner_name: str
    items: list[ScanResultItem] = field(default_factory=list)
    total_bytes: int = 0
    summary: str = ""
    error: str = ""
    root_errors: list[str] = field(default_factory=list)
    cancelled: bool = False
    elapsed: float = 0.0

    @property
    def failed(self) -> bool:
        """True when the scan could not run at all (as opposed to finding nothing)."""
        return bool(self.error)

"""Scanner definition.

A scanner is a plain strategy object: the generic scan pipeline is
parameterised by its roots, its enumeration mode, its predicate and its
ordering. Concrete scanners are built in :mod:`zenscan.scanners`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from zenscan.models.category import Category
from zenscan.models.scan_result import CandidateEntry, ScanResultItem, ScanRoot

Predicate = Callable[[CandidateEntry], bool]
Classifier = Callable[..., Category]
SortKey = Callable[[ScanResultItem], Any]


def accept_all(entry: CandidateEntry) -> bool:
    return True


def largest_first(item: ScanResultItem) -> tuple[int, str]:
    return (-item.size_bytes, str(item.path))


def newest_first(item: ScanResultItem) -> tuple[float, str]:
    return (-item.modified, str(item.path))


@dataclass(frozen=True)
class Scanner:
    """Everything the pipeline needs to know about one scan type.

    Attributes:
        roots: Locations scanned in order.
        predicate: Filter applied to each enumerated entry before sizing.
        min_size: Items smaller than this after sizing are dropped.
        recursive: If False only the direct children of each root are
            candidates. If True the whole tree is walked; directories the
            predicate accepts are emitted and not descended into.
        roots_as_items: Each root is itself the single candidate; used
            for well-known cache locations that are removed as a whole.
        preselect: Initial ``selected`` value of produced items.
        classifier: Overrides :func:`zenscan.core.classifier.classify`.
        sort_key: Result ordering, largest first by default.
        measure: Maps an accepted path to the path whose size is reported,
            e.g. a repository to its .git folder.
        removable: False for items that are maintained by their own tool
            and must not be removed by the clean action.
    """

    id: str
    name: str
    description: str
    roots: tuple[ScanRoot, ...]
    group: str = "user"
    predicate: Predicate = accept_all
    min_size: int = 0
    recursive: bool = False
    roots_as_items: bool = False
    preselect: bool = False
    classifier: Classifier | None = None
    sort_key: SortKey = largest_first
    measure: Callable[[Path], Path] | None = None
    removable: bool = True

    @property
    def unavailable_reason(self) -> str | None:
        """Why this scanner has nothing to look at, or None if it does."""
        if not any(root.path.is_dir() for root in self.roots):
            return f"No {self.name.lower()} locations found"
        return None

    def is_available(self) -> bool:
        return self.unavailable_reason is None

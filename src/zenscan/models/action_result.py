"""Destructive action modes and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ActionMode(str, Enum):
    """How selected items are removed."""

    TRASH = "trash"
    DELETE = "delete"
    SHRED = "shred"
    # Space reclaimed by an external tool (docker, brew, git) rather than by removing items.
    PRUNE = "prune"


@dataclass(slots=True)
class ActionResult:
    """Outcome of one action over a set of items."""

    mode: ActionMode
    succeeded: int = 0
    freed_bytes: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def summary(self) -> str:
        return f"{self.succeeded} succeeded, {self.failed} failed"

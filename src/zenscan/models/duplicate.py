"""Duplicate detection dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DuplicateFile:
    """One copy inside a duplicate group."""

    path: Path
    size_bytes: int
    modified: float
    is_original: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def selected(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """Files sharing one content fingerprint.

    Exactly one member is flagged ``is_original``; it is the copy that
    is kept and can never be selected for deletion.
    """

    fingerprint: str
    size_bytes: int
    files: tuple[DuplicateFile, ...]

    def __post_init__(self) -> None:
        if len(self.files) < 2:
            raise ValueError("a duplicate group needs at least two files")
        if sum(1 for f in self.files if f.is_original) != 1:
            raise ValueError("a duplicate group needs exactly one original")

    @property
    def wasted_bytes(self) -> int:
        return self.size_bytes * (len(self.files) - 1)

    @property
    def original(self) -> DuplicateFile:
        return next(f for f in self.files if f.is_original)

    @property
    def copies(self) -> tuple[DuplicateFile, ...]:
        return tuple(f for f in self.files if not f.is_original)


@dataclass(slots=True)
class DuplicateReport:
    """Result of a duplicate search."""

    groups: list[DuplicateGroup] = field(default_factory=list)
    files_indexed: int = 0
    summary: str = ""
    error: str = ""
    root_errors: list[str] = field(default_factory=list)
    cancelled: bool = False
    full_hash: bool = False
    elapsed: float = 0.0

    @property
    def wasted_bytes(self) -> int:
        return sum(g.wasted_bytes for g in self.groups)

    @property
    def failed(self) -> bool:
        return bool(self.error)

"""Treemap geometry dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle, origin at the top-left."""

    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True, slots=True)
class TreemapNode:
    """One file or directory of a disk-space tree.

    ``children`` is None for leaves. For directories the weight equals
    the sum of the children's weights.
    """

    path: Path
    name: str
    weight: int
    children: tuple[TreemapNode, ...] | None = None

    @property
    def is_leaf(self) -> bool:
        return self.children is None

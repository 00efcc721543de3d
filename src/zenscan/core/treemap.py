"""Treemap layout and disk-space trees.

The layout is a strip-slicing variant of the squarified treemap: each
item takes a full-width (or full-height) strip of the remaining space and
the split orientation simply alternates after every item. It does not
optimise aspect ratios; callers get the best results by passing weights
in descending order.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Sequence

from zenscan.core.progress import CancelToken
from zenscan.core.sizing import UNBOUNDED, SizeLimits, dir_size
from zenscan.models.treemap import Rect, TreemapNode

log = logging.getLogger(__name__)


def layout(weights: Sequence[float], bounds: Rect) -> list[Rect]:
    """Partition *bounds* into one rectangle per weight, areas proportional to weight.

    Returns an empty list when there are no weights or their total is not
    positive. Rectangles never overlap and their areas sum to the area of
    *bounds*.
    """
    total = sum(weights)
    if not weights or total <= 0:
        return []

    bounds_area = bounds.width * bounds.height
    x, y, width, height = bounds.x, bounds.y, bounds.width, bounds.height
    # Start by cutting horizontal strips when the viewport is taller than wide.
    vertical = bounds.width < bounds.height
    rects: list[Rect] = []

    last = len(weights) - 1
    for index, weight in enumerate(weights):
        area = weight / total * bounds_area
        if vertical:
            # The last strip takes whatever is left, absorbing rounding error.
            strip = height if index == last else min(area / width, height) if width > 0 else 0.0
            rects.append(Rect(x, y, width, strip))
            y += strip
            height -= strip
        else:
            strip = width if index == last else min(area / height, width) if height > 0 else 0.0
            rects.append(Rect(x, y, strip, height))
            x += strip
            width -= strip
        vertical = not vertical

    return rects


def layout_children(node: TreemapNode, bounds: Rect) -> list[tuple[TreemapNode, Rect]]:
    """Lay out the direct children of *node*, heaviest first."""
    if not node.children:
        return []
    children = sorted(node.children, key=lambda c: (-c.weight, c.name))
    return list(zip(children, layout([c.weight for c in children], bounds)))


def iter_layout(node: TreemapNode, bounds: Rect, depth: int = 1) -> Iterator[tuple[TreemapNode, Rect, int]]:
    """Yield ``(node, rect, level)`` for every node down to *depth* levels.

    Each directory's children are placed inside the rectangle the
    directory itself received one level up.
    """
    for child, rect in layout_children(node, bounds):
        yield child, rect, 1
        if depth > 1 and not child.is_leaf:
            for grandchild, inner, level in iter_layout(child, rect, depth - 1):
                yield grandchild, inner, level + 1


def build_tree(
    path: Path | str,
    depth: int = 2,
    max_children: int = 20,
    limits: SizeLimits = UNBOUNDED,
    cancel: CancelToken | None = None,
) -> TreemapNode | None:
    """Build a size tree rooted at *path*.

    Directories up to *depth* levels below *path* get children; deeper
    ones are sized in one go and become leaves. Only the *max_children*
    heaviest children are kept per directory, the rest are folded into
    one "N more items" leaf. Returns None when *path* does not exist.
    """
    path = Path(path)
    max_children = max(max_children, 1)
    try:
        is_dir = path.is_dir() and not path.is_symlink()
        if not is_dir:
            return TreemapNode(path=path, name=path.name, weight=path.lstat().st_size)
    except OSError:
        log.debug("Cannot access: %s", path)
        return None
    return _build_dir(path, 0, depth, max_children, limits, cancel)


def _build_dir(
    path: Path,
    level: int,
    depth: int,
    max_children: int,
    limits: SizeLimits,
    cancel: CancelToken | None,
) -> TreemapNode:
    name = path.name or str(path)
    if level >= depth:
        return TreemapNode(path=path, name=name, weight=dir_size(path, limits, cancel))

    children: list[TreemapNode] = []
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        log.debug("Cannot read directory: %s", path)
        entries = []

    for entry in entries:
        if cancel is not None and cancel.cancelled:
            break
        if limits.skip_hidden and entry.name.startswith("."):
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                children.append(_build_dir(Path(entry.path), level + 1, depth, max_children, limits, cancel))
            elif entry.is_file(follow_symlinks=False):
                children.append(
                    TreemapNode(path=Path(entry.path), name=entry.name, weight=entry.stat(follow_symlinks=False).st_size)
                )
        except OSError:
            log.debug("Cannot access: %s", entry.path)

    children.sort(key=lambda c: (-c.weight, c.name))
    if len(children) > max_children:
        kept, rest = children[:max_children - 1], children[max_children - 1:]
        kept.append(
            TreemapNode(path=path, name=f"{len(rest)} more items", weight=sum(c.weight for c in rest))
        )
        children = kept

    return TreemapNode(path=path, name=name, weight=sum(c.weight for c in children), children=tuple(children))

"""Tests for treemap layout and disk-space trees."""

from __future__ import annotations

import itertools

import pytest

from zenscan.core.treemap import build_tree, iter_layout, layout, layout_children
from zenscan.models.treemap import Rect, TreemapNode

EPS = 1e-6


def _overlap(a: Rect, b: Rect) -> float:
    w = min(a.x + a.width, b.x + b.width) - max(a.x, b.x)
    h = min(a.y + a.height, b.y + b.height) - max(a.y, b.y)
    return max(w, 0.0) * max(h, 0.0)


def _inside(inner: Rect, outer: Rect) -> bool:
    return (
        inner.x >= outer.x - EPS
        and inner.y >= outer.y - EPS
        and inner.x + inner.width <= outer.x + outer.width + EPS
        and inner.y + inner.height <= outer.y + outer.height + EPS
    )


class TestLayout:
    def test_example(self):
        rects = layout([50, 30, 20], Rect(0, 0, 100, 50))
        assert [r.area for r in rects] == pytest.approx([2500, 1500, 1000])
        assert sum(r.area for r in rects) == pytest.approx(5000)

    def test_empty(self):
        assert layout([], Rect(0, 0, 10, 10)) == []

    def test_zero_total(self):
        assert layout([0, 0], Rect(0, 0, 10, 10)) == []

    @pytest.mark.parametrize("weight", [1, 0.001, 10**12])
    def test_single_item_fills_bounds(self, weight):
        bounds = Rect(3, 4, 20, 70)
        assert layout([weight], bounds) == [bounds]

    @pytest.mark.parametrize(
        "weights, bounds",
        [
            ([5, 4, 3, 2, 1], Rect(0, 0, 100, 50)),
            ([1, 1, 1, 1], Rect(10, 10, 30, 90)),
            ([100, 1, 1], Rect(0, 0, 7, 7)),
            ([3, 9, 27, 81, 243, 729], Rect(0, 0, 640, 480)),
        ],
    )
    def test_area_conserved_and_no_overlap(self, weights, bounds):
        rects = layout(weights, bounds)
        assert len(rects) == len(weights)
        assert sum(r.area for r in rects) == pytest.approx(bounds.area)
        total = sum(weights)
        for w, r in zip(weights, rects):
            assert r.area == pytest.approx(w / total * bounds.area)
            assert _inside(r, bounds)
        for a, b in itertools.combinations(rects, 2):
            assert _overlap(a, b) == pytest.approx(0.0, abs=EPS)

    def test_first_split_follows_longer_side(self):
        wide = layout([1, 1], Rect(0, 0, 100, 10))
        assert wide[0].height == pytest.approx(10)
        tall = layout([1, 1], Rect(0, 0, 10, 100))
        assert tall[0].width == pytest.approx(10)


class TestBuildTree:
    @pytest.fixture
    def tree_dir(self, tmp_path, make_file):
        root = tmp_path / "root"
        make_file(root / "a.bin", 100)
        make_file(root / "docs" / "b.txt", 50)
        make_file(root / "docs" / "deep" / "c.txt", 25)
        make_file(root / ".hidden", 7)
        return root

    def test_missing_path(self, tmp_path):
        assert build_tree(tmp_path / "missing") is None

    def test_file_is_leaf(self, tmp_path, make_file):
        node = build_tree(make_file(tmp_path / "f", 42))
        assert node.is_leaf
        assert node.weight == 42

    def test_weights_sum_to_children(self, tree_dir):
        root = build_tree(tree_dir, depth=2)
        assert root.weight == 182

        def check(node: TreemapNode) -> None:
            if node.children is not None:
                assert node.weight == sum(c.weight for c in node.children)
                for child in node.children:
                    check(child)

        check(root)

    def test_depth_turns_directories_into_leaves(self, tree_dir):
        root = build_tree(tree_dir, depth=1)
        docs = next(c for c in root.children if c.name == "docs")
        assert docs.is_leaf
        assert docs.weight == 75

    def test_children_sorted_heaviest_first(self, tree_dir):
        root = build_tree(tree_dir, depth=2)
        assert [c.name for c in root.children] == ["a.bin", "docs", ".hidden"]

    def test_overflow_folded_into_one_leaf(self, tmp_path, make_file):
        for i in range(10):
            make_file(tmp_path / f"f{i}", (i + 1) * 10)
        root = build_tree(tmp_path, max_children=4)
        assert len(root.children) == 4
        assert root.children[-1].name == "7 more items"
        assert root.weight == sum(range(10, 110, 10))

    @pytest.mark.parametrize("max_children", [1, 0, -3])
    def test_max_children_at_least_one(self, tmp_path, make_file, max_children):
        for i in range(5):
            make_file(tmp_path / f"f{i}", 10)
        root = build_tree(tmp_path, max_children=max_children)
        assert [c.name for c in root.children] == ["5 more items"]
        assert root.weight == 50


class TestIterLayout:
    def test_children_inside_parent(self):
        leaf = lambda name, w: TreemapNode(path=f"/{name}", name=name, weight=w)  # noqa: E731
        sub = TreemapNode(path="/sub", name="sub", weight=30, children=(leaf("x", 20), leaf("y", 10)))
        root = TreemapNode(path="/", name="/", weight=100, children=(leaf("big", 70), sub))
        bounds = Rect(0, 0, 100, 100)

        placed = list(iter_layout(root, bounds, depth=2))
        assert [(n.name, level) for n, _, level in placed] == [("big", 1), ("sub", 1), ("x", 2), ("y", 2)]
        rects = {n.name: r for n, r, _ in placed}
        assert _inside(rects["x"], rects["sub"])
        assert _inside(rects["y"], rects["sub"])
        assert rects["x"].area + rects["y"].area == pytest.approx(rects["sub"].area)

    def test_layout_children_of_leaf(self):
        assert layout_children(TreemapNode(path="/f", name="f", weight=1), Rect(0, 0, 1, 1)) == []

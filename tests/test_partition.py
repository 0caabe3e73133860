"""Tests for the rectangular and angular layouts."""

import itertools
import math

import pytest

from partition import AngularFamily, RectFamily, layout, make_family, node_key
from subdivide import PACKINGS

FLAT = dict(pad=0, pad_t=0, pad_l=0, pad_r=0, pad_b=0)


def by_id(positioned):
    return {pt.id: pt for pt in positioned}


def rect(x0, x1, y0, y1):
    return {"x0": x0, "x1": x1, "y0": y0, "y1": y1}


class TestRectLayout:
    def test_pre_order_with_root_key(self, small_tree):
        out = layout(small_tree, small_tree.root_node, None, RectFamily(100, 100, "dice", **FLAT))
        assert [pt.id for pt in out] == ["Root", "A", "B", "b"]
        assert [pt.key for pt in out] == ["", "A", "B", "b"]
        assert [pt.rel_depth for pt in out] == [0, 1, 1, 2]

    def test_dice_extents(self, small_tree):
        out = by_id(layout(small_tree, small_tree.root_node, None, RectFamily(100, 100, "dice", **FLAT)))
        assert out["Root"].extent == rect(0, 100, 0, 100)
        assert out["A"].extent == rect(0, 50, 0, 100)
        assert out["B"].extent == rect(50, 100, 0, 100)
        assert out["b"].extent == rect(50, 100, 0, 100)

    def test_maxdepth_limits_levels(self, small_tree):
        out = layout(small_tree, small_tree.root_node, 2, RectFamily(100, 100, "dice", **FLAT))
        assert [pt.id for pt in out] == ["Root", "A", "B"]
        # the last visible level is drawn as leaves
        assert not by_id(out)["B"].is_header
        assert by_id(out)["Root"].is_header

    def test_negative_maxdepth_is_unlimited(self, small_tree):
        out = layout(small_tree, small_tree.root_node, -1, RectFamily(100, 100, "dice", **FLAT))
        assert len(out) == 4

    def test_entry_subtree_only(self, small_tree):
        out = layout(small_tree, small_tree["B"], None, RectFamily(100, 100, "dice", **FLAT))
        assert [pt.id for pt in out] == ["B", "b"]
        assert out[0].extent == rect(0, 100, 0, 100)

    def test_idempotent(self, small_tree):
        family = RectFamily(300, 200, "squarify")
        a = layout(small_tree, small_tree.root_node, None, family)
        b = layout(small_tree, small_tree.root_node, None, family)
        assert [pt.extent for pt in a] == [pt.extent for pt in b]

    def test_hidden_nodes_stay_listed(self, small_tree):
        family = RectFamily(100, 100, "dice", **FLAT)
        out = by_id(layout(small_tree, small_tree.root_node, None, family, hidden={"A"}))
        assert family.is_degenerate(out["A"].extent)
        assert out["B"].extent == rect(0, 100, 0, 100)

    def test_children_sorted_by_value(self):
        from aggregate import aggregate
        from hierarchy import build
        t = aggregate(build(None, ["", "R", "R"], ["R", "small", "big"], [0, 1, 3]), "remainder")
        out = layout(t, t.root_node, None, RectFamily(100, 100, "dice", **FLAT))
        assert [pt.id for pt in out] == ["R", "big", "small"]
        unsorted = layout(t, t.root_node, None, RectFamily(100, 100, "dice", **FLAT), sort=False)
        assert [pt.id for pt in unsorted] == ["R", "small", "big"]

    def test_flip_x(self, small_tree):
        out = by_id(layout(small_tree, small_tree.root_node, None,
                           RectFamily(100, 100, "dice", flip="x", **FLAT)))
        assert out["A"].extent == rect(50, 100, 0, 100)
        assert out["B"].extent == rect(0, 50, 0, 100)

    def test_dice_slice_swaps_axes(self, small_tree):
        out = by_id(layout(small_tree, small_tree.root_node, None,
                           RectFamily(100, 100, "dice-slice", **FLAT)))
        assert out["A"].extent == rect(0, 100, 0, 50)
        assert out["B"].extent == rect(0, 100, 50, 100)

    def test_children_inside_parent_content(self, eve_tree):
        family = RectFamily(400, 300, "squarify", pad=3, font_size=10)
        out = layout(eve_tree, eve_tree.root_node, None, family)
        pts = by_id(out)
        for pt in out:
            parent = eve_tree.parent(pt.node)
            if parent is None:
                continue
            pe = pts[parent.id].extent
            e = pt.extent
            assert e["x0"] >= pe["x0"] + family.pad_l - 1e-9
            assert e["x1"] <= pe["x1"] - family.pad_r + 1e-9
            assert e["y0"] >= pe["y0"] + family.pad_t - 1e-9
            assert e["y1"] <= pe["y1"] - family.pad_b + 1e-9

    def test_siblings_keep_a_gap(self, small_tree):
        family = RectFamily(100, 100, "dice", pad=4, pad_t=0, pad_l=0, pad_r=0, pad_b=0)
        out = by_id(layout(small_tree, small_tree.root_node, None, family))
        assert out["B"].extent["x0"] - out["A"].extent["x1"] == pytest.approx(4)
        assert out["A"].extent["x0"] == 0

    def test_label_transform(self, small_tree):
        out = by_id(layout(small_tree, small_tree.root_node, None, RectFamily(100, 100, "dice", **FLAT)))
        tr = out["A"].transform
        assert (tr["x"], tr["y"], tr["scale"]) == (3, 3, 1.0)

    def test_labels_shrink_to_fit(self):
        family = RectFamily(100, 100, "dice", **FLAT)
        tr = family.fit_text(rect(0, 20, 0, 100), "a long label", False)
        assert 0 < tr["scale"] < 1


class TestRectGeometry:
    def test_path(self):
        family = RectFamily(100, 100)
        assert family.path_for_extent(rect(0, 10, 0, 5)) == "M0,0L10,0L10,5L0,5Z"
        assert family.path_for_extent(rect(3, 3, 0, 5)) == ""

    def test_closest_edge_pushes_to_viewport(self):
        family = RectFamily(100, 100, **FLAT)
        pt = rect(10, 40, 0, 100)
        ref = rect(50, 100, 0, 100)
        assert family.closest_edge(pt, ref) == rect(0, 0, 0, 100)

    def test_closest_edge_leaves_interior_edges(self):
        family = RectFamily(100, 100, **FLAT)
        assert family.closest_edge(rect(10, 20, 10, 20), rect(0, 100, 0, 100)) == rect(10, 20, 10, 20)

    def test_grow_from_maps_into_previous_extent(self):
        family = RectFamily(100, 100, **FLAT)
        start = family.grow_from(rect(0, 50, 0, 100), rect(50, 100, 0, 100), rect(0, 100, 0, 100))
        assert start == rect(50, 75, 0, 100)

    def test_collapse(self):
        family = RectFamily(100, 100)
        assert family.collapse(rect(0, 10, 20, 40)) == rect(5, 5, 30, 30)


@pytest.fixture
def eve_tree(eve_rows):
    from aggregate import aggregate
    from hierarchy import build
    t = build(None, eve_rows["parents"], eve_rows["labels"], eve_rows["values"])
    return aggregate(t, "remainder")


class TestAngularLayout:
    def test_rings(self, small_tree):
        out = by_id(layout(small_tree, small_tree.root_node, None, AngularFamily(200, 200)))
        assert out["Root"].extent == {"a0": 0.0, "a1": 2 * math.pi, "r0": 0.0, "r1": pytest.approx(100 / 3)}
        assert out["A"].extent["r0"] == pytest.approx(100 / 3)
        assert out["A"].extent["r1"] == pytest.approx(200 / 3)
        assert out["b"].extent["r1"] == pytest.approx(100)
        assert out["A"].extent["a0"] == 0
        assert out["A"].extent["a1"] == pytest.approx(math.pi)
        assert out["B"].extent["a1"] == pytest.approx(2 * math.pi)

    def test_root_of_roots_is_not_drawn(self, forest_tree):
        family = AngularFamily(200, 200)
        out = layout(forest_tree, forest_tree.root_node, None, family)
        assert [pt.id for pt in out] == ["A", "B", "b"]
        pts = by_id(out)
        assert pts["A"].extent["r0"] == 0
        assert pts["A"].extent["r1"] == pytest.approx(50)
        assert pts["b"].extent["r1"] == pytest.approx(100)

    def test_root_of_roots_gets_an_extra_level(self, forest_tree):
        out = by_id(layout(forest_tree, forest_tree.root_node, 1, AngularFamily(200, 200)))
        assert sorted(out) == ["A", "B"]
        assert out["A"].extent["r1"] == pytest.approx(100)

    def test_pad_between_siblings(self, small_tree):
        family = AngularFamily(200, 200, pad=0.1)
        out = by_id(layout(small_tree, small_tree.root_node, None, family))
        gap = out["B"].extent["a0"] - out["A"].extent["a1"]
        assert gap == pytest.approx(0.1)

    def test_pad_never_takes_more_than_half(self, small_tree):
        family = AngularFamily(200, 200, pad=10)
        out = by_id(layout(small_tree, small_tree.root_node, None, family))
        a = out["A"].extent
        assert a["a1"] - a["a0"] == pytest.approx(math.pi / 2)

    def test_hit_test(self, small_tree):
        family = AngularFamily(200, 200)
        out = by_id(layout(small_tree, small_tree.root_node, None, family))
        # right of center is angle pi/2, inside A's half
        assert family.contains(out["A"].extent, 150, 100)
        assert not family.contains(out["B"].extent, 150, 100)

    def test_path(self):
        family = AngularFamily(200, 200)
        d = family.path_for_extent({"a0": 0, "a1": math.pi / 2, "r0": 10, "r1": 50})
        assert d.startswith("M100,50A50,50 0 0 1 150,100")
        assert d.endswith("Z")
        assert family.path_for_extent({"a0": 1, "a1": 1, "r0": 10, "r1": 50}) == ""

    def test_closest_edge(self):
        family = AngularFamily(200, 200)
        ref = {"a0": 0, "a1": 1, "r0": 0, "r1": 50}
        after = family.closest_edge({"a0": 2, "a1": 3, "r0": 50, "r1": 100}, ref)
        assert after["a0"] == after["a1"] == 2 * math.pi
        before = family.closest_edge({"a0": 0, "a1": 0.5, "r0": 50, "r1": 100}, ref)
        assert before["a0"] == before["a1"] == 0
        below = family.closest_edge({"a0": 2, "a1": 3, "r0": 0, "r1": 20}, ref)
        assert below["r0"] == below["r1"] == 0


def test_make_family():
    assert isinstance(make_family("treemap", 10, 10), RectFamily)
    assert isinstance(make_family("sunburst", 10, 10), AngularFamily)
    with pytest.raises(ValueError):
        make_family("icicle", 10, 10)


def test_node_key(small_tree):
    assert node_key(small_tree, small_tree.root_node) == ""
    assert node_key(small_tree, small_tree["b"]) == "b"


def overlap_area(a, b):
    dx = min(a["x1"], b["x1"]) - max(a["x0"], b["x0"])
    dy = min(a["y1"], b["y1"]) - max(a["y0"], b["y0"])
    return max(dx, 0) * max(dy, 0)


@pytest.mark.parametrize("packing", PACKINGS)
@pytest.mark.parametrize("pad", [0, 3, 40])
@pytest.mark.parametrize("flip", ["", "x+y"])
@pytest.mark.parametrize("size", [(400, 300), (60, 14)])
def test_children_contained_and_disjoint(eve_tree, packing, pad, flip, size):
    family = RectFamily(size[0], size[1], packing, pad=pad, font_size=10, flip=flip)
    out = layout(eve_tree, eve_tree.root_node, None, family)
    pts = by_id(out)
    for pt in out:
        parent = eve_tree.parent(pt.node)
        if parent is None:
            continue
        pe, e = pts[parent.id].extent, pt.extent
        assert e["x0"] <= e["x1"] and e["y0"] <= e["y1"]
        assert pe["x0"] - 1e-9 <= e["x0"] and e["x1"] <= pe["x1"] + 1e-9
        assert pe["y0"] - 1e-9 <= e["y0"] and e["y1"] <= pe["y1"] + 1e-9
    for node in eve_tree.descendants():
        kids = [pts[c.id].extent for c in eve_tree.children(node) if c.id in pts]
        for a, b in itertools.combinations(kids, 2):
            assert overlap_area(a, b) == pytest.approx(0, abs=1e-6)


def test_oversized_header_pads_stay_inside(small_tree):
    # a 14px parent cannot hold a 20px top and 5px bottom band
    family = RectFamily(100, 14, "slice", pad=0, pad_t=20, pad_b=5, pad_l=0, pad_r=0)
    out = by_id(layout(small_tree, small_tree.root_node, None, family))
    for name in ("A", "B"):
        assert 0 <= out[name].extent["y0"] <= out[name].extent["y1"] <= 14


class TestAngularSiblings:
    @pytest.mark.parametrize("pad", [0, 0.05, 10])
    def test_disjoint_and_inside_parent(self, eve_tree, pad):
        out = layout(eve_tree, eve_tree.root_node, None, AngularFamily(200, 200, pad=pad))
        pts = by_id(out)
        for node in eve_tree.descendants():
            kids = [pts[c.id].extent for c in eve_tree.children(node)]
            if not kids:
                continue
            pe = pts[node.id].extent
            kids.sort(key=lambda e: e["a0"])
            for e in kids:
                assert pe["a0"] - 1e-9 <= e["a0"] <= e["a1"] <= pe["a1"] + 1e-9
            for a, b in zip(kids, kids[1:]):
                assert a["a1"] <= b["a0"] + 1e-9

    def test_zero_values_take_no_gap(self):
        from aggregate import aggregate
        from hierarchy import build
        t = aggregate(build(None, ["", "R", "R", "R"], ["R", "a", "z", "c"], [0, 1, 0, 1]),
                      "remainder")
        out = by_id(layout(t, t.root_node, None, AngularFamily(200, 200, pad=0.2), sort=False))
        a, z, c = out["a"].extent, out["z"].extent, out["c"].extent
        assert a["a0"] == pytest.approx(0.1)
        assert z["a0"] == z["a1"] == pytest.approx(a["a1"])
        assert c["a0"] - a["a1"] == pytest.approx(0.2)
        assert 2 * math.pi - c["a1"] == pytest.approx(0.1)
        assert a["a1"] - a["a0"] == pytest.approx(c["a1"] - c["a0"])

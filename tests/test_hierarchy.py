"""Tests for building trees from flat rows."""

import pytest

import hierarchy
from errors import (AmbiguousHierarchyError, CyclicHierarchyError,
                    HierarchyError, MultipleImpliedRootsError)
from hierarchy import Tree, build


class TestBuild:
    def test_labels_double_as_ids(self, small_rows):
        t = build(None, small_rows["parents"], small_rows["labels"])
        assert t.root_node.id == "Root"
        assert [c.id for c in t.children(t.root_node)] == ["A", "B"]
        assert t["b"].depth == 2

    def test_ids_win_over_labels(self):
        t = build(["r", "x", "y"], ["", "r", "r"], ["Root", "Same", "Same"])
        assert [n.id for n in t.nodes] == ["r", "x", "y"]
        assert t["x"].name == "Same"

    def test_children_keep_input_order(self):
        t = build(None, ["", "R", "R", "R"], ["R", "z", "a", "m"])
        assert [c.id for c in t.children(t.root_node)] == ["z", "a", "m"]

    def test_implied_root(self):
        t = build(None, ["Root", "Root", "B"], ["A", "B", "b"])
        assert t.has_implied_root
        assert t.root_node.id == "Root"
        assert t.root_node.implied
        assert len(t) == 4
        assert t["b"].depth == 2

    def test_multiple_implied_roots(self):
        with pytest.raises(MultipleImpliedRootsError) as exc_info:
            build(None, ["Root1", "Root22", "B"], ["A", "B", "b"])
        assert exc_info.value.implied == ["Root1", "Root22"]
        assert "Multiple implied roots" in str(exc_info.value)

    def test_root_of_roots(self, monkeypatch):
        monkeypatch.setattr(hierarchy, "randstr", lambda existing=(): "dummy")
        t = build(None, ["", "", "B"], ["A", "B", "b"])
        assert [n.id for n in t.nodes] == ["dummy", "A", "B", "b"]
        assert t.has_multiple_roots
        assert t.root_node.synthetic
        assert t["A"].depth == 1

    def test_ambiguous_labels(self):
        with pytest.raises(AmbiguousHierarchyError) as exc_info:
            build(None, ["", "Root", "Root", "A"], ["Root", "A", "A", "B"])
        assert exc_info.value.node_id == "A"
        assert str(exc_info.value) == "ambiguous: A"

    def test_ambiguous_ids(self):
        with pytest.raises(AmbiguousHierarchyError) as exc_info:
            build(["a", "b", "b", "c"], ["", "a", "a", "b"], ["A", "B", "C", "D"])
        assert exc_info.value.node_id == "b"

    def test_mixed_type_ids(self):
        ids = [True, 1, "2", 3, 4, 5, 6, 7, 8]
        parents = ["", True, True, 2, 2, "true", "true", "6", True]
        t = build(ids, parents, None)
        assert [n.id for n in t.nodes] == ["true", "1", "2", "3", "4", "5", "6", "7", "8"]
        assert [n.pid for n in t.nodes] == ["", "true", "true", "2", "2", "true", "true", "6", "true"]
        assert t[7].depth == 2

    def test_cycle_without_root(self):
        with pytest.raises(CyclicHierarchyError):
            build(None, ["B", "A"], ["A", "B"])

    def test_cycle_beside_root(self):
        with pytest.raises(CyclicHierarchyError) as exc_info:
            build(None, ["", "B", "A"], ["R", "A", "B"])
        assert sorted(exc_info.value.node_ids) == ["A", "B"]

    def test_hierarchy_errors_share_a_base(self):
        for err in (AmbiguousHierarchyError("x"), MultipleImpliedRootsError(["a", "b"]),
                    CyclicHierarchyError(["x"])):
            assert isinstance(err, HierarchyError)

    def test_rows_without_id_are_skipped(self):
        t = build(None, ["", "Root", "Root"], ["Root", "", "A"])
        assert [n.id for n in t.nodes] == ["Root", "A"]

    def test_invalid_values_are_dropped(self):
        t = build(None, ["", "R", "R", "R"], ["R", "a", "b", "c"], [1, -1, "x", float("nan")])
        assert t["R"].v == 1.0
        assert t["a"].v is None
        assert t["b"].v is None
        assert t["c"].v is None

    def test_text_is_kept_as_attribute(self):
        t = build(None, ["", "R"], ["R", "a"], text=["root text", "leaf text"])
        assert t["a"].attrs["text"] == "leaf text"


class TestTree:
    def test_depth_is_parent_depth_plus_one(self, eve_rows):
        t = build(None, eve_rows["parents"], eve_rows["labels"])
        for node in t.nodes:
            parent = t.parent(node)
            if parent is None:
                assert node.depth == 0
            else:
                assert node.depth == parent.depth + 1

    def test_ancestors_nearest_first(self, eve_rows):
        t = build(None, eve_rows["parents"], eve_rows["labels"])
        assert [a.id for a in t.ancestors(t["Enos"])] == ["Seth", "Eve"]
        assert t.is_ancestor(t["Eve"], t["Enos"])
        assert not t.is_ancestor(t["Enos"], t["Eve"])
        assert not t.is_ancestor(t["Enos"], t["Enos"])

    def test_path(self, eve_rows):
        t = build(None, eve_rows["parents"], eve_rows["labels"])
        assert t.path(t["Enos"]) == "Eve/Seth/"
        assert t.path(t["Cain"]) == "Eve/"
        assert t.path(t["Eve"]) == "/"

    def test_path_skips_root_of_roots(self, forest_tree):
        assert forest_tree.path(forest_tree["b"]) == "B/"

    def test_height(self, small_tree):
        assert small_tree.height(small_tree.root_node) == 2
        assert small_tree.height(small_tree["B"]) == 1
        assert small_tree.height(small_tree["A"]) == 0

    def test_descendants_pre_order(self, small_tree):
        assert [n.id for n in small_tree.descendants()] == ["Root", "A", "B", "b"]
        assert [n.id for n in small_tree.descendants(small_tree["B"])] == ["B", "b"]

    def test_dict_round_trip_keeps_shape(self, small_tree):
        t = Tree.from_dict(small_tree.to_dict())
        assert [n.id for n in t.descendants()] == ["Root", "A", "B", "b"]
        assert [n.depth for n in t.descendants()] == [0, 1, 1, 2]
        assert t.root_node.value == small_tree.root_node.value

    def test_lookup_by_canonical_id(self):
        t = build([1, 2], ["", 1.0], ["one", "two"])
        assert "1" in t
        assert t[1.0].id == "1"
        assert t.node("missing") is None

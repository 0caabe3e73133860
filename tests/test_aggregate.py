"""Tests for value aggregation modes."""

import pytest

from aggregate import aggregate, aggregation_mode, percent
from errors import InconsistentTotalsError
from hierarchy import build


def values_of(t):
    return {n.id: n.value for n in t.nodes}


@pytest.fixture
def rows(small_rows):
    return small_rows["parents"], small_rows["labels"]


class TestCounting:
    def test_leaves_and_branches(self, rows):
        t = aggregate(build(None, *rows), "leaves+branches")
        assert values_of(t) == {"Root": 4, "A": 1, "B": 2, "b": 1}

    def test_branches(self, rows):
        t = aggregate(build(None, *rows), "branches")
        assert values_of(t) == {"Root": 2, "A": 0, "B": 1, "b": 0}

    def test_leaves(self, rows):
        t = aggregate(build(None, *rows), "leaves")
        assert values_of(t) == {"Root": 2, "A": 1, "B": 1, "b": 1}

    def test_root_of_roots_is_not_counted(self):
        t = aggregate(build(None, ["", "", "B"], ["A", "B", "b"]), "leaves+branches")
        assert t.root_node.value == 3


class TestValues:
    def test_remainder(self, rows):
        t = aggregate(build(None, *rows, values=[0, 1, 2, 3]), "remainder")
        assert values_of(t) == {"Root": 6, "A": 1, "B": 5, "b": 3}

    def test_remainder_missing_values_count_as_zero(self, rows):
        t = aggregate(build(None, *rows, values=[None, 1, None, 3]), "remainder")
        assert values_of(t) == {"Root": 4, "A": 1, "B": 3, "b": 3}

    def test_total(self, rows):
        t = aggregate(build(None, *rows, values=[30, 20, 10, 5]), "total")
        assert values_of(t) == {"Root": 30, "A": 20, "B": 10, "b": 5}

    def test_total_fills_missing_branch_values(self, rows):
        t = aggregate(build(None, *rows, values=[None, 20, None, 5]), "total")
        assert values_of(t) == {"Root": 25, "A": 20, "B": 5, "b": 5}

    def test_total_smaller_than_children(self, rows):
        with pytest.raises(InconsistentTotalsError) as exc_info:
            aggregate(build(None, *rows, values=[0, 1, 2, 3]), "total")
        failures = exc_info.value.failures
        assert [f.node_id for f in failures] == ["Root", "B"]
        assert (failures[0].parent_value, failures[0].child_sum) == (0, 3)
        assert (failures[1].parent_value, failures[1].child_sum) == (2, 3)
        assert str(failures[1]) == (
            "Total value for node B is smaller than the sum of its children. "
            "\nparent value = 2 \nchildren sum = 3"
        )

    def test_unknown_mode(self, small_tree):
        with pytest.raises(ValueError):
            aggregate(small_tree, "median")


class TestMode:
    def test_values_select_branchvalues(self):
        assert aggregation_mode([1, 2], "total", "leaves") == "total"
        assert aggregation_mode([1, 2]) == "remainder"

    def test_count_flags(self):
        assert aggregation_mode(None, count="leaves") == "leaves"
        assert aggregation_mode(None, count="branches") == "branches"
        assert aggregation_mode([], count="branches+leaves") == "leaves+branches"

    def test_bad_count(self):
        with pytest.raises(ValueError):
            aggregation_mode(None, count="twigs")


def test_percent(small_tree):
    assert percent(small_tree["b"], small_tree["B"]) == 1.0
    assert percent(small_tree["A"], small_tree.root_node) == 0.5
    assert percent(small_tree.root_node, None) is None

"""Shared fixtures: small hand-checkable hierarchies."""

import pytest

from aggregate import aggregate
from hierarchy import build

EVE = {
    "labels": ["Eve", "Cain", "Seth", "Enos", "Noam", "Abel", "Awan", "Enoch", "Azura"],
    "parents": ["", "Eve", "Eve", "Seth", "Seth", "Eve", "Eve", "Awan", "Eve"],
    "values": [10, 14, 12, 10, 2, 6, 6, 4, 4],
}

# Root -> A, B; B -> b
SMALL = {
    "labels": ["Root", "A", "B", "b"],
    "parents": ["", "Root", "Root", "B"],
}

FLAT_PADS = {"pad": 0, "pad_t": 0, "pad_l": 0, "pad_r": 0, "pad_b": 0}


@pytest.fixture
def small_rows():
    return {k: list(v) for k, v in SMALL.items()}


@pytest.fixture
def eve_rows():
    return {k: list(v) for k, v in EVE.items()}


@pytest.fixture
def small_tree():
    """Root -> A, B; B -> b, counted by leaves."""
    t = build(None, SMALL["parents"], SMALL["labels"])
    return aggregate(t, "leaves")


@pytest.fixture
def forest_tree():
    """Two top-level nodes under an invisible root of roots."""
    t = build(None, ["", "", "B"], ["A", "B", "b"])
    return aggregate(t, "leaves")


@pytest.fixture
def events():
    """Recorder for chart events: chart.on(name, events.recorder(name))."""

    class Recorder(object):
        def __init__(self):
            self.log = []

        def recorder(self, name, result=None):
            def cb(*args):
                self.log.append((name,) + args)
                return result
            return cb

        @property
        def names(self):
            return [e[0] for e in self.log]

    return Recorder()

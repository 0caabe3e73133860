"""Error taxonomy.

Hierarchy and value errors make one trace non-renderable; the chart catches
them, reports them once and keeps going. None of them are fatal to the
process.
"""

from typing import Dict, List, Optional


class TreezoomError(Exception):
    """Base exception for all treezoom errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class HierarchyError(TreezoomError):
    """The flat rows cannot be turned into a single-rooted tree."""


class AmbiguousHierarchyError(HierarchyError):
    def __init__(self, node_id: str):
        super().__init__(f"ambiguous: {node_id}")
        self.node_id = node_id


class MultipleImpliedRootsError(HierarchyError):
    def __init__(self, implied: List[str]):
        super().__init__(
            "Multiple implied roots, cannot build hierarchy.",
            {"implied": ", ".join(implied)},
        )
        self.implied = list(implied)


class CyclicHierarchyError(HierarchyError):
    def __init__(self, node_ids: List[str]):
        super().__init__(
            "cycle: no root reachable", {"ids": ", ".join(node_ids)}
        )
        self.node_ids = list(node_ids)


class ValueInconsistencyError(TreezoomError):
    def __init__(self, node_id: str, parent_value: float, child_sum: float):
        super().__init__(
            f"Total value for node {node_id} is smaller than the sum of its children. "
            f"\nparent value = {parent_value:g} \nchildren sum = {child_sum:g}"
        )
        self.node_id = node_id
        self.parent_value = parent_value
        self.child_sum = child_sum


class InconsistentTotalsError(TreezoomError):
    """All ValueInconsistencyErrors found in one aggregation pass."""

    def __init__(self, failures: List[ValueInconsistencyError]):
        super().__init__(
            f"{len(failures)} node(s) have totals smaller than their children"
        )
        self.failures = list(failures)


class InvalidEntryError(TreezoomError):
    def __init__(self, level: str):
        super().__init__(f"level {level!r} not found in hierarchy, using root")
        self.level = level

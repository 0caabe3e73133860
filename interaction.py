"""
hover/click/drag state for one chart

InteractionState is owned by the chart and handed to the handlers below;
it decides what an input means, the chart decides what to do about it.
"""
from dataclasses import dataclass
from typing import Optional

from aggregate import percent
from logger import logger

IDLE = 'idle'
HOVERING = 'hovering'
DRAGGING = 'dragging'
TRANSITIONING = 'transitioning'


@dataclass
class HoverInfo:
    id: str
    label: str
    value: float
    percent_parent: Optional[float]
    percent_entry: Optional[float]
    percent_root: Optional[float]
    parent: Optional[str]
    entry: str
    root: str
    current_path: str
    text: Optional[str] = None


@dataclass
class ClickResult:
    """What a click asks for: always a click notification, and a zoom to
    `target` unless target is None."""
    node_id: str
    target: Optional[str] = None


class InteractionState(object):
    def __init__(self, hovermode=True):
        self.state = IDLE
        self.hovered = None
        self.hovermode = hovermode
        self._hover_emitted = False

    def __str__(self):
        return '<InteractionState %s%s>' % (
            self.state, '' if self.hovered is None else ' ' + self.hovered.id)

    @property
    def dragging(self):
        return self.state == DRAGGING

    @property
    def transitioning(self):
        return self.state == TRANSITIONING

    def pointer_enter(self, tree, node, entry):
        """HoverInfo for node, or None when the event is ignored."""
        if not self.hovermode or self.dragging or node is None:
            return None
        self.hovered = node
        if not self.transitioning:
            self.state = HOVERING
        self._hover_emitted = True
        return hover_info(tree, node, entry)

    def pointer_leave(self):
        """The node to unhover, or None when no hover was emitted."""
        if not self._hover_emitted:
            return None
        node = self.hovered
        self.hovered = None
        self._hover_emitted = False
        if self.state == HOVERING:
            self.state = IDLE
        return node

    def click(self, tree, node, entry, angular=False):
        """ClickResult for node, or None when the click is ignored."""
        if not self.hovermode or self.dragging or node is None:
            return None
        if self.transitioning:
            logger.debug('click on %s dropped, transition in flight' % node.id)
            return None
        return ClickResult(node.id, zoom_target(tree, node, entry, angular))

    def begin_drag(self):
        self.state = DRAGGING
        self.hovered = None
        self._hover_emitted = False

    def end_drag(self):
        if self.dragging:
            self.state = IDLE

    def begin_transition(self):
        self.state = TRANSITIONING

    def end_transition(self):
        if self.transitioning:
            self.state = HOVERING if self.hovered is not None else IDLE


def hover_info(tree, node, entry):
    parent = tree.parent(node)
    root = tree.root_node
    return HoverInfo(
        id=node.id,
        label=node.name,
        value=node.value,
        percent_parent=percent(node, parent),
        percent_entry=percent(node, entry),
        percent_root=percent(node, root),
        parent=None if parent is None or parent.synthetic else parent.name,
        entry=entry.name,
        root=root.name,
        current_path=tree.path(node),
        text=node.attrs.get('text'),
    )


def zoom_target(tree, node, entry, angular=False):
    """Id of the entry a click on node should zoom to, or None for a plain
    click."""
    if angular and (tree.is_root(node) or tree.is_leaf(node)):
        return None
    if node.index == entry.index:
        # clicking the entry backs out one level
        parent = tree.parent(node)
        if parent is None:
            return None
        return parent.id
    if tree.is_ancestor(node, entry):
        return node.id
    if tree.is_leaf(node):
        # a rectangular leaf brings its parent into view
        parent = tree.parent(node)
        if parent is None or parent.index == entry.index:
            return None
        return parent.id
    return node.id

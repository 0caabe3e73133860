"""
flat (id, parent, label, value) rows -> single-rooted tree

nodes live in an arena (Tree.nodes) and refer to each other by integer
index, so walking up to an ancestor never needs a back-reference cycle.
"""
from errors import (AmbiguousHierarchyError, CyclicHierarchyError,
                    MultipleImpliedRootsError)
from logger import logger
from utils import format_value, is_valid_value, randstr, to_id


class Node(object):
    def __init__(self, index, id, pid, label=None, v=None, row=None):
        self.index = index
        self.id = id
        self.pid = pid
        self.label = label
        self.v = v          # explicit input value, None if not given
        self.value = 0      # aggregated display value
        self.row = row      # input row, None for synthesized nodes
        self.attrs = {}
        self.depth = 0
        self.parent = None
        self.children = []
        self.implied = False
        self.synthetic = False

    @property
    def name(self):
        if self.label is None or self.label == '':
            return self.id if not self.synthetic else ''
        return str(self.label)

    def __str__(self):
        info_list = [format_value(self.value)]
        if self.children:
            info_list.append('%d children' % len(self.children))
        if self.synthetic:
            info_list.append('synthetic')
        return '<Node %s: %s>' % (self.id, ', '.join(info_list))

    def __repr__(self):
        return self.__str__()


class Tree(object):
    def __init__(self):
        self.nodes = []
        self.by_id = {}
        self.root = None
        self.has_multiple_roots = False
        self.has_implied_root = False

    def __len__(self):
        return len(self.nodes)

    def __getitem__(self, key):
        # get node by id
        return self.nodes[self.by_id[to_id(key)]]

    def __contains__(self, key):
        return to_id(key) in self.by_id

    def _add(self, id, pid, label=None, v=None, row=None):
        node = Node(len(self.nodes), id, pid, label, v, row)
        self.nodes.append(node)
        self.by_id[id] = node.index
        return node

    @property
    def root_node(self):
        return self.nodes[self.root]

    def node(self, key):
        """Node for an id, or None."""
        i = self.by_id.get(to_id(key))
        return None if i is None else self.nodes[i]

    def parent(self, node):
        return None if node.parent is None else self.nodes[node.parent]

    def children(self, node):
        return [self.nodes[i] for i in node.children]

    def is_root(self, node):
        return node.index == self.root

    def is_leaf(self, node):
        return not node.children

    def ancestors(self, node):
        """Ancestors of node, nearest first, not including node itself."""
        out = []
        while node.parent is not None:
            node = self.nodes[node.parent]
            out.append(node)
        return out

    def is_ancestor(self, a, b):
        """True if a is a strict ancestor of b."""
        while b.parent is not None:
            b = self.nodes[b.parent]
            if b.index == a.index:
                return True
        return False

    def descendants(self, node=None):
        """Pre-order walk starting at node (root by default)."""
        if node is None:
            node = self.root_node
        stack = [node]
        while stack:
            n = stack.pop()
            yield n
            stack.extend(self.nodes[i] for i in reversed(n.children))

    def height(self, node):
        """Number of levels below node (0 for a leaf)."""
        return max((d.depth for d in self.descendants(node)), default=node.depth) - node.depth

    def path(self, node):
        """Materialized ancestor path, e.g. 'Eve/Seth/' for Enos."""
        names = [a.name for a in reversed(self.ancestors(node)) if not a.synthetic]
        return '/'.join(names) + '/'

    def to_dict(self, node=None):
        if node is None:
            node = self.root_node
        return {
            'id': node.id,
            'label': node.label,
            'v': node.v,
            'value': node.value,
            'attrs': node.attrs,
            'synthetic': node.synthetic,
            'implied': node.implied,
            'children': [self.to_dict(c) for c in self.children(node)],
        }

    @classmethod
    def from_dict(cls, d):
        t = cls()

        def add(d, parent):
            pid = '' if parent is None else parent.id
            node = t._add(d['id'], pid, d.get('label'), d.get('v'))
            node.value = d.get('value', 0)
            node.attrs = dict(d.get('attrs') or {})
            node.synthetic = d.get('synthetic', False)
            node.implied = d.get('implied', False)
            if parent is not None:
                node.parent = parent.index
                node.depth = parent.depth + 1
                parent.children.append(node.index)
            for c in d.get('children', []):
                add(c, node)
            return node

        t.root = add(d, None).index
        t.has_multiple_roots = t.root_node.synthetic
        t.has_implied_root = t.root_node.implied
        return t


def build(ids, parents, labels, values=None, text=None):
    """Build a Tree from flat rows.

    ids may be None, in which case labels double as ids. Raises a
    HierarchyError subclass when the rows do not describe a single tree.
    """
    keys = ids if ids is not None and len(ids) else labels
    n = min(len(keys) if keys is not None else 0,
            len(parents) if parents is not None else 0)
    values = values if values is not None else []
    text = text if text is not None else []

    rows = []
    seen = set()
    for i in range(n):
        id = to_id(keys[i])
        if id == '':
            logger.debug('skipping row %d: no id' % i)
            continue
        if id in seen:
            raise AmbiguousHierarchyError(id)
        seen.add(id)
        v = values[i] if i < len(values) else None
        if v is not None and not is_valid_value(v):
            logger.debug('row %d (%s): ignoring invalid value %r' % (i, id, v))
            v = None
        label = labels[i] if labels is not None and i < len(labels) else None
        rows.append((i, id, to_id(parents[i]), label, None if v is None else float(v),
                     text[i] if i < len(text) else None))

    # parents referenced but never defined
    implied = []
    for _, _, pid, _, _, _ in rows:
        if pid and pid not in seen and pid not in implied:
            implied.append(pid)

    if len(implied) > 1:
        raise MultipleImpliedRootsError(implied)
    n_top = len(implied) + sum(1 for r in rows if r[2] == '')
    if n_top == 0:
        raise CyclicHierarchyError([r[1] for r in rows])

    t = Tree()
    if n_top > 1:
        # root of roots, invisible and without attributes
        dummy = randstr(seen | set(implied))
        root = t._add(dummy, '')
        root.synthetic = True
        t.root = root.index
        t.has_multiple_roots = True
        rows = [r if r[2] != '' else r[:2] + (dummy,) + r[3:] for r in rows]
    if implied:
        root = t._add(implied[0], t.root_node.id if n_top > 1 else '', implied[0])
        root.implied = True
        t.has_implied_root = True
        if n_top == 1:
            t.root = root.index

    for i, id, pid, label, v, txt in rows:
        node = t._add(id, pid, label, v, row=i)
        if txt is not None:
            node.attrs['text'] = txt
        if pid == '':
            t.root = node.index

    _link(t)
    logger.debug('built hierarchy: %d nodes, root %s' % (len(t), t.root_node.id))
    return t


def _link(t):
    # children in first-seen input order
    for node in t.nodes:
        if node.index == t.root:
            continue
        parent = t.nodes[t.by_id[node.pid]]
        node.parent = parent.index
        parent.children.append(node.index)

    reached = 0
    for node in t.descendants():
        if node.parent is not None:
            node.depth = t.nodes[node.parent].depth + 1
        reached += 1
    if reached != len(t.nodes):
        connected = set(n.index for n in t.descendants())
        raise CyclicHierarchyError([n.id for n in t.nodes if n.index not in connected])


def print_tree(t, node=None, L=0, max=3):
    """print to stdout"""
    if node is None:
        node = t.root_node
    if L < max:
        print('%s%s' % ('  ' * L, node))
        for child in t.children(node):
            print_tree(t, child, L + 1, max)

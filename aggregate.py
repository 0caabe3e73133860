"""
node display values, bottom-up

count modes count leaves and/or branches; 'remainder' treats each given value
as the increment over its children; 'total' treats it as the node total and
checks it against the children.
"""
from errors import InconsistentTotalsError, ValueInconsistencyError
from logger import logger

COUNT_LEAVES = 'leaves'
COUNT_LEAVES_AND_BRANCHES = 'leaves+branches'
COUNT_BRANCHES = 'branches'
REMAINDER = 'remainder'
TOTAL = 'total'

MODES = (COUNT_LEAVES, COUNT_LEAVES_AND_BRANCHES, COUNT_BRANCHES, REMAINDER, TOTAL)


def aggregation_mode(values=None, branchvalues=REMAINDER, count=COUNT_LEAVES):
    """Pick the mode from trace attributes: values win over counting."""
    if values is not None and len(values):
        if branchvalues not in (REMAINDER, TOTAL):
            raise ValueError('unknown branchvalues: %r' % (branchvalues,))
        return branchvalues
    flags = set((count or COUNT_LEAVES).split('+'))
    if flags == {'leaves', 'branches'}:
        return COUNT_LEAVES_AND_BRANCHES
    if flags == {'branches'}:
        return COUNT_BRANCHES
    if flags == {'leaves'}:
        return COUNT_LEAVES
    raise ValueError('unknown count: %r' % (count,))


def aggregate(tree, mode=COUNT_LEAVES):
    """Annotate every node's .value in place and return the tree.

    Raises InconsistentTotalsError in 'total' mode when any node's given
    value is smaller than the sum of its children.
    """
    if mode not in MODES:
        raise ValueError('unknown aggregation mode: %r' % (mode,))

    if mode in (COUNT_LEAVES, COUNT_LEAVES_AND_BRANCHES, COUNT_BRANCHES):
        _count(tree, leaves=mode != COUNT_BRANCHES, branches=mode != COUNT_LEAVES)
    elif mode == REMAINDER:
        for node in _post_order(tree):
            own = node.v or 0
            node.value = own + sum(tree.nodes[i].value for i in node.children)
    else:
        _total(tree)

    logger.debug('aggregated %s: root value %g' % (mode, tree.root_node.value))
    return tree


def _count(tree, leaves, branches):
    for node in _post_order(tree):
        if node.children:
            n = sum(tree.nodes[i].value for i in node.children)
            # the root of roots only groups the real top-level nodes
            if branches and not node.synthetic:
                n += 1
        else:
            n = 1 if leaves else 0
        node.value = n


def _total(tree):
    for node in _post_order(tree):
        if node.children:
            child_sum = sum(tree.nodes[i].value for i in node.children)
            node.value = node.v if node.v is not None else child_sum
        else:
            node.value = node.v or 0

    failures = []
    for node in tree.descendants():
        if node.v is None or not node.children:
            continue
        child_sum = sum(tree.nodes[i].value for i in node.children)
        if node.v < child_sum:
            failures.append(ValueInconsistencyError(node.id, node.v, child_sum))
    if failures:
        raise InconsistentTotalsError(failures)


def _post_order(tree):
    return reversed(list(tree.descendants()))


def percent(node, ref):
    """node.value / ref.value, None when there is nothing to compare against."""
    if ref is None or not ref.value:
        return None
    return node.value / ref.value

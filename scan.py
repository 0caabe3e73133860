"""
filesystem -> hierarchy rows

get_directory_tree() walks a directory into a TreeNode tree, tree_to_rows()
flattens that into the (ids, parents, labels, values) columns the chart
takes. ids are full paths, so two files with the same name never collide.
"""
import os

from logger import logger
from utils import format_bytes


class TreeNode(object):
    def __init__(self, path, size=0, is_dir=False):
        self.path = path
        self.size = size
        self.is_dir = is_dir
        self.children = []
        self.details = {}

    @property
    def name(self):
        name = os.path.basename(self.path.rstrip(os.sep)) or self.path
        if self.is_dir:
            name += os.sep
        return name

    def __str__(self):
        info_list = [format_bytes(self.size)]
        if self.children:
            info_list.append('%d children' % len(self.children))
        if 'skip' in self.details:
            info_list.append('skipped: %s' % self.details['skip'])
        return '<TreeNode %s: %s>' % (self.name, ', '.join(info_list))

    def __repr__(self):
        return self.__str__()


def print_directory_tree(t, L=0, max=3):
    """print to stdout"""
    if L < max:
        print('%s%s' % ('  ' * L, t))
        for child in t.children:
            print_directory_tree(child, L + 1, max)


def tree_to_dict(t):
    return {
        'path': t.path,
        'size': t.size,
        'is_dir': t.is_dir,
        'details': t.details,
        'children': [tree_to_dict(c) for c in t.children],
    }


def dict_to_tree(d):
    t = TreeNode(d['path'], d['size'], d.get('is_dir', bool(d['children'])))
    t.details = d.get('details', {})
    t.children = [dict_to_tree(c) for c in d['children']]
    return t


def tree_to_rows(t):
    """Flatten a TreeNode tree, pre-order.

    Files carry their size, directories carry nothing so that 'remainder'
    aggregation sums their contents.
    """
    rows = {'ids': [], 'parents': [], 'labels': [], 'values': []}
    stack = [(t, '')]
    while stack:
        node, parent = stack.pop()
        rows['ids'].append(node.path)
        rows['parents'].append(parent)
        rows['labels'].append(node.name)
        rows['values'].append(None if node.is_dir else node.size)
        stack.extend((c, node.path) for c in reversed(node.children))
    return rows


def get_directory_tree(path, exclude_dirs=(), exclude_files=(), exclude_filters=(),
                       skip_mount=False):
    t = TreeNode(path)
    try:
        realpath = os.path.realpath(path)
    except OSError as exc:
        t.details['skip'] = str(exc)
        logger.info('skipping %s' % exc)
        return t
    base = os.path.basename(path)

    if os.path.islink(path):
        t.details['skip'] = 'symlink'
        return t

    if skip_mount and realpath != '/' and os.path.ismount(realpath):
        # different filesystem, probably don't want to scan
        logger.info('skip mount %s' % path)
        t.details['skip'] = 'mount'
        return t

    if os.path.isdir(path):
        t.is_dir = True
        if base in exclude_dirs:
            t.details['skip'] = 'exclude_dir'
            return t
        try:
            files = sorted(os.listdir(path))
        except OSError as exc:
            t.details['skip'] = str(exc)
            logger.info('skipping %s' % exc)
            return t

        size = 0
        for file in files:
            if file in exclude_files or any(filt in file for filt in exclude_filters):
                continue
            subtree = get_directory_tree(os.path.join(path, file), exclude_dirs,
                                         exclude_files, exclude_filters, skip_mount)
            t.children.append(subtree)
            size += subtree.size
        t.size = size

    elif os.path.isfile(path):
        t.size = os.path.getsize(path)

    return t


def count_files(t):
    if t.children:
        return sum(count_files(c) for c in t.children)
    return 1

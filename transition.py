"""
old layout -> new layout, as a function of progress t in [0, 1]

nothing in here knows about clocks. the caller owns the timer and asks
for frames; Animation only maps elapsed milliseconds to eased progress.
"""
import math

from logger import logger
from partition import node_key


def capture_previous(positioned):
    """Snapshot of a positioned list keyed by node key, for the next transition."""
    prev = {}
    for pt in positioned:
        prev[pt.key] = {
            'id': pt.id,
            'node': pt.node,
            'extent': dict(pt.extent),
            'transform': dict(pt.transform),
            'text': pt.text,
            'is_header': pt.is_header,
            'rel_depth': pt.rel_depth,
        }
    return prev


def _lerp(a, b, t):
    # keys missing from a hold still at b
    if t >= 1:
        return dict(b)
    out = {}
    for k, vb in b.items():
        va = a.get(k, vb)
        out[k] = vb if va == vb else va + (vb - va) * t
    return out


def _finite(d):
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in d.values())


class NodeTween(object):
    ENTER = 'enter'
    UPDATE = 'update'
    EXIT = 'exit'

    def __init__(self, key, kind, start, end, start_text, end_text, info):
        self.key = key
        self.kind = kind
        self.start = start
        self.end = end
        self.start_text = start_text
        self.end_text = end_text
        self.info = info  # id, node, text, is_header, rel_depth

    @property
    def id(self):
        return self.info['id']

    def at(self, t, family):
        try:
            extent = _lerp(self.start, self.end, t)
            if not _finite(extent):
                raise ArithmeticError('non-finite extent')
        except ArithmeticError as exc:
            logger.trace('tween %s at %g: %s' % (self.id, t, exc))
            extent = family.zero()
        try:
            transform = _lerp(self.start_text, self.end_text, t)
            if not _finite(transform):
                transform = {}
        except ArithmeticError:
            transform = {}
        return {
            'key': self.key,
            'id': self.info['id'],
            'node': self.info['node'],
            'kind': self.kind,
            'text': self.info['text'],
            'is_header': self.info['is_header'],
            'rel_depth': self.info['rel_depth'],
            'extent': extent,
            'transform': transform,
            'path': family.path_for_extent(extent),
        }

    def __str__(self):
        return '<NodeTween %s %s>' % (self.kind, self.id)

    def __repr__(self):
        return self.__str__()


class Transition(object):
    def __init__(self, family, tweens, order):
        self.family = family
        self.tweens = tweens  # key -> NodeTween
        self.order = order    # exits first, then the next layout order

    def frame(self, t):
        t = max(0.0, min(1.0, t))
        return [self.tweens[k].at(t, self.family) for k in self.order]

    def finish(self):
        return [self.tweens[k].at(1.0, self.family) for k in self.order
                if self.tweens[k].kind != NodeTween.EXIT]


def _info(pt):
    return {'id': pt.id, 'node': pt.node, 'text': pt.text,
            'is_header': pt.is_header, 'rel_depth': pt.rel_depth}


def interpolate(tree, prev, next_positioned, prev_entry_key, next_entry, family, max_depth=None):
    """Tweens from the previous snapshot `prev` (see capture_previous) to
    next_positioned.

    prev_entry_key is the key of the entry prev was laid out for, next_entry
    the entry node of next_positioned.
    """
    if max_depth is not None and max_depth < 0:
        max_depth = None
    next_lookup = dict((pt.key, pt) for pt in next_positioned)
    next_entry_key = node_key(tree, next_entry)
    tweens = {}
    exits = []

    for key, old in prev.items():
        if key in next_lookup:
            continue
        start = old['extent']
        node = tree.node(old['id']) if key != '' else None
        inside = node is not None and (node.index == next_entry.index
                                       or tree.is_ancestor(next_entry, node))
        if inside:
            # still in view, just deeper than maxdepth allows
            end = family.collapse(start)
        elif next_entry_key in prev:
            end = family.closest_edge(start, prev[next_entry_key]['extent'])
        else:
            end = family.collapse(start)
        end_text = _fit(family, end, old['text'], old['is_header'])
        end_text['scale'] = 0.0
        info = dict((k, old[k]) for k in ('id', 'node', 'text', 'is_header', 'rel_depth'))
        tweens[key] = NodeTween(key, NodeTween.EXIT, start, end, old['transform'], end_text, info)
        exits.append(key)

    for pt in next_positioned:
        end = pt.extent
        if pt.key in prev:
            old = prev[pt.key]
            tweens[pt.key] = NodeTween(pt.key, NodeTween.UPDATE, old['extent'], end,
                                       old['transform'] or pt.transform, pt.transform, _info(pt))
            continue

        start, anc = _enter_start(tree, prev, next_lookup, prev_entry_key, pt, family, max_depth)
        start_text = _fit(family, start, pt.text, pt.is_header)
        if anc is not None and 'scale' in prev[anc]['transform']:
            start_text['scale'] = prev[anc]['transform']['scale']
        if start is end:
            start_text = pt.transform
        tweens[pt.key] = NodeTween(pt.key, NodeTween.ENTER, start, end, start_text,
                                   pt.transform, _info(pt))

    order = exits + [pt.key for pt in next_positioned]
    logger.debug('transition: %d tweens, %d exits' % (len(order), len(exits)))
    return Transition(family, tweens, order)


def _enter_start(tree, prev, next_lookup, prev_entry_key, pt, family, max_depth):
    """Start extent for an entering node and the key of the ancestor it grows
    out of, if any."""
    end = pt.extent
    if not prev or tree.parent(pt.node) is None:
        return end, None

    for hops, anc in enumerate(tree.ancestors(pt.node), 1):
        if max_depth is not None and hops > max_depth:
            break
        akey = node_key(tree, anc)
        if akey in prev:
            anc_next = next_lookup[akey].extent if akey in next_lookup else None
            if anc_next is not None and not _moved(prev[akey]['extent'], anc_next):
                # ancestor stayed put (maxdepth reveal): grow out of all of it
                anc_next = None
            try:
                return family.grow_from(end, prev[akey]['extent'], anc_next), akey
            except ArithmeticError as exc:
                logger.trace('grow %s from %s: %s' % (pt.id, anc.id, exc))
                return family.collapse(prev[akey]['extent']), akey

    if prev_entry_key in next_lookup:
        return family.closest_edge(end, next_lookup[prev_entry_key].extent), None
    if prev_entry_key in prev:
        return dict(prev[prev_entry_key]['extent']), None
    return end, None


def _moved(a, b, eps=1e-9):
    return any(abs(a.get(k, 0.0) - v) > eps for k, v in b.items())


def _fit(family, extent, text, is_header):
    try:
        return family.fit_text(extent, text, is_header)
    except ArithmeticError:
        return {}


# d3-style easing, progress in [0, 1] -> eased progress
def linear(t):
    return t


def quad_in_out(t):
    t *= 2
    if t <= 1:
        return t * t / 2
    t -= 1
    return (t * (2 - t) + 1) / 2


def cubic_in_out(t):
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def poly_in_out(t, exponent=3.0):
    t *= 2
    if t <= 1:
        return t ** exponent / 2
    return (2 - (2 - t) ** exponent) / 2


def sin_in_out(t):
    return (1 - math.cos(math.pi * t)) / 2


def exp_in_out(t):
    t *= 2
    if t <= 1:
        return (2 ** (10 * t - 10) - 0.0009765625) / 2 * 1.0009775171065494
    return (2 - (2 ** (10 - 10 * t) - 0.0009765625) * 1.0009775171065494) / 2


EASINGS = {
    'linear': linear,
    'quad-in-out': quad_in_out,
    'cubic-in-out': cubic_in_out,
    'poly': poly_in_out,
    'sin': sin_in_out,
    'exp-in-out': exp_in_out,
}


class Animation(object):
    """A transition played over `duration` milliseconds."""

    def __init__(self, transition, duration=500, easing='cubic-in-out'):
        if easing not in EASINGS:
            raise ValueError('unknown easing: %r' % (easing,))
        self.transition = transition
        self.duration = float(duration)
        self.easing = EASINGS[easing]

    def progress(self, elapsed):
        if self.duration <= 0:
            return 1.0
        t = max(0.0, min(1.0, elapsed / self.duration))
        return self.easing(t)

    def done(self, elapsed):
        return self.duration <= 0 or elapsed >= self.duration

    def frame(self, elapsed):
        if self.done(elapsed):
            return self.transition.finish()
        return self.transition.frame(self.progress(elapsed))

"""
partition layout: positions for the visible part of a tree

two families share one driver (layout()):
- RectFamily: nested rectangles ("treemap"), extent = x0, x1, y0, y1
- AngularFamily: nested rings ("sunburst"), extent = a0, a1, r0, r1
  angles in radians, clockwise from 12 o'clock, radii in pixels

each family also knows how to draw an extent (path_for_extent), how to
project one onto a reference for transitions (closest_edge, grow_from,
collapse) and how to fit a label inside one (fit_text).
"""
import math

from logger import logger
from subdivide import get_tiling, pad_box
from utils import TEXTPAD, measure_text

TAU = 2 * math.pi


class PositionedNode(object):
    def __init__(self, node, key, extent, rel_depth, is_header=False, text=''):
        self.node = node
        self.key = key
        self.extent = extent
        self.rel_depth = rel_depth
        self.is_header = is_header
        self.text = text
        self.transform = {}

    @property
    def id(self):
        return self.node.id

    def __str__(self):
        ext = ', '.join('%s=%.2f' % (k, v) for k, v in self.extent.items())
        return '<PositionedNode %s: %s>' % (self.node.id, ext)

    def __repr__(self):
        return self.__str__()


def node_key(tree, node):
    # the hierarchy root is keyed '' so a rebuilt synthetic root still matches
    return '' if tree.is_root(node) else node.id


def _finite(extent):
    return all(math.isfinite(v) for v in extent.values())


def _lerp_map(v, a0, a1, b0, b1):
    # map v from [a0, a1] onto [b0, b1]
    if a1 == a0:
        return (b0 + b1) / 2
    return b0 + (v - a0) * (b1 - b0) / (a1 - a0)


def _clamp(v, lo, hi):
    return max(lo, min(hi, v))


class RectFamily(object):
    kind = 'treemap'
    fields = ('x0', 'x1', 'y0', 'y1')

    def __init__(self, width, height, packing='squarify', squarifyratio=1.0, pad=3.0,
                 pad_t=None, pad_l=None, pad_r=None, pad_b=None, flip='',
                 font_size=12, textposition='top left', measure=measure_text):
        self.width = float(width)
        self.height = float(height)
        self.packing = packing
        self.tile = get_tiling(packing, squarifyratio)
        self.pad = float(pad)
        self.font_size = font_size
        self.textposition = textposition or 'top left'
        self.measure = measure

        header = font_size * 2
        bottom_text = 'bottom' in self.textposition
        self.pad_t = header / 4 if bottom_text and pad_t is None else (header if pad_t is None else pad_t)
        self.pad_b = header if bottom_text and pad_b is None else (header / 4 if pad_b is None else pad_b)
        self.pad_l = header / 4 if pad_l is None else pad_l
        self.pad_r = header / 4 if pad_r is None else pad_r

        self.flip_x = 'x' in (flip or '')
        self.flip_y = 'y' in (flip or '')
        self.swap_xy = packing == 'dice-slice'

        # pads as seen by the tiler, which works before flipping and swapping
        top = self.pad_b if self.flip_y else self.pad_t
        bottom = self.pad_t if self.flip_y else self.pad_b
        left = self.pad_r if self.flip_x else self.pad_l
        right = self.pad_l if self.flip_x else self.pad_r
        if self.swap_xy:
            left, top = top, left
            right, bottom = bottom, right
        self._pads = (left, top, right, bottom)

    def root_extent(self, levels, synthetic=False):
        w, h = (self.height, self.width) if self.swap_xy else (self.width, self.height)
        return {'x0': 0.0, 'x1': w, 'y0': 0.0, 'y1': h}

    def child_extents(self, extent, values, rel_depth, header, levels):
        p = self.pad / 2
        left, top, right, bottom = self._pads if header else (0, 0, 0, 0)
        content = pad_box(extent['x0'], extent['y0'], extent['x1'], extent['y1'],
                          left, top, right, bottom)
        # tile a region p wider than the content, then shrink every cell by p
        region = pad_box(content[0], content[1], content[2], content[3], -p, -p, -p, -p)
        boxes = self.tile(values, region[0], region[1], region[2], region[3], rel_depth)
        out = []
        for b in boxes:
            x0, y0, x1, y1 = pad_box(b[0], b[1], b[2], b[3], p, p, p, p)
            x0 = _clamp(x0, content[0], content[2])
            x1 = _clamp(x1, content[0], content[2])
            y0 = _clamp(y0, content[1], content[3])
            y1 = _clamp(y1, content[1], content[3])
            out.append({'x0': x0, 'x1': x1, 'y0': y0, 'y1': y1})
        return out

    def finish(self, positioned):
        """Undo the tiler's frame: swap axes for dice-slice, then flip."""
        for pt in positioned:
            e = pt.extent
            if self.swap_xy:
                e = {'x0': e['y0'], 'x1': e['y1'], 'y0': e['x0'], 'y1': e['x1']}
            if self.flip_x:
                e['x0'], e['x1'] = self.width - e['x1'], self.width - e['x0']
            if self.flip_y:
                e['y0'], e['y1'] = self.height - e['y1'], self.height - e['y0']
            pt.extent = e

    def zero(self):
        return {'x0': 0.0, 'x1': 0.0, 'y0': 0.0, 'y1': 0.0}

    def is_degenerate(self, e):
        return not (e['x1'] - e['x0'] > 0 and e['y1'] - e['y0'] > 0)

    def collapse(self, e):
        """Zero-area extent at the center of e."""
        x = (e['x0'] + e['x1']) / 2
        y = (e['y0'] + e['y1']) / 2
        return {'x0': x, 'x1': x, 'y0': y, 'y1': y}

    def contains(self, e, x, y):
        return e['x0'] <= x <= e['x1'] and e['y0'] <= y <= e['y1']

    def closest_edge(self, pt, ref):
        """Push each edge of pt that lies within the pad tolerance of ref's
        boundary out to the matching viewport bound."""
        e = self.pad
        w, h = self.width, self.height

        def is_left(x):
            return x - e <= ref['x0']

        def is_right(x):
            return x + e >= ref['x1']

        def is_top(y):
            return y - e <= ref['y0']

        def is_bottom(y):
            return y + e >= ref['y1']

        return {
            'x0': 0.0 if is_left(pt['x0'] - e) else w if is_right(pt['x0'] - e) else pt['x0'],
            'x1': 0.0 if is_left(pt['x1'] + e) else w if is_right(pt['x1'] + e) else pt['x1'],
            'y0': 0.0 if is_top(pt['y0'] - e) else h if is_bottom(pt['y0'] - e) else pt['y0'],
            'y1': 0.0 if is_top(pt['y1'] + e) else h if is_bottom(pt['y1'] + e) else pt['y1'],
        }

    def grow_from(self, target, anc_prev, anc_next=None):
        """Where target sat inside its ancestor, replayed on the ancestor's
        previous extent. Edges within the pad tolerance of the ancestor's
        boundary snap onto it; the result never leaves anc_prev."""
        if anc_next is None:
            return dict(anc_prev)
        e = self.pad
        out = {}
        for lo, hi in (('x0', 'x1'), ('y0', 'y1')):
            for k in (lo, hi):
                v = _lerp_map(target[k], anc_next[lo], anc_next[hi], anc_prev[lo], anc_prev[hi])
                if v - e <= anc_prev[lo]:
                    v = anc_prev[lo]
                elif v + e >= anc_prev[hi]:
                    v = anc_prev[hi]
                out[k] = _clamp(v, anc_prev[lo], anc_prev[hi])
        return out

    def path_for_extent(self, e, offset=(0, 0)):
        dx = e['x1'] - e['x0']
        dy = e['y1'] - e['y0']
        if not dx or not dy:
            return ''
        x0, x1 = e['x0'] + offset[0], e['x1'] + offset[0]
        y0, y1 = e['y0'] + offset[1], e['y1'] + offset[1]
        return 'M%g,%gL%g,%gL%g,%gL%g,%gZ' % (x0, y0, x1, y0, x1, y1, x0, y1)

    def fit_text(self, e, text, is_header=False):
        """Scale and place a label inside e (headers inside their top or
        bottom band). Returns the top-left corner of the scaled text box."""
        bb = self.measure(text, self.font_size)
        x0, x1, y0, y1 = e['x0'], e['x1'], e['y0'], e['y1']
        has_bottom = 'bottom' in self.textposition
        has_top = 'top' in self.textposition or (is_header and not has_bottom)
        has_right = 'right' in self.textposition
        has_left = 'left' in self.textposition

        if is_header:
            x0 += self.pad_l - TEXTPAD
            x1 -= self.pad_r - TEXTPAD
            if has_bottom:
                lim = y1 - self.pad_b
                if y0 < lim < y1:
                    y0 = lim
            else:
                lim = y0 + self.pad_t
                if y0 < lim < y1:
                    y1 = lim

        avail_w = max(x1 - x0 - 2 * TEXTPAD, 0)
        avail_h = max(y1 - y0 - 2 * TEXTPAD, 0)
        scale = 1.0
        if bb['width'] > 0:
            scale = min(scale, avail_w / bb['width'])
        if bb['height'] > 0:
            scale = min(scale, avail_h / bb['height'])
        tw = bb['width'] * scale
        th = bb['height'] * scale

        if has_left:
            x = x0 + TEXTPAD
        elif has_right:
            x = x1 - TEXTPAD - tw
        else:
            x = (x0 + x1 - tw) / 2
        if has_top:
            y = y0 + TEXTPAD
        elif has_bottom:
            y = y1 - TEXTPAD - th
        else:
            y = (y0 + y1 - th) / 2
        return {'x': x, 'y': y, 'scale': scale, 'rotate': 0.0}


class AngularFamily(object):
    kind = 'sunburst'
    fields = ('a0', 'a1', 'r0', 'r1')

    def __init__(self, width, height, pad=0.0, font_size=12, measure=measure_text, **ignored):
        self.width = float(width)
        self.height = float(height)
        self.cx = self.width / 2
        self.cy = self.height / 2
        self.radius = min(self.width, self.height) / 2
        self.pad = float(pad)
        self.font_size = font_size
        self.measure = measure

    def root_extent(self, levels, synthetic=False):
        # an invisible root of roots gives its ring to the real top level
        r1 = 0.0 if synthetic else self.radius / max(levels, 1)
        return {'a0': 0.0, 'a1': TAU, 'r0': 0.0, 'r1': r1}

    def child_extents(self, extent, values, rel_depth, header, levels):
        remaining_depth = levels - (rel_depth + 1)
        r0 = extent['r1']
        r1 = r0 + (self.radius - r0) / remaining_depth if remaining_depth > 0 else r0

        a0, a1 = extent['a0'], extent['a1']
        span = a1 - a0
        full = span >= TAU - 1e-9
        # zero-value children take no angle and get no gap
        m = sum(1 for v in values if v)
        gaps = m if full and m > 1 else max(m - 1, 0)
        g = self.pad
        if gaps and g * gaps > span / 2:
            g = span / 2 / gaps

        total = float(sum(values))
        usable = span - g * gaps
        k = usable / total if total else 0.0
        a = a0 + (g / 2 if full and m > 1 else 0.0)
        out = []
        placed = False
        for v in values:
            if v and placed:
                a += g
            placed = placed or bool(v)
            da = v * k
            start = min(a, a1)
            out.append({'a0': start, 'a1': min(a + da, a1), 'r0': r0, 'r1': r1})
            a += da
        return out

    def finish(self, positioned):
        pass

    def zero(self):
        return {'a0': 0.0, 'a1': 0.0, 'r0': 0.0, 'r1': 0.0}

    def is_degenerate(self, e):
        return not (e['a1'] - e['a0'] > 0 and e['r1'] - e['r0'] > 0)

    def collapse(self, e):
        a = (e['a0'] + e['a1']) / 2
        return {'a0': a, 'a1': a, 'r0': e['r0'], 'r1': e['r1']}

    def point(self, a, r):
        return self.cx + r * math.sin(a), self.cy - r * math.cos(a)

    def contains(self, e, x, y):
        dx = x - self.cx
        dy = y - self.cy
        r = math.hypot(dx, dy)
        a = math.atan2(dx, -dy) % TAU
        return e['r0'] <= r <= e['r1'] and e['a0'] <= a <= e['a1']

    def closest_edge(self, pt, ref):
        """Rings below ref shrink to the center, everything else sweeps to
        whichever of angle 0 or 2*pi lies on its side of ref."""
        if pt['r1'] < ref['r1']:
            return {'a0': pt['a0'], 'a1': pt['a1'], 'r0': 0.0, 'r1': 0.0}
        a = TAU if pt['a1'] > ref['a1'] else 0.0
        return {'a0': a, 'a1': a, 'r0': pt['r0'], 'r1': pt['r1']}

    def grow_from(self, target, anc_prev, anc_next=None):
        """Start on the ancestor's previous outer edge, at the angles target
        occupies relative to the ancestor."""
        r = anc_prev['r1']
        if anc_next is None:
            return {'a0': anc_prev['a0'], 'a1': anc_prev['a1'], 'r0': r, 'r1': r}
        out = {'r0': r, 'r1': r}
        for k in ('a0', 'a1'):
            v = _lerp_map(target[k], anc_next['a0'], anc_next['a1'], anc_prev['a0'], anc_prev['a1'])
            out[k] = _clamp(v, anc_prev['a0'], anc_prev['a1'])
        return out

    def path_for_extent(self, e, offset=(0, 0)):
        a0, a1, r0, r1 = e['a0'], e['a1'], e['r0'], e['r1']
        if not (a1 - a0) or not (r1 - r0):
            return ''
        ox, oy = offset
        cx, cy = self.cx + ox, self.cy + oy
        if a1 - a0 >= TAU - 1e-9:
            # full ring: two half arcs per circle
            d = 'M%g,%gA%g,%g 0 1 1 %g,%gA%g,%g 0 1 1 %g,%gZ' % (
                cx, cy - r1, r1, r1, cx, cy + r1, r1, r1, cx, cy - r1)
            if r0 > 0:
                d += 'M%g,%gA%g,%g 0 1 0 %g,%gA%g,%g 0 1 0 %g,%gZ' % (
                    cx, cy - r0, r0, r0, cx, cy + r0, r0, r0, cx, cy - r0)
            return d
        large = 1 if a1 - a0 > math.pi else 0
        ox0, oy0 = self.point(a0, r1)
        ox1, oy1 = self.point(a1, r1)
        d = 'M%g,%gA%g,%g 0 %d 1 %g,%g' % (ox0 + ox, oy0 + oy, r1, r1, large, ox1 + ox, oy1 + oy)
        if r0 > 0:
            ix1, iy1 = self.point(a1, r0)
            ix0, iy0 = self.point(a0, r0)
            d += 'L%g,%gA%g,%g 0 %d 0 %g,%gZ' % (ix1 + ox, iy1 + oy, r0, r0, large, ix0 + ox, iy0 + oy)
        else:
            d += 'L%g,%gZ' % (cx, cy)
        return d

    def fit_text(self, e, text, is_header=False):
        """Label centered in the slice, rotated along the ring and kept
        upright. Returns the text center."""
        bb = self.measure(text, self.font_size)
        a0, a1, r0, r1 = e['a0'], e['a1'], e['r0'], e['r1']
        span = a1 - a0
        if r0 == 0 and span >= TAU - 1e-9:
            # center disk
            x, y = self.cx, self.cy
            avail_w, avail_h, rotate = 2 * r1 - 2 * TEXTPAD, r1, 0.0
        else:
            am = (a0 + a1) / 2
            rm = (r0 + r1) / 2
            x, y = self.point(am, rm)
            avail_w = 2 * rm * math.sin(min(span, math.pi) / 2) - 2 * TEXTPAD
            avail_h = r1 - r0 - 2 * TEXTPAD
            rotate = math.degrees(am) % 360
            if 90 < rotate < 270:
                rotate -= 180
        scale = 1.0
        if bb['width'] > 0:
            scale = min(scale, max(avail_w, 0) / bb['width'])
        if bb['height'] > 0:
            scale = min(scale, max(avail_h, 0) / bb['height'])
        return {'x': x, 'y': y, 'scale': scale, 'rotate': rotate}


FAMILIES = {
    'treemap': RectFamily,
    'sunburst': AngularFamily,
}


def make_family(kind, width, height, **opts):
    try:
        cls = FAMILIES[kind]
    except KeyError:
        raise ValueError('unknown chart kind: %r' % (kind,))
    return cls(width, height, **opts)


def visible_levels(tree, entry, max_depth):
    """Effective depth budget and number of levels laid out below entry."""
    if max_depth is not None and max_depth < 0:
        max_depth = None
    if max_depth is not None and tree.is_root(entry) and tree.has_multiple_roots:
        # the root of roots would otherwise eat one of the visible levels
        max_depth += 1
    levels = tree.height(entry) + 1
    if max_depth is not None:
        levels = min(max_depth, levels)
    return max_depth, levels


def layout(tree, entry, max_depth, family, sort=True, hidden=()):
    """Positioned nodes for the entry subtree, pre-order.

    Only nodes with depth - entry.depth < max_depth are positioned (None or
    a negative max_depth means no limit). Nodes on the last visible level are
    laid out as leaves.
    """
    max_depth, levels = visible_levels(tree, entry, max_depth)
    hidden = set(hidden)
    out = []

    def visit(node, extent, rel):
        kids = tree.children(node) if rel + 1 < levels else []
        header = bool(kids) and not node.synthetic
        if not node.synthetic:
            out.append(PositionedNode(node, node_key(tree, node), extent, rel, header,
                                      node.name))
        if not kids:
            return
        if sort:
            kids = sorted(kids, key=lambda c: -c.value)
        values = [0 if (c.id in hidden or not c.value) else c.value for c in kids]
        try:
            extents = family.child_extents(extent, values, rel, header, levels)
        except ArithmeticError as exc:
            logger.trace('layout of %s children failed: %s' % (node.id, exc))
            extents = [family.collapse(extent) for _ in kids]
        for child, ext in zip(kids, extents):
            if child.id in hidden:
                ext = family.collapse(ext)
            visit(child, ext, rel + 1)

    visit(entry, family.root_extent(levels, entry.synthetic), 0)
    family.finish(out)

    for pt in out:
        if not _finite(pt.extent):
            logger.trace('non-finite extent for %s, zeroed' % pt.id)
            pt.extent = family.zero()
        try:
            pt.transform = family.fit_text(pt.extent, pt.text, pt.is_header)
        except ArithmeticError as exc:
            logger.trace('label fit failed for %s: %s' % (pt.id, exc))
            pt.transform = {}
    logger.debug('layout %s: entry %s, %d positioned, %d levels'
                 % (family.kind, entry.id, len(out), levels))
    return out

import math
import uuid

_abbrevs = [(1 << 50, 'P'),
            (1 << 40, 'T'),
            (1 << 30, 'G'),
            (1 << 20, 'M'),
            (1 << 10, 'k'),
            (1, '')
            ]

# average glyph advance as a fraction of the font size
CHAR_WIDTH = 0.6
TEXTPAD = 3


def format_bytes(size):
    """Return a human readable size string (i.e., kB, MB, etc)"""
    k = 2.0
    # this makes the jump occur at 2kB instead of 1kB, which makes thing a little more readable
    for factor, suffix in _abbrevs:
        if size > k * factor:
            break
    s = "%.2f%sB" % (size / (1.0 * factor), suffix)
    return s


def format_value(v):
    """Format a node value the way hover labels show it: integers stay integers."""
    if v is None:
        return ''
    if float(v).is_integer():
        return '%d' % v
    return '%.4g' % v


def format_percent(x):
    if x is None:
        return ''
    tx = '%d%%' % round(100 * x)
    if tx == '0%' and x > 0:
        tx = '%.2g%%' % (100 * x)
    return tx


def to_id(v):
    """Canonical string form of an id or parent id.

    Values that stringify the same compare equal, so `True`/'true' and
    `1`/`1.0`/'1' all name the same node. `None` is the empty (root) parent.
    """
    if v is None:
        return ''
    if isinstance(v, bool):
        return 'true' if v else 'false'
    if isinstance(v, float):
        if math.isnan(v):
            return ''
        if v.is_integer():
            return '%d' % v
        return repr(v)
    return str(v)


def is_valid_value(v):
    if v is None or isinstance(v, bool):
        return False
    try:
        f = float(v)
    except (TypeError, ValueError):
        return False
    return math.isfinite(f) and f >= 0


def randstr(existing=()):
    """Random id that does not collide with any of `existing`."""
    while True:
        s = uuid.uuid4().hex[:8]
        if s not in existing:
            return s


def measure_text(text, font_size):
    """Approximate bounding box of a single line of text.

    Stand-in for a real font measurer; renderers with access to font metrics
    (tk) pass their own function with the same signature.
    """
    text = '' if text is None else str(text)
    return {
        'width': len(text) * font_size * CHAR_WIDTH,
        'height': float(font_size),
    }


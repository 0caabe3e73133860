"""
trace attribute resolution

supply_defaults() turns whatever the caller gave (data arrays, keyword
options, a config section) into a complete, validated attribute dict.
attributes that do not apply are dropped rather than carried along, so
downstream code can test `'count' in trace` the same way it tests values.
"""
from aggregate import COUNT_LEAVES, REMAINDER, TOTAL
from logger import logger
from subdivide import PACKINGS
from transition import EASINGS

KINDS = ('treemap', 'sunburst')
TEXTPOSITIONS = (
    'top left', 'top center', 'top right',
    'middle left', 'middle center', 'middle right',
    'bottom left', 'bottom center', 'bottom right',
)
FLIPS = ('', 'x', 'y', 'x+y')

DEFAULTS = {
    'kind': 'treemap',
    'branchvalues': REMAINDER,
    'count': COUNT_LEAVES,
    'level': '',
    'maxdepth': -1,
    'sort': True,
    'packing': 'squarify',
    'squarifyratio': 1.0,
    'pad': 3.0,
    'flip': '',
    'textposition': 'top left',
    'hovermode': True,
    'duration': 500,
    'easing': 'cubic-in-out',
}


def _has(trace_in, k):
    v = trace_in.get(k)
    return v is not None and (not hasattr(v, '__len__') or len(v) > 0)


def _coerce_enum(trace_in, k, allowed):
    v = trace_in.get(k, DEFAULTS[k])
    if v is None:
        v = DEFAULTS[k]
    if v not in allowed:
        logger.warning('invalid %s %r, using %r' % (k, v, DEFAULTS[k]))
        v = DEFAULTS[k]
    return v


def _coerce_number(trace_in, k, lo=None):
    v = trace_in.get(k, DEFAULTS[k])
    try:
        v = float(v)
    except (TypeError, ValueError):
        logger.warning('invalid %s %r, using %r' % (k, v, DEFAULTS[k]))
        return DEFAULTS[k]
    if lo is not None and v < lo:
        logger.warning('%s %r below %r, using %r' % (k, v, lo, DEFAULTS[k]))
        return DEFAULTS[k]
    return v


def supply_defaults(trace_in, font_size=12):
    """Resolved attribute dict for one trace.

    trace['visible'] is False when labels or parents are missing, in which
    case nothing else is resolved.
    """
    trace = {}
    if not (_has(trace_in, 'labels') and _has(trace_in, 'parents')):
        trace['visible'] = False
        return trace
    trace['visible'] = True

    for k in ('labels', 'parents', 'ids', 'text'):
        if _has(trace_in, k):
            trace[k] = list(trace_in[k])

    trace['kind'] = _coerce_enum(trace_in, 'kind', KINDS)

    if _has(trace_in, 'values'):
        trace['values'] = list(trace_in['values'])
        trace['branchvalues'] = _coerce_enum(trace_in, 'branchvalues', (REMAINDER, TOTAL))
    else:
        count = trace_in.get('count') or DEFAULTS['count']
        flags = set(count.split('+'))
        if not flags or not flags <= {'leaves', 'branches'}:
            logger.warning('invalid count %r, using %r' % (count, DEFAULTS['count']))
            count = DEFAULTS['count']
        trace['count'] = count

    level = trace_in.get('level')
    trace['level'] = '' if level is None else level
    maxdepth = trace_in.get('maxdepth', DEFAULTS['maxdepth'])
    trace['maxdepth'] = -1 if maxdepth is None else int(maxdepth)
    trace['sort'] = bool(trace_in.get('sort', DEFAULTS['sort']))
    trace['hovermode'] = bool(trace_in.get('hovermode', DEFAULTS['hovermode']))
    trace['duration'] = _coerce_number(trace_in, 'duration', lo=0)
    trace['easing'] = _coerce_enum(trace_in, 'easing', tuple(EASINGS))
    trace['font_size'] = font_size

    if trace['kind'] == 'treemap':
        packing = _coerce_enum(trace_in, 'packing', PACKINGS)
        trace['packing'] = packing
        if packing == 'squarify':
            trace['squarifyratio'] = _coerce_number(trace_in, 'squarifyratio', lo=1)
        trace['pad'] = _coerce_number(trace_in, 'pad', lo=0)
        trace['flip'] = _coerce_enum(trace_in, 'flip', FLIPS)
        trace['textposition'] = _coerce_enum(trace_in, 'textposition', TEXTPOSITIONS)

        # header band pads, sized from the font unless given
        header = 2 * font_size
        bottom_text = trace['textposition'].startswith('bottom')
        pads = {
            't': header / 4 if bottom_text else header,
            'l': header / 4,
            'r': header / 4,
            'b': header if bottom_text else header / 4,
        }
        for side in 'tlrb':
            v = trace_in.get('pad_' + side)
            trace['pad_' + side] = pads[side] if v is None else float(v)
    else:
        trace['pad'] = _coerce_number(trace_in, 'pad', lo=0) if 'pad' in trace_in else 0.0

    return trace


def family_options(trace):
    """Keyword arguments for partition.make_family from a resolved trace."""
    if trace['kind'] == 'sunburst':
        return {'pad': trace['pad'], 'font_size': trace['font_size']}
    return {
        'packing': trace['packing'],
        'squarifyratio': trace.get('squarifyratio', 1.0),
        'pad': trace['pad'],
        'pad_t': trace['pad_t'],
        'pad_l': trace['pad_l'],
        'pad_r': trace['pad_r'],
        'pad_b': trace['pad_b'],
        'flip': trace['flip'],
        'font_size': trace['font_size'],
        'textposition': trace['textposition'],
    }

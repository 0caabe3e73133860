"""
one interactive hierarchical chart

Chart owns the tree, the current entry, the interaction state and at most
one in-flight animation. renderers feed it pointer events and clock ticks
and draw whatever frames it hands back.

threading model: none. everything runs on the caller's thread, the caller's
timer drives tick(). user clicks during an animation are dropped;
programmatic changes (set_data, restyle, zoom_to, resize) first finish the
animation instantly, then start their own.
"""
from collections import defaultdict

from aggregate import aggregate, aggregation_mode
from defaults import family_options, supply_defaults
from errors import InconsistentTotalsError, InvalidEntryError, TreezoomError
from hierarchy import Node, build
from interaction import InteractionState
from logger import logger
from partition import layout, make_family, node_key
from transition import Animation, capture_previous, interpolate
from utils import measure_text

EVENTS = ('hover', 'unhover', 'click', 'zoomrequest', 'entrychanged',
          'animating', 'animationcomplete', 'diagnostic')

DATA_KEYS = ('labels', 'parents', 'ids', 'values', 'text')
# attributes that change the tree or its values, not just the layout
REBUILD_KEYS = DATA_KEYS + ('branchvalues', 'count')


class Chart(object):
    def __init__(self, kind='treemap', width=800, height=600, font_size=12,
                 measure=measure_text, **options):
        self.width = width
        self.height = height
        self.font_size = font_size
        self.measure = measure
        self.options = dict(options, kind=kind)
        self.data = {}
        self.trace = {}
        self.tree = None
        self.entry = None
        self.family = None
        self.state = InteractionState(options.get('hovermode', True))
        self.animation = None
        self._positioned = []
        self._entry_key = None
        self._laid_out_kind = None
        self._listeners = defaultdict(list)
        self._reported = set()
        self._resolve()

    def __str__(self):
        return '<Chart %s %dx%d entry=%s %s>' % (
            self.options['kind'], self.width, self.height,
            None if self.entry is None else self.entry.id, self.state.state)

    # events

    def on(self, name, callback):
        if name not in EVENTS:
            raise ValueError('unknown event: %r' % (name,))
        self._listeners[name].append(callback)
        return self

    def off(self, name, callback=None):
        if callback is None:
            self._listeners[name] = []
        else:
            self._listeners[name].remove(callback)
        return self

    def emit(self, name, *args):
        logger.trace('event %s %s' % (name, args))
        return [cb(*args) for cb in list(self._listeners[name])]

    # programmatic api

    def set_data(self, labels, parents, ids=None, values=None, text=None, **attrs):
        self.cancel()
        self.data = {'labels': labels, 'parents': parents, 'ids': ids,
                     'values': values, 'text': text}
        self.options.update(attrs)
        self._rebuild()
        if self._relayout():
            self.emit('animating')
        return self

    def restyle(self, **attrs):
        self.cancel()
        for k, v in attrs.items():
            if k in DATA_KEYS:
                self.data[k] = v
            else:
                self.options[k] = v
        if any(k in REBUILD_KEYS for k in attrs):
            self._rebuild()
        else:
            self._resolve()
        if self._relayout():
            self.emit('animating')
        return self

    def zoom_to(self, node_id):
        self.cancel()
        self._zoom(node_id)
        return self

    def resize(self, width, height):
        self.cancel()
        self.width, self.height = width, height
        self._resolve()
        self._relayout(animate=False)
        return self

    def positioned(self):
        return list(self._positioned)

    def node_at(self, x, y):
        """Deepest visible node under (x, y), or None."""
        if self.family is None:
            return None
        for pt in reversed(self._positioned):
            if not self.family.is_degenerate(pt.extent) and self.family.contains(pt.extent, x, y):
                return pt.node
        return None

    # clock

    @property
    def animating(self):
        return self.animation is not None

    def frame(self, t=1.0):
        """Drawable frames at progress t of the current animation, or the
        settled layout when nothing is animating."""
        if self.animation is not None:
            return self.animation.transition.frame(t)
        return self._still()

    def tick(self, elapsed):
        """Frames for `elapsed` milliseconds into the current animation."""
        if self.animation is None:
            return self._still()
        frames = self.animation.frame(elapsed)
        if self.animation.done(elapsed):
            self._complete()
        return frames

    def finish(self):
        self.cancel()
        return self._still()

    def cancel(self):
        """Jump the in-flight animation to its end."""
        if self.animation is not None:
            logger.debug('animation cancelled, materializing next layout')
            self._complete()

    # pointer input

    def pointer_enter(self, node_id):
        node = self._lookup(node_id)
        info = self.state.pointer_enter(self.tree, node, self.entry)
        if info is not None:
            self.emit('hover', info)
        return info

    def pointer_leave(self):
        node = self.state.pointer_leave()
        if node is not None:
            self.emit('unhover', node)
        return node

    def click(self, node_id):
        node = self._lookup(node_id)
        result = self.state.click(self.tree, node, self.entry,
                                  angular=self.family.kind == 'sunburst')
        if result is None:
            return None
        vetoed = False
        if result.target is not None:
            vetoed = any(r is False for r in self.emit('zoomrequest', node, result.target))
        self.emit('click', node)
        if result.target is not None and not vetoed:
            self._zoom(result.target)
        return result

    def begin_drag(self):
        self.state.begin_drag()

    def end_drag(self):
        self.state.end_drag()

    # internals

    def _lookup(self, node_id):
        if self.tree is None or node_id is None:
            return None
        if isinstance(node_id, Node):
            return node_id
        if node_id == '':
            return self.tree.root_node
        return self.tree.node(node_id)

    def _zoom(self, node_id):
        root = self.tree.root_node if self.tree is not None else None
        level = '' if root is None or node_id == root.id else node_id
        self.options['level'] = level
        self._resolve()
        started = self._relayout()
        self.emit('entrychanged', node_id)
        if started:
            self.emit('animating')

    def _resolve(self):
        self.trace = supply_defaults(dict(self.options, **self.data), self.font_size)
        kind = self.trace.get('kind', self.options['kind'])
        opts = family_options(self.trace) if self.trace['visible'] else {}
        self.family = make_family(kind, self.width, self.height, measure=self.measure, **opts)
        self.state.hovermode = self.trace.get('hovermode', True)

    def _rebuild(self):
        self._resolve()
        self.tree = None
        if not self.trace['visible']:
            logger.debug('trace not visible: labels and parents are required')
            return
        try:
            tree = build(self.trace.get('ids'), self.trace['parents'], self.trace['labels'],
                         self.trace.get('values'), self.trace.get('text'))
            mode = aggregation_mode(self.trace.get('values'), self.trace.get('branchvalues'),
                                    self.trace.get('count'))
            aggregate(tree, mode)
        except TreezoomError as exc:
            self._report(exc)
            return
        self.tree = tree

    def _report(self, exc):
        failures = exc.failures if isinstance(exc, InconsistentTotalsError) else [exc]
        for f in failures:
            msg = str(f)
            if msg not in self._reported:
                self._reported.add(msg)
                logger.warning(msg)
        self.emit('diagnostic', exc)

    def _resolve_entry(self):
        level = self.trace.get('level', '')
        if level is None or level == '':
            return self.tree.root_node
        node = self.tree.node(level)
        if node is None:
            self._report(InvalidEntryError(str(level)))
            return self.tree.root_node
        return node

    def _relayout(self, animate=True):
        """Lay out the current entry; True if an animation was started."""
        prev = capture_previous(self._positioned)
        if self._laid_out_kind != self.family.kind:
            # no geometry to morph between rectangles and rings
            prev = {}
        prev_entry_key = self._entry_key
        if self.tree is None:
            self.entry = None
            self._entry_key = None
            self._positioned = []
            return False

        entry = self._resolve_entry()
        maxdepth = self.trace['maxdepth']
        positioned = layout(self.tree, entry, maxdepth, self.family,
                            sort=self.trace['sort'], hidden=self.options.get('hidden', ()))
        self.entry = entry
        self._entry_key = node_key(self.tree, entry)
        self._positioned = positioned
        self._laid_out_kind = self.family.kind

        if not (animate and prev and self.trace['duration'] > 0):
            return False
        transition = interpolate(self.tree, prev, positioned, prev_entry_key, entry,
                                 self.family, maxdepth)
        self.animation = Animation(transition, self.trace['duration'], self.trace['easing'])
        self.state.begin_transition()
        return True

    def _complete(self):
        self.animation = None
        self.state.end_transition()
        self.emit('animationcomplete')

    def _still(self):
        if self.tree is None:
            return []
        return interpolate(self.tree, {}, self._positioned, None, self.entry,
                           self.family).finish()

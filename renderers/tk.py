import math
import sys
import time

try:
    import pyperclip
    pyperclip_present = True
except ImportError:
    pyperclip_present = False

import tkinter as tk
import tkinter.font as tkfont

from logger import logger
from utils import format_percent, format_value
from .colormap import color_for, highlight_color

# below this many pixels of pointer travel a press+release is a click
DRAG_THRESHOLD = 4


class TreezoomApp(object):
    def __init__(self, master, title, chart, config, width=None, height=None):
        self.config = config
        self.params = config.get('tk_renderer', {})
        self.action_map_mouse = self._parse_keycombos(config.get('mouse', {}))
        self.action_map_keyboard = self._parse_keycombos(config.get('keyboard', {}))

        self.master = master
        self.frame = tk.Frame(self.master)
        screen_width = master.winfo_screenwidth()
        screen_height = master.winfo_screenheight()
        width = width or self.params.get('width') or screen_width / 2
        height = height or self.params.get('height') or screen_height / 2
        self.width = width
        self.height = height

        x = (screen_width / 2) - (width / 2)  # default window x position (centered)
        y = (screen_height / 2) - (height / 2)  # default window y position (centered)
        master.geometry('%dx%d+%d+%d' % (width, height, x, y))
        master.title(title)

        self.font_family = self.params.get('font', 'Helvetica')
        self._fonts = {}
        self.chart = chart
        self.chart.measure = self.measure
        self.chart.on('animating', self._on_animating)
        self.chart.on('hover', self._on_hover)
        self.chart.on('diagnostic', self._on_diagnostic)

        self.interval = self.params.get('frame_interval_ms', 16)
        self._anim_start = None
        self._press = None
        self._hover_info = None

        self.canv = tk.Canvas(master, bg=self.params.get('background', 'black'), highlightthickness=0)
        self.canv.pack(expand=True, fill=tk.BOTH)
        self.master.bind("<KeyRelease>", self._on_keyup)
        self.canv.bind("<Configure>", self._on_resize)
        self.canv.bind("<ButtonPress>", self._on_press)
        self.canv.bind("<ButtonRelease>", self._on_release)
        self.canv.bind("<Motion>", self._on_motion)
        self.canv.bind("<Leave>", self._on_leave)
        self.frame.pack()

        self._print_usage()

    def _parse_keycombos(self, cnf):
        res = {}
        for k, v in cnf.items():
            res[tuple(k.split('+'))] = v
        return res

    def _print_usage(self):
        logger.info('UI usage:')
        for mouse_button, action_func_name in sorted(self.action_map_mouse.items()):
            logger.info('  mouse<%s>: %s' % ('+'.join(mouse_button), action_func_name))
        for key, action_func_name in sorted(self.action_map_keyboard.items()):
            logger.info('  "%s": %s' % ('+'.join(key), action_func_name))

    def _font(self, size):
        size = max(int(round(size)), 1)
        if size not in self._fonts:
            self._fonts[size] = tkfont.Font(family=self.font_family, size=size)
        return self._fonts[size]

    def measure(self, text, font_size):
        font = self._font(font_size)
        return {'width': float(font.measure(text or '')),
                'height': float(font.metrics('linespace'))}

    # drawing

    def _render(self, frames=None):
        if frames is None:
            frames = self.chart.frame()
        self.canv.delete('all')
        for frame in frames:
            if frame['path']:
                self._render_frame(frame)

    def _render_frame(self, frame):
        cs = color_for(frame)
        e = frame['extent']
        outline = highlight_color if self._is_hovered(frame) else 'black'
        if 'x0' in e:
            x0, y0, x1, y1 = e['x0'], e['y0'], e['x1'], e['y1']
            self.canv.create_rectangle(x0, y0, x1, y1, width=1, fill=cs[0], outline=outline)
            if x1 - x0 > 3 and y1 - y0 > 3:
                self.canv.create_line(x0+1, y1-1, x0+1, y0+1, x1-1, y0+1, fill=cs[1])
                self.canv.create_line(x0+1, y1-1, x1-1, y1-1, x1-1, y0+1, fill=cs[2])
        else:
            self.canv.create_polygon(*sector_points(self.chart.family, e), fill=cs[0], outline=outline)

        tr = frame['transform']
        if not frame['text'] or not tr or tr.get('scale', 0) * self.chart.font_size < 4:
            return
        font = self._font(self.chart.font_size * tr['scale'])
        if 'x0' in e:
            self.canv.create_text(tr['x'], tr['y'], text=frame['text'], fill="black",
                                  anchor=tk.NW, font=font)
        else:
            self.canv.create_text(tr['x'], tr['y'], text=frame['text'], fill="black",
                                  anchor=tk.CENTER, font=font, angle=-tr.get('rotate', 0))

    def _is_hovered(self, frame):
        hovered = self.chart.state.hovered
        return hovered is not None and frame['node'] is hovered

    # animation clock

    def _on_animating(self):
        # a programmatic zoom can replace a running animation; restart its clock
        scheduled = self._anim_start is not None
        self._anim_start = time.monotonic()
        if not scheduled:
            self.master.after(self.interval, self._animate)

    def _animate(self):
        if self._anim_start is None:
            return
        elapsed = (time.monotonic() - self._anim_start) * 1000
        frames = self.chart.tick(elapsed)
        self._render(frames)
        if self.chart.animating:
            self.master.after(self.interval, self._animate)
        else:
            self._anim_start = None

    def _restart_clock(self):
        self._anim_start = None

    # chart events

    def _on_hover(self, info):
        self._hover_info = info
        self.master.title('%s  %s (%s, %s of parent)' % (
            info.current_path, info.label, format_value(info.value),
            format_percent(info.percent_parent)))

    def _on_diagnostic(self, exc):
        self.master.title('error: %s' % exc)

    # tk events

    def _on_resize(self, ev):
        logger.debug('resized: %d %d' % (ev.width, ev.height))
        self.width, self.height = ev.width, ev.height
        self.chart.resize(ev.width, ev.height)
        self._restart_clock()
        self._render()

    def _on_motion(self, ev):
        if self._press is not None and ev.state & 0x100:
            px, py = self._press
            if abs(ev.x - px) + abs(ev.y - py) > DRAG_THRESHOLD and not self.chart.state.dragging:
                self.chart.begin_drag()
            return
        node = self.chart.node_at(ev.x, ev.y)
        hovered = self.chart.state.hovered
        if node is hovered:
            return
        if hovered is not None:
            self.chart.pointer_leave()
        if node is not None:
            self.chart.pointer_enter(node)
        if not self.chart.animating:
            self._render()

    def _on_leave(self, ev):
        if self.chart.pointer_leave() is not None and not self.chart.animating:
            self._render()

    def _on_press(self, ev):
        self._press = (ev.x, ev.y)

    def _on_release(self, ev):
        self._press = None
        if self.chart.state.dragging:
            self.chart.end_drag()
            return
        combo = tuple(self._modifiers(ev.state) + [str(ev.num)])
        self._dispatch(self.action_map_mouse, combo, ev)

    def _on_keyup(self, ev):
        combo = tuple(self._modifiers(ev.state) + [ev.keysym.lower()])
        self._dispatch(self.action_map_keyboard, combo, ev)

    def _modifiers(self, s):
        modifiers = []
        if (s & 0x1):
            modifiers.append('shift')
        if (s & 0x4):
            modifiers.append('ctrl')
        if (s & 0x88):
            modifiers.append('alt')
        return modifiers

    def _dispatch(self, action_map, combo, ev):
        action_func_name = action_map.get(combo, '')
        if action_func_name == '':
            logger.debug('event %s: no action defined' % (combo, ))
            return
        logger.debug('event %s: %s' % (combo, action_func_name))
        getattr(self, action_func_name)(ev)

    # actions

    def quit(self, ev):
        sys.exit(0)

    def info(self, ev):
        info = self._hover_info
        if info is None:
            return
        logger.info('  %s%s: %s' % (info.current_path, info.label, format_value(info.value)))
        logger.info('  %s of parent, %s of entry, %s of root' % (
            format_percent(info.percent_parent), format_percent(info.percent_entry),
            format_percent(info.percent_root)))

    def zoom_in(self, ev):
        node = self.chart.node_at(ev.x, ev.y)
        if node is not None:
            self.chart.click(node)

    def zoom_out(self, ev):
        entry = self.chart.entry
        parent = self.chart.tree.parent(entry) if entry is not None else None
        if parent is not None:
            self.chart.zoom_to(parent.id)

    def zoom_top(self, ev):
        self.chart.zoom_to('')

    def toggle_kind(self, ev):
        kind = 'sunburst' if self.chart.options['kind'] == 'treemap' else 'treemap'
        self.chart.restyle(kind=kind)

    def copy_id(self, ev):
        node = self.chart.node_at(ev.x, ev.y) or self.chart.state.hovered
        if node is None:
            return
        if pyperclip_present:
            pyperclip.copy(node.id)
            logger.info('  copied to clipboard: "%s"' % node.id)
        else:
            logger.warning('  copy_id: dependency `pyperclip` not available')


def sector_points(family, e, step=math.pi / 90):
    """Polygon outline of an annular sector, outer arc then inner arc back."""
    n = max(int((e['a1'] - e['a0']) / step), 1)
    angles = [e['a0'] + (e['a1'] - e['a0']) * i / n for i in range(n + 1)]
    pts = []
    for a in angles:
        pts.extend(family.point(a, e['r1']))
    for a in reversed(angles):
        pts.extend(family.point(a, e['r0']))
    return pts


def init_app(chart, config, title, width=None, height=None):
    root = tk.Tk()
    app = TreezoomApp(root, title, chart, config, width, height)
    app._render()
    root.mainloop()

"""
Basic static SVG renderer.

Writes the chart's current frame as a self-contained SVG file: one path per
node plus its label, no interactivity, no JavaScript.
"""

import html
from .colormap import color_for
from logger import logger


def render(chart, config, output_path=None):
    """
    Generate a static SVG of the chart's settled layout.

    Args:
        chart: a Chart with data set
        config: Configuration dictionary, the 'svg-renderer' section is used
        output_path: Where to save the SVG file, defaults to the configured filename
    """
    svg_params = config.get('svg-renderer', {})
    max_shapes = svg_params.get("max-shapes", 5000)
    output_path = output_path or svg_params.get("filename", "treezoom.svg")

    frames = [f for f in chart.finish() if f['path']]
    if len(frames) > max_shapes:
        # frames are pre-order, so this drops the deepest levels' tail first
        logger.warning('%d shapes, keeping the first %d' % (len(frames), max_shapes))
        frames = frames[:max_shapes]

    svg_content = generate_svg(frames, chart.width, chart.height, chart.font_size)

    with open(output_path, 'w') as f:
        f.write(svg_content)

    logger.info(f'SVG saved to: {output_path}')
    return output_path


def generate_svg(frames, width, height, font_size=12):
    """Generate a static SVG document with shapes and text labels."""
    clip_defs, body = render_frames(frames, font_size)

    return f'''<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg"
     width="{width}" height="{height}" viewBox="0 0 {width} {height}"
     style="background-color: #000000;">
  <defs>
    <style type="text/css">
      path {{ stroke: #000000; stroke-width: 1; }}
      text {{
        font-family: Helvetica, Arial, sans-serif;
        fill: #000000;
        pointer-events: none;
      }}
    </style>
{clip_defs}
  </defs>
{body}
</svg>'''


def render_frames(frames, font_size=12):
    """Render a list of frame dicts to SVG elements.

    Returns (clip_defs, body) where clip_defs is a string of <clipPath>
    elements for <defs>, and body is the SVG shape/text elements.
    """
    clip_parts = []
    body_parts = []

    for i, frame in enumerate(frames):
        cs = color_for(frame)
        d = frame['path']

        # labels are clipped to their own shape
        clip_id = f'c{i}'
        clip_parts.append(f'    <clipPath id="{clip_id}"><path d="{d}"/></clipPath>')

        body_parts.append(
            f'  <path d="{d}" fill="{cs[0]}" data-id="{html.escape(frame["id"], quote=True)}"/>'
        )

        label = render_label(frame, font_size, clip_id)
        if label:
            body_parts.append(label)

    return '\n'.join(clip_parts), '\n'.join(body_parts)


def render_label(frame, font_size, clip_id):
    tr = frame['transform']
    text = frame['text']
    if not text or not tr or tr.get('scale', 0) <= 0:
        return ''
    size = font_size * tr['scale']
    text = html.escape(str(text))
    if tr.get('rotate') or 'x0' not in frame['extent']:
        # angular labels are centered on their anchor
        return (f'  <text x="{tr["x"]:.2f}" y="{tr["y"]:.2f}" font-size="{size:.2f}"'
                f' text-anchor="middle" dominant-baseline="middle"'
                f' transform="rotate({tr.get("rotate", 0):.2f} {tr["x"]:.2f} {tr["y"]:.2f})"'
                f' clip-path="url(#{clip_id})">{text}</text>')
    return (f'  <text x="{tr["x"]:.2f}" y="{tr["y"]:.2f}" font-size="{size:.2f}"'
            f' text-anchor="start" dominant-baseline="hanging"'
            f' clip-path="url(#{clip_id})">{text}</text>')

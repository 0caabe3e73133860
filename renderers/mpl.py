import math

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle, Wedge

from .colormap import color_for


def add_patch(ax, frame, center):
    e = frame['extent']
    c = color_for(frame)[0]
    if 'x0' in e:
        return ax.add_patch(Rectangle((e['x0'], e['y0']), e['x1'] - e['x0'], e['y1'] - e['y0'],
                                      facecolor=c, edgecolor='black', linewidth=0.5))
    # wedge angles are degrees counterclockwise from 3 o'clock, and y points
    # down in chart space, so a clockwise-from-12 angle a maps to a - 90
    theta1 = math.degrees(e['a0']) - 90
    theta2 = math.degrees(e['a1']) - 90
    return ax.add_patch(Wedge(center, e['r1'], theta1, theta2, width=e['r1'] - e['r0'],
                              facecolor=c, edgecolor='black', linewidth=0.5))


def render(chart, title=None, output=None, font_size=None):
    font_size = font_size or chart.font_size
    fig, ax = plt.subplots(figsize=(chart.width / 100, chart.height / 100))
    center = (chart.family.width / 2, chart.family.height / 2)

    for frame in chart.finish():
        if not frame['path']:
            continue
        add_patch(ax, frame, center)
        tr = frame['transform']
        if frame['text'] and tr and tr.get('scale', 0) > 0:
            if 'x0' in frame['extent']:
                ax.text(tr['x'], tr['y'], frame['text'], fontsize=font_size * tr['scale'] * 0.75,
                        ha='left', va='top')
            else:
                ax.text(tr['x'], tr['y'], frame['text'], fontsize=font_size * tr['scale'] * 0.75,
                        ha='center', va='center', rotation=-tr.get('rotate', 0))

    ax.set_xlim(0, chart.width)
    ax.set_ylim(chart.height, 0)
    ax.set_aspect('equal')
    ax.axis('off')
    if title:
        ax.set_title(title)

    if output:
        fig.savefig(output)
    else:
        plt.show()
    return fig

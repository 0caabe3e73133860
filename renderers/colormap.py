colormap = [
    # main       light      dark
    ["#ff7f7f", "#ffbfbf", "#bf7f7f"],
    ["#ffbf7f", "#ffdfbf", "#bf9f5f"],
    ["#ffff00", "#ffffbf", "#bfbf3f"],
    ["#7fff7f", "#bfffbf", "#7fbf7f"],
    ["#7fffff", "#dfffff", "#7fbfbf"],
    ["#bfbfff", "#dfdfff", "#9f9fff"],
    ["#bfbfbf", "#dfdfdf", "#9f9f9f"],
    ["#ff7fff", "#ffbfff", "#bf7fbf"],
]

# hovered shape outline
highlight_color = "#ffffff"


def color_for(frame):
    """(main, light, dark) for a frame, by absolute depth so colors stay put
    while zooming."""
    node = frame.get('node')
    depth = node.depth if node is not None else frame.get('rel_depth', 0)
    return colormap[depth % len(colormap)]

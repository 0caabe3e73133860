"""
rectangle tiling primitives

each tiler takes a list of child values and the parent's inner box and
returns one (x0, y0, x1, y1) box per child, in input order. boxes exactly
cover the parent box (up to float error) and never overlap; children with
zero value get zero-area boxes.

squarify follows Bruls, Huizing & van Wijk, "Squarified Treemaps" (2000):
https://www.win.tue.nl/~vanwijk/stm.pdf
"""
import math

import numpy as np

PACKINGS = ('squarify', 'binary', 'dice', 'slice', 'slice-dice', 'dice-slice')


def dice_columns(values, x0, y0, x1, y1):
    """columns: split the box left to right"""
    values = np.asarray(values, dtype=float)
    total = values.sum()
    k = (x1 - x0) / total if total else 0.0
    edges = x0 + np.concatenate([[0.0], np.cumsum(values)]) * k
    if total:
        edges = np.clip(edges, x0, x1)
        edges[-1] = x1
    return [(float(edges[i]), y0, float(edges[i + 1]), y1) for i in range(len(values))]


def slice_rows(values, x0, y0, x1, y1):
    """rows: split the box top to bottom"""
    values = np.asarray(values, dtype=float)
    total = values.sum()
    k = (y1 - y0) / total if total else 0.0
    edges = y0 + np.concatenate([[0.0], np.cumsum(values)]) * k
    if total:
        edges = np.clip(edges, y0, y1)
        edges[-1] = y1
    return [(x0, float(edges[i]), x1, float(edges[i + 1])) for i in range(len(values))]


def slice_dice(values, x0, y0, x1, y1, depth=0):
    """dice at even depths, slice at odd depths"""
    if depth % 2:
        return slice_rows(values, x0, y0, x1, y1)
    return dice_columns(values, x0, y0, x1, y1)


def bisect(values, x0, y0, x1, y1):
    """core geometric subdivision algorithm
    given:
    - a list of values
    - bounding rectangle
    do this:
    - split list into halves as nearly equally as possible
    - split rectangle proportionately
      - vertically if wide
      - horizontally if tall
    - recurse on both halves until each group has a single element
    """
    n = len(values)
    rects = [None] * n
    if n == 0:
        return rects
    sums = np.concatenate([[0.0], np.cumsum(np.asarray(values, dtype=float))]).tolist()

    def partition(i, j, value, x0, y0, x1, y1):
        if i >= j - 1:
            rects[i] = (x0, y0, x1, y1)
            return

        offset = sums[i]
        target = value / 2 + offset
        k = i + 1
        hi = j - 1
        while k < hi:
            mid = (k + hi) // 2
            if sums[mid] < target:
                k = mid + 1
            else:
                hi = mid
        if target - sums[k - 1] < sums[k] - target and i + 1 < k:
            k -= 1

        a_size = sums[k] - offset
        b_size = value - a_size

        if x1 - x0 > y1 - y0:
            # wide box - divide left/right
            xdiv = (x0 * b_size + x1 * a_size) / value if value else x1
            partition(i, k, a_size, x0, y0, xdiv, y1)
            partition(k, j, b_size, xdiv, y0, x1, y1)
        else:
            # tall box - divide top/bottom
            ydiv = (y0 * b_size + y1 * a_size) / value if value else y1
            partition(i, k, a_size, x0, y0, x1, ydiv)
            partition(k, j, b_size, x0, ydiv, x1, y1)

    partition(0, n, sums[-1], x0, y0, x1, y1)
    return rects


def _worst(max_v, min_v, beta):
    if beta == 0 or min_v == 0:
        return math.inf
    return max(max_v / beta, beta / min_v)


def squarify(values, x0, y0, x1, y1, ratio=1.0):
    """Greedy rows: keep adding the next child while the worst aspect ratio
    in the row does not get worse, then lay the row along the short side.

    values should arrive in descending order for the usual result.
    """
    n = len(values)
    rects = [None] * n
    value = float(sum(values))
    i0 = i1 = 0
    while i0 < n:
        dx = x1 - x0
        dy = y1 - y0

        if dx <= 0 or dy <= 0 or value <= 0:
            # nothing left to share, the rest collapse on the remaining box
            for i in range(i0, n):
                rects[i] = (x0, y0, x0, y0)
            break

        # find the next non-empty node
        sum_v = values[i1]
        i1 += 1
        while not sum_v and i1 < n:
            sum_v = values[i1]
            i1 += 1
        min_v = max_v = sum_v
        alpha = max(dy / dx, dx / dy) / (value * ratio)
        beta = sum_v * sum_v * alpha
        min_ratio = _worst(max_v, min_v, beta)

        # keep adding nodes while the aspect ratio maintains or improves
        while i1 < n:
            v = values[i1]
            sum_v += v
            if v < min_v:
                min_v = v
            if v > max_v:
                max_v = v
            beta = sum_v * sum_v * alpha
            new_ratio = _worst(max_v, min_v, beta)
            if new_ratio > min_ratio:
                sum_v -= v
                break
            min_ratio = new_ratio
            i1 += 1

        row = values[i0:i1]
        if dx < dy:
            # tall box - row across the top
            yk = y0 + dy * sum_v / value if value else y1
            rects[i0:i1] = dice_columns(row, x0, y0, x1, yk)
            y0 = yk
        else:
            # wide box - row down the left side
            xk = x0 + dx * sum_v / value if value else x1
            rects[i0:i1] = slice_rows(row, x0, y0, xk, y1)
            x0 = xk
        value -= sum_v
        i0 = i1
    return rects


def get_tiling(packing='squarify', ratio=1.0):
    """Tiler for a packing name, as f(values, x0, y0, x1, y1, depth)."""
    if packing == 'squarify':
        return lambda values, x0, y0, x1, y1, depth=0: squarify(values, x0, y0, x1, y1, ratio)
    if packing == 'binary':
        return lambda values, x0, y0, x1, y1, depth=0: bisect(values, x0, y0, x1, y1)
    if packing == 'dice':
        return lambda values, x0, y0, x1, y1, depth=0: dice_columns(values, x0, y0, x1, y1)
    if packing == 'slice':
        return lambda values, x0, y0, x1, y1, depth=0: slice_rows(values, x0, y0, x1, y1)
    if packing in ('slice-dice', 'dice-slice'):
        # dice-slice is slice-dice on swapped axes, see partition.RectFamily
        return slice_dice
    raise ValueError('unknown packing: %r' % (packing,))


def pad_box(x0, y0, x1, y1, left, top, right, bottom):
    """Shrink a box by per-edge padding. When the padding along an axis is
    larger than the box, that axis collapses to the midpoint of the original
    box, so the result never leaves it."""
    px0, py0, px1, py1 = x0 + left, y0 + top, x1 - right, y1 - bottom
    if px1 < px0:
        px0 = px1 = (x0 + x1) / 2
    if py1 < py0:
        py0 = py1 = (y0 + y1) / 2
    return px0, py0, px1, py1

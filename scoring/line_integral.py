import numpy as np

def line_pixels(p1, p2, shape_hw=None):
    """
    Bresenham rasterization between two integer pixel points.

    Args:
        p1, p2 (tuple): (x, y) endpoints.
        shape_hw (tuple): optional (height, width); endpoints must lie inside.

    Returns:
        (ys, xs): int32 arrays ordered from p1 to p2, both endpoints included,
        8-connected (every step moves at most one pixel on each axis).
    """
    x0, y0 = int(p1[0]), int(p1[1])
    x1, y1 = int(p2[0]), int(p2[1])
    if shape_hw is not None:
        h, w = shape_hw
        for x, y in ((x0, y0), (x1, y1)):
            if not (0 <= x < w and 0 <= y < h):
                raise ValueError(f"point ({x}, {y}) outside image {w}x{h}")

    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    xs, ys = [], []
    while True:
        xs.append(x0); ys.append(y0)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy
    return np.asarray(ys, np.int32), np.asarray(xs, np.int32)  # row, col

import numpy as np

def frame_to_pixel(pt, bbox, image_shape):
    """
    Map a point in frame space onto the pixel grid of the working canvas.

    Args:
        pt (tuple): (x, y) in frame units.
        bbox (tuple): (x, y, width, height) of the frame's bounding box.
        image_shape (tuple): (height, width) of the canvas.

    Returns:
        Tuple[int, int]: floored (x, y) pixel, inside [0, w-1] x [0, h-1].
    """
    h, w = image_shape
    bx, by, bw, bh = bbox
    x = (pt[0] - bx) * (w - 1) / bw
    y = (pt[1] - by) * (h - 1) / bh
    x = int(np.floor(min(max(x, 0.0), w - 1)))
    y = int(np.floor(min(max(y, 0.0), h - 1)))
    return x, y

def generate_nail_positions(image_shape, count=300, shape='circle'):
    """
    Place `count` nails evenly around the frame, in pixel space.

    Args:
        image_shape (tuple): (height, width) of the image canvas.
        count (int): number of nails (>= 2).
        shape (str): 'circle' (inscribed in the canvas, nail 0 at angle 0,
            angle increasing) or 'rectangle' (evenly along the border,
            clockwise from the top-left corner).

    Returns:
        List[Tuple[int, int]]: List of (x, y) nail coordinates.
    """
    h, w = image_shape
    count = int(count)
    if count < 2:
        raise ValueError(f"need at least 2 nails, got {count}")

    if shape == 'circle':
        # unit circle in frame space, mapped onto its bounding box
        frame = []
        for i in range(count):
            angle = 2 * np.pi * i / count
            frame.append((np.cos(angle), np.sin(angle)))
        bbox = (-1.0, -1.0, 2.0, 2.0)
        return [frame_to_pixel(p, bbox, (h, w)) for p in frame]

    elif shape == 'rectangle':
        perimeter = 2 * (w - 1) + 2 * (h - 1)
        if perimeter <= 0:
            raise ValueError("rectangle frame needs a canvas larger than 1x1")
        nails = []
        for i in range(count):
            d = perimeter * i / count
            if d < w - 1:                                   # top, left to right
                x, y = d, 0
            elif d < (w - 1) + (h - 1):                     # right, top to bottom
                x, y = w - 1, d - (w - 1)
            elif d < 2 * (w - 1) + (h - 1):                 # bottom, right to left
                x, y = (w - 1) - (d - (w - 1) - (h - 1)), h - 1
            else:                                           # left, bottom to top
                x, y = 0, (h - 1) - (d - 2 * (w - 1) - (h - 1))
            nails.append((int(np.floor(x)), int(np.floor(y))))
        return nails

    else:
        raise ValueError("shape must be 'circle' or 'rectangle'")

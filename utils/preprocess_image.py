import cv2
import numpy as np

# physical frame defaults (inches), used to derive the working resolution
FRAME_WIDTH = 20.0
THREAD_DIAMETER = 0.01

def working_resolution(downscale_factor=4, frame_width=FRAME_WIDTH, thread_diameter=THREAD_DIAMETER):
    """Pixels per side of the working canvas: one pixel per two thread widths, downscaled."""
    return max(2, int(frame_width / thread_diameter / 2 / float(downscale_factor)))

def load_image_rgba(path):
    """
    Load an image from disk as RGBA uint8.

    Returns:
        np.ndarray: (H, W, 4) uint8, alpha 255 where the file has none.
    """
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Image not found: {path}")
    if img.dtype != np.uint8:
        img = cv2.convertScaleAbs(img, alpha=255.0 / max(1.0, float(img.max())))
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)

def fit_to_frame(rgba, size=(250, 250)):
    """
    Scale the image to cover a (height, width) canvas and center-crop it.

    The shorter side (relative to the canvas aspect ratio) fills the canvas,
    the longer one is trimmed equally on both ends.
    """
    H, W = int(size[0]), int(size[1])
    h, w = rgba.shape[:2]
    scale = max(W / w, H / h)
    sw, sh = max(W, int(round(w * scale))), max(H, int(round(h * scale)))
    interp = cv2.INTER_AREA if scale < 1.0 else cv2.INTER_LINEAR
    scaled = cv2.resize(rgba, (sw, sh), interpolation=interp)  # cv2 uses (W,H)
    y0 = (sh - H) // 2
    x0 = (sw - W) // 2
    return np.ascontiguousarray(scaled[y0:y0 + H, x0:x0 + W])

def preprocess_image(path, size=(250, 250)):
    """
    Load and fit an image for string art.

    Args:
        path (str): File path to image.
        size (tuple): Working canvas size (height, width).

    Returns:
        np.ndarray: (H, W, 4) RGBA uint8 target.
    """
    return fit_to_frame(load_image_rgba(path), size)

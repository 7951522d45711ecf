# simulation/buffers.py
import numpy as np

GRAY = (128, 128, 128, 255)

def initialize_canvas(shape_hw, value=GRAY):
    """Flat RGBA canvas filled with `value` (uint8)."""
    h, w = int(shape_hw[0]), int(shape_hw[1])
    canvas = np.empty((h, w, 4), np.uint8)
    canvas[...] = np.asarray(value, np.uint8)
    return canvas

class RasterBuffers:
    '''
    Target snapshot and the running approximation, both (H, W, 4) uint8 RGBA.

    `current` is only written by commit_chord:
      C_new = color * fade + C_old * (1 - fade)   per channel, rounded to uint8
    '''
    def __init__(self, target_rgba):
        t = np.asarray(target_rgba)
        if t.ndim != 3 or t.shape[2] != 4:
            raise ValueError(f"target must be (H, W, 4) RGBA, got shape {t.shape}")
        if t.shape[0] < 1 or t.shape[1] < 1:
            raise ValueError("target image is empty")
        if t.dtype != np.uint8:
            if np.any(t < 0) or np.any(t > 255):
                raise ValueError("target values must lie in [0, 255]")
            t = t.astype(np.uint8)
        self.target = np.array(t, np.uint8, copy=True)
        self.target.setflags(write=False)
        self.H, self.W = self.target.shape[:2]
        self.current = initialize_canvas((self.H, self.W))

        # flat (H*W, 4) views used by the scorer
        self.target_flat = self.target.reshape(-1, 4)
        self.current_flat = self.current.reshape(-1, 4)

    @property
    def shape_hw(self):
        return (self.H, self.W)

    def blend_pixels(self, flat_idx, color, fade) -> np.ndarray:
        cur = self.current_flat[flat_idx].astype(np.float64)
        return color.as_array() * fade + cur * (1.0 - fade)

    def commit_chord(self, chord, color):
        blended = self.blend_pixels(chord.flat, color, chord.fade)
        self.current_flat[chord.flat] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)

    def residual(self) -> float:
        """Mean absolute channel difference between current and target."""
        diff = np.abs(self.current.astype(np.int16) - self.target.astype(np.int16))
        return float(diff.mean())

    def release(self):
        self.target = None
        self.current = None
        self.target_flat = None
        self.current_flat = None

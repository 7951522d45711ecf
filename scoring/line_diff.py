import numpy as np

REGRESSION_WEIGHT = 1.0 / 5.0

def blend(color_arr, cur, fade):
    return color_arr * fade + cur * (1.0 - fade)

def pixel_deltas(target_flat, current_flat, flat_idx, color, fade):
    """
    Per-pixel change in distance to target if the chord were drawn:
      delta = sum_c |T - blend(C)| - |C - T|
    Negative means the pixel moves closer to the target.
    """
    cur = current_flat[flat_idx].astype(np.float64)
    tgt = target_flat[flat_idx].astype(np.float64)
    new = blend(color.as_array(), cur, fade)
    return (np.abs(tgt - new) - np.abs(cur - tgt)).sum(axis=1)

def _weigh(deltas):
    # improvements count in full, regressions at one fifth
    return np.where(deltas < 0, deltas, deltas * REGRESSION_WEIGHT)

def score_chord(target_flat, current_flat, flat_idx, color, fade) -> float:
    """
    Signed chord cost, lower is better: cube of the weighted mean pixel delta.
    Reads both buffers, writes neither.
    """
    if len(flat_idx) == 0:
        raise ValueError("chord has no pixels")
    d = pixel_deltas(target_flat, current_flat, flat_idx, color, fade)
    mean = float(_weigh(d).sum()) / len(flat_idx)
    return mean ** 3

def score_fan(target_flat, current_flat, fan, color, fade) -> np.ndarray:
    """score_chord for every chord of a Fan in one pass."""
    if len(fan.chords) == 0:
        return np.zeros(0, np.float64)
    d = _weigh(pixel_deltas(target_flat, current_flat, fan.flat, color, fade))
    sums = np.add.reduceat(d, fan.starts)
    return (sums / fan.lengths) ** 3

# utils/line_cache.py
import threading
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

from scoring.line_integral import line_pixels

def pair_key(i: int, j: int) -> Tuple[int, int]:
    return (i, j) if i < j else (j, i)

def fade_for(downscale_factor: float) -> float:
    """Blend weight of one thread pass at the given canvas downscale."""
    return 1.0 / (float(downscale_factor) * 1.8)

@dataclass(frozen=True, eq=False)
class Chord:
    key: Tuple[int, int]
    ys: np.ndarray
    xs: np.ndarray
    flat: np.ndarray        # ys * width + xs, same order as ys/xs
    fade: float

    def __len__(self):
        return len(self.flat)

@dataclass
class Fan:
    """All chords leaving one nail, concatenated for reduceat scoring."""
    nail: int
    dests: np.ndarray       # destination nail per chord, ascending
    chords: List[Chord]
    flat: np.ndarray        # concatenated pixel indices
    starts: np.ndarray      # segment offsets into flat
    lengths: np.ndarray     # pixels per chord

class LineCache:
    """
    Memoized chord geometry for one run.

    Chords are keyed by the unordered nail pair, rasterized from the lower
    index nail to the higher one, and shared by every thread.
    """
    def __init__(self, nails, shape_hw, fade):
        self.nails = [(int(x), int(y)) for x, y in nails]
        self.shape_hw = (int(shape_hw[0]), int(shape_hw[1]))
        self.fade = float(fade)
        self.rasterize_count = 0
        self._chords: Dict[Tuple[int, int], Chord] = {}
        self._fans: Dict[int, Fan] = {}
        # fans are built from pool workers during a parallel scan
        self._lock = threading.RLock()

    @property
    def num_nails(self):
        return len(self.nails)

    def __len__(self):
        return len(self._chords)

    def _check(self, i, j):
        n = len(self.nails)
        if not (0 <= i < n and 0 <= j < n):
            raise ValueError(f"nail index out of range: ({i}, {j}) with {n} nails")
        if i == j:
            raise ValueError(f"self chord requested for nail {i}")

    def chord_between(self, i: int, j: int) -> Chord:
        i, j = int(i), int(j)
        self._check(i, j)
        key = pair_key(i, j)
        with self._lock:
            return self._chord_locked(key)

    def _chord_locked(self, key):
        chord = self._chords.get(key)
        if chord is not None:
            return chord
        a, b = key
        ys, xs = line_pixels(self.nails[a], self.nails[b], self.shape_hw)
        self.rasterize_count += 1
        flat = ys.astype(np.int64) * self.shape_hw[1] + xs
        chord = Chord(key=key, ys=ys, xs=xs, flat=flat, fade=self.fade)
        self._chords[key] = chord
        return chord

    def fan(self, nail: int) -> Fan:
        nail = int(nail)
        with self._lock:
            return self._fan_locked(nail)

    def _fan_locked(self, nail):
        f = self._fans.get(nail)
        if f is not None:
            return f
        dests = np.array([d for d in range(len(self.nails)) if d != nail], np.int32)
        chords = [self.chord_between(nail, int(d)) for d in dests]
        lengths = np.array([len(c) for c in chords], np.int64)
        starts = np.zeros(len(chords), np.int64)
        if len(chords) > 1:
            starts[1:] = np.cumsum(lengths)[:-1]
        flat = np.concatenate([c.flat for c in chords]) if chords else np.zeros(0, np.int64)
        f = Fan(nail=nail, dests=dests, chords=chords, flat=flat, starts=starts, lengths=lengths)
        self._fans[nail] = f
        return f

    def clear(self):
        with self._lock:
            self._chords.clear()
            self._fans.clear()

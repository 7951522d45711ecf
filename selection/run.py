# selection/run.py
import math
from typing import Any, Dict, Optional

import numpy as np

from simulation.buffers import RasterBuffers
from utils.line_cache import LineCache, fade_for
from utils.palette import palette_for
from selection.thread import Thread

class ConfigError(ValueError):
    """Invalid run configuration; raised before any run state exists."""

DEFAULT_PARAMS = dict(
    num_nails=300,
    max_connections=10000,
    downscale_factor=4,
    monochrome=False,
    start_nail=0,
    seed=None,
    eager=True,
    workers=1,
    track_residual=False,
)

def _as_count(name, value, minimum):
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ConfigError(f"{name} must be a finite integer, got {value!r}")
        value = int(value)
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value

def resolve_params(params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    P = dict(DEFAULT_PARAMS)
    if params:
        unknown = set(params) - set(DEFAULT_PARAMS)
        if unknown:
            raise ConfigError(f"unknown params: {sorted(unknown)}")
        P.update(params)

    P['num_nails'] = _as_count('num_nails', P['num_nails'], 2)
    P['max_connections'] = _as_count('max_connections', P['max_connections'], 0)
    P['start_nail'] = _as_count('start_nail', P['start_nail'], 0)
    P['workers'] = _as_count('workers', P['workers'], 1)
    try:
        ds = float(P['downscale_factor'])
    except (TypeError, ValueError):
        raise ConfigError(f"downscale_factor must be a number, got {P['downscale_factor']!r}") from None
    if not math.isfinite(ds) or ds <= 0:
        raise ConfigError(f"downscale_factor must be > 0, got {P['downscale_factor']!r}")
    P['downscale_factor'] = ds
    if P['seed'] is not None:
        P['seed'] = _as_count('seed', P['seed'], 0)
    P['monochrome'] = bool(P['monochrome'])
    P['eager'] = bool(P['eager'])
    P['track_residual'] = bool(P['track_residual'])
    return P

class Run:
    """
    Everything one generation owns: nails, line cache, raster buffers, threads
    and the interleaved move log. Discarded when the run ends.
    """
    def __init__(self, nails, target_rgba, palette=None, params=None):
        P = resolve_params(params)
        nails = [(int(x), int(y)) for x, y in nails]
        if len(nails) < 2:
            raise ConfigError(f"need at least 2 nails, got {len(nails)}")
        if params and 'num_nails' in params and len(nails) != P['num_nails']:
            raise ConfigError(f"num_nails={P['num_nails']} but {len(nails)} positions given")
        P['num_nails'] = len(nails)
        palette = list(palette) if palette is not None else palette_for(P['monochrome'])
        if not palette:
            raise ConfigError("palette is empty")
        if P['start_nail'] >= len(nails):
            raise ConfigError(f"start_nail {P['start_nail']} outside [0, {len(nails)})")
        target = np.asarray(target_rgba)
        if target.ndim != 3 or target.shape[2] != 4:
            raise ConfigError(f"target must be (H, W, 4) RGBA, got shape {target.shape}")
        h, w = target.shape[:2]
        for k, (x, y) in enumerate(nails):
            if not (0 <= x < w and 0 <= y < h):
                raise ConfigError(f"nail {k} at ({x}, {y}) outside image {w}x{h}")

        self.P = P
        self.nails = nails
        self.palette = palette
        self.budget = P['max_connections']
        self.cache = LineCache(nails, (h, w), fade_for(P['downscale_factor']))
        self.buffers = RasterBuffers(target)

        seeds = np.random.SeedSequence(P['seed']).spawn(len(palette))
        self.threads = [
            Thread(P['start_nail'], color, self.cache, self.buffers,
                   rng=np.random.default_rng(s), eager=P['eager'])
            for color, s in zip(palette, seeds)
        ]
        self.move_log = []
        self.iteration = 0
        self.closed = False

    @property
    def fade(self):
        return self.cache.fade

    def record(self, thread_index):
        self.move_log.append(int(thread_index))
        self.iteration += 1

    def close(self):
        if self.closed:
            return
        self.cache.clear()
        self.buffers.release()
        self.closed = True

"""Shared fixtures for the thread-routing tests.

Images are tiny synthetic RGBA canvases so every test runs in milliseconds.
"""
import numpy as np
import pytest

from simulation.buffers import initialize_canvas, GRAY
from utils.generate_nails import generate_nail_positions
from utils.palette import BLACK, WHITE
from selection.run import Run


@pytest.fixture
def compass_nails():
    """Four nails at E, S, W, N of a size x size canvas."""
    def _make(size):
        m = size // 2
        return [(size - 1, m), (m, size - 1), (0, m), (m, 0)]
    return _make


@pytest.fixture
def gray_target():
    return lambda size: initialize_canvas((size, size), GRAY)


@pytest.fixture
def black_target():
    return lambda size: initialize_canvas((size, size), (0, 0, 0, 255))


@pytest.fixture
def make_run():
    """make_run(size, num_nails, target, palette=None, **params) -> Run on a circle frame."""
    def _make(size, num_nails, target, palette=None, **params):
        nails = generate_nail_positions((size, size), count=num_nails, shape='circle')
        params.setdefault('max_connections', 10)
        params.setdefault('seed', 0)
        return Run(nails, target, palette=palette or [BLACK], params=params)
    return _make


@pytest.fixture
def noisy_target():
    """Deterministic random RGBA image with opaque alpha."""
    def _make(size, seed=7):
        rng = np.random.default_rng(seed)
        img = rng.integers(0, 256, size=(size, size, 4), dtype=np.uint8)
        img[..., 3] = 255
        return img
    return _make


@pytest.fixture
def mono_palette():
    return [BLACK, WHITE]

"""Test target/current raster buffers.

Tests for simulation.buffers.RasterBuffers:
    - current starts flat gray, target is a frozen copy
    - blend_pixels is pure, commit_chord writes the rounded blend
    - Malformed targets rejected
    - Color channels must be integers in [0, 255]

Run:
    pytest tests/test_buffers.py -v
"""
import numpy as np
import pytest

from simulation.buffers import RasterBuffers, initialize_canvas, GRAY
from utils.line_cache import LineCache
from utils.palette import Color, WHITE, BLACK


def test_initial_state(black_target):
    src = black_target(9)
    b = RasterBuffers(src)
    assert b.current.shape == (9, 9, 4)
    assert np.all(b.current == np.array(GRAY, np.uint8))
    assert not b.target.flags.writeable
    src[0, 0] = 77
    assert b.target[0, 0, 0] == 0  # copied


def test_blend_is_pure(black_target):
    b = RasterBuffers(black_target(5))
    before = b.current.copy()
    out = b.blend_pixels(np.array([0, 6, 24]), WHITE, 0.5)
    assert out.shape == (3, 4)
    assert out[0] == pytest.approx([191.5, 191.5, 191.5, 255.0])
    assert np.array_equal(b.current, before)


def test_commit_chord_blends_path(black_target):
    b = RasterBuffers(black_target(11))
    cache = LineCache([(0, 5), (10, 5)], (11, 11), 0.25)
    chord = cache.chord_between(0, 1)
    b.commit_chord(chord, WHITE)
    row = b.current[5]
    assert np.all(row[:, :3] == 160)       # 128 * 0.75 + 255 * 0.25 = 159.75
    assert np.all(row[:, 3] == 255)
    assert np.all(b.current[4, :, :3] == 128)

    b.commit_chord(chord, BLACK)
    assert np.all(b.current[5, :, :3] == 120)  # 160 * 0.75


def test_residual(gray_target, black_target):
    assert RasterBuffers(gray_target(4)).residual() == 0.0
    assert RasterBuffers(black_target(4)).residual() == pytest.approx(128 * 3 / 4)


@pytest.mark.parametrize("shape", [(4, 4), (4, 4, 3), (0, 4, 4)])
def test_bad_target(shape):
    with pytest.raises(ValueError):
        RasterBuffers(np.zeros(shape, np.uint8))


def test_out_of_range_values():
    with pytest.raises(ValueError):
        RasterBuffers(np.full((2, 2, 4), 300, np.int32))


def test_release():
    b = RasterBuffers(initialize_canvas((3, 3)))
    b.release()
    assert b.current is None and b.target is None


def test_color_validation():
    with pytest.raises(ValueError):
        Color(0, 256, 0)
    assert Color(0, 255, 255).hex() == '#00ffff'


@pytest.mark.parametrize("channels", [(12.5, 0, 0), (0, 1.0, 0), (True, 0, 0), ('7', 0, 0)])
def test_color_rejects_non_integers(channels):
    with pytest.raises(ValueError):
        Color(*channels)


def test_color_accepts_numpy_integers():
    c = Color(np.uint8(200), np.int64(16), 0)
    assert type(c.r) is int
    assert c.hex() == '#c81000'

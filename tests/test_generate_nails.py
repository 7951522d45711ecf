"""Test nail layouts.

Run:
    pytest tests/test_generate_nails.py -v
"""
import pytest

from utils.generate_nails import generate_nail_positions, frame_to_pixel


@pytest.mark.parametrize("shape", ['circle', 'rectangle'])
def test_count_and_bounds(shape):
    nails = generate_nail_positions((40, 60), count=50, shape=shape)
    assert len(nails) == 50
    assert all(0 <= x < 60 and 0 <= y < 40 for x, y in nails)


def test_circle_starts_east():
    nails = generate_nail_positions((41, 41), count=8)
    assert nails[0] == (40, 20)
    assert nails[2] == (20, 40)     # angle increases towards +y
    assert nails[4] == (0, 20)


def test_rectangle_starts_top_left():
    nails = generate_nail_positions((11, 11), count=4, shape='rectangle')
    assert nails == [(0, 0), (10, 0), (10, 10), (0, 10)]


def test_frame_to_pixel_clamps():
    assert frame_to_pixel((2.0, -3.0), (-1, -1, 2, 2), (10, 10)) == (9, 0)


def test_bad_arguments():
    with pytest.raises(ValueError):
        generate_nail_positions((10, 10), count=1)
    with pytest.raises(ValueError):
        generate_nail_positions((10, 10), count=10, shape='hexagon')

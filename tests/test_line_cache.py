"""Test the per-run chord cache.

Tests for utils.line_cache.LineCache:
    - chord_between(i, j) is chord_between(j, i) (canonical key)
    - Repeated queries return the identical object, rasterizing once
    - Self chords and out-of-range indices rejected
    - Fans reuse cached chords and line up with reduceat offsets
    - clear() drops everything
    - Concurrent fan builds rasterize every chord once

Run:
    pytest tests/test_line_cache.py -v
"""
import numpy as np
import pytest

from utils.generate_nails import generate_nail_positions
from utils.line_cache import LineCache, fade_for, pair_key


def make_cache(n, size=41):
    nails = generate_nail_positions((size, size), count=n)
    return LineCache(nails, (size, size), fade_for(4))


@pytest.mark.parametrize("n", [2, 3, 7, 24])
def test_symmetry_and_identity(n):
    cache = make_cache(n)
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            a = cache.chord_between(i, j)
            b = cache.chord_between(j, i)
            assert a is b
            assert a.key == pair_key(i, j) == (min(i, j), max(i, j))
    assert len(cache) == n * (n - 1) // 2
    assert cache.rasterize_count == n * (n - 1) // 2


def test_rasterizes_once():
    cache = make_cache(10)
    first = cache.chord_between(2, 7)
    for _ in range(50):
        assert cache.chord_between(7, 2) is first
    assert cache.rasterize_count == 1


def test_chord_runs_from_lower_nail():
    cache = make_cache(10)
    c = cache.chord_between(8, 3)
    assert (c.xs[0], c.ys[0]) == cache.nails[3]
    assert (c.xs[-1], c.ys[-1]) == cache.nails[8]
    assert np.array_equal(c.flat, c.ys.astype(np.int64) * 41 + c.xs)
    assert c.fade == pytest.approx(1 / 7.2)


@pytest.mark.parametrize("i,j", [(3, 3), (-1, 2), (0, 10), (10, 0)])
def test_invalid_queries(i, j):
    cache = make_cache(10)
    with pytest.raises(ValueError):
        cache.chord_between(i, j)


def test_fan_reuses_chords():
    cache = make_cache(12)
    c = cache.chord_between(0, 5)
    fan = cache.fan(5)
    assert list(fan.dests) == [d for d in range(12) if d != 5]
    assert fan.chords[0] is c
    assert cache.rasterize_count == 11
    cache.fan(0)
    assert cache.rasterize_count == 11 + 10  # (0, 5) already known
    assert cache.fan(5) is fan

    for k, chord in enumerate(fan.chords):
        s = fan.starts[k]
        assert np.array_equal(fan.flat[s:s + fan.lengths[k]], chord.flat)


def test_clear():
    cache = make_cache(6)
    cache.fan(0)
    cache.clear()
    assert len(cache) == 0
    cache.chord_between(0, 1)
    assert cache.rasterize_count == 6


def test_concurrent_fans_rasterize_once():
    from concurrent.futures import ThreadPoolExecutor

    cache = make_cache(150, size=121)
    with ThreadPoolExecutor(max_workers=8) as pool:
        fans = list(pool.map(cache.fan, [0] * 8 + [1] * 8))
    assert cache.rasterize_count == len(cache)
    assert all(f is fans[0] for f in fans[:8])
    for f in fans:
        for d, c in zip(f.dests, f.chords):
            assert c is cache.chord_between(f.nail, int(d))

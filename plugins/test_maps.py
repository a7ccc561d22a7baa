#!/usr/bin/env python3
"""
Tests for the map iterators.

Verifies:
1. Symmetric IFS single step against a hand-computed point
2. TrigTable contents
3. Square quilt determinism, wrapping and tiling
4. Icon divergence recovery
5. Transient iterations are not plotted
"""

import math
import numpy as np
from symmetric_chaos.engine_base import ChaosMap
from symmetric_chaos.ifs import SymmetricIFS, TrigTable, fold_count
from symmetric_chaos.quilt import SquareQuilt, wrap_unit
from symmetric_chaos.icon import SymmetricIcon, TRANSIENT
from symmetric_chaos.maps import get_map_class, MAP_ORDER
from symmetric_chaos.projection import TiledProjection, CenteredProjection
from symmetric_chaos.presets import PRESETS, preset_params


class ScriptedRandom:
    """Replays a fixed list of uniform draws."""

    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


def test_ifs_single_step():
    """Default params from the seed point, fold 0, no reflection."""
    print("Testing SymmetricIFS.step...")
    ifs = SymmetricIFS()
    x0, y0 = ifs.SEED
    assert (x0, y0) == (0.1, -0.01)

    rng = ScriptedRandom([0.0, 0.9])  # fold 0, coin says keep
    x, y = ifs.step(x0, y0, dict(ifs.DEFAULTS), rng)
    assert abs(x - 0.0365) < 1e-12, f"x should be 0.0365: {x}"
    assert abs(y - 0.416) < 1e-12, f"y should be 0.416: {y}"

    # Same draw for the fold, coin says mirror
    rng = ScriptedRandom([0.0, 0.1])
    x, y = ifs.step(x0, y0, dict(ifs.DEFAULTS), rng)
    assert abs(y + 0.416) < 1e-12, f"Reflection should negate y: {y}"

    # conj = 0 never consumes a coin
    params = dict(ifs.DEFAULTS, conj=0)
    rng = ScriptedRandom([0.0])
    ifs.step(x0, y0, params, rng)
    assert rng.values == [], "Zn step should draw exactly once"

    print("  ✓ IFS step matches hand computation")


def test_ifs_rotation_fold():
    """A draw just below 1 selects the last fold (rotation by 2pi(n-1)/n)."""
    ifs = SymmetricIFS()
    params = dict(ifs.DEFAULTS, n=4, conj=0)
    x, y = ifs.step(0.1, -0.01, params, ScriptedRandom([0.999999]))
    # Rotation by 270 degrees maps (0.0365, 0.416) to (0.416, -0.0365)
    assert abs(x - 0.416) < 1e-9 and abs(y + 0.0365) < 1e-9, (x, y)


def test_trig_table():
    print("Testing TrigTable...")
    for n in (1, 2, 3, 5, 12):
        t = TrigTable(n)
        assert len(t) == n
        assert len(t.c) == n and len(t.s) == n
        for k in range(n):
            assert abs(t.c[k] ** 2 + t.s[k] ** 2 - 1.0) < 1e-12
        assert t.c[0] == 1.0 and t.s[0] == 0.0

    assert fold_count(3.7) == 3
    assert fold_count(0) == 1

    ifs = SymmetricIFS()
    first = ifs.trig_table(3)
    assert ifs.trig_table(3) is first, "Table should be cached while n is unchanged"
    assert len(ifs.trig_table(6)) == 6, "Table should be rebuilt when n changes"
    print("  ✓ TrigTable correct")


def test_quilt_determinism():
    print("Testing SquareQuilt determinism...")
    params = preset_params(PRESETS["roses"])
    quilt = SquareQuilt()

    runs = []
    for _ in range(2):
        state = quilt.new_state()
        xs, ys = quilt.run(state, params, np.random.default_rng(0), 2000)
        runs.append((xs, ys))

    assert np.array_equal(runs[0][0], runs[1][0])
    assert np.array_equal(runs[0][1], runs[1][1])
    print("  ✓ Identical params and seed give identical orbits")


def test_quilt_wrap():
    print("Testing SquareQuilt wrap...")
    quilt = SquareQuilt()
    for key in ("emerald_mosaic", "sugar_and_spice", "flowers_with_ribbons"):
        params = preset_params(PRESETS[key])
        state = quilt.new_state()
        xs, ys = quilt.run(state, params, np.random.default_rng(1), 3000)
        assert xs.size == 3000
        assert np.all((xs >= 0.0) & (xs < 1.0)), f"{key}: x escaped [0, 1)"
        assert np.all((ys >= 0.0) & (ys < 1.0)), f"{key}: y escaped [0, 1)"

    assert wrap_unit(1.25) == 0.25
    assert abs(wrap_unit(-0.25) - 0.75) < 1e-12
    assert wrap_unit(-1e-20) == 0.0
    print("  ✓ Quilt iterates stay in the unit square")


def test_quilt_tiling():
    print("Testing TiledProjection...")
    xs = np.array([0.1, 0.5, 0.9, 0.0, 0.25])
    ys = np.array([0.2, 0.5, 0.1, 0.0, 0.75])
    for period in (1, 2, 3, 5):
        proj = TiledProjection(300, 300, period)
        px, py = proj(xs, ys)
        assert proj.replicas == period * period
        assert px.shape == (xs.size * period * period,)
        assert py.shape == px.shape

    proj = TiledProjection(300, 300, 3)
    px, py = proj(np.array([0.0]), np.array([0.0]))
    points = set(zip(np.round(px, 6).tolist(), np.round(py, 6).tolist()))
    assert (0.0, 300.0) in points and (200.0, 100.0) in points
    assert len(points) == 9
    print("  ✓ P x P copies per point")


def test_icon_divergence_recovery():
    print("Testing SymmetricIcon divergence recovery...")
    icon = SymmetricIcon()
    params = dict(icon.DEFAULTS)
    rng = np.random.default_rng(3)

    state = icon.new_state()
    state.x, state.y = 1e200, -1e200
    state.iterations = 500
    xs, ys = icon.run(state, params, rng, 1)
    assert xs.size == 0, "A divergent step must not be plotted"
    assert math.isfinite(state.x) and math.isfinite(state.y)
    assert abs(state.x) <= 0.005 and abs(state.y) <= 0.005
    assert state.iterations == 0, "Reseed restarts the transient count"

    # A wildly unstable parameter set never leaks non-finite points
    params = dict(icon.DEFAULTS, **{"lambda": 3.0, "alpha": 8.0})
    state = icon.new_state()
    xs, ys = icon.run(state, params, rng, 5000)
    assert np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))
    assert math.isfinite(state.x) and math.isfinite(state.y)
    print("  ✓ Divergent orbits are reseeded")


class Halving(ChaosMap):
    """Contracting test map: (x, y) -> (x/2, y/2)."""

    map_name = "halving"
    DEFAULTS = {"k": 0.5}
    SEED = (1.0, 1.0)
    transient = 10

    def step(self, x, y, params, rng):
        return x * params["k"], y * params["k"]

    def projection(self, params, width, height, dpr=1.0):
        return CenteredProjection(width, height, dpr, 1.0)

    @classmethod
    def get_slider_defs(cls):
        return []


def test_transient_skipped():
    print("Testing transient suppression...")
    m = Halving()
    state = m.new_state()
    xs, ys = m.run(state, m.DEFAULTS, None, 15)
    # Iterations 1..9 are transient, 10..15 are plotted
    assert xs.size == 6, f"Expected 6 plotted points: {xs.size}"
    assert xs[0] == 0.5 ** 10
    assert state.iterations == 15

    # The count carries over between batches
    xs, ys = m.run(state, m.DEFAULTS, None, 5)
    assert xs.size == 5

    assert SymmetricIcon.transient == TRANSIENT == 100
    print("  ✓ Transient iterations computed but not plotted")


def test_map_registry():
    for name in MAP_ORDER:
        cls = get_map_class(name)
        assert cls.map_name == name
        keys = [d["key"] for d in cls.get_slider_defs()]
        assert set(keys) == set(cls.DEFAULTS), f"{name}: sliders should cover every field"
        for key in cls.STRUCTURAL_KEYS:
            assert key in cls.DEFAULTS
    try:
        get_map_class("lorenz")
        assert False, "Unknown map should raise"
    except ValueError:
        pass


def test_centered_projection_dpr():
    proj = SymmetricIFS().projection(dict(SymmetricIFS.DEFAULTS), 800, 600, dpr=2.0)
    px, py = proj(np.array([0.0, 1.0]), np.array([0.0, 1.0]))
    # Logical canvas 400x300, scale 300*0.4 = 120
    assert px[0] == 400.0 and py[0] == 300.0
    assert px[1] == (200 + 120) * 2 and py[1] == (150 - 120) * 2


if __name__ == "__main__":
    print("\n=== Testing Symmetric Chaos Maps ===\n")

    test_ifs_single_step()
    test_ifs_rotation_fold()
    test_trig_table()
    test_quilt_determinism()
    test_quilt_wrap()
    test_quilt_tiling()
    test_icon_divergence_recovery()
    test_transient_skipped()
    test_map_registry()
    test_centered_projection_dpr()

    print("\n✓ All tests passed!\n")

#!/usr/bin/env python3
"""
Tests for the headless frame driver and the Scope pipeline.

Verifies:
1. Batch-size curve (speed 1 pacing, histogram >> direct)
2. Reset / clear / structural parameter changes
3. Resize failure skips ticks until a later resize succeeds
4. Pause, close and published stats
5. Asynchronous preset loading applied between ticks
6. Pipeline frames (when torch is installed)
"""

import json
import numpy as np
import pytest
from symmetric_chaos.simulator import (
    ChaosSimulator, batch_size_for, FPS, STATS_INTERVAL,
)
from symmetric_chaos.preset_files import PresetError
from symmetric_chaos.presets import PRESETS, preset_params


def make_sim(preset="ifs_default", mode="chalk", size=48, speed=2, seed=0):
    return ChaosSimulator(preset_key=preset, width=size, height=size,
                          render_mode=mode, speed=speed, seed=seed)


def test_batch_size_curve():
    print("Testing batch sizes...")
    assert batch_size_for(2, "histogram") == 1666
    assert batch_size_for(100, "histogram") >= 249999
    assert batch_size_for(2, "chalk") == 100
    assert batch_size_for(100, "glow") == 3000

    prev_h = prev_d = 0
    for speed in range(2, 101):
        h = batch_size_for(speed, "histogram")
        d = batch_size_for(speed, "standard")
        assert h >= prev_h and d >= prev_d, f"Batch must grow with speed ({speed})"
        assert h >= 10 * d, f"Histogram batch should dwarf direct batch ({speed})"
        prev_h, prev_d = h, d
    print("  ✓ Batch size monotonic in speed")


def test_speed_one_pacing():
    sim = make_sim(speed=1)
    sizes = [sim.batch_size() for _ in range(2 * FPS)]
    assert sum(sizes) == 2, "Speed 1 plots one point per second"
    assert sizes[FPS - 1] == 1


def test_tick_plots_points():
    print("Testing ChaosSimulator.tick...")
    sim = make_sim()
    assert sim.tick()
    assert sim.iterations == 100
    assert sim.points > 0
    frame = sim.step(0.016)
    assert frame.shape == (48, 48, 3) and frame.dtype == np.uint8
    assert frame.any(), "Chalk marks should be visible after two ticks"

    f = sim.render_float()
    assert f.dtype == np.float32 and 0.0 <= f.min() and f.max() <= 1.0
    assert sim.snapshot().size == (48, 48)
    print("  ✓ Ticks iterate and draw")


def test_seeded_runs_identical():
    a = make_sim(seed=7)
    b = make_sim(seed=7)
    for _ in range(5):
        fa = a.step()
        fb = b.step()
    assert np.array_equal(fa, fb)
    assert (a.state.x, a.state.y) == (b.state.x, b.state.y)


def test_reset_and_clear():
    print("Testing reset / clear...")
    sim = make_sim()
    for _ in range(5):
        sim.tick()
    before = sim.surface.to_array()
    assert before.any()

    sim.reset(clear=False)
    assert (sim.state.x, sim.state.y) == sim.map.SEED
    assert sim.iterations == 0 and sim.points == 0
    assert np.array_equal(sim.surface.to_array(), before), "reset(clear=False) keeps the canvas"

    sim.clear()
    assert not sim.surface.to_array().any()
    assert sim.stats["iterations"] == 0
    print("  ✓ Reset keeps canvas, clear wipes it")


def test_structural_change_clears():
    print("Testing structural parameter changes...")
    sim = make_sim()
    for _ in range(3):
        sim.tick()
    assert sim.surface.to_array().any()

    sim.set_runtime_params(a11=0.41)
    assert sim.surface.to_array().any(), "Coefficient tweak keeps the canvas"
    assert sim.iterations > 0

    sim.set_runtime_params(n=5)
    assert not sim.surface.to_array().any(), "Symmetry change clears the canvas"
    assert sim.iterations == 0
    assert sim.params["n"] == 5

    # Default color follows the reflection flag
    assert sim.accumulator.color == "#e879f9"
    sim.set_runtime_params(conj=0)
    assert sim.accumulator.color == "#22d3ee"
    sim.set_runtime_params(color="#ffffff", conj=1)
    assert sim.accumulator.color == "#ffffff"

    try:
        sim.set_runtime_params(warp=3)
        assert False, "Unknown runtime key should raise"
    except KeyError:
        pass
    print("  ✓ n / conj changes reset the orbit")


def test_apply_preset_switches_family():
    sim = make_sim(mode="histogram")
    sim.apply_preset("roses")
    assert sim.map_name == "quilt"
    assert sim.preset_key == "roses"
    assert sim.render_mode == "histogram"
    assert sim.params["ma"] == 1
    sim.tick()
    assert sim.accumulator.max_hits > 0

    sim.apply_preset("icon_hexagon")
    assert sim.map_name == "icon"
    assert sim.palette == tuple(("#0c4a6e", "#38bdf8", "#f0f9ff"))

    sim.apply_preset(dict(preset_params(PRESETS["icon_trefoil"]), map="icon"))
    assert sim.preset_key is None
    assert sim.params["lambda"] == 2.5

    try:
        sim.apply_preset("no_such_preset")
        assert False, "Unknown preset should raise"
    except KeyError:
        pass


def test_rejected_preset_keeps_state():
    print("Testing rejected presets...")
    icon_defaults = preset_params(PRESETS["icon_default"])
    sim = make_sim()
    sim.tick()
    params = dict(sim.params)

    # Extra keys are not icon coefficients
    try:
        sim.apply_preset(dict(icon_defaults, map="icon", opacity=0.3))
        assert False, "Unknown coefficient should raise"
    except KeyError:
        pass
    assert sim.map_name == "ifs" and sim.store.family == "ifs"
    assert dict(sim.params) == params
    assert sim.tick(), "Ticks keep running after a rejected family switch"

    try:
        sim.apply_preset(dict(params, map="ifs", mode="sepia"))
        assert False, "Unknown mode should raise"
    except ValueError:
        pass
    assert sim.render_mode == "chalk" and sim.accumulator.mode == "chalk"
    assert sim.tick()

    try:
        sim.apply_preset(dict(icon_defaults, map="icon", palette="no_such_palette"))
        assert False, "Unknown palette should raise"
    except KeyError:
        pass
    assert sim.map_name == "ifs"
    assert sim.tick()

    try:
        ChaosSimulator(width=16, height=16, render_mode="sepia")
        assert False, "Unknown constructor mode should raise"
    except ValueError:
        pass
    print("  ✓ Rejected presets leave the running map untouched")


def test_opacity_and_point_size():
    sim = make_sim(preset="roses", mode="standard")
    assert sim.accumulator.alpha == 0.3, "Quilt standard marks default to 0.3"
    sim.set_runtime_params(opacity=0.8, point_size=2)
    assert sim.accumulator.alpha == 0.8
    assert sim.accumulator.point_size == 2
    sim.set_opacity(None)
    assert sim.accumulator.alpha == 0.3

    sim.apply_preset("ifs_default")
    assert sim.accumulator.alpha == 1.0


def test_render_mode_switch():
    sim = make_sim(mode="chalk")
    sim.tick()
    sim.set_render_mode("histogram")
    assert sim.accumulator.mode == "histogram"
    assert not sim.surface.to_array().any(), "Mode switch clears the canvas"
    sim.tick()
    assert sim.accumulator.max_hits > 0
    try:
        sim.set_render_mode("sepia")
        assert False, "Unknown mode should raise"
    except ValueError:
        pass


def test_histogram_recolor_skipped_when_empty():
    sim = make_sim(mode="histogram", speed=1)
    sim.surface.clear("#202020")
    assert sim.tick()
    assert sim.accumulator.max_hits == 0
    assert tuple(sim.surface.to_array()[0, 0]) == (32, 32, 32)


def test_resize_failure_skips_ticks():
    print("Testing resize failure...")
    sim = make_sim(mode="histogram")
    sim.tick()
    assert sim.resize(100000, 100000) is False
    assert sim.last_error
    iterations = sim.iterations
    assert sim.tick() is False, "Ticks are skipped while the surface is unusable"
    assert sim.iterations == iterations

    assert sim.resize(32, 24) is True
    assert sim.tick()
    assert sim.surface.to_array().shape == (24, 32, 3)
    assert sim.accumulator.counts.size == 32 * 24
    print("  ✓ Failed resize recovers on next successful resize")


def test_pause_resume():
    sim = make_sim()
    sim.pause()
    assert sim.tick() is False
    assert sim.iterations == 0
    assert sim.toggle() is True
    assert sim.tick()
    assert sim.iterations == 100


def test_stats_interval():
    sim = make_sim()
    for _ in range(STATS_INTERVAL - 1):
        sim.tick()
    assert sim.iterations > 0
    assert sim.stats["iterations"] == 0, "Stats are published every STATS_INTERVAL ticks"
    sim.tick()
    assert sim.stats["iterations"] == sim.iterations
    assert sim.stats["map"] == "ifs"


def test_close():
    sim = make_sim(mode="histogram")
    sim.tick()
    sim.close()
    assert sim.closed
    assert sim.accumulator.counts is None, "Histogram released on close"
    assert sim.tick() is False
    sim.resume()
    assert sim.tick() is False


def test_async_preset_load(tmp_path):
    print("Testing asynchronous preset load...")
    table = {"tables": [{"nperiod": 4, "data": [
        {"lambda": -0.59, "alpha": 0.2, "beta": 0.1, "gamma": -0.27,
         "omega": 0.0, "m": 0, "shift": "1/2"},
    ]}]}
    path = tmp_path / "quilt.json"
    path.write_text(json.dumps(table))

    sim = make_sim()
    loader = sim.request_preset_file(str(path))
    loader.join(timeout=10)
    assert sim.map_name == "ifs", "Nothing is applied until the next tick"

    sim.tick()
    assert sim.map_name == "quilt"
    assert sim.params["shift"] == 0.5
    assert sim.params["nperiod"] == 4
    assert len(sim.loaded_presets) == 1

    bad = tmp_path / "bad.json"
    bad.write_text("{\"lambda\": ")
    params = dict(sim.params)
    loader = sim.request_preset_file(str(bad))
    loader.join(timeout=10)
    sim.tick()
    assert sim.last_error and "JSON" in sim.last_error
    assert dict(sim.params) == params, "Rejected file leaves parameters untouched"
    print("  ✓ Loaded between ticks, bad files rejected")


def test_sync_preset_load(tmp_path):
    path = tmp_path / "icons.json"
    presets = [dict(preset_params(PRESETS["icon_swirl"]), map="icon", name="Swirl")]
    path.write_text(json.dumps(presets))

    sim = make_sim()
    loaded = sim.load_presets(str(path))
    assert len(loaded) == 1
    assert sim.map_name == "icon" and sim.params["omega"] == 0.188

    path.write_text(json.dumps([{"lambda": 1.0}]))
    try:
        sim.load_presets(str(path))
        assert False, "Malformed file should raise"
    except PresetError:
        pass
    assert sim.params["omega"] == 0.188


def test_undecodable_preset_file(tmp_path):
    path = tmp_path / "binary.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    sim = make_sim()
    loader = sim.request_preset_file(str(path))
    loader.join(timeout=10)
    sim.tick()
    assert sim.last_error is not None, "Background load failure is reported"
    assert sim.map_name == "ifs"

    sim.last_error = None
    try:
        sim.load_presets(str(path))
        assert False, "Undecodable file should raise"
    except PresetError:
        pass
    assert sim.last_error is not None


def test_pipeline_frames():
    torch = pytest.importorskip("torch")
    from symmetric_chaos.pipeline import ChaosPipeline, PresetEnum
    from symmetric_chaos.plugin import register_pipelines, PIPELINE_NAME

    pipe = ChaosPipeline(sim_size=32, preset="roses", speed=2, seed=0)
    out = pipe(prompt="", speed=2, video=None, prompts=["ignored"])
    frame = out["video"]
    assert isinstance(frame, torch.Tensor)
    assert tuple(frame.shape) == (1, 32, 32, 3)
    assert frame.dtype == torch.float32
    assert float(frame.max()) <= 1.0 and float(frame.min()) >= 0.0
    assert float(frame.max()) > 0.0, "Warmup should leave a visible pattern"

    pipe(preset=PresetEnum.icon_default, **{"lambda": -2.0})
    assert pipe.simulator.preset_key == "icon_default"
    assert pipe.simulator.params["lambda"] == -2.0

    assert "preset" in ChaosPipeline.ui_field_config()

    registered = []

    class Registry:
        def register(self, **kwargs):
            registered.append(kwargs)

    register_pipelines(Registry())
    assert registered[0]["name"] == PIPELINE_NAME
    assert registered[0]["pipeline_class"] is ChaosPipeline
    pipe.close()


if __name__ == "__main__":
    import tempfile
    from pathlib import Path

    print("\n=== Testing ChaosSimulator ===\n")

    test_batch_size_curve()
    test_speed_one_pacing()
    test_tick_plots_points()
    test_seeded_runs_identical()
    test_reset_and_clear()
    test_structural_change_clears()
    test_apply_preset_switches_family()
    test_rejected_preset_keeps_state()
    test_opacity_and_point_size()
    test_render_mode_switch()
    test_histogram_recolor_skipped_when_empty()
    test_resize_failure_skips_ticks()
    test_pause_resume()
    test_stats_interval()
    test_close()
    with tempfile.TemporaryDirectory() as d:
        test_async_preset_load(Path(d))
    with tempfile.TemporaryDirectory() as d:
        test_sync_preset_load(Path(d))
    with tempfile.TemporaryDirectory() as d:
        test_undecodable_preset_file(Path(d))

    print("\n✓ All tests passed!\n")

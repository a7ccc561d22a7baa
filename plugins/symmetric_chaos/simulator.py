"""
ChaosSimulator - Headless frame driver for the symmetric chaos maps

Owns everything one canvas needs: the parameter store, the orbit state,
the PRNG, the render surface and the active accumulator. The host calls
tick() (or step(dt)) once per frame; each tick runs one batch of
iterations and, in histogram mode, one recolor pass.

Usage:
    from symmetric_chaos.simulator import ChaosSimulator
    sim = ChaosSimulator(preset_key="roses", width=512, height=512)
    frame = sim.step(0.016)  # (H, W, 3) uint8
"""

import queue
import threading
import numpy as np

from .maps import get_map_class
from .params import ParameterStore
from .accumulators import make_accumulator, RENDER_MODES
from .colormaps import get_palette, DEFAULT_PALETTE
from .surface import RenderSurface, SurfaceError
from .presets import get_preset, preset_params
from .preset_files import read_preset_file, PresetError

FPS = 60               # Host frame rate assumed by the speed curve
STATS_INTERVAL = 30    # Ticks between published stats updates

# Batch-size curve end points (points per tick at speed 2 and speed 100)
HISTOGRAM_BATCH = (1666, 250000)
DIRECT_BATCH = (100, 3000)


def batch_size_for(speed, mode):
    """Iterations per tick for speed in [2, 100].

    Histogram accumulation is cheap per point so it follows an exponential
    curve up to ~10M points/s; direct plotting is linear and far lower.
    """
    speed = min(max(speed, 2), 100)
    t = (speed - 2) / 98
    if mode == "histogram":
        lo, hi = HISTOGRAM_BATCH
        return int(lo * (hi / lo) ** t)
    lo, hi = DIRECT_BATCH
    return int(lo + (hi - lo) * t)


def _check_mode(mode):
    if mode not in RENDER_MODES:
        raise ValueError(f"Unknown render mode: {mode!r}. Supported: {RENDER_MODES}")


class _PresetLoader(threading.Thread):
    """Reads and validates a preset file off the frame loop.

    The result is posted to the simulator's queue and applied at the top
    of the next tick, never in the middle of a batch.
    """

    def __init__(self, path, results, clear=True, index=0):
        super().__init__(daemon=True)
        self.path = path
        self.results = results
        self.clear = clear
        self.index = index

    def run(self):
        try:
            presets = read_preset_file(self.path)
        except PresetError as e:
            self.results.put((self.path, None, e, self.clear, self.index))
            return
        self.results.put((self.path, presets, None, self.clear, self.index))


class ChaosSimulator:
    """Frame driver for one canvas.

    Args:
        map_name: Map family ('ifs', 'quilt', 'icon'); ignored when
            preset_key is given
        preset_key: Initial built-in preset name (e.g. 'roses')
        width, height: Logical surface size
        dpr: Device pixel ratio (physical = logical * dpr)
        render_mode: 'chalk', 'glow', 'standard' or 'histogram'
            (None: the map's preferred direct mode)
        speed: 1-100; 1 plots one point per second
        seed: PRNG seed for reproducible runs
    """

    def __init__(self, map_name="ifs", preset_key=None, width=800, height=800,
                 dpr=1.0, render_mode=None, speed=50, seed=None):
        if render_mode is not None:
            _check_mode(render_mode)
        self.rng = np.random.default_rng(seed)
        self.surface = RenderSurface(width, height, dpr)
        self.speed = speed
        self.palette = get_palette(DEFAULT_PALETTE)
        self.color = None          # None: map default color
        self.opacity = None        # None: map/mode default alpha
        self.point_size = 1
        self.render_mode = render_mode

        self.running = True
        self._closed = False
        self._surface_ok = True
        self._frame_counter = 0    # Speed-1 pacing
        self._tick_count = 0
        self._applying = False

        # Exact counters; stats is the coarse published copy
        self.iterations = 0
        self.points = 0
        self.stats = {}
        self.last_error = None

        self.loaded_presets = []
        self._pending = queue.Queue()

        self.preset_key = None
        self.map_name = None
        self.map = None
        self.store = None
        self.state = None
        self.accumulator = None

        if preset_key is not None:
            self.apply_preset(preset_key)
        else:
            self.set_map(map_name)

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    @property
    def params(self):
        return self.store.snapshot

    def set_map(self, map_name, params=None, render_mode=None):
        """Switch map family. Always a structural change.

        The new map, its parameter store and the render mode are checked
        before anything is swapped, so a rejected switch leaves the current
        family running.
        """
        new_map = get_map_class(map_name)()
        store = ParameterStore(map_name, params)
        mode = render_mode or self.render_mode or new_map.default_mode
        _check_mode(mode)

        if self.store is not None:
            self.store.unsubscribe(self._on_params_changed)
        self.map_name = map_name
        self.map = new_map
        self.store = store
        self.store.subscribe(self._on_params_changed)
        self.state = self.map.new_state()
        self.render_mode = mode
        self._build_accumulator()
        self.reset(clear=True)

    def apply_preset(self, preset, clear=True):
        """Apply a built-in preset key or a parameter dict.

        The parameter set is replaced atomically, then the orbit is reset.
        With clear=False the visible surface is kept (accumulated hits and
        point counts still restart). A rejected preset leaves the current
        map, parameters and render mode in effect.
        """
        if isinstance(preset, str):
            key = preset
            preset = get_preset(key)
            if preset is None:
                raise KeyError(f"Unknown preset: {key!r}")
        else:
            key = None
        family = preset.get("map", self.map_name)
        if family is None:
            raise ValueError("Preset does not name a map family")

        mode = preset.get("mode")
        if mode is not None:
            _check_mode(mode)
        palette = preset.get("palette")
        if isinstance(palette, str):
            palette = get_palette(palette)

        params = preset_params(preset)
        if family != self.map_name:
            self.set_map(family, params, render_mode=mode)
        else:
            self._applying = True
            try:
                self.store.replace(params)
            finally:
                self._applying = False
            if mode is not None and mode != self.render_mode:
                self.render_mode = mode
                self._build_accumulator()
        if palette is not None:
            self.set_palette(palette)
        if "color" in preset:
            self.set_color(preset["color"])
        self.preset_key = key
        self.reset(clear=clear)

    def load_presets(self, path, clear=True, index=0):
        """Synchronously load a preset file and apply entry index.

        On PresetError the current parameters stay in effect and the error
        is re-raised.
        """
        try:
            presets = read_preset_file(path)
        except PresetError as e:
            self.last_error = str(e)
            raise
        self.loaded_presets = presets
        self.apply_preset(presets[index], clear=clear)
        return presets

    def request_preset_file(self, path, clear=True, index=0):
        """Load a preset file in the background; applied on a later tick."""
        loader = _PresetLoader(path, self._pending, clear=clear, index=index)
        loader.start()
        return loader

    def set_runtime_params(self, **kwargs):
        """Set runtime parameters from host kwargs.

        Supported keys:
            preset: Switch to named preset
            map: Switch map family (defaults)
            speed: 1-100
            render_mode / mode: 'chalk', 'glow', 'standard', 'histogram'
            color: Direct-plot color
            opacity: Direct-plot mark alpha (0-1)
            point_size: Direct-plot mark size (logical pixels)
            palette: Histogram palette name
            low, mid, high: Individual histogram colors
            reset: Any truthy value restarts the orbit
            clear: Any truthy value clears the canvas
            any coefficient of the active map (a11, lambda, n, ...)
        """
        coeffs = {}
        for key, val in kwargs.items():
            if key == "preset":
                if val:
                    self.apply_preset(val)
            elif key == "map":
                if val and val != self.map_name:
                    self.set_map(val)
            elif key == "speed":
                self.speed = float(val)
            elif key in ("render_mode", "mode"):
                self.set_render_mode(val)
            elif key == "color":
                self.set_color(val)
            elif key == "opacity":
                self.set_opacity(val)
            elif key == "point_size":
                self.set_point_size(val)
            elif key == "palette":
                self.set_palette(val)
            elif key in ("low", "mid", "high"):
                low, mid, high = self.palette
                colors = {"low": low, "mid": mid, "high": high}
                colors[key] = val
                self.set_palette((colors["low"], colors["mid"], colors["high"]))
            elif key == "reset":
                if val:
                    self.reset()
            elif key == "clear":
                if val:
                    self.clear()
            elif key in self.store.defaults:
                if self.store[key] != val:
                    coeffs[key] = val
            else:
                raise KeyError(f"Unknown runtime parameter: {key!r}")
        if coeffs:
            self.store.update_many(**coeffs)

    def set_render_mode(self, mode):
        """Swap the accumulator; the canvas is cleared."""
        _check_mode(mode)
        if mode == self.render_mode:
            return
        self.render_mode = mode
        self._build_accumulator()
        self.clear()

    def set_color(self, color):
        self.color = color
        if self.accumulator is not None and self.accumulator.mode != "histogram":
            self.accumulator.color = self._direct_color()

    def set_opacity(self, alpha):
        """Mark opacity for direct modes (None: the mode or map default)."""
        self.opacity = alpha
        if self.accumulator is not None and self.accumulator.mode != "histogram":
            self._build_accumulator()

    def set_point_size(self, size):
        """Direct-plot mark size in logical pixels."""
        self.point_size = max(1, int(size))
        if self.accumulator is not None and self.accumulator.mode != "histogram":
            self.accumulator.point_size = self.point_size

    def set_palette(self, palette):
        if isinstance(palette, str):
            palette = get_palette(palette)
        self.palette = tuple(palette)
        if self.accumulator is not None and self.accumulator.mode == "histogram":
            self.accumulator.set_palette(self.palette)

    # --- Running / paused ---

    def pause(self):
        self.running = False

    def resume(self):
        if not self._closed:
            self.running = True

    def toggle(self):
        if self.running:
            self.pause()
        else:
            self.resume()
        return self.running

    # --- Reset / clear / resize ---

    def reset(self, clear=True):
        """Re-seed the orbit and drop accumulated hits.

        clear=False leaves the visible surface untouched until the next
        histogram recolor overwrites it.
        """
        self.state.reset(self.map.SEED)
        self._frame_counter = 0
        if self.accumulator is not None:
            self.accumulator.clear()
        if clear:
            self.surface.clear()
        self.iterations = 0
        self.points = 0
        self._publish_stats()

    def clear(self):
        """Clear the canvas and restart from the seed point."""
        self.reset(clear=True)

    def resize(self, width, height, dpr=None):
        """Reallocate surface and histogram. In-progress patterns are lost.

        Returns False if the allocation failed; ticks are skipped until a
        later resize succeeds.
        """
        try:
            self.surface.resize(width, height, dpr)
            self.accumulator.resize(self.surface.width, self.surface.height)
        except (SurfaceError, MemoryError) as e:
            self._surface_ok = False
            self.last_error = str(e)
            return False
        self._surface_ok = True
        self.iterations = 0
        self.points = 0
        self._publish_stats()
        return True

    def close(self):
        """Tear down: no further ticks, histogram released."""
        self._closed = True
        self.running = False
        if self.accumulator is not None:
            self.accumulator.release()
        if self.store is not None:
            self.store.unsubscribe(self._on_params_changed)

    @property
    def closed(self):
        return self._closed

    # --- Frame loop ---

    def batch_size(self):
        """Iterations for the next tick (advances speed-1 pacing)."""
        if self.speed <= 1:
            self._frame_counter += 1
            if self._frame_counter < FPS:
                return 0
            self._frame_counter = 0
            return 1
        self._frame_counter = 0
        return batch_size_for(self.speed, self.render_mode)

    def tick(self):
        """Run one frame of work. Returns True if a batch was run."""
        if self._closed:
            return False
        self._apply_pending()
        if not self.running or not self._surface_ok:
            return False

        n = self.batch_size()
        if n > 0:
            params = self.store.snapshot
            xs, ys = self.map.run(self.state, params, self.rng, n)
            self.iterations += n
            if xs.size:
                surface = self.surface
                project = self.map.projection(params, surface.width, surface.height, surface.dpr)
                px, py = project(xs, ys)
                self.accumulator.accumulate(px, py, surface)
                self.points += int(xs.size)
            self.accumulator.finish_frame(self.surface)

        self._tick_count += 1
        if self._tick_count % STATS_INTERVAL == 0:
            self._publish_stats()
        return True

    def run_frames(self, frames):
        """Run several ticks back to back (headless rendering)."""
        for _ in range(frames):
            self.tick()
        self._publish_stats()

    def step(self, dt=None):
        """Advance one frame and return the surface as (H, W, 3) uint8.

        dt is accepted for host compatibility; the batch size depends on
        speed, not elapsed time.
        """
        self.tick()
        return self.surface.to_array()

    def render_float(self, dt=None):
        """Advance one frame and return (H, W, 3) float32 in [0, 1]."""
        return self.step(dt).astype(np.float32) / 255.0

    def snapshot(self):
        """PIL image of the current surface."""
        return self.surface.snapshot()

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _direct_color(self):
        if self.color is not None:
            return self.color
        return self.map.default_color(self.store.snapshot)

    def _build_accumulator(self):
        if self.accumulator is not None:
            self.accumulator.release()
        alpha = self.opacity
        if alpha is None and self.render_mode == "standard":
            alpha = self.map.default_alpha
        self.accumulator = make_accumulator(
            self.render_mode, self.surface,
            color=self._direct_color(),
            palette=self.palette,
            alpha=alpha,
            point_size=self.point_size,
        )

    def _on_params_changed(self, store, structural):
        if self.accumulator is not None and self.accumulator.mode != "histogram":
            self.accumulator.color = self._direct_color()
        if structural and not self._applying:
            self.reset(clear=True)

    def _apply_pending(self):
        while True:
            try:
                path, presets, error, clear, index = self._pending.get_nowait()
            except queue.Empty:
                return
            if error is not None:
                self.last_error = str(error)
                print(f"[SC] Rejected preset file {path}: {error}")
                continue
            self.loaded_presets = presets
            self.apply_preset(presets[min(index, len(presets) - 1)], clear=clear)
            print(f"[SC] Loaded {len(presets)} preset(s) from {path}")

    def _publish_stats(self):
        self.stats = {
            "map": self.map_name,
            "mode": self.render_mode,
            "iterations": self.iterations,
            "points": self.points,
            "x": self.state.x,
            "y": self.state.y,
            "max_hits": getattr(self.accumulator, "max_hits", 0),
            "running": self.running,
        }

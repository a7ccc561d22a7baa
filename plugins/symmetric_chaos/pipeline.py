"""
Symmetric Chaos Pipeline for DayDream Scope

Text-only pipeline that renders symmetric chaotic attractors as video
frames. No video input needed; the attractor is the video source.

Each __call__ runs one simulator tick (one batch of iterations plus the
histogram recolor) and returns the surface as a (1, H, W, 3) tensor, so
the picture keeps densifying for as long as Scope keeps pulling frames.
"""

import enum
import torch

from .simulator import ChaosSimulator
from .accumulators import RENDER_MODES
from .colormaps import PALETTE_ORDER
from .presets import PRESET_ORDER

WARMUP_TICKS = 30  # Ticks run at load so the first frame is not empty

# Host-level kwargs understood by ChaosSimulator.set_runtime_params
RUNTIME_KEYS = (
    "speed", "render_mode", "reset", "clear", "color", "opacity", "point_size",
    "palette", "low", "mid", "high",
)

_PRESET_CHOICES = list(PRESET_ORDER)


class PresetEnum(str, enum.Enum):
    """Built-in presets. Scope renders enum fields as dropdowns."""
    # Symmetric IFS
    ifs_default = "ifs_default"
    ifs_pinwheel = "ifs_pinwheel"
    ifs_snowflake = "ifs_snowflake"
    ifs_crystal = "ifs_crystal"
    # Square quilts
    emerald_mosaic = "emerald_mosaic"
    sugar_and_spice = "sugar_and_spice"
    sicilian_tile = "sicilian_tile"
    roses = "roses"
    wagonwheels = "wagonwheels"
    victorian_tiles = "victorian_tiles"
    mosque = "mosque"
    red_tiles = "red_tiles"
    cathedral_attractor = "cathedral_attractor"
    gyroscopes = "gyroscopes"
    cats_eyes = "cats_eyes"
    flowers_with_ribbons = "flowers_with_ribbons"
    # Symmetric icons
    icon_default = "icon_default"
    icon_seven_petals = "icon_seven_petals"
    icon_hexagon = "icon_hexagon"
    icon_trefoil = "icon_trefoil"
    icon_swirl = "icon_swirl"
    icon_starfish = "icon_starfish"
    icon_bracelet = "icon_bracelet"


class ChaosPipeline:
    """Scope video-source pipeline (plain class, no Scope API dependency)."""

    def __init__(self, sim_size: int = 512, preset: str = "roses",
                 render_mode: str = "histogram", speed: float = 50, seed=None,
                 **kwargs):
        """
        Args:
            sim_size: Output resolution (square, physical pixels).
            preset: Initial preset key (e.g. 'roses', 'icon_default').
            render_mode: Initial render mode; histogram suits video best.
            speed: Initial speed (1-100).
            seed: PRNG seed for reproducible output.
        """
        preset = getattr(preset, "value", preset)
        self.simulator = ChaosSimulator(
            preset_key=preset, width=sim_size, height=sim_size,
            render_mode=render_mode, speed=speed, seed=seed,
        )
        self.simulator.run_frames(WARMUP_TICKS)
        print(f"[SC] Pipeline ready: {preset} ({self.simulator.map_name}, "
              f"{self.simulator.render_mode}) @ {sim_size}x{sim_size}")

    def __call__(self, prompt: str = "", **kwargs) -> dict:
        """Apply runtime params, run one tick, return the frame.

        Args:
            prompt: Ignored (text-only pipeline, no prompt needed).
            **kwargs: Runtime parameters from the Scope UI:
                preset (PresetEnum|str): preset key
                speed (float): 1-100
                render_mode (str): chalk / glow / standard / histogram
                reset, clear (bool): restart the orbit / wipe the canvas
                color (str): direct-plot color
                palette, low, mid, high (str): histogram colors
                any coefficient of the active map (lambda, a11, n, ...)

        Returns:
            {"video": tensor} where tensor is (1, H, W, 3) float32 [0,1]
        """
        sim = self.simulator

        preset = kwargs.get("preset", None)
        if preset is not None:
            preset = getattr(preset, "value", preset)
        if preset and preset != sim.preset_key:
            sim.apply_preset(preset)
            print(f"[SC] Preset: {preset}")

        # Other Scope kwargs (video, prompts, ...) are not ours
        runtime = {}
        for key, val in kwargs.items():
            if val is None:
                continue
            if key in RUNTIME_KEYS or key in sim.store.defaults:
                runtime[key] = val
        if runtime:
            sim.set_runtime_params(**runtime)

        frame_np = sim.render_float()
        tensor = torch.from_numpy(frame_np).unsqueeze(0)
        return {"video": tensor}

    def close(self):
        self.simulator.close()

    @staticmethod
    def ui_field_config():
        """Configure how parameters appear in Scope UI.

        Returns:
            dict: UI configuration for each parameter.
                  Load-time params go in 'settings' panel.
                  Runtime params go in 'controls' panel.
        """
        return {
            # --- Load-time (Settings panel, requires pipeline reload) ---
            "sim_size": {
                "order": 1,
                "panel": "settings",
                "label": "Resolution",
                "choices": [512, 1024],
                "is_load_param": True,
            },
            # --- Runtime (Controls panel, updates live per-frame) ---
            "preset": {
                "order": 1,
                "panel": "controls",
                "label": "Preset",
                "choices": _PRESET_CHOICES,
            },
            "render_mode": {
                "order": 2,
                "panel": "controls",
                "label": "Render Mode",
                "choices": list(RENDER_MODES),
            },
            "speed": {
                "order": 3,
                "panel": "controls",
                "label": "Speed",
                "min": 1,
                "max": 100,
                "step": 1,
            },
            "palette": {
                "order": 4,
                "panel": "controls",
                "label": "Palette",
                "choices": list(PALETTE_ORDER),
            },
            "reset": {
                "order": 5,
                "panel": "controls",
                "label": "Reset",
                "type": "toggle",
            },
            "clear": {
                "order": 6,
                "panel": "controls",
                "label": "Clear",
                "type": "toggle",
            },
        }

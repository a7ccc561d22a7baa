"""
Abstract Base Class for Symmetric Chaos Maps

All map families (IFS, square quilt, symmetric icon) implement this
interface so the simulator can drive any of them interchangeably.
"""

import math
from abc import ABC, abstractmethod
import numpy as np


class PointState:
    """Current orbit position plus the iterations since the last (re)seed."""

    __slots__ = ("x", "y", "iterations")

    def __init__(self, x=0.0, y=0.0):
        self.x = x
        self.y = y
        self.iterations = 0

    def reset(self, seed):
        self.x, self.y = seed
        self.iterations = 0

    def __repr__(self):
        return f"PointState(x={self.x!r}, y={self.y!r}, iterations={self.iterations})"


class ChaosMap(ABC):
    """Base class for symmetric chaotic point maps."""

    map_name = ""    # e.g. "ifs", "quilt"
    map_label = ""   # e.g. "Symmetric IFS"

    DEFAULTS = {}
    STRUCTURAL_KEYS = ()
    SEED = (0.0, 0.0)

    # Iterations after a (re)seed that are computed but not plotted
    transient = 0

    # Preferred direct-plot mode and mark opacity (None: the mode default)
    default_mode = "standard"
    default_alpha = None

    def new_state(self):
        """Return a PointState at the map's fixed seed."""
        state = PointState()
        state.reset(self.SEED)
        return state

    @abstractmethod
    def step(self, x, y, params, rng):
        """Advance one iteration. Returns (x, y); never mutates params."""

    def reseed(self, state, rng):
        """Restart a divergent orbit near the origin."""
        state.x = (rng.random() - 0.5) * 0.01
        state.y = (rng.random() - 0.5) * 0.01
        state.iterations = 0

    def run(self, state, params, rng, count):
        """Iterate count times from state.

        Advances state in place and returns (xs, ys) float64 arrays holding
        the map-space points to plot. Transient iterations and divergent
        steps produce no point, so the arrays may be shorter than count.
        """
        xs = np.empty(count, dtype=np.float64)
        ys = np.empty(count, dtype=np.float64)
        k = 0
        x, y = state.x, state.y
        it = state.iterations
        transient = self.transient
        step = self.step
        isfinite = math.isfinite
        for _ in range(count):
            x, y = step(x, y, params, rng)
            if not (isfinite(x) and isfinite(y)):
                self.reseed(state, rng)
                x, y = state.x, state.y
                it = 0
                continue
            it += 1
            if it < transient:
                continue
            xs[k] = x
            ys[k] = y
            k += 1
        state.x, state.y = x, y
        state.iterations = it
        return xs[:k], ys[:k]

    @abstractmethod
    def projection(self, params, width, height, dpr=1.0):
        """Return the Projection mapping map space to physical pixels."""

    def default_color(self, params):
        """Hex color for direct-plot marks."""
        return "#ffffff"

    @classmethod
    @abstractmethod
    def get_slider_defs(cls):
        """Return list of slider definitions for control surfaces.

        Each entry is a dict:
            {"key": "a11", "label": "a11", "section": "AFFINE",
             "min": -1.0, "max": 1.0, "default": 0.4, "fmt": ".3f"}
        """
